"""Two-phase form analysis orchestration.

Phase one asks the model for every functional form in a document. Phase two
asks it, once per form and concurrently, for field values that satisfy the
form's validations. Usage and timings of every call are aggregated.

A failure in phase one is fatal. A failure while generating values for one
form is recorded on that form only; its siblings are unaffected.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

import logfire

from form_scanner.errors import AnalysisError, ScannerError
from form_scanner.models.form_models import (
    AnalyzedForm,
    CallPerformance,
    CompleteAnalysisResult,
    FormDescriptor,
    FormExtractionReply,
    FormExtractionResult,
    GeneratedValues,
    GeneratedValuesResult,
    PerformanceBreakdown,
    ValueGenerationPerformance,
)
from form_scanner.models.gemini_models import TokenUsage
from form_scanner.services.gemini_service import GeminiService
from form_scanner.services.json_extractor import parse_model_reply
from form_scanner.services.prompts import (
    build_form_extraction_prompt,
    build_value_generation_prompt,
)


class AnalysisPhase(str, Enum):
    IDLE = "idle"
    EXTRACTING = "extracting"
    GENERATING_VALUES = "generating_values"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ValueGenerationOutcome:
    """Result of generating values for one form: either values or an error.

    usage holds whatever the model reported before a failure, zero otherwise.
    """

    form_id: str | None
    values: GeneratedValues | None = None
    error: ScannerError | None = None
    usage: TokenUsage = field(default_factory=TokenUsage)
    performance: CallPerformance | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def _form_payload(form: FormDescriptor | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(form, FormDescriptor):
        return form.model_dump(by_alias=True, mode="json", exclude_none=True)
    return dict(form)


class FormAnalyzer:
    """Extract forms from HTML and generate submission values with a Gemini model.

    Example:
        >>> analyzer = FormAnalyzer(GeminiService(api_key="..."))
        >>> result = await analyzer.analyze_forms_complete(html)
    """

    def __init__(self, gemini_service: GeminiService):
        """Initialize the analyzer.

        Args:
            gemini_service: Model client used for both phases
        """
        self._gemini = gemini_service
        self.phase = AnalysisPhase.IDLE

    async def extract_forms(self, html_content: str) -> FormExtractionResult:
        """
        Ask the model for every functional form in html_content.

        Raises:
            UpstreamError, MalformedReplyError, UnparsableReplyError
        """
        logfire.info("Form extraction started", html_length=len(html_content))
        prompt = build_form_extraction_prompt(html_content)

        reply = await self._gemini.generate(prompt)
        extracted = parse_model_reply(reply.text, FormExtractionReply)

        logfire.info(
            "Form extraction completed",
            forms_found=len(extracted.forms),
            total_fields=extracted.summary.total_fields,
            confidence=extracted.summary.confidence,
            response_time_ms=reply.elapsed_ms,
        )
        return FormExtractionResult(
            summary=extracted.summary,
            forms=extracted.forms,
            performance=CallPerformance(time_taken_ms=reply.elapsed_ms, timestamp=reply.timestamp),
            usage=reply.usage,
        )

    async def _generate_values(
        self, form: FormDescriptor | Mapping[str, Any]
    ) -> ValueGenerationOutcome:
        payload = _form_payload(form)
        form_id = payload.get("formId")
        logfire.info("Value generation started", form_id=form_id)

        usage = TokenUsage()
        try:
            reply = await self._gemini.generate(build_value_generation_prompt(payload))
            usage = reply.usage
            values = parse_model_reply(reply.text, GeneratedValues)
        except ScannerError as e:
            logfire.error(
                "Value generation failed",
                form_id=form_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ValueGenerationOutcome(form_id=form_id, error=e, usage=usage)

        logfire.info(
            "Value generation completed",
            form_id=form_id,
            value_count=len(values.values),
            response_time_ms=reply.elapsed_ms,
        )
        return ValueGenerationOutcome(
            form_id=form_id,
            values=values,
            usage=usage,
            performance=CallPerformance(time_taken_ms=reply.elapsed_ms, timestamp=reply.timestamp),
        )

    async def generate_field_values(
        self, form: FormDescriptor | Mapping[str, Any]
    ) -> GeneratedValuesResult:
        """
        Ask the model for values that satisfy every validation of one form.

        Raises:
            UpstreamError, MalformedReplyError, UnparsableReplyError
        """
        outcome = await self._generate_values(form)
        if outcome.error is not None:
            raise outcome.error
        return GeneratedValuesResult(
            form_id=outcome.values.form_id,
            values=outcome.values.values,
            metadata=outcome.values.metadata,
            performance=outcome.performance,
            usage=outcome.usage,
        )

    @staticmethod
    def _analyzed_form(
        form: FormDescriptor, outcome: ValueGenerationOutcome
    ) -> AnalyzedForm:
        base = form.model_dump()
        if outcome.error is not None:
            return AnalyzedForm(
                **base,
                suggested_values=None,
                validation_status={"error": str(outcome.error)},
            )
        return AnalyzedForm(
            **base,
            suggested_values=outcome.values.values,
            validation_status=outcome.values.metadata.model_dump(by_alias=True),
            value_generation_performance=ValueGenerationPerformance(
                time_taken_ms=outcome.performance.time_taken_ms,
                timestamp=outcome.performance.timestamp,
                usage=outcome.usage,
            ),
        )

    async def analyze_forms_complete(self, html_content: str) -> CompleteAnalysisResult:
        """
        Extract forms, then generate values for each of them.

        Args:
            html_content: HTML (optionally combined with iframe content) to analyze

        Returns:
            CompleteAnalysisResult with forms in extraction order

        Raises:
            AnalysisError: If extraction fails; carries the failing phase
        """
        overall_start = time.time()
        logfire.info("Complete form analysis started", html_length=len(html_content))

        self.phase = AnalysisPhase.EXTRACTING
        try:
            extraction = await self.extract_forms(html_content)
        except ScannerError as e:
            self.phase = AnalysisPhase.FAILED
            logfire.error(
                "Complete form analysis failed",
                phase=AnalysisPhase.EXTRACTING.value,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise AnalysisError(AnalysisPhase.EXTRACTING.value, e) from e
        extraction_time = time.time() - overall_start

        self.phase = AnalysisPhase.GENERATING_VALUES
        forms = extraction.forms
        logfire.info("Generating values for forms", form_count=len(forms))
        generation_start = time.time()
        # gather returns outcomes in argument order, keeping extraction order
        outcomes = await asyncio.gather(*(self._generate_values(form) for form in forms))
        generation_time = time.time() - generation_start

        self.phase = AnalysisPhase.AGGREGATING
        analyzed = [self._analyzed_form(form, outcome) for form, outcome in zip(forms, outcomes)]
        total_usage = TokenUsage.combine([extraction.usage, *(o.usage for o in outcomes)])
        total_time = time.time() - overall_start

        generation_ms = round(generation_time * 1000)
        performance = PerformanceBreakdown(
            extraction_time_ms=round(extraction_time * 1000),
            value_generation_time_ms=generation_ms,
            total_time_ms=round(total_time * 1000),
            average_time_per_form_ms=round(generation_ms / len(forms)) if forms else 0,
        )

        self.phase = AnalysisPhase.DONE
        logfire.info(
            "Complete form analysis finished",
            form_count=len(forms),
            failed_value_generations=sum(1 for o in outcomes if not o.succeeded),
            total_tokens=total_usage.total_tokens,
            total_cost=total_usage.total_cost,
            total_time_ms=performance.total_time_ms,
        )
        return CompleteAnalysisResult(
            summary=extraction.summary,
            forms=analyzed,
            total_usage=total_usage,
            performance=performance,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
