"""Form descriptors, generated values and analysis results.

These models decode the JSON the model returns (camelCase keys) and are the
shapes the scanner API serves back.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from form_scanner.models.gemini_models import CamelModel, TokenUsage


class FormType(str, Enum):
    """Kinds of functional form the extraction prompt asks the model to label."""

    TRADITIONAL = "traditional"
    FORMLESS = "formless"
    AJAX = "ajax"
    MULTI_STEP = "multi-step"
    MODAL = "modal"
    TABLE = "table"
    INLINE_EDIT = "inline-edit"
    HIDDEN = "hidden"
    DYNAMIC = "dynamic"
    AUTO_SUBMIT = "auto-submit"
    DATA_ATTRIBUTES = "data-attributes"


# Labels used by older extraction prompts
_LEGACY_FORM_TYPES = {
    "inline": FormType.INLINE_EDIT.value,
    "table-based": FormType.TABLE.value,
}

Confidence = Literal["high", "medium", "low"]


class FieldDescriptor(CamelModel):
    """One fillable field of a detected form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    field_name: str
    field_type: str
    selector: str
    required: bool = False
    validation: dict[str, Any] = Field(default_factory=dict)
    placeholder: str | None = None
    default_value: str | None = None
    options: list[str] | None = None

    @field_validator("validation", mode="before")
    @classmethod
    def _null_validation_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("default_value", "placeholder", mode="before")
    @classmethod
    def _scalar_to_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float, bool)):
            return str(value)
        return value

    @field_validator("options", mode="before")
    @classmethod
    def _options_as_text(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [str(v) for v in value]
        return value


class FormDescriptor(CamelModel):
    """Structured description of one detected form."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    form_id: str
    form_type: FormType
    selector: str
    submit_selector: str | None = None
    submit_type: str | None = None
    fields: list[FieldDescriptor] = Field(default_factory=list)
    special_features: list[str] = Field(default_factory=list)

    @field_validator("form_type", mode="before")
    @classmethod
    def _normalize_form_type(cls, value: Any) -> Any:
        # "Multi_Step" / "inline edit" -> "multi-step" / "inline-edit"
        if isinstance(value, str):
            normalized = value.strip().lower().replace("_", "-").replace(" ", "-")
            return _LEGACY_FORM_TYPES.get(normalized, normalized)
        return value

    @field_validator("special_features", mode="before")
    @classmethod
    def _dedupe_features(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return list(dict.fromkeys(str(v) for v in value))
        return value


class AnalysisSummary(CamelModel):
    """Model's overall verdict on the page."""

    total_functional_forms: int = Field(..., ge=0)
    total_fields: int = Field(..., ge=0)
    forms_ignored: int = Field(default=0, ge=0)
    confidence: Confidence

    @field_validator("confidence", mode="before")
    @classmethod
    def _bucket_numeric_confidence(cls, value: Any) -> Any:
        # Older prompts asked for a 0-100 score
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if value >= 80:
                return "high"
            if value >= 50:
                return "medium"
            return "low"
        if isinstance(value, str):
            return value.strip().lower()
        return value


class FormExtractionReply(CamelModel):
    """JSON payload the extraction prompt asks for."""

    summary: AnalysisSummary
    forms: list[FormDescriptor] = Field(default_factory=list)


class ValueMetadata(CamelModel):
    """Model's notes about the values it generated."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    all_validations_satisfied: bool | None = None
    notes: str | None = None


class GeneratedValues(CamelModel):
    """JSON payload the value-generation prompt asks for."""

    form_id: str | None = None
    values: dict[str, Any]
    metadata: ValueMetadata = Field(default_factory=ValueMetadata)


# =============================================================================
# Results served by the API
# =============================================================================


class CallPerformance(CamelModel):
    """Timing of one model call."""

    time_taken_ms: int
    timestamp: str


class FormExtractionResult(FormExtractionReply):
    """Phase-one result: extracted forms plus the call's timing and usage."""

    performance: CallPerformance
    usage: TokenUsage


class GeneratedValuesResult(GeneratedValues):
    """Phase-two result for one form: values plus the call's timing and usage."""

    performance: CallPerformance
    usage: TokenUsage


class ValueGenerationPerformance(CallPerformance):
    usage: TokenUsage


class AnalyzedForm(FormDescriptor):
    """A form descriptor with its suggested values, or the error that prevented them."""

    suggested_values: dict[str, Any] | None = None
    validation_status: dict[str, Any] = Field(default_factory=dict)
    value_generation_performance: ValueGenerationPerformance | None = None


class PerformanceBreakdown(CamelModel):
    extraction_time_ms: int
    value_generation_time_ms: int
    total_time_ms: int
    average_time_per_form_ms: int


class CompleteAnalysisResult(CamelModel):
    """Both phases combined: summary, forms with values, total usage and timings."""

    summary: AnalysisSummary
    forms: list[AnalyzedForm]
    total_usage: TokenUsage
    performance: PerformanceBreakdown
    timestamp: str
