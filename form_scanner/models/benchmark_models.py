"""Records produced by benchmark runs against the scanner API."""

from typing import Any

from pydantic import Field

from form_scanner.models.gemini_models import CamelModel


class StepOutcome(CamelModel):
    """Outcome of one HTTP step (fetch or analysis) of a benchmark run."""

    success: bool
    elapsed_ms: int
    error: str | None = None


class RunSummary(CamelModel):
    forms: int
    fields: int
    forms_ignored: int = 0
    confidence: str | None = None


class RunTokens(CamelModel):
    input: int
    output: int
    total: int


class RunPerformance(CamelModel):
    fetch_time_ms: int
    analysis_time_ms: int
    total_time_ms: int


class SiteRunResult(CamelModel):
    """One site x run measurement.

    summary, tokens, cost and performance are only set when both the fetch
    and the analysis succeeded.
    """

    name: str
    url: str
    run_number: int = 1
    timestamp: str
    fetch: StepOutcome
    analysis: StepOutcome | None = None
    summary: RunSummary | None = None
    tokens: RunTokens | None = None
    cost: float | None = None
    performance: RunPerformance | None = None

    @property
    def succeeded(self) -> bool:
        return self.analysis is not None and self.analysis.success

    @property
    def error(self) -> str | None:
        if not self.fetch.success:
            return self.fetch.error
        if self.analysis is not None and not self.analysis.success:
            return self.analysis.error
        return None


class BenchmarkMetadata(CamelModel):
    timestamp: str
    total_time_ms: int
    total_tests: int
    num_websites: int
    runs_per_website: int
    version: str


class BenchmarkReport(CamelModel):
    """Everything written to the JSON results file."""

    metadata: BenchmarkMetadata
    results: list[SiteRunResult] = Field(default_factory=list)
    statistics: dict[str, Any] = Field(default_factory=dict)
    consistency_metrics: dict[str, Any] = Field(default_factory=dict)
