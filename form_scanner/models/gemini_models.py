"""Gemini generateContent wire models and per-call usage/cost records."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from form_scanner.constants import COST_DECIMAL_PLACES


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys and populated by either name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# generateContent response (only the parts we rely on)
# =============================================================================


class GeminiPart(CamelModel):
    text: str


class GeminiContent(CamelModel):
    parts: list[GeminiPart] = Field(..., min_length=1)
    role: str | None = None


class GeminiCandidate(CamelModel):
    content: GeminiContent
    finish_reason: str | None = None


class GeminiUsageMetadata(CamelModel):
    prompt_token_count: int = 0
    candidates_token_count: int = 0
    total_token_count: int | None = None


class GeminiGenerateResponse(CamelModel):
    """Successful generateContent reply. At least one candidate with a text part."""

    candidates: list[GeminiCandidate] = Field(..., min_length=1)
    usage_metadata: GeminiUsageMetadata = Field(default_factory=GeminiUsageMetadata)

    @property
    def text(self) -> str:
        return self.candidates[0].content.parts[0].text


# =============================================================================
# Usage and replies
# =============================================================================


class TokenUsage(CamelModel):
    """Token counts and USD cost of one or more model calls."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    input_cost: float = 0.0
    output_cost: float = 0.0
    total_cost: float = 0.0

    @classmethod
    def from_counts(
        cls,
        input_tokens: int,
        output_tokens: int,
        input_cost_per_1k: float,
        output_cost_per_1k: float,
        total_tokens: int | None = None,
    ) -> "TokenUsage":
        """Price a call from its reported token counts."""
        input_cost = (input_tokens / 1000) * input_cost_per_1k
        output_cost = (output_tokens / 1000) * output_cost_per_1k
        return cls(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=total_tokens if total_tokens is not None else input_tokens + output_tokens,
            input_cost=round(input_cost, COST_DECIMAL_PLACES),
            output_cost=round(output_cost, COST_DECIMAL_PLACES),
            total_cost=round(input_cost + output_cost, COST_DECIMAL_PLACES),
        )

    @classmethod
    def combine(cls, usages: "list[TokenUsage]") -> "TokenUsage":
        """Add up several usage records."""
        return cls(
            input_tokens=sum(u.input_tokens for u in usages),
            output_tokens=sum(u.output_tokens for u in usages),
            total_tokens=sum(u.total_tokens for u in usages),
            input_cost=round(sum(u.input_cost for u in usages), COST_DECIMAL_PLACES),
            output_cost=round(sum(u.output_cost for u in usages), COST_DECIMAL_PLACES),
            total_cost=round(sum(u.total_cost for u in usages), COST_DECIMAL_PLACES),
        )


class ModelReply(CamelModel):
    """Raw text reply of one model call with timing and usage."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    text: str
    elapsed_ms: int
    timestamp: str
    usage: TokenUsage
