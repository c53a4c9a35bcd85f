"""Google Gemini generateContent client."""

import time
from datetime import datetime, timezone

import httpx
import logfire
from pydantic import ValidationError

from form_scanner.config import Settings
from form_scanner.constants import (
    DEFAULT_GEMINI_API_BASE_URL,
    DEFAULT_GEMINI_MAX_OUTPUT_TOKENS,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_GEMINI_TEMPERATURE,
    DEFAULT_GEMINI_TIMEOUT_SECONDS,
    DEFAULT_GEMINI_TOP_K,
    DEFAULT_GEMINI_TOP_P,
    DEFAULT_INPUT_COST_PER_1K_TOKENS,
    DEFAULT_OUTPUT_COST_PER_1K_TOKENS,
)
from form_scanner.errors import MalformedReplyError, UpstreamError
from form_scanner.models.gemini_models import GeminiGenerateResponse, ModelReply, TokenUsage


class GeminiService:
    """Send prompts to a Gemini model and price the replies."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        base_url: str = DEFAULT_GEMINI_API_BASE_URL,
        timeout: float = DEFAULT_GEMINI_TIMEOUT_SECONDS,
        temperature: float = DEFAULT_GEMINI_TEMPERATURE,
        top_p: float = DEFAULT_GEMINI_TOP_P,
        top_k: int = DEFAULT_GEMINI_TOP_K,
        max_output_tokens: int = DEFAULT_GEMINI_MAX_OUTPUT_TOKENS,
        input_cost_per_1k: float = DEFAULT_INPUT_COST_PER_1K_TOKENS,
        output_cost_per_1k: float = DEFAULT_OUTPUT_COST_PER_1K_TOKENS,
    ):
        """
        Initialize the Gemini client.

        Args:
            api_key: Gemini API key (required)
            model: Model name, e.g. gemini-1.5-pro
            base_url: Generative Language API base URL
            timeout: Client-side timeout per call in seconds
            temperature, top_p, top_k, max_output_tokens: Sampling configuration
            input_cost_per_1k, output_cost_per_1k: USD per 1K prompt/output tokens
        """
        if not api_key:
            raise ValueError("Gemini API key is required")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.generation_config = {
            "temperature": temperature,
            "topP": top_p,
            "topK": top_k,
            "maxOutputTokens": max_output_tokens,
        }
        self.input_cost_per_1k = input_cost_per_1k
        self.output_cost_per_1k = output_cost_per_1k

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiService":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_api_base_url,
            timeout=settings.gemini_timeout_seconds,
            temperature=settings.gemini_temperature,
            top_p=settings.gemini_top_p,
            top_k=settings.gemini_top_k,
            max_output_tokens=settings.gemini_max_output_tokens,
            input_cost_per_1k=settings.input_cost_per_1k_tokens,
            output_cost_per_1k=settings.output_cost_per_1k_tokens,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def compute_usage(
        self, input_tokens: int, output_tokens: int, total_tokens: int | None = None
    ) -> TokenUsage:
        """Token usage and cost for the given counts at this client's rates."""
        return TokenUsage.from_counts(
            input_tokens,
            output_tokens,
            self.input_cost_per_1k,
            self.output_cost_per_1k,
            total_tokens=total_tokens,
        )

    async def generate(self, prompt: str) -> ModelReply:
        """
        Send a prompt and return the model's text reply with timing and usage.

        Args:
            prompt: Fully rendered prompt

        Returns:
            ModelReply with raw text, elapsed time, timestamp and priced usage

        Raises:
            UpstreamError: Non-success status, transport failure or timeout
            MalformedReplyError: Success status without the expected structure
        """
        start_time = time.time()
        logfire.info(
            "Gemini request started",
            model=self.model,
            prompt_length=len(prompt),
        )

        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": self.generation_config,
        }
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.endpoint, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            elapsed = time.time() - start_time
            logfire.error(
                "Gemini request timed out",
                model=self.model,
                timeout_seconds=self.timeout,
                response_time_ms=elapsed * 1000,
            )
            raise UpstreamError(None, f"request timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            elapsed = time.time() - start_time
            logfire.error(
                "Gemini request error",
                model=self.model,
                error=str(e),
                error_type=type(e).__name__,
                response_time_ms=elapsed * 1000,
            )
            raise UpstreamError(None, str(e) or type(e).__name__) from e

        elapsed = time.time() - start_time

        if not response.is_success:
            logfire.error(
                "Gemini API error",
                model=self.model,
                status_code=response.status_code,
                response_body=response.text[:500],
                response_time_ms=elapsed * 1000,
            )
            raise UpstreamError(response.status_code, response.text)

        try:
            decoded = GeminiGenerateResponse.model_validate_json(response.content)
        except ValidationError as e:
            logfire.error(
                "Gemini reply has unexpected structure",
                model=self.model,
                error_count=e.error_count(),
                response_body=response.text[:500],
            )
            raise MalformedReplyError("Invalid API response structure") from e

        metadata = decoded.usage_metadata
        usage = self.compute_usage(
            metadata.prompt_token_count,
            metadata.candidates_token_count,
            total_tokens=metadata.total_token_count or None,
        )
        elapsed_ms = round(elapsed * 1000)

        logfire.info(
            "Gemini request completed",
            model=self.model,
            response_time_ms=elapsed_ms,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            total_tokens=usage.total_tokens,
            total_cost=usage.total_cost,
        )

        return ModelReply(
            text=decoded.text,
            elapsed_ms=elapsed_ms,
            timestamp=datetime.now(timezone.utc).isoformat(),
            usage=usage,
        )
