"""Request bodies and the response envelope of the scanner API."""

from datetime import datetime, timezone
from typing import Any

from pydantic import Field

from form_scanner.models.gemini_models import CamelModel


class HtmlContentRequest(CamelModel):
    # Optional so a missing value is reported in the response envelope, not as a 422
    html_content: str | None = Field(default=None, description="Raw HTML to analyze")


class FormDataRequest(CamelModel):
    form_data: dict[str, Any] | None = Field(
        default=None, description="Form descriptor to generate values for"
    )


class UrlRequest(CamelModel):
    url: str | None = Field(default=None, description="Absolute http(s) URL to fetch")


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def success_envelope(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data, "timestamp": utc_timestamp()}


def error_envelope(message: str) -> dict[str, Any]:
    return {"success": False, "error": message, "timestamp": utc_timestamp()}
