"""Exception taxonomy for the fetch and analysis pipeline.

Every failure the pipeline can report derives from ScannerError, so the API
layer can translate the whole family into a response envelope in one place.
"""

from __future__ import annotations


class ScannerError(Exception):
    """Base exception for form scanner errors."""

    pass


class InvalidRequestError(ScannerError):
    """Raised when a request is missing a required field or carries a bad value."""

    pass


class FetchError(ScannerError):
    """Raised when a page fetch does not produce a successful response."""

    def __init__(self, url: str, status: int | None, status_text: str):
        self.url = url
        self.status = status
        self.status_text = status_text
        if status is None:
            super().__init__(f"Failed to fetch {url}: {status_text}")
        else:
            super().__init__(f"HTTP {status}: {status_text}")


class FetchTimeoutError(FetchError):
    """Raised when a page fetch exceeds its time bound."""

    def __init__(self, url: str, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(url, None, f"timed out after {timeout_seconds:g}s")


class UpstreamError(ScannerError):
    """Raised when the model endpoint answers with a non-success status or is unreachable."""

    def __init__(self, http_status: int | None, body: str):
        self.http_status = http_status
        self.body = body
        if http_status is None:
            super().__init__(f"API Error: {body}")
        else:
            super().__init__(f"API Error: {http_status} - {body}")


class MalformedReplyError(ScannerError):
    """Raised when a successful model reply does not have the expected structure."""

    pass


class UnparsableReplyError(ScannerError):
    """Raised when model text contains no extractable JSON object."""

    def __init__(self, raw_text: str):
        self.raw_text = raw_text
        preview = raw_text[:200]
        super().__init__(f"No JSON object found in model reply: {preview!r}")


class AnalysisError(ScannerError):
    """Raised when an analysis phase fails fatally."""

    def __init__(self, phase: str, cause: Exception):
        self.phase = phase
        self.cause = cause
        super().__init__(f"Form analysis failed while {phase}: {cause}")
