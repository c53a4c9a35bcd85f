"""Form scanner endpoints.

Every response uses the envelope {success, data | error, timestamp}. Missing
request fields are reported as 400; pipeline failures propagate as
ScannerError and are rendered by the handlers registered in main.py.
"""

import logging
from urllib.parse import urlparse

from fastapi import APIRouter, Depends

from form_scanner.api.dependencies import get_content_aggregator, get_form_analyzer
from form_scanner.api.test_forms import read_page
from form_scanner.errors import InvalidRequestError
from form_scanner.models.api_models import (
    FormDataRequest,
    HtmlContentRequest,
    UrlRequest,
    success_envelope,
)
from form_scanner.services.form_analyzer import FormAnalyzer
from form_scanner.services.html_fetcher import ContentAggregator

logger = logging.getLogger(__name__)
router = APIRouter()


def _require_html(body: HtmlContentRequest) -> str:
    if not body.html_content:
        raise InvalidRequestError("HTML content is required")
    return body.html_content


def _require_url(body: UrlRequest) -> str:
    if not body.url:
        raise InvalidRequestError("URL is required")
    parsed = urlparse(body.url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidRequestError("Invalid URL format")
    return body.url.strip()


@router.post("/extract-forms")
async def extract_forms(
    body: HtmlContentRequest,
    analyzer: FormAnalyzer = Depends(get_form_analyzer),
):
    """Extract forms from HTML content."""
    html_content = _require_html(body)
    result = await analyzer.extract_forms(html_content)
    return success_envelope(result.model_dump(by_alias=True, mode="json"))


@router.post("/generate-values")
async def generate_values(
    body: FormDataRequest,
    analyzer: FormAnalyzer = Depends(get_form_analyzer),
):
    """Generate field values for one form."""
    if not body.form_data:
        raise InvalidRequestError("Form data is required")
    result = await analyzer.generate_field_values(body.form_data)
    return success_envelope(result.model_dump(by_alias=True, mode="json"))


@router.post("/analyze-complete")
async def analyze_complete(
    body: HtmlContentRequest,
    analyzer: FormAnalyzer = Depends(get_form_analyzer),
):
    """Complete analysis: extract forms and generate values."""
    html_content = _require_html(body)
    result = await analyzer.analyze_forms_complete(html_content)
    return success_envelope(result.model_dump(by_alias=True, mode="json"))


@router.get("/test-page")
async def test_page():
    """Return the all-forms page HTML for testing."""
    html_content = read_page("all-forms.html")
    return success_envelope({"htmlContent": html_content, "length": len(html_content)})


@router.post("/fetch-url")
async def fetch_url(
    body: UrlRequest,
    aggregator: ContentAggregator = Depends(get_content_aggregator),
):
    """Fetch HTML content from a URL, including its iframes."""
    url = _require_url(body)
    document = await aggregator.fetch_with_iframes(url)
    logger.info(
        "Fetched %d characters from %s (including %d iframes)",
        len(document.combined_text),
        url,
        document.stats.successful,
    )
    return success_envelope(
        {
            "htmlContent": document.combined_text,
            "length": len(document.combined_text),
            "url": url,
            "iframeStats": document.stats_dict(),
        }
    )


@router.post("/analyze-url")
async def analyze_url(
    body: UrlRequest,
    aggregator: ContentAggregator = Depends(get_content_aggregator),
    analyzer: FormAnalyzer = Depends(get_form_analyzer),
):
    """Fetch a URL (including iframes) and analyze its forms in one step."""
    url = _require_url(body)
    document = await aggregator.fetch_with_iframes(url)
    logger.info(
        "Fetched %d characters (%d iframes) from %s, starting analysis",
        len(document.combined_text),
        document.stats.successful,
        url,
    )
    result = await analyzer.analyze_forms_complete(document.combined_text)
    data = result.model_dump(by_alias=True, mode="json")
    data.update(
        {
            "sourceUrl": url,
            "htmlLength": len(document.combined_text),
            "iframeStats": document.stats_dict(),
        }
    )
    return success_envelope(data)
