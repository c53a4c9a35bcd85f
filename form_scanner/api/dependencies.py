"""FastAPI dependency providers.

Each request gets its own service objects built from settings; tests swap
them through app.dependency_overrides.
"""

from fastapi import Depends

from form_scanner.config import Settings, get_settings
from form_scanner.services.form_analyzer import FormAnalyzer
from form_scanner.services.gemini_service import GeminiService
from form_scanner.services.html_fetcher import ContentAggregator, HttpxPageFetcher


def get_gemini_service(settings: Settings = Depends(get_settings)) -> GeminiService:
    return GeminiService.from_settings(settings)


def get_form_analyzer(
    gemini_service: GeminiService = Depends(get_gemini_service),
) -> FormAnalyzer:
    return FormAnalyzer(gemini_service)


def get_content_aggregator(settings: Settings = Depends(get_settings)) -> ContentAggregator:
    fetcher = HttpxPageFetcher(
        timeout=settings.fetch_timeout_seconds,
        max_redirects=settings.fetch_max_redirects,
    )
    return ContentAggregator(fetcher)
