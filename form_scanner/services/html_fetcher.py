"""Page fetching with iframe discovery and aggregation.

Components:
- PageFetcher: Protocol for fetching one URL's body
- HttpxPageFetcher: Bounded-time httpx implementation
- iter_iframe_sources: Lazily discover absolute iframe URLs in a document
- combine_html: Append successful iframe bodies to the main document
- ContentAggregator: Fetch a page and all its iframes into one document

Each component can be mocked independently for testing.
"""

import asyncio
import time
from typing import Iterator, List, Protocol
from urllib.parse import urljoin, urlparse

import httpx
import logfire
from bs4 import BeautifulSoup

from form_scanner.constants import (
    DEFAULT_FETCH_HEADERS,
    DEFAULT_FETCH_MAX_REDIRECTS,
    DEFAULT_FETCH_TIMEOUT_SECONDS,
    EMPTY_PAGE_SENTINEL,
    SKIPPED_IFRAME_PREFIXES,
)
from form_scanner.errors import FetchError, FetchTimeoutError
from form_scanner.models.fetch_models import AggregatedDocument, FetchResult, IframeStats

_FRAME_TAGS = ("iframe", "frame")


class PageFetcher(Protocol):
    """Protocol for fetching page content."""

    async def fetch(self, url: str) -> str:
        """Fetch the body of url as text.

        Raises:
            FetchError: On a non-success status or transport failure
            FetchTimeoutError: If the time bound is exceeded
        """
        ...


class HttpxPageFetcher:
    """Fetch pages with httpx using browser-like headers, a timeout and a redirect cap."""

    def __init__(
        self,
        timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        max_redirects: int = DEFAULT_FETCH_MAX_REDIRECTS,
        headers: dict[str, str] | None = None,
    ):
        self._timeout = timeout
        self._max_redirects = max_redirects
        self._headers = headers or DEFAULT_FETCH_HEADERS.copy()

    async def fetch(self, url: str) -> str:
        start_time = time.time()
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                max_redirects=self._max_redirects,
                headers=self._headers,
            ) as client:
                response = await client.get(url)
        except httpx.TimeoutException as e:
            raise FetchTimeoutError(url, self._timeout) from e
        except httpx.TooManyRedirects as e:
            raise FetchError(url, None, f"more than {self._max_redirects} redirects") from e
        except httpx.HTTPError as e:
            raise FetchError(url, None, str(e) or type(e).__name__) from e
        except (httpx.InvalidURL, ValueError) as e:
            # Bad host labels (IDNA) and control characters fail before any request is sent
            raise FetchError(url, None, f"invalid URL: {e}") from e

        if not response.is_success:
            raise FetchError(url, response.status_code, response.reason_phrase)

        html = response.text
        logfire.info(
            "Page fetched",
            url=url,
            status_code=response.status_code,
            content_length=len(html),
            response_time_ms=(time.time() - start_time) * 1000,
        )
        return html


def _origin(url: str) -> str | None:
    """scheme://host[:port] of url, or None when url is not absolute."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"


def _is_absolute_http(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def iter_iframe_sources(html: str, base_url: str) -> Iterator[str]:
    """
    Yield absolute iframe/frame source URLs in document order.

    Sources that are not absolute http(s) URLs are resolved against the origin
    of base_url, not its path. Inline data, javascript: and about:blank sources
    are skipped; sources that cannot be resolved are dropped with a warning.
    Duplicates are yielded once per occurrence.
    """
    soup = BeautifulSoup(html, "html.parser")
    origin = _origin(base_url)

    for tag in soup.find_all(_FRAME_TAGS, src=True):
        src = (tag.get("src") or "").strip()
        if not src:
            continue
        if src.lower().startswith(SKIPPED_IFRAME_PREFIXES) or src == EMPTY_PAGE_SENTINEL:
            continue

        try:
            if src.startswith(("http://", "https://")):
                resolved = src
            elif origin is not None:
                resolved = urljoin(origin, src)
            else:
                resolved = src
            valid = _is_absolute_http(resolved)
        except ValueError:
            valid = False

        if not valid:
            logfire.warn("Invalid iframe src, skipping", src=src, base_url=base_url)
            continue

        yield resolved


def iframe_marker(index: int, source_url: str) -> str:
    """Separator placed before the body of the index-th (1-based) iframe."""
    return f"\n\n<!-- ========== IFRAME {index} CONTENT: {source_url} ========== -->\n\n"


def combine_html(main_html: str, iframe_results: List[FetchResult]) -> str:
    """Main HTML followed by each successful iframe body, in discovery order."""
    parts = [main_html]
    for index, result in enumerate(iframe_results, start=1):
        if result.succeeded and result.body:
            parts.append(iframe_marker(index, result.source_url))
            parts.append(result.body)
    return "".join(parts)


class ContentAggregator:
    """Fetch a page and every iframe it embeds into one combined document."""

    def __init__(self, fetcher: PageFetcher | None = None):
        self._fetcher = fetcher or HttpxPageFetcher()

    async def _fetch_iframe(self, index: int, source_url: str) -> FetchResult:
        """Fetch one iframe; failures are recorded, never raised."""
        logfire.info("Fetching iframe", index=index, url=source_url)
        try:
            body = await self._fetcher.fetch(source_url)
        except Exception as e:
            logfire.warn(
                "Failed to fetch iframe",
                index=index,
                url=source_url,
                error=str(e),
                error_type=type(e).__name__,
            )
            return FetchResult.failure(source_url, str(e))
        return FetchResult(source_url=source_url, body=body)

    async def fetch_with_iframes(self, url: str) -> AggregatedDocument:
        """
        Fetch url and all its iframes.

        The main document fetch is fatal: its FetchError propagates. Iframe
        fetches run concurrently and are isolated from each other.

        Args:
            url: Absolute URL of the page to fetch

        Returns:
            AggregatedDocument with combined text and iframe stats
        """
        start_time = time.time()
        logfire.info("Fetching HTML with iframes", url=url)

        main_html = await self._fetcher.fetch(url)
        sources = list(iter_iframe_sources(main_html, url))

        if not sources:
            logfire.info("No iframes found", url=url)
            return AggregatedDocument(main_body=main_html, combined_text=main_html)

        logfire.info("Iframes discovered", url=url, iframe_count=len(sources))

        # gather preserves argument order, so results follow discovery order
        iframe_results = list(
            await asyncio.gather(
                *(
                    self._fetch_iframe(index, source)
                    for index, source in enumerate(sources, start=1)
                )
            )
        )

        stats = IframeStats.from_results(iframe_results)
        combined = combine_html(main_html, iframe_results)

        logfire.info(
            "HTML with iframes fetched",
            url=url,
            total_iframes=stats.total,
            successful_iframes=stats.successful,
            failed_iframes=stats.failed,
            combined_length=len(combined),
            total_time_ms=(time.time() - start_time) * 1000,
        )
        return AggregatedDocument(
            main_body=main_html,
            combined_text=combined,
            iframe_results=iframe_results,
            stats=stats,
        )
