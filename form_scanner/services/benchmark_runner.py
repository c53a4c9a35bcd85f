"""Drive the scanner API over a set of sites and record each run."""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

import httpx
import logfire

from form_scanner.models.benchmark_models import (
    RunPerformance,
    RunSummary,
    RunTokens,
    SiteRunResult,
    StepOutcome,
)


class BenchmarkStepError(Exception):
    """Raised when a scanner API call does not return a success envelope."""

    pass


def _elapsed_ms(start: float) -> int:
    return round((time.perf_counter() - start) * 1000)


async def _post_envelope(client: httpx.AsyncClient, path: str, body: dict[str, Any]) -> dict:
    """POST to the scanner API and return the envelope's data.

    Raises:
        BenchmarkStepError: On transport errors, non-success statuses or a
            failure envelope
    """
    try:
        response = await client.post(path, json=body)
    except httpx.HTTPError as e:
        raise BenchmarkStepError(str(e) or type(e).__name__) from e

    try:
        payload = response.json()
    except ValueError:
        payload = {}

    if not response.is_success or not payload.get("success"):
        raise BenchmarkStepError(payload.get("error") or f"HTTP {response.status_code}")
    return payload["data"]


class BenchmarkRunner:
    """Run fetch-url then analyze-complete for each site, sequentially.

    Example:
        >>> async with httpx.AsyncClient(base_url="http://localhost:3000") as client:
        ...     runner = BenchmarkRunner(client)
        ...     results = await runner.run({"Local": "http://localhost:3000/all-forms"}, runs=3)
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        pause_seconds: float = 2.0,
        on_result: Callable[[SiteRunResult], None] | None = None,
    ):
        self._client = client
        self._pause_seconds = pause_seconds
        self._on_result = on_result

    async def run_site(self, name: str, url: str, run_number: int = 1) -> SiteRunResult:
        """Measure one site once. Never raises; failures are recorded on the result."""
        timestamp = datetime.now(timezone.utc).isoformat()

        start = time.perf_counter()
        try:
            fetched = await _post_envelope(self._client, "/api/scanner/fetch-url", {"url": url})
        except BenchmarkStepError as e:
            logfire.warn("Benchmark fetch failed", site=name, url=url, error=str(e))
            return SiteRunResult(
                name=name,
                url=url,
                run_number=run_number,
                timestamp=timestamp,
                fetch=StepOutcome(success=False, elapsed_ms=_elapsed_ms(start), error=str(e)),
            )
        fetch = StepOutcome(success=True, elapsed_ms=_elapsed_ms(start))

        start = time.perf_counter()
        try:
            analyzed = await _post_envelope(
                self._client,
                "/api/scanner/analyze-complete",
                {"htmlContent": fetched["htmlContent"]},
            )
        except BenchmarkStepError as e:
            logfire.warn("Benchmark analysis failed", site=name, url=url, error=str(e))
            return SiteRunResult(
                name=name,
                url=url,
                run_number=run_number,
                timestamp=timestamp,
                fetch=fetch,
                analysis=StepOutcome(success=False, elapsed_ms=_elapsed_ms(start), error=str(e)),
            )
        analysis = StepOutcome(success=True, elapsed_ms=_elapsed_ms(start))

        summary = analyzed["summary"]
        usage = analyzed["totalUsage"]
        result = SiteRunResult(
            name=name,
            url=url,
            run_number=run_number,
            timestamp=timestamp,
            fetch=fetch,
            analysis=analysis,
            summary=RunSummary(
                forms=summary["totalFunctionalForms"],
                fields=summary["totalFields"],
                forms_ignored=summary.get("formsIgnored", 0),
                confidence=summary.get("confidence"),
            ),
            tokens=RunTokens(
                input=usage["inputTokens"],
                output=usage["outputTokens"],
                total=usage["totalTokens"],
            ),
            cost=usage["totalCost"],
            performance=RunPerformance(
                fetch_time_ms=fetch.elapsed_ms,
                analysis_time_ms=analysis.elapsed_ms,
                total_time_ms=fetch.elapsed_ms + analysis.elapsed_ms,
            ),
        )
        logfire.info(
            "Benchmark run completed",
            site=name,
            run_number=run_number,
            forms=result.summary.forms,
            total_tokens=result.tokens.total,
            cost=result.cost,
        )
        return result

    async def run(self, sites: Mapping[str, str], runs: int) -> list[SiteRunResult]:
        """Run every site `runs` times, in run-major order, pausing between tests."""
        results: list[SiteRunResult] = []
        total = len(sites) * runs
        for run_number in range(1, runs + 1):
            for name, url in sites.items():
                result = await self.run_site(name, url, run_number)
                results.append(result)
                if self._on_result is not None:
                    self._on_result(result)
                if len(results) < total and self._pause_seconds > 0:
                    await asyncio.sleep(self._pause_seconds)
        return results
