"""Models for page fetching: per-fetch outcomes and the aggregated document."""

from dataclasses import asdict, dataclass, field
from typing import Any, List


@dataclass(frozen=True)
class FetchResult:
    """Outcome of fetching one iframe source. Failures carry an error and no body."""

    source_url: str
    body: str = ""
    succeeded: bool = True
    error: str | None = None

    @classmethod
    def failure(cls, source_url: str, error: str) -> "FetchResult":
        return cls(source_url=source_url, body="", succeeded=False, error=error)


@dataclass(frozen=True)
class IframeStats:
    """Counts of discovered, fetched and failed iframes."""

    total: int = 0
    successful: int = 0
    failed: int = 0

    @classmethod
    def from_results(cls, results: List[FetchResult]) -> "IframeStats":
        successful = sum(1 for r in results if r.succeeded)
        return cls(
            total=len(results),
            successful=successful,
            failed=len(results) - successful,
        )


@dataclass(frozen=True)
class AggregatedDocument:
    """Main page body combined with the bodies of its successfully fetched iframes."""

    main_body: str
    combined_text: str
    iframe_results: List[FetchResult] = field(default_factory=list)
    stats: IframeStats = field(default_factory=IframeStats)

    def stats_dict(self) -> dict[str, Any]:
        return asdict(self.stats)
