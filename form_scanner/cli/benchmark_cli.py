"""Typer CLI that benchmarks the scanner API against a set of sites."""

import os

os.environ.setdefault("LOGFIRE_IGNORE_NO_CONFIG", "1")

import asyncio
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import httpx
import questionary
import typer
from dotenv import load_dotenv

from form_scanner.constants import (
    APP_VERSION,
    BENCHMARK_HTTP_TIMEOUT_SECONDS,
    DEFAULT_BENCHMARK_API_BASE_URL,
    DEFAULT_BENCHMARK_RUNS,
    DEFAULT_BENCHMARK_SITES,
)
from form_scanner.models.benchmark_models import (
    BenchmarkMetadata,
    BenchmarkReport,
    SiteRunResult,
)
from form_scanner.services.benchmark import (
    calculate_consistency,
    calculate_statistics,
    generate_csv,
    generate_report,
)
from form_scanner.services.benchmark_runner import BenchmarkRunner

load_dotenv(".env")
load_dotenv(".env.local")

app = typer.Typer(help="Benchmark form extraction through the scanner API.")


@app.callback()
def _main():
    """Form scanner benchmark tools."""


def _select_sites(sites: dict[str, str]) -> dict[str, str]:
    """Arrow-key multi-select over the candidate sites."""
    chosen = questionary.checkbox(
        "Select sites to benchmark",
        choices=[
            questionary.Choice(f"{name} ({url})", value=name, checked=True)
            for name, url in sites.items()
        ],
    ).ask()
    if not chosen:
        raise typer.Exit(0)
    return {name: sites[name] for name in chosen}


def _echo_result(result: SiteRunResult) -> None:
    if result.succeeded:
        typer.echo(
            f"✓ [run {result.run_number}] {result.name}: "
            f"{result.summary.forms} forms, {result.summary.fields} fields, "
            f"{result.tokens.total} tokens, ${result.cost:.6f}, "
            f"{result.performance.total_time_ms}ms"
        )
    else:
        typer.echo(f"✗ [run {result.run_number}] {result.name}: {result.error}", err=True)


async def _run_benchmark(
    base_url: str, sites: dict[str, str], runs: int, pause_seconds: float
) -> list[SiteRunResult]:
    async with httpx.AsyncClient(
        base_url=base_url, timeout=BENCHMARK_HTTP_TIMEOUT_SECONDS
    ) as client:
        runner = BenchmarkRunner(client, pause_seconds=pause_seconds, on_result=_echo_result)
        return await runner.run(sites, runs)


def write_results(
    output_dir: Path,
    results: list[SiteRunResult],
    sites: dict[str, str],
    runs: int,
    total_time_ms: int,
    finished_at: datetime | None = None,
) -> tuple[Path, Path, Path]:
    """Write the JSON results, the text report and the CSV; return their paths."""
    finished_at = finished_at or datetime.now(timezone.utc)
    stats = calculate_statistics(results)
    report = BenchmarkReport(
        metadata=BenchmarkMetadata(
            timestamp=finished_at.isoformat(),
            total_time_ms=total_time_ms,
            total_tests=len(results),
            num_websites=len(sites),
            runs_per_website=runs,
            version=APP_VERSION,
        ),
        results=results,
        statistics=stats,
        consistency_metrics=calculate_consistency(results),
    )

    output_dir.mkdir(parents=True, exist_ok=True)
    stamp = finished_at.isoformat().replace(":", "-").replace(".", "-")
    json_path = output_dir / f"benchmark-{stamp}.json"
    text_path = output_dir / f"benchmark-{stamp}.txt"
    csv_path = output_dir / f"benchmark-{stamp}.csv"

    json_path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
    text_path.write_text(generate_report(results, stats, finished_at), encoding="utf-8")
    csv_path.write_text(generate_csv(results), encoding="utf-8")
    return json_path, text_path, csv_path


@app.command()
def run(
    base_url: str = typer.Option(
        DEFAULT_BENCHMARK_API_BASE_URL,
        "--base-url",
        envvar="BENCHMARK_API_BASE_URL",
        help="Base URL of a running scanner API",
    ),
    runs: int = typer.Option(DEFAULT_BENCHMARK_RUNS, "--runs", min=1, help="Runs per site"),
    site: Optional[List[str]] = typer.Option(
        None, "--site", help="Site URL to benchmark (repeatable); defaults to the built-in list"
    ),
    output_dir: Path = typer.Option(
        Path("benchmark-results"), "--output-dir", help="Directory for result files"
    ),
    interactive: bool = typer.Option(
        False, "--interactive", help="Pick sites from the built-in list with arrow keys"
    ),
    pause: float = typer.Option(2.0, "--pause", min=0.0, help="Seconds to wait between tests"),
):
    """Fetch and analyze each site N times, then write statistics and a report."""
    if site:
        sites = {url: url for url in site}
    elif interactive:
        sites = _select_sites(DEFAULT_BENCHMARK_SITES)
    else:
        sites = dict(DEFAULT_BENCHMARK_SITES)

    typer.echo(
        f"Testing {len(sites)} websites × {runs} runs = {len(sites) * runs} total tests "
        f"against {base_url}\n"
    )

    start = time.perf_counter()
    try:
        results = asyncio.run(_run_benchmark(base_url, sites, runs, pause))
    except KeyboardInterrupt:
        typer.echo("Benchmark interrupted.", err=True)
        raise typer.Exit(130)
    total_time_ms = round((time.perf_counter() - start) * 1000)

    json_path, text_path, csv_path = write_results(
        output_dir, results, sites, runs, total_time_ms
    )
    typer.echo(text_path.read_text(encoding="utf-8"))
    typer.echo(f"Raw results saved to: {json_path}")
    typer.echo(f"Report saved to: {text_path}")
    typer.echo(f"CSV saved to: {csv_path}")


@app.command("list-sites")
def list_sites():
    """Show the built-in benchmark sites."""
    for name, url in DEFAULT_BENCHMARK_SITES.items():
        typer.echo(f"{name}: {url}")


if __name__ == "__main__":
    app()
