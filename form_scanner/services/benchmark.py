"""Benchmark statistics and report rendering.

Pure functions over SiteRunResult records; the HTTP side lives in
benchmark_runner.py.
"""

import csv
import io
import statistics
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

from form_scanner.models.benchmark_models import SiteRunResult

_BANNER_WIDTH = 79


def calculate_metrics(values: Sequence[float]) -> dict[str, float] | None:
    """Min, max, mean, median and population standard deviation of values.

    Mean, median and standard deviation are rounded to 2 decimals. Returns
    None for an empty sequence.
    """
    if not values:
        return None
    return {
        "min": min(values),
        "max": max(values),
        "avg": round(statistics.fmean(values), 2),
        "median": round(statistics.median(values), 2),
        "std_dev": round(statistics.pstdev(values), 2),
    }


def calculate_variance(values: Sequence[float]) -> float:
    """Population variance rounded to 2 decimals, 0 for no values."""
    if not values:
        return 0.0
    return round(statistics.pvariance(values), 2)


def calculate_statistics(results: Sequence[SiteRunResult]) -> dict[str, Any]:
    """Aggregate statistics over every run that completed its analysis."""
    successful = [r for r in results if r.succeeded]
    failed = len(results) - len(successful)

    if not successful:
        return {
            "total_tests": len(results),
            "successful": 0,
            "failed": failed,
            "success_rate": 0.0,
            "error": "No successful tests to analyze",
        }

    costs = [r.cost for r in successful]
    forms_counts = [r.summary.forms for r in successful]
    fields_counts = [r.summary.fields for r in successful]

    return {
        "total_tests": len(results),
        "successful": len(successful),
        "failed": failed,
        "success_rate": round(len(successful) / len(results) * 100, 2),
        "tokens": {
            "input": calculate_metrics([r.tokens.input for r in successful]),
            "output": calculate_metrics([r.tokens.output for r in successful]),
            "total": calculate_metrics([r.tokens.total for r in successful]),
        },
        "performance": {
            "fetch": calculate_metrics([r.performance.fetch_time_ms for r in successful]),
            "analysis": calculate_metrics([r.performance.analysis_time_ms for r in successful]),
            "total": calculate_metrics([r.performance.total_time_ms for r in successful]),
        },
        "cost": {
            **calculate_metrics(costs),
            "total_cost": round(sum(costs), 6),
        },
        "forms": {
            "forms_found": calculate_metrics(forms_counts),
            "fields_found": calculate_metrics(fields_counts),
            "total_forms": sum(forms_counts),
            "total_fields": sum(fields_counts),
        },
    }


def calculate_consistency(results: Iterable[SiteRunResult]) -> dict[str, Any]:
    """Per-site spread of the measurements across repeated runs."""
    by_site: dict[str, list[SiteRunResult]] = defaultdict(list)
    for result in results:
        by_site[result.name].append(result)

    consistency: dict[str, Any] = {}
    for name, runs in by_site.items():
        successful = [r for r in runs if r.succeeded]
        if not successful:
            consistency[name] = {
                "total_runs": len(runs),
                "successful_runs": 0,
                "failed_runs": len(runs),
                "error": "All runs failed",
            }
            continue

        form_counts = [r.summary.forms for r in successful]
        field_counts = [r.summary.fields for r in successful]
        input_tokens = [r.tokens.input for r in successful]
        output_tokens = [r.tokens.output for r in successful]
        costs = [r.cost for r in successful]
        analysis_times = [r.performance.analysis_time_ms for r in successful]

        consistency[name] = {
            "total_runs": len(runs),
            "successful_runs": len(successful),
            "failed_runs": len(runs) - len(successful),
            "forms": {
                **calculate_metrics(form_counts),
                "all_values": form_counts,
                "is_consistent": len(set(form_counts)) == 1,
            },
            "fields": {
                **calculate_metrics(field_counts),
                "all_values": field_counts,
                "is_consistent": len(set(field_counts)) == 1,
            },
            "input_tokens": {
                **calculate_metrics(input_tokens),
                "variance": calculate_variance(input_tokens),
            },
            "output_tokens": {
                **calculate_metrics(output_tokens),
                "variance": calculate_variance(output_tokens),
            },
            "cost": {**calculate_metrics(costs), "variance": calculate_variance(costs)},
            "analysis_time": {
                **calculate_metrics(analysis_times),
                "variance": calculate_variance(analysis_times),
            },
        }
    return consistency


def _banner(title: str) -> str:
    inner = _BANNER_WIDTH - 2
    return "\n".join(
        [
            "╔" + "═" * inner + "╗",
            "║" + title.center(inner) + "║",
            "╚" + "═" * inner + "╝",
        ]
    )


def _metric_lines(label: str, metrics: dict[str, float], money: bool = False) -> list[str]:
    def fmt(value: float) -> str:
        return f"${value:.6f}" if money else f"{value}"

    return [
        f"{label}:",
        f"  Min: {fmt(metrics['min'])}",
        f"  Max: {fmt(metrics['max'])}",
        f"  Avg: {fmt(metrics['avg'])}",
        f"  Median: {fmt(metrics['median'])}",
        f"  StdDev: {fmt(metrics['std_dev'])}",
    ]


def _result_lines(index: int, result: SiteRunResult) -> list[str]:
    lines = [f"{index}. {result.name} ({result.url}) [run {result.run_number}]"]
    if not result.succeeded:
        lines.append("   Status: FAILED")
        lines.append(f"   Error: {result.error}")
        return lines

    perf = result.performance
    lines.extend(
        [
            "   Status: SUCCESS",
            f"   Forms: {result.summary.forms} | Fields: {result.summary.fields}",
            f"   Tokens: {result.tokens.input}->{result.tokens.output} "
            f"({result.tokens.total} total)",
            f"   Time: {perf.fetch_time_ms}ms fetch + {perf.analysis_time_ms}ms analysis "
            f"= {perf.total_time_ms}ms",
            f"   Cost: ${result.cost:.6f}",
            f"   Confidence: {result.summary.confidence}",
        ]
    )
    return lines


def generate_report(
    results: Sequence[SiteRunResult],
    stats: dict[str, Any],
    generated_at: datetime | None = None,
) -> str:
    """Render the human-readable benchmark report."""
    generated_at = generated_at or datetime.now(timezone.utc)
    lines = [
        _banner("FORM SCANNER BENCHMARK REPORT"),
        "",
        f"Generated: {generated_at.isoformat()}",
        f"Total Tests: {stats['total_tests']}",
        f"Success Rate: {stats['success_rate']:.2f}%",
        "",
    ]

    if stats["successful"]:
        perf, tokens, cost, forms = (
            stats["performance"],
            stats["tokens"],
            stats["cost"],
            stats["forms"],
        )
        lines += [_banner("PERFORMANCE METRICS"), ""]
        lines += _metric_lines("Fetch Time (ms)", perf["fetch"]) + [""]
        lines += _metric_lines("Analysis Time (ms)", perf["analysis"]) + [""]
        lines += _metric_lines("Total Time (ms)", perf["total"]) + [""]

        lines += [_banner("TOKEN USAGE"), ""]
        lines += _metric_lines("Input Tokens", tokens["input"]) + [""]
        lines += _metric_lines("Output Tokens", tokens["output"]) + [""]
        lines += _metric_lines("Total Tokens", tokens["total"]) + [""]

        lines += [_banner("COST ANALYSIS"), ""]
        lines += _metric_lines("Cost per Request ($)", cost, money=True)
        lines += ["", f"Total Cost: ${cost['total_cost']:.6f}", ""]

        lines += [_banner("EXTRACTION RESULTS"), ""]
        lines += _metric_lines("Forms Found", forms["forms_found"])
        lines += [f"  Total: {forms['total_forms']}", ""]
        lines += _metric_lines("Fields Found", forms["fields_found"])
        lines += [f"  Total: {forms['total_fields']}", ""]
    else:
        lines += [stats.get("error", "No successful tests to analyze"), ""]

    lines += [_banner("INDIVIDUAL TEST RESULTS")]
    for index, result in enumerate(results, start=1):
        lines.append("")
        lines.extend(_result_lines(index, result))

    lines += ["", "═" * _BANNER_WIDTH, ""]
    return "\n".join(lines)


RESULTS_CSV_HEADER = [
    "Run",
    "Name",
    "URL",
    "Status",
    "Forms",
    "Fields",
    "Input Tokens",
    "Output Tokens",
    "Total Tokens",
    "Cost",
    "Fetch Time",
    "Analysis Time",
    "Total Time",
    "Confidence",
]


def generate_csv(results: Iterable[SiteRunResult]) -> str:
    """One CSV row per site x run; missing measurements are written as 0."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(RESULTS_CSV_HEADER)
    for r in results:
        writer.writerow(
            [
                r.run_number,
                r.name,
                r.url,
                "SUCCESS" if r.succeeded else "FAILED",
                r.summary.forms if r.summary else 0,
                r.summary.fields if r.summary else 0,
                r.tokens.input if r.tokens else 0,
                r.tokens.output if r.tokens else 0,
                r.tokens.total if r.tokens else 0,
                f"{r.cost:.6f}" if r.cost is not None else 0,
                r.performance.fetch_time_ms if r.performance else 0,
                r.performance.analysis_time_ms if r.performance else 0,
                r.performance.total_time_ms if r.performance else 0,
                (r.summary.confidence or "") if r.summary else "",
            ]
        )
    return buffer.getvalue()
