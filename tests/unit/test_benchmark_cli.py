"""Tests for the benchmark CLI."""

import json
from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from form_scanner.cli.benchmark_cli import app
from form_scanner.constants import DEFAULT_BENCHMARK_SITES
from form_scanner.models.benchmark_models import SiteRunResult, StepOutcome

runner = CliRunner()


def _failed_run(name: str, url: str) -> SiteRunResult:
    return SiteRunResult(
        name=name,
        url=url,
        timestamp="2024-01-01T00:00:00+00:00",
        fetch=StepOutcome(success=False, elapsed_ms=10, error="HTTP 404: Not Found"),
    )


class TestBenchmarkCLI:
    """Test the run and list-sites commands."""

    def test_list_sites(self):
        result = runner.invoke(app, ["list-sites"])

        assert result.exit_code == 0
        for name in DEFAULT_BENCHMARK_SITES:
            assert name in result.output

    def test_run_with_explicit_sites_writes_files(self, tmp_path):
        results = [_failed_run("https://a.example.com/", "https://a.example.com/")]
        with patch(
            "form_scanner.cli.benchmark_cli._run_benchmark",
            new=AsyncMock(return_value=results),
        ) as mock_run:
            result = runner.invoke(
                app,
                [
                    "run",
                    "--site",
                    "https://a.example.com/",
                    "--runs",
                    "1",
                    "--output-dir",
                    str(tmp_path),
                    "--base-url",
                    "http://scanner.test",
                ],
            )

        assert result.exit_code == 0, result.output
        base_url, sites, runs, pause = mock_run.await_args.args
        assert base_url == "http://scanner.test"
        assert sites == {"https://a.example.com/": "https://a.example.com/"}
        assert runs == 1

        json_files = list(tmp_path.glob("benchmark-*.json"))
        assert len(json_files) == 1
        assert len(list(tmp_path.glob("benchmark-*.txt"))) == 1
        assert len(list(tmp_path.glob("benchmark-*.csv"))) == 1

        saved = json.loads(json_files[0].read_text())
        assert saved["metadata"]["total_tests"] == 1
        assert saved["metadata"]["runs_per_website"] == 1
        assert saved["statistics"]["successful"] == 0
        assert saved["results"][0]["fetch"]["error"] == "HTTP 404: Not Found"
        assert "FORM SCANNER BENCHMARK REPORT" in result.output

    def test_run_defaults_to_built_in_sites(self, tmp_path):
        with patch(
            "form_scanner.cli.benchmark_cli._run_benchmark", new=AsyncMock(return_value=[])
        ) as mock_run:
            result = runner.invoke(app, ["run", "--runs", "2", "--output-dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert mock_run.await_args.args[1] == DEFAULT_BENCHMARK_SITES

    def test_interactive_selection(self, tmp_path):
        chosen = list(DEFAULT_BENCHMARK_SITES)[:2]
        with (
            patch("form_scanner.cli.benchmark_cli.questionary.checkbox") as mock_checkbox,
            patch(
                "form_scanner.cli.benchmark_cli._run_benchmark", new=AsyncMock(return_value=[])
            ) as mock_run,
        ):
            mock_checkbox.return_value.ask.return_value = chosen
            result = runner.invoke(
                app, ["run", "--interactive", "--runs", "1", "--output-dir", str(tmp_path)]
            )

        assert result.exit_code == 0, result.output
        assert list(mock_run.await_args.args[1]) == chosen

    def test_interactive_cancel_exits(self, tmp_path):
        with patch("form_scanner.cli.benchmark_cli.questionary.checkbox") as mock_checkbox:
            mock_checkbox.return_value.ask.return_value = None
            result = runner.invoke(app, ["run", "--interactive", "--output-dir", str(tmp_path)])

        assert result.exit_code == 0
        assert not list(tmp_path.iterdir())

    def test_runs_must_be_positive(self):
        result = runner.invoke(app, ["run", "--runs", "0"])

        assert result.exit_code != 0
