"""
Tests for the data-insight command-line interface.

Uses click's CliRunner with temporary files; every command is run the way
a user would run it.
"""

import json

import pytest
import yaml
from insight_framework.cli import cli, detect_csv_delimiter, load_sample
from insight_framework.core.config import AnalysisConfig


@pytest.mark.unit
class TestLoading:
    """Test sample loading helpers."""

    def test_detect_semicolon(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("a;b;c\n1;2;3\n4;5;6\n", encoding="utf-8")

        assert detect_csv_delimiter(str(path)) == ";"

    def test_csv_to_input(self, product_csv):
        data = load_sample(str(product_csv))

        assert data["headers"] == ["product", "price", "sales"]
        assert data["sampleData"][0] == ["iPhone", 999, 1500]

    def test_empty_cells_become_null(self, tmp_path):
        path = tmp_path / "gaps.csv"
        path.write_text("name,score\nann,1.5\nbob,\n", encoding="utf-8")

        assert load_sample(str(path))["sampleData"][1] == ["bob", None]

    def test_max_rows(self, product_csv):
        assert len(load_sample(str(product_csv), max_rows=2)["sampleData"]) == 2

    def test_json_input(self, tmp_path):
        path = tmp_path / "sample.json"
        path.write_text(json.dumps({"headers": ["a"], "sampleData": [[1], [2]]}), encoding="utf-8")

        assert load_sample(str(path)) == {"headers": ["a"], "sampleData": [[1], [2]]}


@pytest.mark.unit
class TestAnalyzeCommand:
    """Test the analyze command."""

    def test_json_to_stdout(self, runner, product_csv):
        result = runner.invoke(cli, ["analyze", str(product_csv), "--log-level", "ERROR"])

        assert result.exit_code == 0
        output = json.loads(result.stdout)
        assert output["full_analysis_report_markdown"].startswith("# Executive Summary")

    def test_output_and_report_files(self, runner, product_csv, tmp_path):
        json_path = tmp_path / "out" / "insight.json"
        report_path = tmp_path / "out" / "report.md"
        result = runner.invoke(cli, ["analyze", str(product_csv), "-o", str(json_path),
                                     "-r", str(report_path)])

        assert result.exit_code == 0
        assert "ANALYSIS SUMMARY" in result.output
        output = json.loads(json_path.read_text(encoding="utf-8"))
        assert report_path.read_text(encoding="utf-8") == output["full_analysis_report_markdown"]

    def test_charts_only(self, runner, product_csv):
        result = runner.invoke(cli, ["analyze", str(product_csv), "--charts-only",
                                     "--log-level", "ERROR"])

        assert result.exit_code == 0
        charts = json.loads(result.stdout)
        assert isinstance(charts, list)
        assert all(set(chart) == {"title", "type", "xAxis", "yAxis"} for chart in charts)

    def test_config_option(self, runner, product_csv, tmp_path):
        config_path = tmp_path / "insight.yaml"
        config_path.write_text("analysis:\n  charts:\n    max_charts: 1\n", encoding="utf-8")
        result = runner.invoke(cli, ["analyze", str(product_csv), "--config", str(config_path),
                                     "--log-level", "ERROR"])

        assert result.exit_code == 0
        assert len(json.loads(result.stdout)["charts_to_generate"]) == 1

    def test_rejected_dataset(self, runner, tmp_path):
        path = tmp_path / "tiny.csv"
        path.write_text("a,b\n1,2\n", encoding="utf-8")
        result = runner.invoke(cli, ["analyze", str(path)])

        assert result.exit_code == 1
        assert "INSUFFICIENT_DATA" in result.output

    def test_invalid_config(self, runner, product_csv, tmp_path):
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("analysis:\n  charts:\n    max_charts: -5\n", encoding="utf-8")
        result = runner.invoke(cli, ["analyze", str(product_csv), "--config", str(config_path)])

        assert result.exit_code == 1
        assert "CONFIG_ERROR" in result.output


@pytest.mark.unit
class TestBatchCommand:
    """Test the batch command."""

    def test_batch_with_failure(self, runner, product_csv, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"headers": [], "sampleData": []}), encoding="utf-8")
        results_path = tmp_path / "results.json"
        result = runner.invoke(cli, ["batch", str(product_csv), str(bad), "-o", str(results_path)])

        assert result.exit_code == 0
        results = json.loads(results_path.read_text(encoding="utf-8"))
        assert results[0]["error"] is None
        assert results[1]["error"]["code"] == "EMPTY_HEADERS"
        assert results[1]["source"] == str(bad)

    def test_fail_on_error(self, runner, product_csv, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("null", encoding="utf-8")
        result = runner.invoke(cli, ["batch", str(product_csv), str(bad), "-o",
                                     str(tmp_path / "results.json"), "--fail-on-error"])

        assert result.exit_code == 1


@pytest.mark.unit
class TestCheckCommand:
    """Test the check command."""

    def test_compliant_output(self, runner, product_csv, tmp_path):
        json_path = tmp_path / "insight.json"
        runner.invoke(cli, ["analyze", str(product_csv), "-o", str(json_path)])
        result = runner.invoke(cli, ["check", str(json_path)])

        assert result.exit_code == 0
        assert "Output is compliant" in result.output

    def test_non_compliant_output_repaired(self, runner, tmp_path):
        json_path = tmp_path / "broken.json"
        json_path.write_text(json.dumps({
            "charts_to_generate": [{"title": "x", "type": "pie", "xAxis": "a", "yAxis": "b"}],
            "full_analysis_report_markdown": "",
        }), encoding="utf-8")
        repaired_path = tmp_path / "repaired.json"
        result = runner.invoke(cli, ["check", str(json_path), "--repair", str(repaired_path)])

        assert result.exit_code == 1
        repaired = json.loads(repaired_path.read_text(encoding="utf-8"))
        assert repaired["charts_to_generate"] == []
        assert repaired["full_analysis_report_markdown"].startswith("# Analysis Report")

    def test_unreadable_file(self, runner, tmp_path):
        path = tmp_path / "not.json"
        path.write_text("{not json", encoding="utf-8")
        result = runner.invoke(cli, ["check", str(path)])

        assert result.exit_code == 1


@pytest.mark.unit
class TestInitConfig:
    """Test the init-config command."""

    def test_written_config_loads(self, runner, tmp_path):
        path = tmp_path / "config" / "insight.yaml"
        result = runner.invoke(cli, ["init-config", str(path)])

        assert result.exit_code == 0
        assert AnalysisConfig.from_yaml(str(path)) == AnalysisConfig()
        assert "charts" in yaml.safe_load(path.read_text(encoding="utf-8"))["analysis"]
