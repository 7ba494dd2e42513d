"""
Unit tests for the output contract.

Tests strict formatting, robust (self-healing) formatting, the
compliance check and the JSON string helpers.
"""

import json

import pytest
from insight_framework.core.config import AnalysisConfig
from insight_framework.core.constants import TRUNCATION_NOTICE
from insight_framework.core.exceptions import OutputFormattingError
from insight_framework.core.models import ChartRecommendation
from insight_framework.profiler import insight_templates as templates
from insight_framework.reporters.output_contract import (
    check_compliance,
    format_output,
    format_output_robust,
    parse_json_string,
    to_json_string,
    validate_output,
)

REPORT = (
    "# Executive Summary\n\nSummary.\n\n# Statistical Analysis\n\n## Dataset Overview\n\n"
    "# Relationship Insights\n\n# Actionable Questions\n\n## 1. Question?\n\n"
    "# Conclusion\n\nYou should consider the recommended charts. " + "Detail. " * 60
)


def chart(title="price by product", chart_type="bar", x="product", y="price"):
    return {"title": title, "type": chart_type, "xAxis": x, "yAxis": y}


@pytest.mark.unit
class TestStrictFormatting:
    """Test format_output and validate_output."""

    def test_chart_objects_converted(self):
        output = format_output([ChartRecommendation("sales vs price", "scatter", "price", "sales")], REPORT)

        assert output == {
            "charts_to_generate": [
                {"title": "sales vs price", "type": "scatter", "xAxis": "price", "yAxis": "sales"}
            ],
            "full_analysis_report_markdown": REPORT,
        }

    def test_empty_chart_list_allowed(self):
        assert format_output([], REPORT)["charts_to_generate"] == []

    def test_charts_not_a_list(self):
        with pytest.raises(OutputFormattingError):
            format_output(None, REPORT)

    def test_invalid_chart_type(self):
        with pytest.raises(OutputFormattingError, match="invalid chart type 'pie'"):
            format_output([chart(chart_type="pie")], REPORT)

    def test_missing_field(self):
        bad = chart()
        del bad["yAxis"]
        with pytest.raises(OutputFormattingError, match="'yAxis' must be a non-empty string"):
            format_output([bad], REPORT)

    def test_extra_field(self):
        with pytest.raises(OutputFormattingError, match="unexpected fields: color"):
            format_output([dict(chart(), color="red")], REPORT)

    def test_duplicate_key(self):
        with pytest.raises(OutputFormattingError, match="duplicate"):
            format_output([chart(), chart(title="another title")], REPORT)

    def test_too_many_charts(self):
        charts = [chart(x=f"c{i}") for i in range(3)]
        with pytest.raises(OutputFormattingError, match="Too many charts"):
            format_output(charts, REPORT, AnalysisConfig(max_charts=2))

    def test_hard_chart_limit(self):
        charts = [chart(x=f"c{i}") for i in range(101)]
        with pytest.raises(OutputFormattingError, match="at most 100"):
            format_output(charts, REPORT)

    def test_unpaired_surrogate_rejected(self):
        with pytest.raises(OutputFormattingError):
            validate_output({"charts_to_generate": [],
                             "full_analysis_report_markdown": "# Executive Summary \ud800"})

    @pytest.mark.parametrize("report", ["", "   ", None, 42])
    def test_invalid_report(self, report):
        with pytest.raises(OutputFormattingError) as exc_info:
            format_output([chart()], report)
        assert exc_info.value.output_type == "markdown"

    def test_report_too_long(self):
        with pytest.raises(OutputFormattingError, match="exceeds maximum"):
            format_output([], "x" * 200, AnalysisConfig(max_report_length=100))

    def test_truncated_report_allowed(self):
        report = "x" * 100 + TRUNCATION_NOTICE
        format_output([], report, AnalysisConfig(max_report_length=100))

    def test_extra_top_level_key(self):
        output = {"charts_to_generate": [], "full_analysis_report_markdown": REPORT, "debug": True}
        with pytest.raises(OutputFormattingError, match="unexpected"):
            validate_output(output)


@pytest.mark.unit
class TestRobustFormatting:
    """Test format_output_robust repairs instead of raising."""

    def test_clean_input_has_no_warnings(self):
        result = format_output_robust([chart()], REPORT)

        assert result.warnings == []
        assert result.output["charts_to_generate"] == [chart()]
        assert result.metrics == {
            "original_chart_count": 1,
            "final_chart_count": 1,
            "report_length": len(REPORT.strip()),
        }

    def test_charts_not_a_list(self):
        result = format_output_robust("charts", REPORT)

        assert result.output["charts_to_generate"] == []
        assert "No charts provided - using empty array" in result.warnings

    def test_malformed_chart_removed(self):
        result = format_output_robust([chart(), {"title": "x"}, "not a chart"], REPORT)

        assert result.output["charts_to_generate"] == [chart()]
        assert result.warnings[0].startswith("Removed malformed chart at index 1")
        assert result.warnings[1].startswith("Removed malformed chart at index 2")

    def test_duplicate_chart_removed(self):
        result = format_output_robust([chart(), chart(title="same axes")], REPORT)

        assert len(result.output["charts_to_generate"]) == 1
        assert result.warnings[0].startswith("Removed duplicate chart at index 1")

    def test_chart_cap(self):
        charts = [chart(x=f"c{i}") for i in range(5)]
        result = format_output_robust(charts, REPORT, AnalysisConfig(max_charts=3))

        assert len(result.output["charts_to_generate"]) == 3
        assert result.metrics["original_chart_count"] == 5
        assert "Too many charts (5) - limiting to first 3" in result.warnings

    def test_hard_chart_limit(self):
        charts = [chart(x=f"c{i}") for i in range(150)]
        result = format_output_robust(charts, REPORT)

        assert len(result.output["charts_to_generate"]) == 100
        assert "Too many charts (150) - limiting to first 100" in result.warnings

    def test_surrogates_removed(self):
        charts = [chart(title="price \udc80 by product"), chart(x="region")]
        result = format_output_robust(charts, "# Report \ud800body")

        assert result.output["full_analysis_report_markdown"] == "# Report body"
        assert [c["xAxis"] for c in result.output["charts_to_generate"]] == ["region"]
        validate_output(result.output)
        result.output["full_analysis_report_markdown"].encode("utf-8")

    @pytest.mark.parametrize("report", [None, "", "  \n ", 17])
    def test_invalid_report_replaced(self, report):
        result = format_output_robust([], report)

        assert result.output["full_analysis_report_markdown"] == templates.FALLBACK_OUTPUT_REPORT
        assert "Invalid or empty report - using fallback" in result.warnings

    def test_invalid_characters_cleaned(self):
        result = format_output_robust([], "# Report\r\n\x00Body ")

        assert result.output["full_analysis_report_markdown"] == "# Report\nBody"
        assert "Report contains invalid characters - cleaned" in result.warnings

    def test_long_report_truncated(self):
        result = format_output_robust([], "y" * 500, AnalysisConfig(max_report_length=100))

        assert result.output["full_analysis_report_markdown"] == "y" * 100 + TRUNCATION_NOTICE
        assert "Report truncated due to excessive length" in result.warnings

    def test_output_always_valid(self):
        result = format_output_robust([chart(title=float("nan")), chart()], None)

        validate_output(result.output)


@pytest.mark.unit
class TestCompliance:
    """Test check_compliance findings."""

    def test_compliant_output(self):
        output = {"charts_to_generate": [chart()], "full_analysis_report_markdown": REPORT}
        report = check_compliance(output)

        assert report.is_valid
        assert report.errors == []
        assert report.warnings == []
        assert report.metrics["chart_count"] == 1
        assert report.metrics["has_required_sections"] is True
        assert report.metrics["json_size"] == len(json.dumps(output, ensure_ascii=False).encode("utf-8"))

    def test_not_a_dict(self):
        report = check_compliance([1, 2])

        assert not report.is_valid
        assert report.errors == ["Output must be an object"]

    def test_missing_and_extra_keys(self):
        report = check_compliance({"charts": []})

        assert not report.is_valid
        assert "Missing required keys: charts_to_generate, full_analysis_report_markdown" in report.errors
        assert "Unexpected keys: charts" in report.errors

    def test_non_finite_numbers(self):
        output = {"charts_to_generate": [], "full_analysis_report_markdown": REPORT, }
        output["charts_to_generate"].append(dict(chart(), title=float("inf")))
        report = check_compliance(output)

        assert not report.is_valid

    def test_quality_warnings(self):
        charts = [chart(title="abc", x="a", y="a")] + [chart(x=f"c{i}") for i in range(3)] + [chart(x="c0")]
        output = {"charts_to_generate": charts, "full_analysis_report_markdown": "Plain text only"}
        report = check_compliance(output)

        assert report.is_valid
        warnings = "\n".join(report.warnings)
        assert "Title may be too short: 'abc'" in warnings
        assert "Same column used for both axes: 'a'" in warnings
        assert "Potential duplicate charts detected: bar:c0:price" in warnings
        assert "All charts are of the same type" in warnings
        assert "Missing recommended sections" in warnings
        assert "Report should have a main heading (# )" in warnings
        assert "Report may be too short" in warnings
        assert "Report may lack actionable recommendations" in warnings
        assert report.metrics["has_required_sections"] is False

    def test_hard_chart_limit(self):
        output = {"charts_to_generate": [chart(x=f"c{i}") for i in range(101)],
                  "full_analysis_report_markdown": REPORT}
        report = check_compliance(output)

        assert not report.is_valid
        assert "Too many charts (101); at most 100 are allowed" in report.errors

    def test_unpaired_surrogate_reported(self):
        output = {"charts_to_generate": [],
                  "full_analysis_report_markdown": "# Executive Summary \ud800"}
        report = check_compliance(output)

        assert not report.is_valid
        assert any("surrogate" in error for error in report.errors)
        assert report.metrics["json_size"] == 0

    def test_does_not_mutate(self):
        output = {"charts_to_generate": [chart()], "full_analysis_report_markdown": ""}
        snapshot = json.dumps(output)
        report = check_compliance(output)

        assert not report.is_valid
        assert json.dumps(output) == snapshot


@pytest.mark.unit
class TestJsonHelpers:
    """Test serialization helpers."""

    def test_round_trip(self):
        output = format_output([chart()], "# Résumé\n\n“quoted” text")
        text = to_json_string(output)

        assert parse_json_string(text) == output
        assert "Résumé" in text

    def test_indent(self):
        output = format_output([], REPORT)

        assert "\n  " in to_json_string(output, indent=2)

    def test_whitespace_rejected(self):
        text = to_json_string(format_output([], REPORT))
        with pytest.raises(OutputFormattingError, match="whitespace"):
            parse_json_string(text + "\n")

    def test_invalid_json(self):
        with pytest.raises(OutputFormattingError, match="Invalid JSON"):
            parse_json_string('{"charts_to_generate": [')

    def test_not_a_string(self):
        with pytest.raises(OutputFormattingError):
            parse_json_string(b"{}")

    def test_contract_enforced_on_parse(self):
        with pytest.raises(OutputFormattingError):
            parse_json_string(json.dumps({"charts_to_generate": []}))
