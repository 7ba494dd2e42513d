"""
Output Contract - final two-field output schema enforcement.

The analysis output is exactly:

    {
        "charts_to_generate": [{"title", "type", "xAxis", "yAxis"}, ...],
        "full_analysis_report_markdown": "..."
    }

Three entry points:
    - format_output(): strict mode. Any contract violation raises
      OutputFormattingError
    - format_output_robust(): self-healing mode. Never raises; repairs
      what it can and returns the output plus a warnings list
    - check_compliance(): pre-flight check of an existing output dict.
      Reports errors (contract) and warnings (quality) without mutating it

Round-trip stability: json.dumps -> json.loads -> json.dumps must produce
the identical string, which catches NaN, infinities and non-JSON values.
"""

import json
import logging
import re
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple

from insight_framework.core import constants
from insight_framework.core.config import AnalysisConfig, DEFAULT_CONFIG
from insight_framework.core.exceptions import OutputFormattingError
from insight_framework.core.models import ChartRecommendation, ComplianceReport, FormattingResult
from insight_framework.profiler import insight_templates as templates
from insight_framework.profiler.json_utils import convert_to_json_serializable
from insight_framework.reporters.report_assembler import UNSAFE_TEXT_PATTERN, postprocess_report

logger = logging.getLogger(__name__)

ACTIONABLE_KEYWORDS = ("recommend", "suggest", "should", "could", "consider", "analyze", "investigate")

MIN_TITLE_LENGTH = 5
MIN_REPORT_LENGTH = 500
LONG_REPORT_LENGTH = 10_000

SURROGATE_PATTERN = re.compile(r'[\ud800-\udfff]')


# ============================================================================
# Shared checks
# ============================================================================

def _chart_to_dict(chart: Any) -> Any:
    if isinstance(chart, ChartRecommendation):
        return chart.to_dict()
    return chart


def chart_problems(chart: Any) -> List[str]:
    """
    Contract violations of one chart entry (empty list when valid).

    A valid chart is a dict with exactly title/type/xAxis/yAxis, all
    non-empty strings, and a type in CHART_TYPES.
    """
    if not isinstance(chart, dict):
        return ["chart must be an object"]

    problems = []
    extra = sorted(set(chart) - set(constants.CHART_FIELDS))
    if extra:
        problems.append(f"unexpected fields: {', '.join(map(str, extra))}")
    for field_name in constants.CHART_FIELDS:
        value = chart.get(field_name)
        if not isinstance(value, str) or not value.strip():
            problems.append(f"'{field_name}' must be a non-empty string")
        elif SURROGATE_PATTERN.search(value):
            problems.append(f"'{field_name}' contains an unpaired surrogate")
    chart_type = chart.get("type")
    if isinstance(chart_type, str) and chart_type.strip() and chart_type not in constants.CHART_TYPES:
        problems.append(f"invalid chart type '{chart_type}'")
    return problems


def _dumps(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, allow_nan=False)


def round_trip_problem(output: Any) -> Optional[str]:
    """Return a description if output is not JSON round-trip stable, else None."""
    try:
        first = _dumps(output)
        parsed = json.loads(first)
        second = _dumps(parsed)
    except (TypeError, ValueError) as e:
        return f"JSON serialization failed: {e}"
    if first != second or parsed != output:
        return "JSON serialization is not stable (round-trip failed)"
    try:
        first.encode("utf-8")
    except UnicodeEncodeError:
        return "JSON text is not valid UTF-8 (unpaired surrogate)"
    return None


def _max_chart_count(config: AnalysisConfig) -> int:
    return min(int(config.max_charts), constants.MAX_CHARTS)


def _max_report_size(config: AnalysisConfig) -> int:
    limit = min(int(config.max_report_length), constants.MAX_REPORT_LENGTH)
    return limit + len(constants.TRUNCATION_NOTICE)


# ============================================================================
# Strict mode
# ============================================================================

def validate_output(output: Any, config: Optional[AnalysisConfig] = None) -> Dict[str, Any]:
    """
    Validate an output dict against the contract.

    Args:
        output: Candidate output
        config: Analysis configuration (chart cap, report length)

    Returns:
        The same output, unchanged

    Raises:
        OutputFormattingError: On the first violation found
    """
    config = config or DEFAULT_CONFIG

    if not isinstance(output, dict):
        raise OutputFormattingError("Output must be an object", output_type="json")
    keys = set(output)
    if keys != set(constants.OUTPUT_KEYS):
        missing = sorted(set(constants.OUTPUT_KEYS) - keys)
        extra = sorted(str(k) for k in keys - set(constants.OUTPUT_KEYS))
        raise OutputFormattingError(
            f"Output must contain exactly {', '.join(constants.OUTPUT_KEYS)} "
            f"(missing: {missing or 'none'}, unexpected: {extra or 'none'})",
            output_type="json"
        )

    charts = output["charts_to_generate"]
    if not isinstance(charts, list):
        raise OutputFormattingError("charts_to_generate must be an array", output_type="charts")
    if len(charts) > _max_chart_count(config):
        raise OutputFormattingError(
            f"Too many charts ({len(charts)}); at most {_max_chart_count(config)} are allowed",
            output_type="charts"
        )
    seen = set()
    for index, chart in enumerate(charts):
        problems = chart_problems(chart)
        if problems:
            raise OutputFormattingError(f"Chart {index}: {'; '.join(problems)}", output_type="charts")
        key = (chart["type"], chart["xAxis"], chart["yAxis"])
        if key in seen:
            raise OutputFormattingError(f"Chart {index}: duplicate chart key {key}", output_type="charts")
        seen.add(key)

    report = output["full_analysis_report_markdown"]
    if not isinstance(report, str) or not report.strip():
        raise OutputFormattingError(
            "full_analysis_report_markdown must be a non-empty string", output_type="markdown"
        )
    if len(report) > _max_report_size(config):
        raise OutputFormattingError(
            f"Report length {len(report):,} exceeds maximum of {config.max_report_length:,}",
            output_type="markdown"
        )

    problem = round_trip_problem(output)
    if problem:
        raise OutputFormattingError(problem, output_type="json")
    return output


def format_output(charts: Sequence[Any], report: str,
                  config: Optional[AnalysisConfig] = None) -> Dict[str, Any]:
    """
    Build and strictly validate the output dict.

    Args:
        charts: ChartRecommendation objects or chart dicts
        report: Markdown report

    Returns:
        Output-contract dict

    Raises:
        OutputFormattingError: If the result violates the contract
    """
    if not isinstance(charts, (list, tuple)):
        raise OutputFormattingError("charts_to_generate must be an array", output_type="charts")
    output = {
        "charts_to_generate": [_chart_to_dict(chart) for chart in charts],
        "full_analysis_report_markdown": report,
    }
    return validate_output(output, config)


# ============================================================================
# Robust mode
# ============================================================================

def format_output_robust(charts: Any, report: Any,
                         config: Optional[AnalysisConfig] = None) -> FormattingResult:
    """
    Build a structurally valid output, repairing problems instead of raising.

    Repairs applied (each adds a warning):
        - non-list charts replaced by an empty list
        - malformed or duplicate chart entries removed
        - invalid or empty report replaced by a fallback report
        - unsafe characters cleaned and oversized reports truncated
        - chart list capped at the configured maximum

    Returns:
        FormattingResult with output, warnings and metrics
    """
    config = config or DEFAULT_CONFIG
    warnings: List[str] = []

    if not isinstance(charts, (list, tuple)):
        warnings.append("No charts provided - using empty array")
        charts = []
    original_count = len(charts)

    clean_charts: List[Dict[str, str]] = []
    seen = set()
    for index, chart in enumerate(charts):
        candidate = convert_to_json_serializable(_chart_to_dict(chart))
        problems = chart_problems(candidate)
        if problems:
            warnings.append(f"Removed malformed chart at index {index}: {'; '.join(problems)}")
            continue
        key = (candidate["type"], candidate["xAxis"], candidate["yAxis"])
        if key in seen:
            warnings.append(f"Removed duplicate chart at index {index}: {key}")
            continue
        seen.add(key)
        clean_charts.append({name: candidate[name] for name in constants.CHART_FIELDS})

    chart_cap = _max_chart_count(config)
    if len(clean_charts) > chart_cap:
        warnings.append(f"Too many charts ({len(clean_charts)}) - limiting to first {chart_cap}")
        clean_charts = clean_charts[:chart_cap]

    if not isinstance(report, str) or not report.strip():
        warnings.append("Invalid or empty report - using fallback")
        report = templates.FALLBACK_OUTPUT_REPORT
    if UNSAFE_TEXT_PATTERN.search(report) or "\r" in report:
        warnings.append("Report contains invalid characters - cleaned")
    if len(report) > config.max_report_length:
        warnings.append("Report truncated due to excessive length")
    report = postprocess_report(report, int(config.max_report_length))
    if not report:
        warnings.append("Report was empty after cleanup - using fallback")
        report = templates.FALLBACK_OUTPUT_REPORT

    output = {"charts_to_generate": clean_charts, "full_analysis_report_markdown": report}

    problem = round_trip_problem(output)
    if problem:
        warnings.append(f"Final validation failed: {problem}")
        output = {"charts_to_generate": [], "full_analysis_report_markdown": templates.FALLBACK_OUTPUT_REPORT}

    for warning in warnings:
        logger.warning(f"Output repaired: {warning}")

    return FormattingResult(
        output=output,
        warnings=warnings,
        metrics={
            "original_chart_count": original_count,
            "final_chart_count": len(output["charts_to_generate"]),
            "report_length": len(output["full_analysis_report_markdown"]),
        },
    )


# ============================================================================
# Compliance check
# ============================================================================

def _check_charts(charts: Any, config: AnalysisConfig, errors: List[str], warnings: List[str]) -> int:
    if not isinstance(charts, list):
        errors.append("charts_to_generate must be an array")
        return 0

    if len(charts) > _max_chart_count(config):
        errors.append(f"Too many charts ({len(charts)}); at most {_max_chart_count(config)} are allowed")

    keys: List[Tuple[str, str, str]] = []
    for index, chart in enumerate(charts):
        problems = chart_problems(chart)
        if problems:
            errors.extend(f"Chart {index}: {problem}" for problem in problems)
            continue
        if len(chart["title"]) < MIN_TITLE_LENGTH:
            warnings.append(f"Chart {index}: Title may be too short: '{chart['title']}'")
        if chart["xAxis"] == chart["yAxis"]:
            warnings.append(f"Chart {index}: Same column used for both axes: '{chart['xAxis']}'")
        keys.append((chart["type"], chart["xAxis"], chart["yAxis"]))

    duplicates = [key for key, count in Counter(keys).items() if count > 1]
    if duplicates:
        warnings.append(
            "Potential duplicate charts detected: " + ", ".join(":".join(key) for key in duplicates)
        )
    if len(charts) > 3 and len({key[0] for key in keys}) == 1:
        warnings.append("All charts are of the same type - consider adding diversity")
    return len(charts)


def _check_report(report: Any, config: AnalysisConfig, errors: List[str],
                  warnings: List[str]) -> Tuple[int, bool]:
    if not isinstance(report, str):
        errors.append("full_analysis_report_markdown must be a string")
        return 0, False
    if not report.strip():
        errors.append("full_analysis_report_markdown cannot be empty")
        return 0, False
    if len(report) > _max_report_size(config):
        errors.append(f"Report length {len(report):,} exceeds maximum of {config.max_report_length:,}")

    missing = [section for section in templates.RECOMMENDED_SECTIONS if section not in report]
    if missing:
        warnings.append(f"Missing recommended sections: {', '.join(missing)}")

    lines = report.split("\n")
    if not any(line.startswith("# ") for line in lines):
        warnings.append("Report should have a main heading (# )")
    if not any(line.startswith("## ") for line in lines):
        warnings.append("Report should have section headings (## )")

    if len(report) < MIN_REPORT_LENGTH:
        warnings.append("Report may be too short for comprehensive analysis")
    elif len(report) > LONG_REPORT_LENGTH:
        warnings.append("Report may be too long - consider condensing")

    lowered = report.lower()
    if not any(keyword in lowered for keyword in ACTIONABLE_KEYWORDS):
        warnings.append("Report may lack actionable recommendations")
    return len(report), not missing


def check_compliance(output: Any, config: Optional[AnalysisConfig] = None) -> ComplianceReport:
    """
    Pre-flight check of an output dict. Never raises and never mutates output.

    Returns:
        ComplianceReport; is_valid is False when any contract error was found
    """
    config = config or DEFAULT_CONFIG
    errors: List[str] = []
    warnings: List[str] = []

    if not isinstance(output, dict):
        return ComplianceReport(
            is_valid=False,
            errors=["Output must be an object"],
            metrics={"chart_count": 0, "report_length": 0,
                     "has_required_sections": False, "json_size": 0},
        )

    missing = [key for key in constants.OUTPUT_KEYS if key not in output]
    extra = sorted(str(key) for key in output if key not in constants.OUTPUT_KEYS)
    if missing:
        errors.append(f"Missing required keys: {', '.join(missing)}")
    if extra:
        errors.append(f"Unexpected keys: {', '.join(extra)}")

    chart_count = _check_charts(output.get("charts_to_generate"), config, errors, warnings) \
        if "charts_to_generate" in output else 0
    report_length, has_sections = _check_report(output.get("full_analysis_report_markdown"),
                                                 config, errors, warnings) \
        if "full_analysis_report_markdown" in output else (0, False)

    json_size = 0
    problem = round_trip_problem(output)
    if problem:
        errors.append(problem)
    else:
        json_size = len(_dumps(output).encode("utf-8", errors="replace"))

    return ComplianceReport(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        metrics={
            "chart_count": chart_count,
            "report_length": report_length,
            "has_required_sections": has_sections,
            "json_size": json_size,
        },
    )


# ============================================================================
# JSON string helpers
# ============================================================================

def to_json_string(output: Dict[str, Any], config: Optional[AnalysisConfig] = None,
                   indent: Optional[int] = None) -> str:
    """
    Strictly validate and serialize an output dict.

    Raises:
        OutputFormattingError: If output violates the contract
    """
    validate_output(output, config)
    return json.dumps(output, ensure_ascii=False, allow_nan=False, indent=indent)


def parse_json_string(text: str, config: Optional[AnalysisConfig] = None) -> Dict[str, Any]:
    """
    Parse and strictly validate a serialized output.

    Leading or trailing whitespace is rejected so that a stored output is
    byte-for-byte what to_json_string() produced.

    Raises:
        OutputFormattingError: Not a string, padded, invalid JSON or contract violation
    """
    if not isinstance(text, str):
        raise OutputFormattingError("JSON input must be a string", output_type="json")
    if text != text.strip():
        raise OutputFormattingError("JSON input has leading or trailing whitespace", output_type="json")
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise OutputFormattingError(f"Invalid JSON: {e.msg}", output_type="json", original_exception=e)
    return validate_output(parsed, config)
