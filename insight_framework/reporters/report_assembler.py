"""
Report Assembler - markdown analysis report from insights and column metadata.

The report is built from SECTION_TABLE, an ordered list of
(section id, generator, fallback text) entries evaluated identically:
each generator runs under its own guard and a failure substitutes that
section's fallback text. Non-empty sections are joined with blank lines.
If every section fails, or the joined text is empty, a complete canned
report is used instead, so the assembler never returns an empty string.

The joined text is then post-processed for safe JSON embedding:
    1. Line endings normalized to '\\n'
    2. Control characters (except newline and tab), U+2028, U+2029 and
       the byte-order mark removed
    3. Unicode normalized to NFC
    4. Surrounding whitespace trimmed
    5. Truncated to the maximum length with a truncation notice appended
"""

import logging
import re
import unicodedata
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from insight_framework.core import constants
from insight_framework.core.budget import Deadline, unbounded
from insight_framework.core.config import AnalysisConfig, DEFAULT_CONFIG
from insight_framework.core.exceptions import AnalysisTimeoutError, ReportGenerationError
from insight_framework.core.models import BusinessInsights, ColumnInfo, DataQualityMetrics
from insight_framework.profiler import insight_templates as templates

logger = logging.getLogger(__name__)

UNSAFE_TEXT_PATTERN = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\u2028\u2029\ufeff\ud800-\udfff]')


@dataclass
class ReportContext:
    """Everything a section generator may read."""
    insights: BusinessInsights
    columns: Sequence[ColumnInfo]
    quality: DataQualityMetrics
    column_stats: Dict[str, Dict[str, Any]] = field(default_factory=dict)


@dataclass(frozen=True)
class ReportSection:
    """One entry of the section table."""
    section_id: str
    generate: Callable[[ReportContext], str]
    fallback: str


# ============================================================================
# Section generators
# ============================================================================

def executive_summary(ctx: ReportContext) -> str:
    parts = [
        templates.EXECUTIVE_SUMMARY_HEADING,
        templates.SUMMARY_DOMAIN.format(domain=ctx.insights.industry_domain),
    ]
    if ctx.insights.primary_value_columns:
        parts.append(templates.SUMMARY_PRIMARY.format(
            columns=", ".join(ctx.insights.primary_value_columns)
        ))
    if ctx.insights.dataset_potential:
        parts.append(ctx.insights.dataset_potential)
    return "\n\n".join(parts)


def _describe_stats(stats: Dict[str, Any]) -> str:
    if not stats:
        return ""
    if "mean" in stats:
        return (f"range {stats['min']} to {stats['max']}, "
                f"mean {stats['mean']}, median {stats['median']}")
    if "mode" in stats:
        return f"most frequent value '{stats['mode']}' ({stats['mode_count']}x)"
    return ""


def statistical_analysis(ctx: ReportContext) -> str:
    lines = [templates.STATISTICAL_ANALYSIS_HEADING, "", "## Dataset Overview", ""]
    lines.append(f"- **Total Columns**: {len(ctx.columns)}")
    type_counts = Counter(c.inferred_type for c in ctx.columns)
    for column_type in constants.COLUMN_TYPES:
        if type_counts.get(column_type):
            lines.append(f"- **{column_type.capitalize()} Columns**: {type_counts[column_type]}")
    lines.append(f"- **Data Completeness**: {ctx.quality.completeness * 100:.1f}%")
    lines.append(f"- **Data Consistency**: {ctx.quality.consistency * 100:.1f}%")

    if ctx.quality.issues:
        lines += ["", "## Data Quality Issues", ""]
        lines += [f"- {issue}" for issue in ctx.quality.issues]

    lines += ["", "## Column Analysis"]
    headings = {
        "numerical": "### Numerical Columns",
        "categorical": "### Categorical Columns",
        "datetime": "### Temporal Columns",
        "text": "### Text Columns",
    }
    for column_type in constants.COLUMN_TYPES:
        group = [c for c in ctx.columns if c.inferred_type == column_type]
        if not group:
            continue
        lines += ["", headings[column_type]]
        for column in group:
            if column_type == "categorical":
                detail = f"{column.unique_value_count} categories"
            else:
                detail = f"{column.unique_value_count} unique values"
            described = _describe_stats(ctx.column_stats.get(column.name, {}))
            if described:
                detail += f", {described}"
            if column.has_missing:
                detail += ", contains missing values"
            lines.append(f"- **{column.name}**: {detail}")
    return "\n".join(lines)


def relationship_insights(ctx: ReportContext) -> str:
    parts = [templates.RELATIONSHIP_INSIGHTS_HEADING]
    correlations = ctx.insights.potential_correlations
    if not correlations:
        parts.append(templates.NO_RELATIONSHIPS)
        return "\n\n".join(parts)

    parts.append("The following potential relationships have been identified:")
    parts.append("\n".join(f"{i}. **{text}**" for i, text in enumerate(correlations, start=1)))
    parts.append(templates.RELATIONSHIP_RECOMMENDATIONS)
    return "\n\n".join(parts)


def actionable_questions(ctx: ReportContext) -> str:
    parts = [
        templates.ACTIONABLE_QUESTIONS_HEADING,
        "Based on the dataset analysis, the following strategic questions can be addressed:",
    ]
    for i, question in enumerate(ctx.insights.actionable_questions, start=1):
        parts.append(f"## {i}. {question}")
    parts.append(templates.QUESTION_EXPLORATION)
    return "\n\n".join(parts)


def conclusion(ctx: ReportContext) -> str:
    parts = [templates.CONCLUSION_HEADING, templates.DATASET_POTENTIAL_HEADING]
    parts.append(ctx.insights.dataset_potential or templates.POTENTIAL_CLOSING)
    parts.append(templates.RECOMMENDED_ACTIONS)
    parts.append("## Strategic Value")
    parts.append(templates.STRATEGIC_VALUE.format(domain=ctx.insights.industry_domain.lower()))
    return "\n\n".join(parts)


SECTION_TABLE: Tuple[ReportSection, ...] = (
    ReportSection("executive_summary", executive_summary,
                  templates.SECTION_FALLBACKS["executive_summary"]),
    ReportSection("statistical_analysis", statistical_analysis,
                  templates.SECTION_FALLBACKS["statistical_analysis"]),
    ReportSection("relationship_insights", relationship_insights,
                  templates.SECTION_FALLBACKS["relationship_insights"]),
    ReportSection("actionable_questions", actionable_questions,
                  templates.SECTION_FALLBACKS["actionable_questions"]),
    ReportSection("conclusion", conclusion,
                  templates.SECTION_FALLBACKS["conclusion"]),
)


# ============================================================================
# Post-processing
# ============================================================================

def postprocess_report(text: str, max_length: int = constants.MAX_REPORT_LENGTH) -> str:
    """
    Make report text safe for JSON embedding and bounded in size.

    Args:
        text: Raw markdown
        max_length: Characters kept before the truncation notice is appended

    Returns:
        Cleaned text; at most max_length + len(TRUNCATION_NOTICE) characters
    """
    cleaned = text.replace("\r\n", "\n").replace("\r", "\n")
    cleaned = UNSAFE_TEXT_PATTERN.sub("", cleaned)
    cleaned = unicodedata.normalize("NFC", cleaned)
    cleaned = cleaned.strip()
    if len(cleaned) > max_length:
        logger.warning(f"Report truncated from {len(cleaned):,} to {max_length:,} characters")
        cleaned = cleaned[:max_length] + constants.TRUNCATION_NOTICE
    return cleaned


# ============================================================================
# Assembly
# ============================================================================

class ReportAssembler:
    """
    Evaluates the section table into one markdown report.

    Attributes:
        sections: Section table to evaluate (SECTION_TABLE by default)
    """

    def __init__(self, config: Optional[AnalysisConfig] = None,
                 sections: Sequence[ReportSection] = SECTION_TABLE):
        self.config = config or DEFAULT_CONFIG
        self.sections = tuple(sections)

    def _render_section(self, section: ReportSection, ctx: ReportContext) -> Tuple[str, bool]:
        """Returns (text, failed)."""
        try:
            return section.generate(ctx), False
        except AnalysisTimeoutError:
            raise
        except Exception as e:
            error = ReportGenerationError(f"Section '{section.section_id}' failed: {e}",
                                          report_section=section.section_id, original_exception=e)
            logger.warning(f"{error.message}; using fallback text")
            return section.fallback, True

    def assemble(
        self,
        insights: BusinessInsights,
        columns: Sequence[ColumnInfo],
        quality: DataQualityMetrics,
        column_stats: Optional[Dict[str, Dict[str, Any]]] = None,
        budget: Optional[Deadline] = None
    ) -> str:
        """
        Build the full markdown report.

        Returns:
            Non-empty, post-processed markdown

        Raises:
            AnalysisTimeoutError: If the budget runs out between sections
        """
        budget = budget or unbounded("report generation")
        ctx = ReportContext(insights=insights, columns=columns, quality=quality,
                            column_stats=column_stats or {})

        rendered: List[str] = []
        failures = 0
        for section in self.sections:
            budget.check()
            text, failed = self._render_section(section, ctx)
            failures += failed
            if text and text.strip():
                rendered.append(text.strip())

        report = "\n\n".join(rendered)
        if failures == len(self.sections) or not report.strip():
            logger.warning("Every report section failed or was empty; using fallback report")
            report = self._fallback_report(insights, columns)

        report = postprocess_report(report, int(self.config.max_report_length))
        if not report:
            report = postprocess_report(self._fallback_report(insights, columns),
                                        int(self.config.max_report_length))
        return report

    @staticmethod
    def _fallback_report(insights: Any, columns: Sequence[Any]) -> str:
        domain = getattr(insights, "industry_domain", "") or constants.DEFAULT_INDUSTRY_DOMAIN
        try:
            column_count = len(columns)
        except TypeError:
            column_count = 0
        return templates.fallback_report(column_count, domain)


def assemble_report(
    insights: BusinessInsights,
    columns: Sequence[ColumnInfo],
    quality: DataQualityMetrics,
    column_stats: Optional[Dict[str, Dict[str, Any]]] = None,
    config: Optional[AnalysisConfig] = None,
    budget: Optional[Deadline] = None
) -> str:
    """Module-level shortcut for ReportAssembler(config).assemble()."""
    return ReportAssembler(config).assemble(insights, columns, quality, column_stats, budget)
