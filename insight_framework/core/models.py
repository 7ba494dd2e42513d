"""
Data structures passed between analysis stages.

All entities are created once per analysis call and handed to the next
stage as-is. They are frozen dataclasses holding tuples, so a stage that
needs a variation builds a new instance instead of editing one in place.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional, Tuple


@dataclass(frozen=True)
class ColumnInfo:
    """
    Inferred metadata for one column.

    Attributes:
        name: Column header
        inferred_type: One of 'numerical', 'categorical', 'datetime', 'text'
        unique_value_count: Distinct non-null values
        has_missing: True if any value is None, empty string or NaN
        sample_values: First 5 raw values (nulls included)
    """
    name: str
    inferred_type: str
    unique_value_count: int = 0
    has_missing: bool = False
    sample_values: Tuple[Any, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "name": self.name,
            "inferredType": self.inferred_type,
            "uniqueValueCount": self.unique_value_count,
            "hasMissing": self.has_missing,
            "sampleValues": list(self.sample_values),
        }


@dataclass(frozen=True)
class DataQualityMetrics:
    """
    Heuristic quality scores computed from the raw rows.

    Attributes:
        completeness: Share of non-empty cells (0.0 to 1.0)
        consistency: 1.0 minus per-column penalties, floored at 0.0
        issues: Ordered, human-readable issue descriptions
    """
    completeness: float
    consistency: float
    issues: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "completeness": round(float(self.completeness), 4),
            "consistency": round(float(self.consistency), 4),
            "issues": list(self.issues),
        }


@dataclass(frozen=True)
class ChartRecommendation:
    """
    A suggested visualization (not a rendered chart).

    Attributes:
        title: Descriptive chart title
        type: 'bar', 'line' or 'scatter'
        x_axis: Column plotted on the x axis
        y_axis: Column plotted on the y axis, or 'Count'
    """
    title: str
    type: str
    x_axis: str
    y_axis: str

    @property
    def key(self) -> Tuple[str, str, str]:
        """Deduplication key: (type, xAxis, yAxis)."""
        return (self.type, self.x_axis, self.y_axis)

    def to_dict(self) -> Dict[str, str]:
        """Convert to the output-contract chart object."""
        return {
            "title": self.title,
            "type": self.type,
            "xAxis": self.x_axis,
            "yAxis": self.y_axis,
        }


@dataclass(frozen=True)
class BusinessInsights:
    """
    Heuristic business context for a dataset.

    Attributes:
        industry_domain: Detected domain label
        primary_value_columns: Up to 3 value-driving numerical columns
        potential_correlations: Descriptive relationship statements
        actionable_questions: Exactly 4 questions
        dataset_potential: Narrative assessment
    """
    industry_domain: str
    primary_value_columns: Tuple[str, ...] = ()
    potential_correlations: Tuple[str, ...] = ()
    actionable_questions: Tuple[str, ...] = ()
    dataset_potential: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "industryDomain": self.industry_domain,
            "primaryValueColumns": list(self.primary_value_columns),
            "potentialCorrelations": list(self.potential_correlations),
            "actionableQuestions": list(self.actionable_questions),
            "datasetPotential": self.dataset_potential,
        }


@dataclass(frozen=True)
class AnalysisOutput:
    """Final two-field analysis result."""
    charts_to_generate: Tuple[ChartRecommendation, ...]
    full_analysis_report_markdown: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the exact output-contract dictionary."""
        return {
            "charts_to_generate": [chart.to_dict() for chart in self.charts_to_generate],
            "full_analysis_report_markdown": self.full_analysis_report_markdown,
        }


@dataclass
class BatchResult:
    """
    Outcome of one dataset in a batch run.

    Exactly one of output / error is set.
    """
    index: int
    output: Optional[Dict[str, Any]] = None
    error: Optional[Dict[str, Any]] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {"index": self.index, "output": self.output, "error": self.error}


@dataclass
class ComplianceReport:
    """
    Result of a pre-flight output compliance check.

    Attributes:
        is_valid: True when no errors were found
        errors: Contract violations
        warnings: Advisory findings (quality, not contract)
        metrics: chart_count, report_length, has_required_sections, json_size
    """
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "metrics": dict(self.metrics),
        }


@dataclass
class FormattingResult:
    """
    Result of robust (self-healing) output formatting.

    Attributes:
        output: Structurally valid output-contract dictionary
        warnings: Every repair that was applied
        metrics: original_chart_count, final_chart_count, report_length
    """
    output: Dict[str, Any]
    warnings: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)
