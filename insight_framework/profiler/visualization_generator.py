"""
Visualization Generator - chart recommendations from column metadata.

Turns a list of ColumnInfo into a bounded, deduplicated, aspect-diverse list
of ChartRecommendation objects. Nothing is rendered; each recommendation is a
(title, type, xAxis, yAxis) tuple for downstream chart code.

Architecture:
    1. Partition columns once into type buckets (numerical, categorical,
       datetime, chartable text), each capped at a fixed column ceiling
    2. Run the chart families in a fixed order: bar, line, scatter.
       Each family yields (chart, aspect) candidates; each aspect within a
       family stops at a fixed candidate ceiling
    3. Every candidate goes through ChartGenerationContext.add(), which
       rejects duplicate (type, xAxis, yAxis) keys and self-pairs
    4. If more candidates survive than the output cap allows, keep the
       first chart of every analytical aspect, then fill in generation order
    5. If nothing survives but columns exist, return a single fallback chart

All working state lives in a ChartGenerationContext created per call, so
sequential or concurrent calls never share dedup state.

Usage:
    charts = generate_charts(columns)
    charts, stats = generate_charts_with_stats(columns)
"""

import logging
import re
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterator, List, Optional, Sequence, Set, Tuple

from insight_framework.core import constants
from insight_framework.core.budget import Deadline, unbounded
from insight_framework.core.config import AnalysisConfig, DEFAULT_CONFIG
from insight_framework.core.exceptions import AnalysisTimeoutError, ChartGenerationError
from insight_framework.core.models import ChartRecommendation, ColumnInfo

logger = logging.getLogger(__name__)


# Analytical aspects used for diversity selection
DISTRIBUTION = "Distribution"
COMPARISON = "Comparison"
CORRELATION = "Correlation"
TREND = "Trend"
COMPOSITION = "Composition"

ANALYTICAL_ASPECTS = (DISTRIBUTION, COMPARISON, CORRELATION, TREND, COMPOSITION)

Candidate = Tuple[ChartRecommendation, str]


@dataclass
class ColumnBuckets:
    """Columns partitioned by inferred type, each list capped at the bucket ceiling."""
    numerical: List[ColumnInfo] = field(default_factory=list)
    categorical: List[ColumnInfo] = field(default_factory=list)
    datetime: List[ColumnInfo] = field(default_factory=list)
    chartable_text: List[ColumnInfo] = field(default_factory=list)

    @classmethod
    def partition(cls, columns: Sequence[ColumnInfo], config: AnalysisConfig) -> "ColumnBuckets":
        buckets = cls()
        ceiling = int(config.bucket_column_ceiling)
        for column in columns:
            if column.unique_value_count == 0:
                continue
            if column.inferred_type == "numerical":
                target = buckets.numerical
            elif column.inferred_type == "categorical":
                target = buckets.categorical
            elif column.inferred_type == "datetime":
                target = buckets.datetime
            elif (column.inferred_type == "text"
                  and column.unique_value_count <= config.chartable_text_max_unique):
                target = buckets.chartable_text
            else:
                continue
            if len(target) < ceiling:
                target.append(column)
        return buckets


@dataclass
class ChartGenerationStats:
    """
    Summary of one chart generation run.

    Attributes:
        total_charts: Charts returned
        aspect_coverage: Aspect name -> number of returned charts
        diversity_score: Covered aspects / all aspects (0.0 to 1.0)
        candidates_considered: Candidates offered to the dedup filter
        duplicates_rejected: Candidates dropped as duplicate keys or self-pairs
        capped: True if the output cap removed candidates
        used_fallback: True if the fallback chart set was returned
    """
    total_charts: int = 0
    aspect_coverage: Dict[str, int] = field(default_factory=dict)
    diversity_score: float = 0.0
    candidates_considered: int = 0
    duplicates_rejected: int = 0
    capped: bool = False
    used_fallback: bool = False

    def to_dict(self) -> Dict:
        return {
            "total_charts": self.total_charts,
            "aspect_coverage": dict(self.aspect_coverage),
            "diversity_score": round(self.diversity_score, 4),
            "candidates_considered": self.candidates_considered,
            "duplicates_rejected": self.duplicates_rejected,
            "capped": self.capped,
            "used_fallback": self.used_fallback,
        }


class ChartGenerationContext:
    """
    Per-call working state for chart generation.

    Holds the seen-key set and the accepted (chart, aspect) pairs. A new
    context is created for every generate() call and discarded afterwards.
    """

    def __init__(self, config: AnalysisConfig, budget: Deadline):
        self.config = config
        self.budget = budget
        self.seen_keys: Set[Tuple[str, str, str]] = set()
        self.accepted: List[Candidate] = []
        self.considered = 0
        self.rejected = 0

    def add(self, chart: ChartRecommendation, aspect: str) -> bool:
        """
        Accept a candidate unless its key was seen or it plots a column against itself.

        Returns:
            True if the candidate was accepted
        """
        self.considered += 1
        if chart.x_axis == chart.y_axis and chart.y_axis != constants.COUNT_AXIS:
            self.rejected += 1
            return False
        if chart.key in self.seen_keys:
            self.rejected += 1
            return False
        self.seen_keys.add(chart.key)
        self.accepted.append((chart, aspect))
        return True


def is_sequential_column(column: ColumnInfo) -> bool:
    """True if a column name reads like an index or ordering (row_id, SequenceNo, rank)."""
    spaced = re.sub(r'([a-z0-9])([A-Z])', r'\1 \2', column.name)
    tokens = re.findall(r'[a-z]+', spaced.lower())
    return any(token in constants.SEQUENTIAL_NAME_TOKENS for token in tokens)


class VisualizationGenerator:
    """
    Generates chart recommendations for a list of columns.

    Chart families run in a fixed order and each family yields candidates in
    a fixed order, so identical columns always produce identical charts.

    Example:
        >>> generator = VisualizationGenerator()
        >>> [c.title for c in generator.generate(columns)]
        ['price by product', 'sales by product', 'sales vs price']
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or DEFAULT_CONFIG

    # ------------------------------------------------------------------
    # Chart families
    # ------------------------------------------------------------------

    def _bar_candidates(self, buckets: ColumnBuckets) -> Iterator[Candidate]:
        groupers = [(c, COMPARISON) for c in buckets.categorical] + \
                   [(c, COMPOSITION) for c in buckets.chartable_text]

        if buckets.numerical:
            for grouper, aspect in groupers:
                for num in buckets.numerical:
                    yield ChartRecommendation(
                        title=f"{num.name} by {grouper.name}",
                        type="bar",
                        x_axis=grouper.name,
                        y_axis=num.name,
                    ), aspect
        else:
            for grouper, _ in groupers:
                yield ChartRecommendation(
                    title=f"Distribution of {grouper.name}",
                    type="bar",
                    x_axis=grouper.name,
                    y_axis=constants.COUNT_AXIS,
                ), DISTRIBUTION

    def _line_candidates(self, buckets: ColumnBuckets) -> Iterator[Candidate]:
        for date_col in buckets.datetime:
            for num in buckets.numerical:
                yield ChartRecommendation(
                    title=f"{num.name} over {date_col.name}",
                    type="line",
                    x_axis=date_col.name,
                    y_axis=num.name,
                ), TREND

        for seq_col in (c for c in buckets.numerical if is_sequential_column(c)):
            for num in buckets.numerical:
                if num.name == seq_col.name:
                    continue
                yield ChartRecommendation(
                    title=f"{num.name} trend over {seq_col.name}",
                    type="line",
                    x_axis=seq_col.name,
                    y_axis=num.name,
                ), TREND

    def _scatter_candidates(self, buckets: ColumnBuckets) -> Iterator[Candidate]:
        capped = buckets.numerical[:int(self.config.scatter_column_cap)]

        for x_col, y_col in combinations(capped, 2):
            extra = self._third_dimension(capped, x_col, y_col, buckets)
            if extra:
                # Enhanced variant shares the base key, so dedup keeps only this one
                yield ChartRecommendation(
                    title=f"{y_col.name} vs {x_col.name} {extra}",
                    type="scatter",
                    x_axis=x_col.name,
                    y_axis=y_col.name,
                ), CORRELATION
            yield ChartRecommendation(
                title=f"{y_col.name} vs {x_col.name}",
                type="scatter",
                x_axis=x_col.name,
                y_axis=y_col.name,
            ), CORRELATION

    @staticmethod
    def _third_dimension(capped: List[ColumnInfo], x_col: ColumnInfo, y_col: ColumnInfo,
                         buckets: ColumnBuckets) -> str:
        for column in capped:
            if column.name not in (x_col.name, y_col.name):
                return f"(sized by {column.name})"
        if buckets.categorical:
            return f"(colored by {buckets.categorical[0].name})"
        return ""

    def _families(self):
        return (
            ("bar", self._bar_candidates),
            ("line", self._line_candidates),
            ("scatter", self._scatter_candidates),
        )

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def _select(self, accepted: List[Candidate]) -> List[Candidate]:
        """Apply the output cap: one chart per aspect first, then generation order."""
        cap = int(self.config.max_charts)
        if len(accepted) <= cap:
            return accepted

        chosen: Set[int] = set()
        covered: Set[str] = set()
        for index, (_, aspect) in enumerate(accepted):
            if aspect not in covered:
                covered.add(aspect)
                chosen.add(index)
        for index in range(len(accepted)):
            if len(chosen) >= cap:
                break
            chosen.add(index)

        selected = sorted(chosen)[:cap]
        return [accepted[i] for i in selected]

    def _fallback(self, columns: Sequence[ColumnInfo]) -> List[Candidate]:
        """Single count bar chart on the first column that has data."""
        if not columns:
            return []
        column = next((c for c in columns if c.unique_value_count > 0), columns[0])
        if column.inferred_type == "numerical":
            title = f"Distribution of {column.name}"
        elif column.inferred_type == "categorical":
            title = f"{column.name} Categories"
        else:
            title = f"Analysis of {column.name}"
        chart = ChartRecommendation(title=title, type="bar", x_axis=column.name,
                                    y_axis=constants.COUNT_AXIS)
        return [(chart, DISTRIBUTION)]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate_with_stats(
        self,
        columns: Sequence[ColumnInfo],
        budget: Optional[Deadline] = None
    ) -> Tuple[Tuple[ChartRecommendation, ...], ChartGenerationStats]:
        """
        Generate charts and a summary of how they were chosen.

        Args:
            columns: Inferred column metadata
            budget: Deadline checked per candidate

        Returns:
            Tuple of (charts, stats)

        Raises:
            AnalysisTimeoutError: If the budget runs out (never absorbed)
        """
        budget = budget or unbounded("chart generation")
        context = ChartGenerationContext(self.config, budget)
        stats = ChartGenerationStats()
        columns = list(columns or [])

        try:
            buckets = ColumnBuckets.partition(columns, self.config)
            # Candidate ceiling per (family, aspect): twice the output cap.
            # Counted per aspect so every aspect a family yields reaches selection.
            ceiling = 2 * int(self.config.max_charts)
            for family, candidates in self._families():
                produced: Dict[str, int] = {}
                for chart, aspect in candidates(buckets):
                    budget.check()
                    if produced.get(aspect, 0) >= ceiling:
                        continue
                    produced[aspect] = produced.get(aspect, 0) + 1
                    if produced[aspect] == ceiling:
                        logger.debug(f"{family} {aspect} candidates reached ceiling {ceiling}")
                    context.add(chart, aspect)
            selected = self._select(context.accepted)
            stats.capped = len(selected) < len(context.accepted)
        except AnalysisTimeoutError:
            raise
        except Exception as e:
            error = ChartGenerationError(f"Chart generation failed: {e}", original_exception=e)
            logger.warning(f"{error.message}; using fallback charts")
            selected = []

        stats.candidates_considered = context.considered
        stats.duplicates_rejected = context.rejected

        if not selected and columns:
            selected = self._fallback(columns)
            stats.used_fallback = True

        for _, aspect in selected:
            stats.aspect_coverage[aspect] = stats.aspect_coverage.get(aspect, 0) + 1
        stats.total_charts = len(selected)
        stats.diversity_score = len(stats.aspect_coverage) / len(ANALYTICAL_ASPECTS)

        logger.debug(
            f"Generated {stats.total_charts} charts from {stats.candidates_considered} candidates "
            f"({stats.duplicates_rejected} rejected, fallback={stats.used_fallback})"
        )
        return tuple(chart for chart, _ in selected), stats

    def generate(self, columns: Sequence[ColumnInfo],
                 budget: Optional[Deadline] = None) -> Tuple[ChartRecommendation, ...]:
        """Generate chart recommendations (see generate_with_stats)."""
        charts, _ = self.generate_with_stats(columns, budget)
        return charts


def generate_charts(columns: Sequence[ColumnInfo], config: Optional[AnalysisConfig] = None,
                    budget: Optional[Deadline] = None) -> Tuple[ChartRecommendation, ...]:
    """Module-level shortcut for VisualizationGenerator(config).generate()."""
    return VisualizationGenerator(config).generate(columns, budget)


def generate_charts_with_stats(
    columns: Sequence[ColumnInfo],
    config: Optional[AnalysisConfig] = None,
    budget: Optional[Deadline] = None
) -> Tuple[Tuple[ChartRecommendation, ...], ChartGenerationStats]:
    """Module-level shortcut for VisualizationGenerator(config).generate_with_stats()."""
    return VisualizationGenerator(config).generate_with_stats(columns, budget)
