"""
Unit tests for VisualizationGenerator.

Tests chart families, deduplication, the output cap with aspect diversity,
the fallback chart and per-call isolation of dedup state.
"""

import pytest
from insight_framework.core.budget import Deadline
from insight_framework.core.config import AnalysisConfig
from insight_framework.core.exceptions import AnalysisTimeoutError
from insight_framework.core.models import ChartRecommendation, ColumnInfo
from insight_framework.profiler.visualization_generator import (
    ChartGenerationContext,
    VisualizationGenerator,
    generate_charts,
    generate_charts_with_stats,
    is_sequential_column,
)


def column(name, inferred_type, unique=2):
    return ColumnInfo(name=name, inferred_type=inferred_type, unique_value_count=unique)


def keys(charts):
    return [chart.key for chart in charts]


@pytest.mark.unit
class TestChartFamilies:
    """Test which charts each column mix produces."""

    def test_product_price_sales(self):
        columns = [column("product", "text"), column("price", "numerical"),
                   column("sales", "numerical")]
        charts = generate_charts(columns)

        assert [c.title for c in charts] == ["price by product", "sales by product", "sales vs price"]
        assert [c.type for c in charts] == ["bar", "bar", "scatter"]

    def test_count_bars_without_numerical_columns(self):
        charts = generate_charts([column("region", "categorical")])

        assert len(charts) == 1
        assert charts[0].title == "Distribution of region"
        assert charts[0].y_axis == "Count"

    def test_line_over_dates(self):
        charts = generate_charts([column("date", "datetime"), column("revenue", "numerical")])

        assert ChartRecommendation("revenue over date", "line", "date", "revenue") in charts

    def test_line_over_sequential_column(self):
        columns = [column("row_index", "numerical"), column("score", "numerical")]
        charts = generate_charts(columns)

        assert ("line", "row_index", "score") in keys(charts)
        assert ("line", "row_index", "row_index") not in keys(charts)

    def test_scatter_enhanced_variant_replaces_base(self):
        columns = [column("a", "numerical"), column("b", "numerical"), column("c", "numerical")]
        charts = generate_charts(columns)
        scatter = [c for c in charts if c.type == "scatter"]

        assert scatter[0].title == "b vs a (sized by c)"
        assert len(scatter) == 3
        assert len(set(keys(scatter))) == 3

    def test_scatter_colored_by_category(self):
        columns = [column("segment", "categorical"), column("x", "numerical"), column("y", "numerical")]
        charts = generate_charts(columns)

        assert "y vs x (colored by segment)" in [c.title for c in charts]

    def test_high_cardinality_text_is_not_chartable(self):
        columns = [column("comment", "text", unique=50), column("value", "numerical")]
        charts = generate_charts(columns)

        assert all(c.x_axis != "comment" for c in charts)

    @pytest.mark.parametrize("name,expected", [
        ("row_id", True),
        ("SequenceNo", True),
        ("rank", True),
        ("price", False),
        ("video", False),
    ])
    def test_sequential_names(self, name, expected):
        assert is_sequential_column(column(name, "numerical")) is expected


@pytest.mark.unit
class TestDeduplication:
    """Test the per-call generation context."""

    def test_duplicate_key_rejected(self):
        context = ChartGenerationContext(AnalysisConfig(), Deadline("test", 10))
        first = ChartRecommendation("a", "bar", "x", "y")
        second = ChartRecommendation("different title", "bar", "x", "y")

        assert context.add(first, "Comparison")
        assert not context.add(second, "Comparison")
        assert context.rejected == 1

    def test_self_pair_rejected(self):
        context = ChartGenerationContext(AnalysisConfig(), Deadline("test", 10))

        assert not context.add(ChartRecommendation("x vs x", "scatter", "x", "x"), "Correlation")

    def test_count_axis_allowed(self):
        context = ChartGenerationContext(AnalysisConfig(), Deadline("test", 10))

        assert context.add(ChartRecommendation("Count", "bar", "Count", "Count"), "Distribution")

    def test_output_keys_unique(self):
        columns = [column(f"n{i}", "numerical") for i in range(6)] + \
                  [column("cat", "categorical"), column("day", "datetime")]
        charts = generate_charts(columns)

        assert len(keys(charts)) == len(set(keys(charts)))

    def test_calls_do_not_share_state(self):
        generator = VisualizationGenerator()
        columns = [column("product", "text"), column("price", "numerical"),
                   column("sales", "numerical")]

        assert generator.generate(columns) == generator.generate(columns)


@pytest.mark.unit
class TestCapAndDiversity:
    """Test the output cap keeps one chart per aspect first."""

    def test_cap_respected(self):
        config = AnalysisConfig(max_charts=4)
        columns = [column(f"c{i}", "categorical") for i in range(3)] + \
                  [column(f"n{i}", "numerical") for i in range(3)] + \
                  [column("day", "datetime")]
        charts, stats = generate_charts_with_stats(columns, config)

        assert len(charts) == 4
        assert stats.capped
        types = {c.type for c in charts}
        assert {"bar", "line", "scatter"} <= types

    def test_generation_order_kept_after_cap(self):
        config = AnalysisConfig(max_charts=3)
        columns = [column("cat", "categorical")] + [column(f"n{i}", "numerical") for i in range(4)]
        charts = generate_charts(columns, config)

        assert charts[0].type == "bar"
        assert charts[-1].type == "scatter"

    def test_composition_survives_many_comparison_bars(self):
        columns = [column(f"cat_{i}", "categorical") for i in range(5)] + \
                  [column("label", "text", unique=5)] + \
                  [column(f"n{i}", "numerical") for i in range(50)]
        charts, stats = generate_charts_with_stats(columns)

        assert len(charts) == 100
        assert any(c.type == "bar" and c.x_axis == "label" for c in charts)
        assert stats.aspect_coverage["Composition"] >= 1
        assert stats.aspect_coverage["Correlation"] >= 1

    def test_many_numerical_columns(self):
        columns = [column(f"metric_{i}", "numerical") for i in range(150)]
        charts, stats = generate_charts_with_stats(columns)

        scatter_columns = {c.x_axis for c in charts if c.type == "scatter"} | \
                          {c.y_axis for c in charts if c.type == "scatter"}
        assert len(charts) <= 100
        assert scatter_columns <= {f"metric_{i}" for i in range(5)}
        assert len([c for c in charts if c.type == "scatter"]) == 10

    def test_stats(self):
        columns = [column("product", "text"), column("price", "numerical"),
                   column("sales", "numerical")]
        _, stats = generate_charts_with_stats(columns)

        assert stats.total_charts == 3
        assert stats.aspect_coverage == {"Composition": 2, "Correlation": 1}
        assert stats.diversity_score == pytest.approx(0.4)
        assert not stats.used_fallback


@pytest.mark.unit
class TestFallback:
    """Test the single fallback chart."""

    def test_single_numerical_column(self):
        charts, stats = generate_charts_with_stats([column("id", "numerical")])

        assert len(charts) == 1
        assert charts[0] == ChartRecommendation("Distribution of id", "bar", "id", "Count")
        assert stats.used_fallback

    def test_fallback_title_by_type(self):
        charts = generate_charts([column("notes", "text", unique=80)])

        assert charts[0].title == "Analysis of notes"

    def test_fallback_skips_empty_columns(self):
        columns = [column("empty", "text", unique=0), column("notes", "text", unique=80)]
        charts = generate_charts(columns)

        assert charts[0].x_axis == "notes"

    def test_no_columns_no_charts(self):
        assert generate_charts([]) == ()

    def test_family_failure_uses_fallback(self, monkeypatch):
        generator = VisualizationGenerator()

        def broken(buckets):
            raise RuntimeError("boom")
            yield

        monkeypatch.setattr(generator, "_bar_candidates", broken)
        charts, stats = generator.generate_with_stats([column("price", "numerical"),
                                                        column("region", "categorical")])

        assert stats.used_fallback
        assert charts[0].title == "Distribution of price"


@pytest.mark.unit
class TestBudget:
    """Test timeouts propagate."""

    def test_timeout_not_absorbed(self):
        ticks = iter(range(0, 1000, 5))
        budget = Deadline("chart generation", 1, clock=lambda: next(ticks))
        columns = [column("a", "numerical"), column("b", "numerical")]

        with pytest.raises(AnalysisTimeoutError):
            generate_charts(columns, budget=budget)
