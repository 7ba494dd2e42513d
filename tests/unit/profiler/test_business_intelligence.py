"""
Unit tests for BusinessIntelligenceAnalyzer.

Tests domain detection order, primary value column scoring, correlation
statements, the fixed question count and per-field fallbacks.
"""

import pytest
from insight_framework.core.exceptions import AnalysisTimeoutError
from insight_framework.core.models import ColumnInfo, DataQualityMetrics
from insight_framework.profiler import insight_templates as templates
from insight_framework.profiler.business_intelligence import (
    DOMAIN_RULES,
    BusinessIntelligenceAnalyzer,
    generate_business_insights,
    name_tokens,
)


def column(name, inferred_type, unique=2, has_missing=False, samples=()):
    return ColumnInfo(name=name, inferred_type=inferred_type, unique_value_count=unique,
                      has_missing=has_missing, sample_values=tuple(samples))


@pytest.fixture
def analyzer():
    return BusinessIntelligenceAnalyzer()


@pytest.fixture
def product_columns():
    return [
        column("product", "text", samples=("iPhone", "Samsung")),
        column("price", "numerical", samples=(999, 899)),
        column("sales", "numerical", samples=(1500, 1200)),
    ]


@pytest.mark.unit
class TestNameTokens:
    """Test column-name tokenization."""

    @pytest.mark.parametrize("name,expected", [
        ("customer_id", ["customer", "id"]),
        ("totalRevenue", ["total", "revenue"]),
        ("Unit Price (USD)", ["unit", "price", "usd"]),
        ("q3-sales", ["q", "sales"]),
    ])
    def test_tokens(self, name, expected):
        assert name_tokens(name) == expected


@pytest.mark.unit
class TestDomainDetection:
    """Test the ordered domain rule table."""

    def test_keyword_rules_come_first(self):
        domains = [rule.domain for rule in DOMAIN_RULES]
        assert domains[:8] == [
            "Healthcare", "Education", "Real Estate", "Human Resources",
            "Marketing/Advertising", "Operations/Manufacturing", "E-commerce/Retail",
            "Financial Services",
        ]
        assert domains[-1] == "Business Operations"

    def test_retail(self, analyzer, product_columns):
        assert analyzer.detect_industry_domain(product_columns) == "E-commerce/Retail"

    def test_specific_domain_beats_financial_vocabulary(self, analyzer):
        columns = [column("patient", "text"), column("treatment_cost", "numerical")]
        assert analyzer.detect_industry_domain(columns) == "Healthcare"

    def test_plural_names_match(self, analyzer):
        assert analyzer.detect_industry_domain([column("students", "numerical")]) == "Education"

    def test_keyword_in_sample_values(self, analyzer):
        columns = [column("notes", "text", samples=("hospital visit", "follow-up"))]
        assert analyzer.detect_industry_domain(columns) == "Healthcare"

    def test_numerical_with_dates(self, analyzer):
        columns = [column("m1", "numerical"), column("m2", "numerical"),
                   column("m3", "numerical"), column("day", "datetime")]
        assert analyzer.detect_industry_domain(columns) == "Financial Services"

    def test_mostly_numerical(self, analyzer):
        columns = [column("m1", "numerical"), column("m2", "numerical"),
                   column("m3", "numerical"), column("label", "categorical")]
        assert analyzer.detect_industry_domain(columns) == "Operations/Manufacturing"

    def test_mostly_categorical(self, analyzer):
        columns = [column("c1", "categorical"), column("c2", "categorical"), column("m", "numerical")]
        assert analyzer.detect_industry_domain(columns) == "E-commerce/Retail"

    def test_dates_and_numbers(self, analyzer):
        columns = [column("day", "datetime"), column("m", "numerical"),
                   column("note", "text"), column("x", "text")]
        assert analyzer.detect_industry_domain(columns) == "Business Operations"

    def test_default_domain(self, analyzer):
        assert analyzer.detect_industry_domain([column("x", "text"), column("y", "text")]) == \
            "General Business"


@pytest.mark.unit
class TestPrimaryValueColumns:
    """Test value column scoring and ranking."""

    def test_ranking_and_limit(self, analyzer):
        columns = [
            column("zip_code", "numerical", unique=1),
            column("rating", "numerical", unique=5),
            column("revenue", "numerical", unique=5),
            column("quantity", "numerical", unique=5),
            column("total", "numerical", unique=5),
            column("price_band", "categorical", unique=3),
        ]
        assert analyzer.identify_primary_value_columns(columns) == ["revenue", "total", "rating"]

    def test_only_numerical_columns(self, analyzer):
        columns = [column("price", "text"), column("amount", "categorical")]
        assert analyzer.identify_primary_value_columns(columns) == []

    def test_missing_values_penalty(self, analyzer):
        complete = analyzer.score_value_column(column("price", "numerical"))
        missing = analyzer.score_value_column(column("price", "numerical", has_missing=True))
        assert complete - missing == pytest.approx(5)

    def test_diversity_bonus_capped(self, analyzer):
        score = analyzer.score_value_column(column("metric", "numerical", unique=500))
        assert score == 8 + 5

    def test_empty_column_penalty(self, analyzer):
        assert analyzer.score_value_column(column("metric", "numerical", unique=0)) == -2


@pytest.mark.unit
class TestCorrelations:
    """Test relationship statements."""

    def test_related_metrics(self, analyzer, product_columns):
        statements = analyzer.detect_potential_correlations(product_columns, ["price", "sales"])
        assert statements == ["price is likely to move with sales (related business metrics)"]

    def test_categorical_and_temporal(self, analyzer):
        columns = [column("region", "categorical"), column("day", "datetime"),
                   column("amount", "numerical")]
        statements = analyzer.detect_potential_correlations(columns, ["amount"])
        assert statements == [
            "region may influence amount (categorical vs numerical)",
            "amount trends over day (time-series analysis)",
        ]

    def test_statement_limit(self, analyzer):
        columns = [column(f"m{i}", "numerical") for i in range(6)] + \
                  [column("c1", "categorical"), column("c2", "categorical")]
        statements = analyzer.detect_potential_correlations(columns, [])
        assert len(statements) == 6

    def test_no_relationships(self, analyzer):
        assert analyzer.detect_potential_correlations([column("x", "text")], []) == []


@pytest.mark.unit
class TestActionableQuestions:
    """Test the question list always has four entries."""

    @pytest.mark.parametrize("domain", list(templates.DOMAIN_QUESTION_TEMPLATES) + ["General Business"])
    def test_exactly_four(self, analyzer, domain):
        questions = analyzer.generate_actionable_questions([column("x", "text")], domain, [])
        assert len(questions) == 4
        assert len(set(questions)) == 4

    def test_product_questions(self, analyzer, product_columns):
        questions = analyzer.generate_actionable_questions(
            product_columns, "E-commerce/Retail", ["price", "sales"]
        )
        assert questions == [
            "Which customer segments or product categories contribute most to price?",
            "What pricing or inventory strategies could improve business outcomes?",
            "What is the relationship between price and sales, and how can this inform strategy?",
            templates.PADDING_QUESTIONS[0],
        ]

    def test_fixed_first_order(self, analyzer):
        questions = analyzer.generate_actionable_questions(
            [column("x", "text")], "Healthcare", ["recovery_days"]
        )
        assert questions[0] == templates.DOMAIN_QUESTION_TEMPLATES["Healthcare"]["fixed"]

    def test_rich_dataset_truncated_to_four(self, analyzer):
        columns = [column("day", "datetime"), column("region", "categorical"),
                   column("revenue", "numerical"), column("cost", "numerical")]
        questions = analyzer.generate_actionable_questions(columns, "Financial Services", ["revenue"])
        assert len(questions) == 4
        assert questions[2] == "What are the seasonal trends and patterns in revenue over day?"


@pytest.mark.unit
class TestAnalyze:
    """Test the guarded end-to-end insight generation."""

    def test_product_dataset(self, analyzer, product_columns):
        quality = DataQualityMetrics(completeness=1.0, consistency=1.0)
        insights = analyzer.analyze(product_columns, quality)

        assert insights.industry_domain == "E-commerce/Retail"
        assert insights.primary_value_columns == ("price", "sales")
        assert len(insights.actionable_questions) == 4
        assert "Sample data quality: 100% complete and 100% type-consistent." in insights.dataset_potential
        assert "Within the E-commerce/Retail context" in insights.dataset_potential

    def test_failed_field_uses_its_fallback(self, analyzer, product_columns, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("heuristic failed")

        monkeypatch.setattr(analyzer, "detect_potential_correlations", broken)
        insights = analyzer.analyze(product_columns)

        assert insights.potential_correlations == ("Potential relationship between product and price",)
        assert insights.industry_domain == "E-commerce/Retail"
        assert insights.primary_value_columns == ("price", "sales")

    def test_failed_domain_defaults(self, analyzer, product_columns, monkeypatch):
        def broken(*args, **kwargs):
            raise KeyError("rules")

        monkeypatch.setattr(analyzer, "detect_industry_domain", broken)
        insights = analyzer.analyze(product_columns)

        assert insights.industry_domain == "General Business"
        assert len(insights.actionable_questions) == 4

    def test_failed_questions_use_generic_set(self, analyzer, product_columns, monkeypatch):
        def broken(*args, **kwargs):
            raise ValueError("bad template")

        monkeypatch.setattr(analyzer, "generate_actionable_questions", broken)
        insights = analyzer.analyze(product_columns)

        assert insights.actionable_questions == templates.FALLBACK_QUESTIONS

    def test_timeout_propagates(self, analyzer, product_columns, monkeypatch):
        def slow(*args, **kwargs):
            raise AnalysisTimeoutError("insight generation", 15)

        monkeypatch.setattr(analyzer, "identify_primary_value_columns", slow)
        with pytest.raises(AnalysisTimeoutError):
            analyzer.analyze(product_columns)

    def test_no_data_columns(self):
        insights = generate_business_insights([column("a", "text", unique=0)])

        assert insights.industry_domain == "General Business"
        assert insights.actionable_questions == templates.FALLBACK_QUESTIONS
        assert insights.primary_value_columns == ()
