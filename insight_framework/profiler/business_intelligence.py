"""
Business Intelligence Analyzer - heuristic business context for a dataset.

Derives five fields from column metadata alone (no statistics are
computed): industry domain, primary value columns, potential correlations,
actionable questions and a dataset-potential narrative.

Domain detection is an ordered rule table (DOMAIN_RULES): keyword rules
checked against column names and string sample values, most specific
domain first, followed by column-type-mix rules. The first matching rule
wins.

Each field is produced under its own guard. A failure in one heuristic
degrades only that field to a generic default; insight generation as a
whole never aborts. Timeouts are the exception and always propagate.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from insight_framework.core import constants
from insight_framework.core.budget import Deadline, unbounded
from insight_framework.core.config import AnalysisConfig, DEFAULT_CONFIG
from insight_framework.core.exceptions import AnalysisTimeoutError, BusinessAnalysisError
from insight_framework.core.models import BusinessInsights, ColumnInfo, DataQualityMetrics
from insight_framework.profiler import insight_templates as templates

logger = logging.getLogger(__name__)


def name_tokens(text: str) -> List[str]:
    """Lower-case word tokens, splitting camelCase and any non-letter separator."""
    spaced = re.sub(r'([a-z0-9])([A-Z])', r'\1 \2', text)
    return re.findall(r'[a-z]+', spaced.lower())


def _has_keyword(tokens: Sequence[str], keywords: Sequence[str]) -> bool:
    # Prefix match so plurals and derived forms count (sale -> sales, order -> orders)
    return any(token.startswith(keyword) for token in tokens for keyword in keywords)


@dataclass(frozen=True)
class DomainRule:
    """One step of domain detection: if predicate(columns) then domain."""
    domain: str
    predicate: Callable[[Sequence[ColumnInfo]], bool]


def keyword_rule(domain: str, keywords: Sequence[str]) -> DomainRule:
    """Rule matching keywords in column names or in string sample values."""
    def predicate(columns: Sequence[ColumnInfo]) -> bool:
        for column in columns:
            if _has_keyword(name_tokens(column.name), keywords):
                return True
            for value in column.sample_values:
                if isinstance(value, str) and _has_keyword(name_tokens(value), keywords):
                    return True
        return False
    return DomainRule(domain, predicate)


def _type_share(columns: Sequence[ColumnInfo], inferred_type: str) -> float:
    if not columns:
        return 0.0
    return sum(1 for c in columns if c.inferred_type == inferred_type) / len(columns)


def _has_type(columns: Sequence[ColumnInfo], inferred_type: str) -> bool:
    return any(c.inferred_type == inferred_type for c in columns)


# Ordered most specific first; broad financial vocabulary (price, amount, cost)
# overlaps every other domain, so it is checked last among the keyword rules.
DOMAIN_RULES: Tuple[DomainRule, ...] = (
    keyword_rule("Healthcare", [
        "patient", "diagnosis", "treatment", "medication", "doctor", "hospital", "clinic",
        "symptom", "disease", "health", "medical", "prescription", "therapy", "surgery",
    ]),
    keyword_rule("Education", [
        "student", "grade", "course", "teacher", "school", "university", "exam",
        "assignment", "semester", "gpa", "enrollment", "graduation",
    ]),
    keyword_rule("Real Estate", [
        "property", "house", "apartment", "rent", "mortgage", "bedroom", "bathroom",
        "sqft", "neighborhood", "listing",
    ]),
    keyword_rule("Human Resources", [
        "employee", "salary", "department", "hire", "manager", "skill", "training",
        "attendance", "promotion", "tenure",
    ]),
    keyword_rule("Marketing/Advertising", [
        "campaign", "click", "impression", "conversion", "lead", "engagement", "audience",
        "channel", "bounce", "session", "pageview", "ctr", "cpc", "roi",
    ]),
    keyword_rule("Operations/Manufacturing", [
        "production", "manufacturing", "defect", "batch", "machine", "equipment",
        "efficiency", "downtime", "maintenance", "capacity", "yield",
    ]),
    keyword_rule("E-commerce/Retail", [
        "product", "order", "customer", "purchase", "sale", "inventory", "sku", "brand",
        "review", "cart", "checkout", "shipping", "discount", "coupon", "store",
    ]),
    keyword_rule("Financial Services", [
        "price", "cost", "revenue", "profit", "expense", "budget", "amount", "balance",
        "payment", "transaction", "account", "investment", "portfolio", "stock", "loan",
        "credit", "debt", "interest",
    ]),
    DomainRule("Financial Services",
               lambda cols: _type_share(cols, "numerical") > 0.6 and _has_type(cols, "datetime")),
    DomainRule("Operations/Manufacturing",
               lambda cols: _type_share(cols, "numerical") > 0.6),
    DomainRule("E-commerce/Retail",
               lambda cols: _type_share(cols, "categorical") > 0.5),
    DomainRule("Business Operations",
               lambda cols: _has_type(cols, "datetime") and _has_type(cols, "numerical")),
)


# Name-token scoring for primary value columns
HIGH_VALUE_TOKENS = ("revenue", "profit", "sale", "income", "amount", "value", "price", "cost",
                     "total", "sum")
MEDIUM_VALUE_TOKENS = ("quantity", "count", "number", "rate", "percentage", "score", "rating")
LOW_VALUE_TOKENS = ("id", "name", "description", "type", "category", "status", "code", "zip")

HIGH_VALUE_SCORE = 10
MEDIUM_VALUE_SCORE = 5
LOW_VALUE_PENALTY = -8
NUMERICAL_BASE_SCORE = 8
MISSING_VALUES_PENALTY = -5
MAX_DIVERSITY_BONUS = 5

# Metrics that usually move together; a pair sharing a group reads as "likely to move with"
CO_OCCURRENCE_GROUPS: Tuple[Tuple[str, ...], ...] = (
    ("price", "cost", "revenue", "sale", "profit", "amount", "income", "total", "value"),
    ("quantity", "unit", "count", "volume", "order"),
    ("rating", "score", "review", "satisfaction"),
    ("click", "impression", "conversion", "session", "view"),
)


class BusinessIntelligenceAnalyzer:
    """
    Produces BusinessInsights from column metadata.

    Every public field has a matching fallback; see analyze().

    Example:
        >>> analyzer = BusinessIntelligenceAnalyzer()
        >>> insights = analyzer.analyze(columns)
        >>> insights.industry_domain
        'E-commerce/Retail'
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or DEFAULT_CONFIG

    # ------------------------------------------------------------------
    # Heuristics
    # ------------------------------------------------------------------

    def detect_industry_domain(self, columns: Sequence[ColumnInfo]) -> str:
        for rule in DOMAIN_RULES:
            if rule.predicate(columns):
                return rule.domain
        return constants.DEFAULT_INDUSTRY_DOMAIN

    def score_value_column(self, column: ColumnInfo) -> float:
        tokens = name_tokens(column.name)
        score = float(NUMERICAL_BASE_SCORE)
        if _has_keyword(tokens, HIGH_VALUE_TOKENS):
            score += HIGH_VALUE_SCORE
        elif _has_keyword(tokens, MEDIUM_VALUE_TOKENS):
            score += MEDIUM_VALUE_SCORE
        elif any(token in LOW_VALUE_TOKENS for token in tokens):
            score += LOW_VALUE_PENALTY

        # Unique-value count stands in for variance
        if column.unique_value_count > 1:
            score += min(column.unique_value_count / 10, MAX_DIVERSITY_BONUS)
        elif column.unique_value_count == 0:
            score -= 10
        if column.has_missing:
            score += MISSING_VALUES_PENALTY
        return score

    def identify_primary_value_columns(self, columns: Sequence[ColumnInfo]) -> List[str]:
        scored = [
            (column.name, self.score_value_column(column))
            for column in columns if column.inferred_type == "numerical"
        ]
        positive = [item for item in scored if item[1] > 0]
        # sorted() is stable: equal scores keep column order
        ranked = sorted(positive, key=lambda item: item[1], reverse=True)
        return [name for name, _ in ranked[:constants.MAX_PRIMARY_VALUE_COLUMNS]]

    @staticmethod
    def _co_occur(first: str, second: str) -> bool:
        first_tokens, second_tokens = name_tokens(first), name_tokens(second)
        return any(
            _has_keyword(first_tokens, group) and _has_keyword(second_tokens, group)
            for group in CO_OCCURRENCE_GROUPS
        )

    def detect_potential_correlations(self, columns: Sequence[ColumnInfo],
                                      primary: Sequence[str]) -> List[str]:
        numerical = [c.name for c in columns if c.inferred_type == "numerical"]
        categorical = [c.name for c in columns if c.inferred_type == "categorical"]
        datetime_cols = [c.name for c in columns if c.inferred_type == "datetime"]
        drivers = list(primary) or numerical[:constants.MAX_PRIMARY_VALUE_COLUMNS]

        statements: List[str] = []
        seen_pairs = set()
        for driver in drivers:
            for other in numerical:
                pair = frozenset((driver, other))
                if other == driver or pair in seen_pairs:
                    continue
                seen_pairs.add(pair)
                template = (templates.CORRELATION_RELATED_METRICS if self._co_occur(driver, other)
                            else templates.CORRELATION_NUMERICAL)
                statements.append(template.format(first=driver, second=other))

        for driver in drivers:
            for category in categorical:
                statements.append(templates.CORRELATION_CATEGORICAL.format(category=category, value=driver))
            for time_col in datetime_cols:
                statements.append(templates.CORRELATION_TEMPORAL.format(value=driver, time=time_col))

        for i, first in enumerate(categorical):
            for second in categorical[i + 1:]:
                statements.append(templates.CORRELATION_CROSS_TAB.format(first=first, second=second))

        return statements[:constants.MAX_CORRELATIONS]

    def generate_actionable_questions(self, columns: Sequence[ColumnInfo], domain: str,
                                      primary: Sequence[str]) -> List[str]:
        numerical = [c.name for c in columns if c.inferred_type == "numerical"]
        categorical = [c.name for c in columns if c.inferred_type == "categorical"]
        datetime_cols = [c.name for c in columns if c.inferred_type == "datetime"]
        value = primary[0] if primary else (numerical[0] if numerical else "")

        questions = templates.domain_questions(domain, primary[0] if primary else "")
        if datetime_cols and value:
            questions.append(templates.TIME_TREND_QUESTION.format(value=value, time=datetime_cols[0]))
        if categorical and value:
            questions.append(templates.SEGMENT_QUESTION.format(category=categorical[0], value=value))
        if len(numerical) >= 2:
            questions.append(templates.RELATIONSHIP_QUESTION.format(first=numerical[0], second=numerical[1]))

        for padding in templates.PADDING_QUESTIONS:
            if len(questions) >= constants.ACTIONABLE_QUESTION_COUNT:
                break
            if padding not in questions:
                questions.append(padding)
        return questions[:constants.ACTIONABLE_QUESTION_COUNT]

    def assess_dataset_potential(self, columns: Sequence[ColumnInfo], domain: str,
                                 primary: Sequence[str],
                                 quality: Optional[DataQualityMetrics] = None) -> str:
        numerical = sum(1 for c in columns if c.inferred_type == "numerical")
        categorical = sum(1 for c in columns if c.inferred_type == "categorical")
        datetime_count = sum(1 for c in columns if c.inferred_type == "datetime")

        if len(columns) >= 8:
            sentences = [templates.POTENTIAL_RICHNESS_HIGH]
        elif len(columns) >= 4:
            sentences = [templates.POTENTIAL_RICHNESS_MODERATE]
        else:
            sentences = [templates.POTENTIAL_RICHNESS_BASIC]

        capabilities = []
        if numerical >= 2:
            capabilities += ["correlation analysis", "statistical modeling"]
        if categorical >= 1 and numerical >= 1:
            capabilities += ["segmentation analysis", "comparative analysis"]
        if datetime_count >= 1:
            capabilities += ["trend analysis", "forecasting"]
        if primary:
            capabilities.append("performance optimization")
        if capabilities:
            sentences.append(templates.POTENTIAL_CAPABILITIES.format(capabilities=", ".join(capabilities)))

        sentences.append(templates.POTENTIAL_DOMAIN.format(domain=domain))
        if quality is not None:
            sentences.append(templates.POTENTIAL_QUALITY.format(
                completeness=quality.completeness, consistency=quality.consistency
            ))
        if datetime_count == 0:
            sentences.append(templates.POTENTIAL_ADD_TEMPORAL)
        if numerical < 2:
            sentences.append(templates.POTENTIAL_ADD_METRICS)
        sentences.append(templates.POTENTIAL_CLOSING)
        return " ".join(sentences)

    # ------------------------------------------------------------------
    # Guarded evaluation
    # ------------------------------------------------------------------

    def _guarded(self, stage: str, budget: Deadline, compute: Callable, fallback: Callable):
        """Run one heuristic; on any non-timeout failure log and return its fallback."""
        budget.check()
        try:
            return compute()
        except AnalysisTimeoutError:
            raise
        except Exception as e:
            error = BusinessAnalysisError(f"{stage} failed: {e}", analysis_stage=stage,
                                          original_exception=e)
            logger.warning(f"{error.message}; using default")
            return fallback()

    def analyze(
        self,
        columns: Sequence[ColumnInfo],
        quality: Optional[DataQualityMetrics] = None,
        budget: Optional[Deadline] = None
    ) -> BusinessInsights:
        """
        Generate all five insight fields.

        Args:
            columns: Inferred column metadata
            quality: Data quality metrics, quoted in the dataset potential
            budget: Deadline checked before each field

        Returns:
            BusinessInsights (never raises except on timeout)
        """
        budget = budget or unbounded("insight generation")
        columns = list(columns or [])
        if not any(c.unique_value_count > 0 for c in columns):
            logger.warning("No columns with data available for business analysis; using default insights")
            return fallback_insights(columns)

        names = [c.name for c in columns]
        numerical = [c.name for c in columns if c.inferred_type == "numerical"]

        domain = self._guarded(
            "industry_domain", budget,
            lambda: self.detect_industry_domain(columns),
            lambda: constants.DEFAULT_INDUSTRY_DOMAIN,
        )
        primary = self._guarded(
            "primary_value_columns", budget,
            lambda: self.identify_primary_value_columns(columns),
            lambda: numerical[:2],
        )
        correlations = self._guarded(
            "potential_correlations", budget,
            lambda: self.detect_potential_correlations(columns, primary),
            lambda: ([templates.FALLBACK_CORRELATION_PAIR.format(first=names[0], second=names[1])]
                     if len(names) >= 2 else [templates.FALLBACK_CORRELATION_NONE]),
        )
        questions = self._guarded(
            "actionable_questions", budget,
            lambda: self.generate_actionable_questions(columns, domain, primary),
            lambda: list(templates.FALLBACK_QUESTIONS),
        )
        potential = self._guarded(
            "dataset_potential", budget,
            lambda: self.assess_dataset_potential(columns, domain, primary, quality),
            lambda: templates.FALLBACK_POTENTIAL.format(column_count=len(columns), domain=domain.lower()),
        )

        logger.debug(f"Business insights: domain={domain}, primary={primary}")
        return BusinessInsights(
            industry_domain=domain,
            primary_value_columns=tuple(primary),
            potential_correlations=tuple(correlations),
            actionable_questions=tuple(questions),
            dataset_potential=potential,
        )


def fallback_insights(columns: Sequence[ColumnInfo]) -> BusinessInsights:
    """Generic insights used when no column carries data."""
    names = [c.name for c in columns]
    return BusinessInsights(
        industry_domain=constants.DEFAULT_INDUSTRY_DOMAIN,
        primary_value_columns=(),
        potential_correlations=(templates.FALLBACK_CORRELATION_NONE,),
        actionable_questions=templates.FALLBACK_QUESTIONS,
        dataset_potential=templates.FALLBACK_POTENTIAL.format(
            column_count=len(names), domain=constants.DEFAULT_INDUSTRY_DOMAIN.lower()
        ),
    )


def generate_business_insights(
    columns: Sequence[ColumnInfo],
    quality: Optional[DataQualityMetrics] = None,
    config: Optional[AnalysisConfig] = None,
    budget: Optional[Deadline] = None
) -> BusinessInsights:
    """Module-level shortcut for BusinessIntelligenceAnalyzer(config).analyze()."""
    return BusinessIntelligenceAnalyzer(config).analyze(columns, quality, budget)
