"""
Insight templates and narratives for analysis reports.

This module contains all text templates, narratives, and language generation
used by the business intelligence analyzer and the report assembler.
Separated from logic for easier maintenance.

Templates use Python string formatting with named placeholders.
"""

from typing import Dict, List, Tuple


# =============================================================================
# ACTIONABLE QUESTIONS
# =============================================================================

# Domain -> question templates. "order" says whether the fixed question or the
# primary-column question is asked first.
DOMAIN_QUESTION_TEMPLATES: Dict[str, Dict[str, str]] = {
    "Financial Services": {
        "with_primary": "How can we optimize {primary} to improve overall financial performance?",
        "without_primary": "What are the key financial performance drivers in this dataset?",
        "fixed": "What are the key risk factors and opportunities identified in this financial data?",
        "order": "primary_first",
    },
    "E-commerce/Retail": {
        "with_primary": "Which customer segments or product categories contribute most to {primary}?",
        "without_primary": "What are the key drivers of business performance in this retail dataset?",
        "fixed": "What pricing or inventory strategies could improve business outcomes?",
        "order": "primary_first",
    },
    "Healthcare": {
        "with_primary": "How do different factors influence {primary} and what interventions are most effective?",
        "without_primary": "What are the most critical healthcare metrics to monitor in this dataset?",
        "fixed": "What patterns in patient data could improve treatment outcomes or operational efficiency?",
        "order": "fixed_first",
    },
    "Human Resources": {
        "with_primary": "How can we optimize {primary} across different departments or roles?",
        "without_primary": "What are the key HR metrics that drive organizational success?",
        "fixed": "What factors contribute to employee performance and retention?",
        "order": "fixed_first",
    },
    "Marketing/Advertising": {
        "with_primary": "What customer behaviors and characteristics drive {primary} performance?",
        "without_primary": "What are the most effective marketing strategies based on this data?",
        "fixed": "Which marketing channels and campaigns deliver the highest ROI?",
        "order": "fixed_first",
    },
    "Education": {
        "with_primary": "Which factors have the strongest influence on {primary}?",
        "without_primary": "What are the key indicators of student success in this dataset?",
        "fixed": "Which courses or groups would benefit most from additional support?",
        "order": "primary_first",
    },
    "Real Estate": {
        "with_primary": "Which property characteristics have the largest effect on {primary}?",
        "without_primary": "What are the main drivers of property value in this dataset?",
        "fixed": "Which locations or listing types show the strongest market opportunity?",
        "order": "primary_first",
    },
}

DEFAULT_QUESTION_TEMPLATE: Dict[str, str] = {
    "with_primary": "What are the primary drivers of {primary} in this business context?",
    "without_primary": "What are the key performance indicators in this business dataset?",
    "fixed": "What operational improvements could be made based on these data insights?",
    "order": "primary_first",
}

TIME_TREND_QUESTION = "What are the seasonal trends and patterns in {value} over {time}?"
SEGMENT_QUESTION = "Which {category} categories drive the highest {value} performance?"
RELATIONSHIP_QUESTION = "What is the relationship between {first} and {second}, and how can this inform strategy?"

# Used in order to pad the list up to the required count
PADDING_QUESTIONS: Tuple[str, ...] = (
    "What are the key performance indicators that should be monitored in this dataset?",
    "What data quality improvements would enhance the analytical value of this dataset?",
    "What additional data sources could enhance the analytical insights from this dataset?",
    "Which segments of this dataset deserve a closer look in the next analysis cycle?",
)

FALLBACK_QUESTIONS: Tuple[str, ...] = (
    "What are the key patterns in this dataset?",
    "Which factors drive the most significant outcomes?",
    "How can this data inform business decisions?",
    "What additional data would enhance this analysis?",
)


def domain_questions(domain: str, primary: str = "") -> List[str]:
    """Two domain-specific questions, parameterized by the top primary value column."""
    template = DOMAIN_QUESTION_TEMPLATES.get(domain, DEFAULT_QUESTION_TEMPLATE)
    if primary:
        variable = template["with_primary"].format(primary=primary)
    else:
        variable = template["without_primary"]
    if template["order"] == "fixed_first":
        return [template["fixed"], variable]
    return [variable, template["fixed"]]


# =============================================================================
# CORRELATION STATEMENTS
# =============================================================================

CORRELATION_RELATED_METRICS = "{first} is likely to move with {second} (related business metrics)"
CORRELATION_NUMERICAL = "Potential correlation between {first} and {second} (both numerical)"
CORRELATION_CATEGORICAL = "{category} may influence {value} (categorical vs numerical)"
CORRELATION_TEMPORAL = "{value} trends over {time} (time-series analysis)"
CORRELATION_CROSS_TAB = "Cross-tabulation between {first} and {second} (categorical grouping)"

FALLBACK_CORRELATION_PAIR = "Potential relationship between {first} and {second}"
FALLBACK_CORRELATION_NONE = "Insufficient data for correlation analysis"


# =============================================================================
# DATASET POTENTIAL NARRATIVE
# =============================================================================

POTENTIAL_RICHNESS_HIGH = "This dataset shows high analytical potential with rich data dimensions."
POTENTIAL_RICHNESS_MODERATE = "This dataset has moderate analytical potential with sufficient data variety."
POTENTIAL_RICHNESS_BASIC = ("This dataset has basic analytical potential but may benefit from "
                            "additional data sources.")
POTENTIAL_CAPABILITIES = "Key analytical capabilities include: {capabilities}."
POTENTIAL_DOMAIN = ("Within the {domain} context, this data could support strategic decision-making, "
                    "operational improvements, and performance monitoring.")
POTENTIAL_QUALITY = ("Sample data quality: {completeness:.0%} complete and {consistency:.0%} "
                     "type-consistent.")
POTENTIAL_ADD_TEMPORAL = "Adding temporal data would enhance trend analysis capabilities."
POTENTIAL_ADD_METRICS = "Additional quantitative metrics would improve analytical depth."
POTENTIAL_CLOSING = "Consider integrating with external data sources for comprehensive business intelligence."

FALLBACK_POTENTIAL = (
    "This dataset contains {column_count} columns and shows potential for {domain} analysis. "
    "The data structure suggests opportunities for basic analytical insights and business "
    "intelligence applications. Consider data quality improvements and additional context "
    "for enhanced analysis capabilities."
)


# =============================================================================
# REPORT SECTIONS
# =============================================================================

EXECUTIVE_SUMMARY_HEADING = "# Executive Summary"
STATISTICAL_ANALYSIS_HEADING = "# Statistical Analysis"
RELATIONSHIP_INSIGHTS_HEADING = "# Relationship Insights"
ACTIONABLE_QUESTIONS_HEADING = "# Actionable Questions"
CONCLUSION_HEADING = "# Conclusion"
DATASET_POTENTIAL_HEADING = "## Dataset Potential"

# Sections a complete report is expected to contain (checked by the compliance check)
RECOMMENDED_SECTIONS: Tuple[str, ...] = (
    EXECUTIVE_SUMMARY_HEADING,
    STATISTICAL_ANALYSIS_HEADING,
    RELATIONSHIP_INSIGHTS_HEADING,
    ACTIONABLE_QUESTIONS_HEADING,
    CONCLUSION_HEADING,
)

SUMMARY_DOMAIN = ("This dataset appears to be from the **{domain}** domain, presenting "
                  "opportunities for data-driven insights and strategic decision-making.")
SUMMARY_PRIMARY = ("The analysis identifies **{columns}** as the primary value-driving columns, "
                   "which should be the focus of detailed analytical exploration.")

NO_RELATIONSHIPS = ("No significant relationships were identified in the current dataset structure.\n\n"
                    "Consider collecting additional data points to enable correlation analysis.")

RELATIONSHIP_RECOMMENDATIONS = """## Analytical Recommendations

- Conduct correlation analysis for numerical relationships
- Perform segmentation analysis for categorical relationships
- Use time-series analysis for temporal patterns
- Consider multivariate analysis to understand complex relationships"""

QUESTION_EXPLORATION = """This question can be explored through:
- Detailed data visualization and statistical analysis
- Comparative analysis across different segments
- Trend analysis and pattern identification"""

RECOMMENDED_ACTIONS = """## Recommended Actions

1. **Immediate Analysis**: Begin with the recommended visualizations to understand data distributions and relationships
2. **Deep Dive Investigation**: Focus analytical efforts on the identified primary value columns and key relationships
3. **Business Integration**: Connect analytical findings to specific business processes and decision-making workflows
4. **Data Enhancement**: Consider collecting additional data points to strengthen analytical capabilities"""

STRATEGIC_VALUE = ("This dataset provides a foundation for {domain} analytics, with clear pathways "
                   "to actionable insights. The identified relationships, primary value drivers and "
                   "strategic questions form a framework for data-driven decision making.")


# =============================================================================
# REPORT FALLBACKS
# =============================================================================

SECTION_FALLBACKS: Dict[str, str] = {
    "executive_summary": (
        "# Executive Summary\n\n"
        "This dataset contains analytical opportunities for data-driven insights."
    ),
    "statistical_analysis": (
        "# Statistical Analysis\n\n"
        "## Dataset Overview\n\n"
        "- **Data Quality**: Analysis completed with limitations"
    ),
    "relationship_insights": (
        "# Relationship Insights\n\n"
        "Basic relationship analysis completed. Consider additional data exploration "
        "for detailed correlations."
    ),
    "actionable_questions": (
        "# Actionable Questions\n\n"
        "## 1. What are the primary insights available in this dataset?\n\n"
        "## 2. How can this data support business decision-making?"
    ),
    "conclusion": (
        "# Conclusion\n\n"
        "## Dataset Potential\n\n"
        "This dataset provides a foundation for analytical insights. Consider data quality "
        "improvements and additional context for enhanced analysis capabilities."
    ),
}

FALLBACK_REPORT = """# Executive Summary

This dataset appears to be from the {domain} domain. While detailed analysis encountered some limitations, the dataset shows potential for basic analytical insights.

## Dataset Overview

- **Total Columns**: {column_count}
- **Analysis Status**: Completed with fallback methods
- **Domain**: {domain}

## Recommendations

1. **Data Quality**: Consider improving data completeness and consistency
2. **Analysis Enhancement**: Additional context and data preprocessing may improve insights
3. **Business Integration**: Connect findings to specific business processes and decisions

# Conclusion

This dataset provides a starting point for analytical work in the {domain} context."""


def fallback_report(column_count: int, domain: str = "General Business") -> str:
    """Complete canned report used when no section could be produced."""
    return FALLBACK_REPORT.format(column_count=column_count, domain=domain or "General Business")


# Used by robust output formatting when the report itself is unusable
FALLBACK_OUTPUT_REPORT = """# Analysis Report

## Summary

The analysis completed, but the generated report was unavailable or invalid. Consider re-running the analysis with the same data, and review the recommended charts for an initial view of the dataset."""
