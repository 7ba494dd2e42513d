"""
Data Insight Framework Constants.

This module defines the magic numbers, thresholds and budgets used throughout
the analysis pipeline. Centralizing these values keeps the heuristics tunable
from one place (and from YAML via AnalysisConfig) and documents their purpose.
"""

# ============================================================================
# Input Contract Limits
# ============================================================================

# Minimum number of sample rows required for pattern detection
MIN_SAMPLE_ROWS: int = 2

# Minimum number of column headers
MIN_HEADERS: int = 1

# Maximum dataset size in cells (rows x columns)
# Rationale: the pipeline works on small in-memory samples; anything larger
# should be sampled by the caller before analysis
MAX_DATASET_CELLS: int = 1_000_000

# Number of raw sample values kept on each ColumnInfo
COLUMN_SAMPLE_VALUES: int = 5


# ============================================================================
# Data Quality Thresholds
# ============================================================================

# Consistency penalty for a column with zero valid values
EMPTY_COLUMN_PENALTY: float = 0.1

# Consistency penalty for a column mixing primitive types
MIXED_TYPE_PENALTY: float = 0.05

# Completeness below this adds an advisory issue (not a rejection)
COMPLETENESS_ADVISORY_THRESHOLD: float = 0.9

# Hard rejection thresholds
MIN_COMPLETENESS: float = 0.05
MIN_CONSISTENCY: float = 0.1
MAX_QUALITY_ISSUES: int = 10

# Share of non-empty cells below which the dataset is rejected as too sparse
MIN_DATA_DENSITY: float = 0.1


# ============================================================================
# Column Type Inference Thresholds
# ============================================================================

# Share of non-null values that must parse as finite numbers
NUMERIC_RATIO_THRESHOLD: float = 0.8

# Share of non-null values that must be parseable date strings
DATETIME_RATIO_THRESHOLD: float = 0.7

# Categorical boundary: unique ratio and average string length
CATEGORICAL_UNIQUE_RATIO: float = 0.7
CATEGORICAL_MAX_AVG_LENGTH: float = 10.0
CATEGORICAL_MIN_SAMPLES: int = 2


# ============================================================================
# Chart Generation Limits
# ============================================================================

# Maximum number of chart recommendations in one output
MAX_CHARTS: int = 100

# Text columns are chartable only up to this many distinct values
CHARTABLE_TEXT_MAX_UNIQUE: int = 20

# Only the first N numerical columns take part in scatter pairing
# Rationale: C(5, 2) = 10 pairs keeps scatter combinatorics bounded
SCATTER_COLUMN_CAP: int = 5

# Maximum columns considered per type bucket during candidate generation
BUCKET_COLUMN_CEILING: int = 50


# Literal y-axis used by count-based distribution charts
COUNT_AXIS: str = "Count"

# Column-name fragments marking a numerical column as a sequence/index
SEQUENTIAL_NAME_TOKENS: tuple = ("index", "id", "sequence", "order", "rank", "position")


# ============================================================================
# Business Intelligence Limits
# ============================================================================

# Maximum number of primary value columns
MAX_PRIMARY_VALUE_COLUMNS: int = 3

# Maximum number of correlation statements
MAX_CORRELATIONS: int = 6

# Exact number of actionable questions
ACTIONABLE_QUESTION_COUNT: int = 4

DEFAULT_INDUSTRY_DOMAIN: str = "General Business"


# ============================================================================
# Report Limits
# ============================================================================

# Maximum report length before truncation (characters)
MAX_REPORT_LENGTH: int = 50_000

TRUNCATION_NOTICE: str = "\n\n*[Report truncated due to length]*"


# ============================================================================
# Time Budgets (seconds)
# ============================================================================

ANALYSIS_TIMEOUT: float = 60.0
COLUMN_ANALYSIS_TIMEOUT: float = 15.0
CHART_GENERATION_TIMEOUT: float = 15.0
INSIGHT_GENERATION_TIMEOUT: float = 15.0
REPORT_GENERATION_TIMEOUT: float = 10.0


# ============================================================================
# Configuration Security Limits
# ============================================================================

# Maximum YAML configuration file size (1MB)
# Security measure: configuration holds a handful of scalars
MAX_YAML_FILE_SIZE: int = 1024 * 1024

# Maximum YAML nesting depth
MAX_YAML_NESTING_DEPTH: int = 10

# Maximum number of keys in YAML mapping
MAX_YAML_KEY_COUNT: int = 1_000


# ============================================================================
# Logging Constants
# ============================================================================

# Default log message format
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Log date format
LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"


# ============================================================================
# Output Contract
# ============================================================================

OUTPUT_KEYS: tuple = ("charts_to_generate", "full_analysis_report_markdown")

CHART_FIELDS: tuple = ("title", "type", "xAxis", "yAxis")

CHART_TYPES: tuple = ("bar", "line", "scatter")

COLUMN_TYPES: tuple = ("numerical", "categorical", "datetime", "text")
