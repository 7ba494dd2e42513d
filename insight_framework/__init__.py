"""
Data Insight Framework

Turns a small tabular sample (headers plus rows of primitive values) into
chart recommendations and a markdown business-analysis report, returned as
one strictly validated two-field JSON document.

Key Components:
- analyze / analyze_batch: Full pipeline for one or several datasets
- AnalysisConfig: Thresholds, limits and time budgets (YAML-loadable)
- generate_charts: Chart recommendations from column metadata
- generate_business_insights: Domain, value columns, questions, potential
- assemble_report: Markdown report with per-section fallbacks
- format_output / format_output_robust / check_compliance: Output contract
"""

from .core.config import AnalysisConfig, DEFAULT_CONFIG
from .core.exceptions import (
    AnalysisError,
    AnalysisTimeoutError,
    ConfigError,
    DataQualityError,
    ErrorSeverity,
    InputValidationError,
    InsufficientDataError,
    OutputFormattingError,
    ResourceExhaustionError,
    to_user_error,
)
from .core.pipeline import AnalysisPipeline, analyze, analyze_batch
from .profiler.business_intelligence import generate_business_insights
from .profiler.visualization_generator import generate_charts
from .reporters.output_contract import (
    check_compliance,
    format_output,
    format_output_robust,
    parse_json_string,
    to_json_string,
)
from .reporters.report_assembler import assemble_report

__version__ = "1.0.0"

__all__ = [
    'AnalysisConfig',
    'DEFAULT_CONFIG',
    'AnalysisError',
    'AnalysisTimeoutError',
    'ConfigError',
    'DataQualityError',
    'ErrorSeverity',
    'InputValidationError',
    'InsufficientDataError',
    'OutputFormattingError',
    'ResourceExhaustionError',
    'to_user_error',
    'AnalysisPipeline',
    'analyze',
    'analyze_batch',
    'generate_business_insights',
    'generate_charts',
    'check_compliance',
    'format_output',
    'format_output_robust',
    'parse_json_string',
    'to_json_string',
    'assemble_report',
]
