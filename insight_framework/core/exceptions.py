"""
Data Insight Exception Hierarchy.

This module defines the exception hierarchy for the analysis pipeline, giving
every user-visible failure a short message, a stable code and actionable
suggestions.

Exception Severity Levels:
    - FATAL: Stop the whole analysis immediately (timeouts, bad configuration)
    - CRITICAL: Reject this dataset; other datasets in a batch continue
    - RECOVERABLE: Internal heuristic failure, recovered with a fallback
    - WARNING: Non-critical issue, log and continue

Propagation policy:
    Input and data quality errors always reach the caller so upstream data
    can be fixed. Recoverable errors are only raised inside fallback guards
    and never escape the pipeline.
"""

from typing import Optional, Dict, Any, List
from enum import Enum


class ErrorSeverity(Enum):
    """
    Classify error severity for handling decisions.

    Attributes:
        FATAL: Unrecoverable error, stop all processing
        CRITICAL: Dataset-level error, reject this dataset
        RECOVERABLE: Component-level error, degrade to a fallback
        WARNING: Non-critical issue, log and continue
    """
    FATAL = "fatal"
    CRITICAL = "critical"
    RECOVERABLE = "recoverable"
    WARNING = "warning"


class AnalysisError(Exception):
    """
    Base exception for all analysis errors.

    All pipeline exceptions inherit from this base class, providing:
    - A stable machine-readable code
    - Remediation suggestions for the caller
    - Severity classification for handling decisions
    - Structured details dictionary for logging/reporting
    - Original exception preservation for debugging

    Attributes:
        message (str): Human-readable error message
        code (str): Stable error code (e.g. 'ROW_HEADER_MISMATCH')
        suggestions (List[str]): Actionable remediation steps
        severity (ErrorSeverity): Error severity level
        details (Dict[str, Any]): Additional context
        original_exception (Optional[Exception]): Original exception if wrapping

    Example:
        >>> raise AnalysisError(
        ...     "Analysis failed",
        ...     code="UNEXPECTED_ERROR",
        ...     suggestions=["Try again with the same data"]
        ... )
    """

    default_code = "ANALYSIS_ERROR"
    default_suggestions: List[str] = []

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        suggestions: Optional[List[str]] = None,
        severity: ErrorSeverity = ErrorSeverity.CRITICAL,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize analysis exception.

        Args:
            message: Human-readable error description
            code: Stable error code (defaults to the class code)
            suggestions: Specific suggestions, placed before the class defaults
            severity: Error severity level (default: CRITICAL)
            details: Additional context dictionary
            original_exception: Original exception if this wraps another error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.suggestions = list(suggestions or []) + [
            s for s in self.default_suggestions if s not in (suggestions or [])
        ]
        self.severity = severity
        self.details = details or {}
        self.original_exception = original_exception

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for API responses.

        Internal diagnostics (tracebacks, wrapped exception text) are not
        included; only the classified, user-facing fields are.

        Returns:
            Dictionary suitable for JSON serialization
        """
        return {
            'error': True,
            'type': self.__class__.__name__,
            'message': self.message,
            'code': self.code,
            'severity': self.severity.value,
            'suggestions': list(self.suggestions),
            'details': self.details,
        }


# ============================================================================
# Input Errors (Critical)
# ============================================================================

class InputValidationError(AnalysisError):
    """
    Malformed input shape or types.

    Raised when the headers/sampleData contract is violated: missing keys,
    wrong container types, blank or duplicate headers, ragged rows.
    Never retried locally; no partial output is produced.

    Example:
        >>> raise InputValidationError(
        ...     "Row 3 has 2 values but 3 headers provided",
        ...     code="ROW_HEADER_MISMATCH",
        ...     suggestions=["Ensure row 3 has exactly 3 values"]
        ... )
    """

    default_code = "INPUT_VALIDATION_ERROR"

    def __init__(self, message: str, code: str, suggestions: Optional[List[str]] = None):
        super().__init__(message, code=code, suggestions=suggestions)


class InsufficientDataError(AnalysisError):
    """
    Too few rows or values for meaningful analysis.

    Attributes:
        data_size (int): Number of rows/values found
        minimum_required (int): Number required
    """

    default_code = "INSUFFICIENT_DATA"
    default_suggestions = [
        'Ensure each row contains complete data for all columns',
        'Consider collecting additional data points to improve analysis quality',
    ]

    def __init__(
        self,
        message: str,
        data_size: int,
        minimum_required: int,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(
            message,
            suggestions=(suggestions or []) + [
                f"Provide at least {minimum_required} rows of data for meaningful analysis"
            ],
            details={'data_size': data_size, 'minimum_required': minimum_required}
        )
        self.data_size = data_size
        self.minimum_required = minimum_required


class DataQualityError(AnalysisError):
    """
    Data quality too low for reliable analysis.

    Each rejection rule has a distinct reason so callers can tell them
    apart: 'completeness', 'consistency', 'too_many_issues', 'low_density'.

    Example:
        >>> raise DataQualityError(
        ...     "Data completeness is critically low (3%)",
        ...     quality_issues=['Column "a" contains no valid data'],
        ...     reason="completeness"
        ... )
    """

    default_code = "DATA_QUALITY_ERROR"
    default_suggestions = [
        'Clean the data by removing or filling missing values',
        'Ensure consistent data types within each column',
        'Validate that all required columns contain meaningful data',
    ]

    def __init__(
        self,
        message: str,
        quality_issues: List[str],
        reason: str,
        suggestions: Optional[List[str]] = None
    ):
        super().__init__(
            message,
            suggestions=suggestions,
            details={'quality_issues': list(quality_issues), 'reason': reason}
        )
        self.quality_issues = list(quality_issues)
        self.reason = reason


class ResourceExhaustionError(AnalysisError):
    """Dataset too large for the in-memory sample pipeline."""

    default_code = "RESOURCE_EXHAUSTION"
    default_suggestions = [
        'Reduce the dataset size by sampling or filtering',
        'Remove unnecessary columns to decrease memory usage',
    ]

    def __init__(self, message: str, resource_type: str = "memory",
                 suggestions: Optional[List[str]] = None):
        super().__init__(message, suggestions=suggestions,
                         details={'resource_type': resource_type})


# ============================================================================
# Budget Errors (Fatal)
# ============================================================================

class AnalysisTimeoutError(AnalysisError):
    """
    A phase or the whole pipeline exceeded its wall-clock budget.

    Fatal: fallback guards never absorb this error.

    Attributes:
        operation (str): Name of the budgeted operation
        timeout_seconds (float): Budget that was exceeded
    """

    default_code = "ANALYSIS_TIMEOUT"
    default_suggestions = [
        'Try reducing the dataset size or complexity',
        'Simplify the data structure by removing unnecessary columns',
    ]

    def __init__(self, operation: str, timeout_seconds: float,
                 suggestions: Optional[List[str]] = None):
        super().__init__(
            f"Analysis operation '{operation}' timed out after {timeout_seconds:g}s",
            suggestions=suggestions,
            severity=ErrorSeverity.FATAL,
            details={'operation': operation, 'timeout_seconds': timeout_seconds}
        )
        self.operation = operation
        self.timeout_seconds = timeout_seconds


class ConfigError(AnalysisError):
    """
    Configuration file errors (fatal - analysis cannot start).

    Attributes:
        field (Optional[str]): Specific config field that caused error
    """

    default_code = "CONFIG_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            severity=ErrorSeverity.FATAL,
            details={'field': field} if field else {}
        )
        self.field = field


# ============================================================================
# Output Errors
# ============================================================================

class OutputFormattingError(AnalysisError):
    """
    Strict-mode output contract violation.

    Attributes:
        output_type (str): 'json', 'markdown' or 'charts'
    """

    default_code = "OUTPUT_FORMATTING_ERROR"
    default_suggestions = [
        'Verify that all analysis components completed successfully',
        'Ensure no special characters are causing formatting issues',
    ]

    def __init__(self, message: str, output_type: str = "json",
                 suggestions: Optional[List[str]] = None,
                 original_exception: Optional[Exception] = None):
        super().__init__(
            message,
            suggestions=suggestions,
            details={'output_type': output_type},
            original_exception=original_exception
        )
        self.output_type = output_type


# ============================================================================
# Component Errors (Recoverable - only raised inside fallback guards)
# ============================================================================

class ChartGenerationError(AnalysisError):
    """Chart candidate generation failed; the fallback chart set is used."""

    default_code = "CHART_GENERATION_ERROR"

    def __init__(self, message: str, chart_type: Optional[str] = None,
                 original_exception: Optional[Exception] = None):
        super().__init__(
            message,
            severity=ErrorSeverity.RECOVERABLE,
            details={'chart_type': chart_type},
            original_exception=original_exception
        )


class BusinessAnalysisError(AnalysisError):
    """A business-insight heuristic failed; that field degrades to a default."""

    default_code = "BUSINESS_ANALYSIS_ERROR"

    def __init__(self, message: str, analysis_stage: str,
                 original_exception: Optional[Exception] = None):
        super().__init__(
            message,
            severity=ErrorSeverity.RECOVERABLE,
            details={'analysis_stage': analysis_stage},
            original_exception=original_exception
        )


class ReportGenerationError(AnalysisError):
    """A report section failed; that section degrades to its fallback text."""

    default_code = "REPORT_GENERATION_ERROR"

    def __init__(self, message: str, report_section: Optional[str] = None,
                 original_exception: Optional[Exception] = None):
        super().__init__(
            message,
            severity=ErrorSeverity.RECOVERABLE,
            details={'report_section': report_section},
            original_exception=original_exception
        )


def to_user_error(error: BaseException) -> AnalysisError:
    """
    Convert any exception into a classified, user-facing AnalysisError.

    Known analysis errors pass through untouched. Anything else is wrapped
    with a generic message; the original exception is kept for logging but
    its text is not exposed through to_dict().

    Args:
        error: Exception raised somewhere in the pipeline

    Returns:
        AnalysisError instance
    """
    if isinstance(error, AnalysisError):
        return error

    return AnalysisError(
        "An unexpected error occurred during analysis",
        code="UNEXPECTED_ERROR",
        suggestions=[
            'Try running the analysis again with the same data',
            'If the error persists, consider simplifying your dataset',
            'Check that your data is properly formatted and complete',
        ],
        details={'original_error_type': type(error).__name__},
        original_exception=error if isinstance(error, Exception) else None
    )
