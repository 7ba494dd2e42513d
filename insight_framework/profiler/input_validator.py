"""
Input Validator - structural validation and data-quality scoring.

Checks the headers/sampleData input contract before any analysis runs and
computes DataQualityMetrics from the raw rows. Checks run in a fixed order
and stop at the first failure, so the error a caller sees is always the
most fundamental one:

    1. Input structure (mapping with 'headers' and 'sampleData')
    2. Headers (list of unique, non-blank strings)
    3. Rows (each a list with one value per header)
    4. Sufficiency (enough rows, some data, minimum density)
    5. Resource guard (total cell count)
    6. Quality thresholds (completeness, consistency, issue count)

No partial output is produced on failure.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from insight_framework.core import constants
from insight_framework.core.config import AnalysisConfig, DEFAULT_CONFIG
from insight_framework.core.exceptions import (
    InputValidationError,
    InsufficientDataError,
    DataQualityError,
    ResourceExhaustionError,
)
from insight_framework.core.models import DataQualityMetrics
from insight_framework.profiler.analysis_utils import (
    is_null, primitive_kind, column_values, non_null
)

logger = logging.getLogger(__name__)

_ROW_TYPES = (list, tuple)


def validate_input(input_data: Any, config: Optional[AnalysisConfig] = None) -> Tuple[List[str], List[List[Any]]]:
    """
    Validate the input contract and the dataset size guards.

    Args:
        input_data: Mapping with 'headers' and 'sampleData'
        config: Analysis configuration (defaults when omitted)

    Returns:
        Tuple of (headers, rows) as fresh lists

    Raises:
        InputValidationError: Malformed structure, headers or rows
        InsufficientDataError: Fewer than 2 rows or no data values at all
        DataQualityError: Data density below the minimum (reason 'low_density')
        ResourceExhaustionError: More cells than the configured maximum
    """
    config = config or DEFAULT_CONFIG

    _validate_structure(input_data)
    headers = _validate_headers(input_data["headers"])
    rows = _validate_rows(input_data["sampleData"], headers)
    _validate_sufficiency(rows, headers, config)

    cell_count = len(rows) * len(headers)
    if cell_count > config.max_dataset_cells:
        raise ResourceExhaustionError(
            f"Dataset size ({cell_count} cells) exceeds maximum allowed size "
            f"({config.max_dataset_cells} cells)",
            resource_type="memory",
            suggestions=[
                f"Consider sampling the dataset to reduce size below {config.max_dataset_cells} cells"
            ]
        )

    logger.debug(f"Input accepted: {len(headers)} columns x {len(rows)} rows")
    return headers, rows


def _validate_structure(input_data: Any) -> None:
    if not isinstance(input_data, dict):
        raise InputValidationError(
            "Input must be a valid object",
            "INVALID_INPUT_TYPE",
            ["Provide input as a JSON object with headers and sampleData properties"]
        )
    if "headers" not in input_data:
        raise InputValidationError(
            'Input must contain a "headers" property',
            "MISSING_HEADERS",
            ['Add a "headers" property containing an array of column names']
        )
    if "sampleData" not in input_data:
        raise InputValidationError(
            'Input must contain a "sampleData" property',
            "MISSING_SAMPLE_DATA",
            ['Add a "sampleData" property containing an array of data rows']
        )


def _validate_headers(headers: Any) -> List[str]:
    if not isinstance(headers, (list, tuple)):
        raise InputValidationError(
            "Headers must be an array",
            "INVALID_HEADERS_TYPE",
            ['Provide headers as an array of strings, e.g., ["Name", "Age", "Salary"]']
        )
    if len(headers) < constants.MIN_HEADERS:
        raise InputValidationError(
            "Headers array cannot be empty",
            "EMPTY_HEADERS",
            ["Provide at least one column header"]
        )
    if any(not isinstance(header, str) for header in headers):
        raise InputValidationError(
            "All headers must be strings",
            "INVALID_HEADER_TYPE",
            ["Ensure all header values are strings, not numbers or other types"]
        )
    if any(header.strip() == "" for header in headers):
        raise InputValidationError(
            "Headers cannot be empty strings",
            "EMPTY_HEADER_VALUES",
            ["Provide meaningful names for all columns"]
        )
    if len(set(headers)) != len(headers):
        seen = set()
        duplicates = [h for h in headers if h in seen or seen.add(h)]
        raise InputValidationError(
            "Headers must be unique",
            "DUPLICATE_HEADERS",
            [
                "Ensure all column headers have unique names",
                f"Duplicated: {', '.join(sorted(set(duplicates)))}",
            ]
        )
    return list(headers)


def _validate_rows(sample_data: Any, headers: List[str]) -> List[List[Any]]:
    if not isinstance(sample_data, (list, tuple)):
        raise InputValidationError(
            "Sample data must be an array",
            "INVALID_SAMPLE_DATA_TYPE",
            ['Provide sampleData as an array of arrays, e.g., [["John", 30], ["Jane", 25]]']
        )
    if len(sample_data) == 0:
        raise InputValidationError(
            "Sample data cannot be empty",
            "EMPTY_SAMPLE_DATA",
            ["Provide at least one row of sample data for analysis"]
        )

    width = len(headers)
    rows = []
    for row_number, row in enumerate(sample_data, start=1):
        if not isinstance(row, _ROW_TYPES):
            raise InputValidationError(
                f"Row {row_number} must be an array",
                "INVALID_ROW_TYPE",
                [f"Ensure row {row_number} is an array of values matching the headers"]
            )
        if len(row) != width:
            raise InputValidationError(
                f"Row {row_number} has {len(row)} values but {width} headers provided",
                "ROW_HEADER_MISMATCH",
                [
                    f"Ensure row {row_number} has exactly {width} values",
                    "Check that all rows have the same number of columns as headers",
                ]
            )
        rows.append(list(row))
    return rows


def _validate_sufficiency(rows: List[List[Any]], headers: List[str], config: AnalysisConfig) -> None:
    if len(rows) < constants.MIN_SAMPLE_ROWS:
        raise InsufficientDataError(
            f"Dataset contains {len(rows)} rows, but {constants.MIN_SAMPLE_ROWS} are required for analysis",
            data_size=len(rows),
            minimum_required=constants.MIN_SAMPLE_ROWS,
            suggestions=["Provide at least 2 rows of sample data to enable pattern detection"]
        )

    total_cells = len(rows) * len(headers)
    filled_cells = sum(1 for row in rows for cell in row if not is_null(cell))
    if filled_cells == 0:
        raise InsufficientDataError(
            "Dataset contains no valid data values",
            data_size=0,
            minimum_required=1,
            suggestions=["Provide a dataset with actual data values, not just empty cells"]
        )

    density = filled_cells / total_cells
    if density < config.min_data_density:
        percent = round(density * 100)
        raise DataQualityError(
            f"Dataset has very low data density ({percent}%)",
            quality_issues=[f"Only {percent}% of cells contain data"],
            reason="low_density",
            suggestions=["Provide a dataset with more complete data coverage"]
        )


def compute_data_quality(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> DataQualityMetrics:
    """
    Score completeness and consistency of the raw rows.

    completeness = non-null cells / total cells. consistency starts at 1.0
    and loses EMPTY_COLUMN_PENALTY per column without valid values and
    MIXED_TYPE_PENALTY per column mixing primitive kinds, floored at 0.

    Args:
        headers: Validated column names
        rows: Validated rows

    Returns:
        DataQualityMetrics with issues in column order, completeness advisory last
    """
    total_cells = len(rows) * len(headers)
    null_cells = sum(1 for row in rows for cell in row if is_null(cell))
    completeness = (total_cells - null_cells) / total_cells if total_cells else 0.0

    consistency = 1.0
    issues: List[str] = []
    for index, header in enumerate(headers):
        values = non_null(column_values(rows, index))
        if not values:
            issues.append(f'Column "{header}" contains no valid data')
            consistency -= constants.EMPTY_COLUMN_PENALTY
            continue

        kinds = sorted({primitive_kind(v) for v in values})
        if len(kinds) > 1:
            issues.append(f'Column "{header}" contains mixed data types: {", ".join(kinds)}')
            consistency -= constants.MIXED_TYPE_PENALTY

    if completeness < constants.COMPLETENESS_ADVISORY_THRESHOLD:
        issues.append(
            f"Data completeness is {round(completeness * 100)}% - "
            f"consider providing more complete sample data"
        )

    return DataQualityMetrics(
        completeness=max(0.0, completeness),
        consistency=max(0.0, round(consistency, 10)),
        issues=tuple(issues),
    )


def enforce_quality(metrics: DataQualityMetrics, config: Optional[AnalysisConfig] = None) -> None:
    """
    Reject datasets whose quality is too low for reliable analysis.

    Raises:
        DataQualityError: reason 'completeness', 'consistency' or 'too_many_issues'
    """
    config = config or DEFAULT_CONFIG

    if metrics.completeness < config.min_completeness:
        raise DataQualityError(
            f"Data completeness is critically low ({round(metrics.completeness * 100)}%)",
            quality_issues=list(metrics.issues),
            reason="completeness",
            suggestions=[
                "Provide a dataset with more complete data values",
                "Remove columns that are mostly empty",
                "Fill in missing values where possible",
            ]
        )

    if metrics.consistency < config.min_consistency:
        raise DataQualityError(
            f"Data consistency is critically low ({round(metrics.consistency * 100)}%)",
            quality_issues=list(metrics.issues),
            reason="consistency",
            suggestions=[
                "Ensure consistent data types within each column",
                "Clean up mixed data type issues",
                "Standardize data formats across the dataset",
            ]
        )

    if len(metrics.issues) > config.max_quality_issues:
        raise DataQualityError(
            f"Dataset has too many quality issues ({len(metrics.issues)}) for reliable analysis",
            quality_issues=list(metrics.issues[:int(config.max_quality_issues)]),
            reason="too_many_issues",
            suggestions=[
                "Address the most critical data quality issues first",
                "Consider data preprocessing to clean the dataset",
                "Reduce the number of problematic columns",
            ]
        )


def process_input(input_data: Any, config: Optional[AnalysisConfig] = None) -> Dict[str, Any]:
    """
    Validate input and score its quality in one step.

    Returns:
        Dict with 'headers', 'rows' and 'quality' (DataQualityMetrics)
    """
    headers, rows = validate_input(input_data, config)
    quality = compute_data_quality(headers, rows)
    enforce_quality(quality, config)
    if quality.issues:
        logger.info(f"Data quality issues: {len(quality.issues)}")
    return {"headers": headers, "rows": rows, "quality": quality}
