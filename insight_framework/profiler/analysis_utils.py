"""
Value-level helpers shared by the profiler stages.

Sample cells arrive as arbitrary JSON-like Python values (None, str, int,
float, bool, nested list/dict). These helpers give every stage the same
answer to "is this cell empty?", "what primitive kind is it?" and "does
it parse as a number?".
"""

import math
from typing import Any, List, Optional, Sequence

import numpy as np
import pandas as pd


def is_null(value: Any) -> bool:
    """
    True for None, the empty string and float NaN.

    Array-like values are checked first so pd.isna() never sees a list
    (it would return an array instead of a bool).
    """
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, set, np.ndarray)):
        return False
    if isinstance(value, str):
        return value == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def primitive_kind(value: Any) -> str:
    """
    Primitive kind of a non-null value: 'boolean', 'number', 'string' or 'object'.

    bool is tested before numbers because bool subclasses int.
    """
    if isinstance(value, (bool, np.bool_)):
        return "boolean"
    if isinstance(value, (int, float, np.integer, np.floating)):
        return "number"
    if isinstance(value, str):
        return "string"
    return "object"


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a cell as a finite number.

    Native numbers and numeric strings (surrounding whitespace allowed)
    qualify; booleans do not. Digit-group underscores ("1_000") are not
    numeric, and integers beyond float range count as infinite.

    Returns:
        The float value, or None if the cell is not a finite number
    """
    if isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except (ValueError, OverflowError):
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def column_values(rows: Sequence[Sequence[Any]], index: int) -> List[Any]:
    """Extract one column from row-major sample data."""
    return [row[index] for row in rows]


def non_null(values: Sequence[Any]) -> List[Any]:
    """Values that are not null, in original order."""
    return [v for v in values if not is_null(v)]


def unique_count(values: Sequence[Any]) -> int:
    """
    Number of distinct values, using the value's type and repr as identity.

    Keyed by (kind, repr) so unhashable cells (lists, dicts) are counted
    and 1 and "1" stay distinct.
    """
    return len({(primitive_kind(v), repr(v)) for v in values})
