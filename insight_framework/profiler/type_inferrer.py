"""
Column Type Analyzer - semantic type inference for sample columns.

Every column gets exactly one of 'numerical', 'datetime', 'categorical' or
'text'. The decision is an ordered cascade held in TYPE_RULES and evaluated
top to bottom; the first rule whose predicate holds wins. The ordering is the
tie-break policy: a column of year numbers (2021, 2022) is numerical, never
datetime, because the numeric rule comes first.

Design Decisions:
    - Booleans are not numbers (True is not counted towards the numeric ratio)
    - Date detection needs both a digit-group pattern AND a successful
      pandas parse, so free text such as "May" or "2 apples" is not a date
    - Columns with no non-null values default to text
    - Thresholds come from AnalysisConfig and are tunable

Usage:
    analyzer = ColumnTypeAnalyzer()
    columns = analyzer.analyze_columns(headers, rows)
    analyzer.classify_column_type(["2024-01-15", "2024-02-01"])  # 'datetime'
"""

import logging
import re
import warnings
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from insight_framework.core import constants
from insight_framework.core.budget import Deadline, unbounded
from insight_framework.core.config import AnalysisConfig, DEFAULT_CONFIG
from insight_framework.core.models import ColumnInfo
from insight_framework.profiler.analysis_utils import (
    is_null, parse_number, column_values, non_null, unique_count
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypeRule:
    """One step of the type cascade: if predicate(values, config) then inferred_type."""
    inferred_type: str
    predicate: Callable[[List[Any], AnalysisConfig], bool]
    description: str = ""


class ColumnTypeAnalyzer:
    """
    Infers ColumnInfo for each column of a validated sample.

    Attributes:
        DATE_PATTERNS: Anchored digit-group date patterns (ISO, US, EU, slash-ISO)
        TYPE_RULES: Ordered cascade; first matching rule decides the type
        DEFAULT_TYPE: Result when no rule matches

    Example:
        >>> analyzer = ColumnTypeAnalyzer()
        >>> analyzer.classify_column_type([999, 899])
        'numerical'
        >>> analyzer.classify_column_type(["A", "B", "A", "B"])
        'categorical'
    """

    DATE_PATTERNS = [
        r'^\d{4}-\d{1,2}-\d{1,2}',    # ISO date (2024-01-15)
        r'^\d{1,2}/\d{1,2}/\d{2,4}',  # US date (01/15/2024, 1/5/24)
        r'^\d{1,2}-\d{1,2}-\d{4}',    # EU date (15-01-2024)
        r'^\d{4}/\d{1,2}/\d{1,2}',    # Alternative ISO (2024/01/15)
    ]

    DEFAULT_TYPE = "text"

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self._date_regexes = [re.compile(p) for p in self.DATE_PATTERNS]
        self.TYPE_RULES: Tuple[TypeRule, ...] = (
            TypeRule("numerical", self._is_numerical,
                     "share of finite numbers >= numeric_ratio_threshold"),
            TypeRule("datetime", self._is_datetime,
                     "share of parseable date strings >= datetime_ratio_threshold"),
            TypeRule("categorical", self._is_categorical,
                     "low unique ratio, at least 2 samples, short values"),
        )

    # ------------------------------------------------------------------
    # Cascade predicates (receive non-null values only)
    # ------------------------------------------------------------------

    def _is_numerical(self, values: List[Any], config: AnalysisConfig) -> bool:
        numeric = sum(1 for v in values if parse_number(v) is not None)
        return numeric / len(values) >= config.numeric_ratio_threshold

    def _is_datetime(self, values: List[Any], config: AnalysisConfig) -> bool:
        dates = sum(1 for v in values if self.is_date_string(v))
        return dates / len(values) >= config.datetime_ratio_threshold

    def _is_categorical(self, values: List[Any], config: AnalysisConfig) -> bool:
        if len(values) < constants.CATEGORICAL_MIN_SAMPLES:
            return False
        unique_ratio = unique_count(values) / len(values)
        # Non-string values contribute length 0 but still count in the denominator
        avg_length = sum(len(v) for v in values if isinstance(v, str)) / len(values)
        return (unique_ratio <= config.categorical_unique_ratio
                and avg_length <= config.categorical_max_avg_length)

    def is_date_string(self, value: Any) -> bool:
        """Check if a value is a string that looks like AND parses as a date."""
        if not isinstance(value, str):
            return False
        text = value.strip()
        if not any(regex.match(text) for regex in self._date_regexes):
            return False
        with warnings.catch_warnings():
            # pandas warns when it has to guess a format per element
            warnings.simplefilter("ignore")
            try:
                parsed = pd.to_datetime(text, errors="coerce")
            except (ValueError, TypeError, OverflowError):
                return False
        return not pd.isna(parsed)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def classify_column_type(self, values: Sequence[Any]) -> str:
        """
        Classify one column's raw values.

        Args:
            values: Raw column values (nulls allowed)

        Returns:
            'numerical', 'datetime', 'categorical' or 'text'
        """
        present = non_null(values)
        if not present:
            return self.DEFAULT_TYPE

        for rule in self.TYPE_RULES:
            if rule.predicate(present, self.config):
                return rule.inferred_type
        return self.DEFAULT_TYPE

    def analyze_column(self, name: str, values: Sequence[Any]) -> ColumnInfo:
        """Build ColumnInfo for one column."""
        return ColumnInfo(
            name=name,
            inferred_type=self.classify_column_type(values),
            unique_value_count=unique_count(non_null(values)),
            has_missing=any(is_null(v) for v in values),
            sample_values=tuple(values[:constants.COLUMN_SAMPLE_VALUES]),
        )

    def analyze_columns(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[Any]],
        budget: Optional[Deadline] = None
    ) -> Tuple[ColumnInfo, ...]:
        """
        Infer ColumnInfo for every column, in header order.

        Args:
            headers: Validated headers
            rows: Validated rows (one value per header)
            budget: Deadline checked before each column

        Returns:
            Tuple of ColumnInfo

        Raises:
            AnalysisTimeoutError: If the budget runs out
        """
        budget = budget or unbounded("column analysis")
        columns = []
        for index, header in enumerate(headers):
            budget.check()
            info = self.analyze_column(header, column_values(rows, index))
            columns.append(info)

        type_counts = Counter(c.inferred_type for c in columns)
        logger.debug(
            "Column types: " + ", ".join(f"{t}={type_counts.get(t, 0)}" for t in constants.COLUMN_TYPES)
        )
        return tuple(columns)


def column_statistics(values: Sequence[Any], inferred_type: str) -> Dict[str, Any]:
    """
    Basic statistics for one column.

    Numerical columns get min/max/mean/median (mean and median rounded to 2
    places); other types get the mode (most frequent value, first seen wins
    ties). All types get null_count and unique_count.

    Args:
        values: Raw column values
        inferred_type: Type returned by classify_column_type()

    Returns:
        Dictionary of plain Python values
    """
    present = non_null(values)
    stats: Dict[str, Any] = {
        "null_count": len(values) - len(present),
        "unique_count": unique_count(present),
    }

    if inferred_type == "numerical":
        numbers = [n for n in (parse_number(v) for v in present) if n is not None]
        if numbers:
            arr = np.array(numbers, dtype=np.float64)
            stats.update({
                "min": _plain_number(arr.min()),
                "max": _plain_number(arr.max()),
                "mean": round(float(arr.mean()), 2),
                "median": round(float(np.median(arr)), 2),
            })
        return stats

    if present:
        counts: Dict[str, int] = {}
        first_seen: Dict[str, Any] = {}
        for value in present:
            key = repr(value)
            counts[key] = counts.get(key, 0) + 1
            first_seen.setdefault(key, value)
        # dicts keep insertion order, so max() returns the first-seen value on ties
        mode_key = max(counts, key=lambda k: counts[k])
        stats["mode"] = first_seen[mode_key]
        stats["mode_count"] = counts[mode_key]
    return stats


def _plain_number(value: float) -> Any:
    number = float(value)
    return int(number) if number.is_integer() else number
