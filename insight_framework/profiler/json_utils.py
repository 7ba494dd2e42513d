"""
JSON serialization utilities for analysis input and output.

pandas hands CSV cells over as numpy scalars and NaN; the input contract
and the output contract both need plain JSON values. These helpers convert
in both directions so every dict crossing a module boundary serializes with
json.dumps(allow_nan=False).
"""

import json
import math
from datetime import datetime, date
from typing import Any

import numpy as np
import pandas as pd


def convert_to_json_serializable(obj: Any) -> Any:
    """
    Recursively convert an object to plain JSON-serializable Python values.

    NaN, inf and pandas NaT/NA become None; tuples become lists.

    Args:
        obj: Object to convert

    Returns:
        JSON-serializable version of object
    """
    if obj is None or obj is pd.NaT or obj is pd.NA:
        return None

    if isinstance(obj, (bool, np.bool_)):
        return bool(obj)

    if isinstance(obj, np.integer):
        return int(obj)

    if isinstance(obj, (float, np.floating)):
        value = float(obj)
        return None if math.isnan(value) or math.isinf(value) else value

    if isinstance(obj, np.ndarray):
        return [convert_to_json_serializable(item) for item in obj.tolist()]

    if isinstance(obj, (pd.Timestamp, datetime, date)):
        return obj.isoformat()

    if isinstance(obj, dict):
        return {
            str(key): convert_to_json_serializable(value)
            for key, value in obj.items()
        }

    if isinstance(obj, (list, tuple, set)):
        return [convert_to_json_serializable(item) for item in obj]

    # str, int and anything else are returned as-is
    return obj


def safe_json_dumps(obj: Any, **kwargs) -> str:
    """
    Serialize to JSON after converting numpy/pandas values.

    Args:
        obj: Object to serialize
        **kwargs: Passed through to json.dumps (indent, ensure_ascii, ...)

    Returns:
        JSON string
    """
    return json.dumps(convert_to_json_serializable(obj), allow_nan=False, **kwargs)
