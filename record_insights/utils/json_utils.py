"""
JSON serialization utilities for fitted models.

Handles numpy types so fitted model state can be written as standard JSON.
NaN and infinite floats are written as null and read back as NaN.
"""

import json
from typing import Any, Optional, Sequence

import numpy as np


class NumpyJSONEncoder(json.JSONEncoder):
    """
    JSON encoder that handles numpy types.

    Converts:
    - numpy int types → Python int
    - numpy float types → Python float
    - numpy bool → Python bool
    - numpy arrays → Python lists
    - NaN/inf → null
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, np.integer):
            return int(obj)

        if isinstance(obj, np.floating):
            if np.isnan(obj) or np.isinf(obj):
                return None
            return float(obj)

        if isinstance(obj, np.bool_):
            return bool(obj)

        if isinstance(obj, np.ndarray):
            return convert_to_json_serializable(obj)

        return super().default(obj)


def convert_to_json_serializable(obj: Any) -> Any:
    """
    Recursively convert object to JSON-serializable types.

    Plain Python floats that are NaN/inf are converted to None as well, since
    ``json.JSONEncoder.default`` is never consulted for them.

    Args:
        obj: Object to convert

    Returns:
        JSON-serializable version of object
    """
    if obj is None:
        return None

    if isinstance(obj, (bool, np.bool_)):
        return bool(obj)

    if isinstance(obj, np.integer):
        return int(obj)

    if isinstance(obj, (float, np.floating)):
        if np.isnan(obj) or np.isinf(obj):
            return None
        return float(obj)

    if isinstance(obj, np.ndarray):
        return [convert_to_json_serializable(item) for item in obj.tolist()]

    if isinstance(obj, dict):
        return {
            key: convert_to_json_serializable(value)
            for key, value in obj.items()
        }

    if isinstance(obj, (list, tuple)):
        return [convert_to_json_serializable(item) for item in obj]

    return obj


def float_array_from_json(values: Sequence[Any], ndim: Optional[int] = None) -> np.ndarray:
    """
    Rebuild a float array written by ``convert_to_json_serializable``.

    Nulls become NaN.

    Raises:
        ValueError: If values are not numeric or the dimensionality differs
    """
    def restore(item):
        if isinstance(item, list):
            return [restore(i) for i in item]
        if item is None:
            return np.nan
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise ValueError(f"expected a number, got {item!r}")
        return item

    array = np.array(restore(list(values)), dtype=np.float64)
    if ndim is not None and array.ndim != ndim:
        raise ValueError(f"expected {ndim}-dimensional array, got {array.ndim} dimensions")
    return array


def safe_json_dump(obj: Any, fp, **kwargs) -> None:
    """
    Serialize object to a JSON file using the numpy-aware encoder.

    Args:
        obj: Object to serialize
        fp: File pointer to write to
        **kwargs: Additional arguments to pass to json.dump
    """
    if 'cls' not in kwargs:
        kwargs['cls'] = NumpyJSONEncoder
    if 'indent' not in kwargs:
        kwargs['indent'] = 2

    json.dump(convert_to_json_serializable(obj), fp, allow_nan=False, **kwargs)
