"""
Safe math and chunking helpers shared by the aggregation modules.
"""
from __future__ import annotations

import math
from typing import Iterator

import numpy as np
import pandas as pd

from coinsdash.config import CHUNK_SIZE


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide safely, returning default if denominator is zero or NaN."""
    if denominator == 0 or pd.isna(denominator):
        return default
    result = numerator / denominator
    return default if pd.isna(result) else result


def pct_of_total(part: float, total: float) -> float:
    """Percentage of total."""
    return safe_divide(part, total) * 100


def round_money(value: float) -> float:
    """Round to cents with halves going up (0.125 -> 0.13)."""
    return math.floor(value * 100 + 0.5) / 100


def per_user_average(total: float, users: int) -> float:
    """Coins per user rounded to cents; 0 when there are no users."""
    return round_money(safe_divide(total, users))


def chunk_bounds(length: int, chunk_size: int = CHUNK_SIZE) -> Iterator[tuple[int, int]]:
    """(start, stop) pairs covering range(length) in steps of chunk_size."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    for start in range(0, length, chunk_size):
        yield start, min(start + chunk_size, length)


def sanitize_for_json(obj):
    """Recursively convert numpy/pandas types to native Python for JSON serialization."""
    if isinstance(obj, dict):
        clean = {}
        for k, v in obj.items():
            if k is None:
                continue
            if isinstance(k, (float, np.floating)) and (math.isnan(float(k)) or math.isinf(float(k))):
                continue
            clean[str(k) if not isinstance(k, str) else k] = sanitize_for_json(v)
        return clean
    if isinstance(obj, (list, tuple)):
        return [sanitize_for_json(v) for v in obj]
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        v = float(obj)
        return 0.0 if (math.isnan(v) or math.isinf(v)) else v
    if isinstance(obj, np.ndarray):
        return sanitize_for_json(obj.tolist())
    if isinstance(obj, float):
        return 0.0 if (math.isnan(obj) or math.isinf(obj)) else obj
    if pd.api.types.is_scalar(obj) and pd.isna(obj):
        return None
    return obj
