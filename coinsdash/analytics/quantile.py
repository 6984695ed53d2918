"""
Value-weighted quantile distribution of users by coin holdings.

Percentiles are taken over coin mass, not over user count: p50 is the coin
total of the first user (ascending) at which the users seen so far hold at
least 50% of all coins. Users are then split into five cohorts by those
thresholds, with inclusive upper bounds:

    bucket 1:          total <= p25
    bucket 2:   p25 <  total <= p50
    bucket 3:   p50 <  total <= p70
    bucket 4:   p70 <  total <= p90
    bucket 5:   p90 <  total
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from coinsdash.config import CHUNK_SIZE, PERCENTILE_TARGETS, QUANTILE_BUCKET_NAMES
from coinsdash.analytics.common import chunk_bounds, pct_of_total


def user_totals(df: pd.DataFrame, chunk_size: int = CHUNK_SIZE) -> pd.Series:
    """Coins per user, sorted ascending (index = user_id).

    Accumulates chunk by chunk with unbuffered in-order adds, so every user's
    total is built from the same sequence of additions whatever the chunk size.
    """
    if df.empty:
        return pd.Series(dtype="float64", name="coins")

    codes, users = pd.factorize(df["user_id"], sort=False)
    coins = df["coins"].to_numpy(dtype="float64")
    acc = np.zeros(len(users), dtype="float64")
    for start, stop in chunk_bounds(len(df), chunk_size):
        np.add.at(acc, codes[start:stop], coins[start:stop])

    totals = pd.Series(acc, index=pd.Index(users, name="user_id"), name="coins")
    return totals.sort_values(kind="stable")


def percentile_thresholds(
    sorted_totals,
    targets: tuple[int, ...] = PERCENTILE_TARGETS,
) -> dict[str, float]:
    """Threshold per target: the first ascending user total whose cumulative
    share of all coins reaches the target.

    All thresholds are 0 when there are no coins. A target the cumulative
    share never reaches (only possible with negative totals) falls back to
    the largest user total, which keeps the thresholds non-decreasing.
    """
    values = np.asarray(sorted_totals, dtype="float64")
    thresholds = {f"p{t}": 0.0 for t in targets}
    if values.size == 0:
        return thresholds

    cumulative = np.cumsum(values)
    grand_total = cumulative[-1]
    if grand_total == 0:
        return thresholds

    share = cumulative / grand_total
    for t in targets:
        hits = np.flatnonzero(share >= t / 100)
        thresholds[f"p{t}"] = float(values[hits[0]] if hits.size else values[-1])
    return thresholds


def assign_buckets(sorted_totals, thresholds: dict[str, float]) -> np.ndarray:
    """Bucket index 0-4 for each user total (inclusive upper bounds)."""
    edges = np.array([thresholds[f"p{t}"] for t in PERCENTILE_TARGETS], dtype="float64")
    # side="left" counts thresholds strictly below each value
    return np.searchsorted(edges, np.asarray(sorted_totals, dtype="float64"), side="left")


def quantile_distribution(df: pd.DataFrame, chunk_size: int = CHUNK_SIZE) -> dict:
    """Thresholds plus the five cohorts with user counts and coin sums."""
    totals = user_totals(df, chunk_size)
    values = totals.to_numpy()
    thresholds = percentile_thresholds(values)

    n_users = int(values.size)
    grand_total = float(values.sum()) if n_users else 0.0
    max_total = float(values[-1]) if n_users else 0.0

    n_buckets = len(QUANTILE_BUCKET_NAMES)
    if n_users:
        idx = assign_buckets(values, thresholds)
        counts = np.bincount(idx, minlength=n_buckets)
        sums = np.bincount(idx, weights=values, minlength=n_buckets)
    else:
        counts = np.zeros(n_buckets, dtype="int64")
        sums = np.zeros(n_buckets, dtype="float64")

    cuts = [thresholds[f"p{t}"] for t in PERCENTILE_TARGETS]
    lows = [0.0] + cuts
    highs = cuts + [max_total]

    buckets = []
    for i, name in enumerate(QUANTILE_BUCKET_NAMES):
        inner = 0 < i < n_buckets - 1
        buckets.append({
            "name": name,
            "low": lows[i],
            "high": highs[i],
            "degenerate": bool(inner and lows[i] == highs[i]),
            "user_count": int(counts[i]),
            "coin_sum": float(sums[i]),
            "user_pct": round(pct_of_total(int(counts[i]), n_users), 1),
            "coin_pct": round(pct_of_total(float(sums[i]), grand_total), 1),
        })

    return {
        **thresholds,
        "total_users": n_users,
        "total_coins": grand_total,
        "max_user_total": max_total,
        "buckets": buckets,
    }


def _fmt(value: float) -> str:
    return f"{value:,.0f}" if float(value).is_integer() else f"{value:,.2f}"


def quantile_insights(quantile: dict) -> list[str]:
    """Plain-language reading of the cutoffs."""
    if not quantile["total_users"]:
        return []

    lines = [
        f"Users with ≤ {_fmt(quantile[f'p{t}'])} coins hold {t}% of all coins"
        for t in PERCENTILE_TARGETS
    ]
    top = quantile["buckets"][-1]
    lines.append(f"Users with > {_fmt(quantile['p90'])} coins hold 10% of all coins")
    lines.append(
        f"{top['user_count']:,} users ({top['user_pct']:.0f}% of users) hold 10% of all coins"
    )
    return lines
