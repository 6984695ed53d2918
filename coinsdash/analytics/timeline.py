"""
Per-minute coin time series (UTC).
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from coinsdash.config import TIMELINE_BUCKET_SECONDS


def minute_key(timestamps: pd.Series) -> pd.Series:
    """floor(ts / 60) * 60 as int64 epoch seconds."""
    return (np.floor(timestamps / TIMELINE_BUCKET_SECONDS) * TIMELINE_BUCKET_SECONDS).astype("int64")


def minute_label(minute: int) -> str:
    """HH:MM in UTC."""
    return pd.Timestamp(int(minute), unit="s", tz="UTC").strftime("%H:%M")


def timeline(df: pd.DataFrame, by_action: bool = False) -> list[dict]:
    """Coins per minute, ascending by minute.

    Records without a usable timestamp are skipped. With by_action, every
    bucket lists every action present anywhere in df (0 where absent).
    """
    if df.empty:
        return []

    ts = pd.to_numeric(df["timestamp"], errors="coerce")
    valid = ts.notna() & np.isfinite(ts)
    if not valid.any():
        return []

    timed = pd.DataFrame({
        "minute": minute_key(ts[valid]),
        "action": df.loc[valid, "action"],
        "coins": df.loc[valid, "coins"],
    })
    per_minute = timed.groupby("minute", sort=True)["coins"].sum()

    breakdown = None
    if by_action:
        actions = list(pd.unique(df["action"]))
        breakdown = (
            timed.groupby(["minute", "action"])["coins"].sum()
            .unstack(fill_value=0.0)
            .reindex(index=per_minute.index, columns=actions, fill_value=0.0)
        )

    results = []
    for minute, coins in per_minute.items():
        entry = {
            "minute": int(minute),
            "label": minute_label(minute),
            "coins": float(coins),
        }
        if breakdown is not None:
            entry["by_action"] = {a: float(v) for a, v in breakdown.loc[minute].items()}
        results.append(entry)
    return results
