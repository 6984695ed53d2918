"""
Coin distribution by action (pie chart data).
"""
from __future__ import annotations

import pandas as pd

from coinsdash.config import ACTION_LABELS
from coinsdash.analytics.common import pct_of_total


def friendly_label(action: str) -> str:
    """Display name for an action code; unknown codes pass through unchanged."""
    return ACTION_LABELS.get(action, action)


def pie_distribution(df: pd.DataFrame) -> list[dict]:
    """Total coins per distinct action, in order of first appearance."""
    if df.empty:
        return []

    by_action = df.groupby("action", sort=False)["coins"].sum()
    grand_total = float(df["coins"].sum())

    return [
        {
            "action": action,
            "label": friendly_label(action),
            "total_coins": float(coins),
            "pct_of_total": round(pct_of_total(float(coins), grand_total), 1),
        }
        for action, coins in by_action.items()
    ]
