"""
Headline KPIs and per-action breakdown.
"""
from __future__ import annotations

import pandas as pd

from coinsdash.analytics.common import per_user_average
from coinsdash.analytics.distribution import friendly_label


def summary_stats(df: pd.DataFrame) -> dict:
    """Unique users, total coins and average coins per user."""
    if df.empty:
        return {
            "unique_users": 0,
            "total_coins": 0.0,
            "avg_coins_per_user": 0.0,
            "transaction_count": 0,
        }

    users = int(df["user_id"].nunique())
    total = float(df["coins"].sum())
    return {
        "unique_users": users,
        "total_coins": total,
        "avg_coins_per_user": per_user_average(total, users),
        "transaction_count": int(len(df)),
    }


def action_stats(df: pd.DataFrame) -> list[dict]:
    """Per-action users, coins and transactions, largest coin total first.

    Actions with equal totals keep the order in which they first appear.
    """
    if df.empty:
        return []

    grouped = df.groupby("action", sort=False).agg(
        unique_users=("user_id", "nunique"),
        total_coins=("coins", "sum"),
        transaction_count=("coins", "size"),
    )

    results = []
    for action, r in grouped.iterrows():
        users = int(r["unique_users"])
        total = float(r["total_coins"])
        results.append({
            "action": action,
            "label": friendly_label(action),
            "unique_users": users,
            "total_coins": total,
            "transaction_count": int(r["transaction_count"]),
            "avg_coins_per_user": per_user_average(total, users),
        })

    # sorted() is stable, reverse=True included
    return sorted(results, key=lambda x: x["total_coins"], reverse=True)
