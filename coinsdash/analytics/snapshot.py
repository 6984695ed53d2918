"""
AggregateSnapshot — every derived view of one record set, computed together.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional

import pandas as pd

from coinsdash.config import CHUNK_SIZE
from coinsdash.data.schemas import ActionFilter
from coinsdash.analytics.common import sanitize_for_json
from coinsdash.analytics.distribution import pie_distribution
from coinsdash.analytics.quantile import quantile_distribution
from coinsdash.analytics.summary import action_stats, summary_stats
from coinsdash.analytics.timeline import timeline


@dataclass(frozen=True)
class AggregateSnapshot:
    unique_users: int
    total_coins: float
    avg_coins_per_user: float
    transaction_count: int
    per_action_stats: list = field(default_factory=list)
    pie_distribution: list = field(default_factory=list)
    quantile: dict = field(default_factory=dict)
    timeline: list = field(default_factory=list)

    def as_dict(self) -> dict:
        return sanitize_for_json(asdict(self))


def compute_snapshot(
    df: pd.DataFrame,
    action_filter: Optional[ActionFilter] = None,
    by_action: bool = False,
    chunk_size: int = CHUNK_SIZE,
) -> AggregateSnapshot:
    """Filter df by action, then run every aggregation over the result."""
    if action_filter is not None:
        df = action_filter.apply(df)

    stats = summary_stats(df)
    return AggregateSnapshot(
        unique_users=stats["unique_users"],
        total_coins=stats["total_coins"],
        avg_coins_per_user=stats["avg_coins_per_user"],
        transaction_count=stats["transaction_count"],
        per_action_stats=action_stats(df),
        pie_distribution=pie_distribution(df),
        quantile=quantile_distribution(df, chunk_size),
        timeline=timeline(df, by_action=by_action),
    )
