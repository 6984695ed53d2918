"""
Record, report and filter schemas.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional, Union

import pandas as pd

from coinsdash.config import BONUS_ACTION

RECORD_COLUMNS = ["user_id", "coins", "action", "timestamp"]


@dataclass(frozen=True)
class TransactionRecord:
    """One normalized transaction."""
    user_id: str
    coins: float
    action: str
    timestamp: Optional[float] = None     # epoch seconds


def empty_frame() -> pd.DataFrame:
    """Record frame with the canonical columns and no rows."""
    return pd.DataFrame({
        "user_id": pd.Series(dtype=object),
        "coins": pd.Series(dtype="float64"),
        "action": pd.Series(dtype=object),
        "timestamp": pd.Series(dtype="float64"),
    })


def frame_from_records(
    records: Iterable[Union[TransactionRecord, Mapping]],
) -> pd.DataFrame:
    """Build a record frame from TransactionRecords or plain mappings."""
    rows = []
    for rec in records:
        if isinstance(rec, TransactionRecord):
            rows.append((rec.user_id, rec.coins, rec.action, rec.timestamp))
        else:
            rows.append((rec["user_id"], rec["coins"], rec["action"], rec.get("timestamp")))
    if not rows:
        return empty_frame()

    df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    df["user_id"] = df["user_id"].astype(str)
    df["action"] = df["action"].astype(str)
    df["coins"] = pd.to_numeric(df["coins"], errors="coerce").fillna(0).astype("float64")
    df["timestamp"] = pd.to_numeric(df["timestamp"], errors="coerce").astype("float64")
    return df


def records_from_frame(df: pd.DataFrame) -> list[TransactionRecord]:
    """Inverse of frame_from_records; missing timestamps come back as None."""
    out = []
    for user_id, coins, action, ts in df[RECORD_COLUMNS].itertuples(index=False, name=None):
        out.append(TransactionRecord(
            user_id=user_id,
            coins=float(coins),
            action=action,
            timestamp=None if pd.isna(ts) else float(ts),
        ))
    return out


# ---------------------------------------------------------------------------
# Action filter
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ActionFilter:
    """Which actions take part in aggregation.

    include_bonus=False drops welcome-bonus redemptions; excluded_actions adds
    further exclusions without touching the engine.
    """
    include_bonus: bool = True
    excluded_actions: frozenset = frozenset()

    def includes(self, action: str) -> bool:
        if not self.include_bonus and action == BONUS_ACTION:
            return False
        return action not in self.excluded_actions

    @property
    def excluded(self) -> frozenset:
        if self.include_bonus:
            return frozenset(self.excluded_actions)
        return frozenset(self.excluded_actions) | {BONUS_ACTION}

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        """Return the rows whose action is included (a view, not a copy)."""
        excluded = self.excluded
        if not excluded or df.empty:
            return df
        return df[~df["action"].isin(excluded)]

    @property
    def label(self) -> str:
        if self.include_bonus and not self.excluded_actions:
            return "All Actions"
        return "Excluding " + ", ".join(sorted(self.excluded))


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

class ReportKind(str, Enum):
    NORMAL = "normal"
    SUMMARY = "summary"
    META_SUMMARY = "meta_summary"


@dataclass(frozen=True)
class ReportSource:
    report_id: str
    label: str


def new_report_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class Report:
    """A named record set plus lineage metadata.

    Records are never mutated after creation; only the usage flags change,
    and that by replacement (dataclasses.replace).
    """
    id: str
    display_name: str
    kind: ReportKind = ReportKind.NORMAL
    records: pd.DataFrame = field(default_factory=empty_frame, compare=False, repr=False)
    sources: tuple = ()                   # tuple[ReportSource, ...]
    part_of_summary: bool = False
    used_in_summary: bool = False
    used_in_meta_summary: bool = False

    @property
    def is_summary(self) -> bool:
        return self.kind in (ReportKind.SUMMARY, ReportKind.META_SUMMARY)

    @property
    def labels(self) -> list[str]:
        """Source labels shown as links; empty labels are left out."""
        return [s.label for s in self.sources if s.label]

    @property
    def record_count(self) -> int:
        return len(self.records)

    @property
    def unique_users(self) -> int:
        if self.records.empty:
            return 0
        return int(self.records["user_id"].nunique())
