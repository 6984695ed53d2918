"""
SessionStore: the in-memory session behind the API and CLI.

Holds the current LineageState and swaps it wholesale on every change, so a
reader never sees a half-applied transition. Nothing is written to disk.
"""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Optional

import pandas as pd

from coinsdash.config import CHUNK_SIZE
from coinsdash.data import lineage
from coinsdash.data.lineage import LineageState
from coinsdash.data.loader import BatchResult, load_batch, load_paths
from coinsdash.data.schemas import ActionFilter, Report, empty_frame


class SessionStore:
    """Loaded reports, their lineage, and snapshot accessors."""

    def __init__(self, chunk_size: int = CHUNK_SIZE) -> None:
        self.chunk_size = chunk_size
        self.last_errors: list[dict] = []
        self._state = LineageState()
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> LineageState:
        return self._state

    def _transition(self, fn: Callable[..., LineageState], *args) -> tuple[LineageState, LineageState]:
        """Read the current state, derive a new one, replace. Returns (before, after)."""
        with self._lock:
            before = self._state
            after = fn(before, *args)
            self._state = after
        return before, after

    def apply(self, fn: Callable[..., LineageState], *args) -> LineageState:
        return self._transition(fn, *args)[1]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _add_batch(self, result: BatchResult) -> BatchResult:
        if result.loaded:
            before, after = self._transition(
                lineage.add_reports, [(f.name, f.records) for f in result.loaded]
            )
            result.report_ids = [r.id for r in after.reports[len(before.reports):]]
        self.last_errors = result.errors
        print(f"  Added {len(result.loaded)} report(s), {len(result.errors)} file(s) rejected")
        return result

    def ingest(self, files: list[tuple[str, bytes]]) -> BatchResult:
        """Load uploaded (filename, content) pairs; good files become reports."""
        print(f"Loading {len(files)} file(s)...")
        return self._add_batch(load_batch(files, self.chunk_size))

    def ingest_paths(self, paths: list[Path]) -> BatchResult:
        print(f"Loading {len(paths)} file(s) from disk...")
        return self._add_batch(load_paths(paths, self.chunk_size))

    # ------------------------------------------------------------------
    # Lineage operations
    # ------------------------------------------------------------------

    def generate_summary(self) -> Optional[Report]:
        """New summary report, or None when fewer than two reports qualify."""
        before, after = self._transition(lineage.generate_summary)
        return None if after is before else after.active

    def generate_meta_summary(self) -> Optional[Report]:
        before, after = self._transition(lineage.generate_meta_summary)
        if after is before:
            return None
        dropped = len(before.reports) - len(after.reports) + 1
        if dropped:
            print(f"  Meta-summary created; {dropped} unselected report(s) dropped from the session")
        return after.active

    def select(self, report_id: str) -> LineageState:
        return self.apply(lineage.select, report_id)

    def show(self, report_id: str) -> LineageState:
        return self.apply(lineage.show, report_id)

    def hide(self, report_id: str) -> LineageState:
        return self.apply(lineage.hide, report_id)

    def remove(self, report_id: str) -> LineageState:
        return self.apply(lineage.remove, report_id)

    def toggle_selection(self, report_id: str) -> LineageState:
        return self.apply(lineage.toggle_selection, report_id)

    def clear_selection(self) -> LineageState:
        return self.apply(lineage.clear_selection)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def reports(self, visible_only: bool = False) -> list[Report]:
        state = self._state
        return lineage.visible_reports(state) if visible_only else list(state.reports)

    def get(self, report_id: str) -> Report:
        return self._state.get(report_id)

    def active(self) -> Optional[Report]:
        return self._state.active

    def view(self, visible_only: bool = False) -> dict:
        return lineage.lineage_view(self._state, visible_only)

    def report_count(self) -> int:
        return len(self._state.reports)

    def _resolve(self, report_id: Optional[str]) -> Optional[Report]:
        if report_id is None:
            return self.active()
        return self.get(report_id)

    def get_records(
        self,
        report_id: Optional[str] = None,
        action_filter: Optional[ActionFilter] = None,
    ) -> pd.DataFrame:
        """Records of a report (default: the active one) after the action filter.

        Returns a filtered view (not a copy); callers that mutate must copy.
        """
        report = self._resolve(report_id)
        if report is None:
            return empty_frame()
        df = report.records
        if action_filter is not None:
            df = action_filter.apply(df)
        return df

    def snapshot(
        self,
        report_id: Optional[str] = None,
        action_filter: Optional[ActionFilter] = None,
        by_action: bool = False,
    ):
        """AggregateSnapshot of a report (default: the active one), or None."""
        from coinsdash.analytics.snapshot import compute_snapshot

        report = self._resolve(report_id)
        if report is None:
            return None
        return compute_snapshot(report.records, action_filter, by_action, self.chunk_size)
