"""
Report lineage — the collection of loaded and derived reports.

The whole collection lives in one immutable LineageState. Every operation
takes a state and returns a new one; nothing is edited in place. Reports are
referenced by their stable id, never by position.

    normal ──generate_summary──> hidden, part_of_summary, used_in_summary
    summary ──generate_meta_summary (if selected)──> used_in_meta_summary
    meta_summary is terminal
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Iterable, Optional

import pandas as pd

from coinsdash.config import DEFAULT_SUMMARY_NAME, META_SUMMARY_NAME
from coinsdash.data.errors import ReportLockedError, UnknownReportError
from coinsdash.data.schemas import Report, ReportKind, ReportSource, empty_frame, new_report_id


@dataclass(frozen=True)
class LineageState:
    reports: tuple = ()                 # tuple[Report, ...] in creation order
    active_id: Optional[str] = None
    hidden_ids: frozenset = frozenset()
    selected_ids: tuple = ()            # meta-summary selection, in click order

    def get(self, report_id: str) -> Report:
        for r in self.reports:
            if r.id == report_id:
                return r
        raise UnknownReportError(report_id)

    def index_of(self, report_id: str) -> int:
        for i, r in enumerate(self.reports):
            if r.id == report_id:
                return i
        raise UnknownReportError(report_id)

    @property
    def active(self) -> Optional[Report]:
        if self.active_id is None:
            return None
        return self.get(self.active_id)

    def is_hidden(self, report_id: str) -> bool:
        return report_id in self.hidden_ids


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------

def common_prefix(names: list[str]) -> str:
    """Longest character-wise prefix shared by every name (not word-aware)."""
    if not names:
        return ""
    return os.path.commonprefix(list(names))


def derive_summary_naming(names: list[str]) -> tuple[str, list[str]]:
    """(summary name, per-source labels) from the shared prefix of names.

    ["Coins - US", "Coins - UK"] → ("Coins -", ["US", "UK"])
    ["USA", "Germany"]           → ("Combined Summary", ["USA", "Germany"])
    """
    prefix = common_prefix(names).rstrip()
    summary_name = prefix or DEFAULT_SUMMARY_NAME
    labels = [name[len(prefix):].strip() for name in names]
    return summary_name, labels


def combine_records(frames: Iterable[pd.DataFrame]) -> pd.DataFrame:
    """Concatenate record frames in order (report order, then row order)."""
    frames = [f for f in frames if not f.empty]
    if not frames:
        return empty_frame()
    return pd.concat(frames, ignore_index=True)


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------

def summary_candidates(state: LineageState) -> list[Report]:
    """Ordinary reports not yet folded into a summary."""
    return [r for r in state.reports if r.kind == ReportKind.NORMAL and not r.used_in_summary]


def meta_summary_candidates(state: LineageState) -> list[Report]:
    """Summaries that may still be combined (selected or not)."""
    return [r for r in state.reports if r.kind == ReportKind.SUMMARY and not r.used_in_meta_summary]


def selected_for_meta_summary(state: LineageState) -> list[Report]:
    """Selected, still-combinable summaries in selection order."""
    candidates = {r.id: r for r in meta_summary_candidates(state)}
    return [candidates[i] for i in state.selected_ids if i in candidates]


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def add_reports(state: LineageState, batch: Iterable[tuple[str, pd.DataFrame]]) -> LineageState:
    """Append one ordinary report per (name, records); the last one becomes active."""
    added = tuple(
        Report(id=new_report_id(), display_name=name, kind=ReportKind.NORMAL, records=records)
        for name, records in batch
    )
    if not added:
        return state
    return replace(state, reports=state.reports + added, active_id=added[-1].id)


def generate_summary(state: LineageState) -> LineageState:
    """Combine every ordinary, not-yet-summarised report into a new summary.

    No-op with fewer than two candidates. The sources are flagged and hidden;
    nothing else changes visibility.
    """
    eligible = summary_candidates(state)
    if len(eligible) < 2:
        return state

    name, labels = derive_summary_naming([r.display_name for r in eligible])
    summary = Report(
        id=new_report_id(),
        display_name=name,
        kind=ReportKind.SUMMARY,
        records=combine_records(r.records for r in eligible),
        sources=tuple(ReportSource(r.id, label) for r, label in zip(eligible, labels)),
    )

    source_ids = {r.id for r in eligible}
    reports = tuple(
        replace(r, part_of_summary=True, used_in_summary=True) if r.id in source_ids else r
        for r in state.reports
    )
    return replace(
        state,
        reports=reports + (summary,),
        active_id=summary.id,
        hidden_ids=state.hidden_ids | source_ids,
    )


def generate_meta_summary(state: LineageState) -> LineageState:
    """Combine the selected summaries into one overall summary.

    No-op with fewer than two selected candidates. Afterwards the collection
    holds only the selected summaries and the new meta-summary: every other
    report, including unselected summaries, is dropped. The selection is
    cleared.
    """
    chosen = selected_for_meta_summary(state)
    if len(chosen) < 2:
        return state

    meta = Report(
        id=new_report_id(),
        display_name=META_SUMMARY_NAME,
        kind=ReportKind.META_SUMMARY,
        records=combine_records(r.records for r in chosen),
        sources=tuple(ReportSource(r.id, r.display_name) for r in chosen),
    )

    chosen_ids = {r.id for r in chosen}
    kept = tuple(
        replace(r, used_in_meta_summary=True)
        for r in state.reports
        if r.id in chosen_ids
    )
    return LineageState(
        reports=kept + (meta,),
        active_id=meta.id,
        hidden_ids=frozenset(i for i in state.hidden_ids if i in chosen_ids),
        selected_ids=(),
    )


def select(state: LineageState, report_id: str) -> LineageState:
    """Make a report the active one."""
    state.get(report_id)
    return replace(state, active_id=report_id)


def show(state: LineageState, report_id: str) -> LineageState:
    """Unhide a report and make it active."""
    state.get(report_id)
    return replace(state, hidden_ids=state.hidden_ids - {report_id}, active_id=report_id)


def hide(state: LineageState, report_id: str) -> LineageState:
    """Hide a report; the first summary (or else the first report) becomes active."""
    state.get(report_id)
    first_summary = next((r for r in state.reports if r.is_summary), None)
    fallback = first_summary or state.reports[0]
    return replace(state, hidden_ids=state.hidden_ids | {report_id}, active_id=fallback.id)


def remove(state: LineageState, report_id: str) -> LineageState:
    """Delete an ordinary report that no summary depends on.

    If it was active, the report now at its position (clamped to the end)
    becomes active; None once the collection is empty.
    """
    report = state.get(report_id)
    if report.kind != ReportKind.NORMAL:
        raise ReportLockedError(report_id, "Summaries cannot be removed")
    if report.part_of_summary:
        raise ReportLockedError(report_id, "Report is part of a summary; hide it instead")

    position = state.index_of(report_id)
    remaining = tuple(r for r in state.reports if r.id != report_id)

    if not remaining:
        active_id = None
    elif state.active_id is not None and state.active_id != report_id:
        active_id = state.active_id
    else:
        active_id = remaining[min(position, len(remaining) - 1)].id

    return replace(
        state,
        reports=remaining,
        active_id=active_id,
        hidden_ids=state.hidden_ids - {report_id},
        selected_ids=tuple(i for i in state.selected_ids if i != report_id),
    )


def toggle_selection(state: LineageState, report_id: str) -> LineageState:
    """Add or drop a summary from the meta-summary selection.

    Only plain summaries can be selected; other kinds leave the state as is.
    """
    report = state.get(report_id)
    if report.kind != ReportKind.SUMMARY:
        return state
    if report_id in state.selected_ids:
        selected = tuple(i for i in state.selected_ids if i != report_id)
    else:
        selected = state.selected_ids + (report_id,)
    return replace(state, selected_ids=selected)


def clear_selection(state: LineageState) -> LineageState:
    return replace(state, selected_ids=())


# ---------------------------------------------------------------------------
# Read-only views for presentation
# ---------------------------------------------------------------------------

def visible_reports(state: LineageState) -> list[Report]:
    """Reports shown as tabs: everything not hidden, plus all summaries."""
    return [r for r in state.reports if r.is_summary or not state.is_hidden(r.id)]


def report_view(state: LineageState, report: Report) -> dict:
    return {
        "id": report.id,
        "display_name": report.display_name,
        "kind": report.kind.value,
        "flags": {
            "is_hidden": state.is_hidden(report.id),
            "part_of_summary": report.part_of_summary,
            "used_in_summary": report.used_in_summary,
            "used_in_meta_summary": report.used_in_meta_summary,
        },
        "sources": [{"report_id": s.report_id, "label": s.label} for s in report.sources],
        "labels": report.labels,
        "record_count": report.record_count,
        "unique_users": report.unique_users,
        "is_active": report.id == state.active_id,
        "is_selected": report.id in state.selected_ids,
        "selectable": report.kind == ReportKind.SUMMARY and not report.used_in_meta_summary,
    }


def lineage_view(state: LineageState, visible_only: bool = False) -> dict:
    """Everything the presentation needs to render tabs and buttons."""
    reports = visible_reports(state) if visible_only else list(state.reports)
    return {
        "reports": [report_view(state, r) for r in reports],
        "active_id": state.active_id,
        "selected_ids": list(state.selected_ids),
        "can_generate_summary": len(summary_candidates(state)) >= 2,
        "can_generate_meta_summary": len(selected_for_meta_summary(state)) >= 2,
    }
