"""
Report lineage endpoints — list, summarize, show/hide/select, remove.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from coinsdash.data.store import SessionStore
from coinsdash.data.errors import ReportLockedError, UnknownReportError
from coinsdash.api.dependencies import get_store
from coinsdash.api.response_models import GenerateResponse, LineageResponse

router = APIRouter(prefix="/api/reports", tags=["reports"])


def _apply(store: SessionStore, op: str, report_id: str) -> dict:
    try:
        getattr(store, op)(report_id)
    except UnknownReportError as e:
        raise HTTPException(404, str(e))
    except ReportLockedError as e:
        raise HTTPException(409, e.reason)
    return store.view()


@router.get("", response_model=LineageResponse)
def list_reports(
    visible_only: bool = Query(False, description="Only reports that get a tab"),
    store: SessionStore = Depends(get_store),
):
    return store.view(visible_only)


# ── Summaries ──────────────────────────────────────────────────────

@router.post("/summary", response_model=GenerateResponse)
def generate_summary(store: SessionStore = Depends(get_store)):
    """Combine every normal report not yet in a summary. No-op below two."""
    report = store.generate_summary()
    return {
        "generated": report is not None,
        "report_id": report.id if report else None,
        "lineage": store.view(),
    }


@router.post("/meta-summary", response_model=GenerateResponse)
def generate_meta_summary(store: SessionStore = Depends(get_store)):
    """Combine the selected summaries. Unselected reports leave the session."""
    report = store.generate_meta_summary()
    return {
        "generated": report is not None,
        "report_id": report.id if report else None,
        "lineage": store.view(),
    }


@router.post("/selection/clear", response_model=LineageResponse)
def clear_selection(store: SessionStore = Depends(get_store)):
    store.clear_selection()
    return store.view()


# ── Per-report operations ──────────────────────────────────────────

@router.post("/{report_id}/select", response_model=LineageResponse)
def select_report(report_id: str, store: SessionStore = Depends(get_store)):
    return _apply(store, "select", report_id)


@router.post("/{report_id}/show", response_model=LineageResponse)
def show_report(report_id: str, store: SessionStore = Depends(get_store)):
    return _apply(store, "show", report_id)


@router.post("/{report_id}/hide", response_model=LineageResponse)
def hide_report(report_id: str, store: SessionStore = Depends(get_store)):
    return _apply(store, "hide", report_id)


@router.post("/{report_id}/toggle-selection", response_model=LineageResponse)
def toggle_selection(report_id: str, store: SessionStore = Depends(get_store)):
    return _apply(store, "toggle_selection", report_id)


@router.delete("/{report_id}", response_model=LineageResponse)
def remove_report(report_id: str, store: SessionStore = Depends(get_store)):
    """Remove a normal report. Reports inside a summary can only be hidden."""
    return _apply(store, "remove", report_id)
