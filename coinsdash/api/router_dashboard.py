"""
Dashboard endpoints — aggregate snapshot of one report, Excel export.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse, JSONResponse

from coinsdash.config import EXPORTS_FOLDER
from coinsdash.data.store import SessionStore
from coinsdash.data.schemas import ActionFilter
from coinsdash.data.errors import UnknownReportError
from coinsdash.api.dependencies import get_store, parse_action_filter
from coinsdash.analytics.common import sanitize_for_json
from coinsdash.reports import coin_report

router = APIRouter(prefix="/api", tags=["dashboard"])


def _safe_json(data: dict) -> JSONResponse:
    return JSONResponse(content=sanitize_for_json(data))


def _output_path(name: str) -> Path:
    EXPORTS_FOLDER.mkdir(parents=True, exist_ok=True)
    safe = re.sub(r"[^\w\-. ]", "_", name)[:60] or "Report"
    return EXPORTS_FOLDER / f"CoinsDash_{safe}.xlsx"


@router.get("/snapshot")
def snapshot(
    report_id: Optional[str] = Query(None, description="Defaults to the active report"),
    by_action: bool = Query(False, description="Per-action coins in each timeline minute"),
    action_filter: ActionFilter = Depends(parse_action_filter),
    store: SessionStore = Depends(get_store),
):
    """Totals, per-action stats, pie, quantile buckets and timeline for one report."""
    try:
        data = coin_report.generate_json(store, report_id, action_filter, by_action)
    except UnknownReportError as e:
        raise HTTPException(404, str(e))
    if data is None:
        raise HTTPException(404, "No report loaded")
    return _safe_json(data)


@router.get("/reports/{report_id}/export")
def export_report(
    report_id: str,
    action_filter: ActionFilter = Depends(parse_action_filter),
    store: SessionStore = Depends(get_store),
):
    """Report snapshot as Excel download."""
    try:
        report = store.get(report_id)
    except UnknownReportError as e:
        raise HTTPException(404, str(e))

    path = coin_report.generate_excel(store, _output_path(report.display_name), report_id, action_filter)
    return FileResponse(
        path=str(path),
        filename=path.name,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
