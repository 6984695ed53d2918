"""
Meta endpoints: health.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from coinsdash.data.store import SessionStore
from coinsdash.api.dependencies import get_store
from coinsdash.api.response_models import HealthResponse

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health", response_model=HealthResponse)
def health(store: SessionStore = Depends(get_store)):
    return HealthResponse(
        status="ok",
        reports=store.report_count(),
        visible_reports=len(store.reports(visible_only=True)),
        active_id=store.state.active_id,
    )
