"""
Upload endpoint: each accepted file becomes one report in the session.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from fastapi.concurrency import run_in_threadpool

from coinsdash.data.store import SessionStore
from coinsdash.api.dependencies import get_store
from coinsdash.api.response_models import UploadResponse

router = APIRouter(prefix="/api", tags=["upload"])


@router.post("/upload", response_model=UploadResponse)
async def upload_files(
    files: list[UploadFile] = File(...),
    store: SessionStore = Depends(get_store),
):
    """Upload one or more .csv / .xlsx (or gzip-compressed .csv.gz) files.

    A bad file is reported in `errors` and never blocks the rest of the batch.
    """
    batch = []
    for f in files:
        if not f.filename:
            raise HTTPException(400, "Missing filename")
        batch.append((f.filename, await f.read()))

    # parsing is pandas work; keep it off the event loop
    result = await run_in_threadpool(store.ingest, batch)
    loaded = [
        {
            "report_id": report_id,
            "file": lf.filename,
            "name": lf.name,
            "records": len(lf.records),
            "unique_users": int(lf.records["user_id"].nunique()),
        }
        for lf, report_id in zip(result.loaded, result.report_ids)
    ]
    status = "uploaded" if result.ok else ("partial" if result.loaded else "rejected")
    return {
        "status": status,
        "loaded": loaded,
        "errors": result.errors,
        "lineage": store.view(),
    }
