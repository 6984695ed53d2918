"""
CoinsDash — FastAPI app factory with an empty in-memory session.
"""
from __future__ import annotations

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coinsdash.config import EXPORTS_FOLDER, CHUNK_SIZE
from coinsdash.data.store import SessionStore
from coinsdash.api.dependencies import set_store
from coinsdash.api.router_meta import router as meta_router
from coinsdash.api.router_upload import router as upload_router
from coinsdash.api.router_reports import router as reports_router
from coinsdash.api.router_dashboard import router as dashboard_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start every process with an empty session."""
    print(f"  COINSDASH_DATA_DIR = {os.environ.get('COINSDASH_DATA_DIR', '(not set)')}")
    print(f"  EXPORTS_FOLDER = {EXPORTS_FOLDER}")
    print(f"  CHUNK_SIZE = {CHUNK_SIZE:,}")

    set_store(SessionStore())
    print("\nCoinsDash ready — no reports yet. Upload .csv / .xlsx files to start.\n")
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="CoinsDash API",
        description="Coin transaction analytics — summaries, quantiles, timelines, report lineage",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(meta_router)
    app.include_router(upload_router)
    app.include_router(reports_router)
    app.include_router(dashboard_router)

    return app


app = create_app()
