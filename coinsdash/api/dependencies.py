"""
FastAPI dependencies — SessionStore singleton, action filter parsing.
"""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Query

from coinsdash.data.store import SessionStore
from coinsdash.data.schemas import ActionFilter

# ---------------------------------------------------------------------------
# Global store singleton (set during startup)
# ---------------------------------------------------------------------------
_store: SessionStore | None = None


def set_store(store: SessionStore) -> None:
    global _store
    _store = store


def get_store() -> SessionStore:
    if _store is None:
        raise HTTPException(503, "Server not initialized yet")
    return _store


# ---------------------------------------------------------------------------
# Action filter from query params
# ---------------------------------------------------------------------------

def parse_action_filter(
    include_bonus: bool = Query(True, description="Include welcome-bonus redemptions"),
    exclude: Optional[list[str]] = Query(None, description="Further action codes to leave out"),
) -> ActionFilter:
    excluded = frozenset(a.strip() for a in (exclude or []) if a.strip())
    return ActionFilter(include_bonus=include_bonus, excluded_actions=excluded)
