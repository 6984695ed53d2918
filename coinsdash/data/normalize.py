"""
Header alias resolution and record normalization.
"""
from __future__ import annotations

import re

import pandas as pd

from coinsdash.config import COLUMN_ALIASES, FIELD_COLUMNS, REQUIRED_FIELDS
from coinsdash.data.errors import IngestionError
from coinsdash.data.schemas import RECORD_COLUMNS


# ---------------------------------------------------------------------------
# Header resolution
# ---------------------------------------------------------------------------

def normalize_key(key) -> str:
    """'User ID ' → 'userid'."""
    return re.sub(r"\s+", "", str(key)).lower()


def resolve_columns(headers) -> dict[str, str]:
    """Map canonical field names to the header that carries them."""
    lookup: dict[str, str] = {}
    for header in headers:
        lookup.setdefault(normalize_key(header), header)

    resolved = {}
    for field, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            key = normalize_key(alias)
            if key in lookup:
                resolved[field] = lookup[key]
                break
    return resolved


def missing_fields(resolved: dict[str, str]) -> list[str]:
    return [f for f in REQUIRED_FIELDS if f not in resolved]


def describe_missing(missing: list[str]) -> str:
    """Diagnostic naming each missing canonical field with its accepted aliases."""
    parts = [f"{f} ({'/'.join(COLUMN_ALIASES[f])})" for f in missing]
    return "Missing required fields: " + ", ".join(parts)


# ---------------------------------------------------------------------------
# Frame normalisation
# ---------------------------------------------------------------------------

def normalize_frame(raw: pd.DataFrame, filename: str = "") -> pd.DataFrame:
    """Rename aliased columns, coerce types, validate required values.

    coins that do not parse become 0; timestamps that do not parse become
    missing. A row without a user id or action fails the whole file.
    """
    resolved = resolve_columns(raw.columns)
    missing = missing_fields(resolved)
    if missing:
        raise IngestionError(filename, describe_missing(missing))

    df = pd.DataFrame(index=raw.index)
    df["user_id"] = raw[resolved["pk"]].fillna("").astype(str).str.strip()
    df["coins"] = pd.to_numeric(
        raw[resolved["coins"]].astype(str).str.strip(), errors="coerce"
    ).fillna(0).astype("float64")
    df["action"] = raw[resolved["action"]].fillna("").astype(str).str.strip()
    if "timestamp" in resolved:
        df["timestamp"] = pd.to_numeric(
            raw[resolved["timestamp"]].astype(str).str.strip(), errors="coerce"
        ).astype("float64")
    else:
        df["timestamp"] = float("nan")

    for field in ("pk", "action"):
        col = FIELD_COLUMNS[field]
        blank = df[col] == ""
        if blank.any():
            first_row = int(blank.to_numpy().argmax()) + 2   # 1-based, after header
            raise IngestionError(
                filename,
                f"Missing required field '{field}' in {int(blank.sum()):,} row(s) (first at line {first_row})",
            )

    return df[RECORD_COLUMNS].reset_index(drop=True)
