"""
Pytest configuration for CoinsDash.

Provides fixtures for:
- Record frames built from plain tuples
- CSV / XLSX file content for ingestion tests
- A fresh SessionStore per test
"""

from __future__ import annotations

import io

import pandas as pd
import pytest

from coinsdash.data.schemas import frame_from_records
from coinsdash.data.store import SessionStore


def make_frame(rows) -> pd.DataFrame:
    """Record frame from (user_id, coins, action[, timestamp]) tuples."""
    records = []
    for row in rows:
        user_id, coins, action = row[:3]
        ts = row[3] if len(row) > 3 else None
        records.append({"user_id": user_id, "coins": coins, "action": action, "timestamp": ts})
    return frame_from_records(records)


def csv_bytes(header: str, *lines: str) -> bytes:
    return ("\n".join((header,) + lines) + "\n").encode("utf-8")


def xlsx_bytes(df: pd.DataFrame) -> bytes:
    buf = io.BytesIO()
    df.to_excel(buf, index=False, engine="openpyxl")
    return buf.getvalue()


@pytest.fixture
def frame():
    return make_frame


@pytest.fixture
def sample_records() -> pd.DataFrame:
    """Two users, one bonus redemption."""
    return make_frame([
        ("u1", 10, "buy_gift", 1_700_000_000),
        ("u1", 5, "redeem_bonus", 1_700_000_030),
        ("u2", 100, "buy_gift", 1_700_000_075),
    ])


@pytest.fixture
def store() -> SessionStore:
    return SessionStore(chunk_size=2)


@pytest.fixture
def us_uk_files() -> list[tuple[str, bytes]]:
    return [
        ("Coins - US.csv", csv_bytes("pk,coins,action,timestamp",
                                     "u1,10,buy_gift,1700000000",
                                     "u2,20,grant_widget_bonus,1700000060")),
        ("Coins - UK.csv", csv_bytes("pk,coins,action,timestamp",
                                     "u3,30,buy_gift,1700000120",
                                     "u1,5,redeem_bonus,1700000130")),
    ]


@pytest.fixture
def csv():
    return csv_bytes


@pytest.fixture
def xlsx():
    return xlsx_bytes
