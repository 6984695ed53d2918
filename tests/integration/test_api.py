"""
End-to-end API tests against a fresh in-memory session.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from coinsdash.api import dependencies, router_dashboard
from coinsdash.main import create_app


@pytest.fixture
def client():
    with TestClient(create_app()) as c:
        yield c


def _upload(client, files):
    return client.post(
        "/api/upload",
        files=[("files", (name, content, "text/csv")) for name, content in files],
    )


def test_health_on_empty_session(client):
    body = client.get("/api/health").json()

    assert body == {"status": "ok", "reports": 0, "visible_reports": 0, "active_id": None}


def test_upload_reports_partial_batches(client, us_uk_files, csv):
    resp = _upload(client, us_uk_files + [("broken.csv", csv("who", "x"))])
    body = resp.json()

    assert resp.status_code == 200
    assert body["status"] == "partial"
    assert [f["name"] for f in body["loaded"]] == ["Coins - US", "Coins - UK"]
    assert [f["report_id"] for f in body["loaded"]] == [r["id"] for r in body["lineage"]["reports"]]
    assert body["errors"][0]["file"] == "broken.csv"
    assert len(body["lineage"]["reports"]) == 2
    assert body["lineage"]["can_generate_summary"] is True


def test_upload_ids_survive_a_concurrent_summary(client, us_uk_files, monkeypatch):
    store = dependencies.get_store()
    ingest = store.ingest

    def ingest_then_summarize(batch):
        result = ingest(batch)
        store.generate_summary()
        return result

    monkeypatch.setattr(store, "ingest", ingest_then_summarize)
    body = _upload(client, us_uk_files).json()

    names = {r["id"]: r["display_name"] for r in body["lineage"]["reports"]}
    assert len(names) == 3
    assert [names[f["report_id"]] for f in body["loaded"]] == ["Coins - US", "Coins - UK"]


def test_snapshot_of_active_report(client, csv):
    _upload(client, [("day.csv", csv("pk,coins,action",
                                     "u1,10,buy_gift", "u1,5,redeem_bonus", "u2,100,buy_gift"))])

    body = client.get("/api/snapshot", params={"include_bonus": "false"}).json()
    snap = body["snapshot"]

    assert body["report"]["display_name"] == "day"
    assert body["filter"] == "Excluding redeem_bonus"
    assert snap["unique_users"] == 2
    assert snap["total_coins"] == 110.0
    assert snap["avg_coins_per_user"] == 55.0


def test_snapshot_without_reports_is_404(client):
    assert client.get("/api/snapshot").status_code == 404


def test_summary_then_meta_summary(client, csv):
    _upload(client, [("A - 1.csv", csv("pk,coins,action", "u1,1,x")),
                     ("A - 2.csv", csv("pk,coins,action", "u2,2,x"))])
    first = client.post("/api/reports/summary").json()
    _upload(client, [("B - 1.csv", csv("pk,coins,action", "u3,3,x")),
                     ("B - 2.csv", csv("pk,coins,action", "u4,4,x"))])
    second = client.post("/api/reports/summary").json()

    assert first["generated"] is True
    visible = client.get("/api/reports", params={"visible_only": "true"}).json()
    assert [r["display_name"] for r in visible["reports"]] == ["A -", "B -"]

    client.post(f"/api/reports/{first['report_id']}/toggle-selection")
    client.post(f"/api/reports/{second['report_id']}/toggle-selection")
    meta = client.post("/api/reports/meta-summary").json()

    assert meta["generated"] is True
    names = [r["display_name"] for r in meta["lineage"]["reports"]]
    assert names == ["A -", "B -", "Combined Overall Summary"]
    assert meta["lineage"]["active_id"] == meta["report_id"]


def test_summary_noop_is_reported(client, csv):
    _upload(client, [("only.csv", csv("pk,coins,action", "u1,1,x"))])

    body = client.post("/api/reports/summary").json()

    assert body["generated"] is False
    assert body["report_id"] is None


def test_lineage_errors_map_to_status_codes(client, us_uk_files):
    _upload(client, us_uk_files)
    client.post("/api/reports/summary")
    source_id = client.get("/api/reports").json()["reports"][0]["id"]

    assert client.post("/api/reports/nope/select").status_code == 404
    assert client.delete("/api/reports/nope").status_code == 404
    assert client.delete(f"/api/reports/{source_id}").status_code == 409


def test_hide_show_remove(client, us_uk_files):
    _upload(client, us_uk_files)
    us, uk = [r["id"] for r in client.get("/api/reports").json()["reports"]]

    hidden = client.post(f"/api/reports/{uk}/hide").json()
    assert [r["id"] for r in hidden["reports"] if r["flags"]["is_hidden"]] == [uk]
    assert hidden["active_id"] == us

    shown = client.post(f"/api/reports/{uk}/show").json()
    assert shown["active_id"] == uk

    removed = client.delete(f"/api/reports/{uk}").json()
    assert [r["id"] for r in removed["reports"]] == [us]
    assert removed["active_id"] == us


def test_export_downloads_workbook(client, us_uk_files, tmp_path, monkeypatch):
    monkeypatch.setattr(router_dashboard, "EXPORTS_FOLDER", tmp_path)
    _upload(client, us_uk_files)
    report_id = client.get("/api/health").json()["active_id"]

    resp = client.get(f"/api/reports/{report_id}/export")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    saved = tmp_path / "CoinsDash_Coins - UK.xlsx"
    assert saved.exists()
    assert load_workbook(saved).sheetnames == ["Overview", "By Action", "Quantiles", "Timeline"]
