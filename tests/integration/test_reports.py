"""
Excel export and CLI against real files on disk.
"""

from __future__ import annotations

import json

from openpyxl import load_workbook

from coinsdash import cli
from coinsdash.data.schemas import ActionFilter
from coinsdash.reports import coin_report


def test_generate_json_for_summary(store, us_uk_files):
    store.ingest(us_uk_files)
    summary = store.generate_summary()

    data = coin_report.generate_json(store, summary.id, ActionFilter(include_bonus=False))

    assert data["report"] == {
        "id": summary.id,
        "display_name": "Coins -",
        "kind": "summary",
        "labels": ["US", "UK"],
    }
    assert data["snapshot"]["total_coins"] == 60.0
    assert data["insights"]


def test_generate_json_without_reports(store):
    assert coin_report.generate_json(store) is None


def test_excel_workbook_layout(store, us_uk_files, tmp_path):
    store.ingest(us_uk_files)

    path = coin_report.generate_excel(store, tmp_path / "out" / "report.xlsx")
    wb = load_workbook(path)

    assert wb.sheetnames == ["Overview", "By Action", "Quantiles", "Timeline"]
    assert wb["Overview"]["A1"].value == "COINSDASH"
    quantiles = wb["Quantiles"]
    assert [quantiles.cell(row=r, column=1).value for r in range(2, 7)] == [
        "0-25%", "25-50%", "50-70%", "70-90%", "90-100%",
    ]
    by_action = wb["By Action"]
    assert by_action["A2"].value == "Gift Sent"
    assert by_action["A4"].value == "TOTAL"
    assert by_action["C4"].value == 35.0


def test_excel_by_action_total_counts_each_user_once(store, csv, tmp_path):
    store.ingest([("one.csv", csv("pk,coins,action", "u1,10,buy_gift", "u1,5,redeem_bonus"))])

    path = coin_report.generate_excel(store, tmp_path / "one.xlsx")
    by_action = load_workbook(path)["By Action"]

    total = [c.value for c in by_action[4]]
    assert total[:4] == ["TOTAL", 1, 15, 2]


def test_excel_skips_timeline_without_timestamps(store, csv, tmp_path):
    store.ingest([("plain.csv", csv("pk,coins,action", "u1,3,buy_gift"))])

    path = coin_report.generate_excel(store, tmp_path / "plain.xlsx")

    assert load_workbook(path).sheetnames == ["Overview", "By Action", "Quantiles"]


def test_cli_summarize_json(tmp_path, csv, capsys):
    f = tmp_path / "day.csv"
    f.write_bytes(csv("pk,coins,action", "u1,10,buy_gift", "u1,5,redeem_bonus", "u2,100,buy_gift"))

    cli.main(["summarize", str(f), "--no-bonus", "--json"])
    out = capsys.readouterr().out

    payload = json.loads(out[out.index("{"):out.rindex("}") + 1])
    assert payload["snapshot"]["total_coins"] == 110.0
    assert payload["snapshot"]["unique_users"] == 2


def test_cli_summarize_combine_excel(tmp_path, us_uk_files, capsys):
    paths = []
    for name, content in us_uk_files:
        p = tmp_path / name
        p.write_bytes(content)
        paths.append(str(p))
    out = tmp_path / "combined.xlsx"

    cli.main(["summarize", *paths, "--combine", "--excel", str(out)])
    printed = capsys.readouterr().out

    assert "Coins -  [summary]" in printed
    assert "Sources: US, UK" in printed
    assert out.exists()
