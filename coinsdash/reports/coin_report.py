"""
Coin Report — one report's aggregates as JSON or a styled workbook.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from coinsdash.data.store import SessionStore
from coinsdash.data.schemas import ActionFilter
from coinsdash.analytics.quantile import quantile_insights
from coinsdash.excel.writer import ExcelWriter


def generate_json(
    store: SessionStore,
    report_id: Optional[str] = None,
    action_filter: Optional[ActionFilter] = None,
    by_action: bool = False,
) -> Optional[dict]:
    """Report header + snapshot + insights, or None when there is no report."""
    report = store.get(report_id) if report_id else store.active()
    if report is None:
        return None

    action_filter = action_filter or ActionFilter()
    snap = store.snapshot(report.id, action_filter, by_action).as_dict()

    return {
        "report": {
            "id": report.id,
            "display_name": report.display_name,
            "kind": report.kind.value,
            "labels": report.labels,
        },
        "filter": action_filter.label,
        "snapshot": snap,
        "insights": quantile_insights(snap["quantile"]),
    }


def _build_workbook(data: dict) -> ExcelWriter:
    ew = ExcelWriter()
    r = data["report"]
    s = data["snapshot"]
    q = s["quantile"]
    subtitle = f"{r['display_name']}  |  {data['filter']}"
    if r["labels"]:
        subtitle += f"  |  Sources: {', '.join(r['labels'])}"

    # Overview
    ws = ew.add_sheet("Overview")
    ew.write_title(ws, "COINSDASH", subtitle)

    row = ew.write_section(ws, 4, "TOTALS")
    row = ew.write_kpi_row(ws, row, [
        (s["unique_users"], "UNIQUE USERS", "number"),
        (s["total_coins"], "TOTAL COINS", "coins"),
        (s["avg_coins_per_user"], "AVG COINS / USER", "decimal"),
        (s["transaction_count"], "TRANSACTIONS", "number"),
    ])

    row = ew.write_section(ws, row, "COIN CONCENTRATION CUTOFFS")
    row = ew.write_kpi_row(ws, row, [
        (q["p25"], "P25", "coins"),
        (q["p50"], "P50", "coins"),
        (q["p70"], "P70", "coins"),
        (q["p90"], "P90", "coins"),
    ])

    if data["insights"]:
        row = ew.write_section(ws, row, "INSIGHTS")
        ew.write_lines(ws, row, data["insights"])

    # By Action
    if s["per_action_stats"]:
        pct_by_action = {p["action"]: p["pct_of_total"] for p in s["pie_distribution"]}
        rows = [dict(a, pct_of_total=pct_by_action.get(a["action"], 0)) for a in s["per_action_stats"]]
        ws2 = ew.add_sheet("By Action")
        ew.write_table(ws2, 1, [
            ("label", "text", "Action"),
            ("unique_users", "number", "Unique Users"),
            ("total_coins", "coins", "Total Coins"),
            ("transaction_count", "number", "Transactions"),
            ("avg_coins_per_user", "decimal", "Avg Coins / User"),
            ("pct_of_total", "percent", "% of Coins"),
        ], rows, highlight_fn=lambda i, _: "gold" if i == 0 else None, show_total=True,
            totals={"unique_users": s["unique_users"]})

    # Quantiles
    ws3 = ew.add_sheet("Quantiles")
    ew.write_table(ws3, 1, [
        ("name", "text", "Bucket"),
        ("low", "coins", "Above"),
        ("high", "coins", "Up To"),
        ("user_count", "number", "Users"),
        ("coin_sum", "coins", "Coins"),
        ("user_pct", "percent", "% of Users"),
        ("coin_pct", "percent", "% of Coins"),
    ], q["buckets"], highlight_fn=lambda _, b: "light" if b.get("degenerate") else None)

    # Timeline
    if s["timeline"]:
        ws4 = ew.add_sheet("Timeline")
        ew.write_table(ws4, 1, [
            ("label", "text", "Minute (UTC)"),
            ("coins", "coins", "Coins"),
        ], s["timeline"], show_total=True)

    return ew


def generate_excel(
    store: SessionStore,
    output_path: str | Path,
    report_id: Optional[str] = None,
    action_filter: Optional[ActionFilter] = None,
) -> Optional[Path]:
    data = generate_json(store, report_id, action_filter)
    if data is None:
        return None
    return _build_workbook(data).save(output_path)
