#!/usr/bin/env python3
"""
CoinsDash CLI — summarize transaction files or start the API server.

USAGE:
  python -m coinsdash.cli summarize coins_us.csv                    # One report per file
  python -m coinsdash.cli summarize coins_us.csv coins_uk.xlsx --combine
  python -m coinsdash.cli summarize coins_us.csv --no-bonus --json
  python -m coinsdash.cli summarize coins_*.csv --combine --excel out.xlsx

  python -m coinsdash.cli serve                                     # Start API server
  python -m coinsdash.cli serve --port 8000
"""
from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from coinsdash.config import EXPORTS_FOLDER
from coinsdash.data.store import SessionStore
from coinsdash.data.schemas import ActionFilter
from coinsdash.analytics.common import sanitize_for_json
from coinsdash.reports import coin_report


def _print_report(data: dict) -> None:
    r = data["report"]
    s = data["snapshot"]
    q = s["quantile"]

    print(f"\n  {r['display_name']}  [{r['kind']}]  {data['filter']}")
    if r["labels"]:
        print(f"  Sources: {', '.join(r['labels'])}")
    print("  " + "-" * 66)
    print(f"  Users: {s['unique_users']:,}   Coins: {s['total_coins']:,.2f}   "
          f"Avg/user: {s['avg_coins_per_user']:,.2f}   Transactions: {s['transaction_count']:,}")

    if s["per_action_stats"]:
        print(f"\n  {'ACTION':<28}{'USERS':>10}{'COINS':>16}{'AVG':>12}")
        for a in s["per_action_stats"]:
            print(f"  {a['label'][:26]:<28}{a['unique_users']:>10,}{a['total_coins']:>16,.2f}"
                  f"{a['avg_coins_per_user']:>12,.2f}")

    print(f"\n  Cutoffs  P25 {q['p25']:,.2f}  |  P50 {q['p50']:,.2f}  |  "
          f"P70 {q['p70']:,.2f}  |  P90 {q['p90']:,.2f}")
    for b in q["buckets"]:
        print(f"    {b['name']:<9}{b['user_count']:>8,} users ({b['user_pct']:5.1f}%)"
              f"{b['coin_sum']:>16,.2f} coins ({b['coin_pct']:5.1f}%)")

    for line in data["insights"]:
        print(f"  • {line}")


def cmd_summarize(args):
    """Load files, optionally combine them, and print (or export) each report."""
    print("\n" + "=" * 70)
    print("  COINSDASH — COIN SUMMARY")
    print("=" * 70)

    store = SessionStore()
    result = store.ingest_paths([Path(p) for p in args.files])
    for err in result.errors:
        print(f"  ✗ {err['file']}: {err['error']}")
    if not result.loaded:
        print("\n  No usable files.")
        sys.exit(1)

    if args.combine:
        summary = store.generate_summary()
        if summary is None:
            print("  Need at least two files to combine; showing the single report.")
        report_ids = [store.active().id]
    else:
        report_ids = [r.id for r in store.reports()]

    action_filter = ActionFilter(include_bonus=not args.no_bonus)
    payloads = [coin_report.generate_json(store, rid, action_filter, args.by_action) for rid in report_ids]

    if args.json:
        print(json.dumps(sanitize_for_json(payloads if len(payloads) > 1 else payloads[0]), indent=2))
    else:
        for data in payloads:
            _print_report(data)

    if args.excel:
        out = Path(args.excel)
        for i, rid in enumerate(report_ids):
            path = out if len(report_ids) == 1 else out.with_name(f"{out.stem}_{i + 1}{out.suffix}")
            coin_report.generate_excel(store, path, rid, action_filter)
            print(f"\n  Saved: {path}")

    print("\n" + "=" * 70 + "\n")


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    EXPORTS_FOLDER.mkdir(parents=True, exist_ok=True)
    print(f"\nStarting CoinsDash API on port {args.port}...")
    uvicorn.run("coinsdash.main:app", host="0.0.0.0", port=args.port, reload=args.reload,
                timeout_keep_alive=65)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="CoinsDash — coin transaction analytics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    # summarize subcommand
    sum_parser = subparsers.add_parser("summarize", help="Summarize transaction files")
    sum_parser.add_argument("files", nargs="+", help=".csv / .xlsx file(s)")
    sum_parser.add_argument("--no-bonus", action="store_true", help="Leave out welcome-bonus redemptions")
    sum_parser.add_argument("--by-action", action="store_true", help="Per-action coins in the timeline")
    sum_parser.add_argument("--combine", action="store_true", help="Combine all files into one summary")
    sum_parser.add_argument("--json", action="store_true", help="Print JSON instead of tables")
    sum_parser.add_argument("--excel", metavar="OUT", help="Also write an Excel workbook")
    sum_parser.set_defaults(func=cmd_summarize)

    # serve subcommand
    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")), help="Port (default 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return

    args.func(args)


if __name__ == "__main__":
    main()
