"""Print the dashboard report for a JSON snapshot, optionally merging CSV completions."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from accountability_engine.adapters import csv_adapter, json_adapter
from accountability_engine.config import load_config
from accountability_engine.report import build_report


def main() -> None:
    parser = argparse.ArgumentParser(description="Compute accountability-engine dashboard metrics")
    parser.add_argument("--data", required=True, help="Path to a JSON snapshot (goals, tasks, completions)")
    parser.add_argument("--completions", help="Optional CSV of completion rows replacing task histories")
    parser.add_argument("--config", help="Optional JSON engine config")
    parser.add_argument("--today", help="Evaluation date (YYYY-MM-DD), defaults to the current date")
    parser.add_argument("--out", help="Also write the report to this path")
    parser.add_argument("--verbose", action="store_true", help="Log debug output")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    snapshot = json_adapter.parse(args.data)
    if args.completions:
        snapshot = csv_adapter.apply_histories(snapshot, csv_adapter.parse(args.completions))

    today = date.fromisoformat(args.today) if args.today else date.today()
    report = build_report(snapshot, today=today, config=load_config(args.config))

    print(json.dumps(report, indent=2))

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
        print(f"Saved report to {out_path}")


if __name__ == "__main__":
    main()
