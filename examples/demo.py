"""Demo script for accountability-engine."""

import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from accountability_engine.adapters.json_adapter import parse
from accountability_engine.report import build_report


def main() -> None:
    snapshot = parse(str(Path(__file__).with_name("sample_snapshot.json")))
    report = build_report(snapshot, today=date(2025, 1, 14))
    print("Overall:", report["overall"])
    for goal in report["goals"]:
        print(f"{goal['name']}: today={goal['today_percent']} tier={goal['tier']} streak={goal['streak']}")
        for task in goal["tasks"]:
            if task["projection"] is not None:
                print(f"  {task['name']} projection: {task['projection']}")


if __name__ == "__main__":
    main()
