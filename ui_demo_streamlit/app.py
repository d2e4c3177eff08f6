"""Streamlit demo UI for accountability-engine."""

from __future__ import annotations

import tempfile
from datetime import date
from typing import Any

from accountability_engine.adapters import json_adapter
from accountability_engine.config import EngineConfig
from accountability_engine.report import build_report

DEMO_SNAPSHOT = "examples/sample_snapshot.json"


def _parse_uploaded(uploaded_file):
    with tempfile.NamedTemporaryFile(delete=False, suffix=".json") as handle:
        handle.write(uploaded_file.getbuffer())
        temp_path = handle.name
    return json_adapter.parse(temp_path)


def _fmt_percent(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.0f}%"


def _badge(tier: dict | None) -> str:
    if tier is None:
        return "no entry yet"
    return f"<span style='color:{tier['color']}'>&#9679;</span> {tier['name']}"


def summarize(report: dict[str, Any]) -> list[dict[str, Any]]:
    """Flatten the per-goal report into table rows."""

    rows = []
    for goal in report["goals"]:
        rows.append(
            {
                "goal": goal["name"] or goal["id"],
                "priority": goal["priority"],
                "today": _fmt_percent(goal["today_percent"]),
                "tier": goal["tier"]["name"] if goal["tier"] else "",
                "streak": goal["streak"]["current"],
                "longest": goal["streak"]["longest"],
                "on_track": "" if goal["on_track"] is None else f"{goal['on_track']}%",
            }
        )
    return rows


def main() -> None:
    import streamlit as st

    st.set_page_config(page_title="Accountability Engine Demo", layout="wide")
    st.title("Accountability Engine — Streamlit Demo")

    with st.sidebar:
        st.header("Controls")
        uploaded = st.file_uploader("Upload snapshot", type=["json"])
        use_demo = st.checkbox("Load demo snapshot", value=True)
        today = st.date_input("Evaluate as of", value=date(2025, 1, 14))
        streak_threshold = st.slider("Streak threshold (%)", min_value=0, max_value=100, value=100)
        consistency_threshold = st.slider("Consistency threshold (%)", min_value=0, max_value=100, value=100)
        half_life = st.number_input("Half-life (days)", min_value=1.0, max_value=90.0, value=7.0, step=1.0)
        run = st.button("Run engine", type="primary")

    if not run:
        st.info("Configure inputs in the sidebar and click **Run engine**.")
        return

    try:
        if use_demo:
            snapshot = json_adapter.parse(DEMO_SNAPSHOT)
            data_source = f"demo snapshot ({DEMO_SNAPSHOT})"
        elif uploaded is not None:
            snapshot = _parse_uploaded(uploaded)
            data_source = f"uploaded file ({uploaded.name})"
        else:
            st.error("Please upload a JSON snapshot or enable 'Load demo snapshot'.")
            return

        if not snapshot.goals:
            st.error("No goals were found in the selected input.")
            return

        config = EngineConfig(
            streak_threshold=float(streak_threshold),
            consistency_threshold=float(consistency_threshold),
            half_life_days=float(half_life),
        )
        report = build_report(snapshot, today=today, config=config)

        st.success(f"Loaded {len(snapshot.goals)} goals and {len(snapshot.tasks)} tasks from {data_source}.")

        st.subheader("Overall")
        overall = report["overall"]
        st.metric("Priority-weighted score", _fmt_percent(overall["percent"]))
        st.markdown(_badge(overall["tier"]), unsafe_allow_html=True)

        if report["achievements"] is not None:
            st.subheader("Achievements")
            st.write(", ".join(report["achievements"]["unlocked"]) or "None unlocked yet")
            for report_type, found in report["achievements"]["highlights"].items():
                if found:
                    st.caption(f"{report_type}: {', '.join(found)}")

        st.subheader("Goals")
        st.table(summarize(report))

        for goal in report["goals"]:
            with st.expander(f"{goal['name'] or goal['id']} (priority {goal['priority']})"):
                c1, c2, c3 = st.columns(3)
                c1.metric("Today", _fmt_percent(goal["today_percent"]))
                c2.metric("Current streak", goal["streak"]["current"])
                c3.metric("Longest streak", goal["streak"]["longest"])
                st.markdown(_badge(goal["tier"]), unsafe_allow_html=True)
                st.write("**Consistency**")
                st.table([{"window": f"{window}d", **values} for window, values in goal["consistency"].items()])
                st.write("**This week**")
                st.json(goal["week"])
                st.write("**Tasks**")
                st.table(
                    [
                        {
                            "task": task["name"] or task["id"],
                            "today": "" if task["today_fraction"] is None else f"{task['today_fraction']:.2f}",
                            "streak": task["streak"]["current"],
                            "projection": "" if task["projection"] is None else f"{task['projection']['probability']:.0%}",
                        }
                        for task in goal["tasks"]
                    ]
                )

    except ValueError as exc:
        st.error(f"Input error: {exc}")
    except Exception:
        st.error("Something went wrong while running the demo. Please verify the input format.")


if __name__ == "__main__":
    main()
