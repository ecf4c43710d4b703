"""Streamlit dashboard for production-insights."""

from __future__ import annotations

import tempfile
from datetime import datetime, time, timezone
from typing import Any, Optional

from production_insights.adapters.memory_store import MemoryStore
from production_insights.config import get_settings
from production_insights.insights import InsightReport, run_report
from production_insights.schema import DAY_SECONDS

DEMO_DATASET = "examples/sample_dataset.json"


def _store_from_uploaded(uploaded_file) -> MemoryStore:
    with tempfile.NamedTemporaryFile(delete=False, suffix=".json") as handle:
        handle.write(uploaded_file.getbuffer())
        temp_path = handle.name
    return MemoryStore.from_json(temp_path)


def _days(seconds: float) -> float:
    return round(seconds / DAY_SECONDS, 1)


def _summary(report: InsightReport) -> dict[str, Any]:
    velocity = report.workflow.velocity
    return {
        "total_items": sum(report.workflow.phase_distribution.values()),
        "overdue": len(report.schedule.overdue_items),
        "at_risk": len(report.schedule.at_risk_items),
        "completion_pct": velocity.completion_rate * 100.0,
        "avg_days_to_complete": _days(velocity.average_time_to_complete),
    }


def run_engine(store: MemoryStore, organization_id: str, now: datetime, user_id: Optional[str] = None, **overrides) -> dict[str, Any]:
    """Build the report and return a UI-friendly result payload."""

    report = run_report(store, organization_id, now=now, user_id=user_id, settings=get_settings(**overrides))
    return {
        "report": report,
        "summary": _summary(report),
        "phases": [{"phase": phase.value, "items": count} for phase, count in report.workflow.phase_distribution.items()],
        "alerts": [
            {"severity": alert.severity.value, "type": alert.type.value, "message": alert.message}
            for alert in report.alerts
        ],
        "workloads": [
            {"user": w.user_id, "score": w.workload_score, "items": w.total_items, "overdue": w.overdue_items}
            for w in report.workloads.user_workloads
        ],
        "predictions": [
            {
                "item": p.title,
                "status": p.current_status,
                "predicted_days": _days(p.predicted_seconds),
                "confidence": p.confidence,
                "stuck": p.likely_to_get_stuck,
            }
            for p in report.predictions
        ],
    }


def main() -> None:
    import streamlit as st

    st.set_page_config(page_title="Production Insights Demo", layout="wide")
    st.title("Production Insights: Streamlit Demo")

    with st.sidebar:
        st.header("Controls")
        uploaded = st.file_uploader("Upload dataset", type=["json"])
        use_demo = st.checkbox("Load demo dataset", value=True)
        as_of = st.date_input("As of", value=datetime(2024, 6, 15).date())
        user_id = st.text_input("Restrict to user", value="")
        days_ahead = st.slider("At-risk horizon (days)", min_value=1, max_value=30, value=7)
        stale_after_days = st.slider("Stale after (days)", min_value=1, max_value=60, value=14)
        run = st.button("Run engine", type="primary")

    if not run:
        st.info("Configure inputs in the sidebar and click **Run engine**.")
        return

    try:
        if use_demo:
            store = MemoryStore.from_json(DEMO_DATASET)
            data_source = f"demo dataset ({DEMO_DATASET})"
        elif uploaded is not None:
            store = _store_from_uploaded(uploaded)
            data_source = f"uploaded file ({uploaded.name})"
        else:
            st.error("Please upload a JSON file or enable 'Load demo dataset'.")
            return

        now = datetime.combine(as_of, time(12, 0), tzinfo=timezone.utc)
        result = run_engine(
            store,
            store.organizations[0],
            now,
            user_id=user_id or None,
            days_ahead=days_ahead,
            stale_after_days=stale_after_days,
        )

        st.success(f"Loaded {data_source}.")

        st.subheader("A) Summary")
        summary = result["summary"]
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Items", summary["total_items"])
        c2.metric("Overdue", summary["overdue"])
        c3.metric("At risk", summary["at_risk"])
        c4.metric("% complete", f"{summary['completion_pct']:.1f}%")
        st.table(result["phases"])

        st.subheader("B) Alerts")
        if result["alerts"]:
            st.table(result["alerts"])
        else:
            st.write("No alerts.")

        st.subheader("C) Workloads")
        if result["workloads"]:
            st.table(result["workloads"])
        else:
            st.write("No assignments.")

        st.subheader("D) Predictions")
        if result["predictions"]:
            st.table(result["predictions"])
        else:
            st.write("No open items.")

        if result["report"].degraded_sources:
            st.warning(f"Degraded sources: {', '.join(result['report'].degraded_sources)}")

    except ValueError as exc:
        st.error(f"Input error: {exc}")
    except Exception:
        st.error("Something went wrong while running the demo. Please verify the input format.")


if __name__ == "__main__":
    main()
