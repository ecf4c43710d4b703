"""Demo script for production-insights."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from production_insights.adapters.memory_store import MemoryStore
from production_insights.adapters.records import parse_timestamp
from production_insights.insights import run_report


def main() -> None:
    store = MemoryStore.from_json("examples/sample_dataset.json")
    report = run_report(store, "demo-org", now=parse_timestamp("2024-06-15T12:00:00Z", "now"))
    print("Phases:", {phase.value: count for phase, count in report.workflow.phase_distribution.items()})
    print("Overdue:", [(item.item_id, item.days_overdue, item.rule) for item in report.schedule.overdue_items])
    print("At risk:", [(item.item_id, item.days_until_deadline) for item in report.schedule.at_risk_items])
    print("Bottlenecks:", [(b.status, b.item_count, round(b.average_wait_days, 1)) for b in report.workflow.bottlenecks])
    print("Workloads:", [(w.user_id, w.workload_score) for w in report.workloads.user_workloads])
    for alert in report.alerts:
        print(f"[{alert.severity.value}] {alert.message}")


if __name__ == "__main__":
    main()
