"""Build a production insight report from a JSON dataset."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from production_insights.adapters.memory_store import MemoryStore
from production_insights.adapters.records import parse_timestamp
from production_insights.insights import run_report


def main() -> None:
    parser = argparse.ArgumentParser(description="Run production-insights over a dataset")
    parser.add_argument("--data", required=True, help="Path to JSON dataset file")
    parser.add_argument("--organization", default=None, help="Organization id (defaults to the dataset's)")
    parser.add_argument("--user", default=None, help="Restrict schedule, workload and predictions to one user")
    parser.add_argument("--now", default=None, help="Reference time as ISO-8601 (defaults to current UTC time)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    store = MemoryStore.from_json(args.data, args.organization)
    organization_id = args.organization or store.organizations[0]
    now = parse_timestamp(args.now, "--now") if args.now else None

    report = run_report(store, organization_id, now=now, user_id=args.user)
    print(json.dumps(report.to_dict(), indent=2))


if __name__ == "__main__":
    main()
