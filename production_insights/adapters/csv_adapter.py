"""CSV adapter for work item and calendar event exports."""

from __future__ import annotations

import csv

from production_insights.adapters.records import event_from_record, item_from_record
from production_insights.schema import CalendarEvent, WorkItem


def _rows(file_path: str) -> list[tuple[int, dict]]:
    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []
        return list(enumerate(reader, start=2))


def parse_items(file_path: str) -> list[WorkItem]:
    """Parse an item export; ``assigned_user_ids`` holds ``;``-separated ids."""

    return [item_from_record(row, f"Row {row_number}") for row_number, row in _rows(file_path)]


def parse_events(file_path: str) -> list[CalendarEvent]:
    """Parse a calendar event export."""

    return [event_from_record(row, f"Row {row_number}") for row_number, row in _rows(file_path)]
