"""JSON adapter for work items and calendar events."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from production_insights.adapters.records import event_from_record, item_from_record
from production_insights.schema import CalendarEvent, EntityKind, WorkItem

_KIND_SECTIONS = {"pitches": EntityKind.PITCH, "stories": EntityKind.STORY}


@dataclass
class Dataset:
    items: list[WorkItem] = field(default_factory=list)
    events: list[CalendarEvent] = field(default_factory=list)
    organization_id: str = ""


def _records(payload: dict, section: str) -> list:
    records = payload.get(section, [])
    if not isinstance(records, list):
        raise ValueError(f"'{section}' must be a list of objects")
    for index, record in enumerate(records, start=1):
        if not isinstance(record, dict):
            raise ValueError(f"{section} item {index}: expected an object")
    return records


def parse_payload(payload: dict) -> Dataset:
    """Normalize a decoded dataset document.

    Items may be listed under ``items`` (each with a ``kind``) or under the
    ``pitches`` / ``stories`` sections, where the section implies the kind.
    """

    if not isinstance(payload, dict):
        raise ValueError("JSON payload must be an object with items and events")

    items = [item_from_record(record, f"items item {i}") for i, record in enumerate(_records(payload, "items"), 1)]
    for section, kind in _KIND_SECTIONS.items():
        items.extend(
            item_from_record(record, f"{section} item {i}", kind=kind)
            for i, record in enumerate(_records(payload, section), 1)
        )

    events = [event_from_record(record, f"events item {i}") for i, record in enumerate(_records(payload, "events"), 1)]
    return Dataset(items=items, events=events, organization_id=str(payload.get("organizationId") or ""))


def parse(file_path: str) -> Dataset:
    """Parse a JSON dataset file into normalized items and events."""

    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)
    return parse_payload(payload)
