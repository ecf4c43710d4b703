"""Conversion of raw store records into normalized items and events."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from production_insights.schema import CalendarEvent, EntityKind, WorkItem, as_utc, make_item

PITCH_ASSIGNEE_FIELDS = (
    "assignedProducerId",
    "assignedWriterId",
    "assignedAPId",
    "assignedResearcherId",
    "assignedClearanceCoordinatorId",
    "assignedLicensingSpecialistId",
)
STORY_ASSIGNEE_FIELDS = ("writerId", "editorId", "producerId", "associateProducerId")

_ASSIGNEE_FIELDS = {EntityKind.PITCH: PITCH_ASSIGNEE_FIELDS, EntityKind.STORY: STORY_ASSIGNEE_FIELDS}
_CONTACT_LIST_FIELDS = ("assignedContacts", "assigned_user_ids")


def _first(record: dict, *names: str) -> Any:
    for name in names:
        value = record.get(name)
        if value not in (None, ""):
            return value
    return None


def _split(value: Any) -> list[str]:
    if isinstance(value, str):
        return [part.strip() for part in value.replace(",", ";").split(";") if part.strip()]
    if isinstance(value, Iterable):
        return [str(part).strip() for part in value if part not in (None, "")]
    return []


def parse_timestamp(value: Any, label: str) -> Optional[datetime]:
    """Parse ISO strings or epoch seconds; naive values are taken as UTC."""

    if value in (None, ""):
        return None
    try:
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, (int, float)):
            parsed = datetime.fromtimestamp(float(value), tz=timezone.utc)
        else:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"{label}: malformed timestamp {value!r}") from exc
    return as_utc(parsed)


def parse_kind(value: Any, label: str) -> EntityKind:
    try:
        return EntityKind(str(value).strip().lower())
    except ValueError as exc:
        raise ValueError(f"{label}: invalid kind {value!r}") from exc


def assignees_for(record: dict, kind: EntityKind) -> list[str]:
    """Collect the role-specific assignee fields of ``kind`` plus contact lists."""

    users = [str(record[name]).strip() for name in _ASSIGNEE_FIELDS[kind] if record.get(name)]
    for name in _CONTACT_LIST_FIELDS:
        users.extend(_split(record.get(name)))
    return users


def item_from_record(record: dict, label: str, kind: EntityKind | str | None = None) -> WorkItem:
    """Build a ``Pitch`` or ``Story`` from a raw record.

    ``kind`` overrides the record's own ``kind``/``type`` field when the
    source already implies it.
    """

    item_id = _first(record, "id", "item_id")
    raw_kind = kind if kind is not None else _first(record, "kind", "type", "entity_kind")
    missing = [name for name, value in (("id", item_id), ("kind", raw_kind)) if value is None]
    if missing:
        raise ValueError(f"{label}: missing required fields {missing}")

    entity_kind = parse_kind(raw_kind, label)
    return make_item(
        entity_kind,
        id=str(item_id).strip(),
        status=str(_first(record, "status") or "").strip(),
        title=str(_first(record, "clipTitle", "title") or "Untitled").strip(),
        created_at=parse_timestamp(_first(record, "createdAt", "created_at"), label),
        updated_at=parse_timestamp(_first(record, "updatedAt", "updated_at"), label),
        assigned_user_ids=assignees_for(record, entity_kind),
    )


def event_from_record(record: dict, label: str) -> CalendarEvent:
    """Build a calendar event; an unrecognized entity kind leaves it unlinked."""

    event_id = _first(record, "id", "event_id")
    start_raw = _first(record, "startDate", "start_date")
    missing = [name for name, value in (("id", event_id), ("start_date", start_raw)) if value is None]
    if missing:
        raise ValueError(f"{label}: missing required fields {missing}")

    entity_id = _first(record, "workflowId", "entity_id")
    raw_kind = _first(record, "workflowType", "entity_kind")
    try:
        entity_kind = EntityKind(str(raw_kind).strip().lower()) if raw_kind is not None else None
    except ValueError:
        entity_kind = None

    return CalendarEvent(
        id=str(event_id).strip(),
        start_date=parse_timestamp(start_raw, label),
        entity_id=str(entity_id).strip() if entity_id is not None else None,
        entity_kind=entity_kind,
        end_date=parse_timestamp(_first(record, "endDate", "end_date"), label),
        title=str(_first(record, "title") or "Untitled Event").strip(),
        event_type=_first(record, "eventType", "event_type"),
    )
