"""In-memory item store backing the CLI, demo and tests."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from production_insights.adapters import json_adapter
from production_insights.schema import CalendarEvent, EntityKind, WorkItem


class MemoryStore:
    """Serves already-materialized records for one or more organizations.

    Records are registered per organization id; unknown organizations get
    empty results, the same as an empty collection in a real store.
    """

    def __init__(self) -> None:
        self._items: dict[str, list[WorkItem]] = {}
        self._events: dict[str, list[CalendarEvent]] = {}

    def add(self, organization_id: str, items: Iterable[WorkItem] = (), events: Iterable[CalendarEvent] = ()) -> None:
        self._items.setdefault(organization_id, []).extend(items)
        self._events.setdefault(organization_id, []).extend(events)

    @classmethod
    def from_json(cls, file_path: str, organization_id: Optional[str] = None) -> "MemoryStore":
        dataset = json_adapter.parse(file_path)
        store = cls()
        store.add(organization_id or dataset.organization_id or "default", dataset.items, dataset.events)
        return store

    @property
    def organizations(self) -> list[str]:
        return sorted(self._items)

    async def fetch_items(
        self,
        organization_id: str,
        kind: EntityKind,
        *,
        created_after: Optional[datetime] = None,
    ) -> list[WorkItem]:
        items = [item for item in self._items.get(organization_id, []) if item.kind is kind]
        if created_after is not None:
            items = [item for item in items if item.created_at is not None and item.created_at >= created_after]
        return items

    async def fetch_events(self, organization_id: str) -> list[CalendarEvent]:
        return list(self._events.get(organization_id, []))
