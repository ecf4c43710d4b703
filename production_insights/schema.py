"""Core data schema for production workflow records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, NamedTuple, Optional

DAY_SECONDS = 24 * 60 * 60


class EntityKind(str, Enum):
    """The two work-item kinds tracked through the pipeline."""

    PITCH = "pitch"
    STORY = "story"


class StatusKey(NamedTuple):
    """Composite key for status-level aggregation."""

    kind: EntityKind
    status: str


class ItemRef(NamedTuple):
    """Identity of a work item across both kinds."""

    kind: EntityKind
    item_id: str


@dataclass(frozen=True)
class WorkItem:
    """Normalized work item used by all analyzers.

    Concrete records are always a ``Pitch`` or a ``Story``; the subclass is the
    kind tag. Assignees are deduplicated in first-seen order.
    """

    kind: ClassVar[EntityKind]

    id: str
    status: str = ""
    title: str = "Untitled"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    assigned_user_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        users = tuple(dict.fromkeys(str(user) for user in self.assigned_user_ids if user))
        object.__setattr__(self, "assigned_user_ids", users)
        object.__setattr__(self, "status", self.status or "")
        object.__setattr__(self, "created_at", as_utc(self.created_at))
        object.__setattr__(self, "updated_at", as_utc(self.updated_at))

    @property
    def ref(self) -> ItemRef:
        return ItemRef(self.kind, self.id)

    @property
    def key(self) -> StatusKey:
        return StatusKey(self.kind, self.status)

    def last_touched(self, now: datetime) -> datetime:
        """Best available timestamp of the last status change."""

        return self.updated_at or self.created_at or now


@dataclass(frozen=True)
class Pitch(WorkItem):
    kind: ClassVar[EntityKind] = EntityKind.PITCH


@dataclass(frozen=True)
class Story(WorkItem):
    kind: ClassVar[EntityKind] = EntityKind.STORY


ITEM_TYPES: dict[EntityKind, type[WorkItem]] = {
    EntityKind.PITCH: Pitch,
    EntityKind.STORY: Story,
}


def make_item(kind: EntityKind | str, **fields) -> WorkItem:
    """Build the concrete item variant for ``kind``."""

    return ITEM_TYPES[EntityKind(kind)](**fields)


@dataclass(frozen=True)
class CalendarEvent:
    """Calendar entry, optionally linked to a pitch or story."""

    id: str
    start_date: datetime
    entity_id: Optional[str] = None
    entity_kind: Optional[EntityKind] = None
    end_date: Optional[datetime] = None
    title: str = "Untitled Event"
    event_type: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "start_date", as_utc(self.start_date))
        object.__setattr__(self, "end_date", as_utc(self.end_date))

    @property
    def is_linked(self) -> bool:
        return bool(self.entity_id) and self.entity_kind is not None

    @property
    def entity_ref(self) -> Optional[ItemRef]:
        if not self.is_linked:
            return None
        return ItemRef(EntityKind(self.entity_kind), str(self.entity_id))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive timestamps; aware ones are kept as given."""

    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def whole_days(seconds: float) -> int:
    """Floor a duration in seconds to whole days."""

    return int(seconds // DAY_SECONDS)
