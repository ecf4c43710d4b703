"""Deadline, staleness and conflict analysis over linked calendar events."""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from production_insights.classifier import is_active, is_complete
from production_insights.schema import (
    DAY_SECONDS,
    CalendarEvent,
    EntityKind,
    ItemRef,
    WorkItem,
    utc_now,
    whole_days,
)

logger = logging.getLogger(__name__)

DEFAULT_DAYS_AHEAD = 7
DEFAULT_STALE_AFTER_DAYS = 14


@dataclass(frozen=True)
class LinkedEvent:
    event_id: str
    kind: EntityKind
    item_id: str
    title: str
    start_date: datetime
    end_date: Optional[datetime] = None
    event_type: Optional[str] = None


@dataclass(frozen=True)
class OverdueItem:
    kind: EntityKind
    item_id: str
    title: str
    status: str
    expected_completion_date: datetime
    days_overdue: int
    assigned_user_ids: tuple[str, ...]
    rule: str


@dataclass(frozen=True)
class AtRiskItem:
    kind: EntityKind
    item_id: str
    title: str
    status: str
    deadline: datetime
    days_until_deadline: int
    assigned_user_ids: tuple[str, ...]


@dataclass(frozen=True)
class ConflictingItem:
    kind: EntityKind
    item_id: str
    title: str
    assigned_user_id: str


@dataclass(frozen=True)
class ScheduleConflict:
    """Several items due on the same calendar day for one assignee."""

    date: date
    user_id: str
    items: tuple[ConflictingItem, ...]


@dataclass(frozen=True)
class TimelineEntry:
    kind: EntityKind
    item_id: str
    title: str
    status: str
    deadline: Optional[datetime]
    days_until_deadline: Optional[int]
    assigned_user_ids: tuple[str, ...]


@dataclass
class ScheduleSignals:
    linked_events: list[LinkedEvent] = field(default_factory=list)
    overdue_items: list[OverdueItem] = field(default_factory=list)
    at_risk_items: list[AtRiskItem] = field(default_factory=list)
    conflicts: list[ScheduleConflict] = field(default_factory=list)
    active_items_timeline: list[TimelineEntry] = field(default_factory=list)


def link_events(events: Iterable[CalendarEvent]) -> list[LinkedEvent]:
    """Keep only events that reference both an entity id and kind."""

    linked = []
    for event in events:
        ref = event.entity_ref
        if ref is None:
            continue
        linked.append(
            LinkedEvent(
                event_id=event.id,
                kind=ref.kind,
                item_id=ref.item_id,
                title=event.title,
                start_date=event.start_date,
                end_date=event.end_date,
                event_type=event.event_type,
            )
        )
    return linked


def _deadlines(linked: list[LinkedEvent]) -> dict[ItemRef, datetime]:
    deadlines: dict[ItemRef, datetime] = {}
    for event in linked:
        deadlines.setdefault(ItemRef(event.kind, event.item_id), event.start_date)
    return deadlines


def _days_until(deadline: datetime, now: datetime) -> int:
    return math.ceil((deadline - now).total_seconds() / DAY_SECONDS)


def _involves(item: WorkItem, user_id: Optional[str]) -> bool:
    return user_id is None or user_id in item.assigned_user_ids


def find_overdue(
    items: Iterable[WorkItem],
    deadlines: dict[ItemRef, datetime],
    now: datetime,
    stale_after_days: int = DEFAULT_STALE_AFTER_DAYS,
) -> list[OverdueItem]:
    """Flag items past their linked deadline, or stale in an active status.

    The deadline rule short-circuits the staleness rule, so an item is never
    counted twice.
    """

    overdue = []
    for item in items:
        if is_complete(item.status, item.kind):
            continue

        deadline = deadlines.get(item.ref)
        if deadline is not None and deadline < now:
            overdue.append(
                OverdueItem(
                    kind=item.kind,
                    item_id=item.id,
                    title=item.title,
                    status=item.status,
                    expected_completion_date=deadline,
                    days_overdue=whole_days((now - deadline).total_seconds()),
                    assigned_user_ids=item.assigned_user_ids,
                    rule="deadline",
                )
            )
            continue

        if item.updated_at is None or not is_active(item.status, item.kind):
            continue
        days_since_update = whole_days((now - item.updated_at).total_seconds())
        if days_since_update >= stale_after_days:
            overdue.append(
                OverdueItem(
                    kind=item.kind,
                    item_id=item.id,
                    title=item.title,
                    status=item.status,
                    expected_completion_date=item.updated_at,
                    days_overdue=days_since_update - stale_after_days,
                    assigned_user_ids=item.assigned_user_ids,
                    rule="stale",
                )
            )

    return sorted(overdue, key=lambda entry: entry.days_overdue, reverse=True)


def find_at_risk(
    items: Iterable[WorkItem],
    deadlines: dict[ItemRef, datetime],
    now: datetime,
    days_ahead: int = DEFAULT_DAYS_AHEAD,
) -> list[AtRiskItem]:
    """Open items whose deadline falls within ``days_ahead`` days from now."""

    horizon = now + timedelta(days=days_ahead)
    at_risk = []
    for item in items:
        deadline = deadlines.get(item.ref)
        if deadline is None or not now <= deadline <= horizon:
            continue
        if is_complete(item.status, item.kind):
            continue
        at_risk.append(
            AtRiskItem(
                kind=item.kind,
                item_id=item.id,
                title=item.title,
                status=item.status,
                deadline=deadline,
                days_until_deadline=_days_until(deadline, now),
                assigned_user_ids=item.assigned_user_ids,
            )
        )
    return sorted(at_risk, key=lambda entry: entry.days_until_deadline)


def find_conflicts(
    items: Iterable[WorkItem],
    deadlines: dict[ItemRef, datetime],
    user_id: Optional[str] = None,
) -> list[ScheduleConflict]:
    """Group deadlines by (assignee, calendar day) and keep the crowded days."""

    by_user_day: dict[tuple[str, date], dict[ItemRef, ConflictingItem]] = defaultdict(dict)
    for item in items:
        deadline = deadlines.get(item.ref)
        if deadline is None:
            continue
        for assignee in item.assigned_user_ids:
            if user_id is not None and assignee != user_id:
                continue
            by_user_day[(assignee, deadline.date())].setdefault(
                item.ref,
                ConflictingItem(kind=item.kind, item_id=item.id, title=item.title, assigned_user_id=assignee),
            )

    conflicts = [
        ScheduleConflict(date=day, user_id=assignee, items=tuple(grouped.values()))
        for (assignee, day), grouped in by_user_day.items()
        if len(grouped) > 1
    ]
    return sorted(conflicts, key=lambda conflict: (conflict.date, conflict.user_id))


def build_timeline(
    items: Iterable[WorkItem],
    deadlines: dict[ItemRef, datetime],
    now: datetime,
) -> list[TimelineEntry]:
    """Open items ordered by deadline, undated items last."""

    timeline = []
    for item in items:
        if is_complete(item.status, item.kind):
            continue
        deadline = deadlines.get(item.ref)
        timeline.append(
            TimelineEntry(
                kind=item.kind,
                item_id=item.id,
                title=item.title,
                status=item.status,
                deadline=deadline,
                days_until_deadline=_days_until(deadline, now) if deadline is not None else None,
                assigned_user_ids=item.assigned_user_ids,
            )
        )
    return sorted(timeline, key=lambda entry: (entry.deadline is None, entry.deadline or now))


def analyze_schedule(
    items: Iterable[WorkItem],
    events: Iterable[CalendarEvent],
    now: Optional[datetime] = None,
    *,
    days_ahead: int = DEFAULT_DAYS_AHEAD,
    user_id: Optional[str] = None,
    stale_after_days: int = DEFAULT_STALE_AFTER_DAYS,
    include_overdue: bool = True,
    include_conflicts: bool = True,
    include_at_risk: bool = True,
) -> ScheduleSignals:
    """Compute overdue, at-risk, conflict and timeline signals.

    When ``user_id`` is given every output is restricted to that assignee.
    """

    now = now or utc_now()
    linked = link_events(events)
    deadlines = _deadlines(linked)
    scoped = [item for item in items if _involves(item, user_id)]

    signals = ScheduleSignals(
        linked_events=linked,
        overdue_items=find_overdue(scoped, deadlines, now, stale_after_days) if include_overdue else [],
        at_risk_items=find_at_risk(scoped, deadlines, now, days_ahead) if include_at_risk else [],
        conflicts=find_conflicts(scoped, deadlines, user_id) if include_conflicts else [],
        active_items_timeline=build_timeline(scoped, deadlines, now),
    )
    logger.debug(
        "schedule signals: %d overdue, %d at risk, %d conflicts, %d active",
        len(signals.overdue_items),
        len(signals.at_risk_items),
        len(signals.conflicts),
        len(signals.active_items_timeline),
    )
    return signals
