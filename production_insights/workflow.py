"""Live workflow metrics: phase distribution, bottlenecks and velocity."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

import numpy as np

from production_insights.classifier import Phase, classify
from production_insights.schema import DAY_SECONDS, EntityKind, StatusKey, WorkItem, utc_now, whole_days

logger = logging.getLogger(__name__)

DEFAULT_BOTTLENECK_WAIT_DAYS = 7
DEFAULT_MIN_BOTTLENECK_ITEMS = 2
DEFAULT_SAMPLE_LIMIT = 10


@dataclass(frozen=True)
class PhaseItem:
    kind: EntityKind
    item_id: str
    title: str
    status: str
    days_in_status: int


@dataclass(frozen=True)
class Bottleneck:
    kind: EntityKind
    status: str
    item_count: int
    average_wait_seconds: float
    items: tuple[PhaseItem, ...]

    @property
    def key(self) -> StatusKey:
        return StatusKey(self.kind, self.status)

    @property
    def average_wait_days(self) -> float:
        return self.average_wait_seconds / DAY_SECONDS


@dataclass(frozen=True)
class VelocityMetrics:
    average_time_to_complete: float = 0.0
    completion_rate: float = 0.0
    items_in_progress: int = 0
    items_completed: int = 0


@dataclass
class WorkflowSignals:
    phase_distribution: dict[Phase, int] = field(default_factory=dict)
    items_by_phase: dict[Phase, list[PhaseItem]] = field(default_factory=dict)
    bottlenecks: list[Bottleneck] = field(default_factory=list)
    velocity: VelocityMetrics = field(default_factory=VelocityMetrics)

    def bottleneck_keys(self) -> set[StatusKey]:
        return {bottleneck.key for bottleneck in self.bottlenecks}


def _wait_seconds(item: WorkItem, now: datetime) -> float:
    return max((now - item.last_touched(now)).total_seconds(), 0.0)


def _phase_item(item: WorkItem, now: datetime) -> PhaseItem:
    return PhaseItem(
        kind=item.kind,
        item_id=item.id,
        title=item.title,
        status=item.status,
        days_in_status=whole_days(_wait_seconds(item, now)),
    )


def phase_distribution(items: Iterable[WorkItem]) -> dict[Phase, int]:
    """Count items per phase; the counts always sum to the number of items."""

    return dict(Counter(classify(item.status, item.kind).phase for item in items))


def find_bottlenecks(
    items: Iterable[WorkItem],
    now: datetime,
    wait_days: float = DEFAULT_BOTTLENECK_WAIT_DAYS,
    min_items: int = DEFAULT_MIN_BOTTLENECK_ITEMS,
    sample_limit: int = DEFAULT_SAMPLE_LIMIT,
) -> list[Bottleneck]:
    """Statuses where open items pile up with a long average wait."""

    by_status: dict[StatusKey, list[WorkItem]] = defaultdict(list)
    for item in items:
        if not classify(item.status, item.kind).is_complete:
            by_status[item.key].append(item)

    bottlenecks = []
    for key, grouped in by_status.items():
        if len(grouped) < min_items:
            continue
        average_wait = float(np.mean([_wait_seconds(item, now) for item in grouped]))
        if average_wait <= wait_days * DAY_SECONDS:
            continue
        bottlenecks.append(
            Bottleneck(
                kind=key.kind,
                status=key.status,
                item_count=len(grouped),
                average_wait_seconds=average_wait,
                items=tuple(_phase_item(item, now) for item in grouped[:sample_limit]),
            )
        )
    return sorted(bottlenecks, key=lambda bottleneck: bottleneck.average_wait_seconds, reverse=True)


def compute_velocity(items: Iterable[WorkItem]) -> VelocityMetrics:
    """Compute completion rate and average time to complete."""

    completed = []
    in_progress = 0
    for item in items:
        if classify(item.status, item.kind).is_complete:
            completed.append(item)
        else:
            in_progress += 1

    total = len(completed) + in_progress
    if not total:
        return VelocityMetrics()

    durations = [
        (item.updated_at - item.created_at).total_seconds()
        for item in completed
        if item.created_at is not None and item.updated_at is not None
    ]
    return VelocityMetrics(
        average_time_to_complete=float(np.mean(durations)) if durations else 0.0,
        completion_rate=len(completed) / total,
        items_in_progress=in_progress,
        items_completed=len(completed),
    )


def analyze_workflow(
    items: Iterable[WorkItem],
    now: Optional[datetime] = None,
    *,
    bottleneck_wait_days: float = DEFAULT_BOTTLENECK_WAIT_DAYS,
    min_bottleneck_items: int = DEFAULT_MIN_BOTTLENECK_ITEMS,
    sample_limit: int = DEFAULT_SAMPLE_LIMIT,
) -> WorkflowSignals:
    """Compute phase distribution, live bottlenecks and velocity metrics."""

    now = now or utc_now()
    items = list(items)

    items_by_phase: dict[Phase, list[PhaseItem]] = defaultdict(list)
    for item in items:
        items_by_phase[classify(item.status, item.kind).phase].append(_phase_item(item, now))

    signals = WorkflowSignals(
        phase_distribution=phase_distribution(items),
        items_by_phase=dict(items_by_phase),
        bottlenecks=find_bottlenecks(items, now, bottleneck_wait_days, min_bottleneck_items, sample_limit),
        velocity=compute_velocity(items),
    )
    logger.debug("workflow signals: %d items, %d bottlenecks", len(items), len(signals.bottlenecks))
    return signals
