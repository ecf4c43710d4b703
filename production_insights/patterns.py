"""Historical baselines learned from a lookback window of work items."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional

import numpy as np

from production_insights.classifier import HAPPY_PATHS, is_success
from production_insights.schema import DAY_SECONDS, EntityKind, StatusKey, WorkItem, utc_now

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK_DAYS = 90
DEFAULT_MIN_SAMPLES = 3
DEFAULT_HISTORICAL_BOTTLENECK_DAYS = 7


@dataclass(frozen=True)
class BaselineBottleneck:
    kind: EntityKind
    status: str
    average_wait_seconds: float
    item_count: int


@dataclass(frozen=True)
class StatusPath:
    """Observed move into ``to_status``.

    Records carry no status-change log, so ``from_status`` stays None and the
    path only describes where items currently sit.
    """

    kind: EntityKind
    to_status: str
    count: int
    average_time: float
    success_rate: float
    from_status: Optional[str] = None


@dataclass(frozen=True)
class SuccessPattern:
    kind: EntityKind
    pattern: tuple[str, ...]
    count: int
    average_total_time: float
    success_rate: float


@dataclass
class HistoricalBaseline:
    average_time_in_status: dict[StatusKey, float] = field(default_factory=dict)
    status_frequency: dict[StatusKey, int] = field(default_factory=dict)
    bottlenecks: list[BaselineBottleneck] = field(default_factory=list)
    common_paths: list[StatusPath] = field(default_factory=list)
    success_patterns: list[SuccessPattern] = field(default_factory=list)
    lookback_days: int = DEFAULT_LOOKBACK_DAYS
    min_samples: int = DEFAULT_MIN_SAMPLES
    sample_size: int = 0


def _time_in_status(item: WorkItem) -> float:
    return ((item.updated_at or item.created_at) - item.created_at).total_seconds()


def within_lookback(items: Iterable[WorkItem], now: datetime, lookback_days: int) -> list[WorkItem]:
    """Items created inside the window; undated or status-less items are dropped."""

    cutoff = now - timedelta(days=lookback_days)
    return [item for item in items if item.status and item.created_at is not None and item.created_at >= cutoff]


def learn_patterns(
    items: Iterable[WorkItem],
    now: Optional[datetime] = None,
    *,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    min_samples: int = DEFAULT_MIN_SAMPLES,
    bottleneck_days: float = DEFAULT_HISTORICAL_BOTTLENECK_DAYS,
) -> HistoricalBaseline:
    """Learn per-status baselines from items created in the lookback window."""

    now = now or utc_now()
    window = within_lookback(items, now, lookback_days)

    durations: dict[StatusKey, list[float]] = defaultdict(list)
    successes: dict[StatusKey, int] = defaultdict(int)
    for item in window:
        durations[item.key].append(_time_in_status(item))
        if is_success(item.status, item.kind):
            successes[item.key] += 1

    status_frequency = {key: len(values) for key, values in durations.items()}
    average_time_in_status = {
        key: float(np.mean(values)) for key, values in durations.items() if len(values) >= min_samples
    }

    bottlenecks = [
        BaselineBottleneck(
            kind=key.kind,
            status=key.status,
            average_wait_seconds=average,
            item_count=status_frequency[key],
        )
        for key, average in average_time_in_status.items()
        if status_frequency[key] >= min_samples and average > bottleneck_days * DAY_SECONDS
    ]

    common_paths = [
        StatusPath(
            kind=key.kind,
            to_status=key.status,
            count=count,
            average_time=average_time_in_status[key],
            success_rate=successes[key] / count,
        )
        for key, count in status_frequency.items()
        if count >= min_samples
    ]

    baseline = HistoricalBaseline(
        average_time_in_status=average_time_in_status,
        status_frequency=status_frequency,
        bottlenecks=sorted(bottlenecks, key=lambda entry: entry.average_wait_seconds, reverse=True),
        common_paths=sorted(common_paths, key=lambda path: path.count, reverse=True),
        success_patterns=_success_patterns(window, min_samples),
        lookback_days=lookback_days,
        min_samples=min_samples,
        sample_size=len(window),
    )
    logger.debug(
        "historical baseline: %d samples, %d status averages, %d bottlenecks",
        baseline.sample_size,
        len(baseline.average_time_in_status),
        len(baseline.bottlenecks),
    )
    return baseline


def _success_patterns(window: list[WorkItem], min_samples: int) -> list[SuccessPattern]:
    patterns = []
    for kind in EntityKind:
        of_kind = [item for item in window if item.kind is kind]
        succeeded = [item for item in of_kind if is_success(item.status, kind)]
        if len(succeeded) < min_samples:
            continue
        patterns.append(
            SuccessPattern(
                kind=kind,
                pattern=HAPPY_PATHS[kind],
                count=len(succeeded),
                average_total_time=float(np.mean([_time_in_status(item) for item in succeeded])),
                success_rate=len(succeeded) / len(of_kind),
            )
        )
    return patterns
