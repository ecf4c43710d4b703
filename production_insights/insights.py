"""Report assembly: concurrent input fetches and the full insight pipeline."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Protocol

from production_insights.alerts import Alert, generate_alerts
from production_insights.config import InsightSettings, get_settings
from production_insights.patterns import HistoricalBaseline, learn_patterns
from production_insights.predictor import OptimizationSuggestion, Prediction, predict_outcomes, suggest_optimizations
from production_insights.schedule import ScheduleSignals, analyze_schedule
from production_insights.schema import CalendarEvent, EntityKind, WorkItem, utc_now
from production_insights.workflow import WorkflowSignals, analyze_workflow
from production_insights.workload import WorkloadAnalysis, analyze_workloads

logger = logging.getLogger(__name__)


class InsightStore(Protocol):
    async def fetch_items(
        self,
        organization_id: str,
        kind: EntityKind,
        *,
        created_after: Optional[datetime] = None,
    ) -> list[WorkItem]: ...

    async def fetch_events(self, organization_id: str) -> list[CalendarEvent]: ...


@dataclass(frozen=True)
class FetchResult:
    source: str
    value: list
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _fetch(source: str, factory: Callable[[], Awaitable[list]], organization_id: str) -> FetchResult:
    """Run one fetch; a failure becomes an empty result carrying the error."""

    try:
        value = await factory()
    except Exception as exc:  # noqa: BLE001
        logger.warning("fetch of %s failed for organization %s: %s", source, organization_id, exc)
        return FetchResult(source=source, value=[], error=exc)
    return FetchResult(source=source, value=list(value or []))


@dataclass
class InsightInputs:
    items: list[WorkItem] = field(default_factory=list)
    events: list[CalendarEvent] = field(default_factory=list)
    history: list[WorkItem] = field(default_factory=list)
    degraded_sources: list[str] = field(default_factory=list)


async def gather_inputs(
    store: InsightStore,
    organization_id: str,
    now: datetime,
    lookback_days: int,
) -> InsightInputs:
    """Fetch live items, events and the historical window concurrently."""

    cutoff = now - timedelta(days=lookback_days)
    results = await asyncio.gather(
        _fetch("pitches", lambda: store.fetch_items(organization_id, EntityKind.PITCH), organization_id),
        _fetch("stories", lambda: store.fetch_items(organization_id, EntityKind.STORY), organization_id),
        _fetch("calendar_events", lambda: store.fetch_events(organization_id), organization_id),
        _fetch(
            "pitch_history",
            lambda: store.fetch_items(organization_id, EntityKind.PITCH, created_after=cutoff),
            organization_id,
        ),
        _fetch(
            "story_history",
            lambda: store.fetch_items(organization_id, EntityKind.STORY, created_after=cutoff),
            organization_id,
        ),
    )
    pitches, stories, events, pitch_history, story_history = results
    return InsightInputs(
        items=pitches.value + stories.value,
        events=events.value,
        history=pitch_history.value + story_history.value,
        degraded_sources=[result.source for result in results if not result.ok],
    )


# HistoricalBaseline maps keyed by StatusKey; rendered as rows even when empty
_STATUS_KEYED_FIELDS = frozenset({"average_time_in_status", "status_frequency"})


def _status_rows(values: dict) -> list[dict]:
    return [{"kind": key.kind.value, "status": key.status, "value": _jsonable(item)} for key, item in values.items()]


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if dataclasses.is_dataclass(value):
        rendered = {}
        for f in dataclasses.fields(value):
            attr = getattr(value, f.name)
            rendered[f.name] = _status_rows(attr) if f.name in _STATUS_KEYED_FIELDS else _jsonable(attr)
        return rendered
    if isinstance(value, dict):
        return {str(_jsonable(key)): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    return value


@dataclass
class InsightReport:
    organization_id: str
    generated_at: datetime
    schedule: ScheduleSignals = field(default_factory=ScheduleSignals)
    workflow: WorkflowSignals = field(default_factory=WorkflowSignals)
    baseline: HistoricalBaseline = field(default_factory=HistoricalBaseline)
    predictions: list[Prediction] = field(default_factory=list)
    optimizations: list[OptimizationSuggestion] = field(default_factory=list)
    workloads: WorkloadAnalysis = field(default_factory=WorkloadAnalysis)
    alerts: list[Alert] = field(default_factory=list)
    degraded_sources: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.degraded_sources)

    def to_dict(self) -> dict:
        """JSON-compatible rendering; status-keyed maps become lists of rows."""

        return _jsonable(self)


def build_report(
    organization_id: str,
    items: list[WorkItem],
    events: list[CalendarEvent],
    history: list[WorkItem],
    now: datetime,
    *,
    user_id: Optional[str] = None,
    settings: Optional[InsightSettings] = None,
    degraded_sources: Optional[list[str]] = None,
) -> InsightReport:
    """Run every analyzer over materialized inputs.

    Workflow signals and baselines are organization-wide; schedule, workload
    and prediction outputs follow ``user_id`` when one is given.
    """

    settings = settings or get_settings()
    scoped = [item for item in items if user_id is None or user_id in item.assigned_user_ids]

    schedule = analyze_schedule(
        items,
        events,
        now,
        days_ahead=settings.days_ahead,
        user_id=user_id,
        stale_after_days=settings.stale_after_days,
    )
    workflow = analyze_workflow(
        items,
        now,
        bottleneck_wait_days=settings.bottleneck_wait_days,
        min_bottleneck_items=settings.min_bottleneck_items,
    )
    baseline = learn_patterns(
        history,
        now,
        lookback_days=settings.lookback_days,
        min_samples=settings.min_samples,
        bottleneck_days=settings.historical_bottleneck_days,
    )

    return InsightReport(
        organization_id=organization_id,
        generated_at=now,
        schedule=schedule,
        workflow=workflow,
        baseline=baseline,
        predictions=predict_outcomes(scoped, baseline, workflow, stuck_after_days=settings.stuck_after_days),
        optimizations=suggest_optimizations(baseline, workflow),
        workloads=analyze_workloads(items, schedule, user_id=user_id),
        alerts=generate_alerts(
            schedule,
            workflow,
            now,
            bottleneck_alert_min_items=settings.bottleneck_alert_min_items,
        ),
        degraded_sources=list(degraded_sources or []),
    )


async def generate_report(
    store: InsightStore,
    organization_id: str,
    *,
    now: Optional[datetime] = None,
    user_id: Optional[str] = None,
    settings: Optional[InsightSettings] = None,
) -> InsightReport:
    """Fetch inputs for one organization and build its insight report."""

    now = now or utc_now()
    settings = settings or get_settings()
    if not organization_id:
        logger.warning("no organization id given; returning an empty report")
        return InsightReport(organization_id="", generated_at=now)

    inputs = await gather_inputs(store, organization_id, now, settings.lookback_days)
    if inputs.degraded_sources:
        logger.info("report for %s built from degraded inputs: %s", organization_id, inputs.degraded_sources)
    return build_report(
        organization_id,
        inputs.items,
        inputs.events,
        inputs.history,
        now,
        user_id=user_id,
        settings=settings,
        degraded_sources=inputs.degraded_sources,
    )


def run_report(
    store: InsightStore,
    organization_id: str,
    *,
    now: Optional[datetime] = None,
    user_id: Optional[str] = None,
    settings: Optional[InsightSettings] = None,
) -> InsightReport:
    """Synchronous wrapper around ``generate_report`` for scripts and the UI."""

    return asyncio.run(generate_report(store, organization_id, now=now, user_id=user_id, settings=settings))
