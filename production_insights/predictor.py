"""Per-item outcome predictions from live signals and historical baselines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from production_insights.classifier import is_complete
from production_insights.patterns import HistoricalBaseline
from production_insights.schema import DAY_SECONDS, EntityKind, WorkItem
from production_insights.workflow import WorkflowSignals

DEFAULT_STUCK_AFTER_DAYS = 14

HISTORICAL_CONFIDENCE = 0.7
VELOCITY_CONFIDENCE = 0.5

_STATUS_RECOMMENDATIONS = {
    (EntityKind.PITCH, "Pursue Clearance"): "Ensure clearance coordinator has all required information to proceed.",
    (EntityKind.STORY, "Script Writing"): "Check with writer on progress and provide any needed resources or information.",
    (EntityKind.STORY, "A Roll Notes"): "Review notes with editor and ensure they are clear and actionable.",
}


@dataclass(frozen=True)
class Prediction:
    kind: EntityKind
    item_id: str
    title: str
    current_status: str
    predicted_seconds: float
    confidence: float
    likely_to_get_stuck: bool
    optimal_next_status: Optional[str] = None
    recommendations: tuple[str, ...] = ()


@dataclass(frozen=True)
class OptimizationSuggestion:
    type: str
    description: str
    impact: str
    confidence: float
    action_data: dict[str, Any] = field(default_factory=dict)


def estimate_duration(item: WorkItem, baseline: HistoricalBaseline, workflow: WorkflowSignals) -> tuple[float, float]:
    """Return (seconds, confidence), preferring the per-status baseline."""

    average = baseline.average_time_in_status.get(item.key)
    if average is not None:
        return average, HISTORICAL_CONFIDENCE
    overall = workflow.velocity.average_time_to_complete
    if overall:
        return overall, VELOCITY_CONFIDENCE
    return 0.0, 0.0


def likely_to_get_stuck(
    item: WorkItem,
    baseline: HistoricalBaseline,
    workflow: WorkflowSignals,
    stuck_after_days: float = DEFAULT_STUCK_AFTER_DAYS,
) -> bool:
    if item.key in workflow.bottleneck_keys():
        return True
    average = baseline.average_time_in_status.get(item.key)
    return average is not None and average > stuck_after_days * DAY_SECONDS


def optimal_next_status(item: WorkItem, baseline: HistoricalBaseline) -> Optional[str]:
    """Best-scoring observed move out of the item's current status."""

    candidates = [
        path
        for path in baseline.common_paths
        if path.kind is item.kind and path.from_status is not None and path.from_status == item.status
    ]
    if not candidates:
        return None
    best = max(candidates, key=lambda path: path.count * path.success_rate)
    return best.to_status


def recommendations_for(item: WorkItem, stuck: bool) -> tuple[str, ...]:
    recommendations = []
    if stuck:
        recommendations.append(
            f"This {item.kind.value} is in a status that historically has long wait times. "
            "Consider proactive follow-up."
        )
    specific = _STATUS_RECOMMENDATIONS.get((item.kind, item.status))
    if specific:
        recommendations.append(specific)
    return tuple(recommendations)


def predict_outcome(
    item: WorkItem,
    baseline: HistoricalBaseline,
    workflow: WorkflowSignals,
    *,
    stuck_after_days: float = DEFAULT_STUCK_AFTER_DAYS,
) -> Prediction:
    """Estimate time to completion and stuck risk for one item."""

    seconds, confidence = estimate_duration(item, baseline, workflow)
    stuck = likely_to_get_stuck(item, baseline, workflow, stuck_after_days)
    return Prediction(
        kind=item.kind,
        item_id=item.id,
        title=item.title,
        current_status=item.status or "Unknown",
        predicted_seconds=seconds,
        confidence=confidence,
        likely_to_get_stuck=stuck,
        optimal_next_status=optimal_next_status(item, baseline),
        recommendations=recommendations_for(item, stuck),
    )


def predict_outcomes(
    items: Iterable[WorkItem],
    baseline: HistoricalBaseline,
    workflow: WorkflowSignals,
    *,
    stuck_after_days: float = DEFAULT_STUCK_AFTER_DAYS,
) -> list[Prediction]:
    """Predict every open item that has a status."""

    return [
        predict_outcome(item, baseline, workflow, stuck_after_days=stuck_after_days)
        for item in items
        if item.status and not is_complete(item.status, item.kind)
    ]


def suggest_optimizations(baseline: HistoricalBaseline, workflow: WorkflowSignals) -> list[OptimizationSuggestion]:
    """Propose automations for crowded bottlenecks and process changes for slow paths."""

    suggestions = []
    for bottleneck in workflow.bottlenecks:
        if bottleneck.item_count < 3:
            continue
        suggestions.append(
            OptimizationSuggestion(
                type="automation",
                description=(
                    f'Automate notifications when items are stuck in "{bottleneck.status}" status '
                    "for more than 7 days"
                ),
                impact="high",
                confidence=0.8,
                action_data={"status": bottleneck.status, "entity_kind": bottleneck.kind.value, "threshold_days": 7},
            )
        )

    for path in baseline.common_paths:
        days = path.average_time / DAY_SECONDS
        # placeholder paths have no origin and describe no transition
        if path.from_status is None or days <= 7 or path.count < 5:
            continue
        suggestions.append(
            OptimizationSuggestion(
                type="workflow_change",
                description=(
                    f'Transition from "{path.from_status}" to "{path.to_status}" takes an average of '
                    f"{round(days)} days. Consider process improvements."
                ),
                impact="medium",
                confidence=0.7,
                action_data={"from": path.from_status, "to": path.to_status, "average_days": days},
            )
        )
    return suggestions
