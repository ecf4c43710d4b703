"""Typed, severity-ranked alerts with suggested remediation actions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional

from production_insights.escalation import (
    Severity,
    at_risk_severity,
    bottleneck_severity,
    conflict_severity,
    overdue_severity,
)
from production_insights.schedule import AtRiskItem, OverdueItem, ScheduleConflict, ScheduleSignals
from production_insights.schema import EntityKind, utc_now
from production_insights.workflow import Bottleneck, WorkflowSignals

logger = logging.getLogger(__name__)

BOTTLENECK_ALERT_MIN_ITEMS = 3
DEADLINE_EXTENSION_DAYS = 7


class AlertType(str, Enum):
    OVERDUE = "overdue"
    CONFLICT = "conflict"
    AT_RISK = "at_risk"
    BOTTLENECK = "bottleneck"


class ActionType(str, Enum):
    REASSIGN = "reassign"
    EXTEND_DEADLINE = "extend_deadline"
    NOTIFY_TEAM = "notify_team"


@dataclass(frozen=True)
class SuggestedAction:
    """Advisory remediation; never applied without confirmation."""

    id: str
    type: ActionType
    description: str
    confidence: float
    action_data: dict[str, Any] = field(default_factory=dict)
    requires_confirmation: bool = True


@dataclass(frozen=True)
class Alert:
    id: str
    type: AlertType
    severity: Severity
    entity_kind: EntityKind
    entity_id: str
    entity_title: str
    message: str
    details: str
    affected_users: tuple[str, ...]
    suggested_actions: tuple[SuggestedAction, ...]
    predicted_impact: str
    created_at: datetime

    @property
    def key(self) -> tuple[EntityKind, str, AlertType]:
        return (self.entity_kind, self.entity_id, self.type)


def _overdue_actions(item: OverdueItem) -> tuple[SuggestedAction, ...]:
    actions = [
        SuggestedAction(
            id=f"notify-{item.item_id}",
            type=ActionType.NOTIFY_TEAM,
            description="Notify assigned team members about overdue status",
            confidence=0.9,
            action_data={
                "entity_kind": item.kind.value,
                "entity_id": item.item_id,
                "recipients": list(item.assigned_user_ids),
            },
        )
    ]
    if item.assigned_user_ids:
        actions.append(
            SuggestedAction(
                id=f"reassign-{item.item_id}",
                type=ActionType.REASSIGN,
                description="Consider reassigning to balance workload",
                confidence=0.6,
                action_data={"entity_kind": item.kind.value, "entity_id": item.item_id},
            )
        )
    return tuple(actions)


def _conflict_actions(conflict: ScheduleConflict) -> tuple[SuggestedAction, ...]:
    # the first item keeps its date, the rest move together
    postponed = conflict.items[1:]
    new_deadline = conflict.date + timedelta(days=DEADLINE_EXTENSION_DAYS)
    titles = ", ".join(f'"{item.title}"' for item in postponed)
    return (
        SuggestedAction(
            id=f"extend-{conflict.user_id}-{conflict.date.isoformat()}",
            type=ActionType.EXTEND_DEADLINE,
            description=f"Extend deadline for {titles} to balance workload",
            confidence=0.7,
            action_data={
                "entity_ids": [item.item_id for item in postponed],
                "new_deadline": new_deadline.isoformat(),
            },
        ),
        SuggestedAction(
            id=f"notify-conflict-{conflict.user_id}-{conflict.date.isoformat()}",
            type=ActionType.NOTIFY_TEAM,
            description="Notify team about scheduling conflict",
            confidence=0.9,
            action_data={"recipients": [conflict.user_id], "conflict_date": conflict.date.isoformat()},
        ),
    )


def _at_risk_actions(item: AtRiskItem) -> tuple[SuggestedAction, ...]:
    actions = [
        SuggestedAction(
            id=f"check-progress-{item.item_id}",
            type=ActionType.NOTIFY_TEAM,
            description="Check progress with assigned team members",
            confidence=0.9,
            action_data={
                "entity_kind": item.kind.value,
                "entity_id": item.item_id,
                "recipients": list(item.assigned_user_ids),
            },
        )
    ]
    if item.days_until_deadline <= 3:
        actions.append(
            SuggestedAction(
                id=f"extend-{item.item_id}",
                type=ActionType.EXTEND_DEADLINE,
                description="Consider extending deadline if needed",
                confidence=0.6,
                action_data={"entity_kind": item.kind.value, "entity_id": item.item_id},
            )
        )
    return tuple(actions)


def _bottleneck_actions(bottleneck: Bottleneck) -> tuple[SuggestedAction, ...]:
    return (
        SuggestedAction(
            id=f"notify-bottleneck-{bottleneck.kind.value}-{bottleneck.status}",
            type=ActionType.NOTIFY_TEAM,
            description=f'Notify team about bottleneck in "{bottleneck.status}" status',
            confidence=0.9,
            action_data={
                "status": bottleneck.status,
                "entity_kind": bottleneck.kind.value,
                "item_count": bottleneck.item_count,
            },
        ),
    )


def overdue_alert(item: OverdueItem, now: datetime) -> Alert:
    return Alert(
        id=f"overdue-{item.kind.value}-{item.item_id}",
        type=AlertType.OVERDUE,
        severity=overdue_severity(item.days_overdue),
        entity_kind=item.kind,
        entity_id=item.item_id,
        entity_title=item.title,
        message=f"{item.title} is {item.days_overdue} days overdue",
        details=(
            f'This {item.kind.value} has been in "{item.status}" status for {item.days_overdue} days, '
            "which exceeds the expected timeline."
        ),
        affected_users=item.assigned_user_ids,
        suggested_actions=_overdue_actions(item),
        predicted_impact=f"Delays in {item.kind.value} completion may impact downstream workflow stages.",
        created_at=now,
    )


def conflict_alert(conflict: ScheduleConflict, now: datetime) -> Alert:
    first = conflict.items[0]
    count = len(conflict.items)
    day = conflict.date.isoformat()
    return Alert(
        id=f"conflict-{conflict.user_id}-{day}",
        type=AlertType.CONFLICT,
        severity=conflict_severity(count),
        entity_kind=first.kind,
        entity_id=first.item_id,
        entity_title=f"{count} items due on {day}",
        message=f"{count} items are due on the same day for the same user",
        details=f"Multiple items are scheduled for completion on {day}: {', '.join(i.title for i in conflict.items)}",
        affected_users=(conflict.user_id,),
        suggested_actions=_conflict_actions(conflict),
        predicted_impact=f"User may be overloaded on {day}, risking delays or quality issues.",
        created_at=now,
    )


def at_risk_alert(item: AtRiskItem, now: datetime) -> Alert:
    return Alert(
        id=f"at-risk-{item.kind.value}-{item.item_id}",
        type=AlertType.AT_RISK,
        severity=at_risk_severity(item.days_until_deadline),
        entity_kind=item.kind,
        entity_id=item.item_id,
        entity_title=item.title,
        message=f"{item.title} is at risk of missing deadline ({item.days_until_deadline} days remaining)",
        details=(
            f"This {item.kind.value} is due in {item.days_until_deadline} days "
            f'but is still in "{item.status}" status.'
        ),
        affected_users=item.assigned_user_ids,
        suggested_actions=_at_risk_actions(item),
        predicted_impact=f"If not addressed, this {item.kind.value} may miss its deadline, causing workflow delays.",
        created_at=now,
    )


def bottleneck_alert(bottleneck: Bottleneck, now: datetime) -> Alert:
    first_id = bottleneck.items[0].item_id if bottleneck.items else ""
    return Alert(
        id=f"bottleneck-{bottleneck.kind.value}-{bottleneck.status}",
        type=AlertType.BOTTLENECK,
        severity=bottleneck_severity(bottleneck.item_count, bottleneck.average_wait_seconds),
        entity_kind=bottleneck.kind,
        entity_id=first_id,
        entity_title=f'{bottleneck.item_count} items stuck in "{bottleneck.status}"',
        message=f'{bottleneck.item_count} {bottleneck.kind.value}s are stuck in "{bottleneck.status}" status',
        details=(
            f'Multiple {bottleneck.kind.value}s are waiting in "{bottleneck.status}" status with an average '
            f"wait time of {round(bottleneck.average_wait_days)} days."
        ),
        affected_users=(),
        suggested_actions=_bottleneck_actions(bottleneck),
        predicted_impact="This bottleneck is blocking workflow progression and may cause delays across multiple items.",
        created_at=now,
    )


def rank_alerts(alerts: list[Alert]) -> list[Alert]:
    """Most severe first; generation order is kept within a severity."""

    return sorted(alerts, key=lambda alert: alert.severity.rank, reverse=True)


def generate_alerts(
    schedule: ScheduleSignals,
    workflow: WorkflowSignals,
    now: Optional[datetime] = None,
    *,
    include_overdue: bool = True,
    include_conflicts: bool = True,
    include_at_risk: bool = True,
    include_bottlenecks: bool = True,
    bottleneck_alert_min_items: int = BOTTLENECK_ALERT_MIN_ITEMS,
) -> list[Alert]:
    """Turn schedule and workflow signals into ranked alerts."""

    now = now or utc_now()
    alerts: list[Alert] = []
    if include_overdue:
        alerts.extend(overdue_alert(item, now) for item in schedule.overdue_items)
    if include_conflicts:
        alerts.extend(conflict_alert(conflict, now) for conflict in schedule.conflicts if len(conflict.items) > 1)
    if include_at_risk:
        alerts.extend(at_risk_alert(item, now) for item in schedule.at_risk_items)
    if include_bottlenecks:
        alerts.extend(
            bottleneck_alert(bottleneck, now)
            for bottleneck in workflow.bottlenecks
            if bottleneck.item_count >= bottleneck_alert_min_items
        )

    logger.debug("generated %d alerts", len(alerts))
    return rank_alerts(alerts)
