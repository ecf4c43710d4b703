"""Assignee workload scoring and rebalancing suggestions."""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Optional

from production_insights.schedule import ScheduleSignals
from production_insights.schema import EntityKind, ItemRef, WorkItem

OVERLOADED_SCORE = 60
LOW_WORKLOAD_SCORE = 30
LOW_WORKLOAD_ITEMS = 5
MAX_REASSIGNMENTS = 5
REBALANCE_CONFIDENCE = 0.7


@dataclass(frozen=True)
class UserWorkload:
    user_id: str
    total_items: int
    overdue_items: int
    at_risk_items: int
    workload_score: int
    recommendations: tuple[str, ...] = ()


@dataclass(frozen=True)
class Reassignment:
    kind: EntityKind
    item_id: str
    title: str


@dataclass(frozen=True)
class OverloadedUser:
    user_id: str
    total_items: int
    workload_score: int
    suggested_reassignments: tuple[Reassignment, ...]


@dataclass(frozen=True)
class RebalancingSuggestion:
    from_user_id: str
    to_user_id: str
    kind: EntityKind
    item_id: str
    title: str
    reason: str
    confidence: float = REBALANCE_CONFIDENCE


@dataclass
class WorkloadAnalysis:
    user_workloads: list[UserWorkload] = field(default_factory=list)
    overloaded_users: list[OverloadedUser] = field(default_factory=list)
    rebalancing_suggestions: list[RebalancingSuggestion] = field(default_factory=list)


def workload_score(total_items: int, overdue_items: int, at_risk_items: int) -> int:
    """Bounded 0-100 score: volume up to 50, overdue up to 30, at-risk up to 20."""

    items_score = min(total_items * 5, 50)
    overdue_score = min(overdue_items * 10, 30)
    at_risk_score = min(at_risk_items * 5, 20)
    return items_score + overdue_score + at_risk_score


def is_overloaded(workload: UserWorkload) -> bool:
    return workload.workload_score > OVERLOADED_SCORE


def has_capacity(workload: UserWorkload) -> bool:
    return workload.workload_score < LOW_WORKLOAD_SCORE and workload.total_items < LOW_WORKLOAD_ITEMS


def count_assignments(items: Iterable[WorkItem], user_id: Optional[str] = None) -> dict[str, int]:
    """Distinct items assigned to each user."""

    assigned: dict[str, set[ItemRef]] = defaultdict(set)
    for item in items:
        for assignee in item.assigned_user_ids:
            if user_id is None or assignee == user_id:
                assigned[assignee].add(item.ref)
    return {assignee: len(refs) for assignee, refs in assigned.items()}


def _recommendations(total_items: int, overdue_items: int, at_risk_items: int) -> tuple[str, ...]:
    recommendations = []
    if overdue_items > 0:
        recommendations.append(f"Address {overdue_items} overdue item(s) immediately.")
    if at_risk_items > 0:
        recommendations.append(f"Monitor {at_risk_items} at-risk item(s) closely.")
    if total_items > 8:
        recommendations.append("Consider reassigning some items to balance workload.")
    if overdue_items > 2:
        recommendations.append("User may be overloaded - consider reducing assignments.")
    return tuple(recommendations)


def score_users(totals: dict[str, int], schedule: ScheduleSignals) -> list[UserWorkload]:
    """Combine assignment totals with overdue and at-risk counts per user."""

    overdue = Counter(user for entry in schedule.overdue_items for user in entry.assigned_user_ids)
    at_risk = Counter(user for entry in schedule.at_risk_items for user in entry.assigned_user_ids)

    workloads = []
    for user, total in totals.items():
        workloads.append(
            UserWorkload(
                user_id=user,
                total_items=total,
                overdue_items=overdue[user],
                at_risk_items=at_risk[user],
                workload_score=workload_score(total, overdue[user], at_risk[user]),
                recommendations=_recommendations(total, overdue[user], at_risk[user]),
            )
        )
    return sorted(workloads, key=lambda workload: workload.workload_score, reverse=True)


def rebalance(
    overloaded: list[OverloadedUser],
    workloads: list[UserWorkload],
) -> list[RebalancingSuggestion]:
    """Pair each overloaded user's overdue items with the least-loaded users, by position."""

    receivers = sorted((w for w in workloads if has_capacity(w)), key=lambda workload: workload.workload_score)
    suggestions = []
    for user in overloaded:
        for reassignment, target in zip(user.suggested_reassignments, receivers):
            suggestions.append(
                RebalancingSuggestion(
                    from_user_id=user.user_id,
                    to_user_id=target.user_id,
                    kind=reassignment.kind,
                    item_id=reassignment.item_id,
                    title=reassignment.title,
                    reason=(
                        f"Rebalance workload: {user.user_id} is overloaded (score: {user.workload_score}), "
                        f"{target.user_id} has capacity (score: {target.workload_score})"
                    ),
                )
            )
    return suggestions


def analyze_workloads(
    items: Iterable[WorkItem],
    schedule: ScheduleSignals,
    *,
    user_id: Optional[str] = None,
) -> WorkloadAnalysis:
    """Score every assignee, flag overloaded users and propose reassignments."""

    workloads = score_users(count_assignments(items, user_id), schedule)

    overloaded = []
    for workload in workloads:
        if not is_overloaded(workload):
            continue
        reassignments = [
            Reassignment(kind=entry.kind, item_id=entry.item_id, title=entry.title)
            for entry in schedule.overdue_items
            if workload.user_id in entry.assigned_user_ids
        ]
        overloaded.append(
            OverloadedUser(
                user_id=workload.user_id,
                total_items=workload.total_items,
                workload_score=workload.workload_score,
                suggested_reassignments=tuple(reassignments[:MAX_REASSIGNMENTS]),
            )
        )

    return WorkloadAnalysis(
        user_workloads=workloads,
        overloaded_users=overloaded,
        rebalancing_suggestions=rebalance(overloaded, workloads),
    )
