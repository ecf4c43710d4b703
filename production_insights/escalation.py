"""Severity escalation rules for schedule and workflow alerts."""

from __future__ import annotations

from enum import Enum

from production_insights.schema import DAY_SECONDS


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {Severity.LOW: 0, Severity.MEDIUM: 1, Severity.HIGH: 2, Severity.CRITICAL: 3}


def overdue_severity(days_overdue: int) -> Severity:
    if days_overdue >= 14:
        return Severity.CRITICAL
    if days_overdue >= 7:
        return Severity.HIGH
    if days_overdue >= 3:
        return Severity.MEDIUM
    return Severity.LOW


def conflict_severity(item_count: int) -> Severity:
    if item_count >= 4:
        return Severity.CRITICAL
    if item_count >= 3:
        return Severity.HIGH
    if item_count >= 2:
        return Severity.MEDIUM
    return Severity.LOW


def at_risk_severity(days_until_deadline: int) -> Severity:
    if days_until_deadline <= 1:
        return Severity.CRITICAL
    if days_until_deadline <= 3:
        return Severity.HIGH
    if days_until_deadline <= 5:
        return Severity.MEDIUM
    return Severity.LOW


def bottleneck_severity(item_count: int, average_wait_seconds: float) -> Severity:
    """Escalate on both crowding and wait: critical needs 5+ items waiting 14+ days."""

    wait_days = average_wait_seconds / DAY_SECONDS
    if item_count >= 5 and wait_days >= 14:
        return Severity.CRITICAL
    if item_count >= 3 and wait_days >= 7:
        return Severity.HIGH
    if item_count >= 2 and wait_days >= 3:
        return Severity.MEDIUM
    return Severity.LOW
