from production_insights.escalation import (
    Severity,
    at_risk_severity,
    bottleneck_severity,
    conflict_severity,
    overdue_severity,
)
from production_insights.schema import DAY_SECONDS


def test_overdue_rules():
    assert overdue_severity(0) is Severity.LOW
    assert overdue_severity(3) is Severity.MEDIUM
    assert overdue_severity(7) is Severity.HIGH
    assert overdue_severity(14) is Severity.CRITICAL


def test_conflict_rules():
    assert conflict_severity(2) is Severity.MEDIUM
    assert conflict_severity(3) is Severity.HIGH
    assert conflict_severity(6) is Severity.CRITICAL


def test_at_risk_rules():
    assert at_risk_severity(1) is Severity.CRITICAL
    assert at_risk_severity(3) is Severity.HIGH
    assert at_risk_severity(5) is Severity.MEDIUM
    assert at_risk_severity(7) is Severity.LOW


def test_bottleneck_rules():
    assert bottleneck_severity(4, 10 * DAY_SECONDS) is Severity.HIGH
    assert bottleneck_severity(5, 14 * DAY_SECONDS) is Severity.CRITICAL
    assert bottleneck_severity(6, 8 * DAY_SECONDS) is Severity.HIGH
    assert bottleneck_severity(2, 3 * DAY_SECONDS) is Severity.MEDIUM
    assert bottleneck_severity(9, 2 * DAY_SECONDS) is Severity.LOW


def test_severity_ranking():
    ordered = sorted(Severity, key=lambda severity: severity.rank)
    assert ordered == [Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]
