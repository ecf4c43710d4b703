from datetime import datetime, timedelta, timezone

from production_insights.alerts import ActionType, AlertType, generate_alerts
from production_insights.escalation import Severity
from production_insights.schedule import analyze_schedule
from production_insights.schema import CalendarEvent, EntityKind, Pitch, Story
from production_insights.workflow import analyze_workflow

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def days_ago(days):
    return NOW - timedelta(days=days)


def sample_signals():
    items = [
        Story(id="late", title="Late Story", status="v1 Edit", updated_at=days_ago(1), assigned_user_ids=("u1",)),
        Pitch(id="soon", title="Soon Pitch", status="Pitched", updated_at=NOW, assigned_user_ids=("u2",)),
        Story(id="c1", title="First", status="Draft", updated_at=NOW, assigned_user_ids=("u3",)),
        Story(id="c2", title="Second", status="Draft", updated_at=NOW, assigned_user_ids=("u3",)),
    ] + [Story(id=f"b{i}", title=f"Stuck {i}", status="v2 Edit", updated_at=days_ago(10)) for i in range(4)]
    day = NOW + timedelta(days=10)
    events = [
        CalendarEvent(id="e1", start_date=days_ago(8), entity_id="late", entity_kind=EntityKind.STORY),
        CalendarEvent(id="e2", start_date=NOW + timedelta(hours=12), entity_id="soon", entity_kind=EntityKind.PITCH),
        CalendarEvent(id="e3", start_date=day, entity_id="c1", entity_kind=EntityKind.STORY),
        CalendarEvent(id="e4", start_date=day + timedelta(hours=2), entity_id="c2", entity_kind=EntityKind.STORY),
    ]
    return analyze_schedule(items, events, NOW), analyze_workflow(items, NOW)


def test_alert_per_signal_type():
    schedule, workflow = sample_signals()
    alerts = generate_alerts(schedule, workflow, NOW)

    by_type = {alert.type: alert for alert in alerts}
    assert set(by_type) == {AlertType.OVERDUE, AlertType.AT_RISK, AlertType.CONFLICT, AlertType.BOTTLENECK}
    assert by_type[AlertType.OVERDUE].severity is Severity.HIGH
    assert by_type[AlertType.AT_RISK].severity is Severity.CRITICAL
    assert by_type[AlertType.CONFLICT].severity is Severity.MEDIUM
    assert by_type[AlertType.BOTTLENECK].severity is Severity.HIGH


def test_alerts_are_ranked_by_severity():
    schedule, workflow = sample_signals()
    ranks = [alert.severity.rank for alert in generate_alerts(schedule, workflow, NOW)]
    assert ranks == sorted(ranks, reverse=True)


def test_every_alert_has_actions_requiring_confirmation():
    schedule, workflow = sample_signals()
    for alert in generate_alerts(schedule, workflow, NOW):
        assert 1 <= len(alert.suggested_actions) <= 2
        assert all(action.requires_confirmation for action in alert.suggested_actions)
        assert all(0.0 <= action.confidence <= 1.0 for action in alert.suggested_actions)


def test_conflict_alert_actions():
    schedule, workflow = sample_signals()
    alert = next(a for a in generate_alerts(schedule, workflow, NOW) if a.type is AlertType.CONFLICT)

    assert alert.affected_users == ("u3",)
    extend, notify = alert.suggested_actions
    assert extend.type is ActionType.EXTEND_DEADLINE
    assert extend.action_data["entity_ids"] == ["c2"]
    assert notify.type is ActionType.NOTIFY_TEAM


def test_alert_ids_are_unique_and_stable():
    schedule, workflow = sample_signals()
    first = [alert.id for alert in generate_alerts(schedule, workflow, NOW)]
    second = [alert.id for alert in generate_alerts(schedule, workflow, NOW)]
    assert first == second
    assert len(set(first)) == len(first)
    assert len({alert.key for alert in generate_alerts(schedule, workflow, NOW)}) == len(first)


def test_detectors_can_be_switched_off():
    schedule, workflow = sample_signals()
    alerts = generate_alerts(schedule, workflow, NOW, include_conflicts=False, include_bottlenecks=False)
    assert {alert.type for alert in alerts} == {AlertType.OVERDUE, AlertType.AT_RISK}


def test_small_bottlenecks_do_not_alert():
    schedule, workflow = sample_signals()
    alerts = generate_alerts(schedule, workflow, NOW, bottleneck_alert_min_items=5)
    assert AlertType.BOTTLENECK not in {alert.type for alert in alerts}


def test_actions_use_only_known_types():
    schedule, workflow = sample_signals()
    produced = {action.type for alert in generate_alerts(schedule, workflow, NOW) for action in alert.suggested_actions}
    assert produced == set(ActionType)
    assert {action_type.value for action_type in ActionType} == {"notify_team", "reassign", "extend_deadline"}
