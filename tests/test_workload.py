from datetime import datetime, timedelta, timezone

from production_insights.schedule import OverdueItem, ScheduleSignals, analyze_schedule
from production_insights.schema import EntityKind, Pitch, Story
from production_insights.workload import analyze_workloads, count_assignments, workload_score

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def overdue(item_id, users):
    return OverdueItem(
        kind=EntityKind.STORY,
        item_id=item_id,
        title=f"Story {item_id}",
        status="Draft",
        expected_completion_date=NOW,
        days_overdue=3,
        assigned_user_ids=tuple(users),
    )


def test_score_example():
    assert workload_score(10, 3, 2) == 90


def test_score_is_bounded_and_monotonic():
    assert workload_score(0, 0, 0) == 0
    assert workload_score(100, 100, 100) == 100
    previous = -1
    for count in range(15):
        score = workload_score(count, count, count)
        assert 0 <= score <= 100
        assert score >= previous
        previous = score


def test_score_never_drops_as_one_count_grows():
    for total in (0, 4, 12):
        for count in range(10):
            assert workload_score(total, count + 1, 2) >= workload_score(total, count, 2)
            assert workload_score(total, 2, count + 1) >= workload_score(total, 2, count)
            assert 0 <= workload_score(total, count, count) <= 100
    assert workload_score(4, 1, 0) > workload_score(4, 0, 0)
    assert workload_score(4, 0, 1) > workload_score(4, 0, 0)


def test_assignments_count_distinct_items():
    items = [
        Story(id="s1", assigned_user_ids=("u1", "u1", "u2")),
        Pitch(id="s1", assigned_user_ids=("u1",)),
        Story(id="s2", assigned_user_ids=("u2",)),
    ]
    assert count_assignments(items) == {"u1": 2, "u2": 2}
    assert count_assignments(items, "u2") == {"u2": 2}


def test_overloaded_user_gets_reassignments_to_user_with_capacity():
    busy = [Story(id=f"s{i}", status="Draft", assigned_user_ids=("busy",)) for i in range(10)]
    idle = [Story(id="x1", status="Draft", assigned_user_ids=("idle",))]
    schedule = ScheduleSignals(overdue_items=[overdue("s0", ["busy"]), overdue("s1", ["busy"]), overdue("s2", ["busy"])])

    analysis = analyze_workloads(busy + idle, schedule)

    assert [w.user_id for w in analysis.user_workloads] == ["busy", "idle"]
    busy_load = analysis.user_workloads[0]
    assert busy_load.workload_score == 80
    assert "User may be overloaded - consider reducing assignments." in busy_load.recommendations

    assert [user.user_id for user in analysis.overloaded_users] == ["busy"]
    assert len(analysis.overloaded_users[0].suggested_reassignments) == 3

    # one receiver, so only the first reassignment is paired
    assert len(analysis.rebalancing_suggestions) == 1
    suggestion = analysis.rebalancing_suggestions[0]
    assert (suggestion.from_user_id, suggestion.to_user_id, suggestion.item_id) == ("busy", "idle", "s0")
    assert suggestion.confidence == 0.7


def test_no_rebalancing_without_capacity():
    items = [Story(id=f"s{i}", status="Draft", assigned_user_ids=("a", "b")) for i in range(12)]
    schedule = ScheduleSignals(overdue_items=[overdue("s0", ["a", "b"])])
    analysis = analyze_workloads(items, schedule)
    assert len(analysis.overloaded_users) == 0
    assert analysis.rebalancing_suggestions == []


def test_workloads_follow_schedule_signals():
    items = [
        Story(id="s1", status="Draft", updated_at=NOW - timedelta(days=20), assigned_user_ids=("u1",)),
        Story(id="s2", status="Draft", updated_at=NOW, assigned_user_ids=("u1", "u2")),
    ]
    schedule = analyze_schedule(items, [], NOW)
    analysis = analyze_workloads(items, schedule)

    by_user = {w.user_id: w for w in analysis.user_workloads}
    assert by_user["u1"].overdue_items == 1
    assert by_user["u1"].workload_score == 20
    assert by_user["u2"].workload_score == 5
