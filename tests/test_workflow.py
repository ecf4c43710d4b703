from datetime import datetime, timedelta, timezone

import pytest

from production_insights.classifier import Phase
from production_insights.schema import DAY_SECONDS, EntityKind, Pitch, Story
from production_insights.workflow import analyze_workflow, compute_velocity, find_bottlenecks

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def days_ago(days):
    return NOW - timedelta(days=days)


def waiting_stories(count, status, days):
    return [Story(id=f"s{i}", status=status, updated_at=days_ago(days)) for i in range(count)]


def test_bottleneck_detected_for_crowded_slow_status():
    bottlenecks = find_bottlenecks(waiting_stories(4, "v2 Edit", 10), NOW)

    assert len(bottlenecks) == 1
    bottleneck = bottlenecks[0]
    assert bottleneck.key == (EntityKind.STORY, "v2 Edit")
    assert bottleneck.item_count == 4
    assert bottleneck.average_wait_days == pytest.approx(10)
    assert all(item.days_in_status == 10 for item in bottleneck.items)


def test_bottleneck_requires_enough_items_and_wait():
    assert find_bottlenecks(waiting_stories(1, "v2 Edit", 30), NOW) == []
    assert find_bottlenecks(waiting_stories(5, "v2 Edit", 7), NOW) == []


def test_complete_items_never_bottleneck():
    items = [Story(id=f"s{i}", status="Assembled", updated_at=days_ago(30)) for i in range(3)]
    assert find_bottlenecks(items, NOW) == []


def test_bottleneck_samples_are_capped():
    bottleneck = find_bottlenecks(waiting_stories(12, "Draft", 9), NOW)[0]
    assert bottleneck.item_count == 12
    assert len(bottleneck.items) == 10


def test_same_status_label_is_separate_per_kind():
    items = [
        Pitch(id="p1", status="Killed", updated_at=days_ago(20)),
        Story(id="s1", status="Ready for Script", updated_at=days_ago(20)),
        Story(id="s2", status="Ready for Script", updated_at=days_ago(20)),
        Pitch(id="p2", status="Ready for Script", updated_at=days_ago(20)),
    ]
    keys = [bottleneck.key for bottleneck in find_bottlenecks(items, NOW)]
    assert keys == [(EntityKind.STORY, "Ready for Script")]


def test_bottlenecks_sorted_by_wait():
    items = waiting_stories(2, "Draft", 9) + [
        Pitch(id="p1", status="Pitched", updated_at=days_ago(20)),
        Pitch(id="p2", status="Pitched", updated_at=days_ago(20)),
    ]
    statuses = [bottleneck.status for bottleneck in find_bottlenecks(items, NOW)]
    assert statuses == ["Pitched", "Draft"]


def test_velocity_metrics():
    items = [
        Story(id="s1", status="Assembled", created_at=days_ago(20), updated_at=days_ago(10)),
        Story(id="s2", status="Killed", created_at=days_ago(40), updated_at=days_ago(10)),
        Story(id="s3", status="Assembled"),
        Story(id="s4", status="Draft"),
    ]
    velocity = compute_velocity(items)
    assert velocity.items_completed == 3
    assert velocity.items_in_progress == 1
    assert velocity.completion_rate == pytest.approx(0.75)
    assert velocity.average_time_to_complete == pytest.approx(20 * DAY_SECONDS)


def test_velocity_of_empty_collection_is_zero():
    velocity = compute_velocity([])
    assert velocity.completion_rate == 0.0
    assert velocity.average_time_to_complete == 0.0


def test_analyze_workflow_groups_items_by_phase():
    items = waiting_stories(3, "v2 Edit", 10) + [Pitch(id="p1", status="Pitched", created_at=days_ago(2))]

    signals = analyze_workflow(items, NOW)

    assert signals.phase_distribution == {Phase.EDIT_PHASE: 3, Phase.RESEARCH_AND_PITCH: 1}
    assert [item.item_id for item in signals.items_by_phase[Phase.RESEARCH_AND_PITCH]] == ["p1"]
    assert signals.items_by_phase[Phase.RESEARCH_AND_PITCH][0].days_in_status == 2
    assert signals.bottleneck_keys() == {(EntityKind.STORY, "v2 Edit")}


def test_naive_timestamps_work_with_default_now():
    items = [
        Story(id="s1", status="Draft", updated_at=datetime(2024, 1, 1)),
        Story(id="s2", status="Draft", created_at=datetime(2024, 1, 1)),
        Story(id="s3", status="Assembled", created_at=datetime(2024, 1, 1), updated_at=datetime(2024, 1, 11)),
    ]
    signals = analyze_workflow(items)

    assert signals.bottleneck_keys() == {(EntityKind.STORY, "Draft")}
    assert signals.velocity.average_time_to_complete == pytest.approx(10 * DAY_SECONDS)
