from production_insights.classifier import (
    Phase,
    PitchStatus,
    StoryStatus,
    classify,
    is_active,
    is_complete,
    is_success,
    parse_status,
    phase_for,
)
from production_insights.schema import EntityKind, Pitch, Story
from production_insights.workflow import phase_distribution


def test_pitch_phases():
    assert phase_for("Pitched", EntityKind.PITCH) is Phase.RESEARCH_AND_PITCH
    assert phase_for("Pursue Clearance", EntityKind.PITCH) is Phase.CLEARANCE
    assert phase_for("Working on License", EntityKind.PITCH) is Phase.LICENSING
    assert phase_for("Ready for Script", EntityKind.PITCH) is Phase.READY_FOR_PRODUCTION
    assert phase_for("Killed", EntityKind.PITCH) is Phase.TERMINATED


def test_story_phases():
    assert phase_for("Draft", EntityKind.STORY) is Phase.SCRIPT_DEVELOPMENT
    assert phase_for("String In Progress", EntityKind.STORY) is Phase.STRING_PHASE
    assert phase_for("A Roll Notes", EntityKind.STORY) is Phase.EDIT_PHASE
    assert phase_for("v3 Notes Complete", EntityKind.STORY) is Phase.EDIT_PHASE
    assert phase_for("RC Notes", EntityKind.STORY) is Phase.BUILD_PHASE
    assert phase_for("Assembled", EntityKind.STORY) is Phase.COMPLETE
    assert phase_for("Killed", EntityKind.STORY) is Phase.TERMINATED


def test_unknown_and_missing_status():
    assert classify("Bogus", EntityKind.STORY) == (Phase.UNKNOWN, False)
    assert classify("", EntityKind.PITCH) == (Phase.UNKNOWN, False)
    assert classify(None, EntityKind.PITCH) == (Phase.UNKNOWN, False)
    assert parse_status("Bogus", "story") is None


def test_status_is_parsed_per_kind():
    assert parse_status("Ready for Script", "pitch") is PitchStatus.READY_FOR_SCRIPT
    assert parse_status("Ready for Script", "story") is StoryStatus.READY_FOR_SCRIPT
    # same label, different meaning per kind
    assert is_complete("Ready for Script", EntityKind.PITCH)
    assert not is_complete("Ready for Script", EntityKind.STORY)
    assert phase_for("License Cleared", EntityKind.STORY) is Phase.UNKNOWN


def test_completion_active_and_success_sets():
    assert is_complete("Do Not Pursue Clearance", EntityKind.PITCH)
    assert is_complete("Assembled", EntityKind.STORY)
    assert not is_complete("Pitched", EntityKind.PITCH)

    assert is_active("Pending Signature", EntityKind.PITCH)
    assert is_active("v4 Edit", EntityKind.STORY)
    assert not is_active("v4 Notes Complete", EntityKind.STORY)
    assert not is_active("Ready to License", EntityKind.PITCH)

    assert is_success("License Cleared", EntityKind.PITCH)
    assert not is_success("Killed", EntityKind.STORY)


def test_phase_counts_sum_to_item_count():
    items = [
        Pitch(id="p1", status="Pitched"),
        Pitch(id="p2", status="Nonsense"),
        Pitch(id="p3"),
        Story(id="s1", status="v2 Edit"),
        Story(id="s2", status="Assembled"),
        Story(id="s3", status="Needs String"),
    ]
    distribution = phase_distribution(items)
    assert sum(distribution.values()) == len(items)
    assert distribution[Phase.UNKNOWN] == 2
