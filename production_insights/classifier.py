"""Status taxonomies and phase classification per entity kind."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional, Union

from production_insights.schema import EntityKind


class Phase(str, Enum):
    RESEARCH_AND_PITCH = "Research & Pitch"
    CLEARANCE = "Clearance"
    LICENSING = "Licensing"
    READY_FOR_PRODUCTION = "Ready for Production"
    SCRIPT_DEVELOPMENT = "Script Development"
    STRING_PHASE = "String Phase"
    EDIT_PHASE = "Edit Phase"
    BUILD_PHASE = "Build Phase"
    COMPLETE = "Complete"
    TERMINATED = "Terminated"
    UNKNOWN = "Unknown"


class PitchStatus(str, Enum):
    PITCHED = "Pitched"
    PURSUE_CLEARANCE = "Pursue Clearance"
    DO_NOT_PURSUE_CLEARANCE = "Do Not Pursue Clearance"
    KILLED = "Killed"
    READY_TO_LICENSE = "Ready to License"
    WORKING_ON_LICENSE = "Working on License"
    PENDING_SIGNATURE = "Pending Signature"
    LICENSE_CLEARED = "License Cleared"
    READY_FOR_SCRIPT = "Ready for Script"


class StoryStatus(str, Enum):
    DRAFT = "Draft"
    INITIAL = "Initial"
    SCRIPT_WRITING = "Script Writing"
    READY_FOR_SCRIPT = "Ready for Script"
    IN_PROGRESS = "In Progress"
    SCRIPT_REVIEW = "Script Review"
    SCRIPTING_NOTES = "Scripting Notes"
    SCRIPTING_REVISION = "Scripting Revision"
    SCRIPT_REVISIONS = "Script Revisions"
    READY_FOR_APPROVAL = "Ready for Approval"
    SCRIPT_COMPLETE = "Script Complete"
    NEEDS_STRING = "Needs String"
    STRING_IN_PROGRESS = "String In Progress"
    STRING_COMPLETE = "String Complete"
    A_ROLL = "A Roll"
    A_ROLL_NOTES = "A Roll Notes"
    A_ROLL_NOTES_COMPLETE = "A Roll Notes Complete"
    V1_EDIT = "v1 Edit"
    V1_NOTES = "v1 Notes"
    V1_NOTES_COMPLETE = "v1 Notes Complete"
    V2_EDIT = "v2 Edit"
    V2_NOTES = "v2 Notes"
    V2_NOTES_COMPLETE = "v2 Notes Complete"
    V3_EDIT = "v3 Edit"
    V3_NOTES = "v3 Notes"
    V3_NOTES_COMPLETE = "v3 Notes Complete"
    V4_EDIT = "v4 Edit"
    V4_NOTES = "v4 Notes"
    V4_NOTES_COMPLETE = "v4 Notes Complete"
    V5_EDIT = "v5 Edit"
    V5_NOTES = "v5 Notes"
    V5_NOTES_COMPLETE = "v5 Notes Complete"
    READY_FOR_BUILD = "Ready for Build"
    RC = "RC"
    RC_NOTES = "RC Notes"
    RC_NOTES_COMPLETE = "RC Notes Complete"
    ASSEMBLED = "Assembled"
    KILLED = "Killed"
    NEEDS_REVISIT = "Needs Revisit"


Status = Union[PitchStatus, StoryStatus]

_EDIT_ROUNDS = ("A Roll", "v1", "v2", "v3", "v4", "v5")

_PITCH_PHASES: Mapping[PitchStatus, Phase] = MappingProxyType(
    {
        PitchStatus.PITCHED: Phase.RESEARCH_AND_PITCH,
        PitchStatus.PURSUE_CLEARANCE: Phase.CLEARANCE,
        PitchStatus.DO_NOT_PURSUE_CLEARANCE: Phase.TERMINATED,
        PitchStatus.KILLED: Phase.TERMINATED,
        PitchStatus.READY_TO_LICENSE: Phase.LICENSING,
        PitchStatus.WORKING_ON_LICENSE: Phase.LICENSING,
        PitchStatus.PENDING_SIGNATURE: Phase.LICENSING,
        PitchStatus.LICENSE_CLEARED: Phase.LICENSING,
        PitchStatus.READY_FOR_SCRIPT: Phase.READY_FOR_PRODUCTION,
    }
)


def _story_phase(status: StoryStatus) -> Phase:
    value = status.value
    if status in (StoryStatus.ASSEMBLED, StoryStatus.NEEDS_REVISIT):
        return Phase.COMPLETE
    if status is StoryStatus.KILLED:
        return Phase.TERMINATED
    if value.startswith(_EDIT_ROUNDS):
        return Phase.EDIT_PHASE
    if value in ("Needs String", "String In Progress", "String Complete"):
        return Phase.STRING_PHASE
    if value == "Ready for Build" or value.startswith("RC"):
        return Phase.BUILD_PHASE
    return Phase.SCRIPT_DEVELOPMENT


_STORY_PHASES: Mapping[StoryStatus, Phase] = MappingProxyType({status: _story_phase(status) for status in StoryStatus})

COMPLETE_STATUSES: Mapping[EntityKind, frozenset] = MappingProxyType(
    {
        EntityKind.PITCH: frozenset(
            {PitchStatus.KILLED, PitchStatus.DO_NOT_PURSUE_CLEARANCE, PitchStatus.READY_FOR_SCRIPT}
        ),
        EntityKind.STORY: frozenset({StoryStatus.ASSEMBLED, StoryStatus.KILLED}),
    }
)

ACTIVE_STATUSES: Mapping[EntityKind, frozenset] = MappingProxyType(
    {
        EntityKind.PITCH: frozenset(
            {
                PitchStatus.PITCHED,
                PitchStatus.PURSUE_CLEARANCE,
                PitchStatus.WORKING_ON_LICENSE,
                PitchStatus.PENDING_SIGNATURE,
            }
        ),
        EntityKind.STORY: frozenset(
            {
                StoryStatus.DRAFT,
                StoryStatus.READY_FOR_SCRIPT,
                StoryStatus.IN_PROGRESS,
                StoryStatus.SCRIPT_REVIEW,
                StoryStatus.SCRIPTING_NOTES,
                StoryStatus.READY_FOR_APPROVAL,
                StoryStatus.READY_FOR_BUILD,
                StoryStatus.RC,
                StoryStatus.RC_NOTES,
            }
            | {
                status
                for status in StoryStatus
                if status.value.startswith(_EDIT_ROUNDS) and not status.value.endswith("Complete")
            }
        ),
    }
)

SUCCESS_STATUSES: Mapping[EntityKind, frozenset] = MappingProxyType(
    {
        EntityKind.PITCH: frozenset({PitchStatus.READY_FOR_SCRIPT, PitchStatus.LICENSE_CLEARED}),
        EntityKind.STORY: frozenset({StoryStatus.ASSEMBLED}),
    }
)

# Canonical route of a successful item; there is no status-change log to mine real paths from.
HAPPY_PATHS: Mapping[EntityKind, tuple[str, ...]] = MappingProxyType(
    {
        EntityKind.PITCH: ("Pitched", "Pursue Clearance", "License Cleared", "Ready for Script"),
        EntityKind.STORY: ("Draft", "Script Complete", "A Roll", "Assembled"),
    }
)


class Classification(NamedTuple):
    phase: Phase
    is_complete: bool


def parse_status(status: Optional[str], kind: EntityKind | str) -> Optional[Status]:
    """Return the typed status for ``kind``, or None when it is not a known status."""

    enum = PitchStatus if EntityKind(kind) is EntityKind.PITCH else StoryStatus
    try:
        return enum(status)
    except ValueError:
        return None


def phase_for(status: Optional[str], kind: EntityKind | str) -> Phase:
    parsed = parse_status(status, kind)
    if parsed is None:
        return Phase.UNKNOWN
    if isinstance(parsed, PitchStatus):
        return _PITCH_PHASES[parsed]
    return _STORY_PHASES[parsed]


def _in(table: Mapping[EntityKind, frozenset], status: Optional[str], kind: EntityKind | str) -> bool:
    parsed = parse_status(status, kind)
    return parsed is not None and parsed in table[EntityKind(kind)]


def is_complete(status: Optional[str], kind: EntityKind | str) -> bool:
    return _in(COMPLETE_STATUSES, status, kind)


def is_active(status: Optional[str], kind: EntityKind | str) -> bool:
    """Statuses expected to see regular updates while work is ongoing."""

    return _in(ACTIVE_STATUSES, status, kind)


def is_success(status: Optional[str], kind: EntityKind | str) -> bool:
    return _in(SUCCESS_STATUSES, status, kind)


def classify(status: Optional[str], kind: EntityKind | str) -> Classification:
    """Map a raw status onto its phase and completion flag."""

    return Classification(phase_for(status, kind), is_complete(status, kind))
