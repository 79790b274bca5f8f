"""Side-effect free eligibility checks over an :class:`AllocationContext`."""
from __future__ import annotations

from typing import TYPE_CHECKING

from ..models import AvailabilityStatus, InternshipType, Subject, Teacher

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from ..engine.context import AllocationContext

ACCEPTED_SUBJECT_STATUSES = frozenset({"AVAILABLE", "PREFERRED"})
ACCEPTED_AVAILABILITY = frozenset({AvailabilityStatus.AVAILABLE, AvailabilityStatus.PREFERRED})


def is_teacher_in_allowed_zone(
    ctx: "AllocationContext", teacher: Teacher, internship_type: InternshipType
) -> bool:
    """Return True only if a zone rule explicitly allows the type. Missing rows deny."""
    return ctx.zone_constraints.get((teacher.zone, internship_type.id), False)


def is_teacher_qualified_for_subject(
    ctx: "AllocationContext", teacher: Teacher, subject: Subject
) -> bool:
    statuses = ctx.subject_links.get((teacher.id, subject.id), ())
    return any(
        (status or "").strip().upper() in ACCEPTED_SUBJECT_STATUSES for status in statuses
    )


def is_teacher_excluded_from_subject(
    ctx: "AllocationContext", teacher: Teacher, subject: Subject
) -> bool:
    return (teacher.id, subject.id) in ctx.exclusions


def is_teacher_available_for_internship(
    ctx: "AllocationContext", teacher: Teacher, internship_type: InternshipType
) -> bool:
    statuses = ctx.availabilities.get((teacher.id, internship_type.id), ())
    return any(status in ACCEPTED_AVAILABILITY for status in statuses)


def can_teacher_be_assigned_to_internship(
    ctx: "AllocationContext", teacher: Teacher, new_type: InternshipType
) -> bool:
    """Return True if every type already held combines with ``new_type``.

    Rules are looked up in the held -> new direction only.
    """
    for existing in ctx.get_assigned_types(teacher):
        if not ctx.combination_rules.get((existing.id, new_type.id), False):
            return False
    return True


def has_main_subject_qualification(
    ctx: "AllocationContext", teacher: Teacher, subject: Subject
) -> bool:
    return (teacher.id, subject.id) in ctx.main_subjects
