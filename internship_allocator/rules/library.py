from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from internship_allocator.models import InternshipDemand, Teacher

from . import predicates
from .base import HardRule, SoftRule

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from internship_allocator.engine.context import AllocationContext


@dataclass
class NotFullyBookedRule(HardRule):
    """Disallow teachers who reached the maximum number of assignments."""

    slug = "not_fully_booked"

    def check(self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand) -> bool:
        return not ctx.is_teacher_fully_booked(teacher)


@dataclass
class SubjectQualificationRule(HardRule):
    """Require a subject link, but only for subject-specific internship types."""

    slug = "qualified_for_subject"

    def check(self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand) -> bool:
        if not demand.internship_type.is_subject_specific:
            return True
        return predicates.is_teacher_qualified_for_subject(ctx, teacher, demand.subject)


@dataclass
class NotExcludedRule(HardRule):
    slug = "not_excluded"

    def check(self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand) -> bool:
        return not predicates.is_teacher_excluded_from_subject(ctx, teacher, demand.subject)


@dataclass
class AvailabilityRule(HardRule):
    slug = "available_for_type"

    def check(self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand) -> bool:
        return predicates.is_teacher_available_for_internship(ctx, teacher, demand.internship_type)


@dataclass
class AllowedZoneRule(HardRule):
    slug = "allowed_zone"

    def check(self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand) -> bool:
        return predicates.is_teacher_in_allowed_zone(ctx, teacher, demand.internship_type)


@dataclass
class CombinationCompatibleRule(HardRule):
    slug = "combination_compatible"

    def check(self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand) -> bool:
        return predicates.can_teacher_be_assigned_to_internship(ctx, teacher, demand.internship_type)


@dataclass
class MainSubjectRule(SoftRule):
    """Award points if the demand's subject is one of the teacher's main subjects."""

    slug = "main_subject"

    def score(self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand) -> float:
        return 1.0 if predicates.has_main_subject_qualification(ctx, teacher, demand.subject) else 0.0


@dataclass
class ZonePreferenceRule(SoftRule):
    """Award points to teachers in zone ``params['zone']`` (midweek internships)."""

    slug = "zone_preference"

    def score(self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand) -> float:
        return 1.0 if teacher.zone == self.params.get("zone", 1) else 0.0


@dataclass
class FirstAssignmentRule(SoftRule):
    """Award points to teachers without any assignment yet."""

    slug = "first_assignment"

    def score(self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand) -> float:
        return 1.0 if ctx.get_assignment_count(teacher) == 0 else 0.0
