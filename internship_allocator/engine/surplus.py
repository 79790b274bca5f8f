from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..models import InternshipType, Subject, Teacher
from ..rules import predicates
from .assignments import SURPLUS_NOTE, AssignmentWriter
from .context import AllocationContext

log = logging.getLogger(__name__)

SURPLUS_ATTEMPT_LIMIT = 10
ZONE3_TYPE_ORDER = ("PDP1", "PDP2")
STANDARD_TYPE_ORDER = ("ZSP", "SFP", "PDP1", "PDP2")


class SurplusReallocator:
    """Top up teachers that ended the demand phases below their target.

    Only the zone and combination constraints are re-checked; demand,
    qualification and availability are ignored so that capacity is used.
    A teacher is given up on after the first round in which no internship
    type accepts them.
    """

    def __init__(self, writer: AssignmentWriter) -> None:
        self.writer = writer

    def reallocate(self, ctx: AllocationContext) -> int:
        """Run the forcing pass and return the number of assignments created."""
        underutilized = list(ctx.underutilized_teachers())
        log.info("Surplus pass: processing %d underutilized teachers", len(underutilized))

        created = 0
        for teacher in underutilized:
            attempts = 0
            while (
                ctx.get_assignment_count(teacher) < ctx.get_target_assignments(teacher)
                and attempts < SURPLUS_ATTEMPT_LIMIT
            ):
                attempts += 1
                if teacher.zone == 3:
                    assigned = self.attempt_zone3_assignment(ctx, teacher)
                else:
                    assigned = self.attempt_standard_assignment(ctx, teacher)
                if not assigned:
                    log.warning(
                        "Cannot force assignment for teacher %s (zone %d) despite being "
                        "underutilized; check qualification and zone rules",
                        teacher.id,
                        teacher.zone,
                    )
                    break
                created += 1
        return created

    def attempt_zone3_assignment(self, ctx: AllocationContext, teacher: Teacher) -> bool:
        return self._attempt(ctx, teacher, ZONE3_TYPE_ORDER)

    def attempt_standard_assignment(self, ctx: AllocationContext, teacher: Teacher) -> bool:
        return self._attempt(ctx, teacher, STANDARD_TYPE_ORDER)

    def _attempt(self, ctx: AllocationContext, teacher: Teacher, codes: Sequence[str]) -> bool:
        for code in codes:
            if self.try_force_assign(ctx, teacher, ctx.get_internship_type(code)):
                return True
        return False

    def try_force_assign(
        self, ctx: AllocationContext, teacher: Teacher, internship_type: Optional[InternshipType]
    ) -> bool:
        if internship_type is None:
            return False
        if not predicates.is_teacher_in_allowed_zone(ctx, teacher, internship_type):
            return False
        if not predicates.can_teacher_be_assigned_to_internship(ctx, teacher, internship_type):
            return False
        subject = self.find_best_subject_for_surplus(ctx, teacher, internship_type)
        if subject is None:
            return False
        return self.writer.write(ctx, teacher, internship_type, subject, SURPLUS_NOTE)

    def find_best_subject_for_surplus(
        self, ctx: AllocationContext, teacher: Teacher, internship_type: InternshipType
    ) -> Optional[Subject]:
        """Pick a subject the teacher does not yet hold for ``internship_type``.

        Qualification subjects are tried in order, then the fallback subject
        for the teacher's school type.
        """
        for qualification in ctx.get_qualifications(teacher):
            subject = ctx.get_subject(qualification.subject_id)
            if subject is not None and not ctx.has_assignment(teacher, internship_type, subject):
                return subject
        fallback = ctx.get_fallback_subject(teacher.school_type)
        if fallback is not None and not ctx.has_assignment(teacher, internship_type, fallback):
            return fallback
        return None
