"""Per-category allocation strategies.

Each internship category is staffed by a :class:`PhaseAllocator`. The
allocators share the greedy demand loop and differ in how candidates are
ranked (SFP) or which subject an assignment is recorded under (PDP).
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Type

from ..models import InternshipDemand, Shortage, Subject, Teacher
from ..rules import predicates
from .assignments import DEMAND_MATCH_NOTE, AssignmentWriter
from .context import AllocationContext
from .selector import CandidateSelector

log = logging.getLogger(__name__)

PHASE_ORDER = ("SFP", "ZSP", "PDP1", "PDP2")


class PhaseAllocator:
    """Greedy demand loop shared by every category.

    Demands are processed in the order given. For each demand the ranked
    candidates are walked once, assigning up to ``required_teachers``; a
    shortfall is reported and never retried.
    """

    phase = "generic"

    def __init__(self, selector: Optional[CandidateSelector] = None) -> None:
        self.selector = selector or CandidateSelector()

    def allocate(
        self,
        ctx: AllocationContext,
        writer: AssignmentWriter,
        demands: Sequence[InternshipDemand],
    ) -> List[Shortage]:
        shortages: List[Shortage] = []
        for demand in demands:
            shortage = self.process_demand(ctx, writer, demand)
            if shortage is not None:
                shortages.append(shortage)
        return shortages

    def process_demand(
        self, ctx: AllocationContext, writer: AssignmentWriter, demand: InternshipDemand
    ) -> Optional[Shortage]:
        required = demand.required_teachers
        candidates = self.rank(ctx, demand, self.find_candidates(ctx, demand))

        assigned = 0
        for teacher in candidates:
            if assigned >= required:
                break
            subject = self.subject_for(ctx, teacher, demand)
            if subject is None:
                continue
            if ctx.has_assignment(teacher, demand.internship_type, subject):
                continue
            if writer.write(ctx, teacher, demand.internship_type, subject, DEMAND_MATCH_NOTE):
                assigned += 1

        if assigned < required:
            log.warning(
                "Could not fully satisfy %s demand for subject %s - Assigned %d/%d",
                demand.internship_type.code,
                demand.subject.code,
                assigned,
                required,
            )
            return Shortage(
                internship_type_code=demand.internship_type.code,
                subject_code=demand.subject.code,
                school_type=demand.school_type,
                required=required,
                assigned=assigned,
            )
        return None

    def find_candidates(self, ctx: AllocationContext, demand: InternshipDemand) -> List[Teacher]:
        return self.selector.find_candidates(ctx, demand)

    def rank(
        self, ctx: AllocationContext, demand: InternshipDemand, candidates: Sequence[Teacher]
    ) -> List[Teacher]:
        return self.selector.rank(ctx, demand, candidates)

    def subject_for(
        self, ctx: AllocationContext, teacher: Teacher, demand: InternshipDemand
    ) -> Optional[Subject]:
        return demand.subject


class SFPAllocator(PhaseAllocator):
    """Highest priority category.

    Ranks main-subject teachers first, then by ascending current load,
    instead of using the additive score.
    """

    phase = "SFP"

    def rank(
        self, ctx: AllocationContext, demand: InternshipDemand, candidates: Sequence[Teacher]
    ) -> List[Teacher]:
        return sorted(
            candidates,
            key=lambda t: (
                not predicates.has_main_subject_qualification(ctx, t, demand.subject),
                ctx.get_assignment_count(t),
            ),
        )


class ZSPAllocator(PhaseAllocator):
    phase = "ZSP"


class PDPAllocator(PhaseAllocator):
    """Block internships (PDP1/PDP2).

    When the type is not subject-specific the assignment is recorded under the
    teacher's first qualification subject they do not already hold for this
    type; teachers without such a subject are skipped.
    """

    phase = "PDP"

    def subject_for(
        self, ctx: AllocationContext, teacher: Teacher, demand: InternshipDemand
    ) -> Optional[Subject]:
        if demand.internship_type.is_subject_specific:
            return demand.subject
        for qualification in ctx.get_qualifications(teacher):
            subject = ctx.get_subject(qualification.subject_id)
            if subject is None:
                continue
            if predicates.is_teacher_excluded_from_subject(ctx, teacher, subject):
                continue
            if not ctx.has_assignment(teacher, demand.internship_type, subject):
                return subject
        return None


PHASE_ALLOCATORS: Dict[str, Type[PhaseAllocator]] = {
    "SFP": SFPAllocator,
    "ZSP": ZSPAllocator,
    "PDP1": PDPAllocator,
    "PDP2": PDPAllocator,
}


def create_phase_allocator(code: str, selector: Optional[CandidateSelector] = None) -> PhaseAllocator:
    """Instantiate the allocator registered for an internship type code."""
    cls = PHASE_ALLOCATORS.get(code)
    if cls is None:
        raise KeyError(f"No allocator registered for internship type {code}")
    return cls(selector)
