from __future__ import annotations

import logging

from ..io.ports import AssignmentSink
from ..models import AllocationPlan, InternshipType, Subject, Teacher
from .context import AllocationContext

log = logging.getLogger(__name__)

DEMAND_MATCH_NOTE = "Demand Match"
SURPLUS_NOTE = "Forced Surplus Allocation"


class AssignmentWriter:
    """Hand assignments to the sink and mirror them in the context."""

    def __init__(self, sink: AssignmentSink, plan: AllocationPlan) -> None:
        self.sink = sink
        self.plan = plan

    def write(
        self,
        ctx: AllocationContext,
        teacher: Teacher,
        internship_type: InternshipType,
        subject: Subject,
        note: str,
    ) -> bool:
        """Create an assignment unless the teacher already holds it.

        Returns ``True`` if an assignment was created.
        """
        if ctx.has_assignment(teacher, internship_type, subject):
            log.warning(
                "Skipping duplicate assignment attempt: teacher %s -> %s - %s",
                teacher.id,
                internship_type.code,
                subject.code,
            )
            return False
        if not self.sink.create(teacher, internship_type, subject, self.plan, note):
            log.warning(
                "Sink rejected duplicate assignment: teacher %s -> %s - %s",
                teacher.id,
                internship_type.code,
                subject.code,
            )
            return False
        ctx.record_assignment(teacher, internship_type, subject)
        log.debug(
            "Assigned teacher %s to %s for subject %s (%s)",
            teacher.id,
            internship_type.code,
            subject.code,
            note,
        )
        return True
