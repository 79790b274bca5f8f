from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..errors import AcademicYearLockedError, AcademicYearNotFoundError
from ..io.ports import AssignmentSink, DataLoader, PlanStore
from ..models import (
    FULL_LOAD_ASSIGNMENTS,
    AcademicYear,
    AllocationParameters,
    AllocationPlan,
    Assignment,
    InternshipDemand,
    Shortage,
)
from ..plans.lifecycle import PlanLifecycleManager
from .assignments import AssignmentWriter
from .context import AllocationContext
from .phases import PHASE_ORDER, create_phase_allocator
from .selector import CandidateSelector
from .surplus import SurplusReallocator

log = logging.getLogger(__name__)


@dataclass
class AllocationResult:
    """Outcome of one allocation run."""

    plan: AllocationPlan
    assignments: List[Assignment] = field(default_factory=list)
    shortages: List[Shortage] = field(default_factory=list)
    utilization: List[Dict[str, object]] = field(default_factory=list)
    budget: Dict[str, Dict[str, int]] = field(default_factory=dict)
    surplus_assignments: int = 0


class Allocator:
    """Run the phased allocation for one academic year.

    The run proceeds in five stages, all inside one store transaction:
    1. plan preparation (new plan or cleared re-run)
    2. context build and scarcity metrics
    3. demand phases in the fixed order SFP, ZSP, PDP1, PDP2
    4. surplus forcing pass
    5. budget report and plan finalization

    Any exception rolls back every change made to the store.
    """

    def __init__(
        self,
        loader: DataLoader,
        store: PlanStore,
        params: Optional[AllocationParameters] = None,
        sink: Optional[AssignmentSink] = None,
        selector: Optional[CandidateSelector] = None,
    ) -> None:
        self.loader = loader
        self.store = store
        self.params = params or AllocationParameters()
        if sink is None:
            if not isinstance(store, AssignmentSink):
                raise TypeError("store does not accept assignments; pass a sink")
            sink = store
        self.sink = sink
        self.selector = selector or CandidateSelector()
        self.lifecycle = PlanLifecycleManager(store, self.params)

    def run(
        self,
        academic_year_id: int,
        plan_id: Optional[int] = None,
        version: Optional[str] = None,
    ) -> AllocationResult:
        year = self.loader.find_academic_year(academic_year_id)
        if year is None:
            raise AcademicYearNotFoundError(academic_year_id)
        if year.is_locked:
            raise AcademicYearLockedError(academic_year_id)

        log.info("Starting allocation for academic year %s", year.name)
        with self.store.transaction():
            plan = self.lifecycle.prepare_plan(year, plan_id=plan_id, version=version)
            ctx = AllocationContext.from_loader(self.loader, year.id, self.params)
            ctx.calculate_scarcity_metrics()
            writer = AssignmentWriter(self.sink, plan)

            shortages = self.allocate_by_priority(ctx, writer)

            surplus = 0
            if self.params.force_utilization_of_surplus:
                surplus = SurplusReallocator(writer).reallocate(ctx)

            budget = self.validate_budget(ctx, year)
            self.lifecycle.finalize_plan(plan)
            assignments = self.store.assignments_for_plan(plan.id)

        log.info(
            "Allocation finished: plan %s has %d assignments, %d shortages",
            plan.id,
            len(assignments),
            len(shortages),
        )
        return AllocationResult(
            plan=plan,
            assignments=assignments,
            shortages=shortages,
            utilization=self.utilization(ctx),
            budget=budget,
            surplus_assignments=surplus,
        )

    def allocate_by_priority(
        self, ctx: AllocationContext, writer: AssignmentWriter
    ) -> List[Shortage]:
        shortages: List[Shortage] = []
        for code in PHASE_ORDER:
            internship_type = ctx.get_internship_type(code)
            if internship_type is None:
                log.warning("Internship type %s not found in catalog; skipping phase", code)
                continue
            demands = self.order_demands(ctx, ctx.get_demands_by_type(internship_type))
            log.info("Processing %d %s demands", len(demands), code)

            before = ctx.total_assignments_created
            allocator = create_phase_allocator(code, self.selector)
            shortages.extend(allocator.allocate(ctx, writer, demands))
            log.info(
                "%s phase created %d assignments", code, ctx.total_assignments_created - before
            )
        return shortages

    def order_demands(
        self, ctx: AllocationContext, demands: Sequence[InternshipDemand]
    ) -> List[InternshipDemand]:
        """Scarce subjects first when scarcity is prioritized; otherwise load order."""
        if not self.params.prioritize_scarcity:
            return list(demands)
        return sorted(demands, key=lambda d: ctx.get_candidate_count_for_subject(d.subject.id))

    @staticmethod
    def validate_budget(ctx: AllocationContext, year: AcademicYear) -> Dict[str, Dict[str, int]]:
        filled = {"PRIMARY": 0, "MIDDLE": 0}
        for teacher in ctx.teachers:
            if teacher.school_type in filled and ctx.get_assignment_count(teacher) >= FULL_LOAD_ASSIGNMENTS:
                filled[teacher.school_type] += 1
        log.info(
            "BUDGET: Primary %d/%d, Middle %d/%d",
            filled["PRIMARY"],
            year.elementary_school_hours,
            filled["MIDDLE"],
            year.middle_school_hours,
        )
        return {
            "PRIMARY": {"filled": filled["PRIMARY"], "budget": year.elementary_school_hours},
            "MIDDLE": {"filled": filled["MIDDLE"], "budget": year.middle_school_hours},
        }

    @staticmethod
    def utilization(ctx: AllocationContext) -> List[Dict[str, object]]:
        return [
            {
                "teacher": teacher.id,
                "name": teacher.name,
                "zone": teacher.zone,
                "school_type": teacher.school_type,
                "assignments": ctx.get_assignment_count(teacher),
                "target": ctx.get_target_assignments(teacher),
                "types": [t.code for t in ctx.get_assigned_types(teacher)],
            }
            for teacher in ctx.teachers
        ]
