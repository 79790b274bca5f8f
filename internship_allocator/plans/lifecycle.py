"""Plan versioning, finalization and activation."""
from __future__ import annotations

import logging
from collections import Counter
from typing import Optional

from ..errors import CurrentPlanRerunError, PlanNotFoundError, PlanYearMismatchError
from ..io.ports import PlanStore
from ..models import (
    FULL_LOAD_ASSIGNMENTS,
    AcademicYear,
    AllocationParameters,
    AllocationPlan,
    CreditHourTracking,
    PlanStatus,
    major_version,
)

log = logging.getLogger(__name__)


class PlanLifecycleManager:
    def __init__(self, store: PlanStore, params: Optional[AllocationParameters] = None) -> None:
        self.store = store
        self.params = params or AllocationParameters()

    def next_version(self, academic_year_id: int) -> str:
        """Return ``"N.0"`` with N one above the highest numeric major version."""
        latest = self.store.find_latest_version(academic_year_id)
        major = major_version(latest) if latest is not None else None
        if major is None:
            return "1.0"
        return f"{major + 1}.0"

    def prepare_plan(
        self,
        year: AcademicYear,
        plan_id: Optional[int] = None,
        version: Optional[str] = None,
    ) -> AllocationPlan:
        """Return a DRAFT plan ready to receive assignments.

        An existing plan has its assignments cleared so that re-running
        replaces them. Otherwise a new plan is created. The current plan of a
        year cannot be re-run because its credit-hour rows depend on it.
        """
        if plan_id is not None:
            plan = self.store.find_plan(plan_id)
            if plan is None:
                raise PlanNotFoundError(plan_id)
            if plan.academic_year_id != year.id:
                raise PlanYearMismatchError(plan.id, plan.academic_year_id, year.id)
            if plan.is_current:
                raise CurrentPlanRerunError(plan.id)
            removed = self.store.clear_assignments(plan.id)
            log.info("Cleared %d assignments from plan %s", removed, plan.id)
            plan.status = PlanStatus.DRAFT
            plan.touch()
            self.store.save_plan(plan)
            return plan

        plan = self.store.add_plan(
            academic_year_id=year.id,
            name=f"Allocation Plan for {year.name}",
            version=version or self.next_version(year.id),
        )
        log.info("Created plan %s version %s for %s", plan.id, plan.version, year.name)
        return plan

    def finalize_plan(self, plan: AllocationPlan) -> AllocationPlan:
        if self.params.approve_on_completion:
            plan.status = PlanStatus.APPROVED
        plan.touch()
        self.store.save_plan(plan)
        return plan

    def activate_plan(self, plan_id: int) -> AllocationPlan:
        """Make ``plan_id`` the single current plan of its year.

        Every other plan of the year is archived and the year's credit-hour
        rows are rebuilt from the plan's assignments.
        """
        plan = self.store.find_plan(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)

        with self.store.transaction():
            for other in self.store.plans_for_year(plan.academic_year_id):
                if other.id == plan.id:
                    continue
                if other.is_current or other.status is not PlanStatus.ARCHIVED:
                    other.is_current = False
                    other.status = PlanStatus.ARCHIVED
                    other.touch()
                    self.store.save_plan(other)

            plan.is_current = True
            plan.status = PlanStatus.APPROVED
            plan.touch()
            self.store.save_plan(plan)

            counts = Counter(a.teacher_id for a in self.store.assignments_for_plan(plan.id))
            rows = []
            for teacher_id in sorted(counts):
                count = counts[teacher_id]
                credit = 1.0 if count >= FULL_LOAD_ASSIGNMENTS else 0.0
                rows.append(
                    CreditHourTracking(
                        teacher_id=teacher_id,
                        academic_year_id=plan.academic_year_id,
                        assignments_count=count,
                        credit_hours_allocated=credit,
                        credit_balance=0.0,
                        notes=f"Plan {plan.version} Activated",
                    )
                )
            self.store.replace_credit_tracking(plan.academic_year_id, rows)

        log.info(
            "Activated plan %s (version %s); %d credit rows written",
            plan.id,
            plan.version,
            len(rows),
        )
        return plan
