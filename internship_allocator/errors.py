"""Exceptions raised by the allocation engine and plan lifecycle."""
from __future__ import annotations


class AllocationError(ValueError):
    """Base class for errors that abort an allocation request."""


class AcademicYearNotFoundError(AllocationError):
    def __init__(self, year_id: int) -> None:
        super().__init__(f"Academic year with ID {year_id} not found")
        self.year_id = year_id


class AcademicYearLockedError(AllocationError):
    def __init__(self, year_id: int) -> None:
        super().__init__(
            f"Academic year {year_id} is locked and cannot be modified"
        )
        self.year_id = year_id


class PlanNotFoundError(AllocationError):
    def __init__(self, plan_id: int) -> None:
        super().__init__(f"Allocation plan with ID {plan_id} not found")
        self.plan_id = plan_id


class PlanYearMismatchError(AllocationError):
    def __init__(self, plan_id: int, plan_year_id: int, year_id: int) -> None:
        super().__init__(
            f"Plan {plan_id} belongs to academic year {plan_year_id}, not {year_id}"
        )
        self.plan_id = plan_id
        self.year_id = year_id


class CurrentPlanRerunError(AllocationError):
    def __init__(self, plan_id: int) -> None:
        super().__init__(
            f"Plan {plan_id} is the current plan of its academic year and cannot be re-run; "
            "activate another plan first"
        )
        self.plan_id = plan_id
