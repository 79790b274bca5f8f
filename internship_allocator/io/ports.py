"""Abstract collaborators of the allocation engine.

The engine never touches storage directly. It reads a snapshot through a
:class:`DataLoader`, hands every assignment to an :class:`AssignmentSink` and
manages plan records through a :class:`PlanStore`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ContextManager, Dict, List, Optional

from ..models import (
    AcademicYear,
    AllocationPlan,
    Assignment,
    CombinationRule,
    CreditHourTracking,
    InternshipDemand,
    InternshipType,
    Subject,
    Teacher,
    TeacherAvailability,
    TeacherQualification,
    TeacherSubject,
    TeacherSubjectExclusion,
    ZoneConstraint,
)


class DataLoader(ABC):
    """Read-only access to the reference data of one installation."""

    @abstractmethod
    def find_academic_year(self, academic_year_id: int) -> Optional[AcademicYear]:
        ...

    @abstractmethod
    def load_available_teachers(self, academic_year_id: int) -> List[Teacher]:
        """Return active, employed teachers in a stable order."""

    @abstractmethod
    def load_subjects(self) -> List[Subject]:
        ...

    @abstractmethod
    def load_internship_demands(self, academic_year_id: int) -> List[InternshipDemand]:
        ...

    @abstractmethod
    def load_teacher_qualifications(self) -> Dict[int, List[TeacherQualification]]:
        ...

    @abstractmethod
    def load_teacher_exclusions(self, academic_year_id: int) -> Dict[int, List[TeacherSubjectExclusion]]:
        ...

    @abstractmethod
    def load_teacher_availabilities(self, academic_year_id: int) -> Dict[int, List[TeacherAvailability]]:
        ...

    @abstractmethod
    def load_teacher_subjects(self, academic_year_id: int) -> Dict[int, List[TeacherSubject]]:
        ...

    @abstractmethod
    def load_internship_types(self) -> List[InternshipType]:
        ...

    @abstractmethod
    def load_zone_constraints(self) -> Dict[int, List[ZoneConstraint]]:
        """Zone constraints grouped by zone number."""

    @abstractmethod
    def load_combination_rules(self) -> Dict[int, List[CombinationRule]]:
        """Combination rules grouped by the id of the first internship type."""


class AssignmentSink(ABC):
    @abstractmethod
    def create(
        self,
        teacher: Teacher,
        internship_type: InternshipType,
        subject: Subject,
        plan: AllocationPlan,
        note: str,
    ) -> bool:
        """Persist one assignment. Returns ``False`` if it already exists."""


class PlanStore(ABC):
    """Plan, assignment and credit-hour records."""

    @abstractmethod
    def transaction(self) -> ContextManager[None]:
        """Context manager making everything done inside it all-or-nothing."""

    @abstractmethod
    def add_plan(
        self, academic_year_id: int, name: str, version: str
    ) -> AllocationPlan:
        ...

    @abstractmethod
    def find_plan(self, plan_id: int) -> Optional[AllocationPlan]:
        ...

    @abstractmethod
    def plans_for_year(self, academic_year_id: int) -> List[AllocationPlan]:
        ...

    @abstractmethod
    def find_latest_version(self, academic_year_id: int) -> Optional[str]:
        ...

    @abstractmethod
    def clear_assignments(self, plan_id: int) -> int:
        """Delete the assignments of a plan and return how many were removed."""

    @abstractmethod
    def assignments_for_plan(self, plan_id: int) -> List[Assignment]:
        ...

    @abstractmethod
    def save_plan(self, plan: AllocationPlan) -> None:
        ...

    @abstractmethod
    def replace_credit_tracking(
        self, academic_year_id: int, rows: List[CreditHourTracking]
    ) -> None:
        """Drop the year's credit rows and store ``rows`` instead."""
