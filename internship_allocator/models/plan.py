from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


def major_version(version: str) -> Optional[int]:
    """Return the integer major component of ``"N.M"`` or ``None``."""
    head = str(version).split(".", 1)[0].strip()
    try:
        return int(head)
    except ValueError:
        return None


class PlanStatus(str, Enum):
    DRAFT = "DRAFT"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    ARCHIVED = "ARCHIVED"


@dataclass
class AllocationPlan:
    """A versioned set of assignments for one academic year."""

    id: int
    academic_year_id: int
    name: str
    version: str
    status: PlanStatus = PlanStatus.DRAFT
    is_current: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        self.status = PlanStatus(self.status)

    def touch(self) -> None:
        self.updated_at = datetime.now()


@dataclass
class Assignment:
    """A teacher supervising one internship type for one subject within a plan."""

    plan_id: int
    teacher_id: int
    teacher_name: str
    internship_type_id: int
    internship_type_code: str
    subject_id: int
    subject_code: str
    note: str = ""
    status: str = "PLANNED"
    assigned_at: datetime = field(default_factory=datetime.now)

    @property
    def key(self) -> tuple[int, int, int, int]:
        return (self.plan_id, self.teacher_id, self.internship_type_id, self.subject_id)


@dataclass
class CreditHourTracking:
    teacher_id: int
    academic_year_id: int
    assignments_count: int = 0
    credit_hours_allocated: float = 0.0
    credit_balance: float = 0.0
    notes: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class Shortage:
    """A demand that could not be fully staffed."""

    internship_type_code: str
    subject_code: str
    school_type: str
    required: int
    assigned: int

    @property
    def shortfall(self) -> int:
        return self.required - self.assigned
