from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

ZONES = (1, 2, 3)


class EmploymentStatus(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    ON_LEAVE = "ON_LEAVE"
    CONTRACT = "CONTRACT"
    PROBATION = "PROBATION"
    RETIRED = "RETIRED"


INACTIVE_STATUSES = frozenset({EmploymentStatus.ON_LEAVE, EmploymentStatus.RETIRED})


class AvailabilityStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    PREFERRED = "PREFERRED"
    LIMITED = "LIMITED"
    NOT_AVAILABLE = "NOT_AVAILABLE"


@dataclass(eq=False)
class Teacher:
    """A supervising teacher and the school they work at."""

    id: int
    first_name: str = ""
    last_name: str = ""
    zone: int = 1
    school_type: str = ""
    employment_status: EmploymentStatus = EmploymentStatus.FULL_TIME
    is_active: bool = True
    credit_hour_balance: Optional[float] = None

    def __post_init__(self) -> None:
        if self.zone not in ZONES:
            raise ValueError(f"zone must be one of {ZONES}, got {self.zone}")
        self.school_type = self.school_type.strip().upper()
        self.employment_status = EmploymentStatus(self.employment_status)

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or f"Teacher {self.id}"

    def is_employed(self) -> bool:
        """Return True if the teacher can take part in this year's allocation."""
        return self.is_active and self.employment_status not in INACTIVE_STATUSES


@dataclass(frozen=True)
class TeacherSubject:
    """Subject a teacher offers for a year, with a free-form status string."""

    teacher_id: int
    subject_id: int
    availability_status: str = AvailabilityStatus.AVAILABLE.value
    academic_year_id: Optional[int] = None


@dataclass(frozen=True)
class TeacherQualification:
    teacher_id: int
    subject_id: int
    is_main_subject: bool = False


@dataclass(frozen=True)
class TeacherAvailability:
    teacher_id: int
    internship_type_id: int
    status: AvailabilityStatus = AvailabilityStatus.AVAILABLE
    academic_year_id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", AvailabilityStatus(self.status))


@dataclass(frozen=True)
class TeacherSubjectExclusion:
    teacher_id: int
    subject_id: int
    academic_year_id: Optional[int] = None
