from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AcademicYear:
    """Academic year with its supervision budget."""

    id: int
    name: str
    is_locked: bool = False
    elementary_school_hours: int = 0
    middle_school_hours: int = 0


@dataclass(frozen=True)
class Subject:
    id: int
    code: str
    title: str = ""
    school_type: str = ""


@dataclass(frozen=True)
class InternshipType:
    """Internship category such as SFP, ZSP, PDP1 or PDP2."""

    id: int
    code: str
    full_name: str = ""
    is_subject_specific: bool = False
    priority_order: Optional[int] = None


@dataclass(eq=False)
class InternshipDemand:
    """Need for ``required_teachers`` teachers for a subject and internship type."""

    academic_year_id: int
    internship_type: InternshipType
    subject: Subject
    required_teachers: int
    school_type: str = ""
    is_forecasted: bool = False

    def __post_init__(self) -> None:
        if self.required_teachers < 0:
            raise ValueError("required_teachers must be non-negative")
        self.school_type = self.school_type.strip().upper()


@dataclass(frozen=True)
class ZoneConstraint:
    zone: int
    internship_type_id: int
    is_allowed: bool


@dataclass(frozen=True)
class CombinationRule:
    """Directional rule: may a teacher holding ``first`` also take ``second``."""

    first_type_id: int
    second_type_id: int
    is_valid_combination: bool
