"""Data models for internship_allocator."""

from .internship import (
    AcademicYear,
    CombinationRule,
    InternshipDemand,
    InternshipType,
    Subject,
    ZoneConstraint,
)
from .parameters import FULL_LOAD_ASSIGNMENTS, AllocationParameters
from .plan import (
    AllocationPlan,
    Assignment,
    CreditHourTracking,
    PlanStatus,
    Shortage,
    major_version,
)
from .teacher import (
    AvailabilityStatus,
    EmploymentStatus,
    Teacher,
    TeacherAvailability,
    TeacherQualification,
    TeacherSubject,
    TeacherSubjectExclusion,
)

__all__ = [
    "AcademicYear",
    "AllocationParameters",
    "FULL_LOAD_ASSIGNMENTS",
    "AllocationPlan",
    "Assignment",
    "AvailabilityStatus",
    "CombinationRule",
    "CreditHourTracking",
    "EmploymentStatus",
    "InternshipDemand",
    "InternshipType",
    "PlanStatus",
    "Shortage",
    "Subject",
    "Teacher",
    "TeacherAvailability",
    "TeacherQualification",
    "TeacherSubject",
    "TeacherSubjectExclusion",
    "ZoneConstraint",
    "major_version",
]
