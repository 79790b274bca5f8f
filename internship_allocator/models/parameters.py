from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class AllocationParameters:
    """Tuning knobs for one allocation run.

    ``weight_main_subject`` and ``weight_zone_preference`` are carried for
    reporting; the phase scorers use fixed bonuses.
    """

    prioritize_scarcity: bool = True
    force_utilization_of_surplus: bool = True
    standard_assignments_per_teacher: int = 2
    max_assignments_per_teacher: int = 3
    weight_main_subject: int = 10
    weight_zone_preference: int = 5
    approve_on_completion: bool = False
    fallback_subjects: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.standard_assignments_per_teacher < 1:
            raise ValueError("standard_assignments_per_teacher must be a positive integer")
        if self.max_assignments_per_teacher < self.standard_assignments_per_teacher:
            raise ValueError(
                "max_assignments_per_teacher cannot be less than standard_assignments_per_teacher"
            )
        self.fallback_subjects = {
            key.strip().upper(): value for key, value in self.fallback_subjects.items()
        }


# Assignment count at which a teacher counts as fully loaded for budget
# reporting and earns a credit hour on plan activation.
FULL_LOAD_ASSIGNMENTS = 2
