"""In-memory working set for a single allocation run.

The context is built once from a loader snapshot, mutated only through
:meth:`AllocationContext.record_assignment` and discarded when the run ends.
Reference data is indexed by teacher, subject and internship type id so that
the constraint predicates are dictionary lookups.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from ..models import (
    AllocationParameters,
    AvailabilityStatus,
    CombinationRule,
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

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from ..io.ports import DataLoader

log = logging.getLogger(__name__)

FALLBACK_SCHOOL_TYPES = ("PRIMARY", "MIDDLE")


@dataclass
class TeacherLedger:
    """Mutable per-teacher bookkeeping owned by one context."""

    assignment_count: int = 0
    assigned_types: List[InternshipType] = field(default_factory=list)
    held: Set[Tuple[int, int]] = field(default_factory=set)


class AllocationContext:
    def __init__(
        self,
        params: AllocationParameters,
        teachers: Sequence[Teacher],
        demands: Sequence[InternshipDemand],
        internship_types: Sequence[InternshipType],
        subjects: Sequence[Subject] = (),
        teacher_subjects: Optional[Mapping[int, List[TeacherSubject]]] = None,
        qualifications: Optional[Mapping[int, List[TeacherQualification]]] = None,
        exclusions: Optional[Mapping[int, List[TeacherSubjectExclusion]]] = None,
        availabilities: Optional[Mapping[int, List[TeacherAvailability]]] = None,
        zone_constraints: Optional[Mapping[int, List[ZoneConstraint]]] = None,
        combination_rules: Optional[Mapping[int, List[CombinationRule]]] = None,
    ) -> None:
        self.params = params
        self.teachers: List[Teacher] = list(teachers)
        self.demands: List[InternshipDemand] = list(demands)
        self.internship_types: List[InternshipType] = list(internship_types)
        self.subjects: Dict[int, Subject] = {s.id: s for s in subjects}
        self.teacher_subjects: Dict[int, List[TeacherSubject]] = dict(teacher_subjects or {})
        self.qualifications: Dict[int, List[TeacherQualification]] = dict(qualifications or {})

        self._types_by_code = {t.code: t for t in self.internship_types}
        self._demands_by_type: Dict[int, List[InternshipDemand]] = defaultdict(list)
        for demand in self.demands:
            self._demands_by_type[demand.internship_type.id].append(demand)

        # Indexed link tables consumed by the constraint predicates.
        self.subject_links: Dict[Tuple[int, int], List[str]] = defaultdict(list)
        for links in self.teacher_subjects.values():
            for link in links:
                self.subject_links[(link.teacher_id, link.subject_id)].append(
                    link.availability_status
                )
        self.main_subjects: Set[Tuple[int, int]] = {
            (q.teacher_id, q.subject_id)
            for quals in self.qualifications.values()
            for q in quals
            if q.is_main_subject
        }
        self.exclusions: Set[Tuple[int, int]] = {
            (e.teacher_id, e.subject_id)
            for rows in (exclusions or {}).values()
            for e in rows
        }
        self.availabilities: Dict[Tuple[int, int], List[AvailabilityStatus]] = defaultdict(list)
        for rows in (availabilities or {}).values():
            for a in rows:
                self.availabilities[(a.teacher_id, a.internship_type_id)].append(a.status)
        self.zone_constraints: Dict[Tuple[int, int], bool] = {}
        for zone, rows in (zone_constraints or {}).items():
            for c in rows:
                key = (zone, c.internship_type_id)
                self.zone_constraints[key] = self.zone_constraints.get(key, False) or bool(c.is_allowed)
        self.combination_rules: Dict[Tuple[int, int], bool] = {}
        for first_id, rows in (combination_rules or {}).items():
            for r in rows:
                key = (first_id, r.second_type_id)
                self.combination_rules[key] = (
                    self.combination_rules.get(key, False) or bool(r.is_valid_combination)
                )

        self.fallback_subjects: Dict[str, Subject] = self._resolve_fallback_subjects()

        self.ledgers: Dict[int, TeacherLedger] = {t.id: TeacherLedger() for t in self.teachers}
        self.subject_candidate_count: Dict[int, int] = {}
        self.total_assignments_created = 0

    @classmethod
    def from_loader(
        cls, loader: "DataLoader", academic_year_id: int, params: AllocationParameters
    ) -> "AllocationContext":
        """Build a context from a loader snapshot for one academic year."""
        return cls(
            params,
            teachers=loader.load_available_teachers(academic_year_id),
            demands=loader.load_internship_demands(academic_year_id),
            internship_types=loader.load_internship_types(),
            subjects=loader.load_subjects(),
            teacher_subjects=loader.load_teacher_subjects(academic_year_id),
            qualifications=loader.load_teacher_qualifications(),
            exclusions=loader.load_teacher_exclusions(academic_year_id),
            availabilities=loader.load_teacher_availabilities(academic_year_id),
            zone_constraints=loader.load_zone_constraints(),
            combination_rules=loader.load_combination_rules(),
        )

    def _resolve_fallback_subjects(self) -> Dict[str, Subject]:
        by_code = {s.code: s for s in self.subjects.values()}
        resolved: Dict[str, Subject] = {}
        for school_type, code in self.params.fallback_subjects.items():
            subject = by_code.get(code)
            if subject is None:
                log.warning("Configured fallback subject %s for %s is unknown", code, school_type)
                continue
            resolved[school_type] = subject
        for school_type in FALLBACK_SCHOOL_TYPES:
            if school_type in resolved:
                continue
            for subject in self.subjects.values():
                if subject.school_type.upper() == school_type:
                    resolved[school_type] = subject
                    break
        return resolved

    # ------------------------------------------------------------------
    # Reference lookups
    # ------------------------------------------------------------------

    def get_internship_type(self, code: str) -> Optional[InternshipType]:
        return self._types_by_code.get(code)

    def get_demands_by_type(self, internship_type: InternshipType) -> List[InternshipDemand]:
        """Return a fresh list of the demands for ``internship_type`` in load order."""
        return list(self._demands_by_type.get(internship_type.id, []))

    def get_qualifications(self, teacher: Teacher) -> List[TeacherQualification]:
        return self.qualifications.get(teacher.id, [])

    def get_subject(self, subject_id: int) -> Optional[Subject]:
        return self.subjects.get(subject_id)

    def get_fallback_subject(self, school_type: str) -> Optional[Subject]:
        return self.fallback_subjects.get(school_type.upper())

    # ------------------------------------------------------------------
    # Per-teacher state
    # ------------------------------------------------------------------

    def ledger(self, teacher: Teacher) -> TeacherLedger:
        return self.ledgers.setdefault(teacher.id, TeacherLedger())

    def has_assignment(self, teacher: Teacher, internship_type: InternshipType, subject: Subject) -> bool:
        ledger = self.ledgers.get(teacher.id)
        return ledger is not None and (internship_type.id, subject.id) in ledger.held

    def record_assignment(
        self, teacher: Teacher, internship_type: InternshipType, subject: Subject
    ) -> bool:
        """Track a new assignment; duplicates are ignored and return ``False``."""
        ledger = self.ledger(teacher)
        key = (internship_type.id, subject.id)
        if key in ledger.held:
            log.warning(
                "Ignoring duplicate assignment record: teacher %s -> %s - %s",
                teacher.id,
                internship_type.code,
                subject.code,
            )
            return False
        ledger.assignment_count += 1
        ledger.assigned_types.append(internship_type)
        ledger.held.add(key)
        self.total_assignments_created += 1
        return True

    def get_assignment_count(self, teacher: Teacher) -> int:
        ledger = self.ledgers.get(teacher.id)
        return ledger.assignment_count if ledger else 0

    def get_assigned_types(self, teacher: Teacher) -> List[InternshipType]:
        ledger = self.ledgers.get(teacher.id)
        return list(ledger.assigned_types) if ledger else []

    def get_target_assignments(self, teacher: Teacher) -> int:
        """Return how many assignments ``teacher`` should end up with.

        Teachers owing credit hours (negative balance) target the maximum.
        """
        if teacher.credit_hour_balance is not None and teacher.credit_hour_balance < 0:
            return self.params.max_assignments_per_teacher
        return self.params.standard_assignments_per_teacher

    def is_teacher_fully_booked(self, teacher: Teacher) -> bool:
        return self.get_assignment_count(teacher) >= self.params.max_assignments_per_teacher

    # ------------------------------------------------------------------
    # Scarcity
    # ------------------------------------------------------------------

    def increment_candidate_count(self, subject_id: int) -> None:
        self.subject_candidate_count[subject_id] = self.subject_candidate_count.get(subject_id, 0) + 1

    def get_candidate_count_for_subject(self, subject_id: int) -> int:
        return self.subject_candidate_count.get(subject_id, 0)

    def calculate_scarcity_metrics(self) -> None:
        """Count teacher-subject links per subject across the loaded teachers."""
        for teacher in self.teachers:
            for link in self.teacher_subjects.get(teacher.id, []):
                self.increment_candidate_count(link.subject_id)

    def underutilized_teachers(self) -> Iterable[Teacher]:
        return [t for t in self.teachers if self.get_assignment_count(t) < self.get_target_assignments(t)]
