"""Load allocation reference data from a YAML snapshot.

A snapshot is a mapping with the sections ``academic_years``, ``subjects``,
``internship_types``, ``zone_constraints``, ``combination_rules``,
``teachers`` and ``demands``. Subjects and internship types are referenced
by code everywhere else. Per-teacher link tables (``subjects``,
``qualifications``, ``availabilities`` and ``exclusions``) are nested under
each teacher. Link rows without an ``academic_year`` apply to every year.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TypeVar

import yaml

from ..models import (
    AcademicYear,
    AvailabilityStatus,
    CombinationRule,
    EmploymentStatus,
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
from .ports import DataLoader

T = TypeVar("T")


@dataclass
class Snapshot:
    """Parsed content of a snapshot file."""

    academic_years: List[AcademicYear] = field(default_factory=list)
    subjects: List[Subject] = field(default_factory=list)
    internship_types: List[InternshipType] = field(default_factory=list)
    zone_constraints: List[ZoneConstraint] = field(default_factory=list)
    combination_rules: List[CombinationRule] = field(default_factory=list)
    teachers: List[Teacher] = field(default_factory=list)
    teacher_subjects: List[TeacherSubject] = field(default_factory=list)
    qualifications: List[TeacherQualification] = field(default_factory=list)
    availabilities: List[TeacherAvailability] = field(default_factory=list)
    exclusions: List[TeacherSubjectExclusion] = field(default_factory=list)
    demands: List[InternshipDemand] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _require(label: str, data: Dict[str, Any], *fields: str) -> None:
    missing = set(fields) - data.keys()
    if missing:
        raise ValueError(f"{label}: missing required fields: {', '.join(sorted(missing))}")


def _int(label: str, data: Dict[str, Any], key: str, default: Optional[int] = None) -> Optional[int]:
    value = data.get(key, default)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label}: {key} must be an integer")
    return value


def _number(label: str, data: Dict[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{label}: {key} must be a number")
    return float(value)


def _bool(label: str, data: Dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{label}: {key} must be true or false")
    return value


def _entries(data: Dict[str, Any], section: str) -> List[Dict[str, Any]]:
    items = data.get(section) or []
    if not isinstance(items, list):
        raise ValueError(f"Section {section} must be a list")
    for idx, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            raise ValueError(
                f"{section} {idx}: expected mapping but found {type(item).__name__}"
            )
    return items


def _lookup(label: str, table: Dict[str, T], code: Any, kind: str) -> T:
    try:
        return table[str(code)]
    except KeyError:
        raise ValueError(f"{label}: unknown {kind} {code}") from None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_snapshot(data: Dict[str, Any]) -> Snapshot:
    """Validate raw snapshot data and convert it into model objects.

    Raises
    ------
    ValueError
        If a section is malformed, a required field is missing or a code
        refers to an unknown subject or internship type.
    """
    if not isinstance(data, dict):
        raise ValueError("Snapshot file must contain a mapping")

    snap = Snapshot()

    for idx, item in enumerate(_entries(data, "academic_years"), start=1):
        label = f"Academic year {idx}"
        _require(label, item, "id", "name")
        snap.academic_years.append(
            AcademicYear(
                id=_int(label, item, "id"),
                name=str(item["name"]),
                is_locked=_bool(label, item, "is_locked", False),
                elementary_school_hours=_int(label, item, "elementary_school_hours", 0),
                middle_school_hours=_int(label, item, "middle_school_hours", 0),
            )
        )

    subjects: Dict[str, Subject] = {}
    for idx, item in enumerate(_entries(data, "subjects"), start=1):
        label = f"Subject {idx}"
        _require(label, item, "id", "code")
        subject = Subject(
            id=_int(label, item, "id"),
            code=str(item["code"]),
            title=str(item.get("title", "")),
            school_type=str(item.get("school_type", "")).upper(),
        )
        if subject.code in subjects:
            raise ValueError(f"{label}: duplicate subject code {subject.code}")
        subjects[subject.code] = subject
        snap.subjects.append(subject)

    types: Dict[str, InternshipType] = {}
    for idx, item in enumerate(_entries(data, "internship_types"), start=1):
        label = f"Internship type {idx}"
        _require(label, item, "id", "code")
        itype = InternshipType(
            id=_int(label, item, "id"),
            code=str(item["code"]),
            full_name=str(item.get("full_name", "")),
            is_subject_specific=_bool(label, item, "subject_specific", False),
            priority_order=_int(label, item, "priority"),
        )
        if itype.code in types:
            raise ValueError(f"{label}: duplicate internship type code {itype.code}")
        types[itype.code] = itype
        snap.internship_types.append(itype)

    for idx, item in enumerate(_entries(data, "zone_constraints"), start=1):
        label = f"Zone constraint {idx}"
        _require(label, item, "zone", "internship_type", "allowed")
        snap.zone_constraints.append(
            ZoneConstraint(
                zone=_int(label, item, "zone"),
                internship_type_id=_lookup(label, types, item["internship_type"], "internship type").id,
                is_allowed=_bool(label, item, "allowed", False),
            )
        )

    for idx, item in enumerate(_entries(data, "combination_rules"), start=1):
        label = f"Combination rule {idx}"
        _require(label, item, "first", "second", "valid")
        snap.combination_rules.append(
            CombinationRule(
                first_type_id=_lookup(label, types, item["first"], "internship type").id,
                second_type_id=_lookup(label, types, item["second"], "internship type").id,
                is_valid_combination=_bool(label, item, "valid", False),
            )
        )

    teacher_ids = set()
    for idx, item in enumerate(_entries(data, "teachers"), start=1):
        label = f"Teacher {idx}"
        _require(label, item, "id", "zone")
        teacher_id = _int(label, item, "id")
        if teacher_id in teacher_ids:
            raise ValueError(f"{label}: duplicate teacher id {teacher_id}")
        teacher_ids.add(teacher_id)
        zone = _int(label, item, "zone")
        is_active = _bool(label, item, "is_active", True)
        balance = _number(label, item, "credit_hour_balance")
        try:
            teacher = Teacher(
                id=teacher_id,
                first_name=str(item.get("first_name", "")),
                last_name=str(item.get("last_name", "")),
                zone=zone,
                school_type=str(item.get("school_type", "")),
                employment_status=EmploymentStatus(item.get("employment_status", "FULL_TIME")),
                is_active=is_active,
                credit_hour_balance=balance,
            )
        except ValueError as exc:
            raise ValueError(f"{label}: {exc}") from exc
        snap.teachers.append(teacher)
        _parse_teacher_links(label, item, teacher, subjects, types, snap)

    for idx, item in enumerate(_entries(data, "demands"), start=1):
        label = f"Demand {idx}"
        _require(label, item, "academic_year", "internship_type", "subject", "required_teachers")
        required = _int(label, item, "required_teachers")
        if required < 0:
            raise ValueError(f"{label}: required_teachers must be non-negative")
        snap.demands.append(
            InternshipDemand(
                academic_year_id=_int(label, item, "academic_year"),
                internship_type=_lookup(label, types, item["internship_type"], "internship type"),
                subject=_lookup(label, subjects, item["subject"], "subject"),
                required_teachers=required,
                school_type=str(item.get("school_type", "")),
                is_forecasted=_bool(label, item, "forecasted", False),
            )
        )

    return snap


def _parse_teacher_links(
    label: str,
    item: Dict[str, Any],
    teacher: Teacher,
    subjects: Dict[str, Subject],
    types: Dict[str, InternshipType],
    snap: Snapshot,
) -> None:
    for entry in _entries(item, "subjects"):
        _require(label, entry, "subject")
        snap.teacher_subjects.append(
            TeacherSubject(
                teacher_id=teacher.id,
                subject_id=_lookup(label, subjects, entry["subject"], "subject").id,
                availability_status=str(entry.get("status", AvailabilityStatus.AVAILABLE.value)),
                academic_year_id=_int(label, entry, "academic_year"),
            )
        )
    for entry in _entries(item, "qualifications"):
        _require(label, entry, "subject")
        snap.qualifications.append(
            TeacherQualification(
                teacher_id=teacher.id,
                subject_id=_lookup(label, subjects, entry["subject"], "subject").id,
                is_main_subject=_bool(label, entry, "main", False),
            )
        )
    for entry in _entries(item, "availabilities"):
        _require(label, entry, "internship_type")
        try:
            status = AvailabilityStatus(str(entry.get("status", "AVAILABLE")).upper())
        except ValueError as exc:
            raise ValueError(f"{label}: {exc}") from exc
        snap.availabilities.append(
            TeacherAvailability(
                teacher_id=teacher.id,
                internship_type_id=_lookup(label, types, entry["internship_type"], "internship type").id,
                status=status,
                academic_year_id=_int(label, entry, "academic_year"),
            )
        )
    for entry in _entries(item, "exclusions"):
        _require(label, entry, "subject")
        snap.exclusions.append(
            TeacherSubjectExclusion(
                teacher_id=teacher.id,
                subject_id=_lookup(label, subjects, entry["subject"], "subject").id,
                academic_year_id=_int(label, entry, "academic_year"),
            )
        )


def load_snapshot(path: str) -> Snapshot:
    """Parse a YAML snapshot file into a :class:`Snapshot`."""
    with open(path, "r", encoding="utf8") as handle:
        data = yaml.safe_load(handle)
    return parse_snapshot(data)


# ---------------------------------------------------------------------------
# DataLoader implementation
# ---------------------------------------------------------------------------

def _for_year(rows: List[T], academic_year_id: int) -> List[T]:
    return [r for r in rows if r.academic_year_id in (None, academic_year_id)]


def _group(rows: List[T], key) -> Dict[Any, List[T]]:
    grouped: Dict[Any, List[T]] = defaultdict(list)
    for row in rows:
        grouped[key(row)].append(row)
    return dict(grouped)


class SnapshotDataLoader(DataLoader):
    """Serve a parsed :class:`Snapshot` through the :class:`DataLoader` port."""

    def __init__(self, snapshot: Snapshot) -> None:
        self.snapshot = snapshot

    @classmethod
    def from_file(cls, path: str) -> "SnapshotDataLoader":
        return cls(load_snapshot(path))

    def find_academic_year(self, academic_year_id: int) -> Optional[AcademicYear]:
        for year in self.snapshot.academic_years:
            if year.id == academic_year_id:
                return year
        return None

    def load_available_teachers(self, academic_year_id: int) -> List[Teacher]:
        return [t for t in self.snapshot.teachers if t.is_employed()]

    def load_subjects(self) -> List[Subject]:
        return list(self.snapshot.subjects)

    def load_internship_demands(self, academic_year_id: int) -> List[InternshipDemand]:
        return [d for d in self.snapshot.demands if d.academic_year_id == academic_year_id]

    def load_teacher_qualifications(self) -> Dict[int, List[TeacherQualification]]:
        return _group(self.snapshot.qualifications, lambda q: q.teacher_id)

    def load_teacher_exclusions(self, academic_year_id: int) -> Dict[int, List[TeacherSubjectExclusion]]:
        return _group(_for_year(self.snapshot.exclusions, academic_year_id), lambda e: e.teacher_id)

    def load_teacher_availabilities(self, academic_year_id: int) -> Dict[int, List[TeacherAvailability]]:
        return _group(_for_year(self.snapshot.availabilities, academic_year_id), lambda a: a.teacher_id)

    def load_teacher_subjects(self, academic_year_id: int) -> Dict[int, List[TeacherSubject]]:
        return _group(_for_year(self.snapshot.teacher_subjects, academic_year_id), lambda s: s.teacher_id)

    def load_internship_types(self) -> List[InternshipType]:
        return list(self.snapshot.internship_types)

    def load_zone_constraints(self) -> Dict[int, List[ZoneConstraint]]:
        return _group(self.snapshot.zone_constraints, lambda z: z.zone)

    def load_combination_rules(self) -> Dict[int, List[CombinationRule]]:
        return _group(self.snapshot.combination_rules, lambda r: r.first_type_id)
