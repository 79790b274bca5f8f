"""In-memory :class:`PlanStore` with optional YAML persistence."""
from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

import yaml

from ..models import (
    AllocationPlan,
    Assignment,
    CreditHourTracking,
    InternshipType,
    PlanStatus,
    Subject,
    Teacher,
    major_version,
)
from .ports import AssignmentSink, PlanStore

log = logging.getLogger(__name__)


class InMemoryPlanStore(PlanStore, AssignmentSink):
    """Keep plans, assignments and credit rows in plain lists.

    :meth:`transaction` snapshots the whole state and restores it when an
    exception escapes the block.
    """

    def __init__(self) -> None:
        self.plans: Dict[int, AllocationPlan] = {}
        self.assignments: List[Assignment] = []
        self.credit_tracking: List[CreditHourTracking] = []
        self._next_plan_id = 1

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        snapshot = copy.deepcopy(
            (self.plans, self.assignments, self.credit_tracking, self._next_plan_id)
        )
        try:
            yield
        except Exception:
            log.warning("Rolling back store changes")
            self.plans, self.assignments, self.credit_tracking, self._next_plan_id = snapshot
            raise

    # ------------------------------------------------------------------
    # Plans
    # ------------------------------------------------------------------

    def add_plan(self, academic_year_id: int, name: str, version: str) -> AllocationPlan:
        plan = AllocationPlan(
            id=self._next_plan_id,
            academic_year_id=academic_year_id,
            name=name,
            version=version,
        )
        self.plans[plan.id] = plan
        self._next_plan_id += 1
        return plan

    def find_plan(self, plan_id: int) -> Optional[AllocationPlan]:
        return self.plans.get(plan_id)

    def plans_for_year(self, academic_year_id: int) -> List[AllocationPlan]:
        return [p for p in self.plans.values() if p.academic_year_id == academic_year_id]

    def find_latest_version(self, academic_year_id: int) -> Optional[str]:
        versions = [
            (major_version(p.version), p.version)
            for p in self.plans_for_year(academic_year_id)
            if major_version(p.version) is not None
        ]
        if not versions:
            return None
        return max(versions)[1]

    def save_plan(self, plan: AllocationPlan) -> None:
        self.plans[plan.id] = plan

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    def create(
        self,
        teacher: Teacher,
        internship_type: InternshipType,
        subject: Subject,
        plan: AllocationPlan,
        note: str,
    ) -> bool:
        key = (plan.id, teacher.id, internship_type.id, subject.id)
        if any(a.key == key for a in self.assignments):
            return False
        self.assignments.append(
            Assignment(
                plan_id=plan.id,
                teacher_id=teacher.id,
                teacher_name=teacher.name,
                internship_type_id=internship_type.id,
                internship_type_code=internship_type.code,
                subject_id=subject.id,
                subject_code=subject.code,
                note=note,
            )
        )
        return True

    def clear_assignments(self, plan_id: int) -> int:
        before = len(self.assignments)
        self.assignments = [a for a in self.assignments if a.plan_id != plan_id]
        return before - len(self.assignments)

    def assignments_for_plan(self, plan_id: int) -> List[Assignment]:
        return [a for a in self.assignments if a.plan_id == plan_id]

    # ------------------------------------------------------------------
    # Credit hours
    # ------------------------------------------------------------------

    def replace_credit_tracking(
        self, academic_year_id: int, rows: List[CreditHourTracking]
    ) -> None:
        self.credit_tracking = [
            r for r in self.credit_tracking if r.academic_year_id != academic_year_id
        ]
        self.credit_tracking.extend(rows)

    def credit_rows_for_year(self, academic_year_id: int) -> List[CreditHourTracking]:
        return [r for r in self.credit_tracking if r.academic_year_id == academic_year_id]

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plans": [
                {
                    "id": p.id,
                    "academic_year": p.academic_year_id,
                    "name": p.name,
                    "version": p.version,
                    "status": p.status.value,
                    "is_current": p.is_current,
                    "created_at": p.created_at.isoformat(),
                    "updated_at": p.updated_at.isoformat(),
                }
                for p in self.plans.values()
            ],
            "assignments": [
                {
                    "plan": a.plan_id,
                    "teacher": a.teacher_id,
                    "teacher_name": a.teacher_name,
                    "internship_type": a.internship_type_id,
                    "internship_type_code": a.internship_type_code,
                    "subject": a.subject_id,
                    "subject_code": a.subject_code,
                    "note": a.note,
                    "status": a.status,
                    "assigned_at": a.assigned_at.isoformat(),
                }
                for a in self.assignments
            ],
            "credit_tracking": [
                {
                    "teacher": r.teacher_id,
                    "academic_year": r.academic_year_id,
                    "assignments_count": r.assignments_count,
                    "credit_hours_allocated": r.credit_hours_allocated,
                    "credit_balance": r.credit_balance,
                    "notes": r.notes,
                    "created_at": r.created_at.isoformat(),
                }
                for r in self.credit_tracking
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InMemoryPlanStore":
        store = cls()
        for item in data.get("plans") or []:
            plan = AllocationPlan(
                id=int(item["id"]),
                academic_year_id=int(item["academic_year"]),
                name=item.get("name", ""),
                version=str(item["version"]),
                status=PlanStatus(item.get("status", "DRAFT")),
                is_current=bool(item.get("is_current", False)),
                created_at=_parse_time(item.get("created_at")),
                updated_at=_parse_time(item.get("updated_at")),
            )
            store.plans[plan.id] = plan
        for item in data.get("assignments") or []:
            store.assignments.append(
                Assignment(
                    plan_id=int(item["plan"]),
                    teacher_id=int(item["teacher"]),
                    teacher_name=item.get("teacher_name", ""),
                    internship_type_id=int(item["internship_type"]),
                    internship_type_code=item.get("internship_type_code", ""),
                    subject_id=int(item["subject"]),
                    subject_code=item.get("subject_code", ""),
                    note=item.get("note", ""),
                    status=item.get("status", "PLANNED"),
                    assigned_at=_parse_time(item.get("assigned_at")),
                )
            )
        for item in data.get("credit_tracking") or []:
            store.credit_tracking.append(
                CreditHourTracking(
                    teacher_id=int(item["teacher"]),
                    academic_year_id=int(item["academic_year"]),
                    assignments_count=int(item.get("assignments_count", 0)),
                    credit_hours_allocated=float(item.get("credit_hours_allocated", 0.0)),
                    credit_balance=float(item.get("credit_balance", 0.0)),
                    notes=item.get("notes"),
                    created_at=_parse_time(item.get("created_at")),
                )
            )
        store._next_plan_id = max(store.plans, default=0) + 1
        return store


def _parse_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if value:
        return datetime.fromisoformat(str(value))
    return datetime.now()


def load_store(path: str) -> InMemoryPlanStore:
    """Load a store from ``path``; a missing or empty file gives an empty store."""
    try:
        with open(path, "r", encoding="utf8") as handle:
            data = yaml.safe_load(handle) or {}
    except FileNotFoundError:
        return InMemoryPlanStore()
    if not isinstance(data, dict):
        raise ValueError("Store file must contain a mapping")
    return InMemoryPlanStore.from_dict(data)


def save_store(store: InMemoryPlanStore, path: str) -> None:
    with open(path, "w", encoding="utf8") as handle:
        yaml.safe_dump(store.to_dict(), handle, sort_keys=False)
