"""Export an :class:`~internship_allocator.engine.allocator.AllocationResult`.

Two files are written per run. The assignment file lists who supervises
what; the summary file carries the plan header, shortages, per-teacher
utilization and the budget figures.
"""
from __future__ import annotations

import csv
from typing import Dict, List

import yaml

from ..engine.allocator import AllocationResult


def format_assignments(result: AllocationResult) -> Dict[str, Dict[str, List[str]]]:
    """Return teacher names grouped by internship type code and subject code."""
    grouped: Dict[str, Dict[str, List[str]]] = {}
    for a in result.assignments:
        grouped.setdefault(a.internship_type_code, {}).setdefault(a.subject_code, []).append(
            a.teacher_name
        )
    for subjects in grouped.values():
        for names in subjects.values():
            names.sort()
    return grouped


def format_summary(result: AllocationResult) -> Dict[str, object]:
    plan = result.plan
    return {
        "plan": {
            "id": plan.id,
            "name": plan.name,
            "version": plan.version,
            "status": plan.status.value,
            "academic_year": plan.academic_year_id,
        },
        "shortages": [
            {
                "internship_type": s.internship_type_code,
                "subject": s.subject_code,
                "school_type": s.school_type,
                "required": s.required,
                "assigned": s.assigned,
                "shortfall": s.shortfall,
            }
            for s in result.shortages
        ],
        "utilization": result.utilization,
        "budget": result.budget,
        "surplus_assignments": result.surplus_assignments,
    }


def export_yaml(result: AllocationResult, assignments_file: str, summary_file: str) -> None:
    """Write assignments and the run summary to YAML files."""
    with open(assignments_file, "w", encoding="utf8") as handle:
        yaml.safe_dump(format_assignments(result), handle, sort_keys=True)
    with open(summary_file, "w", encoding="utf8") as handle:
        yaml.safe_dump(format_summary(result), handle, sort_keys=False)


def export_csv(result: AllocationResult, assignments_file: str, summary_file: str) -> None:
    """Write assignments and the run summary to CSV files.

    The assignment CSV has one row per assignment. The summary CSV holds
    three tables (shortages, utilization, budget) separated by blank rows,
    each with its own header.
    """
    fieldnames = ["internship_type", "subject", "teacher_id", "teacher", "note"]
    rows = [
        {
            "internship_type": a.internship_type_code,
            "subject": a.subject_code,
            "teacher_id": a.teacher_id,
            "teacher": a.teacher_name,
            "note": a.note,
        }
        for a in sorted(
            result.assignments,
            key=lambda a: (a.internship_type_code, a.subject_code, a.teacher_name),
        )
    ]
    with open(assignments_file, "w", newline="", encoding="utf8") as handle:
        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)

    with open(summary_file, "w", newline="", encoding="utf8") as handle:
        writer = csv.writer(handle)
        writer.writerow(["internship_type", "subject", "school_type", "required", "assigned", "shortfall"])
        for s in result.shortages:
            writer.writerow(
                [s.internship_type_code, s.subject_code, s.school_type, s.required, s.assigned, s.shortfall]
            )
        writer.writerow([])
        writer.writerow(["teacher", "name", "zone", "school_type", "assignments", "target", "types"])
        for entry in result.utilization:
            writer.writerow(
                [
                    entry["teacher"],
                    entry["name"],
                    entry["zone"],
                    entry["school_type"],
                    entry["assignments"],
                    entry["target"],
                    ";".join(entry["types"]),
                ]
            )
        writer.writerow([])
        writer.writerow(["school_type", "filled", "budget"])
        for school_type in sorted(result.budget):
            figures = result.budget[school_type]
            writer.writerow([school_type, figures["filled"], figures["budget"]])
