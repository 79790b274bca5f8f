from __future__ import annotations

import argparse
import os
from typing import Dict, List

import yaml

from ..engine.allocator import Allocator
from ..io.memory_store import InMemoryPlanStore, load_store, save_store
from ..io.parameters_loader import PARAMETER_NAMES, load_parameters, parse_parameters
from ..io.snapshot_loader import SnapshotDataLoader
from ..models import AllocationParameters
from ..plans.lifecycle import PlanLifecycleManager
from ..reporting.export import export_csv, export_yaml


# ---------------------------------------------------------------------------
# Parameter file utilities
# ---------------------------------------------------------------------------

def _load_param_file(path: str | None) -> Dict:
    """Load raw parameter values from ``path`` if it exists."""
    if not path or not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf8") as handle:
        data = yaml.safe_load(handle) or {}
    return data


def _save_param_file(path: str, data: Dict) -> None:
    """Persist ``data`` to ``path`` as YAML."""
    with open(path, "w", encoding="utf8") as handle:
        yaml.safe_dump(data, handle, sort_keys=True)


def _params_from_args(args: argparse.Namespace) -> AllocationParameters:
    if args.params:
        return load_parameters(args.params)
    return AllocationParameters()


# ---------------------------------------------------------------------------
# Command implementations
# ---------------------------------------------------------------------------

def cmd_allocate(args: argparse.Namespace) -> None:
    loader = SnapshotDataLoader.from_file(args.snapshot)
    params = _params_from_args(args)
    store = load_store(args.store) if args.store else InMemoryPlanStore()

    allocator = Allocator(loader, store, params)
    result = allocator.run(args.year, plan_id=args.plan_id, version=args.plan_version)

    if args.store:
        save_store(store, args.store)

    os.makedirs(args.output, exist_ok=True)
    if args.format == "csv":
        assignments_file = os.path.join(args.output, "assignments.csv")
        summary_file = os.path.join(args.output, "summary.csv")
        export_csv(result, assignments_file, summary_file)
    else:
        assignments_file = os.path.join(args.output, "assignments.yaml")
        summary_file = os.path.join(args.output, "summary.yaml")
        export_yaml(result, assignments_file, summary_file)

    print(
        f"Plan {result.plan.id} (version {result.plan.version}): "
        f"{len(result.assignments)} assignments, {len(result.shortages)} shortages"
    )
    print(f"Wrote assignments to {assignments_file} and summary to {summary_file}")


def cmd_activate(args: argparse.Namespace) -> None:
    store = load_store(args.store)
    plan = PlanLifecycleManager(store).activate_plan(args.plan_id)
    save_store(store, args.store)
    print(f"Activated plan {plan.id} (version {plan.version})")


def cmd_plans(args: argparse.Namespace) -> None:
    store = load_store(args.store)
    plans = store.plans_for_year(args.year) if args.year is not None else list(store.plans.values())
    for plan in sorted(plans, key=lambda p: p.id):
        marker = "*" if plan.is_current else " "
        count = len(store.assignments_for_plan(plan.id))
        print(f"{marker} {plan.id}\t{plan.version}\t{plan.status.value}\t{count} assignments\t{plan.name}")


def cmd_set_param(args: argparse.Namespace) -> None:
    data = _load_param_file(args.params)
    value = yaml.safe_load(args.value)
    if args.name.startswith("fallback_subjects."):
        school_type = args.name.split(".", 1)[1].upper()
        data.setdefault("fallback_subjects", {})[school_type] = str(value)
    elif args.name in PARAMETER_NAMES:
        data[args.name] = value
    else:
        raise ValueError(f"Unknown parameter: {args.name}")
    parse_parameters(data)
    _save_param_file(args.params, data)


def cmd_compare(args: argparse.Namespace) -> None:
    def _load_assignments(directory: str) -> Dict[str, List[str]]:
        path = os.path.join(directory, "assignments.yaml")
        with open(path, "r", encoding="utf8") as handle:
            data = yaml.safe_load(handle) or {}
        return {
            f"{type_code}/{subject_code}": names
            for type_code, subjects in data.items()
            for subject_code, names in subjects.items()
        }

    alloc1 = _load_assignments(args.dir1)
    alloc2 = _load_assignments(args.dir2)

    for slot in sorted(set(alloc1) | set(alloc2)):
        teachers1 = set(alloc1.get(slot, []))
        teachers2 = set(alloc2.get(slot, []))
        added = sorted(teachers2 - teachers1)
        removed = sorted(teachers1 - teachers2)
        if added or removed:
            print(f"{slot}:")
            if added:
                print(f"  + {'; '.join(added)}")
            if removed:
                print(f"  - {'; '.join(removed)}")


# ---------------------------------------------------------------------------
# Argument parser setup
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="internship-allocator")
    sub = parser.add_subparsers(dest="command", required=True)

    # allocate
    p_alloc = sub.add_parser("allocate", help="Run allocation for an academic year")
    p_alloc.add_argument("--snapshot", required=True, help="Snapshot YAML path")
    p_alloc.add_argument("--year", required=True, type=int, help="Academic year id")
    p_alloc.add_argument("--params", help="Parameters YAML path")
    p_alloc.add_argument("--store", help="Plan store YAML path (created if missing)")
    p_alloc.add_argument("--plan-id", type=int, help="Re-run an existing plan")
    p_alloc.add_argument("--plan-version", help="Version for a new plan")
    p_alloc.add_argument("--output", required=True, help="Output directory")
    p_alloc.add_argument(
        "--format",
        choices=["yaml", "csv"],
        default="yaml",
        help="Output format (default: yaml)",
    )
    p_alloc.set_defaults(func=cmd_allocate)

    # activate
    p_activate = sub.add_parser("activate", help="Make a plan the current plan of its year")
    p_activate.add_argument("--store", required=True, help="Plan store YAML path")
    p_activate.add_argument("--plan-id", required=True, type=int, help="Plan id")
    p_activate.set_defaults(func=cmd_activate)

    # plans
    p_plans = sub.add_parser("plans", help="List plans in a store")
    p_plans.add_argument("--store", required=True, help="Plan store YAML path")
    p_plans.add_argument("--year", type=int, help="Only plans of this academic year")
    p_plans.set_defaults(func=cmd_plans)

    # set-param
    p_param = sub.add_parser("set-param", help="Set a value in a parameters file")
    p_param.add_argument("params", help="Parameters YAML path")
    p_param.add_argument("name", help="Parameter name, or fallback_subjects.<SCHOOL_TYPE>")
    p_param.add_argument("value", help="New value (parsed as YAML)")
    p_param.set_defaults(func=cmd_set_param)

    # compare
    p_compare = sub.add_parser("compare", help="Compare two allocation directories")
    p_compare.add_argument("dir1", help="First allocation directory")
    p_compare.add_argument("dir2", help="Second allocation directory")
    p_compare.set_defaults(func=cmd_compare)

    return parser


def main(argv: List[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
