"""Input/output helpers for :mod:`internship_allocator`."""

from .memory_store import InMemoryPlanStore, load_store, save_store
from .parameters_loader import load_parameters, parse_parameters
from .ports import AssignmentSink, DataLoader, PlanStore
from .snapshot_loader import Snapshot, SnapshotDataLoader, load_snapshot, parse_snapshot

__all__ = [
    "AssignmentSink",
    "DataLoader",
    "InMemoryPlanStore",
    "PlanStore",
    "Snapshot",
    "SnapshotDataLoader",
    "load_parameters",
    "load_snapshot",
    "load_store",
    "parse_parameters",
    "parse_snapshot",
    "save_store",
]
