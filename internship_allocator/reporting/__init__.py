"""Reporting utilities for internship_allocator."""

from .export import (
    format_assignments,
    format_summary,
    export_yaml,
    export_csv,
)

__all__ = ["format_assignments", "format_summary", "export_yaml", "export_csv"]
