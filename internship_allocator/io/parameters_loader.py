"""Load :class:`AllocationParameters` from YAML."""
from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict, Optional

import yaml

from ..models import AllocationParameters

BOOLEAN_FIELDS = (
    "prioritize_scarcity",
    "force_utilization_of_surplus",
    "approve_on_completion",
)
INTEGER_FIELDS = (
    "standard_assignments_per_teacher",
    "max_assignments_per_teacher",
    "weight_main_subject",
    "weight_zone_preference",
)
CAP_FIELDS = ("standard_assignments_per_teacher", "max_assignments_per_teacher")
PARAMETER_NAMES =tuple(f.name for f in fields(AllocationParameters))


def parse_parameters(data: Optional[Dict[str, Any]]) -> AllocationParameters:
    """Validate a mapping of parameter values.

    Unknown keys, wrongly typed values and ``max < standard`` raise
    ``ValueError``. Missing keys keep their defaults.
    """
    if data is None:
        return AllocationParameters()
    if not isinstance(data, dict):
        raise ValueError("Parameter file must contain a mapping")

    unknown = set(data) - set(PARAMETER_NAMES)
    if unknown:
        raise ValueError(f"Unknown parameters: {', '.join(sorted(unknown))}")

    for name in BOOLEAN_FIELDS:
        if name in data and not isinstance(data[name], bool):
            raise ValueError(f"Parameter {name}: must be true or false")
    for name in INTEGER_FIELDS:
        if name not in data:
            continue
        value = data[name]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Parameter {name}: must be an integer")
        if name in CAP_FIELDS and value < 1:
            raise ValueError(f"Parameter {name}: must be a positive integer")
        if value < 0:
            raise ValueError(f"Parameter {name}: must be non-negative")

    fallback = data.get("fallback_subjects") or {}
    if not isinstance(fallback, dict):
        raise ValueError("Parameter fallback_subjects: must be a mapping")

    values = dict(data)
    values["fallback_subjects"] = {str(k): str(v) for k, v in fallback.items()}
    return AllocationParameters(**values)


def load_parameters(path: str) -> AllocationParameters:
    with open(path, "r", encoding="utf8") as handle:
        data = yaml.safe_load(handle)
    return parse_parameters(data)
