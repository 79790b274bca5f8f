import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from internship_allocator.io import load_parameters, parse_parameters


def test_load_parameters(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text(
        """
prioritize_scarcity: false
max_assignments_per_teacher: 4
fallback_subjects:
  primary: GER
""",
        encoding="utf8",
    )

    params = load_parameters(str(path))
    assert params.prioritize_scarcity is False
    assert params.force_utilization_of_surplus is True
    assert params.standard_assignments_per_teacher == 2
    assert params.max_assignments_per_teacher == 4
    assert params.fallback_subjects == {"PRIMARY": "GER"}


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text("", encoding="utf8")
    params = load_parameters(str(path))
    assert params.weight_main_subject == 10
    assert params.weight_zone_preference == 5
    assert params.approve_on_completion is False


@pytest.mark.parametrize(
    "data, message",
    [
        ({"prioritize_scarcity": "yes"}, "prioritize_scarcity"),
        ({"max_assignments_per_teacher": 2.5}, "max_assignments_per_teacher"),
        ({"standard_assignments_per_teacher": True}, "standard_assignments_per_teacher"),
        ({"weight_main_subject": -1}, "non-negative"),
        ({"max_assignments_per_teacher": 0}, "max_assignments_per_teacher: must be a positive integer"),
        ({"standard_assignments_per_teacher": 0}, "standard_assignments_per_teacher: must be a positive integer"),
        ({"standard_assignments_per_teacher": 4}, "cannot be less"),
        ({"fallback_subjects": ["MATH"]}, "fallback_subjects"),
        ({"max_teachers": 3}, "Unknown parameters: max_teachers"),
        (["not", "a", "mapping"], "mapping"),
    ],
)
def test_invalid_parameters(data, message):
    with pytest.raises(ValueError) as excinfo:
        parse_parameters(data)
    assert message in str(excinfo.value)
