import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from internship_allocator.io import SnapshotDataLoader, load_snapshot, parse_snapshot
from internship_allocator.models import AvailabilityStatus

EXAMPLE = Path(__file__).resolve().parents[1] / "examples" / "snapshot.yaml"


def _minimal():
    return {
        "academic_years": [{"id": 1, "name": "2025/26"}],
        "subjects": [{"id": 1, "code": "MATH", "school_type": "primary"}],
        "internship_types": [{"id": 1, "code": "SFP", "subject_specific": True}],
        "teachers": [
            {
                "id": 1,
                "zone": 1,
                "subjects": [{"subject": "MATH"}],
                "availabilities": [{"internship_type": "SFP", "status": "preferred"}],
            }
        ],
        "demands": [
            {"academic_year": 1, "internship_type": "SFP", "subject": "MATH", "required_teachers": 2}
        ],
    }


def test_load_example_snapshot():
    loader = SnapshotDataLoader(load_snapshot(str(EXAMPLE)))

    year = loader.find_academic_year(1)
    assert year.name == "2025/26"
    assert loader.find_academic_year(2).is_locked
    assert loader.find_academic_year(3) is None

    teachers = loader.load_available_teachers(1)
    assert [t.id for t in teachers] == [1, 2, 3, 4]
    assert teachers[3].credit_hour_balance == -1.0

    assert [t.code for t in loader.load_internship_types()] == ["SFP", "ZSP", "PDP1", "PDP2"]
    assert len(loader.load_internship_demands(1)) == 5
    assert loader.load_internship_demands(2) == []

    zones = loader.load_zone_constraints()
    assert sorted(zones) == [1, 2, 3]
    assert not any(c.is_allowed for c in zones[3] if c.internship_type_id in (1, 2))

    rules = loader.load_combination_rules()
    assert {r.second_type_id for r in rules[1]} == {2, 3, 4}

    qualifications = loader.load_teacher_qualifications()
    assert [q.is_main_subject for q in qualifications[1]] == [True, False]
    assert loader.load_teacher_exclusions(1)[4][0].subject_id == 2


def test_year_filter_on_link_rows():
    data = _minimal()
    data["teachers"][0]["subjects"] = [
        {"subject": "MATH", "academic_year": 1},
        {"subject": "MATH", "academic_year": 2, "status": "LIMITED"},
    ]
    loader = SnapshotDataLoader(parse_snapshot(data))

    links = loader.load_teacher_subjects(1)[1]
    assert [link.academic_year_id for link in links] == [1]
    # Rows without an academic year apply to every year.
    availability = loader.load_teacher_availabilities(2)[1][0]
    assert availability.status is AvailabilityStatus.PREFERRED


def test_subject_school_type_normalized():
    snapshot = parse_snapshot(_minimal())
    assert snapshot.subjects[0].school_type == "PRIMARY"
    assert snapshot.demands[0].required_teachers == 2


@pytest.mark.parametrize(
    "mutate, message",
    [
        (lambda d: d["demands"][0].update(subject="ART"), "Demand 1: unknown subject ART"),
        (lambda d: d["demands"][0].pop("required_teachers"), "Demand 1: missing required fields"),
        (lambda d: d["demands"][0].update(required_teachers=-1), "non-negative"),
        (lambda d: d["teachers"][0].update(zone=5), "Teacher 1"),
        (lambda d: d["teachers"][0].update(employment_status="SABBATICAL"), "Teacher 1"),
        (lambda d: d["subjects"].append({"id": 2, "code": "MATH"}), "duplicate subject code"),
        (lambda d: d["internship_types"][0].update(subject_specific="yes"), "subject_specific"),
        (lambda d: d.update(teachers={"id": 1}), "teachers must be a list"),
        (lambda d: d["academic_years"][0].update(id="one"), "Academic year 1: id must be an integer"),
        (
            lambda d: d["teachers"][0].update(credit_hour_balance="-1"),
            "Teacher 1: credit_hour_balance must be a number",
        ),
        (lambda d: d["teachers"].append({"id": 1, "zone": 2}), "Teacher 2: duplicate teacher id 1"),
    ],
)
def test_invalid_snapshot(mutate, message):
    data = _minimal()
    mutate(data)
    with pytest.raises(ValueError) as excinfo:
        parse_snapshot(data)
    assert message in str(excinfo.value)


def test_snapshot_must_be_mapping():
    with pytest.raises(ValueError):
        parse_snapshot(["not", "a", "mapping"])
