import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))
sys.path.append(str(Path(__file__).resolve().parent))

from factories import BIO, GER, MATH, PDP1, SFP, ZSP, ScenarioBuilder

from internship_allocator.models import AllocationParameters, Subject


def test_record_assignment_is_idempotent():
    builder = ScenarioBuilder()
    teacher = builder.teacher(1, subjects=[MATH])
    ctx = builder.context()

    assert ctx.record_assignment(teacher, SFP, MATH)
    assert not ctx.record_assignment(teacher, SFP, MATH)
    assert ctx.record_assignment(teacher, SFP, GER)

    assert ctx.get_assignment_count(teacher) == 2
    assert [t.code for t in ctx.get_assigned_types(teacher)] == ["SFP", "SFP"]
    assert ctx.has_assignment(teacher, SFP, MATH)
    assert not ctx.has_assignment(teacher, ZSP, MATH)
    assert ctx.total_assignments_created == 2


def test_count_matches_history_length():
    builder = ScenarioBuilder()
    teacher = builder.teacher(1, subjects=[MATH, GER])
    ctx = builder.context()

    for itype, subject in [(SFP, MATH), (ZSP, MATH), (ZSP, MATH), (PDP1, GER)]:
        ctx.record_assignment(teacher, itype, subject)
    assert ctx.get_assignment_count(teacher) == len(ctx.get_assigned_types(teacher)) == 3


def test_target_and_fully_booked():
    builder = ScenarioBuilder()
    regular = builder.teacher(1, subjects=[MATH])
    owing = builder.teacher(2, subjects=[MATH], credit_hour_balance=-2.0)
    ahead = builder.teacher(3, subjects=[MATH], credit_hour_balance=1.5)
    ctx = builder.context()

    assert ctx.get_target_assignments(regular) == 2
    assert ctx.get_target_assignments(owing) == 3
    assert ctx.get_target_assignments(ahead) == 2

    for itype in (SFP, ZSP):
        ctx.record_assignment(regular, itype, MATH)
    assert not ctx.is_teacher_fully_booked(regular)
    ctx.record_assignment(regular, PDP1, MATH)
    assert ctx.is_teacher_fully_booked(regular)


def test_scarcity_counts_every_subject_link():
    builder = ScenarioBuilder()
    builder.teacher(1, subjects=[MATH, GER])
    builder.teacher(2, subjects=[MATH], status="NOT_AVAILABLE")
    builder.teacher(3, subjects=[MATH], employment_status="RETIRED")
    ctx = builder.context()
    ctx.calculate_scarcity_metrics()

    assert ctx.get_candidate_count_for_subject(MATH.id) == 2
    assert ctx.get_candidate_count_for_subject(GER.id) == 1
    assert ctx.get_candidate_count_for_subject(BIO.id) == 0


def test_demands_by_type_keep_load_order():
    builder = ScenarioBuilder()
    first = builder.demand(SFP, MATH, 1)
    builder.demand(ZSP, MATH, 1)
    second = builder.demand(SFP, GER, 2)
    ctx = builder.context()

    demands = ctx.get_demands_by_type(SFP)
    assert demands == [first, second]
    demands.clear()
    assert len(ctx.get_demands_by_type(SFP)) == 2
    assert ctx.get_internship_type("PDP2").code == "PDP2"
    assert ctx.get_internship_type("XYZ") is None


def test_fallback_subject_resolution():
    art = Subject(9, "ART", school_type="PRIMARY")
    params = AllocationParameters(fallback_subjects={"primary": "ART", "MIDDLE": "NOPE"})
    builder = ScenarioBuilder(params=params, subjects=(MATH, GER, BIO, art))
    ctx = builder.context()

    assert ctx.get_fallback_subject("primary") == art
    # Unknown configured code falls back to the first subject of that school type.
    assert ctx.get_fallback_subject("MIDDLE") == BIO
    assert ctx.get_fallback_subject("GYMNASIUM") is None


def test_underutilized_teachers():
    builder = ScenarioBuilder()
    busy = builder.teacher(1, subjects=[MATH])
    idle = builder.teacher(2, subjects=[MATH])
    ctx = builder.context()
    ctx.record_assignment(busy, SFP, MATH)
    ctx.record_assignment(busy, ZSP, MATH)

    assert list(ctx.underutilized_teachers()) == [idle]
