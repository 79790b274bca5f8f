import logging
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))
sys.path.append(str(Path(__file__).resolve().parent))

from factories import BIO, GER, MATH, PDP1, PDP2, SFP, ZSP, ScenarioBuilder

from internship_allocator.engine.assignments import SURPLUS_NOTE, AssignmentWriter
from internship_allocator.engine.surplus import SURPLUS_ATTEMPT_LIMIT, SurplusReallocator
from internship_allocator.io.memory_store import InMemoryPlanStore


class CountingReallocator(SurplusReallocator):
    def __init__(self, writer):
        super().__init__(writer)
        self.zone3_attempts = 0

    def attempt_zone3_assignment(self, ctx, teacher):
        self.zone3_attempts += 1
        return super().attempt_zone3_assignment(ctx, teacher)


def _reallocator(store, cls=SurplusReallocator):
    plan = store.add_plan(1, "Test plan", "1.0")
    return cls(AssignmentWriter(store, plan))


def test_zone3_gives_up_after_first_failed_round(caplog):
    builder = ScenarioBuilder()
    teacher = builder.teacher(1, zone=3, school_type="MIDDLE", subjects=[BIO])
    builder.deny_combination(SFP, PDP1)
    builder.deny_combination(SFP, PDP2)
    ctx = builder.context()
    ctx.record_assignment(teacher, SFP, BIO)
    store = InMemoryPlanStore()
    reallocator = _reallocator(store, CountingReallocator)

    with caplog.at_level(logging.WARNING):
        created = reallocator.reallocate(ctx)

    assert created == 0
    assert ctx.get_assignment_count(teacher) == 1
    assert reallocator.zone3_attempts == 1
    assert SURPLUS_ATTEMPT_LIMIT == 10
    assert caplog.text.count("Cannot force assignment for teacher 1") == 1


def test_standard_zone_tries_midweek_types_first():
    builder = ScenarioBuilder()
    teacher = builder.teacher(1, zone=2, subjects=[MATH])
    ctx = builder.context()
    store = InMemoryPlanStore()

    created = _reallocator(store).reallocate(ctx)

    assert created == 2
    assert [(a.internship_type_code, a.subject_code) for a in store.assignments] == [
        ("ZSP", "MATH"),
        ("SFP", "MATH"),
    ]
    assert all(a.note == SURPLUS_NOTE for a in store.assignments)
    assert ctx.get_assignment_count(teacher) == 2


def test_zone3_uses_block_internships_and_fallback_subject():
    builder = ScenarioBuilder()
    teacher = builder.teacher(1, zone=3, school_type="MIDDLE")
    ctx = builder.context()
    store = InMemoryPlanStore()

    _reallocator(store).reallocate(ctx)

    assert [(a.internship_type_code, a.subject_code) for a in store.assignments] == [
        ("PDP1", "BIO"),
        ("PDP2", "BIO"),
    ]
    assert ctx.get_assignment_count(teacher) == 2


def test_surplus_ignores_demand_but_not_zone():
    builder = ScenarioBuilder()
    builder.teacher(1, zone=1, subjects=[GER], available=[])
    builder.deny_zone(1, ZSP)
    ctx = builder.context()
    store = InMemoryPlanStore()

    _reallocator(store).reallocate(ctx)

    assert [(a.internship_type_code, a.subject_code) for a in store.assignments] == [
        ("SFP", "GER"),
        ("SFP", "MATH"),
    ]


def test_teacher_owing_hours_is_filled_to_maximum():
    builder = ScenarioBuilder()
    teacher = builder.teacher(1, zone=1, subjects=[MATH, GER], credit_hour_balance=-1)
    ctx = builder.context()
    store = InMemoryPlanStore()

    created = _reallocator(store).reallocate(ctx)

    assert created == 3
    assert ctx.get_assignment_count(teacher) == 3


def test_teachers_at_target_are_left_alone():
    builder = ScenarioBuilder()
    teacher = builder.teacher(1, zone=1, subjects=[MATH])
    ctx = builder.context()
    ctx.record_assignment(teacher, SFP, MATH)
    ctx.record_assignment(teacher, ZSP, MATH)
    store = InMemoryPlanStore()

    assert _reallocator(store).reallocate(ctx) == 0
    assert store.assignments == []


def test_best_subject_skips_held_pairs():
    builder = ScenarioBuilder()
    teacher = builder.teacher(1, zone=1, subjects=[MATH, GER])
    ctx = builder.context()
    reallocator = _reallocator(InMemoryPlanStore())

    assert reallocator.find_best_subject_for_surplus(ctx, teacher, ZSP) == MATH
    ctx.record_assignment(teacher, ZSP, MATH)
    assert reallocator.find_best_subject_for_surplus(ctx, teacher, ZSP) == GER
    ctx.record_assignment(teacher, ZSP, GER)
    # Fallback for PRIMARY is MATH, already held.
    assert reallocator.find_best_subject_for_surplus(ctx, teacher, ZSP) is None
    assert not reallocator.try_force_assign(ctx, teacher, None)
