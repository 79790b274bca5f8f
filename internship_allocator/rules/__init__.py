"""Selection rules for internship_allocator."""
from __future__ import annotations

from typing import List

from .base import HardRule, Rule, SoftRule
from .library import (
    AllowedZoneRule,
    AvailabilityRule,
    CombinationCompatibleRule,
    FirstAssignmentRule,
    MainSubjectRule,
    NotExcludedRule,
    NotFullyBookedRule,
    SubjectQualificationRule,
    ZonePreferenceRule,
)

MIDWEEK_TYPE_CODES = ("ZSP", "SFP")
MAIN_SUBJECT_BONUS = 10
MIDWEEK_ZONE_BONUS = 5
FIRST_ASSIGNMENT_BONUS = 50


def default_filter_rules() -> List[HardRule]:
    """Return the eligibility pipeline in evaluation order."""
    return [
        NotFullyBookedRule(
            name=NotFullyBookedRule.slug,
            priority=1,
            explain_exclude="{teacher.name} is fully booked",
        ),
        SubjectQualificationRule(
            name=SubjectQualificationRule.slug,
            priority=2,
            explain_exclude="{teacher.name} is not qualified for {demand.subject.code}",
        ),
        NotExcludedRule(
            name=NotExcludedRule.slug,
            priority=3,
            explain_exclude="{teacher.name} is excluded from {demand.subject.code}",
        ),
        AvailabilityRule(
            name=AvailabilityRule.slug,
            priority=4,
            explain_exclude="{teacher.name} is not available for {demand.internship_type.code}",
        ),
        AllowedZoneRule(
            name=AllowedZoneRule.slug,
            priority=5,
            explain_exclude="Zone {teacher.zone} is not allowed for {demand.internship_type.code}",
        ),
        CombinationCompatibleRule(
            name=CombinationCompatibleRule.slug,
            priority=6,
            explain_exclude="{demand.internship_type.code} does not combine with assignments of {teacher.name}",
        ),
    ]


def default_scoring_rules() -> List[SoftRule]:
    """Return the fixed scoring bonuses used by the phase allocators."""
    return [
        MainSubjectRule(
            name=MainSubjectRule.slug,
            priority=1,
            weight=MAIN_SUBJECT_BONUS,
            explain_score="{teacher.name} teaches {demand.subject.code} as main subject",
        ),
        ZonePreferenceRule(
            name=ZonePreferenceRule.slug,
            priority=2,
            weight=MIDWEEK_ZONE_BONUS,
            applies_to=list(MIDWEEK_TYPE_CODES),
            params={"zone": 1},
        ),
        FirstAssignmentRule(
            name=FirstAssignmentRule.slug,
            priority=3,
            weight=FIRST_ASSIGNMENT_BONUS,
        ),
    ]


__all__ = [
    "Rule",
    "HardRule",
    "SoftRule",
    "AllowedZoneRule",
    "AvailabilityRule",
    "CombinationCompatibleRule",
    "FirstAssignmentRule",
    "MainSubjectRule",
    "NotExcludedRule",
    "NotFullyBookedRule",
    "SubjectQualificationRule",
    "ZonePreferenceRule",
    "default_filter_rules",
    "default_scoring_rules",
]
