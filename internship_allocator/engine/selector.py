from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..models import InternshipDemand, Teacher
from ..rules import HardRule, SoftRule, default_filter_rules, default_scoring_rules
from .context import AllocationContext

log = logging.getLogger(__name__)


class CandidateSelector:
    """Filter and rank teachers for a single demand.

    Hard rules are applied in order and a teacher is dropped at the first
    failing rule. Soft rules are summed into a score; ranking is a stable
    descending sort, so teachers with equal scores keep load order.
    """

    def __init__(
        self,
        filter_rules: Optional[Sequence[HardRule]] = None,
        scoring_rules: Optional[Sequence[SoftRule]] = None,
    ) -> None:
        self.filter_rules = list(filter_rules) if filter_rules is not None else default_filter_rules()
        self.scoring_rules = list(scoring_rules) if scoring_rules is not None else default_scoring_rules()

    def is_eligible(self, ctx: AllocationContext, teacher: Teacher, demand: InternshipDemand) -> bool:
        for rule in self.filter_rules:
            if not rule.applies(demand.internship_type):
                continue
            eligible, rationale = rule.evaluate(ctx, teacher, demand)
            if not eligible:
                log.debug("Rejected: %s", rationale)
                return False
        return True

    def find_candidates(self, ctx: AllocationContext, demand: InternshipDemand) -> List[Teacher]:
        return [t for t in ctx.teachers if self.is_eligible(ctx, t, demand)]

    def score(self, ctx: AllocationContext, teacher: Teacher, demand: InternshipDemand) -> float:
        total = 0.0
        for rule in self.scoring_rules:
            if rule.applies(demand.internship_type):
                value, _ = rule.evaluate(ctx, teacher, demand)
                total += value
        return total

    def rank(
        self, ctx: AllocationContext, demand: InternshipDemand, candidates: Sequence[Teacher]
    ) -> List[Teacher]:
        # Scores depend on the current counts, so compute them once per ranking.
        scores = {t.id: self.score(ctx, t, demand) for t in candidates}
        return sorted(candidates, key=lambda t: scores[t.id], reverse=True)
