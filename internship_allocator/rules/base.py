from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Sequence, Tuple

from internship_allocator.models import InternshipDemand, InternshipType, Teacher

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from internship_allocator.engine.context import AllocationContext


@dataclass
class Rule(ABC):
    """A named check a phase allocator runs on a teacher and a demand.

    ``applies_to`` holds internship type codes; an empty list means the
    rule is used in every phase. ``explain_exclude`` and ``explain_score``
    are ``str.format`` templates that receive ``teacher``, ``demand``,
    ``params`` and, for scoring rules, ``score``.
    """

    name: str
    priority: int
    applies_to: Sequence[str] = field(default_factory=list)
    params: Dict[str, Any] = field(default_factory=dict)
    explain_exclude: str | None = None
    explain_score: str | None = None

    def applies(self, internship_type: InternshipType) -> bool:
        return not self.applies_to or internship_type.code in self.applies_to

    def _explain(self, template: str, teacher: Teacher, demand: InternshipDemand, **extra: Any) -> str:
        return template.format(teacher=teacher, demand=demand, params=self.params, **extra)

    @abstractmethod
    def evaluate(
        self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand
    ) -> Tuple[Any, str]:
        """Return the rule's verdict for staffing ``demand`` with ``teacher``
        together with a human readable reason."""


@dataclass
class HardRule(Rule):
    """Eligibility filter: a teacher failing any hard rule is not a candidate."""

    def evaluate(
        self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand
    ) -> Tuple[bool, str]:
        if self.check(ctx, teacher, demand):
            return True, ""
        template = self.explain_exclude or f"{teacher.name} excluded by {self.name}"
        return False, self._explain(template, teacher, demand)

    @abstractmethod
    def check(self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand) -> bool:
        """Return ``True`` if the teacher may supervise the demanded internship
        given the assignments already recorded in ``ctx``."""


@dataclass
class SoftRule(Rule):
    """Ranking bonus: ``score`` returns 0 or 1, scaled by ``weight``."""

    weight: float = 1.0

    def evaluate(
        self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand
    ) -> Tuple[float, str]:
        score = self.score(ctx, teacher, demand) * self.weight
        template = self.explain_score or f"{self.name} adds {score:.2f}"
        return score, self._explain(template, teacher, demand, score=score)

    @abstractmethod
    def score(self, ctx: "AllocationContext", teacher: Teacher, demand: InternshipDemand) -> float:
        ...
