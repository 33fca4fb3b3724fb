"""Result dataclasses for dry-run condition evaluation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from envname.types import Match


@dataclass(frozen=True)
class ConditionResult:
    """Outcome of a single condition during explain()."""

    index: int
    name: Any
    kind: str  # "static" | "predicate"
    matched: bool
    error: str | None = None


@dataclass(frozen=True)
class EvaluationReport:
    """Per-condition breakdown of an evaluation.

    ``result`` is what evaluate() returns for the same context, except
    that failing predicates are recorded here instead of raised.
    """

    result: Any
    matches: list[Match] = field(default_factory=list)
    conditions: list[ConditionResult] = field(default_factory=list)
    default_used: bool = False
    conditions_evaluated: int = 0
    error: bool = False

    @property
    def matched_names(self) -> list[Any]:
        return [name for _, name in self.matches]

    @property
    def errors(self) -> list[ConditionResult]:
        return [c for c in self.conditions if c.error is not None]
