"""Condition model: user-facing specs and the compiled check variants."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

# A single match entry: always (True, name).
Match = tuple[bool, Any]

Predicate = Callable[[Mapping[str, Any]], Any]


@dataclass(frozen=True)
class ConditionSpec:
    """A named check.

    ``check`` is either a static value (coerced by truthiness) or a
    callable taking the effective context. ``name`` is opaque and need
    not be unique.
    """

    check: Any
    name: Any


@dataclass(frozen=True)
class StaticCheck:
    value: Any


@dataclass(frozen=True)
class PredicateCheck:
    fn: Predicate


Check = StaticCheck | PredicateCheck


@dataclass(frozen=True)
class CompiledCondition:
    """Validated condition held by an evaluator.

    The check variant is chosen once, at construction.
    """

    index: int
    name: Any
    check: Check

    @property
    def kind(self) -> str:
        return "predicate" if isinstance(self.check, PredicateCheck) else "static"

    @classmethod
    def from_spec(cls, index: int, spec: ConditionSpec) -> CompiledCondition:
        if callable(spec.check):
            return cls(index, spec.name, PredicateCheck(spec.check))
        return cls(index, spec.name, StaticCheck(spec.check))
