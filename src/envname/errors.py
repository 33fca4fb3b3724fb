"""Exception hierarchy for envname."""

from __future__ import annotations

from typing import Any


class EnvNameError(Exception):
    """Base class for all envname errors."""


class InvalidArgumentError(EnvNameError, ValueError):
    """Raised at construction when the condition list has the wrong shape."""


class ConditionEvaluationError(EnvNameError):
    """Raised by evaluate() when a predicate check fails.

    The failing condition's name is kept in ``condition_name`` and the
    underlying exception in ``original`` (also chained as ``__cause__``).
    """

    def __init__(self, condition_name: Any, original: BaseException):
        self.condition_name = condition_name
        self.original = original
        super().__init__(f"Error evaluating condition '{condition_name}': {original}")
