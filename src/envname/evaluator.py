"""ConditionEvaluator: evaluate named conditions against a layered context."""

from __future__ import annotations

import logging
import numbers
from collections.abc import Collection, Mapping, Sequence
from typing import Any

from envname.context import EnvProvider, build_effective_context, is_record, os_environ_snapshot
from envname.errors import ConditionEvaluationError, InvalidArgumentError
from envname.evaluation import ConditionResult, EvaluationReport
from envname.otel import get_tracer
from envname.types import CompiledCondition, ConditionSpec, Match, PredicateCheck

logger = logging.getLogger(__name__)

# Sentinel so that None stays a legal default value.
_UNSET: Any = object()


def truthy(value: Any) -> bool:
    """Coerce a check result to bool.

    None, False, numeric zero, NaN and empty strings are false. Containers
    are true even when empty. Anything else uses bool().
    """
    if value is None or value is False:
        return False
    if isinstance(value, str | bytes | bytearray):
        return len(value) > 0
    if isinstance(value, numbers.Number):
        # value != value catches NaN
        return not (value == 0 or value != value)
    if isinstance(value, Collection):
        return True
    return bool(value)


def _holds(cond: CompiledCondition, ctx: Mapping[str, Any]) -> bool:
    """Run one compiled check and coerce it; failures carry the condition name."""
    try:
        if isinstance(cond.check, PredicateCheck):
            return truthy(cond.check.fn(ctx))
        return truthy(cond.check.value)
    except Exception as exc:
        raise ConditionEvaluationError(cond.name, exc) from exc


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str | bytes | bytearray)


def _to_spec(index: int, item: Any, strict: bool) -> ConditionSpec:
    if isinstance(item, ConditionSpec):
        spec = item
    else:
        if not isinstance(item, Mapping):
            raise InvalidArgumentError(f"Condition at index {index} must be an object")
        if "check" not in item:
            raise InvalidArgumentError(f"Condition at index {index} missing required property 'check'")
        if "name" not in item:
            raise InvalidArgumentError(f"Condition at index {index} missing required property 'name'")
        spec = ConditionSpec(check=item["check"], name=item["name"])

    if strict and not (isinstance(spec.check, bool) or callable(spec.check)):
        raise InvalidArgumentError(f"Condition at index {index} property 'check' must be a boolean or function")
    return spec


def validate_conditions(conditions: Any, *, strict: bool = False) -> tuple[ConditionSpec, ...]:
    """Validate a condition list, failing on the first bad entry.

    Entries may be ConditionSpec instances or mappings with ``check`` and
    ``name`` keys. Presence is checked, not truthiness.
    """
    if not _is_sequence(conditions):
        raise InvalidArgumentError("Conditions must be an array")
    return tuple(_to_spec(i, item, strict) for i, item in enumerate(conditions))


class ConditionEvaluator:
    """Evaluates a fixed, ordered list of named conditions.

    Context accumulates through with_context() and is layered under the
    per-call runtime context and over the process environment (exposed
    under ``env``). evaluate() returns ``[(True, name), ...]`` for every
    condition that holds, in input order, or the default value when none
    do.

    Instances are not thread-safe; use one per thread or serialize access.
    """

    def __init__(
        self,
        conditions: Sequence[ConditionSpec | Mapping[str, Any]] = (),
        default_value: Any = _UNSET,
        *,
        env_provider: EnvProvider | None = None,
        strict: bool = False,
    ):
        self._specs = validate_conditions(conditions, strict=strict)
        self._compiled = tuple(CompiledCondition.from_spec(i, s) for i, s in enumerate(self._specs))
        self._default_value = [] if default_value is _UNSET else default_value
        self._env_provider = env_provider or os_environ_snapshot
        self._strict = strict
        self._context: dict[str, Any] = {}
        self._tracer = get_tracer("envname.evaluator")

    def __repr__(self) -> str:
        return f"ConditionEvaluator(conditions={len(self._specs)}, context_keys={sorted(map(str, self._context))})"

    @property
    def conditions(self) -> tuple[ConditionSpec, ...]:
        return self._specs

    @property
    def compiled_conditions(self) -> tuple[CompiledCondition, ...]:
        return self._compiled

    @property
    def default_value(self) -> Any:
        return self._default_value

    @property
    def strict(self) -> bool:
        return self._strict

    # -- accumulated context ------------------------------------------------

    def with_context(self, ctx: Any = None) -> ConditionEvaluator:
        """Merge ``ctx`` into the accumulated context; its keys win.

        Non-mapping values are ignored. Returns self for chaining.
        """
        if is_record(ctx):
            self._context = {**self._context, **ctx}
        elif ctx is not None:
            logger.debug("Ignoring non-mapping context of type %s", type(ctx).__name__)
        return self

    def reset_context(self) -> ConditionEvaluator:
        """Clear the accumulated context. Returns self for chaining."""
        self._context = {}
        return self

    def get_context(self) -> dict[str, Any]:
        """Return a shallow copy of the accumulated context."""
        return dict(self._context)

    def fork(self) -> ConditionEvaluator:
        """Independent evaluator with the same conditions and a copy of the context."""
        clone = ConditionEvaluator(
            self._specs,
            self._default_value,
            env_provider=self._env_provider,
            strict=self._strict,
        )
        clone._context = dict(self._context)
        return clone

    # -- evaluation ---------------------------------------------------------

    def _effective_context(self, runtime_context: Any) -> dict[str, Any]:
        if runtime_context is not None and not is_record(runtime_context):
            logger.debug("Ignoring non-mapping runtime context of type %s", type(runtime_context).__name__)
            runtime_context = None
        return build_effective_context(self._env_provider(), self._context, runtime_context)

    def evaluate(self, runtime_context: Mapping[str, Any] | None = None) -> list[Match] | Any:
        """Return ``(True, name)`` for each holding condition, or the default value.

        Raises:
            ConditionEvaluationError: If a predicate raises, or a check
                value cannot be coerced. No partial result is returned.
        """
        ctx = self._effective_context(runtime_context)

        with self._tracer.start_as_current_span("envname.evaluate") as span:
            span.set_attribute("envname.conditions.count", len(self._compiled))
            matches: list[Match] = []

            for cond in self._compiled:
                if _holds(cond, ctx):
                    matches.append((True, cond.name))

            span.set_attribute("envname.matches.count", len(matches))
            span.set_attribute("envname.default_used", not matches)

        logger.debug(
            "Evaluated %d condition(s): %d match(es)%s",
            len(self._compiled),
            len(matches),
            "" if matches else ", default used",
        )
        return matches if matches else self._default_value

    def explain(self, runtime_context: Mapping[str, Any] | None = None) -> EvaluationReport:
        """Dry-run every condition and report each outcome.

        Unlike evaluate(), condition failures are recorded per condition
        rather than raised, and evaluation continues past them.
        """
        ctx = self._effective_context(runtime_context)

        with self._tracer.start_as_current_span("envname.explain") as span:
            span.set_attribute("envname.conditions.count", len(self._compiled))
            results: list[ConditionResult] = []
            matches: list[Match] = []

            for cond in self._compiled:
                error: str | None = None
                try:
                    matched = _holds(cond, ctx)
                except ConditionEvaluationError as exc:
                    matched = False
                    error = str(exc)
                    span.add_event("envname.condition_error", {"envname.condition": str(cond.name)})

                results.append(ConditionResult(cond.index, cond.name, cond.kind, matched, error))
                if matched:
                    matches.append((True, cond.name))

            has_error = any(r.error is not None for r in results)
            span.set_attribute("envname.matches.count", len(matches))
            span.set_attribute("envname.default_used", not matches)

        return EvaluationReport(
            result=matches if matches else self._default_value,
            matches=matches,
            conditions=results,
            default_used=not matches,
            conditions_evaluated=len(results),
            error=has_error,
        )


def create_builder(
    conditions: Sequence[ConditionSpec | Mapping[str, Any]] = (),
    default_value: Any = _UNSET,
    **options: Any,
) -> ConditionEvaluator:
    """Functional entry point; see ConditionEvaluator."""
    return ConditionEvaluator(conditions, default_value, **options)
