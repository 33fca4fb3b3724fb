"""envname: pick an environment identifier from named conditions."""

from __future__ import annotations

from importlib.metadata import version as _pkg_version

try:
    __version__ = _pkg_version("envname")
except Exception:  # pragma: no cover: editable installs, test envs
    __version__ = "0.0.0-dev"

from envname.context import ENV_KEY, build_effective_context, os_environ_snapshot, static_env
from envname.errors import ConditionEvaluationError, EnvNameError, InvalidArgumentError
from envname.evaluation import ConditionResult, EvaluationReport
from envname.evaluator import ConditionEvaluator, create_builder, truthy, validate_conditions
from envname.otel import configure_otel, get_tracer, has_otel
from envname.types import CompiledCondition, ConditionSpec, Match, PredicateCheck, StaticCheck

__all__ = [
    "__version__",
    "ConditionEvaluator",
    "create_builder",
    "validate_conditions",
    "truthy",
    "ConditionSpec",
    "CompiledCondition",
    "StaticCheck",
    "PredicateCheck",
    "Match",
    "ENV_KEY",
    "build_effective_context",
    "os_environ_snapshot",
    "static_env",
    "EnvNameError",
    "InvalidArgumentError",
    "ConditionEvaluationError",
    "ConditionResult",
    "EvaluationReport",
    "configure_otel",
    "get_tracer",
    "has_otel",
]
