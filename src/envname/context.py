"""Effective context layering: env < accumulated < runtime."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from typing import Any

ENV_KEY = "env"

EnvProvider = Callable[[], Mapping[str, str]]


def os_environ_snapshot() -> dict[str, str]:
    """Read the process environment. Called once per evaluation."""
    return dict(os.environ)


def static_env(values: Mapping[str, str]) -> EnvProvider:
    """Provider returning a fixed environment snapshot.

    Lets callers (and tests) pin the ``env`` layer without touching
    ``os.environ``.
    """
    frozen = dict(values)

    def _provider() -> dict[str, str]:
        return dict(frozen)

    return _provider


def is_record(value: Any) -> bool:
    return isinstance(value, Mapping)


def build_effective_context(
    env: Mapping[str, str],
    accumulated: Mapping[str, Any],
    runtime: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Shallow-merge the three context layers into a new dict.

    Higher layers replace whole keys, including ``env`` itself.
    """
    ctx: dict[str, Any] = {ENV_KEY: env}
    ctx.update(accumulated)
    if runtime:
        ctx.update(runtime)
    return ctx
