"""Shared test fixtures."""

from __future__ import annotations

import pytest

from envname import ConditionEvaluator, static_env


@pytest.fixture
def env():
    return {"NODE_ENV": "test", "REGION": "eu-west-1"}


@pytest.fixture
def env_provider(env):
    return static_env(env)


@pytest.fixture
def make_evaluator(env_provider):
    """Build evaluators pinned to the fixed ``env`` snapshot."""

    def _make(conditions=(), *args, **kwargs):
        kwargs.setdefault("env_provider", env_provider)
        return ConditionEvaluator(conditions, *args, **kwargs)

    return _make
