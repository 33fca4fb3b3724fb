"""Behavior tests: context precedence, ordering and idempotence."""

from __future__ import annotations

from envname import ConditionEvaluator, static_env


def _tier_is(expected):
    return lambda ctx: ctx.get("tier") == expected


def _resolve(ctx):
    """Predicate-side helper: runtime/accumulated key first, then env var."""
    return ctx.get("k", ctx["env"].get("k"))


class TestPrecedence:
    def test_runtime_over_accumulated(self):
        builder = ConditionEvaluator([{"check": _tier_is("premium"), "name": "p"}]).with_context({"tier": "basic"})
        assert builder.evaluate({"tier": "premium"}) == [(True, "p")]

    def test_runtime_then_accumulated_then_env(self):
        seen = []

        def record(ctx):
            seen.append(_resolve(ctx))
            return True

        evaluator = ConditionEvaluator(
            [{"check": record, "name": "r"}],
            env_provider=lambda: {"k": "from-env"},
        )
        evaluator.with_context({"k": "accumulated"})
        evaluator.evaluate({"k": "runtime"})
        evaluator.evaluate()
        evaluator.reset_context()
        evaluator.evaluate()
        assert seen == ["runtime", "accumulated", "from-env"]

    def test_env_key_layering(self):
        values = []

        def record(ctx):
            values.append(ctx["env"])
            return True

        evaluator = ConditionEvaluator([{"check": record, "name": "r"}], env_provider=static_env({"k": "env"}))
        evaluator.evaluate()
        evaluator.with_context({"env": {"k": "accumulated"}}).evaluate()
        evaluator.evaluate({"env": {"k": "runtime"}})
        evaluator.reset_context().evaluate()
        assert values == [{"k": "env"}, {"k": "accumulated"}, {"k": "runtime"}, {"k": "env"}]

    def test_all_layers_together(self):
        evaluator = ConditionEvaluator(
            [
                {"check": lambda ctx: ctx["env"]["STAGE"] == "prod", "name": "prod"},
                {"check": lambda ctx: ctx.get("region") == "eu", "name": "eu"},
                {"check": lambda ctx: ctx.get("canary") is True, "name": "canary"},
                {"check": lambda ctx: ctx.get("region") == "us", "name": "us"},
            ],
            env_provider=static_env({"STAGE": "prod"}),
        )
        evaluator.with_context({"region": "eu"})
        assert evaluator.evaluate({"canary": True}) == [(True, "prod"), (True, "eu"), (True, "canary")]


class TestOrderingAndIdempotence:
    def test_order_preserved(self):
        names = [f"c{i}" for i in range(10)]
        conditions = [{"check": i % 3 != 0, "name": n} for i, n in enumerate(names)]
        result = ConditionEvaluator(conditions, env_provider=static_env({})).evaluate()
        assert [n for _, n in result] == [n for i, n in enumerate(names) if i % 3 != 0]
        assert all(flag is True for flag, _ in result)

    def test_repeat_evaluation_identical(self):
        evaluator = ConditionEvaluator(
            [{"check": _tier_is("premium"), "name": "p"}, {"check": True, "name": "always"}],
            env_provider=static_env({"A": "1"}),
        ).with_context({"tier": "premium"})
        first = evaluator.evaluate({"x": 1})
        second = evaluator.evaluate({"x": 1})
        assert first == second == [(True, "p"), (True, "always")]

    def test_real_world_routing(self):
        builder = ConditionEvaluator(
            [
                {"check": lambda ctx: ctx["env"].get("CI") == "true", "name": "ci"},
                {"check": lambda ctx: ctx.get("branch", "").startswith("release/"), "name": "release"},
                {"check": lambda ctx: ctx.get("branch") == "main", "name": "main"},
                {"check": lambda ctx: bool(ctx.get("pr")), "name": "preview"},
            ],
            [(True, "local")],
            env_provider=static_env({"CI": "true"}),
        )
        assert builder.evaluate({"branch": "main"}) == [(True, "ci"), (True, "main")]
        assert builder.evaluate({"branch": "feature/x", "pr": 12}) == [(True, "ci"), (True, "preview")]

        local = ConditionEvaluator(builder.conditions, [(True, "local")], env_provider=static_env({}))
        assert local.evaluate({"branch": "feature/x"}) == [(True, "local")]
