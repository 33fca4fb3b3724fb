"""Tests for dry-run evaluation via ConditionEvaluator.explain()."""

from __future__ import annotations

from envname import ConditionResult, EvaluationReport


def _boom(ctx):
    raise RuntimeError("kaboom")


class TestExplain:
    def test_per_condition_results(self, make_evaluator):
        evaluator = make_evaluator(
            [
                {"check": True, "name": "static-on"},
                {"check": lambda ctx: ctx.get("tier") == "premium", "name": "premium"},
                {"check": 0, "name": "static-off"},
            ]
        )
        report = evaluator.explain({"tier": "premium"})
        assert isinstance(report, EvaluationReport)
        assert report.conditions == [
            ConditionResult(0, "static-on", "static", True),
            ConditionResult(1, "premium", "predicate", True),
            ConditionResult(2, "static-off", "static", False),
        ]
        assert report.matches == [(True, "static-on"), (True, "premium")]
        assert report.result == report.matches
        assert report.matched_names == ["static-on", "premium"]
        assert report.conditions_evaluated == 3
        assert report.default_used is False
        assert report.error is False

    def test_matches_evaluate(self, make_evaluator):
        evaluator = make_evaluator(
            [{"check": lambda ctx: ctx["env"]["NODE_ENV"] == "test", "name": "t"}, {"check": "", "name": "e"}]
        )
        assert evaluator.explain().result == evaluator.evaluate()

    def test_records_errors_and_continues(self, make_evaluator):
        evaluator = make_evaluator(
            [
                {"check": _boom, "name": "broken"},
                {"check": True, "name": "after"},
            ]
        )
        report = evaluator.explain()
        assert report.error is True
        assert report.conditions[0].matched is False
        assert report.conditions[0].error == "Error evaluating condition 'broken': kaboom"
        assert report.errors == [report.conditions[0]]
        assert report.matches == [(True, "after")]

    def test_default_used(self, make_evaluator):
        default = {"name": "fallback"}
        report = make_evaluator([{"check": False, "name": "no"}], default).explain()
        assert report.default_used is True
        assert report.result is default
        assert report.matches == []

    def test_does_not_mutate_context(self, make_evaluator):
        evaluator = make_evaluator([{"check": _boom, "name": "broken"}]).with_context({"a": 1})
        evaluator.explain({"b": 2})
        assert evaluator.get_context() == {"a": 1}

    def test_records_static_coercion_errors(self, make_evaluator):
        class Ambiguous:
            def __bool__(self):
                raise ValueError("truth value is ambiguous")

        report = make_evaluator([{"check": Ambiguous(), "name": "amb"}, {"check": 1, "name": "one"}]).explain()
        assert report.error is True
        assert report.conditions[0] == ConditionResult(
            0, "amb", "static", False, "Error evaluating condition 'amb': truth value is ambiguous"
        )
        assert report.matches == [(True, "one")]
