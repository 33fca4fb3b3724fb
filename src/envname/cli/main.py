"""envname CLI: validate and evaluate condition lists."""

from __future__ import annotations

import importlib
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

import click

try:
    from rich.console import Console
    from rich.markup import escape

    _console = Console(highlight=False)
    _err_console = Console(stderr=True, highlight=False)
except ImportError:
    raise ImportError("The CLI requires click and rich. " "Install them with: pip install envname[cli]")

from envname.errors import ConditionEvaluationError, InvalidArgumentError
from envname.evaluator import ConditionEvaluator

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TargetError(Exception):
    """TARGET could not be imported or is not a condition list."""


def _import_target(target: str) -> Any:
    """Resolve ``package.module:attribute`` to a Python object."""
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise TargetError(f"Target '{target}' must look like 'package.module:attribute'")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise TargetError(f"Cannot import module '{module_name}': {e}") from e

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise TargetError(f"Module '{module_name}' has no attribute '{attr_path}'") from e
    return obj


def _build_evaluator(target: str, default_value: Any, strict: bool) -> ConditionEvaluator:
    """Import TARGET and turn it into an evaluator.

    Raises TargetError for unusable targets and InvalidArgumentError for
    condition lists that fail validation.
    """
    obj = _import_target(target)
    if isinstance(obj, ConditionEvaluator):
        return obj
    if isinstance(obj, Sequence) and not isinstance(obj, str | bytes):
        return ConditionEvaluator(obj, default_value, strict=strict)
    raise TargetError(f"Target '{target}' is a {type(obj).__name__}, expected a condition list or ConditionEvaluator")


def _parse_context_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    ctx: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"'{pair}' is not KEY=VALUE", param_hint="--context")
        ctx[key] = value
    return ctx


def _parse_json_option(raw: str | None, option: str) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Invalid JSON: {e}", param_hint=option) from e


def _format_name(name: Any) -> str:
    return escape(name if isinstance(name, str) else repr(name))


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group(invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Select environment names from named conditions."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command()
def version() -> None:
    """Show the installed envname version."""
    from envname import __version__

    click.echo(f"envname {__version__}")


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("target")
@click.option("--strict", is_flag=True, default=False, help="Require 'check' to be a boolean or callable.")
def validate(target: str, strict: bool) -> None:
    """Validate the condition list at TARGET (package.module:attribute)."""
    try:
        evaluator = _build_evaluator(target, [], strict)
    except TargetError as e:
        _err_console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(2)
    except InvalidArgumentError as e:
        _err_console.print(f"[red]  {escape(target)} — {escape(str(e))}[/red]")
        sys.exit(1)

    counts: dict[str, int] = {}
    for cond in evaluator.compiled_conditions:
        counts[cond.kind] = counts.get(cond.kind, 0) + 1

    total = len(evaluator.conditions)
    breakdown = ", ".join(f"{v} {k}" for k, v in sorted(counts.items()))
    suffix = f" ({breakdown})" if breakdown else ""
    _console.print(f"[green]  {escape(target)}[/green] — {total} conditions{suffix}")
    sys.exit(0)


# ---------------------------------------------------------------------------
# evaluate
# ---------------------------------------------------------------------------


def _print_explain(report: Any) -> None:
    for c in report.conditions:
        if c.error is not None:
            _console.print(f"  [red]![/red] {_format_name(c.name)} [dim]({c.kind})[/dim] — {escape(c.error)}")
        elif c.matched:
            _console.print(f"  [green]✓[/green] {_format_name(c.name)} [dim]({c.kind})[/dim]")
        else:
            _console.print(f"  [dim]✗ {_format_name(c.name)} ({c.kind})[/dim]")


@cli.command()
@click.argument("target")
@click.option("--context", "-c", "pairs", multiple=True, help="Runtime context entry as KEY=VALUE. Repeatable.")
@click.option("--context-json", default=None, help="Runtime context as a JSON object.")
@click.option("--default", "default_json", default=None, help="Default value as JSON (condition lists only).")
@click.option("--strict", is_flag=True, default=False, help="Require 'check' to be a boolean or callable.")
@click.option("--explain", is_flag=True, default=False, help="Show the outcome of every condition.")
@click.option("--json", "json_output", is_flag=True, default=False, help="Output results as JSON.")
def evaluate(
    target: str,
    pairs: tuple[str, ...],
    context_json: str | None,
    default_json: str | None,
    strict: bool,
    explain: bool,
    json_output: bool,
) -> None:
    """Evaluate the conditions at TARGET and print the matches."""
    runtime = {} if context_json is None else _parse_json_option(context_json, "--context-json")
    if not isinstance(runtime, dict):
        _err_console.print("[red]--context-json must be a JSON object.[/red]")
        sys.exit(2)
    runtime = {**runtime, **_parse_context_pairs(pairs)}
    default_value = [] if default_json is None else _parse_json_option(default_json, "--default")

    try:
        evaluator = _build_evaluator(target, default_value, strict)
    except TargetError as e:
        _err_console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(2)
    except InvalidArgumentError as e:
        _err_console.print(f"[red]Invalid conditions: {escape(str(e))}[/red]")
        sys.exit(1)

    if explain:
        report = evaluator.explain(runtime)
        if json_output:
            payload = {
                "matched": not report.default_used,
                "result": report.result,
                "conditions": [
                    {"index": c.index, "name": c.name, "kind": c.kind, "matched": c.matched, "error": c.error}
                    for c in report.conditions
                ],
                "error": report.error,
            }
            click.echo(json.dumps(payload, indent=2, default=str))
        else:
            _print_explain(report)
            _console.print(f"  Conditions evaluated: {report.conditions_evaluated}")
        sys.exit(1 if report.error else 0)

    try:
        result = evaluator.evaluate(runtime)
    except ConditionEvaluationError as e:
        if json_output:
            click.echo(json.dumps({"error": str(e), "condition": e.condition_name}, indent=2, default=str))
        else:
            _err_console.print(f"[red bold]ERROR[/red bold] {escape(str(e))}")
        sys.exit(1)

    matched = result is not evaluator.default_value
    if json_output:
        click.echo(json.dumps({"matched": matched, "result": result}, indent=2, default=str))
    elif matched:
        for _, name in result:
            _console.print(f"  [green]✓[/green] {_format_name(name)}")
    else:
        _console.print(f"[yellow]No conditions matched.[/yellow] Default: {escape(repr(result))}")
    sys.exit(0)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
