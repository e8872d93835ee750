"""taskflow evaluate -- dry-run rules against a task change, no database."""

from __future__ import annotations

import click


@click.command()
@click.option("--new", "new_file", required=True, type=click.Path(allow_dash=True), help="JSON task after the change.")
@click.option("--old", "old_file", default=None, type=click.Path(allow_dash=True), help="JSON task before the change (omit for a new task).")
@click.option("--rules", "rules_file", required=True, type=click.Path(allow_dash=True), help="JSON list of rules.")
@click.option("--json", "as_json", is_flag=True, help="Print the resulting task as JSON.")
@click.pass_context
def evaluate(
    ctx: click.Context,
    new_file: str,
    old_file: str | None,
    rules_file: str,
    as_json: bool,
) -> None:
    """Run RULES against the OLD -> NEW task change and show what would fire.

    Rules are read leniently, the way stored rules are: entries the engine
    does not understand are ignored rather than rejected.
    """
    import json

    from taskflow.automation.engine import execute_automation_rules
    from taskflow.cli import _load_json
    from taskflow.cli.formatting import format_error, format_evaluation, get_console
    from taskflow.models.rule import AutomationRule
    from taskflow.models.task import Task

    console = get_console()
    try:
        new_task = Task.model_validate(_load_json(new_file))
        old_task = Task.model_validate(_load_json(old_file)) if old_file else None

        raw_rules = _load_json(rules_file)
        if isinstance(raw_rules, dict):
            raw_rules = [raw_rules]
        if not isinstance(raw_rules, list):
            raise click.UsageError("Rules file must contain an object or a list of objects.")
        rules = [r for r in map(AutomationRule.from_untrusted, raw_rules) if r is not None]

        result = execute_automation_rules(old_task, new_task, rules)
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    if as_json:
        click.echo(json.dumps(result.task.to_wire(), indent=2))
    else:
        format_evaluation(result, console)
