"""
CLI utilities for evaluating and inspecting flag definitions
"""

import json
import sys
from typing import Any, Dict, Optional, Tuple

import click
from pydantic import ValidationError
from tabulate import tabulate

from .dates import DATE_FORMATS, parse_date
from .evaluation import FlagEvaluator
from .models import EvaluationMode, Flag


def _load_json(path: str, what: str) -> Any:
    try:
        with open(path, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        click.echo(f"Error: {what} file not found: {path}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        click.echo(f"Error: Invalid JSON in {what} file: {e}")
        sys.exit(1)


def _build_context(context_file: Optional[str], context_pairs: Tuple[str, ...]) -> Dict[str, str]:
    """File attributes first, then -c pairs in the order given"""
    context: Dict[str, str] = {}

    if context_file:
        data = _load_json(context_file, 'context')
        if not isinstance(data, dict):
            click.echo("Error: Context file must contain a JSON object")
            sys.exit(1)
        context.update({str(k): str(v) for k, v in data.items()})

    for pair in context_pairs:
        name, sep, value = pair.partition('=')
        if not sep or not name:
            click.echo(f"Error: Context attribute must be name=value, got {pair!r}")
            sys.exit(1)
        context[name] = value

    return context


@click.group()
@click.version_option(version="1.0.0", prog_name="flaggate")
def main():
    """flaggate - feature flag rule evaluation"""
    pass


@main.command()
@click.argument('flag_file')
@click.option('--context', '-c', 'context_pairs', multiple=True, help='Context attribute as name=value (repeatable)')
@click.option('--context-file', help='JSON object of context attributes')
@click.option('--mode', type=click.Choice([m.value for m in EvaluationMode]), default=None,
              help='Evaluation mode (defaults to configured mode)')
@click.option('--correlation-id', default=None, help='Correlation id echoed on the response')
@click.option('--table', is_flag=True, help='Render the response as a table')
def evaluate(flag_file: str, context_pairs: Tuple[str, ...], context_file: Optional[str],
             mode: Optional[str], correlation_id: Optional[str], table: bool):
    """Evaluate a flag definition against a context"""
    flag_data = _load_json(flag_file, 'flag')
    context = _build_context(context_file, context_pairs)

    response = FlagEvaluator().evaluate(flag_data, context, correlation_id, mode)
    wire = response.to_wire()

    if table:
        condition = wire['meta']['condition']
        if isinstance(condition, list):
            condition = ', '.join(key or '-' for key in condition)
        rows = [
            ['match', wire['match']],
            ['reason', wire['reason']],
            ['segment', wire['meta']['segment']],
            ['condition', condition],
            ['time (ms)', wire['time']],
            ['correlationId', wire['correlationId']],
            ['responseId', wire['responseId']],
        ]
        click.echo(tabulate(rows, headers=['Field', 'Value'], tablefmt='simple'))
    else:
        click.echo(json.dumps(wire, indent=2))


@main.command(name='parse-date')
@click.argument('text')
def parse_date_command(text: str):
    """Show how a date string is normalized"""
    parsed = parse_date(text)
    if parsed is None:
        formats = ', '.join(f.name for f in DATE_FORMATS)
        click.echo(f"No date format matched {text!r} (tried: {formats})")
        sys.exit(1)

    click.echo(f"{parsed.value.isoformat()} ({parsed.format_name})")


@main.command()
@click.argument('flag_file')
def check(flag_file: str):
    """Validate a flag definition and list its conditions"""
    flag_data = _load_json(flag_file, 'flag')

    try:
        flag = Flag.model_validate(flag_data)
    except ValidationError as e:
        click.echo(f"Invalid flag definition:\n{e}")
        sys.exit(1)

    click.echo(f"Flag {flag.label}: status={'on' if flag.status else 'off'}")
    if flag.rules is None:
        click.echo("No rules defined")
        return

    rows = []
    for rule in flag.rules:
        segment = rule.segment
        if segment is None:
            rows.append(['-', '-', '-', '-', '-', '-', '-'])
            continue
        for condition in segment.conditions or []:
            rows.append([
                segment.key,
                segment.matching or 'any',
                condition.key,
                condition.context,
                condition.condition_type,
                condition.operator,
                condition.value,
            ])
        if not segment.conditions:
            rows.append([segment.key, segment.matching or 'any', '-', '-', '-', '-', '-'])

    click.echo(tabulate(
        rows,
        headers=['Segment', 'Matching', 'Condition', 'Context', 'Type', 'Operator', 'Value'],
        tablefmt='simple'
    ))


if __name__ == '__main__':
    main()
