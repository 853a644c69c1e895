"""``chainvet criteria``: List criteria and their implication closures."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from chainvet.cli.check_cmd import fail, store_option
from chainvet.exceptions import ChainVetError
from chainvet.store import Store


@click.command("criteria")
@store_option
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def criteria_command(store_dir: Path, output_format: str) -> None:
    """Show every criteria (local and imported) with what it implies."""
    try:
        criteria = Store(store_dir).load().criteria
    except ChainVetError as exc:
        fail(str(exc), output_format)
        return

    closures = criteria.describe()
    defaults = criteria.defaults()
    if output_format == "json":
        data = {
            name: {
                "default": name in defaults,
                "implies": sorted(closure - {name}),
            }
            for name, closure in closures.items()
        }
        click.echo(json.dumps(data, indent=2, sort_keys=True))
    else:
        from chainvet.cli.output import print_criteria
        print_criteria(closures, defaults)

    sys.exit(0)
