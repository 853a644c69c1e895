"""``chainvet suggest``: Recommend audits and exemption cleanups.

Runs the same resolution as ``check`` and prints only what the user
should do next: the delta (or full) audit that would certify each
uncertifiable package, and the exemptions that are no longer needed.

Exit Codes:
    0: Recommendations printed.
    2: The store, graph, or configuration could not be used.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from chainvet.cli.check_cmd import fail, graph_option, run_resolution, store_option
from chainvet.exceptions import ChainVetError


@click.command("suggest")
@store_option
@graph_option
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def suggest_command(store_dir: Path, graph_path: Path, output_format: str) -> None:
    """Suggest audits to perform and exemptions to remove."""
    try:
        report = run_resolution(store_dir, graph_path)
    except ChainVetError as exc:
        fail(str(exc), output_format)
        return

    if output_format == "json":
        click.echo(json.dumps(report.to_dict()["recommendations"], indent=2, sort_keys=True))
    else:
        from chainvet.cli.output import print_recommendations
        print_recommendations(report)

    sys.exit(0)
