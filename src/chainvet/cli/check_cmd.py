"""``chainvet check``: Resolve every package in use to a verdict.

Loads the audit store and the dependency graph, runs the resolution
engine, and renders the report as a Rich table or deterministic JSON.

Exit Codes:
    0: Every package is CERTIFIED or EXEMPTED.
    1: At least one package is UNCERTIFIABLE or FORBIDDEN.
    2: The store, graph, or configuration could not be used.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from chainvet.core.resolver import Report, resolve
from chainvet.exceptions import ChainVetError
from chainvet.store import DEFAULT_STORE_DIR, Store, load_graph


def store_option(func):
    """Shared ``--store`` option."""
    return click.option(
        "--store", "store_dir",
        type=click.Path(file_okay=False, path_type=Path),
        default=DEFAULT_STORE_DIR,
        show_default=True,
        help="Audit store directory.",
    )(func)


def graph_option(func):
    """Shared ``--graph`` option."""
    return click.option(
        "--graph", "graph_path",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        required=True,
        help="Resolved dependency graph (JSON or YAML).",
    )(func)


def run_resolution(store_dir: Path, graph_path: Path, jobs: int | None = None) -> Report:
    """Load both inputs and resolve them.

    Raises:
        ChainVetError: On any store, graph, or configuration problem.
    """
    loaded = Store(store_dir).load()
    graph = load_graph(graph_path)
    return resolve(
        graph,
        loaded.index,
        loaded.criteria,
        loaded.policies,
        max_workers=jobs,
    )


def fail(message: str, output_format: str = "text") -> None:
    """Report a fatal error and exit with code 2."""
    if output_format == "json":
        click.echo(json.dumps({"error": message}))
    else:
        click.echo(f"Error: {message}")
    sys.exit(2)


@click.command("check")
@store_option
@graph_option
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
@click.option(
    "--jobs", type=click.IntRange(min=1), default=None,
    help="Adjudicate packages on N worker threads.",
)
def check_command(
    store_dir: Path, graph_path: Path, output_format: str, jobs: int | None
) -> None:
    """Check that every dependency in GRAPH is vetted.

    Exit code 0 if all packages are certified or exempted, 1 if any is
    uncertifiable or forbidden, 2 on configuration errors.
    """
    try:
        report = run_resolution(store_dir, graph_path, jobs)
    except ChainVetError as exc:
        fail(str(exc), output_format)
        return

    if output_format == "json":
        click.echo(report.to_json())
    else:
        from chainvet.cli.output import print_report
        print_report(report)

    sys.exit(0 if report.is_success else 1)
