"""chainvet CLI: supply-chain audit verification for dependency graphs.

Entry point for the ``chainvet`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    check          Resolve every package in use to a verdict.
    suggest        Print recommended audits and removable exemptions.
    criteria       List criteria with their implication closures.
    fetch-imports  Refresh the imported ledgers lock.

Usage::

    chainvet check --graph graph.json
    chainvet check --store supply-chain --graph graph.json --format json
    chainvet suggest --graph graph.json
    chainvet criteria
    chainvet fetch-imports
"""

from __future__ import annotations

import logging

import click

from chainvet import __version__
from chainvet.cli.check_cmd import check_command
from chainvet.cli.criteria_cmd import criteria_command
from chainvet.cli.imports_cmd import fetch_imports_command
from chainvet.cli.suggest_cmd import suggest_command


@click.group()
@click.version_option(version=__version__)
@click.option(
    "-v", "--verbose", count=True,
    help="Increase log verbosity (-v warnings and info, -vv debug).",
)
def cli(verbose: int) -> None:
    """chainvet: verify that every dependency is covered by an audit.

    Reads the audit store and the resolved dependency graph, propagates
    required criteria from first-party packages, and certifies each
    third-party package through full audits, delta-audit chains, or
    exemptions.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG if verbose > 1 else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
        )


# Register all subcommands
cli.add_command(check_command)
cli.add_command(suggest_command)
cli.add_command(criteria_command)
cli.add_command(fetch_imports_command)
