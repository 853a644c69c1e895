"""``chainvet fetch-imports``: Refresh the imported ledgers lock.

Fetches every import declared in ``config.yaml`` (URLs over HTTP, paths
from disk), validates each ledger, and rewrites ``imports.lock.yaml``.
Resolution never touches the network; it only reads this lock.

Exit Codes:
    0: Lock written.
    2: Configuration error or an import could not be fetched.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from chainvet.cli.check_cmd import fail, store_option
from chainvet.exceptions import ChainVetError
from chainvet.store import Store
from chainvet.store.imports import refresh_imports


@click.command("fetch-imports")
@store_option
def fetch_imports_command(store_dir: Path) -> None:
    """Download imported audit ledgers into the imports lock."""
    store = Store(store_dir)
    try:
        config = store.load_config()
        if not config.imports:
            click.echo("No imports configured.")
            sys.exit(0)
        names = refresh_imports(config.imports, store.root, store.imports_lock_path)
    except ChainVetError as exc:
        fail(str(exc))
        return

    for name in names:
        click.echo(f"Fetched {name}")
    click.echo(f"Wrote {store.imports_lock_path}")
    sys.exit(0)
