"""``depaudit to-lock <audit>`` --- Render audit data as a lock file.

Reads an audit document (plain or compressed) and writes the equivalent
``Cargo.lock``-style lock file, for tools that only understand lock files.
Dependency kinds are dropped; a warning says how many.

Exit Codes:
    0 --- Lock file written.
    1 --- The audit document is invalid.
"""

from __future__ import annotations

from pathlib import Path

import click

from depaudit.cli.output import exit_with_error
from depaudit.core.codec import read, to_lock
from depaudit.exceptions import DepAuditError


@click.command("to-lock")
@click.argument("audit", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output path for the lock file (default: print to stdout).",
)
def to_lock_command(audit: str, output: str | None) -> None:
    """Convert an AUDIT document into a Cargo.lock-style lock file."""
    try:
        info = read(Path(audit))
    except DepAuditError as exc:
        exit_with_error(exc)

    text = to_lock(info)
    if output is None:
        click.echo(text, nl=False)
        return

    out_path = Path(output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text, encoding="utf-8")
    click.echo(f"Lock file written to: {out_path}", err=True)
