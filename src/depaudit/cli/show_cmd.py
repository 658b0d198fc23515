"""``depaudit show`` and ``depaudit validate`` --- inspect audit data.

Exit Codes:
    0 --- The document is valid (and was displayed).
    1 --- The document failed validation.
"""

from __future__ import annotations

from pathlib import Path

import click

from depaudit.cli.output import exit_with_error, print_json, print_packages, print_summary
from depaudit.core.codec import DEFAULT_MAX_DECOMPRESSED_SIZE, read, to_dict
from depaudit.exceptions import DepAuditError


@click.command("show")
@click.argument("audit", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Print the decoded document as JSON instead of tables.",
)
def show_command(audit: str, as_json: bool) -> None:
    """Display the packages recorded in an AUDIT document.

    AUDIT may be plain JSON or the compressed embedded form.
    """
    try:
        info = read(Path(audit))
    except DepAuditError as exc:
        exit_with_error(exc)

    if as_json:
        print_json(to_dict(info))
        return
    print_packages(info)
    print_summary(info.summary())


@click.command("validate")
@click.argument("audit", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--max-size",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_DECOMPRESSED_SIZE,
    show_default=True,
    help="Largest decompressed size accepted for compressed input, in bytes.",
)
def validate_command(audit: str, max_size: int) -> None:
    """Check that an AUDIT document satisfies every structural invariant.

    Exit code 0 if valid, 1 otherwise.
    """
    try:
        info = read(Path(audit), max_size=max_size)
    except DepAuditError as exc:
        exit_with_error(exc)
    click.echo(f"Valid: {len(info)} packages, root {info.root_package}")
