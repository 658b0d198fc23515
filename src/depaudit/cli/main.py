"""depaudit CLI --- Compact dependency audit data for compiled artifacts.

Entry point for the ``depaudit`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    convert    --- Rich dependency graph (JSON) to audit data.
    from-lock  --- Cargo.lock-style lock file to audit data.
    to-lock    --- Audit data to a lock file.
    show       --- Display the packages in audit data.
    validate   --- Check audit data against every invariant.
    schema     --- Print the JSON Schema of audit data.

Usage::

    depaudit convert graph.json -o audit.json
    depaudit convert graph.json -o audit.bin --compress
    depaudit from-lock Cargo.lock --root my-app
    depaudit show audit.bin
    depaudit validate audit.json
    depaudit schema -o audit.schema.json
"""

from __future__ import annotations

import click

from depaudit import __version__
from depaudit.cli.convert_cmd import convert_command, from_lock_command
from depaudit.cli.lock_cmd import to_lock_command
from depaudit.cli.output import configure_logging
from depaudit.cli.schema_cmd import schema_command
from depaudit.cli.show_cmd import show_command, validate_command


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log conversion details.")
def cli(verbose: bool) -> None:
    """depaudit: Compact, auditable dependency graphs.

    Build, inspect and validate the dependency list embedded into a
    compiled artifact for supply chain auditing.
    """
    configure_logging(verbose)


# Register all subcommands
cli.add_command(convert_command)
cli.add_command(from_lock_command)
cli.add_command(to_lock_command)
cli.add_command(show_command)
cli.add_command(validate_command)
cli.add_command(schema_command)
