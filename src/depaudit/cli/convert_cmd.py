"""``depaudit convert`` and ``depaudit from-lock`` --- produce audit data.

``convert`` reads a rich dependency graph in its JSON interchange form;
``from-lock`` reads a ``Cargo.lock``-style lock file. Both deduplicate,
classify and order the graph and write the compact audit document.

Exit Codes:
    0 --- Audit data written.
    1 --- The input could not be converted (error printed).
    2 --- Usage error.
"""

from __future__ import annotations

from pathlib import Path

import click

from depaudit.cli.output import emit_document, exit_with_error
from depaudit.core.codec import from_lock
from depaudit.core.graph import RichGraph, build_version_info
from depaudit.exceptions import DepAuditError

_output_option = click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output file (default: print JSON to stdout).",
)
_compress_option = click.option(
    "--compress",
    is_flag=True,
    help="Write the zlib-compressed form that is embedded into binaries.",
)
_pretty_option = click.option(
    "--pretty",
    is_flag=True,
    help="Indent the JSON for reading (not for embedding).",
)


@click.command("convert")
@click.argument("graph", type=click.Path(exists=True, dir_okay=False))
@_output_option
@_compress_option
@_pretty_option
def convert_command(graph: str, output: str | None, compress: bool, pretty: bool) -> None:
    """Convert a rich dependency graph (JSON) into compact audit data.

    GRAPH lists every node occurrence with its name, version, source and
    root flag, and every edge with its dependency kind.
    """
    try:
        rich_graph = RichGraph.from_json(Path(graph).read_text(encoding="utf-8"))
        info = build_version_info(rich_graph)
    except DepAuditError as exc:
        exit_with_error(exc)
    emit_document(info, output, compress, pretty)


@click.command("from-lock")
@click.argument("lockfile", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--root",
    type=str,
    default=None,
    help="Audited package as NAME or 'NAME VERSION' "
         "(default: the package nothing depends on).",
)
@_output_option
@_compress_option
@_pretty_option
def from_lock_command(
    lockfile: str,
    root: str | None,
    output: str | None,
    compress: bool,
    pretty: bool,
) -> None:
    """Convert a Cargo.lock-style LOCKFILE into compact audit data.

    Lock files do not distinguish build-only dependencies, so every
    package is recorded as a runtime dependency.
    """
    try:
        info = from_lock(Path(lockfile).read_text(encoding="utf-8"), root=root)
    except DepAuditError as exc:
        exit_with_error(exc)
    emit_document(info, output, compress, pretty)
