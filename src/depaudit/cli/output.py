"""Rich output formatting helpers for the depaudit CLI.

Provides the package table, summary panel, error reporting, and the shared
helper that writes an audit document to a file or stdout.

Kind Color Mapping:
    RUNTIME = bold, BUILD = cyan
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from depaudit.core.codec import to_json, write
from depaudit.core.model import DependencyKind, VersionInfo

_KIND_STYLES: dict[DependencyKind, str] = {
    DependencyKind.RUNTIME: "bold",
    DependencyKind.BUILD: "cyan",
}

console = Console()


def configure_logging(verbose: bool) -> None:
    """Route library logging through Rich; debug level when *verbose*."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    # basicConfig is a no-op once the root logger has handlers.
    logging.getLogger().setLevel(level)


def kind_style(kind: DependencyKind) -> str:
    """Return the Rich style string for a dependency kind."""
    return _KIND_STYLES.get(kind, "white")


def exit_with_error(exc: Exception) -> NoReturn:
    """Report a failed conversion or validation and exit with code 1."""
    click.echo(f"Error: {exc}", err=True)
    sys.exit(1)


def print_packages(info: VersionInfo) -> None:
    """Print the package table of an audit document.

    Args:
        info: The compact model to display.
    """
    table = Table(title="Audited Packages", show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Package", style="bold")
    table.add_column("Version")
    table.add_column("Kind", justify="center")
    table.add_column("Source", style="dim")
    table.add_column("Dependencies", justify="right")

    for index, pkg in enumerate(info.packages):
        name = Text(pkg.name + (" (root)" if pkg.root else ""))
        table.add_row(
            str(index),
            name,
            str(pkg.version),
            Text(pkg.kind.tag, style=kind_style(pkg.kind)),
            str(pkg.source),
            ", ".join(str(i) for i in pkg.dependencies) or "-",
        )

    console.print(table)


def print_summary(summary: dict[str, Any]) -> None:
    """Print the summary panel of an audit document.

    Args:
        summary: Dictionary from ``VersionInfo.summary()``.
    """
    console.print(Panel(f"[bold]{summary.get('root', '?')}[/bold]", title="Audit Summary"))
    console.print(f"  Total packages: [bold]{summary.get('total', 0)}[/bold]")
    console.print(f"  Reproducible:   {summary.get('reproducible', 0)}")

    kinds = summary.get("kinds", {})
    if kinds:
        parts = [f"{count} {tag}" for tag, count in sorted(kinds.items())]
        console.print(f"  Kinds:          {' | '.join(parts)}")

    sources = summary.get("sources", {})
    if sources:
        src_table = Table(title="Source Distribution", show_header=True)
        src_table.add_column("Source", style="bold")
        src_table.add_column("Count", justify="right")
        for tag, count in sorted(sources.items()):
            src_table.add_row(tag, str(count))
        console.print(src_table)


def print_json(data: Any) -> None:
    """Print data as formatted JSON to stdout.

    Args:
        data: Any JSON-serializable data structure.
    """
    console.print_json(json.dumps(data, default=str))


def emit_document(
    info: VersionInfo, output: str | None, compress: bool, pretty: bool
) -> None:
    """Write an audit document to *output*, or to stdout when it is None.

    Raises:
        click.UsageError: If compressed output is requested without a file.
    """
    if output is None:
        if compress:
            raise click.UsageError("--compress requires --output")
        click.echo(to_json(info, indent=2 if pretty else None))
        return

    out_path = Path(output)
    if pretty and not compress:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(to_json(info, indent=2), encoding="utf-8")
    else:
        write(info, out_path, compress=compress)
    click.echo(
        f"Audit data for {info.root_package} ({len(info)} packages) written to: {out_path}",
        err=True,
    )
