"""``depaudit schema`` --- Print the JSON Schema of audit documents."""

from __future__ import annotations

from pathlib import Path

import click

from depaudit.core.codec import schema_json


@click.command("schema")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the schema to a file instead of stdout.",
)
def schema_command(output: str | None) -> None:
    """Emit the JSON Schema (draft-07) describing audit documents."""
    text = schema_json()
    if output is None:
        click.echo(text)
        return
    out_path = Path(output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text + "\n", encoding="utf-8")
    click.echo(f"Schema written to: {out_path}", err=True)
