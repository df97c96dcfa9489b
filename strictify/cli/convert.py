"""Convert a JSON schema file to its strict-mode form."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from strictify.schema import (
    DiagnosticCollector,
    SchemaDepthError,
    SchemaRefError,
    SchemaShapeError,
    ensure_strict_json_schema,
    inline_local_refs,
    strictify_property,
)

console = Console(stderr=True)


def convert_command(
    source: str = typer.Argument(..., help="JSON schema file, or '-' to read stdin"),
    output: Path | None = typer.Option(  # noqa: B008
        None, "--output", "-o", help="Write the strict schema here instead of stdout"
    ),
    optional: bool = typer.Option(
        False, "--optional", help="Treat the root as an optional property instead of a tool schema"
    ),
    fail_on_drop: bool = typer.Option(
        False, "--fail-on-drop", help="Exit with status 1 if any keyword was dropped"
    ),
    inline_refs: bool = typer.Option(
        True,
        "--inline-refs/--no-inline-refs",
        help="Inline local $ref pointers for --optional roots (tool schemas are always inlined)",
    ),
) -> None:
    """Rewrite a JSON schema so it satisfies strict tool-calling mode.

    [not dim]Examples:
        strictify convert tool_params.json
        strictify convert schema.json --optional -o strict.json[/not dim]
    """
    try:
        schema = _load_schema(source)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]❌ Failed to read schema from {escape(source)}: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    collector = DiagnosticCollector()
    try:
        strict = _convert(schema, optional=optional, inline_refs=inline_refs, sink=collector)
    except (SchemaShapeError, SchemaDepthError, SchemaRefError) as e:
        console.print(f"[red]❌ Invalid schema: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    for event in collector:
        console.print(
            f"[yellow]⚠ dropped[/yellow] [cyan]{escape(event.key)}[/cyan] at {escape(event.path)}"
        )

    rendered = json.dumps(strict, indent=2)
    if output is not None:
        output.write_text(rendered + "\n", encoding="utf-8")
        console.print(f"[green]✅ Wrote strict schema to {output}[/green]")
    else:
        typer.echo(rendered)

    if collector and fail_on_drop:
        console.print(f"[red]{len(collector)} keyword(s) dropped[/red]")
        raise typer.Exit(1)


def _load_schema(source: str) -> Any:
    if source == "-":
        return json.loads(sys.stdin.read())
    with open(source, encoding="utf-8") as f:
        return json.load(f)


def _convert(schema: Any, *, optional: bool, inline_refs: bool, sink: DiagnosticCollector) -> Any:
    if not optional:
        return ensure_strict_json_schema(schema, sink=sink)

    if inline_refs:
        schema = inline_local_refs(schema)
    result = strictify_property(schema, False, "$", sink=sink)
    if result is None:
        console.print("[yellow]⚠ Schema admits no value; the property would be omitted[/yellow]")
    return result
