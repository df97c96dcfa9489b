"""strictify CLI - convert JSON schemas for strict tool calling."""

from __future__ import annotations

import logging

import typer
from rich.console import Console

app = typer.Typer(
    name="strictify",
    help="Convert JSON schemas to strict tool-calling mode",
    add_completion=False,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)

console = Console()

# ---------------------------------------------------------------------------
# Register commands (each module owns its Typer args, docstring, and logic)
# ---------------------------------------------------------------------------

from .convert import convert_command  # noqa: E402

app.command(name="convert")(convert_command)


@app.command()
def version() -> None:
    """Show strictify version."""
    from strictify import __version__

    console.print(f"strictify version: [cyan]{__version__}[/cyan]")


@app.callback()
def _configure_logging() -> None:
    from strictify.settings import settings

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
