"""
CLI ``notebridge db``: database management commands.
"""

from __future__ import annotations

import typer

from notebridge.cli.utils import console, err_console
from notebridge.core.database import close_engine, create_schema, drop_schema, init_engine, ping

app = typer.Typer(no_args_is_help=True)


@app.command()
def init() -> None:
    """Create all tables that do not exist yet."""
    engine = init_engine()
    try:
        create_schema(engine)
        console.print(f"[green]Schema ready[/green] ({engine.dialect.name})")
    finally:
        close_engine()


@app.command()
def drop(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Drop every notebridge table."""
    if not yes:
        typer.confirm("This deletes all data. Continue?", abort=True)
    engine = init_engine()
    try:
        drop_schema(engine)
        console.print("[yellow]All tables dropped[/yellow]")
    finally:
        close_engine()


@app.command()
def health() -> None:
    """Check database connectivity."""
    init_engine()
    try:
        if not ping():
            err_console.print("[bold red]Database unreachable[/bold red]")
            raise typer.Exit(code=1)
        console.print("[green]Database reachable[/green]")
    finally:
        close_engine()
