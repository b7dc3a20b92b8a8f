"""
Root Typer application for the notebridge CLI.
"""

from __future__ import annotations

import typer

from notebridge import __version__
from notebridge.cli.db import app as db_app
from notebridge.cli.serve import app as serve_app
from notebridge.cli.users import app as users_app
from notebridge.core.logging import configure_logging

app = typer.Typer(
    name="notebridge",
    help="notebridge: clinical notes to patient-friendly documents.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"notebridge {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at INFO instead of WARNING."),
) -> None:
    """notebridge CLI: run the API and manage the database and users."""
    configure_logging(level="INFO" if verbose else "WARNING", json_format=False, service="notebridge-cli")


app.add_typer(serve_app, name="serve", help="Run the API server")
app.add_typer(db_app, name="db", help="Database management")
app.add_typer(users_app, name="users", help="User accounts")


if __name__ == "__main__":
    app()
