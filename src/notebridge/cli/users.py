"""
CLI ``notebridge users``: account administration.
"""

from __future__ import annotations

import typer

from notebridge.cli.utils import console, err_console
from notebridge.core.database import close_engine, create_schema, init_engine, session_scope
from notebridge.core.enums import UserRole
from notebridge.core.errors import ConflictError
from notebridge.core.settings import get_settings
from notebridge.services.auth import AuthService

app = typer.Typer(no_args_is_help=True)


@app.command()
def create(
    email: str = typer.Argument(..., help="Login email"),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, confirmation_prompt=True
    ),
    first_name: str | None = typer.Option(None, "--first-name"),
    last_name: str | None = typer.Option(None, "--last-name"),
    admin: bool = typer.Option(False, "--admin", help="Create an ADMIN instead of a CLINICIAN"),
) -> None:
    """Create a user account."""
    if len(password) < 8:
        err_console.print("[bold red]Password must be at least 8 characters[/bold red]")
        raise typer.Exit(code=1)

    settings = get_settings()
    create_schema(init_engine(settings))
    try:
        with session_scope() as session:
            user = AuthService(session, settings).create_user(
                email,
                password,
                first_name=first_name,
                last_name=last_name,
                role=UserRole.ADMIN if admin else UserRole.CLINICIAN,
            )
            console.print(f"[green]Created[/green] {user.email} ({user.role}) id={user.id}")
    except ConflictError as e:
        err_console.print(f"[bold red]Error[/bold red]: {e.message}")
        raise typer.Exit(code=1) from e
    finally:
        close_engine()
