"""
CLI ``notebridge serve``: start the API server.
"""

from __future__ import annotations

import typer
import uvicorn

from notebridge.cli.utils import console
from notebridge.core.settings import get_settings

app = typer.Typer(no_args_is_help=True)


@app.command("start")
def start(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address (default from settings)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (default from settings)"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
    workers: int = typer.Option(1, "--workers", "-w", help="Number of workers"),
) -> None:
    """Start the notebridge REST API server."""
    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    console.print(f"[bold green]Starting notebridge API[/bold green] on {host}:{port}")
    uvicorn.run(
        "notebridge.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=settings.log_level.lower(),
    )
