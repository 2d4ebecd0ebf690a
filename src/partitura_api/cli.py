"""Partitura API command line (start, dev, migrate, routes)."""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Iterable

import typer

from partitura_api.settings import get_settings

ASGI_APP = "partitura_api.asgi:app"

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    help="Partitura API CLI (start, dev, migrate, routes).",
)


def run(command: Iterable[str]) -> None:
    cmd_list = list(command)
    typer.echo(f"-> {' '.join(cmd_list)}", err=True)
    completed = subprocess.run(cmd_list, check=False)
    if completed.returncode != 0:
        raise typer.Exit(code=completed.returncode)


def _uvicorn_command(*, host: str, port: int, reload: bool) -> list[str]:
    settings = get_settings()
    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        ASGI_APP,
        "--host",
        host,
        "--port",
        str(port),
        "--log-level",
        settings.logging_level.lower(),
    ]
    if reload:
        cmd.append("--reload")
    return cmd


def run_start(*, host: str | None = None, port: int | None = None, reload: bool = False) -> None:
    settings = get_settings()
    host = host or settings.server_host
    port = port or settings.server_port
    typer.echo(f"Starting Partitura API on http://{host}:{port}")
    run(_uvicorn_command(host=host, port=port, reload=reload))


def run_migrate(revision: str = "head") -> None:
    from partitura_api.db.migrations import run_migrations

    typer.echo(f"-> alembic upgrade {revision}", err=True)
    run_migrations(get_settings(), revision=revision)


def run_routes() -> None:
    from partitura_api.main import create_app, route_table

    for methods, path in route_table(create_app()):
        verbs = ",".join(sorted(methods))
        typer.echo(f"{verbs:<10} {path}")


@app.callback()
def _main(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


@app.command(name="start", help="Start the API server.")
def start(
    host: str | None = typer.Option(
        None,
        "--host",
        help="Host/interface to bind.",
        envvar="PARTITURA_SERVER_HOST",
    ),
    port: int | None = typer.Option(
        None,
        "--port",
        help="Port to bind.",
        envvar="PARTITURA_SERVER_PORT",
        min=1,
        max=65535,
    ),
) -> None:
    run_start(host=host, port=port)


@app.command(name="dev", help="Run the API with auto-reload.")
def dev(
    host: str | None = typer.Option(None, "--host", help="Host/interface to bind."),
    port: int | None = typer.Option(None, "--port", help="Port to bind.", min=1, max=65535),
) -> None:
    run_start(host=host, port=port, reload=True)


@app.command(name="migrate", help="Apply Alembic migrations.")
def migrate(
    revision: str = typer.Argument("head", help="Target revision."),
) -> None:
    run_migrate(revision)


@app.command(name="routes", help="List API routes.")
def routes() -> None:
    run_routes()


__all__ = ["app", "run_migrate", "run_routes", "run_start"]
