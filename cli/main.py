"""Reference Hub CLI — entry-point for all operator tasks.

Usage:
    python cli/main.py --help

Sub-command groups:
    db      → link store initialisation and seeding
    links   → inspect / add monitored links
    scan    → run a health-check pass, probe a single URL
    serve   → run the HTTP API with the hourly scheduler
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from refhub.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from typing import Optional

import typer

from refhub.config import settings
from refhub.db import StoreUnavailableError, get_connection, init_db
from refhub.logging_setup import configure_logging
from refhub.seed import seed_if_empty

from cli.commands.links import links_app
from cli.commands.scan import scan_app

app = typer.Typer(
    name="refhub",
    help="Reference Hub link monitor CLI.",
    no_args_is_help=True,
)

app.add_typer(links_app, name="links")
app.add_typer(scan_app, name="scan")

# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Link store operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


@db_app.command("seed")
def db_seed() -> None:
    """Load the initial reference links if the store is empty."""
    conn = get_connection()
    init_db(conn)
    try:
        inserted = seed_if_empty(conn)
    finally:
        conn.close()
    if inserted:
        typer.echo(f"[db seed] Seeded {inserted} links.")
    else:
        typer.echo("[db seed] Store already populated; nothing to do.")


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------
@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (default: REFHUB_HOST)."),
    port: Optional[int] = typer.Option(None, help="Port (default: REFHUB_PORT)."),
    scheduler: bool = typer.Option(True, "--scheduler/--no-scheduler", help="Run periodic link checks."),
) -> None:
    """Run the read API; link checks start immediately and then repeat on schedule."""
    import uvicorn

    from refhub.api.app import create_app

    configure_logging(settings.log_level)

    # The store must be reachable before serving; failure is fatal, not retried.
    try:
        conn = get_connection()
        init_db(conn)
        conn.close()
    except StoreUnavailableError as e:
        typer.echo(f"[serve] Link store unavailable, server will not start: {e}", err=True)
        raise typer.Exit(code=1)

    api = create_app(enable_scheduler=scheduler)
    uvicorn.run(
        api,
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
    )


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
