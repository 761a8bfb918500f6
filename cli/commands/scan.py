"""Scan commands: run a pass now or check one URL without saving."""

import typer

from refhub.config import settings
from refhub.db import get_connection, init_db
from refhub.health.scanner import check_link, run_scan
from refhub.logging_setup import configure_logging

from cli.rendering import status_icon

scan_app = typer.Typer(help="Run link health checks.", no_args_is_help=True)


@scan_app.command("run")
def scan_run() -> None:
    """Check every monitored link now and save the results."""
    configure_logging(settings.log_level)
    conn = get_connection()
    init_db(conn)

    try:
        summary = run_scan(conn)
    finally:
        conn.close()

    typer.echo(
        f"[scan run] Checked {summary.checked} links: "
        f"{summary.warnings} with warnings, {summary.failed_writes} not saved."
    )
    if summary.failed_writes:
        raise typer.Exit(code=1)


@scan_app.command("check")
def scan_check(
    url: str = typer.Argument(..., help="URL to probe."),
) -> None:
    """Probe and classify a single URL without touching the store."""
    status = check_link(url)
    typer.echo(f"{status_icon(status)} {status.label}  {url}")
    if status.warning:
        raise typer.Exit(code=2)
