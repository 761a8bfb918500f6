"""Link commands for inspecting and extending the monitored set."""

import typer

from refhub.db import get_connection, init_db
from refhub.db.links import create_link, list_links

from cli.rendering import render_links_table

links_app = typer.Typer(help="Inspect and manage monitored links.", no_args_is_help=True)


@links_app.command("list")
def links_list(
    category: str = typer.Option(None, "--category", help="Only show links in this category."),
    warnings: bool = typer.Option(False, "--warnings", help="Only show links with a link-rot warning."),
) -> None:
    """List monitored links with their latest status."""
    conn = get_connection()
    init_db(conn)

    try:
        links = list_links(conn, category=category, warning=True if warnings else None)
    finally:
        conn.close()

    typer.echo(render_links_table(links))


@links_app.command("add")
def links_add(
    url: str = typer.Argument(..., help="Document URL to monitor."),
    title: str = typer.Option(..., help="Display title."),
    category: str = typer.Option(..., help="Category used for grouping."),
) -> None:
    """Add a single link; it is checked on the next pass."""
    if not url.startswith(("http://", "https://")):
        typer.echo(f"❌ Invalid URL: {url}")
        raise typer.Exit(code=1)

    conn = get_connection()
    init_db(conn)

    try:
        link = create_link(conn, url=url, title=title, category=category)
    except ValueError as e:
        typer.echo(f"❌ Error: {e}")
        raise typer.Exit(code=1)
    finally:
        conn.close()

    typer.echo(f"✅ Added link: {link.title} [{link.category}] ({link.status.label})")
