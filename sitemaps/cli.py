"""Command-line interface for sitemaps."""

import json
import logging
import os
import sys
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator

import click
from rich.console import Console
from rich.table import Table

from sitemaps.config import CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH, Config
from sitemaps.core import Sitemaps
from sitemaps.errors import SitemapsError
from sitemaps.lastmod import job_context, to_w3c
from sitemaps.log import setup_logging
from sitemaps.models import ObjectType, Post, SubType, Term, User
from sitemaps.scheduler import QueueScheduler


console = Console()


@contextmanager
def open_sitemaps(ctx: click.Context) -> Iterator[Sitemaps]:
    """Build an initialized Sitemaps for a command and close its store after."""
    config: Config = ctx.obj["config"]
    scheduler = QueueScheduler()
    try:
        store = config.create_store()
    except (SitemapsError, OSError) as e:
        console.print(f"[red]Failed to open store: {e}[/red]")
        sys.exit(1)

    with store:
        yield Sitemaps(config, store, scheduler).init()


def format_lastmod(dt: datetime | None) -> str:
    return to_w3c(dt) if dt else "[dim]unknown[/dim]"


def _report_pending(sitemaps: Sitemaps) -> None:
    scheduler = sitemaps.scheduler
    if isinstance(scheduler, QueueScheduler) and scheduler.pending:
        console.print(
            f"[yellow]{len(scheduler.pending)} lastmod value(s) not computed yet. "
            "Run 'sitemaps lastmod refresh'.[/yellow]"
        )


@click.group()
@click.option("--config", "config_path", default=DEFAULT_CONFIG_PATH, show_default=True,
              help="Path to the JSON config file.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(package_name="sitemaps")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool) -> None:
    """sitemaps - XML sitemaps for content-managed sites."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING, console=Console(stderr=True))
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["config"] = Config.load(config_path)


# =============================================================================
# Sitemap commands
# =============================================================================


@main.command("providers")
@click.pass_context
def list_providers(ctx: click.Context) -> None:
    """List registered providers with their sub-types and page counts."""
    with open_sitemaps(ctx) as sitemaps:
        table = Table(show_header=True)
        table.add_column("Name")
        table.add_column("Sub-type")
        table.add_column("Pages", justify="right")
        table.add_column("Page size", justify="right", style="dim")

        for name, provider in sitemaps.registry.all():
            for sub_type in provider.get_object_sub_types():
                table.add_row(
                    name,
                    sub_type.name or "[dim]-[/dim]",
                    str(provider.max_num_pages(sub_type.name or None)),
                    str(provider.max_urls),
                )

        console.print(table)


@main.command("index")
@click.option("--xml", "as_xml", is_flag=True, help="Print the rendered XML.")
@click.pass_context
def show_index(ctx: click.Context, as_xml: bool) -> None:
    """Show the sitemap index."""
    with open_sitemaps(ctx) as sitemaps:
        entries = sitemaps.build_index()

        if as_xml:
            click.echo(sitemaps.renderer.render_index(entries).decode("utf-8"), nl=False)
            return

        if not entries:
            console.print("[dim]No sitemaps. Add content with 'sitemaps content import'.[/dim]")
            return

        table = Table(show_header=True, title=sitemaps.index.get_index_url())
        table.add_column("Sitemap")
        table.add_column("Last Modified")
        for entry in entries:
            table.add_row(entry.location, format_lastmod(entry.last_modified))
        console.print(table)
        _report_pending(sitemaps)


@main.command("show")
@click.argument("name")
@click.option("--sub-type", default=None, help="Sub-type, e.g. a post type or taxonomy.")
@click.option("--page", default=1, show_default=True, type=int)
@click.option("--xml", "as_xml", is_flag=True, help="Print the rendered XML.")
@click.pass_context
def show_sitemap(ctx: click.Context, name: str, sub_type: str | None, page: int, as_xml: bool) -> None:
    """Show one page of a sitemap."""
    with open_sitemaps(ctx) as sitemaps:
        entries = sitemaps.get_url_list(name, page, sub_type)

        if entries is None:
            console.print(f"[red]Unknown sitemap: {name}[/red]")
            sys.exit(1)
        if not entries:
            console.print(f"[red]No URLs on page {page} of {name}[/red]")
            sys.exit(1)

        if as_xml:
            click.echo(sitemaps.renderer.render_sitemap(entries).decode("utf-8"), nl=False)
            return

        provider = sitemaps.resolve(name)
        title = provider.get_sitemap_url(sub_type, page) if provider else name
        table = Table(show_header=True, title=title)
        table.add_column("#", style="dim", justify="right")
        table.add_column("URL")
        table.add_column("Last Modified")
        for i, entry in enumerate(entries, 1):
            table.add_row(str(i), entry.location, format_lastmod(entry.last_modified))
        console.print(table)


# =============================================================================
# Lastmod commands
# =============================================================================


@main.group()
def lastmod() -> None:
    """Manage cached last-modified values."""
    pass


@lastmod.command("refresh")
@click.pass_context
def lastmod_refresh(ctx: click.Context) -> None:
    """Recompute the lastmod of every sitemap page now."""
    with open_sitemaps(ctx) as sitemaps:
        count = 0
        with job_context():
            for name, provider in sitemaps.registry.all():
                for sub_type in provider.get_object_sub_types():
                    sub_name = sub_type.name or None
                    for page in range(1, provider.max_num_pages(sub_name) + 1):
                        sitemaps.calculate_sitemap_lastmod(name, sub_name, page)
                        count += 1
        console.print(f"[green]Refreshed {count} sitemap page(s).[/green]")


@lastmod.command("clear")
@click.pass_context
def lastmod_clear(ctx: click.Context) -> None:
    """Forget every cached lastmod value."""
    with open_sitemaps(ctx) as sitemaps:
        removed = sitemaps.lastmod.clear()
        console.print(f"[green]Cleared {removed} cached value(s).[/green]")


# =============================================================================
# Content commands
# =============================================================================


@main.group()
def content() -> None:
    """Manage site content."""
    pass


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@content.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def content_import(ctx: click.Context, path: Path) -> None:
    """Import content from a JSON file.

    The file may contain "post_types", "taxonomies", "users", "posts" and
    "terms" lists.
    """
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {path}: {e}[/red]")
        sys.exit(1)

    with open_sitemaps(ctx) as sitemaps:
        store = sitemaps.store
        try:
            for entry in data.get("post_types", []):
                store.add_sub_type(ObjectType.POST, SubType(**entry))
            for entry in data.get("taxonomies", []):
                store.add_sub_type(ObjectType.TERM, SubType(**entry))
            for entry in data.get("users", []):
                store.add_user(User(**entry))
            for entry in data.get("posts", []):
                entry = dict(entry)
                modified_at = _parse_datetime(entry.pop("modified_at", None))
                post = Post(**entry) if modified_at is None else Post(**entry, modified_at=modified_at)
                store.add_post(post)
            for entry in data.get("terms", []):
                entry = dict(entry)
                entry["modified_at"] = _parse_datetime(entry.get("modified_at"))
                store.add_term(Term(**entry))
        except (TypeError, ValueError) as e:
            console.print(f"[red]Invalid content entry: {e}[/red]")
            sys.exit(1)

        counts = {key: len(data.get(key, [])) for key in ("post_types", "taxonomies", "users", "posts", "terms")}
        summary = ", ".join(f"{n} {key}" for key, n in counts.items() if n)
        console.print(f"[green]Imported {summary or 'nothing'}.[/green]")


# =============================================================================
# Config commands
# =============================================================================


@main.group("config")
def config_group() -> None:
    """Show or change configuration."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the effective configuration."""
    config: Config = ctx.obj["config"]
    table = Table(show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("home_url", config.home_url)
    table.add_row("pretty_urls", str(config.pretty_urls))
    table.add_row("store", f"{config.store_type.value}:{config.store_path}")
    table.add_row("max_urls", str(config.max_urls))
    for name, limit in config.max_urls_by_provider.items():
        table.add_row(f"max_urls[{name}]", str(limit))
    table.add_row("providers", ", ".join(config.providers))
    table.add_row("lastmod_delay_seconds", str(config.lastmod_delay_seconds))
    console.print(table)


@config_group.command("set-home")
@click.argument("url")
@click.pass_context
def config_set_home(ctx: click.Context, url: str) -> None:
    """Set the site home URL."""
    if not url.startswith(("http://", "https://")):
        console.print(f"[red]Home URL must start with http:// or https://: {url}[/red]")
        sys.exit(1)

    config: Config = ctx.obj["config"]
    config.home_url = url.rstrip("/")
    config.save(ctx.obj["config_path"])
    console.print(f"[green]Home URL set to {config.home_url}[/green]")


# =============================================================================
# Server
# =============================================================================


@main.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Serve sitemaps over HTTP."""
    import uvicorn

    os.environ[CONFIG_ENV_VAR] = ctx.obj["config_path"]
    uvicorn.run("api.main:app", host=host, port=port)


if __name__ == "__main__":
    main()
