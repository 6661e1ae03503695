"""
CLI for DocSync.

Commands:
- init: Write a configuration file
- whoami: Show the signed-in identity
- settings: Read and write user settings
- history: List, add, star, delete and clear history entries
- feeds: List, post and delete feed entries
- sync: Push or pull collections, environments and teams
"""

import json
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from docsync import __version__
from docsync.config import Config, StoreBackend
from docsync.errors import DocSyncError
from docsync.factory import create_instance
from docsync.instance import SyncInstance
from docsync.models import SyncResource

console = Console()

logger = logging.getLogger("docsync")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def parse_value(raw: str) -> Any:
    """Parse a command line value as JSON, falling back to the plain string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


@contextmanager
def handle_errors() -> Iterator[None]:
    """Report DocSync errors in red and exit with status 1."""
    try:
        yield
    except DocSyncError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


def ensure_instance(config: Config) -> SyncInstance:
    """Create the sync instance, exiting with a message if that fails."""
    try:
        return create_instance(config)
    except (DocSyncError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


@click.group()
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to config file")
@click.pass_context
def main(ctx: click.Context, config: Optional[str]) -> None:
    """DocSync - Per-user data sync over a hosted document database."""
    ctx.ensure_object(dict)

    if config:
        ctx.obj["config"] = Config.load(Path(config))
    else:
        ctx.obj["config"] = Config.load()

    configure_logging(ctx.obj["config"].log_level)


@main.command()
@click.option(
    "--backend", "-b",
    type=click.Choice([b.value for b in StoreBackend]),
    default=StoreBackend.LOCAL.value,
    help="Document store backend",
)
@click.option("--uid", default=None, help="Local user id")
@click.option("--name", "display_name", default=None, help="Display name of the local user")
@click.option("--email", default=None, help="Email of the local user")
@click.option("--project", default=None, help="Google Cloud project id (firestore backend)")
@click.option("--credentials", type=click.Path(exists=True), default=None, help="Service account JSON")
@click.pass_context
def init(
    ctx: click.Context,
    backend: str,
    uid: Optional[str],
    display_name: Optional[str],
    email: Optional[str],
    project: Optional[str],
    credentials: Optional[str],
) -> None:
    """Write a DocSync configuration file."""
    config: Config = ctx.obj["config"]

    console.print(Panel.fit(
        f"[bold blue]DocSync v{__version__}[/bold blue]\n"
        "Per-user data sync over a hosted document database",
        border_style="blue",
    ))

    config.backend = StoreBackend(backend)
    if uid:
        config.uid = uid
    if display_name:
        config.display_name = display_name
    if email:
        config.email = email
    if project:
        config.gcp_project = project
    if credentials:
        config.credentials_path = Path(credentials).resolve()

    config.ensure_directories()
    config.save()

    console.print(f"\n[green]✓ DocSync configured ({config.backend.value} backend)[/green]")
    console.print(f"[dim]Config: {config.storage_path / 'config.yaml'}[/dim]")
    if not config.uid:
        console.print("[yellow]No uid set. Pass --uid or set DOCSYNC_ID_TOKEN to sign in.[/yellow]")


@main.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Show the signed-in user."""
    instance = ensure_instance(ctx.obj["config"])
    user = instance.current_user

    if user is None:
        console.print("[yellow]Not signed in.[/yellow]")
        sys.exit(1)

    console.print(f"[bold]{user.display_name or user.uid}[/bold]")
    console.print(f"[dim]uid: {user.uid}[/dim]")
    if user.email:
        console.print(f"[dim]email: {user.email}[/dim]")
    if user.provider_id:
        console.print(f"[dim]provider: {user.provider_id}[/dim]")


# ----------------------------------------------------------------------
# Settings
# ----------------------------------------------------------------------

@main.group()
def settings() -> None:
    """Read and write user settings."""


@settings.command("set")
@click.argument("name")
@click.argument("value")
@click.pass_context
def settings_set(ctx: click.Context, name: str, value: str) -> None:
    """Set NAME to VALUE (parsed as JSON when possible)."""
    instance = ensure_instance(ctx.obj["config"])
    with handle_errors():
        instance.write_settings(name, parse_value(value))
    console.print(f"[green]✓ {name} updated[/green]")


@settings.command("get")
@click.argument("name")
@click.pass_context
def settings_get(ctx: click.Context, name: str) -> None:
    """Show a single setting."""
    instance = ensure_instance(ctx.obj["config"])
    with handle_errors():
        setting = instance.get_setting(name)

    if setting is None:
        console.print(f"[red]Setting not found: {name}[/red]")
        sys.exit(1)

    console.print(json.dumps(setting.value))


@settings.command("list")
@click.pass_context
def settings_list(ctx: click.Context) -> None:
    """List all settings."""
    instance = ensure_instance(ctx.obj["config"])
    with handle_errors():
        items = instance.list_settings()

    if not items:
        console.print("[dim]No settings found.[/dim]")
        return

    table = Table(title=f"Settings ({len(items)})")
    table.add_column("Name", style="cyan")
    table.add_column("Value")
    table.add_column("Updated", style="dim")
    for setting in items:
        table.add_row(setting.name, json.dumps(setting.value), setting.updated_on.strftime("%Y-%m-%d %H:%M"))
    console.print(table)


# ----------------------------------------------------------------------
# History
# ----------------------------------------------------------------------

@main.group()
def history() -> None:
    """Manage request history."""


@history.command("list")
@click.option("--starred", is_flag=True, help="Only starred entries")
@click.pass_context
def history_list(ctx: click.Context, starred: bool) -> None:
    """List history entries."""
    instance = ensure_instance(ctx.obj["config"])
    with handle_errors():
        entries = instance.list_history()

    if starred:
        entries = [e for e in entries if e.star]

    if not entries:
        console.print("[dim]No history entries found.[/dim]")
        return

    table = Table(title=f"History ({len(entries)})")
    table.add_column("ID", style="dim", width=20)
    table.add_column("Method", style="cyan")
    table.add_column("URL")
    table.add_column("Status")
    table.add_column("★")
    for entry in entries:
        table.add_row(
            entry.id,
            str(entry.method or ""),
            f"{entry.url or ''}{entry.path or ''}",
            str(entry.status or ""),
            "★" if entry.star else "",
        )
    console.print(table)


@history.command("add")
@click.argument("entry_file", type=click.Path(exists=True))
@click.pass_context
def history_add(ctx: click.Context, entry_file: str) -> None:
    """Add the history entry stored in ENTRY_FILE (JSON)."""
    try:
        entry = json.loads(Path(entry_file).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]{entry_file} is not valid JSON: {e}[/red]")
        sys.exit(1)
    instance = ensure_instance(ctx.obj["config"])
    with handle_errors():
        instance.write_history(entry)
    console.print("[green]✓ History entry added[/green]")


@history.command("star")
@click.argument("entry_id")
@click.option("--off", is_flag=True, help="Remove the star instead")
@click.pass_context
def history_star(ctx: click.Context, entry_id: str, off: bool) -> None:
    """Star (or unstar) a history entry."""
    instance = ensure_instance(ctx.obj["config"])
    with handle_errors():
        instance.toggle_star(entry_id, not off)
    console.print(f"[green]✓ Entry {'unstarred' if off else 'starred'}[/green]")


@history.command("delete")
@click.argument("entry_id")
@click.pass_context
def history_delete(ctx: click.Context, entry_id: str) -> None:
    """Delete a history entry."""
    instance = ensure_instance(ctx.obj["config"])
    with handle_errors():
        instance.delete_history(entry_id)
    console.print("[green]✓ History entry deleted[/green]")


@history.command("clear")
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation")
@click.pass_context
def history_clear(ctx: click.Context, yes: bool) -> None:
    """Delete all history entries."""
    instance = ensure_instance(ctx.obj["config"])
    if not yes and not Confirm.ask("Delete all history entries?"):
        return

    with handle_errors():
        instance.clear_history()
    console.print("[green]✓ History cleared[/green]")


# ----------------------------------------------------------------------
# Feeds
# ----------------------------------------------------------------------

@main.group()
def feeds() -> None:
    """Manage the activity feed."""


@feeds.command("list")
@click.option("--limit", "-l", default=20, help="Maximum number of entries")
@click.pass_context
def feeds_list(ctx: click.Context, limit: int) -> None:
    """List feed entries, newest first."""
    instance = ensure_instance(ctx.obj["config"])
    with handle_errors():
        entries = instance.list_feeds()[:limit]

    if not entries:
        console.print("[dim]No feed entries found.[/dim]")
        return

    for entry in entries:
        console.print(f"[cyan]{entry.label or 'untitled'}[/cyan] [dim]{entry.id} · {entry.created_on:%Y-%m-%d %H:%M}[/dim]")
        console.print(f"   {entry.message or ''}")


@feeds.command("post")
@click.argument("message")
@click.option("--label", "-l", default="", help="Feed label")
@click.pass_context
def feeds_post(ctx: click.Context, message: str, label: str) -> None:
    """Post a message to the feed."""
    instance = ensure_instance(ctx.obj["config"])
    with handle_errors():
        instance.write_feed(message, label)
    console.print("[green]✓ Feed entry posted[/green]")


@feeds.command("delete")
@click.argument("feed_id")
@click.pass_context
def feeds_delete(ctx: click.Context, feed_id: str) -> None:
    """Delete a feed entry."""
    instance = ensure_instance(ctx.obj["config"])
    with handle_errors():
        instance.delete_feed(feed_id)
    console.print("[green]✓ Feed entry deleted[/green]")


# ----------------------------------------------------------------------
# Sync documents
# ----------------------------------------------------------------------

RESOURCE_CHOICE = click.Choice([r.value for r in SyncResource])


@main.group()
def sync() -> None:
    """Push or pull collections, environments and teams."""


@sync.command("push")
@click.argument("resource", type=RESOURCE_CHOICE)
@click.argument("source", type=click.Path(exists=True))
@click.pass_context
def sync_push(ctx: click.Context, resource: str, source: str) -> None:
    """Overwrite RESOURCE with the JSON array in SOURCE."""
    items = json.loads(Path(source).read_text(encoding="utf-8"))
    if not isinstance(items, list):
        console.print(f"[red]{source} must contain a JSON array[/red]")
        sys.exit(1)

    instance = ensure_instance(ctx.obj["config"])
    with handle_errors():
        instance.write_sync(SyncResource(resource), items)
    console.print(f"[green]✓ Pushed {len(items)} {resource}[/green]")


@sync.command("pull")
@click.argument("resource", type=RESOURCE_CHOICE)
@click.option("--output", "-o", type=click.Path(), default=None, help="Write to a file instead of stdout")
@click.pass_context
def sync_pull(ctx: click.Context, resource: str, output: Optional[str]) -> None:
    """Print (or save) the RESOURCE array."""
    instance = ensure_instance(ctx.obj["config"])
    with handle_errors():
        items = instance.read_sync(SyncResource(resource))

    content = json.dumps(items, indent=2)
    if output:
        Path(output).write_text(content, encoding="utf-8")
        console.print(f"[green]✓ Saved {len(items)} {resource} to {output}[/green]")
    else:
        click.echo(content)


if __name__ == "__main__":
    main()
