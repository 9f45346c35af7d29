"""azure-moderator CLI: try moderation calls and manage blocklists from a shell."""

from __future__ import annotations

import base64
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from azure_moderator import __version__
from azure_moderator.api.client import RetryingHttpClient
from azure_moderator.blocklists.service import BlocklistService
from azure_moderator.config import ModeratorConfig
from azure_moderator.exceptions import InvalidInputError, ModerationError
from azure_moderator.moderation.models import ModerationResult
from azure_moderator.moderation.multimodal import MultimodalService
from azure_moderator.moderation.service import ContentSafetyService
from azure_moderator.utils.log import configure_logging

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False),
              help="YAML config file (defaults to AZURE_CONTENT_SAFETY_* variables)")
@click.option("--verbose", "-v", is_flag=True, help="Log HTTP retries and failures")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool):
    """azure-moderator: Azure Content Safety from the command line.

    Moderate text and images, check for protected material, and manage
    custom blocklists.
    """
    configure_logging(logging.DEBUG if verbose else logging.WARNING)
    ctx.ensure_object(dict)

    try:
        config = ModeratorConfig.from_file(config_path) if config_path else ModeratorConfig.from_env()
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    ctx.obj["config"] = config
    ctx.obj["http"] = RetryingHttpClient(config, transport=ctx.obj.get("transport"))
    ctx.call_on_close(ctx.obj["http"].close)


def _require_config(ctx: click.Context) -> ModeratorConfig:
    config: ModeratorConfig = ctx.obj["config"]
    if not config.configured:
        for issue in config.validate():
            console.print(f"  [red]x[/] {issue}")
        ctx.exit(1)
    return config


def _fail(ctx: click.Context, title: str, error: Exception) -> None:
    console.print(f"[red]{title}[/]")
    console.print(f"  Error: {escape(str(error))}")
    if isinstance(error, ModerationError):
        if error.endpoint:
            console.print(f"  Endpoint: {error.endpoint}")
        if error.status_code:
            console.print(f"  Status Code: {error.status_code}")
    ctx.exit(1)


def _split(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def _print_result(result: ModerationResult) -> None:
    color = "green" if result.is_approved() else "red"
    console.print(f"Status: [{color}]{result.status.label}[/]")
    if result.reason:
        console.print(f"Reason: {result.reason}")

    if result.categories_analysis:
        table = Table(title="Category Analysis")
        table.add_column("Category", style="cyan")
        table.add_column("Severity", justify="right")
        for score in result.categories_analysis:
            table.add_row(score.category.value, str(score.severity))
        console.print(table)
    else:
        console.print("[yellow]No category scores returned (service unavailable?)[/]")

    if result.blocklist_matches:
        console.print("[bold]Blocklist matches:[/]")
        for match in result.blocklist_matches:
            console.print(f"  [red]x[/] {escape(match.match_value)} ({escape(match.blocklist_name)})")


# ── Moderation ───────────────────────────────────────────────────────


@main.command("test-text")
@click.argument("text")
@click.option("--rating", default=5.0, type=float, show_default=True, help="User rating (0-5)")
@click.option("--categories", default=None, help="Comma-separated: Hate,SelfHarm,Sexual,Violence")
@click.option("--blocklist", "blocklists", multiple=True, help="Blocklist name (repeatable)")
@click.pass_context
def test_text(ctx: click.Context, text: str, rating: float, categories: str | None, blocklists: tuple[str, ...]):
    """Moderate TEXT posted with a user rating."""
    config = _require_config(ctx)
    service = ContentSafetyService(config, http=ctx.obj["http"])

    console.print("\n[bold blue]azure-moderator[/]: Testing text moderation\n")
    try:
        result = service.moderate_text(
            text,
            rating,
            categories=_split(categories),
            blocklist_names=list(blocklists) or None,
        )
    except InvalidInputError as e:
        _fail(ctx, "Invalid input.", e)
        return
    _print_result(result)


@main.command("test-image")
@click.argument("url")
@click.option("--categories", default=None, help="Comma-separated: Hate,SelfHarm,Sexual,Violence")
@click.pass_context
def test_image(ctx: click.Context, url: str, categories: str | None):
    """Moderate the image at URL."""
    config = _require_config(ctx)
    service = ContentSafetyService(config, http=ctx.obj["http"])

    console.print("\n[bold blue]azure-moderator[/]: Testing image moderation\n")
    try:
        result = service.moderate_image(url, categories=_split(categories), encoding="url")
    except InvalidInputError as e:
        _fail(ctx, "Invalid input.", e)
        return
    _print_result(result)


@main.command("test-multimodal")
@click.argument("image")
@click.option("--text", default=None, help="Text to analyse together with the image")
@click.option("--encoding", default="url", type=click.Choice(["url", "base64"]),
              help="url: IMAGE is a URL; base64: IMAGE is a local file to upload")
@click.option("--categories", default=None, help="Comma-separated: Hate,SelfHarm,Sexual,Violence")
@click.option("--no-ocr", is_flag=True, help="Disable text extraction from the image")
@click.pass_context
def test_multimodal(
    ctx: click.Context,
    image: str,
    text: str | None,
    encoding: str,
    categories: str | None,
    no_ocr: bool,
):
    """Analyse IMAGE together with optional text (preview API)."""
    config = _require_config(ctx)
    service = MultimodalService(config, http=ctx.obj["http"])

    console.print("[yellow]![/] Uses the Content Safety preview API (2024-09-15-preview)")
    console.print("\n[bold blue]azure-moderator[/]: Testing multimodal analysis\n")

    if encoding == "base64":
        path = Path(image)
        if not path.is_file():
            console.print(f"[red]File not found:[/] {escape(image)}")
            ctx.exit(1)
        image = base64.b64encode(path.read_bytes()).decode("ascii")

    try:
        result = service.analyze(
            image,
            text=text,
            encoding=encoding,
            categories=_split(categories),
            enable_ocr=not no_ocr,
        )
    except InvalidInputError as e:
        _fail(ctx, "Invalid input.", e)
        return
    _print_result(result)


@main.command("test-protected")
@click.argument("text")
@click.pass_context
def test_protected(ctx: click.Context, text: str):
    """Check TEXT for protected (copyrighted) material."""
    config = _require_config(ctx)
    service = ContentSafetyService(config, http=ctx.obj["http"])

    console.print("\n[bold blue]azure-moderator[/]: Testing protected material detection\n")
    try:
        result = service.detect_protected_material(text)
    except (InvalidInputError, ModerationError) as e:
        _fail(ctx, "Protected material detection failed.", e)
        return

    if result.detected:
        console.print(Panel("[red]Protected material detected[/]", title="Result"))
    else:
        console.print(Panel("[green]No protected material detected[/]", title="Result"))


# ── Blocklists ───────────────────────────────────────────────────────


@main.group()
@click.pass_context
def blocklist(ctx: click.Context):
    """Manage custom blocklists."""
    _require_config(ctx)
    ctx.obj["blocklists"] = BlocklistService(ctx.obj["config"], http=ctx.obj["http"])


def _run(ctx: click.Context, action, *args):
    try:
        return action(*args)
    except (InvalidInputError, ModerationError) as e:
        _fail(ctx, "Operation failed!", e)


@blocklist.command("create")
@click.argument("name")
@click.argument("description")
@click.pass_context
def blocklist_create(ctx: click.Context, name: str, description: str):
    """Create blocklist NAME."""
    created = _run(ctx, ctx.obj["blocklists"].create_blocklist, name, description)
    console.print("[green]v[/] Blocklist created")
    console.print(f"  Name: {created.name}")
    console.print(f"  Description: {created.description or ''}")


@blocklist.command("list")
@click.pass_context
def blocklist_list(ctx: click.Context):
    """List all blocklists."""
    lists = _run(ctx, ctx.obj["blocklists"].list_blocklists)
    if not lists:
        console.print("[yellow]No blocklists found.[/]")
        return

    table = Table(title=f"Blocklists ({len(lists)})")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for b in lists:
        table.add_row(b.name, b.description or "")
    console.print(table)


@blocklist.command("show")
@click.argument("name")
@click.pass_context
def blocklist_show(ctx: click.Context, name: str):
    """Show details for blocklist NAME."""
    found = _run(ctx, ctx.obj["blocklists"].get_blocklist, name)
    console.print(Panel(
        f"Name: {found.name}\nDescription: {found.description or 'N/A'}",
        title="Blocklist",
    ))


@blocklist.command("delete")
@click.argument("name")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def blocklist_delete(ctx: click.Context, name: str, yes: bool):
    """Delete blocklist NAME and all of its items."""
    if not yes and not click.confirm(f"Delete blocklist '{name}'?"):
        console.print("Cancelled.")
        return
    _run(ctx, ctx.obj["blocklists"].delete_blocklist, name)
    console.print(f"[green]v[/] Blocklist '{name}' deleted")


@blocklist.command("add-item")
@click.argument("name")
@click.argument("terms", nargs=-1, required=True)
@click.pass_context
def blocklist_add_item(ctx: click.Context, name: str, terms: tuple[str, ...]):
    """Add one or more TERMS to blocklist NAME."""
    items = _run(ctx, ctx.obj["blocklists"].add_blocklist_items, name, list(terms))
    for item in items:
        console.print(f"  [green]v[/] {item.text} (id: {item.id})")


@blocklist.command("remove-item")
@click.argument("name")
@click.argument("item_id")
@click.pass_context
def blocklist_remove_item(ctx: click.Context, name: str, item_id: str):
    """Remove item ITEM_ID from blocklist NAME."""
    _run(ctx, ctx.obj["blocklists"].remove_blocklist_item, name, item_id)
    console.print(f"[green]v[/] Item {item_id} removed from '{name}'")


@blocklist.command("list-items")
@click.argument("name")
@click.pass_context
def blocklist_list_items(ctx: click.Context, name: str):
    """List the terms in blocklist NAME."""
    items = _run(ctx, ctx.obj["blocklists"].list_blocklist_items, name)
    if not items:
        console.print(f"[yellow]Blocklist '{name}' has no items.[/]")
        return

    table = Table(title=f"Items in '{name}'")
    table.add_column("Item ID", style="dim")
    table.add_column("Text", style="cyan")
    for item in items:
        table.add_row(item.id, item.text)
    console.print(table)


if __name__ == "__main__":
    main()
