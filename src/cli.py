"""CLI interface for the vitrine site store."""

import json
import logging
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from vitrine.cart.checkout import CustomerDetails, build_order_message, handoff_url
from vitrine.config import VitrineConfig, load_config, merge_cli_overrides
from vitrine.content.defaults import new_catalog_item
from vitrine.content.models import CollectionName, MutationResult, SectionName
from vitrine.shared.errors import CheckoutError
from vitrine.site import Site

app = typer.Typer(
    name="vitrine",
    help="Edit the site content, cart and theme of a vitrine catalog from the terminal.",
)
cart_app = typer.Typer(help="Inspect and edit the shopping cart.")
app.add_typer(cart_app, name="cart")

console = Console()
err_console = Console(stderr=True)

RESULT_MESSAGES: dict[MutationResult, str] = {
    MutationResult.APPLIED: "[green]Done.[/green]",
    MutationResult.UNCHANGED: "Nothing changed.",
    MutationResult.DENIED: "[red]Not logged in.[/red]",
    MutationResult.NOT_FOUND: "[red]No such item.[/red]",
    MutationResult.DECLINED: "Cancelled.",
    MutationResult.INVALID: "[red]Invalid value.[/red]",
    MutationResult.DUPLICATE: "[red]An item with that id already exists.[/red]",
    MutationResult.FAILED: "[red]Storage could not be updated.[/red]",
}

PasswordOption = Annotated[
    Optional[str],
    typer.Option(
        "--password",
        "-p",
        envvar="VITRINE_ADMIN_PASSWORD",
        help="Admin password. Prompted for when neither this nor the env var is set.",
    ),
]
YesOption = Annotated[
    bool,
    typer.Option("--yes", "-y", help="Skip the confirmation prompt."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from vitrine import __version__

        console.print(f"vitrine {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .vitrine.toml file."),
    ] = None,
    storage_dir: Annotated[
        Optional[str],
        typer.Option("--storage-dir", help="Directory holding the saved records."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show debug logging."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """vitrine - content store for a single-page fashion catalog."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    config = merge_cli_overrides(load_config(config_path), storage_dir=storage_dir)
    ctx.obj = config


def _open(ctx: typer.Context, assume_yes: bool = False) -> Site:
    config: VitrineConfig = ctx.obj

    def confirm(message: str) -> bool:
        return assume_yes or typer.confirm(message, default=False)

    return Site.open(config, confirm=confirm)


def _login(site: Site, password: str | None) -> None:
    if password is None:
        password = typer.prompt("Admin password", hide_input=True)
    if not site.store.login(password):
        err_console.print("[red]Wrong password.[/red]")
        site.close(flush=False)
        raise typer.Exit(code=1)


def _report(result: MutationResult) -> None:
    message = RESULT_MESSAGES[result]
    if result.ok or result is MutationResult.DECLINED:
        console.print(message)
        return
    err_console.print(message)
    raise typer.Exit(code=1)


def _parse_value(raw: str, as_json: bool) -> Any:
    if not as_json:
        return raw
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        err_console.print(f"[red]Value is not valid JSON:[/red] {exc}")
        raise typer.Exit(code=1) from exc


@app.command()
def show(
    ctx: typer.Context,
    section: Annotated[
        Optional[SectionName],
        typer.Argument(help="Section to print. Prints everything when omitted."),
    ] = None,
) -> None:
    """Print the current site content as JSON."""
    with _open(ctx) as site:
        document = site.store.content.to_document()
    console.print_json(data=document[section.value] if section else document)


@app.command()
def status(ctx: typer.Context) -> None:
    """Show where content is stored and what is saved."""
    with _open(ctx) as site:
        table = Table(show_header=False)
        table.add_row("Storage", str(ctx.obj.storage_path))
        table.add_row("Saved content", "yes" if site.store.has_persisted_content else "no (defaults)")
        table.add_row("Cart entries", str(len(site.store.cart)))
        table.add_row("Save status", site.store.save_status.value)
    console.print(table)


@app.command("set")
def set_field(
    ctx: typer.Context,
    section: Annotated[SectionName, typer.Argument(help="Section to edit.")],
    key: Annotated[str, typer.Argument(help="Field name, e.g. title or buttonText.")],
    value: Annotated[str, typer.Argument(help="New value.")],
    as_json: Annotated[bool, typer.Option("--json", help="Parse VALUE as JSON.")] = False,
    password: PasswordOption = None,
) -> None:
    """Replace one field of a section (theme colors included)."""
    with _open(ctx) as site:
        _login(site, password)
        result = site.store.update_field(section, key, _parse_value(value, as_json))
    _report(result)


@app.command("item-set")
def item_set(
    ctx: typer.Context,
    section: Annotated[CollectionName, typer.Argument(help="story or lookbook.")],
    item_id: Annotated[str, typer.Argument(help="Id of the item to edit.")],
    field: Annotated[str, typer.Argument(help="Item field, e.g. title or image.")],
    value: Annotated[str, typer.Argument(help="New value.")],
    password: PasswordOption = None,
) -> None:
    """Replace one field of a catalog item."""
    with _open(ctx) as site:
        _login(site, password)
        result = site.store.update_item_field(section, item_id, field, value)
    _report(result)


@app.command("item-add")
def item_add(
    ctx: typer.Context,
    section: Annotated[CollectionName, typer.Argument(help="story or lookbook.")],
    title: Annotated[str, typer.Option("--title", help="Item title.")],
    subtitle: Annotated[str, typer.Option("--subtitle", help="One-line subtitle.")],
    category: Annotated[str, typer.Option("--category", help="Defaults to 'Look 0N'.")] = "",
    image: Annotated[str, typer.Option("--image", help="Image URL or data URI.")] = "",
    description: Annotated[str, typer.Option("--description")] = "",
    price: Annotated[Optional[str], typer.Option("--price")] = None,
    password: PasswordOption = None,
) -> None:
    """Append a new catalog item to a collection."""
    extra = {"price": price} if price is not None else {}
    with _open(ctx) as site:
        _login(site, password)
        item = new_catalog_item(
            site.store.content.collection(section),
            title,
            subtitle,
            category=category,
            image=image,
            description=description,
            **extra,
        )
        result = site.store.add_item(section, item)
    if result is MutationResult.APPLIED:
        console.print(f"Added item [bold]{item.id}[/bold]")
    _report(result)


@app.command("item-move")
def item_move(
    ctx: typer.Context,
    section: Annotated[CollectionName, typer.Argument(help="story or lookbook.")],
    item_id: Annotated[str, typer.Argument(help="Id of the item to move.")],
    position: Annotated[int, typer.Argument(help="New zero-based position.")],
    password: PasswordOption = None,
) -> None:
    """Move a catalog item to a new position."""
    with _open(ctx) as site:
        _login(site, password)
        items = site.store.content.collection(section).items
        index = next((i for i, item in enumerate(items) if item.id == item_id), None)
        if index is None:
            result = MutationResult.NOT_FOUND
        else:
            moved = items.pop(index)
            items.insert(max(0, min(position, len(items))), moved)
            result = site.store.reorder_items(section, items)
    _report(result)


@app.command("item-remove")
def item_remove(
    ctx: typer.Context,
    section: Annotated[CollectionName, typer.Argument(help="story or lookbook.")],
    item_id: Annotated[str, typer.Argument(help="Id of the item to remove.")],
    password: PasswordOption = None,
) -> None:
    """Remove a catalog item from a collection."""
    with _open(ctx) as site:
        _login(site, password)
        result = site.store.remove_item(section, item_id)
    _report(result)


@app.command("export")
def export_cmd(
    ctx: typer.Context,
    output: Annotated[
        Optional[Path],
        typer.Argument(help="File or directory to write. Defaults to a dated file in CWD."),
    ] = None,
) -> None:
    """Write the full site content to a JSON backup."""
    with _open(ctx) as site:
        path = site.transfer.write_export(output)
    console.print(f"Exported to [bold]{path}[/bold]")


@app.command("import")
def import_cmd(
    ctx: typer.Context,
    source: Annotated[Path, typer.Argument(help="JSON document produced by export.")],
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Reject documents missing sections."),
    ] = False,
    yes: YesOption = False,
    password: PasswordOption = None,
) -> None:
    """Replace all site content with a backup document."""
    with _open(ctx, assume_yes=yes) as site:
        _login(site, password)
        if strict:
            site.transfer.strict = True
        report = site.transfer.read_import(source)
    if report.error:
        err_console.print(f"[red]Import failed:[/red] {report.error}")
        raise typer.Exit(code=1)
    _report(report.result)


@app.command()
def reset(
    ctx: typer.Context,
    yes: YesOption = False,
    password: PasswordOption = None,
) -> None:
    """Discard every edit and restore the built-in content."""
    with _open(ctx, assume_yes=yes) as site:
        _login(site, password)
        result = site.store.reset_content()
    _report(result)


@cart_app.command("list")
def cart_list(ctx: typer.Context) -> None:
    """List cart entries with their positions."""
    with _open(ctx) as site:
        items = site.store.cart.items
    if not items:
        console.print("The cart is empty.")
        return
    table = Table("#", "Id", "Title", "Category")
    for index, item in enumerate(items):
        table.add_row(str(index), item.id, item.title, item.category)
    console.print(table)


@cart_app.command("add")
def cart_add(
    ctx: typer.Context,
    section: Annotated[CollectionName, typer.Argument(help="story or lookbook.")],
    item_id: Annotated[str, typer.Argument(help="Id of the catalog item.")],
) -> None:
    """Add a catalog item to the cart."""
    with _open(ctx) as site:
        collection = site.store.content.collection(section)
        index = collection.find_item(item_id)
        if index is None:
            result = MutationResult.NOT_FOUND
        else:
            result = site.store.cart.add(collection.items[index])
    _report(result)


@cart_app.command("remove")
def cart_remove(
    ctx: typer.Context,
    index: Annotated[int, typer.Argument(help="Position shown by 'cart list'.")],
) -> None:
    """Remove the cart entry at a position."""
    with _open(ctx) as site:
        result = site.store.cart.remove(index)
    _report(result)


@cart_app.command("clear")
def cart_clear(ctx: typer.Context) -> None:
    """Empty the cart."""
    with _open(ctx) as site:
        result = site.store.cart.clear()
    _report(result)


@app.command()
def checkout(
    ctx: typer.Context,
    name: Annotated[str, typer.Option("--name", help="Customer name.")],
    phone: Annotated[str, typer.Option("--phone")] = "",
    address: Annotated[str, typer.Option("--address")] = "",
    notes: Annotated[str, typer.Option("--notes")] = "",
    clear: Annotated[bool, typer.Option("--clear", help="Empty the cart afterwards.")] = False,
) -> None:
    """Print the order message and the link that hands it off."""
    config: VitrineConfig = ctx.obj
    customer = CustomerDetails(name=name, phone=phone, address=address, notes=notes)
    with _open(ctx) as site:
        try:
            message = build_order_message(site.store.cart.items, customer, config.checkout.brand)
            url = handoff_url(message, config.checkout.destination)
        except CheckoutError as exc:
            err_console.print(f"[red]Checkout failed:[/red] {exc}")
            raise typer.Exit(code=1) from exc
        if clear:
            site.store.cart.clear()
    console.print(message, markup=False)
    console.print()
    console.print(url, markup=False, soft_wrap=True)


if __name__ == "__main__":
    app()
