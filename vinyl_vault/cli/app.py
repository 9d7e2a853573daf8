"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import json
import logging
import os
from functools import partial
from pathlib import Path

import aiofiles
import typer
from pathvalidate import sanitize_filename
from rich.console import Console
from rich.logging import RichHandler

from vinyl_vault import __version__
from vinyl_vault.api.client import DiscogsAPIClient
from vinyl_vault.api.lookups import fetch_lowest_price, fetch_marketplace_summary
from vinyl_vault.core.duplicates import check_duplicates
from vinyl_vault.core.enrichers import Enrichers
from vinyl_vault.core.library import build_shared_collection, load_collection, load_wantlist
from vinyl_vault.core.value_estimator import SAMPLE_SIZES, CollectionValueEstimator
from vinyl_vault.exceptions import VinylVaultError
from vinyl_vault.models.config import SORT_CHOICES, VaultConfig
from vinyl_vault.storage.cache import JsonFileStore
from vinyl_vault.storage.config_manager import ConfigManager
from vinyl_vault.utils.collection_stats import compute_stats
from vinyl_vault.utils.sorting import (
    ALL_DECADES,
    ALL_GENRES,
    DECADES,
    GENRES,
    FilterCriteria,
    SortKey,
    filter_and_sort,
    matches,
    paginate,
    sort_items,
)

from .formatters import (
    build_collection_table,
    print_config,
    print_duplicate_check,
    print_marketplace,
    print_search_results,
    print_stats,
    print_validation_table,
    print_value_estimate,
    print_wantlist_table,
)
from .progress_manager import EnrichmentProgress, EstimationProgressBar

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("vinyl_vault")

app = typer.Typer(
    name="vinyl-vault",
    help=(
        "Browse, sort and value your Discogs vinyl collection. Use 'vinyl-vault"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "vinyl-vault"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"

SAMPLE_CHOICES = {str(size) if size else "all": size for size in SAMPLE_SIZES}


def _load_config() -> VaultConfig:
    return ConfigManager(CONFIG_FILE).load_config()


def _make_client(config: VaultConfig) -> DiscogsAPIClient:
    return DiscogsAPIClient(
        config.token,
        config.username,
        user_agent=config.user_agent,
        requests_per_second=config.requests_per_second,
    )


def _parse_sort(value: str | None, default: str) -> SortKey:
    value = value or default
    if value not in SORT_CHOICES:
        raise typer.BadParameter(f"Sort must be one of: {', '.join(SORT_CHOICES)}.")
    return SortKey(value)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
    clear_cache: bool = typer.Option(
        False,
        "--clear-cache",
        help="Forget cached artist types, original years and release extras, then exit.",
    ),
):
    """Discogs Vinyl Collection Manager"""
    if version:
        console.print(f"[bold]vinyl-vault[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("vinyl_vault").setLevel(log_level)

    if clear_cache:
        console.print("[cyan]Clearing enrichment cache...[/cyan]")
        removed = JsonFileStore(CONFIG_DIR).clear()
        console.print(
            f"[green]✓ Cache cleared successfully ({removed} files removed).[/green]"
        )
        raise typer.Exit()

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]vinyl-vault init[/cyan]"
                " first."
            )
            raise typer.Exit(code=1)
        config_manager = ConfigManager(CONFIG_FILE)
        print_config(CONFIG_FILE, config_manager.get_display_dict())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    token: str = typer.Argument(..., help="Discogs personal access token."),
    username: str = typer.Argument(..., help="Your Discogs username."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite existing credentials without asking."
    ),
):
    """Initialize configuration with Discogs credentials."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm(
            "Configuration file already exists. Overwrite the credentials?"
        )
    ):
        raise typer.Abort()

    ConfigManager(CONFIG_FILE).save_new_config({"token": token, "username": username})
    console.print(f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")
    console.print("Ready! Try: [cyan]vinyl-vault collection[/cyan]")


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config = _load_config()
        print_validation_table(config)
    except VinylVaultError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command(name="collection")
def collection_command(
    search: str = typer.Option("", "--search", "-s", help="Match title, artist or label."),
    genre: str = typer.Option(
        ALL_GENRES, "--genre", "-g", help=f"Only this genre, e.g. {', '.join(GENRES[1:4])}."
    ),
    decade: str = typer.Option(
        ALL_DECADES, "--decade", "-d", help=f"One of: {', '.join(DECADES[1:])}."
    ),
    year: int | None = typer.Option(None, "--year", "-y", help="Only this release year."),
    sort: str | None = typer.Option(
        None, "--sort", help=f"One of: {', '.join(SORT_CHOICES)}."
    ),
    page: int = typer.Option(1, "--page", "-p", min=1, help="Page to show."),
    per_page: int = typer.Option(50, "--per-page", min=1, max=500, help="Rows per page."),
    enrich: bool = typer.Option(
        True,
        "--enrich/--no-enrich",
        help="Look up artist types and original years not cached yet.",
    ),
    extras: bool = typer.Option(
        True,
        "--extras/--no-extras",
        help="Look up country and lowest price for the records on this page.",
    ),
):
    """Browse your collection, sorted and filtered."""
    config = _load_config()
    criteria = FilterCriteria(
        search=search,
        genre=genre,
        decade=decade,
        year=str(year) if year else "",
        sort_by=_parse_sort(sort, config.default_sort),
    )

    async def _collection_async():
        async with _make_client(config) as client:
            loaded = await load_collection(client, config.max_pages, config.per_page)
            if not loaded.items:
                console.print("[yellow]Your collection is empty.[/yellow]")
                return

            matching = [item for item in loaded.items if matches(item, criteria)]
            enrichers = Enrichers.create(
                client, JsonFileStore(CONFIG_DIR), config.request_delay
            )

            def render():
                if enrich:
                    enrichers.request_sort_keys(matching)
                ordered = sort_items(
                    matching,
                    criteria.sort_by,
                    enrichers.artist_types.resolved,
                    enrichers.master_years.resolved,
                )
                view = paginate(ordered, page, per_page)
                if enrich and extras:
                    enrichers.request_extras(view.items)
                title = f"{config.username}'s Collection"
                if loaded.truncated:
                    title += f" (first {len(loaded.items)} of {loaded.total})"
                return build_collection_table(
                    view,
                    enrichers.master_years.resolved,
                    enrichers.release_extras.resolved,
                    title=title,
                    currency=config.currency,
                )

            try:
                table = render()
                if not enrichers.loading:
                    console.print(table)
                    return
                console.print(
                    "[dim]Fetching details not cached yet (about one per second). "
                    "Press Ctrl+C to stop; progress is kept.[/dim]"
                )
                async with EnrichmentProgress(console, enrichers, render) as progress:
                    await progress.wait()
            finally:
                await enrichers.close()

    asyncio.run(_collection_async())


@app.command(name="wantlist")
def wantlist_command(
    search: str = typer.Option("", "--search", "-s", help="Match title, artist or label."),
    sort: str = typer.Option("added", "--sort", help="added, artist, title or year."),
):
    """Show your wantlist."""
    config = _load_config()
    criteria = FilterCriteria(search=search, sort_by=_parse_sort(sort, "added"))

    async def _wantlist_async():
        async with _make_client(config) as client:
            items = await load_wantlist(client)
        print_wantlist_table(filter_and_sort(items, criteria))

    asyncio.run(_wantlist_async())


@app.command(name="want-add")
def want_add(release_id: int = typer.Argument(..., help="Discogs release ID.")):
    """Add a release to your wantlist."""
    config = _load_config()

    async def _want_add_async():
        async with _make_client(config) as client:
            await client.add_to_wantlist(release_id)
        console.print(f"[green]✓ Release {release_id} added to your wantlist.[/green]")

    asyncio.run(_want_add_async())


@app.command(name="want-remove")
def want_remove(release_id: int = typer.Argument(..., help="Discogs release ID.")):
    """Remove a release from your wantlist."""
    config = _load_config()

    async def _want_remove_async():
        async with _make_client(config) as client:
            await client.remove_from_wantlist(release_id)
        console.print(
            f"[green]✓ Release {release_id} removed from your wantlist.[/green]"
        )

    asyncio.run(_want_remove_async())


@app.command()
def search(
    query: str = typer.Argument(..., help="Artist, title, barcode or catalog number."),
    limit: int = typer.Option(20, "--limit", "-n", min=1, max=100),
):
    """Search the Discogs database for vinyl releases."""
    config = _load_config()

    async def _search_async():
        async with _make_client(config) as client:
            results = await client.search_releases(query, per_page=limit)
        print_search_results(results)

    asyncio.run(_search_async())


@app.command()
def add(
    release_id: int = typer.Argument(..., help="Discogs release ID."),
    folder: int = typer.Option(1, "--folder", help="Collection folder ID."),
    check: bool = typer.Option(
        True, "--check/--no-check", help="Look for copies already in the collection."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Add even if a copy is already there."
    ),
):
    """Add a release to your collection."""
    config = _load_config()

    async def _add_async():
        async with _make_client(config) as client:
            release = await client.get_release(release_id)
            artists = release.get("artists") or []
            artist = artists[0].get("name", "") if artists else ""
            title = release.get("title", "")

            if check and artist and title:
                result = await check_duplicates(
                    client, artist, title, config.max_pages, config.per_page
                )
                if result.has_duplicate:
                    print_duplicate_check(result)
                    if not force and not typer.confirm("Add another copy?"):
                        raise typer.Abort()

            instance_id = await client.add_to_collection(release_id, folder)
        console.print(
            f"[green]✓ Added {artist} - {title}[/green] "
            f"[dim](instance {instance_id})[/dim]"
        )

    asyncio.run(_add_async())


@app.command()
def remove(
    release_id: int = typer.Argument(..., help="Discogs release ID."),
    instance_id: int = typer.Argument(..., help="Instance ID of the copy to remove."),
    folder: int = typer.Option(1, "--folder", help="Collection folder ID."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
):
    """Remove one copy of a release from your collection."""
    if not yes and not typer.confirm(
        f"Remove instance {instance_id} of release {release_id} from your collection?"
    ):
        console.print("[yellow]Operation cancelled.[/yellow]")
        raise typer.Abort()

    config = _load_config()

    async def _remove_async():
        async with _make_client(config) as client:
            await client.remove_from_collection(release_id, instance_id, folder)
        console.print(f"[green]✓ Instance {instance_id} removed.[/green]")

    asyncio.run(_remove_async())


@app.command(name="check-duplicate")
def check_duplicate(
    artist: str = typer.Argument(..., help="Artist name."),
    title: str = typer.Argument(..., help="Release title."),
):
    """Check whether a record is already in your collection."""
    config = _load_config()

    async def _check_async():
        async with _make_client(config) as client:
            result = await check_duplicates(
                client, artist, title, config.max_pages, config.per_page
            )
        print_duplicate_check(result)

    asyncio.run(_check_async())


@app.command()
def value(
    sample: str = typer.Option(
        "20", "--sample", "-n", help="Records to sample: 20, 50, 100 or all."
    ),
):
    """Estimate what your collection is worth from marketplace prices."""
    if sample.lower() not in SAMPLE_CHOICES:
        raise typer.BadParameter("Sample must be 20, 50, 100 or all.")
    sample_size = SAMPLE_CHOICES[sample.lower()]
    config = _load_config()

    async def _value_async():
        async with _make_client(config) as client:
            loaded = await load_collection(client, config.max_pages, config.per_page)
            if not loaded.items:
                console.print("[yellow]Your collection is empty.[/yellow]")
                return

            estimator = CollectionValueEstimator(
                partial(fetch_lowest_price, client, currency=config.currency),
                delay=config.request_delay,
            )
            with EstimationProgressBar(console) as bar:
                estimate = await estimator.estimate(
                    loaded.items,
                    sample_size,
                    on_progress=bar.update,
                    collection_size=loaded.total,
                )
        print_value_estimate(estimate, config.currency)

    asyncio.run(_value_async())


@app.command()
def stats():
    """Show genre, decade, format and label breakdowns of your collection."""
    config = _load_config()

    async def _stats_async():
        async with _make_client(config) as client:
            loaded = await load_collection(client, config.max_pages, config.per_page)
        print_stats(compute_stats(loaded.items))

    asyncio.run(_stats_async())


@app.command()
def market(
    release_id: int = typer.Argument(..., help="Discogs release ID."),
    country: str | None = typer.Option(
        None, "--country", "-c", help="Only listings shipping from this country."
    ),
):
    """Show marketplace prices and listings for a release."""
    config = _load_config()

    async def _market_async():
        async with _make_client(config) as client:
            price_stats, listings = await fetch_marketplace_summary(
                client,
                release_id,
                country=country or config.marketplace_country,
                currency=config.currency,
            )
        print_marketplace(price_stats, listings, config.currency)

    asyncio.run(_market_async())


@app.command()
def share(
    page: int = typer.Option(1, "--page", "-p", min=1),
    per_page: int = typer.Option(100, "--per-page", min=1, max=100),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="File or directory to write the JSON to. Prints to stdout if omitted.",
    ),
):
    """Export a read-only, public view of one collection page as JSON."""
    config = _load_config()

    async def _share_async():
        async with _make_client(config) as client:
            payload = await build_shared_collection(client, page, per_page)

        if output is None:
            console.print_json(data=payload)
            return

        destination = output
        if output.is_dir():
            destination = output / sanitize_filename(
                f"{config.username}-collection-p{page}.json"
            )
        async with aiofiles.open(destination, "w", encoding="utf-8") as f:
            await f.write(json.dumps(payload, indent=2, ensure_ascii=False))
        console.print(
            f"[green]✓ {len(payload['items'])} records written to '{destination}'[/green]"
        )

    asyncio.run(_share_async())
