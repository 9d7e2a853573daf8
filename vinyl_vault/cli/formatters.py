"""
Functions for formatting and displaying data in the console using Rich.
"""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from vinyl_vault.core.duplicates import DuplicateCheck
from vinyl_vault.models.config import VaultConfig
from vinyl_vault.models.enrichment import ReleaseExtras, Resolution
from vinyl_vault.models.records import (
    MarketplaceListing,
    PriceStats,
    SearchResult,
    WantlistItem,
)
from vinyl_vault.models.stats import CollectionStats, ValueEstimate
from vinyl_vault.utils.formatting import (
    artist_names,
    country_flag,
    country_short,
    format_condition,
    format_description,
    format_label,
    format_price,
)
from vinyl_vault.utils.sorting import Page, get_original_year


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "AuthenticationError": [
            "• Check the personal access token in your configuration.",
            "• Generate a new token at discogs.com/settings/developers.",
            "• Run `vinyl-vault init --force` with the new token.",
        ],
        "ConfigurationError": [
            "• Run `vinyl-vault init <TOKEN> <USERNAME>` to create a configuration.",
            "• Or set DISCOGS_TOKEN and DISCOGS_USERNAME in the environment.",
        ],
        "NotFoundError": [
            "• Double-check the release or instance ID.",
            "• The release may have been merged or removed on Discogs.",
        ],
        "RateLimitError": [
            "• Discogs allows 60 requests per minute per token.",
            "• Wait a minute and try again.",
        ],
        "CircuitBreakerError": [
            "• The app has detected too many API failures and is cooling down.",
            "• Check your internet connection.",
        ],
        "DiscogsAPIError": [
            "• The Discogs API might be temporarily unavailable.",
            "• Please try again in a few minutes.",
        ],
        "InvalidRequestError": [
            "• Check the arguments passed to the command.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration, hiding the token."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        if key == "token":
            value = "********" if value else "(not set)"
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: VaultConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Username:", f"[green]{config.username}[/green]")
    table.add_row("Token:", "[green]✓ Present[/green]")
    table.add_row("Request Delay:", f"{config.request_delay:.1f}s")
    table.add_row("Collection Pages:", f"{config.max_pages} × {config.per_page}")
    table.add_row("Default Sort:", config.default_sort)
    table.add_row("Marketplace:", f"{config.marketplace_country} / {config.currency}")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def build_collection_table(
    page: Page,
    master_years: Mapping[int, Resolution[int]],
    extras: Mapping[int, Resolution[ReleaseExtras]],
    title: str,
    currency: str = "USD",
) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAVY, title_justify="left")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Artist", style="cyan", max_width=28)
    table.add_column("Title", max_width=36)
    table.add_column("Year", justify="right")
    table.add_column("Orig.", justify="right", style="magenta")
    table.add_column("Format", style="dim", max_width=20)
    table.add_column("Country")
    table.add_column("Lowest", justify="right", style="green")
    table.add_column("Release", style="dim", justify="right")

    offset = (page.page - 1) * page.per_page
    for index, item in enumerate(page.items, start=1 + offset):
        info = item.basic_information
        original = get_original_year(item, master_years)
        resolution = extras.get(info.id)
        item_extras = resolution.value if resolution and not resolution.is_empty else None
        country = ""
        lowest = ""
        if item_extras:
            if item_extras.country:
                country = f"{country_flag(item_extras.country)} {country_short(item_extras.country)}"
            if item_extras.lowest_price is not None:
                lowest = format_price(item_extras.lowest_price, currency)

        table.add_row(
            str(index),
            artist_names(info),
            info.title,
            str(info.year or "—"),
            str(original) if original and original != info.year else "",
            format_description(info),
            country,
            lowest,
            str(info.id),
        )
    table.caption = f"Page {page.page}/{page.pages} • {page.total} records"
    return table


def print_wantlist_table(items: Sequence[WantlistItem]):
    console = Console()
    table = Table(title="Wantlist", box=box.SIMPLE_HEAVY, title_justify="left")
    table.add_column("Artist", style="cyan", max_width=28)
    table.add_column("Title", max_width=36)
    table.add_column("Year", justify="right")
    table.add_column("Label", style="dim", max_width=28)
    table.add_column("Release", style="dim", justify="right")
    for item in items:
        info = item.basic_information
        table.add_row(
            artist_names(info),
            info.title,
            str(info.year or "—"),
            format_label(info),
            str(info.id),
        )
    table.caption = f"{len(items)} records"
    console.print(table)


def print_search_results(results: Sequence[SearchResult]):
    console = Console()
    if not results:
        console.print("[yellow]No vinyl releases found.[/yellow]")
        return
    table = Table(title="Search Results", box=box.SIMPLE_HEAVY, title_justify="left")
    table.add_column("Release", style="dim", justify="right")
    table.add_column("Artist - Title", style="cyan", max_width=50)
    table.add_column("Year", justify="right")
    table.add_column("Country")
    table.add_column("Format", style="dim", max_width=30)
    for result in results:
        table.add_row(
            str(result.id),
            result.title,
            result.year or "—",
            result.country or "",
            ", ".join(result.format),
        )
    console.print(table)


def print_duplicate_check(check: DuplicateCheck):
    console = Console()
    if not check.has_duplicate:
        console.print("[green]✓ Not in your collection yet.[/green]")
        return
    console.print(
        f"[yellow]⚠ Already in your collection "
        f"({len(check.duplicates)} cop{'y' if len(check.duplicates) == 1 else 'ies'}):[/yellow]"
    )
    for match in check.duplicates:
        console.print(
            f"  • {match.artist} - {match.title} ({match.year or '?'}, {match.format}) "
            f"[dim]#{match.id}[/dim]"
        )


def print_value_estimate(estimate: ValueEstimate | None, currency: str = "USD"):
    console = Console()
    if estimate is None:
        console.print(
            "[yellow]No estimate available: none of the sampled records had "
            "marketplace prices.[/yellow]"
        )
        return

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column()
    table.add_row("Low:", f"[green]{format_price(estimate.low, currency)}[/green]")
    table.add_row("Mid:", f"[yellow]{format_price(estimate.mid, currency)}[/yellow]")
    table.add_row("High:", f"[magenta]{format_price(estimate.high, currency)}[/magenta]")
    table.add_row("", "")
    table.add_row(
        "Based on:",
        f"{estimate.priced_count} priced of {estimate.sample_size} sampled "
        f"({estimate.collection_size} records total)",
    )
    table.add_row("Avg. Lowest:", format_price(estimate.average_price, currency))

    console.print(
        Panel(
            table,
            title="💰 [bold]Estimated Collection Value[/bold]",
            border_style="green",
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print("[dim]Extrapolated from lowest marketplace prices; not an appraisal.[/dim]")


def _bar_table(title: str, rows: Sequence[tuple[Any, int]], width: int = 30) -> Table:
    table = Table(title=title, box=box.SIMPLE, title_justify="left", show_header=False)
    table.add_column(style="cyan")
    table.add_column(justify="right", style="green")
    table.add_column()
    peak = max((count for _, count in rows), default=1)
    for label, count in rows:
        bar = "█" * max(1, round(width * count / peak))
        table.add_row(str(label), str(count), f"[magenta]{bar}[/magenta]")
    return table


def print_stats(stats: CollectionStats):
    console = Console()
    console.print(
        f"\n[bold]Total Records:[/] [green]{stats.total_records}[/green]\n"
    )
    for title, rows in (
        ("Top Genres", stats.genres),
        ("Decades", stats.decades),
        ("Formats", stats.formats),
        ("Top Styles", stats.styles),
        ("Top Labels", stats.labels),
        ("Top Artists", stats.artists),
    ):
        if rows:
            console.print(_bar_table(title, rows))
    if stats.years:
        console.print(_bar_table("Records per Year", stats.years, width=20))


def print_marketplace(
    stats: PriceStats, listings: Sequence[MarketplaceListing], currency: str = "USD"
):
    console = Console()
    lowest = stats.lowest_price.value if stats.lowest_price else None
    console.print(
        f"[bold]Lowest:[/] [green]{format_price(lowest, currency)}[/green]  "
        f"[bold]For sale:[/] {stats.num_for_sale}"
    )
    if not listings:
        console.print("[dim]No listings ship from that country.[/dim]")
        return

    table = Table(box=box.SIMPLE_HEAVY)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Media")
    table.add_column("Sleeve")
    table.add_column("Seller", style="cyan")
    table.add_column("Ships From", style="dim")
    for listing in sorted(listings, key=lambda x: x.price.value):
        table.add_row(
            format_price(listing.price.value, listing.price.currency),
            format_condition(listing.condition),
            format_condition(listing.sleeve_condition),
            listing.seller.username,
            listing.ships_from,
        )
    console.print(table)
