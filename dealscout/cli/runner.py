# dealscout/cli/runner.py

"""Headless CLI search runner, reusing the async orchestrator."""

import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from dealscout.browser.provider import resolve_browser_mode
from dealscout.fetch.strategy import FetchStrategy
from dealscout.models.listing import ProductListing
from dealscout.models.platform_result import SearchResponse
from dealscout.ranking.stats import summary_stats
from dealscout.scrapers.registry import PLATFORMS
from dealscout.services.search_orchestrator import SearchOrchestrator

logger = logging.getLogger("dealscout.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def resolve_platforms(platform_csv: str | None) -> list[str] | None:
    """Map a comma-separated list of platform ids to validated ids.

    Returns ``None`` (meaning every platform) when *platform_csv* is
    ``None``. Raises ``SystemExit`` on unknown ids.
    """
    if platform_csv is None:
        return None

    requested = [
        p.strip().lower() for p in platform_csv.split(",") if p.strip()
    ]
    unknown = [r for r in requested if r not in PLATFORMS]
    if unknown:
        valid = ", ".join(sorted(PLATFORMS))
        _err.print(
            f"[red]Unknown platform(s): {', '.join(unknown)}[/red]"
        )
        _err.print(f"[dim]Available: {valid}[/dim]")
        raise SystemExit(1)
    return requested


def _print_table(
    listings: list[ProductListing],
    best: ProductListing | None,
) -> None:
    """Render a Rich table of listings to stdout, cheapest first."""
    table = Table(
        title="Search Results",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Name", max_width=50)
    table.add_column("Price", justify="right", style="green")
    table.add_column("Rating", justify="center")
    table.add_column("Seller")
    table.add_column("Platform", style="magenta")
    table.add_column("URL", overflow="fold", style="dim")

    for idx, p in enumerate(sorted(listings, key=lambda x: x.price), 1):
        marker = " ★" if best is not None and p is best else ""
        table.add_row(
            f"{idx}{marker}",
            p.name[:50],
            f"{p.currency} {p.price:,.2f}",
            f"{p.rating:.1f}" if p.rating is not None else "—",
            p.seller,
            p.platform,
            p.url or "",
        )

    Console().print(table)


def _print_summary(response: SearchResponse) -> None:
    stats = summary_stats(response.filtered_products)
    _err.print(
        f"[green]✓ {stats.count} products from "
        f"{sum(1 for r in response.results if r.count)} platforms"
        f"[/green] [dim](avg {stats.avg_price:,.2f}, "
        f"min {stats.min_price:,.2f}, max {stats.max_price:,.2f})[/dim]"
    )
    if response.best_deal is not None:
        best = response.best_deal
        _err.print(
            f"[bold]Best deal:[/bold] {best.name} "
            f"({best.currency} {best.price:,.2f} on {best.platform})"
        )


async def cli_search(
    query: str,
    platform_csv: str | None,
    max_results: int | None,
    output_format: str,
    quick: bool = False,
    max_price: float | None = None,
    min_rating: float | None = None,
    browser_mode: str | None = None,
) -> int:
    """Run a headless search and return an exit code.

    0 when listings were found, 1 when none were, 2 for a bad browser mode.
    """
    platforms = resolve_platforms(platform_csv)
    try:
        mode = resolve_browser_mode(browser_mode)
    except ValueError as exc:
        _err.print(f"[red]Error: {exc}[/red]")
        return 2

    orchestrator = SearchOrchestrator(
        fetcher=FetchStrategy(browser_mode=mode, signal_handlers=True)
    )

    label = "quick platforms" if quick else ", ".join(
        platforms or orchestrator.supported_platforms()
    )
    _err.print(f"[bold]Searching:[/bold] {query}  [dim]{label}[/dim]")

    try:
        response = await orchestrator.search(
            query,
            platforms=platforms,
            max_results=max_results,
            max_price=max_price,
            min_rating=min_rating,
            quick=quick,
        )
    finally:
        await orchestrator.close()

    for error_msg in response.errors:
        _err.print(f"[red]Error: {error_msg}[/red]")

    if not response.filtered_products:
        _err.print("[yellow]No products found.[/yellow]")
        return 1

    _print_summary(response)

    if output_format == "table":
        _print_table(response.filtered_products, response.best_deal)
    else:
        json.dump(
            response.to_dict(),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")

    return 0


def list_platforms() -> int:
    """Print the platform registry."""
    table = Table(title="Supported Platforms", title_style="bold cyan")
    table.add_column("Platform", style="bold")
    table.add_column("Label")
    table.add_column("Currency", justify="center")
    table.add_column("Fetch", justify="center")
    for config in PLATFORMS.values():
        table.add_row(
            config.name,
            config.label,
            config.currency,
            "rendered" if config.requires_js else "static",
        )
    Console().print(table)
    return 0


async def run_health_check() -> int:
    """Run connectivity health check on all platforms."""
    from dealscout.services.health_checker import HealthChecker

    _err.print("[bold]Running platform health check...[/bold]")
    checker = HealthChecker()
    results = await checker.check_all()

    table = Table(
        title="Platform Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Platform", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = f"{r.latency_ms:.0f}ms" if r.latency_ms > 0 else "—"
        table.add_row(r.platform, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0
