"""Click CLI entrypoint with Rich terminal output."""

import asyncio
import datetime as dt
import logging
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from portfolio_lens.config import Settings, get_settings
from portfolio_lens.domain.models import (
    DateRange,
    FilterState,
    Holding,
    HistoryPoint,
    PortfolioMetrics,
    RiskMetrics,
    SectorAllocation,
    Trade,
)
from portfolio_lens.errors import CSVParseError, PortfolioError, get_error_message
from portfolio_lens.market.static import StaticMarketData
from portfolio_lens.service import PortfolioService
from portfolio_lens.storage.kv import SqliteStore
from portfolio_lens.storage.models import init_db
from portfolio_lens.storage.portfolio_store import PortfolioStore

console = Console()
logger = logging.getLogger(__name__)


@click.group()
@click.option("--log-level", default=None, help="Override log level (DEBUG, INFO, WARNING, ERROR)")
def cli(log_level: str | None) -> None:
    """Portfolio Lens - trade-file portfolio analytics."""
    from portfolio_lens.logging import setup_logging

    setup_logging(get_settings(), cli_log_level=log_level)


@cli.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def import_trades(csv_file: Path) -> None:
    """Import a trade CSV, replacing the stored portfolio."""
    settings = get_settings()

    if csv_file.suffix.lower() != ".csv":
        raise click.ClickException(f"Unsupported file type {csv_file.suffix!r}; expected .csv")
    size = csv_file.stat().st_size
    if size > settings.max_upload_bytes:
        raise click.ClickException(
            f"File is {size:,} bytes; the limit is {settings.max_upload_bytes:,} bytes"
        )

    try:
        content = csv_file.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise click.ClickException(f"{csv_file.name} is not valid UTF-8 text") from exc

    async def _import() -> None:
        async with _service(settings) as service:
            data = await service.upload(content)
        console.print(
            Panel(
                f"Imported [bold]{len(data.trades)}[/bold] trades into "
                f"[bold]{len(data.holdings)}[/bold] holdings",
                title="Import",
                border_style="green",
            )
        )
        _print_metrics(data.metrics, settings.currency)

    _run(_import())


@cli.command()
@click.option("--sector", default="all", help="Only show holdings in this sector")
@click.option("--search", default="", help="Only show symbols containing this text")
def show(sector: str, search: str) -> None:
    """Show holdings, metrics, risk and sector allocation."""
    from portfolio_lens.analytics.filters import filter_holdings, filtered_metrics
    from portfolio_lens.analytics.metrics import calculate_sector_allocation

    settings = get_settings()

    async def _show() -> None:
        async with _service(settings) as service:
            data = await service.load()
        if data is None:
            console.print("[dim]No portfolio stored. Run `portfolio-lens import FILE`.[/dim]")
            return

        filters = FilterState(sector=sector, search_term=search)
        holdings = filter_holdings(data.holdings, filters)
        metrics = filtered_metrics(data.holdings, filters) if filters.is_active else data.metrics

        _print_holdings(holdings)
        _print_metrics(metrics, settings.currency)
        _print_risk(data.risk)
        _print_allocation(calculate_sector_allocation(holdings))

    _run(_show())


@cli.command()
@click.option(
    "--limit",
    default=30,
    type=click.IntRange(min=1),
    help="Number of most recent days to show",
)
def history(limit: int) -> None:
    """Show the reconstructed daily portfolio value."""
    settings = get_settings()

    async def _history() -> None:
        async with _service(settings) as service:
            data = await service.load()
        points = data.portfolio_history[-limit:] if data else []
        _print_history(points)

    _run(_history())


@cli.command()
@click.option(
    "--from", "start", type=click.DateTime(formats=["%Y-%m-%d"]), help="First trade date"
)
@click.option("--to", "end", type=click.DateTime(formats=["%Y-%m-%d"]), help="Last trade date")
def trades(start: dt.datetime | None, end: dt.datetime | None) -> None:
    """List stored trades, optionally within an inclusive date range."""
    from portfolio_lens.analytics.filters import filter_trades

    if start and end and start > end:
        raise click.BadParameter("--from must not be after --to", param_hint="--from")

    settings = get_settings()
    filters = FilterState(
        date_range=DateRange(
            start=start.date() if start else None,
            end=end.date() if end else None,
        )
    )

    async def _trades() -> None:
        async with _service(settings) as service:
            data = await service.load()
        if data is None:
            console.print("[dim]No portfolio stored. Run `portfolio-lens import FILE`.[/dim]")
            return
        _print_trades(filter_trades(data.trades, filters))

    _run(_trades())


@cli.command()
@click.argument("output", type=click.Path(dir_okay=False, writable=True, path_type=Path))
def export(output: Path) -> None:
    """Write the stored portfolio to OUTPUT as JSON."""
    settings = get_settings()

    async def _export() -> None:
        async with _service(settings) as service:
            data = await service.load()
        if data is None:
            raise click.ClickException("No portfolio stored; nothing to export")
        output.write_text(PortfolioService.export_json(data), encoding="utf-8")
        console.print(f"[green]Exported portfolio to {output}[/green]")

    _run(_export())


@cli.command()
def clear() -> None:
    """Delete the stored portfolio."""
    settings = get_settings()

    async def _clear() -> None:
        async with _service(settings) as service:
            await service.clear()
        console.print("[yellow]Portfolio data cleared.[/yellow]")

    _run(_clear())


@cli.command()
def config() -> None:
    """Show current configuration."""
    _print_config()


# ── Wiring ──────────────────────────────────────────────────────


@asynccontextmanager
async def _service(settings: Settings) -> AsyncIterator[PortfolioService]:
    market = _load_market(settings)
    engine = await init_db(str(settings.db_path))
    kv = SqliteStore(engine)
    try:
        yield PortfolioService(
            PortfolioStore(kv, stale_after_days=settings.stale_after_days),
            market,
            strict_header=settings.strict_header,
        )
    finally:
        await kv.close()


def _load_market(settings: Settings) -> StaticMarketData:
    if settings.prices_file is None:
        return StaticMarketData.default()
    try:
        return StaticMarketData.from_file(settings.prices_file)
    except (OSError, ValueError) as exc:
        # ValueError covers both malformed JSON and pydantic validation errors
        raise click.ClickException(
            f"Cannot load price file {settings.prices_file}: {exc}"
        ) from exc


def _run(coro: Coroutine[Any, Any, None]) -> None:
    try:
        asyncio.run(coro)
    except PortfolioError as exc:
        logger.error("Command failed: %s", exc.message, exc_info=exc)
        raise click.ClickException(_describe(exc)) from exc


def _describe(exc: PortfolioError) -> str:
    if isinstance(exc, CSVParseError):
        location = f"row {exc.row}" if exc.row else ""
        if exc.column:
            location += f", column {exc.column}"
        return f"{exc.message} ({location})" if location else exc.message
    return get_error_message(exc)


# ── Display helpers ─────────────────────────────────────────────


def _print_config() -> None:
    settings = get_settings()

    table = Table(title="Configuration", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="dim")
    table.add_column("Value")

    table.add_row("Database", str(settings.db_path))
    table.add_row("Price File", str(settings.prices_file or "[yellow]built-in defaults[/yellow]"))
    table.add_row("Stale After", f"{settings.stale_after_days} days")
    table.add_row("Max Upload", f"{settings.max_upload_bytes / (1024 * 1024):.0f} MiB")
    table.add_row("Strict Header", str(settings.strict_header))
    table.add_row("Currency", settings.currency)
    table.add_row("Log Level", settings.log_level)
    table.add_row("Log Directory", str(settings.log_dir))

    console.print(table)


def _print_holdings(holdings: list[Holding]) -> None:
    if not holdings:
        console.print("[dim]No holdings match.[/dim]")
        return

    table = Table(title="Holdings", show_header=True, header_style="bold cyan")
    table.add_column("Symbol")
    table.add_column("Sector", style="dim")
    table.add_column("Shares", justify="right")
    table.add_column("Avg Cost", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("P&L %", justify="right")

    for h in holdings:
        style = "green" if h.unrealized_gain_loss >= 0 else "red"
        table.add_row(
            h.symbol,
            h.sector,
            f"{h.shares_held:,.4f}".rstrip("0").rstrip("."),
            f"${h.avg_cost_basis:,.2f}",
            f"${h.current_price:,.2f}",
            f"${h.current_value:,.2f}",
            Text(f"${h.unrealized_gain_loss:+,.2f}", style=style),
            Text(f"{h.unrealized_gain_loss_percent:+.2f}%", style=style),
        )

    console.print(table)


def _print_metrics(metrics: PortfolioMetrics, currency: str) -> None:
    table = Table(title="Portfolio", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")

    style = "green" if metrics.total_gain_loss >= 0 else "red"
    table.add_row("Total Value", f"${metrics.total_value:,.2f} {currency}")
    table.add_row("Total P&L", Text(f"${metrics.total_gain_loss:+,.2f}", style=style))
    table.add_row("Total P&L %", Text(f"{metrics.total_gain_loss_percent:+.2f}%", style=style))
    table.add_row("Symbols", str(metrics.unique_symbols))
    if metrics.top_performer:
        top = metrics.top_performer
        table.add_row("Top Performer", f"{top.symbol} ({top.unrealized_gain_loss_percent:+.2f}%)")
    if metrics.worst_performer:
        worst = metrics.worst_performer
        table.add_row(
            "Worst Performer", f"{worst.symbol} ({worst.unrealized_gain_loss_percent:+.2f}%)"
        )

    console.print(table)


def _print_risk(risk: RiskMetrics) -> None:
    from portfolio_lens.analytics.risk import clamp_score

    table = Table(title="Risk", show_header=True, header_style="bold cyan")
    table.add_column("Score", style="dim")
    table.add_column("Value", justify="right")

    table.add_row("Concentration", f"{clamp_score(risk.concentration):.1f}")
    table.add_row("Diversification", f"{clamp_score(risk.diversification_score):.1f}")
    table.add_row("Volatility", f"{clamp_score(risk.volatility_score):.1f}")

    console.print(table)


def _print_allocation(allocation: list[SectorAllocation]) -> None:
    if not allocation:
        return

    table = Table(title="Sector Allocation", show_header=True, header_style="bold cyan")
    table.add_column("Sector")
    table.add_column("Value", justify="right")
    table.add_column("Weight", justify="right")

    for row in allocation:
        table.add_row(row.sector, f"${row.value:,.2f}", f"{row.percentage:.1f}%")

    console.print(table)


def _print_history(points: list[HistoryPoint]) -> None:
    if not points:
        console.print("[dim]No portfolio history yet.[/dim]")
        return

    table = Table(title="Portfolio Value", show_header=True, header_style="bold cyan")
    table.add_column("Date")
    table.add_column("Value", justify="right")
    table.add_column("Change", justify="right")

    previous: float | None = None
    for point in points:
        change = point.value - previous if previous is not None else 0.0
        style = "green" if change >= 0 else "red"
        table.add_row(
            point.date.isoformat(),
            f"${point.value:,.2f}",
            Text(f"${change:+,.2f}", style=style),
        )
        previous = point.value

    console.print(table)


def _print_trades(trades: list[Trade]) -> None:
    if not trades:
        console.print("[dim]No trades in this range.[/dim]")
        return

    table = Table(title="Trades", show_header=True, header_style="bold cyan")
    table.add_column("Date")
    table.add_column("Symbol")
    table.add_column("Side")
    table.add_column("Shares", justify="right")
    table.add_column("Price", justify="right")

    for t in sorted(trades, key=lambda t: t.date):
        side = Text("BUY", style="green") if t.shares >= 0 else Text("SELL", style="red")
        table.add_row(
            t.date.isoformat(),
            t.symbol,
            side,
            f"{abs(t.shares):,.4f}".rstrip("0").rstrip("."),
            f"${t.price:,.2f}",
        )

    console.print(table)
