"""Portfolio summary statistics and sector allocation — pure computation, no I/O."""

from collections.abc import Sequence

from portfolio_lens.domain.models import Holding, PortfolioMetrics, SectorAllocation


def calculate_portfolio_metrics(holdings: Sequence[Holding]) -> PortfolioMetrics:
    """Totals plus best/worst performer by unrealized gain/loss percent.

    The percent uses ``total_value - total_gain_loss`` as the aggregate cost
    basis; it is not a weighted average of per-holding percents.
    """
    if not holdings:
        return PortfolioMetrics()

    total_value = sum(h.current_value for h in holdings)
    total_gain_loss = sum(h.unrealized_gain_loss for h in holdings)
    cost_basis = total_value - total_gain_loss
    total_gain_loss_pct = (
        total_gain_loss / cost_basis * 100 if total_value > 0 and cost_basis else 0.0
    )

    # max/min keep the first holding on ties
    return PortfolioMetrics(
        total_value=total_value,
        total_gain_loss=total_gain_loss,
        total_gain_loss_percent=total_gain_loss_pct,
        top_performer=max(holdings, key=lambda h: h.unrealized_gain_loss_percent),
        worst_performer=min(holdings, key=lambda h: h.unrealized_gain_loss_percent),
        unique_symbols=len(holdings),
    )


def calculate_sector_allocation(holdings: Sequence[Holding]) -> list[SectorAllocation]:
    """Current value per sector with its share of the total, largest first."""
    total_value = sum(h.current_value for h in holdings)
    by_sector: dict[str, float] = {}
    for h in holdings:
        by_sector[h.sector] = by_sector.get(h.sector, 0.0) + h.current_value

    allocation = [
        SectorAllocation(
            sector=sector,
            value=value,
            percentage=value / total_value * 100 if total_value > 0 else 0.0,
        )
        for sector, value in by_sector.items()
    ]
    allocation.sort(key=lambda a: a.value, reverse=True)
    return allocation
