"""Filtered views over a portfolio snapshot."""

from collections.abc import Sequence

from portfolio_lens.analytics.metrics import calculate_portfolio_metrics
from portfolio_lens.domain.models import FilterState, Holding, PortfolioMetrics, Trade

ALL_SECTORS = "all"


def filter_holdings(holdings: Sequence[Holding], filters: FilterState) -> list[Holding]:
    """Holdings in the selected sector whose symbol contains the search term."""
    term = filters.search_term.lower()
    return [
        h
        for h in holdings
        if (filters.sector == ALL_SECTORS or h.sector == filters.sector)
        and (not term or term in h.symbol.lower())
    ]


def filter_trades(trades: Sequence[Trade], filters: FilterState) -> list[Trade]:
    """Trades dated inside the (inclusive, open-ended) date range."""
    start, end = filters.date_range.start, filters.date_range.end
    return [
        t
        for t in trades
        if (start is None or t.date >= start) and (end is None or t.date <= end)
    ]


def filtered_metrics(holdings: Sequence[Holding], filters: FilterState) -> PortfolioMetrics:
    return calculate_portfolio_metrics(filter_holdings(holdings, filters))
