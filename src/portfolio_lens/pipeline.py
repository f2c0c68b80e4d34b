"""Trade-to-portfolio reduction: the single entry point for building a snapshot."""

import datetime as dt
import logging
from collections.abc import Sequence

from portfolio_lens.analytics.history import generate_portfolio_history
from portfolio_lens.analytics.holdings import calculate_holdings
from portfolio_lens.analytics.metrics import calculate_portfolio_metrics
from portfolio_lens.analytics.risk import calculate_risk_metrics
from portfolio_lens.domain.models import PortfolioData, Trade
from portfolio_lens.domain.ports import MarketData
from portfolio_lens.ingest.csv_parser import parse_csv
from portfolio_lens.market.static import StaticMarketData

logger = logging.getLogger(__name__)


def process_portfolio_data(
    trades: Sequence[Trade],
    market: MarketData | None = None,
    *,
    today: dt.date | None = None,
) -> PortfolioData:
    """Build a complete snapshot from already-validated trades.

    Either every stage succeeds and a new snapshot is returned, or the
    exception propagates and nothing is produced.
    """
    if market is None:
        market = StaticMarketData.default()

    holdings = calculate_holdings(trades, market)
    metrics = calculate_portfolio_metrics(holdings)
    risk = calculate_risk_metrics(holdings)
    history = generate_portfolio_history(trades, market, today=today)

    logger.info(
        "Processed %d trades into %d holdings (value $%.2f, %d history points)",
        len(trades),
        len(holdings),
        metrics.total_value,
        len(history),
    )
    return PortfolioData(
        trades=list(trades),
        holdings=holdings,
        metrics=metrics,
        risk=risk,
        portfolio_history=history,
    )


def process_csv(
    content: str,
    market: MarketData | None = None,
    *,
    today: dt.date | None = None,
    strict_header: bool = False,
) -> PortfolioData:
    """Parse CSV text and build its snapshot in one call."""
    trades = parse_csv(content, today=today, strict_header=strict_header)
    return process_portfolio_data(trades, market, today=today)
