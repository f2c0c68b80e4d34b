"""Daily portfolio value series replayed from trade history."""

import datetime as dt
import logging
from collections.abc import Sequence

from portfolio_lens.analytics.holdings import RunningPosition
from portfolio_lens.domain.models import HistoryPoint, Trade
from portfolio_lens.domain.ports import MarketData

logger = logging.getLogger(__name__)

_ONE_DAY = dt.timedelta(days=1)


def generate_portfolio_history(
    trades: Sequence[Trade],
    market: MarketData,
    *,
    today: dt.date | None = None,
) -> list[HistoryPoint]:
    """One point per calendar day from the first trade through ``today``.

    Trades are applied in date order (ties keep input order). A symbol whose
    running share count drops to zero or below leaves the running state
    entirely. Each day's value prices every open symbol at its looked-up
    price, falling back to its running average cost. Days with no positive
    value are omitted rather than zero-filled.

    Prices are static, so the value only changes on days where trades were
    applied; it is recomputed on those days and carried forward otherwise.
    """
    if not trades:
        return []

    today = today or dt.date.today()
    ordered = sorted(trades, key=lambda t: t.date)

    running: dict[str, RunningPosition] = {}
    history: list[HistoryPoint] = []
    next_trade = 0
    value = 0.0

    day = ordered[0].date
    while day <= today:
        applied = False
        while next_trade < len(ordered) and ordered[next_trade].date <= day:
            trade = ordered[next_trade]
            pos = running.setdefault(trade.symbol, RunningPosition())
            pos.apply(trade)
            if pos.shares <= 0:
                del running[trade.symbol]
            next_trade += 1
            applied = True

        if applied:
            value = _portfolio_value(running, market)

        if value > 0:
            history.append(HistoryPoint(date=day, value=value))
        day += _ONE_DAY

    logger.debug("Reconstructed %d history points from %d trades", len(history), len(trades))
    return history


def _portfolio_value(running: dict[str, RunningPosition], market: MarketData) -> float:
    total = 0.0
    for symbol, pos in running.items():
        price = market.price_of(symbol)
        total += pos.shares * (price if price is not None else pos.avg_cost)
    return total
