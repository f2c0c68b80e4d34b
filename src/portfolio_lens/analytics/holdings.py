"""Lot aggregation: trades in, one holding per symbol with a positive position out."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from portfolio_lens.domain.models import Holding, Trade
from portfolio_lens.domain.ports import MarketData

logger = logging.getLogger(__name__)

UNKNOWN_SECTOR = "Unknown"


@dataclass
class RunningPosition:
    """Running signed share count and signed cost for one symbol."""

    shares: float = 0.0
    cost: float = 0.0

    def apply(self, trade: Trade) -> None:
        self.shares += trade.shares
        self.cost += trade.shares * trade.price

    @property
    def avg_cost(self) -> float:
        return self.cost / self.shares


def aggregate_positions(trades: Iterable[Trade]) -> dict[str, RunningPosition]:
    """Sum shares and cost per symbol, keeping first-seen symbol order."""
    positions: dict[str, RunningPosition] = {}
    for trade in trades:
        positions.setdefault(trade.symbol, RunningPosition()).apply(trade)
    return positions


def calculate_holdings(trades: Iterable[Trade], market: MarketData) -> list[Holding]:
    """Reduce trades to holdings sorted by current value, largest first.

    Buys and sells both flow into the cost total with the trade's sign, so
    ``avg_cost_basis`` is ``sum(shares * price) / sum(shares)`` over every
    trade of the symbol. Symbols whose net share count is not positive are
    dropped.
    """
    holdings: list[Holding] = []
    for symbol, pos in aggregate_positions(trades).items():
        if pos.shares <= 0:
            continue

        avg_cost = pos.avg_cost
        price = market.price_of(symbol)
        current_price = price if price is not None else avg_cost
        current_value = pos.shares * current_price
        cost_basis = pos.shares * avg_cost
        gain_loss = current_value - cost_basis
        gain_loss_pct = gain_loss / cost_basis * 100 if cost_basis else 0.0

        holdings.append(
            Holding(
                symbol=symbol,
                shares_held=pos.shares,
                avg_cost_basis=avg_cost,
                current_price=current_price,
                unrealized_gain_loss=gain_loss,
                unrealized_gain_loss_percent=gain_loss_pct,
                current_value=current_value,
                sector=market.sector_of(symbol) or UNKNOWN_SECTOR,
            )
        )

    holdings.sort(key=lambda h: h.current_value, reverse=True)
    logger.debug("Aggregated %d holdings", len(holdings))
    return holdings
