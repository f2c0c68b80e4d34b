"""Shared fixtures."""

from datetime import date

import pytest

from portfolio_lens.domain.models import Trade
from portfolio_lens.market.static import StaticMarketData


@pytest.fixture
def market():
    return StaticMarketData(
        prices={"AAPL": 110.0, "MSFT": 400.0, "NVDA": 900.0},
        sectors={"AAPL": "Technology", "MSFT": "Technology", "XOM": "Energy"},
    )


@pytest.fixture
def trade():
    """Factory for trades with a short positional signature."""

    def _make(symbol: str, shares: float, price: float, day: str = "2024-01-01") -> Trade:
        return Trade(symbol=symbol, shares=shares, price=price, date=date.fromisoformat(day))

    return _make
