"""Static price and sector tables standing in for a market-data service."""

import json
import logging
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, TypeAdapter

logger = logging.getLogger(__name__)

# Demonstration quotes used when no price file is configured.
DEFAULT_PRICES: dict[str, float] = {
    "AAPL": 185.5,
    "TSLA": 240.8,
    "GOOGL": 142.3,
    "MSFT": 378.9,
    "AMZN": 145.2,
    "NVDA": 875.4,
    "META": 485.6,
    "NFLX": 445.3,
    "AMD": 142.8,
    "INTC": 43.2,
}

DEFAULT_SECTORS: dict[str, str] = {
    "AAPL": "Technology",
    "TSLA": "Automotive",
    "GOOGL": "Technology",
    "MSFT": "Technology",
    "AMZN": "E-commerce",
    "NVDA": "Technology",
    "META": "Technology",
    "NFLX": "Entertainment",
    "AMD": "Technology",
    "INTC": "Technology",
}


class QuoteEntry(BaseModel):
    """One row of a price file."""

    price: float | None = Field(default=None, gt=0)
    sector: str | None = None


_PRICE_FILE = TypeAdapter(dict[str, QuoteEntry])


class StaticMarketData:
    """In-memory lookup tables keyed by uppercase ticker."""

    def __init__(
        self,
        prices: Mapping[str, float] | None = None,
        sectors: Mapping[str, str] | None = None,
    ) -> None:
        self._prices = {k.upper(): v for k, v in (prices or {}).items()}
        self._sectors = {k.upper(): v for k, v in (sectors or {}).items()}

    @classmethod
    def default(cls) -> "StaticMarketData":
        return cls(DEFAULT_PRICES, DEFAULT_SECTORS)

    @classmethod
    def from_file(cls, path: Path) -> "StaticMarketData":
        """Load ``{"AAPL": {"price": 185.5, "sector": "Technology"}, ...}``."""
        entries = _PRICE_FILE.validate_python(json.loads(path.read_text(encoding="utf-8")))
        prices = {sym: e.price for sym, e in entries.items() if e.price is not None}
        sectors = {sym: e.sector for sym, e in entries.items() if e.sector}
        logger.info("Loaded %d prices and %d sectors from %s", len(prices), len(sectors), path)
        return cls(prices, sectors)

    def price_of(self, symbol: str) -> float | None:
        return self._prices.get(symbol.upper())

    def sector_of(self, symbol: str) -> str | None:
        return self._sectors.get(symbol.upper())

    @property
    def symbols(self) -> list[str]:
        return sorted(set(self._prices) | set(self._sectors))
