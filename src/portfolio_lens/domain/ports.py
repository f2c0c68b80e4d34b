"""Port interfaces (Protocols) that the pipeline and store depend on.

Adapters implement these protocols so that the analytics code never couples
to a specific market-data provider or storage backend.
"""

from typing import Protocol

# ── Market Data ─────────────────────────────────────────────────


class MarketData(Protocol):
    """Current price and sector lookup. ``None`` means unknown, not an error."""

    def price_of(self, symbol: str) -> float | None: ...
    def sector_of(self, symbol: str) -> str | None: ...


# ── Key-Value Store ─────────────────────────────────────────────


class KeyValueStore(Protocol):
    """Named-blob persistence used by the snapshot store."""

    async def get(self, key: str) -> str | None: ...
    async def set(self, key: str, value: str) -> None: ...
    async def remove(self, key: str) -> None: ...
