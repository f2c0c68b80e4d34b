"""Domain models — trades, derived holdings, and the portfolio snapshot."""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialised with the camelCase keys of the exported JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Trades ──────────────────────────────────────────────────────


class Trade(CamelModel):
    """One executed buy (positive shares) or sell (negative shares)."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    shares: float
    price: float
    date: dt.date


# ── Derived State ───────────────────────────────────────────────


class Holding(CamelModel):
    """Aggregated position in one symbol, recomputed from trades on every call."""

    symbol: str
    shares_held: float
    avg_cost_basis: float
    current_price: float
    unrealized_gain_loss: float
    unrealized_gain_loss_percent: float
    current_value: float
    sector: str = "Unknown"


class PortfolioMetrics(CamelModel):
    """Portfolio-level summary statistics."""

    total_value: float = 0.0
    total_gain_loss: float = 0.0
    total_gain_loss_percent: float = 0.0
    top_performer: Holding | None = None
    worst_performer: Holding | None = None
    unique_symbols: int = 0


class RiskMetrics(CamelModel):
    """Concentration, diversification and volatility scores, roughly 0-100."""

    concentration: float = 0.0
    diversification_score: float = 0.0
    volatility_score: float = 0.0


class HistoryPoint(CamelModel):
    """Portfolio value on one calendar day."""

    date: dt.date
    value: float


class SectorAllocation(CamelModel):
    sector: str
    value: float
    percentage: float


class PortfolioData(CamelModel):
    """The full snapshot: persisted, exported and rendered as one unit."""

    trades: list[Trade] = Field(default_factory=list)
    holdings: list[Holding] = Field(default_factory=list)
    metrics: PortfolioMetrics = Field(default_factory=PortfolioMetrics)
    risk: RiskMetrics = Field(default_factory=RiskMetrics)
    portfolio_history: list[HistoryPoint] = Field(default_factory=list)


# ── Filtering ───────────────────────────────────────────────────


class DateRange(CamelModel):
    start: dt.date | None = None
    end: dt.date | None = None


class FilterState(CamelModel):
    """View filter over a snapshot; applying it never mutates the snapshot."""

    sector: str = "all"
    date_range: DateRange = Field(default_factory=DateRange)
    search_term: str = ""

    @property
    def is_active(self) -> bool:
        return (
            self.sector != "all"
            or bool(self.search_term)
            or self.date_range.start is not None
            or self.date_range.end is not None
        )
