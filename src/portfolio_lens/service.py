"""Upload, load, clear and export workflow over the pipeline and snapshot store."""

import datetime as dt
import logging

from portfolio_lens.domain.models import PortfolioData
from portfolio_lens.domain.ports import MarketData
from portfolio_lens.pipeline import process_csv
from portfolio_lens.storage.portfolio_store import PortfolioStore

logger = logging.getLogger(__name__)


class PortfolioService:
    """Keeps exactly one current snapshot: replaced on upload, deleted on clear."""

    def __init__(
        self,
        store: PortfolioStore,
        market: MarketData,
        *,
        strict_header: bool = False,
    ) -> None:
        self._store = store
        self._market = market
        self._strict_header = strict_header

    async def upload(self, csv_text: str, *, today: dt.date | None = None) -> PortfolioData:
        """Parse and process ``csv_text``, then persist the result.

        Parsing or processing failures propagate before anything is written,
        so the previously stored snapshot stays in place.
        """
        data = process_csv(
            csv_text, self._market, today=today, strict_header=self._strict_header
        )
        await self._store.save(data)
        logger.info("Uploaded %d trades", len(data.trades))
        return data

    async def load(self) -> PortfolioData | None:
        return await self._store.load()

    async def clear(self) -> None:
        await self._store.clear()

    @staticmethod
    def export_json(data: PortfolioData, *, indent: int | None = 2) -> str:
        """Verbatim JSON dump of a snapshot, camelCase keys."""
        return data.model_dump_json(by_alias=True, indent=indent)
