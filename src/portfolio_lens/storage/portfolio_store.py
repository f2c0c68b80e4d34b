"""Snapshot persistence on top of any :class:`KeyValueStore`."""

import json
import logging
import warnings
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from pydantic import ValidationError
from sqlalchemy.exc import OperationalError

from portfolio_lens.domain.models import PortfolioData
from portfolio_lens.domain.ports import KeyValueStore
from portfolio_lens.errors import StorageError
from portfolio_lens.storage.kv import StoreQuotaExceededError

logger = logging.getLogger(__name__)

DATA_KEY = "portfolio-data"
TIMESTAMP_KEY = "portfolio-timestamp"
VERSION_KEY = "portfolio-version"
FORMAT_VERSION = "1.0"
SNAPSHOT_KEYS = (DATA_KEY, TIMESTAMP_KEY, VERSION_KEY)


class StalePortfolioWarning(UserWarning):
    """A loaded snapshot is older than the configured freshness window."""


class PortfolioStore:
    """Saves, loads and clears the single current portfolio snapshot."""

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        stale_after_days: int = 30,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._kv = kv
        self._stale_after = timedelta(days=stale_after_days)
        self._clock = clock

    async def save(self, data: PortfolioData) -> None:
        """Replace the stored snapshot wholesale.

        If any of the three writes fails, the previous data, timestamp and
        version are written back so a reader never sees new data under an
        old timestamp.
        """
        serialized = data.model_dump_json(by_alias=True)
        previous: dict[str, str | None] | None = None
        try:
            previous = {key: await self._kv.get(key) for key in SNAPSHOT_KEYS}
            await self._kv.set(DATA_KEY, serialized)
            await self._kv.set(TIMESTAMP_KEY, self._clock().isoformat())
            await self._kv.set(VERSION_KEY, FORMAT_VERSION)
            saved = await self._kv.get(DATA_KEY)
        except Exception as exc:
            if previous is not None:
                await self._restore(previous)
            if _is_quota_error(exc):
                raise StorageError(
                    "Storage quota exceeded. Please clear some data.", "save"
                ) from exc
            raise StorageError(f"Failed to save portfolio data: {exc}", "save") from exc

        if not saved:
            raise StorageError("Failed to verify data was saved", "save")
        logger.info(
            "Saved portfolio: %d trades, %d holdings (%d bytes)",
            len(data.trades),
            len(data.holdings),
            len(serialized),
        )

    async def load(self) -> PortfolioData | None:
        """Return the stored snapshot, or ``None`` when nothing is stored.

        Malformed data raises ``StorageError``; data older than the freshness
        window is returned but flagged with :class:`StalePortfolioWarning`.
        """
        try:
            raw = await self._kv.get(DATA_KEY)
            timestamp = await self._kv.get(TIMESTAMP_KEY)
        except Exception as exc:
            raise StorageError(f"Failed to load portfolio data: {exc}", "load") from exc

        if not raw:
            return None

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError("Corrupted data in storage", "load") from exc

        _check_shape(parsed)

        try:
            data = PortfolioData.model_validate(parsed)
        except ValidationError as exc:
            raise StorageError(f"Invalid portfolio data in storage: {exc}", "load") from exc

        self._warn_if_stale(timestamp)
        return data

    async def clear(self) -> None:
        """Delete the snapshot, its timestamp and its version marker."""
        try:
            for key in SNAPSHOT_KEYS:
                await self._kv.remove(key)
        except Exception as exc:
            raise StorageError(f"Failed to clear portfolio data: {exc}", "clear") from exc
        logger.info("Cleared stored portfolio")

    async def saved_at(self) -> datetime | None:
        raw = await self._kv.get(TIMESTAMP_KEY)
        return _parse_timestamp(raw) if raw else None

    async def version(self) -> str | None:
        return await self._kv.get(VERSION_KEY)

    async def _restore(self, previous: dict[str, str | None]) -> None:
        try:
            for key, value in previous.items():
                if value is None:
                    await self._kv.remove(key)
                else:
                    await self._kv.set(key, value)
        except Exception:
            logger.exception("Could not restore the previous portfolio snapshot")

    def _warn_if_stale(self, timestamp: str | None) -> None:
        saved = _parse_timestamp(timestamp) if timestamp else None
        if saved is None:
            return
        age = self._clock() - saved
        if age > self._stale_after:
            message = f"Portfolio data is more than {self._stale_after.days} days old"
            logger.warning("%s (saved %s)", message, saved.isoformat())
            warnings.warn(message, StalePortfolioWarning, stacklevel=3)


def _check_shape(parsed: object) -> None:
    if not isinstance(parsed, dict):
        raise StorageError("Invalid data format in storage", "load")
    if not isinstance(parsed.get("trades"), list):
        raise StorageError("Invalid trades data in storage", "load")
    if not isinstance(parsed.get("holdings"), list):
        raise StorageError("Invalid holdings data in storage", "load")
    if not isinstance(parsed.get("metrics"), dict):
        raise StorageError("Invalid metrics data in storage", "load")


def _parse_timestamp(raw: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        logger.warning("Ignoring unreadable portfolio timestamp %r", raw)
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _is_quota_error(exc: Exception) -> bool:
    if isinstance(exc, StoreQuotaExceededError):
        return True
    return isinstance(exc, OperationalError) and "full" in str(exc).lower()
