"""Key-value store adapters: in-memory and SQLite (SQLModel)."""

import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncEngine
from sqlmodel.ext.asyncio.session import AsyncSession

from portfolio_lens.storage.models import KeyValueEntry

logger = logging.getLogger(__name__)


class StoreQuotaExceededError(Exception):
    """Writing a value would push the store past its size quota."""


class MemoryStore:
    """Dict-backed store with an optional total size quota in bytes."""

    def __init__(self, quota_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._quota_bytes = quota_bytes

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(
                len(k.encode()) + len(v.encode()) for k, v in self._data.items() if k != key
            )
            if used + len(key.encode()) + len(value.encode()) > self._quota_bytes:
                raise StoreQuotaExceededError(
                    f"Writing {key!r} exceeds the {self._quota_bytes}-byte quota"
                )
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SqliteStore:
    """SQLModel-backed store, one row per key."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def get(self, key: str) -> str | None:
        async with AsyncSession(self._engine) as session:
            row = await session.get(KeyValueEntry, key)
            return row.value if row else None

    async def set(self, key: str, value: str) -> None:
        async with AsyncSession(self._engine) as session:
            row = await session.get(KeyValueEntry, key)
            if row is None:
                row = KeyValueEntry(key=key, value=value)
            else:
                row.value = value
                row.updated_at = datetime.now(UTC)
            session.add(row)
            await session.commit()

    async def remove(self, key: str) -> None:
        async with AsyncSession(self._engine) as session:
            row = await session.get(KeyValueEntry, key)
            if row is None:
                return
            await session.delete(row)
            await session.commit()

    async def close(self) -> None:
        await self._engine.dispose()
