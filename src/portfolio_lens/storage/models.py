"""SQLModel table definitions and database initialization."""

from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlmodel import Field, SQLModel


class KeyValueEntry(SQLModel, table=True):
    """One named blob in the key-value store."""

    __tablename__ = "kv_entries"

    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


async def init_db(db_path: str) -> AsyncEngine:
    """Create the async engine and ensure all tables exist."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")

    # Idempotent: only creates missing tables
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    return engine
