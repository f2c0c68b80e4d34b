"""Application configuration via Pydantic Settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All application settings, loaded from .env or environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Storage ─────────────────────────────────────────────────
    db_path: Path = Field(default=Path("portfolio_lens.db"), description="SQLite database path")
    stale_after_days: int = Field(
        default=30, description="Age in days after which a saved portfolio is reported stale"
    )

    # ── Upload ──────────────────────────────────────────────────
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024, description="Largest trade file accepted (10 MiB)"
    )
    strict_header: bool = Field(
        default=False,
        description="Require the header to be exactly symbol,shares,price,date in order",
    )

    # ── Market Data ─────────────────────────────────────────────
    prices_file: Path | None = Field(
        default=None, description="JSON file of {symbol: {price, sector}} overriding defaults"
    )
    currency: str = Field(default="USD", description="Display currency")

    # ── Logging ─────────────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Console logging level")
    log_dir: Path = Field(default=Path("logs"), description="Directory for JSON log files")
    log_file_level: str = Field(default="DEBUG", description="File logging level")
    log_max_bytes: int = Field(default=5 * 1024 * 1024, description="Rotate log files at size")
    log_backup_count: int = Field(default=3, description="Rotated log files to keep")


# Singleton instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the cached settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
