"""CSV trade-file parsing with fail-fast row validation — pure, no I/O.

The header is checked for the presence of the four required columns; data
rows are read positionally as ``symbol, shares, price, date``.
"""

import datetime as dt
import logging
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from portfolio_lens.domain.models import Trade
from portfolio_lens.errors import CSVParseError, TradeValidationError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("symbol", "shares", "price", "date")
DATE_FORMAT = "%Y-%m-%d"
# ASCII digits, "." as the only decimal separator, optional exponent.
NUMBER_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


# ── Result Types ────────────────────────────────────────────────


@dataclass(frozen=True)
class ParseSuccess:
    trades: list[Trade] = field(default_factory=list)
    ok: bool = True


@dataclass(frozen=True)
class ParseFailure:
    message: str
    row: int | None = None
    column: str | None = None
    ok: bool = False

    def to_error(self) -> CSVParseError:
        return CSVParseError(self.message, self.row, self.column)


ParseOutcome = ParseSuccess | ParseFailure


# ── Parsing ─────────────────────────────────────────────────────


def parse_csv(
    content: str,
    *,
    today: dt.date | None = None,
    strict_header: bool = False,
) -> list[Trade]:
    """Parse CSV text into trades, raising ``CSVParseError`` on the first bad row.

    Args:
        content: Raw file text.
        today: Reference date for the future-date check (defaults to today).
        strict_header: Require the header to be exactly the four required
            columns in canonical order instead of only containing them.
    """
    today = today or dt.date.today()
    lines = content.strip().splitlines()
    if not lines or not lines[0].strip():
        raise CSVParseError("CSV file is empty")

    _check_header(lines[0], strict=strict_header)

    trades: list[Trade] = []
    for index, raw_line in enumerate(lines[1:], start=1):
        line = raw_line.strip()
        if not line:
            continue
        trades.append(_parse_row(line, row=index + 1, today=today))

    if not trades:
        raise CSVParseError("No valid trades found in CSV file")

    logger.debug("Parsed %d trades from %d lines", len(trades), len(lines))
    return trades


def try_parse_csv(
    content: str,
    *,
    today: dt.date | None = None,
    strict_header: bool = False,
) -> ParseOutcome:
    """Like :func:`parse_csv`, but returns a success/failure value instead of raising."""
    try:
        trades = parse_csv(content, today=today, strict_header=strict_header)
    except CSVParseError as exc:
        return ParseFailure(message=exc.message, row=exc.row, column=exc.column)
    return ParseSuccess(trades=trades)


def _check_header(header_line: str, *, strict: bool) -> None:
    columns = [col.strip() for col in header_line.lower().split(",")]
    if strict:
        if tuple(columns) != REQUIRED_COLUMNS:
            raise CSVParseError(
                f"Invalid CSV header. Expected exactly: {', '.join(REQUIRED_COLUMNS)}. "
                f"Found: {', '.join(columns)}",
                row=1,
            )
        return

    if not set(REQUIRED_COLUMNS).issubset(columns):
        raise CSVParseError(
            f"Invalid CSV format. Expected columns: {', '.join(REQUIRED_COLUMNS)}. "
            f"Found: {', '.join(columns)}",
            row=1,
        )


def _parse_row(line: str, *, row: int, today: dt.date) -> Trade:
    values = [val.strip() for val in line.split(",")]
    if len(values) != len(REQUIRED_COLUMNS):
        raise CSVParseError(f"Expected 4 columns, got {len(values)}", row)

    symbol, shares_str, price_str, date_str = values

    if not symbol:
        raise CSVParseError("Symbol cannot be empty", row, "symbol")

    shares = _to_finite_float(shares_str)
    if shares is None:
        raise CSVParseError(f'Invalid shares value: "{shares_str}"', row, "shares")

    price = _to_finite_float(price_str)
    if price is None or price <= 0:
        raise CSVParseError(
            f'Invalid price value: "{price_str}". Price must be positive.', row, "price"
        )

    trade_date = _to_date(date_str)
    if trade_date is None:
        raise CSVParseError(
            f'Invalid date format: "{date_str}". Use YYYY-MM-DD format.', row, "date"
        )
    if trade_date > today:
        raise CSVParseError(f'Date cannot be in the future: "{date_str}"', row, "date")

    return Trade(symbol=symbol.upper(), shares=shares, price=price, date=trade_date)


def _to_finite_float(text: str) -> float | None:
    if not NUMBER_PATTERN.fullmatch(text):
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def _to_date(text: str) -> dt.date | None:
    try:
        return dt.datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        return None


# ── Programmatic Validation ─────────────────────────────────────


def validate_trade(raw: Mapping[str, Any], *, today: dt.date | None = None) -> Trade:
    """Validate a single trade record built outside the CSV path.

    Raises:
        TradeValidationError: naming the first offending field and its value.
    """
    today = today or dt.date.today()

    symbol = raw.get("symbol")
    if not isinstance(symbol, str) or not symbol.strip():
        raise TradeValidationError("Symbol is required and must be a string", "symbol", symbol)

    shares = raw.get("shares")
    if not _is_real(shares) or not math.isfinite(shares):
        raise TradeValidationError("Shares must be a valid number", "shares", shares)

    price = raw.get("price")
    if not _is_real(price) or not math.isfinite(price) or price <= 0:
        raise TradeValidationError("Price must be a positive number", "price", price)

    raw_date = raw.get("date")
    if isinstance(raw_date, dt.datetime):
        trade_date: dt.date | None = raw_date.date()
    elif isinstance(raw_date, dt.date):
        trade_date = raw_date
    elif isinstance(raw_date, str):
        trade_date = _to_date(raw_date.strip())
    else:
        trade_date = None
    if trade_date is None:
        raise TradeValidationError("Date must be a valid date string", "date", raw_date)
    if trade_date > today:
        raise TradeValidationError("Date cannot be in the future", "date", raw_date)

    return Trade(
        symbol=symbol.strip().upper(),
        shares=float(shares),
        price=float(price),
        date=trade_date,
    )


def _is_real(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
