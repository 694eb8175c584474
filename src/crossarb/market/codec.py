"""
CSV codec for tick data.

Rows use the column order
``timestamp,exchange_id,price,volume,bid,ask,liquidity_level``.
Import coerces every field independently (number if numeric, string
otherwise) and skips rows that cannot form a tick, reporting how many
were dropped instead of failing the whole import.
"""

import csv
import io
import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from crossarb.config.constants import CSV_FIELDS
from crossarb.core.errors import TickParseError
from crossarb.core.types import Tick


logger = logging.getLogger(__name__)

CellValue = int | float | str

NUMERIC_FIELDS = ("price", "volume", "bid", "ask", "liquidity_level")
TEXT_FIELDS = ("exchange_id",)


@dataclass(slots=True)
class ParseResult:
    """Outcome of a CSV import."""

    ticks: list[Tick] = field(default_factory=list)
    skipped_rows: int = 0
    rows: int = 0

    @property
    def accepted_rows(self) -> int:
        """Rows that became ticks."""
        return len(self.ticks)


def coerce_value(raw: str) -> CellValue:
    """
    Convert a single CSV cell to a number when possible.

    Integers stay integers so timestamps survive unchanged. Empty,
    non-numeric and non-finite cells are returned as stripped strings.

    Example:
        >>> coerce_value("42"), coerce_value("1.5"), coerce_value("Binance")
        (42, 1.5, 'Binance')
    """
    text = raw.strip()
    # Python accepts "1_000" as a number; CSV data does not
    if "_" in text:
        return text
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return text
    if not math.isfinite(number):
        return text
    return number


def coerce_row(row: Mapping[str, str | None]) -> dict[str, CellValue]:
    """
    Coerce every field of a raw row independently.

    Text fields such as ``exchange_id`` are only stripped, so ids like
    ``007`` keep their spelling.
    """
    coerced: dict[str, CellValue] = {}
    for name, value in row.items():
        if name is None:
            continue
        if value is None:
            coerced[name] = ""
        elif name in TEXT_FIELDS:
            coerced[name] = value.strip()
        else:
            coerced[name] = coerce_value(value)
    return coerced


def tick_from_row(row: Mapping[str, CellValue]) -> Tick:
    """
    Build a tick from a coerced row.

    Raises:
        TickParseError: If a field is missing or a numeric field is not numeric.
    """
    missing = [name for name in CSV_FIELDS if row.get(name, "") == ""]
    if missing:
        raise TickParseError(f"Missing fields: {', '.join(missing)}", dict(row))

    timestamp = row["timestamp"]
    if isinstance(timestamp, float) and timestamp.is_integer():
        timestamp = int(timestamp)
    if not isinstance(timestamp, int):
        raise TickParseError(f"Non-integer timestamp: {timestamp!r}", dict(row))

    values: dict[str, float] = {}
    for name in NUMERIC_FIELDS:
        value = row[name]
        if isinstance(value, str):
            raise TickParseError(f"Non-numeric {name}: {value!r}", dict(row))
        values[name] = float(value)

    return Tick(
        timestamp=timestamp,
        exchange_id=str(row["exchange_id"]),
        price=values["price"],
        volume=values["volume"],
        bid=values["bid"],
        ask=values["ask"],
        liquidity_level=values["liquidity_level"],
    )


def parse_csv(text: str) -> ParseResult:
    """
    Parse CSV text into ticks.

    Blank lines are ignored. Rows that cannot form a tick are skipped
    and counted.

    Args:
        text: CSV text with a header row.

    Returns:
        ParseResult with ticks and the skipped-row count.

    Raises:
        TickParseError: If the header lacks required columns.
    """
    result = ParseResult()
    if not text.strip():
        return result

    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    header = [name.strip() for name in (reader.fieldnames or [])]
    missing = [name for name in CSV_FIELDS if name not in header]
    if missing:
        raise TickParseError(f"CSV header missing columns: {', '.join(missing)}")
    reader.fieldnames = header

    for line_no, raw in enumerate(reader, start=2):
        if not any((value or "").strip() for value in raw.values() if isinstance(value, str)):
            continue

        result.rows += 1
        try:
            result.ticks.append(tick_from_row(coerce_row(raw)))
        except TickParseError as e:
            result.skipped_rows += 1
            logger.debug(f"Skipping CSV line {line_no}: {e}")

    if result.skipped_rows:
        logger.warning(
            f"Skipped {result.skipped_rows} of {result.rows} malformed CSV rows"
        )
    return result


def to_csv(ticks: Iterable[Tick]) -> str:
    """
    Serialize ticks to CSV text.

    Fields containing the separator are quoted. Floats use their
    shortest round-trip representation.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(CSV_FIELDS)

    for tick in ticks:
        writer.writerow(
            [
                tick.timestamp,
                tick.exchange_id,
                repr(tick.price),
                repr(tick.volume),
                repr(tick.bid),
                repr(tick.ask),
                repr(tick.liquidity_level),
            ]
        )

    return buffer.getvalue()


def read_csv_file(path: Path) -> ParseResult:
    """Parse a CSV file from disk."""
    return parse_csv(path.read_text(encoding="utf-8"))


def write_csv_file(path: Path, ticks: Iterable[Tick]) -> None:
    """Write ticks to a CSV file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_csv(ticks), encoding="utf-8")
