"""
Unit tests for the tick CSV codec.

Tests field coercion, malformed-row handling, and export/import parity.
"""

import random
from pathlib import Path

import pytest

from crossarb.core.errors import TickParseError
from crossarb.market.codec import (
    coerce_value,
    parse_csv,
    read_csv_file,
    tick_from_row,
    to_csv,
    write_csv_file,
)
from crossarb.market.generator import generate_ticks
from tests.mocks import BASE_TS, make_tick


HEADER = "timestamp,exchange_id,price,volume,bid,ask,liquidity_level\n"


class TestCoerceValue:
    """Tests for per-cell coercion."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("42", 42),
            (" 1.5 ", 1.5),
            ("1e3", 1000.0),
            ("Binance", "Binance"),
            ("", ""),
            ("1_000", "1_000"),
            ("nan", "nan"),
            ("inf", "inf"),
        ],
    )
    def test_coercion(self, raw: str, expected: object) -> None:
        """Test numbers become numbers and everything else stays text."""
        value = coerce_value(raw)

        assert value == expected
        assert type(value) is type(expected)


class TestTickFromRow:
    """Tests for strict single-row conversion."""

    def test_missing_field(self) -> None:
        """Test a missing field raises with the row attached."""
        with pytest.raises(TickParseError) as exc_info:
            tick_from_row({"timestamp": 1, "exchange_id": "A"})

        assert exc_info.value.row["exchange_id"] == "A"

    def test_non_numeric_price(self) -> None:
        """Test a text price raises."""
        row = {
            "timestamp": 1,
            "exchange_id": "A",
            "price": "n/a",
            "volume": 1,
            "bid": 1,
            "ask": 1,
            "liquidity_level": 0.5,
        }
        with pytest.raises(TickParseError):
            tick_from_row(row)

    def test_float_timestamp_with_integer_value(self) -> None:
        """Test 1.0-style timestamps are accepted as integers."""
        row = {
            "timestamp": 1000.0,
            "exchange_id": "A",
            "price": 1,
            "volume": 1,
            "bid": 1,
            "ask": 1,
            "liquidity_level": 0.5,
        }

        tick = tick_from_row(row)

        assert tick.timestamp == 1000
        assert isinstance(tick.timestamp, int)


class TestParseCsv:
    """Tests for bulk CSV import."""

    def test_valid_rows(self) -> None:
        """Test well-formed rows become ticks."""
        text = HEADER + "1000,Binance,100.5,2,100,101,0.7\n1000,Kraken,101,3,100.5,101.5,0.4\n"

        result = parse_csv(text)

        assert result.rows == 2
        assert result.skipped_rows == 0
        assert result.accepted_rows == 2
        assert result.ticks[0].exchange_id == "Binance"
        assert result.ticks[0].price == 100.5
        assert result.ticks[1].liquidity_level == 0.4

    def test_numeric_looking_exchange_ids_kept_verbatim(self) -> None:
        """Test exchange ids are imported as text, not as numbers."""
        text = HEADER + "1000, 007 ,100.5,2,100,101,0.7\n1000,1.10,101,3,100.5,101.5,0.4\n"

        result = parse_csv(text)

        assert [t.exchange_id for t in result.ticks] == ["007", "1.10"]
        assert parse_csv(to_csv(result.ticks)).ticks == result.ticks

    def test_malformed_rows_skipped_and_counted(self) -> None:
        """Test bad rows are dropped without failing the import."""
        text = (
            HEADER
            + "1000,A,100,1,99,101,0.5\n"
            + "abc,A,100,1,99,101,0.5\n"
            + "1000,B,oops,1,99,101,0.5\n"
            + "1000,C,100,1,99\n"
        )

        result = parse_csv(text)

        assert result.accepted_rows == 1
        assert result.skipped_rows == 3
        assert result.rows == 4

    def test_blank_lines_ignored(self) -> None:
        """Test blank lines are neither ticks nor skipped rows."""
        text = HEADER + "\n1000,A,100,1,99,101,0.5\n\n,,,,,,\n"

        result = parse_csv(text)

        assert result.accepted_rows == 1
        assert result.skipped_rows == 0

    def test_quoted_fields(self) -> None:
        """Test quoted values containing commas are honoured."""
        text = HEADER + '1000,"Exchange, Inc",100,1,99,101,0.5\n'

        result = parse_csv(text)

        assert result.ticks[0].exchange_id == "Exchange, Inc"

    def test_byte_order_mark(self) -> None:
        """Test a leading BOM does not break the header."""
        result = parse_csv("\ufeff" + HEADER + "1000,A,100,1,99,101,0.5\n")

        assert result.accepted_rows == 1

    def test_empty_text(self) -> None:
        """Test empty input yields an empty result."""
        result = parse_csv("")

        assert result.ticks == []
        assert result.rows == 0

    def test_header_missing_columns(self) -> None:
        """Test a header without required columns raises."""
        with pytest.raises(TickParseError):
            parse_csv("timestamp,price\n1,2\n")


class TestToCsv:
    """Tests for CSV export."""

    def test_header_and_quoting(self) -> None:
        """Test the header row and quoting of separator-containing ids."""
        text = to_csv([make_tick("Exchange, Inc", 99.0, 101.0)])

        lines = text.splitlines()
        assert lines[0] == HEADER.strip()
        assert lines[1].startswith(f'{BASE_TS},"Exchange, Inc",')

    def test_export_then_import_preserves_generated_ticks(self) -> None:
        """Test generated ticks survive export and re-import exactly."""
        ticks = generate_ticks(3, 10, start_timestamp=BASE_TS, rng=random.Random(9))

        result = parse_csv(to_csv(ticks))

        assert result.skipped_rows == 0
        assert result.ticks == ticks

    def test_file_helpers(self, tmp_path: Path) -> None:
        """Test writing and reading a CSV file."""
        ticks = [make_tick("A", 99.0, 101.0), make_tick("B", 100.0, 102.0)]
        path = tmp_path / "out" / "ticks.csv"

        write_csv_file(path, ticks)

        assert read_csv_file(path).ticks == ticks
