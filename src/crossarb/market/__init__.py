"""Market data module: sample generation and CSV import/export."""

from crossarb.market.codec import ParseResult, parse_csv, to_csv
from crossarb.market.generator import TickGenerator, generate_ticks


__all__ = [
    "ParseResult",
    "TickGenerator",
    "generate_ticks",
    "parse_csv",
    "to_csv",
]
