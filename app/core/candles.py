from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Sequence


@dataclass(frozen=True)
class Candle:
    open_time: int
    open: float
    high: float
    low: float
    close: float
    volume: float
    # Inclusive: the last millisecond of the bucket (open_time + interval_ms - 1).
    close_time: int
    quote_volume: float = 0.0
    trades: int = 0
    taker_buy_base_volume: float = 0.0
    taker_buy_quote_volume: float = 0.0

    @property
    def next_open_time(self) -> int:
        return self.close_time + 1

    @classmethod
    def from_row(cls, row: Sequence) -> Candle:
        """
        Parse one exchange kline row.

        Rows are lists of the form
        [open_time, open, high, low, close, volume, close_time, quote_volume,
         trades, taker_buy_base, taker_buy_quote, ignore]
        with prices and volumes encoded as strings.
        """
        try:
            if len(row) < 7:
                raise ValueError(f'too short ({len(row)} fields)')
            return cls(
                open_time=int(row[0]),
                open=float(row[1]),
                high=float(row[2]),
                low=float(row[3]),
                close=float(row[4]),
                volume=float(row[5]),
                close_time=int(row[6]),
                quote_volume=float(row[7]) if len(row) > 7 else 0.0,
                trades=int(row[8]) if len(row) > 8 else 0,
                taker_buy_base_volume=float(row[9]) if len(row) > 9 else 0.0,
                taker_buy_quote_volume=float(row[10]) if len(row) > 10 else 0.0,
            )
        except (TypeError, ValueError) as exc:
            raise ValueError(f'Malformed kline row {row!r}: {exc}') from exc


CANDLE_FIELDS = tuple(f.name for f in fields(Candle))
