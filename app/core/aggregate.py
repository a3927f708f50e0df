from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from core.candles import Candle


@dataclass(frozen=True)
class AggregateSummary:
    max_price: float
    min_price: float
    max_volume: float
    left_edge_time: int
    right_edge_time: int
    count: int


def summarize(candles: Sequence[Candle]) -> AggregateSummary:
    # Callers only summarize completed episodes, which always carry data.
    assert candles, 'summarize() requires at least one candle'
    highs = np.fromiter((c.high for c in candles), dtype=np.float64, count=len(candles))
    lows = np.fromiter((c.low for c in candles), dtype=np.float64, count=len(candles))
    volumes = np.fromiter((c.volume for c in candles), dtype=np.float64, count=len(candles))
    return AggregateSummary(
        max_price=float(highs.max()),
        min_price=float(lows.min()),
        max_volume=float(volumes.max()),
        left_edge_time=int(candles[0].open_time),
        right_edge_time=int(candles[-1].close_time),
        count=len(candles),
    )
