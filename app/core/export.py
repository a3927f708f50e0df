from __future__ import annotations

import csv
import os
from typing import Sequence

from core.candles import CANDLE_FIELDS, Candle
from core.window import TimeWindow, format_ts


def export_filename(symbol: str, window: TimeWindow) -> str:
    start = format_ts(window.start).replace(':', '-')
    end = format_ts(window.end).replace(':', '-')
    return f'{symbol}-{start}-{end}-{window.interval}.csv'


def write_candles_csv(path: str, candles: Sequence[Candle]) -> str:
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    with open(path, 'w', newline='', encoding='utf-8') as f:
        w = csv.writer(f)
        w.writerow(CANDLE_FIELDS)
        for c in candles:
            w.writerow([getattr(c, name) for name in CANDLE_FIELDS])
    return path
