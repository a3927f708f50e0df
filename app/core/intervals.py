from __future__ import annotations

from enum import Enum


_MINUTE_MS = 60_000
_HOUR_MS = 3_600_000
_DAY_MS = 86_400_000


def _code_to_ms(code: str) -> int:
    unit = code[-1]
    mult = int(code[:-1])
    if unit == 'm':
        return mult * _MINUTE_MS
    if unit == 'h':
        return mult * _HOUR_MS
    if unit == 'd':
        return mult * _DAY_MS
    if unit == 'w':
        return mult * 7 * _DAY_MS
    if unit == 'M':
        # Months are approximated; page math only needs an upper bound per candle.
        return mult * 30 * _DAY_MS
    raise ValueError(f'Unknown interval unit: {code!r}')


class Interval(Enum):
    M1 = '1m'
    M3 = '3m'
    M5 = '5m'
    M15 = '15m'
    M30 = '30m'
    H1 = '1h'
    H2 = '2h'
    H4 = '4h'
    H6 = '6h'
    H8 = '8h'
    H12 = '12h'
    D1 = '1d'
    D3 = '3d'
    W1 = '1w'
    MO1 = '1M'

    @property
    def ms(self) -> int:
        return _code_to_ms(self.value)

    @classmethod
    def parse(cls, code: str) -> Interval:
        if isinstance(code, Interval):
            return code
        value = (code or '').strip()
        for item in cls:
            if item.value == value:
                return item
        # '1M' is the only case-sensitive code; accept lowercase for everything else.
        lowered = value.lower()
        for item in cls:
            if item.value == lowered:
                return item
        raise ValueError(f'Unsupported interval={code!r}. Supported: {[i.value for i in cls]}')

    def __str__(self) -> str:
        return self.value
