from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from core.intervals import Interval


class ValidationError(ValueError):
    """Raised for a malformed or degenerate time window, before anything is fetched."""


@dataclass(frozen=True)
class TimeWindow:
    """
    Half-open time range [start, end) in epoch milliseconds plus a candle interval.

    Windows are replaced, never mutated: every user intent builds a new one.
    """

    start: int
    end: int
    interval: Interval

    def __post_init__(self) -> None:
        if not isinstance(self.interval, Interval):
            raise ValidationError(f'Unsupported interval: {self.interval!r}')
        if self.start >= self.end:
            raise ValidationError(
                f'TimeWindow requires start < end, got start={self.start} end={self.end}'
            )

    @property
    def span_ms(self) -> int:
        return self.end - self.start

    def contains(self, ts_ms: int) -> bool:
        return self.start <= ts_ms < self.end

    def describe(self) -> str:
        return f'{format_ts(self.start)} .. {format_ts(self.end)} @ {self.interval}'


@dataclass(frozen=True)
class RangeProps:
    """Payload of the range picker: start/end as datetimes plus the interval."""

    start: datetime
    end: datetime
    interval: Interval = Interval.M1

    def to_window(self) -> TimeWindow:
        return TimeWindow(_to_ms(self.start), _to_ms(self.end), self.interval)

    @classmethod
    def from_window(cls, window: TimeWindow) -> RangeProps:
        return cls(_from_ms(window.start), _from_ms(window.end), window.interval)


def default_window(interval: Interval, lookback_ms: int, now_ms: int) -> TimeWindow:
    # Align the right edge to a bucket boundary so the last candle is a full one.
    end = now_ms - (now_ms % interval.ms)
    if end <= 0:
        raise ValidationError(f'Cannot build default window ending at {now_ms}')
    start = max(0, end - lookback_ms)
    return TimeWindow(start, end, interval)


def window_from_axis_bounds(lo: float, hi: float, interval: Interval, scale: float = 1000.0) -> TimeWindow:
    """
    Convert chart axis bounds to a window.

    `scale` converts axis units to milliseconds; date axes are in seconds.
    """
    left, right = sorted((float(lo), float(hi)))
    start = max(0, int(left * scale))
    end = int(right * scale)
    return TimeWindow(start, end, interval)


def _to_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def _from_ms(ts_ms: int) -> datetime:
    return datetime.fromtimestamp(ts_ms / 1000.0, tz=timezone.utc)


def format_ts(ts_ms: int) -> str:
    return _from_ms(ts_ms).strftime('%Y-%m-%dT%H:%M:%SZ')
