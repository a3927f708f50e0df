from __future__ import annotations

from dataclasses import dataclass

from core.window import TimeWindow, ValidationError


# Maximum rows the exchange returns for one klines call.
PAGE_SIZE = 1000


@dataclass(frozen=True)
class PageRequest:
    start: int
    limit: int


@dataclass(frozen=True)
class PagePlan:
    window: TimeWindow
    page_size: int
    page_count: int

    @property
    def first_request(self) -> PageRequest:
        return request_for(self.window, self.page_size, self.window.start)


def plan_pages(window: TimeWindow, page_size: int = PAGE_SIZE) -> PagePlan:
    """
    Split a window into forward-walking pages of `page_size` candles.

    page_count is the smallest n with n * page_size * interval_ms >= end - start,
    never less than 1. page_size is capped by what one exchange call returns.
    """
    if not isinstance(window, TimeWindow):
        raise ValidationError(f'Expected TimeWindow, got {window!r}')
    if window.start >= window.end:
        raise ValidationError(f'Degenerate window: start={window.start} end={window.end}')
    if page_size <= 0:
        raise ValidationError(f'page_size must be positive, got {page_size}')
    if page_size > PAGE_SIZE:
        raise ValidationError(f'page_size={page_size} exceeds the exchange limit of {PAGE_SIZE} rows')
    page_span = window.interval.ms * page_size
    page_count = max(1, -(-window.span_ms // page_span))
    return PagePlan(window=window, page_size=page_size, page_count=page_count)


def request_for(window: TimeWindow, page_size: int, cursor: int) -> PageRequest:
    remaining = -(-(window.end - cursor) // window.interval.ms)
    limit = max(1, min(page_size, remaining))
    return PageRequest(start=cursor, limit=limit)
