from __future__ import annotations

from dataclasses import dataclass, field

from core.intervals import Interval
from core.paging import PAGE_SIZE


DEFAULT_BASE_URL = 'https://api.binance.com'


@dataclass(frozen=True)
class LoaderSettings:
    page_size: int = PAGE_SIZE
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = 10.0
    default_interval: Interval = Interval.M1
    default_lookback_ms: int = 86_400_000
    export_dir: str = field(default='.')
