from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from core.candles import Candle
from core.paging import PAGE_SIZE, PagePlan, PageRequest, plan_pages, request_for
from core.window import TimeWindow


logger = logging.getLogger(__name__)


class LoadStatus(Enum):
    PENDING = 'pending'
    COMPLETE = 'complete'
    ERRORED = 'errored'


class LoadingState:
    """
    Drives one window's page plan to completion.

    Pending -> Complete when every page landed (or the data ran out early).
    Pending -> Errored on the first failed page. Errored is sticky; recovering
    means building a fresh LoadingState for a new episode.
    """

    def __init__(self, window: TimeWindow, page_size: int = PAGE_SIZE) -> None:
        self.plan: PagePlan = plan_pages(window, page_size)
        self.window = window
        self.page_count = self.plan.page_count
        self.pages_done = 0
        self.has_error = False
        self.error: Optional[str] = None
        self._cursor = window.start
        self._buffer: List[Candle] = []

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def candles(self) -> Tuple[Candle, ...]:
        return tuple(self._buffer)

    @property
    def status(self) -> LoadStatus:
        if self.has_error:
            return LoadStatus.ERRORED
        if self.pages_done >= self.page_count:
            return LoadStatus.COMPLETE
        return LoadStatus.PENDING

    @property
    def is_complete(self) -> bool:
        return self.status is LoadStatus.COMPLETE

    def progress(self) -> float:
        return min(1.0, self.pages_done / float(self.page_count))

    def next_request(self) -> Optional[PageRequest]:
        if self.has_error or self.pages_done >= self.page_count:
            return None
        return request_for(self.window, self.plan.page_size, self._cursor)

    def record_success(self, batch: Sequence[Candle]) -> None:
        if self.status is not LoadStatus.PENDING:
            logger.debug('Ignoring page result in %s state.', self.status.value)
            return
        if not batch:
            logger.info('Empty page at %s; no more data in window.', self._cursor)
            self.pages_done = self.page_count
            return

        in_window = [c for c in batch if c.open_time < self.window.end and c.open_time >= self._cursor]
        if not in_window:
            # Everything returned lies past the window: it is covered.
            self.pages_done = self.page_count
            return

        self._buffer.extend(in_window)
        self._cursor = in_window[-1].next_open_time
        self.pages_done += 1
        logger.debug(
            'Page %s/%s applied (%s candles), cursor -> %s.',
            self.pages_done,
            self.page_count,
            len(in_window),
            self._cursor,
        )
        if self._cursor >= self.window.end:
            self.pages_done = self.page_count

    def record_failure(self, error: object) -> None:
        if self.status is not LoadStatus.PENDING:
            return
        self.has_error = True
        self.error = str(error)
        logger.debug('Loading halted after %s/%s pages: %s', self.pages_done, self.page_count, self.error)
