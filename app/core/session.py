from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple, Union

from core.aggregate import AggregateSummary, summarize
from core.candles import Candle
from core.intervals import Interval
from core.loading import LoadingState, LoadStatus
from core.paging import PageRequest
from core.settings import LoaderSettings
from core.window import RangeProps, TimeWindow, ValidationError, default_window, window_from_axis_bounds


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SymbolChanged:
    symbol: str


@dataclass(frozen=True)
class RangeChosen:
    props: RangeProps


@dataclass(frozen=True)
class ChartDragged:
    lo: float
    hi: float
    # Axis units -> milliseconds (date axes are in seconds).
    scale: float = 1000.0


@dataclass(frozen=True)
class ExportRequested:
    props: RangeProps
    path: Optional[str] = None


@dataclass(frozen=True)
class ReloadRequested:
    pass


Intent = Union[SymbolChanged, RangeChosen, ChartDragged, ExportRequested, ReloadRequested]


@dataclass(frozen=True)
class FetchTicket:
    episode: int
    symbol: str
    interval: Interval
    request: PageRequest


@dataclass(frozen=True)
class EpisodeResult:
    episode: int
    symbol: str
    window: TimeWindow
    candles: Tuple[Candle, ...]
    summary: AggregateSummary
    export: bool = False
    export_path: Optional[str] = None


class Session:
    """
    Owns the active load episode and mediates between intents and the fetcher.

    `dispatch` receives one FetchTicket at a time; the fetcher reports back via
    on_fetch_success/on_fetch_failure with the ticket's episode id. Results for
    any other episode are dropped, so a new intent cancels the old episode
    without having to stop its in-flight request.
    """

    def __init__(
        self,
        dispatch: Callable[[FetchTicket], None],
        settings: Optional[LoaderSettings] = None,
        clock: Callable[[], float] = time.time,
        on_progress: Optional[Callable[[float, bool], None]] = None,
        on_loaded: Optional[Callable[[EpisodeResult], None]] = None,
        on_export: Optional[Callable[[EpisodeResult], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._dispatch = dispatch
        self.settings = settings or LoaderSettings()
        self._clock = clock
        self._on_progress = on_progress
        self._on_loaded = on_loaded
        self._on_export = on_export
        self._on_error = on_error

        self.symbol: Optional[str] = None
        self.window: Optional[TimeWindow] = None
        self.loading: Optional[LoadingState] = None
        self.episode = 0
        self.export = False
        self.export_path: Optional[str] = None
        self.result: Optional[EpisodeResult] = None
        self._in_flight: Optional[FetchTicket] = None

    @property
    def status(self) -> Optional[LoadStatus]:
        return self.loading.status if self.loading is not None else None

    @property
    def in_flight(self) -> Optional[FetchTicket]:
        return self._in_flight

    def progress(self) -> float:
        return self.loading.progress() if self.loading is not None else 0.0

    def submit(self, intent: Intent) -> None:
        if isinstance(intent, SymbolChanged):
            symbol = _normalize_symbol(intent.symbol)
            window = default_window(
                self.settings.default_interval,
                self.settings.default_lookback_ms,
                int(self._clock() * 1000),
            )
            self.symbol = symbol
            self._start(window, export=False, export_path=None)
        elif isinstance(intent, RangeChosen):
            self._require_symbol()
            self._start(intent.props.to_window(), export=False, export_path=None)
        elif isinstance(intent, ChartDragged):
            self._require_symbol()
            interval = self.window.interval if self.window is not None else self.settings.default_interval
            window = window_from_axis_bounds(intent.lo, intent.hi, interval, intent.scale)
            self._start(window, export=False, export_path=None)
        elif isinstance(intent, ExportRequested):
            self._require_symbol()
            self._start(intent.props.to_window(), export=True, export_path=intent.path)
        elif isinstance(intent, ReloadRequested):
            self._require_symbol()
            if self.window is None:
                raise ValidationError('Nothing to reload yet')
            self._start(self.window, export=self.export, export_path=self.export_path)
        else:
            raise TypeError(f'Unknown intent: {intent!r}')

    def select_symbol(self, symbol: str) -> str:
        """Make `symbol` current without starting a load (headless callers pick the window next)."""
        self.symbol = _normalize_symbol(symbol)
        return self.symbol

    def on_fetch_success(self, episode: int, batch: Sequence[Candle]) -> None:
        if not self._accept(episode):
            return
        self._in_flight = None
        self.loading.record_success(batch)
        self._emit_progress()
        self._advance()

    def on_fetch_failure(self, episode: int, error: object) -> None:
        if not self._accept(episode):
            return
        self._in_flight = None
        self.loading.record_failure(error)
        self._emit_progress()
        self._advance()

    def _require_symbol(self) -> None:
        if not self.symbol:
            raise ValidationError('Select a symbol first')

    def _start(self, window: TimeWindow, export: bool, export_path: Optional[str]) -> None:
        # Build the new state before touching the old one so a bad window leaves it intact.
        loading = LoadingState(window, self.settings.page_size)
        self.episode += 1
        self.window = window
        self.loading = loading
        self.export = export
        self.export_path = export_path
        self.result = None
        self._in_flight = None
        logger.info(
            'Episode %s: loading %s %s in %s page(s)%s.',
            self.episode,
            self.symbol,
            window.describe(),
            loading.page_count,
            ' for export' if export else '',
        )
        self._emit_progress()
        self._advance()

    def _accept(self, episode: int) -> bool:
        if episode != self.episode or self.loading is None:
            logger.info('Dropping result of abandoned episode %s (active: %s).', episode, self.episode)
            return False
        if self._in_flight is None:
            logger.warning('Dropping unexpected result for episode %s: no request in flight.', episode)
            return False
        return True

    def _advance(self) -> None:
        status = self.loading.status
        if status is LoadStatus.PENDING:
            request = self.loading.next_request()
            ticket = FetchTicket(self.episode, self.symbol, self.window.interval, request)
            self._in_flight = ticket
            logger.debug('Episode %s: requesting %s.', self.episode, request)
            self._dispatch(ticket)
        elif status is LoadStatus.COMPLETE:
            self._finish()
        else:
            message = f'Failed to load {self.symbol} klines: {self.loading.error}'
            logger.error(message)
            if self._on_error is not None:
                self._on_error(message)

    def _finish(self) -> None:
        candles = self.loading.candles
        if not candles:
            message = f'No {self.symbol} klines in {self.window.describe()}'
            logger.warning(message)
            if self._on_error is not None:
                self._on_error(message)
            return
        result = EpisodeResult(
            episode=self.episode,
            symbol=self.symbol,
            window=self.window,
            candles=candles,
            summary=summarize(candles),
            export=self.export,
            export_path=self.export_path,
        )
        self.result = result
        logger.info('Episode %s complete: %s candles.', self.episode, len(candles))
        if self._on_loaded is not None:
            self._on_loaded(result)
        if self.export and self._on_export is not None:
            self._on_export(result)

    def _emit_progress(self) -> None:
        if self._on_progress is not None:
            self._on_progress(self.loading.progress(), self.loading.has_error)


def _normalize_symbol(symbol: str) -> str:
    value = (symbol or '').strip().upper()
    if not value:
        raise ValidationError('Symbol must not be empty')
    return value
