from __future__ import annotations

from typing import Callable, List, Optional

from PyQt6.QtCore import QThread, pyqtSignal

from core.candles import Candle
from core.data_providers import binance
from core.session import FetchTicket
from core.settings import LoaderSettings


Fetcher = Callable[..., List[Candle]]


class PageFetchWorker(QThread):
    """Fetches exactly one page off the UI thread and reports it with its episode id."""

    page_ready = pyqtSignal(int, object)
    failed = pyqtSignal(int, str)

    def __init__(self, ticket: FetchTicket, settings: LoaderSettings, fetcher: Optional[Fetcher] = None) -> None:
        super().__init__()
        self.ticket = ticket
        self.settings = settings
        self.fetcher = fetcher or binance.fetch_klines

    def run(self) -> None:
        ticket = self.ticket
        try:
            candles = self.fetcher(
                ticket.symbol,
                ticket.interval,
                ticket.request.start,
                ticket.request.limit,
                base_url=self.settings.base_url,
                timeout=self.settings.request_timeout,
            )
        except Exception as exc:
            self.failed.emit(ticket.episode, str(exc) or exc.__class__.__name__)
            return
        self.page_ready.emit(ticket.episode, list(candles))


class SymbolFetchWorker(QThread):
    data_ready = pyqtSignal(list)
    error = pyqtSignal(str)

    def __init__(self, settings: LoaderSettings, fetcher: Optional[Callable[..., List[str]]] = None) -> None:
        super().__init__()
        self.settings = settings
        self.fetcher = fetcher or binance.fetch_symbols

    def run(self) -> None:
        try:
            symbols = self.fetcher(base_url=self.settings.base_url, timeout=self.settings.request_timeout)
            self.data_ready.emit(symbols)
        except Exception as exc:
            self.error.emit(str(exc))
