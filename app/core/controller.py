from __future__ import annotations

import logging
import os
from typing import Callable, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from core.export import export_filename, write_candles_csv
from core.fetch_worker import PageFetchWorker
from core.session import EpisodeResult, FetchTicket, Intent, Session
from core.settings import LoaderSettings
from core.window import ValidationError


logger = logging.getLogger(__name__)

WorkerFactory = Callable[[FetchTicket, LoaderSettings], PageFetchWorker]


class SessionController(QObject):
    """
    Qt front of the Session.

    Intents arrive through `submit` in the order the UI raised them; each page
    fetch runs in its own worker thread and its outcome is applied on the
    thread that owns this controller.
    """

    progress_changed = pyqtSignal(float, bool)
    loaded = pyqtSignal(object)
    export_ready = pyqtSignal(str)
    error = pyqtSignal(str)

    def __init__(
        self,
        settings: Optional[LoaderSettings] = None,
        worker_factory: Optional[WorkerFactory] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.settings = settings or LoaderSettings()
        self._worker_factory = worker_factory or (lambda ticket, settings: PageFetchWorker(ticket, settings))
        # Finished workers of abandoned episodes are kept alive until their thread exits.
        self._workers: List[PageFetchWorker] = []
        self.session = Session(
            self._dispatch,
            settings=self.settings,
            on_progress=self.progress_changed.emit,
            on_loaded=self.loaded.emit,
            on_export=self._on_export,
            on_error=self.error.emit,
        )

    def submit(self, intent: Intent) -> bool:
        try:
            self.session.submit(intent)
        except ValidationError as exc:
            logger.warning('Rejected %s: %s', type(intent).__name__, exc)
            self.error.emit(str(exc))
            return False
        return True

    def shutdown(self) -> None:
        for worker in list(self._workers):
            try:
                worker.wait(2000)
            except RuntimeError:
                pass
        self._workers.clear()

    def _dispatch(self, ticket: FetchTicket) -> None:
        worker = self._worker_factory(ticket, self.settings)
        worker.page_ready.connect(self._on_page_ready)
        worker.failed.connect(self._on_page_failed)
        worker.finished.connect(self._on_worker_finished)
        self._workers.append(worker)
        worker.start()

    @pyqtSlot(int, object)
    def _on_page_ready(self, episode: int, candles: list) -> None:
        self.session.on_fetch_success(episode, candles)

    @pyqtSlot(int, str)
    def _on_page_failed(self, episode: int, message: str) -> None:
        self.session.on_fetch_failure(episode, message)

    @pyqtSlot()
    def _on_worker_finished(self) -> None:
        worker = self.sender()
        if worker is None:
            return
        if worker in self._workers:
            self._workers.remove(worker)
        worker.deleteLater()

    def _on_export(self, result: EpisodeResult) -> None:
        path = result.export_path or os.path.join(
            self.settings.export_dir, export_filename(result.symbol, result.window)
        )
        try:
            write_candles_csv(path, result.candles)
        except OSError as exc:
            logger.error('Export to %s failed: %s', path, exc)
            self.error.emit(f'Export failed: {exc}')
            return
        logger.info('Exported %s candles to %s', len(result.candles), path)
        self.export_ready.emit(path)
