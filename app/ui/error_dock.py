import logging
import time

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtWidgets import QDockWidget, QTextEdit


class ErrorDock(QDockWidget):
    def __init__(self) -> None:
        super().__init__('Errors')
        self.setObjectName('ErrorDock')
        self._last_message: str = ""
        self._last_message_at: float = 0.0

        self.text = QTextEdit()
        self.text.setReadOnly(True)
        self.text.setPlaceholderText('Loading errors will appear here.')
        self.setWidget(self.text)

    def append_error(self, message: str) -> None:
        # Repeated failures for the same window (e.g. retry clicks) collapse into one line.
        now = time.monotonic()
        if message == self._last_message and (now - self._last_message_at) < 2.0:
            return
        self._last_message = message
        self._last_message_at = now
        self.text.append(f"{time.strftime('%H:%M:%S')}  {message}")


class _RecordBridge(QObject):
    message = pyqtSignal(str)


class DockLogHandler(logging.Handler):
    """Forwards warnings from any thread to the dock on the UI thread."""

    def __init__(self, dock: ErrorDock, level: int = logging.WARNING) -> None:
        super().__init__(level)
        self._bridge = _RecordBridge()
        self._bridge.message.connect(dock.append_error)
        self.setFormatter(logging.Formatter('%(levelname)s %(name)s: %(message)s'))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._bridge.message.emit(self.format(record))
        except RuntimeError:
            # Dock already destroyed during shutdown.
            pass
