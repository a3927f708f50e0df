from typing import List, Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import QLabel, QLineEdit, QListWidget, QVBoxLayout, QWidget

from core.fetch_worker import SymbolFetchWorker
from core.settings import LoaderSettings


class SymbolList(QWidget):
    symbol_selected = pyqtSignal(str)
    error = pyqtSignal(str)

    def __init__(self, settings: LoaderSettings, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.settings = settings
        self._symbols: List[str] = []
        self._worker: Optional[SymbolFetchWorker] = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)
        self.filter_edit = QLineEdit()
        self.filter_edit.setPlaceholderText('Filter symbols')
        self.filter_edit.textChanged.connect(self._apply_filter)
        layout.addWidget(self.filter_edit)
        self.list_widget = QListWidget()
        self.list_widget.itemClicked.connect(lambda item: self.symbol_selected.emit(item.text()))
        layout.addWidget(self.list_widget)
        self.status_label = QLabel('Loading symbols...')
        layout.addWidget(self.status_label)

    def load(self) -> None:
        if self._worker and self._worker.isRunning():
            return
        self._worker = SymbolFetchWorker(self.settings)
        self._worker.data_ready.connect(self._on_symbols_ready)
        self._worker.error.connect(self._on_symbols_error)
        self._worker.start()

    def shutdown(self) -> None:
        if self._worker is not None:
            self._worker.wait(2000)

    def _on_symbols_ready(self, symbols: list) -> None:
        self._symbols = list(symbols)
        self.status_label.setText(f'{len(self._symbols)} symbols')
        self._apply_filter(self.filter_edit.text())

    def _on_symbols_error(self, message: str) -> None:
        self.status_label.setText('Symbol list unavailable')
        self.error.emit(f'Symbol list failed: {message}')

    def _apply_filter(self, text: str) -> None:
        needle = text.strip().upper()
        self.list_widget.clear()
        self.list_widget.addItems([s for s in self._symbols if needle in s])
