import logging
import os
from typing import Optional

from PyQt6.QtCore import QSettings, Qt
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import QDockWidget, QMainWindow

from core.controller import SessionController
from core.intervals import Interval
from core.session import EpisodeResult, SymbolChanged
from core.settings import LoaderSettings
from .chart_view import ChartView
from .error_dock import DockLogHandler, ErrorDock
from .symbol_list import SymbolList


logger = logging.getLogger(__name__)


def loader_settings_from(store: QSettings) -> LoaderSettings:
    """Build loader settings from what earlier sessions left in `store`."""
    interval = Interval.M1
    saved = store.value('lastInterval')
    if saved:
        try:
            interval = Interval.parse(str(saved))
        except ValueError:
            logger.info('Ignoring saved interval %r.', saved)
    return LoaderSettings(
        default_interval=interval,
        export_dir=str(store.value('exportDir', os.path.expanduser('~'))),
    )


def remember_result(store: QSettings, result: EpisodeResult) -> None:
    store.setValue('lastSymbol', result.symbol)
    store.setValue('lastInterval', str(result.window.interval))


def remember_export(store: QSettings, path: str) -> None:
    store.setValue('exportDir', os.path.dirname(os.path.abspath(path)))


class MainWindow(QMainWindow):
    def __init__(self, settings: Optional[LoaderSettings] = None) -> None:
        super().__init__()
        self.setWindowTitle('KlineGraph')
        self.resize(1400, 900)
        self._settings = QSettings('KlineGraph', 'KlineGraph')
        self.loader_settings = settings or loader_settings_from(self._settings)

        self.controller = SessionController(self.loader_settings, parent=self)
        self.chart_view = ChartView()
        self.setCentralWidget(self.chart_view)

        self.symbol_list = SymbolList(self.loader_settings)
        self.symbol_dock = QDockWidget('Symbols')
        self.symbol_dock.setObjectName('SymbolDock')
        self.symbol_dock.setWidget(self.symbol_list)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, self.symbol_dock)

        self.error_dock = ErrorDock()
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.error_dock)
        self._log_handler = DockLogHandler(self.error_dock)
        logging.getLogger().addHandler(self._log_handler)

        self.symbol_list.symbol_selected.connect(self._on_symbol_selected)
        self.symbol_list.error.connect(self.error_dock.append_error)
        self.chart_view.intent_raised.connect(self.controller.submit)
        self.controller.progress_changed.connect(self.chart_view.set_progress)
        self.controller.loaded.connect(self._on_loaded)
        self.controller.error.connect(self.chart_view.show_error)
        self.controller.export_ready.connect(self._on_export_ready)

        self._setup_menu()
        self._restore_layout()
        self.symbol_list.load()
        last_symbol = self._settings.value('lastSymbol')
        if last_symbol:
            self._on_symbol_selected(str(last_symbol))

    def _setup_menu(self) -> None:
        window_menu = self.menuBar().addMenu('Window')
        for dock in (self.symbol_dock, self.error_dock):
            action = QAction(dock.windowTitle(), self)
            action.setCheckable(True)
            action.setChecked(not dock.isHidden())
            action.triggered.connect(lambda checked, d=dock: d.setVisible(checked))
            dock.visibilityChanged.connect(lambda visible, a=action: a.setChecked(visible))
            window_menu.addAction(action)

    def _on_symbol_selected(self, symbol: str) -> None:
        if self.controller.submit(SymbolChanged(symbol)):
            self.chart_view.set_title(self.controller.session.symbol or symbol)
            self._settings.setValue('lastSymbol', self.controller.session.symbol)

    def _on_loaded(self, result: EpisodeResult) -> None:
        self.chart_view.show_result(result)
        remember_result(self._settings, result)

    def _on_export_ready(self, path: str) -> None:
        self.chart_view.show_notice(f'Exported to {path}')
        remember_export(self._settings, path)

    def closeEvent(self, event) -> None:
        self._save_layout()
        logging.getLogger().removeHandler(self._log_handler)
        self.symbol_list.shutdown()
        self.controller.shutdown()
        super().closeEvent(event)

    def _save_layout(self) -> None:
        self._settings.setValue('geometry', self.saveGeometry())
        self._settings.setValue('windowState', self.saveState())

    def _restore_layout(self) -> None:
        geometry = self._settings.value('geometry')
        window_state = self._settings.value('windowState')
        if geometry is not None:
            self.restoreGeometry(geometry)
        if window_state is not None:
            self.restoreState(window_state)
