from typing import Optional

import numpy as np
import pyqtgraph as pg
from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QProgressBar, QPushButton, QStackedWidget, QVBoxLayout, QWidget

from core.session import ChartDragged, EpisodeResult, ExportRequested, RangeChosen, ReloadRequested
from core.window import RangeProps
from .range_chooser import RangeChooser


_PAGE_EMPTY = 0
_PAGE_LOADING = 1
_PAGE_CHART = 2


class ChartView(QWidget):
    """
    Shows a progress bar while an episode loads and the close series once it completes.

    Every user gesture leaves as an intent on `intent_raised`; the view never
    talks to the loader directly.
    """

    intent_raised = pyqtSignal(object)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.toolbar = QWidget()
        self.toolbar.setObjectName('TopToolbar')
        toolbar_layout = QHBoxLayout(self.toolbar)
        toolbar_layout.setContentsMargins(6, 6, 6, 4)
        toolbar_layout.setSpacing(6)

        self.title_label = QLabel('')
        toolbar_layout.addWidget(self.title_label)
        self.range_button = QPushButton('Time range')
        self.range_button.setCheckable(True)
        toolbar_layout.addWidget(self.range_button)
        self.zoom_button = QPushButton('Zoom to selection')
        self.zoom_button.setEnabled(False)
        toolbar_layout.addWidget(self.zoom_button)
        self.reload_button = QPushButton('Retry')
        self.reload_button.setVisible(False)
        toolbar_layout.addWidget(self.reload_button)
        self.status_label = QLabel('')
        toolbar_layout.addWidget(self.status_label)
        toolbar_layout.addStretch(1)
        layout.addWidget(self.toolbar)

        self.range_chooser = RangeChooser()
        self.range_chooser.setVisible(False)
        layout.addWidget(self.range_chooser)

        self.stack = QStackedWidget()
        placeholder = QLabel('Select a symbol.')
        placeholder.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.stack.addWidget(placeholder)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 1000)
        self.progress_bar.setFormat('%p%')
        loading_page = QWidget()
        loading_layout = QVBoxLayout(loading_page)
        loading_layout.addStretch(1)
        loading_layout.addWidget(self.progress_bar)
        loading_layout.addStretch(1)
        self.stack.addWidget(loading_page)

        self.plot_widget = pg.PlotWidget(axisItems={'bottom': pg.DateAxisItem(orientation='bottom')})
        self.plot_widget.showGrid(x=True, y=True, alpha=0.2)
        self.plot_widget.setClipToView(True)
        self.price_curve = self.plot_widget.plot([], [], pen=pg.mkPen('#26A69A', width=1))
        self.selection = pg.LinearRegionItem(movable=True)
        self.selection.setZValue(10)
        self.plot_widget.addItem(self.selection)
        self.stack.addWidget(self.plot_widget)
        layout.addWidget(self.stack, 1)

        self.range_button.toggled.connect(self.range_chooser.setVisible)
        self.range_chooser.show_requested.connect(lambda props: self.intent_raised.emit(RangeChosen(props)))
        self.range_chooser.export_requested.connect(lambda props: self.intent_raised.emit(ExportRequested(props)))
        self.zoom_button.clicked.connect(self._emit_zoom)
        self.reload_button.clicked.connect(lambda: self.intent_raised.emit(ReloadRequested()))

    def set_title(self, symbol: str) -> None:
        self.title_label.setText(symbol)

    def set_progress(self, fraction: float, has_error: bool) -> None:
        if has_error:
            return
        self.reload_button.setVisible(False)
        self.status_label.setText('')
        if fraction < 1.0:
            self.zoom_button.setEnabled(False)
            self.progress_bar.setValue(int(fraction * 1000))
            self.stack.setCurrentIndex(_PAGE_LOADING)

    def show_error(self, message: str) -> None:
        self.status_label.setText(f'Error: {message}')
        self.status_label.setStyleSheet('color: #EF5350;')
        if self.stack.currentIndex() == _PAGE_LOADING:
            self.reload_button.setVisible(True)
            self.stack.setCurrentIndex(_PAGE_EMPTY)

    def show_notice(self, message: str) -> None:
        self.status_label.setText(message)
        self.status_label.setStyleSheet('color: #B2B5BE;')

    def show_result(self, result: EpisodeResult) -> None:
        summary = result.summary
        x = np.fromiter((c.open_time / 1000.0 for c in result.candles), dtype=np.float64, count=len(result.candles))
        y = np.fromiter((c.close for c in result.candles), dtype=np.float64, count=len(result.candles))
        self.price_curve.setData(x, y)
        left = summary.left_edge_time / 1000.0
        right = summary.right_edge_time / 1000.0
        self.plot_widget.setXRange(left, right, padding=0.01)
        self.plot_widget.setYRange(summary.min_price, summary.max_price, padding=0.05)
        third = (right - left) / 3.0
        self.selection.setRegion((left + third, right - third))
        self.range_chooser.set_props(RangeProps.from_window(result.window))
        self.title_label.setText(f'{result.symbol} {result.window.interval}')
        self.status_label.setText(f'{summary.count} candles')
        self.status_label.setStyleSheet('color: #B2B5BE;')
        self.zoom_button.setEnabled(True)
        self.stack.setCurrentIndex(_PAGE_CHART)

    def _emit_zoom(self) -> None:
        lo, hi = self.selection.getRegion()
        self.intent_raised.emit(ChartDragged(lo, hi))
