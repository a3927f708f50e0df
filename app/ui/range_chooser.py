from datetime import datetime, timezone
from typing import Optional

from PyQt6.QtCore import QDateTime, Qt, pyqtSignal
from PyQt6.QtWidgets import QComboBox, QDateTimeEdit, QFormLayout, QHBoxLayout, QPushButton, QWidget

from core.intervals import Interval
from core.window import RangeProps


class RangeChooser(QWidget):
    """Start/end/interval picker. Emits RangeProps for Show and Export."""

    show_requested = pyqtSignal(object)
    export_requested = pyqtSignal(object)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName('RangeChooser')
        layout = QFormLayout(self)
        layout.setContentsMargins(6, 6, 6, 6)

        self.start_edit = self._make_edit()
        self.end_edit = self._make_edit()
        layout.addRow('From (UTC)', self.start_edit)
        layout.addRow('To (UTC)', self.end_edit)

        self.interval_box = QComboBox()
        for interval in Interval:
            self.interval_box.addItem(interval.value, interval)
        layout.addRow('Interval', self.interval_box)

        buttons = QHBoxLayout()
        self.show_button = QPushButton('Show')
        self.export_button = QPushButton('Export CSV')
        buttons.addWidget(self.show_button)
        buttons.addWidget(self.export_button)
        layout.addRow(buttons)

        self.show_button.clicked.connect(lambda: self._emit(self.show_requested))
        self.export_button.clicked.connect(lambda: self._emit(self.export_requested))

    def _make_edit(self) -> QDateTimeEdit:
        edit = QDateTimeEdit()
        edit.setCalendarPopup(True)
        edit.setTimeSpec(Qt.TimeSpec.UTC)
        edit.setDisplayFormat('yyyy-MM-dd HH:mm')
        return edit

    def set_props(self, props: RangeProps) -> None:
        self.start_edit.setDateTime(_to_qdt(props.start))
        self.end_edit.setDateTime(_to_qdt(props.end))
        index = self.interval_box.findData(props.interval)
        if index >= 0:
            self.interval_box.setCurrentIndex(index)

    def props(self) -> RangeProps:
        return RangeProps(
            start=_from_qdt(self.start_edit.dateTime()),
            end=_from_qdt(self.end_edit.dateTime()),
            interval=self.interval_box.currentData() or Interval.M1,
        )

    def _emit(self, signal) -> None:
        signal.emit(self.props())


def _to_qdt(value: datetime) -> QDateTime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return QDateTime.fromMSecsSinceEpoch(int(value.timestamp() * 1000)).toUTC()


def _from_qdt(value: QDateTime) -> datetime:
    return datetime.fromtimestamp(value.toMSecsSinceEpoch() / 1000.0, tz=timezone.utc)
