import os
import tempfile
import unittest

from helpers import HOUR_MS, JAN1_MS, make_candles

from PyQt6.QtCore import QSettings

from core.aggregate import summarize
from core.intervals import Interval
from core.session import EpisodeResult
from core.window import TimeWindow
from ui.main_window import loader_settings_from, remember_export, remember_result


class SavedSettingsTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory(prefix="ui_settings_test_")
        self.path = os.path.join(self._tmp.name, "klinegraph.ini")

    def tearDown(self):
        self._tmp.cleanup()

    def _store(self):
        return QSettings(self.path, QSettings.Format.IniFormat)

    def test_fresh_store_uses_defaults(self):
        settings = loader_settings_from(self._store())
        self.assertIs(settings.default_interval, Interval.M1)
        self.assertEqual(settings.export_dir, os.path.expanduser("~"))

    def test_interval_and_export_dir_survive_restart(self):
        candles = tuple(make_candles(JAN1_MS, 4))
        result = EpisodeResult(
            episode=1,
            symbol="ETHUSDT",
            window=TimeWindow(JAN1_MS, JAN1_MS + 4 * HOUR_MS, Interval.H1),
            candles=candles,
            summary=summarize(candles),
        )
        export_dir = os.path.join(self._tmp.name, "exports")
        store = self._store()
        remember_result(store, result)
        remember_export(store, os.path.join(export_dir, "ETHUSDT.csv"))
        store.sync()

        reopened = self._store()
        settings = loader_settings_from(reopened)
        self.assertIs(settings.default_interval, Interval.H1)
        self.assertEqual(settings.export_dir, export_dir)
        self.assertEqual(reopened.value("lastSymbol"), "ETHUSDT")

    def test_unknown_saved_interval_falls_back(self):
        store = self._store()
        store.setValue("lastInterval", "7m")
        self.assertIs(loader_settings_from(store).default_interval, Interval.M1)


if __name__ == "__main__":
    unittest.main()
