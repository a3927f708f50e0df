import csv
import os
import tempfile
import unittest

from helpers import HOUR_MS, JAN1_MS, make_candles

from core.candles import CANDLE_FIELDS
from core.export import export_filename, write_candles_csv
from core.intervals import Interval
from core.window import TimeWindow


class ExportTests(unittest.TestCase):
    def test_filename(self):
        window = TimeWindow(JAN1_MS, JAN1_MS + 4 * HOUR_MS, Interval.H1)
        self.assertEqual(
            export_filename("BTCUSDT", window),
            "BTCUSDT-2024-01-01T00-00-00Z-2024-01-01T04-00-00Z-1h.csv",
        )

    def test_writes_header_and_rows(self):
        candles = make_candles(JAN1_MS, 3)
        with tempfile.TemporaryDirectory(prefix="export_test_") as root:
            path = os.path.join(root, "nested", "out.csv")
            self.assertEqual(write_candles_csv(path, candles), path)
            with open(path, newline="", encoding="utf-8") as f:
                rows = list(csv.reader(f))
        self.assertEqual(tuple(rows[0]), CANDLE_FIELDS)
        self.assertEqual(len(rows), 4)
        self.assertEqual(rows[1][0], str(JAN1_MS))
        self.assertEqual(rows[3][CANDLE_FIELDS.index("close_time")], str(JAN1_MS + 3 * HOUR_MS - 1))


if __name__ == "__main__":
    unittest.main()
