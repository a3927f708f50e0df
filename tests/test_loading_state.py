import unittest

from helpers import HOUR_MS, JAN1_MS, make_candles

from core.intervals import Interval
from core.loading import LoadingState, LoadStatus
from core.window import TimeWindow


class LoadingStateTests(unittest.TestCase):
    def _state(self, hours, page_size):
        window = TimeWindow(JAN1_MS, JAN1_MS + hours * HOUR_MS, Interval.H1)
        return LoadingState(window, page_size)

    def test_two_page_hourly_scenario(self):
        state = self._state(4, 2)
        self.assertEqual(state.page_count, 2)
        self.assertEqual(state.status, LoadStatus.PENDING)
        self.assertEqual(state.progress(), 0.0)

        first = state.next_request()
        self.assertEqual(first.start, JAN1_MS)
        state.record_success(make_candles(JAN1_MS, 2))

        second = state.next_request()
        self.assertEqual(second.start, JAN1_MS + 2 * HOUR_MS)
        self.assertEqual(state.progress(), 0.5)

        state.record_success(make_candles(JAN1_MS + 2 * HOUR_MS, 2))
        self.assertEqual(state.progress(), 1.0)
        self.assertIsNone(state.next_request())
        self.assertEqual(state.status, LoadStatus.COMPLETE)
        self.assertEqual(len(state.candles), 4)

    def test_completes_exactly_after_last_page(self):
        state = self._state(6, 2)
        self.assertEqual(state.page_count, 3)
        for page in range(3):
            self.assertEqual(state.status, LoadStatus.PENDING)
            request = state.next_request()
            state.record_success(make_candles(request.start, 2))
        self.assertEqual(state.pages_done, 3)
        self.assertEqual(state.status, LoadStatus.COMPLETE)

    def test_progress_is_monotonic(self):
        state = self._state(10, 2)
        seen = [state.progress()]
        while state.next_request() is not None:
            request = state.next_request()
            state.record_success(make_candles(request.start, request.limit))
            seen.append(state.progress())
        self.assertEqual(seen, sorted(seen))
        self.assertEqual(seen[-1], 1.0)
        self.assertTrue(all(p < 1.0 for p in seen[:-1]))

    def test_empty_batch_forces_completion(self):
        state = self._state(10, 2)
        state.record_success(make_candles(JAN1_MS, 2))
        state.record_success([])
        self.assertEqual(state.progress(), 1.0)
        self.assertIsNone(state.next_request())
        self.assertEqual(state.status, LoadStatus.COMPLETE)
        self.assertEqual(len(state.candles), 2)

    def test_empty_first_batch_completes_without_data(self):
        state = self._state(10, 2)
        state.record_success([])
        self.assertTrue(state.is_complete)
        self.assertEqual(state.candles, ())

    def test_failure_is_sticky(self):
        state = self._state(6, 2)
        state.record_success(make_candles(JAN1_MS, 2))
        before = state.progress()
        state.record_failure("HTTP 500")
        self.assertIsNone(state.next_request())
        self.assertEqual(state.status, LoadStatus.ERRORED)
        self.assertEqual(state.error, "HTTP 500")

        state.record_success(make_candles(JAN1_MS + 2 * HOUR_MS, 2))
        self.assertEqual(state.progress(), before)
        self.assertIsNone(state.next_request())
        # Partial data stays inspectable.
        self.assertEqual(len(state.candles), 2)

    def test_candles_past_window_end_are_dropped(self):
        state = self._state(3, 1000)
        state.record_success(make_candles(JAN1_MS, 5))
        self.assertTrue(state.is_complete)
        self.assertEqual(len(state.candles), 3)
        self.assertEqual(state.candles[-1].open_time, JAN1_MS + 2 * HOUR_MS)

    def test_batch_entirely_past_window_completes(self):
        state = self._state(6, 2)
        state.record_success(make_candles(JAN1_MS, 2))
        state.record_success(make_candles(JAN1_MS + 10 * HOUR_MS, 2))
        self.assertTrue(state.is_complete)
        self.assertEqual(len(state.candles), 2)

    def test_gap_in_data_moves_cursor_past_it(self):
        state = self._state(10, 2)
        batch = make_candles(JAN1_MS, 1) + make_candles(JAN1_MS + 5 * HOUR_MS, 1)
        state.record_success(batch)
        self.assertEqual(state.cursor, JAN1_MS + 6 * HOUR_MS)
        self.assertEqual(state.next_request().start, JAN1_MS + 6 * HOUR_MS)


if __name__ == "__main__":
    unittest.main()
