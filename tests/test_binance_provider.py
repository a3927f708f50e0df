import unittest
from unittest import mock

import requests

from helpers import HOUR_MS, JAN1_MS

from core.data_providers import binance
from core.intervals import Interval


def _row(open_time):
    return [
        open_time,
        "42000.10",
        "42100.00",
        "41900.50",
        "42050.00",
        "12.5",
        open_time + HOUR_MS - 1,
        "525000.0",
        321,
        "6.1",
        "256000.0",
        "0",
    ]


def _response(status=200, payload=None, text=""):
    resp = mock.Mock()
    resp.status_code = status
    resp.text = text
    resp.json.return_value = payload
    return resp


class FetchKlinesTests(unittest.TestCase):
    @mock.patch("core.data_providers.binance.requests.get")
    def test_parses_rows_and_sends_page_params(self, get):
        get.return_value = _response(payload=[_row(JAN1_MS), _row(JAN1_MS + HOUR_MS)])
        candles = binance.fetch_klines("btcusdt", Interval.H1, JAN1_MS, 2, base_url="https://example.test/", timeout=3.0)

        self.assertEqual(len(candles), 2)
        self.assertEqual(candles[0].open_time, JAN1_MS)
        self.assertEqual(candles[0].high, 42100.0)
        self.assertEqual(candles[0].volume, 12.5)
        self.assertEqual(candles[1].close_time, JAN1_MS + 2 * HOUR_MS - 1)
        self.assertEqual(candles[1].trades, 321)

        args, kwargs = get.call_args
        self.assertEqual(args[0], "https://example.test/api/v3/klines")
        self.assertEqual(
            kwargs["params"],
            {"symbol": "BTCUSDT", "interval": "1h", "startTime": JAN1_MS, "limit": 2},
        )
        self.assertEqual(kwargs["timeout"], 3.0)

    @mock.patch("core.data_providers.binance.requests.get")
    def test_rate_limit_is_fetch_error(self, get):
        get.return_value = _response(status=429)
        with self.assertRaises(binance.FetchError) as ctx:
            binance.fetch_klines("BTCUSDT", Interval.H1, JAN1_MS, 2)
        self.assertIn("429", str(ctx.exception))

    @mock.patch("core.data_providers.binance.requests.get")
    def test_http_error_is_fetch_error(self, get):
        get.return_value = _response(status=400, text='{"code":-1121,"msg":"Invalid symbol."}')
        with self.assertRaises(binance.FetchError) as ctx:
            binance.fetch_klines("NOPE", Interval.H1, JAN1_MS, 2)
        self.assertIn("Invalid symbol", str(ctx.exception))

    @mock.patch("core.data_providers.binance.requests.get")
    def test_transport_error_is_fetch_error(self, get):
        get.side_effect = requests.ConnectionError("connection reset")
        with self.assertRaises(binance.FetchError):
            binance.fetch_klines("BTCUSDT", Interval.H1, JAN1_MS, 2)

    @mock.patch("core.data_providers.binance.requests.get")
    def test_malformed_payload_is_fetch_error(self, get):
        get.return_value = _response(payload=[[JAN1_MS, "x"]])
        with self.assertRaises(binance.FetchError):
            binance.fetch_klines("BTCUSDT", Interval.H1, JAN1_MS, 2)
        get.return_value = _response(payload={"code": -1000})
        with self.assertRaises(binance.FetchError):
            binance.fetch_klines("BTCUSDT", Interval.H1, JAN1_MS, 2)

    @mock.patch("core.data_providers.binance.requests.get")
    def test_row_that_is_not_a_list_is_fetch_error(self, get):
        for payload in ([5], [None], [_row(JAN1_MS), 7]):
            with self.subTest(payload=payload):
                get.return_value = _response(payload=payload)
                with self.assertRaises(binance.FetchError) as ctx:
                    binance.fetch_klines("BTCUSDT", Interval.H1, JAN1_MS, 2)
                self.assertIn("Malformed kline row", str(ctx.exception))

    @mock.patch("core.data_providers.binance.requests.get")
    def test_invalid_json_is_fetch_error(self, get):
        resp = _response()
        resp.json.side_effect = ValueError("Expecting value")
        get.return_value = resp
        with self.assertRaises(binance.FetchError):
            binance.fetch_klines("BTCUSDT", Interval.H1, JAN1_MS, 2)


class FetchSymbolsTests(unittest.TestCase):
    @mock.patch("core.data_providers.binance.requests.get")
    def test_only_trading_symbols_sorted(self, get):
        get.return_value = _response(
            payload={
                "symbols": [
                    {"symbol": "ETHUSDT", "status": "TRADING"},
                    {"symbol": "OLDBTC", "status": "BREAK"},
                    {"symbol": "BTCUSDT", "status": "TRADING"},
                ]
            }
        )
        self.assertEqual(binance.fetch_symbols(), ["BTCUSDT", "ETHUSDT"])

    @mock.patch("core.data_providers.binance.requests.get")
    def test_unexpected_payload(self, get):
        get.return_value = _response(payload=["not", "a", "dict"])
        with self.assertRaises(binance.FetchError):
            binance.fetch_symbols()


if __name__ == "__main__":
    unittest.main()
