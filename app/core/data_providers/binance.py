from __future__ import annotations

import logging
from typing import List

import requests

from core.candles import Candle
from core.intervals import Interval
from core.settings import DEFAULT_BASE_URL


logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """A page request failed: transport, HTTP status, rate limit or payload parse."""


def fetch_klines(
    symbol: str,
    interval: Interval,
    start_ms: int,
    limit: int,
    *,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = 10.0,
) -> List[Candle]:
    params = {
        'symbol': symbol.upper(),
        'interval': str(interval),
        'startTime': int(start_ms),
        'limit': int(limit),
    }
    url = f'{base_url.rstrip("/")}/api/v3/klines'
    logger.debug('GET %s %s', url, params)
    payload = _get_json(url, params, timeout)
    if not isinstance(payload, list):
        raise FetchError(f'Unexpected klines payload for {symbol}: {type(payload).__name__}')
    try:
        return [Candle.from_row(row) for row in payload]
    except ValueError as exc:
        raise FetchError(str(exc)) from exc


def fetch_symbols(*, base_url: str = DEFAULT_BASE_URL, timeout: float = 10.0) -> List[str]:
    url = f'{base_url.rstrip("/")}/api/v3/exchangeInfo'
    payload = _get_json(url, None, timeout)
    try:
        entries = payload['symbols']
        symbols = [str(s['symbol']) for s in entries if s.get('status') == 'TRADING']
    except (KeyError, TypeError, AttributeError) as exc:
        raise FetchError(f'Unexpected exchangeInfo payload: {exc}') from exc
    symbols.sort()
    return symbols


def _get_json(url: str, params, timeout: float):
    try:
        resp = requests.get(url, params=params, timeout=timeout)
    except requests.RequestException as exc:
        raise FetchError(f'Request to {url} failed: {exc}') from exc
    if resp.status_code in (418, 429):
        raise FetchError(f'Rate limited by {url} (HTTP {resp.status_code})')
    if resp.status_code >= 400:
        raise FetchError(f'HTTP {resp.status_code} from {url}: {resp.text[:200]}')
    try:
        return resp.json()
    except ValueError as exc:
        raise FetchError(f'Invalid JSON from {url}: {exc}') from exc
