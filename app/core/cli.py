from __future__ import annotations

import argparse
import logging
import sys
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Deque, List, Optional

from core.candles import Candle
from core.data_providers import binance
from core.export import write_candles_csv
from core.intervals import Interval
from core.loading import LoadStatus
from core.paging import PAGE_SIZE
from core.session import EpisodeResult, ExportRequested, FetchTicket, RangeChosen, Session
from core.settings import DEFAULT_BASE_URL, LoaderSettings
from core.window import RangeProps, ValidationError


logger = logging.getLogger(__name__)

Fetcher = Callable[..., List[Candle]]


def _parse_ts(val: str) -> datetime:
    """
    Parse a timestamp as either:
    - epoch ms integer string
    - ISO date/time (YYYY-MM-DD or YYYY-MM-DDTHH:MM[:SS]); naive values are UTC
    """
    v = val.strip()
    if v.isdigit():
        return datetime.fromtimestamp(int(v) / 1000.0, tz=timezone.utc)
    dt = datetime.fromisoformat(v)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def run_episode(session: Session, intent, queue: Deque[FetchTicket], fetcher: Fetcher) -> None:
    """Drain page tickets one at a time until the episode settles."""
    session.submit(intent)
    while queue:
        ticket = queue.popleft()
        try:
            batch = fetcher(
                ticket.symbol,
                ticket.interval,
                ticket.request.start,
                ticket.request.limit,
                base_url=session.settings.base_url,
                timeout=session.settings.request_timeout,
            )
        except binance.FetchError as exc:
            session.on_fetch_failure(ticket.episode, exc)
            continue
        session.on_fetch_success(ticket.episode, batch)


def main(argv: Optional[list[str]] = None, fetcher: Optional[Fetcher] = None) -> int:
    ap = argparse.ArgumentParser(description="Headless kline window loader (no UI).")
    ap.add_argument("--symbol", required=True, help="Symbol, e.g. BTCUSDT")
    ap.add_argument("--interval", default="1m", help="Candle interval, e.g. 1m, 1h, 1d (default: 1m)")
    ap.add_argument("--start", required=True, help="Window start (epoch ms) or ISO date/time, inclusive")
    ap.add_argument("--end", required=True, help="Window end (epoch ms) or ISO date/time, exclusive")
    ap.add_argument("--page-size", type=int, default=PAGE_SIZE, help=f"Candles per request (default: {PAGE_SIZE})")
    ap.add_argument("--base-url", default=DEFAULT_BASE_URL)
    ap.add_argument("--timeout", type=float, default=10.0, help="Per-request timeout in seconds")
    ap.add_argument("--out", default=None, help="Write the loaded candles to this CSV file")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log every page request")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        interval = Interval.parse(args.interval)
        props = RangeProps(_parse_ts(args.start), _parse_ts(args.end), interval)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    settings = LoaderSettings(
        page_size=int(args.page_size),
        base_url=args.base_url,
        request_timeout=float(args.timeout),
        default_interval=interval,
    )
    results: list[EpisodeResult] = []
    exported: list[str] = []
    errors: list[str] = []
    queue: Deque[FetchTicket] = deque()

    def on_progress(fraction: float, has_error: bool) -> None:
        if not has_error:
            print(f"progress={fraction:.0%}", file=sys.stderr)

    def on_export(result: EpisodeResult) -> None:
        try:
            exported.append(write_candles_csv(result.export_path, result.candles))
        except OSError as exc:
            logger.error("Failed to export %s klines to %s: %s", result.symbol, result.export_path, exc)
            errors.append(f"Failed to export to {result.export_path}: {exc}")

    session = Session(
        queue.append,
        settings=settings,
        on_progress=on_progress,
        on_loaded=results.append,
        on_export=on_export,
        on_error=errors.append,
    )
    fetch = fetcher or binance.fetch_klines
    intent = ExportRequested(props, args.out) if args.out else RangeChosen(props)
    try:
        session.select_symbol(args.symbol)
        run_episode(session, intent, queue, fetch)
    except ValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if session.status is not LoadStatus.COMPLETE or not results or (args.out and not exported):
        for message in errors:
            print(f"error: {message}", file=sys.stderr)
        return 1

    result = results[-1]
    summary = result.summary
    for path in exported:
        print(f"exported={path}")
    print(
        f"symbol={result.symbol} interval={result.window.interval} candles={summary.count} "
        f"max_price={summary.max_price} min_price={summary.min_price} max_volume={summary.max_volume} "
        f"right_edge={summary.right_edge_time}"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
