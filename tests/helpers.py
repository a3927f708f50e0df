import os
import sys

# Allow `import core.*` like the app does when running `python app/main.py`.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
APP_DIR = os.path.join(REPO_ROOT, "app")
if APP_DIR not in sys.path:
    sys.path.insert(0, APP_DIR)

from core.candles import Candle  # noqa: E402


HOUR_MS = 3_600_000
# 2024-01-01T00:00:00Z
JAN1_MS = 1_704_067_200_000


def make_candles(start_ms, count, step_ms=HOUR_MS, highs=None, volumes=None):
    out = []
    for i in range(count):
        open_time = start_ms + i * step_ms
        high = float(highs[i]) if highs is not None else 11.0 + i
        volume = float(volumes[i]) if volumes is not None else 100.0
        out.append(
            Candle(
                open_time=open_time,
                open=10.0,
                high=high,
                low=9.0,
                close=10.5,
                volume=volume,
                close_time=open_time + step_ms - 1,
            )
        )
    return out
