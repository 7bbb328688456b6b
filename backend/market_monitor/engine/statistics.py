"""Windowed reductions over a candle series: SMA and ATR.

Both are trailing-window functions of the whole series that return None
when the series is shorter than the window. A short series is a normal
condition for a newly listed instrument, not an error.

Sums use math.fsum so a constant window averages back to exactly that
constant.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from market_monitor.market_data.types import Candle

ATR_PERIOD = 14


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")


def sma(closes: Sequence[float], period: int) -> float | None:
    """Arithmetic mean of the last ``period`` closes, or None if not enough."""
    _check_period(period)
    if len(closes) < period:
        return None
    return math.fsum(closes[len(closes) - period :]) / period


def true_ranges(candles: Sequence[Candle]) -> list[float]:
    """True range of every candle after the first.

    TR_i = max(high_i - low_i, |high_i - close_{i-1}|, |low_i - close_{i-1}|)
    """
    out: list[float] = []
    for prev, cur in zip(candles, candles[1:]):
        out.append(
            max(
                cur.high - cur.low,
                abs(cur.high - prev.close),
                abs(cur.low - prev.close),
            )
        )
    return out


def atr(candles: Sequence[Candle], period: int = ATR_PERIOD) -> float | None:
    """Simple average of the trailing ``period`` true ranges.

    Needs ``period + 1`` candles: the first only supplies the previous
    close for the oldest true range in the window.
    """
    _check_period(period)
    if len(candles) < period + 1:
        return None
    trs = true_ranges(candles)
    if len(trs) < period:
        return None
    return math.fsum(trs[len(trs) - period :]) / period
