"""Indicator assembly: one candle series in, one IndicatorRecord out.

compute_indicators() is a pure function of the series. It keeps no
state between calls, so the same series always yields an equal record
and series for different instruments can be computed in any order or
in parallel.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from market_monitor.engine.flow import classify_lt_flow, classify_st_flow
from market_monitor.engine.period_returns import compute_period_returns
from market_monitor.engine.statistics import ATR_PERIOD, atr, sma
from market_monitor.market_data.types import Candle, IndicatorRecord

MIN_CANDLES = 10
MA_PERIODS: tuple[int, ...] = (20, 50, 100, 200)

# Position reported when a range has zero width.
RANGE_MIDPOINT = 50.0


def range_position(value: float, low: float, high: float) -> float:
    """Where value sits in [low, high], 0-100. RANGE_MIDPOINT for a flat range.

    Provider closes occasionally print outside their own high/low; the
    result is clamped to the 0-100 scale.
    """
    width = high - low
    if width <= 0:
        return RANGE_MIDPOINT
    return min(100.0, max(0.0, (value - low) / width * 100))


def ma_extension(close: float, averages: Sequence[float | None]) -> float | None:
    """Mean percent distance of close above each defined average.

    Undefined (None) and non-positive averages are skipped; None when
    nothing is left.
    """
    defined = [a for a in averages if a is not None and a > 0]
    if not defined:
        return None
    return math.fsum((close / a - 1) * 100 for a in defined) / len(defined)


def compute_indicators(candles: Sequence[Candle]) -> IndicatorRecord | None:
    """Build the indicator record for a series, or None below MIN_CANDLES.

    Fields that need more history than the series has are None; the
    record itself is only withheld when the whole series is too short.
    """
    if len(candles) < MIN_CANDLES:
        return None

    last = candles[-1]
    close = last.close
    prev_close = candles[-2].close
    change = close - prev_close

    pct_change = change / prev_close * 100 if prev_close != 0 else None

    atr_value = atr(candles, ATR_PERIOD)
    atr_delta = change / atr_value if atr_value else None

    dcr = range_position(close, last.low, last.high)
    wr52 = range_position(
        close,
        min(c.low for c in candles),
        max(c.high for c in candles),
    )

    closes = [c.close for c in candles]
    sma20, sma50, sma100, sma200 = (sma(closes, p) for p in MA_PERIODS)

    returns = compute_period_returns(candles)

    return IndicatorRecord(
        price=close,
        pct_change=pct_change,
        atr_delta=atr_delta,
        dcr=dcr,
        wr52=wr52,
        ma_x=ma_extension(close, (sma20, sma50, sma100, sma200)),
        st_flow=classify_st_flow(close, sma20, sma50),
        lt_flow=classify_lt_flow(close, sma50, sma200),
        wtd=returns.wtd,
        mtd=returns.mtd,
        ytd=returns.ytd,
    )
