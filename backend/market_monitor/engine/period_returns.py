"""Week/month/year-to-date returns against calendar-anchored baselines.

"Today" is the date of the last candle, not the wall clock, so a series
that stopped updating still reports returns as of its own last session.
Each baseline is the close of the newest candle dated on or before the
anchor date, which steps back over weekends and holidays.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date

from market_monitor.market_data.types import Candle, PeriodReturns
from market_monitor.utils.time import (
    day_before_week_start,
    last_day_of_previous_month,
    last_day_of_previous_year,
)

MIN_CANDLES = 5


def close_on_or_before(candles: Sequence[Candle], target: date) -> float | None:
    """Close of the newest candle dated on or before ``target``."""
    for candle in reversed(candles):
        if candle.date <= target:
            return candle.close
    return None


def percent_return(current: float, base: float | None) -> float | None:
    """(current - base) / base * 100, or None for a missing or zero base."""
    if base is None or base == 0:
        return None
    return (current - base) / base * 100


def _period_return(
    candles: Sequence[Candle],
    anchor: Callable[[date], date],
) -> float | None:
    last = candles[-1]
    base = close_on_or_before(candles, anchor(last.date))
    return percent_return(last.close, base)


def compute_period_returns(candles: Sequence[Candle]) -> PeriodReturns:
    """WTD, MTD and YTD percent returns as of the last candle.

    WTD's baseline is the last session before this week's Monday, MTD's
    the last session of the previous month, YTD's the last session of
    the previous year. All three are None below MIN_CANDLES candles.
    """
    if len(candles) < MIN_CANDLES:
        return PeriodReturns()
    return PeriodReturns(
        wtd=_period_return(candles, day_before_week_start),
        mtd=_period_return(candles, last_day_of_previous_month),
        ytd=_period_return(candles, last_day_of_previous_year),
    )
