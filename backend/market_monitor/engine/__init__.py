"""Engine layer: statistics, period returns, flow classification and assembly."""

from market_monitor.engine.flow import classify_lt_flow, classify_st_flow
from market_monitor.engine.indicators import MIN_CANDLES, compute_indicators
from market_monitor.engine.period_returns import (
    close_on_or_before,
    compute_period_returns,
)
from market_monitor.engine.statistics import atr, sma, true_ranges

__all__ = [
    "MIN_CANDLES",
    "atr",
    "classify_lt_flow",
    "classify_st_flow",
    "close_on_or_before",
    "compute_indicators",
    "compute_period_returns",
    "sma",
    "true_ranges",
]
