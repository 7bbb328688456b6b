"""Market data layer: candle types, payload parsing, and errors.

Re-exports the public names for convenient imports:
    from market_monitor.market_data import Candle, CandleSeries, parse_chart_payload
"""

from market_monitor.market_data.errors import MalformedPayloadError, MarketDataError
from market_monitor.market_data.parser import parse_chart_payload
from market_monitor.market_data.types import (
    INDICATOR_COLUMNS,
    UNDEFINED_FLOW,
    Candle,
    CandleSeries,
    ColorTier,
    FlowState,
    IndicatorRecord,
    PeriodReturns,
)

__all__ = [
    "INDICATOR_COLUMNS",
    "UNDEFINED_FLOW",
    "Candle",
    "CandleSeries",
    "ColorTier",
    "FlowState",
    "IndicatorRecord",
    "MalformedPayloadError",
    "MarketDataError",
    "PeriodReturns",
    "parse_chart_payload",
]
