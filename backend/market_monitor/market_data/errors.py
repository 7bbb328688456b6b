"""Market data error hierarchy.

All payload and series problems inherit from MarketDataError, so the
snapshot builder can catch one type at the instrument boundary.
"""

from __future__ import annotations


class MarketDataError(Exception):
    """Base exception for all market-data errors."""


class MalformedPayloadError(MarketDataError):
    """Provider payload lacks the structure a candle series is built from.

    Stores the instrument symbol and a short reason. The whole payload
    is discarded; no partial series is produced.
    """

    def __init__(self, symbol: str, reason: str) -> None:
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"Malformed payload for {symbol}: {reason}")
