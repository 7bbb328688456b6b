"""Provider payload -> CandleSeries.

The provider returns a chart document shaped like:

    {"chart": {"result": [{
        "timestamp": [...],
        "indicators": {"quote": [{"open": [...], "high": [...],
                                  "low": [...], "close": [...],
                                  "volume": [...]}]}}]}}

Arrays are index-aligned with ``timestamp`` and may contain nulls.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from datetime import UTC, tzinfo
from typing import Any

import structlog

from market_monitor.market_data.errors import MalformedPayloadError
from market_monitor.market_data.types import Candle, CandleSeries
from market_monitor.utils.time import candle_date

log = structlog.get_logger()

_REQUIRED_FIELDS = ("high", "low", "close")


def parse_chart_payload(
    symbol: str,
    payload: Any,
    tz: tzinfo = UTC,
) -> CandleSeries:
    """Build a candle series from one provider chart payload.

    Candles missing close, high or low are dropped. Candles whose
    timestamp does not advance past the last kept candle are dropped
    as duplicates.

    Raises:
        MalformedPayloadError: If the chart structure is missing, a price
            is not a finite JSON number, or the payload is the provider's
            error shape.
    """
    timestamps, quote = _extract(symbol, payload)

    candles: list[Candle] = []
    dropped = 0
    last_ts: int | None = None
    for i, raw_ts in enumerate(timestamps):
        high = _value_at(symbol, quote, "high", i)
        low = _value_at(symbol, quote, "low", i)
        close = _value_at(symbol, quote, "close", i)
        if high is None or low is None or close is None or raw_ts is None:
            dropped += 1
            continue

        if isinstance(raw_ts, (str, bool)):
            raise MalformedPayloadError(
                symbol, f"timestamp[{i}] is not an integer: {raw_ts!r}"
            )
        try:
            ts = int(raw_ts)
        except (TypeError, ValueError, OverflowError) as e:
            raise MalformedPayloadError(
                symbol, f"timestamp[{i}] is not an integer: {raw_ts!r}"
            ) from e
        # Deduplication
        if last_ts is not None and ts <= last_ts:
            dropped += 1
            continue
        last_ts = ts

        candles.append(
            Candle(
                timestamp=ts,
                date=candle_date(ts, tz),
                open=_value_at(symbol, quote, "open", i),
                high=high,
                low=low,
                close=close,
                volume=_value_at(symbol, quote, "volume", i),
            )
        )

    if dropped:
        log.debug(
            "candles_dropped", symbol=symbol, dropped=dropped, kept=len(candles)
        )
    return CandleSeries(symbol=symbol, candles=tuple(candles))


def _extract(
    symbol: str, payload: Any
) -> tuple[Sequence[Any], Mapping[str, Any]]:
    """Pull the timestamp array and first quote block out of the payload."""
    if not isinstance(payload, Mapping):
        raise MalformedPayloadError(symbol, "payload is not an object")
    if payload.get("error"):
        raise MalformedPayloadError(symbol, f"provider error: {payload['error']}")

    try:
        result = payload["chart"]["result"][0]
        timestamps = result["timestamp"]
        quote = result["indicators"]["quote"][0]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedPayloadError(symbol, f"missing chart structure ({e!r})") from e

    if not _is_array(timestamps):
        raise MalformedPayloadError(symbol, "timestamp is not an array")
    if not isinstance(quote, Mapping):
        raise MalformedPayloadError(symbol, "quote is not an object")
    for name in _REQUIRED_FIELDS:
        if not _is_array(quote.get(name)):
            raise MalformedPayloadError(symbol, f"quote.{name} is not an array")
    return timestamps, quote


def _value_at(
    symbol: str, quote: Mapping[str, Any], name: str, index: int
) -> float | None:
    """Float value of quote[name][index], or None if absent or null."""
    values = quote.get(name)
    if not _is_array(values):
        return None
    # Arrays shorter than the timestamp array read as nulls.
    if index >= len(values):
        return None
    raw = values[index]
    if raw is None:
        return None
    # JSON numbers only.
    if isinstance(raw, (str, bool)):
        raise MalformedPayloadError(
            symbol, f"quote.{name}[{index}] is not numeric: {raw!r}"
        )
    try:
        value = float(raw)
    except (TypeError, ValueError) as e:
        raise MalformedPayloadError(
            symbol, f"quote.{name}[{index}] is not numeric: {raw!r}"
        ) from e
    if not math.isfinite(value):
        raise MalformedPayloadError(
            symbol, f"quote.{name}[{index}] is not finite: {raw!r}"
        )
    return value


def _is_array(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))
