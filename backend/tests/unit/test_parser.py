"""Tests for provider chart payload parsing."""

from __future__ import annotations

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

import pytest

from market_monitor.market_data.errors import MalformedPayloadError, MarketDataError
from market_monitor.market_data.parser import parse_chart_payload
from tests.factories import make_chart_payload, session_timestamp


class TestValidPayload:
    """Test conversion of a well-formed payload."""

    def test_builds_series_in_order(self) -> None:
        payload = make_chart_payload([100.0, 101.0, 102.0])
        series = parse_chart_payload("SPY", payload)
        assert series.symbol == "SPY"
        assert len(series) == 3
        assert series.closes == [100.0, 101.0, 102.0]
        assert [c.date for c in series] == [
            date(2026, 1, 5),
            date(2026, 1, 6),
            date(2026, 1, 7),
        ]

    def test_values_are_float(self) -> None:
        payload = make_chart_payload([100, 101], volumes=[5, 6])
        series = parse_chart_payload("SPY", payload)
        candle = series[0]
        assert isinstance(candle.close, float)
        assert isinstance(candle.high, float)
        assert isinstance(candle.volume, float)
        assert isinstance(candle.timestamp, int)

    def test_empty_arrays_give_empty_series(self) -> None:
        series = parse_chart_payload("SPY", make_chart_payload([]))
        assert len(series) == 0


class TestCandleFiltering:
    """Incomplete and duplicate candles are dropped."""

    def test_drops_candle_missing_close(self) -> None:
        payload = make_chart_payload([100.0, None, 102.0])
        series = parse_chart_payload("SPY", payload)
        assert series.closes == [100.0, 102.0]

    def test_drops_candle_missing_high_or_low(self) -> None:
        payload = make_chart_payload(
            [100.0, 101.0, 102.0],
            highs=[101.0, None, 103.0],
            lows=[99.0, 100.0, None],
        )
        series = parse_chart_payload("SPY", payload)
        assert series.closes == [100.0]

    def test_keeps_candle_missing_open_and_volume(self) -> None:
        payload = make_chart_payload(
            [100.0, 101.0],
            opens=[None, 100.5],
            volumes=[None, 2000.0],
        )
        series = parse_chart_payload("SPY", payload)
        assert len(series) == 2
        assert series[0].open is None
        assert series[0].volume is None
        assert series[1].open == 100.5

    def test_missing_volume_array_is_allowed(self) -> None:
        payload = make_chart_payload([100.0, 101.0])
        del payload["chart"]["result"][0]["indicators"]["quote"][0]["volume"]
        series = parse_chart_payload("SPY", payload)
        assert [c.volume for c in series] == [None, None]

    def test_drops_duplicate_and_backwards_timestamps(self) -> None:
        t0 = session_timestamp(date(2026, 1, 5))
        t1 = session_timestamp(date(2026, 1, 6))
        payload = make_chart_payload(
            [100.0, 101.0, 102.0, 103.0],
            timestamps=[t0, t1, t1, t0],
        )
        series = parse_chart_payload("SPY", payload)
        assert series.closes == [100.0, 101.0]

    def test_short_quote_array_reads_as_null(self) -> None:
        payload = make_chart_payload([100.0, 101.0, 102.0])
        payload["chart"]["result"][0]["indicators"]["quote"][0]["close"] = [100.0]
        series = parse_chart_payload("SPY", payload)
        assert series.closes == [100.0]


class TestTimezone:
    """Candle dates follow the given timezone."""

    def test_utc_date_by_default(self) -> None:
        ts = int(datetime(2026, 1, 6, 3, 0, tzinfo=UTC).timestamp())
        payload = make_chart_payload([100.0], timestamps=[ts])
        assert parse_chart_payload("BTC-USD", payload)[0].date == date(2026, 1, 6)

    def test_new_york_date(self) -> None:
        ts = int(datetime(2026, 1, 6, 3, 0, tzinfo=UTC).timestamp())
        payload = make_chart_payload([100.0], timestamps=[ts])
        series = parse_chart_payload(
            "BTC-USD", payload, tz=ZoneInfo("America/New_York")
        )
        assert series[0].date == date(2026, 1, 5)


class TestMalformedPayload:
    """Structurally broken payloads are rejected whole."""

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            [],
            "not a payload",
            {},
            {"chart": {}},
            {"chart": {"result": []}},
            {"chart": {"result": None}},
            {"chart": {"result": [{"timestamp": [1]}]}},
            {"chart": {"result": [{"timestamp": [1], "indicators": {"quote": []}}]}},
        ],
    )
    def test_missing_structure(self, payload: object) -> None:
        with pytest.raises(MalformedPayloadError):
            parse_chart_payload("SPY", payload)

    def test_provider_error_shape(self) -> None:
        with pytest.raises(MalformedPayloadError, match="provider error"):
            parse_chart_payload("SPY", {"error": "Not Found"})

    def test_close_not_an_array(self) -> None:
        payload = make_chart_payload([100.0])
        payload["chart"]["result"][0]["indicators"]["quote"][0]["close"] = 100.0
        with pytest.raises(MalformedPayloadError, match="quote.close"):
            parse_chart_payload("SPY", payload)

    def test_timestamp_not_an_array(self) -> None:
        payload = make_chart_payload([100.0])
        payload["chart"]["result"][0]["timestamp"] = "1767623400"
        with pytest.raises(MalformedPayloadError, match="timestamp"):
            parse_chart_payload("SPY", payload)

    def test_non_numeric_price(self) -> None:
        payload = make_chart_payload([100.0])
        payload["chart"]["result"][0]["indicators"]["quote"][0]["close"] = ["abc"]
        with pytest.raises(MalformedPayloadError, match="not numeric"):
            parse_chart_payload("SPY", payload)

    @pytest.mark.parametrize("value", ["101.5", True, float("nan"), float("inf")])
    def test_rejects_non_number_price(self, value: object) -> None:
        payload = make_chart_payload([100.0, 101.0])
        payload["chart"]["result"][0]["indicators"]["quote"][0]["close"][1] = value
        with pytest.raises(MalformedPayloadError, match=r"quote\.close\[1\]"):
            parse_chart_payload("SPY", payload)

    def test_rejects_string_timestamp(self) -> None:
        payload = make_chart_payload([100.0])
        ts = payload["chart"]["result"][0]["timestamp"][0]
        payload["chart"]["result"][0]["timestamp"] = [str(ts)]
        with pytest.raises(MalformedPayloadError, match="not an integer"):
            parse_chart_payload("SPY", payload)

    @pytest.mark.parametrize("name", ["high", "low", "close"])
    def test_string_quote_array_rejected(self, name: str) -> None:
        payload = make_chart_payload([100.0])
        payload["chart"]["result"][0]["indicators"]["quote"][0][name] = "100.0"
        with pytest.raises(MalformedPayloadError, match=f"quote.{name} is not an array"):
            parse_chart_payload("SPY", payload)

    def test_string_volume_array_reads_as_missing(self) -> None:
        payload = make_chart_payload([100.0])
        payload["chart"]["result"][0]["indicators"]["quote"][0]["volume"] = "1000"
        assert parse_chart_payload("SPY", payload)[0].volume is None

    def test_error_carries_symbol_and_reason(self) -> None:
        with pytest.raises(MalformedPayloadError) as exc_info:
            parse_chart_payload("QQQ", {})
        assert exc_info.value.symbol == "QQQ"
        assert exc_info.value.reason
        assert isinstance(exc_info.value, MarketDataError)
        assert "QQQ" in str(exc_info.value)
