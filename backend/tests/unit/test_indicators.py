"""Tests for IndicatorRecord assembly."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import date

import pytest

from market_monitor.engine.indicators import (
    MIN_CANDLES,
    compute_indicators,
    ma_extension,
    range_position,
)
from market_monitor.market_data.types import (
    INDICATOR_COLUMNS,
    UNDEFINED_FLOW,
    CandleSeries,
    ColorTier,
    FlowState,
    IndicatorRecord,
)
from tests.factories import make_series


class TestMinimumHistory:
    """The record is withheld below MIN_CANDLES."""

    def test_min_candles_is_ten(self) -> None:
        assert MIN_CANDLES == 10

    def test_short_series_yield_no_record(self) -> None:
        for n in range(MIN_CANDLES):
            series = make_series([100.0 + i for i in range(n)])
            assert compute_indicators(series) is None

    def test_ten_candles_yield_a_record(self) -> None:
        series = make_series([100.0 + i for i in range(10)])
        assert isinstance(compute_indicators(series), IndicatorRecord)


class TestRisingScenario:
    """Closes 90..100 with high = low = close."""

    def test_pct_change(self, rising_series: CandleSeries) -> None:
        record = compute_indicators(rising_series)
        assert record is not None
        assert record.price == 100.0
        assert record.pct_change == pytest.approx((100 - 99) / 99 * 100)
        assert record.pct_change == pytest.approx(1.0101, abs=1e-4)

    def test_moving_averages_undefined(self, rising_series: CandleSeries) -> None:
        record = compute_indicators(rising_series)
        assert record is not None
        assert record.ma_x is None
        assert record.st_flow == UNDEFINED_FLOW
        assert record.lt_flow == UNDEFINED_FLOW

    def test_atr_delta_undefined(self, rising_series: CandleSeries) -> None:
        record = compute_indicators(rising_series)
        assert record is not None
        assert record.atr_delta is None

    def test_range_positions(self, rising_series: CandleSeries) -> None:
        record = compute_indicators(rising_series)
        assert record is not None
        # Zero-width day range -> midpoint; close at the series high -> 100.
        assert record.dcr == 50.0
        assert record.wr52 == pytest.approx(100.0)


class TestFlatScenario:
    """300 closes of 50 with highs 51 and lows 49."""

    def test_range_positions_at_midpoint(self, flat_series: CandleSeries) -> None:
        record = compute_indicators(flat_series)
        assert record is not None
        assert record.dcr == pytest.approx(50.0)
        assert record.wr52 == pytest.approx(50.0)

    def test_st_flow_hugs_averages(self, flat_series: CandleSeries) -> None:
        record = compute_indicators(flat_series)
        assert record is not None
        assert record.st_flow == FlowState("2C", ColorTier.NEUTRAL)

    def test_lt_flow_takes_bearish_branch(self, flat_series: CandleSeries) -> None:
        """Equal SMA50/SMA200 and close == SMA50 fail both strict comparisons."""
        record = compute_indicators(flat_series)
        assert record is not None
        assert record.lt_flow == FlowState("3A", ColorTier.NEGATIVE)

    def test_zero_change_fields(self, flat_series: CandleSeries) -> None:
        record = compute_indicators(flat_series)
        assert record is not None
        assert record.pct_change == 0.0
        assert record.atr_delta == 0.0
        assert record.ma_x == 0.0
        assert record.ytd == 0.0
        assert record.mtd == 0.0
        assert record.wtd == 0.0


class TestFieldComputation:
    """Individual fields against hand-computed values."""

    def test_atr_delta(self) -> None:
        # 15 candles of range 2 at 100, then a final close of 103 (range 2).
        closes = [100.0] * 15 + [103.0]
        record = compute_indicators(make_series(closes, spread=1.0))
        assert record is not None
        # Last 14 TRs: 13 x 2 and max(2, |104-100|, |102-100|) = 4
        atr14 = (13 * 2.0 + 4.0) / 14
        assert record.atr_delta == pytest.approx(3.0 / atr14)

    def test_dcr_uses_last_candle(self) -> None:
        closes = [100.0] * 12
        highs = [101.0] * 11 + [110.0]
        lows = [99.0] * 11 + [90.0]
        record = compute_indicators(make_series(closes, highs=highs, lows=lows))
        assert record is not None
        # (100 - 90) / (110 - 90) = 50%
        assert record.dcr == pytest.approx(50.0)

    def test_wr52_spans_whole_series(self) -> None:
        closes = [100.0] * 5 + [150.0] + [100.0] * 5 + [125.0]
        record = compute_indicators(make_series(closes, spread=0.0))
        assert record is not None
        # low 100, high 150 -> (125 - 100) / 50 = 50%
        assert record.wr52 == pytest.approx(50.0)

    def test_ma_x_with_only_sma20_defined(self) -> None:
        closes = [100.0] * 24 + [110.0]
        record = compute_indicators(make_series(closes))
        assert record is not None
        sma20 = (19 * 100.0 + 110.0) / 20
        assert record.ma_x == pytest.approx((110.0 / sma20 - 1) * 100)
        # SMA50 is still undefined
        assert record.st_flow == UNDEFINED_FLOW

    def test_ma_x_averages_defined_smas(self) -> None:
        closes = [100.0] * 199 + [120.0]
        record = compute_indicators(make_series(closes))
        assert record is not None
        smas = [(100.0 * (p - 1) + 120.0) / p for p in (20, 50, 100, 200)]
        expected = sum((120.0 / s - 1) * 100 for s in smas) / 4
        assert record.ma_x == pytest.approx(expected)

    def test_zero_previous_close_gives_no_pct_change(self) -> None:
        closes = [1.0] * 9 + [0.0, 2.0]
        record = compute_indicators(make_series(closes, spread=0.5))
        assert record is not None
        assert record.pct_change is None

    def test_uptrend_flows(self) -> None:
        closes = [100.0 + i * 0.5 for i in range(260)]
        record = compute_indicators(make_series(closes))
        assert record is not None
        assert record.st_flow.label == "2B"
        assert record.lt_flow.label in {"3B", "2C"}
        assert record.lt_flow.tier in {ColorTier.STRONGEST_POSITIVE, ColorTier.POSITIVE}


class TestDeterminism:
    """Same series in, equal record out."""

    def test_idempotent(self) -> None:
        closes = [100.0 + ((i * 13) % 17) - 8 for i in range(220)]
        series = make_series(closes, start=date(2025, 6, 2))
        first = compute_indicators(series)
        second = compute_indicators(series)
        assert first is not None
        assert first == second
        assert first.as_row() == second.as_row()

    def test_record_is_frozen(self, rising_series: CandleSeries) -> None:
        record = compute_indicators(rising_series)
        assert record is not None
        with pytest.raises(FrozenInstanceError):
            record.price = 1.0  # type: ignore[misc]


class TestRecordViews:
    """Ordered row and dict views of a record."""

    def test_as_row_follows_column_order(self, rising_series: CandleSeries) -> None:
        record = compute_indicators(rising_series)
        assert record is not None
        row = record.as_row()
        assert len(row) == len(INDICATOR_COLUMNS)
        assert row[0] == record.price
        assert row[INDICATOR_COLUMNS.index("ma_x")] is None
        assert row[INDICATOR_COLUMNS.index("st_flow")] == UNDEFINED_FLOW

    def test_as_dict_expands_flows(self, flat_series: CandleSeries) -> None:
        record = compute_indicators(flat_series)
        assert record is not None
        data = record.as_dict()
        assert list(data) == list(INDICATOR_COLUMNS)
        assert data["st_flow"] == {"label": "2C", "tier": "neutral", "color": "gray"}
        assert data["lt_flow"]["color"] == "red"


class TestHelpers:
    """Range position and MA extension helpers."""

    def test_range_position_bounds(self) -> None:
        assert range_position(10.0, 10.0, 20.0) == 0.0
        assert range_position(20.0, 10.0, 20.0) == 100.0
        assert range_position(15.0, 10.0, 20.0) == pytest.approx(50.0)

    def test_range_position_flat(self) -> None:
        assert range_position(5.0, 5.0, 5.0) == 50.0

    def test_range_position_clamped(self) -> None:
        assert range_position(25.0, 10.0, 20.0) == 100.0
        assert range_position(5.0, 10.0, 20.0) == 0.0

    def test_ma_extension_skips_missing(self) -> None:
        assert ma_extension(110.0, [100.0, None, None, None]) == pytest.approx(10.0)
        assert ma_extension(110.0, [None, None]) is None
