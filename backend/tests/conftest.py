"""Shared test fixtures for market-monitor."""

from __future__ import annotations

import pytest

from market_monitor.market_data.types import CandleSeries
from tests.factories import make_series


@pytest.fixture
def rising_series() -> CandleSeries:
    """11 closes from 90 to 100, high = low = close."""
    closes = [float(c) for c in range(90, 101)]
    return make_series(closes, highs=closes, lows=closes)


@pytest.fixture
def flat_series() -> CandleSeries:
    """300 closes of 50 with highs 51 and lows 49."""
    return make_series([50.0] * 300, spread=1.0)
