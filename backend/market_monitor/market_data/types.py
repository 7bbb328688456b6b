"""Market data domain types shared across the monitor.

Frozen dataclasses for value objects. Prices are float: the provider
delivers floats and every indicator is a float ratio, so there is no
Decimal boundary to cross here.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, overload


class ColorTier(str, Enum):
    """Severity tier of a flow state.

    The value is the tier name; ``color`` is the badge color the
    monitoring table paints for it.
    """

    NEUTRAL = "neutral"
    STRONGEST_POSITIVE = "strongest_positive"
    STRONG_POSITIVE = "strong_positive"
    POSITIVE = "positive"
    MILD_POSITIVE = "mild_positive"
    CAUTION = "caution"
    CAUTION_NEGATIVE = "caution_negative"
    NEGATIVE = "negative"
    SEVERE_NEGATIVE = "severe_negative"

    @property
    def color(self) -> str:
        return _TIER_COLORS[self]


_TIER_COLORS: dict[ColorTier, str] = {
    ColorTier.NEUTRAL: "gray",
    ColorTier.STRONGEST_POSITIVE: "bright-green",
    ColorTier.STRONG_POSITIVE: "green",
    ColorTier.POSITIVE: "green",
    ColorTier.MILD_POSITIVE: "light-green",
    ColorTier.CAUTION: "yellow",
    ColorTier.CAUTION_NEGATIVE: "orange",
    ColorTier.NEGATIVE: "red",
    ColorTier.SEVERE_NEGATIVE: "deep-red",
}


# --- Value Objects (frozen) ---


@dataclass(frozen=True)
class Candle:
    """One daily OHLCV observation.

    ``date`` is the calendar date of ``timestamp`` in the timezone the
    parser was given. open and volume may be missing from the provider.
    """

    timestamp: int
    date: date
    high: float
    low: float
    close: float
    open: float | None = None
    volume: float | None = None


@dataclass(frozen=True)
class CandleSeries(Sequence[Candle]):
    """Time-ordered candles for one instrument.

    Timestamps are strictly increasing; construction raises ValueError
    otherwise. The series never changes after construction.
    """

    symbol: str
    candles: tuple[Candle, ...] = ()

    def __post_init__(self) -> None:
        # Accept any sequence but always store a tuple.
        if not isinstance(self.candles, tuple):
            object.__setattr__(self, "candles", tuple(self.candles))
        for prev, cur in zip(self.candles, self.candles[1:]):
            if cur.timestamp <= prev.timestamp:
                raise ValueError(
                    f"{self.symbol}: candle timestamps must be strictly "
                    f"increasing, got {prev.timestamp} then {cur.timestamp}"
                )

    @overload
    def __getitem__(self, index: int) -> Candle: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Candle, ...]: ...

    def __getitem__(self, index: int | slice) -> Candle | tuple[Candle, ...]:
        return self.candles[index]

    def __len__(self) -> int:
        return len(self.candles)

    def __iter__(self) -> Iterator[Candle]:
        return iter(self.candles)

    @property
    def closes(self) -> list[float]:
        return [c.close for c in self.candles]

    @property
    def last(self) -> Candle | None:
        """Most recent candle, or None for an empty series."""
        return self.candles[-1] if self.candles else None

    @property
    def previous(self) -> Candle | None:
        """Candle before the most recent one, or None if there is none."""
        return self.candles[-2] if len(self.candles) >= 2 else None


@dataclass(frozen=True)
class FlowState:
    """Discrete trend-stage label with its color tier.

    Labels are two characters: a stage digit (1 early, 2 established,
    3 crossing, 4 extended) and a side letter (A bearish, B/C bullish or
    neutral, R reversal). "--" means the required averages are missing.

    ``badge`` overrides the tier's color for states painted differently
    from the rest of their tier.
    """

    label: str
    tier: ColorTier
    badge: str | None = None

    @property
    def color(self) -> str:
        return self.badge or self.tier.color

    @property
    def is_defined(self) -> bool:
        return self.label != UNDEFINED_FLOW.label


UNDEFINED_FLOW = FlowState(label="--", tier=ColorTier.NEUTRAL)


@dataclass(frozen=True)
class PeriodReturns:
    """Week/month/year-to-date percent returns. None when no baseline."""

    wtd: float | None = None
    mtd: float | None = None
    ytd: float | None = None


# Column order of IndicatorRecord.as_row().
INDICATOR_COLUMNS: tuple[str, ...] = (
    "price",
    "pct_change",
    "atr_delta",
    "dcr",
    "wr52",
    "ma_x",
    "st_flow",
    "lt_flow",
    "wtd",
    "mtd",
    "ytd",
)


@dataclass(frozen=True)
class IndicatorRecord:
    """All indicators for one instrument as of its latest candle.

    Replaced wholesale on every recompute. Nullable fields are None
    when the series is too short for the statistic behind them.
    """

    price: float
    pct_change: float | None
    atr_delta: float | None
    dcr: float
    wr52: float
    ma_x: float | None
    st_flow: FlowState = UNDEFINED_FLOW
    lt_flow: FlowState = UNDEFINED_FLOW
    wtd: float | None = None
    mtd: float | None = None
    ytd: float | None = None

    def as_row(self) -> list[Any]:
        """Values in INDICATOR_COLUMNS order."""
        return [getattr(self, name) for name in INDICATOR_COLUMNS]

    def as_dict(self) -> dict[str, Any]:
        """JSON-friendly mapping; flows become {label, tier, color}."""
        out: dict[str, Any] = {}
        for name in INDICATOR_COLUMNS:
            value = getattr(self, name)
            if isinstance(value, FlowState):
                value = {
                    "label": value.label,
                    "tier": value.tier.value,
                    "color": value.color,
                }
            out[name] = value
        return out

