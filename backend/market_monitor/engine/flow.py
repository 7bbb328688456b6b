"""Short-term and long-term flow classifiers.

Each classifier is a static table of guarded rules evaluated in order;
the first rule whose guard holds decides the state. Both read the same
three numbers: the close, a fast average and a slow average.

    ST: close vs SMA20 / SMA50
    LT: close vs SMA50 / SMA200

Comparisons are strict: a close equal to the fast average counts as
below it, and equal averages are not a bullish stack.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from market_monitor.market_data.types import UNDEFINED_FLOW, ColorTier, FlowState

NEAR_RATIO = 0.01
ST_EXTENDED_BELOW_PCT = 10.0
ST_BELOW_PCT = 5.0
ST_WIDE_GAP_PCT = 3.0
LT_CROSS_PCT = 2.0
LT_EXTENDED_BELOW_PCT = 15.0


@dataclass(frozen=True)
class FlowInputs:
    """Close with a fast and a slow moving average, both positive."""

    close: float
    fast: float
    slow: float

    @property
    def above_fast(self) -> bool:
        return self.close > self.fast

    @property
    def bullish_stack(self) -> bool:
        """Fast average strictly above the slow one."""
        return self.fast > self.slow

    @property
    def near_both(self) -> bool:
        """Close within 1% of both averages."""
        return (
            abs(self.close / self.fast - 1) < NEAR_RATIO
            and abs(self.close / self.slow - 1) < NEAR_RATIO
        )

    @property
    def pct_below_fast(self) -> float:
        return (self.fast - self.close) / self.fast * 100

    @property
    def pct_below_slow(self) -> float:
        return (self.slow - self.close) / self.slow * 100

    @property
    def gap_pct(self) -> float:
        """How far the fast average sits below the slow one, in percent."""
        return (self.slow - self.fast) / self.slow * 100

    @property
    def cross_pct(self) -> float:
        """Distance between the averages, in percent of the slow one."""
        return abs(self.fast / self.slow - 1) * 100


@dataclass(frozen=True)
class FlowRule:
    """One row of a classifier table."""

    name: str
    when: Callable[[FlowInputs], bool]
    state: FlowState


def _always(_: FlowInputs) -> bool:
    return True


ST_RULES: tuple[FlowRule, ...] = (
    FlowRule(
        "hugging_averages",
        lambda m: m.near_both,
        FlowState("2C", ColorTier.NEUTRAL),
    ),
    FlowRule(
        "uptrend",
        lambda m: m.above_fast and m.bullish_stack,
        FlowState("2B", ColorTier.STRONG_POSITIVE),
    ),
    FlowRule(
        "reclaiming",
        lambda m: m.above_fast and not m.bullish_stack,
        FlowState("1B", ColorTier.MILD_POSITIVE),
    ),
    FlowRule(
        "pullback",
        lambda m: not m.above_fast and m.bullish_stack,
        FlowState("1R", ColorTier.CAUTION),
    ),
    # Below both averages with a bearish stack from here on.
    FlowRule(
        "extended_below",
        lambda m: m.pct_below_fast > ST_EXTENDED_BELOW_PCT,
        FlowState("4A", ColorTier.SEVERE_NEGATIVE),
    ),
    FlowRule(
        "below",
        lambda m: m.pct_below_fast > ST_BELOW_PCT,
        FlowState("3A", ColorTier.NEGATIVE),
    ),
    FlowRule(
        "wide_gap",
        lambda m: m.gap_pct > ST_WIDE_GAP_PCT,
        FlowState("2A", ColorTier.CAUTION_NEGATIVE),
    ),
    FlowRule(
        "early_downtrend",
        _always,
        FlowState("1A", ColorTier.CAUTION_NEGATIVE),
    ),
)

LT_RULES: tuple[FlowRule, ...] = (
    FlowRule(
        "fresh_golden_cross",
        lambda m: m.bullish_stack and m.above_fast and m.cross_pct < LT_CROSS_PCT,
        FlowState("3B", ColorTier.STRONGEST_POSITIVE),
    ),
    FlowRule(
        "uptrend",
        lambda m: m.bullish_stack and m.above_fast,
        FlowState("2C", ColorTier.POSITIVE),
    ),
    FlowRule(
        "bullish_stack_price_below",
        lambda m: m.bullish_stack,
        FlowState("2C", ColorTier.CAUTION),
    ),
    # Bearish stack from here on.
    FlowRule(
        "reclaim_near_cross",
        lambda m: m.above_fast and m.cross_pct < LT_CROSS_PCT,
        FlowState("3A", ColorTier.CAUTION, badge="orange"),
    ),
    FlowRule(
        "reclaim",
        lambda m: m.above_fast,
        FlowState("1R", ColorTier.CAUTION, badge="orange"),
    ),
    FlowRule(
        "extended_below",
        lambda m: m.pct_below_slow > LT_EXTENDED_BELOW_PCT,
        FlowState("4A", ColorTier.SEVERE_NEGATIVE),
    ),
    FlowRule(
        "death_cross",
        lambda m: m.cross_pct < LT_CROSS_PCT,
        FlowState("3A", ColorTier.NEGATIVE),
    ),
    FlowRule(
        "downtrend",
        _always,
        FlowState("2A", ColorTier.NEGATIVE),
    ),
)


def match_rule(rules: tuple[FlowRule, ...], inputs: FlowInputs) -> FlowRule:
    """First rule whose guard holds. Tables end in a catch-all rule."""
    for rule in rules:
        if rule.when(inputs):
            return rule
    raise LookupError("flow rule table has no catch-all rule")


def _classify(
    rules: tuple[FlowRule, ...],
    close: float,
    fast: float | None,
    slow: float | None,
) -> FlowState:
    # Non-positive averages only come from corrupt prices; ratios against
    # them are meaningless.
    if fast is None or slow is None or fast <= 0 or slow <= 0:
        return UNDEFINED_FLOW
    return match_rule(rules, FlowInputs(close=close, fast=fast, slow=slow)).state


def classify_st_flow(
    close: float, sma20: float | None, sma50: float | None
) -> FlowState:
    """Short-term flow from close, SMA20 and SMA50."""
    return _classify(ST_RULES, close, sma20, sma50)


def classify_lt_flow(
    close: float, sma50: float | None, sma200: float | None
) -> FlowState:
    """Long-term flow from close, SMA50 and SMA200."""
    return _classify(LT_RULES, close, sma50, sma200)
