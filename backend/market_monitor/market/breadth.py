"""Market breadth over one section of the table.

Consumes finished IndicatorRecords as-is; nothing here feeds back into
the engine.

STICK is the sum of the section's daily percent changes. STRIN is the
average gain of the advancers divided by the average loss of the
decliners.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from market_monitor.market_data.types import IndicatorRecord

STRONG_ADV_PCT = 60.0
WEAK_ADV_PCT = 40.0
# Stands in for the average loss when nothing declined.
NO_DECLINE_FLOOR = 0.001


@dataclass(frozen=True)
class BreadthSummary:
    adv_pct: float
    decl_pct: float
    stick: float
    strin: float
    label: str
    label_class: str


def compute_breadth(
    records: Iterable[IndicatorRecord | None],
) -> BreadthSummary | None:
    """Breadth of the given records, or None when none has a daily change.

    Unchanged instruments count toward the total but are neither
    advancers nor decliners.
    """
    gains: list[float] = []
    losses: list[float] = []
    total = 0.0
    count = 0
    for record in records:
        if record is None or record.pct_change is None:
            continue
        change = record.pct_change
        count += 1
        total += change
        if change > 0:
            gains.append(change)
        elif change < 0:
            losses.append(abs(change))

    if count == 0:
        return None

    adv_pct = len(gains) / count * 100
    decl_pct = len(losses) / count * 100
    avg_gain = sum(gains) / len(gains) if gains else 0.0
    avg_loss = sum(losses) / len(losses) if losses else NO_DECLINE_FLOOR

    if adv_pct > STRONG_ADV_PCT:
        label, label_class = "STRONG BREADTH", "strong"
    elif adv_pct < WEAK_ADV_PCT:
        label, label_class = "WEAK BREADTH", "weak"
    else:
        label, label_class = "NEUTRAL", "neutral"

    return BreadthSummary(
        adv_pct=adv_pct,
        decl_pct=decl_pct,
        stick=total,
        strin=avg_gain / avg_loss,
        label=label,
        label_class=label_class,
    )
