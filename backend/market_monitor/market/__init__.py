"""Market layer: instrument universe, snapshots and breadth."""

from market_monitor.market.breadth import BreadthSummary, compute_breadth
from market_monitor.market.snapshot import MarketSnapshot, build_snapshot, compute_symbol
from market_monitor.market.universe import (
    DEFAULT_SECTIONS,
    Instrument,
    Section,
    all_symbols,
    find_section,
)

__all__ = [
    "DEFAULT_SECTIONS",
    "BreadthSummary",
    "Instrument",
    "MarketSnapshot",
    "Section",
    "all_symbols",
    "build_snapshot",
    "compute_breadth",
    "compute_symbol",
    "find_section",
]
