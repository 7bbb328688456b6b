"""Snapshot building: raw provider payloads -> per-symbol indicator records.

A MarketSnapshot is an immutable symbol -> IndicatorRecord | None map.
Each refresh builds a new snapshot from the previous one; an instrument
whose new payload is malformed or too short keeps its previous record,
so one bad fetch never blanks a row that had data.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from types import MappingProxyType
from typing import Any

import structlog

from market_monitor.engine.indicators import compute_indicators
from market_monitor.market_data.errors import MarketDataError
from market_monitor.market_data.parser import parse_chart_payload
from market_monitor.market_data.types import IndicatorRecord
from market_monitor.utils.logging import refresh_scope
from market_monitor.utils.time import utc_now

log = structlog.get_logger()


@dataclass(frozen=True)
class MarketSnapshot:
    """Indicator records for every known symbol as of one refresh.

    ``records`` is read-only. A None value means the symbol is known but
    has never produced a record.
    """

    records: Mapping[str, IndicatorRecord | None] = field(
        default_factory=lambda: MappingProxyType({})
    )
    as_of: datetime | None = None
    refresh_id: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.records, MappingProxyType):
            object.__setattr__(self, "records", MappingProxyType(dict(self.records)))

    def get(self, symbol: str) -> IndicatorRecord | None:
        return self.records.get(symbol)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self.records

    def __iter__(self) -> Iterator[str]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def records_for(self, symbols: Iterable[str]) -> list[IndicatorRecord | None]:
        """Records in the given symbol order; None for unknown symbols."""
        return [self.records.get(s) for s in symbols]

    @property
    def with_data(self) -> int:
        """Number of symbols that have a record."""
        return sum(1 for r in self.records.values() if r is not None)


def compute_symbol(
    symbol: str,
    payload: Any,
    tz: tzinfo = UTC,
) -> IndicatorRecord | None:
    """Parse one payload and compute its record.

    Returns None when the payload is malformed or the series is too
    short; the reason is logged, never raised.
    """
    try:
        series = parse_chart_payload(symbol, payload, tz)
    except MarketDataError as e:
        log.warning("payload_rejected", symbol=symbol, reason=str(e))
        return None

    record = compute_indicators(series)
    if record is None:
        log.info("insufficient_history", symbol=symbol, candles=len(series))
    return record


def build_snapshot(
    raw: Mapping[str, Any],
    previous: MarketSnapshot | None = None,
    tz: tzinfo = UTC,
    refresh_id: str | None = None,
) -> MarketSnapshot:
    """Compute a new snapshot from raw payloads keyed by symbol.

    Symbols absent from ``raw`` are carried over from ``previous``
    unchanged. Neither ``raw`` nor ``previous`` is modified.
    Each call logs under its own refresh ID: ``refresh_id`` when given,
    otherwise a new one. The caller's refresh ID is restored afterwards.
    """
    with refresh_scope(refresh_id) as rid:
        records, counts = _merge_records(raw, previous, tz)
        log.info("snapshot_built", symbols=len(raw), **counts)
    return MarketSnapshot(
        records=MappingProxyType(records),
        as_of=utc_now(),
        refresh_id=rid,
    )


def _merge_records(
    raw: Mapping[str, Any],
    previous: MarketSnapshot | None,
    tz: tzinfo,
) -> tuple[dict[str, IndicatorRecord | None], dict[str, int]]:
    records: dict[str, IndicatorRecord | None] = (
        dict(previous.records) if previous is not None else {}
    )
    computed = retained = missing = 0
    for symbol, payload in raw.items():
        record = compute_symbol(symbol, payload, tz)
        if record is not None:
            records[symbol] = record
            computed += 1
        elif records.get(symbol) is not None:
            retained += 1
        else:
            records[symbol] = None
            missing += 1

    return records, {"computed": computed, "retained": retained, "missing": missing}
