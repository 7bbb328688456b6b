"""Instrument universe: the sections of the monitoring table.

Sections and instruments are pydantic models so the universe can be
replaced through AppConfig (env var or .env) and is validated on load.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, field_validator

# Provider tickers: equities (SPY), futures (ZN=F), indices (DX-Y.NYB),
# crypto pairs (BTC-USD) and caret indices (^VIX).
SYMBOL_PATTERN = re.compile(r"^[A-Z0-9^][A-Z0-9.=\-]{0,14}$")


class Instrument(BaseModel):
    """One row of the table."""

    model_config = ConfigDict(frozen=True)

    name: str
    symbol: str

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        if not SYMBOL_PATTERN.match(v):
            raise ValueError(f"Invalid symbol: {v}")
        return v


class Section(BaseModel):
    """A titled group of instruments."""

    model_config = ConfigDict(frozen=True)

    key: str
    title: str
    items: tuple[Instrument, ...]

    @field_validator("items")
    @classmethod
    def validate_items(cls, v: tuple[Instrument, ...]) -> tuple[Instrument, ...]:
        if len(v) == 0:
            raise ValueError("Section must list at least one instrument")
        return v

    @property
    def symbols(self) -> list[str]:
        return [item.symbol for item in self.items]


def _section(key: str, title: str, *items: tuple[str, str]) -> Section:
    return Section(
        key=key,
        title=title,
        items=tuple(Instrument(name=name, symbol=symbol) for name, symbol in items),
    )


DEFAULT_SECTIONS: tuple[Section, ...] = (
    _section(
        "alternatives",
        "Equity Alternatives",
        ("10-Yr T-Note Futures", "ZN=F"),
        ("U.S. Dollar Index", "DX-Y.NYB"),
        ("T-Bond Futures", "ZB=F"),
        ("Light Crude Oil Futures", "CL=F"),
        ("Gold Futures", "GC=F"),
        ("Bitcoin", "BTC-USD"),
    ),
    _section(
        "global",
        "Global Equities",
        ("Europe Equity", "IEV"),
        ("Total Intl Stock", "VXUS"),
        ("Total US Stock", "VTI"),
        ("Emerging Markets", "EEM"),
    ),
    _section(
        "indices",
        "US Equity Indices",
        ("Innovation", "ARKK"),
        ("S&P 500 Equal Wt", "RSP"),
        ("Russell 2000", "IWM"),
        ("LT US Treasuries", "TLT"),
        ("Dow Jones", "DIA"),
        ("S&P 500", "SPY"),
        ("Nasdaq", "QQQ"),
    ),
    _section(
        "sectors",
        "Sectors",
        ("Gold Miners", "GDX"),
        ("Transportation", "IYT"),
        ("Software", "IGV"),
        ("Financials", "XLF"),
        ("Retail", "XRT"),
        ("Home Builders", "XHB"),
        ("Regional Banks", "KRE"),
        ("Real Estate", "IYR"),
        ("Aerospace + Defense", "ITA"),
        ("Industrials", "XLI"),
        ("Energy", "XLE"),
        ("Consumer Discr.", "XLY"),
        ("Materials", "XLB"),
        ("Consumer Staples", "XLP"),
        ("Health Care", "XLV"),
        ("Blockchain", "BLOK"),
        ("Utilities", "XLU"),
        ("Biotech", "XBI"),
        ("US Cannabis", "MSOS"),
        ("Technology", "XLK"),
        ("Chinese Tech", "KWEB"),
        ("Solar Energy", "TAN"),
        ("Semiconductors", "SOXX"),
    ),
)


def all_symbols(sections: Iterable[Section]) -> list[str]:
    """Symbols in section order, each listed once."""
    seen: set[str] = set()
    out: list[str] = []
    for section in sections:
        for symbol in section.symbols:
            if symbol not in seen:
                seen.add(symbol)
                out.append(symbol)
    return out


def find_section(sections: Iterable[Section], key: str) -> Section:
    """Section with the given key.

    Raises:
        KeyError: If no section has that key.
    """
    for section in sections:
        if section.key == key:
            return section
    raise KeyError(key)
