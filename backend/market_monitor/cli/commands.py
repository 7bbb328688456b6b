"""Click CLI commands for market-monitor."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from market_monitor.config import AppConfig
from market_monitor.market.breadth import BreadthSummary, compute_breadth
from market_monitor.market.snapshot import MarketSnapshot, build_snapshot
from market_monitor.market.universe import Section, find_section
from market_monitor.market_data.types import FlowState, IndicatorRecord
from market_monitor.utils.logging import setup_logging
from market_monitor.utils.time import format_timestamp

NO_DATA = "--"


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Market monitor: daily indicator table for a fixed instrument universe."""
    config = AppConfig()
    setup_logging(level=config.log_level, log_format=config.log_format)
    ctx.obj = config


payload_argument = click.argument(
    "payload_file",
    required=False,
    type=click.Path(dir_okay=False, path_type=Path),
)
section_option = click.option(
    "--section",
    "section_key",
    default=None,
    help="Only this section (by key).",
)


@cli.command()
@payload_argument
@section_option
@click.option("--json", "as_json", is_flag=True, help="Print records as JSON.")
@click.pass_obj
def compute(
    config: AppConfig,
    payload_file: Path | None,
    section_key: str | None,
    as_json: bool,
) -> None:
    """Compute indicators from a JSON file of raw provider payloads."""
    sections = _select_sections(config, section_key)
    snapshot = _load_snapshot(config, payload_file)

    if as_json:
        out = {
            item.symbol: _record_json(snapshot.get(item.symbol))
            for section in sections
            for item in section.items
        }
        click.echo(json.dumps(out, indent=2))
        return

    for section in sections:
        _print_section(section, snapshot)
    as_of = format_timestamp(snapshot.as_of) if snapshot.as_of else NO_DATA
    click.echo(f"\n{snapshot.with_data}/{len(snapshot)} symbols with data")
    click.echo(f"As of {as_of} (refresh {snapshot.refresh_id})")


@cli.command()
@payload_argument
@section_option
@click.pass_obj
def breadth(
    config: AppConfig,
    payload_file: Path | None,
    section_key: str | None,
) -> None:
    """Show advance/decline breadth for one section."""
    key = section_key or config.breadth_section
    (section,) = _select_sections(config, key)
    snapshot = _load_snapshot(config, payload_file)

    summary = compute_breadth(snapshot.records_for(section.symbols))
    _print_breadth(section, summary)


@cli.command()
@click.pass_obj
def config(cfg: AppConfig) -> None:
    """Show current configuration."""
    click.echo("=== Market Monitor Configuration ===\n")

    click.echo(f"Log Level:    {cfg.log_level}")
    click.echo(f"Log Format:   {cfg.log_format}")
    click.echo(f"Timezone:     {cfg.timezone}")
    click.echo(f"Payload Path: {cfg.payload_path}")
    click.echo(f"Breadth:      {cfg.breadth_section}")
    click.echo("")

    click.echo("[Sections]")
    for section in cfg.sections:
        click.echo(f"  {section.key:<14}{section.title} ({len(section.items)} items)")
        click.echo(f"    {', '.join(section.symbols)}")


# --- helpers ---


def _select_sections(config: AppConfig, key: str | None) -> tuple[Section, ...]:
    if key is None:
        return config.sections
    try:
        return (find_section(config.sections, key),)
    except KeyError:
        valid = ", ".join(s.key for s in config.sections)
        raise click.ClickException(
            f"Unknown section: {key!r}. Available: {valid}"
        ) from None


def _load_snapshot(config: AppConfig, payload_file: Path | None) -> MarketSnapshot:
    """Read the payload map and build a snapshot from it."""
    path = payload_file or Path(config.payload_path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise click.ClickException(f"Cannot read {path}: {e.strerror or e}") from e
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path} is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise click.ClickException(f"{path} must hold a JSON object keyed by symbol")
    return build_snapshot(raw, tz=config.tz)


def _record_json(record: IndicatorRecord | None) -> dict[str, Any] | None:
    return record.as_dict() if record is not None else None


def _fmt(v: float | None, digits: int = 2) -> str:
    return NO_DATA if v is None else f"{v:.{digits}f}"


def _fmt_signed(v: float | None) -> str:
    return NO_DATA if v is None else f"{v:+.2f}"


def _fmt_pct(v: float | None) -> str:
    return NO_DATA if v is None else f"{v:+.2f}%"


def _fmt_price(v: float | None) -> str:
    if v is None:
        return NO_DATA
    return f"{v:,.0f}" if v >= 10000 else f"{v:.2f}"


def _fmt_flow(flow: FlowState) -> str:
    return flow.label if flow.is_defined else NO_DATA


_HEADER = (
    f"{'Market':<24}{'Symbol':<10}{'Price':>10}{'Chg':>9}{'ATRx':>7}"
    f"{'DCR':>6}{'52WR':>6}{'MAX':>8}{'ST':>4}{'LT':>4}"
    f"{'WTD':>9}{'MTD':>9}{'YTD':>9}"
)


def _print_section(section: Section, snapshot: MarketSnapshot) -> None:
    click.echo(f"\n{section.title} ({len(section.items)} items)")
    click.echo(_HEADER)
    for item in section.items:
        name = item.name[:23]
        r = snapshot.get(item.symbol)
        if r is None:
            click.echo(f"{name:<24}{item.symbol:<10}{NO_DATA:>10}")
            continue
        click.echo(
            f"{name:<24}{item.symbol:<10}{_fmt_price(r.price):>10}"
            f"{_fmt_pct(r.pct_change):>9}{_fmt_signed(r.atr_delta):>7}"
            f"{_fmt(r.dcr, 0):>6}{_fmt(r.wr52, 0):>6}{_fmt_signed(r.ma_x):>8}"
            f"{_fmt_flow(r.st_flow):>4}{_fmt_flow(r.lt_flow):>4}"
            f"{_fmt_pct(r.wtd):>9}{_fmt_pct(r.mtd):>9}{_fmt_pct(r.ytd):>9}"
        )


def _print_breadth(section: Section, summary: BreadthSummary | None) -> None:
    click.echo(f"\nBreadth: {section.title}")
    if summary is None:
        click.echo(f"  No data ({NO_DATA})")
        return
    click.echo(f"  Advancers:  {summary.adv_pct:.0f}%")
    click.echo(f"  Decliners:  {summary.decl_pct:.0f}%")
    click.echo(f"  STICK:      {_fmt_signed(summary.stick)}")
    click.echo(f"  STRIN:      {summary.strin:.2f}")
    click.echo(f"  {summary.label}")
