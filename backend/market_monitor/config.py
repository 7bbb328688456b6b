"""Pydantic Settings configuration models.

3-tier config hierarchy (lowest to highest priority):
1. Pydantic defaults (in code below)
2. .env file (loaded by Pydantic Settings)
3. Environment variables (e.g., MONITOR_TIMEZONE=America/New_York)

Indicator windows and classifier thresholds are not configurable: they
define what the indicators mean.
"""

from __future__ import annotations

from datetime import tzinfo

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from market_monitor.market.universe import DEFAULT_SECTIONS, Section, find_section
from market_monitor.utils.time import resolve_timezone

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
VALID_LOG_FORMATS = frozenset({"console", "json"})


class AppConfig(BaseSettings):
    """Top-level monitor configuration.

    Env var examples:
        MONITOR_LOG_LEVEL=DEBUG
        MONITOR_TIMEZONE=America/New_York
        MONITOR_PAYLOAD_PATH=/srv/monitor/data.json
        MONITOR_SECTIONS='[{"key":"core","title":"Core","items":[{"name":"S&P 500","symbol":"SPY"}]}]'
    """

    model_config = SettingsConfigDict(
        env_prefix="MONITOR_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"
    timezone: str = "UTC"
    payload_path: str = "data/data.json"
    sections: tuple[Section, ...] = Field(default=DEFAULT_SECTIONS)
    breadth_section: str = "sectors"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(VALID_LOG_LEVELS)}, got {v}"
            )
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {sorted(VALID_LOG_FORMATS)}, got {v}"
            )
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        resolve_timezone(v)
        return v

    @field_validator("sections")
    @classmethod
    def validate_sections(cls, v: tuple[Section, ...]) -> tuple[Section, ...]:
        if len(v) == 0:
            raise ValueError("At least one section required")
        keys = [s.key for s in v]
        duplicates = sorted({k for k in keys if keys.count(k) > 1})
        if duplicates:
            raise ValueError(f"Duplicate section keys: {', '.join(duplicates)}")
        return v

    @model_validator(mode="after")
    def validate_breadth_section(self) -> AppConfig:
        try:
            find_section(self.sections, self.breadth_section)
        except KeyError:
            raise ValueError(
                f"breadth_section {self.breadth_section!r} is not a configured section"
            ) from None
        return self

    @property
    def tz(self) -> tzinfo:
        """The configured timezone as a tzinfo."""
        return resolve_timezone(self.timezone)
