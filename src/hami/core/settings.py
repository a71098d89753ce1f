"""
Centralized settings for hami.

One validated, cached settings object read from ``HAMI_*`` environment
variables and an optional ``.env`` file. The CLI reads it once per
invocation; tests reset it with :func:`clear_settings_cache`.

Fields
──────
log_level       : Structlog log level (``--verbose`` forces DEBUG)
json_logs       : Render logs as JSON lines instead of console output
home_directory  : Override for the user home holding the global ``.hami``
directory_name  : Name of the hami state directory (``.hami``)
strategy        : Working directory resolution strategy for ``init``

Tags:
    configuration, settings, pydantic, caching, hami

Doc-Types:
    api-reference
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

HAMI_DIRECTORY_STRATEGIES = ("CWD",)


class HamiSettings(BaseSettings):
    """hami configuration, settable through ``HAMI_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HAMI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "WARNING"
    json_logs: bool = False

    # ── Storage ──────────────────────────────────────────────────
    home_directory: Path | None = Field(
        default=None,
        description="User home holding the global hami directory (defaults to ~)",
    )
    directory_name: str = ".hami"
    strategy: str = "CWD"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("strategy")
    @classmethod
    def _known_strategy(cls, value: str) -> str:
        if value not in HAMI_DIRECTORY_STRATEGIES:
            raise ValueError(
                f"strategy must be one of: {', '.join(HAMI_DIRECTORY_STRATEGIES)}"
            )
        return value

    def resolved_home(self) -> Path:
        return (self.home_directory or Path.home()).expanduser()


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, HamiSettings] = {}


def get_settings(*, _force_reload: bool = False) -> HamiSettings:
    """Load, validate, and cache a :class:`HamiSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = HamiSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "HAMI_DIRECTORY_STRATEGIES",
    "HamiSettings",
    "get_settings",
    "clear_settings_cache",
]
