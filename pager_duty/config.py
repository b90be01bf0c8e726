"""Configuration and constants for the PagerDuty connection."""

from __future__ import annotations

import os
import tomllib
from datetime import UTC, tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# ============================================================================
# XDG Base Directory Configuration
# ============================================================================

# Config: ~/.config/pager_duty/config.toml
CONFIG_DIR = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "pager_duty"
CONFIG_FILE = CONFIG_DIR / "config.toml"

API_BASE = "https://api.pagerduty.com/"
DEFAULT_API_VERSION = 2
DEFAULT_TIMEOUT = 30.0

# Pagination defaults for GET requests
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 100


# ============================================================================
# Config Functions
# ============================================================================


def load_config() -> dict[str, Any]:
    """Load configuration from TOML config file."""
    if CONFIG_FILE.exists():
        with CONFIG_FILE.open("rb") as f:
            return tomllib.load(f)
    return {}


def _toml_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'
    return str(value)


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to TOML config file.

    Only flat tables of scalars are written (e.g. ``[api] token = "..."``).
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    top: list[str] = []
    tables: list[str] = []
    for key, value in config.items():
        if isinstance(value, dict):
            tables.append(f"[{key}]")
            tables.extend(f"{k} = {_toml_value(v)}" for k, v in value.items())
            tables.append("")
        else:
            top.append(f"{key} = {_toml_value(value)}")

    lines = [*top, "", *tables] if top else tables

    CONFIG_FILE.write_text("\n".join(lines) + "\n")


def _api_setting(name: str) -> str | None:
    api_section = load_config().get("api", {})
    if isinstance(api_section, dict):
        value = api_section.get(name)
        if value:
            return str(value)
    return None


def load_token() -> str | None:
    """Load API token from PAGERDUTY_TOKEN env var or config file."""
    env_token = os.environ.get("PAGERDUTY_TOKEN")
    if env_token:
        return env_token
    return _api_setting("token")


def load_timezone() -> tzinfo:
    """Load the timezone used for parsed timestamps, defaulting to UTC.

    Checks PAGERDUTY_TIMEZONE first, then ``[api] timezone`` in the config file.
    Unknown zone names raise ``ValueError``.
    """
    name = os.environ.get("PAGERDUTY_TIMEZONE") or _api_setting("timezone")
    if not name or name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as e:
        raise ValueError(f"unknown timezone: {name}") from e
