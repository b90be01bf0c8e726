"""Pytest configuration and fixtures."""

from __future__ import annotations

import pytest
import respx

from pager_duty.connection import AsyncConnection, Connection

BASE_URL = "https://api.pagerduty.com"
TOKEN = "test-token"


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at a temp dir and clear PagerDuty env vars."""
    config_dir = tmp_path / "config"
    monkeypatch.setattr("pager_duty.config.CONFIG_DIR", config_dir)
    monkeypatch.setattr("pager_duty.config.CONFIG_FILE", config_dir / "config.toml")
    monkeypatch.setattr("pager_duty.cli.CONFIG_FILE", config_dir / "config.toml")
    monkeypatch.delenv("PAGERDUTY_TOKEN", raising=False)
    monkeypatch.delenv("PAGERDUTY_TIMEZONE", raising=False)
    return config_dir


@pytest.fixture()
def mock_api():
    """Activate respx mock for the PagerDuty base URL."""
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as rsps:
        yield rsps


@pytest.fixture()
def client(mock_api: respx.MockRouter) -> Connection:  # noqa: ARG001
    """Connection wired to the mocked transport."""
    c = Connection(TOKEN)
    yield c  # type: ignore[misc]
    c.close()


@pytest.fixture()
async def async_client(mock_api: respx.MockRouter) -> AsyncConnection:  # noqa: ARG001
    c = AsyncConnection(TOKEN)
    yield c  # type: ignore[misc]
    await c.aclose()
