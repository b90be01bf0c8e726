"""Tests for the pd CLI."""

from __future__ import annotations

import json
import tomllib

import pytest
import respx
from typer.testing import CliRunner

from pager_duty.cli import app

runner = CliRunner()


@pytest.fixture()
def token_env(monkeypatch):
    monkeypatch.setenv("PAGERDUTY_TOKEN", "env-token-1234")


class TestUsers:
    def test_lists_users(self, mock_api: respx.MockRouter, token_env):  # noqa: ARG002
        route = mock_api.get("/users").respond(
            json={"users": [{"name": "Ann", "email": "ann@example.com"}], "more": True}
        )
        result = runner.invoke(app, ["users", "--page", "2", "--limit", "10", "--query", "ann"])
        assert result.exit_code == 0, result.output
        assert "Ann" in result.output
        assert "ann@example.com" in result.output
        assert "--page 3" in result.output
        params = route.calls.last.request.url.params
        assert params["offset"] == "10"
        assert params["query"] == "ann"
        assert route.calls.last.request.headers["Authorization"] == 'Token token="env-token-1234"'

    def test_missing_token(self):
        result = runner.invoke(app, ["users"])
        assert result.exit_code == 1
        assert "No API token" in result.output

    def test_api_error(self, mock_api: respx.MockRouter, token_env):  # noqa: ARG002
        mock_api.get("/users").respond(status_code=401, json={"error": {"message": "Unauthorized"}})
        result = runner.invoke(app, ["users"])
        assert result.exit_code == 1
        assert "401" in result.output


class TestGet:
    def test_prints_json(self, mock_api: respx.MockRouter, token_env):  # noqa: ARG002
        route = mock_api.get("/incidents").respond(
            json={"incidents": [{"id": "P1", "created_at": "2021-06-01T12:00:00Z"}]}
        )
        result = runner.invoke(
            app, ["get", "/incidents", "-P", "statuses=triggered", "-P", "statuses=acknowledged", "--limit", "5"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["incidents"][0]["id"] == "P1"
        assert data["incidents"][0]["created_at"].startswith("2021-06-01 12:00:00")
        params = route.calls.last.request.url.params
        assert params.get_list("statuses[]") == ["triggered", "acknowledged"]
        assert params["limit"] == "5"

    def test_bad_param(self, token_env):  # noqa: ARG002
        result = runner.invoke(app, ["get", "incidents", "-P", "statuses"])
        assert result.exit_code == 1
        assert "KEY=VALUE" in result.output

    def test_not_found(self, mock_api: respx.MockRouter, token_env):  # noqa: ARG002
        mock_api.get("/services/PNOPE").respond(status_code=404)
        result = runner.invoke(app, ["get", "services/PNOPE"])
        assert result.exit_code == 1
        assert "services/PNOPE" in result.output


class TestConfig:
    def test_set_token_and_timezone(self, isolated_config):
        result = runner.invoke(app, ["config", "--set-token", "abcdefgh12345678", "--set-timezone", "Etc/UTC"])
        assert result.exit_code == 0, result.output
        with (isolated_config / "config.toml").open("rb") as f:
            saved = tomllib.load(f)
        assert saved["api"] == {"token": "abcdefgh12345678", "timezone": "Etc/UTC"}

    def test_show_masks_token(self, monkeypatch):
        monkeypatch.setenv("PAGERDUTY_TOKEN", "abcdefgh12345678")
        result = runner.invoke(app, ["config", "--show"])
        assert result.exit_code == 0
        assert "abcd...5678" in result.output
        assert "abcdefgh12345678" not in result.output

    def test_show_without_token(self):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "Not set" in result.output
        assert "UTC" in result.output

    def test_token_with_quotes_round_trips(self, isolated_config):
        token = 'a"b\\c'
        result = runner.invoke(app, ["config", "--set-token", token])
        assert result.exit_code == 0, result.output
        with (isolated_config / "config.toml").open("rb") as f:
            saved = tomllib.load(f)
        assert saved["api"]["token"] == token
