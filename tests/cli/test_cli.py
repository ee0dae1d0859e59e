"""Tests for commerce_spine.cli via CliRunner.

The facade factory is patched to hand back the in-memory test facade so
no real database or MongoDB server is needed.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from commerce_spine import __version__
from commerce_spine.cli.app import app
from commerce_spine.core.facade import DataAccessFacade
from commerce_spine.core.lifecycle import LifecycleResult

runner = CliRunner()


@pytest.fixture
def cli_facade(facade: DataAccessFacade, monkeypatch: pytest.MonkeyPatch) -> Iterator[DataAccessFacade]:
    # Keep the injected mongomock client alive across commands.
    monkeypatch.setattr(facade, "close", lambda: None)
    with patch("commerce_spine.cli.db.make_facade", return_value=facade):
        yield facade


class TestRootCLI:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "db" in result.output


class TestHealthCommand:
    def test_health_json(self, cli_facade, user):
        result = runner.invoke(app, ["db", "health", "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["relational"] is True
        assert payload["document"] is True
        assert payload["counts"]["user"] == 1

    def test_health_table(self, cli_facade):
        result = runner.invoke(app, ["db", "health"])
        assert result.exit_code == 0
        assert "Entity counts" in result.output

    def test_health_store_down_exits_nonzero(self):
        down = MagicMock()
        down.check_connections.return_value = {
            "relational": False,
            "document": True,
            "counts": {},
            "errors": {"relational": "connection refused"},
        }
        with patch("commerce_spine.cli.db.make_facade", return_value=down):
            result = runner.invoke(app, ["db", "health", "--json"])
        assert result.exit_code == 1
        down.close.assert_called_once()


class TestLifecycleCommands:
    def test_soft_reset_with_yes(self, cli_facade, user, product):
        result = runner.invoke(app, ["db", "soft-reset", "--yes"])
        assert result.exit_code == 0
        assert "Soft reset" in result.output
        assert cli_facade.users.count() == 0
        assert cli_facade.products.count() == 0

    def test_soft_reset_prompt_declined(self, cli_facade, user):
        result = runner.invoke(app, ["db", "soft-reset"], input="n\n")
        assert result.exit_code != 0
        assert cli_facade.users.count() == 1

    def test_soft_reset_prompt_accepted(self, cli_facade, user):
        result = runner.invoke(app, ["db", "soft-reset"], input="y\n")
        assert result.exit_code == 0
        assert cli_facade.users.count() == 0

    def test_hard_reset_then_recreate(self, cli_facade, user):
        result = runner.invoke(app, ["db", "hard-reset", "--yes", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["success"] is True

        result = runner.invoke(app, ["db", "recreate"])
        assert result.exit_code == 0
        assert cli_facade.users.count() == 0

    def test_seed_json(self, cli_facade):
        result = runner.invoke(app, ["db", "seed", "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["success"] is True
        assert payload["counts"]["order_item"] == 5
        assert payload["skipped"] == []

        result = runner.invoke(app, ["db", "seed"])
        assert result.exit_code == 0
        assert "created nothing" in result.output
        assert cli_facade.users.count() == 3

    def test_failed_result_exits_nonzero(self):
        broken = MagicMock()
        broken.soft_reset.return_value = LifecycleResult(
            "soft_reset", success=False, message="Soft reset failed: disk I/O error"
        )
        with patch("commerce_spine.cli.db.make_facade", return_value=broken):
            result = runner.invoke(app, ["db", "soft-reset", "--yes"])
        assert result.exit_code == 1
        broken.close.assert_called_once()

    @pytest.mark.parametrize(
        "args",
        [
            ["db", "soft-reset", "--yes"],
            ["db", "hard-reset", "--yes"],
            ["db", "recreate"],
            ["db", "seed"],
        ],
    )
    def test_refused_in_production(self, monkeypatch, args: list[str]):
        monkeypatch.setenv("COMMERCE_ENVIRONMENT", "production")
        factory = MagicMock()
        with patch("commerce_spine.cli.db.make_facade", factory):
            result = runner.invoke(app, args)
        assert result.exit_code == 1
        factory.assert_not_called()


class TestServeCommand:
    @patch("commerce_spine.cli.serve.uvicorn.run")
    def test_start_uses_app_factory(self, mock_run: Any):
        result = runner.invoke(app, ["serve", "start", "--port", "9001"])
        assert result.exit_code == 0
        args, kwargs = mock_run.call_args
        assert args == ("commerce_spine.api:create_app",)
        assert kwargs["factory"] is True
        assert kwargs["port"] == 9001
