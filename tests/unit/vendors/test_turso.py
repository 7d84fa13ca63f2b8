"""Tests for the Turso CLI wrapper."""

from __future__ import annotations

from typing import List
from unittest.mock import patch

import pytest

from provisionkit.errors import VendorCommandError
from provisionkit.vendors.runner import CommandResult
from provisionkit.vendors.turso import TursoCLI


def result(stdout: str = "", stderr: str = "", exit_code: int = 0) -> CommandResult:
    return CommandResult(command="turso", args=(), exit_code=exit_code, stdout=stdout, stderr=stderr)


class TestTursoCLI:
    """Test suite for TursoCLI."""

    @patch("provisionkit.vendors.turso.run_command")
    def test_create_database(self, mock_run) -> None:
        mock_run.side_effect = [
            result(stdout="Created database my-app-dev"),
            result(stdout="libsql://my-app-dev-acme.turso.io\n"),
            result(stdout="eyJtoken\n"),
        ]

        db = TursoCLI(token="t", group="apps").create_database("my-app-dev")

        assert db.url == "libsql://my-app-dev-acme.turso.io"
        assert db.auth_token == "eyJtoken"
        calls: List[list] = [call[0][1] for call in mock_run.call_args_list]
        assert calls[0] == ["db", "create", "my-app-dev", "--group", "apps"]
        assert calls[1] == ["db", "show", "my-app-dev", "--url"]
        assert calls[2] == ["db", "tokens", "create", "my-app-dev"]
        assert mock_run.call_args_list[0][1]["token_env"] == "TURSO_API_TOKEN"

    @patch("provisionkit.vendors.turso.run_command")
    def test_create_reuses_existing_database(self, mock_run) -> None:
        mock_run.side_effect = [
            result(stderr="Error: database my-app-dev already exists", exit_code=1),
            result(stdout="libsql://my-app-dev-acme.turso.io"),
            result(stdout="tok"),
        ]

        db = TursoCLI().create_database("my-app-dev")

        assert db.name == "my-app-dev"
        assert mock_run.call_count == 3

    @patch("provisionkit.vendors.turso.run_command")
    def test_create_failure_raises(self, mock_run) -> None:
        mock_run.return_value = result(stderr="Error: quota exceeded", exit_code=1)

        with pytest.raises(VendorCommandError, match="quota exceeded"):
            TursoCLI().create_database("my-app-dev")

    @patch("provisionkit.vendors.turso.run_command")
    def test_missing_url_raises(self, mock_run) -> None:
        mock_run.side_effect = [result(), result(stdout="no url here")]

        with pytest.raises(VendorCommandError, match="Could not find a url"):
            TursoCLI().create_database("my-app-dev")

    @patch("provisionkit.vendors.turso.run_command")
    def test_destroy(self, mock_run) -> None:
        mock_run.return_value = result()

        assert TursoCLI().destroy_database("my-app-dev") is True
        assert mock_run.call_args[0][1] == ["db", "destroy", "my-app-dev", "--yes"]

    @patch("provisionkit.vendors.turso.run_command")
    def test_destroy_missing_database(self, mock_run) -> None:
        mock_run.return_value = result(stderr="Error: database my-app-dev not found", exit_code=1)

        assert TursoCLI().destroy_database("my-app-dev") is False

    @patch("provisionkit.vendors.turso.run_command")
    def test_find_database_by_url_column(self, mock_run) -> None:
        mock_run.return_value = result(
            stdout=(
                "NAME          GROUP      URL\n"
                "my-app        default    libsql://my-app-acme.turso.io\n"
                "my-app-dev    default    libsql://my-app-dev-acme.turso.io\n"
            )
        )

        assert TursoCLI().find_database("libsql://my-app-dev-acme.turso.io") == "my-app-dev"
        assert mock_run.call_args[0][1] == ["db", "list"]

    @patch("provisionkit.vendors.turso.run_command")
    def test_find_database_by_name_prefix(self, mock_run) -> None:
        mock_run.return_value = result(stdout="NAME\nmy-app\nmy-app-dev\n")

        assert TursoCLI().find_database("libsql://my-app-dev-acme.turso.io") == "my-app-dev"

    @patch("provisionkit.vendors.turso.run_command")
    def test_find_database_unknown_url(self, mock_run) -> None:
        mock_run.return_value = result(stdout="NAME    GROUP    URL\nother   default  libsql://other-acme.turso.io\n")

        assert TursoCLI().find_database("libsql://my-app-dev-acme.turso.io") is None
