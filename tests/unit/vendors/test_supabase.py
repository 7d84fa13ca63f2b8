"""Tests for the Supabase CLI wrapper."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from provisionkit.errors import VendorCommandError
from provisionkit.vendors.runner import CommandResult
from provisionkit.vendors.supabase import SupabaseCLI

API_KEYS = json.dumps([{"name": "anon", "api_key": "anon-key"}, {"name": "service_role", "api_key": "srk"}])


def result(stdout: str = "", stderr: str = "", exit_code: int = 0) -> CommandResult:
    return CommandResult(command="supabase", args=(), exit_code=exit_code, stdout=stdout, stderr=stderr)


class TestSupabaseCLI:
    """Test suite for SupabaseCLI."""

    @patch("provisionkit.vendors.supabase.run_command")
    def test_create_project(self, mock_run) -> None:
        mock_run.side_effect = [result(stdout=json.dumps({"id": "abcdref"})), result(stdout=API_KEYS)]

        project = SupabaseCLI(token="t", org_id="org_1", region="us-east-1", db_password="pw").create_project(
            "my-app-prod"
        )

        assert project.ref == "abcdref"
        assert project.url == "https://abcdref.supabase.co"
        assert project.service_role_key == "srk"
        assert project.anon_key == "anon-key"
        create_args = mock_run.call_args_list[0][0][1]
        assert create_args[:3] == ["projects", "create", "my-app-prod"]
        assert ["--org-id", "org_1"] == create_args[create_args.index("--org-id") : create_args.index("--org-id") + 2]
        assert create_args[-3:] == ["--yes", "--output", "json"]

    @patch("provisionkit.vendors.supabase.run_command")
    def test_create_reuses_existing_project(self, mock_run) -> None:
        mock_run.side_effect = [
            result(stderr="project name already exists", exit_code=1),
            result(stdout=json.dumps([{"id": "other", "name": "x"}, {"id": "existing", "name": "my-app-prod"}])),
            result(stdout=API_KEYS),
        ]

        project = SupabaseCLI().create_project("my-app-prod")

        assert project.ref == "existing"

    @patch("provisionkit.vendors.supabase.run_command")
    def test_create_failure(self, mock_run) -> None:
        mock_run.return_value = result(stderr="unauthorized", exit_code=1)

        with pytest.raises(VendorCommandError, match="unauthorized"):
            SupabaseCLI().create_project("my-app-prod")

    @patch("provisionkit.vendors.supabase.run_command")
    def test_delete_missing_project(self, mock_run) -> None:
        mock_run.return_value = result(stderr="Project not found", exit_code=1)

        assert SupabaseCLI().delete_project("abcdref") is False
