"""Tests for ResourceDeleter class."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional
from unittest.mock import MagicMock, patch

import pytest

from provisionkit.config import Config
from provisionkit.errors import VendorCommandError
from provisionkit.models.cleanup_plan import DeletionStep, ResourceSelection
from provisionkit.models.environment import Environment
from provisionkit.models.resource_type import ResourceType
from provisionkit.teardown.deleter import ResourceDeleter
from provisionkit.teardown.discovery import discover
from provisionkit.teardown.planner import build_plan
from provisionkit.vendors.runner import CommandResult


def make_step(
    resource_type: ResourceType,
    provider: str,
    resource_id: str,
    environment: Optional[Environment] = None,
    **params: Any,
) -> DeletionStep:
    parameters: Dict[str, Any] = {"resource_id": resource_id, "provider": provider, **params}
    return DeletionStep(
        id=resource_id,
        type=resource_type,
        description=f"{resource_type.value} {resource_id}",
        parameters=parameters,
        order=1,
        environment=environment,
    )


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def deleter(sleeps) -> ResourceDeleter:
    return ResourceDeleter(config=Config(turso_token="tok"), sleep=sleeps.append)


class TestResourceDeleter:
    """Test suite for ResourceDeleter."""

    @patch("provisionkit.teardown.deleter.TursoCLI")
    def test_delete_turso_database(self, mock_cli, deleter: ResourceDeleter) -> None:
        mock_cli.return_value.destroy_database.return_value = True
        step = make_step(ResourceType.DATABASE, "turso", "my-app-dev", Environment.DEVELOPMENT, name="my-app-dev")

        success, error, rollback = deleter.delete(step)

        assert success is True
        assert error is None
        assert rollback["recreate_command"] == "turso db create my-app-dev"
        assert rollback["environment"] == "development"
        mock_cli.assert_called_once_with(token="tok", timeout=300.0)
        mock_cli.return_value.destroy_database.assert_called_once_with("my-app-dev")

    @patch("provisionkit.teardown.deleter.TursoCLI")
    def test_already_deleted_counts_as_success(self, mock_cli, deleter: ResourceDeleter) -> None:
        mock_cli.return_value.destroy_database.return_value = False
        step = make_step(ResourceType.DATABASE, "turso", "my-app-dev", name="my-app-dev")

        success, error, _ = deleter.delete(step)

        assert success is True
        assert error is None

    @patch("provisionkit.teardown.deleter.TursoCLI")
    def test_transient_errors_are_retried(self, mock_cli, deleter: ResourceDeleter, sleeps) -> None:
        mock_cli.return_value.destroy_database.side_effect = [
            VendorCommandError("failed", stderr="429 Too Many Requests"),
            VendorCommandError("failed", stderr="rate limit"),
            True,
        ]
        step = make_step(ResourceType.DATABASE, "turso", "my-app-dev", name="my-app-dev")

        success, _, _ = deleter.delete(step)

        assert success is True
        assert sleeps == [1, 2]

    @patch("provisionkit.teardown.deleter.TursoCLI")
    def test_transient_errors_exhaust_retries(self, mock_cli, deleter: ResourceDeleter, sleeps) -> None:
        mock_cli.return_value.destroy_database.side_effect = VendorCommandError("failed", stderr="rate limit")
        step = make_step(ResourceType.DATABASE, "turso", "my-app-dev", name="my-app-dev")

        success, error, rollback = deleter.delete(step)

        assert success is False
        assert "rate limit" in error
        assert rollback is None
        assert mock_cli.return_value.destroy_database.call_count == 3
        assert sleeps == [1, 2]

    @patch("provisionkit.teardown.deleter.TursoCLI")
    def test_permanent_errors_are_not_retried(self, mock_cli, deleter: ResourceDeleter, sleeps) -> None:
        mock_cli.return_value.destroy_database.side_effect = VendorCommandError("failed", stderr="permission denied")
        step = make_step(ResourceType.DATABASE, "turso", "my-app-dev", name="my-app-dev")

        success, error, _ = deleter.delete(step)

        assert success is False
        assert "permission denied" in error
        assert sleeps == []

    def test_unsupported_provider(self, deleter: ResourceDeleter) -> None:
        step = make_step(ResourceType.DATABASE, "mysql", "db1")

        success, error, _ = deleter.delete(step)

        assert success is False
        assert "Unsupported resource" in error

    @patch("provisionkit.teardown.deleter.VercelCLI")
    def test_environment_variables_removed_per_key(self, mock_cli, deleter: ResourceDeleter) -> None:
        mock_cli.return_value.remove_env.return_value = True
        step = make_step(
            ResourceType.ENVIRONMENT_VARIABLES,
            "vercel",
            "env-prod",
            Environment.PRODUCTION,
            keys=["DATABASE_URL", "TURSO_AUTH_TOKEN"],
            target="production",
        )

        success, _, rollback = deleter.delete(step)

        assert success is True
        assert mock_cli.return_value.remove_env.call_count == 2
        mock_cli.return_value.remove_env.assert_any_call("TURSO_AUTH_TOKEN", "production")
        assert rollback["keys"] == ["DATABASE_URL", "TURSO_AUTH_TOKEN"]

    @patch("provisionkit.teardown.deleter.S3Buckets")
    def test_s3_bucket_uses_stored_region(self, mock_buckets, deleter: ResourceDeleter) -> None:
        mock_buckets.return_value.delete_bucket.return_value = True
        step = make_step(
            ResourceType.STORAGE_STORE,
            "aws-s3",
            "my-app-s3",
            store_id="my-app-s3",
            name="my-app-s3",
            region="eu-west-1",
        )

        success, _, rollback = deleter.delete(step)

        assert success is True
        mock_buckets.assert_called_once_with(region="eu-west-1", profile=None)
        assert rollback["recreate_command"] == "aws s3api create-bucket --bucket my-app-s3"

    @patch("provisionkit.teardown.deleter.VercelCLI")
    def test_hosting_project_removed_by_name(self, mock_cli, deleter: ResourceDeleter) -> None:
        mock_cli.return_value.remove_project.return_value = True
        step = make_step(ResourceType.HOSTING_PROJECT, "vercel", "prj_1", project_id="prj_1", project_name="my-app")

        deleter.delete(step)

        mock_cli.return_value.remove_project.assert_called_once_with("my-app")

    def test_unexpected_exception(self, deleter: ResourceDeleter) -> None:
        with patch.object(ResourceDeleter, "_delete_domain", side_effect=KeyError("domain")):
            success, error, _ = deleter.delete(make_step(ResourceType.DOMAINS, "vercel", "a.example.com"))

        assert success is False
        assert "Unexpected error" in error

    def test_rollback_data_for_domain(self, deleter: ResourceDeleter) -> None:
        step = make_step(ResourceType.DOMAINS, "vercel", "a.example.com", domain="a.example.com")

        assert deleter.rollback_data(step)["recreate_command"] == "vercel domains add a.example.com"

    def test_every_mapped_method_exists(self) -> None:
        for method_name in ResourceDeleter.DELETION_METHODS.values():
            assert callable(getattr(ResourceDeleter, method_name))


def test_supabase_project_deleted_by_ref() -> None:
    with patch("provisionkit.teardown.deleter.SupabaseCLI") as mock_cli:
        mock_cli.return_value = MagicMock(delete_project=MagicMock(return_value=True))
        deleter = ResourceDeleter(config=Config())

        success, _, _ = deleter.delete(make_step(ResourceType.DATABASE, "supabase", "abcdref", name="abcdref"))

    assert success is True
    mock_cli.return_value.delete_project.assert_called_once_with("abcdref")


def turso_result(stdout: str = "", stderr: str = "", exit_code: int = 0) -> CommandResult:
    return CommandResult(command="turso", args=(), exit_code=exit_code, stdout=stdout, stderr=stderr)


class TestInferredTursoDatabases:
    """Databases known only from a url in an env file."""

    @patch("provisionkit.teardown.deleter.TursoCLI")
    def test_name_resolved_before_destroy(self, mock_cli, deleter: ResourceDeleter) -> None:
        mock_cli.return_value.find_database.return_value = "my-app-dev"
        mock_cli.return_value.destroy_database.return_value = True
        step = make_step(
            ResourceType.DATABASE,
            "turso",
            "my-app-dev-acme",
            name="my-app-dev-acme",
            url="libsql://my-app-dev-acme.turso.io",
            inferred=True,
        )

        success, _, _ = deleter.delete(step)

        assert success is True
        mock_cli.return_value.find_database.assert_called_once_with("libsql://my-app-dev-acme.turso.io")
        mock_cli.return_value.destroy_database.assert_called_once_with("my-app-dev")

    @patch("provisionkit.teardown.deleter.TursoCLI")
    def test_unlisted_database_fails(self, mock_cli, deleter: ResourceDeleter) -> None:
        mock_cli.return_value.find_database.return_value = None
        step = make_step(
            ResourceType.DATABASE, "turso", "x-acme", name="x-acme", url="libsql://x-acme.turso.io", inferred=True
        )

        success, error, _ = deleter.delete(step)

        assert success is False
        assert "No Turso database serves libsql://x-acme.turso.io" in error
        mock_cli.return_value.destroy_database.assert_not_called()

    @patch("provisionkit.teardown.deleter.TursoCLI")
    def test_not_found_on_destroy_fails(self, mock_cli, deleter: ResourceDeleter) -> None:
        mock_cli.return_value.find_database.return_value = "my-app-dev"
        mock_cli.return_value.destroy_database.return_value = False
        step = make_step(ResourceType.DATABASE, "turso", "my-app-dev-acme", name="my-app-dev-acme", inferred=True)

        success, error, _ = deleter.delete(step)

        assert success is False
        assert "not found" in error

    @patch("provisionkit.vendors.turso.run_command")
    def test_env_file_database_is_destroyed_by_real_name(self, mock_run, tmp_path: Path) -> None:
        (tmp_path / ".env.development").write_text(
            "TURSO_DATABASE_URL=libsql://my-app-dev-acme.turso.io\n", encoding="utf-8"
        )
        mock_run.side_effect = [
            turso_result(stdout="NAME        GROUP    URL\nmy-app-dev  default  libsql://my-app-dev-acme.turso.io\n"),
            turso_result(),
        ]
        plan = build_plan(discover(tmp_path), ResourceSelection(selected_types=["database"]))

        success, error, _ = ResourceDeleter(config=Config()).delete(plan.steps[0])

        assert success is True, error
        calls = [call[0][1] for call in mock_run.call_args_list]
        assert calls == [["db", "list"], ["db", "destroy", "my-app-dev", "--yes"]]

    @patch("provisionkit.vendors.turso.run_command")
    def test_env_file_database_missing_is_reported(self, mock_run, tmp_path: Path) -> None:
        (tmp_path / ".env.development").write_text(
            "TURSO_DATABASE_URL=libsql://my-app-dev-acme.turso.io\n", encoding="utf-8"
        )
        mock_run.return_value = turso_result(stdout="NAME   GROUP   URL\n")
        plan = build_plan(discover(tmp_path), ResourceSelection(selected_types=["database"]))

        success, _, _ = ResourceDeleter(config=Config()).delete(plan.steps[0])

        assert success is False
        assert [call[0][1] for call in mock_run.call_args_list] == [["db", "list"]]
