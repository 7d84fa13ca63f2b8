"""Integration tests for the provisionkit CLI."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from provisionkit.cli.main import app
from provisionkit.teardown.audit import AuditStorage
from tests.fixtures.inventories import RecordingDeleter

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(f"cloud_mode: mock\naudit_dir: {tmp_path / 'audit'}\n", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PROVISIONKIT_CLOUD_MODE", "PROVISIONKIT_AUDIT_DIR", "PROVISIONKIT_AUTO_PROVISION"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project(tmp_path: Path, config_file: Path) -> Path:
    project_path = tmp_path / "shop"
    project_path.mkdir()
    result = runner.invoke(
        app,
        [
            "--config",
            str(config_file),
            "provision",
            str(project_path),
            "--database",
            "turso",
            "--storage",
            "vercel-blob",
        ],
    )
    assert result.exit_code == 0, result.output
    return project_path


class TestVersionCommand:
    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "provisionkit version" in result.output


class TestProvisionCommand:
    """Test suite for the provision command."""

    def test_provision_writes_manifest_and_env_files(self, project: Path) -> None:
        assert (project / "cloud-resources.json").exists()
        assert (project / ".env.local").exists()
        assert (project / ".env.staging").exists()
        assert (project / ".env.production").exists()

    def test_unknown_database_provider(self, tmp_path: Path, config_file: Path) -> None:
        result = runner.invoke(
            app,
            ["--config", str(config_file), "provision", str(tmp_path), "--database", "mongo"],
        )

        assert result.exit_code == 1

    def test_unknown_environment(self, tmp_path: Path, config_file: Path) -> None:
        result = runner.invoke(
            app,
            ["--config", str(config_file), "provision", str(tmp_path), "--database", "turso", "--env", "qa"],
        )

        assert result.exit_code == 1

    def test_invalid_mode(self, tmp_path: Path, config_file: Path) -> None:
        result = runner.invoke(
            app,
            ["--config", str(config_file), "provision", str(tmp_path), "--database", "turso", "--mode", "hybrid"],
        )

        assert result.exit_code == 1

    def test_json_output(self, tmp_path: Path, config_file: Path) -> None:
        project_path = tmp_path / "api"
        project_path.mkdir()

        result = runner.invoke(
            app,
            ["--config", str(config_file), "provision", str(project_path), "--database", "turso", "--json"],
        )

        assert result.exit_code == 0
        assert '"success": true' in result.output

    def test_vendor_failure_exits_2(self, tmp_path: Path, config_file: Path) -> None:
        from provisionkit.provision.mock import MockProvisioner

        with patch(
            "provisionkit.cli.main.resolve_provisioner",
            return_value=MockProvisioner(fail_environments=["staging"]),
        ):
            result = runner.invoke(
                app,
                ["--config", str(config_file), "provision", str(tmp_path), "--database", "turso"],
            )

        assert result.exit_code == 2
        assert "staging" in result.output


class TestDiscoverCommand:
    def test_discover_table(self, project: Path, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "discover", str(project)])

        assert result.exit_code == 0
        assert "shop-stg" in result.output

    def test_discover_json(self, project: Path, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "discover", str(project), "--json"])

        assert result.exit_code == 0
        assert '"project_name": "shop"' in result.output

    def test_discover_empty_project(self, tmp_path: Path, config_file: Path) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()

        result = runner.invoke(app, ["--config", str(config_file), "discover", str(empty)])

        assert result.exit_code == 0
        assert "No cloud resources found" in result.output


class TestCleanupCommand:
    """Test suite for the cleanup command."""

    def test_preview_deletes_nothing(self, project: Path, config_file: Path) -> None:
        with patch("provisionkit.teardown.service.ResourceDeleter") as mock_deleter:
            result = runner.invoke(
                app,
                ["--config", str(config_file), "cleanup", str(project), "--type", "database"],
            )

        assert result.exit_code == 0
        assert "Preview only" in result.output
        mock_deleter.assert_not_called()

    def test_invalid_type(self, project: Path, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "cleanup", str(project), "--type", "queues"])

        assert result.exit_code == 1

    def test_invalid_scope(self, project: Path, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "cleanup", str(project), "--scope", "qa"])

        assert result.exit_code == 1

    def test_type_missing_from_project(self, project: Path, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "cleanup", str(project), "--type", "domains"])

        assert result.exit_code == 1

    def test_confirmation_mismatch(self, project: Path, config_file: Path) -> None:
        deleter = RecordingDeleter()

        with patch("provisionkit.teardown.service.ResourceDeleter", return_value=deleter):
            result = runner.invoke(
                app,
                ["--config", str(config_file), "cleanup", str(project), "--type", "database", "--confirm"],
                input="other\n",
            )

        assert result.exit_code == 1
        assert deleter.calls == []

    def test_confirmed_cleanup_writes_audit_log(self, project: Path, config_file: Path, tmp_path: Path) -> None:
        deleter = RecordingDeleter()

        with patch("provisionkit.teardown.service.ResourceDeleter", return_value=deleter):
            result = runner.invoke(
                app,
                [
                    "--config",
                    str(config_file),
                    "cleanup",
                    str(project),
                    "--type",
                    "database",
                    "--scope",
                    "staging",
                    "--confirm",
                ],
                input="shop\n",
            )

        assert result.exit_code == 0, result.output
        assert deleter.calls == ["shop-stg"]
        runs = AuditStorage(str(tmp_path / "audit")).query_runs()
        assert len(runs) == 1
        assert runs[0]["run"]["completed_steps"] == 1

    def test_failed_cleanup_exits_2(self, project: Path, config_file: Path) -> None:
        deleter = RecordingDeleter(fail_on=["shop-stg"])

        with patch("provisionkit.teardown.service.ResourceDeleter", return_value=deleter):
            result = runner.invoke(
                app,
                ["--config", str(config_file), "cleanup", str(project), "--type", "database", "--confirm", "--yes"],
            )

        assert result.exit_code == 2
        assert deleter.calls == ["shop-dev", "shop-stg"]


class TestAuditCommands:
    def test_list_empty(self, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "audit", "list"])

        assert result.exit_code == 0
        assert "No cleanup runs recorded" in result.output

    def test_list_and_show(self, project: Path, config_file: Path, tmp_path: Path) -> None:
        with patch("provisionkit.teardown.service.ResourceDeleter", return_value=RecordingDeleter()):
            runner.invoke(
                app,
                ["--config", str(config_file), "cleanup", str(project), "-t", "storage-store", "--confirm", "--yes"],
            )
        run_id = AuditStorage(str(tmp_path / "audit")).query_runs()[0]["run"]["run_id"]

        listed = runner.invoke(app, ["--config", str(config_file), "audit", "list"])
        shown = runner.invoke(app, ["--config", str(config_file), "audit", "show", run_id])

        assert listed.exit_code == 0
        assert "Cleanup Runs" in listed.output
        assert shown.exit_code == 0
        assert "shop" in shown.output

    def test_show_missing_run(self, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "audit", "show", "run_missing"])

        assert result.exit_code == 1

    def test_invalid_since_date(self, config_file: Path) -> None:
        result = runner.invoke(app, ["--config", str(config_file), "audit", "list", "--since", "yesterday"])

        assert result.exit_code == 1
