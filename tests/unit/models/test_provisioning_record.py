"""Tests for provisioning record and request models."""

from __future__ import annotations

from pathlib import Path

import pytest

from provisionkit.errors import ValidationError
from provisionkit.models.environment import Environment
from provisionkit.models.provisioning_record import (
    DatabaseBlock,
    DatabaseRecord,
    HostingRecord,
    ProvisioningRecord,
    ProvisioningRequest,
    StorageRecord,
)
from tests.fixtures.inventories import FIXED_TIME, create_record


class TestProvisioningRecord:
    """Test suite for ProvisioningRecord."""

    def test_validate_accepts_one_database_per_requested_environment(self) -> None:
        record = create_record()

        assert record.validate(list(Environment)) is True

    def test_validate_rejects_duplicate_environment(self) -> None:
        db = DatabaseRecord(environment=Environment.DEVELOPMENT, name="a-dev", url="libsql://a")
        record = create_record(provider=None).with_database(DatabaseBlock(provider="turso", databases=(db, db)))

        with pytest.raises(ValidationError, match="Duplicate database"):
            record.validate()

    def test_validate_rejects_empty_url(self) -> None:
        db = DatabaseRecord(environment=Environment.DEVELOPMENT, name="a-dev", url="")
        record = create_record(provider=None).with_database(DatabaseBlock(provider="turso", databases=(db,)))

        with pytest.raises(ValidationError, match="empty url"):
            record.validate()

    def test_validate_rejects_missing_requested_environment(self) -> None:
        record = create_record(environments=[Environment.DEVELOPMENT])

        with pytest.raises(ValidationError, match="expected"):
            record.validate([Environment.DEVELOPMENT, Environment.PRODUCTION])

    def test_validate_rejects_unknown_mode(self) -> None:
        record = create_record(mode="hybrid")

        with pytest.raises(ValidationError, match="mode"):
            record.validate()

    def test_environments_follow_database_block(self) -> None:
        record = create_record(environments=[Environment.STAGING, Environment.PRODUCTION])

        assert record.environments == [Environment.STAGING, Environment.PRODUCTION]
        assert create_record(provider=None).environments == []

    def test_to_dict_uses_short_environment_names(self) -> None:
        data = create_record().to_dict()

        assert [db["environment"] for db in data["database"]["databases"]] == ["dev", "staging", "prod"]
        assert data["created_at"] == FIXED_TIME.isoformat()
        assert data["storage"] is None

    def test_from_dict_restores_all_blocks(self) -> None:
        record = create_record(
            storage=StorageRecord(
                provider="vercel-blob",
                store_name="my-app-blob",
                store_id="store_1",
                tokens={"read_write": "rw"},
            ),
            hosting=HostingRecord(project_id="prj_1", project_name="my-app", org_id="team_1"),
        )

        restored = ProvisioningRecord.from_dict(record.to_dict())

        assert restored == record

    def test_database_block_for_environment(self) -> None:
        block = create_record().database

        assert block.for_environment(Environment.STAGING).name == "my-app-stg"


class TestProvisioningRequest:
    """Test suite for ProvisioningRequest."""

    def test_defaults_to_all_environments(self, tmp_path: Path) -> None:
        request = ProvisioningRequest(project_name="my-app", project_path=tmp_path)

        assert request.environments == list(Environment)
        assert request.is_empty is True

    def test_normalizes_environment_aliases(self) -> None:
        request = ProvisioningRequest(
            project_name="my-app",
            project_path="/tmp/my-app",
            environments=["prod", "dev"],
            database_provider="turso",
        )

        assert request.environments == [Environment.DEVELOPMENT, Environment.PRODUCTION]
        assert isinstance(request.project_path, Path)
        assert request.is_empty is False

    def test_validate_rejects_unknown_database_provider(self, tmp_path: Path) -> None:
        request = ProvisioningRequest(project_name="my-app", project_path=tmp_path, database_provider="mysql")

        with pytest.raises(ValidationError, match="Unknown database provider"):
            request.validate()

    def test_validate_rejects_unknown_storage_provider(self, tmp_path: Path) -> None:
        request = ProvisioningRequest(project_name="my-app", project_path=tmp_path, storage_provider="gcs")

        with pytest.raises(ValidationError, match="Unknown storage provider"):
            request.validate()

    def test_validate_rejects_empty_environment_list(self, tmp_path: Path) -> None:
        request = ProvisioningRequest(
            project_name="my-app",
            project_path=tmp_path,
            environments=[],
            database_provider="turso",
        )

        with pytest.raises(ValidationError, match="At least one environment"):
            request.validate()

    def test_validate_rejects_blank_project_name(self, tmp_path: Path) -> None:
        request = ProvisioningRequest(project_name="  ", project_path=tmp_path, hosting=True)

        with pytest.raises(ValidationError, match="Project name"):
            request.validate()
