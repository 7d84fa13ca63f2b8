"""Tests for the resource inventory model."""

from __future__ import annotations

from provisionkit.models.environment import Environment
from provisionkit.models.inventory import mask_secret
from provisionkit.models.resource_type import ResourceType, Severity
from tests.fixtures.inventories import (
    create_database_resources,
    create_full_inventory,
    create_hosting,
    create_inventory,
    create_store,
)


class TestResourceInventory:
    """Test suite for ResourceInventory."""

    def test_empty_inventory(self) -> None:
        inventory = create_inventory()

        assert inventory.is_empty is True
        assert list(inventory.iter_resources()) == []

    def test_iter_resources_covers_every_kind(self) -> None:
        inventory = create_full_inventory()

        kinds = {res.resource_type for res in inventory.iter_resources()}

        assert kinds == set(ResourceType)

    def test_environment_variable_groups_per_environment(self) -> None:
        inventory = create_inventory(
            hosting=create_hosting(variable_environments=[Environment.STAGING, Environment.PRODUCTION])
        )

        groups = inventory.resources_of_type(ResourceType.ENVIRONMENT_VARIABLES)

        assert [group.resource_id for group in groups] == ["env-staging", "env-prod"]
        assert groups[0].parameters["target"] == "preview"
        assert groups[1].parameters["target"] == "production"
        assert groups[0].parameters["keys"] == ["DATABASE_URL"]

    def test_database_resources_carry_environment(self) -> None:
        inventory = create_inventory(databases=create_database_resources(environments=[Environment.STAGING]))

        (db,) = inventory.resources_of_type(ResourceType.DATABASE)

        assert db.resource_id == "my-app-stg"
        assert db.environment == Environment.STAGING
        assert db.provider == "turso"
        assert db.parameters["name"] == "my-app-stg"

    def test_has_type(self) -> None:
        inventory = create_inventory(stores=[create_store()])

        assert inventory.has_type(ResourceType.STORAGE_STORE) is True
        assert inventory.has_type(ResourceType.DATABASE) is False

    def test_to_dict_masks_tokens(self) -> None:
        data = create_full_inventory().to_dict()

        token = data["storage"]["stores"][0]["token"]
        assert token.startswith("verc")
        assert "secret" not in token
        assert data["dependency_graph"]["risk_assessment"]["overall"] == Severity.CRITICAL.value


class TestMaskSecret:
    """Test suite for mask_secret."""

    def test_short_values_fully_masked(self) -> None:
        assert mask_secret("abcd1234") == "********"

    def test_long_values_keep_edges(self) -> None:
        assert mask_secret("abcd0123456789wxyz") == "abcd**********wxyz"

    def test_empty_values_unchanged(self) -> None:
        assert mask_secret(None) is None
        assert mask_secret("") == ""
