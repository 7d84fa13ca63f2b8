"""Tests for dependency graph construction and risk assessment."""

from __future__ import annotations

from provisionkit.models.environment import Environment
from provisionkit.models.resource_type import ResourceType, RiskType, Severity
from provisionkit.teardown.graph import CRITICAL_MITIGATION, assess_risk, build_graph, references
from tests.fixtures.inventories import (
    create_database_resources,
    create_full_inventory,
    create_hosting,
    create_inventory,
    create_store,
)


class TestReferences:
    def test_environment_mismatch_breaks_reference(self) -> None:
        by_id = {res.resource_id: res for res in create_full_inventory().iter_resources()}
        env_dev, db_dev, db_prod = by_id["env-dev"], by_id["my-app-dev"], by_id["my-app-prod"]

        assert references(env_dev, db_dev) is True
        assert references(env_dev, db_prod) is False
        assert references(db_dev, env_dev) is False


class TestBuildGraph:
    """Test suite for build_graph."""

    def test_deletion_order_follows_reference_chain(self) -> None:
        graph = create_full_inventory().dependency_graph

        ids = [entry.resource_id for entry in graph.deletion_order]

        assert ids[0] == "my-app.example.com"
        assert ids[1] == "prj_123"
        assert ids.index("env-dev") < ids.index("my-app-dev")
        assert ids.index("env-prod") < ids.index("my-app-prod")
        assert ids.index("env-staging") < ids.index("store_abc")

    def test_priorities_respect_dependencies(self) -> None:
        graph = create_full_inventory().dependency_graph

        assert graph.validate() is True
        priorities = [entry.priority for entry in graph.deletion_order]
        assert priorities == sorted(priorities)
        assert graph.priority_of("my-app.example.com").priority == 1
        assert graph.priority_of("prj_123").priority == 2
        assert graph.priority_of("my-app-dev").priority == 4
        assert graph.priority_of("my-app-dev").dependencies == ["env-dev"]

    def test_databases_alone_share_first_tier(self) -> None:
        graph = create_inventory(databases=create_database_resources()).dependency_graph

        assert {entry.priority for entry in graph.deletion_order} == {1}
        assert [entry.resource_id for entry in graph.deletion_order] == ["my-app-dev", "my-app-stg", "my-app-prod"]

    def test_backup_requirements(self) -> None:
        graph = create_inventory(databases=create_database_resources(), stores=[create_store()]).dependency_graph

        required = {req.resource_id: req.required for req in graph.backup_requirements}

        assert required["my-app-dev"] is True
        assert required["store_abc"] is False

    def test_empty_inventory(self) -> None:
        graph = build_graph(create_inventory())

        assert graph.deletion_order == []
        assert graph.risk_assessment.overall == Severity.LOW


class TestAssessRisk:
    """Test suite for assess_risk."""

    def test_storage_only_is_low(self) -> None:
        inventory = create_inventory(stores=[create_store()])

        risk = assess_risk(inventory.iter_resources())

        assert risk.overall == Severity.LOW
        assert [factor.type for factor in risk.factors] == [RiskType.DATA_LOSS]

    def test_production_database_is_critical(self) -> None:
        inventory = create_inventory(databases=create_database_resources(environments=[Environment.PRODUCTION]))

        risk = assess_risk(inventory.iter_resources())

        assert risk.overall == Severity.CRITICAL
        assert risk.mitigations[0] == CRITICAL_MITIGATION

    def test_non_production_database_is_high(self) -> None:
        inventory = create_inventory(databases=create_database_resources(environments=[Environment.STAGING]))

        assert assess_risk(inventory.iter_resources()).overall == Severity.HIGH

    def test_one_factor_per_type(self) -> None:
        inventory = create_full_inventory()

        risk = assess_risk(inventory.iter_resources())

        assert len(risk.factors) == len(ResourceType)
        database_factor = next(f for f in risk.factors if "Database" in f.description)
        assert database_factor.affected_resources == ["my-app-dev", "my-app-stg", "my-app-prod"]
        assert len(set(risk.mitigations)) == len(risk.mitigations)

    def test_hosting_only_is_high(self) -> None:
        inventory = create_inventory(hosting=create_hosting())

        assert assess_risk(inventory.iter_resources()).overall == Severity.HIGH

    def test_no_resources(self) -> None:
        risk = assess_risk([])

        assert risk.overall == Severity.LOW
        assert risk.factors == []
        assert risk.mitigations == []
