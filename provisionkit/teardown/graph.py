"""Dependency graph builder and risk assessment."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from ..models.dependency_graph import (
    BackupRequirement,
    DeletionPriority,
    DependencyGraph,
    RiskAssessment,
    RiskFactor,
)
from ..models.inventory import DiscoveredResource, ResourceInventory
from ..models.resource_type import ResourceType, RiskType, Severity
from .dependency import DependencyResolver

logger = logging.getLogger(__name__)

RISK_DESCRIPTIONS = {
    ResourceType.DOMAINS: "Domains will stop routing to the application",
    ResourceType.HOSTING_PROJECT: "The hosting project and its deployments will be removed",
    ResourceType.ENVIRONMENT_VARIABLES: "Applications relying on these environment variables will lose configuration",
    ResourceType.STORAGE_STORE: "Stored objects will be permanently deleted",
    ResourceType.DATABASE: "Database contents will be permanently deleted",
}

MITIGATIONS = {
    RiskType.DATA_LOSS: "Export database contents and stored objects before deleting",
    RiskType.SERVICE_DISRUPTION: "Confirm no live traffic depends on the hosting project or its domains",
    RiskType.DEPENDENCY_BREAK: "Record environment variable values so they can be restored",
}

CRITICAL_MITIGATION = "Production data is affected: take and verify a backup before continuing"


def references(referrer: DiscoveredResource, target: DiscoveredResource) -> bool:
    """Whether `referrer` references `target` and must be deleted first."""
    if referrer.resource_type not in target.resource_type.profile.referenced_by:
        return False
    if referrer.environment is None or target.environment is None:
        return True
    return referrer.environment == target.environment


def build_resolver(resources: Iterable[DiscoveredResource]) -> DependencyResolver:
    """Build a DependencyResolver over resources using the per-kind reference rules."""
    items = list(resources)
    resolver = DependencyResolver()
    for target in items:
        for referrer in items:
            if referrer is not target and references(referrer, target):
                resolver.add_dependency(parent=target.resource_id, child=referrer.resource_id)
    return resolver


def build_graph(inventory: ResourceInventory) -> DependencyGraph:
    """Compute deletion order, risk assessment and backup requirements for an inventory.

    Args:
        inventory: Discovered resources

    Returns:
        DependencyGraph for every resource in the inventory
    """
    resources = list(inventory.iter_resources())
    resolver = build_resolver(resources)
    by_id = {res.resource_id: res for res in resources}

    tiers = resolver.get_deletion_tiers(by_id.keys())
    priority_of: Dict[str, int] = {rid: tier for tier, ids in tiers.items() for rid in ids}
    order = resolver.compute_deletion_order(by_id.keys())
    order.sort(key=lambda rid: priority_of[rid])

    deletion_order = [
        DeletionPriority(
            resource_type=by_id[rid].resource_type,
            resource_id=rid,
            priority=priority_of[rid],
            dependencies=[child for child in resolver.children_of(rid) if child in by_id],
        )
        for rid in order
    ]

    backup_requirements = [
        BackupRequirement(
            resource_type=res.resource_type,
            resource_id=res.resource_id,
            required=res.resource_type.profile.backup_required,
            backup_type=res.resource_type.profile.backup_type,
        )
        for res in (by_id[rid] for rid in order)
    ]

    graph = DependencyGraph(
        deletion_order=deletion_order,
        risk_assessment=assess_risk(resources),
        backup_requirements=backup_requirements,
    )
    logger.debug(f"Built dependency graph with {len(deletion_order)} resources")
    return graph


def assess_risk(resources: Iterable[DiscoveredResource]) -> RiskAssessment:
    """Assess the risk of deleting a set of resources.

    One factor is produced per resource type present. A factor's severity is the highest
    severity among its resources (a production database is critical).

    Args:
        resources: Resources that would be deleted

    Returns:
        RiskAssessment with the overall severity, factors and mitigations
    """
    grouped: Dict[ResourceType, List[DiscoveredResource]] = {}
    for res in resources:
        grouped.setdefault(res.resource_type, []).append(res)

    factors: List[RiskFactor] = []
    for resource_type in ResourceType:
        members = grouped.get(resource_type)
        if not members:
            continue
        profile = resource_type.profile
        factors.append(
            RiskFactor(
                type=profile.risk_type,
                severity=Severity.highest(profile.severity_for(res.environment) for res in members),
                description=RISK_DESCRIPTIONS[resource_type],
                affected_resources=[res.resource_id for res in members],
            )
        )

    overall = Severity.highest(factor.severity for factor in factors)

    mitigations: List[str] = []
    for factor in factors:
        text = MITIGATIONS[factor.type]
        if text not in mitigations:
            mitigations.append(text)
    if overall == Severity.CRITICAL:
        mitigations.insert(0, CRITICAL_MITIGATION)

    return RiskAssessment(overall=overall, factors=factors, mitigations=mitigations)
