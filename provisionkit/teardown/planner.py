"""Cleanup planner.

Turns an inventory and a selection into an ordered CleanupPlan. Planning is pure: it reads
the inventory's dependency graph and never calls a vendor.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from ..errors import ValidationError
from ..models.cleanup_plan import BackupEntry, BackupPlan, CleanupPlan, DeletionStep, ResourceSelection
from ..models.dependency_graph import DependencyGraph
from ..models.inventory import DiscoveredResource, ResourceInventory
from .graph import assess_risk, build_graph

logger = logging.getLogger(__name__)


class CleanupPlanner:
    """Builds cleanup plans.

    Args:
        clock: Timestamp source for the backup destination (optional)
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def build_plan(self, inventory: ResourceInventory, selection: ResourceSelection) -> CleanupPlan:
        """Build a deletion plan for the selected resources.

        Args:
            inventory: Discovered resources
            selection: Types, scope and exclusions to apply

        Returns:
            CleanupPlan with steps in dependency order

        Raises:
            ValidationError: If nothing is selected or a selected type is not in the inventory
        """
        if not selection.selected_types:
            raise ValidationError("No resource types selected for cleanup")

        missing = [t.value for t in selection.selected_types if not inventory.has_type(t)]
        if missing:
            raise ValidationError(f"Selected resource types not found in project: {', '.join(missing)}")

        graph: DependencyGraph = inventory.dependency_graph or build_graph(inventory)
        excluded = set(selection.excluded_resources)
        selected: Dict[str, DiscoveredResource] = {
            res.resource_id: res
            for res in inventory.iter_resources()
            if res.resource_type in selection.selected_types
            and selection.includes_environment(res.environment)
            and res.resource_id not in excluded
        }

        steps: List[DeletionStep] = []
        for entry in graph.deletion_order:
            resource = selected.get(entry.resource_id)
            if resource is None:
                continue
            planned_ids = {step.id for step in steps}
            steps.append(
                DeletionStep(
                    id=resource.resource_id,
                    type=resource.resource_type,
                    description=resource.description,
                    parameters={
                        **resource.parameters,
                        "resource_id": resource.resource_id,
                        "provider": resource.provider,
                    },
                    order=len(steps) + 1,
                    environment=resource.environment,
                    requires_backup=resource.resource_type.profile.backup_required,
                    dependencies=tuple(dep for dep in entry.dependencies if dep in planned_ids),
                )
            )

        resources = [selected[step.id] for step in steps]
        timestamp = self.clock().strftime("%Y%m%d-%H%M%S")
        plan = CleanupPlan(
            project_name=inventory.project_name,
            steps=steps,
            target_resources=selection,
            backup_plan=BackupPlan(
                entries=[
                    BackupEntry(
                        type=res.resource_type,
                        resource_id=res.resource_id,
                        backup_type=res.resource_type.profile.backup_type,
                    )
                    for res in resources
                    if res.resource_type.profile.backup_required
                ],
                destination=f"./cleanup-backup-{timestamp}",
            ),
            estimated_duration=sum(res.resource_type.profile.time_budget for res in resources),
            risk_level=assess_risk(resources).overall,
        )
        logger.info(f"Planned {len(steps)} deletion steps for {inventory.project_name} (risk: {plan.risk_level.value})")
        return plan


def build_plan(inventory: ResourceInventory, selection: ResourceSelection) -> CleanupPlan:
    """Build a deletion plan with the default planner."""
    return CleanupPlanner().build_plan(inventory, selection)
