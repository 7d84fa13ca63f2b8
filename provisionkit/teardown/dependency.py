"""Dependency graph construction and deletion ordering.

Edges point from a child (a resource that references another) to its parents (the
resources it references). Children are always deleted before their parents.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Dict, Iterable, List, Set

logger = logging.getLogger(__name__)


class DependencyResolver:
    """Builds a deletion dependency graph and orders resources with Kahn's algorithm.

    Attributes:
        graph: child id -> list of parent ids the child references
    """

    def __init__(self) -> None:
        self.graph: Dict[str, List[str]] = {}

    def add_dependency(self, parent: str, child: str) -> None:
        """Record that `child` references `parent` (child is deleted first).

        Args:
            parent: Resource that must outlive the child
            child: Resource that references the parent
        """
        self.graph.setdefault(child, [])
        self.graph.setdefault(parent, [])
        if parent not in self.graph[child]:
            self.graph[child].append(parent)

    def children_of(self, parent: str) -> List[str]:
        """Resources that reference `parent`."""
        return [child for child, parents in self.graph.items() if parent in parents]

    def compute_deletion_order(self, resources: Iterable[str]) -> List[str]:
        """Order resources so every child precedes its parents.

        Edges to resources outside `resources` are ignored. Ties keep input order.

        Args:
            resources: Resource ids to order

        Returns:
            Resource ids in deletion order

        Raises:
            ValueError: If the graph restricted to `resources` has a cycle
        """
        ordered_input = list(dict.fromkeys(resources))
        members = set(ordered_input)

        # Number of children still to delete before each resource can go
        pending_children: Dict[str, int] = {rid: 0 for rid in ordered_input}
        for child in ordered_input:
            for parent in self.graph.get(child, []):
                if parent in members:
                    pending_children[parent] += 1

        queue = deque(rid for rid in ordered_input if pending_children[rid] == 0)
        order: List[str] = []
        while queue:
            current = queue.popleft()
            order.append(current)
            for parent in self.graph.get(current, []):
                if parent not in members:
                    continue
                pending_children[parent] -= 1
                if pending_children[parent] == 0:
                    queue.append(parent)

        if len(order) != len(ordered_input):
            remaining = sorted(members - set(order))
            raise ValueError(f"Circular dependency detected among: {', '.join(remaining)}")

        return order

    def has_cycle(self) -> bool:
        """Check whether the whole graph contains a cycle."""
        try:
            self.compute_deletion_order(self.graph.keys())
        except ValueError:
            return True
        return False

    def get_deletion_tiers(self, resources: Iterable[str]) -> Dict[int, Set[str]]:
        """Group resources into deletion tiers.

        Tier 1 holds resources nothing references; every other resource sits one tier above
        the highest tier among the resources referencing it.

        Returns:
            Mapping of tier number (1-based) to resource ids
        """
        order = self.compute_deletion_order(resources)
        members = set(order)
        tier_of: Dict[str, int] = {}
        for rid in order:
            referrers = [child for child in self.children_of(rid) if child in members]
            tier_of[rid] = 1 + max((tier_of[child] for child in referrers), default=0)

        tiers: Dict[int, Set[str]] = {}
        for rid, tier in tier_of.items():
            tiers.setdefault(tier, set()).add(rid)
        return tiers
