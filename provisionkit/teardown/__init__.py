"""Resource teardown.

This module discovers the cloud resources attached to a project and deletes them in
dependency order, halting on the first failure.

Classes:
    ResourceDiscovery: Finds resources from the manifest, hosting link and env files
    DependencyResolver: Dependency graph construction and deletion ordering
    CleanupPlanner: Builds ordered deletion plans
    CleanupOrchestrator: Executes plans step by step
    ResourceDeleter: Vendor deletion calls
    AuditStorage: Audit log storage and retrieval
"""

from __future__ import annotations

from .audit import AuditStorage
from .deleter import ResourceDeleter
from .dependency import DependencyResolver
from .discovery import ResourceDiscovery, discover
from .graph import assess_risk, build_graph
from .orchestrator import CleanupOrchestrator
from .planner import CleanupPlanner, build_plan
from .reporter import CleanupReporter
from .service import preview_cleanup, run_cleanup

__all__ = [
    "AuditStorage",
    "CleanupOrchestrator",
    "CleanupPlanner",
    "CleanupReporter",
    "DependencyResolver",
    "ResourceDeleter",
    "ResourceDiscovery",
    "assess_risk",
    "build_graph",
    "build_plan",
    "discover",
    "preview_cleanup",
    "run_cleanup",
]
