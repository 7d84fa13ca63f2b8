"""Resource inventory model.

A ResourceInventory is what discovery found for one project directory. It is rebuilt from
scratch on every discovery and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Sequence

from .environment import Environment
from .resource_type import ResourceType

if TYPE_CHECKING:
    from .dependency_graph import DependencyGraph

# Hosting-side environment variable targets per environment
VERCEL_TARGETS = {
    Environment.DEVELOPMENT: "development",
    Environment.STAGING: "preview",
    Environment.PRODUCTION: "production",
}


@dataclass(frozen=True)
class DiscoveredResource:
    """Uniform view of one discovered resource.

    Attributes:
        resource_type: Kind of resource
        resource_id: Identifier unique within the inventory
        description: Human-readable description used in plans and reports
        environment: Environment the resource belongs to (None for project-wide resources)
        provider: Vendor that owns the resource
        parameters: Deletion parameters handed to the deleter
    """

    resource_type: ResourceType
    resource_id: str
    description: str
    environment: Optional[Environment] = None
    provider: Optional[str] = None
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class EnvironmentVariable:
    """An environment variable found in a local env file. Secret values are masked."""

    key: str
    value: str
    environment: Optional[Environment] = None
    source: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "value": self.value,
            "environment": self.environment.value if self.environment else None,
            "source": self.source,
        }


@dataclass(frozen=True)
class HostingResources:
    """Hosting project and the resources attached to it."""

    project_id: Optional[str] = None
    org_id: Optional[str] = None
    project_name: Optional[str] = None
    domains: Sequence[str] = ()
    environment_variables: Sequence[EnvironmentVariable] = ()

    def variables_for(self, environment: Environment) -> List[EnvironmentVariable]:
        """Variables that apply to an environment (shared ones included)."""
        return [var for var in self.environment_variables if var.environment in (None, environment)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "org_id": self.org_id,
            "project_name": self.project_name,
            "domains": list(self.domains),
            "environment_variables": [var.to_dict() for var in self.environment_variables],
        }


@dataclass(frozen=True)
class DatabaseResource:
    """One per-environment database.

    ``inferred`` marks identifiers guessed from a url in an env file rather than read from
    the manifest. They may not be the vendor's real name.
    """

    environment: Environment
    identifier: str
    url: Optional[str] = None
    token: Optional[str] = None
    inferred: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment.value,
            "identifier": self.identifier,
            "url": self.url,
            "token": mask_secret(self.token),
            "inferred": self.inferred,
        }


@dataclass(frozen=True)
class DatabaseResources:
    provider: str
    resources: Sequence[DatabaseResource] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"provider": self.provider, "resources": [db.to_dict() for db in self.resources]}


@dataclass(frozen=True)
class StorageStoreResource:
    """One object store or bucket."""

    provider: str
    id: str
    name: str
    token: Optional[str] = None
    environment: Optional[Environment] = None
    region: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "id": self.id,
            "name": self.name,
            "token": mask_secret(self.token),
            "environment": self.environment.value if self.environment else None,
            "region": self.region,
        }


@dataclass(frozen=True)
class StorageResources:
    stores: Sequence[StorageStoreResource] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"stores": [store.to_dict() for store in self.stores]}


@dataclass(frozen=True)
class ResourceInventory:
    """Everything discovered for a project.

    Attributes:
        project_name: Project name (from the manifest, hosting link or directory name)
        project_path: Project root that was scanned
        hosting: Hosting project, domains and environment variables (optional)
        databases: Per-environment databases (optional)
        storage: Object stores (optional)
        dependency_graph: Deletion order, risk and backup requirements
    """

    project_name: str
    project_path: Path
    hosting: Optional[HostingResources] = None
    databases: Optional[DatabaseResources] = None
    storage: Optional[StorageResources] = None
    dependency_graph: Optional["DependencyGraph"] = None

    @property
    def is_empty(self) -> bool:
        return next(self.iter_resources(), None) is None

    def iter_resources(self) -> Iterator[DiscoveredResource]:
        """Yield every discovered resource as a DiscoveredResource."""
        hosting = self.hosting
        if hosting is not None:
            for domain in hosting.domains:
                yield DiscoveredResource(
                    resource_type=ResourceType.DOMAINS,
                    resource_id=domain,
                    description=f"Domain {domain}",
                    provider="vercel",
                    parameters={"domain": domain, "project_id": hosting.project_id},
                )

            if hosting.project_id:
                yield DiscoveredResource(
                    resource_type=ResourceType.HOSTING_PROJECT,
                    resource_id=hosting.project_id,
                    description=f"Vercel project {hosting.project_name or hosting.project_id}",
                    provider="vercel",
                    parameters={
                        "project_id": hosting.project_id,
                        "project_name": hosting.project_name,
                        "org_id": hosting.org_id,
                    },
                )

            for environment in Environment:
                keys = sorted({var.key for var in hosting.variables_for(environment)})
                if not keys:
                    continue
                yield DiscoveredResource(
                    resource_type=ResourceType.ENVIRONMENT_VARIABLES,
                    resource_id=f"env-{environment.short_name}",
                    description=f"{len(keys)} environment variables ({environment.value})",
                    environment=environment,
                    provider="vercel",
                    parameters={
                        "keys": keys,
                        "target": VERCEL_TARGETS[environment],
                        "project_id": hosting.project_id,
                    },
                )

        if self.databases is not None:
            provider = self.databases.provider
            for db in self.databases.resources:
                yield DiscoveredResource(
                    resource_type=ResourceType.DATABASE,
                    resource_id=db.identifier,
                    description=f"{provider} database {db.identifier} ({db.environment.value})",
                    environment=db.environment,
                    provider=provider,
                    parameters={"name": db.identifier, "url": db.url, "inferred": db.inferred},
                )

        if self.storage is not None:
            for store in self.storage.stores:
                yield DiscoveredResource(
                    resource_type=ResourceType.STORAGE_STORE,
                    resource_id=store.id,
                    description=f"{store.provider} store {store.name}",
                    environment=store.environment,
                    provider=store.provider,
                    parameters={"store_id": store.id, "name": store.name, "region": store.region},
                )

    def resources_of_type(self, resource_type: ResourceType) -> List[DiscoveredResource]:
        return [res for res in self.iter_resources() if res.resource_type == resource_type]

    def has_type(self, resource_type: ResourceType) -> bool:
        return any(res.resource_type == resource_type for res in self.iter_resources())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_name": self.project_name,
            "project_path": str(self.project_path),
            "hosting": self.hosting.to_dict() if self.hosting else None,
            "databases": self.databases.to_dict() if self.databases else None,
            "storage": self.storage.to_dict() if self.storage else None,
            "dependency_graph": self.dependency_graph.to_dict() if self.dependency_graph else None,
        }


def mask_secret(value: Optional[str]) -> Optional[str]:
    """Mask a secret, keeping the first and last four characters."""
    if not value:
        return value
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}{'*' * (len(value) - 8)}{value[-4:]}"
