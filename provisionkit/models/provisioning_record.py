"""Provisioning record model.

A ProvisioningRecord is the immutable snapshot of what a provisioning run created. It is
persisted as the project manifest and read back by resource discovery.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..errors import ValidationError
from .environment import ALL_ENVIRONMENTS, Environment

DATABASE_PROVIDERS = ("turso", "supabase")
STORAGE_PROVIDERS = ("vercel-blob", "aws-s3", "cloudflare-r2")


@dataclass(frozen=True)
class DatabaseRecord:
    """One per-environment database.

    Attributes:
        environment: Environment the database serves
        name: Vendor-side database name (e.g. "my-app-dev")
        url: Connection URL
        auth_token: Access token or service key (optional)
    """

    environment: Environment
    name: str
    url: str
    auth_token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment.short_name,
            "name": self.name,
            "url": self.url,
            "auth_token": self.auth_token,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DatabaseRecord":
        return cls(
            environment=Environment.parse(data["environment"]),
            name=data["name"],
            url=data.get("url", ""),
            auth_token=data.get("auth_token"),
        )


@dataclass(frozen=True)
class DatabaseBlock:
    """Databases created by one provider, at most one per environment."""

    provider: str
    databases: Sequence[DatabaseRecord] = ()

    def for_environment(self, environment: Environment) -> Optional[DatabaseRecord]:
        for record in self.databases:
            if record.environment == environment:
                return record
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"provider": self.provider, "databases": [db.to_dict() for db in self.databases]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DatabaseBlock":
        return cls(
            provider=data["provider"],
            databases=tuple(DatabaseRecord.from_dict(item) for item in data.get("databases", [])),
        )


@dataclass(frozen=True)
class StorageRecord:
    """Project-wide object storage.

    Attributes:
        provider: vercel-blob, aws-s3 or cloudflare-r2
        store_name: Store or bucket name
        store_id: Vendor identifier (same as the name for buckets)
        tokens: Credentials keyed by purpose (e.g. {"read_write": "..."})
        endpoint: API endpoint (R2)
        public_url: Public base URL (S3)
        region: Region (S3)
    """

    provider: str
    store_name: str
    store_id: str
    tokens: Dict[str, str] = field(default_factory=dict)
    endpoint: Optional[str] = None
    public_url: Optional[str] = None
    region: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "store_name": self.store_name,
            "store_id": self.store_id,
            "tokens": dict(self.tokens),
            "endpoint": self.endpoint,
            "public_url": self.public_url,
            "region": self.region,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StorageRecord":
        return cls(
            provider=data["provider"],
            store_name=data["store_name"],
            store_id=data.get("store_id") or data["store_name"],
            tokens=dict(data.get("tokens") or {}),
            endpoint=data.get("endpoint"),
            public_url=data.get("public_url"),
            region=data.get("region"),
        )


@dataclass(frozen=True)
class HostingRecord:
    """Hosting project linked to the application."""

    project_id: str
    project_name: str
    org_id: Optional[str] = None
    production_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "project_name": self.project_name,
            "org_id": self.org_id,
            "production_url": self.production_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HostingRecord":
        return cls(
            project_id=data["project_id"],
            project_name=data.get("project_name", data["project_id"]),
            org_id=data.get("org_id"),
            production_url=data.get("production_url"),
        )


@dataclass(frozen=True)
class ProvisioningRecord:
    """Snapshot of the resources created for a project.

    Attributes:
        mode: "real" or "mock"
        created_at: When provisioning finished (UTC)
        project_name: Application name the resources were derived from
        database: Per-environment databases (optional)
        storage: Object storage (optional)
        hosting: Hosting project (optional)
    """

    mode: str
    created_at: datetime
    project_name: str
    database: Optional[DatabaseBlock] = None
    storage: Optional[StorageRecord] = None
    hosting: Optional[HostingRecord] = None

    @property
    def environments(self) -> List[Environment]:
        if self.database is None:
            return []
        return [record.environment for record in self.database.databases]

    def validate(self, requested: Optional[Sequence[Environment]] = None) -> bool:
        """Validate record invariants.

        Validation rules:
            - at most one database per environment
            - every database has a non-empty url
            - when `requested` is given, exactly one database per requested environment

        Returns:
            True if validation passes

        Raises:
            ValidationError: If any validation rule fails
        """
        if self.mode not in ("real", "mock"):
            raise ValidationError(f"Invalid provisioning mode: {self.mode}")

        if self.database is None:
            if requested:
                raise ValidationError("Database block missing for requested environments")
            return True

        seen: List[Environment] = []
        for record in self.database.databases:
            if record.environment in seen:
                raise ValidationError(f"Duplicate database for environment {record.environment.value}")
            if not record.url:
                raise ValidationError(f"Database {record.name} has an empty url")
            seen.append(record.environment)

        if requested is not None and set(seen) != set(requested):
            expected = ", ".join(env.value for env in requested)
            actual = ", ".join(env.value for env in seen) or "none"
            raise ValidationError(f"Databases provisioned for [{actual}], expected [{expected}]")

        return True

    def with_database(self, database: Optional[DatabaseBlock]) -> "ProvisioningRecord":
        return replace(self, database=database)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": self.mode,
            "created_at": self.created_at.isoformat(),
            "project_name": self.project_name,
            "database": self.database.to_dict() if self.database else None,
            "storage": self.storage.to_dict() if self.storage else None,
            "hosting": self.hosting.to_dict() if self.hosting else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProvisioningRecord":
        created_at = data.get("created_at")
        return cls(
            mode=data.get("mode", "real"),
            created_at=datetime.fromisoformat(created_at) if created_at else datetime.now(timezone.utc),
            project_name=data.get("project_name", ""),
            database=DatabaseBlock.from_dict(data["database"]) if data.get("database") else None,
            storage=StorageRecord.from_dict(data["storage"]) if data.get("storage") else None,
            hosting=HostingRecord.from_dict(data["hosting"]) if data.get("hosting") else None,
        )


@dataclass
class ProvisioningRequest:
    """What to provision for a project.

    Attributes:
        project_name: Application name used to derive resource names
        project_path: Project root where the manifest and env files are written
        environments: Environments to create databases for (default: all three)
        database_provider: turso, supabase or None
        storage_provider: vercel-blob, aws-s3, cloudflare-r2 or None
        hosting: Whether to create a hosting project
    """

    project_name: str
    project_path: Path
    environments: List[Environment] = field(default_factory=lambda: list(ALL_ENVIRONMENTS))
    database_provider: Optional[str] = None
    storage_provider: Optional[str] = None
    hosting: bool = False

    def __post_init__(self) -> None:
        self.project_path = Path(self.project_path)
        self.environments = Environment.parse_many(self.environments)

    def validate(self) -> bool:
        """Validate the request.

        Raises:
            ValidationError: If a provider is unknown or no environment is requested
        """
        if not self.project_name or not self.project_name.strip():
            raise ValidationError("Project name must not be empty")
        if not self.environments:
            raise ValidationError("At least one environment must be requested")
        if self.database_provider is not None and self.database_provider not in DATABASE_PROVIDERS:
            raise ValidationError(
                f"Unknown database provider: {self.database_provider}. "
                f"Must be one of: {', '.join(DATABASE_PROVIDERS)}"
            )
        if self.storage_provider is not None and self.storage_provider not in STORAGE_PROVIDERS:
            raise ValidationError(
                f"Unknown storage provider: {self.storage_provider}. "
                f"Must be one of: {', '.join(STORAGE_PROVIDERS)}"
            )
        return True

    @property
    def is_empty(self) -> bool:
        return self.database_provider is None and self.storage_provider is None and not self.hosting
