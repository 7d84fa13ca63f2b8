"""Configuration loading.

Settings come from an optional YAML file (default ~/.provisionkit/config.yaml) and are
then overridden by environment variables. The resulting Config object is passed
explicitly to the provisioning and teardown entry points.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".provisionkit" / "config.yaml"

CLOUD_MODES = ("real", "mock")

TRUTHY = ("true", "1", "on", "yes")

# Environment variable -> (config attribute, converter)
ENV_OVERRIDES = {
    "PROVISIONKIT_CLOUD_MODE": ("cloud_mode", str),
    "PROVISIONKIT_AUTO_PROVISION": ("auto_provision", lambda v: v.strip().lower() in TRUTHY),
    "PROVISIONKIT_LOG_LEVEL": ("log_level", str),
    "PROVISIONKIT_AUDIT_DIR": ("audit_dir", str),
    "PROVISIONKIT_VENDOR_TIMEOUT": ("vendor_timeout", float),
    "VERCEL_TOKEN": ("vercel_token", str),
    "VERCEL_SCOPE": ("vercel_scope", str),
    "VERCEL_ORG_ID": ("vercel_org_id", str),
    "TURSO_API_TOKEN": ("turso_token", str),
    "TURSO_GROUP": ("turso_group", str),
    "TURSO_LOCATION": ("turso_location", str),
    "SUPABASE_ACCESS_TOKEN": ("supabase_token", str),
    "SUPABASE_ORG_ID": ("supabase_org_id", str),
    "SUPABASE_REGION": ("supabase_region", str),
    "SUPABASE_DB_PASSWORD": ("supabase_db_password", str),
    "AWS_PROFILE": ("aws_profile", str),
    "AWS_REGION": ("aws_region", str),
    "CLOUDFLARE_API_TOKEN": ("cloudflare_token", str),
    "CLOUDFLARE_ACCOUNT_ID": ("cloudflare_account_id", str),
}


@dataclass
class Config:
    """Runtime settings for provisionkit.

    Attributes:
        cloud_mode: Provisioner variant ("real" or "mock"); None picks real
        auto_provision: Whether the provisioning entry point creates anything at all
        log_level: Default log level for the CLI
        audit_dir: Directory for cleanup audit logs (default ~/.provisionkit/audit-logs)
        vendor_timeout: Seconds before a vendor CLI call is abandoned
    """

    cloud_mode: Optional[str] = None
    auto_provision: bool = True
    log_level: str = "INFO"
    audit_dir: Optional[str] = None
    vendor_timeout: Optional[float] = 300.0

    vercel_token: Optional[str] = None
    vercel_scope: Optional[str] = None
    vercel_org_id: Optional[str] = None
    turso_token: Optional[str] = None
    turso_group: str = "default"
    turso_location: Optional[str] = None
    supabase_token: Optional[str] = None
    supabase_org_id: Optional[str] = None
    supabase_region: Optional[str] = None
    supabase_db_password: Optional[str] = None
    aws_profile: Optional[str] = None
    aws_region: str = "us-east-1"
    cloudflare_token: Optional[str] = None
    cloudflare_account_id: Optional[str] = None

    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, config_path: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> "Config":
        """Load configuration from file and environment.

        Args:
            config_path: YAML file to read (default: ~/.provisionkit/config.yaml)
            environ: Environment mapping to read overrides from (default: os.environ)

        Returns:
            Config instance

        Raises:
            ValueError: If the file is not a YAML mapping or cloud_mode is unknown
        """
        path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        config = cls.from_dict(cls._read_file(path))
        config.apply_environment(os.environ if environ is None else environ)
        config.validate()
        return config

    @staticmethod
    def _read_file(path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

        logger.debug(f"Loaded configuration from {path}")
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build a Config from a mapping, keeping unknown keys in `extra`."""
        known = {name for name in cls.__dataclass_fields__ if name != "extra"}
        kwargs = {key: value for key, value in data.items() if key in known}
        extra = {key: value for key, value in data.items() if key not in known}
        return cls(**kwargs, extra=extra)

    def apply_environment(self, environ: Dict[str, str]) -> None:
        """Override settings from environment variables."""
        for env_name, (attribute, convert) in ENV_OVERRIDES.items():
            raw = environ.get(env_name)
            if raw is None or raw == "":
                continue
            try:
                setattr(self, attribute, convert(raw))
            except ValueError:
                logger.warning(f"Ignoring invalid value for {env_name}: {raw!r}")

    def validate(self) -> bool:
        """Validate settings.

        Raises:
            ValueError: If cloud_mode is not one of the supported modes
        """
        if self.cloud_mode is not None:
            self.cloud_mode = self.cloud_mode.lower()
            if self.cloud_mode not in CLOUD_MODES:
                raise ValueError(f"Unknown cloud mode: {self.cloud_mode}. Must be one of: {', '.join(CLOUD_MODES)}")
        return True

    @property
    def resolved_audit_dir(self) -> str:
        """Audit log directory with the default applied."""
        return self.audit_dir or str(Path.home() / ".provisionkit" / "audit-logs")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize settings, masking secrets."""
        data = asdict(self)
        for key in ("vercel_token", "turso_token", "supabase_token", "cloudflare_token", "supabase_db_password"):
            if data.get(key):
                data[key] = "****"
        return data
