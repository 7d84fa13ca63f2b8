"""Supabase CLI wrapper."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..errors import VendorCommandError
from .runner import is_already_exists, is_not_found, run_command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SupabaseProject:
    ref: str
    name: str
    url: str
    service_role_key: Optional[str] = None
    anon_key: Optional[str] = None


class SupabaseCLI:
    """Creates and deletes Supabase projects through the ``supabase`` CLI."""

    COMMAND = "supabase"
    TOKEN_ENV = "SUPABASE_ACCESS_TOKEN"

    def __init__(
        self,
        token: Optional[str] = None,
        org_id: Optional[str] = None,
        region: Optional[str] = None,
        db_password: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.token = token
        self.org_id = org_id
        self.region = region
        self.db_password = db_password
        self.timeout = timeout

    def _run(self, *args: str):
        return run_command(
            self.COMMAND,
            list(args),
            token=self.token,
            token_env=self.TOKEN_ENV,
            timeout=self.timeout,
        )

    def create_project(self, name: str) -> SupabaseProject:
        """Create a project (reusing an existing one with the same name) and read its keys.

        Raises:
            VendorCommandError: If the project cannot be created or its keys cannot be read
        """
        args = ["projects", "create", name, "--db-password", self.db_password or secrets.token_urlsafe(24)]
        if self.org_id:
            args.extend(["--org-id", self.org_id])
        if self.region:
            args.extend(["--region", self.region])
        args.extend(["--yes", "--output", "json"])

        result = self._run(*args)
        if result.ok:
            info = result.json()
        elif is_already_exists(result):
            logger.info(f"Supabase project {name} already exists, reusing it")
            info = self.find_project(name)
            if info is None:
                result.check(f"create Supabase project {name}")
        else:
            result.check(f"create Supabase project {name}")

        ref = info.get("id") or info.get("ref")
        if not ref:
            raise VendorCommandError(f"Supabase did not return a project ref for {name}", command=self.COMMAND)

        keys = self.get_api_keys(ref)
        return SupabaseProject(
            ref=ref,
            name=name,
            url=f"https://{ref}.supabase.co",
            service_role_key=keys.get("service_role"),
            anon_key=keys.get("anon"),
        )

    def find_project(self, name: str) -> Optional[Dict[str, Any]]:
        listed = self._run("projects", "list", "--output", "json").check("list Supabase projects")
        projects: List[Dict[str, Any]] = listed.json() or []
        for project in projects:
            if project.get("name") == name or project.get("id") == name:
                return project
        return None

    def get_api_keys(self, ref: str) -> Dict[str, str]:
        """Return API keys keyed by name (anon, service_role)."""
        result = self._run("projects", "api-keys", "--project-ref", ref, "--output", "json")
        data = result.check(f"read API keys for Supabase project {ref}").json()
        if isinstance(data, list):
            return {item.get("name", ""): item.get("api_key", "") for item in data}
        return dict(data or {})

    def delete_project(self, ref: str) -> bool:
        """Delete a project.

        Returns:
            True if deleted, False if it did not exist
        """
        result = self._run("projects", "delete", ref, "--yes")
        if not result.ok and is_not_found(result):
            return False
        result.check(f"delete Supabase project {ref}")
        return True
