"""Vercel CLI wrapper for projects, Blob stores, environment variables and domains."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from .runner import CommandResult, is_already_exists, is_not_found, run_command

logger = logging.getLogger(__name__)

STORE_ID_PATTERN = re.compile(r"(store_[A-Za-z0-9]+)")
TOKEN_PATTERN = re.compile(r"(vercel_blob_rw_[A-Za-z0-9_]+)")
PROJECT_ID_PATTERN = re.compile(r"(prj_[A-Za-z0-9]+)")

UNSUPPORTED_SUBCOMMAND_MARKERS = ("unknown command", "unknown argument", "please specify a valid subcommand")


@dataclass(frozen=True)
class VercelProject:
    project_id: str
    name: str
    org_id: Optional[str] = None
    production_url: Optional[str] = None


@dataclass(frozen=True)
class BlobStore:
    store_id: str
    name: str
    read_write_token: Optional[str] = None


class VercelCLI:
    """Thin wrapper around the ``vercel`` CLI.

    Args:
        token: Vercel access token, passed with --token
        scope: Team scope, passed with --scope
        cwd: Project directory commands run in (linked projects)
        timeout: Seconds before a command is abandoned
    """

    COMMAND = "vercel"

    def __init__(
        self,
        token: Optional[str] = None,
        scope: Optional[str] = None,
        cwd: Optional[Union[str, Path]] = None,
        timeout: Optional[float] = None,
    ):
        self.token = token
        self.scope = scope
        self.cwd = cwd
        self.timeout = timeout

    def _run(self, *args: str) -> CommandResult:
        argv = list(args)
        if self.token:
            argv.extend(["--token", self.token])
        if self.scope:
            argv.extend(["--scope", self.scope])
        return run_command(self.COMMAND, argv, cwd=self.cwd, timeout=self.timeout)

    # Projects

    def create_project(self, name: str) -> VercelProject:
        """Create a project (reusing an existing one) and read its identifiers."""
        result = self._run("project", "add", name)
        if not result.ok:
            if is_already_exists(result):
                logger.info(f"Vercel project {name} already exists, reusing it")
            else:
                result.check(f"create Vercel project {name}")
        return self.inspect_project(name)

    def inspect_project(self, name: str) -> VercelProject:
        inspected = self._run("project", "inspect", name).check(f"inspect Vercel project {name}")
        match = PROJECT_ID_PATTERN.search(inspected.output)
        project_id = match.group(1) if match else name
        org_id = None
        link = Path(self.cwd) / ".vercel" / "project.json" if self.cwd else None
        if link is not None and link.is_file():
            with open(link, "r", encoding="utf-8") as f:
                org_id = json.load(f).get("orgId")
        return VercelProject(
            project_id=project_id,
            name=name,
            org_id=org_id,
            production_url=f"https://{name}.vercel.app",
        )

    def remove_project(self, name_or_id: str) -> bool:
        """Remove a project. Returns False if it did not exist."""
        result = self._run("project", "rm", name_or_id, "--yes")
        if not result.ok and is_not_found(result):
            return False
        result.check(f"remove Vercel project {name_or_id}")
        return True

    # Blob stores

    def create_blob_store(self, name: str) -> BlobStore:
        """Create a Blob store and return its id and read-write token.

        Older CLI releases only know ``blob store create``; both spellings are tried.
        """
        result: Optional[CommandResult] = None
        for variant in (["blob", "store", "add", name], ["blob", "store", "create", name]):
            result = self._run(*variant)
            if result.ok or is_already_exists(result):
                break
            if not _is_unsupported_subcommand(result):
                result.check(f"create Vercel Blob store {name}")

        assert result is not None
        if not result.ok and not is_already_exists(result):
            result.check(f"create Vercel Blob store {name}")

        store_match = STORE_ID_PATTERN.search(result.output)
        token_match = TOKEN_PATTERN.search(result.output)
        return BlobStore(
            store_id=store_match.group(1) if store_match else name,
            name=name,
            read_write_token=token_match.group(1) if token_match else None,
        )

    def remove_blob_store(self, store_id: str) -> bool:
        result = self._run("blob", "store", "rm", store_id, "--yes")
        if not result.ok and is_not_found(result):
            return False
        result.check(f"remove Vercel Blob store {store_id}")
        return True

    # Environment variables and domains

    def remove_env(self, key: str, target: str) -> bool:
        result = self._run("env", "rm", key, target, "--yes")
        if not result.ok and is_not_found(result):
            return False
        result.check(f"remove environment variable {key} ({target})")
        return True

    def remove_domain(self, domain: str) -> bool:
        result = self._run("domains", "rm", domain, "--yes")
        if not result.ok and is_not_found(result):
            return False
        result.check(f"remove domain {domain}")
        return True

    def list_env(self, target: str) -> List[str]:
        listed = self._run("env", "ls", target).check(f"list environment variables ({target})")
        keys = []
        for line in listed.stdout.splitlines():
            parts = line.split()
            if parts and re.match(r"^[A-Z_][A-Z0-9_]*$", parts[0]):
                keys.append(parts[0])
        return keys


def _is_unsupported_subcommand(result: CommandResult) -> bool:
    lowered = result.output.lower()
    return any(marker in lowered for marker in UNSUPPORTED_SUBCOMMAND_MARKERS)
