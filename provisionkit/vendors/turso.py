"""Turso CLI wrapper."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from ..errors import VendorCommandError
from .runner import is_already_exists, is_not_found, run_command

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"(libsql://\S+)")


@dataclass(frozen=True)
class TursoDatabase:
    name: str
    url: str
    auth_token: str


class TursoCLI:
    """Creates and destroys Turso databases through the ``turso`` CLI.

    Args:
        token: Turso API token (TURSO_API_TOKEN)
        group: Database group to create databases in
        location: Primary location (optional)
        timeout: Seconds before a command is abandoned
    """

    COMMAND = "turso"
    TOKEN_ENV = "TURSO_API_TOKEN"

    def __init__(
        self,
        token: Optional[str] = None,
        group: str = "default",
        location: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.token = token
        self.group = group
        self.location = location
        self.timeout = timeout

    def _run(self, *args: str):
        return run_command(
            self.COMMAND,
            list(args),
            token=self.token,
            token_env=self.TOKEN_ENV,
            timeout=self.timeout,
        )

    def create_database(self, name: str) -> TursoDatabase:
        """Create a database (reusing it if it exists) and issue an auth token.

        Raises:
            VendorCommandError: If any turso command fails
        """
        args = ["db", "create", name, "--group", self.group]
        if self.location:
            args.extend(["--location", self.location])

        result = self._run(*args)
        if not result.ok:
            if is_already_exists(result):
                logger.info(f"Turso database {name} already exists, reusing it")
            else:
                result.check(f"create Turso database {name}")

        url = self.get_url(name)
        token = self._run("db", "tokens", "create", name).check(f"create token for Turso database {name}")
        return TursoDatabase(name=name, url=url, auth_token=token.stdout.strip())

    def get_url(self, name: str) -> str:
        shown = self._run("db", "show", name, "--url").check(f"read url of Turso database {name}")
        match = URL_PATTERN.search(shown.stdout)
        if not match:
            raise VendorCommandError(
                f"Could not find a url for Turso database {name}",
                command=self.COMMAND,
                args=["db", "show", name, "--url"],
                stderr=shown.stdout,
            )
        return match.group(1)

    def find_database(self, url: str) -> Optional[str]:
        """Find the name of the database serving a libsql url.

        Database hostnames are ``<name>-<org>.turso.io``, so the name cannot be read off the
        url alone. The url column of ``turso db list`` is matched first, then the longest
        listed name that prefixes the hostname label.

        Returns:
            Database name, or None if no listed database matches
        """
        hostname = urlparse(url).hostname or url
        listed = self._run("db", "list").check("list Turso databases")

        names = []
        for line in listed.stdout.splitlines():
            fields = line.split()
            if not fields or fields[0].upper() == "NAME":
                continue
            if any(hostname in field for field in fields[1:]):
                return fields[0]
            names.append(fields[0])

        label = hostname.split(".")[0]
        candidates = [name for name in names if label.startswith(f"{name}-")]
        return max(candidates, key=len) if candidates else None

    def destroy_database(self, name: str) -> bool:
        """Destroy a database.

        Returns:
            True if deleted, False if it did not exist
        """
        result = self._run("db", "destroy", name, "--yes")
        if not result.ok and is_not_found(result):
            return False
        result.check(f"destroy Turso database {name}")
        return True
