"""Cloudflare wrangler CLI wrapper for R2 buckets."""

from __future__ import annotations

import logging
from typing import Optional

from .runner import is_already_exists, is_not_found, run_command

logger = logging.getLogger(__name__)


class WranglerCLI:
    """Creates and deletes R2 buckets through ``wrangler``."""

    COMMAND = "wrangler"
    TOKEN_ENV = "CLOUDFLARE_API_TOKEN"

    def __init__(self, token: Optional[str] = None, account_id: Optional[str] = None, timeout: Optional[float] = None):
        self.token = token
        self.account_id = account_id
        self.timeout = timeout

    def _run(self, *args: str):
        env = {"CLOUDFLARE_ACCOUNT_ID": self.account_id} if self.account_id else None
        return run_command(
            self.COMMAND,
            list(args),
            env=env,
            token=self.token,
            token_env=self.TOKEN_ENV,
            timeout=self.timeout,
        )

    @property
    def endpoint(self) -> Optional[str]:
        if not self.account_id:
            return None
        return f"https://{self.account_id}.r2.cloudflarestorage.com"

    def create_bucket(self, name: str) -> str:
        """Create a bucket, reusing it when it already exists. Returns the bucket name."""
        result = self._run("r2", "bucket", "create", name)
        if not result.ok:
            if is_already_exists(result):
                logger.info(f"R2 bucket {name} already exists, reusing it")
            else:
                result.check(f"create R2 bucket {name}")
        return name

    def delete_bucket(self, name: str) -> bool:
        result = self._run("r2", "bucket", "delete", name)
        if not result.ok and is_not_found(result):
            return False
        result.check(f"delete R2 bucket {name}")
        return True
