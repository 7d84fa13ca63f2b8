"""Vendor CLI execution.

Every vendor CLI (turso, supabase, vercel, wrangler) is invoked through ``run_command`` so
that process errors, timeouts and non-zero exits surface as VendorCommandError with the raw
stderr attached.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from ..errors import VendorCommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Captured output of a finished vendor command."""

    command: str
    args: Sequence[str]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr, used for message matching."""
        return f"{self.stdout}\n{self.stderr}".strip()

    def check(self, description: str) -> "CommandResult":
        """Raise VendorCommandError unless the command succeeded.

        Args:
            description: What the command was doing (e.g. "create Turso database my-app-dev")

        Returns:
            self, for chaining
        """
        if not self.ok:
            raise VendorCommandError(
                f"Failed to {description} ({self.command} exited with {self.exit_code})",
                command=self.command,
                args=self.args,
                exit_code=self.exit_code,
                stderr=self.stderr or self.stdout,
            )
        return self

    def json(self) -> Any:
        """Parse stdout as JSON.

        Raises:
            VendorCommandError: If stdout is not valid JSON
        """
        try:
            return json.loads(self.stdout)
        except json.JSONDecodeError as e:
            raise VendorCommandError(
                f"Unexpected output from {self.command}: {e}",
                command=self.command,
                args=self.args,
                exit_code=self.exit_code,
                stderr=self.stdout[:500],
            ) from e


def run_command(
    command: str,
    args: Sequence[str],
    *,
    cwd: Optional[Union[str, Path]] = None,
    env: Optional[Dict[str, str]] = None,
    token: Optional[str] = None,
    token_env: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CommandResult:
    """Run a vendor CLI and capture its output.

    A non-zero exit code is returned, not raised; call ``CommandResult.check`` to turn it into
    an error. Failing to start the process or exceeding the timeout raises immediately.

    Args:
        command: Executable name
        args: Argument vector
        cwd: Working directory
        env: Extra environment variables (merged over os.environ)
        token: Access token passed to the process through `token_env`
        token_env: Environment variable name for `token`
        timeout: Seconds before the process is killed

    Returns:
        CommandResult with exit code and captured output

    Raises:
        VendorCommandError: If the executable is missing, cannot start, or times out
    """
    argv = [command, *args]
    process_env = dict(os.environ)
    if env:
        process_env.update(env)
    if token and token_env:
        process_env[token_env] = token

    logger.debug(f"Running: {command} {' '.join(_redact(args))}")

    try:
        completed = subprocess.run(
            argv,
            cwd=str(cwd) if cwd else None,
            env=process_env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as e:
        raise VendorCommandError(
            f"{command} CLI not found. Install it and make sure it is on PATH.",
            command=command,
            args=args,
        ) from e
    except subprocess.TimeoutExpired as e:
        raise VendorCommandError(
            f"{command} timed out after {timeout}s",
            command=command,
            args=args,
            stderr=_decode(e.stderr),
        ) from e
    except OSError as e:
        raise VendorCommandError(f"Could not run {command}: {e}", command=command, args=args) from e

    result = CommandResult(
        command=command,
        args=tuple(args),
        exit_code=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
    if not result.ok:
        logger.debug(f"{command} exited with {result.exit_code}: {result.stderr.strip()[:200]}")
    return result


SECRET_FLAGS = ("--token", "--db-password")


def _redact(args: Sequence[str]) -> List[str]:
    """Replace the values of secret flags with asterisks for logging."""
    redacted: List[str] = []
    hide_next = False
    for arg in args:
        redacted.append("****" if hide_next else arg)
        hide_next = arg in SECRET_FLAGS
    return redacted


def _decode(data: Union[bytes, str, None]) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


ALREADY_EXISTS_MARKERS = ("already exists", "already taken", "name is taken", "conflict")
NOT_FOUND_MARKERS = ("not found", "does not exist", "no such", "could not find", "404")
TRANSIENT_MARKERS = ("rate limit", "too many requests", "429", "timed out", "timeout", "temporarily unavailable")


def _matches(text: str, markers: Sequence[str]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


def is_already_exists(error: Union[VendorCommandError, CommandResult]) -> bool:
    return _matches(_error_text(error), ALREADY_EXISTS_MARKERS)


def is_not_found(error: Union[VendorCommandError, CommandResult]) -> bool:
    return _matches(_error_text(error), NOT_FOUND_MARKERS)


def is_transient(error: Union[VendorCommandError, CommandResult]) -> bool:
    return _matches(_error_text(error), TRANSIENT_MARKERS)


def _error_text(error: Union[VendorCommandError, CommandResult]) -> str:
    if isinstance(error, CommandResult):
        return error.output
    return str(error)
