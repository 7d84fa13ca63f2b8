"""Environment file reading and merging.

Env files are read with python-dotenv. ``merge`` uses dotenv's statement parser to find
each binding together with its original text, so it can replace or append keys while
leaving every other line untouched. User comments and ordering survive repeated runs.
"""

from __future__ import annotations

import io
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Dict, List, Mapping, Set, Union

from dotenv import dotenv_values
from dotenv.parser import parse_stream

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

EXPORT_PREFIX = re.compile(r"export[^\S\r\n]+")

# Characters that force a value to be quoted when written
QUOTE_TRIGGERS = re.compile(r"[\s#'\"\\]")

# Escapes understood inside double-quoted dotenv values
DOUBLE_QUOTE_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r"}


def format_value(value: str) -> str:
    """Quote a value only when it would not survive an unquoted round trip.

    Quoted values are kept on one line: newlines are written as ``\\n`` escapes.
    """
    if value == "" or not QUOTE_TRIGGERS.search(value):
        return value
    escaped = "".join(DOUBLE_QUOTE_ESCAPES.get(char, char) for char in value)
    return f'"{escaped}"'


def parse_env_file(file_path: PathLike) -> Dict[str, str]:
    """Parse an env file into a dictionary.

    Later duplicates win and ``${VAR}`` references are returned verbatim. Keys without a
    value are dropped. A missing file yields an empty dict.

    Args:
        file_path: Path to the env file

    Returns:
        Mapping of key to value
    """
    path = Path(file_path)
    if not path.is_file():
        return {}

    values = dotenv_values(path, interpolate=False, encoding="utf-8")
    return {key: value for key, value in values.items() if value is not None}


def _line_ending(text: str) -> str:
    if text.endswith("\r\n"):
        return "\r\n"
    if text.endswith("\n"):
        return "\n"
    return ""


def merge(file_path: PathLike, key_values: Mapping[str, str]) -> None:
    """Merge key/value pairs into an env file.

    The first binding of each incoming key is rewritten in place (keeping an ``export``
    prefix if present) and later bindings of the same key are dropped, so every reader
    sees the new value. Keys not yet in the file are appended in the order given. All
    other lines are preserved byte for byte. The file is replaced atomically.

    Args:
        file_path: Env file to update (created if missing)
        key_values: Keys and values to write
    """
    path = Path(file_path)
    if path.exists():
        with open(path, "r", encoding="utf-8", newline="") as f:
            content = f.read()
    else:
        content = ""

    values = {key: str(value) for key, value in key_values.items()}
    written: Set[str] = set()
    output: List[str] = []

    for binding in parse_stream(io.StringIO(content)):
        text = binding.original.string
        if binding.error or binding.key is None or binding.key not in values:
            output.append(text)
            continue

        # dotenv attaches preceding blank lines to the binding that follows them
        body = text.lstrip()
        leading = text[: len(text) - len(body)]
        if binding.key in written:
            output.append(leading[: leading.rfind("\n") + 1])
            continue

        prefix = "export " if EXPORT_PREFIX.match(body) else ""
        output.append(f"{leading}{prefix}{binding.key}={format_value(values[binding.key])}{_line_ending(text)}")
        written.add(binding.key)

    pending = [key for key in values if key not in written]
    if pending:
        if output and not output[-1].endswith("\n"):
            output[-1] = output[-1] + "\n"
        for key in pending:
            output.append(f"{key}={format_value(values[key])}\n")

    atomic_write(path, "".join(output))
    logger.debug(f"Merged {len(values)} keys into {path}")


def atomic_write(path: Path, content: str) -> None:
    """Write a file through a temp file in the same directory and os.replace."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
