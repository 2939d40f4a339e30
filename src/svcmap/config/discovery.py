"""Config file discovery.

Walks up from the working directory, the way git finds ``.git/``. In each
directory it looks for ``svcmap.toml``, then ``.svcmap.toml``, then a
``pyproject.toml`` that declares a ``[tool.svcmap]`` table. The
``SVCMAP_CONFIG`` env var and the ``--config`` flag bypass the walk.
"""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Iterator
from pathlib import Path
from typing import Any

CONFIG_FILENAME = "svcmap.toml"
HIDDEN_CONFIG_FILENAME = ".svcmap.toml"
PYPROJECT_FILENAME = "pyproject.toml"
_TOOL_TABLE_HEADER = re.compile(r"^\[tool\.svcmap[.\]]", re.MULTILINE)
CONFIG_ENV_VAR = "SVCMAP_CONFIG"


def _walk_up(start: Path | None) -> Iterator[Path]:
    current = (start or Path.cwd()).resolve()
    yield current
    yield from current.parents


def _declares_tool_table(pyproject: Path) -> bool:
    return _TOOL_TABLE_HEADER.search(pyproject.read_text(encoding="utf-8")) is not None


def find_config(start: Path | None = None) -> Path | None:
    """Return the nearest config file above *start* (default: cwd), or None.

    An ``SVCMAP_CONFIG`` value wins over the walk; if it names a missing
    file, no config is used at all.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    for directory in _walk_up(start):
        for name in (CONFIG_FILENAME, HIDDEN_CONFIG_FILENAME):
            candidate = directory / name
            if candidate.is_file():
                return candidate
        pyproject = directory / PYPROJECT_FILENAME
        if pyproject.is_file() and _declares_tool_table(pyproject):
            return pyproject
    return None


def read_config_table(path: Path) -> dict[str, Any]:
    """Parse *path* and return the svcmap settings table.

    For ``pyproject.toml`` that is ``[tool.svcmap]``; any other file is
    the table itself.

    Raises:
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    data = tomllib.loads(path.read_text(encoding="utf-8"))
    if path.name == PYPROJECT_FILENAME:
        table: dict[str, Any] = data.get("tool", {}).get("svcmap", {})
        return table
    return data
