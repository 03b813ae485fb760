"""topicgraph: module/topic dependency catalogs rendered as graphs."""

from __future__ import annotations

import re
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from .models import Module, ModuleCollection, Topic

__all__ = ["Module", "ModuleCollection", "Topic", "__version__"]

_VERSION_RE = re.compile(r'^version\s*=\s*"([^"]+)"\s*$')


def _version_from_pyproject() -> str | None:
    """Read [project].version from a pyproject.toml next to a source checkout."""
    for base in Path(__file__).resolve().parents:
        pyproject = base / "pyproject.toml"
        if not pyproject.exists():
            continue
        in_project = False
        for line in pyproject.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if stripped.startswith("[") and stripped.endswith("]"):
                in_project = stripped == "[project]"
            elif in_project and (match := _VERSION_RE.match(stripped)):
                return match.group(1)
        return None
    return None


try:
    __version__ = _version_from_pyproject() or version("topicgraph")
except PackageNotFoundError:
    __version__ = "0+unknown"
