"""
tagver — semantic versions derived from git history.

Resolves "what version am I at right now" from the tags, the commit ancestry
graph and the working-tree state of a git repository.
"""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

_DISTRIBUTION = "tagver"


def _checkout_version(pyproject: Path) -> str | None:
    """``[project].version`` of a source checkout, if *pyproject* is ours."""
    try:
        project = tomllib.loads(pyproject.read_text(encoding="utf-8")).get("project", {})
    except (OSError, tomllib.TOMLDecodeError):
        return None
    if project.get("name") != _DISTRIBUTION:
        return None
    found = project.get("version")
    if not isinstance(found, str):
        return None
    return found.strip() or None


def _resolve_version() -> str:
    # Source checkout first, then installed metadata.
    local = _checkout_version(Path(__file__).resolve().parents[1] / "pyproject.toml")
    if local:
        return local
    try:
        return version(_DISTRIBUTION)
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _resolve_version()
