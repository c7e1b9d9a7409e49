"""
tagver.core.config — Runtime configuration.

Resolution order (highest priority first):
  1. Explicit keyword overrides (CLI options)
  2. Environment variables (TAGVER_GIT_BINARY, TAGVER_GIT_TIMEOUT, …)
  3. Built-in defaults
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from tagver.core.errors import ConfigError


def discover_git_root(start: Path | None = None) -> Path | None:
    """
    Walk up from *start* (default: CWD) looking for a ``.git`` entry.

    Returns the working-tree root (parent of ``.git``), or ``None``.
    ``.git`` may be a file (worktrees, submodules), so only existence is checked.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        if (current / ".git").exists():
            return current
        parent = current.parent
        if parent == current:
            break  # Reached filesystem root
        current = parent
    return None


class TagverConfig(BaseModel):
    """Runtime configuration for the git access layer and the resolver."""
    project_root: Path = Path(".")
    git_binary: str = "git"
    git_timeout: float = Field(default=30.0, gt=0)   # seconds, per git invocation
    revision: str = "HEAD"
    remote_name: str = "origin"

    @classmethod
    def for_project(cls, project_root: Path | None = None, **overrides: Any) -> "TagverConfig":
        """
        Build a config anchored to a project directory.

        If *project_root* is ``None``, :func:`discover_git_root` walks up from
        CWD; if nothing is found CWD is used and git reports the failure later.
        """
        if project_root is None:
            project_root = discover_git_root()
        if project_root is None:
            project_root = Path.cwd()

        # Drop unset CLI options so they do not mask the environment.
        overrides = {k: v for k, v in overrides.items() if v is not None}

        try:
            values: dict[str, Any] = {
                "project_root": project_root,
                "git_binary": os.getenv("TAGVER_GIT_BINARY", "git"),
                "git_timeout": float(os.getenv("TAGVER_GIT_TIMEOUT", "30")),
                "revision": os.getenv("TAGVER_REVISION", "HEAD"),
                "remote_name": os.getenv("TAGVER_REMOTE", "origin"),
            }
            values.update(overrides)
            return cls(**values)
        except ValidationError as exc:
            fields = ", ".join(str(err["loc"][0]) for err in exc.errors() if err["loc"])
            raise ConfigError(f"invalid configuration: {fields or exc}") from exc
        except ValueError as exc:
            raise ConfigError(f"invalid TAGVER_GIT_TIMEOUT: {exc}") from exc
