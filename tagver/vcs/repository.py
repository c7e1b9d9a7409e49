"""
tagver.vcs.repository — Read-only access to a git repository through the
``git`` binary.

``GitRepository`` is the repository-access collaborator consumed by the
ancestry walker, the tag catalog and the version resolver.  It never writes
to the repository.  Every git failure surfaces as a
:class:`~tagver.core.errors.GitError` subclass.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Sequence

from tagver.core.config import TagverConfig, discover_git_root
from tagver.core.errors import (
    InvalidRemoteURL,
    ObjectNotFound,
    RepositoryAccessError,
    RevisionNotFound,
)
from tagver.core.models import Commit, Commits, Tag, Tags
from tagver.operations.ancestry import resolve_ancestry
from tagver.operations.catalog import find_tag, list_tags
from tagver.vcs.objects import RawObject, TagObject, TagRef, parse_batch, parse_commit, parse_tag

logger = logging.getLogger("tagver.vcs")

# ---------------------------------------------------------------------------
# Remote URLs
# ---------------------------------------------------------------------------

_ID = r"[A-Za-z][0-9A-Za-z-]+[0-9A-Za-z]"
_DOMAIN = rf"{_ID}\.[A-Za-z]{{2,63}}"
_REPO_PATH = rf"(?:{_ID}/){{1,20}}{_ID}"
_HTTPS_RE = re.compile(rf"https://(?P<domain>{_DOMAIN})/(?P<path>{_REPO_PATH})(?:\.git)?")
_SSH_RE = re.compile(rf"git@(?P<domain>{_DOMAIN}):(?P<path>{_REPO_PATH})(?:\.git)?")


def parse_remote_url(url: str) -> tuple[str, str]:
    """
    Split a remote URL into its domain and repository path.

    Accepted shapes::

        https://github.com/octocat/Hello-World.git  ->  ("github.com", "octocat/Hello-World")
        git@github.com:octocat/Hello-World.git      ->  ("github.com", "octocat/Hello-World")
    """
    for pattern in (_HTTPS_RE, _SSH_RE):
        if m := pattern.fullmatch(url):
            return m.group("domain"), m.group("path")
    raise InvalidRemoteURL(url)


def detect_git(path: Path | str) -> Path:
    """Return the working-tree root containing *path*, walking up to ``/``."""
    path = Path(path)
    if not path.exists():
        raise RepositoryAccessError(f"path does not exist: {path}")
    root = discover_git_root(path)
    if root is None:
        raise RepositoryAccessError(f"git path not found: {path}")
    return root


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class GitRepository:
    """Repository access backed by ``git`` subprocesses."""

    def __init__(self, config: TagverConfig) -> None:
        self.config = config
        self._root = config.project_root

    @classmethod
    def open(cls, path: Path | str | None = None, **overrides) -> GitRepository:
        """Open the repository containing *path* (default: CWD)."""
        root = detect_git(path) if path is not None else None
        repo = cls(TagverConfig.for_project(root, **overrides))
        # Fail early with a git error rather than on the first query.
        repo._git("rev-parse", "--git-dir")
        return repo

    # ------------------------------------------------------------------
    # Repository state
    # ------------------------------------------------------------------

    def path(self) -> Path:
        """Root path of the working tree."""
        return Path(self._git("rev-parse", "--show-toplevel").strip())

    def is_clean(self) -> bool:
        """True when nothing is staged, modified or untracked."""
        return not self._git("status", "--porcelain").strip()

    def head(self) -> tuple[str, str]:
        """Return ``(hash, branch)`` of HEAD; branch is ``"HEAD"`` when detached."""
        head_hash = self.resolve_revision("HEAD")
        branch = self._git("rev-parse", "--abbrev-ref", "HEAD").strip()
        return head_hash, branch

    def remote(self, name: str | None = None) -> tuple[str, str]:
        """Domain and path of a remote (default: the configured remote)."""
        name = name or self.config.remote_name
        url = self._git("remote", "get-url", name).strip()
        return parse_remote_url(url)

    # ------------------------------------------------------------------
    # Revisions and objects
    # ------------------------------------------------------------------

    def resolve_revision(self, revision: str) -> str:
        """Resolve a revision (branch, tag, ``HEAD``, hash …) to a commit hash."""
        result = self._run("rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}")
        if result.returncode == 1:
            raise RevisionNotFound(revision)
        self._check(result, "rev-parse")
        return result.stdout.decode("utf-8").strip()

    def read_objects(self, names: Sequence[str]) -> list[RawObject]:
        """Read several objects in a single ``git cat-file --batch`` call."""
        names = list(names)
        if not names:
            return []
        payload = ("\n".join(names) + "\n").encode("utf-8")
        result = self._run("cat-file", "--batch", input=payload)
        self._check(result, "cat-file")
        return parse_batch(result.stdout, names)

    def read_commits(self, hashes: Sequence[str]) -> list[Commit]:
        commits: list[Commit] = []
        for obj in self.read_objects(hashes):
            if obj.missing:
                raise ObjectNotFound(obj.name)
            if obj.object_type != "commit":
                raise ObjectNotFound(obj.name, f"expected a commit, found a {obj.object_type}")
            commits.append(parse_commit(obj.object_hash, obj.body))
        return commits

    def read_tag_objects(self, hashes: Sequence[str]) -> list[TagObject]:
        tags: list[TagObject] = []
        for obj in self.read_objects(hashes):
            if obj.missing:
                raise ObjectNotFound(obj.name)
            if obj.object_type != "tag":
                raise ObjectNotFound(obj.name, f"expected a tag, found a {obj.object_type}")
            tags.append(parse_tag(obj.object_hash, obj.body))
        return tags

    def tag_refs(self) -> list[TagRef]:
        out = self._git(
            "for-each-ref",
            "--format=%(objectname) %(objecttype) %(refname)",
            "refs/tags",
        )
        refs: list[TagRef] = []
        for line in out.splitlines():
            if not line.strip():
                continue
            object_hash, object_type, refname = line.split(" ", 2)
            refs.append(TagRef(
                name=refname.removeprefix("refs/tags/"),
                object_hash=object_hash,
                object_type=object_type,
            ))
        return refs

    # ------------------------------------------------------------------
    # Higher-level queries
    # ------------------------------------------------------------------

    def tags(self) -> Tags:
        return list_tags(self)

    def tag(self, name: str) -> Tag | None:
        return find_tag(self, name)

    def ancestry_of(self, revision: str) -> Commits:
        return resolve_ancestry(self, revision)

    # ------------------------------------------------------------------
    # Git helpers
    # ------------------------------------------------------------------

    def _run(self, *args: str, input: bytes | None = None) -> subprocess.CompletedProcess[bytes]:
        """Run a git command in the repo root without checking its status."""
        cmd = [self.config.git_binary, *args]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            return subprocess.run(
                cmd,
                input=input,
                capture_output=True,
                cwd=str(self._root),
                timeout=self.config.git_timeout,
            )
        except FileNotFoundError as exc:
            raise RepositoryAccessError(f"git executable not found: {self.config.git_binary}") from exc
        except subprocess.TimeoutExpired as exc:
            raise RepositoryAccessError(
                f"git {args[0]} timed out after {self.config.git_timeout:g}s"
            ) from exc

    @staticmethod
    def _check(result: subprocess.CompletedProcess[bytes], command: str) -> None:
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace")
            raise RepositoryAccessError(f"git {command} failed (exit {result.returncode})", stderr)

    def _git(self, *args: str) -> str:
        """Run a git command and return its stdout as text."""
        result = self._run(*args)
        self._check(result, args[0])
        return result.stdout.decode("utf-8", errors="replace")
