"""
tagver.operations.resolver — Version resolution.

Maps {tags, ordered commit history, working-tree state} to a semantic version:

* HEAD exactly on a semver tag with a clean tree  ->  the tag's version (``1.2.3``)
* commits after the tag, or a dirty tree          ->  next patch with a
  ``<commits ahead>.<signature>`` pre-release (``1.2.4-3.8d2f152``, ``1.2.4-0.dev``)
* no usable tag                                   ->  ``0.1.0-<commit count>.<signature>``

The signature is the 7-character HEAD hash for a clean tree, ``dev`` otherwise.
"""

from __future__ import annotations

import logging
from typing import Protocol

from pydantic import BaseModel

from tagver.core.models import SHORT_HASH_LEN, Commit, Commits, Tag, Tags
from tagver.core.semver import SemVer

logger = logging.getLogger("tagver.operations.resolver")

INITIAL_VERSION = SemVer(major=0, minor=1, patch=0)
DIRTY_SIGNATURE = "dev"


class RepositorySource(Protocol):
    def is_clean(self) -> bool: ...

    def head(self) -> tuple[str, str]: ...

    def tags(self) -> Tags: ...

    def ancestry_of(self, revision: str) -> Commits: ...


class Resolution(BaseModel):
    """The resolved version together with what it was derived from."""
    version: SemVer
    anchor: Tag | None = None
    ahead: int = 0                          # Commits between the anchor (or the root) and HEAD
    is_clean: bool = True
    head_hash: str = ""
    branch: str = ""


def build_signature(is_clean: bool, head_hash: str) -> str:
    return head_hash[:SHORT_HASH_LEN] if is_clean else DIRTY_SIGNATURE


def select_anchor(tags: Tags, head: Commit) -> Tag | None:
    """
    The most recent tag that is not after *head* and whose name is a semver.

    Tags failing either check are skipped; the scan goes on past them.
    """
    def usable(tag: Tag) -> bool:
        if tag.commit.after(head):
            return False
        return SemVer.parse(tag.name) is not None

    return tags.first(usable)


def _resolve(tags: Tags, commits: Commits, is_clean: bool, head_hash: str) -> tuple[SemVer, Tag | None, int]:
    if not commits:
        raise ValueError("cannot resolve a version without any commit")

    signature = build_signature(is_clean, head_hash)
    anchor = select_anchor(tags, commits[0])

    if anchor is None:
        # Never tagged: the commit count acts as a build ordinal.
        count = len(commits)
        return INITIAL_VERSION.with_prerelease(str(count), signature), None, count

    base = SemVer.parse(anchor.name)
    assert base is not None  # guaranteed by select_anchor

    count = commits.index_of(anchor.commit) or 0
    if count > 0 or not is_clean:
        return base.next().with_prerelease(str(count), signature), anchor, count
    return base, anchor, count


def resolve_version(tags: Tags, commits: Commits, is_clean: bool, head_hash: str) -> SemVer:
    """
    Resolve the current version.

    *tags* and *commits* must be sorted most recent first; ``commits[0]`` is
    taken as HEAD.  Raises ``ValueError`` when *commits* is empty.
    """
    version, _, _ = _resolve(tags, commits, is_clean, head_hash)
    return version


def resolve_detailed(repository: RepositorySource, revision: str = "HEAD") -> Resolution:
    """
    Query *repository* and resolve its version, keeping the intermediate facts.

    For a revision other than ``HEAD`` the working tree is not consulted: the
    revision is versioned as if checked out clean.
    """
    if revision == "HEAD":
        is_clean = repository.is_clean()
        head_hash, branch = repository.head()
        tags = repository.tags()
        commits = repository.ancestry_of(revision)
    else:
        tags = repository.tags()
        commits = repository.ancestry_of(revision)
        is_clean, branch = True, revision
        head_hash = commits[0].hash if commits else ""

    version, anchor, ahead = _resolve(tags, commits, is_clean, head_hash)
    logger.debug(
        "Resolved %s (anchor=%s, ahead=%d, clean=%s)",
        version,
        anchor.name if anchor else "none",
        ahead,
        is_clean,
    )
    return Resolution(
        version=version,
        anchor=anchor,
        ahead=ahead,
        is_clean=is_clean,
        head_hash=head_hash,
        branch=branch,
    )


def resolve(repository: RepositorySource, revision: str = "HEAD") -> SemVer:
    """Resolve the version of *repository*; any git failure propagates."""
    return resolve_detailed(repository, revision).version
