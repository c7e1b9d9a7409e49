"""
tagver.operations.ancestry — Commit-graph walk.

Collects every commit reachable from a revision through parent links.  The
walk uses an explicit worklist and a visited map instead of recursion; each
commit is fetched exactly once, however many paths lead to it.
"""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

from tagver.core.models import Commit, Commits, sort_recent_first

logger = logging.getLogger("tagver.operations.ancestry")


class CommitSource(Protocol):
    def read_commits(self, hashes: Sequence[str]) -> list[Commit]:
        """Read commits by full hash; raises ObjectNotFound for a missing one."""
        ...


class RevisionSource(CommitSource, Protocol):
    def resolve_revision(self, revision: str) -> str:
        """Resolve a revision to a commit hash; raises RevisionNotFound."""
        ...


def walk_ancestry(source: CommitSource, start: str) -> Commits:
    """
    Return the commit *start* and all of its ancestors, most recent first.

    Each frontier of unvisited hashes is read from *source* in one call.
    The first error raised by the source aborts the walk.
    """
    visited: dict[str, Commit] = {}
    worklist: list[str] = [start]

    while worklist:
        # dict.fromkeys dedupes while keeping order
        pending = [h for h in dict.fromkeys(worklist) if h not in visited]
        worklist = []
        if not pending:
            break

        for commit in source.read_commits(pending):
            visited[commit.hash] = commit
            worklist.extend(p for p in commit.parents if p not in visited)

    logger.debug("Walked %d commits from %s", len(visited), start[:12])
    return Commits(sort_recent_first(visited.values()))


def resolve_ancestry(source: RevisionSource, revision: str) -> Commits:
    """Resolve *revision* and walk its ancestry."""
    start = source.resolve_revision(revision)
    return walk_ancestry(source, start)
