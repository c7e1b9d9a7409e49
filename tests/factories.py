"""
Test doubles for tagver: value factories, an in-memory repository that
satisfies the repository-access protocols, and a builder for real throwaway
git repositories.
"""

from __future__ import annotations

import hashlib
import os
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Sequence

from tagver.core.errors import ObjectNotFound, RevisionNotFound
from tagver.core.models import Commit, Commits, Signature, Tag, TagKind, Tags
from tagver.operations.ancestry import resolve_ancestry
from tagver.operations.catalog import list_tags
from tagver.vcs.objects import TagObject, TagRef

EPOCH = datetime(2020, 10, 12, 9, 0, 0, tzinfo=timezone(timedelta(hours=-4)))


def at(minutes: int) -> datetime:
    return EPOCH + timedelta(minutes=minutes)


def signature(minutes: int, name: str = "Jane Doe", email: str = "jane@doe.com") -> Signature:
    return Signature(name=name, email=email, timestamp=at(minutes))


def commit(hash: str, minutes: int, parents: Sequence[str] = (), message: str = "") -> Commit:
    return Commit(
        hash=hash,
        author=signature(minutes, "John Doe", "john@doe.com"),
        committer=signature(minutes),
        message=message or f"commit {hash[:7]}",
        parents=tuple(parents),
    )


def lightweight(name: str, target: Commit) -> Tag:
    return Tag(kind=TagKind.LIGHTWEIGHT, hash=target.hash, name=name, commit=target)


def annotated(name: str, target: Commit, hash: str | None = None) -> Tag:
    return Tag(
        kind=TagKind.ANNOTATED,
        hash=hash or hashlib.sha1(name.encode()).hexdigest(),
        name=name,
        commit=target,
        tagger=target.committer,
        message=f"Release {name}\n",
    )


class FakeRepository:
    """In-memory repository; records every batch of commits it is asked for."""

    def __init__(
        self,
        commits: Sequence[Commit] = (),
        tags: Sequence[Tag] = (),
        *,
        head: str | None = None,
        branch: str = "main",
        clean: bool = True,
    ) -> None:
        self.commits = {c.hash: c for c in commits}
        self._tags = list(tags)
        self._head = head
        self._branch = branch
        self._clean = clean
        self.reads: list[list[str]] = []

    # -- RevisionSource / CommitSource -------------------------------------

    def resolve_revision(self, revision: str) -> str:
        if revision == "HEAD" and self._head:
            return self._head
        if revision in self.commits:
            return revision
        raise RevisionNotFound(revision)

    def read_commits(self, hashes: Sequence[str]) -> list[Commit]:
        self.reads.append(list(hashes))
        missing = [h for h in hashes if h not in self.commits]
        if missing:
            raise ObjectNotFound(missing[0])
        return [self.commits[h] for h in hashes]

    # -- TagSource ---------------------------------------------------------

    def tag_refs(self) -> list[TagRef]:
        return [
            TagRef(
                name=t.name,
                object_hash=t.hash,
                object_type="tag" if t.kind is TagKind.ANNOTATED else "commit",
            )
            for t in self._tags
        ]

    def read_tag_objects(self, hashes: Sequence[str]) -> list[TagObject]:
        by_hash = {t.hash: t for t in self._tags if t.kind is TagKind.ANNOTATED}
        objects = []
        for h in hashes:
            if h not in by_hash:
                raise ObjectNotFound(h)
            t = by_hash[h]
            objects.append(TagObject(
                object_hash=t.hash,
                name=t.name,
                target=t.commit.hash,
                target_type="commit",
                tagger=t.tagger,
                message=t.message or "",
            ))
        return objects

    # -- RepositorySource --------------------------------------------------

    def is_clean(self) -> bool:
        return self._clean

    def head(self) -> tuple[str, str]:
        return self.resolve_revision("HEAD"), self._branch

    def tags(self) -> Tags:
        return list_tags(self)

    def ancestry_of(self, revision: str) -> Commits:
        return resolve_ancestry(self, revision)


# ---------------------------------------------------------------------------
# Real git repositories
# ---------------------------------------------------------------------------

class GitRepoBuilder:
    """Creates commits and tags in a real repository with fixed timestamps."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._clock = 1_600_000_000
        self._run("init", "-q")
        self._run("config", "user.name", "Jane Doe")
        self._run("config", "user.email", "jane@doe.com")
        self._run("config", "commit.gpgsign", "false")
        self._run("config", "tag.gpgsign", "false")

    def _run(self, *args: str, env: dict[str, str] | None = None) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            capture_output=True,
            text=True,
            check=True,
            env={**os.environ, **(env or {})},
        )
        return result.stdout.strip()

    def _dated_env(self) -> dict[str, str]:
        self._clock += 3600
        date = f"@{self._clock} +0000"
        return {"GIT_AUTHOR_DATE": date, "GIT_COMMITTER_DATE": date}

    def commit(self, message: str, filename: str | None = None) -> str:
        name = filename or f"file{self._clock}.txt"
        (self.path / name).write_text(message + "\n", encoding="utf-8")
        self._run("add", name)
        self._run("commit", "-q", "-m", message, env=self._dated_env())
        return self._run("rev-parse", "HEAD")

    def tag(self, name: str, message: str | None = None, rev: str = "HEAD") -> None:
        if message is None:
            self._run("tag", name, rev)
        else:
            self._run("tag", "-a", name, "-m", message, rev, env=self._dated_env())

    def branch(self, name: str) -> None:
        self._run("checkout", "-q", "-b", name)

    def checkout(self, rev: str) -> None:
        self._run("checkout", "-q", rev)

    def merge(self, branch: str, message: str) -> str:
        self._run("merge", "-q", "--no-ff", "-m", message, branch, env=self._dated_env())
        return self._run("rev-parse", "HEAD")

    def current_branch(self) -> str:
        return self._run("rev-parse", "--abbrev-ref", "HEAD")
