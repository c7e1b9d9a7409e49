"""
tagver.core.models — Pydantic value types for git commits and tags.

All models are frozen: they are built once from repository data and only
ever held in read-only sequences.  Chronological comparisons of commits use
the *committer* signature; tags are compared through the commit they point to.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Callable, Iterable, TypeVar

from pydantic import BaseModel, ConfigDict

SHORT_HASH_LEN = 7
SHORT_MESSAGE_LEN = 100


# ---------------------------------------------------------------------------
# Signature
# ---------------------------------------------------------------------------

class Signature(BaseModel):
    """Who created a commit or tag, and when."""
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    timestamp: datetime

    def before(self, other: Signature) -> bool:
        return self.timestamp < other.timestamp

    def after(self, other: Signature) -> bool:
        return self.timestamp > other.timestamp

    def __str__(self) -> str:
        return f"{self.name} <{self.email}> {format_rfc3339(self.timestamp)}"


def format_rfc3339(ts: datetime) -> str:
    """Render a timestamp as RFC 3339 with second precision (``Z`` for UTC)."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    text = ts.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


# ---------------------------------------------------------------------------
# Commit
# ---------------------------------------------------------------------------

class Commit(BaseModel):
    """
    A git commit.

    Two commits are equal when their hashes are equal, whatever the other
    fields hold.
    """
    model_config = ConfigDict(frozen=True)

    hash: str
    author: Signature
    committer: Signature
    message: str = ""
    parents: tuple[str, ...] = ()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Commit):
            return NotImplemented
        return self.hash == other.hash

    def __hash__(self) -> int:
        return hash(self.hash)

    def before(self, other: Commit) -> bool:
        return self.committer.before(other.committer)

    def after(self, other: Commit) -> bool:
        return self.committer.after(other.committer)

    @property
    def short_hash(self) -> str:
        return self.hash[:SHORT_HASH_LEN]

    @property
    def short_message(self) -> str:
        """First line of the message, truncated to 100 characters."""
        line = self.message.split("\n", 1)[0]
        if len(line) > SHORT_MESSAGE_LEN:
            line = line[:SHORT_MESSAGE_LEN] + " ..."
        return line

    def text(self) -> str:
        """Multi-line form: hash, author, committer and the full message."""
        return (
            f"{self.hash}\n"
            f"Author:    {self.author}\n"
            f"Committer: {self.committer}\n"
            f"{self.message}"
        )

    def __str__(self) -> str:
        return f"{self.short_hash} {self.short_message}"


class Commits(list[Commit]):
    """An ordered sequence of commits (most recent first when produced by a walk)."""

    def index_of(self, commit: Commit) -> int | None:
        """Position of the first commit with the same hash, or ``None``."""
        for i, c in enumerate(self):
            if c == commit:
                return i
        return None


# ---------------------------------------------------------------------------
# Tag
# ---------------------------------------------------------------------------

class TagKind(StrEnum):
    LIGHTWEIGHT = "lightweight"
    ANNOTATED = "annotated"


class Tag(BaseModel):
    """
    A git tag resolved to the commit it points to.

    ``tagger`` and ``message`` are only set for annotated tags.  Two tags are
    equal when their names are equal.
    """
    model_config = ConfigDict(frozen=True)

    kind: TagKind
    hash: str
    name: str
    commit: Commit
    tagger: Signature | None = None
    message: str | None = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def before(self, other: Tag) -> bool:
        return self.commit.before(other.commit)

    def after(self, other: Tag) -> bool:
        return self.commit.after(other.commit)

    def __str__(self) -> str:
        return (
            f"{self.kind.value.title()} {self.hash} {self.name} "
            f"Commit[{self.commit.hash} {self.commit.short_message}]"
        )


TagPredicate = Callable[[Tag], bool]


class Tags(list[Tag]):
    """An ordered sequence of tags with predicate queries."""

    def first(self, predicate: TagPredicate | None = None) -> Tag | None:
        """
        Return the first tag satisfying *predicate*.

        Without a predicate the head element is returned.  ``None`` means no
        tag matched (or the sequence is empty).
        """
        if predicate is None:
            return self[0] if self else None
        for tag in self:
            if predicate(tag):
                return tag
        return None

    def last(self, predicate: TagPredicate | None = None) -> Tag | None:
        """Same as :meth:`first`, scanning from the tail."""
        if predicate is None:
            return self[-1] if self else None
        for tag in reversed(self):
            if predicate(tag):
                return tag
        return None

    def select(self, predicate: TagPredicate) -> tuple[Tags, Tags]:
        """Partition into (matching, non-matching), keeping relative order."""
        selected, unselected = Tags(), Tags()
        for tag in self:
            (selected if predicate(tag) else unselected).append(tag)
        return selected, unselected


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------

_T = TypeVar("_T", Commit, Tag)


def _recency_key(item: Commit | Tag) -> tuple[datetime, str, str]:
    # Committer time, then hash, then name: lightweight tags on one commit
    # share a hash.
    if isinstance(item, Tag):
        return item.commit.committer.timestamp, item.hash, item.name
    return item.committer.timestamp, item.hash, ""


def sort_recent_first(items: Iterable[_T]) -> list[_T]:
    """Sort commits or tags from the most recent to the least recent."""
    return sorted(items, key=_recency_key, reverse=True)
