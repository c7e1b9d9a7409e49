"""
tagver.operations.catalog — Tag catalog.

Classifies every ``refs/tags/*`` reference as lightweight or annotated,
resolves it to the commit it points to, and returns the tags sorted from the
most recent commit to the least recent.
"""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

from tagver.core.models import Commit, Tag, TagKind, Tags, sort_recent_first
from tagver.vcs.objects import TagObject, TagRef

logger = logging.getLogger("tagver.operations.catalog")


class TagSource(Protocol):
    def tag_refs(self) -> list[TagRef]: ...

    def read_tag_objects(self, hashes: Sequence[str]) -> list[TagObject]: ...

    def read_commits(self, hashes: Sequence[str]) -> list[Commit]: ...


def _build_tags(source: TagSource, refs: list[TagRef]) -> Tags:
    annotated = [r for r in refs if r.object_type == "tag"]
    tag_objects = {
        obj.object_hash: obj
        for obj in source.read_tag_objects([r.object_hash for r in annotated])
    }

    def target_of(ref: TagRef) -> str:
        if ref.object_type == "tag":
            return tag_objects[ref.object_hash].target
        return ref.object_hash

    # A ref that is not a tag object must point straight at a commit;
    # read_commits raises for anything else.
    targets = list(dict.fromkeys(target_of(r) for r in refs))
    commits = {c.hash: c for c in source.read_commits(targets)}

    tags = Tags()
    for ref in refs:
        commit = commits[target_of(ref)]
        if ref.object_type == "tag":
            obj = tag_objects[ref.object_hash]
            tags.append(Tag(
                kind=TagKind.ANNOTATED,
                hash=obj.object_hash,
                name=obj.name,
                tagger=obj.tagger,
                message=obj.message,
                commit=commit,
            ))
        else:
            tags.append(Tag(
                kind=TagKind.LIGHTWEIGHT,
                hash=ref.object_hash,
                name=ref.name,
                commit=commit,
            ))
    return tags


def list_tags(source: TagSource) -> Tags:
    """All tags of the repository, most recent first."""
    tags = _build_tags(source, source.tag_refs())
    logger.debug("Listed %d tags", len(tags))
    return Tags(sort_recent_first(tags))


def find_tag(source: TagSource, name: str) -> Tag | None:
    """Look a single tag up by its name (without the ``refs/tags/`` prefix)."""
    refs = [r for r in source.tag_refs() if r.name == name]
    if not refs:
        return None
    return _build_tags(source, refs)[0]
