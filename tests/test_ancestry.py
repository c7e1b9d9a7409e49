"""Tests for the commit-graph walk."""

from __future__ import annotations

import random

import pytest

from tagver.core.errors import ObjectNotFound, RevisionNotFound
from tagver.core.models import sort_recent_first
from tagver.operations.ancestry import resolve_ancestry, walk_ancestry
from tests.factories import FakeRepository, commit


def h(n: int) -> str:
    return f"{n:040x}"


def test_linear_history_most_recent_first():
    repo = FakeRepository([
        commit(h(1), 0),
        commit(h(2), 10, [h(1)]),
        commit(h(3), 20, [h(2)]),
    ], head=h(3))

    commits = resolve_ancestry(repo, "HEAD")

    assert [c.hash for c in commits] == [h(3), h(2), h(1)]


def test_walk_from_middle_excludes_descendants():
    repo = FakeRepository([
        commit(h(1), 0),
        commit(h(2), 10, [h(1)]),
        commit(h(3), 20, [h(2)]),
    ], head=h(3))

    assert [c.hash for c in walk_ancestry(repo, h(2))] == [h(2), h(1)]


def test_diamond_history_visits_each_commit_once():
    #        2 --- 4
    #       /       \
    #  1 --+         +-- 6 (merge)
    #       \       /
    #        3 --- 5
    repo = FakeRepository([
        commit(h(1), 0),
        commit(h(2), 10, [h(1)]),
        commit(h(3), 11, [h(1)]),
        commit(h(4), 20, [h(2)]),
        commit(h(5), 21, [h(3)]),
        commit(h(6), 30, [h(4), h(5)]),
    ], head=h(6))

    commits = resolve_ancestry(repo, "HEAD")

    assert [c.hash for c in commits] == [h(6), h(5), h(4), h(3), h(2), h(1)]
    fetched = [x for batch in repo.reads for x in batch]
    assert sorted(fetched) == sorted(set(fetched))  # nothing read twice


def test_nested_merges_share_ancestors():
    commits_in = [commit(h(1), 0)]
    # Ten feature branches off the root, each merged back in sequence.
    tip = h(1)
    for i in range(10):
        feature = h(100 + i)
        merge = h(200 + i)
        commits_in.append(commit(feature, 10 * i + 1, [h(1)]))
        commits_in.append(commit(merge, 10 * i + 2, [tip, feature]))
        tip = merge
    repo = FakeRepository(commits_in, head=tip)

    result = resolve_ancestry(repo, "HEAD")

    assert len(result) == 21
    assert len({c.hash for c in result}) == 21


def test_cycle_in_parent_links_terminates():
    repo = FakeRepository([
        commit(h(1), 0, [h(2)]),
        commit(h(2), 10, [h(1)]),
    ])

    assert [c.hash for c in walk_ancestry(repo, h(2))] == [h(2), h(1)]


def test_deep_history_does_not_recurse():
    n = 5000
    repo = FakeRepository(
        [commit(h(i), i, [h(i - 1)] if i else []) for i in range(n)],
        head=h(n - 1),
    )

    commits = resolve_ancestry(repo, "HEAD")

    assert len(commits) == n
    assert commits[0].hash == h(n - 1)
    assert commits[-1].hash == h(0)


def test_output_is_sorted_and_resort_is_identical():
    repo = FakeRepository([
        commit(h(1), 0),
        commit(h(2), 5, [h(1)]),
        commit(h(3), 5, [h(1)]),     # same committer time as h(2)
        commit(h(4), 9, [h(2), h(3)]),
    ], head=h(4))

    commits = resolve_ancestry(repo, "HEAD")
    for newer, older in zip(commits, commits[1:]):
        assert not newer.before(older)

    shuffled = list(reversed(commits))
    random.Random(3).shuffle(shuffled)
    assert sort_recent_first(shuffled) == list(commits)
    assert [c.hash for c in sort_recent_first(shuffled)] == [c.hash for c in commits]


def test_unknown_revision():
    repo = FakeRepository([commit(h(1), 0)], head=h(1))

    with pytest.raises(RevisionNotFound) as exc_info:
        resolve_ancestry(repo, "no-such-branch")
    assert exc_info.value.revision == "no-such-branch"


def test_missing_parent_aborts_the_walk():
    repo = FakeRepository([
        commit(h(2), 10, [h(1)]),   # h(1) is absent, as in a shallow clone
    ], head=h(2))

    with pytest.raises(ObjectNotFound) as exc_info:
        resolve_ancestry(repo, "HEAD")
    assert exc_info.value.object_hash == h(1)
