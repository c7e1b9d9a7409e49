"""
tagver.vcs.objects — Parsing of raw git objects.

Commit and tag objects are read with ``git cat-file --batch`` and parsed here
into :mod:`tagver.core.models` values.  Only the headers tagver needs are
interpreted; everything else (tree, encoding, gpgsig, mergetag) is skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from tagver.core.errors import RepositoryAccessError
from tagver.core.models import Commit, Signature

_IDENT_RE = re.compile(
    r"(?P<name>.*?) ?<(?P<email>[^<>]*)> (?P<seconds>-?\d+)(?: (?P<tz>[+-]\d{4}))?"
)
_PGP_MARKERS = ("-----BEGIN PGP SIGNATURE-----", "-----BEGIN SSH SIGNATURE-----")


@dataclass(frozen=True)
class RawObject:
    """One entry of ``git cat-file --batch`` output."""
    name: str               # What was asked for
    object_hash: str        # Empty when missing
    object_type: str        # commit | tag | tree | blob | missing | ambiguous
    body: bytes = b""

    @property
    def missing(self) -> bool:
        return self.object_type in ("missing", "ambiguous")


@dataclass(frozen=True)
class TagRef:
    """A ``refs/tags/*`` reference as listed by ``git for-each-ref``."""
    name: str
    object_hash: str
    object_type: str        # "tag" for annotated tags, usually "commit" otherwise


@dataclass(frozen=True)
class TagObject:
    """A parsed annotated tag object."""
    object_hash: str
    name: str
    target: str
    target_type: str
    tagger: Signature | None
    message: str


# ---------------------------------------------------------------------------
# cat-file --batch stream
# ---------------------------------------------------------------------------

def parse_batch(output: bytes, names: list[str]) -> list[RawObject]:
    """
    Split ``git cat-file --batch`` output into one :class:`RawObject` per name.

    The output holds, in request order, either ``<sha> <type> <size>\\n<body>\\n``
    or ``<name> missing\\n``.
    """
    objects: list[RawObject] = []
    pos = 0
    for name in names:
        nl = output.find(b"\n", pos)
        if nl < 0:
            raise RepositoryAccessError(f"truncated cat-file output at {name}")
        header = output[pos:nl].decode("utf-8", errors="replace").split()
        pos = nl + 1

        if len(header) == 2 and header[1] in ("missing", "ambiguous"):
            objects.append(RawObject(name=name, object_hash="", object_type=header[1]))
            continue
        if len(header) != 3:
            raise RepositoryAccessError(f"unexpected cat-file header for {name}: {' '.join(header)}")

        object_hash, object_type, size = header[0], header[1], int(header[2])
        body = output[pos:pos + size]
        if len(body) != size:
            raise RepositoryAccessError(f"truncated cat-file body for {name}")
        pos += size + 1  # body is followed by a LF
        objects.append(RawObject(name=name, object_hash=object_hash, object_type=object_type, body=body))

    return objects


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------

def parse_ident(value: str) -> Signature:
    """Parse ``Name <email> <unix seconds> <+hhmm>`` into a Signature."""
    m = _IDENT_RE.fullmatch(value.strip())
    if m is None:
        raise RepositoryAccessError(f"malformed identity line: {value!r}")

    offset = timedelta(0)
    if tz := m.group("tz"):
        sign = -1 if tz[0] == "-" else 1
        offset = sign * timedelta(hours=int(tz[1:3]), minutes=int(tz[3:5]))

    try:
        tzinfo = timezone(offset)
    except ValueError:
        tzinfo = timezone.utc   # offsets beyond ±24h exist in the wild
    try:
        timestamp = datetime.fromtimestamp(int(m.group("seconds")), tz=tzinfo)
    except (OverflowError, OSError, ValueError) as exc:
        raise RepositoryAccessError(f"malformed identity line: {value!r}") from exc
    return Signature(name=m.group("name"), email=m.group("email"), timestamp=timestamp)


def _split_object(body: bytes) -> tuple[list[tuple[str, str]], str]:
    """Return the (key, value) headers and the message of a commit or tag body."""
    text = body.decode("utf-8", errors="replace")
    head, sep, message = text.partition("\n\n")
    if not sep and head.endswith("\n"):
        head = head[:-1]

    headers: list[tuple[str, str]] = []
    for line in head.split("\n"):
        if not line:
            continue
        if line.startswith(" ") and headers:
            # Continuation of a multi-line header (gpgsig, mergetag)
            key, value = headers[-1]
            headers[-1] = (key, value + "\n" + line[1:])
            continue
        key, _, value = line.partition(" ")
        headers.append((key, value))
    return headers, message


def parse_commit(object_hash: str, body: bytes) -> Commit:
    headers, message = _split_object(body)

    parents: list[str] = []
    author: Signature | None = None
    committer: Signature | None = None
    for key, value in headers:
        if key == "parent":
            parents.append(value.strip())
        elif key == "author":
            author = parse_ident(value)
        elif key == "committer":
            committer = parse_ident(value)

    if author is None or committer is None:
        raise RepositoryAccessError(f"malformed commit object {object_hash}")

    return Commit(
        hash=object_hash,
        author=author,
        committer=committer,
        message=message,
        parents=tuple(parents),
    )


def parse_tag(object_hash: str, body: bytes) -> TagObject:
    headers, message = _split_object(body)
    fields = dict(headers)

    if "object" not in fields or "tag" not in fields:
        raise RepositoryAccessError(f"malformed tag object {object_hash}")

    # Signed tags carry the signature at the end of the message.
    for marker in _PGP_MARKERS:
        idx = message.find(marker)
        if idx >= 0:
            message = message[:idx]
            break

    tagger = parse_ident(fields["tagger"]) if "tagger" in fields else None
    return TagObject(
        object_hash=object_hash,
        name=fields["tag"].strip(),
        target=fields["object"].strip(),
        target_type=fields.get("type", "commit").strip(),
        tagger=tagger,
        message=message,
    )
