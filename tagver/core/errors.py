"""
tagver.core.errors — Failure taxonomy shared by the git access layer and the
version resolver.

Every failure is fatal for a single invocation: nothing in tagver retries or
returns partial results.  The CLI maps ``exit_code`` to the process status.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum


class ExitCode(IntEnum):
    """Process exit codes used by the ``tagver`` command."""
    SUCCESS = 0
    FLAG_ERROR = 2
    OS_ERROR = 3
    GIT_ERROR = 5


class ErrorKind(StrEnum):
    REVISION_NOT_FOUND = "revision_not_found"
    OBJECT_NOT_FOUND = "object_not_found"
    REPOSITORY_ACCESS = "repository_access"
    INVALID_REMOTE_URL = "invalid_remote_url"
    INVALID_CONFIG = "invalid_config"


class TagverError(Exception):
    """Base class for every error tagver raises on purpose."""

    kind: ErrorKind = ErrorKind.REPOSITORY_ACCESS
    exit_code: ExitCode = ExitCode.OS_ERROR


class GitError(TagverError):
    """A failure while reading the git repository."""

    exit_code = ExitCode.GIT_ERROR


class RevisionNotFound(GitError):
    kind = ErrorKind.REVISION_NOT_FOUND

    def __init__(self, revision: str) -> None:
        self.revision = revision
        super().__init__(f"revision not found: {revision}")


class ObjectNotFound(GitError):
    kind = ErrorKind.OBJECT_NOT_FOUND

    def __init__(self, object_hash: str, reason: str = "object not found") -> None:
        self.object_hash = object_hash
        self.reason = reason
        super().__init__(f"{reason}: {object_hash}")


class RepositoryAccessError(GitError):
    """Any other failure of the git binary, passed through verbatim."""

    kind = ErrorKind.REPOSITORY_ACCESS

    def __init__(self, message: str, stderr: str = "") -> None:
        self.stderr = stderr.strip()
        super().__init__(f"{message}: {self.stderr}" if self.stderr else message)


class InvalidRemoteURL(GitError):
    kind = ErrorKind.INVALID_REMOTE_URL

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"invalid git remote url: {url}")


class ConfigError(TagverError):
    """An option or ``TAGVER_*`` variable holds an unusable value."""

    kind = ErrorKind.INVALID_CONFIG
    exit_code = ExitCode.FLAG_ERROR
