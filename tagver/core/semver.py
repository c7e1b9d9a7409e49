"""
tagver.core.semver — Semantic version value type.

See https://semver.org.  Parsing is delegated to :mod:`semantic_version`
in strict mode; tag names may carry a leading ``v`` (``v1.2.3``), which is
stripped on parsing and restored by :attr:`SemVer.tag_name`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from semantic_version import Version  # type: ignore[import-untyped]


class SemVer(BaseModel):
    """A ``MAJOR.MINOR.PATCH[-prerelease][+metadata]`` version."""
    model_config = ConfigDict(frozen=True)

    major: int = Field(default=0, ge=0)
    minor: int = Field(default=0, ge=0)
    patch: int = Field(default=0, ge=0)
    prerelease: tuple[str, ...] = ()
    metadata: tuple[str, ...] = ()

    @classmethod
    def parse(cls, text: str) -> SemVer | None:
        """Parse a version or tag name.  Returns ``None`` if it is not a semver."""
        # semantic_version anchors with ``$``, which tolerates a trailing newline
        if text != text.strip():
            return None
        try:
            parsed = Version(text.removeprefix("v"))
        except ValueError:
            return None

        return cls(
            major=parsed.major,
            minor=parsed.minor,
            patch=parsed.patch,
            prerelease=tuple(parsed.prerelease),
            metadata=tuple(parsed.build),
        )

    def next(self) -> SemVer:
        """The next version: patch + 1, without pre-release or metadata."""
        return SemVer(major=self.major, minor=self.minor, patch=self.patch + 1)

    def with_prerelease(self, *parts: str) -> SemVer:
        return self.model_copy(update={"prerelease": tuple(parts)})

    # -- Release bumps -----------------------------------------------------

    def release_patch(self) -> SemVer:
        return SemVer(major=self.major, minor=self.minor, patch=self.patch)

    def release_minor(self) -> SemVer:
        return SemVer(major=self.major, minor=self.minor + 1, patch=0)

    def release_major(self) -> SemVer:
        return SemVer(major=self.major + 1, minor=0, patch=0)

    # -- Rendering ---------------------------------------------------------

    @property
    def tag_name(self) -> str:
        return f"v{self}"

    def __str__(self) -> str:
        tail = ""
        if self.prerelease:
            tail += "-" + ".".join(self.prerelease)
        if self.metadata:
            tail += "+" + ".".join(self.metadata)
        return f"{self.major}.{self.minor}.{self.patch}{tail}"
