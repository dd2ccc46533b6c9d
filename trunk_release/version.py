# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Semantic version model.

Versions are immutable: every bump returns a new value, so a version captured
for reporting is never changed by a later bump.

References:
    - Semantic Versioning 2.0.0: https://semver.org/
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass, replace
from enum import Enum

import semver

from trunk_release.errors import VersionFormatError

# SemVer 2.0.0 grammar with an optional leading 'v'
SEMANTIC_VERSION_PATTERN = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

INITIAL_PRERELEASE = "rc.1"


class ReleaseType(Enum):
    """Version bump warranted by a set of changes, ordered by severity."""

    NONE = "none"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ReleaseType):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ReleaseType):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, ReleaseType):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, ReleaseType):
            return NotImplemented
        return self.severity >= other.severity


_SEVERITY = {
    ReleaseType.NONE: 0,
    ReleaseType.PATCH: 1,
    ReleaseType.MINOR: 2,
    ReleaseType.MAJOR: 3,
}


@functools.total_ordering
@dataclass(frozen=True)
class SemanticVersion:
    """A parsed semantic version.

    Build metadata is accepted when parsing but not kept, so it is never
    rendered back.
    """

    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    @classmethod
    def parse(cls, version: str) -> SemanticVersion:
        """Parse a version string such as 'v1.2.3-rc.1' or '1.2.3+build.5'.

        Raises:
            VersionFormatError: If the string is not a semantic version.
        """
        match = SEMANTIC_VERSION_PATTERN.match(version)
        if not match:
            raise VersionFormatError(version)

        return cls(
            major=int(match.group(1)),
            minor=int(match.group(2)),
            patch=int(match.group(3)),
            prerelease=match.group(4),
        )

    def bump_major(self) -> SemanticVersion:
        return SemanticVersion(self.major + 1, 0, 0, INITIAL_PRERELEASE)

    def bump_minor(self) -> SemanticVersion:
        return SemanticVersion(self.major, self.minor + 1, 0, INITIAL_PRERELEASE)

    def bump_patch(self) -> SemanticVersion:
        """Open a new candidate series, or advance the current one.

        A final release gets patch+1 with 'rc.1'. A prerelease keeps its
        version numbers and has its trailing numeric identifier incremented
        ('rc.2' -> 'rc.3'); a prerelease without one gets '.1' appended.
        """
        if self.prerelease is None:
            return SemanticVersion(self.major, self.minor, self.patch + 1, INITIAL_PRERELEASE)

        parts = self.prerelease.split(".")
        if parts[-1].isdigit():
            parts[-1] = str(int(parts[-1]) + 1)
            return replace(self, prerelease=".".join(parts))
        return replace(self, prerelease=f"{self.prerelease}.1")

    def bump(self, release_type: ReleaseType) -> SemanticVersion:
        """Apply the bump matching a release type; NONE leaves the version as is."""
        if release_type is ReleaseType.MAJOR:
            return self.bump_major()
        if release_type is ReleaseType.MINOR:
            return self.bump_minor()
        if release_type is ReleaseType.PATCH:
            return self.bump_patch()
        return self

    def make_release(self) -> SemanticVersion:
        return replace(self, prerelease=None)

    def is_prerelease(self) -> bool:
        return self.prerelease is not None

    def to_semver(self) -> semver.Version:
        return semver.Version(self.major, self.minor, self.patch, prerelease=self.prerelease)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.to_semver().compare(other.to_semver()) < 0

    def __str__(self) -> str:
        suffix = f"-{self.prerelease}" if self.prerelease is not None else ""
        return f"v{self.major}.{self.minor}.{self.patch}{suffix}"


def try_parse(version: str) -> SemanticVersion | None:
    """Parse a version string, returning None instead of raising."""
    try:
        return SemanticVersion.parse(version)
    except VersionFormatError:
        return None


def is_prerelease_tag(tag_name: str) -> bool:
    """Check if a tag is a semantic version with a prerelease part."""
    version = try_parse(tag_name)
    return version is not None and version.is_prerelease()


def is_stable_tag(tag_name: str) -> bool:
    """Check if a tag is a semantic version without a prerelease part."""
    version = try_parse(tag_name)
    return version is not None and not version.is_prerelease()


def version_release(latest_version: str) -> str:
    """Return the final version a release candidate promotes to.

    Examples:
        >>> version_release("v1.3.0-rc.2")
        'v1.3.0'
    """
    return str(SemanticVersion.parse(latest_version).make_release())
