# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Error types raised by the release engine.

Every error is fatal for the run. Messages are rendered at the point of
detection and name the offending values so that the action log is
self-explanatory.
"""

from __future__ import annotations


class ReleaseError(Exception):
    """Base class for all release engine failures."""


class ConfigurationError(ReleaseError):
    """An action input is missing, unsupported or malformed."""


class VersionFormatError(ReleaseError):
    """A string does not follow the semantic version grammar."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid semantic version format: {value}")


InvalidVersionFormat = VersionFormatError


class BranchClassificationError(ReleaseError):
    """The current branch is not of a type the action may run from."""


class NotAReleaseBranch(BranchClassificationError):
    """The release action was started outside a release branch."""


class BranchPlacementError(ReleaseError):
    """The release type does not match the branch type."""


class HistoryError(ReleaseError):
    """There is no history to derive a version bump from."""


class NoCommitsSinceTag(HistoryError):
    """No commits exist since the reference tag (or in the repository)."""


class QualificationError(ReleaseError):
    """The commit history does not warrant a version bump."""


NoQualifyingChange = QualificationError


class HeadStateError(ReleaseError):
    """The tags at HEAD do not allow a release to be made."""


class EmptyHEAD(HeadStateError):
    """No tags point at HEAD."""


class NoCandidateAtHEAD(HeadStateError):
    """No release candidate tag points at HEAD."""


class AmbiguousCandidates(HeadStateError):
    """More than one release candidate tag points at HEAD."""

    def __init__(self, message: str, tags: list[str]) -> None:
        self.tags = tags
        super().__init__(message)


class AlreadyReleased(HeadStateError):
    """A stable release tag already points at HEAD."""

    def __init__(self, message: str, tags: list[str]) -> None:
        self.tags = tags
        super().__init__(message)


class ConflictError(ReleaseError):
    """The release branch to create already exists."""


class PublishError(ReleaseError):
    """Pushing branches and tags to the remote failed."""


class StoreError(ReleaseError):
    """A command against the ref store failed."""

    def __init__(self, command: list[str], returncode: int, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"'{' '.join(command)}' failed (exit {returncode}): {stderr.strip()}")
