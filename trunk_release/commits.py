# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Conventional Commits classification.

Maps commit messages to the semantic version bump they warrant.

References:
    - Conventional Commits 1.0.0: https://www.conventionalcommits.org/en/v1.0.0/
"""

from __future__ import annotations

import logging
import re

from trunk_release.version import ReleaseType, SemanticVersion

logger = logging.getLogger(__name__)

COMMIT_TYPES = (
    "build",
    "chore",
    "ci",
    "docs",
    "feat",
    "fix",
    "perf",
    "refactor",
    "revert",
    "style",
    "test",
)

# Subject line: type(scope)!: description
SUBJECT_PATTERN = re.compile(rf"^({'|'.join(COMMIT_TYPES)})(\([\w\-]+\))?(!)?: [^\r\n]+$")

BREAKING_CHANGE_MARKER = "BREAKING CHANGE: "


def parse_release_type(message: str) -> ReleaseType:
    """Classify a single commit message.

    'feat' warrants a minor bump and 'fix' a patch; other recognized types
    warrant nothing. A '!' after the type or scope, or a 'BREAKING CHANGE: '
    footer line, warrants a major bump. A message that does not follow the
    grammar is logged and classified as NONE.

    Args:
        message: Full commit message (subject plus optional body/footers).

    Returns:
        The release type for the message.

    Examples:
        >>> parse_release_type("feat(api): add endpoint")
        <ReleaseType.MINOR: 'minor'>
        >>> parse_release_type("fix!: drop legacy flag")
        <ReleaseType.MAJOR: 'major'>
        >>> parse_release_type("Merge branch 'main'")
        <ReleaseType.NONE: 'none'>
    """
    lines = message.rstrip().splitlines()
    subject = lines[0] if lines else ""
    match = SUBJECT_PATTERN.match(subject)

    # Body and footers must be separated from the subject by a blank line
    if not match or (len(lines) > 1 and lines[1].strip()):
        logger.warning("Detected commit message that does not conform to Conventional Commits: %s", message)
        return ReleaseType.NONE

    if any(line.startswith(BREAKING_CHANGE_MARKER) for line in lines[2:]):
        return ReleaseType.MAJOR

    if match.group(3):
        return ReleaseType.MAJOR

    if match.group(1) == "feat":
        return ReleaseType.MINOR
    if match.group(1) == "fix":
        return ReleaseType.PATCH
    return ReleaseType.NONE


def release_type_from_commit_messages(commit_messages: list[str]) -> ReleaseType:
    """Return the most severe release type found in a list of messages.

    Args:
        commit_messages: Commit messages in any order.

    Returns:
        MAJOR, MINOR, PATCH or NONE.
    """
    release_type = ReleaseType.NONE

    for message in commit_messages:
        message_type = parse_release_type(message)
        logger.debug("Classified commit '%s' as %s", message.splitlines()[0] if message else "", message_type.value)
        release_type = max(release_type, message_type)
        if release_type is ReleaseType.MAJOR:
            break

    return release_type


def version_release_cut(latest_version: str, commit_messages: list[str]) -> str:
    """Return the rendered version a release cut would propose.

    Examples:
        >>> version_release_cut("v1.2.3", ["feat: add export"])
        'v1.3.0-rc.1'
        >>> version_release_cut("v1.3.0-rc.1", ["fix: handle empty input"])
        'v1.3.0-rc.2'
    """
    release_type = release_type_from_commit_messages(commit_messages)
    return str(SemanticVersion.parse(latest_version).bump(release_type))
