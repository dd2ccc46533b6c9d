# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Branch classification and release branch naming.

A branch is the trunk when its name equals the configured trunk name, a
release branch when it matches the configured release branch pattern, and
'other' otherwise.

References:
    - git-check-ref-format: https://git-scm.com/docs/git-check-ref-format
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import TYPE_CHECKING

from trunk_release.errors import ConfigurationError

if TYPE_CHECKING:
    from trunk_release.version import SemanticVersion

logger = logging.getLogger(__name__)

# Characters invalid in git refs (branch names and tags)
# See: https://git-scm.com/docs/git-check-ref-format
INVALID_REF_CHARS = ["..", "~", "^", ":", "\\", " ", "\t", "\n", "*", "?", "["]

TEMPLATE_PLACEHOLDERS = ("major", "minor", "patch", "prerelease")


class BranchType(Enum):
    """Role of a branch in the trunk-based model."""

    TRUNK = "trunk"
    RELEASE = "release"
    OTHER = "other"


def validate_branch_name(name: str) -> bool:
    """Validate that a branch name (or template) is usable as a git ref.

    Template placeholders such as '${major}' are checked as if rendered.

    Examples:
        >>> validate_branch_name("main")
        True
        >>> validate_branch_name("release-${major}.${minor}.x")
        True
        >>> validate_branch_name("bad..name")
        False
        >>> validate_branch_name("")
        False
    """
    if not name:
        logger.warning("Empty branch name provided")
        return False

    rendered = name
    for placeholder in TEMPLATE_PLACEHOLDERS:
        rendered = rendered.replace(f"${{{placeholder}}}", "0")

    for invalid_char in INVALID_REF_CHARS:
        if invalid_char in rendered:
            logger.warning(
                "Branch name '%s' contains invalid character %s",
                name,
                repr(invalid_char),
            )
            return False

    return True


def compile_release_pattern(pattern: str) -> re.Pattern[str]:
    """Compile the release branch pattern.

    Raises:
        ConfigurationError: If the pattern is not a valid regular expression.
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid release-branch-pattern '{pattern}': {e}") from e


def is_release_branch(branch_name: str, release_pattern: re.Pattern[str]) -> bool:
    """Check if a branch name matches the release branch pattern.

    Examples:
        >>> pattern = re.compile(r"^release-(0|[1-9]\\d*)\\.(0|[1-9]\\d*)\\.x$")
        >>> is_release_branch("release-1.2.x", pattern)
        True
        >>> is_release_branch("main", pattern)
        False
    """
    return release_pattern.search(branch_name) is not None


def classify_branch(branch_name: str, trunk_branch_name: str, release_pattern: re.Pattern[str]) -> BranchType:
    """Classify a branch as trunk, release or other.

    An exact trunk name match wins over a pattern match, so a branch is
    never both.
    """
    if branch_name == trunk_branch_name:
        return BranchType.TRUNK
    if is_release_branch(branch_name, release_pattern):
        return BranchType.RELEASE
    return BranchType.OTHER


def generate_release_branch_name(template: str, version: SemanticVersion) -> str:
    """Render a release branch name from a template.

    Placeholders '${major}', '${minor}', '${patch}' and '${prerelease}' are
    substituted verbatim; a missing prerelease renders as an empty string.

    Examples:
        >>> from trunk_release.version import SemanticVersion
        >>> generate_release_branch_name("release-${major}.${minor}.x", SemanticVersion(2, 0, 0, "rc.1"))
        'release-2.0.x'
    """
    values = {
        "major": str(version.major),
        "minor": str(version.minor),
        "patch": str(version.patch),
        "prerelease": version.prerelease or "",
    }
    return re.sub(
        r"\$\{(major|minor|patch|prerelease)\}",
        lambda m: values[m.group(1)],
        template,
    )
