# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Tag and branch queries over a ref store.

Version-aware queries only consider tags that parse as semantic versions;
raw listings keep every tag in the store's version sort order.

References:
    - Semantic Versioning 2.0.0: https://semver.org/
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from trunk_release.errors import ConflictError
from trunk_release.version import try_parse

if TYPE_CHECKING:
    from trunk_release.store import RefStore

logger = logging.getLogger(__name__)


def get_tags(store: RefStore, ref: str) -> list[str]:
    """Get all tags reachable from a ref, in ascending version order.

    Args:
        store: Ref store to query.
        ref: Branch, tag or commit whose ancestry is searched (inclusive).

    Returns:
        Tag names, including tags that are not semantic versions.

    Examples:
        >>> # Linear history v1.0.0 -> v1.0.1 -> v1.0.2 on main
        >>> get_tags(store, "main")
        ['v1.0.0', 'v1.0.1', 'v1.0.2']
    """
    return store.list_tags(merged=ref)


def get_latest_tag(store: RefStore, ref: str) -> str:
    """Get the last tag reachable from a ref in version order.

    Returns:
        The tag name, or an empty string if no tags are reachable.
    """
    tags = get_tags(store, ref)
    return tags[-1] if tags else ""


def get_latest_stable_tag(store: RefStore, ref: str) -> str:
    """Get the highest stable (non-prerelease) version tag reachable from a ref.

    Tags that are not semantic versions are ignored.

    Args:
        store: Ref store to query.
        ref: Branch, tag or commit whose ancestry is searched (inclusive).

    Returns:
        The tag name, or an empty string if there is no stable tag.

    Examples:
        >>> # Tags v1.0.0, v1.0.1-rc.1, some-tag
        >>> get_latest_stable_tag(store, "main")
        'v1.0.0'
    """
    latest = ""
    latest_version = None

    for tag in get_tags(store, ref):
        version = try_parse(tag)
        if version is None or version.is_prerelease():
            continue
        if latest_version is None or version >= latest_version:
            latest, latest_version = tag, version

    return latest


def get_tags_at_head(store: RefStore) -> list[str]:
    """Get all tags pointing at HEAD, in version order."""
    return store.list_tags(points_at="HEAD")


def get_current_branch(store: RefStore) -> str:
    """Get the checked out branch name.

    Raises:
        NotAReleaseBranch: If HEAD is detached.
    """
    return store.current_branch()


def get_commit_messages(store: RefStore, from_ref: str, to_ref: str) -> list[str]:
    """Get messages of commits after from_ref up to and including to_ref.

    Returns:
        Messages with trailing whitespace removed, newest first.
    """
    messages = store.log_messages(from_ref, to_ref)
    logger.debug("Found %d commit(s) in %s..%s", len(messages), from_ref, to_ref)
    return messages


def cut_release_from_trunk(store: RefStore, release_branch_name: str, tag_name: str, ref: str = "HEAD") -> None:
    """Create a release branch at a ref, check it out and tag it.

    Args:
        store: Ref store to modify.
        release_branch_name: Name of the branch to create (e.g., 'release-1.2.x').
        tag_name: Release candidate tag (e.g., 'v1.2.0-rc.1').
        ref: Commit the branch starts from.

    Raises:
        ConflictError: If the branch already exists.
    """
    if release_branch_name in store.list_branches():
        raise ConflictError(f"Branch '{release_branch_name}' already exists.")

    store.checkout_new_branch(release_branch_name, ref)
    logger.info("Created release branch '%s'", release_branch_name)
    store.create_tag(tag_name)
    logger.info("Created tag '%s'", tag_name)


def cut_release_from_release_branch(store: RefStore, tag_name: str) -> None:
    """Tag HEAD of the current release branch with the next candidate."""
    store.create_tag(tag_name)
    logger.info("Created tag '%s'", tag_name)


def make_release(store: RefStore, candidate_tag: str, release_tag: str) -> None:
    """Tag the commit a release candidate points at with its final version.

    Args:
        store: Ref store to modify.
        candidate_tag: Existing candidate tag (e.g., 'v1.2.0-rc.3').
        release_tag: Final tag to add (e.g., 'v1.2.0').
    """
    store.create_tag(release_tag, candidate_tag)
    logger.info("Created release tag '%s' at '%s'", release_tag, candidate_tag)
