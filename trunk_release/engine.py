# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Release engine for trunk-based release branches.

Two actions are supported:

``release-cut``
    Propose the next version. Commits since the latest reachable tag decide
    the bump; major and minor bumps cut a new release branch from the trunk,
    patch bumps tag the current release branch.

``release``
    Promote the single release candidate tag at HEAD of a release branch to
    its final version, on the same commit.

Both actions classify the current branch first and only mutate the store
after every check has passed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from trunk_release.branch import BranchType, classify_branch, generate_release_branch_name
from trunk_release.commits import release_type_from_commit_messages
from trunk_release.errors import (
    AlreadyReleased,
    AmbiguousCandidates,
    BranchClassificationError,
    BranchPlacementError,
    ConfigurationError,
    EmptyHEAD,
    NoCandidateAtHEAD,
    NoCommitsSinceTag,
    NoQualifyingChange,
    NotAReleaseBranch,
)
from trunk_release.tags import (
    cut_release_from_release_branch,
    cut_release_from_trunk,
    get_commit_messages,
    get_current_branch,
    get_latest_stable_tag,
    get_latest_tag,
    get_tags_at_head,
    make_release,
)
from trunk_release.version import ReleaseType, SemanticVersion, is_prerelease_tag, is_stable_tag

if TYPE_CHECKING:
    from trunk_release.store import RefStore

logger = logging.getLogger(__name__)

ACTION_RELEASE = "release"
ACTION_RELEASE_CUT = "release-cut"
SUPPORTED_ACTIONS = (ACTION_RELEASE, ACTION_RELEASE_CUT)

INITIAL_VERSION = SemanticVersion(0, 0, 0)


@dataclass(frozen=True)
class BranchPolicy:
    """How branches are recognized and named."""

    trunk_branch_name: str
    release_pattern: re.Pattern[str]
    release_branch_template: str

    def classify(self, branch_name: str) -> BranchType:
        return classify_branch(branch_name, self.trunk_branch_name, self.release_pattern)


@dataclass(frozen=True)
class ReleaseResult:
    """Versions reported by a successful action; empty strings when absent."""

    next_version: str
    previous_version: str = ""
    previous_stable_version: str = ""


def release_cut(store: RefStore, policy: BranchPolicy) -> ReleaseResult:
    """Propose the next release candidate from the current branch.

    Args:
        store: Ref store of the working copy.
        policy: Trunk name, release branch pattern and template.

    Returns:
        ReleaseResult with the new candidate tag, the reference tag and the
        latest stable tag reachable from the branch.

    Raises:
        BranchClassificationError: The branch is neither trunk nor a release branch.
        NoCommitsSinceTag: There is nothing to release.
        NoQualifyingChange: No commit warrants a version bump.
        BranchPlacementError: Major/minor off the trunk, or patch on the trunk.
        ConflictError: The release branch to cut already exists.
    """
    current_branch = get_current_branch(store)
    logger.info("Cutting a release from branch '%s'...", current_branch)

    branch_type = policy.classify(current_branch)
    if branch_type is BranchType.OTHER:
        raise BranchClassificationError(
            f"Current branch '{current_branch}' is not the trunk branch '{policy.trunk_branch_name}' "
            "or a release branch. Release cuts can only be made from the trunk branch or a release branch."
        )
    logger.info(
        "Operating on current branch '%s', identified as type '%s' branch.",
        current_branch,
        branch_type.value,
    )

    latest_tag = get_latest_tag(store, current_branch)
    if latest_tag:
        version = SemanticVersion.parse(latest_tag)
        commit_messages = get_commit_messages(store, latest_tag, "HEAD")
        if not commit_messages:
            raise NoCommitsSinceTag(
                f"No commits found since latest tag '{latest_tag}'. Cannot determine next version bump."
            )
    else:
        logger.info(
            "No existing tags found on branch '%s'. Starting from initial version %s.",
            current_branch,
            INITIAL_VERSION,
        )
        version = INITIAL_VERSION
        commit_messages = get_commit_messages(store, store.first_commit("HEAD"), "HEAD")
        if not commit_messages:
            raise NoCommitsSinceTag("No commits found in the repository. Cannot determine next version bump.")

    previous_stable_version = get_latest_stable_tag(store, current_branch)

    release_type = release_type_from_commit_messages(commit_messages)
    logger.info("Changes since '%s' warrant a %s release.", latest_tag or "first commit", release_type.value)

    if release_type is ReleaseType.NONE:
        raise NoQualifyingChange(
            f"No valid changes found since latest tag '{latest_tag}' that warrant a version bump. "
            "Changes must warrant at least a patch."
        )
    _check_placement(release_type, branch_type, current_branch, policy.trunk_branch_name)

    next_version = version.bump(release_type)
    next_tag = str(next_version)

    if branch_type is BranchType.TRUNK:
        release_branch_name = generate_release_branch_name(policy.release_branch_template, next_version)
        if policy.classify(release_branch_name) is not BranchType.RELEASE:
            logger.warning(
                "Release branch name '%s' does not match release-branch-pattern '%s'",
                release_branch_name,
                policy.release_pattern.pattern,
            )
        cut_release_from_trunk(store, release_branch_name, next_tag)
    else:
        cut_release_from_release_branch(store, next_tag)

    return ReleaseResult(
        next_version=next_tag,
        previous_version=str(version) if latest_tag else "",
        previous_stable_version=previous_stable_version,
    )


def _check_placement(
    release_type: ReleaseType,
    branch_type: BranchType,
    branch_name: str,
    trunk_branch_name: str,
) -> None:
    """Enforce that major/minor bumps start on the trunk and patches do not."""
    if release_type is ReleaseType.PATCH and branch_type is BranchType.TRUNK:
        raise BranchPlacementError(
            f"Cannot make a patch release from the trunk branch '{trunk_branch_name}'. "
            "Use a release branch for patch releases."
        )
    if release_type in (ReleaseType.MAJOR, ReleaseType.MINOR) and branch_type is not BranchType.TRUNK:
        raise BranchPlacementError(
            f"{release_type.value.capitalize()} releases can only be made from the trunk branch "
            f"'{trunk_branch_name}', not from '{branch_name}'."
        )


def release(store: RefStore, policy: BranchPolicy) -> ReleaseResult:
    """Promote the release candidate at HEAD of a release branch.

    Args:
        store: Ref store of the working copy.
        policy: Trunk name, release branch pattern and template.

    Returns:
        ReleaseResult with the final tag, the promoted candidate and the
        latest stable tag reachable from the branch before promotion.

    Raises:
        NotAReleaseBranch: The current branch is not a release branch.
        EmptyHEAD: No tags point at HEAD.
        NoCandidateAtHEAD: No release candidate tag points at HEAD.
        AmbiguousCandidates: More than one candidate tag points at HEAD.
        AlreadyReleased: A stable tag already points at HEAD.
    """
    current_branch = get_current_branch(store)
    logger.info("Making a release from branch '%s'...", current_branch)

    if policy.classify(current_branch) is not BranchType.RELEASE:
        raise NotAReleaseBranch(
            f"Current branch '{current_branch}' is not a release branch. "
            "Releases can only be made from a release branch."
        )

    tags_at_head = get_tags_at_head(store)
    if not tags_at_head:
        raise EmptyHEAD(
            "No tags found at HEAD of release branch. Cannot make a release without a tag at HEAD. "
            "There might be commit(s) on the release branch that have not made it to 'rc'. "
            "Try running 'release-cut' action first."
        )

    candidates = [tag for tag in tags_at_head if is_prerelease_tag(tag)]
    releases = [tag for tag in tags_at_head if is_stable_tag(tag)]

    if not candidates:
        raise NoCandidateAtHEAD(
            f"No release candidate tags found at HEAD of release branch: '{', '.join(tags_at_head)}'. "
            "Cannot make a release without a release candidate tag."
        )
    if len(candidates) > 1:
        raise AmbiguousCandidates(
            f"Multiple release candidate tags found at HEAD of release branch: '{', '.join(candidates)}'. "
            "There should be only one release candidate tag at HEAD of a release branch.",
            candidates,
        )
    if releases:
        raise AlreadyReleased(
            f"Release tag(s) found at HEAD of release branch: '{', '.join(releases)}'. "
            "A release has already been made from this commit.",
            releases,
        )

    candidate_tag = candidates[0]
    previous_stable_version = get_latest_stable_tag(store, current_branch)

    candidate_version = SemanticVersion.parse(candidate_tag)
    final_tag = str(candidate_version.make_release())
    make_release(store, candidate_tag, final_tag)

    return ReleaseResult(
        next_version=final_tag,
        previous_version=str(candidate_version),
        previous_stable_version=previous_stable_version,
    )


def run_action(store: RefStore, action: str, policy: BranchPolicy) -> ReleaseResult:
    """Dispatch to the engine action named by the 'action' input.

    Raises:
        ConfigurationError: If the action is not supported.
    """
    if action == ACTION_RELEASE:
        return release(store, policy)
    if action == ACTION_RELEASE_CUT:
        return release_cut(store, policy)
    raise ConfigurationError(f"Not supported action: '{action}'. Expected one of: {', '.join(SUPPORTED_ACTIONS)}")
