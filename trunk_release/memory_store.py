# Copyright (c) 2026 Mark Ferrell. MIT License.
"""In-memory RefStore.

Models a commit graph with branches, lightweight tags and a HEAD so that the
release engine can run without a real repository. Tag ordering follows git's
``v:refname`` sort with ``versionsort.suffix=-``: prereleases sort before
their final release.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field

from trunk_release.errors import NotAReleaseBranch, PublishError, StoreError
from trunk_release.version import try_parse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Commit:
    """A commit in the in-memory graph."""

    sha: str
    message: str
    parents: tuple[str, ...] = ()
    index: int = 0


@dataclass
class InMemoryStore:
    """RefStore holding all state in memory.

    Attributes:
        head_branch: Checked out branch, or None when HEAD is detached.
        pushes: Remote URLs passed to push(), in call order.
        push_error: If set, push() fails with this message.
    """

    initial_branch: str = "main"
    commits: dict[str, Commit] = field(default_factory=dict)
    branches: dict[str, str] = field(default_factory=dict)
    tags: dict[str, str] = field(default_factory=dict)
    head_branch: str | None = None
    detached_sha: str | None = None
    pushes: list[str] = field(default_factory=list)
    push_error: str | None = None

    def __post_init__(self) -> None:
        if self.head_branch is None and self.detached_sha is None:
            self.head_branch = self.initial_branch

    # Builders

    def commit(self, message: str) -> str:
        """Add a commit on top of HEAD and advance the current branch."""
        head = self._head_sha()
        index = len(self.commits)
        sha = hashlib.sha1(f"{index}:{message}".encode()).hexdigest()
        self.commits[sha] = Commit(sha=sha, message=message, parents=(head,) if head else (), index=index)

        if self.head_branch is not None:
            self.branches[self.head_branch] = sha
        else:
            self.detached_sha = sha
        return sha

    def tag(self, *names: str) -> None:
        """Tag HEAD with one or more names."""
        for name in names:
            self.create_tag(name)

    def branch(self, name: str) -> None:
        """Create a branch at HEAD and check it out."""
        self.checkout_new_branch(name)

    # RefStore

    def list_tags(self, merged: str | None = None, points_at: str | None = None) -> list[str]:
        names = list(self.tags)
        if merged is not None:
            reachable = self._ancestors(self._resolve(merged))
            names = [name for name in names if self.tags[name] in reachable]
        if points_at is not None:
            target = self._resolve(points_at)
            names = [name for name in names if self.tags[name] == target]
        return sorted(names, key=_version_sort_key)

    def current_branch(self) -> str:
        if self.head_branch is None:
            raise NotAReleaseBranch(
                "HEAD is detached. Check out the trunk branch or a release branch before running the action."
            )
        return self.head_branch

    def list_branches(self) -> list[str]:
        return sorted(self.branches)

    def first_commit(self, ref: str = "HEAD") -> str:
        ancestors = self._ancestors(self._resolve(ref))
        roots = [self.commits[sha] for sha in ancestors if not self.commits[sha].parents]
        return min(roots, key=lambda c: c.index).sha

    def log_messages(self, from_ref: str, to_ref: str) -> list[str]:
        included = self._ancestors(self._resolve(to_ref)) - self._ancestors(self._resolve(from_ref))
        ordered = sorted((self.commits[sha] for sha in included), key=lambda c: c.index, reverse=True)
        return [commit.message.strip() for commit in ordered]

    def checkout_new_branch(self, name: str, start_point: str = "HEAD") -> None:
        if name in self.branches:
            raise StoreError(["checkout", "-b", name, start_point], 128, f"a branch named '{name}' already exists")
        self.branches[name] = self._resolve(start_point)
        self.head_branch = name
        self.detached_sha = None

    def checkout(self, ref: str) -> None:
        if ref in self.branches:
            self.head_branch = ref
            self.detached_sha = None
            return
        self.detached_sha = self._resolve(ref)
        self.head_branch = None

    def create_tag(self, name: str, ref: str = "HEAD") -> None:
        if name in self.tags:
            raise StoreError(["tag", name, ref], 128, f"tag '{name}' already exists")
        self.tags[name] = self._resolve(ref)
        logger.debug("Tagged %s with '%s'", self.tags[name][:7], name)

    def push(self, remote_url: str) -> None:
        if self.push_error is not None:
            raise PublishError(self.push_error)
        self.pushes.append(remote_url)

    # Internals

    def _head_sha(self) -> str | None:
        if self.head_branch is not None:
            return self.branches.get(self.head_branch)
        return self.detached_sha

    def _resolve(self, ref: str) -> str:
        if ref == "HEAD":
            sha = self._head_sha()
        elif ref in self.branches:
            sha = self.branches[ref]
        elif ref in self.tags:
            sha = self.tags[ref]
        elif ref in self.commits:
            sha = ref
        else:
            sha = None

        if sha is None:
            raise StoreError(["rev-parse", ref], 128, f"unknown revision '{ref}'")
        return sha

    def _ancestors(self, sha: str) -> set[str]:
        seen: set[str] = set()
        stack = [sha]
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            stack.extend(self.commits[current].parents)
        return seen


def _version_sort_key(name: str) -> tuple:
    """Sort non-version tags by name ahead of version tags in precedence order."""
    version = try_parse(name)
    if version is None:
        return (0, name)
    return (1, version, name)
