# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Trunk Release Action - Core modules."""

from trunk_release.engine import BranchPolicy, ReleaseResult, release, release_cut
from trunk_release.memory_store import InMemoryStore
from trunk_release.store import GitStore, RefStore
from trunk_release.version import ReleaseType, SemanticVersion

__all__ = [
    "BranchPolicy",
    "GitStore",
    "InMemoryStore",
    "RefStore",
    "ReleaseResult",
    "ReleaseType",
    "SemanticVersion",
    "release",
    "release_cut",
]
