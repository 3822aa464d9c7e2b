"""
Test fixtures package for sum tree tests.

This package provides factory functions for creating test objects:
- common.py: leaf/tree factories, a fast test hasher, state snapshots

Usage:
    from fixtures import make_tree, snapshot_tree

    def test_something():
        tree = make_tree([("a", 3), ("b", 5)])
"""

from .common import (
    DEFAULT_ENTRIES,
    make_leaves,
    make_numbered_leaves,
    make_tree,
    sha_pair_hasher,
    snapshot_tree,
)

__all__ = [
    "DEFAULT_ENTRIES",
    "make_leaves",
    "make_numbered_leaves",
    "make_tree",
    "sha_pair_hasher",
    "snapshot_tree",
]
