"""
Common test fixtures shared by all modules.

Provides factory functions for core sum tree structures:
- Leaf lists from (id, value) pairs
- Trees built with the default MiMC sponge or a fast test hasher
- Snapshots of tree state for atomicity checks
"""

from typing import Any, Callable, Iterable, Optional

from sumtree.crypto.field import DEFAULT_FIELD, FieldElement, PrimeField
from sumtree.crypto.hashing import sha256
from sumtree.merkle.merkle_sum_tree import MerkleSumTree
from sumtree.merkle.models import Leaf


DEFAULT_ENTRIES: list[tuple[str, int]] = [
    ("alice", 100),
    ("bob", 200),
    ("carol", 150),
    ("dave", 75),
]


def sha_pair_hasher(field: PrimeField = DEFAULT_FIELD) -> Callable[[FieldElement, FieldElement], FieldElement]:
    """
    A cheap two-input hash for tests that perform many mutations.

    sha256 over the 32-byte big-endian encodings, reduced into the field.
    """
    def _hash(left: FieldElement, right: FieldElement) -> FieldElement:
        data = left.value.to_bytes(32, "big") + right.value.to_bytes(32, "big")
        return field.from_bytes(sha256(data))

    return _hash


def make_leaves(
    entries: Optional[Iterable[tuple[str, int]]] = None,
    field: PrimeField = DEFAULT_FIELD,
) -> list[Leaf]:
    """Create leaves from (id, value) pairs (defaults to four accounts)."""
    if entries is None:
        entries = DEFAULT_ENTRIES
    return [Leaf.create(leaf_id, value, field) for leaf_id, value in entries]


def make_numbered_leaves(count: int, value: int = 1, field: PrimeField = DEFAULT_FIELD) -> list[Leaf]:
    """Create `count` leaves named user0..userN, each with `value`."""
    return [Leaf.create(f"user{i}", value, field) for i in range(count)]


def make_tree(
    entries: Optional[Iterable[tuple[str, int]]] = None,
    fast: bool = False,
    **kwargs: Any,
) -> MerkleSumTree:
    """
    Build a tree from (id, value) pairs.

    Args:
        entries: Leaf entries (defaults to four accounts)
        fast: Use the sha256 test hasher instead of MiMC
        **kwargs: Passed to MerkleSumTree
    """
    if fast:
        kwargs.setdefault("hasher", sha_pair_hasher())
    return MerkleSumTree(make_leaves(entries), **kwargs)


def snapshot_tree(tree: MerkleSumTree) -> dict[str, Any]:
    """Capture everything observable about a tree's state."""
    return {
        "leafs": tree.leafs,
        "nodes": tree.nodes,
        "height": tree.height,
        "zero_index": tree.zero_index,
        "root": tree.root,
    }
