"""
Merkle Sum Tree Data Model

Immutable value types shared by the tree engine and proof verification.

This module provides:
- Node: (hash, value) pair, the tree's atomic unit
- Leaf: identified node, including the canonical zero (padding) leaf
- Position / Neighbor: a sibling node tagged with its side
- InclusionProof: leaf plus ordered sibling path
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sumtree.crypto.field import DEFAULT_FIELD, FieldElement, PrimeField
from sumtree.crypto.hashing import hash_leaf_identity


# Largest value any node may carry (signed 32-bit maximum)
MAX_VALUE: int = 2**31 - 1

ZERO_LEAF_ID = "0"


@dataclass(frozen=True)
class Node:
    """
    A tree node.

    For an internal node, value = left.value + right.value and
    hash = H(left.hash, right.hash).

    Attributes:
        hash: Field element committing to the subtree
        value: Sum of leaf values beneath this node, in [0, MAX_VALUE]
    """
    hash: FieldElement
    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError(f"Node value must be an int, got {type(self.value).__name__}")
        if not 0 <= self.value <= MAX_VALUE:
            raise ValueError(f"Node value {self.value} outside [0, {MAX_VALUE}]")

    @property
    def field(self) -> PrimeField:
        return self.hash.field


@dataclass(frozen=True)
class Leaf:
    """
    A leaf entry: identifier plus its node.

    Use Leaf.create() to derive the node from (id, value); the
    constructor accepts a prebuilt node for deserialization.
    """
    id: str
    node: Node

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise ValueError(f"Leaf id must be a non-empty string, got {self.id!r}")

    @classmethod
    def create(cls, leaf_id: str, value: int, field: PrimeField = DEFAULT_FIELD) -> "Leaf":
        """
        Build a leaf whose hash commits to its identifier and value.

        Raises:
            ValueError: If value is outside [0, MAX_VALUE] or leaf_id is empty
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Leaf value must be an int, got {type(value).__name__}")
        if not 0 <= value <= MAX_VALUE:
            raise ValueError(f"Leaf value {value} outside [0, {MAX_VALUE}]")
        return cls(id=leaf_id, node=Node(hash_leaf_identity(leaf_id, value, field), value))

    @classmethod
    def zero(cls, field: PrimeField = DEFAULT_FIELD) -> "Leaf":
        """The canonical padding leaf (id "0", value 0)."""
        return _zero_leaf(field)

    @property
    def value(self) -> int:
        return self.node.value

    @property
    def field(self) -> PrimeField:
        return self.node.field

    def is_none(self) -> bool:
        """True if this is the zero leaf."""
        return self.id == ZERO_LEAF_ID and self.node.value == 0


_ZERO_LEAVES: dict[PrimeField, Leaf] = {}


def _zero_leaf(field: PrimeField) -> Leaf:
    leaf = _ZERO_LEAVES.get(field)
    if leaf is None:
        leaf = Leaf.create(ZERO_LEAF_ID, 0, field)
        _ZERO_LEAVES[field] = leaf
    return leaf


class Position(str, Enum):
    """Side a sibling occupies relative to the node being folded."""
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Neighbor:
    """
    Sibling node in an inclusion path.

    If position is LEFT the sibling is the left child and the running
    node is folded in on the right, and vice versa.
    """
    position: Position
    node: Node


@dataclass(frozen=True)
class InclusionProof:
    """
    Proof that a leaf is part of a tree with a given root node.

    A snapshot: it does not follow later mutations of the tree it was
    generated from.

    Attributes:
        leaf: The leaf being proven
        path: Sibling neighbors from the leaf level up to the root
    """
    leaf: Leaf
    path: tuple[Neighbor, ...]

    def __post_init__(self) -> None:
        # Accept any sequence but store a tuple so the proof stays immutable
        if not isinstance(self.path, tuple):
            object.__setattr__(self, "path", tuple(self.path))

    @property
    def height(self) -> int:
        return len(self.path)


__all__ = [
    "MAX_VALUE",
    "ZERO_LEAF_ID",
    "Node",
    "Leaf",
    "Position",
    "Neighbor",
    "InclusionProof",
]
