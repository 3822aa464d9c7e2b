"""
Merkle Sum Tree Implementation
Construction, incremental mutation, proof generation and verification.

This module provides:
- build_parent: combine two child nodes into their parent
- compute_height: number of levels needed for a leaf count
- MerkleSumTree: the tree engine (sole owner of node storage)
- compute_root_from_proof / verify_inclusion_proof: pure proof folding

Structural Rules (Hard Contracts):
1. Parent node: hash = H(left.hash, right.hash), value = left.value + right.value
2. Padding: the leaf level is padded with zero leaves to 2^height, height >= 1
3. Storage: every node of every level in one flat list, leaves first,
   then each parent level, root last (2^(height+1) - 1 nodes)
4. Sums: no node value may exceed the tree's max_value; a mutation that
   would break this fails before any node is written
5. Height only grows: removals never shrink the tree

Concurrency Notes:
- Single owner, no internal locking. Mutations read then write a
  root-to-leaf path; callers sharing a tree must hold an exclusive lock
  for the duration of each mutation.
"""
from __future__ import annotations

import bisect
import logging
from typing import Iterable, Iterator, Optional, Sequence

from sumtree.crypto.field import DEFAULT_FIELD, FieldElement, PrimeField
from sumtree.crypto.hashing import Hasher
from sumtree.crypto.mimc_sponge import MimcSponge
from sumtree.merkle.models import (
    MAX_VALUE,
    InclusionProof,
    Leaf,
    Neighbor,
    Node,
    Position,
)
from sumtree.schemas.errors import (
    EmptyInputException,
    HeightExceededException,
    IndexOutOfRangeException,
    MalformedProofException,
    SumOverflowException,
)


logger = logging.getLogger(__name__)

# Hard ceiling on tree height
MAX_HEIGHT: int = 64


def build_parent(
    left: Node,
    right: Node,
    hasher: Hasher,
    max_value: int = MAX_VALUE,
) -> Node:
    """
    Compute the parent of two child nodes.

    Args:
        left: Left child
        right: Right child
        hasher: Two-input hash primitive
        max_value: Largest value the parent may carry

    Returns:
        Node(H(left.hash, right.hash), left.value + right.value)

    Raises:
        SumOverflowException: If the children's values sum past max_value
    """
    total = left.value + right.value
    if total > max_value:
        raise SumOverflowException(
            f"Sum {left.value} + {right.value} exceeds maximum {max_value}",
            max_value=max_value,
        )
    return Node(hasher(left.hash, right.hash), total)


def compute_height(count: int, max_height: int = MAX_HEIGHT) -> int:
    """
    Compute the height of a tree holding `count` leaves.

    height = ceil(log2(count)), with a minimum of 1 so that a single
    leaf is paired with a zero leaf.

    Raises:
        EmptyInputException: If count is zero
        HeightExceededException: If the height would exceed max_height
    """
    if count < 1:
        raise EmptyInputException()

    height = max(1, (count - 1).bit_length())
    if height > max_height:
        raise HeightExceededException(
            f"{count} leaves need height {height}, maximum is {max_height}",
            required_height=height,
            max_height=max_height,
        )
    return height


class MerkleSumTree:
    """
    Binary Merkle tree whose nodes carry both a hash and a value sum.

    Example:
        >>> tree = MerkleSumTree([Leaf.create("a", 3), Leaf.create("b", 5)])
        >>> tree.height, tree.root_sum
        (1, 8)
        >>> proof = tree.get_proof(0)
        >>> tree.verify_proof(proof)
        True
    """

    def __init__(
        self,
        leafs: Iterable[Leaf],
        hasher: Optional[Hasher] = None,
        max_value: int = MAX_VALUE,
        max_height: int = MAX_HEIGHT,
    ) -> None:
        """
        Build a tree from a non-empty sequence of leaves.

        Args:
            leafs: Leaves in order; padded with zero leaves to a power of two
            hasher: Two-input hash primitive (defaults to a MiMC sponge over
                the leaves' field)
            max_value: Largest root sum the tree accepts
            max_height: Largest height the tree may grow to (at most 64)

        Raises:
            EmptyInputException: If no leaves are given
            HeightExceededException: If the leaves need more than max_height levels
            SumOverflowException: If the leaf values sum past max_value
            ValueError: If leaves mix fields or the limits are invalid
        """
        leafs = list(leafs)
        if not leafs:
            raise EmptyInputException()
        if not 0 <= max_value <= MAX_VALUE:
            raise ValueError(f"max_value must be in [0, {MAX_VALUE}], got {max_value}")
        if not 1 <= max_height <= MAX_HEIGHT:
            raise ValueError(f"max_height must be in [1, {MAX_HEIGHT}], got {max_height}")

        self._field: PrimeField = leafs[0].field
        self._hasher: Hasher = hasher if hasher is not None else MimcSponge(self._field)
        self._max_value = max_value
        self._max_height = max_height

        for leaf in leafs:
            self._check_field(leaf)

        self._leafs, self._nodes, self._height, self._zero_index = self._build(leafs)
        logger.debug(
            "Built sum tree: %d leaves, height %d, root sum %d",
            len(leafs), self._height, self.root_sum,
        )

    @classmethod
    def from_values(
        cls,
        entries: Iterable[tuple[str, int]],
        field: PrimeField = DEFAULT_FIELD,
        **kwargs,
    ) -> "MerkleSumTree":
        """Build a tree from (id, value) pairs."""
        return cls([Leaf.create(leaf_id, value, field) for leaf_id, value in entries], **kwargs)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def root(self) -> Node:
        return self._nodes[-1]

    @property
    def root_hash(self) -> FieldElement:
        return self._nodes[-1].hash

    @property
    def root_sum(self) -> int:
        return self._nodes[-1].value

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> int:
        """Padded leaf count (2^height)."""
        return len(self._leafs)

    @property
    def leafs(self) -> tuple[Leaf, ...]:
        return tuple(self._leafs)

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes)

    @property
    def zero_index(self) -> tuple[int, ...]:
        """Sorted positions currently holding the zero leaf."""
        return tuple(self._zero_index)

    @property
    def field(self) -> PrimeField:
        return self._field

    @property
    def hasher(self) -> Hasher:
        return self._hasher

    @property
    def max_value(self) -> int:
        return self._max_value

    @property
    def max_height(self) -> int:
        return self._max_height

    def get_node(self, index: int) -> Node:
        """Node at a position of the flat storage (leaves first, root last)."""
        if not 0 <= index < len(self._nodes):
            raise IndexOutOfRangeException(index, len(self._nodes), what="node")
        return self._nodes[index]

    def get_leaf(self, index: int) -> Leaf:
        self._check_leaf_index(index)
        return self._leafs[index]

    def __len__(self) -> int:
        return len(self._leafs)

    def __repr__(self) -> str:
        return (
            f"MerkleSumTree(height={self._height}, size={self.size}, "
            f"root_sum={self.root_sum}, free={len(self._zero_index)})"
        )

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def push(self, leaf: Leaf) -> int:
        """
        Insert a leaf and return its index.

        Reuses the lowest free (zero) slot when there is one. Otherwise the
        tree grows by one level and is rebuilt from the current leaves plus
        the new one.

        Raises:
            HeightExceededException: If growing would exceed max_height
            SumOverflowException: If the new total would exceed max_value
            ValueError: If leaf is the zero leaf, which marks a free slot
        """
        self._check_field(leaf)
        if leaf.is_none():
            raise ValueError("Cannot push the zero leaf; use remove() to free a slot")

        if self._zero_index:
            index = self._zero_index[0]
            self.set_leaf(index, leaf)
            return index

        index = len(self._leafs)
        leafs, nodes, height, zero_index = self._build(self._leafs + [leaf])
        self._leafs, self._nodes, self._height, self._zero_index = leafs, nodes, height, zero_index
        logger.info("Sum tree full, grew to height %d (%d slots)", height, len(leafs))
        return index

    def set_leaf(self, index: int, leaf: Leaf) -> None:
        """
        Replace the leaf at `index` and recompute its path to the root.

        Raises:
            IndexOutOfRangeException: If index is outside the padded leaf range
            SumOverflowException: If the new total would exceed max_value
        """
        self._check_leaf_index(index)
        self._check_field(leaf)

        new_total = self.root_sum - self._leafs[index].value + leaf.value
        if new_total > self._max_value:
            raise SumOverflowException(
                f"Setting leaf {index} would make the root sum {new_total}, "
                f"maximum is {self._max_value}",
                max_value=self._max_value,
                details={"index": index},
            )

        # Compute the whole path before touching storage
        writes: list[tuple[int, Node]] = [(index, leaf.node)]
        current = leaf.node
        for sibling_index, parent_index, sibling_is_left in self._walk(index):
            sibling = self._nodes[sibling_index]
            if sibling_is_left:
                current = build_parent(sibling, current, self._hasher, self._max_value)
            else:
                current = build_parent(current, sibling, self._hasher, self._max_value)
            writes.append((parent_index, current))

        was_none = self._leafs[index].is_none()
        if leaf.is_none() and not was_none:
            bisect.insort(self._zero_index, index)
        elif was_none and not leaf.is_none():
            self._zero_index.remove(index)

        self._leafs[index] = leaf
        for node_index, node in writes:
            self._nodes[node_index] = node
        logger.debug("Updated leaf %d, root sum now %d", index, self.root_sum)

    def remove(self, index: int) -> None:
        """
        Replace the leaf at `index` with the zero leaf, freeing the slot.

        Height never shrinks. Removing a zero leaf is a no-op on the root.

        Raises:
            IndexOutOfRangeException: If index is outside the padded leaf range
        """
        self.set_leaf(index, Leaf.zero(self._field))

    # ------------------------------------------------------------------
    # Proofs
    # ------------------------------------------------------------------

    def get_proof(self, index: int) -> InclusionProof:
        """
        Generate an inclusion proof for the leaf at `index`.

        Returns:
            InclusionProof whose path has exactly `height` neighbors

        Raises:
            IndexOutOfRangeException: If index is outside the padded leaf range
        """
        self._check_leaf_index(index)
        path = [
            Neighbor(
                position=Position.LEFT if sibling_is_left else Position.RIGHT,
                node=self._nodes[sibling_index],
            )
            for sibling_index, _, sibling_is_left in self._walk(index)
        ]
        return InclusionProof(leaf=self._leafs[index], path=tuple(path))

    def verify_proof(self, proof: InclusionProof) -> bool:
        """
        Verify a proof against this tree's current root and height.

        Raises:
            MalformedProofException: If the path length differs from the height
        """
        return verify_inclusion_proof(proof, self.root, self._height, self._hasher)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build(self, leafs: Sequence[Leaf]) -> tuple[list[Leaf], list[Node], int, list[int]]:
        """Pad and fold `leafs` into fresh storage without touching self."""
        height = compute_height(len(leafs), self._max_height)

        total = sum(leaf.value for leaf in leafs)
        if total > self._max_value:
            raise SumOverflowException(
                f"Leaf values sum to {total}, maximum is {self._max_value}",
                max_value=self._max_value,
            )

        size = 1 << height
        padded = list(leafs) + [Leaf.zero(self._field)] * (size - len(leafs))
        zero_index = [i for i, leaf in enumerate(padded) if leaf.is_none()]

        nodes = [leaf.node for leaf in padded]
        level_start, level_size = 0, size
        while level_size > 1:
            for j in range(level_start, level_start + level_size, 2):
                nodes.append(build_parent(nodes[j], nodes[j + 1], self._hasher, self._max_value))
            level_start += level_size
            level_size //= 2

        return padded, nodes, height, zero_index

    def _walk(self, index: int) -> Iterator[tuple[int, int, bool]]:
        """
        Yield (sibling, parent, sibling_is_left) storage indices for each
        level from the leaf at `index` up to the level below the root.
        """
        level_start, level_size, level_index = 0, len(self._leafs), index
        for _ in range(self._height):
            next_start = level_start + level_size
            yield (
                level_start + (level_index ^ 1),
                next_start + level_index // 2,
                level_index % 2 == 1,
            )
            level_start, level_size, level_index = next_start, level_size // 2, level_index // 2

    def _check_leaf_index(self, index: int) -> None:
        if not 0 <= index < len(self._leafs):
            raise IndexOutOfRangeException(index, len(self._leafs))

    def _check_field(self, leaf: Leaf) -> None:
        if leaf.field != self._field:
            raise ValueError(
                f"Leaf '{leaf.id}' belongs to field '{leaf.field.name}', "
                f"tree uses '{self._field.name}'"
            )


def _fold(proof: InclusionProof, hasher: Hasher) -> Optional[Node]:
    """Fold a proof's path into a root node; None if a sum overflows."""
    node = proof.leaf.node
    for neighbor in proof.path:
        if neighbor.position is Position.LEFT:
            left, right = neighbor.node, node
        else:
            left, right = node, neighbor.node
        total = left.value + right.value
        if total > MAX_VALUE:
            return None
        node = Node(hasher(left.hash, right.hash), total)
    return node


def compute_root_from_proof(proof: InclusionProof, hasher: Optional[Hasher] = None) -> Node:
    """
    Recompute the root node implied by a proof.

    Args:
        proof: Inclusion proof to fold
        hasher: Hash primitive (defaults to a MiMC sponge over the leaf's field)

    Raises:
        SumOverflowException: If the path's values sum past MAX_VALUE
    """
    if hasher is None:
        hasher = MimcSponge(proof.leaf.field)
    node = _fold(proof, hasher)
    if node is None:
        raise SumOverflowException(
            f"Proof path sums past maximum {MAX_VALUE}",
            max_value=MAX_VALUE,
        )
    return node


def verify_inclusion_proof(
    proof: InclusionProof,
    root: Node,
    height: int,
    hasher: Optional[Hasher] = None,
) -> bool:
    """
    Verify a proof against an explicit root node.

    Does not need the tree: useful for stale snapshots or roots obtained
    from elsewhere.

    Args:
        proof: Inclusion proof to verify
        root: Expected root node (hash and sum)
        height: Expected tree height, i.e. expected path length
        hasher: Hash primitive (defaults to a MiMC sponge over the leaf's field)

    Returns:
        True if folding the path reproduces `root` exactly

    Raises:
        MalformedProofException: If the path length differs from `height`
    """
    if len(proof.path) != height:
        raise MalformedProofException(
            f"Proof path has {len(proof.path)} neighbors, expected {height}",
            path_length=len(proof.path),
            expected_height=height,
        )

    if hasher is None:
        hasher = MimcSponge(proof.leaf.field)

    node = _fold(proof, hasher)
    if node is None:
        logger.debug("Proof for leaf '%s' overflows while folding", proof.leaf.id)
        return False

    if node != root:
        logger.debug("Proof for leaf '%s' does not reproduce the root", proof.leaf.id)
        return False
    return True


__all__ = [
    "MAX_HEIGHT",
    "build_parent",
    "compute_height",
    "MerkleSumTree",
    "compute_root_from_proof",
    "verify_inclusion_proof",
]
