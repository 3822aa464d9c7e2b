"""
Merkle Sum Proofs Convenience Wrappers
Thin wrappers around the tree engine and the pure verification functions.

This module provides class-based interfaces:
- MerkleSumProver: Generate proofs from a tree or from raw (id, value) entries
- MerkleSumVerifier: Verify proofs against a tree or an explicit root

These are convenience wrappers around the functions in merkle_sum_tree.py.
"""
from __future__ import annotations

from typing import Iterable, Optional, Sequence

from sumtree.crypto.field import DEFAULT_FIELD, PrimeField
from sumtree.crypto.hashing import Hasher
from sumtree.merkle.merkle_sum_tree import (
    MerkleSumTree,
    compute_root_from_proof,
    verify_inclusion_proof,
)
from sumtree.merkle.models import InclusionProof, Leaf, Node


class MerkleSumProver:
    """
    Convenience class for generating sum tree proofs.

    Example:
        >>> proof = MerkleSumProver.prove_entries([("a", 3), ("b", 5)], index=0)
        >>> proof.leaf.id
        'a'
    """

    @staticmethod
    def prove(tree: MerkleSumTree, index: int) -> InclusionProof:
        """
        Generate a proof for the leaf at `index` of an existing tree.

        Raises:
            IndexOutOfRangeException: If index is out of range
        """
        return tree.get_proof(index)

    @staticmethod
    def prove_leaves(
        leafs: Sequence[Leaf],
        index: int,
        hasher: Optional[Hasher] = None,
    ) -> InclusionProof:
        """
        Build a throwaway tree from `leafs` and prove the leaf at `index`.

        Raises:
            EmptyInputException: If leafs is empty
            IndexOutOfRangeException: If index is out of range
        """
        return MerkleSumTree(leafs, hasher=hasher).get_proof(index)

    @staticmethod
    def prove_entries(
        entries: Iterable[tuple[str, int]],
        index: int,
        field: PrimeField = DEFAULT_FIELD,
        hasher: Optional[Hasher] = None,
    ) -> InclusionProof:
        """Same as prove_leaves, from (id, value) pairs."""
        leafs = [Leaf.create(leaf_id, value, field) for leaf_id, value in entries]
        return MerkleSumProver.prove_leaves(leafs, index, hasher=hasher)

    @staticmethod
    def compute_root(leafs: Sequence[Leaf], hasher: Optional[Hasher] = None) -> Node:
        """Root node of the tree built from `leafs`."""
        return MerkleSumTree(leafs, hasher=hasher).root


class MerkleSumVerifier:
    """
    Convenience class for verifying sum tree proofs.

    Example:
        >>> tree = MerkleSumTree.from_values([("a", 3), ("b", 5)])
        >>> MerkleSumVerifier.verify(tree.get_proof(1), tree.root, tree.height)
        True
    """

    @staticmethod
    def verify(
        proof: InclusionProof,
        root: Node,
        height: int,
        hasher: Optional[Hasher] = None,
    ) -> bool:
        """
        Verify a proof against an explicit root node and height.

        Raises:
            MalformedProofException: If the path length differs from height
        """
        return verify_inclusion_proof(proof, root, height, hasher)

    @staticmethod
    def verify_against_tree(proof: InclusionProof, tree: MerkleSumTree) -> bool:
        """Verify a proof against the tree's current root."""
        return tree.verify_proof(proof)

    @staticmethod
    def recompute_root(proof: InclusionProof, hasher: Optional[Hasher] = None) -> Node:
        """Root node implied by the proof, without comparing it to anything."""
        return compute_root_from_proof(proof, hasher)


__all__ = [
    "MerkleSumProver",
    "MerkleSumVerifier",
]
