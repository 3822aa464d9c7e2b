"""
Merkle Sum Tree
Binary hash tree whose nodes carry both a hash and the sum of the leaf
values beneath them.

This module provides:
- Node, Leaf, Position, Neighbor, InclusionProof: value types
- MerkleSumTree: construction, push/set_leaf/remove, proofs
- verify_inclusion_proof / compute_root_from_proof: pure proof folding
- MerkleSumProver / MerkleSumVerifier: convenience wrappers

Structural Rules:
1. Parent: hash = H(left.hash, right.hash), value = left.value + right.value
2. Leaf level padded with zero leaves (id "0", value 0) to 2^height
3. Height only grows

Usage:
    from sumtree.merkle import Leaf, MerkleSumTree, verify_inclusion_proof

    tree = MerkleSumTree([Leaf.create("alice", 3), Leaf.create("bob", 5)])
    proof = tree.get_proof(0)

    # Against the live tree
    assert tree.verify_proof(proof)

    # Against a root captured earlier
    root, height = tree.root, tree.height
    assert verify_inclusion_proof(proof, root, height)
"""
from .models import (
    MAX_VALUE,
    ZERO_LEAF_ID,
    Node,
    Leaf,
    Position,
    Neighbor,
    InclusionProof,
)

from .merkle_sum_tree import (
    MAX_HEIGHT,
    MerkleSumTree,
    build_parent,
    compute_height,
    compute_root_from_proof,
    verify_inclusion_proof,
)

from .merkle_proofs import (
    MerkleSumProver,
    MerkleSumVerifier,
)


__all__ = [
    # Core types
    "MAX_VALUE",
    "MAX_HEIGHT",
    "ZERO_LEAF_ID",
    "Node",
    "Leaf",
    "Position",
    "Neighbor",
    "InclusionProof",
    # Tree engine
    "MerkleSumTree",
    "build_parent",
    "compute_height",
    # Verification
    "compute_root_from_proof",
    "verify_inclusion_proof",
    # Convenience classes
    "MerkleSumProver",
    "MerkleSumVerifier",
]
