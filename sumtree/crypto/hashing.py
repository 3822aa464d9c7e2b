"""
Hashing Utilities
Byte hashing, canonical hashing, and the two-input hash contract used by the tree.

This module provides:
- SHA-256 hashing for raw bytes
- Canonical hashing for objects (via dumps_canonical)
- Leaf identity hashing into a prime field
- Hasher: the protocol every tree hash primitive satisfies

Security/Determinism Notes:
- Always hash raw bytes exactly as specified
- Leaf identity hashing is deterministic across runs and platforms
"""
from __future__ import annotations

import hashlib
from typing import Any, Protocol

from sumtree.crypto.field import DEFAULT_FIELD, FieldElement, PrimeField
from sumtree.schemas.canonical import dumps_canonical


class Hasher(Protocol):
    """
    Two-input deterministic combining function over a prime field.

    Any callable with this signature can be injected into a tree,
    including plain functions.
    """

    def __call__(self, left: FieldElement, right: FieldElement) -> FieldElement:
        ...


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_canonical(obj: Any) -> bytes:
    """
    Hash an object using canonical JSON serialization.

    Rule: digest = sha256(dumps_canonical(obj).encode("utf-8"))

    Raises:
        CanonicalizationException: If object cannot be canonically serialized
    """
    canonical_json = dumps_canonical(obj)
    return sha256(canonical_json.encode("utf-8"))


def hash_leaf_identity(
    leaf_id: str,
    value: int,
    field: PrimeField = DEFAULT_FIELD,
) -> FieldElement:
    """
    Derive the field hash of a leaf from its identifier and declared value.

    Rule: int(hash_canonical({"id": leaf_id, "value": value})) mod p

    Binding the value into the leaf hash means two leaves with the same
    id but different values never share a hash.

    Args:
        leaf_id: Leaf identifier
        value: Declared leaf value
        field: Target prime field

    Returns:
        Field element committing to (leaf_id, value)
    """
    return field.from_bytes(hash_canonical({"id": leaf_id, "value": value}))


__all__ = [
    "Hasher",
    "sha256",
    "hash_canonical",
    "hash_leaf_identity",
]
