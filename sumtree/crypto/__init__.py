"""
Core cryptographic utilities.

Prime field elements, byte/canonical hashing, and the MiMC sponge
used as the default tree hash.
"""
from .field import (
    PrimeField,
    FieldElement,
    PASTA,
    BN254,
    DEFAULT_FIELD,
    get_field,
)
from .hashing import (
    Hasher,
    sha256,
    hash_canonical,
    hash_leaf_identity,
)
from .mimc_sponge import MimcSponge, mimc_constants

__all__ = [
    "PrimeField",
    "FieldElement",
    "PASTA",
    "BN254",
    "DEFAULT_FIELD",
    "get_field",
    "Hasher",
    "sha256",
    "hash_canonical",
    "hash_leaf_identity",
    "MimcSponge",
    "mimc_constants",
]
