"""
Schemas & Errors

Error taxonomy and canonical serialization. Transport models for
nodes, leaves and proofs live in `sumtree.schemas.transport` and are
imported from there directly.
"""

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonicalize_value,
    dumps_canonical,
)

# Error models and exceptions
from .errors import (
    CanonicalizationException,
    EmptyInputException,
    ErrorCodes,
    HeightExceededException,
    IndexOutOfRangeException,
    MalformedProofException,
    SumOverflowException,
    SumTreeError,
    SumTreeException,
)

__all__ = [
    "CANONICAL_JSON_SEPARATORS",
    "canonicalize_value",
    "dumps_canonical",
    "CanonicalizationException",
    "EmptyInputException",
    "ErrorCodes",
    "HeightExceededException",
    "IndexOutOfRangeException",
    "MalformedProofException",
    "SumOverflowException",
    "SumTreeError",
    "SumTreeException",
]
