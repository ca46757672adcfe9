"""
Core cryptographic utilities.

Provides the pluggable hash primitive used by Merkle trees, plus hex
encoding for digests.
"""
from .hashing import (
    HashAlgorithm,
    Hasher,
    available_algorithms,
    new_hasher,
    to_hex,
)

__all__ = [
    "HashAlgorithm",
    "Hasher",
    "available_algorithms",
    "new_hasher",
    "to_hex",
]
