"""
Schemas - Error Taxonomy, Items
File: __init__.py

Purpose: Export the public API for the schemas module.
"""

# Error models and exceptions
from .errors import (
    ErrorCodes,
    HashUnavailableException,
    MerkleError,
    MerkleException,
    MerkleVerificationException,
    NoDataException,
)

# Tree items
from .datum import (
    BytesDatum,
    Datum,
    TextDatum,
    serialize_item,
)

__all__ = [
    # Errors
    "ErrorCodes",
    "HashUnavailableException",
    "MerkleError",
    "MerkleException",
    "MerkleVerificationException",
    "NoDataException",
    # Items
    "BytesDatum",
    "Datum",
    "TextDatum",
    "serialize_item",
]
