"""
Schemas - Serializable Items
File: datum.py

Purpose: The contract an item must satisfy to be stored in a tree leaf, and
a few stock implementations of it.

Anything with a deterministic ``serialize() -> bytes`` method is a Datum.
Two calls on logically equal values must yield identical bytes, otherwise
content lookup and membership checks break.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .errors import NoDataException


@runtime_checkable
class Datum(Protocol):
    """Any piece of data that can live in the leaves of a Merkle tree."""

    def serialize(self) -> bytes:
        """Return the canonical byte representation of this datum."""
        ...


@dataclass(frozen=True)
class BytesDatum:
    """Raw bytes, stored as-is."""
    data: bytes

    def serialize(self) -> bytes:
        return bytes(self.data)


@dataclass(frozen=True)
class TextDatum:
    """Text stored with a fixed encoding (UTF-8 unless told otherwise)."""
    text: str
    encoding: str = "utf-8"

    def serialize(self) -> bytes:
        return self.text.encode(self.encoding)


def serialize_item(item: Any) -> bytes:
    """
    Serialize anything a tree accepts as an item.

    Accepted: a Datum, a bytes-like value, or a str (encoded as UTF-8).

    Raises:
        NoDataException: If ``item`` is None.
        TypeError: If ``item`` is none of the accepted kinds, or its
            ``serialize()`` does not return bytes.
    """
    if item is None:
        raise NoDataException("Cannot serialize a missing (None) datum")

    if isinstance(item, (bytes, bytearray, memoryview)):
        return bytes(item)

    if isinstance(item, str):
        return item.encode("utf-8")

    if isinstance(item, Datum):
        serialized = item.serialize()
        if not isinstance(serialized, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"{type(item).__name__}.serialize() must return bytes, "
                f"got {type(serialized).__name__}"
            )
        return bytes(serialized)

    raise TypeError(
        f"Cannot use {type(item).__name__} as a tree item: expected a Datum, "
        f"bytes or str"
    )
