"""
Crypto - Pluggable Hash Primitive
Hashing utilities for Merkle commitments.

This module provides:
- Hasher: a resettable streaming hash with a fixed output size
- HashAlgorithm: the algorithm names known to work out of the box
- new_hasher: instantiate a Hasher from a name, enum, Hasher or factory
- to_hex: 0x-prefixed hex encoding for reports

Trees never hard-code a hashing primitive. Anything hashlib-like (an object
with ``update``, ``digest`` and a non-zero ``digest_size``) can back a
Hasher.

Security/Determinism Notes:
- Always hash raw bytes exactly as given
- Variable-length digests (SHAKE) are rejected: node digests must have a
  fixed size
"""
from __future__ import annotations

import functools
import hashlib
from enum import Enum
from typing import Any, Callable, Union

from canopy.schemas.errors import HashUnavailableException


HashFactory = Callable[[], Any]


class HashAlgorithm(str, Enum):
    """Hash algorithms that hashlib ships on every supported platform."""
    MD5 = "md5"
    SHA1 = "sha1"
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"
    SHA3_256 = "sha3_256"
    SHA3_512 = "sha3_512"
    BLAKE2B = "blake2b"
    BLAKE2S = "blake2s"


class Hasher:
    """
    A resettable streaming hash function.

    Mirrors the classic reset / write / sum / size contract:

        >>> h = new_hasher("sha256")
        >>> h.write(b"hello")
        5
        >>> h.sum().hex()[:8]
        '2cf24dba'
        >>> h.size
        32

    ``sum()`` does not change the running state; call ``reset()`` to start
    over. A Hasher is not safe to share between threads.
    """

    def __init__(self, factory: HashFactory, name: str | None = None) -> None:
        self._factory = factory
        self._state = factory()
        self.name = name or getattr(self._state, "name", "custom")

    @property
    def size(self) -> int:
        """Digest size in bytes."""
        return self._state.digest_size

    def reset(self) -> None:
        """Discard everything written so far."""
        self._state = self._factory()

    def write(self, data: bytes) -> int:
        """Append bytes to the running hash; returns the number written."""
        self._state.update(data)
        return len(data)

    def sum(self) -> bytes:
        """Digest of everything written since the last reset."""
        return self._state.digest()

    def digest(self, data: bytes) -> bytes:
        """One-shot digest of ``data``."""
        self.reset()
        self.write(data)
        return self.sum()

    def digest_pair(self, left: bytes, right: bytes | None = None) -> bytes:
        """
        One-shot digest of ``left || right``.

        With ``right=None`` only ``left`` is hashed: a node with no sibling
        hashes its lone child.
        """
        self.reset()
        self.write(left)
        if right is not None:
            self.write(right)
        return self.sum()

    def spawn(self) -> "Hasher":
        """A fresh, independent Hasher for the same algorithm."""
        return Hasher(self._factory, self.name)

    def __repr__(self) -> str:
        return f"Hasher(name={self.name!r}, size={self.size})"


HashSpec = Union[str, HashAlgorithm, Hasher, HashFactory]


def _check_state(state: Any, name: str) -> None:
    for attr in ("update", "digest", "digest_size"):
        if not hasattr(state, attr):
            raise HashUnavailableException(
                message=f"Hash object for {name!r} has no {attr!r}",
                algorithm=name,
            )
    if not state.digest_size:
        raise HashUnavailableException(
            message=f"Hash algorithm {name!r} has no fixed digest size",
            algorithm=name,
        )


def new_hasher(spec: HashSpec) -> Hasher:
    """
    Instantiate a Hasher.

    Args:
        spec: A HashAlgorithm, a name understood by ``hashlib.new``, an
              existing Hasher (a fresh copy is returned), or a zero-argument
              factory returning a hashlib-like object.

    Returns:
        A ready-to-use Hasher.

    Raises:
        HashUnavailableException: If the algorithm is unknown, not built into
            this interpreter, disabled (e.g. FIPS mode) or has no fixed size.
        TypeError: If ``spec`` is none of the accepted kinds.
    """
    if isinstance(spec, Hasher):
        return spec.spawn()

    if isinstance(spec, str):
        name = spec.value if isinstance(spec, HashAlgorithm) else spec.lower()
        factory = functools.partial(hashlib.new, name)
        try:
            state = factory()
        except (ValueError, TypeError) as e:
            raise HashUnavailableException(
                message=f"Hash algorithm {name!r} is unavailable: {e}",
                algorithm=name,
            ) from e
        _check_state(state, name)
        return Hasher(factory, name)

    if callable(spec):
        name = getattr(spec, "__name__", "custom")
        try:
            state = spec()
        except Exception as e:
            raise HashUnavailableException(
                message=f"Hash factory {name!r} failed: {e}",
                algorithm=name,
            ) from e
        _check_state(state, name)
        return Hasher(spec, getattr(state, "name", name))

    raise TypeError(
        f"Cannot build a hasher from {type(spec).__name__}: expected an "
        f"algorithm name, HashAlgorithm, Hasher or factory"
    )


def available_algorithms() -> list[str]:
    """Sorted names that ``new_hasher`` can instantiate in this interpreter."""
    names = []
    for name in sorted(hashlib.algorithms_available):
        try:
            new_hasher(name)
        except HashUnavailableException:
            continue
        names.append(name.lower())
    return sorted(set(names))


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


__all__ = [
    "HashAlgorithm",
    "HashFactory",
    "HashSpec",
    "Hasher",
    "new_hasher",
    "available_algorithms",
    "to_hex",
]
