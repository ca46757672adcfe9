"""
Merkle Tree Implementation
Immutable-per-snapshot, in-memory, hash-function-agnostic Merkle tree.

This module provides:
- plan_row_sizes: node counts per level for a given number of leaves
- construct_rows: fold sorted leaves into node rows, root first
- MerkleTree: build, query, verify, append to and delete from a tree
- build_tree: module-level constructor

Canonical Commitment Rules (Hard Contracts):
1. Leaf digest: H(serialized datum)
2. Leaves are sorted by serialized datum (lexicographic bytes) before
   hashing, so the root does not depend on input order
3. Parent digest: H(left || right)
4. Lone node: an even-indexed node with no right sibling has parent H(node).
   It is carried upward, never duplicated
5. Single leaf: root = leaf digest, no node rows

Layout:
    rows[0][0]                         <- root
    rows[1][0]  rows[1][1]
    ...
    rows[-1][0] ... rows[-1][ceil(L/2) - 1]   <- leaf-adjacent row
    leaves[0] ... leaves[L - 1]        <- sorted by datum, stored separately

Mutation Model:
Every snapshot (leaves, rows, root) is built in full and swapped in at once.
append() and delete() rebuild every node; there is no incremental rehash.
A MerkleTree assumes a single writer: callers that share an instance across
threads must serialize mutations themselves (e.g. with a lock around
append/delete). Concurrent readers of an unchanging tree are fine: every
query hashes with its own Hasher spawned from the tree's.
"""
from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, replace
from operator import attrgetter
from typing import Any, Iterable, Iterator, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from canopy.config.runtime import get_default_config
from canopy.crypto.hashing import Hasher, HashSpec, new_hasher, to_hex
from canopy.merkle.merkle_proofs import MerkleProof, build_merkle_proof, verify_path
from canopy.schemas.datum import serialize_item
from canopy.schemas.errors import NoDataException


logger = logging.getLogger(__name__)

_by_datum = attrgetter("datum")
_by_ordered_id = attrgetter("ordered_id")


@dataclass
class TreeLeaf:
    """
    A leaf of the tree.

    Attributes:
        digest: H(datum), cached at construction
        datum: The caller's serialized bytes
        ordered_id: Position at which the item was supplied (append order),
                    compacted on delete
    """
    digest: bytes
    datum: bytes
    ordered_id: int


class TreeSummary(BaseModel):
    """Read-only snapshot statistics, convenient for logs and reports."""

    model_config = ConfigDict(frozen=True)

    algorithm: str = Field(..., description="Hash algorithm name")
    root: Optional[str] = Field(default=None, description="0x-prefixed root digest")
    height: int = Field(..., ge=0)
    size: int = Field(..., ge=0)
    merkle_node_count: int = Field(..., ge=0)
    leaf_count: int = Field(..., ge=0)


def plan_row_sizes(leaf_count: int) -> tuple[int, list[int]]:
    """
    Compute internal node counts per level.

    While a level has more than one node, the next level has count / 2 nodes
    when even and count / 2 + 1 when odd (the leftover node gets a parent of
    its own).

    Args:
        leaf_count: Number of leaves (L >= 0)

    Returns:
        (total internal nodes, sizes from the leaf-adjacent level up to the
        root). L = 0 and L = 1 yield (0, []).

    Example:
        >>> plan_row_sizes(5)
        (6, [3, 2, 1])
    """
    if leaf_count < 0:
        raise ValueError(f"Leaf count must be non-negative, got {leaf_count}")

    total = 0
    sizes: list[int] = []
    count = leaf_count
    while count > 1:
        count = count // 2 + (count % 2)
        sizes.append(count)
        total += count
    return total, sizes


def merkle_parent(hasher: Hasher, left: bytes, right: Optional[bytes] = None) -> bytes:
    """Parent digest H(left || right), or H(left) for a lone node."""
    return hasher.digest_pair(left, right)


def make_leaves(hasher: Hasher, items: Iterable[Any], first_ordered_id: int = 0) -> list[TreeLeaf]:
    """Serialize and hash ``items``, numbering them from ``first_ordered_id``."""
    leaves = []
    for offset, item in enumerate(items):
        datum = serialize_item(item)
        leaves.append(
            TreeLeaf(
                digest=hasher.digest(datum),
                datum=datum,
                ordered_id=first_ordered_id + offset,
            )
        )
    return leaves


def construct_rows(hasher: Hasher, leaves: Sequence[TreeLeaf]) -> list[list[bytes]]:
    """
    Fold sorted leaves into node rows.

    Returns:
        Rows with the root row first and the leaf-adjacent row last; empty
        for zero or one leaf.
    """
    _, sizes = plan_row_sizes(len(leaves))
    if not sizes:
        return []

    children = [leaf.digest for leaf in leaves]
    rows_bottom_up: list[list[bytes]] = []
    for size in sizes:
        row = [
            merkle_parent(
                hasher,
                children[2 * j],
                children[2 * j + 1] if 2 * j + 1 < len(children) else None,
            )
            for j in range(size)
        ]
        rows_bottom_up.append(row)
        children = row

    rows_bottom_up.reverse()
    return rows_bottom_up


class MerkleTree:
    """
    A Merkle tree over serialized items, sorted by content.

    Items are anything ``serialize_item`` accepts: Datum objects, bytes or
    str. Lookups come in three flavours:

    - verify(item) / verify_by_serialized_datum(datum): O(log L) binary search
    - verify_by_digest(digest): O(L) scan
    - verify_by_ordered_id(ordered_id): O(L) scan

    Each then walks the path to the root in O(log L) hashes. A missing target
    raises NoDataException; a present target whose path does not check out
    returns False.

    With duplicate serialized data every lookup resolves to the first
    matching leaf in sorted storage order.

    Example:
        >>> tree = MerkleTree("sha256", ["beta", "alpha", "gamma"])
        >>> tree.leaves()
        [b'beta', b'alpha', b'gamma']
        >>> tree.verify("alpha")
        True
    """

    def __init__(self, hash: HashSpec | None, items: Iterable[Any]) -> None:
        if hash is None:
            hash = get_default_config().hash_algorithm
        self._hasher = new_hasher(hash)

        leaves = make_leaves(self._hasher, list(items) if items is not None else [])
        if not leaves:
            raise NoDataException("Cannot build a Merkle tree without data")

        self._leaves: list[TreeLeaf] = []
        self._rows: list[list[bytes]] = []
        self._root: Optional[bytes] = None
        self._install(leaves)

    @classmethod
    def build(cls, hash: HashSpec | None, items: Iterable[Any]) -> "MerkleTree":
        """Build a tree; see ``build_tree``."""
        return cls(hash, items)

    # -------------------------------------------------------------------------
    # Snapshot management
    # -------------------------------------------------------------------------

    def _install(self, leaves: list[TreeLeaf]) -> None:
        """Sort leaves, rebuild every node and swap the new snapshot in."""
        leaves = sorted(leaves, key=_by_datum)
        rows = construct_rows(self._hasher, leaves)
        if rows:
            root = rows[0][0]
        elif leaves:
            root = leaves[0].digest
        else:
            root = None

        self._leaves, self._rows, self._root = leaves, rows, root

        logger.debug(
            f"Constructed {self._hasher.name} tree: leaves={len(leaves)} "
            f"height={self.height} nodes={self.merkle_node_count}"
        )

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def root(self) -> bytes:
        """Root digest. Raises NoDataException once every leaf is deleted."""
        if self._root is None:
            raise NoDataException("Tree has no leaves and therefore no root")
        return self._root

    @property
    def height(self) -> int:
        """Number of levels, leaves included (0 for an emptied tree)."""
        if not self._leaves:
            return 0
        return len(self._rows) + 1

    @property
    def size(self) -> int:
        """Total node count: internal nodes plus leaves."""
        return self.merkle_node_count + self.leaf_count

    @property
    def merkle_node_count(self) -> int:
        """Number of internal nodes (leaves excluded)."""
        return sum(len(row) for row in self._rows)

    @property
    def leaf_count(self) -> int:
        return len(self._leaves)

    @property
    def hash_algorithm(self) -> str:
        return self._hasher.name

    @property
    def digest_size(self) -> int:
        return self._hasher.size

    def rows(self) -> list[list[bytes]]:
        """Copy of the node rows, root row first."""
        return [list(row) for row in self._rows]

    def summary(self) -> TreeSummary:
        return TreeSummary(
            algorithm=self.hash_algorithm,
            root=to_hex(self._root) if self._root is not None else None,
            height=self.height,
            size=self.size,
            merkle_node_count=self.merkle_node_count,
            leaf_count=self.leaf_count,
        )

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def _find_datum(self, datum: bytes) -> Optional[int]:
        index = bisect.bisect_left(self._leaves, datum, key=_by_datum)
        if index < len(self._leaves) and self._leaves[index].datum == datum:
            return index
        return None

    def _find_ordered_id(self, ordered_id: int) -> Optional[int]:
        for index, leaf in enumerate(self._leaves):
            if leaf.ordered_id == ordered_id:
                return index
        return None

    def _verify(self, index: int) -> bool:
        return verify_path(self._hasher.spawn(), self._leaves, self._rows, self._root, index)

    # -------------------------------------------------------------------------
    # Verification
    # -------------------------------------------------------------------------

    def verify_by_digest(self, digest: bytes) -> bool:
        """
        Verify the leaf matching ``digest``.

        O(L) scan. A leaf matches when its digest equals ``digest``, or when
        its serialized datum does.

        Raises:
            NoDataException: If no leaf matches
        """
        if digest is None:
            raise NoDataException("Cannot verify a missing (None) digest")
        target = bytes(digest)
        for index, leaf in enumerate(self._leaves):
            if leaf.digest == target or leaf.datum == target:
                return self._verify(index)
        raise NoDataException(
            "No leaf matches the given digest",
            details={"digest": target.hex()},
        )

    def verify_by_ordered_id(self, ordered_id: int) -> bool:
        """
        Verify the item supplied at position ``ordered_id``.

        O(L) scan.

        Raises:
            NoDataException: If no leaf carries that ordered ID
        """
        index = self._find_ordered_id(ordered_id)
        if index is None:
            raise NoDataException(
                f"No leaf with ordered ID {ordered_id}",
                details={"ordered_id": ordered_id},
            )
        return self._verify(index)

    def verify_by_serialized_datum(self, datum: bytes) -> bool:
        """
        Verify an item given in serialized form.

        O(log L) binary search.

        Raises:
            NoDataException: If ``datum`` is None or not in the tree
        """
        if datum is None:
            raise NoDataException("Cannot verify a missing (None) datum")
        datum = bytes(datum)
        index = self._find_datum(datum)
        if index is None:
            raise NoDataException("Datum is not present in the tree")
        return self._verify(index)

    def verify(self, item: Any) -> bool:
        """
        Verify that ``item`` is included in the tree.

        Raises:
            NoDataException: If ``item`` is None or not in the tree
        """
        return self.verify_by_serialized_datum(serialize_item(item))

    def __contains__(self, item: Any) -> bool:
        if item is None:
            return False
        return self._find_datum(serialize_item(item)) is not None

    # -------------------------------------------------------------------------
    # Proofs
    # -------------------------------------------------------------------------

    def proof(self, item: Any) -> MerkleProof:
        """
        Export an inclusion proof for ``item``.

        Raises:
            NoDataException: If ``item`` is None or not in the tree
        """
        index = self._find_datum(serialize_item(item))
        if index is None:
            raise NoDataException("Datum is not present in the tree")
        return build_merkle_proof(self._hasher.spawn(), self._leaves, self._rows, self.root, index)

    def proof_by_ordered_id(self, ordered_id: int) -> MerkleProof:
        """Export an inclusion proof for the item supplied at ``ordered_id``."""
        index = self._find_ordered_id(ordered_id)
        if index is None:
            raise NoDataException(
                f"No leaf with ordered ID {ordered_id}",
                details={"ordered_id": ordered_id},
            )
        return build_merkle_proof(self._hasher.spawn(), self._leaves, self._rows, self.root, index)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def append(self, items: Iterable[Any]) -> None:
        """
        Add items and rebuild the tree.

        New items get ordered IDs continuing from the current leaf count.
        An empty ``items`` is a no-op.
        """
        new_leaves = make_leaves(self._hasher, list(items), first_ordered_id=len(self._leaves))
        if not new_leaves:
            return
        logger.debug(f"Appending {len(new_leaves)} leaves to {len(self._leaves)}")
        self._install(self._leaves + new_leaves)

    def delete(self, items: Iterable[Any]) -> None:
        """
        Remove items and rebuild the tree.

        Items not in the tree are skipped. Remaining ordered IDs are
        renumbered 0..n-1 keeping their relative order, so an ordered ID is a
        compacted position rather than a permanent identity. An empty
        ``items`` is a no-op.
        """
        targets = [serialize_item(item) for item in items]
        if not targets:
            return

        remaining = list(self._leaves)
        for datum in targets:
            index = bisect.bisect_left(remaining, datum, key=_by_datum)
            if index < len(remaining) and remaining[index].datum == datum:
                del remaining[index]
            else:
                logger.debug(f"Skipping delete of absent datum ({len(datum)} bytes)")

        renumbered = [
            replace(leaf, ordered_id=position)
            for position, leaf in enumerate(sorted(remaining, key=_by_ordered_id))
        ]
        logger.debug(f"Deleted {len(self._leaves) - len(renumbered)} leaves")
        self._install(renumbered)

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def leaves(self) -> list[bytes]:
        """Every serialized datum, in original insertion order."""
        return [leaf.datum for leaf in sorted(self._leaves, key=_by_ordered_id)]

    def leaf_digests(self) -> list[bytes]:
        """Leaf digests, in original insertion order."""
        return [leaf.digest for leaf in sorted(self._leaves, key=_by_ordered_id)]

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.leaves())

    def __len__(self) -> int:
        return len(self._leaves)

    def __repr__(self) -> str:
        root = self._root.hex()[:16] if self._root is not None else None
        return (
            f"MerkleTree(algorithm={self.hash_algorithm!r}, "
            f"leaves={self.leaf_count}, root={root!r})"
        )


def build_tree(hash: HashSpec | None, items: Iterable[Any]) -> MerkleTree:
    """
    Build a Merkle tree.

    Args:
        hash: Hash primitive (name, HashAlgorithm, Hasher or factory);
              None uses the configured default algorithm
        items: Items to commit to (Datum, bytes or str)

    Raises:
        HashUnavailableException: If the hash primitive cannot be instantiated
        NoDataException: If ``items`` is empty
    """
    return MerkleTree(hash, items)


__all__ = [
    "TreeLeaf",
    "TreeSummary",
    "MerkleTree",
    "plan_row_sizes",
    "merkle_parent",
    "make_leaves",
    "construct_rows",
    "build_tree",
]
