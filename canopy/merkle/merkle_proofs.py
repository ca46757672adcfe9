"""
Merkle Path Verification and Inclusion Proofs

This module provides:
- verify_path: walk a stored tree from one leaf to the root, recomputing
  every ancestor and comparing it against the stored node digests
- MerkleProof: a self-contained inclusion proof that can leave the process
- build_merkle_proof / verify_merkle_proof: export and check such proofs
  without the tree

Pairing Rules (shared with construction):
1. A node at an even index is the LEFT operand, its sibling (if any) is at
   index + 1.
2. A node at an odd index is the RIGHT operand, its sibling is at
   index - 1 and always exists.
3. An even-indexed node with no right sibling is hashed alone: parent =
   H(node). It is never duplicated.
4. Parent index is index // 2.

The leaf digest is always recomputed from the stored datum. The cached
digest of the leaf under verification is never trusted; cached digests are
only read for siblings.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional, Sequence

from canopy.crypto.hashing import Hasher, HashSpec, new_hasher
from canopy.schemas.errors import MerkleVerificationException

if TYPE_CHECKING:
    from canopy.merkle.merkle_tree import TreeLeaf


logger = logging.getLogger(__name__)


def _sibling_step(
    node_at: Callable[[int], bytes],
    level_size: int,
    current_index: int,
) -> tuple[Optional[bytes], bool]:
    """
    Locate the sibling of ``current_index`` on one level.

    Returns:
        (sibling digest or None, True if the current node is the left operand)
    """
    if current_index % 2 == 0:
        if current_index + 1 < level_size:
            return node_at(current_index + 1), True
        return None, True
    return node_at(current_index - 1), False


def _combine(hasher: Hasher, current: bytes, sibling: Optional[bytes], is_left: bool) -> bytes:
    if sibling is None:
        return hasher.digest_pair(current)
    if is_left:
        return hasher.digest_pair(current, sibling)
    return hasher.digest_pair(sibling, current)


def verify_path(
    hasher: Hasher,
    leaves: Sequence["TreeLeaf"],
    rows: Sequence[Sequence[bytes]],
    root: Optional[bytes],
    index: int,
) -> bool:
    """
    Verify the leaf at ``index`` against the stored node rows.

    Args:
        hasher: Hash primitive the tree was built with
        leaves: Leaves in sorted storage order
        rows: Node rows, row 0 being the root
        root: Root digest of the snapshot (used when there are no rows)
        index: Position of the leaf in ``leaves``

    Returns:
        True if every recomputed ancestor matches the stored digest,
        False at the first mismatch.
    """
    current_index = index
    current_digest = hasher.digest(leaves[index].datum)

    # Single leaf: the root is the leaf digest itself
    if not rows:
        if current_digest != root:
            logger.debug(f"Leaf {index} does not match the single-leaf root")
            return False
        return True

    node_at: Callable[[int], bytes] = lambda i: leaves[i].digest
    level_size = len(leaves)

    # Walk from the leaf-adjacent row (last) up to the root row (0)
    for row_number in range(len(rows) - 1, -1, -1):
        row = rows[row_number]
        sibling, is_left = _sibling_step(node_at, level_size, current_index)
        parent_index = current_index // 2
        recomputed = _combine(hasher, current_digest, sibling, is_left)

        stored = row[parent_index]
        if recomputed != stored:
            logger.debug(
                f"Path for leaf {index} diverges at row {row_number}, column {parent_index}"
            )
            return False

        current_index, current_digest = parent_index, stored
        node_at = row.__getitem__
        level_size = len(row)

    return True


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle inclusion proof for a single leaf of a canopy tree.

    Attributes:
        leaf: Digest of the leaf's serialized datum
        index: 0-based position of the leaf in sorted storage order
        siblings: Sibling digests from the leaf level up to just below the
                  root. ``None`` marks a level where the node had no sibling
                  and was hashed alone.
        root: The root this proof commits to
        algorithm: Name of the hash algorithm used to build the tree
    """
    leaf: bytes
    index: int
    siblings: list[Optional[bytes]] = field(default_factory=list)
    root: bytes = b""
    algorithm: str = "sha256"

    def __post_init__(self) -> None:
        if self.index < 0:
            raise MerkleVerificationException(
                f"Leaf index must be non-negative, got {self.index}",
                leaf_index=self.index,
            )

    def to_dict(self) -> dict:
        return {
            "leaf": self.leaf.hex(),
            "index": self.index,
            "siblings": [s.hex() if s is not None else None for s in self.siblings],
            "root": self.root.hex(),
            "algorithm": self.algorithm,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MerkleProof":
        return cls(
            leaf=bytes.fromhex(data["leaf"]),
            index=data["index"],
            siblings=[
                bytes.fromhex(s) if s is not None else None
                for s in data.get("siblings", [])
            ],
            root=bytes.fromhex(data["root"]),
            algorithm=data.get("algorithm", "sha256"),
        )


def build_merkle_proof(
    hasher: Hasher,
    leaves: Sequence["TreeLeaf"],
    rows: Sequence[Sequence[bytes]],
    root: bytes,
    index: int,
) -> MerkleProof:
    """
    Collect the sibling digests needed to recompute the root from one leaf.

    Raises:
        IndexError: If ``index`` is out of range
    """
    if index < 0 or index >= len(leaves):
        raise IndexError(f"Leaf index {index} out of range for {len(leaves)} leaves")

    siblings: list[Optional[bytes]] = []
    node_at: Callable[[int], bytes] = lambda i: leaves[i].digest
    level_size = len(leaves)
    current_index = index

    for row_number in range(len(rows) - 1, -1, -1):
        sibling, _ = _sibling_step(node_at, level_size, current_index)
        siblings.append(sibling)
        row = rows[row_number]
        current_index //= 2
        node_at = row.__getitem__
        level_size = len(row)

    return MerkleProof(
        leaf=hasher.digest(leaves[index].datum),
        index=index,
        siblings=siblings,
        root=root,
        algorithm=hasher.name,
    )


def verify_merkle_proof(
    proof: MerkleProof,
    datum: Optional[bytes] = None,
    hash: HashSpec | None = None,
) -> bool:
    """
    Verify a proof without access to the tree.

    Args:
        proof: The proof to check
        datum: Optional serialized datum; when given, its digest must equal
               ``proof.leaf``
        hash: Hash primitive to use instead of ``proof.algorithm`` (needed
              for custom factories that have no hashlib name)

    Returns:
        True if the recomputed root equals ``proof.root``

    Raises:
        HashUnavailableException: If the proof's algorithm cannot be used
    """
    hasher = new_hasher(hash if hash is not None else proof.algorithm)

    if datum is not None and hasher.digest(datum) != proof.leaf:
        return False

    current = proof.leaf
    current_index = proof.index
    for sibling in proof.siblings:
        # A right-hand node always has a left sibling
        if sibling is None and current_index % 2 == 1:
            return False
        current = _combine(hasher, current, sibling, current_index % 2 == 0)
        current_index //= 2

    return current_index == 0 and current == proof.root


__all__ = [
    "MerkleProof",
    "verify_path",
    "build_merkle_proof",
    "verify_merkle_proof",
]
