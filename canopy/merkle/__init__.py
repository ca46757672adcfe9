"""
Merkle Tree and Inclusion Proofs
Content-sorted, hash-agnostic Merkle tree with path verification.

This module provides:
- MerkleTree / build_tree: construct, query, verify, append, delete
- plan_row_sizes / construct_rows: the layered node layout
- MerkleProof / verify_merkle_proof: proofs that travel without the tree

Usage:
    from canopy.merkle import build_tree

    tree = build_tree("sha256", ["beta", "alpha", "gamma"])
    tree.verify("alpha")        # True
    tree.verify("delta")        # raises NoDataException
    proof = tree.proof("beta")
    verify_merkle_proof(proof, b"beta")   # True
"""
from .merkle_proofs import (
    MerkleProof,
    build_merkle_proof,
    verify_merkle_proof,
    verify_path,
)

from .merkle_tree import (
    MerkleTree,
    TreeLeaf,
    TreeSummary,
    build_tree,
    construct_rows,
    make_leaves,
    merkle_parent,
    plan_row_sizes,
)


__all__ = [
    # Tree
    "MerkleTree",
    "TreeLeaf",
    "TreeSummary",
    "build_tree",
    "construct_rows",
    "make_leaves",
    "merkle_parent",
    "plan_row_sizes",
    # Proofs
    "MerkleProof",
    "build_merkle_proof",
    "verify_merkle_proof",
    "verify_path",
]
