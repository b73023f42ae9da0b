"""
Merkle Hashing and Proof Verification

This package provides the hashing primitives, tree depth calculation and
proof verification used to check allocation claims against a campaign root.

The package is organized into three modules:
- hashing: fixed-width byte types, digest, leaf and parent hashes
- tree: proof length for a committed leaf count
- proof: proof reduction and verification
"""

from .hashing import (
    Bytes32,
    Digest,
    ObjectId,
    Address,
    digest,
    encode_u64,
    encode_address,
    leaf_hash,
    parent_hash,
)

from .tree import proof_length

from .proof import (
    validate_proof_shape,
    compute_root_from_proof,
    verify_merkle_proof,
    batch_verify_proofs,
)

__all__ = [
    # Hashing
    "Bytes32",
    "Digest",
    "ObjectId",
    "Address",
    "digest",
    "encode_u64",
    "encode_address",
    "leaf_hash",
    "parent_hash",
    # Tree
    "proof_length",
    # Proofs
    "validate_proof_shape",
    "compute_root_from_proof",
    "verify_merkle_proof",
    "batch_verify_proofs",
]
