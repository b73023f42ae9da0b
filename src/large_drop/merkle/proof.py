"""
Merkle Proof Verification

This module reduces a candidate proof to a root digest and compares it with
a stored commitment. A proof is the ordered list of sibling digests from the
leaf level up to (but not including) the root; the side each sibling sits on
is taken from the parity of the node index at that level, never from the
order of the list alone.
"""

import logging
from typing import List, Sequence

from ..errors import ValidationError
from .hashing import Bytes32, BytesLike, Digest, parent_hash

logger = logging.getLogger(__name__)


def validate_proof_shape(proof: Sequence[BytesLike]) -> List[Digest]:
    """
    Check that every sibling is a 32-byte digest and that no two are equal.
    
    A genuine path never repeats a node value, so a repeated sibling marks the
    proof as malformed or adversarial even if it would otherwise reduce.
    
    Args:
        proof: Ordered sibling digests
        
    Returns:
        The siblings as Digest values, in the same order
        
    Raises:
        ValidationError: On a wrong-length sibling or a duplicate sibling
    """
    siblings = [Digest(sibling) for sibling in proof]
    if len(set(siblings)) != len(siblings):
        raise ValidationError("Proof contains duplicate sibling digests")
    return siblings


def compute_root_from_proof(leaf: BytesLike, leaf_index: int, proof: Sequence[BytesLike]) -> Digest:
    """
    Rebuild the root from a leaf, its index and its sibling path.
    
    Args:
        leaf: 32-byte leaf digest
        leaf_index: 0-based position of the leaf
        proof: Sibling digests, one per level, leaf level first
        
    Returns:
        The reconstructed 32-byte root
        
    Examples:
        >>> root = compute_root_from_proof(leaf, 5, siblings)
    """
    current = Digest(leaf)
    index = leaf_index
    for sibling in proof:
        if index % 2 == 0:
            # Our node is the left child
            current = parent_hash(current, sibling)
        else:
            # Our node is the right child
            current = parent_hash(sibling, current)
        index //= 2
    return current


def verify_merkle_proof(
    root: BytesLike, proof: Sequence[BytesLike], leaf: BytesLike, leaf_index: int
) -> bool:
    """
    Verify a Merkle proof against a committed root.
    
    Malformed input is rejected rather than passed: a root, leaf or sibling
    that is not 32 bytes, a negative index, or a duplicate sibling all return
    False. The verifier does not know the tree size; callers check the index
    bound and the expected proof length themselves.
    
    Args:
        root: Committed 32-byte root
        proof: Ordered sibling digests
        leaf: 32-byte leaf digest
        leaf_index: Position of the leaf in the tree
        
    Returns:
        True if the proof reduces to root
        
    Examples:
        >>> verify_merkle_proof(root, [], root, 0)   # single-leaf tree
        True
    """
    try:
        expected = Digest(root)
        siblings = validate_proof_shape(proof)
        current = Digest(leaf)
    except ValidationError as e:
        logger.debug(f"Rejecting malformed proof: {e}")
        return False

    if isinstance(leaf_index, bool) or not isinstance(leaf_index, int) or leaf_index < 0:
        logger.debug(f"Rejecting proof with invalid leaf index {leaf_index!r}")
        return False

    return compute_root_from_proof(current, leaf_index, siblings) == expected


def batch_verify_proofs(
    root: BytesLike,
    leaves: Sequence[BytesLike],
    proofs: Sequence[Sequence[BytesLike]],
    indices: Sequence[int],
) -> List[bool]:
    """
    Verify multiple proofs against the same root.
    
    Returns:
        One boolean per (leaf, proof, index) triple
    """
    if not (len(leaves) == len(proofs) == len(indices)):
        raise ValidationError("leaves, proofs and indices must have the same length")

    results = []
    for leaf, proof, index in zip(leaves, proofs, indices):
        results.append(verify_merkle_proof(root, proof, leaf, index))
    return results
