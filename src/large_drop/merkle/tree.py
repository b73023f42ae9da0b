"""
Merkle Tree Depth

Derives how many siblings a proof must carry for a committed leaf count.
"""

from ..errors import ValidationError


def proof_length(leaf_count: int) -> int:
    """
    Calculate the required proof length for a tree of leaf_count leaves.
    
    Trees are built by halving each level and carrying the odd node upward
    (paired with itself), so the depth is the number of bits needed to write
    leaf_count - 1, i.e. ceil(log2(leaf_count)), for any leaf count.
    
    Args:
        leaf_count: Number of leaves committed to by the root
        
    Returns:
        Number of siblings in every proof for this tree
        
    Raises:
        ValidationError: If leaf_count is less than 1
        
    Examples:
        >>> proof_length(1)   # Returns 0
        >>> proof_length(5)   # Returns 3
        >>> proof_length(8)   # Returns 3
    """
    if isinstance(leaf_count, bool) or not isinstance(leaf_count, int):
        raise ValidationError(f"Leaf count must be an integer, got {type(leaf_count).__name__}")
    if leaf_count < 1:
        raise ValidationError(f"Leaf count must be at least 1, got {leaf_count}")

    return (leaf_count - 1).bit_length()
