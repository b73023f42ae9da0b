"""
Campaign Constants and Limits

This module contains the fixed sizes and numeric limits shared by the
hashing, proof verification and campaign ledger code.
"""

# ====================
# Digest Sizes
# ====================

# Every digest (root, leaf, proof sibling) and every object identity is 32 bytes
HASH_LENGTH = 32

# Addresses are encoded as their raw 32 bytes
ADDRESS_LENGTH = 32

# ====================
# Integer Limits
# ====================

# wallet_count is persisted as a u32
MAX_U32 = 2**32 - 1

# Allocations, funding and leaf indices are u64
MAX_U64 = 2**64 - 1

# ====================
# Campaign Limits
# ====================

# A campaign commits to at least two wallets (a tree with a real sibling)
MIN_WALLET_COUNT = 2

# Size of the little-endian integer encodings
U32_BYTES = 4
U64_BYTES = 8
