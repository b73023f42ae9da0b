"""
Campaign Hashing Primitives

This module defines the fixed-width byte types used throughout the package
and the three hash functions every proof is built from:

- digest: BLAKE2b with a 32-byte output
- leaf_hash: digest of the canonical (address, allocation) encoding
- parent_hash: digest of two child digests, left child first

Canonical encoding is fixed-width so equal logical pairs always hash to the
same leaf: the 32 raw address bytes followed by the allocation as a u64 in
little-endian byte order.
"""

from hashlib import blake2b
from typing import Union

from ..constants import ADDRESS_LENGTH, HASH_LENGTH, MAX_U64, U64_BYTES
from ..errors import ValidationError
from ..utils.hex_helpers import bytes_to_hex, hex_to_bytes

BytesLike = Union[bytes, bytearray, memoryview]


class Bytes32(bytes):
    """
    Immutable byte string of exactly 32 bytes.
    
    Construction validates the length, so holding a Bytes32 is proof that the
    value is a well-formed digest or identity. Any other length raises
    ValidationError.
    """

    def __new__(cls, data: BytesLike):
        if isinstance(data, cls):
            return data
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise ValidationError(
                f"{cls.__name__} requires bytes, got {type(data).__name__}"
            )
        data = bytes(data)
        if len(data) != HASH_LENGTH:
            raise ValidationError(
                f"{cls.__name__} must be exactly {HASH_LENGTH} bytes, got {len(data)}"
            )
        return super().__new__(cls, data)

    @classmethod
    def from_hex(cls, hex_str: str) -> "Bytes32":
        """Parse a 0x-prefixed (or bare) 64-digit hex string."""
        return cls(hex_to_bytes(hex_str, expected_bytes=HASH_LENGTH))

    def to_hex(self) -> str:
        return bytes_to_hex(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_hex()})"


# Digests and object identities share the 32-byte representation
Digest = Bytes32
ObjectId = Bytes32


class Address(Bytes32):
    """32-byte account address."""

    @classmethod
    def from_hex(cls, hex_str: str) -> "Address":
        """Parse an address, left-padding short forms such as '0x2'."""
        return cls(hex_to_bytes(hex_str, expected_bytes=ADDRESS_LENGTH, pad_left=True))


def digest(data: BytesLike) -> Digest:
    """Hash arbitrary bytes to a 32-byte BLAKE2b digest."""
    return Digest(blake2b(bytes(data), digest_size=HASH_LENGTH).digest())


def encode_u64(value: int) -> bytes:
    """
    Canonically encode an unsigned 64-bit integer.
    
    Raises:
        ValidationError: If value is not an integer in [0, 2**64 - 1]
        
    Examples:
        >>> encode_u64(1)
        b'\\x01\\x00\\x00\\x00\\x00\\x00\\x00\\x00'
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"u64 value must be an integer, got {type(value).__name__}")
    if value < 0 or value > MAX_U64:
        raise ValidationError(f"u64 value out of range: {value}")
    return value.to_bytes(U64_BYTES, "little")


def encode_address(address: BytesLike) -> bytes:
    """Canonically encode an address: its raw 32 bytes, no length prefix."""
    return bytes(Address(address))


def leaf_hash(address: BytesLike, allocation: int) -> Digest:
    """
    Compute the leaf committed to for one (address, allocation) pair.
    
    Args:
        address: 32-byte claimant address
        allocation: Token amount allocated to the address (u64)
        
    Returns:
        32-byte leaf digest
    """
    return digest(encode_address(address) + encode_u64(allocation))


def parent_hash(left: BytesLike, right: BytesLike) -> Digest:
    """
    Combine two child digests into their parent.
    
    The operands are not commutative: parent_hash(a, b) != parent_hash(b, a)
    for a != b. Callers decide which side a node sits on from its index.
    """
    return digest(Bytes32(left) + Bytes32(right))
