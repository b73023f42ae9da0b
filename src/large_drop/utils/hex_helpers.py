"""
Hex String Utilities

This module converts between the 0x-prefixed hex strings used at the API
boundary and the raw bytes used by the hashing and ledger code.
"""

from typing import Optional

from ..errors import ValidationError

HEX_DIGITS = set("0123456789abcdefABCDEF")


def strip_hex_prefix(hex_str: str) -> str:
    """Return the hex digits of a string, without any '0x' prefix."""
    if hex_str.startswith(("0x", "0X")):
        return hex_str[2:]
    return hex_str


def hex_to_bytes(hex_str: str, expected_bytes: Optional[int] = None, pad_left: bool = False) -> bytes:
    """
    Convert a hex string to bytes.
    
    Args:
        hex_str: Hex string (with or without '0x' prefix)
        expected_bytes: Optional exact byte length the result must have
        pad_left: Left-pad with zeros up to expected_bytes (short addresses like "0x2")
        
    Returns:
        Bytes representation of the hex string
        
    Raises:
        ValidationError: If the string is not hex or has the wrong length
        
    Examples:
        >>> hex_to_bytes("0x1234")
        b'\x12\x34'
        >>> hex_to_bytes("0x2", expected_bytes=4, pad_left=True)
        b'\x00\x00\x00\x02'
    """
    if not isinstance(hex_str, str):
        raise ValidationError(f"Expected a hex string, got {type(hex_str).__name__}")

    digits = strip_hex_prefix(hex_str)
    if not all(c in HEX_DIGITS for c in digits):
        raise ValidationError(f"Invalid hex string: {hex_str}")

    # Pad to even length
    if len(digits) % 2 == 1:
        digits = "0" + digits

    if pad_left and expected_bytes is not None and len(digits) < expected_bytes * 2:
        digits = digits.rjust(expected_bytes * 2, "0")

    data = bytes.fromhex(digits)
    if expected_bytes is not None and len(data) != expected_bytes:
        raise ValidationError(f"Expected {expected_bytes} bytes, got {len(data)} bytes")
    return data


def bytes_to_hex(data: bytes, prefix: bool = True) -> str:
    """
    Convert bytes to a hex string.
    
    Examples:
        >>> bytes_to_hex(b'\x12\x34')
        "0x1234"
        >>> bytes_to_hex(b'\x12\x34', prefix=False)
        "1234"
    """
    hex_str = bytes(data).hex()
    return f"0x{hex_str}" if prefix else hex_str
