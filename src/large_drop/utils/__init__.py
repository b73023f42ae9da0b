"""
Utility Functions

Hex string handling shared by the hashing types and the API layer.
"""

from .hex_helpers import (
    strip_hex_prefix,
    hex_to_bytes,
    bytes_to_hex,
)

__all__ = [
    'strip_hex_prefix',
    'hex_to_bytes',
    'bytes_to_hex',
]
