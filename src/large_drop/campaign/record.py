"""
Persisted Campaign Records

This module encodes and decodes the byte layout a campaign ledger and its
admin capability are stored under by the host. Integers are little-endian,
fixed-width identities are raw 32 bytes, and the variable-length root is
prefixed with its ULEB128 length.

Ledger record:
    id (32) | root (uleb128 len + bytes) | wallet_count (u32) |
    total_allocated (u64) | vault (u64) | allocations_ref (32) |
    tree_ref (32) | registry.id (32) | registry.size (u64)

Capability record:
    id (32) | bound_ledger_id (32)

The claimed address set lives in the registry table; the record only
carries the table's identity and size.
"""

from dataclasses import dataclass
from typing import Iterable

from ..constants import HASH_LENGTH, U32_BYTES, U64_BYTES
from ..errors import CampaignClosedError, ValidationError
from ..merkle import ObjectId
from .ledger import AdminCapability, CampaignLedger


@dataclass(frozen=True)
class LedgerRecord:
    """Decoded ledger record."""
    id: ObjectId
    root: bytes
    wallet_count: int
    total_allocated: int
    vault: int
    allocations_ref: ObjectId
    tree_ref: ObjectId
    registry_id: ObjectId
    registry_size: int


@dataclass(frozen=True)
class CapabilityRecord:
    """Decoded capability record."""
    id: ObjectId
    bound_ledger_id: ObjectId


def encode_uleb128(value: int) -> bytes:
    """
    Encode a non-negative integer as ULEB128.
    
    Examples:
        >>> encode_uleb128(32)
        b' '
        >>> encode_uleb128(300)
        b'\\xac\\x02'
    """
    if value < 0:
        raise ValidationError("ULEB128 values must be non-negative")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


class _RecordReader:
    """Cursor over a record's bytes that fails on truncation."""

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.offset = 0

    def take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise ValidationError(
                f"Record truncated: needed {size} bytes at offset {self.offset}, "
                f"have {len(self.data) - self.offset}"
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def uint(self, size: int) -> int:
        return int.from_bytes(self.take(size), "little")

    def object_id(self) -> ObjectId:
        return ObjectId(self.take(HASH_LENGTH))

    def uleb128(self) -> int:
        result = 0
        shift = 0
        while True:
            byte = self.take(1)[0]
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result
            shift += 7
            if shift > 63:
                raise ValidationError("ULEB128 length prefix too long")

    def finish(self) -> None:
        if self.offset != len(self.data):
            raise ValidationError(f"{len(self.data) - self.offset} trailing bytes after record")


def encode_ledger_record(ledger: CampaignLedger) -> bytes:
    """
    Serialize a ledger to its persisted record layout.

    Vault and registry size come from a single locked snapshot, so a
    concurrent claim lands either wholly before or wholly after the record.

    Raises:
        CampaignClosedError: If the ledger has been destroyed
    """
    vault, claimed_count, destroyed = ledger.snapshot()
    if destroyed:
        raise CampaignClosedError(f"Campaign {ledger.id.to_hex()} has been destroyed")
    return b"".join([
        bytes(ledger.id),
        encode_uleb128(len(ledger.root)),
        bytes(ledger.root),
        ledger.wallet_count.to_bytes(U32_BYTES, "little"),
        ledger.total_allocated.to_bytes(U64_BYTES, "little"),
        vault.to_bytes(U64_BYTES, "little"),
        bytes(ledger.allocations_ref),
        bytes(ledger.tree_ref),
        bytes(ledger.registry_id),
        claimed_count.to_bytes(U64_BYTES, "little"),
    ])


def decode_ledger_record(data: bytes) -> LedgerRecord:
    """
    Parse a persisted ledger record.
    
    Raises:
        ValidationError: If the data is truncated or has trailing bytes
    """
    reader = _RecordReader(data)
    id = reader.object_id()
    root = reader.take(reader.uleb128())
    record = LedgerRecord(
        id=id,
        root=root,
        wallet_count=reader.uint(U32_BYTES),
        total_allocated=reader.uint(U64_BYTES),
        vault=reader.uint(U64_BYTES),
        allocations_ref=reader.object_id(),
        tree_ref=reader.object_id(),
        registry_id=reader.object_id(),
        registry_size=reader.uint(U64_BYTES),
    )
    reader.finish()
    return record


def ledger_from_record(record: LedgerRecord, claimed: Iterable[bytes] = ()) -> CampaignLedger:
    """
    Rebuild a live ledger from its record and the registry's addresses.
    
    Raises:
        ValidationError: If the record violates a ledger invariant or the
            number of addresses does not match the registry size
    """
    claimed = list(claimed)
    if len(claimed) != record.registry_size:
        raise ValidationError(
            f"Registry size {record.registry_size} does not match {len(claimed)} claimed addresses"
        )
    ledger = CampaignLedger(
        id=record.id,
        root=record.root,
        wallet_count=record.wallet_count,
        total_allocated=record.total_allocated,
        allocations_ref=record.allocations_ref,
        tree_ref=record.tree_ref,
        registry_id=record.registry_id,
        vault=record.vault,
        claimed=claimed,
    )
    if ledger.claimed_count != record.registry_size:
        raise ValidationError("Claimed addresses contain duplicates")
    return ledger


def encode_capability_record(capability: AdminCapability) -> bytes:
    """Serialize a capability to its persisted record layout."""
    return bytes(capability.id) + bytes(capability.bound_ledger_id)


def decode_capability_record(data: bytes) -> CapabilityRecord:
    """Parse a persisted capability record."""
    reader = _RecordReader(data)
    record = CapabilityRecord(id=reader.object_id(), bound_ledger_id=reader.object_id())
    reader.finish()
    return record
