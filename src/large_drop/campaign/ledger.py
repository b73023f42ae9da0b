"""
Campaign Ledger

This module holds the per-campaign aggregate (commitment root, funds vault,
one-time claim registry) and the single-use admin capability that tears it
down. It exposes the four lifecycle operations:

- create_campaign: fund a new ledger and mint its capability
- claim: verify a proof and pay out an allocation exactly once per address
- destroy_campaign: consume the capability, drain the vault, close the ledger
- has_claimed: read-only registry lookup

Every mutating method runs its checks and its mutation under the ledger's own
lock, so concurrent claims on one ledger are linearized and a rejected call
leaves the ledger untouched. Ledgers share no state with each other.
"""

import logging
import secrets
import threading
from typing import FrozenSet, Iterable, Optional, Sequence, Tuple

from ..constants import MAX_U32, MAX_U64, MIN_WALLET_COUNT
from ..errors import (
    AuthorizationError,
    CampaignClosedError,
    CampaignError,
    DuplicateClaimError,
    InsufficientVaultError,
    ValidationError,
    VerificationFailure,
)
from ..merkle import (
    Address,
    Digest,
    ObjectId,
    leaf_hash,
    proof_length,
    validate_proof_shape,
    verify_merkle_proof,
)
from ..merkle.hashing import BytesLike

logger = logging.getLogger(__name__)


def new_object_id() -> ObjectId:
    """Mint a fresh random 32-byte identity."""
    return ObjectId(secrets.token_bytes(32))


def _check_uint(name: str, value: int, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > maximum:
        raise ValidationError(f"{name} out of range: {value}")
    return value


class AdminCapability:
    """
    Single-use authorization token bound to exactly one campaign ledger.
    
    The binding is fixed at creation. Once consumed by destroy_campaign the
    token can never authorize anything again.
    """

    def __init__(self, bound_ledger_id: BytesLike, id: Optional[BytesLike] = None):
        self._id = ObjectId(id) if id is not None else new_object_id()
        self._bound_ledger_id = ObjectId(bound_ledger_id)
        self._consumed = False

    @property
    def id(self) -> ObjectId:
        return self._id

    @property
    def bound_ledger_id(self) -> ObjectId:
        return self._bound_ledger_id

    @property
    def consumed(self) -> bool:
        return self._consumed

    def _consume(self) -> None:
        self._consumed = True

    def __repr__(self) -> str:
        state = "consumed" if self._consumed else "live"
        return f"AdminCapability(id={self._id.to_hex()}, ledger={self._bound_ledger_id.to_hex()}, {state})"


class CampaignLedger:
    """
    Per-campaign aggregate: root commitment, vault and claim registry.
    
    Attributes:
        id: Unique identity of the campaign
        root: 32-byte Merkle root over all (address, allocation) leaves
        wallet_count: Number of leaves committed to by root
        total_allocated: Initial funding, equal to the sum of allocations
        vault: Remaining balance, never above total_allocated
        allocations_ref: Opaque reference to the off-chain allocation list
        tree_ref: Opaque reference to the off-chain serialized tree
        registry_id: Identity of the claim registry table
    """

    def __init__(
        self,
        id: BytesLike,
        root: BytesLike,
        wallet_count: int,
        total_allocated: int,
        allocations_ref: BytesLike,
        tree_ref: BytesLike,
        registry_id: Optional[BytesLike] = None,
        vault: Optional[int] = None,
        claimed: Iterable[BytesLike] = (),
    ):
        _check_uint("wallet_count", wallet_count, MAX_U32)
        _check_uint("total_allocated", total_allocated, MAX_U64)
        if wallet_count < MIN_WALLET_COUNT:
            raise ValidationError(
                f"A campaign needs at least {MIN_WALLET_COUNT} wallets, got {wallet_count}"
            )

        vault = total_allocated if vault is None else _check_uint("vault", vault, MAX_U64)
        if vault > total_allocated:
            raise ValidationError(f"Vault {vault} exceeds total allocation {total_allocated}")

        self._id = ObjectId(id)
        self._root = Digest(root)
        self._wallet_count = wallet_count
        self._total_allocated = total_allocated
        self._allocations_ref = ObjectId(allocations_ref)
        self._tree_ref = ObjectId(tree_ref)
        self._registry_id = ObjectId(registry_id) if registry_id is not None else new_object_id()
        self._vault = vault
        self._claimed = {Address(address) for address in claimed}
        self._destroyed = False
        self._lock = threading.Lock()

    @property
    def id(self) -> ObjectId:
        return self._id

    @property
    def root(self) -> Digest:
        return self._root

    @property
    def wallet_count(self) -> int:
        return self._wallet_count

    @property
    def total_allocated(self) -> int:
        return self._total_allocated

    @property
    def allocations_ref(self) -> ObjectId:
        return self._allocations_ref

    @property
    def tree_ref(self) -> ObjectId:
        return self._tree_ref

    @property
    def registry_id(self) -> ObjectId:
        return self._registry_id

    @property
    def vault(self) -> int:
        with self._lock:
            return self._vault

    @property
    def destroyed(self) -> bool:
        with self._lock:
            return self._destroyed

    @property
    def claimed(self) -> FrozenSet[Address]:
        """Snapshot of the addresses that have claimed."""
        with self._lock:
            return frozenset(self._claimed)

    @property
    def claimed_count(self) -> int:
        with self._lock:
            return len(self._claimed)

    def snapshot(self) -> Tuple[int, int, bool]:
        """Return (vault, claimed_count, destroyed) read under one lock hold."""
        with self._lock:
            return self._vault, len(self._claimed), self._destroyed

    @property
    def proof_length(self) -> int:
        """Number of siblings every valid proof for this campaign carries."""
        return proof_length(self._wallet_count)

    def has_claimed(self, address: BytesLike) -> bool:
        """Return True if address has already redeemed its allocation."""
        address = Address(address)
        with self._lock:
            if self._destroyed:
                raise CampaignClosedError(f"Campaign {self._id.to_hex()} has been destroyed")
            return address in self._claimed

    def claim(
        self,
        proof: Sequence[BytesLike],
        leaf_index: int,
        allocation: int,
        caller_address: BytesLike,
    ) -> int:
        """
        Redeem caller_address's allocation.
        
        The caller address is trusted as already authenticated by the host.
        All checks pass before any state changes; on success the address is
        recorded and allocation leaves the vault.
        
        Args:
            proof: Sibling digests from the leaf level upward
            leaf_index: Position of the caller's leaf in the tree
            allocation: Amount committed to for the caller
            caller_address: Authenticated 32-byte address of the claimant
            
        Returns:
            The payout, equal to allocation
            
        Raises:
            CampaignClosedError: The campaign has been destroyed
            DuplicateClaimError: The address already claimed
            ValidationError: Bad index, proof length, sibling shape or amount
            VerificationFailure: The proof does not reduce to the root
            InsufficientVaultError: The vault cannot cover the allocation
        """
        with self._lock:
            try:
                address = self._check_claim(proof, leaf_index, allocation, caller_address)
            except CampaignError as e:
                logger.warning(f"Rejected claim on campaign {self._id.to_hex()}: {e}")
                raise

            self._claimed.add(address)
            self._vault -= allocation
            remaining = self._vault

        logger.info(
            f"Claim of {allocation} by {address.to_hex()} on campaign {self._id.to_hex()} "
            f"(vault remaining {remaining})"
        )
        return allocation

    def _check_claim(
        self,
        proof: Sequence[BytesLike],
        leaf_index: int,
        allocation: int,
        caller_address: BytesLike,
    ) -> Address:
        # Caller holds self._lock
        if self._destroyed:
            raise CampaignClosedError(f"Campaign {self._id.to_hex()} has been destroyed")

        address = Address(caller_address)
        if address in self._claimed:
            raise DuplicateClaimError(f"Address {address.to_hex()} has already claimed")

        _check_uint("leaf_index", leaf_index, MAX_U64)
        if leaf_index >= self._wallet_count:
            raise ValidationError(
                f"Leaf index {leaf_index} out of range (0-{self._wallet_count - 1})"
            )

        expected_length = proof_length(self._wallet_count)
        if len(proof) != expected_length:
            raise ValidationError(
                f"Proof has {len(proof)} siblings, expected {expected_length}"
            )
        siblings = validate_proof_shape(proof)

        leaf = leaf_hash(address, allocation)
        if not verify_merkle_proof(self._root, siblings, leaf, leaf_index):
            raise VerificationFailure(
                f"Proof for leaf {leaf_index} does not match campaign root {self._root.to_hex()}"
            )

        if allocation > self._vault:
            raise InsufficientVaultError(
                f"Allocation {allocation} exceeds vault balance {self._vault}"
            )
        return address

    def destroy(self, capability: AdminCapability) -> int:
        """
        Consume capability, drain the vault and close the ledger.
        
        Returns:
            The residual vault balance
            
        Raises:
            AuthorizationError: The capability is bound elsewhere or already used
            CampaignClosedError: The campaign was already destroyed
        """
        with self._lock:
            if capability.bound_ledger_id != self._id:
                logger.warning(
                    f"Capability {capability.id.to_hex()} is not bound to campaign {self._id.to_hex()}"
                )
                raise AuthorizationError(
                    f"Capability {capability.id.to_hex()} does not authorize campaign {self._id.to_hex()}"
                )
            if capability.consumed:
                raise AuthorizationError(f"Capability {capability.id.to_hex()} has already been used")
            if self._destroyed:
                raise CampaignClosedError(f"Campaign {self._id.to_hex()} has been destroyed")

            residual = self._vault
            capability._consume()
            self._vault = 0
            self._claimed.clear()
            self._destroyed = True

        logger.info(f"Destroyed campaign {self._id.to_hex()}, returned residual {residual}")
        return residual

    def __repr__(self) -> str:
        return (
            f"CampaignLedger(id={self._id.to_hex()}, wallet_count={self._wallet_count}, "
            f"vault={self._vault}/{self._total_allocated})"
        )


def create_campaign(
    root: BytesLike,
    funding_amount: int,
    wallet_count: int,
    allocations_ref: BytesLike,
    tree_ref: BytesLike,
) -> Tuple[CampaignLedger, AdminCapability]:
    """
    Create a funded campaign ledger and its admin capability.
    
    Args:
        root: 32-byte Merkle root over the allocation leaves
        funding_amount: Tokens placed in the vault (must be > 0)
        wallet_count: Number of leaves in the tree (must be >= 2)
        allocations_ref: Opaque reference to the allocation list blob
        tree_ref: Opaque reference to the serialized tree blob
        
    Returns:
        Tuple of (ledger, capability bound to that ledger)
        
    Raises:
        ValidationError: On a bad root, wallet count or funding amount
    """
    _check_uint("funding_amount", funding_amount, MAX_U64)
    if funding_amount == 0:
        raise ValidationError("Funding amount must be greater than zero")

    ledger = CampaignLedger(
        id=new_object_id(),
        root=root,
        wallet_count=wallet_count,
        total_allocated=funding_amount,
        allocations_ref=allocations_ref,
        tree_ref=tree_ref,
    )
    capability = AdminCapability(bound_ledger_id=ledger.id)

    logger.info(
        f"Created campaign {ledger.id.to_hex()} with {wallet_count} wallets "
        f"and {funding_amount} funded"
    )
    return ledger, capability


def claim(
    ledger: CampaignLedger,
    proof: Sequence[BytesLike],
    leaf_index: int,
    allocation: int,
    caller_address: BytesLike,
) -> int:
    """Redeem an allocation from ledger. See CampaignLedger.claim."""
    return ledger.claim(proof, leaf_index, allocation, caller_address)


def destroy_campaign(capability: AdminCapability, ledger: CampaignLedger) -> int:
    """Tear down ledger with its capability and return the residual vault."""
    return ledger.destroy(capability)


def has_claimed(address: BytesLike, ledger: CampaignLedger) -> bool:
    return ledger.has_claimed(address)
