"""
Campaign Service Module

This module provides the service layer between the REST API and the campaign
registry: it decodes hex inputs into the package's byte types, runs the
ledger operation and shapes the result into response models. Campaign
errors propagate unchanged so the API can map each to its status code.
"""

import logging
from typing import List, Optional

from ..campaign import CampaignLedger, CampaignRegistry
from ..errors import ValidationError
from ..merkle import (
    Address,
    Digest,
    ObjectId,
    compute_root_from_proof,
    leaf_hash,
    validate_proof_shape,
    verify_merkle_proof,
)
from ..models.api_models import (
    CampaignResponse,
    ClaimRequest,
    ClaimResponse,
    ClaimStatusResponse,
    CreateCampaignRequest,
    CreateCampaignResponse,
    DestroyResponse,
    VerifyProofRequest,
    VerifyProofResponse,
)
from ..utils.hex_helpers import hex_to_bytes

logger = logging.getLogger(__name__)


def _decode_proof(proof: List[str]) -> List[bytes]:
    # Lengths are checked by the ledger so a short sibling reports as a proof error
    return [hex_to_bytes(step) for step in proof]


class CampaignService:
    """Service for creating, claiming from and destroying campaigns."""

    def __init__(self, registry: Optional[CampaignRegistry] = None):
        """
        Initialize the campaign service.
        
        Args:
            registry: CampaignRegistry instance. If None, a new empty
                     registry is created.
        """
        self.registry = registry if registry is not None else CampaignRegistry()

    @staticmethod
    def describe(ledger: CampaignLedger) -> CampaignResponse:
        """Convert a ledger into its response model."""
        return CampaignResponse(
            id=ledger.id.to_hex(),
            root=ledger.root.to_hex(),
            wallet_count=ledger.wallet_count,
            total_allocated=ledger.total_allocated,
            vault=ledger.vault,
            allocations_ref=ledger.allocations_ref.to_hex(),
            tree_ref=ledger.tree_ref.to_hex(),
            registry_id=ledger.registry_id.to_hex(),
            claimed_count=ledger.claimed_count,
            proof_length=ledger.proof_length,
        )

    def create_campaign(self, request: CreateCampaignRequest) -> CreateCampaignResponse:
        ledger, capability = self.registry.create(
            root=Digest.from_hex(request.root),
            funding_amount=request.funding_amount,
            wallet_count=request.wallet_count,
            allocations_ref=ObjectId.from_hex(request.allocations_ref),
            tree_ref=ObjectId.from_hex(request.tree_ref),
        )
        return CreateCampaignResponse(
            campaign=self.describe(ledger),
            capability_id=capability.id.to_hex(),
        )

    def get_campaign(self, campaign_id: str) -> CampaignResponse:
        return self.describe(self.registry.get(ObjectId.from_hex(campaign_id)))

    def claim(self, campaign_id: str, caller_address: str, request: ClaimRequest) -> ClaimResponse:
        """
        Claim an allocation on behalf of an authenticated caller.
        
        Args:
            campaign_id: Campaign id as hex string
            caller_address: Address the host authenticated, as hex string
            request: Proof, leaf index and allocation
            
        Returns:
            ClaimResponse with the payout and the remaining vault
        """
        ledger = self.registry.get(ObjectId.from_hex(campaign_id))
        address = Address.from_hex(caller_address)
        payout = ledger.claim(
            _decode_proof(request.proof), request.leaf_index, request.allocation, address
        )
        return ClaimResponse(
            campaign_id=ledger.id.to_hex(),
            address=address.to_hex(),
            payout=payout,
            vault=ledger.vault,
        )

    def has_claimed(self, campaign_id: str, address: str) -> ClaimStatusResponse:
        ledger_id = ObjectId.from_hex(campaign_id)
        parsed = Address.from_hex(address)
        return ClaimStatusResponse(
            campaign_id=ledger_id.to_hex(),
            address=parsed.to_hex(),
            claimed=self.registry.has_claimed(ledger_id, parsed),
        )

    def destroy_campaign(self, campaign_id: str, capability_id: str) -> DestroyResponse:
        ledger_id = ObjectId.from_hex(campaign_id)
        residual = self.registry.destroy(ledger_id, ObjectId.from_hex(capability_id))
        return DestroyResponse(campaign_id=ledger_id.to_hex(), residual=residual)

    def verify_proof(self, request: VerifyProofRequest) -> VerifyProofResponse:
        """
        Check a proof against a root without touching any campaign.
        
        Raises:
            ValidationError: If the root, leaf or address is malformed
        """
        root = Digest.from_hex(request.root)
        if request.leaf is not None:
            leaf = Digest.from_hex(request.leaf)
        else:
            leaf = leaf_hash(Address.from_hex(request.address), request.allocation)

        proof = _decode_proof(request.proof)
        valid = verify_merkle_proof(root, proof, leaf, request.leaf_index)

        computed_root = None
        try:
            computed_root = compute_root_from_proof(
                leaf, request.leaf_index, validate_proof_shape(proof)
            ).to_hex()
        except ValidationError as e:
            logger.info(f"Proof is malformed, no root computed: {e}")

        return VerifyProofResponse(valid=valid, leaf=leaf.to_hex(), computed_root=computed_root)
