"""
API Models

This module defines Pydantic models for API request and response validation.
Digests, identities and addresses travel as 0x-prefixed hex strings; their
exact byte lengths are checked by the campaign layer.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..constants import MAX_U32, MAX_U64

HEX_DIGITS = set("0123456789abcdefABCDEF")


def _check_hex(value: str) -> str:
    if not value.startswith('0x') or len(value) < 3:
        raise ValueError("Must be a hex string starting with '0x'")
    if not all(c in HEX_DIGITS for c in value[2:]):
        raise ValueError(f"Invalid hex string: {value}")
    return value


class ErrorResponse(BaseModel):
    """
    Response model for API errors.
    
    Attributes:
        error: Error message
        code: Error code (string identifier)
        details: Additional error details
    """
    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")
    details: Optional[dict] = Field(default=None, description="Additional error details")


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""
    status: str = Field(..., description="Service status")
    campaigns: int = Field(..., description="Number of live campaigns")
    version: str = Field(..., description="Service version")
    timestamp: Optional[str] = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Response timestamp"
    )


class CreateCampaignRequest(BaseModel):
    """
    Request model for campaign creation.
    
    Attributes:
        root: Merkle root over all allocation leaves
        funding_amount: Tokens placed in the vault
        wallet_count: Number of leaves in the tree
        allocations_ref: Blob reference of the allocation list
        tree_ref: Blob reference of the serialized tree
    """
    root: str = Field(..., description="32-byte Merkle root as hex string")
    funding_amount: int = Field(..., ge=0, le=MAX_U64, description="Vault funding (u64)")
    wallet_count: int = Field(..., ge=0, le=MAX_U32, description="Leaf count (u32)")
    allocations_ref: str = Field(..., description="Allocation list blob reference as hex string")
    tree_ref: str = Field(..., description="Serialized tree blob reference as hex string")

    @field_validator('root', 'allocations_ref', 'tree_ref')
    @classmethod
    def validate_hex_format(cls, v):
        """Validate hex string format."""
        return _check_hex(v)

    model_config = {
        "json_schema_extra": {
            "example": {
                "root": "0x1f04aec6d96959b8de0a28eac5ef3fd959de11210f4ec398bc3955d9a22d0d13",
                "funding_amount": 1000000000000,
                "wallet_count": 20000,
                "allocations_ref": "0x" + "11" * 32,
                "tree_ref": "0x" + "22" * 32,
            }
        }
    }


class CampaignResponse(BaseModel):
    """Response model describing a live campaign."""
    id: str = Field(..., description="Campaign id")
    root: str = Field(..., description="Merkle root")
    wallet_count: int = Field(..., description="Leaf count")
    total_allocated: int = Field(..., description="Initial funding")
    vault: int = Field(..., description="Remaining vault balance")
    allocations_ref: str = Field(..., description="Allocation list blob reference")
    tree_ref: str = Field(..., description="Serialized tree blob reference")
    registry_id: str = Field(..., description="Claim registry id")
    claimed_count: int = Field(..., description="Number of addresses that have claimed")
    proof_length: int = Field(..., description="Siblings required in every proof")


class CreateCampaignResponse(BaseModel):
    """Response model for campaign creation."""
    campaign: CampaignResponse
    capability_id: str = Field(..., description="Admin capability id, required to destroy the campaign")


class ClaimRequest(BaseModel):
    """
    Request model for a claim. The claimant address is supplied by the
    authenticating host in the X-Caller-Address header.
    """
    proof: List[str] = Field(..., description="Sibling digests from the leaf level upward")
    leaf_index: int = Field(..., ge=0, le=MAX_U64, description="Leaf position in the tree")
    allocation: int = Field(..., ge=0, le=MAX_U64, description="Allocated amount")

    @field_validator('proof')
    @classmethod
    def validate_proof_format(cls, v):
        """Validate proof steps are proper hex strings."""
        for step in v:
            _check_hex(step)
        return v


class ClaimResponse(BaseModel):
    """Response model for a successful claim."""
    campaign_id: str
    address: str
    payout: int
    vault: int


class ClaimStatusResponse(BaseModel):
    """Response model for a registry lookup."""
    campaign_id: str
    address: str
    claimed: bool


class DestroyRequest(BaseModel):
    """Request model for campaign teardown."""
    capability_id: str = Field(..., description="Admin capability id")

    @field_validator('capability_id')
    @classmethod
    def validate_hex_format(cls, v):
        return _check_hex(v)


class DestroyResponse(BaseModel):
    """Response model for campaign teardown."""
    campaign_id: str
    residual: int = Field(..., description="Vault balance returned to the sponsor")


class VerifyProofRequest(BaseModel):
    """
    Request model for stateless proof verification.
    
    Either provide the leaf digest directly, or the address and allocation
    it is hashed from.
    """
    root: str = Field(..., description="Merkle root")
    proof: List[str] = Field(..., description="Sibling digests from the leaf level upward")
    leaf_index: int = Field(..., ge=0, le=MAX_U64, description="Leaf position in the tree")
    leaf: Optional[str] = Field(default=None, description="Leaf digest")
    address: Optional[str] = Field(default=None, description="Claimant address")
    allocation: Optional[int] = Field(default=None, ge=0, le=MAX_U64, description="Allocated amount")

    @field_validator('root', 'leaf', 'address')
    @classmethod
    def validate_hex_format(cls, v):
        if v is None:
            return v
        return _check_hex(v)

    @field_validator('proof')
    @classmethod
    def validate_proof_format(cls, v):
        for step in v:
            _check_hex(step)
        return v

    @model_validator(mode='after')
    def validate_leaf_source(self):
        """Require exactly one way of identifying the leaf."""
        has_pair = self.address is not None and self.allocation is not None
        if self.leaf is None and not has_pair:
            raise ValueError("Provide either 'leaf' or both 'address' and 'allocation'")
        if self.leaf is not None and (self.address is not None or self.allocation is not None):
            raise ValueError("Provide either 'leaf' or 'address'/'allocation', not both")
        return self


class VerifyProofResponse(BaseModel):
    """Response model for proof verification."""
    valid: bool
    leaf: str = Field(..., description="Leaf digest that was checked")
    computed_root: Optional[str] = Field(default=None, description="Root the proof reduces to, when well formed")
