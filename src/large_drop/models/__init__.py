"""
API Models Package

Request and response models for the campaign REST API.

Usage:
    from large_drop.models import ClaimRequest, ClaimResponse
    
    request = ClaimRequest(proof=["0x..."], leaf_index=3, allocation=100)
"""

from .api_models import (
    ErrorResponse,
    HealthResponse,
    CreateCampaignRequest,
    CreateCampaignResponse,
    CampaignResponse,
    ClaimRequest,
    ClaimResponse,
    ClaimStatusResponse,
    DestroyRequest,
    DestroyResponse,
    VerifyProofRequest,
    VerifyProofResponse,
)

__all__ = [
    'ErrorResponse',
    'HealthResponse',
    'CreateCampaignRequest',
    'CreateCampaignResponse',
    'CampaignResponse',
    'ClaimRequest',
    'ClaimResponse',
    'ClaimStatusResponse',
    'DestroyRequest',
    'DestroyResponse',
    'VerifyProofRequest',
    'VerifyProofResponse',
]
