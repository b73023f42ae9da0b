"""
REST API for Large Drop

This module provides a FastAPI-based REST API over the live campaign
registry: creating funded campaigns, claiming allocations with Merkle
proofs, registry lookups, admin teardown and stateless proof checks.
"""

import logging
import traceback
from typing import Dict, Tuple, Type

from fastapi import Depends, FastAPI, Header
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from .. import __version__
from ..config import get_settings
from ..errors import (
    AuthorizationError,
    CampaignClosedError,
    CampaignError,
    CampaignNotFoundError,
    DuplicateClaimError,
    InsufficientVaultError,
    ValidationError,
    VerificationFailure,
)
from ..models.api_models import (
    CampaignResponse,
    ClaimRequest,
    ClaimResponse,
    ClaimStatusResponse,
    CreateCampaignRequest,
    CreateCampaignResponse,
    DestroyRequest,
    DestroyResponse,
    ErrorResponse,
    HealthResponse,
    VerifyProofRequest,
    VerifyProofResponse,
)
from .campaign_service import CampaignService

settings = get_settings()

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# Status code and error code for each campaign error
ERROR_STATUS: Dict[Type[CampaignError], Tuple[int, str]] = {
    ValidationError: (400, "VALIDATION_ERROR"),
    AuthorizationError: (403, "AUTHORIZATION_ERROR"),
    CampaignNotFoundError: (404, "CAMPAIGN_NOT_FOUND"),
    DuplicateClaimError: (409, "DUPLICATE_CLAIM"),
    CampaignClosedError: (409, "CAMPAIGN_CLOSED"),
    VerificationFailure: (422, "VERIFICATION_FAILURE"),
    InsufficientVaultError: (500, "INSUFFICIENT_VAULT"),
}

# Initialize FastAPI app
app = FastAPI(
    title="Large Drop API",
    description="""
    Merkle-committed airdrop campaigns.
    
    A sponsor commits to millions of (address, allocation) pairs with a single
    32-byte root. Each address then redeems its allocation exactly once by
    presenting a logarithmic-size Merkle proof.
    
    ## Claims
    The claimant address is read from the `X-Caller-Address` header, which
    the fronting host sets after authenticating the caller.
    
    ## Teardown
    Creating a campaign returns an admin capability id. Presenting it to
    `/campaigns/{id}/destroy` drains the remaining vault and closes the
    campaign; the capability cannot be used again.
    """,
    version=__version__,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global campaign service instance
campaign_service = None


def get_campaign_service() -> CampaignService:
    """Dependency to get the campaign service instance."""
    global campaign_service
    if campaign_service is None:
        campaign_service = CampaignService()
    return campaign_service


@app.exception_handler(CampaignError)
async def campaign_error_handler(request, exc: CampaignError):
    """Map campaign errors to their status codes."""
    status_code, code = 400, "CAMPAIGN_ERROR"
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            status_code, code = ERROR_STATUS[cls]
            break

    if status_code >= 500:
        logger.error(f"Campaign error: {exc}")
    else:
        logger.warning(f"Campaign request rejected ({code}): {exc}")
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=str(exc),
            code=code,
            details={"error_type": type(exc).__name__}
        ).model_dump()
    )


@app.exception_handler(ValueError)
async def value_error_handler(request, exc: ValueError):
    """Handle validation errors raised outside the campaign layer."""
    logger.error(f"Validation error: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=str(exc),
            code="VALIDATION_ERROR",
            details={"error_type": "ValueError"}
        ).model_dump()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected errors."""
    logger.error(f"Unexpected error: {exc}\n{traceback.format_exc()}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code="INTERNAL_ERROR",
            details={"error_type": type(exc).__name__}
        ).model_dump()
    )


@app.get("/", response_model=dict)
async def root():
    """API root endpoint with basic information."""
    return {
        "name": "Large Drop API",
        "version": __version__,
        "description": "Merkle-committed airdrop campaigns",
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health", response_model=HealthResponse)
async def health_check(service: CampaignService = Depends(get_campaign_service)):
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        campaigns=len(service.registry),
        version=__version__
    )


@app.post("/campaigns", response_model=CreateCampaignResponse, status_code=201)
async def create_campaign(
    request: CreateCampaignRequest,
    service: CampaignService = Depends(get_campaign_service)
):
    """
    Create a funded campaign.
    
    The response carries the campaign state and the admin capability id.
    Keep the capability id: it is the only way to destroy the campaign.
    """
    return service.create_campaign(request)


@app.get("/campaigns/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(
    campaign_id: str,
    service: CampaignService = Depends(get_campaign_service)
):
    """Return the state of a live campaign."""
    return service.get_campaign(campaign_id)


@app.post("/campaigns/{campaign_id}/claim", response_model=ClaimResponse)
async def claim(
    campaign_id: str,
    request: ClaimRequest,
    x_caller_address: str = Header(..., description="Authenticated claimant address"),
    service: CampaignService = Depends(get_campaign_service)
):
    """
    Redeem the caller's allocation.
    
    Fails with 409 if the address already claimed, 400 for a malformed
    proof or out-of-range index, and 422 if the proof does not match the
    campaign root.
    """
    return service.claim(campaign_id, x_caller_address, request)


@app.get("/campaigns/{campaign_id}/claimed/{address}", response_model=ClaimStatusResponse)
async def has_claimed(
    campaign_id: str,
    address: str,
    service: CampaignService = Depends(get_campaign_service)
):
    """Report whether an address has already claimed."""
    return service.has_claimed(campaign_id, address)


@app.post("/campaigns/{campaign_id}/destroy", response_model=DestroyResponse)
async def destroy_campaign(
    campaign_id: str,
    request: DestroyRequest,
    service: CampaignService = Depends(get_campaign_service)
):
    """Consume the admin capability, return the residual vault and close the campaign."""
    return service.destroy_campaign(campaign_id, request.capability_id)


@app.post("/proofs/verify", response_model=VerifyProofResponse)
async def verify_proof(
    request: VerifyProofRequest,
    service: CampaignService = Depends(get_campaign_service)
):
    """Check a proof against a root without touching any campaign."""
    return service.verify_proof(request)


def run_server(host: str = None, port: int = None, dev: bool = False):
    """
    Run the API server.
    
    Args:
        host: Host to bind to (defaults to LARGE_DROP_API_HOST)
        port: Port to bind to (defaults to LARGE_DROP_API_PORT)
        dev: Enable development mode with auto-reload
    """
    host = host or settings.api_host
    port = port or settings.api_port
    logger.info(f"Starting Large Drop API server on {host}:{port}")
    uvicorn.run(
        "large_drop.api.rest_api:app",
        host=host,
        port=port,
        reload=dev,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run_server(dev=True)
