"""
Campaign API Package

This package exposes the campaign registry over HTTP. It includes:

- CampaignService: service layer translating hex payloads to ledger calls
- app: the FastAPI application (see rest_api)

Usage:
    from large_drop.api import CampaignService
    
    service = CampaignService()
    response = service.create_campaign(request)
"""

from .campaign_service import CampaignService

__all__ = [
    'CampaignService'
]
