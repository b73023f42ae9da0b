"""
Campaign Errors

Exception taxonomy for campaign construction, claims and teardown. Every
error aborts the operation that raised it without any state change.
"""


class CampaignError(Exception):
    """Base exception for all campaign operations."""
    pass


class ValidationError(CampaignError, ValueError):
    """Exception raised for malformed input (digest length, wallet count, proof shape)."""
    pass


class VerificationFailure(CampaignError):
    """Exception raised when a proof does not reduce to the stored root."""
    pass


class DuplicateClaimError(CampaignError):
    """Exception raised when an address has already claimed from a campaign."""
    pass


class InsufficientVaultError(CampaignError):
    """Exception raised when a payout would exceed the remaining vault balance."""
    pass


class AuthorizationError(CampaignError):
    """Exception raised when a capability does not authorize the requested teardown."""
    pass


class CampaignClosedError(CampaignError):
    """Exception raised for operations on a campaign that has been destroyed."""
    pass


class CampaignNotFoundError(CampaignError):
    """Exception raised when no live campaign or capability matches an id."""
    pass
