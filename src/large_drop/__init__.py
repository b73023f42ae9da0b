"""
Large Drop

Merkle-committed airdrop campaigns: a sponsor commits to a list of
(address, allocation) pairs with one 32-byte root, and every address redeems
its allocation exactly once by presenting a membership proof.
"""

__version__ = "0.1.0"

from .errors import (
    CampaignError,
    ValidationError,
    VerificationFailure,
    DuplicateClaimError,
    InsufficientVaultError,
    AuthorizationError,
    CampaignClosedError,
    CampaignNotFoundError,
)
from .merkle import (
    Bytes32,
    Digest,
    ObjectId,
    Address,
    digest,
    leaf_hash,
    parent_hash,
    proof_length,
    verify_merkle_proof,
)
from .campaign import (
    AdminCapability,
    CampaignLedger,
    CampaignRegistry,
    create_campaign,
    claim,
    destroy_campaign,
    has_claimed,
)

__all__ = [
    '__version__',
    'CampaignError',
    'ValidationError',
    'VerificationFailure',
    'DuplicateClaimError',
    'InsufficientVaultError',
    'AuthorizationError',
    'CampaignClosedError',
    'CampaignNotFoundError',
    'Bytes32',
    'Digest',
    'ObjectId',
    'Address',
    'digest',
    'leaf_hash',
    'parent_hash',
    'proof_length',
    'verify_merkle_proof',
    'AdminCapability',
    'CampaignLedger',
    'CampaignRegistry',
    'create_campaign',
    'claim',
    'destroy_campaign',
    'has_claimed',
]
