"""
Claim Campaigns

This package contains the campaign ledger state machine, the live-handle
registry used by the service layer, and the persisted record codecs.

Usage:
    from large_drop.campaign import create_campaign, claim, destroy_campaign
    
    ledger, cap = create_campaign(root, 1_000, 2, allocations_ref, tree_ref)
    payout = claim(ledger, proof, 0, 600, address)
    residual = destroy_campaign(cap, ledger)
"""

from .ledger import (
    AdminCapability,
    CampaignLedger,
    create_campaign,
    claim,
    destroy_campaign,
    has_claimed,
)
from .registry import CampaignRegistry
from .record import (
    LedgerRecord,
    CapabilityRecord,
    encode_ledger_record,
    decode_ledger_record,
    ledger_from_record,
    encode_capability_record,
    decode_capability_record,
)

__all__ = [
    'AdminCapability',
    'CampaignLedger',
    'create_campaign',
    'claim',
    'destroy_campaign',
    'has_claimed',
    'CampaignRegistry',
    'LedgerRecord',
    'CapabilityRecord',
    'encode_ledger_record',
    'decode_ledger_record',
    'ledger_from_record',
    'encode_capability_record',
    'decode_capability_record',
]
