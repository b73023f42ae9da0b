"""
Live Campaign Registry

Keeps the live ledgers and capabilities addressable by id. Destroying a
campaign removes both handles, so a consumed capability can never be looked
up again; ledgers destroyed without going through the registry are
pruned on the next lookup. The registry's own lock only guards its maps; each ledger
operation runs under that ledger's lock, so claims on different campaigns
proceed in parallel.
"""

import logging
import threading
from typing import Dict, List, Sequence, Tuple

from ..errors import AuthorizationError, CampaignNotFoundError
from ..merkle import ObjectId
from ..merkle.hashing import BytesLike
from .ledger import AdminCapability, CampaignLedger, create_campaign

logger = logging.getLogger(__name__)


class CampaignRegistry:
    """Id-addressed store of live campaign ledgers and admin capabilities."""

    def __init__(self):
        self._ledgers: Dict[ObjectId, CampaignLedger] = {}
        self._capabilities: Dict[ObjectId, AdminCapability] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            self._prune()
            return len(self._ledgers)

    def _prune(self) -> None:
        # Caller holds self._lock. Drops ledgers torn down outside the registry.
        closed = [ledger_id for ledger_id, ledger in self._ledgers.items() if ledger.destroyed]
        for ledger_id in closed:
            del self._ledgers[ledger_id]
        if closed:
            self._capabilities = {
                cap_id: cap for cap_id, cap in self._capabilities.items()
                if cap.bound_ledger_id in self._ledgers
            }

    def create(
        self,
        root: BytesLike,
        funding_amount: int,
        wallet_count: int,
        allocations_ref: BytesLike,
        tree_ref: BytesLike,
    ) -> Tuple[CampaignLedger, AdminCapability]:
        """Create a campaign and register both of its handles."""
        ledger, capability = create_campaign(
            root, funding_amount, wallet_count, allocations_ref, tree_ref
        )
        with self._lock:
            self._ledgers[ledger.id] = ledger
            self._capabilities[capability.id] = capability
        return ledger, capability

    def get(self, ledger_id: BytesLike) -> CampaignLedger:
        """
        Look up a live ledger.
        
        Raises:
            CampaignNotFoundError: If no live campaign has this id
        """
        ledger_id = ObjectId(ledger_id)
        with self._lock:
            self._prune()
            ledger = self._ledgers.get(ledger_id)
        if ledger is None:
            raise CampaignNotFoundError(f"Campaign {ledger_id.to_hex()} not found")
        return ledger

    def list_ids(self) -> List[ObjectId]:
        with self._lock:
            self._prune()
            return list(self._ledgers)

    def claim(
        self,
        ledger_id: BytesLike,
        proof: Sequence[BytesLike],
        leaf_index: int,
        allocation: int,
        caller_address: BytesLike,
    ) -> int:
        return self.get(ledger_id).claim(proof, leaf_index, allocation, caller_address)

    def has_claimed(self, ledger_id: BytesLike, address: BytesLike) -> bool:
        return self.get(ledger_id).has_claimed(address)

    def destroy(self, ledger_id: BytesLike, capability_id: BytesLike) -> int:
        """
        Destroy a campaign with the capability registered under capability_id.
        
        Returns:
            The residual vault balance
            
        Raises:
            CampaignNotFoundError: If the campaign is not live
            AuthorizationError: If the capability is unknown, used, or bound
                to a different campaign
        """
        ledger = self.get(ledger_id)
        capability_id = ObjectId(capability_id)
        with self._lock:
            capability = self._capabilities.get(capability_id)
        if capability is None:
            logger.warning(f"Unknown capability {capability_id.to_hex()} presented")
            raise AuthorizationError(f"Capability {capability_id.to_hex()} is not live")

        residual = ledger.destroy(capability)

        with self._lock:
            self._ledgers.pop(ledger.id, None)
            self._capabilities.pop(capability.id, None)
        return residual
