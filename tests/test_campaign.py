"""
Unit Tests for the Campaign Ledger

Exercises creation, claims, teardown and the invariants that tie them
together: one claim per address, no partial state on rejection, vault
conservation and capability binding.
"""

import unittest
import sys
import os
import threading

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from large_drop.campaign import (
    AdminCapability,
    CampaignLedger,
    claim,
    create_campaign,
    destroy_campaign,
    has_claimed,
)
from large_drop.errors import (
    AuthorizationError,
    CampaignClosedError,
    DuplicateClaimError,
    InsufficientVaultError,
    ValidationError,
    VerificationFailure,
)
from large_drop.merkle import ObjectId, digest

from merkle_fixtures import build_campaign_tree, get_proof, make_address, make_allocations

ALLOCATIONS_REF = ObjectId(digest(b"allocations-blob"))
TREE_REF = ObjectId(digest(b"tree-blob"))


class CampaignTestCase(unittest.TestCase):

    WALLET_COUNT = 5
    EXTRA_FUNDING = 500

    def setUp(self):
        self.allocations = make_allocations(self.WALLET_COUNT)
        self.root, self.levels = build_campaign_tree(self.allocations)
        self.total = sum(amount for _, amount in self.allocations) + self.EXTRA_FUNDING
        self.ledger, self.capability = create_campaign(
            self.root, self.total, self.WALLET_COUNT, ALLOCATIONS_REF, TREE_REF
        )

    def claim_args(self, index):
        address, amount = self.allocations[index]
        return get_proof(self.levels, index), index, amount, address


class TestCreateCampaign(CampaignTestCase):

    def test_initial_state(self):
        self.assertEqual(self.ledger.root, self.root)
        self.assertEqual(self.ledger.wallet_count, self.WALLET_COUNT)
        self.assertEqual(self.ledger.total_allocated, self.total)
        self.assertEqual(self.ledger.vault, self.total)
        self.assertEqual(self.ledger.claimed, frozenset())
        self.assertEqual(self.ledger.allocations_ref, ALLOCATIONS_REF)
        self.assertEqual(self.ledger.tree_ref, TREE_REF)
        self.assertEqual(self.ledger.proof_length, 3)
        self.assertFalse(self.ledger.destroyed)

    def test_capability_bound_to_ledger(self):
        self.assertEqual(self.capability.bound_ledger_id, self.ledger.id)
        self.assertFalse(self.capability.consumed)
        self.assertNotEqual(self.capability.id, self.ledger.id)

    def test_ids_are_unique(self):
        other, other_cap = create_campaign(self.root, 10, 2, ALLOCATIONS_REF, TREE_REF)
        self.assertNotEqual(other.id, self.ledger.id)
        self.assertNotEqual(other_cap.id, self.capability.id)

    def test_rejects_too_few_wallets(self):
        for count in (0, 1):
            with self.assertRaises(ValidationError):
                create_campaign(self.root, 100, count, ALLOCATIONS_REF, TREE_REF)

    def test_rejects_bad_root(self):
        for root in (b"", bytes(self.root)[:31], bytes(self.root) + b"\x00"):
            with self.assertRaises(ValidationError):
                create_campaign(root, 100, 2, ALLOCATIONS_REF, TREE_REF)

    def test_rejects_zero_or_out_of_range_funding(self):
        for funding in (0, -1, 2**64):
            with self.assertRaises(ValidationError):
                create_campaign(self.root, funding, 2, ALLOCATIONS_REF, TREE_REF)

    def test_rejects_wallet_count_beyond_u32(self):
        with self.assertRaises(ValidationError):
            create_campaign(self.root, 100, 2**32, ALLOCATIONS_REF, TREE_REF)

    def test_ledger_rejects_vault_above_total(self):
        with self.assertRaises(ValidationError):
            CampaignLedger(
                ObjectId(digest(b"id")), self.root, 2, 100, ALLOCATIONS_REF, TREE_REF, vault=101
            )


class TestClaim(CampaignTestCase):

    def test_successful_claim(self):
        proof, index, amount, address = self.claim_args(2)
        payout = claim(self.ledger, proof, index, amount, address)
        self.assertEqual(payout, amount)
        self.assertEqual(self.ledger.vault, self.total - amount)
        self.assertTrue(has_claimed(address, self.ledger))
        self.assertEqual(self.ledger.claimed, frozenset([address]))

    def test_duplicate_claim_rejected_regardless_of_proof(self):
        proof, index, amount, address = self.claim_args(0)
        claim(self.ledger, proof, index, amount, address)
        vault = self.ledger.vault

        with self.assertRaises(DuplicateClaimError):
            claim(self.ledger, proof, index, amount, address)
        with self.assertRaises(DuplicateClaimError):
            claim(self.ledger, [digest(b"junk")], 99, amount + 1, address)

        self.assertEqual(self.ledger.vault, vault)
        self.assertEqual(self.ledger.claimed_count, 1)

    def test_index_out_of_range(self):
        proof, _, amount, address = self.claim_args(1)
        with self.assertRaises(ValidationError):
            claim(self.ledger, proof, self.WALLET_COUNT, amount, address)

    def test_wrong_proof_length(self):
        proof, index, amount, address = self.claim_args(1)
        with self.assertRaises(ValidationError):
            claim(self.ledger, proof[:-1], index, amount, address)
        with self.assertRaises(ValidationError):
            claim(self.ledger, proof + [digest(b"extra")], index, amount, address)

    def test_duplicate_siblings_rejected(self):
        proof, index, amount, address = self.claim_args(1)
        with self.assertRaises(ValidationError):
            claim(self.ledger, [proof[0], proof[0], proof[2]], index, amount, address)

    def test_malformed_sibling_rejected(self):
        proof, index, amount, address = self.claim_args(1)
        proof[1] = bytes(proof[1])[:20]
        with self.assertRaises(ValidationError):
            claim(self.ledger, proof, index, amount, address)

    def test_wrong_allocation_fails_verification(self):
        proof, index, amount, address = self.claim_args(3)
        with self.assertRaises(VerificationFailure):
            claim(self.ledger, proof, index, amount + 1, address)
        self.assertEqual(self.ledger.vault, self.total)
        self.assertFalse(has_claimed(address, self.ledger))

    def test_other_caller_cannot_use_proof(self):
        proof, index, amount, _ = self.claim_args(3)
        with self.assertRaises(VerificationFailure):
            claim(self.ledger, proof, index, amount, make_address(999))
        self.assertEqual(self.ledger.claimed_count, 0)

    def test_rejected_claim_can_be_resubmitted(self):
        proof, index, amount, address = self.claim_args(4)
        with self.assertRaises(VerificationFailure):
            claim(self.ledger, proof, index, amount - 1, address)
        self.assertEqual(claim(self.ledger, proof, index, amount, address), amount)

    def test_insufficient_vault(self):
        address, amount = self.allocations[0]
        ledger, _ = create_campaign(self.root, amount - 1, self.WALLET_COUNT, ALLOCATIONS_REF, TREE_REF)
        with self.assertRaises(InsufficientVaultError):
            claim(ledger, get_proof(self.levels, 0), 0, amount, address)
        self.assertEqual(ledger.vault, amount - 1)
        self.assertFalse(has_claimed(address, ledger))

    def test_conservation(self):
        claimed_total = 0
        for index in (4, 0, 2):
            proof, index, amount, address = self.claim_args(index)
            claimed_total += claim(self.ledger, proof, index, amount, address)
            self.assertEqual(self.ledger.vault, self.total - claimed_total)

        residual = destroy_campaign(self.capability, self.ledger)
        self.assertEqual(residual, self.total - claimed_total)

    def test_all_wallets_drain_to_extra_funding(self):
        for index in range(self.WALLET_COUNT):
            claim(self.ledger, *self.claim_args(index))
        self.assertEqual(self.ledger.vault, self.EXTRA_FUNDING)
        self.assertEqual(self.ledger.claimed_count, self.WALLET_COUNT)

    def test_concurrent_claims_pay_once(self):
        proof, index, amount, address = self.claim_args(1)
        workers = 8
        barrier = threading.Barrier(workers)
        outcomes = []
        outcomes_lock = threading.Lock()

        def worker():
            barrier.wait()
            try:
                result = claim(self.ledger, proof, index, amount, address)
            except DuplicateClaimError as e:
                result = e
            with outcomes_lock:
                outcomes.append(result)

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        payouts = [o for o in outcomes if not isinstance(o, Exception)]
        self.assertEqual(payouts, [amount])
        self.assertEqual(len(outcomes), workers)
        self.assertEqual(self.ledger.vault, self.total - amount)


class TestDestroyCampaign(CampaignTestCase):

    def test_destroy_returns_full_vault(self):
        residual = destroy_campaign(self.capability, self.ledger)
        self.assertEqual(residual, self.total)
        self.assertEqual(self.ledger.vault, 0)
        self.assertTrue(self.ledger.destroyed)
        self.assertTrue(self.capability.consumed)

    def test_foreign_capability_rejected_without_changes(self):
        other, other_cap = create_campaign(self.root, 77, self.WALLET_COUNT, ALLOCATIONS_REF, TREE_REF)
        claim(self.ledger, *self.claim_args(0))
        vault = self.ledger.vault

        with self.assertRaises(AuthorizationError):
            destroy_campaign(other_cap, self.ledger)

        self.assertEqual(self.ledger.vault, vault)
        self.assertFalse(self.ledger.destroyed)
        self.assertEqual(self.ledger.claimed_count, 1)
        self.assertFalse(other_cap.consumed)
        self.assertEqual(other.vault, 77)
        self.assertFalse(other.destroyed)

    def test_forged_capability_rejected(self):
        forged = AdminCapability(bound_ledger_id=ObjectId(digest(b"elsewhere")))
        with self.assertRaises(AuthorizationError):
            destroy_campaign(forged, self.ledger)

    def test_capability_is_single_use(self):
        destroy_campaign(self.capability, self.ledger)
        with self.assertRaises(AuthorizationError):
            destroy_campaign(self.capability, self.ledger)

    def test_destroyed_ledger_rejects_claims_and_lookups(self):
        destroy_campaign(self.capability, self.ledger)
        with self.assertRaises(CampaignClosedError):
            claim(self.ledger, *self.claim_args(0))
        with self.assertRaises(CampaignClosedError):
            has_claimed(self.allocations[0][0], self.ledger)

    def test_destroy_after_claims_discards_registry(self):
        claim(self.ledger, *self.claim_args(0))
        destroy_campaign(self.capability, self.ledger)
        self.assertEqual(self.ledger.claimed, frozenset())


if __name__ == "__main__":
    unittest.main()
