"""
Unit Tests for the Live Campaign Registry
"""

import unittest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from large_drop.campaign import CampaignRegistry, destroy_campaign
from large_drop.errors import AuthorizationError, CampaignNotFoundError
from large_drop.merkle import ObjectId, digest

from merkle_fixtures import build_campaign_tree, get_proof, make_allocations

ALLOCATIONS_REF = ObjectId(digest(b"allocations-blob"))
TREE_REF = ObjectId(digest(b"tree-blob"))


class TestCampaignRegistry(unittest.TestCase):

    def setUp(self):
        self.registry = CampaignRegistry()
        self.allocations = make_allocations(3)
        self.root, self.levels = build_campaign_tree(self.allocations)
        self.ledger, self.capability = self.registry.create(
            self.root, 10_000, 3, ALLOCATIONS_REF, TREE_REF
        )

    def test_create_registers_ledger(self):
        self.assertEqual(len(self.registry), 1)
        self.assertIs(self.registry.get(self.ledger.id), self.ledger)
        self.assertEqual(self.registry.list_ids(), [self.ledger.id])

    def test_unknown_campaign(self):
        with self.assertRaises(CampaignNotFoundError):
            self.registry.get(digest(b"missing"))

    def test_claim_and_lookup(self):
        address, amount = self.allocations[2]
        self.assertFalse(self.registry.has_claimed(self.ledger.id, address))
        payout = self.registry.claim(self.ledger.id, get_proof(self.levels, 2), 2, amount, address)
        self.assertEqual(payout, amount)
        self.assertTrue(self.registry.has_claimed(self.ledger.id, address))

    def test_destroy_removes_handles(self):
        residual = self.registry.destroy(self.ledger.id, self.capability.id)
        self.assertEqual(residual, 10_000)
        self.assertEqual(len(self.registry), 0)
        with self.assertRaises(CampaignNotFoundError):
            self.registry.get(self.ledger.id)
        with self.assertRaises(CampaignNotFoundError):
            self.registry.destroy(self.ledger.id, self.capability.id)

    def test_ledger_destroyed_directly_is_pruned(self):
        destroy_campaign(self.capability, self.ledger)
        self.assertEqual(len(self.registry), 0)
        self.assertEqual(self.registry.list_ids(), [])
        with self.assertRaises(CampaignNotFoundError):
            self.registry.get(self.ledger.id)
        with self.assertRaises(CampaignNotFoundError):
            self.registry.destroy(self.ledger.id, self.capability.id)

    def test_unknown_capability(self):
        with self.assertRaises(AuthorizationError):
            self.registry.destroy(self.ledger.id, digest(b"not-a-capability"))
        self.assertIs(self.registry.get(self.ledger.id), self.ledger)

    def test_capability_of_other_campaign(self):
        other, other_cap = self.registry.create(self.root, 50, 3, ALLOCATIONS_REF, TREE_REF)
        with self.assertRaises(AuthorizationError):
            self.registry.destroy(self.ledger.id, other_cap.id)
        self.assertEqual(len(self.registry), 2)
        self.assertEqual(self.registry.destroy(other.id, other_cap.id), 50)
        self.assertIs(self.registry.get(self.ledger.id), self.ledger)


if __name__ == "__main__":
    unittest.main()
