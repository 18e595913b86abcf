"""Behaviour tests for the in-memory collaborator simulators."""

import unittest

from integrations.gate import OpenAdmissionGate
from integrations.ledger import InMemoryEthSink, InMemoryTokenLedger, LedgerError
from integrations.registry import InMemoryAssetRegistry
from integrations.venue_sim import InMemoryLiquidityVenue, VenueError


class TokenLedgerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.ledger = InMemoryTokenLedger()
        self.ledger.mint("tok", "launchpad", 1_000)

    def test_transfer_is_balance_checked(self) -> None:
        self.ledger.transfer("tok", "launchpad", "alice", 400)
        self.assertEqual(self.ledger.balance_of("tok", "launchpad"), 600)
        self.assertEqual(self.ledger.balance_of("tok", "alice"), 400)
        with self.assertRaises(LedgerError):
            self.ledger.transfer("tok", "alice", "bob", 401)
        self.assertEqual(self.ledger.balance_of("tok", "alice"), 400)

    def test_burn_reduces_supply(self) -> None:
        self.ledger.burn("tok", "launchpad", 250)
        self.assertEqual(self.ledger.total_supply("tok"), 750)
        self.assertEqual(self.ledger.burned("tok"), 250)
        with self.assertRaises(LedgerError):
            self.ledger.burn("tok", "launchpad", 10_000)

    def test_non_positive_amounts_rejected(self) -> None:
        for amount in (0, -5):
            with self.subTest(amount=amount):
                with self.assertRaises(LedgerError):
                    self.ledger.transfer("tok", "launchpad", "alice", amount)

    def test_dict_round_trip(self) -> None:
        self.ledger.burn("tok", "launchpad", 1)
        restored = InMemoryTokenLedger.from_dict(self.ledger.to_dict())
        self.assertEqual(restored.balance_of("tok", "launchpad"), 999)
        self.assertEqual(restored.burned("tok"), 1)


class EthSinkTests(unittest.TestCase):
    def test_records_payouts(self) -> None:
        sink = InMemoryEthSink()
        sink.send("alice", 5)
        sink.send("alice", 7)
        self.assertEqual(sink.paid_to("alice"), 12)
        self.assertEqual(sink.history, (("alice", 5), ("alice", 7)))
        with self.assertRaises(LedgerError):
            sink.send("alice", -1)


class VenueSimulatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.ledger = InMemoryTokenLedger()
        self.venue = InMemoryLiquidityVenue(self.ledger)

    def test_pool_is_reused(self) -> None:
        first = self.venue.create_or_get_pool("tok", 3_000)
        second = self.venue.create_or_get_pool("tok", 3_000)
        self.assertEqual(first, second)

    def test_mint_requires_initialized_price(self) -> None:
        pool_ref = self.venue.create_or_get_pool("tok", 3_000)
        with self.assertRaises(VenueError):
            self.venue.mint_full_range_position(pool_ref, 10, 10, -60, 60)
        self.venue.initialize_price(pool_ref, 2**96)
        with self.assertRaises(VenueError):
            self.venue.initialize_price(pool_ref, 2**96)
        position_ref = self.venue.mint_full_range_position(pool_ref, 10, 10, -60, 60)
        self.assertEqual(self.venue.position(position_ref).token_amount, 10)

    def test_collect_pays_out_accrued_fees_once(self) -> None:
        pool_ref = self.venue.create_or_get_pool("tok", 3_000)
        self.venue.initialize_price(pool_ref, 2**96)
        position_ref = self.venue.mint_full_range_position(pool_ref, 10, 10, -60, 60)
        self.venue.accrue_fees(position_ref, 500, 40)

        self.assertEqual(self.venue.collect_fees(position_ref, "launchpad"), (500, 40))
        self.assertEqual(self.ledger.balance_of("tok", "launchpad"), 40)
        self.assertEqual(self.venue.collect_fees(position_ref, "launchpad"), (0, 0))

    def test_unknown_refs_rejected(self) -> None:
        with self.assertRaises(VenueError):
            self.venue.initialize_price("pool:missing:1", 1)
        with self.assertRaises(VenueError):
            self.venue.collect_fees("position:9", "launchpad")


class GateAndRegistryTests(unittest.TestCase):
    def test_open_gate_admits_everyone(self) -> None:
        gate = OpenAdmissionGate()
        self.assertFalse(gate.is_paused("tok"))
        self.assertTrue(gate.validate_buy("tok", "alice", 1))
        self.assertIsNone(gate.fair_launch_terms("tok", "alice"))

    def test_registry_records_trades(self) -> None:
        registry = InMemoryAssetRegistry({"tok": "alice"})
        registry.record_trade("tok", "bob", True, 100, 10)
        restored = InMemoryAssetRegistry.from_dict(registry.to_dict())
        self.assertEqual(restored.creator_of("tok"), "alice")
        self.assertEqual(restored.trades, registry.trades)
        self.assertIsNone(restored.creator_of("other"))


if __name__ == "__main__":
    unittest.main()
