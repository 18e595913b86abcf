"""Rollback, guard and outcome tests for trading infrastructure."""

import unittest

from integrations.ledger import InMemoryTokenLedger
from integrations.venue_sim import InMemoryLiquidityVenue
from trading.guard import ReentrancyError, ReentrancyGuard
from trading.models import AssetState, NoticeKind
from trading.outcome import Outcome, attempt
from trading.store import StateStore


class StateStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = StateStore()
        self.store.put(AssetState(asset_id="tok", total_sold=5))

    def test_failed_transaction_restores_everything(self) -> None:
        with self.assertRaises(RuntimeError):
            with self.store.transaction():
                self.store.get("tok").total_sold = 99
                self.store.fee_ledger.platform_total = 7
                self.store.add_notice(NoticeKind.CLOSED, "tok", "closing")
                raise RuntimeError("abort")

        self.assertEqual(self.store.get("tok").total_sold, 5)
        self.assertEqual(self.store.fee_ledger.platform_total, 0)
        self.assertEqual(self.store.notices, [])
        self.assertEqual(self.store.depth, 0)

    def test_inner_rollback_keeps_outer_writes(self) -> None:
        with self.store.transaction():
            self.store.get("tok").total_sold = 10
            try:
                with self.store.transaction():
                    self.store.get("tok").total_sold = 20
                    raise ValueError("inner")
            except ValueError:
                pass
        self.assertEqual(self.store.get("tok").total_sold, 10)

    def test_participants_roll_back_with_store(self) -> None:
        ledger = InMemoryTokenLedger()
        venue = InMemoryLiquidityVenue(ledger)
        store = StateStore(participants=(ledger, venue))
        ledger.mint("tok", "launchpad", 100)

        with self.assertRaises(RuntimeError):
            with store.transaction():
                ledger.transfer("tok", "launchpad", "bob", 40)
                venue.create_or_get_pool("tok", 3_000)
                raise RuntimeError("abort")

        self.assertEqual(ledger.balance_of("tok", "launchpad"), 100)
        self.assertEqual(ledger.balance_of("tok", "bob"), 0)
        self.assertEqual(venue.to_dict()["pools"], [])

        pool_ref = venue.create_or_get_pool("tok", 3_000)
        venue.initialize_price(pool_ref, 2**96)
        position_ref = venue.mint_full_range_position(pool_ref, 1, 1, -60, 60)
        venue.accrue_fees(position_ref, 0, 5)
        self.assertEqual(ledger.balance_of("tok", pool_ref), 5)

    def test_dict_round_trip(self) -> None:
        self.store.add_notice(NoticeKind.INITIALIZED, "tok", "opened")
        restored = StateStore.from_dict(self.store.to_dict())
        self.assertEqual(restored.get("tok"), self.store.get("tok"))
        self.assertEqual(restored.notices, self.store.notices)


class ReentrancyGuardTests(unittest.TestCase):
    def test_nested_entry_rejected(self) -> None:
        guard = ReentrancyGuard("trading")
        with guard:
            self.assertTrue(guard.held)
            with self.assertRaises(ReentrancyError):
                with guard:
                    pass
        self.assertFalse(guard.held)

    def test_released_after_error(self) -> None:
        guard = ReentrancyGuard("fees")
        with self.assertRaises(KeyError):
            with guard:
                raise KeyError("boom")
        with guard:
            self.assertTrue(guard.held)

    def test_groups_are_independent(self) -> None:
        trading = ReentrancyGuard("trading")
        graduation = ReentrancyGuard("graduation")
        with trading, graduation:
            self.assertTrue(trading.held and graduation.held)


class OutcomeTests(unittest.TestCase):
    def test_attempt_success(self) -> None:
        outcome = attempt(lambda value: value * 2, 21)
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.value, 42)

    def test_attempt_failure_is_ignored(self) -> None:
        def broken():
            raise ConnectionError("down")

        outcome = attempt(broken)
        self.assertFalse(outcome.ok)
        self.assertTrue(outcome.ignored)
        self.assertEqual(outcome.error, "ConnectionError: down")
        self.assertEqual(outcome.value_or("fallback"), "fallback")
        self.assertEqual(Outcome.success(None).to_dict(), {"ok": True, "ignored": False})


if __name__ == "__main__":
    unittest.main()
