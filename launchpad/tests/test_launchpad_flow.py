"""End-to-end launch, trade, graduate and claim scenarios."""

import unittest

from graduation.coordinator import AlreadyGraduatedError, TradingStillOpenError
from integrations.ledger import InMemoryTokenLedger
from integrations.venue_sim import InMemoryLiquidityVenue, VenueError
from launchpad.app import Launchpad
from launchpad.config import LaunchpadConfig
from pricing.curve import TOKEN_LIMIT, WAD
from trading.machine import InvalidPhaseError, SlippageError
from trading.models import NoticeKind, TradingPhase


class _FlakyVenue(InMemoryLiquidityVenue):
    fail = True

    def mint_full_range_position(self, pool_ref, token_amount, eth_amount, tick_lower, tick_upper):
        if self.fail:
            raise VenueError("position manager unavailable")
        return super().mint_full_range_position(
            pool_ref, token_amount, eth_amount, tick_lower, tick_upper
        )


class LaunchpadFlowTests(unittest.TestCase):
    def setUp(self) -> None:
        self.launchpad = Launchpad(time_provider=lambda: "2024-01-01T00:00:00Z")
        self.launchpad.register("tok", "alice")
        self.launchpad.initialize("tok")

    def test_full_curve_buy_graduates_with_zero_burn(self) -> None:
        receipt = self.launchpad.buy("tok", "bob", 12 * WAD)

        self.assertEqual(receipt.tokens_out, TOKEN_LIMIT)
        self.assertTrue(receipt.graduation.ok)
        report = receipt.graduation.value
        self.assertEqual(report.tokens_burned, 0)
        self.assertLess(
            abs(report.final_price - report.pool_price) * 100, report.final_price
        )
        stats = self.launchpad.stats("tok")
        self.assertEqual(stats.phase, TradingPhase.GRADUATED)
        self.assertEqual(stats.pool_ref, report.pool_ref)
        with self.assertRaises(AlreadyGraduatedError):
            self.launchpad.graduate("tok")

    def test_open_asset_graduates_only_after_owner_close(self) -> None:
        self.launchpad.buy("tok", "bob", WAD)
        balance_before = self.launchpad.token_balance("tok", "launchpad")

        with self.assertRaises(TradingStillOpenError):
            self.launchpad.graduate("tok")

        stats = self.launchpad.stats("tok")
        self.assertEqual(stats.phase, TradingPhase.OPEN)
        self.assertEqual(self.launchpad.token_balance("tok", "launchpad"), balance_before)
        self.assertEqual(self.launchpad.ledger.burned("tok"), 0)

        self.launchpad.close("tok", "owner")
        report = self.launchpad.graduate("tok")
        self.assertGreater(report.tokens_burned, 0)
        self.assertEqual(self.launchpad.stats("tok").phase, TradingPhase.GRADUATED)

    def test_curve_raise_is_close_to_default_target(self) -> None:
        receipt = self.launchpad.buy("tok", "bob", 12 * WAD)
        target = self.launchpad.config.default_target
        self.assertLess(abs(target - receipt.total_raised) * 100, target)

    def test_sell_rejected_until_enabled(self) -> None:
        receipt = self.launchpad.buy("tok", "bob", 5 * WAD)
        with self.assertRaises(InvalidPhaseError):
            self.launchpad.sell("tok", "bob", receipt.tokens_out)
        self.launchpad.set_sells_enabled("tok", True, "owner")
        sold = self.launchpad.sell("tok", "bob", receipt.tokens_out)
        self.assertLess(sold.net, receipt.spend)

    def test_sell_rejected_after_graduation(self) -> None:
        self.launchpad.set_sells_enabled("tok", True, "owner")
        receipt = self.launchpad.buy("tok", "bob", 12 * WAD)
        with self.assertRaises(InvalidPhaseError):
            self.launchpad.sell("tok", "bob", receipt.tokens_out)

    def test_slippage_rolls_back_ledger_and_payouts(self) -> None:
        quote = self.launchpad.quote_buy("tok", WAD)
        with self.assertRaises(SlippageError):
            self.launchpad.buy("tok", "bob", WAD, min_tokens_out=quote.tokens_out + 1)
        stats = self.launchpad.stats("tok")
        self.assertEqual(stats.total_sold, 0)
        self.assertEqual(stats.total_raised, 0)
        self.assertEqual(self.launchpad.token_balance("tok", "bob"), 0)
        self.assertEqual(self.launchpad.payouts.history, ())

    def test_creator_claims_once(self) -> None:
        self.launchpad.buy("tok", "bob", 12 * WAD)

        first = self.launchpad.claim_creator_rewards("alice")
        second = self.launchpad.claim_creator_rewards("alice")

        self.assertEqual(first, 54_000_000_000_000_000)
        self.assertEqual(second, 0)
        self.assertEqual(self.launchpad.payouts.paid_to("alice"), first)

    def test_owner_withdrawals(self) -> None:
        self.launchpad.buy("tok", "bob", 12 * WAD)
        ledger = self.launchpad.fee_ledger()
        platform = ledger.platform_total
        buyback = ledger.buyback_balance("tok")

        self.assertEqual(self.launchpad.withdraw_fees("platform", "treasury", "owner"), platform)
        self.assertEqual(self.launchpad.withdraw_fees("graduation", "treasury", "owner"), 10**17)
        self.assertEqual(self.launchpad.withdraw_buyback("tok", "bot", "owner"), buyback)
        with self.assertRaises(PermissionError):
            self.launchpad.withdraw_fees("community", "mallory", "mallory")

    def test_venue_failure_reported_then_retried(self) -> None:
        ledger = InMemoryTokenLedger()
        venue = _FlakyVenue(ledger)
        launchpad = Launchpad(ledger=ledger, venue=venue)
        launchpad.register("tok", "alice")
        launchpad.initialize("tok")

        receipt = launchpad.buy("tok", "bob", 12 * WAD)

        self.assertFalse(receipt.graduation.ok)
        self.assertEqual(launchpad.token_balance("tok", "bob"), TOKEN_LIMIT)
        self.assertEqual(launchpad.stats("tok").phase, TradingPhase.CLOSED)
        failures = [n for n in launchpad.notices("tok") if n.kind == NoticeKind.GRADUATION_FAILED]
        self.assertEqual(len(failures), 1)
        self.assertIn("position manager unavailable", failures[0].detail)
        self.assertEqual(launchpad.fee_ledger().graduation_total, 0)

        venue.fail = False
        report = launchpad.graduate("tok")

        self.assertEqual(report.tokens_burned, 0)
        self.assertEqual(launchpad.stats("tok").phase, TradingPhase.GRADUATED)

    def test_dex_fees_after_graduation(self) -> None:
        receipt = self.launchpad.buy("tok", "bob", 12 * WAD)
        position_ref = receipt.graduation.value.position_ref
        self.launchpad.venue.accrue_fees(position_ref, 10**16, 3 * WAD)
        creator_before = self.launchpad.fee_ledger().creator_balance("alice")

        report = self.launchpad.collect_fees("tok")

        self.assertEqual(report.eth_collected, 10**16)
        self.assertEqual(report.tokens_burned, 3 * WAD)
        self.assertEqual(
            self.launchpad.fee_ledger().creator_balance("alice") - creator_before, 4 * 10**15
        )

    def test_custom_config_is_applied(self) -> None:
        config = LaunchpadConfig(trading_fee_bps=200, max_buy_per_tx=WAD)
        launchpad = Launchpad(config=config)
        launchpad.register("tok", None)
        launchpad.initialize("tok")
        quote = launchpad.quote_buy("tok", WAD)
        self.assertEqual(quote.fee, 2 * 10**16)
        with self.assertRaises(ValueError):
            launchpad.buy("tok", "bob", 2 * WAD)


if __name__ == "__main__":
    unittest.main()
