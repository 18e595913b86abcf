"""Deterministic value and edge-case tests for the curve math."""

import unittest

from pricing.curve import (
    INITIAL_PRICE,
    TOKEN_LIMIT,
    WAD,
    CurveInputError,
    CurveParameters,
    buy_cost,
    buy_price,
    isqrt,
    market_cap,
    sell_price,
    sell_proceeds,
    tokens_for_budget,
)


class IntegerSqrtTests(unittest.TestCase):
    def test_small_values(self) -> None:
        expected = {0: 0, 1: 1, 2: 1, 3: 1, 4: 2, 8: 2, 9: 3, 15: 3, 16: 4}
        for value, root in expected.items():
            with self.subTest(value=value):
                self.assertEqual(isqrt(value), root)

    def test_floor_property_on_large_values(self) -> None:
        for value in (399_424, 400_000, 400_689, 10**36 + 12345, 2**255 - 19):
            with self.subTest(value=value):
                root = isqrt(value)
                self.assertLessEqual(root * root, value)
                self.assertGreater((root + 1) * (root + 1), value)

    def test_negative_rejected(self) -> None:
        with self.assertRaises(CurveInputError):
            isqrt(-1)


class BuyPriceTests(unittest.TestCase):
    def test_zero_sold_is_initial_price(self) -> None:
        self.assertEqual(buy_price(0), INITIAL_PRICE)

    def test_fractional_first_token_keeps_initial_price(self) -> None:
        self.assertEqual(buy_price(WAD - 1), INITIAL_PRICE)

    def test_known_points(self) -> None:
        # 100 tokens: 185_000 * 100 * isqrt(100)
        self.assertEqual(buy_price(100 * WAD), INITIAL_PRICE + 185_000_000)
        # 400_000 tokens: isqrt(400_000) == 632
        self.assertEqual(buy_price(TOKEN_LIMIT), 56_768_000_000_000)

    def test_negative_rejected(self) -> None:
        with self.assertRaises(CurveInputError):
            buy_price(-1)


class BuyCostTests(unittest.TestCase):
    def test_zero_amount_costs_nothing(self) -> None:
        self.assertEqual(buy_cost(12_345 * WAD, 0), 0)

    def test_full_allocation_cost(self) -> None:
        # 40 midpoint chunks of 10_000 tokens: sum(m * isqrt(m)) == 4_043_400_000
        expected = 40 * INITIAL_PRICE * 10_000 + 185_000 * 4_043_400_000 * 10_000
        self.assertEqual(buy_cost(0, TOKEN_LIMIT), expected)
        self.assertEqual(expected, 11_480_290_000_000_000_000)

    def test_remainder_priced_at_current_price(self) -> None:
        sold = 250_000 * WAD
        self.assertEqual(buy_cost(sold, 3 * WAD), buy_price(sold) * 3)

    def test_coarse_chunk_underestimates_fine_integration(self) -> None:
        coarse = buy_cost(0, 10_000 * WAD)
        fine = sum(buy_cost(step * 10 * WAD, 10 * WAD) for step in range(1_000))
        self.assertLess(coarse, fine)

    def test_midpoint_overestimates_left_endpoint_steps(self) -> None:
        sold = 100_000 * WAD
        chunked = buy_cost(sold, 10 * WAD)
        per_token = sum(buy_cost(sold + offset * WAD, WAD) for offset in range(10))
        self.assertGreater(chunked, per_token)


class TokensForBudgetTests(unittest.TestCase):
    def test_zero_budget_buys_nothing(self) -> None:
        self.assertEqual(tokens_for_budget(0, 0), 0)

    def test_never_overspends(self) -> None:
        for sold_tokens in (0, 1, 7_777, 123_456, 399_000):
            for budget in (10**15, 10**17, 10**18, 3 * 10**18, 25 * 10**18):
                with self.subTest(sold=sold_tokens, budget=budget):
                    sold = sold_tokens * WAD
                    tokens = tokens_for_budget(sold, budget)
                    self.assertLessEqual(buy_cost(sold, tokens), budget)
                    self.assertLessEqual(sold + tokens, TOKEN_LIMIT)

    def test_stops_at_supply_ceiling(self) -> None:
        tokens = tokens_for_budget(0, 100 * 10**18)
        self.assertEqual(tokens, TOKEN_LIMIT)

    def test_nothing_left_above_ceiling(self) -> None:
        self.assertEqual(tokens_for_budget(TOKEN_LIMIT, 10**18), 0)

    def test_fills_sliver_below_smallest_chunk(self) -> None:
        sold = TOKEN_LIMIT - 3 * WAD
        self.assertEqual(tokens_for_budget(sold, 10**18), 3 * WAD)

    def test_under_spend_is_bounded_by_one_small_chunk(self) -> None:
        # Known approximation boundary: leftover budget below the next
        # 10-token chunk is not converted into finer-grained tokens.
        budget = 10**18
        tokens = tokens_for_budget(0, budget)
        leftover = budget - buy_cost(0, tokens)
        self.assertGreaterEqual(leftover, 0)
        self.assertLess(leftover, buy_cost(tokens, 10 * WAD))
        self.assertEqual(tokens % (10 * WAD), 0)

    def test_below_smallest_chunk_budget_buys_nothing(self) -> None:
        self.assertEqual(tokens_for_budget(0, buy_cost(0, 10 * WAD) - 1), 0)


class SellTests(unittest.TestCase):
    def test_sell_price_zero_when_nothing_sold(self) -> None:
        self.assertEqual(sell_price(0), 0)

    def test_sell_price_is_ninety_five_percent(self) -> None:
        sold = 50_000 * WAD
        self.assertEqual(sell_price(sold), buy_price(sold) * 95 // 100)

    def test_trapezoid_proceeds(self) -> None:
        sold = 200_000 * WAD
        amount = 1_000 * WAD
        average = (sell_price(sold) + sell_price(sold - amount)) // 2
        self.assertEqual(sell_proceeds(sold, amount), average * 1_000)

    def test_selling_more_than_sold_clamps_lower_price(self) -> None:
        sold = 10 * WAD
        self.assertEqual(sell_proceeds(sold, 20 * WAD), sell_price(sold) // 2 * 20)

    def test_zero_amount(self) -> None:
        self.assertEqual(sell_proceeds(TOKEN_LIMIT, 0), 0)


class CurveShapeTests(unittest.TestCase):
    def _sweep(self):
        points = {0, 1, WAD // 2, WAD - 1, WAD, WAD + 1, TOKEN_LIMIT - 1, TOKEN_LIMIT}
        for sold in range(0, TOKEN_LIMIT + 1, 997 * WAD):
            points.add(sold)
            points.add(min(sold + 12_345_678_901, TOKEN_LIMIT))
        for whole in (9, 11, 99, 101, 999, 1_001, 9_999, 10_001, 123_457, 399_999):
            points.add(whole * WAD)
            points.add(whole * WAD + WAD // 3)
        return sorted(points)

    def test_buy_price_never_decreases(self) -> None:
        points = self._sweep()
        for lower, higher in zip(points, points[1:]):
            with self.subTest(lower=lower, higher=higher):
                self.assertGreaterEqual(buy_price(higher), buy_price(lower))

    def test_sell_price_never_exceeds_buy_price(self) -> None:
        for sold in self._sweep():
            with self.subTest(sold=sold):
                self.assertLessEqual(sell_price(sold), buy_price(sold))


class ParameterTests(unittest.TestCase):
    def test_defaults_validate(self) -> None:
        CurveParameters().validate()

    def test_invalid_parameters_fail(self) -> None:
        invalid = [
            CurveParameters(initial_price=0),
            CurveParameters(token_limit=0),
            CurveParameters(token_limit=10 * WAD, total_supply=5 * WAD),
            CurveParameters(chunk_sizes=(10, 100)),
            CurveParameters(chunk_sizes=()),
            CurveParameters(sell_spread_percent=0),
        ]
        for params in invalid:
            with self.subTest(params=params):
                with self.assertRaises(CurveInputError):
                    params.validate()

    def test_custom_parameters_flow_through(self) -> None:
        params = CurveParameters(initial_price=1_000, curve_k=0)
        self.assertEqual(buy_price(5_000 * WAD, params), 1_000)
        self.assertEqual(buy_cost(0, 10 * WAD, params), 10_000)

    def test_market_cap_uses_total_supply(self) -> None:
        self.assertEqual(market_cap(0), INITIAL_PRICE * 600_000)


if __name__ == "__main__":
    unittest.main()
