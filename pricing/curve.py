"""Pure fixed-point bonding curve math.

Prices are wei per whole token (``WAD`` base units). Every function is a
deterministic integer computation with no side effects; callers are
responsible for passing a ``sold`` value consistent with their own state.
"""

from dataclasses import dataclass
from typing import Tuple

WAD = 10**18

INITIAL_PRICE = 10**13
CURVE_K = 185_000 * WAD
TOKEN_LIMIT = 400_000 * WAD
TOTAL_SUPPLY = 600_000 * WAD
CHUNK_SIZES: Tuple[int, ...] = (10_000, 1_000, 100, 10)
SELL_SPREAD_PERCENT = 95


class CurveInputError(ValueError):
    """Raised when curve math receives an out-of-domain input."""


@dataclass(frozen=True)
class CurveParameters:
    """Constants shaping the x^1.5 curve and its chunked integration."""

    initial_price: int = INITIAL_PRICE
    curve_k: int = CURVE_K
    token_limit: int = TOKEN_LIMIT
    total_supply: int = TOTAL_SUPPLY
    chunk_sizes: Tuple[int, ...] = CHUNK_SIZES
    sell_spread_percent: int = SELL_SPREAD_PERCENT

    def validate(self) -> None:
        if self.initial_price <= 0:
            raise CurveInputError("initial_price must be positive.")
        if self.curve_k < 0:
            raise CurveInputError("curve_k must be non-negative.")
        if not 0 < self.token_limit <= self.total_supply:
            raise CurveInputError("token_limit must be positive and within total_supply.")
        if not self.chunk_sizes or any(size <= 0 for size in self.chunk_sizes):
            raise CurveInputError("chunk_sizes must be positive.")
        if list(self.chunk_sizes) != sorted(self.chunk_sizes, reverse=True):
            raise CurveInputError("chunk_sizes must be in decreasing order.")
        if not 0 < self.sell_spread_percent <= 100:
            raise CurveInputError("sell_spread_percent must be within 1..100.")


DEFAULT_CURVE = CurveParameters()


def isqrt(n: int) -> int:
    """Floor square root by Babylonian iteration."""

    if n < 0:
        raise CurveInputError("isqrt is undefined for negative values.")
    if n < 2:
        return n
    x = n
    y = (x + 1) // 2
    while y < x:
        x = y
        y = (x + n // x) // 2
    return x


def buy_price(sold: int, params: CurveParameters = DEFAULT_CURVE) -> int:
    """Instantaneous price after ``sold`` base units have been sold."""

    _require_non_negative(sold=sold)
    if sold == 0:
        return params.initial_price
    sold_norm = sold // WAD
    return params.initial_price + params.curve_k * sold_norm * isqrt(sold_norm) // WAD


def buy_cost(sold: int, amount: int, params: CurveParameters = DEFAULT_CURVE) -> int:
    """Cost in wei of buying ``amount`` base units starting at ``sold``.

    Each whole chunk is priced at its midpoint; whatever is left below the
    smallest chunk is priced at the price where it starts. The result carries
    the systematic bias of that approximation and is not a closed-form integral.
    """

    _require_non_negative(sold=sold, amount=amount)
    total = 0
    current = sold
    remaining = amount
    for size in params.chunk_sizes:
        chunk = size * WAD
        while remaining >= chunk:
            total += _chunk_cost(current, chunk, params)
            current += chunk
            remaining -= chunk
    if remaining:
        total += buy_price(current, params) * remaining // WAD
    return total


def tokens_for_budget(
    sold: int, eth_budget: int, params: CurveParameters = DEFAULT_CURVE
) -> int:
    """Base units purchasable with ``eth_budget`` starting at ``sold``.

    Greedy over the same chunk sizes as :func:`buy_cost`. Leftover budget
    smaller than the next affordable chunk stays unspent, so a buyer can
    under-spend by up to one chunk's cost.
    """

    _require_non_negative(sold=sold, eth_budget=eth_budget)
    if sold >= params.token_limit:
        return 0

    tokens = 0
    current = sold
    remaining = eth_budget
    for size in params.chunk_sizes:
        chunk = size * WAD
        while current + chunk <= params.token_limit:
            cost = _chunk_cost(current, chunk, params)
            if cost > remaining:
                break
            remaining -= cost
            current += chunk
            tokens += chunk

    # Sliver below the smallest chunk that separates ``current`` from the ceiling.
    sliver = params.token_limit - current
    if 0 < sliver < params.chunk_sizes[-1] * WAD:
        if buy_price(current, params) * sliver // WAD <= remaining:
            tokens += sliver

    # buy_cost decomposes the total greedily, which can chunk it differently.
    step = params.chunk_sizes[-1] * WAD
    while tokens > 0 and buy_cost(sold, tokens, params) > eth_budget:
        tokens = max(tokens - step, 0)
    return tokens


def sell_price(sold: int, params: CurveParameters = DEFAULT_CURVE) -> int:
    _require_non_negative(sold=sold)
    if sold == 0:
        return 0
    return buy_price(sold, params) * params.sell_spread_percent // 100


def sell_proceeds(sold: int, amount: int, params: CurveParameters = DEFAULT_CURVE) -> int:
    """Gross wei returned for selling ``amount`` base units at ``sold``."""

    _require_non_negative(sold=sold, amount=amount)
    if amount == 0:
        return 0
    start_price = sell_price(sold, params)
    end_price = sell_price(max(sold - amount, 0), params)
    average = (start_price + end_price) // 2
    return average * amount // WAD


def market_cap(sold: int, params: CurveParameters = DEFAULT_CURVE) -> int:
    return buy_price(sold, params) * params.total_supply // WAD


def _chunk_cost(current: int, chunk: int, params: CurveParameters) -> int:
    return buy_price(current + chunk // 2, params) * chunk // WAD


def _require_non_negative(**values: int) -> None:
    for name, value in values.items():
        if value < 0:
            raise CurveInputError(f"{name} must be non-negative.")
