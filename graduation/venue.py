"""Liquidity venue interface and full-range position helpers."""

from typing import Protocol, Tuple

from pricing.curve import isqrt

MIN_TICK = -887_272
MAX_TICK = 887_272
Q96 = 2**96


class LiquidityVenue(Protocol):
    def create_or_get_pool(self, asset_id: str, fee_tier: int) -> str:
        ...

    def initialize_price(self, pool_ref: str, sqrt_price_x96: int) -> None:
        ...

    def mint_full_range_position(
        self,
        pool_ref: str,
        token_amount: int,
        eth_amount: int,
        tick_lower: int,
        tick_upper: int,
    ) -> str:
        ...

    def collect_fees(self, position_ref: str, recipient: str) -> Tuple[int, int]:
        ...


def full_range_ticks(tick_spacing: int) -> Tuple[int, int]:
    """Widest tick range usable with ``tick_spacing``, truncated toward zero."""

    if tick_spacing <= 0:
        raise ValueError("tick_spacing must be positive.")
    upper = MAX_TICK // tick_spacing * tick_spacing
    return -upper, upper


def encode_sqrt_price_x96(amount1: int, amount0: int) -> int:
    """Q64.96 square root of ``amount1 / amount0``."""

    if amount0 <= 0 or amount1 <= 0:
        raise ValueError("Both amounts must be positive to encode a price.")
    return isqrt((amount1 << 192) // amount0)
