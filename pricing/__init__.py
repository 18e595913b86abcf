from .curve import (
    CHUNK_SIZES,
    CURVE_K,
    DEFAULT_CURVE,
    INITIAL_PRICE,
    SELL_SPREAD_PERCENT,
    TOKEN_LIMIT,
    TOTAL_SUPPLY,
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

__all__ = [
    "CHUNK_SIZES",
    "CURVE_K",
    "DEFAULT_CURVE",
    "INITIAL_PRICE",
    "SELL_SPREAD_PERCENT",
    "TOKEN_LIMIT",
    "TOTAL_SUPPLY",
    "WAD",
    "CurveInputError",
    "CurveParameters",
    "buy_cost",
    "buy_price",
    "isqrt",
    "market_cap",
    "sell_price",
    "sell_proceeds",
    "tokens_for_budget",
]
