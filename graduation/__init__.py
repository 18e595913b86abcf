from .coordinator import (
    AlreadyGraduatedError,
    FeeCollectionReport,
    GraduationCoordinator,
    GraduationError,
    GraduationReport,
    InsufficientLiquidityError,
    NotGraduatedError,
    TradingStillOpenError,
)
from .venue import MAX_TICK, MIN_TICK, LiquidityVenue, encode_sqrt_price_x96, full_range_ticks

__all__ = [
    "AlreadyGraduatedError",
    "FeeCollectionReport",
    "GraduationCoordinator",
    "GraduationError",
    "GraduationReport",
    "InsufficientLiquidityError",
    "LiquidityVenue",
    "MAX_TICK",
    "MIN_TICK",
    "NotGraduatedError",
    "TradingStillOpenError",
    "encode_sqrt_price_x96",
    "full_range_ticks",
]
