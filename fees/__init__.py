from .distributor import (
    DEFAULT_DEX_FEE_CONFIG,
    DEFAULT_FEE_CONFIG,
    FeeAuthorizationError,
    FeeDistributor,
    FeeWithdrawalError,
)
from .models import FeeConfig, FeeConfigError, FeeLedger, FeeSplit

__all__ = [
    "DEFAULT_DEX_FEE_CONFIG",
    "DEFAULT_FEE_CONFIG",
    "FeeAuthorizationError",
    "FeeConfig",
    "FeeConfigError",
    "FeeDistributor",
    "FeeLedger",
    "FeeSplit",
    "FeeWithdrawalError",
]
