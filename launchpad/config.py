"""Platform configuration with JSON file loading."""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Union

from fees.distributor import (
    DEFAULT_ADJUSTABLE_BPS,
    DEFAULT_DEX_ADJUSTABLE_BPS,
    DEFAULT_DEX_FEE_CONFIG,
    DEFAULT_DEX_PLATFORM_BPS,
    DEFAULT_FEE_CONFIG,
    DEFAULT_PLATFORM_BPS,
)
from fees.models import BPS_DENOMINATOR, FeeConfig, FeeConfigError
from graduation.coordinator import DEFAULT_GRADUATION_FEE, DEFAULT_POOL_FEE_TIER, DEFAULT_TICK_SPACING
from pricing.curve import DEFAULT_CURVE, CurveInputError, CurveParameters
from trading.machine import DEFAULT_MAX_BUY_PER_TX, DEFAULT_TARGET, DEFAULT_TRADING_FEE_BPS

_FEE_CONFIG_FIELDS = ("default_fee_config", "default_dex_fee_config")


class ConfigError(ValueError):
    """Raised when a configuration value or file is invalid."""


@dataclass(frozen=True)
class LaunchpadConfig:
    trading_fee_bps: int = DEFAULT_TRADING_FEE_BPS
    max_buy_per_tx: int = DEFAULT_MAX_BUY_PER_TX
    default_target: int = DEFAULT_TARGET
    graduation_fee: int = DEFAULT_GRADUATION_FEE
    platform_fee_bps: int = DEFAULT_PLATFORM_BPS
    adjustable_fee_bps: int = DEFAULT_ADJUSTABLE_BPS
    default_fee_config: FeeConfig = DEFAULT_FEE_CONFIG
    dex_platform_fee_bps: int = DEFAULT_DEX_PLATFORM_BPS
    dex_adjustable_fee_bps: int = DEFAULT_DEX_ADJUSTABLE_BPS
    default_dex_fee_config: FeeConfig = DEFAULT_DEX_FEE_CONFIG
    pool_fee_tier: int = DEFAULT_POOL_FEE_TIER
    tick_spacing: int = DEFAULT_TICK_SPACING
    owner: str = "owner"
    launchpad_account: str = "launchpad"
    curve: CurveParameters = field(default=DEFAULT_CURVE)

    def validate(self) -> None:
        if not 0 <= self.trading_fee_bps < BPS_DENOMINATOR:
            raise ConfigError("trading_fee_bps must be within 0..9999.")
        for name in ("max_buy_per_tx", "default_target", "pool_fee_tier", "tick_spacing"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive.")
        if self.graduation_fee < 0:
            raise ConfigError("graduation_fee must be non-negative.")
        if self.platform_fee_bps + self.adjustable_fee_bps != BPS_DENOMINATOR:
            raise ConfigError("Trading fee shares must add up to 100%.")
        if self.dex_platform_fee_bps + self.dex_adjustable_fee_bps != BPS_DENOMINATOR:
            raise ConfigError("DEX fee shares must add up to 100%.")
        if not self.owner or not self.launchpad_account:
            raise ConfigError("owner and launchpad_account are required.")
        try:
            self.default_fee_config.validate()
            self.default_dex_fee_config.validate()
            self.curve.validate()
        except (FeeConfigError, CurveInputError) as exc:
            raise ConfigError(str(exc)) from exc

    def to_dict(self) -> Dict[str, object]:
        result: Dict[str, object] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, FeeConfig):
                value = value.to_dict()
            elif isinstance(value, CurveParameters):
                value = {
                    "initial_price": value.initial_price,
                    "curve_k": value.curve_k,
                    "token_limit": value.token_limit,
                    "total_supply": value.total_supply,
                    "chunk_sizes": list(value.chunk_sizes),
                    "sell_spread_percent": value.sell_spread_percent,
                }
            result[item.name] = value
        return result

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "LaunchpadConfig":
        known = {item.name for item in fields(LaunchpadConfig)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")

        values: Dict[str, object] = {}
        try:
            for key, value in data.items():
                if key in _FEE_CONFIG_FIELDS:
                    values[key] = FeeConfig.from_dict(value)
                elif key == "curve":
                    curve = dict(value)
                    if "chunk_sizes" in curve:
                        curve["chunk_sizes"] = tuple(int(size) for size in curve["chunk_sizes"])
                    values[key] = CurveParameters(**curve)
                elif key in ("owner", "launchpad_account"):
                    values[key] = str(value)
                else:
                    values[key] = int(value)
        except (KeyError, TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid config value: {exc}") from exc

        config = LaunchpadConfig(**values)
        config.validate()
        return config

    @staticmethod
    def from_file(path: Union[str, Path]) -> "LaunchpadConfig":
        path = Path(path)
        try:
            data = json.loads(path.read_text())
        except FileNotFoundError as exc:
            raise ConfigError(f"Config file not found: {path}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Config file is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError("Config file must contain a JSON object.")
        return LaunchpadConfig.from_dict(data)
