"""Fee splitting and claimable balance bookkeeping."""

import logging
from typing import ContextManager, Optional, Protocol

from integrations.ledger import EthSink

from .models import BPS_DENOMINATOR, PERCENT_DENOMINATOR, FeeConfig, FeeConfigError, FeeLedger, FeeSplit

logger = logging.getLogger(__name__)

DEFAULT_PLATFORM_BPS = 2_500
DEFAULT_ADJUSTABLE_BPS = 7_500
DEFAULT_DEX_PLATFORM_BPS = 2_000
DEFAULT_DEX_ADJUSTABLE_BPS = 8_000
DEFAULT_FEE_CONFIG = FeeConfig(creator=60, community=20, buyback=20)
DEFAULT_DEX_FEE_CONFIG = FeeConfig(creator=50, community=25, buyback=25)

WITHDRAWABLE_BUCKETS = ("platform", "community", "graduation")


class FeeWithdrawalError(ValueError):
    """Raised when a withdrawal request cannot be honoured."""


class FeeAuthorizationError(PermissionError):
    """Raised when a non-owner calls an administrative fee entry point."""


class FeeLedgerHolder(Protocol):
    fee_ledger: FeeLedger

    def transaction(self) -> ContextManager[None]:
        ...


class FeeDistributor:
    """Splits fee amounts and owns every mutation of the fee ledger."""

    def __init__(
        self,
        holder: FeeLedgerHolder,
        payouts: EthSink,
        guard: ContextManager[object],
        owner: str,
        platform_bps: int = DEFAULT_PLATFORM_BPS,
        adjustable_bps: int = DEFAULT_ADJUSTABLE_BPS,
        dex_platform_bps: int = DEFAULT_DEX_PLATFORM_BPS,
        dex_adjustable_bps: int = DEFAULT_DEX_ADJUSTABLE_BPS,
        default_config: FeeConfig = DEFAULT_FEE_CONFIG,
        default_dex_config: FeeConfig = DEFAULT_DEX_FEE_CONFIG,
    ) -> None:
        _validate_rates(platform_bps, adjustable_bps)
        _validate_rates(dex_platform_bps, dex_adjustable_bps)
        default_config.validate()
        default_dex_config.validate()
        self._holder = holder
        self._payouts = payouts
        self._guard = guard
        self._owner = owner
        self._platform_bps = platform_bps
        self._adjustable_bps = adjustable_bps
        self._dex_platform_bps = dex_platform_bps
        self._dex_adjustable_bps = dex_adjustable_bps
        self._default_config = default_config
        self._default_dex_config = default_dex_config

    @property
    def ledger(self) -> FeeLedger:
        return self._holder.fee_ledger

    def split(
        self,
        total: int,
        config: Optional[FeeConfig] = None,
        platform_bps: Optional[int] = None,
        adjustable_bps: Optional[int] = None,
    ) -> FeeSplit:
        """Compute a split without touching the ledger.

        The buyback share is computed last and absorbs the rounding residual of
        the adjustable portion.
        """

        if total < 0:
            raise FeeConfigError("Fee amount must be non-negative.")
        config = config or self._default_config
        config.validate()
        platform_bps = self._platform_bps if platform_bps is None else platform_bps
        adjustable_bps = self._adjustable_bps if adjustable_bps is None else adjustable_bps
        _validate_rates(platform_bps, adjustable_bps)

        platform = total * platform_bps // BPS_DENOMINATOR
        adjustable = total * adjustable_bps // BPS_DENOMINATOR
        creator = adjustable * config.creator // PERCENT_DENOMINATOR
        community = adjustable * config.community // PERCENT_DENOMINATOR
        buyback = adjustable - creator - community
        return FeeSplit(
            total=total,
            platform=platform,
            creator=creator,
            community=community,
            buyback=buyback,
        )

    def distribute(
        self,
        asset_id: str,
        total: int,
        config: Optional[FeeConfig],
        creator: Optional[str],
    ) -> FeeSplit:
        split = self.split(total, config or self._default_config)
        self._credit(asset_id, split, creator)
        return split

    def distribute_dex_fees(
        self,
        asset_id: str,
        total: int,
        config: Optional[FeeConfig],
        creator: Optional[str],
    ) -> FeeSplit:
        split = self.split(
            total,
            config or self._default_dex_config,
            platform_bps=self._dex_platform_bps,
            adjustable_bps=self._dex_adjustable_bps,
        )
        self._credit(asset_id, split, creator)
        return split

    def record_graduation_fee(self, amount: int) -> None:
        if amount < 0:
            raise FeeConfigError("Graduation fee must be non-negative.")
        self.ledger.graduation_total += amount

    def claim_creator_rewards(self, creator: str) -> int:
        with self._guard, self._holder.transaction():
            ledger = self.ledger
            amount = ledger.creator_balances.get(creator, 0)
            if amount == 0:
                return 0
            ledger.creator_balances[creator] = 0
            ledger.creator_claimed[creator] = ledger.creator_claimed.get(creator, 0) + amount
            self._payouts.send(creator, amount)
        logger.info("Creator %s claimed %d wei", creator, amount)
        return amount

    def withdraw(self, bucket: str, recipient: str, caller: str) -> int:
        self._require_owner(caller)
        if bucket not in WITHDRAWABLE_BUCKETS:
            raise FeeWithdrawalError(f"Unknown fee bucket: {bucket}")
        attribute = f"{bucket}_total"
        with self._guard, self._holder.transaction():
            ledger = self.ledger
            amount = getattr(ledger, attribute)
            if amount == 0:
                raise FeeWithdrawalError(f"No {bucket} fees to withdraw.")
            setattr(ledger, attribute, 0)
            self._payouts.send(recipient, amount)
        logger.info("Withdrew %d wei of %s fees to %s", amount, bucket, recipient)
        return amount

    def withdraw_buyback(self, asset_id: str, recipient: str, caller: str) -> int:
        self._require_owner(caller)
        with self._guard, self._holder.transaction():
            ledger = self.ledger
            amount = ledger.asset_buyback.get(asset_id, 0)
            if amount == 0:
                raise FeeWithdrawalError("No buyback fees to withdraw for this asset.")
            ledger.asset_buyback[asset_id] = 0
            ledger.buyback_total -= amount
            self._payouts.send(recipient, amount)
        logger.info("Withdrew %d wei of buyback fees for %s to %s", amount, asset_id, recipient)
        return amount

    def _credit(self, asset_id: str, split: FeeSplit, creator: Optional[str]) -> None:
        ledger = self.ledger
        ledger.platform_total += split.platform
        ledger.community_total += split.community
        ledger.buyback_total += split.buyback
        ledger.asset_buyback[asset_id] = ledger.asset_buyback.get(asset_id, 0) + split.buyback
        if creator:
            ledger.creator_balances[creator] = ledger.creator_balances.get(creator, 0) + split.creator
        else:
            ledger.platform_total += split.creator

    def _require_owner(self, caller: str) -> None:
        if caller != self._owner:
            raise FeeAuthorizationError("Only the owner may withdraw fees.")


def _validate_rates(platform_bps: int, adjustable_bps: int) -> None:
    if platform_bps < 0 or adjustable_bps < 0:
        raise FeeConfigError("Fee rates must be non-negative.")
    if platform_bps + adjustable_bps != BPS_DENOMINATOR:
        raise FeeConfigError("Platform and adjustable rates must add up to 100%.")
