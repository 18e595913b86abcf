"""Migration of a closed curve into a full-range liquidity position."""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from fees.distributor import FeeDistributor
from fees.models import FeeSplit
from integrations.ledger import EthSink, TokenLedger
from integrations.registry import AssetRegistry
from pricing.curve import DEFAULT_CURVE, WAD, CurveParameters, buy_price
from trading.guard import ReentrancyGuard
from trading.machine import AssetNotFoundError
from trading.models import AssetState, NoticeKind, TradingPhase
from trading.outcome import attempt
from trading.store import StateStore

from .venue import LiquidityVenue, encode_sqrt_price_x96, full_range_ticks

logger = logging.getLogger(__name__)

DEFAULT_GRADUATION_FEE = 10**17
DEFAULT_POOL_FEE_TIER = 3_000
DEFAULT_TICK_SPACING = 60


class GraduationError(RuntimeError):
    """Raised when an asset cannot be graduated or harvested."""


class AlreadyGraduatedError(GraduationError):
    pass


class NotGraduatedError(GraduationError):
    pass


class InsufficientLiquidityError(GraduationError):
    """Raised when tokens or raised ETH cannot seed the pool."""


class TradingStillOpenError(GraduationError):
    """Raised when graduation is requested before trading has closed."""


@dataclass(frozen=True)
class GraduationReport:
    asset_id: str
    final_price: int
    eth_for_pool: int
    tokens_for_pool: int
    tokens_burned: int
    graduation_fee: int
    pool_ref: str
    position_ref: str
    tick_lower: int
    tick_upper: int
    sqrt_price_x96: int

    @property
    def pool_price(self) -> int:
        """Opening venue price in wei per whole token."""

        return self.eth_for_pool * WAD // self.tokens_for_pool

    @property
    def price_deviation_ppm(self) -> int:
        return abs(self.final_price - self.pool_price) * 1_000_000 // self.final_price

    def to_dict(self) -> Dict[str, object]:
        return {
            "asset_id": self.asset_id,
            "final_price": str(self.final_price),
            "pool_price": str(self.pool_price),
            "price_deviation_ppm": self.price_deviation_ppm,
            "eth_for_pool": str(self.eth_for_pool),
            "tokens_for_pool": str(self.tokens_for_pool),
            "tokens_burned": str(self.tokens_burned),
            "graduation_fee": str(self.graduation_fee),
            "pool_ref": self.pool_ref,
            "position_ref": self.position_ref,
            "tick_lower": self.tick_lower,
            "tick_upper": self.tick_upper,
            "sqrt_price_x96": str(self.sqrt_price_x96),
        }


@dataclass(frozen=True)
class FeeCollectionReport:
    asset_id: str
    eth_collected: int
    tokens_burned: int
    fee_split: Optional[FeeSplit]

    def to_dict(self) -> Dict[str, object]:
        result: Dict[str, object] = {
            "asset_id": self.asset_id,
            "eth_collected": str(self.eth_collected),
            "tokens_burned": str(self.tokens_burned),
        }
        if self.fee_split is not None:
            result["fee_split"] = {
                "platform": str(self.fee_split.platform),
                "creator": str(self.fee_split.creator),
                "community": str(self.fee_split.community),
                "buyback": str(self.fee_split.buyback),
            }
        return result


class GraduationCoordinator:
    """Seeds the venue from a closed curve at the curve's closing price."""

    def __init__(
        self,
        store: StateStore,
        distributor: FeeDistributor,
        ledger: TokenLedger,
        payouts: EthSink,
        venue: LiquidityVenue,
        registry: AssetRegistry,
        guard: ReentrancyGuard,
        launchpad_account: str,
        graduation_fee: int = DEFAULT_GRADUATION_FEE,
        pool_fee_tier: int = DEFAULT_POOL_FEE_TIER,
        tick_spacing: int = DEFAULT_TICK_SPACING,
        curve: CurveParameters = DEFAULT_CURVE,
    ) -> None:
        if graduation_fee < 0:
            raise ValueError("graduation_fee must be non-negative.")
        self._store = store
        self._distributor = distributor
        self._ledger = ledger
        self._payouts = payouts
        self._venue = venue
        self._registry = registry
        self._guard = guard
        self._launchpad_account = launchpad_account
        self._graduation_fee = graduation_fee
        self._pool_fee_tier = pool_fee_tier
        self._tick_lower, self._tick_upper = full_range_ticks(tick_spacing)
        self._curve = curve

    def graduate(self, asset_id: str) -> GraduationReport:
        with self._guard, self._store.transaction():
            state = self._asset(asset_id)
            if state.graduated:
                raise AlreadyGraduatedError(f"Asset {asset_id} has already graduated.")
            if state.phase == TradingPhase.UNINITIALIZED:
                raise GraduationError(f"Asset {asset_id} was never initialized.")
            if state.is_open:
                raise TradingStillOpenError(
                    f"Asset {asset_id} is still open; close it or reach the target first."
                )

            token_balance = self._ledger.balance_of(asset_id, self._launchpad_account)
            if token_balance <= 0:
                raise InsufficientLiquidityError("Launchpad holds no tokens for the pool.")
            if state.total_raised <= 0:
                raise InsufficientLiquidityError("No ETH has been raised.")
            if state.total_raised <= self._graduation_fee:
                raise InsufficientLiquidityError("Raised ETH does not exceed the graduation fee.")

            eth_for_pool = state.total_raised - self._graduation_fee
            final_price = buy_price(state.total_sold, self._curve)
            tokens_for_pool = min(eth_for_pool * WAD // final_price, token_balance)
            if tokens_for_pool <= 0:
                raise InsufficientLiquidityError("Pool would receive no tokens.")
            excess = token_balance - tokens_for_pool
            if excess:
                self._ledger.burn(asset_id, self._launchpad_account, excess)

            sqrt_price_x96 = encode_sqrt_price_x96(final_price, WAD)
            pool_ref = self._venue.create_or_get_pool(asset_id, self._pool_fee_tier)
            self._venue.initialize_price(pool_ref, sqrt_price_x96)
            self._ledger.transfer(asset_id, self._launchpad_account, pool_ref, tokens_for_pool)
            self._payouts.send(pool_ref, eth_for_pool)
            position_ref = self._venue.mint_full_range_position(
                pool_ref, tokens_for_pool, eth_for_pool, self._tick_lower, self._tick_upper
            )

            state.pool_ref = pool_ref
            state.position_ref = position_ref
            state.graduated = True
            self._distributor.record_graduation_fee(self._graduation_fee)

            report = GraduationReport(
                asset_id=asset_id,
                final_price=final_price,
                eth_for_pool=eth_for_pool,
                tokens_for_pool=tokens_for_pool,
                tokens_burned=excess,
                graduation_fee=self._graduation_fee,
                pool_ref=pool_ref,
                position_ref=position_ref,
                tick_lower=self._tick_lower,
                tick_upper=self._tick_upper,
                sqrt_price_x96=sqrt_price_x96,
            )
            self._store.add_notice(
                NoticeKind.GRADUATED,
                asset_id,
                f"Seeded {pool_ref} with {eth_for_pool} wei and {tokens_for_pool} tokens; "
                f"burned {excess}.",
            )
        logger.info(
            "Graduated %s into %s at price %d (burned %d tokens)",
            asset_id,
            pool_ref,
            final_price,
            excess,
        )
        return report

    def collect_fees(self, asset_id: str) -> FeeCollectionReport:
        with self._guard, self._store.transaction():
            state = self._asset(asset_id)
            if not state.graduated or not state.position_ref:
                raise NotGraduatedError(f"Asset {asset_id} has not graduated.")

            eth_amount, token_amount = self._venue.collect_fees(
                state.position_ref, self._launchpad_account
            )
            split = None
            if eth_amount:
                creator = self._resolve_creator(state)
                split = self._distributor.distribute_dex_fees(
                    asset_id, eth_amount, state.dex_fee_config, creator
                )
            if token_amount:
                self._ledger.burn(asset_id, self._launchpad_account, token_amount)
            if eth_amount or token_amount:
                self._store.add_notice(
                    NoticeKind.DEX_FEES_COLLECTED,
                    asset_id,
                    f"Collected {eth_amount} wei; burned {token_amount} tokens.",
                )
        logger.info("Collected %d wei of venue fees for %s", eth_amount, asset_id)
        return FeeCollectionReport(
            asset_id=asset_id,
            eth_collected=eth_amount,
            tokens_burned=token_amount,
            fee_split=split,
        )

    def _asset(self, asset_id: str) -> AssetState:
        state = self._store.get(asset_id)
        if state is None:
            raise AssetNotFoundError(f"Unknown asset: {asset_id}")
        return state

    def _resolve_creator(self, state: AssetState) -> Optional[str]:
        outcome = attempt(self._registry.creator_of, state.asset_id)
        if not outcome.ok:
            logger.warning("Ignoring failed creator lookup for %s: %s", state.asset_id, outcome.error)
            return None
        return outcome.value or state.creator
