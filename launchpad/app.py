"""Wires the curve, fee, trading and graduation components together."""

import logging
from typing import Callable, Dict, Optional, Tuple

from fees.distributor import FeeDistributor
from fees.models import FeeConfig, FeeLedger
from graduation.coordinator import FeeCollectionReport, GraduationCoordinator, GraduationReport
from graduation.venue import LiquidityVenue
from integrations.gate import AdmissionGate, OpenAdmissionGate
from integrations.ledger import EthSink, InMemoryEthSink, InMemoryTokenLedger, TokenLedger
from integrations.registry import AssetRegistry, InMemoryAssetRegistry
from integrations.venue_sim import InMemoryLiquidityVenue
from trading.guard import ReentrancyGuard
from trading.machine import TradingStateMachine
from trading.models import (
    AssetState,
    BuyQuote,
    BuyReceipt,
    Notice,
    SellQuote,
    SellReceipt,
    TradingStats,
)
from trading.store import StateStore

from .config import LaunchpadConfig

logger = logging.getLogger(__name__)

_SIMULATORS = (InMemoryTokenLedger, InMemoryEthSink, InMemoryAssetRegistry, InMemoryLiquidityVenue)


class Launchpad:
    """Single entry point for every launchpad operation.

    Collaborators default to the in-memory simulators. Simulators take part in
    store transactions, so a rejected operation also rolls back their balances.
    """

    def __init__(
        self,
        config: Optional[LaunchpadConfig] = None,
        store: Optional[StateStore] = None,
        ledger: Optional[TokenLedger] = None,
        payouts: Optional[EthSink] = None,
        gate: Optional[AdmissionGate] = None,
        registry: Optional[AssetRegistry] = None,
        venue: Optional[LiquidityVenue] = None,
        time_provider: Optional[Callable[[], str]] = None,
    ) -> None:
        self.config = config or LaunchpadConfig()
        self.config.validate()
        self.store = store or StateStore()
        self.ledger = ledger if ledger is not None else InMemoryTokenLedger()
        self.payouts = payouts if payouts is not None else InMemoryEthSink()
        self.gate = gate if gate is not None else OpenAdmissionGate()
        self.registry = registry if registry is not None else InMemoryAssetRegistry()
        self.venue = venue if venue is not None else InMemoryLiquidityVenue(self.ledger)
        self.store.enlist(
            *(
                item
                for item in (self.ledger, self.payouts, self.registry, self.venue)
                if isinstance(item, _SIMULATORS)
            )
        )

        self.trading_guard = ReentrancyGuard("trading")
        self.graduation_guard = ReentrancyGuard("graduation")
        self.fee_guard = ReentrancyGuard("fees")

        config = self.config
        self.distributor = FeeDistributor(
            holder=self.store,
            payouts=self.payouts,
            guard=self.fee_guard,
            owner=config.owner,
            platform_bps=config.platform_fee_bps,
            adjustable_bps=config.adjustable_fee_bps,
            dex_platform_bps=config.dex_platform_fee_bps,
            dex_adjustable_bps=config.dex_adjustable_fee_bps,
            default_config=config.default_fee_config,
            default_dex_config=config.default_dex_fee_config,
        )
        self.coordinator = GraduationCoordinator(
            store=self.store,
            distributor=self.distributor,
            ledger=self.ledger,
            payouts=self.payouts,
            venue=self.venue,
            registry=self.registry,
            guard=self.graduation_guard,
            launchpad_account=config.launchpad_account,
            graduation_fee=config.graduation_fee,
            pool_fee_tier=config.pool_fee_tier,
            tick_spacing=config.tick_spacing,
            curve=config.curve,
        )
        self.machine = TradingStateMachine(
            store=self.store,
            distributor=self.distributor,
            ledger=self.ledger,
            payouts=self.payouts,
            gate=self.gate,
            registry=self.registry,
            guard=self.trading_guard,
            owner=config.owner,
            launchpad_account=config.launchpad_account,
            trading_fee_bps=config.trading_fee_bps,
            max_buy_per_tx=config.max_buy_per_tx,
            default_target=config.default_target,
            curve=config.curve,
            graduator=self.coordinator.graduate,
            time_provider=time_provider,
        )

    def register(
        self,
        asset_id: str,
        creator: Optional[str],
        target: Optional[int] = None,
        fee_config: Optional[FeeConfig] = None,
        dex_fee_config: Optional[FeeConfig] = None,
    ) -> AssetState:
        return self.machine.register(asset_id, creator, target, fee_config, dex_fee_config)

    def initialize(self, asset_id: str) -> AssetState:
        return self.machine.initialize(asset_id)

    def buy(self, asset_id: str, payer: str, eth_in: int, min_tokens_out: int = 0) -> BuyReceipt:
        return self.machine.buy(asset_id, payer, eth_in, min_tokens_out)

    def sell(self, asset_id: str, seller: str, amount: int, min_eth_out: int = 0) -> SellReceipt:
        return self.machine.sell(asset_id, seller, amount, min_eth_out)

    def close(self, asset_id: str, caller: str) -> AssetState:
        return self.machine.close(asset_id, caller)

    def set_sells_enabled(self, asset_id: str, enabled: bool, caller: str) -> AssetState:
        return self.machine.set_sells_enabled(asset_id, enabled, caller)

    def graduate(self, asset_id: str) -> GraduationReport:
        return self.coordinator.graduate(asset_id)

    def collect_fees(self, asset_id: str) -> FeeCollectionReport:
        return self.coordinator.collect_fees(asset_id)

    def claim_creator_rewards(self, creator: str) -> int:
        return self.distributor.claim_creator_rewards(creator)

    def withdraw_fees(self, bucket: str, recipient: str, caller: str) -> int:
        return self.distributor.withdraw(bucket, recipient, caller)

    def withdraw_buyback(self, asset_id: str, recipient: str, caller: str) -> int:
        return self.distributor.withdraw_buyback(asset_id, recipient, caller)

    def price(self, asset_id: str) -> int:
        return self.machine.current_price(asset_id)

    def quote_buy(self, asset_id: str, eth_in: int, buyer: Optional[str] = None) -> BuyQuote:
        return self.machine.quote_buy(asset_id, eth_in, buyer)

    def quote_sell(self, asset_id: str, amount: int) -> SellQuote:
        return self.machine.quote_sell(asset_id, amount)

    def stats(self, asset_id: str) -> TradingStats:
        return self.machine.stats(asset_id)

    def fee_ledger(self) -> FeeLedger:
        return self.store.fee_ledger

    def notices(self, asset_id: Optional[str] = None) -> Tuple[Notice, ...]:
        return tuple(
            notice for notice in self.store.notices if asset_id is None or notice.asset_id == asset_id
        )

    def token_balance(self, asset_id: str, holder: str) -> int:
        return self.ledger.balance_of(asset_id, holder)

    def to_dict(self) -> Dict[str, object]:
        """Snapshot of the whole simulated world; requires the default simulators."""

        for item in (self.ledger, self.payouts, self.registry, self.venue):
            if not isinstance(item, _SIMULATORS):
                raise TypeError(f"Cannot snapshot collaborator {type(item).__name__}.")
        return {
            "config": self.config.to_dict(),
            "state": self.store.to_dict(),
            "ledger": self.ledger.to_dict(),
            "payouts": self.payouts.to_dict(),
            "registry": self.registry.to_dict(),
            "venue": self.venue.to_dict(),
        }

    @staticmethod
    def from_dict(
        data: Dict[str, object], time_provider: Optional[Callable[[], str]] = None
    ) -> "Launchpad":
        ledger = InMemoryTokenLedger.from_dict(data.get("ledger", {}))
        launchpad = Launchpad(
            config=LaunchpadConfig.from_dict(data.get("config", {})),
            store=StateStore.from_dict(data.get("state")),
            ledger=ledger,
            payouts=InMemoryEthSink.from_dict(data.get("payouts", {})),
            registry=InMemoryAssetRegistry.from_dict(data.get("registry", {})),
            venue=InMemoryLiquidityVenue.from_dict(data.get("venue", {}), ledger),
            time_provider=time_provider,
        )
        logger.debug("Loaded launchpad with %d assets", len(launchpad.store.assets))
        return launchpad
