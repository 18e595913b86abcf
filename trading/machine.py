"""Per-asset trading lifecycle: initialize, buy, sell, close, auto-graduate."""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from fees.distributor import FeeDistributor
from fees.models import BPS_DENOMINATOR, FeeConfig
from integrations.gate import AdmissionGate
from integrations.ledger import EthSink, TokenLedger
from integrations.registry import AssetRegistry
from pricing.curve import (
    DEFAULT_CURVE,
    WAD,
    CurveParameters,
    buy_cost,
    buy_price,
    market_cap,
    sell_price,
    sell_proceeds,
    tokens_for_budget,
)

from .guard import ReentrancyGuard
from .models import (
    AssetState,
    BuyQuote,
    BuyReceipt,
    NoticeKind,
    SellQuote,
    SellReceipt,
    TradingPhase,
    TradingStats,
)
from .outcome import Outcome, attempt
from .store import StateStore

logger = logging.getLogger(__name__)

DEFAULT_TRADING_FEE_BPS = 100
DEFAULT_MAX_BUY_PER_TX = 20 * WAD
DEFAULT_TARGET = 11_500_000_000_000_000_000


class TradingError(ValueError):
    """Base class for rejected trading requests."""


class AssetNotFoundError(TradingError):
    """Raised when an asset id has no trading record."""


class InvalidPhaseError(TradingError):
    """Raised when an operation is not allowed in the asset's current phase."""


class TradeValidationError(TradingError):
    """Raised when trade inputs are malformed or out of bounds."""


class SlippageError(TradingError):
    """Raised when a trade would fill worse than the caller's minimum."""


class InsufficientBalanceError(TradingError):
    """Raised when a holder or the curve cannot cover the requested amount."""


class UnauthorizedError(PermissionError):
    """Raised when a non-owner calls an administrative entry point."""


class TradingPausedError(RuntimeError):
    """Raised when the admission gate has paused trading for an asset."""


class AdmissionDeniedError(RuntimeError):
    """Raised when the admission gate rejects a buyer."""


class TradingStateMachine:
    """Applies buys and sells to per-asset aggregates held in a ``StateStore``.

    Every mutating entry point runs under the trading re-entrancy guard and a
    store transaction: validation happens first, then the aggregates and fee
    ledger are updated, and only then are tokens and ETH moved. Any exception
    restores the store. Auto-graduation after a buy is best-effort and never
    rolls the buy back.
    """

    def __init__(
        self,
        store: StateStore,
        distributor: FeeDistributor,
        ledger: TokenLedger,
        payouts: EthSink,
        gate: AdmissionGate,
        registry: AssetRegistry,
        guard: ReentrancyGuard,
        owner: str,
        launchpad_account: str,
        trading_fee_bps: int = DEFAULT_TRADING_FEE_BPS,
        max_buy_per_tx: int = DEFAULT_MAX_BUY_PER_TX,
        default_target: int = DEFAULT_TARGET,
        curve: CurveParameters = DEFAULT_CURVE,
        graduator: Optional[Callable[[str], Any]] = None,
        time_provider: Optional[Callable[[], str]] = None,
    ) -> None:
        if not 0 <= trading_fee_bps < BPS_DENOMINATOR:
            raise TradeValidationError("trading_fee_bps must be within 0..9999.")
        if max_buy_per_tx <= 0 or default_target <= 0:
            raise TradeValidationError("max_buy_per_tx and default_target must be positive.")
        curve.validate()
        self._store = store
        self._distributor = distributor
        self._ledger = ledger
        self._payouts = payouts
        self._gate = gate
        self._registry = registry
        self._guard = guard
        self._owner = owner
        self._launchpad_account = launchpad_account
        self._trading_fee_bps = trading_fee_bps
        self._max_buy_per_tx = max_buy_per_tx
        self._default_target = default_target
        self._curve = curve
        self._graduator = graduator
        self._time_provider = time_provider or _utc_timestamp

    @property
    def curve(self) -> CurveParameters:
        return self._curve

    def set_graduator(self, graduator: Callable[[str], Any]) -> None:
        self._graduator = graduator

    def asset(self, asset_id: str) -> AssetState:
        state = self._store.get(asset_id)
        if state is None:
            raise AssetNotFoundError(f"Unknown asset: {asset_id}")
        return state

    def effective_target(self, asset_id: str) -> int:
        return self.asset(asset_id).target or self._default_target

    def register(
        self,
        asset_id: str,
        creator: Optional[str],
        target: Optional[int] = None,
        fee_config: Optional[FeeConfig] = None,
        dex_fee_config: Optional[FeeConfig] = None,
    ) -> AssetState:
        if not asset_id:
            raise TradeValidationError("asset_id is required.")
        if self._store.get(asset_id) is not None:
            raise TradeValidationError(f"Asset already registered: {asset_id}")
        if target is not None and target <= 0:
            raise TradeValidationError("target must be positive when set.")
        for config in (fee_config, dex_fee_config):
            if config is not None:
                config.validate()

        with self._store.transaction():
            state = AssetState(
                asset_id=asset_id,
                creator=creator,
                target=target,
                fee_config=fee_config,
                dex_fee_config=dex_fee_config,
            )
            self._store.put(state)
        return state

    def initialize(self, asset_id: str) -> AssetState:
        with self._guard, self._store.transaction():
            state = self.asset(asset_id)
            if state.phase != TradingPhase.UNINITIALIZED:
                raise InvalidPhaseError(f"Asset {asset_id} is already initialized.")
            state.initialized = True
            state.total_sold = 0
            state.total_raised = 0
            state.is_open = True
            state.created_at = self._time_provider()
            self._ledger.mint(asset_id, self._launchpad_account, self._curve.total_supply)
            self._store.add_notice(NoticeKind.INITIALIZED, asset_id, "Trading opened.")
        logger.info("Initialized trading for %s", asset_id)
        return state

    def buy(
        self, asset_id: str, payer: str, eth_in: int, min_tokens_out: int = 0
    ) -> BuyReceipt:
        with self._guard, self._store.transaction():
            state = self._require_open(asset_id)
            if self._gate.is_paused(asset_id):
                raise TradingPausedError(f"Trading is paused for {asset_id}.")
            if eth_in <= 0:
                raise TradeValidationError("ETH amount must be positive.")
            if eth_in > self._max_buy_per_tx:
                raise TradeValidationError("ETH amount exceeds the per-transaction cap.")
            if min_tokens_out < 0:
                raise TradeValidationError("min_tokens_out must be non-negative.")
            if not self._gate.validate_buy(asset_id, payer, eth_in):
                raise AdmissionDeniedError(f"Buy rejected by admission gate for {payer}.")

            quote = self._quote_buy(state, eth_in, payer)
            if quote.tokens_out == 0:
                raise TradeValidationError("ETH amount is too small to buy any tokens.")
            if quote.tokens_out < min_tokens_out:
                raise SlippageError(
                    f"Buy would return {quote.tokens_out} tokens, below minimum {min_tokens_out}."
                )

            state.total_sold += quote.tokens_out
            state.total_raised += quote.spend

            ignored: List[str] = []
            creator = self._resolve_creator(state, ignored)
            split = self._distributor.distribute(asset_id, quote.fee, state.fee_config, creator)

            self._ledger.transfer(asset_id, self._launchpad_account, payer, quote.tokens_out)
            if quote.refund:
                self._payouts.send(payer, quote.refund)
            self._record_trade(asset_id, payer, True, quote.spend, quote.tokens_out, ignored)

            logger.info(
                "Buy %s: %s paid %d wei for %d tokens (fee %d, refund %d)",
                asset_id,
                payer,
                quote.spend,
                quote.tokens_out,
                quote.fee,
                quote.refund,
            )
            graduation = self._maybe_graduate(state)

            return BuyReceipt(
                asset_id=asset_id,
                buyer=payer,
                eth_in=eth_in,
                fee=quote.fee,
                spend=quote.spend,
                refund=quote.refund,
                tokens_out=quote.tokens_out,
                total_sold=state.total_sold,
                total_raised=state.total_raised,
                fee_split=split,
                fair_launch=quote.fair_launch,
                graduation=graduation,
                ignored_failures=tuple(ignored),
            )

    def sell(
        self, asset_id: str, seller: str, amount: int, min_eth_out: int = 0
    ) -> SellReceipt:
        with self._guard, self._store.transaction():
            state = self._require_open(asset_id)
            if self._gate.is_paused(asset_id):
                raise TradingPausedError(f"Trading is paused for {asset_id}.")
            if not state.sells_enabled:
                raise InvalidPhaseError(f"Sells are disabled for {asset_id}.")
            if amount <= 0:
                raise TradeValidationError("Token amount must be positive.")
            if amount > state.total_sold:
                raise TradeValidationError("Token amount exceeds the amount sold.")
            if self._ledger.balance_of(asset_id, seller) < amount:
                raise InsufficientBalanceError(f"{seller} does not hold {amount} tokens.")

            quote = self._quote_sell(state, amount)
            if quote.gross > state.total_raised:
                raise InsufficientBalanceError("Sell proceeds exceed the ETH raised.")
            if quote.net <= 0:
                raise TradeValidationError("Sell proceeds are zero after fees.")
            if quote.net < min_eth_out:
                raise SlippageError(
                    f"Sell would return {quote.net} wei, below minimum {min_eth_out}."
                )

            state.total_sold -= amount
            state.total_raised -= quote.gross

            ignored: List[str] = []
            creator = self._resolve_creator(state, ignored)
            split = self._distributor.distribute(asset_id, quote.fee, state.fee_config, creator)

            self._ledger.transfer_from(asset_id, seller, self._launchpad_account, amount)
            self._payouts.send(seller, quote.net)
            self._record_trade(asset_id, seller, False, quote.gross, amount, ignored)

            logger.info(
                "Sell %s: %s sold %d tokens for %d wei (fee %d)",
                asset_id,
                seller,
                amount,
                quote.net,
                quote.fee,
            )
            return SellReceipt(
                asset_id=asset_id,
                seller=seller,
                amount=amount,
                gross=quote.gross,
                fee=quote.fee,
                net=quote.net,
                total_sold=state.total_sold,
                total_raised=state.total_raised,
                fee_split=split,
                ignored_failures=tuple(ignored),
            )

    def close(self, asset_id: str, caller: str) -> AssetState:
        self._require_owner(caller)
        with self._guard, self._store.transaction():
            state = self.asset(asset_id)
            if state.phase in (TradingPhase.UNINITIALIZED, TradingPhase.GRADUATED):
                raise InvalidPhaseError(f"Cannot close {asset_id} in phase {state.phase.value}.")
            state.is_open = False
            self._store.add_notice(NoticeKind.CLOSED, asset_id, f"Closed by {caller}.")
        logger.info("Closed trading for %s", asset_id)
        return state

    def set_sells_enabled(self, asset_id: str, enabled: bool, caller: str) -> AssetState:
        self._require_owner(caller)
        with self._guard, self._store.transaction():
            state = self._require_open(asset_id)
            state.sells_enabled = enabled
            self._store.add_notice(
                NoticeKind.SELLS_TOGGLED, asset_id, "Sells enabled." if enabled else "Sells disabled."
            )
        return state

    def current_price(self, asset_id: str) -> int:
        return buy_price(self.asset(asset_id).total_sold, self._curve)

    def quote_buy(self, asset_id: str, eth_in: int, buyer: Optional[str] = None) -> BuyQuote:
        if eth_in <= 0:
            raise TradeValidationError("ETH amount must be positive.")
        state = self._require_open(asset_id)
        return self._quote_buy(state, eth_in, buyer)

    def quote_sell(self, asset_id: str, amount: int) -> SellQuote:
        state = self.asset(asset_id)
        if amount <= 0:
            raise TradeValidationError("Token amount must be positive.")
        if amount > state.total_sold:
            raise TradeValidationError("Token amount exceeds the amount sold.")
        return self._quote_sell(state, amount)

    def stats(self, asset_id: str) -> TradingStats:
        state = self.asset(asset_id)
        target = state.target or self._default_target
        progress = min(state.total_raised * BPS_DENOMINATOR // target, BPS_DENOMINATOR)
        return TradingStats(
            asset_id=asset_id,
            phase=state.phase,
            creator=state.creator,
            total_sold=state.total_sold,
            total_raised=state.total_raised,
            target=target,
            remaining_supply=self._curve.token_limit - state.total_sold,
            current_price=buy_price(state.total_sold, self._curve),
            sell_price=sell_price(state.total_sold, self._curve),
            market_cap=market_cap(state.total_sold, self._curve),
            progress_bps=progress,
            sells_enabled=state.sells_enabled,
            pool_ref=state.pool_ref,
            position_ref=state.position_ref,
        )

    def _quote_buy(self, state: AssetState, eth_in: int, buyer: Optional[str]) -> BuyQuote:
        fee = eth_in * self._trading_fee_bps // BPS_DENOMINATOR
        net = eth_in - fee
        remaining = self._curve.token_limit - state.total_sold

        terms = self._gate.fair_launch_terms(state.asset_id, buyer) if buyer else None
        if terms is not None:
            tokens = min(net * WAD // terms.price, terms.remaining_allowance, remaining)
            spend = tokens * terms.price // WAD
        else:
            tokens = min(tokens_for_budget(state.total_sold, net, self._curve), remaining)
            spend = buy_cost(state.total_sold, tokens, self._curve)

        return BuyQuote(
            asset_id=state.asset_id,
            eth_in=eth_in,
            fee=fee,
            tokens_out=tokens,
            spend=spend,
            refund=net - spend,
            price_after=buy_price(state.total_sold + tokens, self._curve),
            fair_launch=terms is not None,
        )

    def _quote_sell(self, state: AssetState, amount: int) -> SellQuote:
        gross = sell_proceeds(state.total_sold, amount, self._curve)
        fee = gross * self._trading_fee_bps // BPS_DENOMINATOR
        return SellQuote(
            asset_id=state.asset_id,
            amount=amount,
            gross=gross,
            fee=fee,
            net=gross - fee,
        )

    def _maybe_graduate(self, state: AssetState) -> Optional[Outcome]:
        target = state.target or self._default_target
        if state.total_sold < self._curve.token_limit and state.total_raised < target:
            return None

        state.is_open = False
        if self._graduator is None:
            outcome: Outcome = Outcome.ignored_failure("No graduation handler configured.")
        else:
            outcome = attempt(self._graduator, state.asset_id)
        if not outcome.ok:
            logger.warning("Auto-graduation of %s failed: %s", state.asset_id, outcome.error)
            self._store.add_notice(NoticeKind.GRADUATION_FAILED, state.asset_id, str(outcome.error))
        return outcome

    def _resolve_creator(self, state: AssetState, ignored: List[str]) -> Optional[str]:
        outcome = attempt(self._registry.creator_of, state.asset_id)
        if not outcome.ok:
            self._note_ignored(state.asset_id, "creator lookup", outcome, ignored)
            return None
        return outcome.value or state.creator

    def _record_trade(
        self,
        asset_id: str,
        trader: str,
        is_buy: bool,
        eth_amount: int,
        token_amount: int,
        ignored: List[str],
    ) -> None:
        outcome = attempt(
            self._registry.record_trade, asset_id, trader, is_buy, eth_amount, token_amount
        )
        if not outcome.ok:
            self._note_ignored(asset_id, "trade recording", outcome, ignored)

    def _note_ignored(
        self, asset_id: str, what: str, outcome: Outcome, ignored: List[str]
    ) -> None:
        logger.warning("Ignoring failed %s for %s: %s", what, asset_id, outcome.error)
        ignored.append(f"{what}: {outcome.error}")
        self._store.add_notice(NoticeKind.CALLBACK_IGNORED, asset_id, f"{what}: {outcome.error}")

    def _require_open(self, asset_id: str) -> AssetState:
        state = self.asset(asset_id)
        if state.phase != TradingPhase.OPEN:
            raise InvalidPhaseError(f"Asset {asset_id} is not open (phase {state.phase.value}).")
        return state

    def _require_owner(self, caller: str) -> None:
        if caller != self._owner:
            raise UnauthorizedError("Only the owner may perform this action.")


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()
