"""In-process stand-in for a constant-liquidity venue."""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .ledger import TokenLedger


class VenueError(RuntimeError):
    """Raised when the simulated venue rejects a request."""


@dataclass
class SimulatedPool:
    pool_ref: str
    asset_id: str
    fee_tier: int
    sqrt_price_x96: int = 0


@dataclass
class SimulatedPosition:
    position_ref: str
    pool_ref: str
    token_amount: int
    eth_amount: int
    tick_lower: int
    tick_upper: int
    owed_eth: int = 0
    owed_tokens: int = 0


class InMemoryLiquidityVenue:
    """Keeps pools and positions in memory; token fees settle through the ledger."""

    def __init__(self, ledger: Optional[TokenLedger] = None) -> None:
        self._ledger = ledger
        self._pools: Dict[str, SimulatedPool] = {}
        self._positions: Dict[str, SimulatedPosition] = {}

    def bind_ledger(self, ledger: TokenLedger) -> None:
        self._ledger = ledger

    def pool(self, pool_ref: str) -> SimulatedPool:
        try:
            return self._pools[pool_ref]
        except KeyError:
            raise VenueError(f"Unknown pool: {pool_ref}") from None

    def position(self, position_ref: str) -> SimulatedPosition:
        try:
            return self._positions[position_ref]
        except KeyError:
            raise VenueError(f"Unknown position: {position_ref}") from None

    def create_or_get_pool(self, asset_id: str, fee_tier: int) -> str:
        pool_ref = f"pool:{asset_id}:{fee_tier}"
        if pool_ref not in self._pools:
            self._pools[pool_ref] = SimulatedPool(pool_ref=pool_ref, asset_id=asset_id, fee_tier=fee_tier)
        return pool_ref

    def initialize_price(self, pool_ref: str, sqrt_price_x96: int) -> None:
        pool = self.pool(pool_ref)
        if pool.sqrt_price_x96:
            raise VenueError("Pool price already initialized.")
        if sqrt_price_x96 <= 0:
            raise VenueError("sqrt price must be positive.")
        pool.sqrt_price_x96 = sqrt_price_x96

    def mint_full_range_position(
        self,
        pool_ref: str,
        token_amount: int,
        eth_amount: int,
        tick_lower: int,
        tick_upper: int,
    ) -> str:
        pool = self.pool(pool_ref)
        if not pool.sqrt_price_x96:
            raise VenueError("Pool price must be initialized before minting.")
        if token_amount <= 0 or eth_amount <= 0:
            raise VenueError("Position amounts must be positive.")
        if tick_lower >= tick_upper:
            raise VenueError("Invalid tick range.")
        position_ref = f"position:{len(self._positions) + 1}"
        self._positions[position_ref] = SimulatedPosition(
            position_ref=position_ref,
            pool_ref=pool_ref,
            token_amount=token_amount,
            eth_amount=eth_amount,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
        )
        return position_ref

    def accrue_fees(self, position_ref: str, eth_amount: int, token_amount: int) -> None:
        """Simulate swap activity crediting fees to a position."""

        position = self.position(position_ref)
        position.owed_eth += eth_amount
        position.owed_tokens += token_amount
        if token_amount and self._ledger is not None:
            asset_id = self.pool(position.pool_ref).asset_id
            self._ledger.mint(asset_id, position.pool_ref, token_amount)

    def collect_fees(self, position_ref: str, recipient: str) -> Tuple[int, int]:
        position = self.position(position_ref)
        eth_amount, token_amount = position.owed_eth, position.owed_tokens
        position.owed_eth = 0
        position.owed_tokens = 0
        if token_amount and self._ledger is not None:
            asset_id = self.pool(position.pool_ref).asset_id
            self._ledger.transfer(asset_id, position.pool_ref, recipient, token_amount)
        return eth_amount, token_amount

    def to_dict(self) -> Dict[str, object]:
        return {
            "pools": [
                {
                    "pool_ref": pool.pool_ref,
                    "asset_id": pool.asset_id,
                    "fee_tier": pool.fee_tier,
                    "sqrt_price_x96": str(pool.sqrt_price_x96),
                }
                for pool in self._pools.values()
            ],
            "positions": [
                {
                    "position_ref": item.position_ref,
                    "pool_ref": item.pool_ref,
                    "token_amount": item.token_amount,
                    "eth_amount": item.eth_amount,
                    "tick_lower": item.tick_lower,
                    "tick_upper": item.tick_upper,
                    "owed_eth": item.owed_eth,
                    "owed_tokens": item.owed_tokens,
                }
                for item in self._positions.values()
            ],
        }

    @staticmethod
    def from_dict(data: Dict[str, object], ledger: Optional[TokenLedger] = None) -> "InMemoryLiquidityVenue":
        venue = InMemoryLiquidityVenue(ledger)
        for entry in data.get("pools", []):
            venue._pools[entry["pool_ref"]] = SimulatedPool(
                pool_ref=entry["pool_ref"],
                asset_id=entry["asset_id"],
                fee_tier=int(entry["fee_tier"]),
                sqrt_price_x96=int(entry["sqrt_price_x96"]),
            )
        for entry in data.get("positions", []):
            venue._positions[entry["position_ref"]] = SimulatedPosition(
                position_ref=entry["position_ref"],
                pool_ref=entry["pool_ref"],
                token_amount=int(entry["token_amount"]),
                eth_amount=int(entry["eth_amount"]),
                tick_lower=int(entry["tick_lower"]),
                tick_upper=int(entry["tick_upper"]),
                owed_eth=int(entry.get("owed_eth", 0)),
                owed_tokens=int(entry.get("owed_tokens", 0)),
            )
        return venue
