"""Asset registry callbacks: creator lookup and trade statistics."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol, Tuple


@dataclass(frozen=True)
class TradeRecord:
    asset_id: str
    trader: str
    is_buy: bool
    eth_amount: int
    token_amount: int


class AssetRegistry(Protocol):
    def creator_of(self, asset_id: str) -> Optional[str]:
        ...

    def record_trade(
        self, asset_id: str, trader: str, is_buy: bool, eth_amount: int, token_amount: int
    ) -> None:
        ...


class InMemoryAssetRegistry:
    def __init__(self, creators: Optional[Dict[str, str]] = None) -> None:
        self._creators: Dict[str, str] = dict(creators or {})
        self._trades: List[TradeRecord] = []

    @property
    def trades(self) -> Tuple[TradeRecord, ...]:
        return tuple(self._trades)

    def set_creator(self, asset_id: str, creator: str) -> None:
        self._creators[asset_id] = creator

    def creator_of(self, asset_id: str) -> Optional[str]:
        return self._creators.get(asset_id)

    def record_trade(
        self, asset_id: str, trader: str, is_buy: bool, eth_amount: int, token_amount: int
    ) -> None:
        self._trades.append(
            TradeRecord(
                asset_id=asset_id,
                trader=trader,
                is_buy=is_buy,
                eth_amount=eth_amount,
                token_amount=token_amount,
            )
        )

    def to_dict(self) -> Dict[str, object]:
        return {
            "creators": dict(sorted(self._creators.items())),
            "trades": [
                {
                    "asset_id": trade.asset_id,
                    "trader": trade.trader,
                    "is_buy": trade.is_buy,
                    "eth_amount": trade.eth_amount,
                    "token_amount": trade.token_amount,
                }
                for trade in self._trades
            ],
        }

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "InMemoryAssetRegistry":
        registry = InMemoryAssetRegistry(dict(data.get("creators", {})))
        for entry in data.get("trades", []):
            registry.record_trade(
                entry["asset_id"],
                entry["trader"],
                bool(entry["is_buy"]),
                int(entry["eth_amount"]),
                int(entry["token_amount"]),
            )
        return registry
