"""Per-asset trading state, receipts and notices."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from fees.models import FeeConfig, FeeSplit

from .outcome import Outcome


class TradingPhase(Enum):
    UNINITIALIZED = "UNINITIALIZED"
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    GRADUATED = "GRADUATED"


class NoticeKind(Enum):
    INITIALIZED = "Initialized"
    CLOSED = "Closed"
    SELLS_TOGGLED = "SellsToggled"
    GRADUATION_FAILED = "GraduationFailed"
    GRADUATED = "Graduated"
    DEX_FEES_COLLECTED = "DexFeesCollected"
    CALLBACK_IGNORED = "CallbackIgnored"


@dataclass
class AssetState:
    """Aggregate accounting for one tradable asset."""

    asset_id: str
    creator: Optional[str] = None
    total_sold: int = 0
    total_raised: int = 0
    is_open: bool = False
    created_at: Optional[str] = None
    target: Optional[int] = None
    sells_enabled: bool = False
    graduated: bool = False
    pool_ref: Optional[str] = None
    position_ref: Optional[str] = None
    fee_config: Optional[FeeConfig] = None
    dex_fee_config: Optional[FeeConfig] = None
    initialized: bool = False

    @property
    def phase(self) -> TradingPhase:
        if not self.initialized:
            return TradingPhase.UNINITIALIZED
        if self.graduated:
            return TradingPhase.GRADUATED
        if self.is_open:
            return TradingPhase.OPEN
        return TradingPhase.CLOSED

    def to_dict(self) -> Dict[str, object]:
        return {
            "asset_id": self.asset_id,
            "creator": self.creator,
            "total_sold": self.total_sold,
            "total_raised": self.total_raised,
            "is_open": self.is_open,
            "created_at": self.created_at,
            "target": self.target,
            "sells_enabled": self.sells_enabled,
            "graduated": self.graduated,
            "pool_ref": self.pool_ref,
            "position_ref": self.position_ref,
            "fee_config": self.fee_config.to_dict() if self.fee_config else None,
            "dex_fee_config": self.dex_fee_config.to_dict() if self.dex_fee_config else None,
            "initialized": self.initialized,
        }

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "AssetState":
        fee_config = data.get("fee_config")
        dex_fee_config = data.get("dex_fee_config")
        target = data.get("target")
        return AssetState(
            asset_id=str(data["asset_id"]),
            creator=data.get("creator"),
            total_sold=int(data.get("total_sold", 0)),
            total_raised=int(data.get("total_raised", 0)),
            is_open=bool(data.get("is_open", False)),
            created_at=data.get("created_at"),
            target=int(target) if target is not None else None,
            sells_enabled=bool(data.get("sells_enabled", False)),
            graduated=bool(data.get("graduated", False)),
            pool_ref=data.get("pool_ref"),
            position_ref=data.get("position_ref"),
            fee_config=FeeConfig.from_dict(fee_config) if fee_config else None,
            dex_fee_config=FeeConfig.from_dict(dex_fee_config) if dex_fee_config else None,
            initialized=bool(data.get("initialized", False)),
        )


@dataclass(frozen=True)
class Notice:
    """Event-like record of something an operator may need to act on."""

    sequence: int
    kind: NoticeKind
    asset_id: str
    detail: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "sequence": self.sequence,
            "kind": self.kind.value,
            "asset_id": self.asset_id,
            "detail": self.detail,
        }

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "Notice":
        return Notice(
            sequence=int(data["sequence"]),
            kind=NoticeKind(data["kind"]),
            asset_id=str(data["asset_id"]),
            detail=str(data.get("detail", "")),
        )


def _split_dict(split: FeeSplit) -> Dict[str, str]:
    return {
        "total": str(split.total),
        "platform": str(split.platform),
        "creator": str(split.creator),
        "community": str(split.community),
        "buyback": str(split.buyback),
    }


@dataclass(frozen=True)
class BuyReceipt:
    asset_id: str
    buyer: str
    eth_in: int
    fee: int
    spend: int
    refund: int
    tokens_out: int
    total_sold: int
    total_raised: int
    fee_split: FeeSplit
    fair_launch: bool = False
    graduation: Optional[Outcome] = None
    ignored_failures: Tuple[str, ...] = ()

    @property
    def graduation_triggered(self) -> bool:
        return self.graduation is not None

    def to_dict(self) -> Dict[str, object]:
        result: Dict[str, object] = {
            "asset_id": self.asset_id,
            "buyer": self.buyer,
            "eth_in": str(self.eth_in),
            "fee": str(self.fee),
            "spend": str(self.spend),
            "refund": str(self.refund),
            "tokens_out": str(self.tokens_out),
            "total_sold": str(self.total_sold),
            "total_raised": str(self.total_raised),
            "fee_split": _split_dict(self.fee_split),
            "fair_launch": self.fair_launch,
            "ignored_failures": list(self.ignored_failures),
        }
        if self.graduation is not None:
            result["graduation"] = self.graduation.to_dict()
        return result


@dataclass(frozen=True)
class SellReceipt:
    asset_id: str
    seller: str
    amount: int
    gross: int
    fee: int
    net: int
    total_sold: int
    total_raised: int
    fee_split: FeeSplit
    ignored_failures: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, object]:
        return {
            "asset_id": self.asset_id,
            "seller": self.seller,
            "amount": str(self.amount),
            "gross": str(self.gross),
            "fee": str(self.fee),
            "net": str(self.net),
            "total_sold": str(self.total_sold),
            "total_raised": str(self.total_raised),
            "fee_split": _split_dict(self.fee_split),
            "ignored_failures": list(self.ignored_failures),
        }


@dataclass(frozen=True)
class BuyQuote:
    asset_id: str
    eth_in: int
    fee: int
    tokens_out: int
    spend: int
    refund: int
    price_after: int
    fair_launch: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "asset_id": self.asset_id,
            "eth_in": str(self.eth_in),
            "fee": str(self.fee),
            "tokens_out": str(self.tokens_out),
            "spend": str(self.spend),
            "refund": str(self.refund),
            "price_after": str(self.price_after),
            "fair_launch": self.fair_launch,
        }


@dataclass(frozen=True)
class SellQuote:
    asset_id: str
    amount: int
    gross: int
    fee: int
    net: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "asset_id": self.asset_id,
            "amount": str(self.amount),
            "gross": str(self.gross),
            "fee": str(self.fee),
            "net": str(self.net),
        }


@dataclass(frozen=True)
class TradingStats:
    asset_id: str
    phase: TradingPhase
    creator: Optional[str]
    total_sold: int
    total_raised: int
    target: int
    remaining_supply: int
    current_price: int
    sell_price: int
    market_cap: int
    progress_bps: int
    sells_enabled: bool
    pool_ref: Optional[str] = None
    position_ref: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "asset_id": self.asset_id,
            "phase": self.phase.value,
            "creator": self.creator,
            "total_sold": str(self.total_sold),
            "total_raised": str(self.total_raised),
            "target": str(self.target),
            "remaining_supply": str(self.remaining_supply),
            "current_price": str(self.current_price),
            "sell_price": str(self.sell_price),
            "market_cap": str(self.market_cap),
            "progress_bps": self.progress_bps,
            "sells_enabled": self.sells_enabled,
            "pool_ref": self.pool_ref,
            "position_ref": self.position_ref,
        }
