"""Fee configuration, split results, and the global fee ledger."""

from dataclasses import dataclass, field
from typing import Dict, Optional

BPS_DENOMINATOR = 10_000
PERCENT_DENOMINATOR = 100


class FeeConfigError(ValueError):
    """Raised when a fee split configuration is malformed."""


@dataclass(frozen=True)
class FeeConfig:
    """Adjustable fee shares on a 0-100 scale."""

    creator: int
    community: int
    buyback: int

    def validate(self) -> None:
        shares = (self.creator, self.community, self.buyback)
        if any(share < 0 for share in shares):
            raise FeeConfigError("Fee shares must be non-negative.")
        if sum(shares) != PERCENT_DENOMINATOR:
            raise FeeConfigError("Fee shares must sum to exactly 100.")

    def to_dict(self) -> Dict[str, int]:
        return {
            "creator": self.creator,
            "community": self.community,
            "buyback": self.buyback,
        }

    @staticmethod
    def from_dict(data: Dict[str, int]) -> "FeeConfig":
        return FeeConfig(
            creator=int(data["creator"]),
            community=int(data["community"]),
            buyback=int(data["buyback"]),
        )


@dataclass(frozen=True)
class FeeSplit:
    total: int
    platform: int
    creator: int
    community: int
    buyback: int

    @property
    def allocated(self) -> int:
        return self.platform + self.creator + self.community + self.buyback

    @property
    def unallocated(self) -> int:
        return self.total - self.allocated


@dataclass
class FeeLedger:
    """Global fee accumulators. Only the fee distributor mutates this."""

    platform_total: int = 0
    community_total: int = 0
    buyback_total: int = 0
    graduation_total: int = 0
    creator_balances: Dict[str, int] = field(default_factory=dict)
    creator_claimed: Dict[str, int] = field(default_factory=dict)
    asset_buyback: Dict[str, int] = field(default_factory=dict)

    def creator_balance(self, creator: str) -> int:
        return self.creator_balances.get(creator, 0)

    def buyback_balance(self, asset_id: str) -> int:
        return self.asset_buyback.get(asset_id, 0)

    def to_dict(self) -> Dict[str, object]:
        return {
            "platform_total": self.platform_total,
            "community_total": self.community_total,
            "buyback_total": self.buyback_total,
            "graduation_total": self.graduation_total,
            "creator_balances": dict(sorted(self.creator_balances.items())),
            "creator_claimed": dict(sorted(self.creator_claimed.items())),
            "asset_buyback": dict(sorted(self.asset_buyback.items())),
        }

    @staticmethod
    def from_dict(data: Optional[Dict[str, object]]) -> "FeeLedger":
        if not data:
            return FeeLedger()
        return FeeLedger(
            platform_total=int(data.get("platform_total", 0)),
            community_total=int(data.get("community_total", 0)),
            buyback_total=int(data.get("buyback_total", 0)),
            graduation_total=int(data.get("graduation_total", 0)),
            creator_balances={
                key: int(value) for key, value in dict(data.get("creator_balances", {})).items()
            },
            creator_claimed={
                key: int(value) for key, value in dict(data.get("creator_claimed", {})).items()
            },
            asset_buyback={
                key: int(value) for key, value in dict(data.get("asset_buyback", {})).items()
            },
        )
