"""Admission gate interface consulted before every buy."""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class FairLaunchTerms:
    """Fixed-price window overriding the curve for one buyer."""

    price: int
    remaining_allowance: int


class AdmissionGate(Protocol):
    def is_paused(self, asset_id: str) -> bool:
        ...

    def validate_buy(self, asset_id: str, buyer: str, amount: int) -> bool:
        ...

    def fair_launch_terms(self, asset_id: str, buyer: str) -> Optional[FairLaunchTerms]:
        ...


class OpenAdmissionGate:
    """Gate that admits every buy and never runs a fair launch."""

    def is_paused(self, asset_id: str) -> bool:
        return False

    def validate_buy(self, asset_id: str, buyer: str, amount: int) -> bool:
        return True

    def fair_launch_terms(self, asset_id: str, buyer: str) -> Optional[FairLaunchTerms]:
        return None
