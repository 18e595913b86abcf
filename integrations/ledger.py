"""Token balance ledger and ETH payout interfaces with in-memory simulators."""

from typing import Dict, List, Optional, Protocol, Tuple


class LedgerError(ValueError):
    """Raised when a ledger operation would break balance checks."""


class TokenLedger(Protocol):
    def balance_of(self, asset_id: str, holder: str) -> int:
        ...

    def mint(self, asset_id: str, recipient: str, amount: int) -> None:
        ...

    def transfer(self, asset_id: str, sender: str, recipient: str, amount: int) -> None:
        ...

    def transfer_from(self, asset_id: str, owner: str, recipient: str, amount: int) -> None:
        ...

    def burn(self, asset_id: str, holder: str, amount: int) -> None:
        ...


class EthSink(Protocol):
    def send(self, recipient: str, amount: int) -> None:
        ...


class InMemoryTokenLedger:
    """Balance-checked multi-asset ledger."""

    def __init__(self, balances: Optional[Dict[str, Dict[str, int]]] = None) -> None:
        self._balances: Dict[str, Dict[str, int]] = {
            asset_id: dict(holders) for asset_id, holders in (balances or {}).items()
        }
        self._burned: Dict[str, int] = {}

    def balance_of(self, asset_id: str, holder: str) -> int:
        return self._balances.get(asset_id, {}).get(holder, 0)

    def total_supply(self, asset_id: str) -> int:
        return sum(self._balances.get(asset_id, {}).values())

    def burned(self, asset_id: str) -> int:
        return self._burned.get(asset_id, 0)

    def mint(self, asset_id: str, recipient: str, amount: int) -> None:
        _require_positive(amount)
        holders = self._balances.setdefault(asset_id, {})
        holders[recipient] = holders.get(recipient, 0) + amount

    def transfer(self, asset_id: str, sender: str, recipient: str, amount: int) -> None:
        _require_positive(amount)
        holders = self._balances.setdefault(asset_id, {})
        available = holders.get(sender, 0)
        if available < amount:
            raise LedgerError(f"Insufficient {asset_id} balance for {sender}.")
        holders[sender] = available - amount
        holders[recipient] = holders.get(recipient, 0) + amount

    def transfer_from(self, asset_id: str, owner: str, recipient: str, amount: int) -> None:
        self.transfer(asset_id, owner, recipient, amount)

    def burn(self, asset_id: str, holder: str, amount: int) -> None:
        _require_positive(amount)
        holders = self._balances.setdefault(asset_id, {})
        available = holders.get(holder, 0)
        if available < amount:
            raise LedgerError(f"Cannot burn more {asset_id} than {holder} holds.")
        holders[holder] = available - amount
        self._burned[asset_id] = self._burned.get(asset_id, 0) + amount

    def to_dict(self) -> Dict[str, object]:
        return {
            "balances": {
                asset_id: dict(sorted(holders.items()))
                for asset_id, holders in sorted(self._balances.items())
            },
            "burned": dict(sorted(self._burned.items())),
        }

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "InMemoryTokenLedger":
        balances = {
            asset_id: {holder: int(amount) for holder, amount in holders.items()}
            for asset_id, holders in dict(data.get("balances", {})).items()
        }
        ledger = InMemoryTokenLedger(balances)
        ledger._burned = {key: int(value) for key, value in dict(data.get("burned", {})).items()}
        return ledger


class InMemoryEthSink:
    """Records ETH payouts instead of moving real funds."""

    def __init__(self) -> None:
        self._paid: Dict[str, int] = {}
        self._history: List[Tuple[str, int]] = []

    @property
    def history(self) -> Tuple[Tuple[str, int], ...]:
        return tuple(self._history)

    def paid_to(self, recipient: str) -> int:
        return self._paid.get(recipient, 0)

    def send(self, recipient: str, amount: int) -> None:
        if amount < 0:
            raise LedgerError("Payout amount must be non-negative.")
        self._paid[recipient] = self._paid.get(recipient, 0) + amount
        self._history.append((recipient, amount))

    def to_dict(self) -> Dict[str, object]:
        return {
            "paid": dict(sorted(self._paid.items())),
            "history": [[recipient, amount] for recipient, amount in self._history],
        }

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "InMemoryEthSink":
        sink = InMemoryEthSink()
        sink._paid = {key: int(value) for key, value in dict(data.get("paid", {})).items()}
        sink._history = [(str(item[0]), int(item[1])) for item in data.get("history", [])]
        return sink


def _require_positive(amount: int) -> None:
    if amount <= 0:
        raise LedgerError("Amount must be positive.")
