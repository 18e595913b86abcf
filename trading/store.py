"""Explicit state store for asset records, the fee ledger and notices."""

import copy
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from fees.models import FeeLedger

from .models import AssetState, Notice, NoticeKind


class StateStore:
    """Holds all mutable launchpad state.

    ``transaction()`` snapshots everything on entry and restores the snapshot
    if the block raises, so a failed operation leaves no partial writes.
    Transactions nest; an inner rollback does not undo the outer block.
    """

    def __init__(
        self,
        assets: Optional[Dict[str, AssetState]] = None,
        fee_ledger: Optional[FeeLedger] = None,
        notices: Optional[List[Notice]] = None,
        participants: Tuple[object, ...] = (),
    ) -> None:
        self.assets: Dict[str, AssetState] = dict(assets or {})
        self.fee_ledger = fee_ledger or FeeLedger()
        self.notices: List[Notice] = list(notices or [])
        # Collaborator simulators whose state should roll back with ours.
        self._participants = tuple(participants)
        self._depth = 0

    @property
    def depth(self) -> int:
        return self._depth

    def enlist(self, *participants: object) -> None:
        self._participants = self._participants + participants

    def get(self, asset_id: str) -> Optional[AssetState]:
        return self.assets.get(asset_id)

    def put(self, state: AssetState) -> None:
        self.assets[state.asset_id] = state

    def add_notice(self, kind: NoticeKind, asset_id: str, detail: str) -> Notice:
        notice = Notice(sequence=len(self.notices) + 1, kind=kind, asset_id=asset_id, detail=detail)
        self.notices.append(notice)
        return notice

    @contextmanager
    def transaction(self) -> Iterator[None]:
        # Participants referencing each other keep pointing at the live objects.
        memo = {id(item): item for item in self._participants}
        snapshot = copy.deepcopy(self._snapshot_targets(), memo)
        self._depth += 1
        try:
            yield
        except BaseException:
            self._restore(snapshot)
            raise
        finally:
            self._depth -= 1

    def _snapshot_targets(self) -> Tuple[object, ...]:
        participant_state = tuple(dict(item.__dict__) for item in self._participants)
        return (self.assets, self.fee_ledger, self.notices, participant_state)

    def _restore(self, snapshot: Tuple[object, ...]) -> None:
        assets, fee_ledger, notices, participant_state = snapshot
        self.assets = assets
        self.fee_ledger = fee_ledger
        self.notices = notices
        for participant, state in zip(self._participants, participant_state):
            participant.__dict__.clear()
            participant.__dict__.update(state)

    def to_dict(self) -> Dict[str, object]:
        return {
            "assets": [state.to_dict() for _, state in sorted(self.assets.items())],
            "fee_ledger": self.fee_ledger.to_dict(),
            "notices": [notice.to_dict() for notice in self.notices],
        }

    @staticmethod
    def from_dict(data: Optional[Dict[str, object]]) -> "StateStore":
        data = data or {}
        assets = [AssetState.from_dict(entry) for entry in data.get("assets", [])]
        return StateStore(
            assets={state.asset_id: state for state in assets},
            fee_ledger=FeeLedger.from_dict(data.get("fee_ledger")),
            notices=[Notice.from_dict(entry) for entry in data.get("notices", [])],
        )
