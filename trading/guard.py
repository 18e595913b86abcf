"""Operation-in-progress locks for groups of mutating entry points."""


class ReentrancyError(RuntimeError):
    """Raised when a guarded operation group is re-entered."""


class ReentrancyGuard:
    """Flag checked, set and cleared around a critical section.

    Not a thread lock: execution is serialized, and the guard only rejects a
    call that re-enters the same group through an external callback.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._held = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def held(self) -> bool:
        return self._held

    def __enter__(self) -> "ReentrancyGuard":
        if self._held:
            raise ReentrancyError(f"Re-entrant call into {self._name} operations.")
        self._held = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._held = False
