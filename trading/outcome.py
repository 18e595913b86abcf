"""Explicit results for calls whose failure must not abort the caller."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    ignored: bool = False

    @staticmethod
    def success(value: Optional[T] = None) -> "Outcome[T]":
        return Outcome(ok=True, value=value)

    @staticmethod
    def ignored_failure(error: str) -> "Outcome[T]":
        return Outcome(ok=False, error=error, ignored=True)

    def value_or(self, default: T) -> T:
        return self.value if self.ok and self.value is not None else default

    def to_dict(self) -> Dict[str, object]:
        result: Dict[str, object] = {"ok": self.ok, "ignored": self.ignored}
        if self.error is not None:
            result["error"] = self.error
        return result


def attempt(fn: Callable[..., T], *args: Any, **kwargs: Any) -> Outcome[T]:
    """Run ``fn`` and turn any exception into an ignored failure."""

    try:
        return Outcome.success(fn(*args, **kwargs))
    except Exception as exc:  # collaborator code is untrusted
        return Outcome.ignored_failure(f"{type(exc).__name__}: {exc}")
