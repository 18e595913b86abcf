from .guard import ReentrancyError, ReentrancyGuard
from .machine import (
    AdmissionDeniedError,
    AssetNotFoundError,
    InsufficientBalanceError,
    InvalidPhaseError,
    SlippageError,
    TradeValidationError,
    TradingError,
    TradingPausedError,
    TradingStateMachine,
    UnauthorizedError,
)
from .models import (
    AssetState,
    BuyQuote,
    BuyReceipt,
    Notice,
    NoticeKind,
    SellQuote,
    SellReceipt,
    TradingPhase,
    TradingStats,
)
from .outcome import Outcome, attempt
from .store import StateStore

__all__ = [
    "AdmissionDeniedError",
    "AssetNotFoundError",
    "AssetState",
    "BuyQuote",
    "BuyReceipt",
    "InsufficientBalanceError",
    "InvalidPhaseError",
    "Notice",
    "NoticeKind",
    "Outcome",
    "ReentrancyError",
    "ReentrancyGuard",
    "SellQuote",
    "SellReceipt",
    "SlippageError",
    "StateStore",
    "TradeValidationError",
    "TradingError",
    "TradingPausedError",
    "TradingPhase",
    "TradingStateMachine",
    "TradingStats",
    "UnauthorizedError",
    "attempt",
]
