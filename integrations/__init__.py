from .gate import AdmissionGate, FairLaunchTerms, OpenAdmissionGate
from .ledger import EthSink, InMemoryEthSink, InMemoryTokenLedger, LedgerError, TokenLedger
from .registry import AssetRegistry, InMemoryAssetRegistry, TradeRecord
from .venue_sim import InMemoryLiquidityVenue, VenueError

__all__ = [
    "AdmissionGate",
    "AssetRegistry",
    "EthSink",
    "FairLaunchTerms",
    "InMemoryAssetRegistry",
    "InMemoryEthSink",
    "InMemoryLiquidityVenue",
    "InMemoryTokenLedger",
    "LedgerError",
    "OpenAdmissionGate",
    "TokenLedger",
    "TradeRecord",
    "VenueError",
]
