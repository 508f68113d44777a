"""Host ledger integrations."""

from .base import SettlementHost, TransferResult
from .memory import InMemoryHost

__all__ = [
    "SettlementHost",
    "TransferResult",
    "InMemoryHost",
]
