"""CodeMarket settlement - escrow for coding sessions and review bounties.

Example usage:
    from codemarket import InMemoryHost, SettlementEngine

    host = InMemoryHost(balances={"alice": 2_000_000})
    with host.acting_as("platform"):
        engine = SettlementEngine(host)

    with host.acting_as("alice"):
        review_id = await engine.create_review_request("bob", 500_000)
        await engine.complete_review(review_id)
"""

from .config import CustodyMode, Settings, get_settings
from .engine import SettlementEngine
from .ledger import InMemoryHost, SettlementHost, TransferResult
from .models import Review, ReviewStatus, Session, SessionStatus

__version__ = "0.1.0"
__all__ = [
    "SettlementEngine",
    "SettlementHost",
    "InMemoryHost",
    "TransferResult",
    "Session",
    "SessionStatus",
    "Review",
    "ReviewStatus",
    "Settings",
    "CustodyMode",
    "get_settings",
]
