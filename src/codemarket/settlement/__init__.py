"""Settlement flows: fees, session escrow, review bounties, tips, treasury."""

from .fees import fee, tip_fee, breakdown, tip_breakdown, FeeBreakdown
from .sessions import SessionEscrowManager
from .reviews import ReviewBountyManager
from .tips import TipProcessor
from .treasury import PlatformTreasury

__all__ = [
    "fee",
    "tip_fee",
    "breakdown",
    "tip_breakdown",
    "FeeBreakdown",
    "SessionEscrowManager",
    "ReviewBountyManager",
    "TipProcessor",
    "PlatformTreasury",
]
