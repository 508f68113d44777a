"""Platform fee arithmetic. Integer math only, always rounded down."""

from dataclasses import dataclass

PLATFORM_FEE_PERCENT = 5
TIP_FEE_PERCENT = 2


@dataclass(frozen=True)
class FeeBreakdown:
    amount: int
    fee: int

    @property
    def payout(self) -> int:
        return self.amount - self.fee


def fee(amount: int) -> int:
    """Platform fee on a session payment or review bounty."""
    return amount * PLATFORM_FEE_PERCENT // 100


def tip_fee(amount: int) -> int:
    """Platform fee skimmed from a tip."""
    return amount * TIP_FEE_PERCENT // 100


def breakdown(amount: int) -> FeeBreakdown:
    return FeeBreakdown(amount=amount, fee=fee(amount))


def tip_breakdown(amount: int) -> FeeBreakdown:
    return FeeBreakdown(amount=amount, fee=tip_fee(amount))
