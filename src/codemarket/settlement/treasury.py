"""Platform treasury: retained fees and owner withdrawal."""

import structlog

from ..auth import require_owner
from ..errors import InsufficientFunds, InvalidAmount
from ..ledger.base import SettlementHost
from ..store import Operation, SettlementStore, UnitOfWork
from .payments import withdraw_from_escrow

logger = structlog.get_logger()


class PlatformTreasury:
    """Accumulator of settled fees.

    Fees are credited by the session, review and tip flows inside their own
    unit of work, so a reverted settlement never leaves a fee behind.
    """

    def __init__(self, host: SettlementHost, store: SettlementStore):
        self._host = host
        self._store = store

    @property
    def owner(self) -> str:
        return self._store.owner

    def earnings(self) -> int:
        return self._store.platform_earnings

    def accrue(self, uow: UnitOfWork, amount: int, source: str) -> int:
        """Credit a collected fee. Returns the new staged total."""
        total = uow.platform_earnings + amount
        uow.set_platform_earnings(total)
        logger.debug("fee_accrued", source=source, fee=amount, platform_earnings=total)
        return total

    async def withdraw(self, op: Operation, amount: int) -> None:
        """Pay ``amount`` of retained fees to the owner."""
        require_owner(self.owner, op.caller)

        if amount < 0:
            raise InvalidAmount("Withdrawal amount cannot be negative", amount=amount)

        available = op.uow.platform_earnings
        if amount > available:
            raise InsufficientFunds(
                f"Requested {amount} but only {available} is available",
                requested=amount,
                available=available,
            )

        op.uow.set_platform_earnings(available - amount)
        result = await withdraw_from_escrow(self._host, self.owner, amount)

        logger.info(
            "earnings_withdrawn",
            owner=self.owner,
            amount=amount,
            remaining=available - amount,
            txn_hash=result.txn_hash[:20] + "..." if result.txn_hash else None,
        )
