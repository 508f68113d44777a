"""Coding session escrow: creation, dual confirmation, release and refund."""

import structlog

from ..auth import (
    require_counterparty,
    require_minimum,
    require_requester,
    require_session_participant,
)
from ..config import Settings
from ..errors import SessionNotFound
from ..ledger.base import SettlementHost
from ..models import Session, SessionStatus
from ..store import Operation
from .fees import fee
from .payments import deposit_to_escrow, refund_from_escrow, release_from_escrow
from .treasury import PlatformTreasury

logger = structlog.get_logger()


class SessionEscrowManager:
    """Lifecycle of two-party coding sessions.

    Flow:
    1. Requester opens a session with a provider and commits the payment
    2. Both parties confirm completion, in either order
    3. The second confirmation releases payment minus the platform fee to
       the provider and credits the fee to the treasury

    A pending session can be cancelled by its requester for a full refund.
    """

    def __init__(
        self,
        host: SettlementHost,
        settings: Settings,
        treasury: PlatformTreasury,
    ):
        self._host = host
        self._settings = settings
        self._treasury = treasury

    async def create(self, op: Operation, provider: str, amount: int) -> int:
        """Open a session with the caller as requester.

        Args:
            op: Current operation
            provider: Account that will deliver the session
            amount: Payment committed to the session

        Returns:
            The new session id
        """
        require_counterparty(op.caller, provider, "provider")
        require_minimum(amount, self._settings.min_session_payment, "Session payment")

        session = Session(
            session_id=op.uow.allocate_session_id(),
            requester=op.caller,
            provider=provider,
            amount=amount,
            platform_fee=fee(amount),
            status=SessionStatus.PENDING,
            created_at=self._host.current_time(),
        )

        if self._settings.moves_deposits:
            await deposit_to_escrow(self._host, op.caller, amount)

        op.uow.put_session(session)

        logger.info(
            "session_created",
            session_id=session.session_id,
            requester=session.requester,
            provider=session.provider,
            amount=amount,
            platform_fee=session.platform_fee,
        )

        return session.session_id

    async def confirm(self, op: Operation, session_id: int) -> Session:
        """Confirm completion on behalf of the caller.

        The confirmation that sets the second flag also releases the
        escrow. A repeated confirmation by the same party changes nothing.
        """
        session = self._get(op, session_id)
        party = require_session_participant(session, op.caller)

        updated, completed = session.confirm(party)
        op.uow.put_session(updated)

        logger.info(
            "session_confirmed",
            session_id=session_id,
            party=party.value,
            requester_confirmed=updated.requester_confirmed,
            provider_confirmed=updated.provider_confirmed,
        )

        if completed:
            await self._release(op, updated)

        return updated

    async def _release(self, op: Operation, session: Session) -> None:
        result = await release_from_escrow(self._host, session.provider, session.payout)
        self._treasury.accrue(op.uow, session.platform_fee, source=f"session:{session.session_id}")

        logger.info(
            "session_released",
            session_id=session.session_id,
            provider=session.provider,
            payout=session.payout,
            platform_fee=session.platform_fee,
            txn_hash=result.txn_hash[:20] + "..." if result.txn_hash else None,
        )

    async def cancel(self, op: Operation, session_id: int) -> Session:
        """Cancel a pending session and refund the requester in full."""
        session = self._get(op, session_id)
        require_requester(session, op.caller, "cancel a session")

        cancelled = session.transition_to(SessionStatus.CANCELLED)
        op.uow.put_session(cancelled)

        result = await refund_from_escrow(self._host, session.requester, session.amount)

        logger.info(
            "session_cancelled",
            session_id=session_id,
            requester=session.requester,
            refunded=session.amount,
            txn_hash=result.txn_hash[:20] + "..." if result.txn_hash else None,
        )

        return cancelled

    def _get(self, op: Operation, session_id: int) -> Session:
        session = op.uow.get_session(session_id)
        if session is None:
            raise SessionNotFound(f"Session {session_id} not found", session_id=session_id)
        return session
