"""Settlement engine: the public operations of the marketplace escrow.

Usage:
    host = InMemoryHost(balances={"alice": 5_000_000})
    with host.acting_as("platform"):
        engine = SettlementEngine(host)

    with host.acting_as("alice"):
        session_id = await engine.create_session("bob", 2_000_000)
        await engine.confirm_session_completion(session_id)
    with host.acting_as("bob"):
        await engine.confirm_session_completion(session_id)

Every mutating operation runs under one engine-wide lock, stages its writes
in a unit of work and runs its transfers inside a host ledger transaction.
The unit of work is committed only after the last transfer succeeded; on
any error both the staged writes and the transfers are discarded.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
import structlog

from .config import Settings, get_settings
from .errors import SettlementError
from .ledger.base import SettlementHost
from .models import Account, Review, Session
from .settlement import (
    PlatformTreasury,
    ReviewBountyManager,
    SessionEscrowManager,
    TipProcessor,
)
from .store import Operation, SettlementStore, UnitOfWork

logger = structlog.get_logger()


class SettlementEngine:
    """One deployment of the settlement engine.

    The account that constructs the engine (the host caller at that moment)
    becomes the treasury owner for the engine's lifetime. The host's escrow
    account must be the one named in settings.
    """

    def __init__(
        self,
        host: SettlementHost,
        settings: Optional[Settings] = None,
    ):
        self._host = host
        self._settings = settings or get_settings()
        if host.escrow_account != self._settings.escrow_account:
            raise ValueError(
                f"Host escrow account {host.escrow_account!r} does not match "
                f"configured escrow account {self._settings.escrow_account!r}"
            )
        self._store = SettlementStore(owner=host.identity_of_caller())
        self._lock = asyncio.Lock()

        self._treasury = PlatformTreasury(host, self._store)
        self._sessions = SessionEscrowManager(host, self._settings, self._treasury)
        self._reviews = ReviewBountyManager(host, self._settings, self._treasury)
        self._tips = TipProcessor(host, self._settings, self._treasury)

        logger.info(
            "engine_deployed",
            owner=self._store.owner,
            escrow_account=host.escrow_account,
            custody_mode=self._settings.custody_mode.value,
        )

    @property
    def owner(self) -> Account:
        return self._store.owner

    @property
    def settings(self) -> Settings:
        return self._settings

    @asynccontextmanager
    async def _operation(self, name: str) -> AsyncIterator[Operation]:
        async with self._lock:
            caller = self._host.identity_of_caller()
            op = Operation(name=name, caller=caller, uow=UnitOfWork(self._store))
            try:
                async with self._host.transaction():
                    yield op
            except SettlementError as e:
                logger.warning(
                    "operation_reverted",
                    operation=name,
                    caller=caller,
                    error=e.code,
                    detail=str(e),
                )
                raise
            op.uow.commit()

    # ============================================================
    # Sessions
    # ============================================================

    async def create_session(self, provider: Account, amount: int) -> int:
        async with self._operation("create_session") as op:
            return await self._sessions.create(op, provider, amount)

    async def confirm_session_completion(self, session_id: int) -> None:
        async with self._operation("confirm_session_completion") as op:
            await self._sessions.confirm(op, session_id)

    async def cancel_session(self, session_id: int) -> None:
        async with self._operation("cancel_session") as op:
            await self._sessions.cancel(op, session_id)

    # ============================================================
    # Reviews
    # ============================================================

    async def create_review_request(self, reviewer: Account, bounty: int) -> int:
        async with self._operation("create_review_request") as op:
            return await self._reviews.create(op, reviewer, bounty)

    async def complete_review(self, review_id: int) -> None:
        async with self._operation("complete_review") as op:
            await self._reviews.complete(op, review_id)

    async def cancel_review(self, review_id: int) -> None:
        async with self._operation("cancel_review") as op:
            await self._reviews.cancel(op, review_id)

    # ============================================================
    # Tips & treasury
    # ============================================================

    async def send_tip(self, recipient: Account, amount: int) -> None:
        async with self._operation("send_tip") as op:
            await self._tips.send(op, recipient, amount)

    async def withdraw_platform_earnings(self, amount: int) -> None:
        async with self._operation("withdraw_platform_earnings") as op:
            await self._treasury.withdraw(op, amount)

    # ============================================================
    # Read-only
    # ============================================================

    def get_session(self, session_id: int) -> Optional[Session]:
        return self._store.get_session(session_id)

    def get_review(self, review_id: int) -> Optional[Review]:
        return self._store.get_review(review_id)

    def get_platform_earnings(self) -> int:
        return self._treasury.earnings()

    def is_session_completed(self, session_id: int) -> bool:
        session = self._store.get_session(session_id)
        return session is not None and session.is_completed

    def is_review_completed(self, review_id: int) -> bool:
        review = self._store.get_review(review_id)
        return review is not None and review.is_completed

    def sessions_for(self, account: Account) -> list[Session]:
        """Every session the account requested or provides, by id."""
        return self._store.get_sessions_for_account(account)

    def reviews_for(self, account: Account) -> list[Review]:
        """Every review the account requested or reviews, by id."""
        return self._store.get_reviews_for_account(account)
