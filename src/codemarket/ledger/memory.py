"""In-process ledger host for local runs, the CLI and tests.

Balances live in a dict, callers and open transaction journals are tracked
per asyncio task through context variables, and time is a counter that
ticks on every read. Several engines may share one host.
"""

import uuid
from contextlib import asynccontextmanager, contextmanager
from contextvars import ContextVar
from typing import Iterable, Optional
import structlog

from .base import SettlementHost, TransferResult

logger = structlog.get_logger()

_caller: ContextVar[Optional[str]] = ContextVar("codemarket_caller", default=None)


class InMemoryHost(SettlementHost):
    """Dict-backed ledger with simulated transaction hashes."""

    def __init__(
        self,
        balances: Optional[dict[str, int]] = None,
        escrow_account: str = "codemarket-escrow",
        blocked: Optional[Iterable[str]] = None,
        start_time: int = 0,
    ):
        """Initialize the host.

        Args:
            balances: Opening balance per account
            escrow_account: Account that holds escrow custody
            blocked: Accounts that every transfer to or from fails for
            start_time: Initial clock value
        """
        self.escrow_account = escrow_account
        self.balances: dict[str, int] = dict(balances or {})
        self.blocked: set[str] = set(blocked or ())
        self._clock = start_time
        # Transfers applied inside the current task's open transaction scope
        self._journal: ContextVar[Optional[list[tuple[str, str, int]]]] = ContextVar(
            f"codemarket_ledger_journal_{id(self)}", default=None
        )

    # ============================================================
    # Identity & time
    # ============================================================

    def identity_of_caller(self) -> str:
        caller = _caller.get()
        if caller is None:
            raise RuntimeError("No caller set; wrap the call in host.acting_as(account)")
        return caller

    @contextmanager
    def acting_as(self, account: str):
        """Run the enclosed calls on behalf of ``account``."""
        token = _caller.set(account)
        try:
            yield self
        finally:
            _caller.reset(token)

    def current_time(self) -> int:
        self._clock += 1
        return self._clock

    # ============================================================
    # Balances
    # ============================================================

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def fund(self, account: str, amount: int) -> None:
        """Mint ``amount`` into ``account`` (local setup only)."""
        self.balances[account] = self.balance_of(account) + amount

    def block(self, account: str) -> None:
        self.blocked.add(account)

    def unblock(self, account: str) -> None:
        self.blocked.discard(account)

    async def transfer(
        self,
        amount: int,
        source: str,
        destination: str,
    ) -> TransferResult:
        error = None
        if amount < 0:
            error = "negative amount"
        elif source in self.blocked or destination in self.blocked:
            error = "account blocked"
        elif self.balance_of(source) < amount:
            error = f"insufficient balance in {source}"

        if error:
            logger.warning(
                "transfer_failed",
                source=source,
                destination=destination,
                amount=amount,
                error=error,
            )
            return TransferResult(
                success=False,
                amount=amount,
                from_account=source,
                to_account=destination,
                error=error,
            )

        self.balances[source] = self.balance_of(source) - amount
        self.balances[destination] = self.balance_of(destination) + amount

        journal = self._journal.get()
        if journal is not None:
            journal.append((source, destination, amount))

        # Generate realistic-looking transaction hash
        txn_hash = f"0x{uuid.uuid4().hex}{uuid.uuid4().hex[:24]}"

        logger.debug(
            "transfer_applied",
            source=source,
            destination=destination,
            amount=amount,
            txn_hash=txn_hash[:20] + "...",
        )

        return TransferResult(
            success=True,
            txn_hash=txn_hash,
            amount=amount,
            from_account=source,
            to_account=destination,
        )

    @asynccontextmanager
    async def transaction(self):
        """Undo, in reverse order, only the transfers made inside this scope.

        Transfers made concurrently by other tasks are recorded in their own
        journals and survive a rollback here. A nested scope that succeeds
        hands its entries to the enclosing scope.
        """
        parent = self._journal.get()
        journal: list[tuple[str, str, int]] = []
        token = self._journal.set(journal)
        try:
            yield self
        except BaseException:
            for source, destination, amount in reversed(journal):
                self.balances[destination] = self.balance_of(destination) - amount
                self.balances[source] = self.balance_of(source) + amount
            logger.debug("ledger_rolled_back", transfers=len(journal))
            raise
        else:
            if parent is not None:
                parent.extend(journal)
        finally:
            self._journal.reset(token)
