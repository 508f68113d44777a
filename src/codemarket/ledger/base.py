"""Abstract host interface consumed by the settlement engine."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass
class TransferResult:
    """Result of a host ledger transfer."""
    success: bool
    txn_hash: Optional[str] = None
    amount: int = 0
    from_account: str = ""
    to_account: str = ""
    error: Optional[str] = None
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)


class SettlementHost(ABC):
    """Execution host that identifies callers, keeps time and moves funds.

    Implementations may be backed by a chain, a payments provider or an
    in-process ledger. The engine never holds balances itself: escrow
    custody is the ``escrow_account`` on the host ledger.
    """

    escrow_account: str

    @abstractmethod
    def identity_of_caller(self) -> str:
        """Account handle of whoever invoked the current operation."""
        ...

    @abstractmethod
    def current_time(self) -> int:
        """Monotonic counter used to stamp new records."""
        ...

    @abstractmethod
    async def transfer(
        self,
        amount: int,
        source: str,
        destination: str,
    ) -> TransferResult:
        """Move funds between accounts.

        A failed transfer is reported through ``TransferResult.success``
        rather than raised, and must leave balances untouched.
        """
        ...

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager:
        """All-or-nothing scope for the transfers of one operation.

        Leaving the scope with an exception undoes every transfer made
        inside it.
        """
        ...
