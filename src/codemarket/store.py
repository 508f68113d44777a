"""In-process settlement state and the unit of work that stages changes.

``SettlementStore`` holds committed state only. Mutating operations work on
a ``UnitOfWork`` that reads through to the store and keeps its own writes
until ``commit()``; an operation that fails simply drops its unit of work.
"""

from dataclasses import dataclass
from typing import Optional
import structlog

from .models import Account, Review, Session

logger = structlog.get_logger()


@dataclass
class Operation:
    """One in-flight mutating call: who made it and what it has staged."""
    name: str
    caller: Account
    uow: "UnitOfWork"


class SettlementStore:
    """Committed records, id counters and the treasury accumulator."""

    def __init__(self, owner: Account):
        self.owner = owner
        self.sessions: dict[int, Session] = {}
        self.reviews: dict[int, Review] = {}
        self.next_session_id = 1
        self.next_review_id = 1
        self.platform_earnings = 0

    # ============================================================
    # Session Operations
    # ============================================================

    def get_session(self, session_id: int) -> Optional[Session]:
        return self.sessions.get(session_id)

    def get_sessions_for_account(self, account: Account) -> list[Session]:
        return [
            self.sessions[sid]
            for sid in sorted(self.sessions)
            if account in (self.sessions[sid].requester, self.sessions[sid].provider)
        ]

    # ============================================================
    # Review Operations
    # ============================================================

    def get_review(self, review_id: int) -> Optional[Review]:
        return self.reviews.get(review_id)

    def get_reviews_for_account(self, account: Account) -> list[Review]:
        return [
            self.reviews[rid]
            for rid in sorted(self.reviews)
            if account in (self.reviews[rid].requester, self.reviews[rid].reviewer)
        ]


class UnitOfWork:
    """Staged writes for a single operation."""

    def __init__(self, store: SettlementStore):
        self._store = store
        self._sessions: dict[int, Session] = {}
        self._reviews: dict[int, Review] = {}
        self._next_session_id = store.next_session_id
        self._next_review_id = store.next_review_id
        self._earnings = store.platform_earnings
        self.committed = False

    # Sessions

    def allocate_session_id(self) -> int:
        session_id = self._next_session_id
        self._next_session_id += 1
        return session_id

    def get_session(self, session_id: int) -> Optional[Session]:
        if session_id in self._sessions:
            return self._sessions[session_id]
        return self._store.get_session(session_id)

    def put_session(self, session: Session) -> None:
        self._sessions[session.session_id] = session

    # Reviews

    def allocate_review_id(self) -> int:
        review_id = self._next_review_id
        self._next_review_id += 1
        return review_id

    def get_review(self, review_id: int) -> Optional[Review]:
        if review_id in self._reviews:
            return self._reviews[review_id]
        return self._store.get_review(review_id)

    def put_review(self, review: Review) -> None:
        self._reviews[review.review_id] = review

    # Treasury

    @property
    def platform_earnings(self) -> int:
        return self._earnings

    def set_platform_earnings(self, value: int) -> None:
        if value < 0:
            raise ValueError("Platform earnings cannot go negative")
        self._earnings = value

    def commit(self) -> None:
        """Publish every staged write to the store."""
        if self.committed:
            raise RuntimeError("Unit of work already committed")

        store = self._store
        store.sessions.update(self._sessions)
        store.reviews.update(self._reviews)
        store.next_session_id = self._next_session_id
        store.next_review_id = self._next_review_id
        store.platform_earnings = self._earnings
        self.committed = True

        logger.debug(
            "unit_of_work_committed",
            sessions=sorted(self._sessions),
            reviews=sorted(self._reviews),
            platform_earnings=self._earnings,
        )
