"""Pydantic models for sessions and review bounties.

Records are frozen. A state change builds a new record through the
transition methods below; the store swaps it in when the operation commits.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .errors import ReviewAlreadyCompleted, SessionAlreadyCompleted

# Opaque account handle supplied by the host
Account = str


# ============================================================
# Enums
# ============================================================

class SessionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"  # Reserved; no operation enters or leaves it


class ReviewStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SessionParty(str, Enum):
    REQUESTER = "requester"
    PROVIDER = "provider"


# Valid transitions: {from_state: {allowed_to_states}}
_SESSION_TRANSITIONS: dict[SessionStatus, set[SessionStatus]] = {
    SessionStatus.PENDING: {SessionStatus.COMPLETED, SessionStatus.CANCELLED},
    # Terminal states
    SessionStatus.COMPLETED: set(),
    SessionStatus.CANCELLED: set(),
    SessionStatus.DISPUTED: set(),
}

_REVIEW_TRANSITIONS: dict[ReviewStatus, set[ReviewStatus]] = {
    ReviewStatus.PENDING: {ReviewStatus.COMPLETED, ReviewStatus.CANCELLED},
    ReviewStatus.COMPLETED: set(),
    ReviewStatus.CANCELLED: set(),
}


# ============================================================
# Session Models
# ============================================================

class Session(BaseModel):
    """Two-party coding session held in escrow."""
    model_config = ConfigDict(frozen=True)

    session_id: int
    requester: Account
    provider: Account

    # Amount
    amount: int
    platform_fee: int

    # Status
    status: SessionStatus = SessionStatus.PENDING
    requester_confirmed: bool = False
    provider_confirmed: bool = False

    # Host clock at creation
    created_at: int

    @property
    def payout(self) -> int:
        """Amount the provider receives on release."""
        return self.amount - self.platform_fee

    @property
    def is_pending(self) -> bool:
        return self.status == SessionStatus.PENDING

    @property
    def is_completed(self) -> bool:
        return self.status == SessionStatus.COMPLETED

    def party_of(self, account: Account) -> Optional[SessionParty]:
        if account == self.requester:
            return SessionParty.REQUESTER
        if account == self.provider:
            return SessionParty.PROVIDER
        return None

    def transition_to(self, target: SessionStatus) -> "Session":
        if target not in _SESSION_TRANSITIONS.get(self.status, set()):
            raise SessionAlreadyCompleted(
                f"Session {self.session_id} cannot move from "
                f"{self.status.value} to {target.value}",
                session_id=self.session_id,
                status=self.status.value,
            )
        return self.model_copy(update={"status": target})

    def confirm(self, party: SessionParty) -> tuple["Session", bool]:
        """Record one party's confirmation.

        Returns the updated session and whether this confirmation completed
        it. When both flags end up set the session moves to COMPLETED in the
        same step, so no record with both flags set is ever pending.
        """
        if not self.is_pending:
            raise SessionAlreadyCompleted(
                f"Session {self.session_id} is {self.status.value}",
                session_id=self.session_id,
                status=self.status.value,
            )

        flag = (
            "requester_confirmed" if party == SessionParty.REQUESTER
            else "provider_confirmed"
        )
        confirmed = self.model_copy(update={flag: True})

        if confirmed.requester_confirmed and confirmed.provider_confirmed:
            return confirmed.transition_to(SessionStatus.COMPLETED), True
        return confirmed, False


# ============================================================
# Review Models
# ============================================================

class Review(BaseModel):
    """Code review bounty completed by the requester alone."""
    model_config = ConfigDict(frozen=True)

    review_id: int
    requester: Account
    reviewer: Account

    # Amount
    bounty: int
    platform_fee: int

    # Status
    status: ReviewStatus = ReviewStatus.PENDING

    created_at: int

    @property
    def payout(self) -> int:
        """Amount the reviewer receives on completion."""
        return self.bounty - self.platform_fee

    @property
    def is_pending(self) -> bool:
        return self.status == ReviewStatus.PENDING

    @property
    def is_completed(self) -> bool:
        return self.status == ReviewStatus.COMPLETED

    def transition_to(self, target: ReviewStatus) -> "Review":
        if target not in _REVIEW_TRANSITIONS.get(self.status, set()):
            raise ReviewAlreadyCompleted(
                f"Review {self.review_id} cannot move from "
                f"{self.status.value} to {target.value}",
                review_id=self.review_id,
                status=self.status.value,
            )
        return self.model_copy(update={"status": target})
