"""Authorization and validation checks shared by the settlement managers.

Each helper either returns quietly or raises the matching
``SettlementError``. Account handles are compared exactly; the host is
responsible for normalising them.
"""

from typing import Union

from .errors import (
    InvalidAmount,
    InvalidParticipant,
    NotAuthorized,
    NotSessionParticipant,
)
from .models import Account, Review, Session, SessionParty


def require_counterparty(caller: Account, counterparty: Account, role: str) -> None:
    """Reject self-dealing: the caller cannot also be the paid party."""
    if caller == counterparty:
        raise InvalidParticipant(
            f"Caller cannot be their own {role}",
            account=caller,
            role=role,
        )


def require_minimum(amount: int, minimum: int, what: str) -> None:
    if amount < minimum:
        raise InvalidAmount(
            f"{what} of {amount} is below the minimum of {minimum}",
            amount=amount,
            minimum=minimum,
        )


def require_positive(amount: int, what: str) -> None:
    if amount <= 0:
        raise InvalidAmount(f"{what} must be positive", amount=amount)


def require_requester(record: Union[Session, Review], caller: Account, action: str) -> None:
    """Only the requester may cancel, or complete a review."""
    if caller != record.requester:
        raise NotAuthorized(
            f"Only the requester can {action}",
            caller=caller,
        )


def require_session_participant(session: Session, caller: Account) -> SessionParty:
    party = session.party_of(caller)
    if party is None:
        raise NotSessionParticipant(
            f"{caller} is not a participant of session {session.session_id}",
            session_id=session.session_id,
            caller=caller,
        )
    return party


def require_owner(owner: Account, caller: Account) -> None:
    if caller != owner:
        raise NotAuthorized("Only the platform owner can withdraw earnings", caller=caller)
