"""Settlement error taxonomy.

Every failure of a mutating operation is raised as a ``SettlementError``
subclass. The engine reverts all changes of the failing operation before
the error reaches the caller, so callers may simply retry or give up.

Each error carries a stable ``code`` (the tag callers switch on) and the
``category`` it belongs to.
"""

from typing import Optional


class SettlementError(Exception):
    """Base class for all settlement failures."""

    code = "SettlementError"
    category = "settlement"

    def __init__(self, message: Optional[str] = None, **context):
        self.context = context
        super().__init__(message or self.code)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "category": self.category,
            "message": str(self),
            **self.context,
        }


# ============================================================
# Authorization
# ============================================================

class AuthorizationError(SettlementError):
    category = "authorization"


class NotAuthorized(AuthorizationError):
    code = "NotAuthorized"


class NotSessionParticipant(AuthorizationError):
    code = "NotSessionParticipant"


# ============================================================
# Validation
# ============================================================

class ValidationError(SettlementError):
    category = "validation"


class InvalidAmount(ValidationError):
    code = "InvalidAmount"


class InvalidParticipant(ValidationError):
    code = "InvalidParticipant"


class InvalidFeePercentage(ValidationError):
    """Reserved. Fee percentages are constants, so nothing raises this."""

    code = "InvalidFeePercentage"


# ============================================================
# Lookup
# ============================================================

class RecordNotFoundError(SettlementError):
    category = "lookup"


class SessionNotFound(RecordNotFoundError):
    code = "SessionNotFound"


class ReviewNotFound(RecordNotFoundError):
    code = "ReviewNotFound"


# ============================================================
# State conflicts
# ============================================================

class StateConflictError(SettlementError):
    category = "state_conflict"


class SessionAlreadyCompleted(StateConflictError):
    code = "SessionAlreadyCompleted"


class ReviewAlreadyCompleted(StateConflictError):
    code = "ReviewAlreadyCompleted"


class EscrowAlreadyReleased(StateConflictError):
    """Reserved. Release is guarded by the status transition instead."""

    code = "EscrowAlreadyReleased"


# ============================================================
# Funds
# ============================================================

class FundsError(SettlementError):
    category = "funds"


class InsufficientFunds(FundsError):
    code = "InsufficientFunds"


class PaymentFailed(FundsError):
    code = "PaymentFailed"
