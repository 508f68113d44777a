"""Fund movements between participants and escrow custody.

Thin wrappers over ``SettlementHost.transfer`` that turn a failed transfer
into ``PaymentFailed``. The enclosing operation's ledger transaction then
undoes any earlier transfers of the same operation.
"""

import structlog

from ..errors import PaymentFailed
from ..ledger.base import SettlementHost, TransferResult

logger = structlog.get_logger()


async def _transfer(
    host: SettlementHost,
    amount: int,
    source: str,
    destination: str,
    purpose: str,
) -> TransferResult:
    result = await host.transfer(amount, source, destination)
    if not result.success:
        logger.error(
            "payment_failed",
            purpose=purpose,
            source=source,
            destination=destination,
            amount=amount,
            error=result.error,
        )
        raise PaymentFailed(
            f"{purpose} transfer failed: {result.error}",
            purpose=purpose,
            amount=amount,
        )
    return result


async def deposit_to_escrow(host: SettlementHost, payer: str, amount: int) -> TransferResult:
    """Move a requester's commitment into escrow custody."""
    return await _transfer(host, amount, payer, host.escrow_account, "deposit")


async def release_from_escrow(host: SettlementHost, payee: str, amount: int) -> TransferResult:
    """Pay a provider or reviewer out of escrow custody."""
    return await _transfer(host, amount, host.escrow_account, payee, "release")


async def refund_from_escrow(host: SettlementHost, payer: str, amount: int) -> TransferResult:
    """Return a cancelled commitment to its requester."""
    return await _transfer(host, amount, host.escrow_account, payer, "refund")


async def withdraw_from_escrow(host: SettlementHost, owner: str, amount: int) -> TransferResult:
    """Pay retained platform fees out to the owner."""
    return await _transfer(host, amount, host.escrow_account, owner, "withdrawal")


async def pay_direct(host: SettlementHost, payer: str, payee: str, amount: int) -> TransferResult:
    """Participant-to-participant transfer (tips)."""
    return await _transfer(host, amount, payer, payee, "tip")
