"""Tips: direct transfers with a small platform skim. Nothing is recorded."""

import structlog

from ..auth import require_counterparty, require_positive
from ..config import Settings
from ..ledger.base import SettlementHost
from ..store import Operation
from .fees import tip_breakdown
from .payments import deposit_to_escrow, pay_direct
from .treasury import PlatformTreasury

logger = structlog.get_logger()


class TipProcessor:
    def __init__(
        self,
        host: SettlementHost,
        settings: Settings,
        treasury: PlatformTreasury,
    ):
        self._host = host
        self._settings = settings
        self._treasury = treasury

    async def send(self, op: Operation, recipient: str, amount: int) -> None:
        """Tip ``recipient`` from the caller.

        The recipient gets ``amount`` minus the tip fee; the fee goes to
        escrow custody and is credited to the treasury.
        """
        require_counterparty(op.caller, recipient, "tip recipient")
        require_positive(amount, "Tip")

        split = tip_breakdown(amount)

        if self._settings.moves_deposits:
            await pay_direct(self._host, op.caller, recipient, split.payout)
            await deposit_to_escrow(self._host, op.caller, split.fee)

        self._treasury.accrue(op.uow, split.fee, source="tip")

        logger.info(
            "tip_sent",
            sender=op.caller,
            recipient=recipient,
            amount=amount,
            tip_fee=split.fee,
        )
