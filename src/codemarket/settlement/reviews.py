"""Code review bounties, completed by the requester alone."""

import structlog

from ..auth import require_counterparty, require_minimum, require_requester
from ..config import Settings
from ..errors import ReviewNotFound
from ..ledger.base import SettlementHost
from ..models import Review, ReviewStatus
from ..store import Operation
from .fees import fee
from .payments import deposit_to_escrow, refund_from_escrow, release_from_escrow
from .treasury import PlatformTreasury

logger = structlog.get_logger()


class ReviewBountyManager:
    """Lifecycle of review bounties.

    The reviewer has no completion authority: the requester marks the
    review complete, which pays the bounty minus the platform fee.
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

    async def create(self, op: Operation, reviewer: str, bounty: int) -> int:
        require_counterparty(op.caller, reviewer, "reviewer")
        require_minimum(bounty, self._settings.min_review_bounty, "Review bounty")

        review = Review(
            review_id=op.uow.allocate_review_id(),
            requester=op.caller,
            reviewer=reviewer,
            bounty=bounty,
            platform_fee=fee(bounty),
            status=ReviewStatus.PENDING,
            created_at=self._host.current_time(),
        )

        if self._settings.moves_deposits:
            await deposit_to_escrow(self._host, op.caller, bounty)

        op.uow.put_review(review)

        logger.info(
            "review_created",
            review_id=review.review_id,
            requester=review.requester,
            reviewer=review.reviewer,
            bounty=bounty,
            platform_fee=review.platform_fee,
        )

        return review.review_id

    async def complete(self, op: Operation, review_id: int) -> Review:
        review = self._get(op, review_id)
        require_requester(review, op.caller, "complete a review")

        completed = review.transition_to(ReviewStatus.COMPLETED)
        op.uow.put_review(completed)

        result = await release_from_escrow(self._host, review.reviewer, review.payout)
        self._treasury.accrue(op.uow, review.platform_fee, source=f"review:{review_id}")

        logger.info(
            "review_completed",
            review_id=review_id,
            reviewer=review.reviewer,
            payout=review.payout,
            platform_fee=review.platform_fee,
            txn_hash=result.txn_hash[:20] + "..." if result.txn_hash else None,
        )

        return completed

    async def cancel(self, op: Operation, review_id: int) -> Review:
        review = self._get(op, review_id)
        require_requester(review, op.caller, "cancel a review")

        cancelled = review.transition_to(ReviewStatus.CANCELLED)
        op.uow.put_review(cancelled)

        await refund_from_escrow(self._host, review.requester, review.bounty)

        logger.info(
            "review_cancelled",
            review_id=review_id,
            requester=review.requester,
            refunded=review.bounty,
        )

        return cancelled

    def _get(self, op: Operation, review_id: int) -> Review:
        review = op.uow.get_review(review_id)
        if review is None:
            raise ReviewNotFound(f"Review {review_id} not found", review_id=review_id)
        return review
