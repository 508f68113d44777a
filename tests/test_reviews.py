"""Tests for review bounties."""

import pytest

from codemarket.errors import (
    InvalidAmount,
    InvalidParticipant,
    NotAuthorized,
    PaymentFailed,
    ReviewAlreadyCompleted,
    ReviewNotFound,
)
from codemarket.models import ReviewStatus

from conftest import ESCROW, OPENING_BALANCE, OUTSIDER, REQUESTER, REVIEWER, act


class TestCreateReview:
    @pytest.mark.asyncio
    async def test_create_at_minimum(self, engine, host) -> None:
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)

        review = engine.get_review(review_id)
        assert review_id == 1
        assert review.bounty == 500_000
        assert review.platform_fee == 25_000
        assert review.status == ReviewStatus.PENDING
        assert host.balance_of(ESCROW) == 500_000

    @pytest.mark.asyncio
    async def test_below_minimum_rejected(self, engine, host) -> None:
        with pytest.raises(InvalidAmount):
            await act(host, REQUESTER, engine.create_review_request, REVIEWER, 499_999)
        assert engine.get_review(1) is None

    @pytest.mark.asyncio
    async def test_self_review_rejected(self, engine, host) -> None:
        with pytest.raises(InvalidParticipant):
            await act(host, REQUESTER, engine.create_review_request, REQUESTER, 500_000)

    @pytest.mark.asyncio
    async def test_review_and_session_ids_are_independent(self, engine, host) -> None:
        await act(host, REQUESTER, engine.create_session, REVIEWER, 1_000_000)
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)
        assert review_id == 1


class TestCompleteReview:
    @pytest.mark.asyncio
    async def test_complete_pays_reviewer(self, engine, host) -> None:
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)

        await act(host, REQUESTER, engine.complete_review, review_id)

        assert engine.is_review_completed(review_id)
        assert host.balance_of(REVIEWER) == 475_000
        assert host.balance_of(ESCROW) == 25_000
        assert engine.get_platform_earnings() == 25_000

    @pytest.mark.asyncio
    async def test_reviewer_cannot_complete(self, engine, host) -> None:
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)
        for caller in (REVIEWER, OUTSIDER):
            with pytest.raises(NotAuthorized):
                await act(host, caller, engine.complete_review, review_id)
        assert not engine.is_review_completed(review_id)

    @pytest.mark.asyncio
    async def test_complete_twice_rejected(self, engine, host) -> None:
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)
        await act(host, REQUESTER, engine.complete_review, review_id)

        with pytest.raises(ReviewAlreadyCompleted):
            await act(host, REQUESTER, engine.complete_review, review_id)

        assert host.balance_of(REVIEWER) == 475_000
        assert engine.get_platform_earnings() == 25_000

    @pytest.mark.asyncio
    async def test_missing_review(self, engine, host) -> None:
        with pytest.raises(ReviewNotFound):
            await act(host, REQUESTER, engine.complete_review, 3)

    @pytest.mark.asyncio
    async def test_failed_payout_reverts(self, engine, host) -> None:
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)
        host.block(REVIEWER)

        with pytest.raises(PaymentFailed):
            await act(host, REQUESTER, engine.complete_review, review_id)

        assert engine.get_review(review_id).status == ReviewStatus.PENDING
        assert engine.get_platform_earnings() == 0
        assert host.balance_of(ESCROW) == 500_000


class TestCancelReview:
    @pytest.mark.asyncio
    async def test_scenario_cancel_refunds_without_fee(self, engine, host) -> None:
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)
        assert engine.get_review(review_id).platform_fee == 25_000

        await act(host, REQUESTER, engine.cancel_review, review_id)

        assert engine.get_review(review_id).status == ReviewStatus.CANCELLED
        assert host.balance_of(REQUESTER) == OPENING_BALANCE
        assert host.balance_of(ESCROW) == 0
        assert engine.get_platform_earnings() == 0

    @pytest.mark.asyncio
    async def test_only_requester_may_cancel(self, engine, host) -> None:
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)
        with pytest.raises(NotAuthorized):
            await act(host, REVIEWER, engine.cancel_review, review_id)

    @pytest.mark.asyncio
    async def test_outsider_cannot_cancel(self, engine, host) -> None:
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)
        with pytest.raises(NotAuthorized):
            await act(host, OUTSIDER, engine.cancel_review, review_id)
        assert engine.get_review(review_id).status == ReviewStatus.PENDING
        assert host.balance_of(ESCROW) == 500_000

    @pytest.mark.asyncio
    async def test_cancel_twice_rejected(self, engine, host) -> None:
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)
        await act(host, REQUESTER, engine.cancel_review, review_id)
        before = engine.get_review(review_id)

        with pytest.raises(ReviewAlreadyCompleted):
            await act(host, REQUESTER, engine.cancel_review, review_id)

        assert engine.get_review(review_id) == before
        assert host.balance_of(REQUESTER) == OPENING_BALANCE
        assert host.balance_of(ESCROW) == 0

    @pytest.mark.asyncio
    async def test_cancel_missing(self, engine, host) -> None:
        with pytest.raises(ReviewNotFound):
            await act(host, REQUESTER, engine.cancel_review, 9)

    @pytest.mark.asyncio
    async def test_failed_refund_keeps_review_pending(self, engine, host) -> None:
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)
        host.block(ESCROW)

        with pytest.raises(PaymentFailed):
            await act(host, REQUESTER, engine.cancel_review, review_id)

        assert engine.get_review(review_id).status == ReviewStatus.PENDING
        assert host.balance_of(REQUESTER) == OPENING_BALANCE - 500_000
        assert host.balance_of(ESCROW) == 500_000
        assert engine.get_platform_earnings() == 0

    @pytest.mark.asyncio
    async def test_cancel_completed_rejected(self, engine, host) -> None:
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)
        await act(host, REQUESTER, engine.complete_review, review_id)
        before = engine.get_review(review_id)

        with pytest.raises(ReviewAlreadyCompleted):
            await act(host, REQUESTER, engine.cancel_review, review_id)

        assert engine.get_review(review_id) == before

    @pytest.mark.asyncio
    async def test_complete_after_cancel_rejected(self, engine, host) -> None:
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)
        await act(host, REQUESTER, engine.cancel_review, review_id)
        with pytest.raises(ReviewAlreadyCompleted):
            await act(host, REQUESTER, engine.complete_review, review_id)

    def test_missing_is_absent(self, engine) -> None:
        assert engine.get_review(5) is None
        assert engine.is_review_completed(5) is False

    @pytest.mark.asyncio
    async def test_reviews_for_account(self, engine, host) -> None:
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)
        assert [r.review_id for r in engine.reviews_for(REVIEWER)] == [review_id]
        assert engine.reviews_for(OUTSIDER) == []
