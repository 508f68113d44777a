"""Tests for platform earnings and owner withdrawal."""

import pytest

from codemarket.errors import InsufficientFunds, InvalidAmount, NotAuthorized, PaymentFailed

from conftest import ESCROW, OWNER, PROVIDER, REQUESTER, REVIEWER, act


async def _settle_session(engine, host, amount: int) -> int:
    session_id = await act(host, REQUESTER, engine.create_session, PROVIDER, amount)
    await act(host, PROVIDER, engine.confirm_session_completion, session_id)
    await act(host, REQUESTER, engine.confirm_session_completion, session_id)
    return session_id


class TestEarnings:
    def test_starts_at_zero(self, engine) -> None:
        assert engine.get_platform_earnings() == 0
        assert engine.owner == OWNER

    @pytest.mark.asyncio
    async def test_sum_of_fees_minus_withdrawals(self, engine, host) -> None:
        await _settle_session(engine, host, 2_000_000)             # 100_000
        await _settle_session(engine, host, 1_234_567)             # 61_728
        review_id = await act(host, REQUESTER, engine.create_review_request, REVIEWER, 500_000)
        await act(host, REQUESTER, engine.complete_review, review_id)  # 25_000
        await act(host, REQUESTER, engine.send_tip, PROVIDER, 300_000)  # 6_000

        assert engine.get_platform_earnings() == 192_728

        await act(host, OWNER, engine.withdraw_platform_earnings, 92_728)
        assert engine.get_platform_earnings() == 100_000
        assert host.balance_of(OWNER) == 92_728
        assert host.balance_of(ESCROW) == 100_000


class TestWithdraw:
    @pytest.mark.asyncio
    async def test_owner_withdraws(self, engine, host) -> None:
        await _settle_session(engine, host, 2_000_000)

        await act(host, OWNER, engine.withdraw_platform_earnings, 100_000)

        assert engine.get_platform_earnings() == 0
        assert host.balance_of(OWNER) == 100_000
        assert host.balance_of(ESCROW) == 0

    @pytest.mark.asyncio
    async def test_non_owner_rejected(self, engine, host) -> None:
        await _settle_session(engine, host, 2_000_000)
        for caller in (REQUESTER, PROVIDER):
            with pytest.raises(NotAuthorized):
                await act(host, caller, engine.withdraw_platform_earnings, 1)
        assert engine.get_platform_earnings() == 100_000

    @pytest.mark.asyncio
    async def test_more_than_earnings_rejected(self, engine, host) -> None:
        await _settle_session(engine, host, 2_000_000)
        with pytest.raises(InsufficientFunds):
            await act(host, OWNER, engine.withdraw_platform_earnings, 100_001)
        assert engine.get_platform_earnings() == 100_000

    @pytest.mark.asyncio
    async def test_escrowed_principal_is_not_withdrawable(self, engine, host) -> None:
        await act(host, REQUESTER, engine.create_session, PROVIDER, 2_000_000)
        assert host.balance_of(ESCROW) == 2_000_000
        with pytest.raises(InsufficientFunds):
            await act(host, OWNER, engine.withdraw_platform_earnings, 1)

    @pytest.mark.asyncio
    async def test_negative_amount_rejected(self, engine, host) -> None:
        with pytest.raises(InvalidAmount):
            await act(host, OWNER, engine.withdraw_platform_earnings, -1)

    @pytest.mark.asyncio
    async def test_failed_transfer_keeps_earnings(self, engine, host) -> None:
        await _settle_session(engine, host, 2_000_000)
        host.block(OWNER)
        with pytest.raises(PaymentFailed):
            await act(host, OWNER, engine.withdraw_platform_earnings, 50_000)
        assert engine.get_platform_earnings() == 100_000
        assert host.balance_of(ESCROW) == 100_000
