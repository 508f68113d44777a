"""Shared fixtures: isolated settings, a funded in-memory host and an engine."""

import pytest

from codemarket.config import CustodyMode, Settings
from codemarket.engine import SettlementEngine
from codemarket.ledger.memory import InMemoryHost

OWNER = "platform"
REQUESTER = "alice"
PROVIDER = "bob"
REVIEWER = "carol"
OUTSIDER = "mallory"

ESCROW = "test-escrow"
OPENING_BALANCE = 10_000_000


async def act(host: InMemoryHost, account: str, operation, *args):
    """Run one engine operation on behalf of ``account``."""
    with host.acting_as(account):
        return await operation(*args)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        escrow_account=ESCROW,
        custody_mode=CustodyMode.ESCROWED,
    )


@pytest.fixture
def host(settings: Settings) -> InMemoryHost:
    return InMemoryHost(
        balances={REQUESTER: OPENING_BALANCE},
        escrow_account=settings.escrow_account,
    )


@pytest.fixture
def engine(host: InMemoryHost, settings: Settings) -> SettlementEngine:
    with host.acting_as(OWNER):
        return SettlementEngine(host, settings)
