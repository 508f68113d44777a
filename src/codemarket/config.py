"""Configuration settings for CodeMarket settlement.

## Amounts

All amounts are integers in the smallest unit of the settlement asset
(e.g. micro-USDC: 1_000_000 = $1.00). Fees are always rounded down.

- Coding session minimum: 1_000_000
- Review bounty minimum: 500_000
- Platform fee on sessions and reviews: 5%
- Platform fee on tips: 2%

The fee percentages are fixed in ``codemarket.settlement.fees`` and are not
configurable.

## Custody

``custody_mode`` decides whether inbound money physically moves:

- ``escrowed``: creating a session or review deposits the committed amount
  from the requester into the escrow account, and tips are transferred
  through the host ledger.
- ``fee_accounting``: deposits and tip transfers are skipped and only the
  engine's records and treasury accumulator change. Releases, refunds and
  withdrawals still draw on the escrow account.
"""

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class CustodyMode(str, Enum):
    ESCROWED = "escrowed"
    FEE_ACCOUNTING = "fee_accounting"


class Settings(BaseSettings):
    """CodeMarket settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="CODEMARKET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Minimum commitments
    min_session_payment: int = 1_000_000
    min_review_bounty: int = 500_000

    # Custody
    escrow_account: str = "codemarket-escrow"
    custody_mode: CustodyMode = CustodyMode.ESCROWED

    # Logging
    log_level: LogLevel = "INFO"
    log_json: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @property
    def moves_deposits(self) -> bool:
        return self.custody_mode == CustodyMode.ESCROWED


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
