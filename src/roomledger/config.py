"""Application settings loaded from environment variables / .env file."""

from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from roomledger.ledger.models import DedupScope


def _strip_str(v: str | object) -> str | object:
    """Strip whitespace from string env values (common .env copy-paste issue)."""
    return v.strip() if isinstance(v, str) else v


class Settings(BaseSettings):
    """RoomLedger configuration.

    Values are loaded from environment variables and/or an ``.env`` file
    located at the project root.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Settlement engine ─────────────────────────────────────────────
    settlement_epsilon: Decimal = Field(
        default=Decimal("0.01"),
        description=(
            "Pairwise debts at or below this amount are treated as settled "
            "(two-decimal currency resolution)."
        ),
    )
    dedup_scope: DedupScope = Field(
        default=DedupScope.ALL,
        description=(
            "Which shared purchases feed the duplicate-expense key set: "
            "'all' or 'split_only'."
        ),
    )

    @field_validator("dedup_scope", mode="before")
    @classmethod
    def normalize_dedup_scope(cls, v: str | object) -> str | object:
        v = _strip_str(v)
        return v.lower() if isinstance(v, str) else v

    # ── Display ───────────────────────────────────────────────────────
    currency_symbol: str = Field(
        default="₹",
        description="Symbol prefixed to amounts in formatted output.",
    )

    # ── Store ─────────────────────────────────────────────────────────
    data_file: str = Field(
        default="data.json",
        description="Path of the store's JSON document read by the CLI.",
    )

    @field_validator("data_file", mode="before")
    @classmethod
    def strip_data_file(cls, v: str | object) -> str | object:
        return _strip_str(v)

    # ── General ───────────────────────────────────────────────────────
    debug: bool = Field(
        default=False,
        description="Enable debug logging.",
    )


settings = Settings()
