from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class Token(BaseModel):
    symbol: str
    name: str | None = None
    chain: str | None = None
    amount: float = 0
    price: float = 0
    usd_value: float | None = None

    @model_validator(mode="after")
    def fill_usd_value(self):
        if self.usd_value is None:
            self.usd_value = self.amount * self.price
        return self


class Position(BaseModel):
    """A single protocol holding in the canonical shape produced at ingestion."""

    protocol_name: str
    chain: str
    position_type: str = "other"
    position_id: str | None = None
    supply_tokens: List[Token] = []
    reward_tokens: List[Token] = []
    total_value: float | None = None
    health_factor: float | None = None

    # written back by the daily APY job
    calculated_apy: float | None = None
    apy_confidence: str | None = None
    last_apy_update: datetime | None = None

    @model_validator(mode="after")
    def fill_total_value(self):
        if self.total_value is None:
            self.total_value = self.supply_value + self.rewards_value
        return self

    @property
    def supply_value(self) -> float:
        return sum(token.usd_value for token in self.supply_tokens)

    @property
    def rewards_value(self) -> float:
        return sum(token.usd_value for token in self.reward_tokens)


class PortfolioSnapshot(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    wallet_address: str
    date: datetime
    total_value: float = 0
    tokens: List[Token] = []
    positions: List[Position] = []

    @field_validator("wallet_address")
    def normalize_wallet_address(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("date")
    def assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @property
    def tokens_value(self) -> float:
        return sum(token.usd_value for token in self.tokens)

    @property
    def positions_value(self) -> float:
        return sum(position.total_value for position in self.positions)
