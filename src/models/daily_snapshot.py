from datetime import datetime, timezone
from typing import List
import uuid

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


class DailySnapshotBase(SQLModel):
    user_id: str = Field(index=True)
    wallet_address: str
    date: datetime = Field(index=True, sa_type=DateTime(timezone=True))
    total_nav_usd: float = 0
    tokens_nav_usd: float = 0
    positions_nav_usd: float = 0
    data_source: str = "debank"


class DailySnapshot(DailySnapshotBase, table=True):
    __tablename__ = "daily_snapshots"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "wallet_address", "date", name="uq_daily_snapshots_user_wallet_date"
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tokens: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    positions: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc),
        sa_type=DateTime(timezone=True),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc),
        sa_type=DateTime(timezone=True),
    )
