from datetime import datetime, timezone
import enum
import uuid

from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel


class HurdleRateType(str, enum.Enum):
    annual = "annual"
    monthly = "monthly"


class FeePaymentStatus(str, enum.Enum):
    paid = "paid"
    not_paid = "not_paid"
    partially_paid = "partially_paid"


# where a month's prior pre-fee NAV came from
class PriorNavSource(str, enum.Enum):
    manual = "manual"
    auto_loaded = "auto_loaded"
    fallback = "fallback"
    portfolio_estimate = "portfolio_estimate"


class NAVSettings(SQLModel, table=True):
    __tablename__ = "nav_settings"
    __table_args__ = (
        UniqueConstraint("user_id", "year", "month", name="uq_nav_settings_user_year_month"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: str = Field(index=True)
    year: int
    month: int
    fee_settings: dict = Field(default_factory=dict, sa_column=Column(JSON))
    nav_calculations: dict = Field(default_factory=dict, sa_column=Column(JSON))
    portfolio_data: dict = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc),
        sa_type=DateTime(timezone=True),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc),
        sa_type=DateTime(timezone=True),
    )
