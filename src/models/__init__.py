from sqlmodel import Field, SQLModel
from .daily_snapshot import DailySnapshot, DailySnapshotBase
from .nav_settings import FeePaymentStatus, HurdleRateType, NAVSettings, PriorNavSource
