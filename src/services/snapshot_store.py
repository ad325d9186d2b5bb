import logging
from datetime import datetime, timezone
from typing import List, Sequence

import pendulum
from sqlmodel import Session, select

from core.config import settings
from models.daily_snapshot import DailySnapshot
from schemas.nav import PortfolioData
from schemas.snapshot import PortfolioSnapshot

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _day_bounds(value: datetime) -> tuple[datetime, datetime]:
    day = pendulum.instance(value).in_tz(pendulum.UTC)
    return _as_utc(day.start_of("day")), _as_utc(day.end_of("day"))


def to_schema(row: DailySnapshot) -> PortfolioSnapshot:
    return PortfolioSnapshot(
        user_id=row.user_id,
        wallet_address=row.wallet_address,
        date=row.date,
        total_value=row.total_nav_usd,
        tokens=row.tokens or [],
        positions=row.positions or [],
    )


def _pick_populated(rows: Sequence[DailySnapshot]) -> DailySnapshot | None:
    # prefer a capture that actually holds something over an empty one
    for row in rows:
        if row.positions or (row.total_nav_usd and row.total_nav_usd > 0):
            return row
    return rows[0] if rows else None


def get_snapshot_row(
    session: Session, user_id: str, wallet_address: str, date: datetime
) -> DailySnapshot | None:
    wallet_address = wallet_address.lower()
    start_of_day, end_of_day = _day_bounds(date)

    row = session.exec(
        select(DailySnapshot)
        .where(DailySnapshot.user_id == user_id)
        .where(DailySnapshot.wallet_address == wallet_address)
        .where(DailySnapshot.date >= start_of_day)
        .where(DailySnapshot.date <= end_of_day)
        .order_by(DailySnapshot.date.desc())
    ).first()
    if row is not None:
        return row

    fallback_rows = session.exec(
        select(DailySnapshot)
        .where(DailySnapshot.user_id == user_id)
        .where(DailySnapshot.wallet_address == wallet_address)
        .where(DailySnapshot.date <= end_of_day)
        .order_by(DailySnapshot.date.desc())
        .limit(settings.SNAPSHOT_LOOKBACK_LIMIT)
    ).all()
    return _pick_populated(fallback_rows)


def get_snapshot(
    session: Session, user_id: str, wallet_address: str, date: datetime
) -> PortfolioSnapshot | None:
    """Snapshot for the given day, or the most recent one before it."""
    row = get_snapshot_row(session, user_id, wallet_address, date)
    return to_schema(row) if row is not None else None


def get_reference_snapshot(
    session: Session, user_id: str, wallet_address: str, before: datetime
) -> PortfolioSnapshot | None:
    """Most recent snapshot strictly before the day of `before`."""
    start_of_day, _ = _day_bounds(before)
    rows = session.exec(
        select(DailySnapshot)
        .where(DailySnapshot.user_id == user_id)
        .where(DailySnapshot.wallet_address == wallet_address.lower())
        .where(DailySnapshot.date < start_of_day)
        .order_by(DailySnapshot.date.desc())
        .limit(settings.SNAPSHOT_LOOKBACK_LIMIT)
    ).all()
    row = _pick_populated(rows)
    return to_schema(row) if row is not None else None


def get_wallet_addresses(session: Session, user_id: str, date: datetime) -> List[str]:
    _, end_of_day = _day_bounds(date)
    wallets = session.exec(
        select(DailySnapshot.wallet_address)
        .where(DailySnapshot.user_id == user_id)
        .where(DailySnapshot.date <= end_of_day)
        .distinct()
    ).all()
    return sorted(wallets)


def get_user_ids(session: Session, date: datetime) -> List[str]:
    start_of_day, end_of_day = _day_bounds(date)
    user_ids = session.exec(
        select(DailySnapshot.user_id)
        .where(DailySnapshot.date >= start_of_day)
        .where(DailySnapshot.date <= end_of_day)
        .distinct()
    ).all()
    return sorted(user_ids)


def save_snapshot(session: Session, snapshot: PortfolioSnapshot) -> DailySnapshot:
    """Insert or replace the snapshot for (user, wallet, date)."""
    snapshot_date = _as_utc(snapshot.date)
    tokens = [token.model_dump(mode="json") for token in snapshot.tokens]
    positions = [position.model_dump(mode="json") for position in snapshot.positions]

    row = session.exec(
        select(DailySnapshot)
        .where(DailySnapshot.user_id == snapshot.user_id)
        .where(DailySnapshot.wallet_address == snapshot.wallet_address)
        .where(DailySnapshot.date == snapshot_date)
    ).first()

    if row is None:
        row = DailySnapshot(
            user_id=snapshot.user_id,
            wallet_address=snapshot.wallet_address,
            date=snapshot_date,
        )
        session.add(row)

    row.total_nav_usd = round(snapshot.total_value or snapshot.tokens_value + snapshot.positions_value, 2)
    row.tokens_nav_usd = round(snapshot.tokens_value, 2)
    row.positions_nav_usd = round(snapshot.positions_value, 2)
    row.tokens = tokens
    row.positions = positions
    row.updated_at = datetime.now(tz=timezone.utc)

    session.commit()
    session.refresh(row)
    return row


def portfolio_data_from_snapshots(snapshots: Sequence[PortfolioSnapshot]) -> PortfolioData:
    """Aggregate wallet snapshots into the figures the NAV waterfall starts from."""
    total_tokens_value = 0.0
    total_positions_value = 0.0
    total_rewards = 0.0

    for snapshot in snapshots:
        total_tokens_value += snapshot.tokens_value
        for position in snapshot.positions:
            total_positions_value += position.total_value
            total_rewards += position.rewards_value

    return PortfolioData(
        total_tokens_value=total_tokens_value,
        total_positions_value=total_positions_value,
        total_rewards=total_rewards,
    )
