from datetime import datetime, timezone
from typing import List

from sqlmodel import Session, select

from core import constants
from models.nav_settings import NAVSettings
import schemas


def prior_period(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def month_name(month: int) -> str:
    return constants.MONTH_NAMES[month - 1]


def to_schema(row: NAVSettings) -> schemas.NAVSettings:
    return schemas.NAVSettings(
        user_id=row.user_id,
        year=row.year,
        month=row.month,
        month_name=month_name(row.month),
        fee_settings=row.fee_settings or {},
        portfolio_data=row.portfolio_data or {},
        nav_calculations=row.nav_calculations or None,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def get_settings_row(session: Session, user_id: str, year: int, month: int) -> NAVSettings | None:
    return session.exec(
        select(NAVSettings)
        .where(NAVSettings.user_id == user_id)
        .where(NAVSettings.year == year)
        .where(NAVSettings.month == month)
    ).first()


def get_settings(session: Session, user_id: str, year: int, month: int) -> schemas.NAVSettings | None:
    row = get_settings_row(session, user_id, year, month)
    return to_schema(row) if row is not None else None


def save_settings(session: Session, nav_settings: schemas.NAVSettings) -> schemas.NAVSettings:
    """Upsert by (user_id, year, month); the last writer wins."""
    row = get_settings_row(session, nav_settings.user_id, nav_settings.year, nav_settings.month)
    if row is None:
        row = NAVSettings(
            user_id=nav_settings.user_id,
            year=nav_settings.year,
            month=nav_settings.month,
        )
        session.add(row)

    row.fee_settings = nav_settings.fee_settings.model_dump(mode="json")
    row.portfolio_data = nav_settings.portfolio_data.model_dump(mode="json")
    row.nav_calculations = (
        nav_settings.nav_calculations.model_dump(mode="json")
        if nav_settings.nav_calculations is not None
        else {}
    )
    row.updated_at = datetime.now(tz=timezone.utc)

    session.commit()
    session.refresh(row)
    return to_schema(row)


def get_available_months(session: Session, user_id: str) -> List[schemas.AvailableMonth]:
    rows = session.exec(
        select(NAVSettings)
        .where(NAVSettings.user_id == user_id)
        .order_by(NAVSettings.year.desc(), NAVSettings.month.desc())
    ).all()
    return [
        schemas.AvailableMonth(
            year=row.year,
            month=row.month,
            month_name=month_name(row.month),
            created_at=row.created_at,
        )
        for row in rows
    ]


def get_nav_history(session: Session, user_id: str, limit: int = 12) -> schemas.NAVHistory:
    rows = session.exec(
        select(NAVSettings)
        .where(NAVSettings.user_id == user_id)
        .order_by(NAVSettings.year.desc(), NAVSettings.month.desc())
        .limit(limit)
    ).all()

    history = []
    for row in rows:
        nav_calculations = row.nav_calculations or {}
        history.append(
            schemas.NAVHistoryEntry(
                year=row.year,
                month=row.month,
                month_name=month_name(row.month),
                pre_fee_nav=nav_calculations.get("pre_fee_nav", 0),
                net_assets=nav_calculations.get("net_assets", 0),
                performance=nav_calculations.get("performance", 0),
                created_at=row.created_at,
            )
        )

    return schemas.NAVHistory(
        history=history, total_records=len(history), has_data=len(history) > 0
    )
