import logging
import math
from datetime import datetime

import click
import pendulum
from sqlmodel import Session

from core.db import engine
from log import setup_job_logging
from models.daily_snapshot import DailySnapshot
from services import snapshot_store
from services.apy_calculation import calculate_snapshot_position_apys

# # Initialize logger
logger = logging.getLogger("update_position_apy_daily")
logger.setLevel(logging.INFO)


def update_snapshot_apys(session: Session, row: DailySnapshot, updated_at: datetime) -> int:
    current = snapshot_store.to_schema(row)
    reference = snapshot_store.get_reference_snapshot(
        session, row.user_id, row.wallet_address, current.date
    )
    results = calculate_snapshot_position_apys(current, reference)

    positions = []
    updated = 0
    # results line up with the stored positions one to one
    for raw_position, result in zip(row.positions or [], results):
        position = dict(raw_position)
        if result is not None:
            position["calculated_apy"] = result.apy if math.isfinite(result.apy) else None
            position["apy_confidence"] = result.confidence
            position["last_apy_update"] = updated_at.isoformat()
            updated += 1
        positions.append(position)

    # JSON columns only register a change on reassignment
    row.positions = positions
    session.add(row)
    return updated


def update_user_apys(session: Session, user_id: str, target_date: datetime, updated_at: datetime):
    for wallet_address in snapshot_store.get_wallet_addresses(session, user_id, target_date):
        row = snapshot_store.get_snapshot_row(session, user_id, wallet_address, target_date)
        if row is None or not row.positions:
            continue

        updated = update_snapshot_apys(session, row, updated_at)
        logger.info(
            "User %s, wallet %s: updated APY on %s of %s positions",
            user_id,
            wallet_address,
            updated,
            len(row.positions),
        )

    session.commit()


@click.command()
@click.option("--date", "target_date", default=None, help="Snapshot day, YYYY-MM-DD (default today UTC)")
def main(target_date: str | None):
    if target_date:
        day = pendulum.parse(target_date, tz=pendulum.UTC)
    else:
        day = pendulum.now(tz=pendulum.UTC)
    updated_at = pendulum.now(tz=pendulum.UTC)

    with Session(engine) as session:
        user_ids = snapshot_store.get_user_ids(session, day)
        logger.info("Updating position APYs for %s users on %s", len(user_ids), day.to_date_string())

        for user_id in user_ids:
            try:
                update_user_apys(session, user_id, day, updated_at)
            except Exception as e:
                session.rollback()
                logger.error(
                    "An error occurred while updating APYs for user %s: %s",
                    user_id,
                    e,
                    exc_info=True,
                )

    logger.info("Position APY update job completed.")


if __name__ == "__main__":
    setup_job_logging(app="update_position_apy_daily", level=logging.INFO, logger=logger)

    main()
