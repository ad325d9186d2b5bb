import logging
import math
from datetime import datetime
from typing import Dict, List

from sqlmodel import Session

from core import constants
from schemas.apy import APYDisplay, APYResult
from schemas.snapshot import PortfolioSnapshot, Position
from services import snapshot_store
from services.apy_confidence import assess_confidence
from services.position_identity import (
    find_duplicate_identities,
    position_identity,
    resolve_identity,
)

logger = logging.getLogger(__name__)


def annualize_return(period_return: float, days: float) -> float:
    """Compound a period return to a yearly percentage."""
    try:
        return ((1 + period_return) ** (constants.DAYS_PER_YEAR / days) - 1) * 100
    except OverflowError:
        return math.inf


def find_reference_position(
    position: Position, reference: PortfolioSnapshot | None
) -> Position | None:
    if reference is None:
        return None

    identity = resolve_identity(position)
    for candidate in reference.positions:
        if resolve_identity(candidate).key == identity.key:
            return candidate

    # older snapshots may predate external ids; fall back to the heuristic key
    if identity.source == constants.IDENTITY_EXTERNAL:
        heuristic_key = position_identity(position)
        for candidate in reference.positions:
            if not candidate.position_id and position_identity(candidate) == heuristic_key:
                return candidate
    return None


def _new_position_result(
    identity: str, current_value: float, rewards: float, notes: str
) -> dict:
    if rewards <= 0:
        return dict(
            apy=0.0,
            period_return_pct=0.0,
            days_elapsed=constants.NEW_POSITION_ASSUMED_DAYS,
            method=constants.NEW_POSITION,
            is_new_position=True,
            confidence=constants.CONFIDENCE_LOW,
            warnings=["No unclaimed rewards on a new position - yield cannot be estimated yet"],
            notes=notes,
        )

    daily_return = rewards / current_value
    apy = daily_return * constants.DAYS_PER_YEAR * 100
    assessment = assess_confidence(
        apy, daily_return * 100, True, constants.NEW_POSITION_ASSUMED_DAYS
    )
    logger.info(
        "New position %s: APY %.2f%% (rewards $%.2f, value $%.2f)",
        identity,
        apy,
        rewards,
        current_value,
    )
    return dict(
        apy=apy,
        period_return_pct=daily_return * 100,
        days_elapsed=constants.NEW_POSITION_ASSUMED_DAYS,
        method=constants.NEW_POSITION,
        is_new_position=True,
        confidence=assessment.confidence,
        warnings=assessment.warnings,
        notes=notes,
    )


def _rewards_based_result(identity: str, current_value: float, rewards: float) -> dict:
    assumed_days = min(
        constants.REWARDS_MAX_ASSUMED_DAYS,
        max(
            constants.REWARDS_MIN_ASSUMED_DAYS,
            rewards / (current_value * constants.REWARDS_DAILY_RATIO_UNIT),
        ),
    )
    daily_return = rewards / (current_value * assumed_days)
    apy = min(constants.REWARDS_APY_CAP, daily_return * constants.DAYS_PER_YEAR * 100)
    assessment = assess_confidence(
        apy, daily_return * 100, False, assumed_days, observed_window=False
    )

    warnings = assessment.warnings
    if apy == constants.REWARDS_APY_CAP:
        warnings = warnings + [
            f"Rewards-based APY capped at {constants.REWARDS_APY_CAP}%"
        ]

    logger.info(
        "Rewards-based APY for %s: %.2f%% (assumed %.1f days)", identity, apy, assumed_days
    )
    return dict(
        apy=apy,
        period_return_pct=daily_return * 100,
        days_elapsed=assumed_days,
        method=constants.REWARDS_BASED,
        is_new_position=False,
        confidence=assessment.confidence,
        warnings=warnings,
        notes=f"Based on unclaimed rewards (assumed {assumed_days:.1f} days accumulation)",
    )


def _value_change_result(
    identity: str,
    current_value: float,
    reference_value: float,
    current_date: datetime,
    reference_date: datetime,
) -> dict:
    elapsed = (current_date - reference_date).total_seconds() / 86400
    actual_days = max(constants.MIN_ELAPSED_DAYS, elapsed)
    period_return = (current_value - reference_value) / reference_value
    apy = annualize_return(period_return, actual_days)
    assessment = assess_confidence(apy, period_return * 100, False, actual_days)

    logger.info(
        "Value-change APY for %s: %.2f%% over %.2f days ($%.2f -> $%.2f)",
        identity,
        apy,
        actual_days,
        reference_value,
        current_value,
    )
    return dict(
        apy=apy,
        period_return_pct=period_return * 100,
        days_elapsed=actual_days,
        method=constants.VALUE_CHANGE,
        is_new_position=False,
        confidence=assessment.confidence,
        warnings=assessment.warnings,
        notes=f"Based on {actual_days:.1f} day value change",
    )


def calculate_position_apy(
    position: Position,
    current_date: datetime,
    reference: PortfolioSnapshot | None,
) -> APYResult | None:
    """
    Estimate one position's APY against the reference snapshot.

    Returns None when the position has no usable current value.
    """
    identity = resolve_identity(position)
    current_value = position.total_value

    if current_value is None or not math.isfinite(current_value) or current_value <= 0:
        logger.warning(
            "Position %s has no usable value (%s), skipping APY calculation",
            identity.key,
            current_value,
        )
        return None

    rewards = position.rewards_value
    reference_position = find_reference_position(position, reference)
    reference_value = reference_position.total_value if reference_position else None

    if reference_position is None:
        fields = _new_position_result(
            identity.key,
            current_value,
            rewards,
            "Assumed 1 day old - actual age unknown",
        )
    elif not reference_value or reference_value <= 0:
        fields = _new_position_result(
            identity.key,
            current_value,
            rewards,
            "Reference value was zero - treated as a new position",
        )
    elif (
        rewards > 0
        and abs(current_value - reference_value)
        < current_value * constants.FLAT_VALUE_THRESHOLD
    ):
        fields = _rewards_based_result(identity.key, current_value, rewards)
    else:
        fields = _value_change_result(
            identity.key, current_value, reference_value, current_date, reference.date
        )

    return APYResult(
        position_identity=identity.key,
        identity_source=identity.source,
        current_value=current_value,
        reference_value=reference_value,
        rewards=rewards,
        protocol_name=position.protocol_name,
        chain=position.chain,
        **fields,
    )


def calculate_snapshot_position_apys(
    current: PortfolioSnapshot, reference: PortfolioSnapshot | None
) -> List[APYResult | None]:
    """
    One entry per position of `current`, in order. None where the position
    produced no APY: no usable value, or a later holder of an identity
    already taken by an earlier position.
    """
    duplicates = set(find_duplicate_identities(current.positions))
    seen = set()
    results: List[APYResult | None] = []

    for position in current.positions:
        result = calculate_position_apy(position, current.date, reference)
        if result is None:
            results.append(None)
            continue

        result.wallet_address = current.wallet_address
        key = result.position_identity
        if key in duplicates:
            if key in seen:
                logger.warning(
                    "Skipping second position sharing identity %s in wallet %s",
                    key,
                    current.wallet_address,
                )
                results.append(None)
                continue
            result.confidence = constants.CONFIDENCE_LOW
            result.warnings = result.warnings + [
                "Several positions share this identity - figures may mix positions"
            ]
        seen.add(key)
        results.append(result)

    return results


def calculate_snapshot_apys(
    current: PortfolioSnapshot, reference: PortfolioSnapshot | None
) -> Dict[str, APYResult]:
    """APY per position identity for one wallet's pair of snapshots."""
    return {
        result.position_identity: result
        for result in calculate_snapshot_position_apys(current, reference)
        if result is not None
    }


def calculate_user_position_apys(
    session: Session,
    user_id: str,
    target_date: datetime,
    wallet_address: str | None = None,
) -> Dict[str, APYResult]:
    """APY per position for every wallet of a user as of `target_date`."""
    if wallet_address:
        wallet_addresses = [wallet_address.lower()]
    else:
        wallet_addresses = snapshot_store.get_wallet_addresses(session, user_id, target_date)

    results: Dict[str, APYResult] = {}
    for address in wallet_addresses:
        current = snapshot_store.get_snapshot(session, user_id, address, target_date)
        if current is None or not current.positions:
            logger.info("No snapshot with positions for %s / %s", user_id, address)
            continue

        reference = snapshot_store.get_reference_snapshot(
            session, user_id, address, current.date
        )
        if reference is None:
            logger.info("No reference snapshot before %s for %s", current.date, address)

        for key, result in calculate_snapshot_apys(current, reference).items():
            if key in results:
                other = results[key]
                warning = f"Identity also held in wallet {other.wallet_address}"
                result.warnings = result.warnings + [warning]
                other.warnings = other.warnings + [f"Identity also held in wallet {address}"]
                key = f"{key}@{address}"
            results[key] = result

    return results


def format_apy_for_display(result: APYResult | None) -> APYDisplay | None:
    if result is None:
        return None

    if math.isfinite(result.apy):
        formatted_apy = f"{'+' if result.apy >= 0 else ''}{result.apy:.2f}%"
    else:
        formatted_apy = "n/a"

    return APYDisplay(
        **result.model_dump(),
        formatted_apy=formatted_apy,
        formatted_value=f"${result.current_value:,.2f}",
        is_reliable=result.confidence
        in (constants.CONFIDENCE_HIGH, constants.CONFIDENCE_MEDIUM),
    )
