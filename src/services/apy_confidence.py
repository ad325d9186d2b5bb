import math

from core import constants
from schemas.apy import ConfidenceAssessment


def _demote(confidence: str, ceiling: str) -> str:
    levels = constants.CONFIDENCE_LEVELS
    return levels[min(levels.index(confidence), levels.index(ceiling))]


def assess_confidence(
    apy: float,
    period_return_pct: float,
    is_new_position: bool,
    days_elapsed: float,
    observed_window: bool = True,
) -> ConfidenceAssessment:
    """
    Score how far a computed APY can be trusted.

    Rules only ever lower the level, and each one that fires records a warning
    saying why, so a low-confidence figure can be explained next to the number.

    `days_elapsed` only earns the long-window allowance when it was actually
    observed between two snapshots, not assumed.
    """
    confidence = constants.CONFIDENCE_HIGH
    warnings = []

    if not math.isfinite(apy):
        return ConfidenceAssessment(
            confidence=constants.CONFIDENCE_VERY_LOW,
            warnings=["APY could not be annualized to a finite value - please verify data accuracy"],
        )

    magnitude = abs(apy)

    if is_new_position:
        confidence = constants.CONFIDENCE_MEDIUM
        warnings.append("Position age assumed to be 1 day - actual open date unknown")

        if magnitude > constants.NEW_POSITION_VERY_LOW_APY:
            confidence = _demote(confidence, constants.CONFIDENCE_VERY_LOW)
            warnings.append(
                f"Extreme APY of {apy:.2f}% on a new position - likely reflects rewards accrued before the first snapshot"
            )
        elif magnitude > constants.NEW_POSITION_LOW_APY:
            confidence = _demote(confidence, constants.CONFIDENCE_LOW)
            warnings.append(
                f"High APY of {apy:.2f}% on a new position - based on a single day of rewards"
            )
    else:
        if magnitude > constants.EXISTING_VERY_LOW_APY:
            confidence = _demote(confidence, constants.CONFIDENCE_VERY_LOW)
            warnings.append(f"Extreme APY of {apy:.2f}% detected - please verify data accuracy")
        elif magnitude > constants.EXISTING_LOW_APY:
            confidence = _demote(confidence, constants.CONFIDENCE_LOW)
            warnings.append(f"Very high APY of {apy:.2f}% detected - may not be sustainable")
        elif (
            magnitude > constants.EXISTING_MEDIUM_APY
            and (not observed_window or days_elapsed < constants.LONG_WINDOW_DAYS)
        ):
            confidence = _demote(confidence, constants.CONFIDENCE_MEDIUM)
            warnings.append(
                f"APY of {apy:.2f}% annualized from a {days_elapsed:.1f} day window"
            )

        if (
            days_elapsed < constants.SHORT_WINDOW_DAYS
            and magnitude > constants.EXISTING_LOW_APY
        ):
            warnings.append(
                f"Short period ({days_elapsed:.1f} days) with high APY may not be representative"
            )

    if period_return_pct < constants.LARGE_PERIOD_LOSS_PCT:
        confidence = _demote(confidence, constants.CONFIDENCE_LOW)
        warnings.append(
            f"Large period loss of {period_return_pct:.2f}% - position may be compromised"
        )

    return ConfidenceAssessment(confidence=confidence, warnings=warnings)
