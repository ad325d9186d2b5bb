import logging
from typing import List

from core import constants
from schemas.nav import NAVCalculationResult

logger = logging.getLogger(__name__)


def validate_nav(result: NAVCalculationResult) -> List[str]:
    """Sanity checks on a computed NAV. Warnings only, nothing is blocked."""
    warnings = []
    prior = result.prior_pre_fee_nav

    if prior > 0:
        performance_pct = result.performance / prior * 100
        if abs(performance_pct) > constants.PERFORMANCE_HIGH_PCT:
            warnings.append(
                f"Performance of {performance_pct:.1f}% seems unrealistically high - please verify"
            )
        if performance_pct < constants.PERFORMANCE_LOW_PCT:
            warnings.append(
                f"Performance of {performance_pct:.1f}% suggests a data error or severe drawdown"
            )

    if abs(result.net_flows) > prior:
        direction = "deposit" if result.net_flows > 0 else "withdrawal"
        warnings.append(
            f"Net {direction} of ${abs(result.net_flows):,.2f} is larger than prior "
            f"pre-fee NAV of ${prior:,.2f} - please verify"
        )

    if result.pre_fee_nav < 0:
        warnings.append("Current NAV is negative - please review calculations")

    for warning in warnings:
        logger.warning("NAV validation: %s", warning)
    return warnings
