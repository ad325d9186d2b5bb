import logging
import math
from typing import List, NamedTuple

import numpy as np
import pandas as pd
from empyrical import annual_volatility
from sqlmodel import Session

from models.nav_settings import PriorNavSource
import schemas
from services import nav_store
from services.nav_calculation import calculate_nav
from services.nav_validation import validate_nav

logger = logging.getLogger(__name__)


class PriorNavResolution(NamedTuple):
    value: float | None
    source: PriorNavSource | None
    warnings: List[str]


def resolve_prior_pre_fee_nav(
    session: Session,
    user_id: str,
    year: int,
    month: int,
    prior_pre_fee_nav: float | None = None,
    portfolio_estimate: float | None = None,
) -> PriorNavResolution:
    """
    Work out the opening NAV for a month and where it came from.

    The previous month's stored pre-fee NAV wins unless the caller supplies a
    value. Without a previous month the caller has to supply one (or opt into
    the current portfolio estimate); otherwise nothing is returned.
    """
    prior_year, prior_month = nav_store.prior_period(year, month)
    prior_label = f"{nav_store.month_name(prior_month)} {prior_year}"
    prior = nav_store.get_settings(session, user_id, prior_year, prior_month)
    stored = (
        prior.nav_calculations.pre_fee_nav
        if prior is not None and prior.nav_calculations is not None
        else None
    )

    if stored is not None:
        if prior_pre_fee_nav is None or math.isclose(prior_pre_fee_nav, stored):
            return PriorNavResolution(stored, PriorNavSource.auto_loaded, [])
        return PriorNavResolution(
            prior_pre_fee_nav,
            PriorNavSource.manual,
            [
                f"Prior pre-fee NAV of ${prior_pre_fee_nav:,.2f} overrides the "
                f"${stored:,.2f} stored for {prior_label}"
            ],
        )

    if prior_pre_fee_nav is not None:
        return PriorNavResolution(
            prior_pre_fee_nav,
            PriorNavSource.fallback,
            [f"No NAV stored for {prior_label} - using the supplied opening NAV"],
        )

    if portfolio_estimate is not None:
        return PriorNavResolution(
            portfolio_estimate,
            PriorNavSource.portfolio_estimate,
            [f"No NAV stored for {prior_label} - opening NAV estimated from current portfolio value"],
        )

    return PriorNavResolution(None, None, [])


def get_prior_nav(session: Session, user_id: str, year: int, month: int) -> schemas.PriorNav:
    prior_year, prior_month = nav_store.prior_period(year, month)
    prior_month_name = nav_store.month_name(prior_month)
    prior = nav_store.get_settings(session, user_id, prior_year, prior_month)

    if prior is None or prior.nav_calculations is None:
        return schemas.PriorNav(
            found=False,
            prior_year=prior_year,
            prior_month=prior_month,
            prior_month_name=prior_month_name,
            message=(
                "No prior month data found. Supply an opening NAV or use the current "
                "portfolio value as baseline for the first month."
            ),
        )

    return schemas.PriorNav(
        found=True,
        prior_pre_fee_nav=prior.nav_calculations.pre_fee_nav,
        source=PriorNavSource.auto_loaded,
        prior_year=prior_year,
        prior_month=prior_month,
        prior_month_name=prior_month_name,
        message=f"Loaded from {prior_month_name} {prior_year} NAV report",
        prior_settings={
            "total_assets": prior.nav_calculations.total_assets,
            "net_assets": prior.nav_calculations.net_assets,
            "performance": prior.nav_calculations.performance,
            "created_at": prior.created_at,
        },
    )


def calculate_monthly_nav(
    session: Session,
    user_id: str,
    year: int,
    month: int,
    request: schemas.NAVSettingsRequest,
) -> schemas.NAVSettings | None:
    """Compute, validate and store one month's NAV. None when no opening NAV is known."""
    portfolio_estimate = None
    if request.use_portfolio_estimate:
        portfolio_estimate = (
            request.portfolio_data.total_tokens_value
            + request.portfolio_data.total_positions_value
        )

    resolution = resolve_prior_pre_fee_nav(
        session,
        user_id,
        year,
        month,
        prior_pre_fee_nav=request.prior_pre_fee_nav,
        portfolio_estimate=portfolio_estimate,
    )
    if resolution.value is None:
        logger.warning(
            "No prior pre-fee NAV for user %s %s-%s, NAV not calculated", user_id, year, month
        )
        return None

    result = calculate_nav(
        request.portfolio_data,
        request.fee_settings,
        request.net_flows,
        resolution.value,
        resolution.source,
        wallet_net_flows=request.wallet_net_flows,
    )
    result.validation_warnings = resolution.warnings + validate_nav(result)

    logger.info(
        "NAV for user %s %s-%s: pre-fee %.2f, net assets %.2f (prior %.2f from %s)",
        user_id,
        year,
        month,
        result.pre_fee_nav,
        result.net_assets,
        result.prior_pre_fee_nav,
        result.prior_pre_fee_nav_source.value,
    )

    nav_settings = schemas.NAVSettings(
        user_id=user_id,
        year=year,
        month=month,
        fee_settings=request.fee_settings,
        portfolio_data=request.portfolio_data,
        nav_calculations=result,
    )
    return nav_store.save_settings(session, nav_settings)


def calculate_nav_volatility(session: Session, user_id: str, limit: int = 24) -> schemas.NAVVolatility:
    """Annualized volatility of month-over-month pre-fee NAV returns, in percent."""
    history = nav_store.get_nav_history(session, user_id, limit=limit).history
    navs = pd.Series(
        [entry.pre_fee_nav for entry in history],
        index=[entry.year * 12 + entry.month - 1 for entry in history],
        dtype=float,
    ).sort_index()
    # missing months become NaN so a gap never counts as a single month
    if not navs.empty:
        navs = navs.reindex(range(navs.index.min(), navs.index.max() + 1))

    previous = navs.shift(1)
    returns = (navs / previous - 1)[previous > 0].dropna()

    if len(returns) < 2:
        return schemas.NAVVolatility(
            monthly_returns=(returns * 100).tolist(), months_of_data=len(history)
        )

    standard_deviation = float(returns.std(ddof=1))
    volatility = float(annual_volatility(returns, period="monthly"))
    if np.isnan(volatility) or np.isinf(volatility):
        volatility = 0

    return schemas.NAVVolatility(
        annualized_volatility=volatility * 100,
        standard_deviation=standard_deviation * 100,
        monthly_returns=(returns * 100).tolist(),
        months_of_data=len(history),
    )
