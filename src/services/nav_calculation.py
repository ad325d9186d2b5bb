from datetime import datetime, timezone
from typing import Dict

from models.nav_settings import FeePaymentStatus, HurdleRateType, PriorNavSource
from schemas.nav import FeeSettings, NAVCalculationResult, PortfolioData


def calculate_hurdle_amount(fee_settings: FeeSettings, prior_pre_fee_nav: float) -> float:
    if fee_settings.hurdle_rate_type == HurdleRateType.annual:
        return (fee_settings.hurdle_rate / 100 / 12) * prior_pre_fee_nav
    if fee_settings.hurdle_rate_type == HurdleRateType.monthly:
        return (fee_settings.hurdle_rate / 100) * prior_pre_fee_nav
    return 0.0


def calculate_performance_fee(
    performance: float, hurdle_amount: float, performance_fee_rate: float
) -> float:
    # only the excess over the hurdle is charged
    if performance > hurdle_amount:
        return (performance - hurdle_amount) * performance_fee_rate
    return 0.0


def calculate_accrued_performance_fees(
    fee_settings: FeeSettings, dividends_receivable: float
) -> float:
    if fee_settings.fee_payment_status == FeePaymentStatus.paid:
        return 0.0

    calculated = dividends_receivable * fee_settings.accrued_performance_fee_rate
    if fee_settings.fee_payment_status == FeePaymentStatus.partially_paid:
        return max(0.0, calculated - fee_settings.partial_payment_amount)
    return calculated


def calculate_nav(
    portfolio_data: PortfolioData,
    fee_settings: FeeSettings,
    net_flows: float,
    prior_pre_fee_nav: float,
    prior_pre_fee_nav_source: PriorNavSource = PriorNavSource.manual,
    wallet_net_flows: Dict[str, float] | None = None,
) -> NAVCalculationResult:
    """
    Run one month's NAV waterfall.

    Unclaimed rewards are carved out of investments and carried as dividends
    receivable. `net_flows` is signed (deposits positive, withdrawals negative)
    and is added back into performance so that cash moved in or out of the fund
    is not counted as gain or loss. Per-wallet flows are summed on top of it
    and the result carries the total as `net_flows`. The prior pre-fee NAV is
    never inferred here; callers resolve it and pass its provenance along.
    """
    wallet_net_flows = wallet_net_flows or {}
    net_flows = net_flows + sum(wallet_net_flows.values())

    investments = (
        portfolio_data.total_tokens_value
        + portfolio_data.total_positions_value
        - portfolio_data.total_rewards
    )
    dividends_receivable = portfolio_data.total_rewards
    total_assets = investments + dividends_receivable

    accrued_expenses = fee_settings.monthly_expense
    total_liabilities = accrued_expenses
    pre_fee_nav = total_assets - accrued_expenses

    performance = pre_fee_nav - prior_pre_fee_nav + net_flows
    hurdle_amount = calculate_hurdle_amount(fee_settings, prior_pre_fee_nav)
    performance_fee = calculate_performance_fee(
        performance, hurdle_amount, fee_settings.performance_fee_rate
    )
    accrued_performance_fees = calculate_accrued_performance_fees(
        fee_settings, dividends_receivable
    )
    management_fee = total_assets * (fee_settings.management_fee_rate / 12)

    net_assets = pre_fee_nav - performance_fee - accrued_performance_fees
    if fee_settings.deduct_management_fee:
        net_assets -= management_fee

    return NAVCalculationResult(
        investments=investments,
        dividends_receivable=dividends_receivable,
        total_assets=total_assets,
        accrued_expenses=accrued_expenses,
        total_liabilities=total_liabilities,
        pre_fee_nav=pre_fee_nav,
        prior_pre_fee_nav=prior_pre_fee_nav,
        prior_pre_fee_nav_source=prior_pre_fee_nav_source,
        net_flows=net_flows,
        wallet_net_flows=wallet_net_flows,
        performance=performance,
        hurdle_amount=hurdle_amount,
        performance_fee=performance_fee,
        accrued_performance_fees=accrued_performance_fees,
        management_fee=management_fee,
        net_assets=net_assets,
        high_water_mark=fee_settings.high_water_mark,
        calculation_date=datetime.now(tz=timezone.utc),
    )


def recalculate_from_stored(
    stored: NAVCalculationResult, fee_settings: FeeSettings
) -> NAVCalculationResult:
    """Rebuild the fee figures from a stored result's own inputs for audit."""
    pre_fee_nav = stored.total_assets - stored.accrued_expenses
    performance = pre_fee_nav - stored.prior_pre_fee_nav + stored.net_flows
    hurdle_amount = calculate_hurdle_amount(fee_settings, stored.prior_pre_fee_nav)
    performance_fee = calculate_performance_fee(
        performance, hurdle_amount, fee_settings.performance_fee_rate
    )
    return stored.model_copy(
        update=dict(
            pre_fee_nav=pre_fee_nav,
            performance=performance,
            hurdle_amount=hurdle_amount,
            performance_fee=performance_fee,
        )
    )
