import pytest

from models.nav_settings import FeePaymentStatus, HurdleRateType, PriorNavSource
from schemas.nav import FeeSettings, PortfolioData
from services.nav_calculation import (
    calculate_accrued_performance_fees,
    calculate_hurdle_amount,
    calculate_nav,
    calculate_performance_fee,
    recalculate_from_stored,
)


@pytest.fixture
def fee_settings():
    return FeeSettings(
        monthly_expense=50,
        performance_fee_rate=0.05,
        accrued_performance_fee_rate=0.05,
        management_fee_rate=0.005,
    )


def test_default_fee_settings():
    fee_settings = FeeSettings()
    assert fee_settings.annual_expense == 600
    assert fee_settings.monthly_expense == 50
    assert fee_settings.performance_fee_rate == 0.05
    assert fee_settings.accrued_performance_fee_rate == 0.05
    assert fee_settings.management_fee_rate == 0.005
    assert fee_settings.fee_payment_status == FeePaymentStatus.not_paid
    assert not fee_settings.deduct_management_fee


def test_waterfall(fee_settings: FeeSettings):
    portfolio = PortfolioData(
        total_tokens_value=10000, total_positions_value=2000, total_rewards=500
    )

    result = calculate_nav(portfolio, fee_settings, net_flows=0, prior_pre_fee_nav=11000)

    assert result.investments == 11500
    assert result.dividends_receivable == 500
    assert result.total_assets == 12000
    assert result.accrued_expenses == 50
    assert result.total_liabilities == 50
    assert result.pre_fee_nav == 11950
    assert result.performance == 950
    assert result.hurdle_amount == 0
    assert result.performance_fee == pytest.approx(47.5)
    assert result.accrued_performance_fees == pytest.approx(25)
    assert result.management_fee == pytest.approx(5)
    assert result.net_assets == pytest.approx(11877.5)
    assert result.prior_pre_fee_nav_source == PriorNavSource.manual


def test_performance_adds_back_net_flows(fee_settings: FeeSettings):
    # $49,100.03 a month ago, $49,913.40 now, $500.02 withdrawn in between
    portfolio = PortfolioData(total_tokens_value=49963.40)

    result = calculate_nav(
        portfolio, fee_settings, net_flows=-500.02, prior_pre_fee_nav=49100.03
    )

    assert result.pre_fee_nav == pytest.approx(49913.40)
    assert result.performance == pytest.approx(313.35)


def test_paid_fees_have_no_accrual(fee_settings: FeeSettings):
    fee_settings.fee_payment_status = FeePaymentStatus.paid
    portfolio = PortfolioData(total_tokens_value=1000, total_rewards=10000)

    result = calculate_nav(portfolio, fee_settings, net_flows=0, prior_pre_fee_nav=1000)

    assert result.dividends_receivable == 10000
    assert result.accrued_performance_fees == 0


def test_accrued_performance_fees(fee_settings: FeeSettings):
    assert calculate_accrued_performance_fees(fee_settings, 1000) == pytest.approx(50)

    fee_settings.fee_payment_status = FeePaymentStatus.partially_paid
    fee_settings.partial_payment_amount = 20
    assert calculate_accrued_performance_fees(fee_settings, 1000) == pytest.approx(30)

    fee_settings.partial_payment_amount = 80
    assert calculate_accrued_performance_fees(fee_settings, 1000) == 0


def test_hurdle_amount(fee_settings: FeeSettings):
    fee_settings.hurdle_rate = 12
    fee_settings.hurdle_rate_type = HurdleRateType.annual
    assert calculate_hurdle_amount(fee_settings, 10000) == pytest.approx(100)

    fee_settings.hurdle_rate = 1
    fee_settings.hurdle_rate_type = HurdleRateType.monthly
    assert calculate_hurdle_amount(fee_settings, 10000) == pytest.approx(100)

    fee_settings.hurdle_rate_type = None
    assert calculate_hurdle_amount(fee_settings, 10000) == 0


def test_performance_fee_only_above_hurdle():
    assert calculate_performance_fee(1000, 100, 0.05) == pytest.approx(45)
    assert calculate_performance_fee(100, 100, 0.05) == 0
    assert calculate_performance_fee(-500, 0, 0.05) == 0


def test_management_fee_deduction_is_opt_in(fee_settings: FeeSettings):
    portfolio = PortfolioData(total_tokens_value=12000)

    kept = calculate_nav(portfolio, fee_settings, net_flows=0, prior_pre_fee_nav=12000)
    fee_settings.deduct_management_fee = True
    deducted = calculate_nav(portfolio, fee_settings, net_flows=0, prior_pre_fee_nav=12000)

    assert kept.management_fee == pytest.approx(5)
    assert kept.net_assets - deducted.net_assets == pytest.approx(5)


def test_recalculate_from_stored_matches(fee_settings: FeeSettings):
    fee_settings.hurdle_rate = 8
    portfolio = PortfolioData(
        total_tokens_value=20000, total_positions_value=5000, total_rewards=300
    )
    result = calculate_nav(portfolio, fee_settings, net_flows=1000, prior_pre_fee_nav=23000)

    recalculated = recalculate_from_stored(result, fee_settings)

    assert recalculated.pre_fee_nav == pytest.approx(result.pre_fee_nav)
    assert recalculated.performance == pytest.approx(result.performance)
    assert recalculated.hurdle_amount == pytest.approx(result.hurdle_amount)
    assert recalculated.performance_fee == pytest.approx(result.performance_fee)


def test_wallet_net_flows_add_to_net_flows(fee_settings: FeeSettings):
    portfolio = PortfolioData(total_tokens_value=10050)

    result = calculate_nav(
        portfolio,
        fee_settings,
        net_flows=100,
        prior_pre_fee_nav=10000,
        wallet_net_flows={"0xaaa": -300, "0xbbb": 50},
    )

    assert result.net_flows == -150
    assert result.wallet_net_flows == {"0xaaa": -300, "0xbbb": 50}
    assert result.performance == -150
