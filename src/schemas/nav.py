from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.config import settings
from models.nav_settings import FeePaymentStatus, HurdleRateType, PriorNavSource


class FeeSettings(BaseModel):
    annual_expense: float = Field(default_factory=lambda: settings.DEFAULT_ANNUAL_EXPENSE)
    monthly_expense: float = Field(default_factory=lambda: settings.DEFAULT_MONTHLY_EXPENSE)
    performance_fee_rate: float = Field(
        default_factory=lambda: settings.DEFAULT_PERFORMANCE_FEE_RATE
    )
    accrued_performance_fee_rate: float = Field(
        default_factory=lambda: settings.DEFAULT_ACCRUED_PERFORMANCE_FEE_RATE
    )
    management_fee_rate: float = Field(
        default_factory=lambda: settings.DEFAULT_MANAGEMENT_FEE_RATE
    )
    # percent, e.g. 8 means 8%
    hurdle_rate: float = 0
    hurdle_rate_type: HurdleRateType | None = HurdleRateType.annual
    # carried for reporting only, not applied by the waterfall
    high_water_mark: float = 0
    fee_payment_status: FeePaymentStatus = FeePaymentStatus.not_paid
    partial_payment_amount: float = 0
    deduct_management_fee: bool = False


class PortfolioData(BaseModel):
    total_tokens_value: float = 0
    total_positions_value: float = 0
    total_rewards: float = 0


class NAVCalculationResult(BaseModel):
    investments: float
    dividends_receivable: float
    total_assets: float
    accrued_expenses: float
    total_liabilities: float
    pre_fee_nav: float
    prior_pre_fee_nav: float
    prior_pre_fee_nav_source: PriorNavSource
    net_flows: float
    wallet_net_flows: Dict[str, float] = {}
    performance: float
    hurdle_amount: float
    performance_fee: float
    accrued_performance_fees: float
    management_fee: float
    net_assets: float
    high_water_mark: float = 0
    validation_warnings: List[str] = []
    calculation_date: datetime | None = None


class NAVSettingsBase(BaseModel):
    fee_settings: FeeSettings = Field(default_factory=FeeSettings)
    portfolio_data: PortfolioData = Field(default_factory=PortfolioData)


class NAVSettingsRequest(NAVSettingsBase):
    net_flows: float = 0
    # signed flows per wallet, added on top of `net_flows`
    wallet_net_flows: Dict[str, float] = {}
    # explicit prior-month pre-fee NAV; overrides the stored prior month when given
    prior_pre_fee_nav: float | None = None
    use_portfolio_estimate: bool = False

    @field_validator("wallet_net_flows")
    def normalize_wallet_addresses(cls, v: Dict[str, float]) -> Dict[str, float]:
        flows: Dict[str, float] = {}
        for wallet_address, amount in v.items():
            key = wallet_address.strip().lower()
            flows[key] = flows.get(key, 0) + amount
        return flows


class NAVSettings(NAVSettingsBase):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    year: int
    month: int
    month_name: str | None = None
    nav_calculations: NAVCalculationResult | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PriorNav(BaseModel):
    found: bool
    prior_pre_fee_nav: float | None = None
    source: PriorNavSource | None = None
    prior_year: int
    prior_month: int
    prior_month_name: str
    message: str
    prior_settings: Dict[str, Any] | None = None


class AvailableMonth(BaseModel):
    year: int
    month: int
    month_name: str
    created_at: datetime | None = None


class NAVHistoryEntry(AvailableMonth):
    pre_fee_nav: float = 0
    net_assets: float = 0
    performance: float = 0


class NAVHistory(BaseModel):
    history: List[NAVHistoryEntry] = []
    total_records: int = 0
    has_data: bool = False


class NAVVolatility(BaseModel):
    annualized_volatility: float = 0
    standard_deviation: float = 0
    monthly_returns: List[float] = []
    months_of_data: int = 0
