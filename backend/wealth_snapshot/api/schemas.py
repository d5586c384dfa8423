"""Pydantic schemas for API request/response."""

from datetime import date

from pydantic import BaseModel, Field

from wealth_snapshot.config import FD_DEFAULT_RATE
from wealth_snapshot.services.state import AccountType, Currency, MaturityAction


class AccountIn(BaseModel):
    id: str | None = None
    type: AccountType
    currency: str = Currency.HKD.value
    balance: float = 0.0
    name: str = ""
    symbol: str = ""
    quantity: float | None = None
    last_price: float | None = None


class AccountResponse(BaseModel):
    id: str
    type: AccountType
    currency: str
    balance: float
    name: str
    symbol: str
    quantity: float | None = None
    last_price: float | None = None


class AccountsUpdateRequest(BaseModel):
    accounts: list[AccountIn]


class StockAddRequest(BaseModel):
    symbol: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    currency: Currency
    name: str = ""


class GoalUpdateRequest(BaseModel):
    wealth_goal: float


class ImportRequest(BaseModel):
    image_base64: str
    mime_type: str = "image/jpeg"


class FixedDepositCreateRequest(BaseModel):
    bank_name: str = "Other"
    principal: float = Field(gt=0)
    currency: Currency = Currency.HKD
    interest_rate: float = Field(default=FD_DEFAULT_RATE, ge=0)
    maturity_date: date
    action_on_maturity: MaturityAction = MaturityAction.RENEW
    auto_roll: bool = True


class FixedDepositResponse(BaseModel):
    id: str
    bank_name: str
    principal: float
    currency: str
    interest_rate: float
    maturity_date: date
    action_on_maturity: MaturityAction
    auto_roll: bool
    days_left: int
    status: str


class InterestPreviewRequest(BaseModel):
    principal: float | None = None
    interest_rate: float | None = None
    start_date: date | None = None
    maturity_date: date | None = None


class InterestPreviewResponse(BaseModel):
    interest: int
    total: float
    days: int


class MaturityProposalResponse(BaseModel):
    fd_id: str
    estimated_interest: int
    rate: float
    term_months: int
    destination_account_id: str | None = None
    currency_mismatch: bool


class RolloverRequest(BaseModel):
    confirmed_interest: float
    new_rate: float
    duration_months: int


class SettleRequest(BaseModel):
    confirmed_interest: float
    destination_account_id: str


class HistoryPointResponse(BaseModel):
    date: str
    total_value_hkd: int


class NetWorthResponse(BaseModel):
    total: int
    cash: float
    fixed_deposit: float
    stock_by_market: dict[str, float]


class PortfolioResponse(BaseModel):
    accounts: list[AccountResponse]
    fixed_deposits: list[FixedDepositResponse]
    history: list[HistoryPointResponse]
    wealth_goal: float
    last_updated: str | None = None
    net_worth: NetWorthResponse


class SyncResponse(BaseModel):
    portfolio: PortfolioResponse
    mirrored: bool
    updated_prices: int = 0
    remote_total_net_worth: float | None = None


class ImportResponse(BaseModel):
    portfolio: PortfolioResponse
    imported: int


class GoalProgressResponse(BaseModel):
    current: int
    goal: float
    percentage: int
    remaining: float


class MaturityBucketResponse(BaseModel):
    key: str
    label: str
    amount: int


class PassiveIncomeResponse(BaseModel):
    fd_monthly: float
    dividend_monthly: float
    monthly: float
    annual: float


class InsightsResponse(BaseModel):
    allocation: list[dict]
    trend: list[dict]
    benchmark: list[float]
    goal: GoalProgressResponse
    maturity_map: list[MaturityBucketResponse]
    highest_unlock: MaturityBucketResponse | None = None
    passive_income: PassiveIncomeResponse
