"""Portfolio value types.

The portfolio is one immutable aggregate. Operations never mutate a
``PortfolioState``; they return a new one built with ``dataclasses.replace``.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum

from wealth_snapshot.config import DEFAULT_WEALTH_GOAL
from wealth_snapshot.services.currency import finite_or_zero, round_half_up


class Currency(str, Enum):
    HKD = "HKD"
    USD = "USD"
    AUD = "AUD"


class AccountType(str, Enum):
    CASH = "Cash"
    STOCK = "Stock"


class MaturityAction(str, Enum):
    RENEW = "Renew"
    TRANSFER_OUT = "Transfer Out"


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def stock_balance(quantity: float | None, last_price: float | None) -> int:
    return round_half_up(finite_or_zero(quantity) * finite_or_zero(last_price))


@dataclass(frozen=True)
class Account:
    id: str
    type: AccountType
    currency: str
    balance: float = 0.0
    name: str = ""
    symbol: str = ""
    quantity: float | None = None
    last_price: float | None = None

    @property
    def is_stock(self) -> bool:
        return self.type == AccountType.STOCK

    def with_market_data(
        self, quantity: float | None = None, last_price: float | None = None
    ) -> "Account":
        """Return a copy with new quantity/price and the derived balance recomputed."""
        if not self.is_stock:
            return self
        qty = self.quantity if quantity is None else quantity
        price = self.last_price if last_price is None else last_price
        qty = finite_or_zero(qty)
        price = finite_or_zero(price)
        return replace(
            self, quantity=qty, last_price=price, balance=stock_balance(qty, price)
        )


def make_stock(
    symbol: str,
    quantity: float,
    last_price: float | None,
    currency: str,
    name: str = "",
    account_id: str | None = None,
) -> Account:
    qty = finite_or_zero(quantity)
    price = finite_or_zero(last_price)
    return Account(
        id=account_id or new_id(),
        type=AccountType.STOCK,
        currency=currency,
        balance=stock_balance(qty, price),
        name=name or symbol,
        symbol=symbol,
        quantity=qty,
        last_price=price,
    )


def make_cash(
    name: str, balance: float, currency: str, account_id: str | None = None
) -> Account:
    return Account(
        id=account_id or new_id(),
        type=AccountType.CASH,
        currency=currency,
        balance=finite_or_zero(balance, allow_negative=True),
        name=name,
    )


@dataclass(frozen=True)
class FixedDeposit:
    id: str
    principal: float
    currency: str
    interest_rate: float
    maturity_date: date
    bank_name: str = ""
    action_on_maturity: MaturityAction = MaturityAction.RENEW
    auto_roll: bool = False


@dataclass(frozen=True)
class HistoricalDataPoint:
    date: str  # "YYYY-MM"
    total_value_hkd: int


@dataclass(frozen=True)
class PortfolioState:
    accounts: tuple[Account, ...] = ()
    fixed_deposits: tuple[FixedDeposit, ...] = ()
    history: tuple[HistoricalDataPoint, ...] = ()
    wealth_goal: float = DEFAULT_WEALTH_GOAL
    last_updated: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "accounts", tuple(self.accounts))
        object.__setattr__(self, "fixed_deposits", tuple(self.fixed_deposits))
        object.__setattr__(self, "history", tuple(self.history))

    def find_account(self, account_id: str) -> Account | None:
        return next((a for a in self.accounts if a.id == account_id), None)

    def find_fixed_deposit(self, fd_id: str) -> FixedDeposit | None:
        return next((fd for fd in self.fixed_deposits if fd.id == fd_id), None)

    def touch(self, **changes) -> "PortfolioState":
        """Return a full replacement state with ``last_updated`` refreshed."""
        return replace(self, last_updated=datetime.now().isoformat(), **changes)
