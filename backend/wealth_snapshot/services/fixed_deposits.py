"""Fixed deposit accrual and lifecycle engine.

Two simple-interest formulas are kept on purpose:

    by term    interest = round(principal * rate/100 * months/12)
    by dates   interest = round(principal * rate/100 * days/365)

The term formula pre-fills rollover and settlement dialogs (default 3 months),
the date formula previews a new deposit between its start and maturity dates.

Rollover and settlement check every precondition before building the new
state. A refused transition returns the input state untouched.
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum

import pandas as pd

from wealth_snapshot.config import (
    FD_DEFAULT_RATE,
    FD_DEFAULT_TERM_MONTHS,
    FD_ROLLOVER_TERMS,
    FD_URGENT_DAYS,
    SETTLEMENT_CONVERT_CURRENCY,
)
from wealth_snapshot.services.currency import (
    CurrencyNormalizer,
    currency_normalizer,
    finite_or_zero,
    round_half_up,
)
from wealth_snapshot.services.history import period_key, record_snapshot
from wealth_snapshot.services.state import (
    Account,
    AccountType,
    FixedDeposit,
    PortfolioState,
)
from wealth_snapshot.services.valuation import NetWorthAggregator, net_worth_aggregator

logger = logging.getLogger(__name__)


class MaturityStatus(str, Enum):
    ACTIVE = "active"
    URGENT = "urgent"
    MATURED = "matured"


def _as_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def days_between(start: date | datetime, end: date | datetime) -> int:
    """Whole calendar days from ``start`` to ``end`` with time of day dropped."""
    return (_as_day(end) - _as_day(start)).days


def days_left(maturity_date: date | datetime, today: date | None = None) -> int:
    return days_between(today or date.today(), maturity_date)


def maturity_status(
    maturity_date: date | datetime,
    today: date | None = None,
    urgent_days: int = FD_URGENT_DAYS,
) -> MaturityStatus:
    remaining = days_left(maturity_date, today)
    if remaining <= 0:
        return MaturityStatus.MATURED
    if remaining <= urgent_days:
        return MaturityStatus.URGENT
    return MaturityStatus.ACTIVE


def interest_for_months(principal: float, rate: float, months: float) -> int:
    return round_half_up(
        finite_or_zero(principal) * (finite_or_zero(rate) / 100) * (months / 12)
    )


@dataclass(frozen=True)
class InterestEstimate:
    interest: int
    total: float
    days: int


def interest_between(
    principal: float | None,
    rate: float | None,
    start: date | None,
    maturity: date | None,
) -> InterestEstimate:
    """Day-count estimate used while a new deposit is being set up."""
    principal = finite_or_zero(principal)
    rate = finite_or_zero(rate)
    if start is None or maturity is None or principal <= 0:
        return InterestEstimate(interest=0, total=principal, days=0)

    days = days_between(start, maturity)
    if days <= 0:
        return InterestEstimate(interest=0, total=principal, days=0)

    interest = round_half_up(principal * (rate / 100) * (days / 365))
    return InterestEstimate(interest=interest, total=principal + interest, days=days)


def add_months(day: date, months: int) -> date:
    """Calendar month arithmetic, clamping to the end of shorter months.

    31 Jan + 1 month is the last day of February. Day-overflowing date
    arithmetic would give 3 Mar (2 Mar in a leap year) instead.
    """
    return (pd.Timestamp(day) + pd.DateOffset(months=months)).date()


@dataclass(frozen=True)
class TransitionResult:
    state: PortfolioState
    applied: bool
    reason: str | None = None

    @classmethod
    def refused(cls, state: PortfolioState, reason: str) -> "TransitionResult":
        return cls(state=state, applied=False, reason=reason)


@dataclass(frozen=True)
class MaturityProposal:
    """Values a rollover/settlement dialog starts from."""

    fd_id: str
    estimated_interest: int
    rate: float
    term_months: int
    destination_account_id: str | None
    currency_mismatch: bool


def _is_valid_amount(value: float) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value >= 0
    )


class FixedDepositEngine:
    """Applies rollover and settlement transitions to a portfolio."""

    def __init__(
        self,
        aggregator: NetWorthAggregator | None = None,
        normalizer: CurrencyNormalizer | None = None,
        convert_currency: bool = SETTLEMENT_CONVERT_CURRENCY,
    ):
        self.aggregator = aggregator or net_worth_aggregator
        self.normalizer = normalizer or currency_normalizer
        self.convert_currency = convert_currency

    def default_destination(
        self, accounts: tuple[Account, ...], fd: FixedDeposit
    ) -> Account | None:
        """Cash account in the deposit's currency, else the first cash account."""
        cash = [a for a in accounts if a.type == AccountType.CASH]
        for account in cash:
            if account.currency == fd.currency:
                return account
        return cash[0] if cash else None

    def propose(self, state: PortfolioState, fd_id: str) -> MaturityProposal | None:
        fd = state.find_fixed_deposit(fd_id)
        if fd is None:
            return None
        rate = fd.interest_rate or FD_DEFAULT_RATE
        destination = self.default_destination(state.accounts, fd)
        return MaturityProposal(
            fd_id=fd.id,
            estimated_interest=interest_for_months(
                fd.principal, fd.interest_rate or 0, FD_DEFAULT_TERM_MONTHS
            ),
            rate=rate,
            term_months=FD_DEFAULT_TERM_MONTHS,
            destination_account_id=destination.id if destination else None,
            currency_mismatch=bool(destination and destination.currency != fd.currency),
        )

    def rollover(
        self,
        state: PortfolioState,
        fd_id: str,
        confirmed_interest: float,
        new_rate: float,
        duration_months: int,
        today: date | None = None,
    ) -> TransitionResult:
        """Reinvest principal plus confirmed interest for a new term.

        The deposit keeps its id; principal, rate and maturity date change.
        """
        fd = state.find_fixed_deposit(fd_id)
        if fd is None:
            return TransitionResult.refused(state, "fd_not_found")
        if not _is_valid_amount(confirmed_interest):
            return TransitionResult.refused(state, "invalid_interest")
        if not _is_valid_amount(new_rate):
            return TransitionResult.refused(state, "invalid_rate")
        if duration_months not in FD_ROLLOVER_TERMS:
            return TransitionResult.refused(state, "invalid_term")

        today = today or date.today()
        renewed = replace(
            fd,
            principal=fd.principal + confirmed_interest,
            interest_rate=new_rate,
            maturity_date=add_months(today, duration_months),
            auto_roll=True,
        )
        fds = tuple(renewed if f.id == fd.id else f for f in state.fixed_deposits)
        logger.info(
            f"Rolled over FD {fd.id}: principal {fd.principal} -> {renewed.principal}, "
            f"{duration_months}M @ {new_rate}%"
        )
        return TransitionResult(state=state.touch(fixed_deposits=fds), applied=True)

    def settle(
        self,
        state: PortfolioState,
        fd_id: str,
        destination_account_id: str,
        confirmed_interest: float,
        today: date | None = None,
    ) -> TransitionResult:
        """Pay principal plus confirmed interest into a cash account and drop the FD.

        Only a matured deposit can be settled. The amount is credited
        unconverted unless ``convert_currency`` is set. The history entry for
        the current month is re-recorded afterwards.
        """
        fd = state.find_fixed_deposit(fd_id)
        if fd is None:
            return TransitionResult.refused(state, "fd_not_found")
        if maturity_status(fd.maturity_date, today) != MaturityStatus.MATURED:
            return TransitionResult.refused(state, "fd_not_matured")
        destination = state.find_account(destination_account_id)
        if destination is None:
            return TransitionResult.refused(state, "account_not_found")
        if destination.type != AccountType.CASH:
            return TransitionResult.refused(state, "destination_not_cash")
        if not _is_valid_amount(confirmed_interest):
            return TransitionResult.refused(state, "invalid_interest")

        final_amount = fd.principal + confirmed_interest
        credited = final_amount
        if destination.currency != fd.currency:
            if self.convert_currency:
                credited = round(
                    self.normalizer.convert(
                        final_amount, fd.currency, destination.currency
                    ),
                    2,
                )
            else:
                logger.warning(
                    f"Settling FD {fd.id} ({fd.currency}) into account "
                    f"{destination.id} ({destination.currency}) without conversion"
                )

        accounts = tuple(
            replace(a, balance=a.balance + credited) if a.id == destination.id else a
            for a in state.accounts
        )
        fds = tuple(f for f in state.fixed_deposits if f.id != fd.id)

        total = self.aggregator.aggregate(accounts, fds).total
        history = record_snapshot(state.history, period_key(today), total)
        logger.info(f"Settled FD {fd.id}: {credited} {destination.currency} -> {destination.id}")
        return TransitionResult(
            state=state.touch(accounts=accounts, fixed_deposits=fds, history=history),
            applied=True,
        )


# Global instance
fd_engine = FixedDepositEngine()
