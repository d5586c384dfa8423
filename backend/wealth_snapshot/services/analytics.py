"""Derived analytics over the history series and current holdings."""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

import pandas as pd

from wealth_snapshot.config import BENCHMARK_MONTHLY_RATE, DIVIDEND_YIELDS
from wealth_snapshot.services.currency import finite_or_zero, round_half_up
from wealth_snapshot.services.state import (
    Account,
    AccountType,
    FixedDeposit,
    HistoricalDataPoint,
)
from wealth_snapshot.services.valuation import (
    DEFAULT_MARKET,
    HoldingsValuator,
    NetWorthAggregator,
    holdings_valuator,
    market_for,
    net_worth_aggregator,
)

MOVING_AVERAGE_WINDOW = 6


@dataclass(frozen=True)
class GoalProgress:
    current: int
    goal: float
    percentage: int
    remaining: float


@dataclass(frozen=True)
class MaturityBucket:
    key: str  # "YYYY-MM"
    label: str  # "Oct 26"
    amount: int


@dataclass(frozen=True)
class PassiveIncome:
    fd_monthly: float
    dividend_monthly: float
    monthly: float

    @property
    def annual(self) -> float:
        return self.monthly * 12


@dataclass(frozen=True)
class AllocationSlice:
    name: str
    value: int


def moving_average(
    history: Sequence[HistoricalDataPoint], window: int = MOVING_AVERAGE_WINDOW
) -> list[float]:
    """Trailing average over ``[max(0, i - window + 1), i]`` for each point."""
    if not history:
        return []
    series = pd.Series([p.total_value_hkd for p in history], dtype="float64")
    return series.rolling(window=window, min_periods=1).mean().tolist()


def trend(history: Sequence[HistoricalDataPoint]) -> list[dict]:
    """History points paired with their rounded moving average, for charting."""
    averages = moving_average(history)
    return [
        {"date": p.date, "total_value_hkd": p.total_value_hkd, "ma": round_half_up(ma)}
        for p, ma in zip(history, averages)
    ]


def current_net_worth(history: Sequence[HistoricalDataPoint]) -> int:
    """Net worth as of the latest recorded snapshot (not the live total)."""
    if not history:
        return 0
    return history[-1].total_value_hkd


def goal_progress(history: Sequence[HistoricalDataPoint], goal: float) -> GoalProgress:
    current = current_net_worth(history)
    goal = finite_or_zero(goal)
    if goal <= 0:
        percentage = 0
    else:
        percentage = min(100, round_half_up(current / goal * 100))
    return GoalProgress(
        current=current, goal=goal, percentage=percentage, remaining=goal - current
    )


def maturity_map(
    fixed_deposits: Iterable[FixedDeposit],
    today: date | None = None,
    valuator: HoldingsValuator | None = None,
) -> list[MaturityBucket]:
    """Base-currency principal unlocking in each of the next 12 calendar months.

    Deposits maturing outside the window are left out.
    """
    valuator = valuator or holdings_valuator
    start = pd.Period(pd.Timestamp(today or date.today()), freq="M")
    months = pd.period_range(start=start, periods=12, freq="M")
    amounts = {str(m): 0.0 for m in months}

    for fd in fixed_deposits:
        key = fd.maturity_date.strftime("%Y-%m")
        if key in amounts:
            amounts[key] += valuator.value_of(fd)

    return [
        MaturityBucket(key=str(m), label=m.strftime("%b %y"), amount=round_half_up(amounts[str(m)]))
        for m in months
    ]


def highest_unlock(buckets: Sequence[MaturityBucket]) -> MaturityBucket | None:
    if not any(b.amount > 0 for b in buckets):
        return None
    best = buckets[0]
    for bucket in buckets[1:]:
        if bucket.amount >= best.amount:
            best = bucket
    return best


def passive_income(
    accounts: Iterable[Account],
    fixed_deposits: Iterable[FixedDeposit],
    valuator: HoldingsValuator | None = None,
    yields: dict[str, float] | None = None,
) -> PassiveIncome:
    """Monthly income heuristic: FD interest plus an assumed dividend yield.

    Yields are fixed per market, not looked up.
    """
    valuator = valuator or holdings_valuator
    yields = DIVIDEND_YIELDS if yields is None else yields

    fd_monthly = 0.0
    for fd in fixed_deposits:
        fd_monthly += valuator.value_of(fd) * finite_or_zero(fd.interest_rate) / 100 / 12

    dividend_monthly = 0.0
    for account in accounts:
        if account.type != AccountType.STOCK:
            continue
        market = market_for(account.currency)
        assumed = yields.get(market, yields.get(DEFAULT_MARKET, 0.0))
        dividend_monthly += valuator.value_of(account) * assumed / 12

    return PassiveIncome(
        fd_monthly=fd_monthly,
        dividend_monthly=dividend_monthly,
        monthly=fd_monthly + dividend_monthly,
    )


def benchmark_series(
    history: Sequence[HistoricalDataPoint],
    monthly_rate: float = BENCHMARK_MONTHLY_RATE,
) -> list[float]:
    """Fixed-rate compounding curve anchored on the first snapshot."""
    if not history:
        return []
    start = history[0].total_value_hkd
    return [start * (1 + monthly_rate) ** i for i in range(len(history))]


def allocation(
    accounts: Iterable[Account],
    fixed_deposits: Iterable[FixedDeposit],
    aggregator: NetWorthAggregator | None = None,
) -> list[AllocationSlice]:
    breakdown = (aggregator or net_worth_aggregator).aggregate(accounts, fixed_deposits)
    slices = [
        AllocationSlice("Cash", round_half_up(breakdown.cash)),
        AllocationSlice("Fixed Dep.", round_half_up(breakdown.fixed_deposit)),
        AllocationSlice("HK Stocks", round_half_up(breakdown.stock_by_market.get("HK", 0.0))),
        AllocationSlice("US Stocks", round_half_up(breakdown.stock_by_market.get("US", 0.0))),
        AllocationSlice("AU Stocks", round_half_up(breakdown.stock_by_market.get("AU", 0.0))),
    ]
    return [s for s in slices if s.value > 0]
