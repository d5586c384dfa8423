"""Holdings valuation and net-worth aggregation.

Every holding is normalized into the base currency:

    cash   -> to_base(balance)
    stock  -> to_base(round(quantity * last_price))
    fd     -> to_base(principal)            (accrued interest is excluded)

    total  =  round(Σ value_of(holding))

Malformed numbers (NaN, inf, negatives) count as 0 so aggregation never fails.
"""

from dataclasses import dataclass, field
from typing import Iterable

from wealth_snapshot.services.currency import (
    CurrencyNormalizer,
    currency_normalizer,
    finite_or_zero,
    round_half_up,
)
from wealth_snapshot.services.state import Account, AccountType, FixedDeposit

MARKET_BY_CURRENCY = {"HKD": "HK", "USD": "US", "AUD": "AU"}
DEFAULT_MARKET = "HK"


def market_for(currency: str) -> str:
    """Stock market bucket for a currency; unknown currencies fall into HK."""
    return MARKET_BY_CURRENCY.get(currency, DEFAULT_MARKET)


@dataclass(frozen=True)
class NetWorthBreakdown:
    total: int = 0
    cash: float = 0.0
    fixed_deposit: float = 0.0
    stock_by_market: dict[str, float] = field(default_factory=dict)


class HoldingsValuator:
    """Values a single account or fixed deposit in the base currency."""

    def __init__(self, normalizer: CurrencyNormalizer | None = None):
        self.normalizer = normalizer or currency_normalizer

    def value_of(self, holding: Account | FixedDeposit) -> float:
        if isinstance(holding, FixedDeposit):
            return self.normalizer.to_base(
                finite_or_zero(holding.principal), holding.currency
            )
        if holding.type == AccountType.STOCK:
            units = round_half_up(
                finite_or_zero(holding.quantity) * finite_or_zero(holding.last_price)
            )
            return self.normalizer.to_base(units, holding.currency)
        return self.normalizer.to_base(
            finite_or_zero(holding.balance), holding.currency
        )


class NetWorthAggregator:
    """Sums holding valuations into a total and a per-category breakdown."""

    def __init__(self, valuator: HoldingsValuator | None = None):
        self.valuator = valuator or HoldingsValuator()

    def aggregate(
        self,
        accounts: Iterable[Account],
        fixed_deposits: Iterable[FixedDeposit],
    ) -> NetWorthBreakdown:
        cash = 0.0
        fd_total = 0.0
        stock_by_market: dict[str, float] = {}

        for account in accounts:
            value = self.valuator.value_of(account)
            if account.type == AccountType.STOCK:
                market = market_for(account.currency)
                stock_by_market[market] = stock_by_market.get(market, 0.0) + value
            else:
                cash += value

        for fd in fixed_deposits:
            fd_total += self.valuator.value_of(fd)

        total = cash + fd_total + sum(stock_by_market.values())
        return NetWorthBreakdown(
            total=round_half_up(total),
            cash=cash,
            fixed_deposit=fd_total,
            stock_by_market=stock_by_market,
        )


# Global instances
holdings_valuator = HoldingsValuator()
net_worth_aggregator = NetWorthAggregator(holdings_valuator)
