"""Portfolio transitions.

Each method takes the current ``PortfolioState`` and returns a complete
replacement; persistence is the caller's job.
"""

import math
from datetime import date
from typing import Iterable

from wealth_snapshot.services.extraction import ScannedAsset, scanned_to_account
from wealth_snapshot.services.fixed_deposits import TransitionResult
from wealth_snapshot.services.history import period_key, record_snapshot
from wealth_snapshot.services.state import (
    Account,
    AccountType,
    FixedDeposit,
    PortfolioState,
    make_stock,
)
from wealth_snapshot.services.valuation import (
    NetWorthAggregator,
    NetWorthBreakdown,
    net_worth_aggregator,
)


class PortfolioService:
    """Holdings edits that keep the monthly history in step."""

    def __init__(self, aggregator: NetWorthAggregator | None = None):
        self.aggregator = aggregator or net_worth_aggregator

    def net_worth(self, state: PortfolioState) -> NetWorthBreakdown:
        return self.aggregator.aggregate(state.accounts, state.fixed_deposits)

    def record_current_snapshot(
        self, state: PortfolioState, today: date | None = None
    ) -> PortfolioState:
        total = self.net_worth(state).total
        return state.touch(history=record_snapshot(state.history, period_key(today), total))

    def update_accounts(
        self,
        state: PortfolioState,
        accounts: Iterable[Account],
        today: date | None = None,
    ) -> PortfolioState:
        """Replace the account list and re-record this month's snapshot."""
        normalized = tuple(a.with_market_data() if a.is_stock else a for a in accounts)
        total = self.aggregator.aggregate(normalized, state.fixed_deposits).total
        history = record_snapshot(state.history, period_key(today), total)
        return state.touch(accounts=normalized, history=history)

    def add_stock(
        self,
        state: PortfolioState,
        symbol: str,
        quantity: float,
        currency: str,
        price: float | None,
        name: str = "",
        today: date | None = None,
    ) -> PortfolioState:
        """Add a stock position; an unavailable price is stored as 0."""
        account = make_stock(
            symbol=symbol, quantity=quantity, last_price=price, currency=currency, name=name
        )
        return self.update_accounts(state, state.accounts + (account,), today)

    def import_scanned_assets(
        self,
        state: PortfolioState,
        assets: Iterable[ScannedAsset],
        prices: dict[str, float | None],
        today: date | None = None,
    ) -> PortfolioState:
        new_accounts = tuple(
            scanned_to_account(
                asset,
                prices.get(asset.symbol) if asset.category == AccountType.STOCK else None,
            )
            for asset in assets
        )
        return self.update_accounts(state, state.accounts + new_accounts, today)

    def apply_market_prices(
        self,
        state: PortfolioState,
        prices: dict[str, float],
        today: date | None = None,
    ) -> tuple[PortfolioState, int]:
        """Refresh price-derived fields of existing stocks matched by symbol.

        Symbols without a matching stock account are ignored. Returns the new
        state and how many accounts were repriced.
        """
        updated = 0
        accounts = []
        for account in state.accounts:
            price = prices.get(account.symbol) if account.is_stock and account.symbol else None
            if price is not None:
                account = account.with_market_data(last_price=price)
                updated += 1
            accounts.append(account)
        if not updated:
            return state, 0
        return self.update_accounts(state, accounts, today), updated

    def add_fixed_deposit(self, state: PortfolioState, fd: FixedDeposit) -> PortfolioState:
        return state.touch(fixed_deposits=state.fixed_deposits + (fd,))

    def remove_fixed_deposit(self, state: PortfolioState, fd_id: str) -> TransitionResult:
        if state.find_fixed_deposit(fd_id) is None:
            return TransitionResult.refused(state, "fd_not_found")
        fds = tuple(fd for fd in state.fixed_deposits if fd.id != fd_id)
        return TransitionResult(state=state.touch(fixed_deposits=fds), applied=True)

    def update_goal(self, state: PortfolioState, goal: float) -> TransitionResult:
        if isinstance(goal, bool) or not isinstance(goal, (int, float)):
            return TransitionResult.refused(state, "invalid_goal")
        if not math.isfinite(goal) or goal <= 0:
            return TransitionResult.refused(state, "invalid_goal")
        return TransitionResult(state=state.touch(wealth_goal=goal), applied=True)


portfolio_service = PortfolioService()
