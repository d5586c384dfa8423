"""Loads and saves the single portfolio aggregate."""

from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from wealth_snapshot.models.database import SETTINGS_ROW_ID
from wealth_snapshot.models.portfolio import (
    AccountRecord,
    FixedDepositRecord,
    HistoryRecord,
    PortfolioMeta,
)
from wealth_snapshot.services.state import (
    Account,
    AccountType,
    FixedDeposit,
    HistoricalDataPoint,
    MaturityAction,
    PortfolioState,
)


class PortfolioStore:
    """Reads the portfolio into a ``PortfolioState`` and writes it back whole."""

    async def load(self, session: AsyncSession) -> PortfolioState:
        accounts = await session.execute(
            select(AccountRecord).order_by(AccountRecord.position)
        )
        fds = await session.execute(
            select(FixedDepositRecord).order_by(FixedDepositRecord.position)
        )
        history = await session.execute(
            select(HistoryRecord).order_by(HistoryRecord.position)
        )
        meta = await session.get(PortfolioMeta, SETTINGS_ROW_ID)

        state = PortfolioState(
            accounts=[
                Account(
                    id=r.id,
                    type=AccountType(r.type),
                    currency=r.currency,
                    balance=r.balance,
                    name=r.name,
                    symbol=r.symbol,
                    quantity=r.quantity,
                    last_price=r.last_price,
                )
                for r in accounts.scalars().all()
            ],
            fixed_deposits=[
                FixedDeposit(
                    id=r.id,
                    principal=r.principal,
                    currency=r.currency,
                    interest_rate=r.interest_rate,
                    maturity_date=date.fromisoformat(r.maturity_date),
                    bank_name=r.bank_name,
                    action_on_maturity=MaturityAction(r.action_on_maturity),
                    auto_roll=r.auto_roll,
                )
                for r in fds.scalars().all()
            ],
            history=[
                HistoricalDataPoint(date=r.date, total_value_hkd=r.total_value_hkd)
                for r in history.scalars().all()
            ],
        )
        if meta is None:
            return state
        return PortfolioState(
            accounts=state.accounts,
            fixed_deposits=state.fixed_deposits,
            history=state.history,
            wealth_goal=meta.wealth_goal,
            last_updated=meta.last_updated,
        )

    async def save(self, session: AsyncSession, state: PortfolioState) -> None:
        """Replace every stored row with the contents of ``state``."""
        await session.execute(delete(AccountRecord))
        await session.execute(delete(FixedDepositRecord))
        await session.execute(delete(HistoryRecord))

        for i, acc in enumerate(state.accounts):
            session.add(
                AccountRecord(
                    id=acc.id,
                    position=i,
                    type=AccountType(acc.type).value,
                    currency=acc.currency,
                    balance=acc.balance,
                    quantity=acc.quantity,
                    last_price=acc.last_price,
                    symbol=acc.symbol,
                    name=acc.name,
                )
            )
        for i, fd in enumerate(state.fixed_deposits):
            session.add(
                FixedDepositRecord(
                    id=fd.id,
                    position=i,
                    bank_name=fd.bank_name,
                    principal=fd.principal,
                    currency=fd.currency,
                    interest_rate=fd.interest_rate,
                    maturity_date=fd.maturity_date.isoformat(),
                    action_on_maturity=MaturityAction(fd.action_on_maturity).value,
                    auto_roll=fd.auto_roll,
                )
            )
        for i, point in enumerate(state.history):
            session.add(
                HistoryRecord(date=point.date, position=i, total_value_hkd=point.total_value_hkd)
            )

        meta = await session.get(PortfolioMeta, SETTINGS_ROW_ID)
        if meta is None:
            session.add(
                PortfolioMeta(
                    id=SETTINGS_ROW_ID,
                    wealth_goal=state.wealth_goal,
                    last_updated=state.last_updated,
                )
            )
        else:
            meta.wealth_goal = state.wealth_goal
            meta.last_updated = state.last_updated

        await session.commit()


portfolio_store = PortfolioStore()
