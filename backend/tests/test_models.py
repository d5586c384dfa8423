"""Tests for database models."""

import pytest
import pytest_asyncio
from unittest.mock import patch
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from wealth_snapshot.config import DEFAULT_WEALTH_GOAL
from wealth_snapshot.models.database import Base, init_db
from wealth_snapshot.models.portfolio import (
    AccountRecord,
    FixedDepositRecord,
    HistoryRecord,
    PortfolioMeta,
)


@pytest_asyncio.fixture
async def db_session():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session() as session:
        yield session
    await engine.dispose()


@pytest.mark.asyncio
async def test_create_stock_account(db_session):
    db_session.add(
        AccountRecord(
            id="s1",
            position=0,
            type="Stock",
            currency="USD",
            balance=1900,
            quantity=10,
            last_price=190.0,
            symbol="AAPL",
            name="IBKR",
        )
    )
    await db_session.commit()

    result = await db_session.get(AccountRecord, "s1")
    assert result is not None
    assert result.symbol == "AAPL"
    assert result.quantity == 10


@pytest.mark.asyncio
async def test_cash_account_defaults(db_session):
    db_session.add(AccountRecord(id="c1", position=0, type="Cash", currency="HKD", name="HSBC"))
    await db_session.commit()

    result = await db_session.get(AccountRecord, "c1")
    assert result.balance == 0.0
    assert result.quantity is None
    assert result.symbol == ""


@pytest.mark.asyncio
async def test_create_fixed_deposit(db_session):
    db_session.add(
        FixedDepositRecord(
            id="fd1",
            position=0,
            bank_name="HSBC",
            principal=50_000,
            currency="HKD",
            interest_rate=4.0,
            maturity_date="2024-09-30",
        )
    )
    await db_session.commit()

    result = await db_session.get(FixedDepositRecord, "fd1")
    assert result.maturity_date == "2024-09-30"
    assert result.action_on_maturity == "Renew"
    assert result.auto_roll is False


@pytest.mark.asyncio
async def test_history_ordered_by_position(db_session):
    db_session.add(HistoryRecord(date="2024-06", position=1, total_value_hkd=200))
    db_session.add(HistoryRecord(date="2024-05", position=0, total_value_hkd=100))
    await db_session.commit()

    result = await db_session.execute(select(HistoryRecord).order_by(HistoryRecord.position))
    assert [r.date for r in result.scalars().all()] == ["2024-05", "2024-06"]


@pytest.mark.asyncio
async def test_portfolio_meta(db_session):
    db_session.add(PortfolioMeta(id=1, wealth_goal=2_000_000, last_updated=None))
    await db_session.commit()

    meta = await db_session.get(PortfolioMeta, 1)
    assert meta.wealth_goal == 2_000_000


@pytest.mark.asyncio
async def test_init_db_seeds_settings_row_once():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    with patch("wealth_snapshot.models.database.engine", engine), patch(
        "wealth_snapshot.models.database.async_session_factory", factory
    ):
        await init_db()
        await init_db()

    async with factory() as session:
        result = await session.execute(select(PortfolioMeta))
        rows = result.scalars().all()
    assert [(m.id, m.wealth_goal) for m in rows] == [(1, DEFAULT_WEALTH_GOAL)]
    await engine.dispose()
