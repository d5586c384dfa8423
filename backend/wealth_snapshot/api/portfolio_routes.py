"""Portfolio API routes."""

import asyncio
import base64
import binascii
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from wealth_snapshot.models.database import get_db
from wealth_snapshot.services.currency import finite_or_zero
from wealth_snapshot.services.extraction import sanitize_scanned_assets
from wealth_snapshot.services.fixed_deposits import days_left, maturity_status
from wealth_snapshot.services.gemini import gemini_service
from wealth_snapshot.services.ledger_mirror import ledger_mirror_service
from wealth_snapshot.services.portfolio import portfolio_service
from wealth_snapshot.services.state import (
    Account,
    AccountType,
    FixedDeposit,
    PortfolioState,
    new_id,
)
from wealth_snapshot.services.store import portfolio_store
from wealth_snapshot.api.schemas import (
    AccountIn,
    AccountResponse,
    AccountsUpdateRequest,
    FixedDepositResponse,
    GoalUpdateRequest,
    HistoryPointResponse,
    ImportRequest,
    ImportResponse,
    NetWorthResponse,
    PortfolioResponse,
    StockAddRequest,
    SyncResponse,
)

router = APIRouter(prefix="/api/portfolio", tags=["portfolio"])


def fd_to_response(fd: FixedDeposit, today: date | None = None) -> FixedDepositResponse:
    return FixedDepositResponse(
        id=fd.id,
        bank_name=fd.bank_name,
        principal=fd.principal,
        currency=fd.currency,
        interest_rate=fd.interest_rate,
        maturity_date=fd.maturity_date,
        action_on_maturity=fd.action_on_maturity,
        auto_roll=fd.auto_roll,
        days_left=days_left(fd.maturity_date, today),
        status=maturity_status(fd.maturity_date, today).value,
    )


def state_to_response(state: PortfolioState) -> PortfolioResponse:
    breakdown = portfolio_service.net_worth(state)
    return PortfolioResponse(
        accounts=[
            AccountResponse(
                id=a.id,
                type=a.type,
                currency=a.currency,
                balance=a.balance,
                name=a.name,
                symbol=a.symbol,
                quantity=a.quantity,
                last_price=a.last_price,
            )
            for a in state.accounts
        ],
        fixed_deposits=[fd_to_response(fd) for fd in state.fixed_deposits],
        history=[
            HistoryPointResponse(date=p.date, total_value_hkd=p.total_value_hkd)
            for p in state.history
        ],
        wealth_goal=state.wealth_goal,
        last_updated=state.last_updated,
        net_worth=NetWorthResponse(
            total=breakdown.total,
            cash=round(breakdown.cash, 2),
            fixed_deposit=round(breakdown.fixed_deposit, 2),
            stock_by_market={k: round(v, 2) for k, v in breakdown.stock_by_market.items()},
        ),
    )


def _account_from_request(req: AccountIn) -> Account:
    is_stock = req.type == AccountType.STOCK
    return Account(
        id=req.id or new_id(),
        type=req.type,
        currency=req.currency.strip().upper(),
        balance=finite_or_zero(req.balance, allow_negative=True),
        name=req.name,
        symbol=req.symbol.strip().upper(),
        quantity=req.quantity if is_stock else None,
        last_price=req.last_price if is_stock else None,
    )


@router.get("", response_model=PortfolioResponse)
async def get_portfolio(db: AsyncSession = Depends(get_db)):
    state = await portfolio_store.load(db)
    return state_to_response(state)


@router.put("/accounts", response_model=PortfolioResponse)
async def update_accounts(req: AccountsUpdateRequest, db: AsyncSession = Depends(get_db)):
    """Replace all accounts and record this month's net worth."""
    state = await portfolio_store.load(db)
    accounts = [_account_from_request(a) for a in req.accounts]
    ids = [a.id for a in accounts]
    if len(ids) != len(set(ids)):
        raise HTTPException(status_code=400, detail="Duplicate account id")

    state = portfolio_service.update_accounts(state, accounts)
    await portfolio_store.save(db, state)
    return state_to_response(state)


@router.post("/accounts/stock", response_model=PortfolioResponse)
async def add_stock(req: StockAddRequest, db: AsyncSession = Depends(get_db)):
    symbol = req.symbol.strip().upper()
    # A failed lookup still adds the stock, priced at 0 until corrected
    price = await asyncio.to_thread(gemini_service.estimate_price, symbol)

    state = await portfolio_store.load(db)
    state = portfolio_service.add_stock(
        state,
        symbol=symbol,
        quantity=req.quantity,
        currency=req.currency.value,
        price=price,
        name=req.name,
    )
    await portfolio_store.save(db, state)
    return state_to_response(state)


@router.put("/goal", response_model=PortfolioResponse)
async def update_goal(req: GoalUpdateRequest, db: AsyncSession = Depends(get_db)):
    state = await portfolio_store.load(db)
    result = portfolio_service.update_goal(state, req.wealth_goal)
    if not result.applied:
        raise HTTPException(status_code=400, detail="Goal must be a positive amount")
    await portfolio_store.save(db, result.state)
    return state_to_response(result.state)


@router.post("/sync", response_model=SyncResponse)
async def sync_portfolio(db: AsyncSession = Depends(get_db)):
    """Mirror holdings to the remote ledger and take back its prices.

    A failed sync leaves the stored portfolio as it was. A successful one
    always re-records this month's snapshot, repriced or not.
    """
    state = await portfolio_store.load(db)
    result = await asyncio.to_thread(ledger_mirror_service.push, state.accounts)
    if result is None:
        return SyncResponse(portfolio=state_to_response(state), mirrored=False)

    state, updated = portfolio_service.apply_market_prices(state, result.latest_prices)
    if not updated:
        state = portfolio_service.record_current_snapshot(state)
    await portfolio_store.save(db, state)
    return SyncResponse(
        portfolio=state_to_response(state),
        mirrored=True,
        updated_prices=updated,
        remote_total_net_worth=result.total_net_worth,
    )


@router.post("/import", response_model=ImportResponse)
async def import_statement(req: ImportRequest, db: AsyncSession = Depends(get_db)):
    """Add the cash and stock holdings read from a statement image."""
    try:
        image = base64.b64decode(req.image_base64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="Invalid image data")

    records = await asyncio.to_thread(gemini_service.extract_assets, image, req.mime_type)
    if records is None:
        raise HTTPException(status_code=503, detail="Statement extractor unavailable")

    assets = sanitize_scanned_assets(records)
    symbols = list(
        dict.fromkeys(a.symbol for a in assets if a.category == AccountType.STOCK and a.symbol)
    )
    quotes = await asyncio.gather(
        *(asyncio.to_thread(gemini_service.estimate_price, s) for s in symbols)
    )
    prices = dict(zip(symbols, quotes))

    state = await portfolio_store.load(db)
    state = portfolio_service.import_scanned_assets(state, assets, prices)
    await portfolio_store.save(db, state)
    return ImportResponse(portfolio=state_to_response(state), imported=len(assets))
