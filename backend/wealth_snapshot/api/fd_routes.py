"""Fixed deposit API routes."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from wealth_snapshot.models.database import get_db
from wealth_snapshot.services.fixed_deposits import (
    TransitionResult,
    fd_engine,
    interest_between,
)
from wealth_snapshot.services.portfolio import portfolio_service
from wealth_snapshot.services.state import FixedDeposit, new_id
from wealth_snapshot.services.store import portfolio_store
from wealth_snapshot.api.portfolio_routes import fd_to_response, state_to_response
from wealth_snapshot.api.schemas import (
    FixedDepositCreateRequest,
    FixedDepositResponse,
    InterestPreviewRequest,
    InterestPreviewResponse,
    MaturityProposalResponse,
    PortfolioResponse,
    RolloverRequest,
    SettleRequest,
)

router = APIRouter(prefix="/api/fd", tags=["fixed-deposit"])

_REFUSALS = {
    "fd_not_found": (404, "Fixed deposit not found"),
    "account_not_found": (404, "Destination account not found"),
    "fd_not_matured": (400, "Fixed deposit has not matured yet"),
    "destination_not_cash": (400, "Destination must be a cash account"),
    "invalid_interest": (400, "Interest must be a non-negative amount"),
    "invalid_rate": (400, "Rate must be non-negative"),
    "invalid_term": (400, "Duration must be 1, 3, 6 or 12 months"),
}


def _raise_refused(result: TransitionResult):
    status_code, detail = _REFUSALS.get(result.reason, (400, "Transition not applicable"))
    raise HTTPException(status_code=status_code, detail=detail)


@router.get("", response_model=list[FixedDepositResponse])
async def list_fixed_deposits(db: AsyncSession = Depends(get_db)):
    state = await portfolio_store.load(db)
    fds = sorted(state.fixed_deposits, key=lambda fd: fd.maturity_date)
    return [fd_to_response(fd) for fd in fds]


@router.post("", response_model=FixedDepositResponse)
async def create_fixed_deposit(
    req: FixedDepositCreateRequest, db: AsyncSession = Depends(get_db)
):
    fd = FixedDeposit(
        id=new_id(),
        principal=req.principal,
        currency=req.currency.value,
        interest_rate=req.interest_rate,
        maturity_date=req.maturity_date,
        bank_name=req.bank_name,
        action_on_maturity=req.action_on_maturity,
        auto_roll=req.auto_roll,
    )
    state = await portfolio_store.load(db)
    state = portfolio_service.add_fixed_deposit(state, fd)
    await portfolio_store.save(db, state)
    return fd_to_response(fd)


# Static path routes MUST come before parameterized /{fd_id} routes


@router.post("/preview", response_model=InterestPreviewResponse)
async def preview_interest(req: InterestPreviewRequest):
    """Live interest estimate for a deposit being set up."""
    estimate = interest_between(
        req.principal, req.interest_rate, req.start_date, req.maturity_date
    )
    return InterestPreviewResponse(**asdict(estimate))


@router.delete("/{fd_id}")
async def delete_fixed_deposit(fd_id: str, db: AsyncSession = Depends(get_db)):
    state = await portfolio_store.load(db)
    result = portfolio_service.remove_fixed_deposit(state, fd_id)
    if not result.applied:
        _raise_refused(result)
    await portfolio_store.save(db, result.state)
    return {"status": "ok"}


@router.get("/{fd_id}/proposal", response_model=MaturityProposalResponse)
async def get_maturity_proposal(fd_id: str, db: AsyncSession = Depends(get_db)):
    """Pre-filled interest, rate and destination for the rollover/settle dialogs."""
    state = await portfolio_store.load(db)
    proposal = fd_engine.propose(state, fd_id)
    if proposal is None:
        raise HTTPException(status_code=404, detail="Fixed deposit not found")
    return MaturityProposalResponse(**asdict(proposal))


@router.post("/{fd_id}/rollover", response_model=PortfolioResponse)
async def rollover_fixed_deposit(
    fd_id: str, req: RolloverRequest, db: AsyncSession = Depends(get_db)
):
    state = await portfolio_store.load(db)
    result = fd_engine.rollover(
        state, fd_id, req.confirmed_interest, req.new_rate, req.duration_months
    )
    if not result.applied:
        _raise_refused(result)
    await portfolio_store.save(db, result.state)
    return state_to_response(result.state)


@router.post("/{fd_id}/settle", response_model=PortfolioResponse)
async def settle_fixed_deposit(
    fd_id: str, req: SettleRequest, db: AsyncSession = Depends(get_db)
):
    state = await portfolio_store.load(db)
    result = fd_engine.settle(
        state, fd_id, req.destination_account_id, req.confirmed_interest
    )
    if not result.applied:
        _raise_refused(result)
    await portfolio_store.save(db, result.state)
    return state_to_response(result.state)
