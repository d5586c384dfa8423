"""Insights API routes (charts and progress figures)."""

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wealth_snapshot.models.database import get_db
from wealth_snapshot.services import analytics
from wealth_snapshot.services.store import portfolio_store
from wealth_snapshot.api.schemas import (
    GoalProgressResponse,
    InsightsResponse,
    MaturityBucketResponse,
    PassiveIncomeResponse,
)

router = APIRouter(prefix="/api/insights", tags=["insights"])


@router.get("", response_model=InsightsResponse)
async def get_insights(db: AsyncSession = Depends(get_db)):
    state = await portfolio_store.load(db)

    buckets = analytics.maturity_map(state.fixed_deposits)
    top = analytics.highest_unlock(buckets)
    income = analytics.passive_income(state.accounts, state.fixed_deposits)

    return InsightsResponse(
        allocation=[
            asdict(s) for s in analytics.allocation(state.accounts, state.fixed_deposits)
        ],
        trend=analytics.trend(state.history),
        benchmark=[round(v, 2) for v in analytics.benchmark_series(state.history)],
        goal=GoalProgressResponse(
            **asdict(analytics.goal_progress(state.history, state.wealth_goal))
        ),
        maturity_map=[MaturityBucketResponse(**asdict(b)) for b in buckets],
        highest_unlock=MaturityBucketResponse(**asdict(top)) if top else None,
        passive_income=PassiveIncomeResponse(
            fd_monthly=round(income.fd_monthly, 2),
            dividend_monthly=round(income.dividend_monthly, 2),
            monthly=round(income.monthly, 2),
            annual=round(income.annual, 2),
        ),
    )
