"""Background task scheduler for monthly snapshots and FD maturity checks."""

import logging
from datetime import date
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from wealth_snapshot.models.database import async_session_factory
from wealth_snapshot.services.fixed_deposits import (
    MaturityStatus,
    days_left,
    maturity_status,
)
from wealth_snapshot.services.history import period_key
from wealth_snapshot.services.portfolio import portfolio_service
from wealth_snapshot.services.store import portfolio_store

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


async def record_monthly_snapshot():
    """On the 1st of each month, file the current net worth under the new month."""
    try:
        today = date.today()
        key = period_key(today)
        async with async_session_factory() as session:
            state = await portfolio_store.load(session)
            state = portfolio_service.record_current_snapshot(state, today)
            await portfolio_store.save(session, state)
            # An existing entry for the month is replaced in place, not moved to the end
            recorded = next(p for p in state.history if p.date == key)
            logger.info(f"Recorded snapshot {recorded.date}: {recorded.total_value_hkd}")
    except Exception as e:
        logger.error(f"Failed to record monthly snapshot: {e}")


async def check_fd_maturities() -> dict[str, list[str]]:
    """Log deposits that have matured or mature within the urgent window."""
    flagged: dict[str, list[str]] = {"matured": [], "urgent": []}
    try:
        async with async_session_factory() as session:
            state = await portfolio_store.load(session)
        today = date.today()
        for fd in state.fixed_deposits:
            status = maturity_status(fd.maturity_date, today)
            if status == MaturityStatus.MATURED:
                flagged["matured"].append(fd.id)
                logger.info(f"FD {fd.id} ({fd.bank_name}) has matured, awaiting rollover or settlement")
            elif status == MaturityStatus.URGENT:
                flagged["urgent"].append(fd.id)
                logger.info(
                    f"FD {fd.id} ({fd.bank_name}) matures in {days_left(fd.maturity_date, today)} days"
                )
    except Exception as e:
        logger.error(f"Failed to check FD maturities: {e}")
    return flagged


def start_scheduler():
    """Start the background scheduler."""
    scheduler.add_job(
        record_monthly_snapshot,
        trigger=CronTrigger(day=1, hour=0, minute=5),
        id="record_monthly_snapshot",
        replace_existing=True,
    )
    scheduler.add_job(
        check_fd_maturities,
        trigger=CronTrigger(hour=9, minute=0),
        id="check_fd_maturities",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduler started")


def stop_scheduler():
    """Stop the background scheduler."""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
