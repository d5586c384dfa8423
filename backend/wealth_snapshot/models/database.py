"""Database engine, sessions and first-run setup for the portfolio store."""

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from wealth_snapshot.config import DATABASE_URL, DEFAULT_WEALTH_GOAL

# Primary key of the single settings row (wealth goal, last update time)
SETTINGS_ROW_ID = 1


class Base(DeclarativeBase):
    pass


engine = create_async_engine(DATABASE_URL, echo=False)
async_session_factory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def get_db() -> AsyncSession:
    """Request-scoped session; each portfolio request loads and saves through it."""
    async with async_session_factory() as session:
        yield session


async def init_db():
    """Create the portfolio tables and seed the settings row with the default goal."""
    from wealth_snapshot.models.portfolio import PortfolioMeta

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        if await session.get(PortfolioMeta, SETTINGS_ROW_ID) is None:
            session.add(
                PortfolioMeta(
                    id=SETTINGS_ROW_ID,
                    wealth_goal=DEFAULT_WEALTH_GOAL,
                    last_updated=None,
                )
            )
            await session.commit()
