"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from wealth_snapshot.models.database import init_db
from wealth_snapshot.api.fd_routes import router as fd_router
from wealth_snapshot.api.insights import router as insights_router
from wealth_snapshot.api.portfolio_routes import router as portfolio_router
from wealth_snapshot.tasks.scheduler import start_scheduler, stop_scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(title="Wealth Snapshot", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(portfolio_router)
app.include_router(fd_router)
app.include_router(insights_router)


@app.get("/api/health")
async def health_check():
    return {"status": "ok"}
