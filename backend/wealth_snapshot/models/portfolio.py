"""Persisted portfolio layout: accounts, fixed deposits, history and settings."""

from sqlalchemy import Boolean, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from wealth_snapshot.models.database import Base


class AccountRecord(Base):
    __tablename__ = "account"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    position: Mapped[int] = mapped_column(Integer)
    type: Mapped[str] = mapped_column(String(10))  # "Cash" | "Stock"
    currency: Mapped[str] = mapped_column(String(3))
    balance: Mapped[float] = mapped_column(Float, default=0.0)
    quantity: Mapped[float | None] = mapped_column(Float, nullable=True)
    last_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    symbol: Mapped[str] = mapped_column(String(20), default="")
    name: Mapped[str] = mapped_column(String(100), default="")


class FixedDepositRecord(Base):
    __tablename__ = "fixed_deposit"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    position: Mapped[int] = mapped_column(Integer)
    bank_name: Mapped[str] = mapped_column(String(100), default="")
    principal: Mapped[float] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(3))
    interest_rate: Mapped[float] = mapped_column(Float)
    maturity_date: Mapped[str] = mapped_column(String(10))  # "YYYY-MM-DD"
    action_on_maturity: Mapped[str] = mapped_column(String(20), default="Renew")
    auto_roll: Mapped[bool] = mapped_column(Boolean, default=False)


class HistoryRecord(Base):
    __tablename__ = "history_point"

    date: Mapped[str] = mapped_column(String(7), primary_key=True)  # "YYYY-MM"
    position: Mapped[int] = mapped_column(Integer)
    total_value_hkd: Mapped[int] = mapped_column(Integer)


class PortfolioMeta(Base):
    __tablename__ = "portfolio_meta"

    id: Mapped[int] = mapped_column(primary_key=True)
    wealth_goal: Mapped[float] = mapped_column(Float)
    last_updated: Mapped[str | None] = mapped_column(String(30), nullable=True)
