"""Validation of statement-extractor output.

Extracted records come from an AI vision model and are untrusted. Records
with an unknown category are dropped; bad amounts become 0 and unknown
currencies fall back to the base currency, so one bad field never rejects
the whole batch.
"""

from dataclasses import dataclass
from typing import Any

from wealth_snapshot.config import BASE_CURRENCY
from wealth_snapshot.services.currency import finite_or_zero
from wealth_snapshot.services.state import (
    Account,
    AccountType,
    Currency,
    make_cash,
    make_stock,
)

_CATEGORIES = {"CASH": AccountType.CASH, "STOCK": AccountType.STOCK}
_CURRENCIES = {c.value for c in Currency}


@dataclass(frozen=True)
class ScannedAsset:
    category: AccountType
    institution: str
    symbol: str
    amount: float  # balance for cash, share count for stock
    currency: str


def sanitize_scanned_assets(
    records: Any, base_currency: str = BASE_CURRENCY
) -> list[ScannedAsset]:
    if not isinstance(records, list):
        return []

    assets = []
    for record in records:
        if not isinstance(record, dict):
            continue
        category = _CATEGORIES.get(str(record.get("category", "")).strip().upper())
        if category is None:
            continue

        currency = str(record.get("currency") or "").strip().upper()
        if currency not in _CURRENCIES:
            currency = base_currency

        symbol = record.get("symbol")
        institution = record.get("institution")
        assets.append(
            ScannedAsset(
                category=category,
                institution=institution.strip() if isinstance(institution, str) else "",
                symbol=symbol.strip().upper() if isinstance(symbol, str) else "",
                amount=finite_or_zero(record.get("amount")),
                currency=currency,
            )
        )
    return assets


def scanned_to_account(asset: ScannedAsset, price: float | None = None) -> Account:
    """Build an account from a validated record; a missing price counts as 0."""
    if asset.category == AccountType.STOCK:
        return make_stock(
            symbol=asset.symbol,
            quantity=asset.amount,
            last_price=price,
            currency=asset.currency,
            name=asset.institution or asset.symbol,
        )
    return make_cash(
        name=asset.institution or "New Bank",
        balance=asset.amount,
        currency=asset.currency,
    )
