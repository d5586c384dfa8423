"""Best-effort mirror of holdings to a spreadsheet webhook.

The webhook receives the current holdings and may answer with refreshed
prices keyed by symbol plus its own net-worth figure:

    {"status": "Success", "latestPrices": {"AAPL": 190.1}, "totalNetWorth": 1234567}
"""

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable

import httpx

from wealth_snapshot.config import LEDGER_MIRROR_TIMEOUT, LEDGER_MIRROR_URL
from wealth_snapshot.services.state import Account, AccountType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MirrorResult:
    latest_prices: dict[str, float] = field(default_factory=dict)
    total_net_worth: float | None = None


def _valid_price(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value >= 0
    )


class LedgerMirrorService:
    """Pushes holdings to the remote ledger and reads back its prices."""

    def __init__(self, url: str = LEDGER_MIRROR_URL, timeout: float = LEDGER_MIRROR_TIMEOUT):
        self.url = url
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def build_payload(self, accounts: Iterable[Account]) -> dict[str, Any]:
        assets = []
        for acc in accounts:
            is_stock = acc.type == AccountType.STOCK
            assets.append(
                {
                    "category": "STOCK" if is_stock else "CASH",
                    "institution": acc.name,
                    "symbol": acc.symbol or "",
                    "amount": (acc.quantity or 0) if is_stock else acc.balance,
                    "currency": acc.currency,
                }
            )
        return {"assets": assets}

    def push(self, accounts: Iterable[Account]) -> MirrorResult | None:
        """Send the holdings snapshot; None when disabled or on any failure."""
        if not self.enabled:
            return None
        try:
            # Apps Script webhooks only accept simple text/plain bodies
            resp = httpx.post(
                self.url,
                content=json.dumps(self.build_payload(accounts)),
                headers={"Content-Type": "text/plain"},
                timeout=self.timeout,
                follow_redirects=True,
            )
            data = resp.json()
        except Exception as e:
            logger.error(f"Ledger mirror sync failed: {e}")
            return None

        if not isinstance(data, dict) or data.get("status") != "Success":
            message = data.get("message") if isinstance(data, dict) else data
            logger.warning(f"Ledger mirror rejected sync: {message}")
            return None

        raw_prices = data.get("latestPrices") or {}
        prices = {}
        if isinstance(raw_prices, dict):
            prices = {
                str(symbol): float(price)
                for symbol, price in raw_prices.items()
                if _valid_price(price)
            }
        total = data.get("totalNetWorth")
        return MirrorResult(
            latest_prices=prices,
            total_net_worth=float(total) if _valid_price(total) else None,
        )


# Global instance
ledger_mirror_service = LedgerMirrorService()
