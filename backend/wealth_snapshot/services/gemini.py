"""AI price oracle and statement extractor backed by the Gemini REST API."""

import base64
import json
import logging
import math
from typing import Any

import httpx

from wealth_snapshot.config import (
    AI_BASE_DELAY,
    AI_MAX_ATTEMPTS,
    GEMINI_API_KEY,
    GEMINI_API_URL,
    GEMINI_MODEL,
)
from wealth_snapshot.services.cache import PriceCache, price_cache
from wealth_snapshot.services.retry import retry_with_backoff

logger = logging.getLogger(__name__)

PRICE_PROMPT = """What is the approximate current stock price of {symbol}?
Return ONLY a JSON object with a single key "price" containing the number.
Example: {{"price": 340.5}}.
If unsure, give a reasonable realistic estimate based on recent history."""

STATEMENT_PROMPT = """Analyze this financial statement image. Extract asset details into a JSON list.
Identify bank accounts (CASH) and stock positions (STOCK).

Return JSON format:
[
  {
    "category": "CASH" | "STOCK",
    "institution": "Bank Name or Broker Name",
    "symbol": "Ticker symbol if stock (e.g. AAPL, 0700.HK)",
    "amount": number,
    "currency": "HKD" | "USD" | "AUD"
  }
]

Rules:
1. For STOCK, 'amount' must be the QUANTITY/SHARES held, NOT the value.
2. For CASH, 'amount' is the BALANCE.
3. If currency is not explicit, infer from the bank context (e.g. HSBC HK -> HKD)."""


class GeminiService:
    """Asks a Gemini model for price estimates and statement extraction.

    Both calls return None when the model is unavailable or answers with
    something unusable; callers substitute their own defaults.
    """

    def __init__(
        self,
        api_key: str = GEMINI_API_KEY,
        model: str = GEMINI_MODEL,
        api_url: str = GEMINI_API_URL,
        max_attempts: int = AI_MAX_ATTEMPTS,
        base_delay: float = AI_BASE_DELAY,
        cache: PriceCache | None = None,
    ):
        self._api_key = api_key
        self._model = model
        self._api_url = api_url
        self._cache = cache if cache is not None else price_cache
        self._generate = retry_with_backoff(max_attempts, base_delay)(self._generate_once)

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def _generate_once(self, parts: list[dict[str, Any]]) -> str:
        resp = httpx.post(
            f"{self._api_url}/{self._model}:generateContent",
            params={"key": self._api_key},
            json={
                "contents": [{"parts": parts}],
                "generationConfig": {"responseMimeType": "application/json"},
            },
            timeout=30,
        )
        resp.raise_for_status()
        data = resp.json()
        return data["candidates"][0]["content"]["parts"][0]["text"]

    def estimate_price(self, symbol: str) -> float | None:
        """Approximate unit price for ``symbol``, or None if unavailable."""
        if not self.enabled or not symbol:
            return None

        cached = self._cache.get(symbol)
        if cached is not None:
            return cached

        try:
            text = self._generate([{"text": PRICE_PROMPT.format(symbol=symbol)}])
            price = json.loads(text).get("price")
        except Exception as e:
            logger.error(f"Failed to estimate price for {symbol}: {e}")
            return None

        if isinstance(price, bool) or not isinstance(price, (int, float)):
            return None
        if not math.isfinite(price) or price < 0:
            return None

        self._cache.set(symbol, float(price))
        return float(price)

    def extract_assets(
        self, image: bytes, mime_type: str = "image/jpeg"
    ) -> list[dict[str, Any]] | None:
        """Raw asset records read from a statement image (unvalidated)."""
        if not self.enabled:
            return None
        try:
            text = self._generate(
                [
                    {
                        "inlineData": {
                            "mimeType": mime_type,
                            "data": base64.b64encode(image).decode("ascii"),
                        }
                    },
                    {"text": STATEMENT_PROMPT},
                ]
            )
            records = json.loads(text)
        except Exception as e:
            logger.error(f"Failed to parse financial statement: {e}")
            return None

        if not isinstance(records, list):
            logger.warning("Statement extraction returned a non-list payload")
            return None
        return records


# Global instance
gemini_service = GeminiService()
