"""In-memory TTL cache for estimated stock prices."""

import time
import threading

from wealth_snapshot.config import PRICE_CACHE_TTL


class PriceCache:
    """Thread-safe symbol -> price cache; entries expire after a TTL."""

    def __init__(self, ttl: int = PRICE_CACHE_TTL):
        self._prices: dict[str, tuple[float, float]] = {}
        self._ttl = ttl
        self._lock = threading.Lock()

    @staticmethod
    def _key(symbol: str) -> str:
        return symbol.strip().upper()

    def get(self, symbol: str) -> float | None:
        key = self._key(symbol)
        with self._lock:
            entry = self._prices.get(key)
            if entry is None:
                return None
            price, expires_at = entry
            if time.time() > expires_at:
                del self._prices[key]
                return None
            return price

    def set(self, symbol: str, price: float) -> None:
        expires_at = time.time() + self._ttl
        with self._lock:
            self._prices[self._key(symbol)] = (price, expires_at)

    def clear(self) -> None:
        with self._lock:
            self._prices.clear()


# Global cache instance
price_cache = PriceCache()
