"""Currency normalization into the base reporting currency."""

import math
from typing import Any

from wealth_snapshot.config import FX_RATES


def round_half_up(value: float) -> int:
    """Round to the nearest whole currency unit, halves rounding up."""
    return int(math.floor(value + 0.5))


def finite_or_zero(value: Any, allow_negative: bool = False) -> float:
    """Coerce a numeric field to a usable float.

    Missing, non-numeric, NaN and infinite values become 0. Negative values
    also become 0 unless ``allow_negative`` is set.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    if number < 0 and not allow_negative:
        return 0.0
    return number


class CurrencyNormalizer:
    """Converts amounts into the base currency using a fixed rate table.

    Currencies missing from the table are passed through unconverted.
    """

    def __init__(self, rates: dict[str, float] | None = None):
        self._rates = dict(FX_RATES if rates is None else rates)

    @property
    def rates(self) -> dict[str, float]:
        return dict(self._rates)

    def to_base(self, amount: float, currency: str) -> float:
        rate = self._rates.get(currency)
        if rate is None:
            return amount
        return amount * rate

    def from_base(self, amount: float, currency: str) -> float:
        rate = self._rates.get(currency)
        if not rate:
            return amount
        return amount / rate

    def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        if from_currency == to_currency:
            return amount
        return self.from_base(self.to_base(amount, from_currency), to_currency)


# Global instance
currency_normalizer = CurrencyNormalizer()
