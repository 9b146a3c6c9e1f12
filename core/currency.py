# core/currency.py

from enum import Enum
from typing import Optional

from core.config import settings


class Currency(str, Enum):
    INR = "INR"
    USD = "USD"

    def __str__(self):
        return str(self.value)

    @property
    def symbol(self) -> str:
        return CURRENCY_SYMBOLS[self]


class Theme(str, Enum):
    light = "light"
    dark = "dark"
    system = "system"


CURRENCY_SYMBOLS = {
    Currency.INR: "₹",
    Currency.USD: "$",
}

DEFAULT_CURRENCY = Currency.INR
DEFAULT_THEME = Theme.system


def format_amount(amount: float, currency: Currency = DEFAULT_CURRENCY) -> str:
    """₹1,234.50 style: symbol, thousands separators, two decimals."""
    currency = Currency(currency)
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency.symbol}{abs(amount):,.2f}"


def convert(
    amount: float,
    source: Currency,
    target: Currency,
    rate: Optional[float] = None,
) -> float:
    """
    Convert between INR and USD with the fixed display rate
    (`rate` INR per USD). No rounding, so a round trip returns the input
    within float tolerance.
    """
    source, target = Currency(source), Currency(target)
    if source == target:
        return amount

    rate = rate or settings.INR_PER_USD
    if rate <= 0:
        raise ValueError("Conversion rate must be positive")

    if source == Currency.INR:
        return amount / rate
    return amount * rate
