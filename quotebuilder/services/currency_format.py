"""Display formatting for quote amounts."""
from __future__ import annotations

import logging
import math
from typing import Dict, Tuple

from PyQt5.QtCore import QLocale

logger = logging.getLogger(__name__)

# currency code -> (locale name, symbol)
CURRENCY_LOCALES: Dict[str, Tuple[str, str]] = {
    "INR": ("en_IN", "₹"),
    "USD": ("en_US", "$"),
    "EUR": ("de_DE", "€"),
    "GBP": ("en_GB", "£"),
    "JPY": ("ja_JP", "¥"),
    "AUD": ("en_AU", "A$"),
    "CAD": ("en_CA", "CA$"),
    "SGD": ("en_SG", "S$"),
    "AED": ("ar_AE", "AED"),
}


def fallback_currency(amount: float, currency_code: str) -> str:
    """Deterministic rendering used when locale formatting is unavailable."""
    return f"{amount:.2f} {currency_code}"


def format_currency(amount: float, currency_code: str = "INR") -> str:
    """Render ``amount`` for display in ``currency_code``.

    Known codes are formatted through the matching Qt locale; anything else
    falls back to ``"<amount to 2 decimals> <code>"``.
    """
    code = (currency_code or "").strip().upper()
    amount = float(amount)
    entry = CURRENCY_LOCALES.get(code)
    if entry is None or not math.isfinite(amount):
        return fallback_currency(amount, currency_code)

    locale_name, symbol = entry
    locale = QLocale(locale_name)
    if locale.language() == QLocale.C:
        return fallback_currency(amount, currency_code)
    try:
        text = locale.toCurrencyString(amount, symbol, 2)
    except (TypeError, RuntimeError) as exc:
        logger.debug("Locale currency formatting failed for %s: %s", code, exc)
        return fallback_currency(amount, currency_code)
    return text or fallback_currency(amount, currency_code)


def format_quantity(quantity: float) -> str:
    """Whole quantities without decimals, fractional ones to two places."""
    if math.isfinite(quantity) and float(quantity).is_integer():
        return f"{quantity:.0f}"
    return f"{quantity:.2f}"


def format_percent(value: float) -> str:
    return f"{value:.0f}%"
