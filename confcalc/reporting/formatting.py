"""Price display helpers shared by the registration UI, emails and the CLI."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from confcalc.models import Tier

CURRENCY_SYMBOLS = {
    "EUR": "€",
    "USD": "$",
    "GBP": "£",
    "CHF": "CHF",
    "CAD": "C$",
    "AUD": "A$",
    "JPY": "¥",
    "CNY": "¥",
    "HRK": "kn",
}

# Symbols written before the number ($150); everything else goes after (150 €)
_PREFIX_SYMBOL_CURRENCIES = {"USD", "GBP", "CAD", "AUD", "JPY", "CNY"}

_TIER_DISPLAY_NAMES = {
    Tier.EARLY_BIRD: "Early Bird",
    Tier.REGULAR: "Regular",
    Tier.LATE: "Late Registration",
}


def get_currency_symbol(currency: str) -> str:
    """Symbol for a known currency code, otherwise the code itself."""
    code = (currency or "").strip().upper()
    return CURRENCY_SYMBOLS.get(code, code)


def format_price_without_zeros(amount: float) -> str:
    """Round to cents, then drop trailing zero decimals (450.50 -> "450.5")."""
    text = f"{Decimal(repr(float(amount))).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):f}"
    text = text.rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def format_price(amount: float, currency: str) -> str:
    """e.g. format_price(450, "EUR") -> "450 €"."""
    return f"{format_price_without_zeros(amount)} {get_currency_symbol(currency)}"


def format_price_with_symbol(amount: float, currency: str) -> str:
    """Place the symbol by currency convention: "$150", "£150", "150 €"."""
    code = (currency or "").strip().upper()
    value = format_price_without_zeros(amount)
    symbol = get_currency_symbol(code)
    if code in _PREFIX_SYMBOL_CURRENCIES:
        return f"{symbol}{value}"
    return f"{value} {symbol}"


def tier_display_name(tier: Tier | str) -> str:
    try:
        return _TIER_DISPLAY_NAMES[Tier(tier)]
    except ValueError:
        return "Standard"
