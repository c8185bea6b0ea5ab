"""Fixed-or-per-currency amount fields.

Every amount in a pricing configuration is either a single number or a map
of currency code to number (independent price lists, no FX conversion).
Both shapes are coerced into an explicit tagged union on load and resolved
through `resolve_amount`.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from confcalc.config import CurrencyFallback, get_config
from confcalc.pricing.exceptions import ConfigurationGap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fixed:
    """Single amount valid for every currency."""

    value: float


@dataclass(frozen=True)
class PerCurrency:
    """Per-currency amounts; dict insertion order is preserved."""

    entries: dict[str, float] = field(default_factory=dict)

    def first(self) -> float | None:
        for value in self.entries.values():
            return value
        return None


Amount = Union[Fixed, PerCurrency]


def to_amount(value: Any) -> Amount | None:
    """Coerce a raw settings value (number, map, or Amount) into an Amount.

    Raises:
        ValueError: On negative amounts or unsupported shapes
    """
    if value is None or isinstance(value, (Fixed, PerCurrency)):
        return value
    if isinstance(value, bool):
        raise ValueError("amount must be a number or a currency map, got bool")
    if isinstance(value, (int, float)):
        return Fixed(_non_negative(float(value), "amount"))
    if isinstance(value, Mapping):
        entries: dict[str, float] = {}
        for code, raw in value.items():
            currency = _normalize_currency(code)
            if currency is None:
                raise ValueError("currency code in amount map must not be empty")
            if isinstance(raw, bool) or not isinstance(raw, (int, float)):
                raise ValueError(f"amount for {currency} must be a number")
            entries[currency] = _non_negative(float(raw), f"amount for {currency}")
        return PerCurrency(entries)
    raise ValueError(f"amount must be a number or a currency map, got {type(value).__name__}")


def resolve_amount(
    amount: Amount | None,
    currency: str,
    fallback: CurrencyFallback | None = None,
) -> float:
    """Resolve an amount field to a number for the requested currency.

    Args:
        amount: Fixed or PerCurrency value (None means "not configured")
        currency: Requested ISO currency code
        fallback: Policy when a PerCurrency map lacks `currency`
                  (defaults to the configured policy)

    Returns:
        Resolved amount; 0 for missing fields and empty maps

    Raises:
        ConfigurationGap: Under the strict policy when the currency is absent
    """
    if amount is None:
        return 0.0
    if isinstance(amount, Fixed):
        return amount.value

    code = _normalize_currency(currency)
    if code in amount.entries:
        return amount.entries[code]

    if fallback is None:
        fallback = get_config().pricing.currency_fallback
    if fallback is CurrencyFallback.STRICT:
        raise ConfigurationGap(
            f"No price for currency '{code}' (configured: {', '.join(amount.entries) or 'none'})"
        )

    first = amount.first()
    if first is None:
        return 0.0
    logger.debug("Currency %s not in price map, using first entry %s", code, first)
    return first


def _normalize_currency(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text.upper() if text else None


def _non_negative(value: float, label: str) -> float:
    if not math.isfinite(value):
        raise ValueError(f"{label} must be a finite number")
    if value < 0:
        raise ValueError(f"{label} must be non-negative")
    return value
