"""Pricing engine error taxonomy."""

from __future__ import annotations


class PricingError(Exception):
    """Base class for pricing engine errors."""


class ConfigurationGap(PricingError):
    """Requested price has no matching pricing configuration entry.

    The resolver normally degrades to 0 and logs a warning instead of raising;
    this is only raised under the strict currency fallback policy.
    """


class InvalidVatPercentage(PricingError, ValueError):
    """VAT percentage outside [0, 100)."""

    def __init__(self, value: float):
        self.value = value
        super().__init__(f"vat_percentage must be in [0, 100), got {value}")


class TamperedAmount(PricingError):
    """Client-supplied amount disagrees with the server-computed charge."""

    def __init__(self, client_amount: float, server_amount: float, currency: str):
        self.client_amount = client_amount
        self.server_amount = server_amount
        self.currency = currency
        super().__init__(
            "Pricing has changed, please retry "
            f"(submitted {client_amount} {currency}, expected {server_amount} {currency})"
        )


class ConfigurationError(PricingError):
    """Pricing configuration file is invalid or missing."""
