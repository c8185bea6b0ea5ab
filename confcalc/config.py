"""confcalc configuration management.

Loads configuration from environment variables with sensible defaults.
Follows EU locale defaults (EUR currency, explicit VAT polarity).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


class CurrencyFallback(str, Enum):
    """What to do when a per-currency price map lacks the requested currency."""

    FIRST_ENTRY = "first"  # Use the first entry in insertion order
    STRICT = "strict"  # Raise ConfigurationGap


@dataclass
class PricingEngineConfig:
    """Pricing engine defaults and tolerances."""

    default_currency: str = "EUR"
    currency_fallback: CurrencyFallback = CurrencyFallback.FIRST_ENTRY
    tamper_epsilon: float = 0.01  # Max allowed client/server drift, currency units
    default_vat_percentage: float | None = None  # Account-level VAT fallback


@dataclass
class AppConfig:
    """Root application configuration."""

    log_level: str = "INFO"
    log_format: str = "text"  # json or text
    pricing: PricingEngineConfig = field(default_factory=PricingEngineConfig)

    @classmethod
    def from_env(cls) -> AppConfig:
        """Load configuration from environment variables.

        Optional (with defaults):
        - LOG_LEVEL: Logging verbosity (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")
        - DEFAULT_CURRENCY: Currency when pricing config has none (default: "EUR")
        - CURRENCY_FALLBACK: "first" or "strict" (default: "first")
        - TAMPER_EPSILON: Accepted client amount drift (default: "0.01")
        - DEFAULT_VAT_PERCENTAGE: Account default VAT, 0 <= x < 100 (default: unset)

        Raises:
            ValueError: If a value cannot be parsed or is out of range
        """
        fallback_raw = os.getenv("CURRENCY_FALLBACK", "first").strip().lower()
        try:
            currency_fallback = CurrencyFallback(fallback_raw)
        except ValueError:
            raise ValueError(
                f"CURRENCY_FALLBACK must be 'first' or 'strict', got '{fallback_raw}'"
            ) from None

        tamper_epsilon = float(os.getenv("TAMPER_EPSILON", "0.01"))
        if tamper_epsilon < 0:
            raise ValueError("TAMPER_EPSILON must be non-negative")

        default_vat: float | None = None
        default_vat_raw = os.getenv("DEFAULT_VAT_PERCENTAGE")
        if default_vat_raw:
            default_vat = float(default_vat_raw)
            if not 0 <= default_vat < 100:
                raise ValueError("DEFAULT_VAT_PERCENTAGE must be in [0, 100)")

        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "text"),
            pricing=PricingEngineConfig(
                default_currency=os.getenv("DEFAULT_CURRENCY", "EUR").strip().upper(),
                currency_fallback=currency_fallback,
                tamper_epsilon=tamper_epsilon,
                default_vat_percentage=default_vat,
            ),
        )


# Singleton instance (lazy-loaded)
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or create singleton AppConfig instance from environment.

    Returns:
        AppConfig: Application configuration
    """
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() re-reads the environment."""
    global _config
    _config = None
