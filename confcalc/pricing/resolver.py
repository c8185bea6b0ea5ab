"""Fee selector parsing and net unit price resolution.

A fee selector is the tag persisted on a registration at signup:
`early_bird`, `regular`, `late`, `student`, `accompanying_person`,
`fee_type_<id>` or `custom_<id>`. Anything without a configured price
resolves to 0 with a warning rather than failing the registration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from confcalc.config import CurrencyFallback
from confcalc.models import PricingConfig, Tier
from confcalc.pricing.currency import Amount, PerCurrency, resolve_amount

logger = logging.getLogger(__name__)

FEE_TYPE_PREFIX = "fee_type_"
CUSTOM_FIELD_PREFIX = "custom_"


class SelectorKind(str, Enum):
    TIER = "tier"
    STUDENT = "student"
    ACCOMPANYING_PERSON = "accompanying_person"
    FEE_TYPE = "fee_type"
    CUSTOM_FIELD = "custom_field"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class FeeSelector:
    kind: SelectorKind
    ref: Optional[str] = None  # Tier value or custom fee / field id
    raw: str = ""


def parse_fee_selector(selector: str | None) -> FeeSelector:
    raw = (selector or "").strip()
    if raw in {tier.value for tier in Tier}:
        return FeeSelector(SelectorKind.TIER, raw, raw)
    if raw == "student":
        return FeeSelector(SelectorKind.STUDENT, raw=raw)
    if raw == "accompanying_person":
        return FeeSelector(SelectorKind.ACCOMPANYING_PERSON, raw=raw)
    if raw.startswith(FEE_TYPE_PREFIX) and len(raw) > len(FEE_TYPE_PREFIX):
        return FeeSelector(SelectorKind.FEE_TYPE, raw[len(FEE_TYPE_PREFIX):], raw)
    if raw.startswith(CUSTOM_FIELD_PREFIX) and len(raw) > len(CUSTOM_FIELD_PREFIX):
        return FeeSelector(SelectorKind.CUSTOM_FIELD, raw[len(CUSTOM_FIELD_PREFIX):], raw)
    return FeeSelector(SelectorKind.UNKNOWN, raw=raw)


def tier_amount(pricing: PricingConfig, tier: Tier) -> Amount | None:
    if tier is Tier.EARLY_BIRD:
        return pricing.early_bird.amount
    if tier is Tier.LATE:
        return pricing.late.amount
    return pricing.regular.amount


def student_price(
    pricing: PricingConfig,
    tier: Tier,
    currency: str,
    fallback: CurrencyFallback | None = None,
) -> float:
    """Student price: explicit override for the tier, else regular minus discount (floored at 0)."""
    if pricing.student is not None:
        override = pricing.student.for_tier(tier)
        if override is not None:
            return resolve_amount(override, currency, fallback)
    regular = resolve_amount(pricing.regular.amount, currency, fallback)
    discount = resolve_amount(pricing.student_discount, currency, fallback)
    return max(0.0, regular - discount)


def resolve_price(
    pricing: PricingConfig,
    fee_selector: str | FeeSelector,
    tier: Tier,
    currency: str,
    fallback: CurrencyFallback | None = None,
) -> float:
    """Resolve the unit price for a fee selector in the given tier.

    The returned amount is in the configuration's VAT polarity (net unless
    `prices_include_vat` is set).

    Returns:
        Configured amount, or 0 when nothing matches the selector
    """
    selector = (
        fee_selector if isinstance(fee_selector, FeeSelector) else parse_fee_selector(fee_selector)
    )

    if selector.kind is SelectorKind.TIER:
        amount = tier_amount(pricing, Tier(selector.ref))
        return _configured(selector, amount, f"no {selector.ref} amount", currency, fallback)

    if selector.kind is SelectorKind.STUDENT:
        return student_price(pricing, tier, currency, fallback)

    if selector.kind is SelectorKind.ACCOMPANYING_PERSON:
        return _configured(
            selector,
            pricing.accompanying_person_price,
            "no accompanying person price",
            currency,
            fallback,
        )

    if selector.kind is SelectorKind.FEE_TYPE:
        fee_type = pricing.fee_type(selector.ref)
        if fee_type is None:
            return _configuration_gap(selector, "no custom fee type with this id")
        missing = f"fee type has no {tier.value} price"
        return _configured(selector, fee_type.for_tier(tier), missing, currency, fallback)

    if selector.kind is SelectorKind.CUSTOM_FIELD:
        custom = pricing.custom_field(selector.ref)
        if custom is None:
            return _configuration_gap(selector, "no custom pricing field with this id")
        return _configured(
            selector, custom.value, "custom pricing field has no value", currency, fallback
        )

    return _configuration_gap(selector, "unrecognized fee selector")


def _configured(
    selector: FeeSelector,
    amount: Amount | None,
    missing: str,
    currency: str,
    fallback: CurrencyFallback | None,
) -> float:
    # Empty currency maps count as unset
    if amount is None or (isinstance(amount, PerCurrency) and not amount.entries):
        return _configuration_gap(selector, missing)
    return resolve_amount(amount, currency, fallback)


def _configuration_gap(selector: FeeSelector, reason: str) -> float:
    logger.warning("No price configured for fee selector '%s': %s", selector.raw, reason)
    return 0.0
