"""Server-side charge computation.

`compute_charge` is what a trusted backend calls to decide how much to
charge: it recomputes from the registration's persisted fee selector and the
authoritative pricing configuration, never from a client-supplied amount.
"""

from __future__ import annotations

import math
from typing import Any, Optional

import structlog

from confcalc.config import get_config
from confcalc.models import (
    ChargeAmount,
    Conference,
    PricingConfig,
    Registration,
    ResolvedPrice,
)
from confcalc.pricing.exceptions import TamperedAmount
from confcalc.pricing.resolver import resolve_price
from confcalc.pricing.tiers import resolve_tier
from confcalc.pricing.vat import breakdown_from_input, effective_vat_percentage, round_amount

logger = structlog.get_logger()


def pricing_currency(pricing: PricingConfig, requested: Optional[str] = None) -> str:
    """Currency to price in: explicit request, then config, then the app default."""
    if requested and requested.strip():
        return requested.strip().upper()
    return pricing.currency or get_config().pricing.default_currency


def pricing_vat_percentage(pricing: PricingConfig) -> Optional[float]:
    return effective_vat_percentage(
        pricing.vat_percentage, get_config().pricing.default_vat_percentage
    )


def resolve_fee(
    pricing: PricingConfig,
    fee_selector: str,
    now: Any,
    conference_start: Any = None,
    currency: Optional[str] = None,
) -> ResolvedPrice:
    """Resolve tier, net, VAT and gross for one fee selector.

    The same `pricing` snapshot feeds tier, price and VAT resolution.
    """
    code = pricing_currency(pricing, currency)
    tier = resolve_tier(pricing, now, conference_start)
    configured = resolve_price(pricing, fee_selector, tier, code)
    parts = breakdown_from_input(
        configured, pricing_vat_percentage(pricing), pricing.prices_include_vat
    )
    return ResolvedPrice(
        tier=tier,
        net_amount=round_amount(parts.without_vat),
        gross_amount=round_amount(parts.with_vat),
        vat_amount=round_amount(parts.vat_amount),
        currency=code,
    )


def compute_charge(
    registration: Registration,
    conference: Conference,
    now: Any,
) -> ChargeAmount:
    """Compute the gross amount to charge for a registration.

    Args:
        registration: Registration with its persisted fee selector
        conference: Conference with authoritative pricing and start date
        now: Instant the charge is computed for

    Returns:
        ChargeAmount with the gross amount rounded to cents
    """
    pricing = conference.pricing
    resolved = resolve_fee(
        pricing,
        registration.fee_selector,
        now,
        conference_start=conference.start_date,
    )
    logger.debug(
        "charge_computed",
        fee_selector=registration.fee_selector,
        tier=resolved.tier.value,
        amount=resolved.gross_amount,
        currency=resolved.currency,
    )
    return ChargeAmount(amount=resolved.gross_amount, currency=resolved.currency)


def verify_client_amount(
    client_amount: float,
    registration: Registration,
    conference: Conference,
    now: Any,
    epsilon: Optional[float] = None,
) -> ChargeAmount:
    """Check a client-displayed amount against the server computation.

    Returns:
        The server-computed charge, which is what must be charged

    Raises:
        TamperedAmount: If the amounts differ by more than `epsilon`
    """
    if epsilon is None:
        epsilon = get_config().pricing.tamper_epsilon

    charge = compute_charge(registration, conference, now)
    # Compared at cent precision; NaN and infinity never match
    if not math.isfinite(client_amount) or (
        round_amount(abs(round_amount(client_amount) - charge.amount)) > epsilon
    ):
        logger.warning(
            "charge_amount_mismatch",
            fee_selector=registration.fee_selector,
            client_amount=client_amount,
            server_amount=charge.amount,
            currency=charge.currency,
        )
        raise TamperedAmount(client_amount, charge.amount, charge.currency)
    return charge
