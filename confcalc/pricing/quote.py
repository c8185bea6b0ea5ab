"""Current standard prices for the registration page."""

from __future__ import annotations

from typing import Any, Optional

from confcalc.models import CurrentPricing, PricingConfig, Tier
from confcalc.pricing.charge import pricing_currency
from confcalc.pricing.currency import resolve_amount
from confcalc.pricing.resolver import tier_amount
from confcalc.pricing.tiers import next_tier_change, resolve_tier


def current_pricing(
    pricing: PricingConfig,
    now: Any,
    conference_start: Any = None,
    currency: Optional[str] = None,
) -> CurrentPricing:
    """Participant, student and accompanying-person prices for the active tier.

    Amounts are in the configuration's VAT polarity. The student discount
    applies to the active tier's participant price here; an explicit student
    table overrides it.
    """
    code = pricing_currency(pricing, currency)
    tier = resolve_tier(pricing, now, conference_start)

    participant = resolve_amount(tier_amount(pricing, tier), code)
    accompanying = resolve_amount(pricing.accompanying_person_price, code)
    student = _student_price(pricing, tier, participant, code)

    next_tier, next_tier_date = next_tier_change(pricing, tier)
    return CurrentPricing(
        tier=tier,
        participant_price=participant,
        student_price=student,
        accompanying_person_price=accompanying,
        currency=code,
        deadline=pricing.early_bird.deadline if tier is Tier.EARLY_BIRD else None,
        next_tier=next_tier,
        next_tier_date=next_tier_date,
    )


def _student_price(pricing: PricingConfig, tier: Tier, participant: float, currency: str) -> float:
    if pricing.student is not None:
        override = pricing.student.for_tier(tier)
        if override is not None:
            return resolve_amount(override, currency)
    discount = resolve_amount(pricing.student_discount, currency)
    if participant > 0 and discount:
        return max(0.0, participant - discount)
    return 0.0
