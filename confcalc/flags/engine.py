"""Pricing configuration audit for confcalc.

The resolver never blocks a registration over missing prices; it charges 0
instead. These flags make such gaps visible to administrators before
registrants hit them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from confcalc.config import CurrencyFallback, get_config
from confcalc.models import Flag, FlagSeverity, PricingConfig, to_instant
from confcalc.pricing.currency import Amount, Fixed, PerCurrency, resolve_amount

# Shorthand severities
CRITICAL = FlagSeverity.CRITICAL
ADVISORY = FlagSeverity.ADVISORY


def compute_pricing_flags(pricing: PricingConfig, now: Any = None) -> list[Flag]:
    """Evaluate configuration flags for a conference's pricing.

    Args:
        pricing: Pricing configuration to audit
        now: Reference instant for date-dependent checks (skipped when None)

    Returns:
        List of Flag models (empty list if no issues detected)
    """
    flags: list[Flag] = []
    currency = pricing.currency or get_config().pricing.default_currency
    reference = to_instant(now) if now is not None else None

    def flag(flag_type: str, severity: FlagSeverity, message: str) -> None:
        flags.append(Flag(type=flag_type, severity=severity, message=message))

    if _is_missing(pricing.regular.amount):
        flag(
            "MissingRegularPrice",
            FlagSeverity.CRITICAL,
            "Regular price is not set; regular and student registrations resolve to 0",
        )

    if pricing.early_bird.deadline is not None and _is_missing(pricing.early_bird.amount):
        flag(
            "MissingEarlyBirdPrice",
            FlagSeverity.CRITICAL,
            "Early bird deadline is set but the early bird price is missing",
        )

    if pricing.late.start_date is not None and _is_missing(pricing.late.amount):
        flag(
            "MissingLatePrice",
            FlagSeverity.CRITICAL,
            "Late registration start is set but the late price is missing",
        )

    first = CurrencyFallback.FIRST_ENTRY
    regular = resolve_amount(pricing.regular.amount, currency, first)
    discount = resolve_amount(pricing.student_discount, currency, first)
    if discount and regular and discount >= regular:
        flag(
            "StudentDiscountExceedsPrice",
            FlagSeverity.ADVISORY,
            f"Student discount {discount:g} {currency} is not below the regular price "
            f"{regular:g} {currency}; students pay 0",
        )

    deadline = pricing.early_bird.deadline
    late_start = pricing.late.start_date
    if deadline is not None and late_start is not None and late_start <= deadline:
        flag(
            "LateBeforeEarlyBirdEnds",
            FlagSeverity.ADVISORY,
            f"Late pricing starts ({_fmt(late_start)}) before the early bird deadline "
            f"({_fmt(deadline)}); early bird wins while both apply",
        )

    end = pricing.regular.end_date
    if end is not None and late_start is None and (reference is None or reference > end):
        flag(
            "RegularWindowWithoutLate",
            FlagSeverity.ADVISORY,
            f"Regular pricing ends {_fmt(end)} but no late tier is configured; "
            "regular pricing stays in effect indefinitely",
        )

    for label, amount in _amount_fields(pricing):
        if isinstance(amount, PerCurrency) and amount.entries and currency not in amount.entries:
            flag(
                "CurrencyMissing",
                FlagSeverity.ADVISORY,
                f"{label} has no {currency} price; the first listed currency is used instead",
            )

    for fee_type in pricing.custom_fee_types:
        if all(
            _is_missing(value)
            for value in (fee_type.amount, fee_type.early_bird, fee_type.regular, fee_type.late)
        ):
            flag(
                "FeeTypeWithoutPrice",
                FlagSeverity.CRITICAL,
                f"Fee type '{fee_type.name or fee_type.id}' has no price configured",
            )

    return flags


def _is_missing(amount: Optional[Amount]) -> bool:
    if amount is None:
        return True
    if isinstance(amount, PerCurrency):
        return not amount.entries
    return False


def _amount_fields(pricing: PricingConfig) -> list[tuple[str, Optional[Amount]]]:
    fields: list[tuple[str, Optional[Amount]]] = [
        ("Early bird price", pricing.early_bird.amount),
        ("Regular price", pricing.regular.amount),
        ("Late price", pricing.late.amount),
        ("Student discount", pricing.student_discount),
        ("Accompanying person price", pricing.accompanying_person_price),
    ]
    for fee_type in pricing.custom_fee_types:
        name = fee_type.name or fee_type.id
        fields.append((f"Fee type '{name}'", fee_type.amount))
        for tier in ("early_bird", "regular", "late"):
            fields.append((f"Fee type '{name}' ({tier})", getattr(fee_type, tier)))
    for custom in pricing.custom_fields:
        fields.append((f"Custom field '{custom.name or custom.id}'", custom.value))
    return [(label, amount) for label, amount in fields if not isinstance(amount, Fixed)]


def _fmt(value: datetime) -> str:
    return value.astimezone(timezone.utc).date().isoformat()
