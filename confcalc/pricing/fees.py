"""Fixed-price registration fees with validity windows and capacity.

These sit next to the tiered pricing: each fee is one price, one inclusive
date window and an optional seat limit. Unavailable fees are still listed
on the form, disabled with a reason.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, timezone
from typing import Any, Optional

from confcalc.models import (
    FeeUnavailableReason,
    RegistrationFee,
    RegistrationFeeOption,
    to_instant,
)
from confcalc.pricing.vat import breakdown_from_input, round_amount


def is_fee_sold_out(capacity: Optional[int], sold_count: int) -> bool:
    if capacity is None or capacity <= 0:
        return False
    return sold_count >= capacity


def _as_of_date(as_of: Any) -> date:
    return to_instant(as_of).astimezone(timezone.utc).date()


def is_fee_in_validity_window(valid_from: date, valid_to: date, as_of: Any) -> bool:
    """Whether the UTC calendar date of `as_of` is within [valid_from, valid_to]."""
    day = _as_of_date(as_of)
    return valid_from <= day <= valid_to


def fee_unavailable_reason(
    fee: RegistrationFee, sold_count: int, as_of: Any
) -> FeeUnavailableReason:
    """Why a fee cannot be selected; checks run in display priority order."""
    if not fee.is_active:
        return FeeUnavailableReason.INACTIVE
    day = _as_of_date(as_of)
    if day < fee.valid_from:
        return FeeUnavailableReason.NOT_AVAILABLE_YET
    if day > fee.valid_to:
        return FeeUnavailableReason.EXPIRED
    if is_fee_sold_out(fee.capacity, sold_count):
        return FeeUnavailableReason.SOLD_OUT
    return FeeUnavailableReason.INACTIVE


def build_fee_options(
    fees: Iterable[RegistrationFee],
    sold_counts: Mapping[str, int],
    as_of: Any,
) -> list[RegistrationFeeOption]:
    """All fees as form options, ordered by display_order."""
    options: list[RegistrationFeeOption] = []
    for fee in sorted(fees, key=lambda f: f.display_order):
        sold = sold_counts.get(fee.id, 0)
        available = (
            fee.is_active
            and is_fee_in_validity_window(fee.valid_from, fee.valid_to, as_of)
            and not is_fee_sold_out(fee.capacity, sold)
        )
        options.append(
            RegistrationFeeOption(
                id=fee.id,
                name=fee.name,
                price_gross=fee.price_gross,
                currency=fee.currency,
                is_available=available,
                disabled_reason=None if available else fee_unavailable_reason(fee, sold, as_of),
                sold_count=sold,
                capacity=fee.capacity,
            )
        )
    return options


def price_registration_fee(
    amount: float, vat_percentage: Optional[float], prices_include_vat: bool
) -> tuple[float, float]:
    """Net and gross price for an admin-entered fee amount.

    Returns:
        (price_net, price_gross), each rounded to cents
    """
    parts = breakdown_from_input(amount, vat_percentage, prices_include_vat)
    return round_amount(parts.without_vat), round_amount(parts.with_vat)
