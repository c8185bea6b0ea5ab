"""VAT arithmetic: net/gross conversion and margin-scheme tax.

All functions are pure. Intermediate values keep full float precision;
`round_amount` is applied once, at the output boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

# Margin-scheme VAT rate (jurisdiction constant, percent)
MARGIN_VAT_RATE = 20

_CENT = Decimal("0.01")


@dataclass(frozen=True)
class PriceBreakdown:
    without_vat: float
    with_vat: float
    vat_amount: float
    vat_percentage: Optional[float] = None


@dataclass(frozen=True)
class MarginVat:
    margin: float
    vat_rate: int
    vat_amount: float


def with_vat(net: float, vat_percentage: float) -> float:
    return net * (1 + vat_percentage / 100)


def without_vat(gross: float, vat_percentage: float) -> float:
    return gross / (1 + vat_percentage / 100)


def vat_amount(net: float, vat_percentage: float) -> float:
    return net * vat_percentage / 100


def breakdown(net: float, vat_percentage: Optional[float] = None) -> PriceBreakdown:
    """Split a net amount into net, gross and VAT.

    With no VAT (None or 0) every amount equals the input and VAT is 0.
    """
    if not vat_percentage:
        return PriceBreakdown(
            without_vat=net, with_vat=net, vat_amount=0.0, vat_percentage=vat_percentage
        )
    return PriceBreakdown(
        without_vat=net,
        with_vat=with_vat(net, vat_percentage),
        vat_amount=vat_amount(net, vat_percentage),
        vat_percentage=vat_percentage,
    )


def breakdown_from_input(
    amount: float, vat_percentage: Optional[float], amount_is_gross: bool
) -> PriceBreakdown:
    """Breakdown for an amount entered as gross or net.

    For gross input the net is derived by division and VAT is taken as
    gross - net, so net + VAT always adds back up to the entered gross.
    """
    if not amount_is_gross or not vat_percentage:
        return breakdown(amount, vat_percentage)
    net = without_vat(amount, vat_percentage)
    return PriceBreakdown(
        without_vat=net,
        with_vat=amount,
        vat_amount=amount - net,
        vat_percentage=vat_percentage,
    )


def margin_vat(selling_gross: float, cost_gross: float) -> MarginVat:
    """VAT due on the margin (selling minus cost) for agency/reseller sales.

    Used by invoicing and reporting only; registration charges never go
    through the margin scheme.
    """
    margin = max(0.0, selling_gross - cost_gross)
    return MarginVat(
        margin=margin,
        vat_rate=MARGIN_VAT_RATE,
        vat_amount=margin * MARGIN_VAT_RATE / 100,
    )


def effective_vat_percentage(
    conference_vat: Optional[float], default_vat: Optional[float]
) -> Optional[float]:
    """Conference VAT wins; otherwise the account default; otherwise None."""
    if conference_vat is not None:
        return conference_vat
    if default_vat is not None:
        return default_vat
    return None


def round_amount(value: float) -> float:
    """Round to cents, half-up, for presentation and charging."""
    return float(Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP))
