"""Unit tests for VAT arithmetic.

Covers net/gross conversion, breakdowns for both input polarities and
margin-scheme VAT.
"""

from __future__ import annotations

import pytest

from confcalc.pricing.vat import (
    MARGIN_VAT_RATE,
    breakdown,
    breakdown_from_input,
    effective_vat_percentage,
    margin_vat,
    round_amount,
    vat_amount,
    with_vat,
    without_vat,
)


class TestConversion:
    def test_with_vat(self):
        assert with_vat(100, 25) == pytest.approx(125)

    def test_without_vat(self):
        assert without_vat(125, 25) == pytest.approx(100)

    def test_vat_amount(self):
        assert vat_amount(100, 25) == pytest.approx(25)

    def test_zero_vat_is_identity(self):
        assert with_vat(123.45, 0) == 123.45
        assert without_vat(123.45, 0) == 123.45

    @pytest.mark.parametrize("net", [0, 0.01, 99.99, 400, 1234.567])
    @pytest.mark.parametrize("vat_pct", [5, 13, 19, 22, 25, 99.9])
    def test_round_trip(self, net, vat_pct):
        assert without_vat(with_vat(net, vat_pct), vat_pct) == pytest.approx(net, abs=1e-9)


class TestBreakdown:
    def test_breakdown_with_vat(self):
        parts = breakdown(100, 25)
        assert parts.without_vat == 100
        assert parts.with_vat == pytest.approx(125)
        assert parts.vat_amount == pytest.approx(25)
        assert parts.vat_percentage == 25

    @pytest.mark.parametrize("vat_pct", [None, 0])
    def test_breakdown_without_vat_collapses(self, vat_pct):
        parts = breakdown(100, vat_pct)
        assert parts.without_vat == 100
        assert parts.with_vat == 100
        assert parts.vat_amount == 0

    def test_from_net_input(self):
        parts = breakdown_from_input(400, 25, amount_is_gross=False)
        assert parts.without_vat == 400
        assert parts.with_vat == pytest.approx(500)
        assert parts.vat_amount == pytest.approx(100)

    def test_from_gross_input(self):
        parts = breakdown_from_input(500, 25, amount_is_gross=True)
        assert parts.with_vat == 500
        assert parts.without_vat == pytest.approx(400)
        assert parts.vat_amount == pytest.approx(100)

    def test_gross_input_parts_add_up(self):
        parts = breakdown_from_input(99.99, 19, amount_is_gross=True)
        assert parts.without_vat + parts.vat_amount == pytest.approx(99.99, abs=1e-12)

    def test_gross_input_without_vat(self):
        parts = breakdown_from_input(250, None, amount_is_gross=True)
        assert parts.without_vat == parts.with_vat == 250
        assert parts.vat_amount == 0


class TestMarginVat:
    def test_margin_vat(self):
        result = margin_vat(1200, 1000)
        assert result.margin == pytest.approx(200)
        assert result.vat_rate == 20
        assert result.vat_amount == pytest.approx(40)

    def test_negative_margin_clamped(self):
        result = margin_vat(900, 1000)
        assert result.margin == 0
        assert result.vat_amount == 0

    def test_rate_constant(self):
        assert MARGIN_VAT_RATE == 20


class TestEffectiveVat:
    def test_conference_vat_wins(self):
        assert effective_vat_percentage(25, 20) == 25

    def test_conference_zero_is_kept(self):
        assert effective_vat_percentage(0, 20) == 0

    def test_default_used_when_conference_unset(self):
        assert effective_vat_percentage(None, 20) == 20

    def test_none_when_both_unset(self):
        assert effective_vat_percentage(None, None) is None


class TestRounding:
    def test_half_up(self):
        assert round_amount(0.125) == 0.13
        assert round_amount(450.567) == 450.57

    def test_float_noise(self):
        assert round_amount(0.1 + 0.2) == 0.3
