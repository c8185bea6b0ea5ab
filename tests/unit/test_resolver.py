"""Unit tests for fee selector parsing and net price resolution."""

from __future__ import annotations

import logging

import pytest

from confcalc.models import PricingConfig, Tier
from confcalc.pricing.resolver import (
    SelectorKind,
    parse_fee_selector,
    resolve_price,
)


class TestParseFeeSelector:
    @pytest.mark.parametrize("tag", ["early_bird", "regular", "late"])
    def test_tiers(self, tag):
        selector = parse_fee_selector(tag)
        assert selector.kind is SelectorKind.TIER
        assert selector.ref == tag

    def test_student(self):
        assert parse_fee_selector("student").kind is SelectorKind.STUDENT

    def test_accompanying_person(self):
        assert parse_fee_selector("accompanying_person").kind is SelectorKind.ACCOMPANYING_PERSON

    def test_fee_type(self):
        selector = parse_fee_selector("fee_type_vip")
        assert selector.kind is SelectorKind.FEE_TYPE
        assert selector.ref == "vip"

    def test_custom_field_keeps_underscores_in_id(self):
        selector = parse_fee_selector("custom_gala_dinner")
        assert selector.kind is SelectorKind.CUSTOM_FIELD
        assert selector.ref == "gala_dinner"

    @pytest.mark.parametrize("tag", ["", None, "fee_type_", "custom_", "platinum", "Regular"])
    def test_unknown(self, tag):
        assert parse_fee_selector(tag).kind is SelectorKind.UNKNOWN


class TestStandardFees:
    def test_tier_selectors(self, vat_pricing):
        assert resolve_price(vat_pricing, "early_bird", Tier.REGULAR, "EUR") == 300
        assert resolve_price(vat_pricing, "regular", Tier.REGULAR, "EUR") == 400
        assert resolve_price(vat_pricing, "late", Tier.REGULAR, "EUR") == 500

    def test_accompanying_person_independent_of_tier(self, vat_pricing):
        for tier in Tier:
            assert resolve_price(vat_pricing, "accompanying_person", tier, "EUR") == 80

    def test_multi_currency_field(self):
        cfg = PricingConfig.model_validate(
            {"regular": {"amount": {"EUR": 400, "USD": 440}}}
        )
        assert resolve_price(cfg, "regular", Tier.REGULAR, "USD") == 440
        assert resolve_price(cfg, "regular", Tier.REGULAR, "GBP") == 400


class TestStudentFee:
    def test_regular_minus_discount(self):
        cfg = PricingConfig.model_validate({"regular": {"amount": 400}, "student_discount": 100})
        assert resolve_price(cfg, "student", Tier.REGULAR, "EUR") == 300

    def test_never_negative(self):
        cfg = PricingConfig.model_validate({"regular": {"amount": 80}, "student_discount": 100})
        assert resolve_price(cfg, "student", Tier.REGULAR, "EUR") == 0

    def test_based_on_regular_in_every_tier(self, vat_pricing):
        assert resolve_price(vat_pricing, "student", Tier.EARLY_BIRD, "EUR") == 300
        assert resolve_price(vat_pricing, "student", Tier.LATE, "EUR") == 300

    def test_explicit_override_used_verbatim(self):
        cfg = PricingConfig.model_validate(
            {
                "regular": {"amount": 400},
                "student_discount": 100,
                "student": {"early_bird": 120, "regular": 150},
            }
        )
        assert resolve_price(cfg, "student", Tier.EARLY_BIRD, "EUR") == 120
        assert resolve_price(cfg, "student", Tier.REGULAR, "EUR") == 150
        # No late override: falls back to regular minus discount
        assert resolve_price(cfg, "student", Tier.LATE, "EUR") == 300

    def test_per_currency_discount(self):
        cfg = PricingConfig.model_validate(
            {
                "regular": {"amount": {"EUR": 400, "USD": 450}},
                "student_discount": {"EUR": 100, "USD": 120},
            }
        )
        assert resolve_price(cfg, "student", Tier.REGULAR, "USD") == 330


class TestCustomFees:
    def test_fee_type_follows_tier(self, vat_pricing):
        assert resolve_price(vat_pricing, "fee_type_vip", Tier.EARLY_BIRD, "EUR") == 600
        assert resolve_price(vat_pricing, "fee_type_vip", Tier.REGULAR, "EUR") == 700
        assert resolve_price(vat_pricing, "fee_type_vip", Tier.LATE, "EUR") == 800

    def test_flat_fee_type_ignores_tier(self, vat_pricing):
        for tier in Tier:
            assert resolve_price(vat_pricing, "fee_type_senior", tier, "EUR") == 120

    def test_flat_amount_wins_over_tier_table(self):
        cfg = PricingConfig.model_validate(
            {"custom_fee_types": [{"id": "x", "amount": 50, "regular": 90}]}
        )
        assert resolve_price(cfg, "fee_type_x", Tier.REGULAR, "EUR") == 50

    def test_custom_field(self, vat_pricing):
        assert resolve_price(vat_pricing, "custom_dinner", Tier.LATE, "EUR") == 60


class TestConfigurationGaps:
    @pytest.mark.parametrize(
        "selector",
        ["fee_type_unknown", "custom_unknown", "platinum", ""],
    )
    def test_unmatched_selector_is_zero(self, vat_pricing, selector, caplog):
        with caplog.at_level(logging.WARNING, logger="confcalc.pricing.resolver"):
            assert resolve_price(vat_pricing, selector, Tier.REGULAR, "EUR") == 0
        assert "No price configured" in caplog.text

    def test_fee_type_missing_tier_price(self, caplog):
        cfg = PricingConfig.model_validate(
            {"custom_fee_types": [{"id": "vip", "regular": 700}]}
        )
        with caplog.at_level(logging.WARNING, logger="confcalc.pricing.resolver"):
            assert resolve_price(cfg, "fee_type_vip", Tier.LATE, "EUR") == 0
        assert "late" in caplog.text

    @pytest.mark.parametrize(
        "selector", ["early_bird", "regular", "late", "accompanying_person", "custom_dinner"]
    )
    def test_missing_amount_is_zero_with_warning(self, selector, caplog):
        cfg = PricingConfig.model_validate({"custom_fields": [{"id": "dinner"}]})
        with caplog.at_level(logging.WARNING, logger="confcalc.pricing.resolver"):
            assert resolve_price(cfg, selector, Tier.REGULAR, "EUR") == 0
        assert f"No price configured for fee selector '{selector}'" in caplog.text

    def test_empty_currency_map_is_a_gap(self, caplog):
        cfg = PricingConfig.model_validate({"regular": {"amount": {}}})
        with caplog.at_level(logging.WARNING, logger="confcalc.pricing.resolver"):
            assert resolve_price(cfg, "regular", Tier.REGULAR, "EUR") == 0
        assert "no regular amount" in caplog.text

    def test_configured_amount_does_not_warn(self, vat_pricing, caplog):
        with caplog.at_level(logging.WARNING, logger="confcalc.pricing.resolver"):
            assert resolve_price(vat_pricing, "late", Tier.LATE, "EUR") == 500
        assert caplog.text == ""
