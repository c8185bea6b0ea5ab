"""Pytest configuration and fixtures for confcalc tests.

Provides common pricing configurations and a clean environment per test.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from confcalc.config import reset_config
from confcalc.models import Conference, PricingConfig

_ENV_VARS = (
    "LOG_LEVEL",
    "LOG_FORMAT",
    "DEFAULT_CURRENCY",
    "CURRENCY_FALLBACK",
    "TAMPER_EPSILON",
    "DEFAULT_VAT_PERCENTAGE",
)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Isolate each test from ambient environment configuration."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def sample_pricing_data() -> dict:
    """Raw pricing settings as stored by the settings collaborator."""
    return {
        "currency": "EUR",
        "early_bird": {"amount": 150, "deadline": "2026-03-01T23:59:59Z"},
        "regular": {"amount": 200},
        "late": {"amount": 250},
        "student_discount": 50,
        "accompanying_person_price": 100,
    }


@pytest.fixture
def sample_pricing(sample_pricing_data: dict) -> PricingConfig:
    return PricingConfig.model_validate(sample_pricing_data)


@pytest.fixture
def vat_pricing() -> PricingConfig:
    """Net prices with 25% VAT and custom fee definitions."""
    return PricingConfig.model_validate(
        {
            "currency": "EUR",
            "early_bird": {"amount": 300, "deadline": "2025-01-01"},
            "regular": {"amount": 400},
            "late": {"amount": 500},
            "student_discount": 100,
            "accompanying_person_price": 80,
            "vat_percentage": 25,
            "prices_include_vat": False,
            "custom_fee_types": [
                {"id": "vip", "name": "VIP", "early_bird": 600, "regular": 700, "late": 800},
                {"id": "senior", "name": "Senior", "amount": 120},
            ],
            "custom_fields": [{"id": "dinner", "name": "Gala dinner", "value": 60}],
        }
    )


@pytest.fixture
def vat_conference(vat_pricing: PricingConfig) -> Conference:
    return Conference(pricing=vat_pricing, start_date=utc(2025, 6, 1))
