"""confcalc Pydantic models for type-safe pricing configuration.

Pricing configuration is admin-edited conference settings: read-only input
to the engine, validated once here at load time.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PlainValidator,
    field_validator,
)

from confcalc.pricing.currency import Amount, Fixed, PerCurrency, to_amount
from confcalc.pricing.exceptions import InvalidVatPercentage


def to_instant(value: Any) -> datetime:
    """Coerce ISO strings, dates and datetimes into timezone-aware datetimes.

    Naive values are interpreted as UTC; date-only values mean midnight UTC.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"invalid ISO date/datetime: '{value}'") from None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise ValueError(f"expected date or datetime, got {type(value).__name__}")


def _dump_amount(value: Amount | None) -> Any:
    if isinstance(value, Fixed):
        return value.value
    if isinstance(value, PerCurrency):
        return dict(value.entries)
    return None


AmountField = Annotated[
    Optional[Amount], PlainValidator(to_amount), PlainSerializer(_dump_amount)
]
Instant = Annotated[datetime, PlainValidator(to_instant)]


class Tier(str, Enum):
    """Time-windowed pricing bracket."""

    EARLY_BIRD = "early_bird"
    REGULAR = "regular"
    LATE = "late"


class _Settings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class EarlyBirdPricing(_Settings):
    amount: AmountField = None
    deadline: Optional[Instant] = None


class RegularPricing(_Settings):
    amount: AmountField = None
    start_date: Optional[Instant] = None
    end_date: Optional[Instant] = None


class LatePricing(_Settings):
    amount: AmountField = None
    start_date: Optional[Instant] = None


class StudentPricing(_Settings):
    """Explicit per-tier student prices, overriding the regular-minus-discount rule."""

    early_bird: AmountField = None
    regular: AmountField = None
    late: AmountField = None

    def for_tier(self, tier: Tier) -> Amount | None:
        return getattr(self, tier.value)


class CustomFeeType(_Settings):
    """Admin-defined fee type (VIP, Senior, ...) with its own tier table."""

    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    amount: AmountField = None  # Flat price, wins over the tier table
    early_bird: AmountField = None
    regular: AmountField = None
    late: AmountField = None

    def for_tier(self, tier: Tier) -> Amount | None:
        if self.amount is not None:
            return self.amount
        return getattr(self, tier.value)


class CustomPricingField(_Settings):
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    value: AmountField = None


class PricingConfig(_Settings):
    """Conference pricing configuration.

    Every amount shares one VAT polarity: `prices_include_vat` tells whether
    the numbers entered are gross (True) or net (False).
    """

    currency: Optional[str] = None
    currencies: list[str] = Field(default_factory=list)
    early_bird: EarlyBirdPricing = Field(default_factory=EarlyBirdPricing)
    regular: RegularPricing = Field(default_factory=RegularPricing)
    late: LatePricing = Field(default_factory=LatePricing)
    student: Optional[StudentPricing] = None
    student_discount: AmountField = None
    accompanying_person_price: AmountField = None
    vat_percentage: Optional[float] = None
    prices_include_vat: bool = False
    custom_fee_types: list[CustomFeeType] = Field(default_factory=list)
    custom_fields: list[CustomPricingField] = Field(default_factory=list)

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        text = v.strip().upper()
        return text or None

    @field_validator("currencies")
    @classmethod
    def normalize_currencies(cls, v: list[str]) -> list[str]:
        return [code.strip().upper() for code in v if code and code.strip()]

    @field_validator("vat_percentage")
    @classmethod
    def validate_vat_percentage(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0 <= v < 100:
            raise InvalidVatPercentage(v)
        return v

    def fee_type(self, fee_type_id: str) -> CustomFeeType | None:
        for fee_type in self.custom_fee_types:
            if fee_type.id == fee_type_id:
                return fee_type
        return None

    def custom_field(self, field_id: str) -> CustomPricingField | None:
        for custom in self.custom_fields:
            if custom.id == field_id:
                return custom
        return None


class Registration(_Settings):
    """The part of a registration record the engine reads."""

    fee_selector: str


class Conference(_Settings):
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    start_date: Optional[Instant] = None


class ResolvedPrice(BaseModel):
    """Price for one fee selector at one instant, rounded for output."""

    model_config = ConfigDict(frozen=True)

    tier: Tier
    net_amount: float
    gross_amount: float
    vat_amount: float
    currency: str


class ChargeAmount(BaseModel):
    """Final chargeable (gross) amount."""

    model_config = ConfigDict(frozen=True)

    amount: float
    currency: str


class CurrentPricing(BaseModel):
    """Standard prices as shown on the registration page."""

    model_config = ConfigDict(frozen=True)

    tier: Tier
    participant_price: float
    student_price: float
    accompanying_person_price: float
    currency: str
    deadline: Optional[datetime] = None
    next_tier: Optional[Tier] = None
    next_tier_date: Optional[datetime] = None


class FlagSeverity(str, Enum):
    """Pricing configuration flag severity levels."""

    CRITICAL = "Critical"  # Registrants will be charged a wrong (usually zero) amount
    ADVISORY = "Advisory"  # Likely unintended, worth a look


class Flag(BaseModel):
    """Pricing configuration issue."""

    type: str
    severity: FlagSeverity
    message: str


class FeeUnavailableReason(str, Enum):
    INACTIVE = "inactive"
    NOT_AVAILABLE_YET = "not_available_yet"
    EXPIRED = "expired"
    SOLD_OUT = "sold_out"


class RegistrationFee(_Settings):
    """Fixed-price registration fee with a validity window and optional capacity."""

    id: str
    name: str
    valid_from: date  # Inclusive
    valid_to: date  # Inclusive
    is_active: bool = True
    price_net: float = Field(ge=0)
    price_gross: float = Field(ge=0)
    capacity: Optional[int] = None  # None = unlimited
    currency: str = "EUR"
    display_order: int = 0


class RegistrationFeeOption(BaseModel):
    """Fee as offered on the public registration form."""

    id: str
    name: str
    price_gross: float
    currency: str
    is_available: bool
    disabled_reason: Optional[FeeUnavailableReason] = None
    sold_count: int = 0
    capacity: Optional[int] = None
