"""Pricing tier resolution.

Decides which tier (early bird / regular / late) applies at an instant using
an ordered rule list; the first matching rule wins, otherwise the tier is
regular:

1. early_bird_open             now <= early_bird.deadline          -> early_bird
2. late_open                   now >= late.start_date               -> late
3. regular_open                inside [regular.start_date, end_date] -> regular
   regular_closed_without_late regular window over, no late tier     -> regular
4. last_minute                 conference starts within 14 days,
                               no late.start_date configured         -> late
5. default                                                           -> regular
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from confcalc.models import PricingConfig, Tier, to_instant

logger = logging.getLogger(__name__)

LAST_MINUTE_WINDOW = timedelta(days=14)


@dataclass(frozen=True)
class TierContext:
    pricing: PricingConfig
    now: datetime
    conference_start: Optional[datetime] = None


@dataclass(frozen=True)
class TierRule:
    name: str
    applies: Callable[[TierContext], bool]
    tier: Tier


def early_bird_open(ctx: TierContext) -> bool:
    deadline = ctx.pricing.early_bird.deadline
    return deadline is not None and ctx.now <= deadline


def late_open(ctx: TierContext) -> bool:
    start = ctx.pricing.late.start_date
    return start is not None and ctx.now >= start


def _regular_started(ctx: TierContext) -> bool:
    start = ctx.pricing.regular.start_date
    return start is not None and ctx.now >= start


def regular_open(ctx: TierContext) -> bool:
    end = ctx.pricing.regular.end_date
    return _regular_started(ctx) and (end is None or ctx.now <= end)


def regular_closed_without_late(ctx: TierContext) -> bool:
    # With no late tier configured an expired regular window never escalates
    end = ctx.pricing.regular.end_date
    return (
        _regular_started(ctx)
        and end is not None
        and ctx.now > end
        and ctx.pricing.late.start_date is None
    )


def last_minute(ctx: TierContext) -> bool:
    if ctx.conference_start is None or ctx.pricing.late.start_date is not None:
        return False
    remaining = ctx.conference_start - ctx.now
    return timedelta(0) <= remaining <= LAST_MINUTE_WINDOW


TIER_RULES: tuple[TierRule, ...] = (
    TierRule("early_bird_open", early_bird_open, Tier.EARLY_BIRD),
    TierRule("late_open", late_open, Tier.LATE),
    TierRule("regular_open", regular_open, Tier.REGULAR),
    TierRule("regular_closed_without_late", regular_closed_without_late, Tier.REGULAR),
    TierRule("last_minute", last_minute, Tier.LATE),
)

DEFAULT_TIER = Tier.REGULAR


def resolve_tier(
    pricing: PricingConfig,
    now: Any,
    conference_start: Any = None,
) -> Tier:
    """Return the tier in effect at `now`.

    Args:
        pricing: Conference pricing configuration
        now: Instant to evaluate (datetime, date or ISO string; naive = UTC)
        conference_start: Optional conference start, enables the last-minute rule

    Returns:
        Tier for the first matching rule, regular when none match
    """
    ctx = TierContext(
        pricing=pricing,
        now=to_instant(now),
        conference_start=to_instant(conference_start) if conference_start is not None else None,
    )
    for rule in TIER_RULES:
        if rule.applies(ctx):
            logger.debug("Tier rule %s matched -> %s", rule.name, rule.tier.value)
            return rule.tier
    return DEFAULT_TIER


def next_tier_change(pricing: PricingConfig, tier: Tier) -> tuple[Optional[Tier], Optional[datetime]]:
    """Next tier and the date it takes over, when the configuration says so."""
    if tier is Tier.EARLY_BIRD:
        return Tier.REGULAR, pricing.early_bird.deadline
    if tier is Tier.REGULAR and pricing.late.start_date is not None:
        return Tier.LATE, pricing.late.start_date
    return None, None
