"""Load conference pricing settings from YAML or JSON files.

Accepts either a conference document (`pricing:` plus optional
`start_date:`) or a bare pricing mapping.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from confcalc.models import Conference
from confcalc.pricing.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def load_conference(config_path: Path) -> Conference:
    """Load and validate a pricing settings file.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    if not config_path.exists():
        raise ConfigurationError(f"Pricing config not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            # JSON is a subset of YAML, one parser covers both
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML/JSON in {config_path}: {e}") from e

    return parse_conference(raw, source=str(config_path))


def parse_conference(raw: Any, source: str = "<memory>") -> Conference:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Pricing config in {source} must be a mapping")

    document = raw if "pricing" in raw else {"pricing": raw}
    try:
        conference = Conference.model_validate(document)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid pricing config in {source}: {e}") from e

    logger.debug(
        "Loaded pricing config from %s (%d fee types, %d custom fields)",
        source,
        len(conference.pricing.custom_fee_types),
        len(conference.pricing.custom_fields),
    )
    return conference
