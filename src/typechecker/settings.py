"""
Validator settings.

Pydantic model for runtime configuration of the validation engine,
resolved with precedence: explicit overrides > environment variables >
defaults.

Environment variables:
    TYPECHECKER_MAX_DEPTH: Maximum nesting depth before validation aborts
    TYPECHECKER_MAX_VALUE_LENGTH: Truncation length of values in messages
    TYPECHECKER_WARN_ON_INVALID_RULES: Log skipped rules as warnings
"""

import logging
import os
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

ENV_PREFIX = "TYPECHECKER_"


class ValidatorSettings(BaseModel):
    """
    Validation engine settings.

    Attributes:
        max_depth: Nesting depth at which validation stops (guards cyclic schemas)
        max_value_length: Serialized values in error messages are cut at this length
        warn_on_invalid_rules: Log rules skipped at registration as WARNING (else DEBUG)
    """

    model_config = ConfigDict(frozen=True)

    max_depth: int = Field(100, ge=1, description="Maximum nesting depth")
    max_value_length: int = Field(
        200, ge=8, description="Maximum length of values quoted in error messages"
    )
    warn_on_invalid_rules: bool = Field(
        True, description="Log skipped schema rules as warnings"
    )


def _read_env() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for name in ValidatorSettings.model_fields:
        raw = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None and raw != "":
            values[name] = raw
    return values


def resolve_settings(**overrides: Any) -> ValidatorSettings:
    """
    Resolve settings with proper precedence.

    Precedence (highest to lowest):
    1. Keyword overrides
    2. Environment variables
    3. Defaults

    Raises:
        pydantic.ValidationError: If a value is out of range or malformed
    """
    values = _read_env()
    values.update({k: v for k, v in overrides.items() if v is not None})
    settings = ValidatorSettings(**values)
    logger.debug("Resolved validator settings: %s", settings)
    return settings


@lru_cache(maxsize=1)
def get_settings() -> ValidatorSettings:
    """Process-wide default settings, read from the environment once."""
    return resolve_settings()


def settings_or_default(settings: Optional[ValidatorSettings]) -> ValidatorSettings:
    return settings if settings is not None else get_settings()
