"""Webhook receiver configuration via dataclass."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from typing import Any

from .headers import EXPECTED_SCHEME, SIGNATURE_HEADER

logger = logging.getLogger(__name__)

# Suggested maximum age of a signed timestamp, in seconds
DEFAULT_TOLERANCE = 300

_DISABLED_VALUES = {"none", "off", "disabled"}
_TRUE_VALUES = {"1", "true", "yes", "on"}

# Marks a tolerance left to the environment or the default
UNSET: Any = object()


def _parse_tolerance(value: object) -> float | None:
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _DISABLED_VALUES:
            return None
        try:
            value = float(text)
        except ValueError:
            raise ValueError(f"Invalid webhook tolerance: {value!r}") from None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"Invalid webhook tolerance: {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"Webhook tolerance must be a finite number: {value!r}")
    if value < 0:
        raise ValueError(f"Webhook tolerance must not be negative: {value!r}")
    return value


@dataclass
class WebhookConfig:
    """Configuration for a webhook receiver.

    Priority (highest wins): constructor arg > env var > default.

    ``tolerance=None`` disables the freshness check; leaving it unset uses
    ``WEBHOOK_TOLERANCE`` or :data:`DEFAULT_TOLERANCE`.
    """

    secret: str | None = field(default=None, repr=False)
    tolerance: float | None = UNSET
    header_name: str | None = None
    scheme: str | None = None
    require_verified: bool | None = None

    def __post_init__(self) -> None:
        if self.secret is None:
            self.secret = os.getenv("WEBHOOK_SECRET")
        if not self.secret:
            raise ValueError(
                "A webhook signing secret is required "
                "(pass secret=... or set WEBHOOK_SECRET)"
            )

        if self.tolerance is UNSET:
            env_tolerance = os.getenv("WEBHOOK_TOLERANCE")
            self.tolerance = (
                _parse_tolerance(env_tolerance)
                if env_tolerance is not None
                else DEFAULT_TOLERANCE
            )
        else:
            self.tolerance = _parse_tolerance(self.tolerance)

        if self.header_name is None:
            self.header_name = os.getenv("WEBHOOK_SIGNATURE_HEADER", SIGNATURE_HEADER)
        self.header_name = self.header_name.lower()

        if self.scheme is None:
            self.scheme = os.getenv("WEBHOOK_SCHEME", EXPECTED_SCHEME)

        if self.require_verified is None:
            env_require = os.getenv("WEBHOOK_REQUIRE_VERIFIED", "false")
            self.require_verified = env_require.strip().lower() in _TRUE_VALUES

        if self.tolerance is None:
            logger.warning(
                "Webhook timestamp tolerance disabled; replayed requests will be accepted"
            )
