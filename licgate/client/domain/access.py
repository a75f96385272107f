"""Domain layer: access levels and plan identifiers.
"""

from __future__ import annotations

import logging
from enum import Enum, IntEnum

logger = logging.getLogger(__name__)


class AccessLevel(IntEnum):
    """Ordered entitlement tiers.

    DEVELOPMENT is a sentinel outside the ordering: it satisfies every
    requirement, and nothing but itself satisfies it.
    """

    BLOCKED = 0
    FREE = 1
    STARTER = 2
    GROWTH = 3
    PRO = 4
    DEVELOPMENT = 99

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    def is_at_least(self, required: AccessLevel) -> bool:
        if self is AccessLevel.DEVELOPMENT:
            return True
        if required is AccessLevel.DEVELOPMENT:
            return False
        return int(self) >= int(required)


_DISPLAY_NAMES = {
    AccessLevel.BLOCKED: "No license",
    AccessLevel.FREE: "Free",
    AccessLevel.STARTER: "Starter",
    AccessLevel.GROWTH: "Growth",
    AccessLevel.PRO: "Pro",
    AccessLevel.DEVELOPMENT: "Development",
}


class PlanType(str, Enum):
    """Plan identifiers reported by the backend."""

    FREE = "free"
    STARTER = "starter"
    GROWTH = "growth"
    PRO = "pro"
    DEVELOPMENT = "development"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, text: str | None) -> PlanType:
        """Map backend plan text, including legacy names, to a PlanType."""
        if text is None or not text.strip():
            logger.warning("No plan type given")
            return cls.UNKNOWN
        key = text.strip().lower()
        try:
            return cls(key)
        except ValueError:
            pass
        if key in _LEGACY_PLANS:
            return _LEGACY_PLANS[key]
        logger.warning("Unrecognised plan type %r", text)
        return cls.UNKNOWN

    @property
    def access_level(self) -> AccessLevel:
        return _PLAN_LEVELS[self]


_LEGACY_PLANS = {
    "basic": PlanType.FREE,
    "limited": PlanType.FREE,
    "premium": PlanType.PRO,
    "full": PlanType.PRO,
}

_PLAN_LEVELS = {
    PlanType.FREE: AccessLevel.FREE,
    PlanType.STARTER: AccessLevel.STARTER,
    PlanType.GROWTH: AccessLevel.GROWTH,
    PlanType.PRO: AccessLevel.PRO,
    PlanType.DEVELOPMENT: AccessLevel.DEVELOPMENT,
    PlanType.UNKNOWN: AccessLevel.FREE,
}
