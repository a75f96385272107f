"""Domain layer: offline grace period evaluation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from licgate.client.domain.access import AccessLevel
from licgate.client.domain.entities import ValidationOutcome

if TYPE_CHECKING:
    from datetime import datetime

logger = logging.getLogger(__name__)

DEFAULT_FULL_GRACE_DAYS = 3
DEFAULT_LIMITED_GRACE_DAYS = 7
SECONDS_PER_DAY = 86400


def elapsed_days(now: datetime, last_validation: datetime) -> float:
    """Wall-clock days between two instants, never negative."""
    return max((now - last_validation).total_seconds() / SECONDS_PER_DAY, 0.0)


def evaluate_offline_grace(
    now: datetime,
    last_validation: datetime | None,
    full_grace_days: float = DEFAULT_FULL_GRACE_DAYS,
    limited_grace_days: float = DEFAULT_LIMITED_GRACE_DAYS,
) -> ValidationOutcome:
    """Decide degraded access from the time since the last online validation.

    Up to ``full_grace_days`` grants PRO, up to ``limited_grace_days`` grants
    FREE, anything later is EXPIRED. Both bounds are inclusive. Remaining days
    are truncated toward zero.
    """
    if last_validation is None:
        return ValidationOutcome.invalid("No previous online validation on record")

    days = elapsed_days(now, last_validation)

    if days <= full_grace_days:
        remaining = int(full_grace_days - days)
        logger.info("Offline grace period: %.1f days - full access", days)
        return ValidationOutcome.offline_grace(
            AccessLevel.PRO,
            f"Offline mode ({remaining} days remaining)",
            days_remaining=remaining,
        )
    if days <= limited_grace_days:
        remaining = int(limited_grace_days - days)
        logger.warning("Offline grace period: %.1f days - limited access", days)
        return ValidationOutcome.offline_grace(
            AccessLevel.FREE,
            f"Offline limited mode ({remaining} days remaining)",
            days_remaining=remaining,
        )

    logger.error("Offline grace period exceeded: %.1f days", days)
    return ValidationOutcome.expired("The offline grace period has ended")
