"""Domain layer: reconcile validation outcomes with cached license data.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from licgate.client.domain.access import AccessLevel
from licgate.client.domain.entities import (
    CurrentStatus,
    LicenseState,
    ValidationOutcome,
    ValidationType,
)

if TYPE_CHECKING:
    from licgate.common.models import LicenseRecord

UNKNOWN_PLAN = "Unknown"

_STATE_BY_TYPE = {
    ValidationType.ONLINE: LicenseState.ONLINE_VALID,
    ValidationType.INVALID: LicenseState.INVALID,
    ValidationType.EXPIRED: LicenseState.EXPIRED,
    # A network error that reaches the mapper had no grace to fall back on
    ValidationType.NETWORK_ERROR: LicenseState.ERROR,
    ValidationType.NO_LICENSE: LicenseState.NO_LICENSE,
    ValidationType.ERROR: LicenseState.ERROR,
}


def state_for(outcome: ValidationOutcome) -> LicenseState:
    if outcome.type is ValidationType.OFFLINE_GRACE:
        if outcome.access_level is AccessLevel.PRO:
            return LicenseState.OFFLINE_GRACE_FULL
        return LicenseState.OFFLINE_GRACE_LIMITED
    return _STATE_BY_TYPE[outcome.type]


def to_status(
    outcome: ValidationOutcome,
    record: LicenseRecord | None,
    state: LicenseState | None = None,
) -> CurrentStatus:
    """Build the status snapshot for an outcome and the cached record."""
    plan = outcome.plan_type or (record.plan_type if record else None) or UNKNOWN_PLAN
    return CurrentStatus(
        is_valid=outcome.is_success or outcome.access_level is not AccessLevel.BLOCKED,
        access_level=outcome.access_level,
        plan_type=plan,
        message=outcome.message,
        state=state or state_for(outcome),
        expiry_date=outcome.expiry_date
        or (record.expiry_date if record else None),
        last_validation=record.last_validation if record else None,
    )
