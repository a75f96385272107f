"""Domain layer: Core licensing entities and rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from licgate.client.domain.access import AccessLevel, PlanType


class ValidationType(str, Enum):
    """Tag of a single validation attempt."""

    ONLINE = "online"
    OFFLINE_GRACE = "offline_grace"
    INVALID = "invalid"
    EXPIRED = "expired"
    NETWORK_ERROR = "network_error"
    NO_LICENSE = "no_license"
    ERROR = "error"


class LicenseState(str, Enum):
    """States of the license manager."""

    UNINITIALIZED = "uninitialized"
    DEVELOPMENT_MODE = "development_mode"
    ONLINE_VALID = "online_valid"
    OFFLINE_GRACE_FULL = "offline_grace_full"
    OFFLINE_GRACE_LIMITED = "offline_grace_limited"
    EXPIRED = "expired"
    INVALID = "invalid"
    NO_LICENSE = "no_license"
    ERROR = "error"


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of one validation attempt.

    Build instances through the classmethod factories so that every tag
    carries a consistent access level.
    """

    type: ValidationType
    access_level: AccessLevel
    message: str
    user_id: str | None = None
    plan_type: str | None = None
    expiry_date: datetime | None = None
    grace_days_remaining: int | None = None

    @property
    def is_success(self) -> bool:
        if self.type is ValidationType.ONLINE:
            return True
        return (
            self.type is ValidationType.OFFLINE_GRACE
            and self.access_level is AccessLevel.PRO
        )

    @classmethod
    def success(
        cls,
        message: str,
        user_id: str | None = None,
        plan_type: str | None = None,
        expiry_date: datetime | None = None,
        access_level: AccessLevel | None = None,
    ) -> ValidationOutcome:
        if access_level is None:
            plan = PlanType.parse(plan_type)
            if plan is PlanType.UNKNOWN and not (plan_type or "").strip():
                # A confirmed license without a plan is the full product
                access_level = AccessLevel.PRO
            else:
                access_level = plan.access_level
        if access_level is AccessLevel.BLOCKED:
            msg = "A successful validation cannot carry BLOCKED access"
            raise ValueError(msg)
        return cls(
            type=ValidationType.ONLINE,
            access_level=access_level,
            message=message,
            user_id=user_id,
            plan_type=plan_type,
            expiry_date=expiry_date,
        )

    @classmethod
    def offline_grace(
        cls, level: AccessLevel, message: str, days_remaining: int | None = None
    ) -> ValidationOutcome:
        if level not in (AccessLevel.PRO, AccessLevel.FREE):
            msg = f"Offline grace only grants PRO or FREE, not {level.name}"
            raise ValueError(msg)
        return cls(
            type=ValidationType.OFFLINE_GRACE,
            access_level=level,
            message=message,
            grace_days_remaining=days_remaining,
        )

    @classmethod
    def invalid(cls, message: str) -> ValidationOutcome:
        return cls(ValidationType.INVALID, AccessLevel.BLOCKED, message)

    @classmethod
    def expired(cls, message: str) -> ValidationOutcome:
        return cls(ValidationType.EXPIRED, AccessLevel.BLOCKED, message)

    @classmethod
    def network_error(
        cls, message: str = "A network error occurred"
    ) -> ValidationOutcome:
        return cls(ValidationType.NETWORK_ERROR, AccessLevel.BLOCKED, message)

    @classmethod
    def no_license(
        cls, message: str = "No license is registered"
    ) -> ValidationOutcome:
        return cls(ValidationType.NO_LICENSE, AccessLevel.BLOCKED, message)

    @classmethod
    def error(cls, message: str) -> ValidationOutcome:
        return cls(ValidationType.ERROR, AccessLevel.BLOCKED, message)


@dataclass(frozen=True)
class CurrentStatus:
    """Published license status snapshot. Replaced wholesale, never mutated."""

    is_valid: bool
    access_level: AccessLevel
    plan_type: str
    message: str
    state: LicenseState
    expiry_date: datetime | None = None
    last_validation: datetime | None = None

    def is_offline_mode(self, now: datetime) -> bool:
        return (
            self.last_validation is not None
            and now - self.last_validation > timedelta(hours=1)
        )

    @classmethod
    def uninitialized(cls) -> CurrentStatus:
        return cls(
            is_valid=False,
            access_level=AccessLevel.BLOCKED,
            plan_type="Unknown",
            message="License not checked yet",
            state=LicenseState.UNINITIALIZED,
        )


@dataclass(frozen=True)
class FeatureRequirement:
    """Entitlement table entry for one feature."""

    feature_id: str
    display_name: str
    required_level: AccessLevel
    category: str = "General"
    order: int = 0
    enabled: bool = True


@dataclass(frozen=True)
class AccessDecision:
    """Answer to an entitlement query.

    ``error`` is set when the decision could not be computed; callers then
    choose whether to fail open or closed.
    """

    feature_id: str
    allowed: bool
    current_level: AccessLevel
    required_level: AccessLevel | None = None
    reason: str = ""
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def resolve(self, *, fail_open: bool = False) -> bool:
        if self.error is not None:
            return fail_open
        return self.allowed
