# licgate: license validation and entitlement engine

from licgate.client.application.license_manager import (
    LicenseManager,
    get_license_manager,
    reset_license_manager,
)
from licgate.client.domain.access import AccessLevel, PlanType
from licgate.client.domain.entities import (
    AccessDecision,
    CurrentStatus,
    LicenseState,
    ValidationOutcome,
    ValidationType,
)
from licgate.common.decorators import requires_active_license, requires_feature
from licgate.common.exceptions import FeatureAccessError, LicenseInitializationError

__all__ = [
    "AccessDecision",
    "AccessLevel",
    "CurrentStatus",
    "FeatureAccessError",
    "LicenseInitializationError",
    "LicenseManager",
    "LicenseState",
    "PlanType",
    "ValidationOutcome",
    "ValidationType",
    "get_license_manager",
    "requires_active_license",
    "requires_feature",
    "reset_license_manager",
]
