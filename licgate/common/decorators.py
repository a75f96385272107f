"""License decorators for function protection.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

from licgate.common.exceptions import FeatureAccessError

logger = logging.getLogger(__name__)


def _resolve_manager(manager: Any, args: tuple[Any, ...]) -> Any:
    """Get the manager instance (direct, callable, or attribute name on self)."""
    if isinstance(manager, str):
        if not args:
            msg = f"Cannot get manager attribute '{manager}' without self"
            raise ValueError(msg)
        return getattr(args[0], manager)
    if callable(manager) and not hasattr(manager, "is_feature_allowed"):
        return manager()
    return manager


def requires_feature(
    manager: Any | Callable[[], Any] | str,
    feature_id: str,
    error_message: str | None = None,
    *,
    raise_exception: bool = True,
) -> Callable:
    """Decorator that runs the function only when the feature is entitled.

    Args:
        manager: LicenseManager instance, callable returning one, or the name
            of an attribute holding one on the method's ``self``
        feature_id: Feature identifier checked against the entitlement registry
        error_message: Message for the raised exception or the warning
        raise_exception: Whether to raise FeatureAccessError or return None

    Returns:
        Decorated function that only executes when the feature is allowed
    """
    message = error_message or f"Feature '{feature_id}' is not available"

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            license_manager = _resolve_manager(manager, args)
            if not license_manager.is_feature_allowed(feature_id):
                if raise_exception:
                    raise FeatureAccessError(message, feature_id)
                logger.warning("Feature check failed: %s", message)
                return None
            return func(*args, **kwargs)

        return wrapper

    return decorator


def requires_active_license(
    manager: Any | Callable[[], Any] | str,
    error_message: str = "License is not active",
    *,
    raise_exception: bool = True,
) -> Callable:
    """Decorator that ensures the function runs only with a valid license.

    Args:
        manager: LicenseManager instance, callable returning one, or attribute
            name on ``self``
        error_message: Message to show when the license is not valid
        raise_exception: Whether to raise exception or return None
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            license_manager = _resolve_manager(manager, args)
            if not license_manager.current_status.is_valid:
                if raise_exception:
                    raise FeatureAccessError(error_message)
                logger.warning("License check failed: %s", error_message)
                return None
            return func(*args, **kwargs)

        return wrapper

    return decorator
