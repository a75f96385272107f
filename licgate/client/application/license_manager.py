"""
Application layer: license state machine and entitlement queries.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING

from licgate.client.application.scheduler import RevalidationScheduler
from licgate.client.domain.access import AccessLevel
from licgate.client.domain.entities import (
    AccessDecision,
    CurrentStatus,
    LicenseState,
    ValidationOutcome,
    ValidationType,
)
from licgate.client.domain.grace import evaluate_offline_grace
from licgate.client.domain.mapper import to_status
from licgate.client.domain.registry import EntitlementRegistry
from licgate.client.infrastructure.config_loader import ConfigLoader
from licgate.common.exceptions import (
    CacheError,
    ConfigurationError,
    LicenseInitializationError,
    TransportError,
)
from licgate.common.logging_utils import mask_license_key
from licgate.common.models import LicenseRecord, UpdateManifest, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from pathlib import Path

    from licgate.common.interfaces import (
        ILicenseCache,
        IUpdateService,
        IValidationTransport,
    )
    from licgate.common.models import ClientConfig

logger = logging.getLogger(__name__)

DEVELOPMENT_PLAN = "Development"

# Outcomes that say nothing about the key itself; offline grace applies
_RECOVERABLE = (ValidationType.NETWORK_ERROR, ValidationType.ERROR)


class LicenseManager:
    """Owns the current license status and answers entitlement queries.

    Feature checks only read the last published ``CurrentStatus`` snapshot.
    Validation runs on ``initialize()``, ``set_license_key()`` and on every
    tick of the revalidation scheduler; each publishes a new snapshot.
    """

    def __init__(
        self,
        client_config: ClientConfig | None = None,
        *,
        loader: ConfigLoader | None = None,
        cache: ILicenseCache | None = None,
        transport: IValidationTransport | None = None,
        update_service: IUpdateService | None = None,
        registry: EntitlementRegistry | None = None,
        clock: Callable[[], datetime] = utcnow,
        installer: Callable[[Path], bool] | None = None,
        scheduler_interval_seconds: float | None = None,
    ):
        try:
            self.loader = loader or ConfigLoader(client_config)
            self.cache = cache if cache is not None else self.loader.create_cache()
            self.transport = (
                transport if transport is not None else self.loader.create_transport()
            )
            self.update_service = (
                update_service
                if update_service is not None
                else self.loader.create_update_service(installer)
            )
        except (ConfigurationError, CacheError, OSError, ValueError) as err:
            logger.exception("Failed to initialize LicenseManager")
            msg = "The license system could not be initialized"
            raise LicenseInitializationError(msg) from err

        self.registry = registry or EntitlementRegistry()
        self.development_mode: bool = self.loader.development_mode
        self.full_grace_days = self.loader.full_grace_days
        self.limited_grace_days = self.loader.limited_grace_days
        self.max_free_objects = self.loader.max_free_objects
        self._clock = clock
        self._status = CurrentStatus.uninitialized()
        self._disposed = False
        self._download_executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="licgate-update"
        )
        self.download_future: Future | None = None
        self.last_background_error: BaseException | None = None
        self.scheduler = RevalidationScheduler(
            self.revalidate,
            self.loader.validation_interval_hours,
            interval_seconds=scheduler_interval_seconds,
            on_error=self._record_background_error,
        )

        logger.info(
            "License configuration loaded - Mode: %s, Validation Interval: %sh, "
            "Grace Period: %s/%s days",
            "Development" if self.development_mode else "Production",
            self.loader.validation_interval_hours,
            self.full_grace_days,
            self.limited_grace_days,
        )

    @property
    def current_status(self) -> CurrentStatus:
        return self._status

    @property
    def state(self) -> LicenseState:
        return self._status.state

    def _publish(self, status: CurrentStatus) -> None:
        # Single reference rebind; readers see the old or the new snapshot
        self._status = status
        logger.debug(
            "License status: %s (%s)", status.state.value, status.access_level.name
        )

    def _development_outcome(self) -> ValidationOutcome:
        return ValidationOutcome.success(
            "Running in development mode",
            plan_type=DEVELOPMENT_PLAN,
            access_level=AccessLevel.PRO,
        )

    def initialize(self) -> ValidationOutcome:
        """Load the cached license and validate it, online or offline."""
        try:
            logger.info("Starting license initialization")

            if self.development_mode:
                logger.info("Running in DEVELOPMENT MODE - all features enabled")
                outcome = self._development_outcome()
                self._publish(to_status(outcome, None, LicenseState.DEVELOPMENT_MODE))
                return outcome

            record = self.cache.load_license()
            if record is None:
                logger.warning("No license found in cache")
                outcome = ValidationOutcome.no_license()
                self._publish(to_status(outcome, None))
                return outcome

            outcome, _ = self._validate_online(record.license_key)
            if outcome.is_success:
                record = self._record_success(record, outcome)
                self._arm_scheduler()
                logger.info("License validated successfully online")
            elif outcome.type in _RECOVERABLE:
                outcome = self._offline_grace(record)

            self._publish(to_status(outcome, record))
            return outcome
        except Exception as e:
            logger.exception("License initialization failed")
            outcome = ValidationOutcome.error(f"License check failed: {e}")
            self._publish(to_status(outcome, None))
            return outcome

    def set_license_key(self, license_key: str) -> ValidationOutcome:
        """Validate a newly entered key online and cache it on success.

        A key that cannot be checked online is reported as such; no offline
        grace applies to a key without validation history.
        """
        if self.development_mode:
            logger.info("Development mode - license key ignored")
            return self._development_outcome()

        try:
            if not license_key or not license_key.strip():
                return ValidationOutcome.invalid("No license key was entered")

            license_key = license_key.strip()
            logger.info("Setting new license key: %s", mask_license_key(license_key))

            outcome, _ = self._validate_online(license_key)
            if outcome.is_success:
                now = self._clock()
                record = LicenseRecord(
                    license_key=license_key,
                    user_id=outcome.user_id,
                    plan_type=outcome.plan_type,
                    expiry_date=outcome.expiry_date,
                    start_date=now,
                    last_validation=now,
                )
                self.cache.save_license(record)
                self._publish(to_status(outcome, record))
                self._arm_scheduler()
                logger.info("License key set and validated successfully")
            else:
                logger.warning("License key rejected: %s", outcome.message)
            return outcome
        except Exception as e:
            logger.exception("Failed to set license key")
            return ValidationOutcome.error(f"Could not set the license key: {e}")

    def revalidate(self) -> ValidationOutcome | None:
        """Background tick: refresh the status from the backend.

        Returns None when there is nothing to validate.
        """
        if self.development_mode or self._disposed:
            return None

        try:
            logger.debug("Performing background license validation")
            record = self.cache.load_license()
            if record is None:
                return None

            outcome, manifest = self._validate_online(
                record.license_key, with_update=True
            )
            if outcome.is_success:
                record = self._record_success(record, outcome)
                self._publish(to_status(outcome, record))
                logger.debug("Background validation successful")
                if manifest is not None:
                    self._process_update(manifest)
                return outcome

            logger.warning("Background validation failed: %s", outcome.message)
            if outcome.type in _RECOVERABLE:
                outcome = self._offline_grace(record)
            self._publish(to_status(outcome, record))
            return outcome
        except Exception as e:
            logger.exception("Error during background validation")
            self.last_background_error = e
            return ValidationOutcome.error(f"Background validation failed: {e}")

    def check_feature_access(self, feature_id: str) -> AccessDecision:
        """Entitlement decision for ``feature_id``. Never raises."""
        status = self._status
        if self.development_mode:
            return AccessDecision(
                feature_id, True, AccessLevel.DEVELOPMENT, reason="development mode"
            )

        try:
            required = self.registry.get_required_level(feature_id)
            if not status.is_valid:
                logger.debug("Feature '%s' blocked - invalid license", feature_id)
                return AccessDecision(
                    feature_id,
                    False,
                    status.access_level,
                    required,
                    reason="license is not valid",
                )

            allowed = self.registry.is_feature_available(
                feature_id, status.access_level
            )
            if not allowed:
                logger.info(
                    "Feature '%s' requires %s, current: %s",
                    feature_id,
                    required.name,
                    status.access_level.name,
                )
            return AccessDecision(
                feature_id,
                allowed,
                status.access_level,
                required,
                reason="" if allowed else f"requires {required.display_name}",
            )
        except Exception as e:
            logger.exception("Error checking feature access for '%s'", feature_id)
            return AccessDecision(
                feature_id,
                False,
                status.access_level,
                reason="entitlement check failed",
                error=e,
            )

    def is_feature_allowed(self, feature_id: str, *, fail_open: bool = False) -> bool:
        """Whether ``feature_id`` may be used right now.

        ``fail_open`` decides the answer when the check itself errors.
        """
        return self.check_feature_access(feature_id).resolve(fail_open=fail_open)

    def get_required_level(self, feature_id: str) -> AccessLevel:
        return self.registry.get_required_level(feature_id)

    def is_within_object_limit(self, object_count: int) -> bool:
        """Whether an operation over ``object_count`` objects is permitted.

        Unlimited at PRO; every other valid level is held to the free-tier
        ceiling.
        """
        if self.development_mode:
            return True
        status = self._status
        if not status.is_valid:
            return False
        if status.access_level is AccessLevel.PRO:
            return True
        return object_count <= self.max_free_objects

    def get_status_message(self) -> str:
        if self.development_mode:
            return "Running in development mode (all features available)"
        return self._status.message or "License status unknown"

    def get_masked_license_key(self) -> str | None:
        if self.development_mode:
            return None
        try:
            return self.cache.get_cached_key_masked()
        except CacheError:
            logger.exception("Failed to read cached license key")
            return None

    def has_pending_update(self) -> bool:
        if self.development_mode:
            return False
        return self.update_service.has_pending_update()

    def get_pending_update(self) -> UpdateManifest | None:
        if self.development_mode:
            return None
        return self.update_service.get_pending_update()

    def download_update(self) -> bool:
        """Download the pending update now, in the calling thread."""
        if self.development_mode:
            return False
        manifest = self.get_pending_update()
        if manifest is None:
            return False
        return self.update_service.download_update(manifest)

    def apply_pending_update(self) -> bool:
        if self.development_mode:
            return False
        return self.update_service.apply_pending_update()

    def dispose(self) -> None:
        """Stop background work and release collaborators. Safe to call twice."""
        if self._disposed:
            return
        self._disposed = True
        releases = [
            ("scheduler", lambda: self.scheduler.stop(wait=False)),
            ("download executor", lambda: self._download_executor.shutdown(wait=False)),
            ("transport", self.transport.close),
            ("update service", self.update_service.close),
        ]
        try:
            for name, release in releases:
                try:
                    release()
                except Exception:
                    logger.exception("Error releasing %s", name)
            logger.info("LicenseManager disposed")
        finally:
            _forget_instance(self)

    def _record_background_error(self, error: BaseException) -> None:
        self.last_background_error = error

    def __enter__(self) -> LicenseManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    def _validate_online(
        self, license_key: str, *, with_update: bool = False
    ) -> tuple[ValidationOutcome, UpdateManifest | None]:
        try:
            logger.debug("Attempting online validation")
            if with_update:
                return self.transport.validate_license_with_update(license_key)
            return self.transport.validate_license(license_key), None
        except TransportError as e:
            logger.warning("Online validation failed, will check offline grace: %s", e)
            return ValidationOutcome.network_error(), None
        except Exception as e:
            logger.exception("Unexpected error during online validation")
            return ValidationOutcome.error(f"Validation error: {e}"), None

    def _record_success(
        self, record: LicenseRecord, outcome: ValidationOutcome
    ) -> LicenseRecord:
        """Persist what the backend just confirmed over the cached record."""
        update = {
            "user_id": outcome.user_id,
            "plan_type": outcome.plan_type,
            "expiry_date": outcome.expiry_date,
        }
        update = {k: v for k, v in update.items() if v is not None}
        update["last_validation"] = self._clock()
        refreshed = record.model_copy(update=update)
        self.cache.save_license(refreshed)
        return refreshed

    def _offline_grace(self, record: LicenseRecord) -> ValidationOutcome:
        now = self._clock()
        outcome = evaluate_offline_grace(
            now,
            record.last_validation,
            self.full_grace_days,
            self.limited_grace_days,
        )
        if outcome.type is ValidationType.OFFLINE_GRACE and record.is_expired(now):
            logger.warning("Cached license expired on %s", record.expiry_date)
            return ValidationOutcome.expired("The license has expired")
        return outcome

    def _arm_scheduler(self) -> None:
        if not self.scheduler.is_armed and not self._disposed:
            self.scheduler.start()

    def _process_update(self, manifest: UpdateManifest) -> None:
        try:
            result = self.update_service.check_for_update(manifest)
        except Exception:
            logger.exception("Failed to process update information")
            return
        if not result.update_available:
            return

        logger.info("Update available: %s", manifest.version)
        if manifest.is_critical:
            logger.info("Critical update detected, starting auto-download")
            self.download_future = self._download_executor.submit(
                self.update_service.download_update, manifest
            )
            self.download_future.add_done_callback(_log_download_result)


def _log_download_result(future: Future) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.error(
            "Update download failed", exc_info=(type(error), error, error.__traceback__)
        )
    elif not future.result():
        logger.warning("Update download did not complete")


_instance: LicenseManager | None = None
_instance_lock = threading.Lock()


def get_license_manager(client_config: ClientConfig | None = None) -> LicenseManager:
    """Process-wide manager, created on first use.

    Prefer constructing a LicenseManager in the host's composition root and
    passing it around; this accessor is for hosts without one.
    """
    global _instance  # noqa: PLW0603
    if _instance is None:
        with _instance_lock:
            if _instance is None:
                _instance = LicenseManager(client_config)
    return _instance


def reset_license_manager() -> None:
    """Dispose the process-wide manager, if any."""
    manager = _instance
    if manager is not None:
        manager.dispose()


def _forget_instance(manager: LicenseManager) -> None:
    global _instance  # noqa: PLW0603
    with _instance_lock:
        if _instance is manager:
            _instance = None
