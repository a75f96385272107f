"""
Interfaces and protocols for dependency injection.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from licgate.client.domain.entities import ValidationOutcome
    from licgate.common.models import LicenseRecord, UpdateCheckResult, UpdateManifest


class IValidationTransport(Protocol):
    """Protocol for the license validation backend.

    Transport failures are raised as TransportError.
    """

    def validate_license(self, license_key: str) -> ValidationOutcome: ...

    def validate_license_with_update(
        self, license_key: str
    ) -> tuple[ValidationOutcome, UpdateManifest | None]: ...

    def close(self) -> None: ...


class ILicenseCache(Protocol):
    """Protocol for persisted license data."""

    def load_license(self) -> LicenseRecord | None: ...

    def save_license(self, record: LicenseRecord) -> None: ...

    def update_last_validation(self, timestamp: datetime) -> None: ...

    def get_cached_key_masked(self) -> str | None: ...

    def has_cached_license(self) -> bool: ...

    def clear(self) -> None: ...


class IUpdateService(Protocol):
    """Protocol for the application update collaborator."""

    def check_for_update(self, manifest: UpdateManifest) -> UpdateCheckResult: ...

    def download_update(self, manifest: UpdateManifest) -> bool: ...

    def has_pending_update(self) -> bool: ...

    def get_pending_update(self) -> UpdateManifest | None: ...

    def apply_pending_update(self) -> bool: ...

    def close(self) -> None: ...
