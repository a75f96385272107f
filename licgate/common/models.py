"""
Pydantic models for persisted records and backend payloads.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_version(text: str) -> tuple[int, ...]:
    """Parse a dotted numeric version such as "1.2.0"."""
    parts = text.strip().split(".")
    if not text.strip() or len(parts) > 4:
        msg = f"Not a dotted numeric version: {text!r}"
        raise ValueError(msg)
    numbers = tuple(int(p) for p in parts)
    # Pad so that "1.2" == "1.2.0"
    return numbers + (0,) * (4 - len(numbers))


class LicenseRecord(BaseModel):
    """Cached license data owned by the license cache."""

    model_config = ConfigDict(frozen=True)

    license_key: str
    user_id: str | None = None
    plan_type: str | None = None
    expiry_date: datetime | None = None
    start_date: datetime | None = None
    last_validation: datetime | None = None

    @field_validator("expiry_date", "start_date", "last_validation")
    @classmethod
    def _ensure_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expiry_date is None:
            return False
        return self.expiry_date < (now or utcnow())

    def remaining_days(self, now: datetime | None = None) -> int | None:
        """Whole days until expiry, or None for licenses without an end date."""
        if self.expiry_date is None:
            return None
        remaining = (self.expiry_date - (now or utcnow())).total_seconds() / 86400
        return int(remaining) if remaining > 0 else 0


class UpdateManifest(BaseModel):
    """Description of an available application update."""

    model_config = ConfigDict(frozen=True)

    version: str
    release_date: datetime = Field(default_factory=utcnow)
    download_url: str | None = None
    checksum: str | None = None
    file_size: int = 0
    is_critical: bool = False
    release_notes: str | None = None
    minimum_version: str | None = None

    def is_newer_than(self, current_version: str) -> bool:
        try:
            return parse_version(self.version) > parse_version(current_version)
        except ValueError:
            return False

    def can_update_from(self, current_version: str) -> bool:
        if not self.is_newer_than(current_version):
            return False
        if not self.minimum_version:
            return True
        try:
            return parse_version(current_version) >= parse_version(
                self.minimum_version
            )
        except ValueError:
            # An unparseable minimum does not block the update
            return True


class UpdateCheckResult(BaseModel):
    update_available: bool = False
    manifest: UpdateManifest | None = None
    error_message: str | None = None

    @property
    def success(self) -> bool:
        return not self.error_message


class ValidateRequest(BaseModel):
    license_key: str
    machine_id: str
    version: str
    include_update: bool = False


class ValidateResponse(BaseModel):
    valid: bool = False
    user_id: str | None = None
    plan_type: str | None = None
    end_date: datetime | None = None
    reason: str | None = None
    update_info: UpdateManifest | None = None

    @field_validator("end_date")
    @classmethod
    def _ensure_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class ServerLicense(BaseModel):
    """License entry served by the development backend."""

    license_key: str
    user_id: str
    plan_type: str = "pro"
    end_date: datetime | None = None
    suspended: bool = False


class ClientConfig(BaseModel):
    """Per-instance overrides for the license manager configuration."""

    development_mode: bool | None = None
    validation_interval_hours: int | None = Field(default=None, gt=0)
    full_grace_days: int | None = Field(default=None, ge=0)
    limited_grace_days: int | None = Field(default=None, ge=0)
    max_free_objects: int | None = Field(default=None, ge=0)
    api_url: str | None = None
    api_timeout: int | None = Field(default=None, gt=0)
    api_retry_count: int | None = Field(default=None, gt=0)
    app_version: str | None = None
    auto_update: bool | None = None
    data_dir: Path | None = None
    log_level: int | None = None

    def overrides(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
