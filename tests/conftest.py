from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from licgate.client.application.license_manager import LicenseManager
from licgate.client.domain.entities import ValidationOutcome
from licgate.common.exceptions import TransportError
from licgate.common.models import (
    ClientConfig,
    LicenseRecord,
    UpdateCheckResult,
    UpdateManifest,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test without LICGATE_* settings from the outer environment."""
    for name in list(os.environ):
        if name.startswith("LICGATE_"):
            monkeypatch.delenv(name, raising=False)


class FakeClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FakeCache:
    """In-memory license cache that counts reads and writes."""

    def __init__(self, record: LicenseRecord | None = None):
        self.record = record
        self.loads = 0
        self.saves: list[LicenseRecord] = []

    def load_license(self) -> LicenseRecord | None:
        self.loads += 1
        return self.record

    def save_license(self, record: LicenseRecord) -> None:
        self.saves.append(record)
        self.record = record

    def update_last_validation(self, timestamp: datetime) -> None:
        if self.record is not None:
            self.record = self.record.model_copy(update={"last_validation": timestamp})

    def get_cached_key_masked(self) -> str | None:
        if self.record is None:
            return None
        return self.record.license_key[:5] + "****"

    def has_cached_license(self) -> bool:
        return self.record is not None

    def clear(self) -> None:
        self.record = None


class FakeTransport:
    """Validation transport returning a fixed outcome or raising."""

    def __init__(
        self,
        outcome: ValidationOutcome | None = None,
        error: Exception | None = None,
        manifest: UpdateManifest | None = None,
    ):
        self.outcome = outcome or ValidationOutcome.success(
            "License confirmed", user_id="user-1", plan_type="pro"
        )
        self.error = error
        self.manifest = manifest
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    def validate_license(self, license_key: str) -> ValidationOutcome:
        self.calls.append(("validate", license_key))
        if self.error is not None:
            raise self.error
        return self.outcome

    def validate_license_with_update(
        self, license_key: str
    ) -> tuple[ValidationOutcome, UpdateManifest | None]:
        self.calls.append(("validate_with_update", license_key))
        if self.error is not None:
            raise self.error
        return self.outcome, self.manifest

    def go_offline(self) -> None:
        self.error = TransportError("connection refused")

    def close(self) -> None:
        self.closed = True


class FakeUpdateService:
    def __init__(self, *, available: bool = True, download_ok: bool = True):
        self.available = available
        self.download_ok = download_ok
        self.checked: list[UpdateManifest] = []
        self.downloaded: list[UpdateManifest] = []
        self.pending: UpdateManifest | None = None
        self.closed = False

    def check_for_update(self, manifest: UpdateManifest) -> UpdateCheckResult:
        self.checked.append(manifest)
        if self.available:
            self.pending = manifest
        return UpdateCheckResult(
            update_available=self.available,
            manifest=manifest if self.available else None,
        )

    def download_update(self, manifest: UpdateManifest) -> bool:
        self.downloaded.append(manifest)
        return self.download_ok

    def has_pending_update(self) -> bool:
        return self.pending is not None

    def get_pending_update(self) -> UpdateManifest | None:
        return self.pending

    def apply_pending_update(self) -> bool:
        return self.pending is not None

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cached_record(clock: FakeClock) -> LicenseRecord:
    return LicenseRecord(
        license_key="ABCDE-12345-FGHIJ",
        user_id="user-1",
        plan_type="pro",
        start_date=clock.now - timedelta(days=30),
        last_validation=clock.now - timedelta(days=1),
    )


@pytest.fixture
def make_manager(tmp_path: Path, clock: FakeClock):
    """Factory for managers wired to fakes; disposes them after the test."""
    created: list[LicenseManager] = []

    def factory(
        *,
        cache: Any = None,
        transport: Any = None,
        update_service: Any = None,
        **config: Any,
    ) -> LicenseManager:
        manager = LicenseManager(
            ClientConfig(data_dir=tmp_path, **config),
            cache=cache if cache is not None else FakeCache(),
            transport=transport if transport is not None else FakeTransport(),
            update_service=(
                update_service if update_service is not None else FakeUpdateService()
            ),
            clock=clock,
        )
        created.append(manager)
        return manager

    yield factory

    for manager in created:
        manager.dispose()
