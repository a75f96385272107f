from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from licgate.common.models import (
    ClientConfig,
    LicenseRecord,
    UpdateCheckResult,
    UpdateManifest,
    ValidateResponse,
    parse_version,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def test_license_record_naive_datetimes_are_utc() -> None:
    record = LicenseRecord(
        license_key="ABCDE-12345",
        last_validation=datetime(2026, 3, 1, 8, 0),  # noqa: DTZ001
    )
    assert record.last_validation.tzinfo == timezone.utc


def test_license_record_is_frozen() -> None:
    record = LicenseRecord(license_key="ABCDE-12345")
    with pytest.raises(ValidationError):
        record.license_key = "other"  # type: ignore[misc]


def test_license_record_expiry() -> None:
    record = LicenseRecord(
        license_key="ABCDE-12345", expiry_date=NOW + timedelta(days=2, hours=6)
    )
    assert not record.is_expired(NOW)
    assert record.remaining_days(NOW) == 2  # noqa: PLR2004
    assert record.is_expired(NOW + timedelta(days=3))
    assert record.remaining_days(NOW + timedelta(days=3)) == 0

    perpetual = LicenseRecord(license_key="ABCDE-12345")
    assert not perpetual.is_expired(NOW)
    assert perpetual.remaining_days(NOW) is None


def test_license_record_json_round_trip() -> None:
    record = LicenseRecord(
        license_key="ABCDE-12345", plan_type="pro", last_validation=NOW
    )
    assert LicenseRecord.model_validate_json(record.model_dump_json()) == record


def test_parse_version() -> None:
    assert parse_version("1.2") == (1, 2, 0, 0)
    assert parse_version("1.2.0") == parse_version("1.2")
    assert parse_version("10.0.1") > parse_version("9.9.9")
    for bad in ("", "1.x", "1.2.3.4.5"):
        with pytest.raises(ValueError):  # noqa: PT011
            parse_version(bad)


def test_update_manifest_versions() -> None:
    manifest = UpdateManifest(version="2.1.0", minimum_version="2.0.0")
    assert manifest.is_newer_than("2.0.5")
    assert not manifest.is_newer_than("2.1")
    assert manifest.can_update_from("2.0.5")
    assert not manifest.can_update_from("1.9.0")
    assert not UpdateManifest(version="garbage").is_newer_than("1.0.0")


def test_update_manifest_unparseable_minimum_does_not_block() -> None:
    manifest = UpdateManifest(version="2.0.0", minimum_version="latest")
    assert manifest.can_update_from("1.0.0")


def test_update_check_result_success() -> None:
    assert UpdateCheckResult().success
    assert not UpdateCheckResult(error_message="too old").success


def test_validate_response_defaults() -> None:
    response = ValidateResponse.model_validate(
        {"valid": True, "plan_type": "pro", "end_date": "2027-01-01T00:00:00"}
    )
    assert response.end_date == datetime(2027, 1, 1, tzinfo=timezone.utc)
    assert response.update_info is None


def test_client_config_overrides_skip_unset() -> None:
    config = ClientConfig(full_grace_days=2)
    assert config.overrides() == {"full_grace_days": 2}
    with pytest.raises(ValidationError):
        ClientConfig(validation_interval_hours=0)
