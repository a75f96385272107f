from datetime import datetime, timedelta, timezone

import pytest

from licgate.client.domain.access import AccessLevel
from licgate.client.domain.entities import (
    AccessDecision,
    CurrentStatus,
    LicenseState,
    ValidationOutcome,
    ValidationType,
)


def test_success_takes_level_from_plan() -> None:
    assert ValidationOutcome.success("ok", plan_type="growth").access_level is (
        AccessLevel.GROWTH
    )
    assert ValidationOutcome.success("ok", plan_type="premium").access_level is (
        AccessLevel.PRO
    )
    # Unknown plans are visible as FREE, never BLOCKED
    assert ValidationOutcome.success("ok", plan_type="mystery").access_level is (
        AccessLevel.FREE
    )


@pytest.mark.parametrize("plan_type", [None, "", "  "])
def test_success_without_plan_is_pro(plan_type: str | None) -> None:
    outcome = ValidationOutcome.success("ok", plan_type=plan_type)
    assert outcome.access_level is AccessLevel.PRO
    assert outcome.is_success


def test_success_cannot_be_blocked() -> None:
    with pytest.raises(ValueError, match="BLOCKED"):
        ValidationOutcome.success("ok", access_level=AccessLevel.BLOCKED)


@pytest.mark.parametrize(
    "level", [AccessLevel.BLOCKED, AccessLevel.STARTER, AccessLevel.DEVELOPMENT]
)
def test_offline_grace_only_grants_pro_or_free(level: AccessLevel) -> None:
    with pytest.raises(ValueError, match="Offline grace"):
        ValidationOutcome.offline_grace(level, "offline")


@pytest.mark.parametrize(
    "outcome",
    [
        ValidationOutcome.invalid("bad key"),
        ValidationOutcome.expired("too old"),
        ValidationOutcome.network_error(),
        ValidationOutcome.no_license(),
        ValidationOutcome.error("boom"),
    ],
)
def test_failure_outcomes_are_blocked(outcome: ValidationOutcome) -> None:
    assert outcome.access_level is AccessLevel.BLOCKED
    assert not outcome.is_success
    assert outcome.message


def test_is_success() -> None:
    assert ValidationOutcome.success("ok", plan_type="free").is_success
    assert ValidationOutcome.offline_grace(AccessLevel.PRO, "offline").is_success
    assert not ValidationOutcome.offline_grace(AccessLevel.FREE, "offline").is_success


def test_outcomes_are_immutable() -> None:
    outcome = ValidationOutcome.invalid("bad key")
    with pytest.raises(AttributeError):
        outcome.access_level = AccessLevel.PRO  # type: ignore[misc]


def test_default_messages() -> None:
    assert ValidationOutcome.no_license().type is ValidationType.NO_LICENSE
    assert ValidationOutcome.network_error().message == "A network error occurred"


def test_uninitialized_status() -> None:
    status = CurrentStatus.uninitialized()
    assert not status.is_valid
    assert status.access_level is AccessLevel.BLOCKED
    assert status.state is LicenseState.UNINITIALIZED


def test_is_offline_mode() -> None:
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    status = CurrentStatus(
        is_valid=True,
        access_level=AccessLevel.PRO,
        plan_type="pro",
        message="ok",
        state=LicenseState.ONLINE_VALID,
        last_validation=now - timedelta(minutes=30),
    )
    assert not status.is_offline_mode(now)
    assert status.is_offline_mode(now + timedelta(hours=1))
    assert not CurrentStatus.uninitialized().is_offline_mode(now)


def test_access_decision_resolution() -> None:
    allowed = AccessDecision("TextBox", True, AccessLevel.PRO, AccessLevel.PRO)
    assert allowed.ok
    assert allowed.resolve()

    failed = AccessDecision(
        "TextBox", False, AccessLevel.PRO, error=RuntimeError("registry broken")
    )
    assert not failed.ok
    assert failed.resolve() is False
    assert failed.resolve(fail_open=True) is True
