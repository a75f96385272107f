"""
HTTP client for the license validation backend.
"""

from __future__ import annotations

import getpass
import logging
import platform
import time
from typing import TYPE_CHECKING, Any

import requests
from pydantic import ValidationError

from licgate.client.domain.entities import ValidationOutcome
from licgate.common.exceptions import TransportError
from licgate.common.logging_utils import mask_license_key
from licgate.common.models import UpdateManifest, ValidateRequest, ValidateResponse

if TYPE_CHECKING:
    from collections.abc import Callable

HTTP_OK = 200
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
VALIDATE_PATH = "/api/license/validate"

logger = logging.getLogger(__name__)


def get_machine_id() -> str:
    try:
        return f"{platform.node()}-{getpass.getuser()}"
    except (OSError, KeyError):
        return "Unknown"


class LicenseApiClient:
    """Validates license keys against the licensing backend.

    Backend verdicts (valid, rejected, expired) come back as outcomes.
    Timeouts, connection failures and unexpected status codes are retried with
    exponential backoff and finally raised as TransportError.
    """

    def __init__(
        self,
        api_url: str,
        timeout: int = 30,
        retry_count: int = 3,
        app_version: str = "1.0.0",
        session: Any | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.retry_count = retry_count
        self.app_version = app_version
        self.session = session if session is not None else requests.Session()
        self._owns_session = session is None
        self._sleep = sleep
        if self._owns_session:
            self.session.headers.update(
                {
                    "User-Agent": f"licgate/{app_version}",
                    "Accept": "application/json",
                }
            )
        logger.debug(
            "LicenseApiClient initialized - URL: %s, Timeout: %ss, Retry: %s",
            self.api_url,
            timeout,
            retry_count,
        )

    def validate_license(self, license_key: str) -> ValidationOutcome:
        """Validate a key without asking for update information."""
        outcome, _ = self._validate(license_key, include_update=False)
        return outcome

    def validate_license_with_update(
        self, license_key: str
    ) -> tuple[ValidationOutcome, UpdateManifest | None]:
        """Validate a key and return any update bundled with the response."""
        return self._validate(license_key, include_update=True)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()
        logger.debug("LicenseApiClient closed")

    def _validate(
        self, license_key: str, *, include_update: bool
    ) -> tuple[ValidationOutcome, UpdateManifest | None]:
        if not license_key or not license_key.strip():
            return ValidationOutcome.invalid("No license key was given"), None

        request = ValidateRequest(
            license_key=license_key,
            machine_id=get_machine_id(),
            version=self.app_version,
            include_update=include_update,
        )
        r = self._post_with_retry(request)

        if r.status_code == HTTP_UNAUTHORIZED:
            logger.warning(
                "License %s rejected: unauthorized", mask_license_key(license_key)
            )
            return ValidationOutcome.invalid("The license key is invalid"), None
        if r.status_code == HTTP_FORBIDDEN:
            logger.warning(
                "License %s rejected: forbidden", mask_license_key(license_key)
            )
            return ValidationOutcome.expired("The license has expired"), None

        try:
            data = ValidateResponse.model_validate(r.json())
        except (ValueError, ValidationError):
            logger.exception("Failed to parse validation response")
            return ValidationOutcome.error("Could not parse the server response"), None

        return self._to_outcome(data), data.update_info if include_update else None

    def _post_with_retry(self, request: ValidateRequest) -> Any:
        url = f"{self.api_url}{VALIDATE_PATH}"
        backoff = 1.0
        last_error = "no attempt made"
        for attempt in range(1, self.retry_count + 1):
            logger.debug(
                "Validating license (attempt %d/%d)", attempt, self.retry_count
            )
            try:
                r = self.session.post(
                    url, json=request.model_dump(), timeout=self.timeout
                )
            except requests.Timeout:
                last_error = "request timed out"
                logger.warning("License validation timeout (attempt %d)", attempt)
            except requests.RequestException as e:
                last_error = str(e)
                logger.warning(
                    "Network error during license validation (attempt %d): %s",
                    attempt,
                    e,
                )
            else:
                if r.status_code in (HTTP_OK, HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
                    return r
                last_error = f"server returned {r.status_code}"
                logger.warning(
                    "License validation failed with status: %s", r.status_code
                )

            if attempt < self.retry_count:
                self._sleep(backoff)
                backoff *= 2

        msg = f"License validation failed after {self.retry_count} attempts: {last_error}"
        logger.error(msg)
        raise TransportError(msg)

    @staticmethod
    def _to_outcome(data: ValidateResponse) -> ValidationOutcome:
        if data.valid:
            return ValidationOutcome.success(
                "License confirmed",
                user_id=data.user_id,
                plan_type=data.plan_type,
                expiry_date=data.end_date,
            )
        reason = (data.reason or "Unknown").lower()
        if reason == "expired":
            return ValidationOutcome.expired("The license has expired")
        if reason == "suspended":
            return ValidationOutcome.invalid("The license is suspended")
        return ValidationOutcome.invalid(f"The license is invalid: {data.reason or 'Unknown'}")
