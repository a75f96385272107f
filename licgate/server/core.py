"""
Development license backend using FastAPI.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, HTTPException

from licgate.common.models import (
    ServerLicense,
    UpdateManifest,
    ValidateRequest,
    ValidateResponse,
)
from licgate.server.store import LicenseStore

if TYPE_CHECKING:
    from pathlib import Path

HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403


class LicenseServer:
    """Answers /api/license/validate from a JSON license table.

    Keys starting with ``EXPIRED`` or ``INVALID`` always get the matching
    rejection, which makes client error paths easy to exercise by hand.
    """

    def __init__(
        self,
        licenses_file: Path | None = None,
        *,
        accept_any: bool = False,
        latest_update: UpdateManifest | None = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.store = LicenseStore(licenses_file)
        self.accept_any = accept_any
        self.latest_update = latest_update
        self.app = FastAPI(title="licgate development backend")
        self._setup_routes()
        self.logger.info(
            "Development backend ready with %d licenses", len(self.store.licenses)
        )

    def _setup_routes(self) -> None:
        self.app.get("/health")(self.health)
        self.app.post("/api/license/validate")(self.validate)

    async def health(self) -> dict[str, Any]:
        return {"status": "ok", "timestamp": int(time.time())}

    async def validate(self, req: ValidateRequest) -> ValidateResponse:
        key = req.license_key
        if key.startswith("EXPIRED"):
            raise HTTPException(HTTP_FORBIDDEN, "License expired")
        if key.startswith("INVALID"):
            raise HTTPException(HTTP_UNAUTHORIZED, "License invalid")

        entry = self.store.get(key)
        if entry is None:
            if not self.accept_any:
                self.logger.info("Unknown license key from %s", req.machine_id)
                raise HTTPException(HTTP_UNAUTHORIZED, "Unknown license key")
            entry = ServerLicense(license_key=key, user_id="test-user", plan_type="pro")

        if entry.suspended:
            return ValidateResponse(valid=False, reason="suspended")
        if entry.end_date is not None and entry.end_date < datetime.now(timezone.utc):
            return ValidateResponse(valid=False, reason="expired")

        return ValidateResponse(
            valid=True,
            user_id=entry.user_id,
            plan_type=entry.plan_type,
            end_date=entry.end_date,
            update_info=self.latest_update if req.include_update else None,
        )
