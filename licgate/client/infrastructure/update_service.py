"""
Application update collaborator: version checks, download and hand-off.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from pathlib import Path  # noqa: TC003
from typing import TYPE_CHECKING, Any

import requests
from pydantic import ValidationError

from licgate.common.models import UpdateCheckResult, UpdateManifest

if TYPE_CHECKING:
    from collections.abc import Callable

CHUNK_SIZE = 64 * 1024
PENDING_FILE = "pending_update.json"

logger = logging.getLogger(__name__)


def sha256_of(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


class UpdateService:
    """Tracks a pending update and downloads it into the updates directory.

    Installing the downloaded file is delegated to ``installer``; without one,
    applying an update is refused.
    """

    def __init__(
        self,
        updates_dir: Path,
        current_version: str,
        *,
        auto_update: bool = True,
        timeout: int = 300,
        installer: Callable[[Path], bool] | None = None,
        session: Any | None = None,
    ):
        self.updates_dir = updates_dir
        self.current_version = current_version
        self.auto_update = auto_update
        self.timeout = timeout
        self.installer = installer
        self.session = session if session is not None else requests.Session()
        self._owns_session = session is None
        self._lock = threading.Lock()
        self._pending: UpdateManifest | None = None
        self._downloaded_path: Path | None = None
        self.updates_dir.mkdir(parents=True, exist_ok=True)
        logger.info(
            "UpdateService initialized. Current version: %s", current_version
        )

    @property
    def pending_path(self) -> Path:
        return self.updates_dir / PENDING_FILE

    def target_path(self, manifest: UpdateManifest) -> Path:
        return self.updates_dir / f"update_{manifest.version}.bin"

    def check_for_update(self, manifest: UpdateManifest) -> UpdateCheckResult:
        """Record ``manifest`` as pending if it can be installed over this version."""
        if not self.auto_update:
            logger.info("Auto-update is disabled by configuration")
            return UpdateCheckResult(update_available=False)

        if not manifest.is_newer_than(self.current_version):
            return UpdateCheckResult(update_available=False)

        if not manifest.can_update_from(self.current_version):
            logger.warning(
                "Cannot update from %s to %s directly",
                self.current_version,
                manifest.version,
            )
            return UpdateCheckResult(
                update_available=False,
                error_message=(
                    f"Version {manifest.version} requires at least "
                    f"{manifest.minimum_version}; install it manually"
                ),
            )

        logger.info("Update available: %s", manifest.version)
        with self._lock:
            self._pending = manifest
            self.pending_path.write_text(manifest.model_dump_json())
        return UpdateCheckResult(update_available=True, manifest=manifest)

    def download_update(self, manifest: UpdateManifest) -> bool:
        """Download and verify the update file. Returns False on any failure."""
        if not manifest.download_url:
            logger.warning("Update %s has no download URL", manifest.version)
            return False

        target = self.target_path(manifest)
        if target.exists() and self._verify_checksum(target, manifest.checksum):
            logger.info("Update already downloaded and verified")
            self._downloaded_path = target
            return True

        logger.info("Starting download of version %s", manifest.version)
        partial = target.with_name(target.name + ".part")
        try:
            with self.session.get(
                manifest.download_url, stream=True, timeout=self.timeout
            ) as r:
                r.raise_for_status()
                with partial.open("wb") as f:
                    for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                        f.write(chunk)
        except (requests.RequestException, OSError):
            logger.exception("Failed to download update %s", manifest.version)
            partial.unlink(missing_ok=True)
            return False

        if not self._verify_checksum(partial, manifest.checksum):
            logger.error("Downloaded file checksum verification failed")
            partial.unlink(missing_ok=True)
            return False

        partial.replace(target)
        self._downloaded_path = target
        logger.info("Update downloaded successfully to %s", target)
        return True

    def has_pending_update(self) -> bool:
        return self.get_pending_update() is not None

    def get_pending_update(self) -> UpdateManifest | None:
        with self._lock:
            if self._pending is None:
                self._pending = self._load_pending()
            return self._pending

    def apply_pending_update(self) -> bool:
        """Hand the downloaded update to the installer."""
        pending = self.get_pending_update()
        path = self._downloaded_path
        if path is None and pending is not None:
            candidate = self.target_path(pending)
            if candidate.exists():
                path = candidate
        if path is None or not path.exists():
            logger.warning("No downloaded update file found")
            return False
        if self.installer is None:
            logger.warning("No installer configured, update left at %s", path)
            return False

        logger.info("Applying update from %s", path)
        if not self.installer(path):
            logger.error("Update installation failed")
            return False

        self._clear_pending()
        path.unlink(missing_ok=True)
        logger.info("Update installation completed successfully")
        return True

    def close(self) -> None:
        if self._owns_session:
            self.session.close()
        logger.info("UpdateService closed")

    def _verify_checksum(self, path: Path, expected: str | None) -> bool:
        if not expected:
            return True
        actual = sha256_of(path)
        if actual.lower() != expected.lower():
            logger.error("Checksum mismatch. Expected: %s, Actual: %s", expected, actual)
            return False
        return True

    def _load_pending(self) -> UpdateManifest | None:
        try:
            return UpdateManifest.model_validate_json(self.pending_path.read_text())
        except FileNotFoundError:
            return None
        except ValidationError:
            logger.exception("Pending update record is malformed")
            return None

    def _clear_pending(self) -> None:
        with self._lock:
            self._pending = None
            self._downloaded_path = None
            self.pending_path.unlink(missing_ok=True)
