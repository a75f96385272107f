"""
Encrypted file cache for license data.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path  # noqa: TC003
from typing import TYPE_CHECKING

from cryptography.fernet import Fernet, InvalidToken
from pydantic import ValidationError

from licgate.common.exceptions import CacheError
from licgate.common.logging_utils import mask_license_key
from licgate.common.models import LicenseRecord

if TYPE_CHECKING:
    from datetime import datetime

logger = logging.getLogger(__name__)


class LicenseCache:
    """Stores the license record as a Fernet-encrypted JSON document.

    Writes replace the whole file atomically. A missing, undecryptable or
    malformed file reads as "no license".
    """

    def __init__(self, cache_path: Path, key_path: Path):
        self.cache_path = cache_path
        self.key_path = key_path
        self._lock = threading.Lock()
        try:
            self.cache_path.parent.mkdir(parents=True, exist_ok=True)
            self._fernet = Fernet(self._load_or_create_key())
        except (OSError, ValueError) as err:
            msg = f"Cannot open license cache at {cache_path}: {err}"
            raise CacheError(msg) from err

    def _load_or_create_key(self) -> bytes:
        if self.key_path.exists():
            return self.key_path.read_bytes().strip()
        key = Fernet.generate_key()
        self.key_path.parent.mkdir(parents=True, exist_ok=True)
        self._write_private(self.key_path, key)
        logger.info("Created license cache key at %s", self.key_path)
        return key

    @staticmethod
    def _write_private(path: Path, data: bytes) -> None:
        tmp_path = path.with_name(path.name + ".tmp")
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        tmp_path.replace(path)

    def load_license(self) -> LicenseRecord | None:
        """Load the cached license record."""
        try:
            token = self.cache_path.read_bytes()
        except FileNotFoundError:
            logger.debug("No license data found in cache")
            return None

        try:
            record = LicenseRecord.model_validate_json(self._fernet.decrypt(token))
        except InvalidToken:
            logger.error("License cache at %s could not be decrypted", self.cache_path)
            return None
        except ValidationError:
            logger.exception("Failed to deserialize license data")
            return None

        logger.debug("License information loaded from cache")
        return record

    def save_license(self, record: LicenseRecord) -> None:
        """Replace the cached license record."""
        with self._lock:
            self._save(record)
        logger.info(
            "License %s saved to cache", mask_license_key(record.license_key)
        )

    def _save(self, record: LicenseRecord) -> None:
        token = self._fernet.encrypt(record.model_dump_json().encode())
        try:
            self._write_private(self.cache_path, token)
        except OSError as err:
            msg = f"Failed to write license cache {self.cache_path}: {err}"
            raise CacheError(msg) from err

    def update_last_validation(self, timestamp: datetime) -> None:
        """Record a successful online validation on the cached record."""
        with self._lock:
            record = self.load_license()
            if record is None:
                logger.warning("No cached license to update last validation on")
                return
            self._save(record.model_copy(update={"last_validation": timestamp}))
        logger.debug("Last validation updated to %s", timestamp.isoformat())

    def get_cached_key_masked(self) -> str | None:
        record = self.load_license()
        if record is None:
            return None
        return mask_license_key(record.license_key)

    def has_cached_license(self) -> bool:
        return self.load_license() is not None

    def clear(self) -> None:
        with self._lock:
            self.cache_path.unlink(missing_ok=True)
        logger.info("License cache cleared")
