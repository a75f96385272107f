"""
Configuration settings for the licensing engine.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from licgate.common.exceptions import ConfigurationError

ENV_PREFIX = "LICGATE_"


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as err:
        msg = f"{ENV_PREFIX}{name} must be an integer, got {raw!r}"
        raise ConfigurationError(msg) from err


def _env_bool(name: str, *, default: bool) -> bool:
    raw = _env(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    msg = f"{ENV_PREFIX}{name} must be a boolean, got {raw!r}"
    raise ConfigurationError(msg)


class Config:
    """Central configuration class for all licensing settings.

    Values are read once from the environment when the instance is created.
    """

    DEVELOPMENT = "Development"
    PRODUCTION = "Production"

    def __init__(self) -> None:
        # License mode
        mode = _env("LICENSE_MODE", self.PRODUCTION) or self.PRODUCTION
        if mode.lower() not in {self.DEVELOPMENT.lower(), self.PRODUCTION.lower()}:
            msg = f"{ENV_PREFIX}LICENSE_MODE must be Development or Production, got {mode!r}"
            raise ConfigurationError(msg)
        self.LICENSE_MODE: str = (
            self.DEVELOPMENT
            if mode.lower() == self.DEVELOPMENT.lower()
            else self.PRODUCTION
        )
        self.DEVELOPMENT_MODE: bool = self.LICENSE_MODE == self.DEVELOPMENT

        # Revalidation and offline grace settings
        self.VALIDATION_INTERVAL_HOURS: int = _env_int("VALIDATION_INTERVAL_HOURS", 24)
        self.OFFLINE_GRACE_FULL_DAYS: int = _env_int("OFFLINE_GRACE_FULL_DAYS", 3)
        self.OFFLINE_GRACE_LIMITED_DAYS: int = _env_int(
            "OFFLINE_GRACE_LIMITED_DAYS", 7
        )
        self.LIMITED_MODE_MAX_OBJECTS: int = _env_int("LIMITED_MODE_MAX_OBJECTS", 10)

        # Validation backend
        self.API_URL: str = _env("API_URL", "http://127.0.0.1:8000") or ""
        self.API_TIMEOUT: int = _env_int("API_TIMEOUT", 30)  # Seconds per request
        self.API_RETRY_COUNT: int = _env_int("API_RETRY_COUNT", 3)
        self.APP_VERSION: str = _env("APP_VERSION", "1.0.0") or "1.0.0"

        # Updates
        self.AUTO_UPDATE: bool = _env_bool("AUTO_UPDATE", default=True)
        self.UPDATE_TIMEOUT: int = _env_int("UPDATE_TIMEOUT", 300)

        # Development backend
        self.SERVER_HOST: str = _env("SERVER_HOST", "127.0.0.1") or "127.0.0.1"
        self.SERVER_PORT: int = _env_int("SERVER_PORT", 8000)

        # File paths
        self.BASE_DIR: Path = Path(__file__).parent.parent
        self.DATA_DIR: Path = Path(
            _env("DATA_DIR", str(Path.home() / ".licgate")) or ""
        )
        self.LICENSE_CACHE_PATH: Path = self.DATA_DIR / "license.json"
        self.CACHE_KEY_PATH: Path = self.DATA_DIR / "cache.key"
        self.UPDATES_DIR: Path = self.DATA_DIR / "updates"
        self.SERVER_LICENSES_PATH: Path = self.DATA_DIR / "server_licenses.json"

        # Logging
        level_name = (_env("LOG_LEVEL", "INFO") or "INFO").upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            msg = f"{ENV_PREFIX}LOG_LEVEL is not a logging level: {level_name!r}"
            raise ConfigurationError(msg)
        self.LOG_LEVEL: int = level

        self._validate()

    def _validate(self) -> None:
        if self.VALIDATION_INTERVAL_HOURS <= 0:
            msg = "Validation interval must be a positive number of hours"
            raise ConfigurationError(msg)
        if self.OFFLINE_GRACE_FULL_DAYS < 0:
            msg = "Full offline grace period cannot be negative"
            raise ConfigurationError(msg)
        if self.OFFLINE_GRACE_LIMITED_DAYS < self.OFFLINE_GRACE_FULL_DAYS:
            msg = (
                "Limited offline grace period must not be shorter than the "
                "full grace period"
            )
            raise ConfigurationError(msg)
        if self.API_RETRY_COUNT < 1:
            msg = "API retry count must be at least 1"
            raise ConfigurationError(msg)
