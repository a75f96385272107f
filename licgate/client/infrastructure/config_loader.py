"""Infrastructure layer: configuration loading and collaborator construction.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from licgate.client.infrastructure.api_client import LicenseApiClient
from licgate.client.infrastructure.license_cache import LicenseCache
from licgate.client.infrastructure.update_service import UpdateService
from licgate.common import Configurable, setup_logger
from licgate.common.config import Config
from licgate.common.exceptions import ConfigurationError
from licgate.common.models import ClientConfig

if TYPE_CHECKING:
    from collections.abc import Callable

SETTINGS = [
    "development_mode",
    "validation_interval_hours",
    "full_grace_days",
    "limited_grace_days",
    "max_free_objects",
    "api_url",
    "api_timeout",
    "api_retry_count",
    "app_version",
    "auto_update",
    "data_dir",
    "log_level",
]


class ConfigLoader(Configurable):
    """Merges environment configuration with per-instance overrides."""

    development_mode: bool
    validation_interval_hours: int
    full_grace_days: int
    limited_grace_days: int
    max_free_objects: int
    api_url: str
    api_timeout: int
    api_retry_count: int
    app_version: str
    auto_update: bool
    data_dir: Path
    log_level: int

    def __init__(self, client_config: ClientConfig | None = None):
        self.config: Config = Config()
        self.apply_overrides(
            (client_config or ClientConfig()).overrides(), self.config, SETTINGS
        )
        self.data_dir = Path(self.data_dir)

        if self.limited_grace_days < self.full_grace_days:
            msg = (
                f"Limited grace period ({self.limited_grace_days} days) is shorter "
                f"than the full grace period ({self.full_grace_days} days)"
            )
            raise ConfigurationError(msg)

        # Setup logging
        self.logger = logging.getLogger("licgate")
        setup_logger(self.logger, self.log_level)

    @property
    def license_cache_path(self) -> Path:
        return self.data_dir / "license.json"

    @property
    def cache_key_path(self) -> Path:
        return self.data_dir / "cache.key"

    @property
    def updates_dir(self) -> Path:
        return self.data_dir / "updates"

    def create_cache(self) -> LicenseCache:
        return LicenseCache(self.license_cache_path, self.cache_key_path)

    def create_transport(self) -> LicenseApiClient:
        return LicenseApiClient(
            api_url=self.api_url,
            timeout=self.api_timeout,
            retry_count=self.api_retry_count,
            app_version=self.app_version,
        )

    def create_update_service(
        self, installer: Callable[[Path], bool] | None = None
    ) -> UpdateService:
        return UpdateService(
            self.updates_dir,
            self.app_version,
            auto_update=self.auto_update,
            timeout=self.config.UPDATE_TIMEOUT,
            installer=installer,
        )
