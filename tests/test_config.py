import logging
from pathlib import Path

import pytest

from licgate.client.infrastructure.config_loader import ConfigLoader
from licgate.common.config import Config
from licgate.common.exceptions import ConfigurationError
from licgate.common.models import ClientConfig


def test_config_defaults() -> None:
    config = Config()
    assert config.LICENSE_MODE == "Production"
    assert config.DEVELOPMENT_MODE is False
    assert config.VALIDATION_INTERVAL_HOURS == 24  # noqa: PLR2004
    assert config.OFFLINE_GRACE_FULL_DAYS == 3  # noqa: PLR2004
    assert config.OFFLINE_GRACE_LIMITED_DAYS == 7  # noqa: PLR2004
    assert config.LIMITED_MODE_MAX_OBJECTS == 10  # noqa: PLR2004
    assert config.API_RETRY_COUNT == 3  # noqa: PLR2004
    assert config.AUTO_UPDATE is True
    assert config.LOG_LEVEL == logging.INFO


def test_config_paths(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("LICGATE_DATA_DIR", str(tmp_path))
    config = Config()
    assert config.DATA_DIR == tmp_path
    assert config.LICENSE_CACHE_PATH == tmp_path / "license.json"
    assert config.CACHE_KEY_PATH == tmp_path / "cache.key"
    assert config.UPDATES_DIR == tmp_path / "updates"


def test_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LICGATE_LICENSE_MODE", "development")
    monkeypatch.setenv("LICGATE_VALIDATION_INTERVAL_HOURS", "6")
    monkeypatch.setenv("LICGATE_OFFLINE_GRACE_FULL_DAYS", "1")
    monkeypatch.setenv("LICGATE_OFFLINE_GRACE_LIMITED_DAYS", "2")
    monkeypatch.setenv("LICGATE_AUTO_UPDATE", "off")
    monkeypatch.setenv("LICGATE_LOG_LEVEL", "debug")
    config = Config()
    assert config.LICENSE_MODE == "Development"
    assert config.DEVELOPMENT_MODE is True
    assert config.VALIDATION_INTERVAL_HOURS == 6  # noqa: PLR2004
    assert config.OFFLINE_GRACE_FULL_DAYS == 1
    assert config.OFFLINE_GRACE_LIMITED_DAYS == 2  # noqa: PLR2004
    assert config.AUTO_UPDATE is False
    assert config.LOG_LEVEL == logging.DEBUG


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("LICGATE_LICENSE_MODE", "Staging"),
        ("LICGATE_VALIDATION_INTERVAL_HOURS", "daily"),
        ("LICGATE_VALIDATION_INTERVAL_HOURS", "0"),
        ("LICGATE_OFFLINE_GRACE_FULL_DAYS", "-1"),
        ("LICGATE_OFFLINE_GRACE_LIMITED_DAYS", "2"),
        ("LICGATE_API_RETRY_COUNT", "0"),
        ("LICGATE_AUTO_UPDATE", "maybe"),
        ("LICGATE_LOG_LEVEL", "LOUD"),
    ],
)
def test_config_rejects_bad_values(
    monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        Config()


def test_blank_environment_value_uses_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LICGATE_VALIDATION_INTERVAL_HOURS", "  ")
    assert Config().VALIDATION_INTERVAL_HOURS == 24  # noqa: PLR2004


def test_loader_uses_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("LICGATE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("LICGATE_LIMITED_MODE_MAX_OBJECTS", "25")
    loader = ConfigLoader()
    assert loader.max_free_objects == 25  # noqa: PLR2004
    assert loader.data_dir == tmp_path
    assert loader.license_cache_path == tmp_path / "license.json"
    assert loader.updates_dir == tmp_path / "updates"


def test_loader_overrides_win(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("LICGATE_OFFLINE_GRACE_FULL_DAYS", "1")
    loader = ConfigLoader(
        ClientConfig(
            data_dir=tmp_path,
            full_grace_days=4,
            limited_grace_days=10,
            development_mode=True,
            api_url="http://licenses.example",
        )
    )
    assert loader.full_grace_days == 4  # noqa: PLR2004
    assert loader.limited_grace_days == 10  # noqa: PLR2004
    assert loader.development_mode is True
    assert loader.api_url == "http://licenses.example"
    assert loader.validation_interval_hours == 24  # noqa: PLR2004


def test_loader_rejects_inverted_grace_windows(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Limited grace period"):
        ConfigLoader(
            ClientConfig(data_dir=tmp_path, full_grace_days=5, limited_grace_days=2)
        )


def test_loader_builds_collaborators(tmp_path: Path) -> None:
    loader = ConfigLoader(ClientConfig(data_dir=tmp_path, api_retry_count=5))
    transport = loader.create_transport()
    assert transport.retry_count == 5  # noqa: PLR2004
    transport.close()
    cache = loader.create_cache()
    assert cache.cache_path == tmp_path / "license.json"
    assert (tmp_path / "cache.key").exists()
    service = loader.create_update_service()
    assert service.updates_dir.is_dir()
    service.close()
