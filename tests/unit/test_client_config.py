import json
from pathlib import Path

import pytest

from statsburner.core.config import ClientConfig
from statsburner.domain.exceptions import ConfigurationError


def test_client_config_defaults():
    config = ClientConfig()
    assert config.base_url == "https://feedburner.google.com/api/awareness/1.0"
    assert config.cache_enabled is True
    assert config.cache_backend == "file"
    assert config.cache_duration == "+1 day"
    assert config.allow_duplicate_dates is False
    assert config.timeout_seconds == 30


def test_client_config_from_env(monkeypatch):
    monkeypatch.setenv("STATSBURNER_BASE_URL", "https://api.test/awareness")
    monkeypatch.setenv("STATSBURNER_CACHE_ENABLED", "off")
    monkeypatch.setenv("STATSBURNER_CACHE_BACKEND", "sqlite")
    monkeypatch.setenv("STATSBURNER_CACHE_PATH", "/tmp/stats")
    monkeypatch.setenv("STATSBURNER_CACHE_DURATION", "+2 hours")
    monkeypatch.setenv("STATSBURNER_ALLOW_DUPLICATE_DATES", "yes")
    monkeypatch.setenv("STATSBURNER_TIMEOUT_SECONDS", "5")

    config = ClientConfig.from_env()

    assert config.base_url == "https://api.test/awareness"
    assert config.cache_enabled is False
    assert config.cache_backend == "sqlite"
    assert config.cache_path == "/tmp/stats"
    assert config.cache_duration == "+2 hours"
    assert config.allow_duplicate_dates is True
    assert config.timeout_seconds == 5


def test_client_config_from_env_rejects_bad_integer(monkeypatch):
    monkeypatch.setenv("STATSBURNER_TIMEOUT_SECONDS", "soon")

    with pytest.raises(ConfigurationError):
        ClientConfig.from_env()


def test_client_config_from_file_json(tmp_path: Path):
    data = {"cache_backend": "sqlite", "allow_duplicate_dates": True}
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))

    config = ClientConfig.from_file(str(path))

    assert config.cache_backend == "sqlite"
    assert config.allow_duplicate_dates is True
    assert config.cache_duration == "+1 day"


def test_client_config_from_file_yaml(tmp_path: Path):
    yaml = pytest.importorskip("yaml")
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"cache_duration": "+1 week", "timeout_seconds": 60}))

    config = ClientConfig.from_file(path)

    assert config.cache_duration == "+1 week"
    assert config.timeout_seconds == 60


def test_client_config_from_file_rejects_unknown_keys(tmp_path: Path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"cache_lifetime": 5}))

    with pytest.raises(ConfigurationError):
        ClientConfig.from_file(path)


def test_client_config_from_file_requires_known_format(tmp_path: Path):
    path = tmp_path / "config.ini"
    path.write_text("[statsburner]")

    with pytest.raises(ConfigurationError):
        ClientConfig.from_file(path)


def test_client_config_from_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        ClientConfig.from_file(tmp_path / "absent.json")


@pytest.mark.parametrize(
    "overrides",
    [
        {"cache_backend": "redis"},
        {"timeout_seconds": 0},
        {"base_url": ""},
        {"cache_path": ""},
        {"cache_duration": " "},
    ],
)
def test_client_config_validate_rejects_invalid_values(overrides):
    with pytest.raises(ValueError):
        ClientConfig(**overrides)
