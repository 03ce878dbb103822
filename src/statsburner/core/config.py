"""Client configuration management helpers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

from statsburner.domain.exceptions import ConfigurationError


def _str_to_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def _str_to_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer value: {value}") from exc


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration object loaded from env or files."""

    base_url: str = "https://feedburner.google.com/api/awareness/1.0"
    cache_enabled: bool = True
    cache_backend: str = "file"
    cache_path: str = "cache"
    cache_duration: str = "+1 day"
    allow_duplicate_dates: bool = False
    timeout_seconds: int = 30

    _ALLOWED_BACKENDS = {"file", "sqlite"}

    def __post_init__(self) -> None:
        self.validate()

    @classmethod
    def from_env(cls) -> "ClientConfig":
        defaults = cls()
        return cls(
            base_url=os.getenv("STATSBURNER_BASE_URL", defaults.base_url),
            cache_enabled=_str_to_bool(
                os.getenv("STATSBURNER_CACHE_ENABLED"), defaults.cache_enabled
            ),
            cache_backend=os.getenv(
                "STATSBURNER_CACHE_BACKEND", defaults.cache_backend
            ),
            cache_path=os.getenv("STATSBURNER_CACHE_PATH", defaults.cache_path),
            cache_duration=os.getenv(
                "STATSBURNER_CACHE_DURATION", defaults.cache_duration
            ),
            allow_duplicate_dates=_str_to_bool(
                os.getenv("STATSBURNER_ALLOW_DUPLICATE_DATES"),
                defaults.allow_duplicate_dates,
            ),
            timeout_seconds=_str_to_int(
                os.getenv("STATSBURNER_TIMEOUT_SECONDS"), defaults.timeout_seconds
            ),
        )

    @classmethod
    def from_file(cls, path: str | Path) -> "ClientConfig":
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        raw = file_path.read_text()
        data: Dict[str, Any]
        suffix = file_path.suffix.lower()
        if suffix == ".json":
            data = json.loads(raw)
        elif suffix in {".yaml", ".yml"}:
            data = cls._load_yaml(raw)
        else:
            raise ConfigurationError("Unsupported config format. Use JSON or YAML.")
        return cls(**cls._merge_with_defaults(data))

    def validate(self) -> None:
        if not self.base_url:
            raise ConfigurationError("base_url must be provided")
        if self.cache_backend not in self._ALLOWED_BACKENDS:
            raise ConfigurationError(
                f"cache_backend must be one of {sorted(self._ALLOWED_BACKENDS)}"
            )
        if self.cache_enabled and not self.cache_path:
            raise ConfigurationError("cache_path must be provided when caching")
        if not str(self.cache_duration).strip():
            raise ConfigurationError("cache_duration must not be empty")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be greater than zero")

    @classmethod
    def _merge_with_defaults(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        defaults = cls()
        known = {item.name for item in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        return {name: data.get(name, getattr(defaults, name)) for name in known}

    @staticmethod
    def _load_yaml(raw: str) -> Dict[str, Any]:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to parse YAML config files") from exc
        return yaml.safe_load(raw) or {}
