"""Configuration loading for the ONVIF device client."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    import tomli as tomllib  # type: ignore


CONFIG_ENV_PREFIX = "ONVIF_DEVICE_"
CONFIG_VERSION = 1
MIN_SUPPORTED_CONFIG_VERSION = 1

OUTPUT_FORMATS = ("json", "yaml", "table")
LOG_FORMATS = ("plain", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Config:
    """Client configuration."""

    xaddr: Optional[str] = None
    timeout: float = 5.0
    output: str = "json"
    log_format: str = "plain"
    log_level: str = "WARNING"
    config_version: int = CONFIG_VERSION

    def __post_init__(self) -> None:
        _validate_config(self)

    def logging_dict(self) -> Dict[str, Any]:
        """Return a mapping suitable for structured logging."""

        return {
            "config_version": self.config_version,
            "xaddr": self.xaddr,
            "timeout": self.timeout,
            "output": self.output,
            "log_format": self.log_format,
            "log_level": self.log_level,
        }

    @classmethod
    def from_sources(
        cls,
        overrides: Optional[Mapping[str, Any]] = None,
        config_path: Optional[Path] = None,
    ) -> "Config":
        """Load configuration from defaults, file, env, and CLI (in that order)."""

        file_config = _load_file_config(
            config_path or _coerce_path(os.environ.get(f"{CONFIG_ENV_PREFIX}CONFIG"))
        )
        env_config = _load_env_config(CONFIG_ENV_PREFIX)

        config = cls()
        config = _apply_mapping(config, file_config)
        config = _apply_mapping(config, env_config)
        config = _apply_mapping(config, overrides or {})
        return config


def _validate_config(config: Config) -> None:
    _validate_version(config.config_version)
    _validate_range("timeout", config.timeout, 0.1, 120.0)
    _validate_choice("output", config.output, OUTPUT_FORMATS)
    _validate_choice("log_format", config.log_format, LOG_FORMATS)
    _validate_choice("log_level", config.log_level.upper(), LOG_LEVELS)
    if config.xaddr is not None and not config.xaddr.startswith(("http://", "https://")):
        raise ValueError(f"xaddr must be an http(s) URL; got {config.xaddr}.")


def _validate_version(version: int) -> None:
    if version < MIN_SUPPORTED_CONFIG_VERSION:
        raise ValueError(
            f"Config version {version} is too old; minimum supported is {MIN_SUPPORTED_CONFIG_VERSION}."
        )
    if version > CONFIG_VERSION:
        raise ValueError(
            f"Config version {version} is newer than supported ({CONFIG_VERSION}); please upgrade the client."
        )


def _validate_range(name: str, value: float, minimum: float, maximum: float) -> None:
    if value < minimum or value > maximum:
        raise ValueError(f"{name} must be between {minimum} and {maximum}; got {value}.")


def _validate_choice(name: str, value: str, allowed: tuple) -> None:
    if value not in allowed:
        raise ValueError(f"{name} must be one of {sorted(allowed)}; got {value}.")


def _load_file_config(path: Optional[Path]) -> Dict[str, Any]:
    if path is None:
        return {}
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("rb") as f:
        parsed = tomllib.load(f)
    if not isinstance(parsed, Mapping):
        raise ValueError("Configuration file must contain a TOML table.")
    return {k.replace("-", "_"): v for k, v in parsed.items()}


def _load_env_config(prefix: str) -> Dict[str, Any]:
    mapping: Dict[str, Any] = {}
    for field in Config.__dataclass_fields__:
        env_key = f"{prefix}{field}".upper()
        if env_key in os.environ:
            mapping[field] = os.environ[env_key]
    return mapping


def _apply_mapping(config: Config, overrides: Mapping[str, Any]) -> Config:
    data: MutableMapping[str, Any] = {}
    for key, value in overrides.items():
        if value is None or key not in Config.__dataclass_fields__:
            continue
        if key == "timeout":
            data[key] = float(value)
        elif key == "config_version":
            data[key] = int(value)
        elif key == "log_level":
            data[key] = str(value).upper()
        elif key in {"log_format", "output"}:
            data[key] = str(value).lower()
        else:
            data[key] = str(value)
    return replace(config, **data)


def _coerce_path(value: Any) -> Optional[Path]:
    if value is None:
        return None
    return value if isinstance(value, Path) else Path(str(value)).expanduser()
