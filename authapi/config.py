"""Configuration management for the user directory service."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_LOG_LEVEL = "info"
DEFAULT_TITLE = "User Directory Service"

_LOG_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}


def _parse_port(value: object) -> int:
    try:
        port = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Port must be an integer, got {value!r}") from exc
    if port < 1 or port > 65535:
        raise ValueError("Port must be between 1 and 65535")
    return port


def _parse_log_level(value: object) -> str:
    level = str(value).strip().lower()
    if level not in _LOG_LEVELS:
        raise ValueError(f"Unknown log level '{value}'")
    return level


@dataclass(frozen=True)
class ServiceConfig:
    """Runtime settings for the HTTP service."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    title: str = DEFAULT_TITLE

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "ServiceConfig":
        """Create a :class:`ServiceConfig` from raw dictionary data."""
        unknown = set(data.keys()) - {"host", "port", "log_level", "title"}
        if unknown:
            raise ValueError(f"Unknown service configuration fields: {', '.join(sorted(unknown))}")

        host = str(data.get("host", DEFAULT_HOST)).strip()
        if not host:
            raise ValueError("Host must not be empty")

        title = str(data.get("title", DEFAULT_TITLE)).strip() or DEFAULT_TITLE

        return ServiceConfig(
            host=host,
            port=_parse_port(data.get("port", DEFAULT_PORT)),
            log_level=_parse_log_level(data.get("log_level", DEFAULT_LOG_LEVEL)),
            title=title,
        )

    @property
    def base_url(self) -> str:
        host = "localhost" if self.host in {"0.0.0.0", "::", ""} else self.host
        return f"http://{host}:{self.port}"


def apply_env_overrides(config: ServiceConfig, environ: Optional[Mapping[str, str]] = None) -> ServiceConfig:
    """Return ``config`` updated with any ``AUTHAPI_*`` environment overrides."""
    env = os.environ if environ is None else environ
    updates: Dict[str, object] = {}

    host = env.get("AUTHAPI_HOST")
    if host and host.strip():
        updates["host"] = host.strip()
    port = env.get("AUTHAPI_PORT")
    if port and port.strip():
        updates["port"] = _parse_port(port)
    log_level = env.get("AUTHAPI_LOG_LEVEL")
    if log_level and log_level.strip():
        updates["log_level"] = _parse_log_level(log_level)

    if not updates:
        return config
    return replace(config, **updates)


def load_service_config(
    config_path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> ServiceConfig:
    """Load settings from a YAML file, falling back to defaults when absent."""
    raw: Mapping[str, object] = {}
    if config_path is not None and config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping")
        section = loaded.get("service", loaded)
        if not isinstance(section, dict):
            raise ValueError("The 'service' section must be a mapping")
        raw = section

    return apply_env_overrides(ServiceConfig.from_dict(raw), environ)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "service.yaml").resolve(strict=False)
    return candidate


__all__ = [
    "DEFAULT_PORT",
    "ServiceConfig",
    "apply_env_overrides",
    "load_service_config",
    "resolve_config_path",
]
