"""Application configuration with YAML + env vars + CLI override support."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)


@dataclass
class ServerConfig:
    mode: str = "stdio"  # stdio | sse | streamable-http | console
    port: int = 8080
    verbose: bool = False


@dataclass
class ShardsConfig:
    source: str = "file"  # file | http
    path: str = ""
    base_url: str | None = None
    manifest: str | None = None  # searchdata.js or manifest.json, relative to the source
    format: str = "auto"  # auto | json | searchdata
    section: str = "all"
    pattern: str = "{bucket}.json"
    load_timeout: float = 10.0
    preload: bool = False


@dataclass
class SearchConfig:
    default_limit: int = 10
    max_limit: int = 50


@dataclass
class SessionConfig:
    debounce_ms: int = 150


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    shards: ShardsConfig = field(default_factory=ShardsConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    session: SessionConfig = field(default_factory=SessionConfig)


# Environment variable -> "section.field"
_ENV_MAPPING: dict[str, str] = {
    "APIREF_SEARCH_MODE": "server.mode",
    "APIREF_SEARCH_PORT": "server.port",
    "APIREF_SEARCH_VERBOSE": "server.verbose",
    "APIREF_SEARCH_SOURCE": "shards.source",
    "APIREF_SEARCH_SHARDS_PATH": "shards.path",
    "APIREF_SEARCH_BASE_URL": "shards.base_url",
    "APIREF_SEARCH_MANIFEST": "shards.manifest",
    "APIREF_SEARCH_FORMAT": "shards.format",
    "APIREF_SEARCH_LOAD_TIMEOUT": "shards.load_timeout",
    "APIREF_SEARCH_PRELOAD": "shards.preload",
    "APIREF_SEARCH_DEBOUNCE_MS": "session.debounce_ms",
}

_SECTIONS = frozenset(f.name for f in fields(AppConfig))


def load_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Load configuration with priority: YAML < env vars < CLI overrides.

    Every source is flattened to ``{"section.field": value}`` and applied in
    priority order; ``None`` values never override.

    Args:
        config_path: Path to YAML config file. None to skip.
        cli_overrides: CLI options keyed by ``"section.field"``; None means not given.
    """
    config = AppConfig()
    layers: list[tuple[str, dict[str, Any]]] = []
    if config_path:
        layers.append(("yaml", _yaml_settings(config_path)))
    layers.append(("env", _env_settings()))
    if cli_overrides:
        layers.append(("cli", cli_overrides))

    for origin, settings in layers:
        for dotted, value in settings.items():
            _assign(config, dotted, value, origin)
    return config


def _yaml_settings(config_path: str) -> dict[str, Any]:
    path = Path(config_path)
    if not path.is_file():
        logger.warning("Config file not found: %s, using defaults", config_path)
        return {}

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        logger.warning("Config file is not a valid YAML mapping: %s", config_path)
        return {}

    logger.info("Loaded config from %s", config_path)
    return {
        f"{section}.{name}": value
        for section, values in data.items()
        if isinstance(values, dict)
        for name, value in values.items()
    }


def _env_settings() -> dict[str, str]:
    return {dotted: os.environ[name] for name, dotted in _ENV_MAPPING.items() if name in os.environ}


def _assign(config: AppConfig, dotted: str, value: Any, origin: str) -> None:
    if value is None:
        return
    section_name, _, field_name = dotted.partition(".")
    if section_name not in _SECTIONS or not field_name:
        logger.debug("Ignoring %s setting %s", origin, dotted)
        return

    section = getattr(config, section_name)
    annotations = {f.name: f.type for f in fields(section)}
    if field_name not in annotations:
        logger.debug("Ignoring %s setting %s", origin, dotted)
        return
    setattr(section, field_name, _coerce(value, str(annotations[field_name])))


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


_CONVERTERS = {"bool": _to_bool, "int": int, "float": float}


def _coerce(value: Any, annotation: str) -> Any:
    """Convert ``value`` to the field's declared type (``int``, ``float | None``, ...)."""
    optional = annotation.endswith("| None")
    converter = _CONVERTERS.get(annotation.removesuffix("| None").strip())
    if converter is None:
        return value
    try:
        return converter(value)
    except (TypeError, ValueError):
        if optional:
            return None
        raise
