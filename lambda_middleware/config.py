"""
Configuration management for lambda-middleware.

Loads CORS settings, the hook config location and the log level from a
YAML file, with environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

logger = logging.getLogger("lambda-middleware.config")

CONFIG_ENV_VAR = "LAMBDA_MIDDLEWARE_CONFIG"
LOG_LEVEL_ENV_VAR = "LAMBDA_MIDDLEWARE_LOG_LEVEL"
DEFAULT_CONFIG_NAME = "lambda-middleware.yaml"


@dataclass
class CorsConfig:
    """Headers injected by the CORS hook."""
    allow_origin: str = "*"
    allow_methods: list[str] = field(
        default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = field(
        default_factory=lambda: ["Content-Type", "Authorization"]
    )

    def to_headers(self) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.allow_origin,
            "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.allow_headers),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CorsConfig:
        defaults = cls()
        return cls(
            allow_origin=str(data.get("allow_origin", defaults.allow_origin)),
            allow_methods=_as_list(data.get("allow_methods"), defaults.allow_methods),
            allow_headers=_as_list(data.get("allow_headers"), defaults.allow_headers),
        )


@dataclass
class MiddlewareConfig:
    """Top-level settings."""
    cors: CorsConfig = field(default_factory=CorsConfig)
    hooks_file: Path | None = None
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path | None = None) -> MiddlewareConfig:
        cors = data.get("cors") or {}
        if not isinstance(cors, dict):
            raise ConfigError(f"'cors' must be a mapping, got {type(cors).__name__}")

        hooks_file = data.get("hooks_file")
        hooks_path = None
        if hooks_file:
            hooks_path = Path(os.path.expandvars(str(hooks_file)))
            # Relative paths resolve against the config file's directory
            if base_dir is not None and not hooks_path.is_absolute():
                hooks_path = base_dir / hooks_path

        return cls(
            cors=CorsConfig.from_dict(cors),
            hooks_file=hooks_path,
            log_level=str(data.get("log_level", "INFO")).upper(),
        )


def _as_list(value: Any, default: list[str]) -> list[str]:
    if value is None:
        return list(default)
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(v) for v in value]


def get_config_file() -> Path:
    """Get path to the configuration file.

    Priority order:
    1. $LAMBDA_MIDDLEWARE_CONFIG (if set)
    2. ./lambda-middleware.yaml
    """
    configured = os.environ.get(CONFIG_ENV_VAR)
    if configured:
        return Path(configured)
    return Path.cwd() / DEFAULT_CONFIG_NAME


def load_config(path: Path | None = None) -> MiddlewareConfig:
    """Load configuration, returning defaults when the file does not exist.

    Example file:
    ---
    cors:
      allow_origin: "https://example.com"
      allow_methods: [GET, POST, OPTIONS]
    hooks_file: hooks.yaml
    log_level: DEBUG
    """
    config_file = path or get_config_file()

    if config_file.exists():
        try:
            data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse {config_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file must contain a YAML dictionary, got {type(data).__name__}"
            )
        config = MiddlewareConfig.from_dict(data, base_dir=config_file.parent)
        logger.debug("Loaded config from %s", config_file)
    else:
        logger.debug("Config file %s not found, using defaults", config_file)
        config = MiddlewareConfig()

    env_level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if env_level:
        config.log_level = env_level.upper()

    return config
