"""Global settings model."""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from phppark_common.constants import (
    DEFAULT_DOMAIN,
    DEFAULT_NGINX_CONFIG_PATH,
    DEFAULT_PHP_VERSION,
    DEFAULT_USE_HTTPS,
    PHP_VERSION_PATTERN,
)


class GlobalSettings(BaseModel):
    """User settings persisted in config.yaml; immutable for a single run."""

    model_config = ConfigDict(frozen=True)

    default_php: str = DEFAULT_PHP_VERSION
    domain: str = DEFAULT_DOMAIN
    nginx_config_path: Path = DEFAULT_NGINX_CONFIG_PATH
    use_https: bool = DEFAULT_USE_HTTPS

    @field_validator("default_php")
    @classmethod
    def _php_version(cls, v: str) -> str:
        if not re.fullmatch(PHP_VERSION_PATTERN, v):
            raise ValueError(f"PHP version must look like 8.3, got {v!r}")
        return v
