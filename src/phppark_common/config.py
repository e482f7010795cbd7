"""Runtime paths for phppark tools."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from phppark_common.constants import (
    AUDIT_DB_NAME,
    AUDIT_JSONL_NAME,
    CERTIFICATES_DIR_NAME,
    CONFIG_FILE_NAME,
    HOME_DIR_NAME,
    LOGS_DIR_NAME,
    SITES_FILE_NAME,
)


def _default_home() -> Path:
    env = os.environ.get("PHPARK_HOME")
    if env:
        return Path(env)
    return Path.home() / HOME_DIR_NAME


class PhparkConfig(BaseModel):
    """Runtime paths resolved once at startup."""

    model_config = ConfigDict(frozen=True)

    home: Path = Field(default_factory=_default_home)

    @property
    def config_file(self) -> Path:
        return self.home / CONFIG_FILE_NAME

    @property
    def sites_file(self) -> Path:
        return self.home / SITES_FILE_NAME

    @property
    def certificates_dir(self) -> Path:
        return self.home / CERTIFICATES_DIR_NAME

    @property
    def log_dir(self) -> Path:
        return self.home / LOGS_DIR_NAME

    @property
    def audit_jsonl_path(self) -> Path:
        return self.log_dir / AUDIT_JSONL_NAME

    @property
    def audit_db_path(self) -> Path:
        return self.log_dir / AUDIT_DB_NAME

    def ensure_directories(self) -> None:
        """Create the home, certificates and logs directories."""
        for d in [self.home, self.certificates_dir, self.log_dir]:
            d.mkdir(parents=True, exist_ok=True)

    def exists(self) -> bool:
        """True when phppark has been installed (home directory present)."""
        return self.home.is_dir()
