"""Site and site registry models."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from phppark_common.constants import PHP_VERSION_PATTERN


class SiteKind(str, Enum):
    PARK = "park"
    LINK = "link"


class Site(BaseModel):
    """A parked or linked PHP project served at ``<name>.<domain>``."""

    name: str
    path: Path
    kind: SiteKind
    php_version: str | None = None
    secured: bool = False

    @field_validator("php_version")
    @classmethod
    def _php_version(cls, v: str | None) -> str | None:
        if v is not None and not re.fullmatch(PHP_VERSION_PATTERN, v):
            raise ValueError(f"PHP version must look like 8.3, got {v!r}")
        return v

    def server_name(self, domain: str) -> str:
        return f"{self.name}.{domain}"

    def effective_php(self, default: str) -> str:
        return self.php_version or default


class CertificatePair(BaseModel):
    """TLS certificate and private key supplied for a secured site."""

    cert_path: Path
    key_path: Path


class SiteRegistry(BaseModel):
    """Ordered collection of sites, unique by name.

    Every operation works on the in-memory list only. Loading and saving the
    registry file is a separate, explicit step.
    """

    sites: list[Site] = Field(default_factory=list)

    def find(self, name: str) -> Site | None:
        for site in self.sites:
            if site.name == name:
                return site
        return None

    def upsert(self, site: Site) -> None:
        """Replace the site with the same name in place, or append it."""
        for i, existing in enumerate(self.sites):
            if existing.name == site.name:
                self.sites[i] = site
                return
        self.sites.append(site)

    def remove(self, name: str) -> bool:
        for i, existing in enumerate(self.sites):
            if existing.name == name:
                del self.sites[i]
                return True
        return False

    def list_sites(self) -> tuple[Site, ...]:
        return tuple(self.sites)

    def names(self) -> list[str]:
        return [site.name for site in self.sites]
