"""phppark common: shared models, paths and constants."""

from phppark_common.constants import (
    APP_NAME,
    DEFAULT_DOMAIN,
    DEFAULT_NGINX_CONFIG_PATH,
    DEFAULT_PHP_VERSION,
    HTTP_PORT,
    HTTPS_PORT,
    LOOPBACK_ADDRESS,
    PHP_FPM_SOCKET,
    PHP_VERSION_PATTERN,
    SITE_NAME_PATTERN,
    VHOST_HEADER,
)
from phppark_common.config import PhparkConfig
from phppark_common.models.audit_event import AuditEvent
from phppark_common.models.settings import GlobalSettings
from phppark_common.models.site import CertificatePair, Site, SiteKind, SiteRegistry

__all__ = [
    "APP_NAME",
    "AuditEvent",
    "CertificatePair",
    "DEFAULT_DOMAIN",
    "DEFAULT_NGINX_CONFIG_PATH",
    "DEFAULT_PHP_VERSION",
    "GlobalSettings",
    "HTTPS_PORT",
    "HTTP_PORT",
    "LOOPBACK_ADDRESS",
    "PHP_FPM_SOCKET",
    "PHP_VERSION_PATTERN",
    "SITE_NAME_PATTERN",
    "VHOST_HEADER",
    "PhparkConfig",
    "Site",
    "SiteKind",
    "SiteRegistry",
]
