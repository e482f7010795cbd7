"""Shared constants for phppark."""

from pathlib import Path

APP_NAME = "phppark"

# Files under the phppark home directory
HOME_DIR_NAME = f".{APP_NAME}"
CONFIG_FILE_NAME = "config.yaml"
SITES_FILE_NAME = "sites.json"
CERTIFICATES_DIR_NAME = "certificates"
LOGS_DIR_NAME = "logs"
AUDIT_JSONL_NAME = "audit.jsonl"
AUDIT_DB_NAME = "audit.db"

# Global settings defaults
DEFAULT_PHP_VERSION = "8.2"
DEFAULT_DOMAIN = "test"
DEFAULT_NGINX_CONFIG_PATH = Path("/etc/nginx/sites-enabled")
DEFAULT_USE_HTTPS = False

# Site names are single DNS labels
SITE_NAME_PATTERN = r"^[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?$"

# PHP-FPM
PHP_VERSION_PATTERN = r"^\d+\.\d+$"
PHP_FPM_SOCKET = "/var/run/php/php{version}-fpm.sock"

# DNS
LOOPBACK_ADDRESS = "127.0.0.1"

# NGINX
HTTP_PORT = 80
HTTPS_PORT = 443
# First line of every vhost phppark writes; files without it are left alone
VHOST_HEADER = "# Managed by phppark; changes will be overwritten."
