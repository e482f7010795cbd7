"""Jinja2-based NGINX vhost config renderer."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from pydantic import BaseModel

from phppark_common import (
    HTTP_PORT,
    HTTPS_PORT,
    PHP_FPM_SOCKET,
    PHP_VERSION_PATTERN,
    SITE_NAME_PATTERN,
    VHOST_HEADER,
    CertificatePair,
    GlobalSettings,
    Site,
)

from phppark.errors import InvalidConfigError, PrivilegeDeniedError, StorageError
from phppark.services import shell

log = logging.getLogger(__name__)

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_TEMPLATE_NAME = "vhost.conf.j2"


class ProxyConfig(BaseModel):
    """Everything the vhost template needs for one site."""

    site_name: str
    server_name: str
    document_root: str
    listen_port: int
    php_socket: str
    use_ssl: bool = False
    cert_path: str | None = None
    key_path: str | None = None


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape([]),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def php_socket_path(version: str) -> str:
    return PHP_FPM_SOCKET.format(version=version)


def build_proxy_config(
    site: Site,
    settings: GlobalSettings,
    cert: CertificatePair | None = None,
) -> ProxyConfig:
    """Derive the template inputs for a site. Raises InvalidConfigError."""
    document_root = str(site.path) if str(site.path) not in ("", ".") else ""
    if not document_root:
        raise InvalidConfigError(f"Site {site.name!r} has an empty document root")
    if site.secured and cert is None:
        raise InvalidConfigError(
            f"Site {site.name!r} is secured but no certificate/key pair was supplied"
        )

    php_version = site.effective_php(settings.default_php)
    if not re.fullmatch(PHP_VERSION_PATTERN, php_version):
        raise InvalidConfigError(f"Site {site.name!r} has an invalid PHP version {php_version!r}")

    use_ssl = site.secured
    return ProxyConfig(
        site_name=site.name,
        server_name=site.server_name(settings.domain),
        document_root=document_root,
        listen_port=HTTPS_PORT if use_ssl else HTTP_PORT,
        php_socket=php_socket_path(php_version),
        use_ssl=use_ssl,
        cert_path=str(cert.cert_path) if use_ssl and cert else None,
        key_path=str(cert.key_path) if use_ssl and cert else None,
    )


def render_vhost(
    site: Site,
    settings: GlobalSettings,
    cert: CertificatePair | None = None,
) -> str:
    """Render the vhost for a site. Same inputs always give the same text."""
    config = build_proxy_config(site, settings, cert)
    template = _get_env().get_template(_TEMPLATE_NAME)
    return template.render(
        site=config, header=VHOST_HEADER, http_port=HTTP_PORT, https_port=HTTPS_PORT
    )


def vhost_path(settings: GlobalSettings, name: str) -> Path:
    return settings.nginx_config_path / f"{name}.{settings.domain}.conf"


def _is_managed(conf: Path) -> bool:
    try:
        with open(conf) as f:
            return f.readline().rstrip("\n") == VHOST_HEADER
    except OSError:
        return False


def rendered_names(settings: GlobalSettings) -> list[str]:
    """Site names that have a phppark-written config for the active domain.

    Other files in the directory, including ``*.<domain>.conf`` files
    without the phppark header, are never counted.
    """
    suffix = f".{settings.domain}.conf"
    config_dir = settings.nginx_config_path
    if not config_dir.is_dir():
        return []
    names = []
    for conf in config_dir.glob(f"*{suffix}"):
        name = conf.name[: -len(suffix)]
        if re.fullmatch(SITE_NAME_PATTERN, name) and conf.is_file() and _is_managed(conf):
            names.append(name)
    return sorted(names)


def _writable(directory: Path) -> bool:
    """Whether the current user can create files in directory (or would be
    able to create it)."""
    for candidate in [directory, *directory.parents]:
        if candidate.exists():
            return os.access(candidate, os.W_OK)
    return False


def write_vhost(path: Path, content: str) -> None:
    """Write vhost config to disk, through sudo for root-owned directories."""
    if not _writable(path.parent):
        log.info("writing %s with sudo", path)
        shell.run(["mkdir", "-p", str(path.parent)], sudo=True)
        shell.run(["tee", str(path)], sudo=True, input=content)
        return
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    except PermissionError as exc:
        raise PrivilegeDeniedError(f"Permission denied writing {path}") from exc
    except OSError as exc:
        raise StorageError(f"Failed to write vhost {path}: {exc}") from exc


def remove_vhost(path: Path) -> bool:
    """Delete a vhost config; returns whether a file was removed."""
    if not path.exists():
        return False
    if not _writable(path.parent):
        log.info("removing %s with sudo", path)
        shell.run(["rm", "-f", str(path)], sudo=True)
        return True
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except PermissionError as exc:
        raise PrivilegeDeniedError(f"Permission denied removing {path}") from exc
    except OSError as exc:
        raise StorageError(f"Failed to remove vhost {path}: {exc}") from exc
    return True
