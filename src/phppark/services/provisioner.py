"""Site lifecycle: park, link, secure, unsecure, unpark, unlink.

The provisioner is the only writer of the sites file and the nginx config
directory. After every successful operation the set of rendered vhost files
matches the set of registered site names exactly. Steps are not rolled
back: if a later step fails, earlier ones (e.g. the saved registry) stay in
place until the operator retries or runs ``sync``.
"""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path
from typing import Callable, NamedTuple

from phppark_common import (
    PHP_VERSION_PATTERN,
    SITE_NAME_PATTERN,
    CertificatePair,
    GlobalSettings,
    PhparkConfig,
    Site,
    SiteKind,
    SiteRegistry,
)

from phppark.errors import (
    DuplicateSiteError,
    InvalidConfigError,
    SiteNotFoundError,
    StorageError,
)
from phppark.services import nginx, storage
from phppark.services.dns import BindingState, DnsManager
from phppark.services.vhost_renderer import (
    remove_vhost,
    render_vhost,
    rendered_names,
    vhost_path,
    write_vhost,
)

log = logging.getLogger(__name__)

_NAME_RE = re.compile(SITE_NAME_PATTERN)
_PHP_RE = re.compile(PHP_VERSION_PATTERN)


def slugify(value: str) -> str:
    """Turn a directory name into a site name (``My_App`` -> ``my-app``)."""
    slug = re.sub(r"[^a-z0-9-]+", "-", value.lower())
    return re.sub(r"-{2,}", "-", slug).strip("-")[:63].rstrip("-")


def validate_name(name: str) -> None:
    if not _NAME_RE.fullmatch(name or ""):
        raise InvalidConfigError(
            f"Invalid site name {name!r}: use lowercase letters, digits and "
            "hyphens (max 63, no leading/trailing hyphen)"
        )


def validate_php_version(version: str) -> None:
    if not _PHP_RE.fullmatch(version or ""):
        raise InvalidConfigError(f"Invalid PHP version {version!r}: expected e.g. 8.3")


class Drift(NamedTuple):
    """Differences between the registry and the rendered vhost files."""

    missing: list[str]
    orphaned: list[str]

    @property
    def clean(self) -> bool:
        return not self.missing and not self.orphaned


class Provisioner:
    """Sequences registry, vhost and DNS changes for one command."""

    def __init__(
        self,
        cfg: PhparkConfig,
        settings: GlobalSettings,
        registry: SiteRegistry,
        dns: DnsManager,
        reload_proxy: Callable[[], None] | None = None,
    ):
        self.cfg = cfg
        self.settings = settings
        self.registry = registry
        self.dns = dns
        self.reload_proxy = reload_proxy or nginx.reload

    # -- lifecycle ---------------------------------------------------------

    def park(self, path: Path) -> Site:
        """Register a directory as ``<dirname>.<domain>``."""
        root = self._resolve_dir(path)
        site = self._register(slugify(root.name), root, SiteKind.PARK)
        self.reload_proxy()
        self.ensure_dns()
        return site

    def park_children(self, path: Path) -> list[Site]:
        """Park every non-hidden subdirectory of path."""
        root = self._resolve_dir(path)
        sites = []
        claimed: dict[str, Path] = {}
        for child in sorted(root.iterdir()):
            if not child.is_dir() or child.name.startswith("."):
                continue
            name = slugify(child.name)
            if not name:
                log.warning("skipping %s: no usable site name", child)
                continue
            if name in claimed:
                log.warning("skipping %s: %r is already taken by %s", child, name, claimed[name])
                continue
            claimed[name] = child
            sites.append(self._register(name, child, SiteKind.PARK))
        if sites:
            self.reload_proxy()
            self.ensure_dns()
        return sites

    def link(self, name: str, path: Path) -> Site:
        """Register a single directory under an explicit name."""
        site = self._register(name, self._resolve_dir(path), SiteKind.LINK)
        self.reload_proxy()
        self.ensure_dns()
        return site

    def secure(self, name: str, cert: CertificatePair | None = None) -> Site:
        site = self._get(name)
        if cert is not None:
            self.install_certificate(site, cert)
        return self._update(site, secured=True)

    def unsecure(self, name: str) -> Site:
        return self._update(self._get(name), secured=False)

    def use_php(self, name: str, version: str | None) -> Site:
        """Pin a site to a PHP version; None falls back to the default."""
        if version is not None:
            validate_php_version(version)
        return self._update(self._get(name), php_version=version)

    def unpark(self, name: str) -> None:
        self._remove(name)

    def unlink(self, name: str) -> None:
        self._remove(name)

    # -- DNS ---------------------------------------------------------------

    def ensure_dns(self) -> bool:
        """Bind the active domain if needed; returns True when setup ran."""
        domain = self.settings.domain
        if self.dns.check(domain):
            return False
        self.dns.setup(domain)
        return True

    def bind_dns(self) -> None:
        self.dns.setup(self.settings.domain)

    def unbind_dns(self) -> None:
        self.dns.remove(self.settings.domain)

    def dns_state(self) -> BindingState:
        return self.dns.state(self.settings.domain)

    # -- consistency -------------------------------------------------------

    def drift(self) -> Drift:
        registered = set(self.registry.names())
        rendered = set(rendered_names(self.settings))
        return Drift(
            missing=sorted(registered - rendered),
            orphaned=sorted(rendered - registered),
        )

    def sync(self) -> Drift:
        """Re-render every site, delete orphaned vhosts, reload once.

        Returns the drift found before repairing.
        """
        before = self.drift()
        for site in self.registry.list_sites():
            self._write_config(site)
        for name in before.orphaned:
            remove_vhost(vhost_path(self.settings, name))
        self.reload_proxy()
        return before

    # -- certificates ------------------------------------------------------

    def certificate_paths(self, site: Site) -> CertificatePair:
        server_name = site.server_name(self.settings.domain)
        return CertificatePair(
            cert_path=self.cfg.certificates_dir / f"{server_name}.crt",
            key_path=self.cfg.certificates_dir / f"{server_name}.key",
        )

    def certificate_for(self, site: Site) -> CertificatePair | None:
        pair = self.certificate_paths(site)
        if pair.cert_path.is_file() and pair.key_path.is_file():
            return pair
        return None

    def install_certificate(self, site: Site, cert: CertificatePair) -> CertificatePair:
        """Copy a supplied cert/key pair to the site's certificate location."""
        target = self.certificate_paths(site)
        for src, dst in [(cert.cert_path, target.cert_path), (cert.key_path, target.key_path)]:
            src = Path(src).expanduser()
            if not src.is_file():
                raise InvalidConfigError(f"Certificate file not found: {src}")
            if src.resolve() == dst.resolve():
                continue
            try:
                dst.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(src, dst)
            except OSError as exc:
                raise StorageError(f"Failed to install {src} as {dst}: {exc}") from exc
        try:
            target.key_path.chmod(0o600)
        except OSError as exc:
            raise StorageError(f"Failed to restrict {target.key_path}: {exc}") from exc
        return target

    # -- internals ---------------------------------------------------------

    def _get(self, name: str) -> Site:
        site = self.registry.find(name)
        if site is None:
            raise SiteNotFoundError(f"Site {name!r} is not parked or linked")
        return site

    def _resolve_dir(self, path: Path) -> Path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_dir():
            raise InvalidConfigError(f"{path} does not exist or is not a directory")
        return resolved

    def _register(self, name: str, path: Path, kind: SiteKind) -> Site:
        validate_name(name)
        existing = self.registry.find(name)
        if existing is not None and existing.kind != kind:
            raise DuplicateSiteError(
                f"{name!r} is already {existing.kind.value}ed at {existing.path}; "
                f"un{existing.kind.value} it first"
            )
        if existing is not None:
            site = Site(
                name=name,
                path=path,
                kind=kind,
                php_version=existing.php_version,
                secured=existing.secured,
            )
        else:
            site = Site(name=name, path=path, kind=kind)
            if self.settings.use_https:
                if self.certificate_for(site) is not None:
                    site = site.model_copy(update={"secured": True})
                else:
                    log.warning(
                        "no certificate installed for %s, serving over HTTP; "
                        "run 'phppark secure %s --cert ... --key ...'",
                        site.server_name(self.settings.domain),
                        name,
                    )
        self.registry.upsert(site)
        self._save()
        self._write_config(site)
        log.info("%s %s -> %s", kind.value, site.server_name(self.settings.domain), path)
        return site

    def _update(self, site: Site, **changes) -> Site:
        updated = site.model_copy(update=changes)
        # render before persisting so a missing cert leaves nothing changed
        content = render_vhost(updated, self.settings, self.certificate_for(updated))
        self.registry.upsert(updated)
        self._save()
        write_vhost(vhost_path(self.settings, updated.name), content)
        self.reload_proxy()
        return updated

    def _remove(self, name: str) -> None:
        if not self.registry.remove(name):
            raise SiteNotFoundError(f"Site {name!r} is not parked or linked")
        self._save()
        remove_vhost(vhost_path(self.settings, name))
        self.reload_proxy()

    def _write_config(self, site: Site) -> None:
        content = render_vhost(site, self.settings, self.certificate_for(site))
        write_vhost(vhost_path(self.settings, site.name), content)

    def _save(self) -> None:
        storage.save_sites(self.cfg.sites_file, self.registry)
