"""PHP-FPM detection and installation through apt."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console

from phppark.errors import ExternalCommandError, PhparkError
from phppark.services import shell
from phppark.services.vhost_renderer import php_socket_path

log = logging.getLogger(__name__)
console = Console()

_SURY_KEY_URL = "https://packages.sury.org/php/apt.gpg"
_SURY_KEYRING = "/etc/apt/keyrings/sury-php.gpg"
_SURY_SOURCES = "/etc/apt/sources.list.d/sury-php.list"

EXTENSIONS = ("cli", "common", "mysql", "curl", "mbstring", "xml", "zip")


def is_installed(version: str) -> bool:
    """True if the FPM socket or the php-fpm binary for a version exists."""
    if Path(php_socket_path(version)).exists():
        return True
    return shell.find_binary(f"php-fpm{version}") is not None


def _apt_install(*packages: str, check: bool = True) -> bool:
    result = shell.run(["apt-get", "install", "-y", *packages], sudo=True, check=check)
    return result.returncode == 0


def add_sury_repository() -> None:
    """Add the packages.sury.org PHP repository without add-apt-repository."""
    codename = shell.run(["lsb_release", "-cs"]).stdout.strip()
    _apt_install("--no-install-recommends", "gnupg", "wget", check=False)
    shell.run(["mkdir", "-p", str(Path(_SURY_KEYRING).parent)], sudo=True)
    shell.run(["wget", "-qO", _SURY_KEYRING, _SURY_KEY_URL], sudo=True)
    source = f"deb [signed-by={_SURY_KEYRING}] https://packages.sury.org/php/ {codename} main\n"
    shell.run(["tee", _SURY_SOURCES], sudo=True, input=source)


def install(version: str) -> None:
    """Install php<version>-fpm and the common extensions."""
    package = f"php{version}-fpm"

    console.print("[bold][1/3][/bold] Trying default repositories")
    try:
        _apt_install(package)
    except ExternalCommandError:
        console.print("[bold][2/3][/bold] Not in default repos, adding PHP repository")
        add_sury_repository()
        shell.run(["apt-get", "update"], sudo=True)
        _apt_install(package)
    else:
        console.print("[bold][2/3][/bold] Installed from default repositories")

    console.print("[bold][3/3][/bold] Installing common extensions")
    for ext in EXTENSIONS:
        try:
            _apt_install(f"php{version}-{ext}")
        except PhparkError as exc:
            log.warning("could not install php%s-%s: %s", version, ext, exc)

    console.print(f"[green]PHP {version} installed.[/green]")
