"""PHP-FPM version commands."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from phppark.audit import audit
from phppark.context import handle_errors, load_provisioner
from phppark.services import php
from phppark.services.provisioner import validate_php_version

app = typer.Typer(no_args_is_help=True)
console = Console()


def offer_php_install(version: str) -> None:
    """Ask once whether to install a missing PHP-FPM version."""
    if php.is_installed(version):
        return
    console.print(f"\n[yellow]PHP {version} is not installed.[/yellow]")
    if typer.confirm("Would you like to install it now?", default=False):
        with audit("php.install", target=version):
            php.install(version)
    else:
        console.print(f"Continuing; sites on PHP {version} will fail until it is installed.")


@app.command()
def install(version: str = typer.Argument(..., help="PHP version, e.g. 8.3")) -> None:
    """Install php<VERSION>-fpm and common extensions (apt)."""
    with handle_errors():
        validate_php_version(version)
        with audit("php.install", target=version):
            php.install(version)


@app.command()
def use(
    name: str = typer.Argument(..., help="Site name"),
    version: Optional[str] = typer.Argument(None, help="PHP version (omit to use the default)"),
) -> None:
    """Pin a site to a PHP version."""
    with handle_errors():
        prov = load_provisioner()
        if version:
            validate_php_version(version)
            offer_php_install(version)
        with audit("php.use", target=name, version=version):
            site = prov.use_php(name, version)
        effective = site.effective_php(prov.settings.default_php)
        console.print(f"[green]{name}[/green] now uses PHP {effective}")
