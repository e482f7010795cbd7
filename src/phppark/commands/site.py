"""Site lifecycle commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from phppark_common import CertificatePair, Site

from phppark.audit import audit
from phppark.commands.php import offer_php_install
from phppark.context import handle_errors, load_provisioner
from phppark.services.provisioner import Provisioner

console = Console()


def _url(prov: Provisioner, site: Site) -> str:
    scheme = "https" if site.secured else "http"
    return f"{scheme}://{site.server_name(prov.settings.domain)}/"


def park(
    path: Path = typer.Argument(Path("."), help="Project directory (defaults to the current one)"),
    each: bool = typer.Option(False, "--each", help="Park every subdirectory of PATH instead"),
) -> None:
    """Serve a project directory at <dirname>.<domain>."""
    with handle_errors():
        prov = load_provisioner()
        offer_php_install(prov.settings.default_php)
        with audit("site.park", target=str(path), each=each):
            sites = prov.park_children(path) if each else [prov.park(path)]
        for site in sites:
            console.print(f"[green]Parked[/green] {_url(prov, site)} → {site.path}")
        if not sites:
            console.print(f"No subdirectories found in {path}")


def link(
    name: str = typer.Argument(..., help="Site name (becomes <name>.<domain>)"),
    path: Path = typer.Option(Path("."), help="Project directory"),
) -> None:
    """Serve a single directory under an explicit name."""
    with handle_errors():
        prov = load_provisioner()
        offer_php_install(prov.settings.default_php)
        with audit("site.link", target=name, path=str(path)):
            site = prov.link(name, path)
        console.print(f"[green]Linked[/green] {_url(prov, site)} → {site.path}")


def unpark(name: str = typer.Argument(..., help="Site name")) -> None:
    """Remove a parked site and its vhost (DNS stays bound)."""
    with handle_errors():
        prov = load_provisioner()
        with audit("site.unpark", target=name):
            prov.unpark(name)
        console.print(f"[green]Unparked[/green] {name}")


def unlink(name: str = typer.Argument(..., help="Site name")) -> None:
    """Remove a linked site and its vhost (DNS stays bound)."""
    with handle_errors():
        prov = load_provisioner()
        with audit("site.unlink", target=name):
            prov.unlink(name)
        console.print(f"[green]Unlinked[/green] {name}")


def secure(
    name: str = typer.Argument(..., help="Site name"),
    cert: Optional[Path] = typer.Option(None, help="Certificate (PEM) to install for the site"),
    key: Optional[Path] = typer.Option(None, help="Private key (PEM) to install for the site"),
) -> None:
    """Serve a site over HTTPS with a supplied certificate/key pair."""
    with handle_errors():
        if (cert is None) != (key is None):
            console.print("[red]Error:[/red] --cert and --key must be given together")
            raise typer.Exit(1)
        pair = CertificatePair(cert_path=cert, key_path=key) if cert and key else None
        prov = load_provisioner()
        with audit("site.secure", target=name, cert=str(cert) if cert else None):
            site = prov.secure(name, pair)
        console.print(f"[green]Secured[/green] {_url(prov, site)}")


def unsecure(name: str = typer.Argument(..., help="Site name")) -> None:
    """Serve a site over plain HTTP again."""
    with handle_errors():
        prov = load_provisioner()
        with audit("site.unsecure", target=name):
            site = prov.unsecure(name)
        console.print(f"[green]Unsecured[/green] {_url(prov, site)}")


def list_sites() -> None:
    """List all parked and linked sites."""
    with handle_errors():
        prov = load_provisioner()
        sites = prov.registry.list_sites()

    if not sites:
        console.print("No sites registered.")
        return

    table = Table(title="Sites")
    table.add_column("Site", style="cyan")
    table.add_column("URL")
    table.add_column("Type")
    table.add_column("PHP", style="yellow")
    table.add_column("Path")
    for site in sites:
        php = site.php_version or f"{prov.settings.default_php} (default)"
        table.add_row(site.name, _url(prov, site), site.kind.value, php, str(site.path))
    console.print(table)


def status() -> None:
    """Show DNS binding state and registry/vhost drift."""
    with handle_errors():
        prov = load_provisioner()
        state = prov.dns_state()
        drift = prov.drift()

    domain = prov.settings.domain
    colour = "green" if state.value == "bound" else "yellow"
    console.print(f"DNS for .{domain}: [{colour}]{state.value}[/{colour}]")
    console.print(f"Sites: {len(prov.registry.sites)}  vhost dir: {prov.settings.nginx_config_path}")
    if drift.clean:
        console.print("[green]Registry and vhosts are in sync.[/green]")
        return
    for name in drift.missing:
        console.print(f"  [yellow]missing vhost:[/yellow] {name}")
    for name in drift.orphaned:
        console.print(f"  [yellow]orphaned vhost:[/yellow] {name}")
    console.print("Run 'phppark sync' to repair.")
    raise typer.Exit(1)


def sync() -> None:
    """Re-render every vhost, delete orphans and reload NGINX."""
    with handle_errors():
        prov = load_provisioner()
        with audit("site.sync"):
            console.print("[bold][1/2][/bold] Re-rendering vhosts")
            drift = prov.sync()
            console.print("[bold][2/2][/bold] Reloaded NGINX")
    for name in drift.missing:
        console.print(f"  Restored: {name}")
    for name in drift.orphaned:
        console.print(f"  Removed orphan: {name}")
    console.print(f"[green]{len(prov.registry.sites)} vhosts in sync.[/green]")
