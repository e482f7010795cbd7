"""Wildcard DNS binding commands."""

from __future__ import annotations

import typer
from rich.console import Console

from phppark.audit import audit
from phppark.context import handle_errors, load_provisioner
from phppark.services.dns import resolves_to_loopback

app = typer.Typer(no_args_is_help=True)
console = Console()


@app.command()
def setup() -> None:
    """Resolve *.<domain> to 127.0.0.1 (requires sudo)."""
    with handle_errors():
        prov = load_provisioner()
        domain = prov.settings.domain
        with audit("dns.setup", target=domain, strategy=prov.dns.strategy.name):
            prov.bind_dns()
        console.print(f"[green]*.{domain} now resolves to 127.0.0.1[/green]")


@app.command()
def remove() -> None:
    """Remove the resolver rule for the domain (sites stay registered)."""
    with handle_errors():
        prov = load_provisioner()
        domain = prov.settings.domain
        with audit("dns.remove", target=domain, strategy=prov.dns.strategy.name):
            prov.unbind_dns()
        console.print(f"[green]DNS rule for .{domain} removed.[/green]")


@app.command()
def check() -> None:
    """Check whether the resolver rule is installed."""
    with handle_errors():
        prov = load_provisioner()
        domain = prov.settings.domain
        if prov.dns.check(domain):
            console.print(f"[green]DNS rule for .{domain} is installed.[/green]")
            return
    console.print(f"[yellow]DNS rule for .{domain} is not installed.[/yellow] Run 'phppark dns setup'.")
    raise typer.Exit(1)


@app.command(name="test")
def test_lookup(hostname: str = typer.Argument(..., help="Hostname to resolve, e.g. blog.test")) -> None:
    """Do a live lookup and report whether it resolves to 127.0.0.1."""
    if resolves_to_loopback(hostname):
        console.print(f"[green]{hostname} resolves to 127.0.0.1[/green]")
        return
    console.print(f"[red]{hostname} does not resolve to 127.0.0.1[/red]")
    raise typer.Exit(1)
