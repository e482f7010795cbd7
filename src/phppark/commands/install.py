"""First-run install command."""

from __future__ import annotations

import typer
from rich.console import Console

from phppark.audit import audit
from phppark.config import get_config
from phppark.context import handle_errors, load_provisioner
from phppark.services import storage

console = Console()


def install(
    skip_dns: bool = typer.Option(False, "--skip-dns", help="Don't configure the DNS resolver"),
) -> None:
    """Create ~/.phppark, write default settings and bind DNS for the domain."""
    cfg = get_config()

    with handle_errors():
        console.print(f"[bold][1/3][/bold] Creating {cfg.home}")
        cfg.ensure_directories()

        with audit("install", target=str(cfg.home), skip_dns=skip_dns):
            console.print("[bold][2/3][/bold] Writing settings")
            if cfg.config_file.exists():
                console.print(f"  Keeping existing {cfg.config_file}")
            else:
                storage.save_settings(cfg.config_file, storage.load_settings(cfg.config_file))
                console.print(f"  Wrote {cfg.config_file}")

            prov = load_provisioner(cfg)
            if skip_dns:
                console.print("[bold][3/3][/bold] Skipping DNS setup (--skip-dns)")
            else:
                console.print(f"[bold][3/3][/bold] Binding *.{prov.settings.domain} to 127.0.0.1")
                prov.bind_dns()

    console.print("\n[green bold]phppark installed![/green bold] Park a project with: phppark park")
