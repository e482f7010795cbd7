"""Global settings commands (config.yaml)."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from phppark.audit import audit
from phppark.config import get_config
from phppark.context import handle_errors
from phppark.services import storage
from phppark.services.dns import validate_domain
from phppark.services.provisioner import validate_php_version

app = typer.Typer(no_args_is_help=True)
console = Console()


@app.command()
def show() -> None:
    """Show the current settings."""
    with handle_errors():
        cfg = get_config()
        settings = storage.load_settings(cfg.config_file)

    table = Table(title=str(cfg.config_file))
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in settings.model_dump(mode="json").items():
        table.add_row(key, str(value))
    console.print(table)


@app.command(name="set")
def set_(
    domain: Optional[str] = typer.Option(None, help="Pseudo-TLD for sites, e.g. test"),
    php: Optional[str] = typer.Option(None, "--php", help="Default PHP version"),
    nginx_path: Optional[Path] = typer.Option(None, help="Directory NGINX loads vhosts from"),
    https: Optional[bool] = typer.Option(None, "--https/--no-https", help="Secure new sites by default"),
) -> None:
    """Change settings. Existing vhosts are not touched until 'phppark sync'."""
    changes = {
        "domain": domain,
        "default_php": php,
        "nginx_config_path": nginx_path,
        "use_https": https,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        console.print("Nothing to change.")
        raise typer.Exit(1)

    with handle_errors():
        cfg = get_config()
        if domain is not None:
            validate_domain(domain)
        if php is not None:
            validate_php_version(php)
        with audit("config.set", target=str(cfg.config_file), **{k: str(v) for k, v in changes.items()}):
            settings = storage.load_settings(cfg.config_file).model_copy(update=changes)
            storage.save_settings(cfg.config_file, settings)

    for key, value in changes.items():
        console.print(f"[green]{key}[/green] = {value}")
    if "domain" in changes:
        console.print("[yellow]Run 'phppark dns setup' and 'phppark sync' for the new domain.[/yellow]")
