"""File permission repair command."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from phppark.audit import audit
from phppark.context import handle_errors
from phppark.services import permissions

console = Console()


def fix_permissions(
    path: Path = typer.Argument(Path("."), help="Site directory"),
) -> None:
    """Make a site directory readable by php-fpm (755 dirs, 644 files)."""
    with handle_errors():
        with audit("permissions.fix", target=str(path)):
            permissions.fix_site_permissions(path)
    console.print(f"[green]Permissions fixed for {path.resolve()}[/green]")
