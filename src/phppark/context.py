"""Per-invocation wiring shared by the CLI commands."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator

import typer
from rich.console import Console
from rich.markup import escape

from phppark_common import PhparkConfig

from phppark.config import get_config
from phppark.errors import PhparkError
from phppark.services import storage
from phppark.services.dns import DnsManager, select_strategy
from phppark.services.provisioner import Provisioner

err_console = Console(stderr=True)


def load_provisioner(cfg: PhparkConfig | None = None) -> Provisioner:
    """Load settings and registry from disk and build a Provisioner."""
    cfg = cfg or get_config()
    settings = storage.load_settings(cfg.config_file)
    registry = storage.load_sites(cfg.sites_file)
    return Provisioner(cfg, settings, registry, DnsManager(select_strategy()))


@contextmanager
def handle_errors() -> Generator[None, None, None]:
    """Report a PhparkError as ``<kind>: <message>`` and exit non-zero."""
    try:
        yield
    except PhparkError as exc:
        err_console.print(f"[red bold]{exc.kind}:[/red bold] {escape(str(exc))}")
        raise typer.Exit(exc.exit_code) from exc
