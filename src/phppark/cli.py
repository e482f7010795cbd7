"""Root Typer application for the phppark CLI."""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from phppark.commands import dns, install, permissions, php, settings, site
from phppark.context import err_console

app = typer.Typer(
    name="phppark",
    help="phppark: serve local PHP projects at <name>.test through NGINX and PHP-FPM.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


app.command(name="install")(install.install)
app.command(name="park")(site.park)
app.command(name="link")(site.link)
app.command(name="unpark")(site.unpark)
app.command(name="unlink")(site.unlink)
app.command(name="secure")(site.secure)
app.command(name="unsecure")(site.unsecure)
app.command(name="list")(site.list_sites)
app.command(name="status")(site.status)
app.command(name="sync")(site.sync)
app.command(name="fix-permissions")(permissions.fix_permissions)

app.add_typer(dns.app, name="dns", help="Wildcard DNS for the local domain.")
app.add_typer(php.app, name="php", help="PHP-FPM versions.")
app.add_typer(settings.app, name="config", help="Global settings.")

if __name__ == "__main__":
    app()
