"""NGINX config validation and reload."""

from __future__ import annotations

from phppark.errors import ExternalCommandError, NginxConfigError
from phppark.services import shell


def validate_config() -> None:
    """Run nginx -t. Raises NginxConfigError on failure."""
    try:
        shell.run(["nginx", "-t"], sudo=True)
    except ExternalCommandError as exc:
        raise NginxConfigError(
            f"NGINX config test failed:\n{exc.stderr}",
            cmd=exc.cmd,
            returncode=exc.returncode,
            stdout=exc.stdout,
            stderr=exc.stderr,
        ) from exc


def reload() -> None:
    """Validate config, then signal NGINX to reload."""
    validate_config()
    shell.run(["nginx", "-s", "reload"], sudo=True)
