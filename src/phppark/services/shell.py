"""Subprocess wrappers with sudo elevation and error mapping."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from typing import Sequence

from phppark.errors import ExternalCommandError, MissingDependencyError, PrivilegeDeniedError

log = logging.getLogger(__name__)

_SBIN_DIRS = ("/usr/local/sbin", "/usr/sbin", "/sbin")

# sudo's own refusal messages, as opposed to failures of the wrapped command
_SUDO_DENIED = (
    "a password is required",
    "incorrect password attempt",
    "is not in the sudoers file",
    "is not allowed to execute",
    "a terminal is required",
    "no askpass program specified",
)


def _is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


def find_binary(name: str) -> str | None:
    """Locate an executable on PATH, also searching the sbin directories."""
    search = os.pathsep.join([os.environ.get("PATH", ""), *_SBIN_DIRS])
    return shutil.which(name, path=search)


def run(
    cmd: Sequence[str],
    *,
    sudo: bool = False,
    check: bool = True,
    input: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command and capture its output.

    With ``sudo=True`` the command is prefixed with ``sudo`` unless we are
    already root; sudo may prompt for a password on the terminal and there is
    no timeout. A refused elevation raises PrivilegeDeniedError, any other
    non-zero exit raises ExternalCommandError when ``check`` is set.
    """
    argv = list(cmd)
    elevated = sudo and not _is_root()
    if elevated:
        argv = ["sudo", *argv]
    log.debug("running: %s", " ".join(argv))
    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            input=input,
            check=False,
        )
    except FileNotFoundError as exc:
        raise MissingDependencyError(f"Command not found: {argv[0]}") from exc
    except PermissionError as exc:
        raise PrivilegeDeniedError(f"Permission denied running {argv[0]}") from exc

    if result.returncode != 0:
        stderr = result.stderr or ""
        if elevated and any(marker in stderr for marker in _SUDO_DENIED):
            raise PrivilegeDeniedError(
                f"Elevation refused for: {' '.join(cmd)}\n{stderr.strip()}"
            )
        if check:
            raise ExternalCommandError(
                f"Command failed: {' '.join(argv)}\nstderr: {stderr.strip()}",
                cmd=argv,
                returncode=result.returncode,
                stdout=result.stdout or "",
                stderr=stderr,
            )
    return result
