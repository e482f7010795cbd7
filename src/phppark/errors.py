"""Custom exceptions for phppark."""

from __future__ import annotations

from typing import Sequence


class PhparkError(Exception):
    """Base exception for all phppark operations."""

    kind = "Error"

    def __init__(self, message: str, *, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


class StorageError(PhparkError):
    """Reading or writing a state or config file failed."""

    kind = "IOError"


class ParseError(PhparkError):
    """Persisted state is malformed."""

    kind = "ParseError"


class SiteNotFoundError(PhparkError):
    """Referenced site is not in the registry."""

    kind = "NotFound"


class DuplicateSiteError(PhparkError):
    """Site name is already taken."""

    kind = "Duplicate"


class InvalidConfigError(PhparkError):
    """Inputs violate a precondition (site name, document root, certificates)."""

    kind = "InvalidConfig"


class MissingDependencyError(PhparkError):
    """A required OS tool is not installed."""

    kind = "MissingDependency"


class PrivilegeDeniedError(PhparkError):
    """Elevation (sudo) was refused."""

    kind = "PrivilegeDenied"


class UnsupportedPlatformError(PhparkError):
    """No DNS strategy exists for the current OS."""

    kind = "UnsupportedPlatform"


class ExternalCommandError(PhparkError):
    """An external command exited non-zero."""

    kind = "ExternalCommandFailed"

    def __init__(
        self,
        message: str,
        *,
        cmd: Sequence[str] = (),
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
        exit_code: int = 1,
    ):
        super().__init__(message, exit_code=exit_code)
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class NginxConfigError(ExternalCommandError):
    """NGINX configuration validation failed."""
