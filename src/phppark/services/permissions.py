"""Make a site directory readable by the PHP-FPM user."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from phppark.errors import PrivilegeDeniedError, StorageError

log = logging.getLogger(__name__)

# Laravel/Symfony directories php-fpm must write to
WRITABLE_DIRS = ("storage", "bootstrap/cache")
FPM_GROUP = "www-data"


def _chmod(path: Path, mode: int) -> None:
    try:
        os.chmod(path, mode)
    except PermissionError as exc:
        raise PrivilegeDeniedError(f"Permission denied changing mode of {path}") from exc
    except OSError as exc:
        raise StorageError(f"Failed to chmod {path}: {exc}") from exc


def fix_parent_permissions(path: Path, home: Path) -> None:
    """chmod 0755 on path and each parent up to home.

    Paths outside home only get their own mode changed.
    """
    current = path
    while True:
        _chmod(current, 0o755)
        if current == home or home not in current.parents:
            break
        current = current.parent


def fix_directory_permissions(path: Path) -> None:
    """Directories 0755, files 0644, recursively. Symlinks are not followed."""
    _chmod(path, 0o755)
    for root, dirs, files in os.walk(path):
        for d in dirs:
            dp = Path(root) / d
            if not dp.is_symlink():
                _chmod(dp, 0o755)
        for f in files:
            fp = Path(root) / f
            if not fp.is_symlink():
                _chmod(fp, 0o644)


def _make_group_writable(path: Path) -> None:
    for root, dirs, files in os.walk(path):
        for entry in [Path(root), *(Path(root) / f for f in files)]:
            try:
                shutil.chown(entry, group=FPM_GROUP)
                os.chmod(entry, 0o775)
            except (LookupError, OSError) as exc:
                log.warning("could not make %s writable for %s: %s", entry, FPM_GROUP, exc)
                return


def fix_site_permissions(site_path: Path, home: Path | None = None) -> None:
    """Fix permissions for a site directory so php-fpm can serve it."""
    path = Path(site_path).resolve()
    home = (home or Path.home()).resolve()
    fix_parent_permissions(path, home)
    fix_directory_permissions(path)
    for rel in WRITABLE_DIRS:
        target = path / rel
        if target.is_dir():
            _make_group_writable(target)
