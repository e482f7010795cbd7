"""CLI configuration: singleton PhparkConfig resolved at startup."""

from __future__ import annotations

from functools import lru_cache

from phppark_common import PhparkConfig


@lru_cache(maxsize=1)
def get_config() -> PhparkConfig:
    """Return the global PhparkConfig (resolved once, cached)."""
    return PhparkConfig()
