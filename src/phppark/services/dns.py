"""Wildcard DNS binding for the local pseudo-TLD.

Each supported OS gets one ``DnsStrategy`` record describing where the
resolver rule lives, what it contains, which daemon must be installed and
which commands apply the rule and flush caches. ``STRATEGIES`` maps
``sys.platform`` to its record; ``DnsManager`` runs whichever one was
selected at startup.
"""

from __future__ import annotations

import logging
import re
import socket
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from phppark_common import LOOPBACK_ADDRESS

from phppark.errors import (
    InvalidConfigError,
    MissingDependencyError,
    PhparkError,
    UnsupportedPlatformError,
)
from phppark.services import shell

log = logging.getLogger(__name__)

_DOMAIN_RE = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")


class BindingState(str, Enum):
    UNBOUND = "unbound"
    BOUND = "bound"


@dataclass(frozen=True)
class DnsStrategy:
    name: str
    rule_dir: Path
    render_rule: Callable[[str], str]
    daemon: str | None = None
    apply_commands: tuple[tuple[str, ...], ...] = ()
    flush_commands: tuple[tuple[str, ...], ...] = ()

    def rule_path(self, domain: str) -> Path:
        return self.rule_dir / domain


def _dnsmasq_rule(domain: str) -> str:
    return f"address=/.{domain}/{LOOPBACK_ADDRESS}\n"


def _resolver_rule(domain: str) -> str:
    return f"nameserver {LOOPBACK_ADDRESS}\nport 53\n"


DNSMASQ = DnsStrategy(
    name="dnsmasq",
    rule_dir=Path("/etc/dnsmasq.d"),
    render_rule=_dnsmasq_rule,
    daemon="dnsmasq",
    apply_commands=(("systemctl", "restart", "dnsmasq"),),
    flush_commands=(("resolvectl", "flush-caches"),),
)

# /etc/resolver/<domain> still needs a resolver answering on 127.0.0.1:53
MACOS_RESOLVER = DnsStrategy(
    name="macos-resolver",
    rule_dir=Path("/etc/resolver"),
    render_rule=_resolver_rule,
    flush_commands=(
        ("dscacheutil", "-flushcache"),
        ("killall", "-HUP", "mDNSResponder"),
    ),
)

STRATEGIES: dict[str, DnsStrategy] = {
    "linux": DNSMASQ,
    "darwin": MACOS_RESOLVER,
}


def select_strategy(platform: str | None = None) -> DnsStrategy:
    """Pick the DNS strategy for an OS identity (defaults to sys.platform)."""
    platform = platform or sys.platform
    try:
        return STRATEGIES[platform]
    except KeyError:
        raise UnsupportedPlatformError(
            f"No DNS strategy for platform {platform!r} "
            f"(supported: {', '.join(sorted(STRATEGIES))})"
        ) from None


def validate_domain(domain: str) -> None:
    if not _DOMAIN_RE.fullmatch(domain or ""):
        raise InvalidConfigError(f"Invalid domain suffix: {domain!r}")


class DnsManager:
    """Installs, removes and checks the wildcard rule for a domain."""

    def __init__(self, strategy: DnsStrategy):
        self.strategy = strategy

    def check(self, domain: str) -> bool:
        """True if the rule file is present. Never queries DNS."""
        validate_domain(domain)
        return self.strategy.rule_path(domain).exists()

    def state(self, domain: str) -> BindingState:
        return BindingState.BOUND if self.check(domain) else BindingState.UNBOUND

    def setup(self, domain: str) -> None:
        """Install the rule mapping ``*.domain`` to loopback. Idempotent."""
        validate_domain(domain)
        s = self.strategy
        if s.daemon and shell.find_binary(s.daemon) is None:
            raise MissingDependencyError(
                f"{s.daemon} is not installed (e.g. sudo apt install {s.daemon})"
            )
        path = s.rule_path(domain)
        log.info("installing %s rule %s", s.name, path)
        shell.run(["mkdir", "-p", str(s.rule_dir)], sudo=True)
        shell.run(["tee", str(path)], sudo=True, input=s.render_rule(domain))
        for cmd in s.apply_commands:
            shell.run(list(cmd), sudo=True)
        self._flush()

    def remove(self, domain: str) -> None:
        """Delete the rule. Idempotent; refresh failures are only logged."""
        validate_domain(domain)
        s = self.strategy
        path = s.rule_path(domain)
        if not path.exists():
            log.info("no %s rule for %s, nothing to remove", s.name, domain)
            return
        shell.run(["rm", "-f", str(path)], sudo=True)
        for cmd in s.apply_commands:
            self._best_effort(cmd)
        self._flush()

    def _flush(self) -> None:
        for cmd in self.strategy.flush_commands:
            self._best_effort(cmd)

    def _best_effort(self, cmd: tuple[str, ...]) -> None:
        try:
            shell.run(list(cmd), sudo=True)
        except PhparkError as exc:
            log.warning("ignoring failure of %s: %s", " ".join(cmd), exc)


def resolves_to_loopback(hostname: str) -> bool:
    """Live lookup: does hostname currently resolve to 127.0.0.1?"""
    try:
        address = socket.gethostbyname(hostname)
    except OSError:
        return False
    return address == LOOPBACK_ADDRESS
