"""Data models for sync route blocking."""

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from .errors import ResolutionError

Address = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def parse_address(text: str) -> Address:
    """Parse an IP address literal, raising ValueError if it is not one."""
    return ipaddress.ip_address(text.strip())


def sort_addresses(addresses) -> list[Address]:
    """Deterministic order for route mutations: IPv4 first, then by value."""
    return sorted(addresses, key=lambda a: (a.version, int(a)))


class ResolutionErrorKind(str, Enum):
    """Why a backend domain could not be resolved"""

    NO_CONNECTIONS = "no_connections"  # No nameserver reachable
    NXDOMAIN = "nxdomain"
    NO_ANSWER = "no_answer"  # Name exists but has no A/AAAA records
    SERVER_FAILURE = "server_failure"  # Nameservers answered with errors
    OTHER = "other"


@dataclass
class DomainResolution:
    """Result of resolving a single backend domain."""

    domain: str
    addresses: set[Address] = field(default_factory=set)
    error: Optional["ResolutionError"] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ReconcileResult:
    """Outcome of a block/unblock run."""

    action: str  # "block" or "unblock"
    changed: list[Address] = field(default_factory=list)
    skipped: list[Address] = field(default_factory=list)
    dry_run: bool = False

    def summary(self) -> str:
        verb = "blocked" if self.action == "block" else "unblocked"
        prefix = "[dry-run] would have " if self.dry_run else ""
        return (
            f"{prefix}{verb} {len(self.changed)} address(es), "
            f"{len(self.skipped)} already {verb}"
        )
