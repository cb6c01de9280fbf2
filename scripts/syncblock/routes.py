"""
Routing Table Gateway

All interaction with the kernel routing table goes through the `route`
command (net-tools). Each operation spawns exactly one process and waits
for it; failures are raised immediately, nothing is retried.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Optional

from .config import SyncBlockConfig
from .errors import ProcessExitError, ProcessLaunchError, RouteParseError
from .models import Address, parse_address

# `route -n` prints a title line and a column header before the entries
HEADER_LINES = 2


class RouteTableGateway(ABC):
    """Abstract access to host reject routes."""

    @abstractmethod
    def list_reject_routes(self) -> set[Address]:
        """Return the destinations currently in the routing table."""
        ...

    @abstractmethod
    def add_reject(self, address: Address) -> None:
        """Add a host-scoped reject route for address."""
        ...

    @abstractmethod
    def delete_reject(self, address: Address) -> None:
        """Delete the host-scoped reject route for address."""
        ...


def parse_route_table(output: str) -> set[Address]:
    """Parse `route -n` output into the set of destination addresses.

    Skips the header lines and blank lines; the first whitespace-delimited
    field of every other line must be an IP address literal.
    """
    routes: set[Address] = set()
    for line in output.splitlines()[HEADER_LINES:]:
        parts = line.split()
        if not parts:
            continue
        try:
            routes.add(parse_address(parts[0]))
        except ValueError as e:
            raise RouteParseError(line) from e
    return routes


class RouteCommand(RouteTableGateway):
    """Routing table gateway backed by the `route` binary."""

    def __init__(self, config: Optional[SyncBlockConfig] = None):
        self.config = config or SyncBlockConfig.from_env()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def _route(self, *args: str) -> subprocess.CompletedProcess:
        """Execute route command"""
        cmd = [self.config.route_command, *args]
        try:
            return subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ProcessLaunchError(cmd, e) from e

    def _mutate(self, action: str, address: Address) -> None:
        args = (action, "-host", str(address), "reject")
        if self.config.dry_run:
            self.logger.info(
                f"[dry-run] would run: {self.config.route_command} {' '.join(args)}"
            )
            return

        result = self._route(*args)
        if result.returncode != 0:
            raise ProcessExitError(
                f"Command route {action} returned an error",
                [self.config.route_command, *args],
                result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                address=address,
            )

    def list_reject_routes(self) -> set[Address]:
        result = self._route("-n")
        if result.returncode != 0:
            raise ProcessExitError(
                "Command route -n returned an error",
                [self.config.route_command, "-n"],
                result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )

        routes = parse_route_table(result.stdout)
        self.logger.debug(f"parsed routes: {sorted(map(str, routes))}")
        return routes

    def add_reject(self, address: Address) -> None:
        self.logger.debug(f"blocking: {address}")
        self._mutate("add", address)

    def delete_reject(self, address: Address) -> None:
        self.logger.debug(f"unblocking: {address}")
        self._mutate("delete", address)
