"""Exceptions raised while blocking or unblocking sync routes."""

from pathlib import Path
from typing import Optional, Sequence

from .models import Address, ResolutionErrorKind


class SyncBlockError(Exception):
    """Base class for all sync blocker errors"""

    def details(self) -> list[str]:
        """Extra report sections logged below the error message."""
        return []


class ConfigError(SyncBlockError):
    """Configuration file could not be read or parsed"""


# ─────────────────────────────────────────────────────────────────
# Route command errors
# ─────────────────────────────────────────────────────────────────


class ProcessError(SyncBlockError):
    """The route command could not be run or reported failure"""

    def __init__(self, message: str, command: Sequence[str]):
        super().__init__(message)
        self.command = list(command)


class ProcessLaunchError(ProcessError):
    """The route command could not be spawned"""

    def __init__(self, command: Sequence[str], cause: OSError):
        super().__init__(f"Could not run {command[0]}: {cause}", command)
        self.cause = cause

    def details(self) -> list[str]:
        return [f"Command: {' '.join(self.command)}"]


class ProcessExitError(ProcessError):
    """The route command ran but exited non-zero"""

    def __init__(
        self,
        message: str,
        command: Sequence[str],
        returncode: int,
        stdout: str = "",
        stderr: str = "",
        address: Optional[Address] = None,
    ):
        super().__init__(message, command)
        self.returncode = returncode
        self.stdout = stdout.strip()
        self.stderr = stderr.strip()
        self.address = address

    def details(self) -> list[str]:
        sections = [
            f"Command: {' '.join(self.command)} (exit {self.returncode})",
            f"Stdout:\n{self.stdout}",
            f"Stderr:\n{self.stderr}",
        ]
        if self.address is not None:
            sections.append(f"address: {self.address}")
        return sections


# ─────────────────────────────────────────────────────────────────
# Parse errors
# ─────────────────────────────────────────────────────────────────


class ParseError(SyncBlockError, ValueError):
    """Text that should hold an IP address literal does not"""


class RouteParseError(ParseError):
    """A routing table entry does not start with an IP address"""

    def __init__(self, line: str):
        super().__init__("Could not parse routing table entries")
        self.line = line

    def details(self) -> list[str]:
        return [f"Entry: {self.line!r}"]


class CacheParseError(ParseError):
    """A line in the route cache file is not an IP address"""

    def __init__(self, path: Path, lineno: int, line: str):
        super().__init__(f"Could not parse address in {path}")
        self.path = path
        self.lineno = lineno
        self.line = line

    def details(self) -> list[str]:
        return [f"Line {self.lineno}: {self.line!r}"]


class CacheIOError(SyncBlockError):
    """The route cache file could not be read or written"""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = path

    def details(self) -> list[str]:
        return [f"Path: {self.path}"]


# ─────────────────────────────────────────────────────────────────
# Resolution and reconciliation errors
# ─────────────────────────────────────────────────────────────────


class ResolutionError(SyncBlockError):
    """DNS failure for a single backend domain. Collected, not raised."""

    def __init__(self, domain: str, kind: ResolutionErrorKind, reason: str = ""):
        message = f"Could not resolve {domain}: {kind.value}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.domain = domain
        self.kind = kind
        self.reason = reason

    @property
    def is_connectivity_loss(self) -> bool:
        return self.kind is ResolutionErrorKind.NO_CONNECTIONS


class RouteTableError(SyncBlockError):
    """Reading the routing table failed; wraps the underlying error"""

    def details(self) -> list[str]:
        cause = self.__cause__
        if isinstance(cause, SyncBlockError):
            return [str(cause), *cause.details()]
        if cause is not None:
            return [str(cause)]
        return []


class LocalAddressError(SyncBlockError):
    """Refused to add a reject route for a non-global address"""

    def __init__(self, address: Address):
        super().__init__("Tried to block local address")
        self.address = address

    def details(self) -> list[str]:
        return [f"address: {self.address}"]
