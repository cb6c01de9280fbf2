"""Sync route blocking package.

Public API:
    - SyncBlocker: block()/unblock()/status() reconciliation
    - SyncBlockConfig: Configuration dataclass
    - RouteCommand: Routing table gateway using the `route` binary
    - AddressResolver: Backend DNS resolution with cache fallback

Extension API (for substituting fakes):
    - RouteTableGateway: Base class for routing table gateways
"""

from .config import SYNC_BACKENDS, SyncBlockConfig
from .errors import (
    CacheIOError,
    CacheParseError,
    ConfigError,
    LocalAddressError,
    ParseError,
    ProcessError,
    ProcessExitError,
    ProcessLaunchError,
    ResolutionError,
    RouteParseError,
    RouteTableError,
    SyncBlockError,
)
from .models import Address, ReconcileResult, ResolutionErrorKind, parse_address
from .reconciler import SyncBlocker
from .resolver import AddressResolver
from .routes import RouteCommand, RouteTableGateway


def create_blocker(config: SyncBlockConfig) -> SyncBlocker:
    """Wire a SyncBlocker with the real route command and DNS resolver."""
    return SyncBlocker(
        RouteCommand(config),
        AddressResolver(config),
        config,
    )


__all__ = [
    # Main API
    "SyncBlocker",
    "SyncBlockConfig",
    "SYNC_BACKENDS",
    "RouteCommand",
    "AddressResolver",
    "ReconcileResult",
    "create_blocker",
    # Extension API
    "RouteTableGateway",
    # Models
    "Address",
    "ResolutionErrorKind",
    "parse_address",
    # Errors
    "SyncBlockError",
    "ConfigError",
    "ProcessError",
    "ProcessLaunchError",
    "ProcessExitError",
    "ParseError",
    "RouteParseError",
    "CacheParseError",
    "CacheIOError",
    "ResolutionError",
    "RouteTableError",
    "LocalAddressError",
]
