"""Configuration for sync route blocking."""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

# === reMarkable sync backends ===
SYNC_BACKENDS: tuple[str, ...] = (
    # App Engine services
    "hwr-production-dot-remarkable-production.appspot.com",
    "service-manager-production-dot-remarkable-production.appspot.com",
    "local.appspot.com",
    # reMarkable cloud
    "my.remarkable.com",
    "ping.remarkable.com",
    "internal.cloud.remarkable.com",
    # Google frontends serving the sync API
    "ams15s41-in-f20.1e100.net",
    "ams15s48-in-f20.1e100.net",
    "206.137.117.34.bc.googleusercontent.com",
)

DEFAULT_CACHE_FILE = "routes.txt"


def _as_bool(value: Any) -> bool:
    """YAML booleans as-is; quoted strings only count when "true"."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


@dataclass(frozen=True)
class SyncBlockConfig:
    """Configuration for sync route blocking."""

    # Domains whose addresses get reject routes (not configurable from files/env)
    backends: tuple[str, ...] = SYNC_BACKENDS

    # Last successfully resolved addresses, used when DNS is unreachable
    cache_file: str = DEFAULT_CACHE_FILE

    # Routing table binary (net-tools `route`)
    route_command: str = "route"

    # Custom nameservers (empty = system resolver configuration)
    dns_servers: tuple[str, ...] = field(default_factory=tuple)

    # Parallel DNS lookups
    resolve_workers: int = len(SYNC_BACKENDS)

    # Log route mutations instead of running them
    dry_run: bool = False

    # Refuse to add reject routes for private/loopback/link-local addresses
    protect_local: bool = False

    @property
    def cache_path(self) -> Path:
        return Path(self.cache_file)

    @classmethod
    def from_values(cls, values: dict[str, Any]) -> "SyncBlockConfig":
        """Create config from a parsed config file mapping."""
        known = {f.name for f in fields(cls)} - {"backends"}
        if "backends" in values:
            logger.warning("Ignoring 'backends' in config file: backend list is fixed")

        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            if key == "backends":
                continue
            if key not in known:
                logger.warning(f"Ignoring unknown config key: {key}")
                continue
            kwargs[key] = value

        if "dns_servers" in kwargs:
            servers = kwargs["dns_servers"] or []
            if isinstance(servers, str):
                servers = [s.strip() for s in servers.split(",") if s.strip()]
            kwargs["dns_servers"] = tuple(str(s) for s in servers)
        if "resolve_workers" in kwargs:
            try:
                kwargs["resolve_workers"] = int(kwargs["resolve_workers"])
            except (TypeError, ValueError) as e:
                raise ConfigError(f"resolve_workers: {e}") from e
        for key in ("cache_file", "route_command"):
            if key in kwargs:
                kwargs[key] = str(kwargs[key])
        for key in ("dry_run", "protect_local"):
            if key in kwargs:
                kwargs[key] = _as_bool(kwargs[key])

        return cls(**kwargs)

    @classmethod
    def from_file(cls, config_file: str) -> "SyncBlockConfig":
        """Create config from a YAML file."""
        try:
            with open(config_file) as f:
                values = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError(f"Could not read config file {config_file}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse config file {config_file}: {e}") from e

        if not isinstance(values, dict):
            raise ConfigError(f"Config file {config_file} must contain a mapping")

        return cls.from_values(values)

    def with_env(self) -> "SyncBlockConfig":
        """Return a copy with environment variable overrides applied."""
        overrides: dict[str, Any] = {}

        cache_file = os.environ.get("SYNCBLOCK_CACHE_FILE", "")
        if cache_file:
            overrides["cache_file"] = cache_file

        route_command = os.environ.get("SYNCBLOCK_ROUTE_COMMAND", "")
        if route_command:
            overrides["route_command"] = route_command

        servers_env = os.environ.get("SYNCBLOCK_DNS_SERVERS", "")
        if servers_env:
            overrides["dns_servers"] = tuple(
                s.strip() for s in servers_env.split(",") if s.strip()
            )

        workers = os.environ.get("SYNCBLOCK_RESOLVE_WORKERS", "")
        if workers:
            try:
                overrides["resolve_workers"] = int(workers)
            except ValueError as e:
                raise ConfigError(f"SYNCBLOCK_RESOLVE_WORKERS: {e}") from e

        if "SYNCBLOCK_DRY_RUN" in os.environ:
            overrides["dry_run"] = os.environ["SYNCBLOCK_DRY_RUN"].lower() == "true"

        if "SYNCBLOCK_PROTECT_LOCAL" in os.environ:
            overrides["protect_local"] = (
                os.environ["SYNCBLOCK_PROTECT_LOCAL"].lower() == "true"
            )

        return replace(self, **overrides)

    @classmethod
    def from_env(cls) -> "SyncBlockConfig":
        """Create config from environment variables."""
        return cls().with_env()

    @classmethod
    def load(cls, config_file: Optional[str] = None) -> "SyncBlockConfig":
        """Defaults, then the YAML file (if any), then environment variables."""
        base = cls.from_file(config_file) if config_file else cls()
        return base.with_env()
