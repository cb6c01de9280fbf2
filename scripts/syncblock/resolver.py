"""
Address Resolver

Resolves the sync backend domains to IP addresses with dnspython. Each
domain is resolved independently; failures are collected rather than
raised. When DNS is unreachable the addresses cached by the previous run
are merged in, so a blocking run during an outage still has targets.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from threading import Lock
from typing import Iterable, Optional

import dns.exception
import dns.resolver

from .config import SyncBlockConfig
from .errors import CacheIOError, CacheParseError, ResolutionError
from .models import (
    Address,
    DomainResolution,
    ResolutionErrorKind,
    parse_address,
    sort_addresses,
)

# Errors recorded by NoNameservers that mean the server was never reached
_TRANSPORT_ERRORS = (OSError, EOFError, dns.exception.Timeout)


def classify_dns_error(exc: dns.exception.DNSException) -> ResolutionErrorKind:
    """Map a dnspython exception onto a resolution error kind."""
    if isinstance(exc, dns.resolver.NXDOMAIN):
        return ResolutionErrorKind.NXDOMAIN
    if isinstance(exc, dns.resolver.NoAnswer):
        return ResolutionErrorKind.NO_ANSWER
    if isinstance(exc, (dns.exception.Timeout, dns.resolver.NoResolverConfiguration)):
        return ResolutionErrorKind.NO_CONNECTIONS
    if isinstance(exc, dns.resolver.NoNameservers):
        # errors: [(nameserver, tcp, port, exception, response), ...]
        errors = exc.kwargs.get("errors") or []
        if all(isinstance(err[3], _TRANSPORT_ERRORS) for err in errors):
            return ResolutionErrorKind.NO_CONNECTIONS
        return ResolutionErrorKind.SERVER_FAILURE
    return ResolutionErrorKind.OTHER


class AddressResolver:
    """Resolves backend domains and maintains the route cache file."""

    def __init__(
        self,
        config: Optional[SyncBlockConfig] = None,
        resolver: Optional[dns.resolver.Resolver] = None,
    ):
        self.config = config or SyncBlockConfig.from_env()
        self.logger = logging.getLogger(__name__)
        self._resolver = resolver
        self._lock = Lock()

    @property
    def resolver(self) -> dns.resolver.Resolver:
        """dnspython resolver, created on first use.

        Raises NoResolverConfiguration when the system has no nameservers
        configured, which is reported as a connectivity failure per domain.
        """
        with self._lock:
            if self._resolver is None:
                if self.config.dns_servers:
                    resolver = dns.resolver.Resolver(configure=False)
                    resolver.nameservers = list(self.config.dns_servers)
                else:
                    resolver = dns.resolver.Resolver()
                self._resolver = resolver
            return self._resolver

    # ─────────────────────────────────────────────────────────────────
    # DNS resolution
    # ─────────────────────────────────────────────────────────────────

    def _lookup(self, domain: str, rdtype: str) -> set[Address]:
        answers = self.resolver.resolve(domain, rdtype)
        return {parse_address(str(rdata)) for rdata in answers}

    def resolve_domain(self, domain: str) -> set[Address]:
        """Resolve one domain, IPv4 first and IPv6 only if there is no A record."""
        try:
            try:
                return self._lookup(domain, "A")
            except dns.resolver.NoAnswer:
                return self._lookup(domain, "AAAA")
        except dns.exception.DNSException as e:
            raise ResolutionError(domain, classify_dns_error(e), str(e)) from e

    def _resolve_one(self, domain: str) -> DomainResolution:
        try:
            return DomainResolution(domain, self.resolve_domain(domain))
        except ResolutionError as e:
            return DomainResolution(domain, error=e)

    def resolve_all(self) -> tuple[set[Address], list[ResolutionError]]:
        """Resolve all backends in parallel.

        Returns the union of resolved addresses and the per-domain failures.
        """
        backends = list(self.config.backends)
        results: list[DomainResolution] = []

        if backends:
            workers = max(1, min(self.config.resolve_workers, len(backends)))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures: list[Future[DomainResolution]] = [
                    executor.submit(self._resolve_one, domain) for domain in backends
                ]
                for future in as_completed(futures):
                    results.append(future.result())

        addresses: set[Address] = set()
        errors: list[ResolutionError] = []
        for result in results:
            if result.error is not None:
                self.logger.warning(str(result.error))
                errors.append(result.error)
            else:
                addresses.update(result.addresses)

        self.logger.debug(f"sync routes: {[str(a) for a in sort_addresses(addresses)]}")
        return addresses, errors

    def routes(self, persist: bool = True) -> list[Address]:
        """Addresses to block or unblock.

        Falls back to the cache file only when some lookup failed for lack
        of connectivity. The result is written back to the cache unless
        `persist` is False.
        """
        addresses, errors = self.resolve_all()

        if any(e.is_connectivity_loss for e in errors):
            cached = self.load_cache()
            self.logger.warning(
                f"DNS unreachable, using {len(cached)} cached address(es) "
                f"from {self.config.cache_path}"
            )
            addresses.update(cached)

        if persist:
            self.save_cache(addresses)
        return sort_addresses(addresses)

    # ─────────────────────────────────────────────────────────────────
    # Route cache file
    # ─────────────────────────────────────────────────────────────────

    def load_cache(self) -> list[Address]:
        """Read cached addresses; a missing file is an empty cache."""
        path = self.config.cache_path
        try:
            text = path.read_text()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise CacheIOError(f"Could not read {path}: {e}", path) from e

        addresses: list[Address] = []
        for lineno, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                addresses.append(parse_address(line))
            except ValueError as e:
                raise CacheParseError(path, lineno, line) from e
        return addresses

    def save_cache(self, addresses: Iterable[Address]) -> None:
        """Overwrite the cache file with one address per line."""
        path = self.config.cache_path
        lines = "\n".join(str(a) for a in sort_addresses(set(addresses)))
        try:
            path.write_text(lines)
        except OSError as e:
            raise CacheIOError(f"Could not cache routes to {path}: {e}", path) from e
