"""Block or unblock sync by reconciling reject routes with backend addresses."""

import logging
from typing import Optional

from .config import SyncBlockConfig
from .errors import LocalAddressError, RouteTableError, SyncBlockError
from .models import Address, ReconcileResult
from .resolver import AddressResolver
from .routes import RouteCommand, RouteTableGateway


class SyncBlocker:
    """
    Adds or removes host reject routes for the sync backend addresses.

    Only the mutations needed to reach the requested state are issued;
    addresses already in that state are skipped, so re-running after a
    partial failure is safe. Mutations run one at a time and the first
    failure aborts the rest.
    """

    def __init__(
        self,
        gateway: Optional[RouteTableGateway] = None,
        resolver: Optional[AddressResolver] = None,
        config: Optional[SyncBlockConfig] = None,
    ):
        self.config = config or SyncBlockConfig()
        self.gateway = gateway or RouteCommand(self.config)
        self.resolver = resolver or AddressResolver(self.config)
        self.logger = logging.getLogger(__name__)

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run

    @property
    def protect_local(self) -> bool:
        return self.config.protect_local

    def _existing(self) -> set[Address]:
        try:
            return self.gateway.list_reject_routes()
        except SyncBlockError as e:
            raise RouteTableError("Error parsing routing table") from e

    def block(self) -> ReconcileResult:
        """Add reject routes for every backend address not already blocked."""
        self.logger.info("blocking sync")
        existing = self._existing()
        result = ReconcileResult(action="block", dry_run=self.dry_run)

        for address in self.resolver.routes():
            if address in existing:
                result.skipped.append(address)
                continue
            if self.protect_local and not address.is_global:
                raise LocalAddressError(address)

            self.gateway.add_reject(address)
            result.changed.append(address)

        self.logger.info(result.summary())
        return result

    def unblock(self) -> ReconcileResult:
        """Delete reject routes for every backend address currently blocked."""
        self.logger.info("unblocking sync")
        existing = self._existing()
        result = ReconcileResult(action="unblock", dry_run=self.dry_run)

        for address in self.resolver.routes():
            if address not in existing:
                result.skipped.append(address)
                continue

            self.gateway.delete_reject(address)
            result.changed.append(address)

        self.logger.info(result.summary())
        return result

    def status(self) -> dict[str, list[str]]:
        """Report which backend addresses are blocked.

        Touches neither the routing table nor the cache file.
        """
        existing = self._existing()
        routes = self.resolver.routes(persist=False)
        return {
            "blocked": [str(a) for a in routes if a in existing],
            "unblocked": [str(a) for a in routes if a not in existing],
        }
