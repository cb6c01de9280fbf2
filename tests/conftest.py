"""Shared fakes for the routing table and DNS."""

from __future__ import annotations

from typing import Optional, Union

import dns.resolver
import pytest

from syncblock import ProcessExitError, RouteTableGateway, SyncBlockConfig
from syncblock.models import Address, parse_address

Answer = Union[list, dict, BaseException]


class FakeDNSResolver:
    """Stands in for dns.resolver.Resolver.

    answers maps a domain to a list of A record strings, to a dict of
    rdtype -> list, or to an exception instance to raise.
    """

    def __init__(self, answers: dict[str, Answer]):
        self.answers = answers
        self.queries: list[tuple[str, str]] = []

    def resolve(self, domain: str, rdtype: str = "A") -> list[str]:
        self.queries.append((domain, rdtype))
        answer = self.answers.get(domain)
        if answer is None:
            raise dns.resolver.NXDOMAIN()
        if isinstance(answer, BaseException):
            raise answer
        if isinstance(answer, dict):
            records = answer.get(rdtype)
        else:
            records = answer if rdtype == "A" else None
        if not records:
            raise dns.resolver.NoAnswer()
        return list(records)


class FakeGateway(RouteTableGateway):
    """In-memory routing table that records every mutation."""

    def __init__(self, existing=(), fail_on: Optional[set[str]] = None):
        self.table: set[Address] = {parse_address(a) for a in existing}
        self.fail_on = {parse_address(a) for a in (fail_on or set())}
        self.calls: list[tuple[str, Address]] = []

    def list_reject_routes(self) -> set[Address]:
        return set(self.table)

    def _check(self, action: str, address: Address) -> None:
        self.calls.append((action, address))
        if address in self.fail_on:
            raise ProcessExitError(
                f"Command route {action} returned an error",
                ["route", action, "-host", str(address), "reject"],
                7,
                stderr="SIOCADDRT: File exists",
                address=address,
            )

    def add_reject(self, address: Address) -> None:
        self._check("add", address)
        self.table.add(address)

    def delete_reject(self, address: Address) -> None:
        self._check("delete", address)
        self.table.discard(address)


class StaticResolver:
    """Address resolver stub returning a fixed desired set."""

    def __init__(self, addresses):
        self.addresses = [parse_address(a) for a in addresses]
        self.calls = 0

    def routes(self, persist: bool = True) -> list[Address]:
        self.calls += 1
        return list(self.addresses)


@pytest.fixture
def config(tmp_path) -> SyncBlockConfig:
    return SyncBlockConfig(
        backends=("sync.example.com", "cloud.example.com", "ping.example.com"),
        cache_file=str(tmp_path / "routes.txt"),
        resolve_workers=2,
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "SYNCBLOCK_CACHE_FILE",
        "SYNCBLOCK_ROUTE_COMMAND",
        "SYNCBLOCK_DNS_SERVERS",
        "SYNCBLOCK_RESOLVE_WORKERS",
        "SYNCBLOCK_DRY_RUN",
        "SYNCBLOCK_PROTECT_LOCAL",
    ):
        monkeypatch.delenv(name, raising=False)
