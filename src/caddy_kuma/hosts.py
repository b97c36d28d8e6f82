"""Host extraction from a decoded Caddy config."""

from __future__ import annotations

from collections.abc import Iterator

from .models import CaddyConfig

WILDCARD_PREFIX = "*."


def normalize_host(raw: str) -> str | None:
    """Strip wildcard prefixes; `None` when nothing is left.

    `*.example.com` and `example.com` both map to `example.com`, and a
    bare `*.` is dropped without notice.
    """
    host = raw
    while host.startswith(WILDCARD_PREFIX):
        host = host[len(WILDCARD_PREFIX):]
    return host or None


def iter_raw_hosts(config: CaddyConfig) -> Iterator[str]:
    """Yield every host string under any route matcher, as configured."""
    http = config.apps.http if config.apps is not None else None
    if http is None:
        return
    for server in (http.servers or {}).values():
        for route in server.routes or []:
            for matcher in route.match or []:
                yield from matcher.host or []


def extract_hosts(config: CaddyConfig) -> list[str]:
    hosts: set[str] = set()
    for raw in iter_raw_hosts(config):
        host = normalize_host(raw)
        if host is not None:
            hosts.add(host)
    return sorted(hosts)
