"""Subset of the Caddy JSON config that carries host matchers.

Only the path `apps.http.servers.*.routes[].match[].host[]` is modelled.
Every level is optional; anything else in the document is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass

from .. import utils


class CaddyConfigError(ValueError):
    pass


@dataclass(frozen=True)
class CaddyMatcher:
    host: list[str] | None = None

    @classmethod
    def from_json(cls, payload: object) -> CaddyMatcher:
        data = utils.optional_mapping(payload, field="match")
        if data.get("host") is None:
            return cls()
        hosts: list[str] = []
        for h in utils.optional_list(data.get("host"), field="match.host"):
            if not isinstance(h, str):
                raise TypeError(f"match.host entries must be strings, got {type(h).__name__}")
            hosts.append(h)
        return cls(host=hosts)


@dataclass(frozen=True)
class CaddyRoute:
    match: list[CaddyMatcher] | None = None

    @classmethod
    def from_json(cls, payload: object) -> CaddyRoute:
        data = utils.optional_mapping(payload, field="route")
        if data.get("match") is None:
            return cls()
        return cls(match=[CaddyMatcher.from_json(m) for m in utils.optional_list(data.get("match"), field="route.match")])


@dataclass(frozen=True)
class CaddyServer:
    routes: list[CaddyRoute] | None = None

    @classmethod
    def from_json(cls, payload: object) -> CaddyServer:
        data = utils.optional_mapping(payload, field="server")
        if data.get("routes") is None:
            return cls()
        return cls(routes=[CaddyRoute.from_json(r) for r in utils.optional_list(data.get("routes"), field="server.routes")])


@dataclass(frozen=True)
class CaddyHttp:
    servers: dict[str, CaddyServer] | None = None

    @classmethod
    def from_json(cls, payload: object) -> CaddyHttp:
        data = utils.optional_mapping(payload, field="apps.http")
        if data.get("servers") is None:
            return cls()
        servers = utils.optional_mapping(data.get("servers"), field="apps.http.servers")
        return cls(servers={str(name): CaddyServer.from_json(s) for name, s in servers.items()})


@dataclass(frozen=True)
class CaddyApps:
    http: CaddyHttp | None = None

    @classmethod
    def from_json(cls, payload: object) -> CaddyApps:
        data = utils.optional_mapping(payload, field="apps")
        if data.get("http") is None:
            return cls()
        return cls(http=CaddyHttp.from_json(data.get("http")))


@dataclass(frozen=True)
class CaddyConfig:
    apps: CaddyApps | None = None

    @classmethod
    def from_json(cls, payload: object) -> CaddyConfig:
        """Decode the admin API document.

        Raises CaddyConfigError when a present field has the wrong JSON type.
        """
        # An unconfigured Caddy answers `null`.
        if payload is None:
            return cls()
        try:
            data = utils.optional_mapping(payload, field="config")
            apps = CaddyApps.from_json(data.get("apps")) if data.get("apps") is not None else None
        except TypeError as e:
            raise CaddyConfigError(f"Invalid Caddy config: {e}") from e
        return cls(apps=apps)
