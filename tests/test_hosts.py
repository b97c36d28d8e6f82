from __future__ import annotations

import pytest

from caddy_kuma.hosts import extract_hosts, iter_raw_hosts, normalize_host
from caddy_kuma.models import (
    CaddyApps,
    CaddyConfig,
    CaddyHttp,
    CaddyMatcher,
    CaddyRoute,
    CaddyServer,
)


def _config(*servers: CaddyServer) -> CaddyConfig:
    return CaddyConfig(apps=CaddyApps(http=CaddyHttp(servers={f"srv{i}": s for i, s in enumerate(servers)})))


def test_extract_hosts_strips_wildcards_and_sorts(sample_document) -> None:
    config = CaddyConfig.from_json(sample_document)
    assert extract_hosts(config) == ["example.com", "wildcard.com", "www.example.com"]


def test_extract_hosts_empty_config() -> None:
    assert extract_hosts(CaddyConfig(apps=None)) == []
    assert extract_hosts(CaddyConfig.from_json({})) == []
    assert extract_hosts(CaddyConfig.from_json(None)) == []


@pytest.mark.parametrize(
    "config",
    [
        CaddyConfig(apps=CaddyApps(http=None)),
        CaddyConfig(apps=CaddyApps(http=CaddyHttp(servers=None))),
        _config(CaddyServer(routes=None)),
        _config(CaddyServer(routes=[CaddyRoute(match=None)])),
        _config(CaddyServer(routes=[CaddyRoute(match=[CaddyMatcher(host=None)])])),
        _config(CaddyServer(routes=[CaddyRoute(match=[CaddyMatcher(host=[])])])),
    ],
)
def test_absent_levels_contribute_nothing(config: CaddyConfig) -> None:
    assert extract_hosts(config) == []


def test_duplicates_across_servers_and_routes_merge() -> None:
    config = _config(
        CaddyServer(routes=[
            CaddyRoute(match=[CaddyMatcher(host=["b.example"]), CaddyMatcher(host=["a.example"])]),
            CaddyRoute(match=[CaddyMatcher(host=["a.example"])]),
        ]),
        CaddyServer(routes=[CaddyRoute(match=[CaddyMatcher(host=["*.b.example", "a.example"])])]),
    )
    assert extract_hosts(config) == ["a.example", "b.example"]


def test_bare_wildcard_is_dropped() -> None:
    config = _config(CaddyServer(routes=[CaddyRoute(match=[CaddyMatcher(host=["*.", "", "ok.example"])])]))
    assert extract_hosts(config) == ["ok.example"]


def test_iter_raw_hosts_keeps_configured_form() -> None:
    config = _config(CaddyServer(routes=[CaddyRoute(match=[CaddyMatcher(host=["*.x.example", "x.example"])])]))
    assert list(iter_raw_hosts(config)) == ["*.x.example", "x.example"]


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("example.com", "example.com"),
        ("*.example.com", "example.com"),
        ("*.*.example.com", "example.com"),
        ("*.", None),
        ("", None),
        ("a.*.example.com", "a.*.example.com"),
        ("*example.com", "*example.com"),
    ],
)
def test_normalize_host(raw: str, expected: str | None) -> None:
    assert normalize_host(raw) == expected


def test_extraction_is_repeatable(sample_document) -> None:
    first = extract_hosts(CaddyConfig.from_json(sample_document))
    second = extract_hosts(CaddyConfig.from_json(sample_document))
    assert first == second
