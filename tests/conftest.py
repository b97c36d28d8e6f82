from __future__ import annotations

import functools
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from caddy_kuma.caddy_api import CaddyApi

CADDY_ENV_VARS = (
    "CADDY_ENABLED",
    "CADDY_URL",
    "CADDY_USE_HTTPS",
    "CADDY_MONITOR_NAME_PREFIX",
    "CADDY_PARENT_NAME",
    "CADDY_TIMEOUT",
    "CADDY_VERIFY_TLS",
    "CADDY_KUMA_LOG_LEVEL",
    "CADDY_KUMA_LOG_FILE",
)


def pytest_configure(config: pytest.Config) -> None:
    # Optional: load env vars for integration tests from a specified dotenv file.
    # Unit tests do not depend on these.
    env_file = os.getenv("CADDY_KUMA_ENV_FILE")
    if not env_file:
        return
    from dotenv import load_dotenv

    p = Path(env_file)
    if p.exists():
        load_dotenv(dotenv_path=p)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    for name in (*CADDY_ENV_VARS, "CADDY_KUMA_ENV_FILE"):
        # setenv first so teardown also undoes values loaded from dotenv files.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # Keep a developer's .env out of the tests.
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def caddy_document(*routes_per_server: list[list[str]]) -> dict[str, Any]:
    """Build a Caddy config with one server per argument.

    Each argument lists the host lists of that server's routes.
    """
    servers: dict[str, Any] = {}
    for i, routes in enumerate(routes_per_server):
        servers[f"srv{i}"] = {
            "listen": [":443"],
            "routes": [
                {
                    "match": [{"host": hosts}],
                    "handle": [{"handler": "reverse_proxy", "upstreams": [{"dial": "app:8080"}]}],
                    "terminal": True,
                }
                for hosts in routes
            ],
        }
    return {"admin": {"listen": "localhost:2019"}, "apps": {"http": {"servers": servers}}}


@pytest.fixture
def sample_document() -> dict[str, Any]:
    return caddy_document([["example.com", "www.example.com"], ["*.wildcard.com"]])


class RecordingHandler:
    """httpx.MockTransport handler that replays a fixed response and counts calls."""

    def __init__(self, response: httpx.Response | Callable[[httpx.Request], httpx.Response]) -> None:
        self._response = response
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if callable(self._response):
            return self._response(request)
        # A fresh response per request; httpx binds each one to its request.
        return httpx.Response(
            self._response.status_code,
            headers=self._response.headers,
            content=self._response.content,
        )


@pytest.fixture
def json_handler(sample_document: dict[str, Any]) -> RecordingHandler:
    return RecordingHandler(httpx.Response(200, json=sample_document))


def api_factory_for(handler: RecordingHandler) -> Callable[..., CaddyApi]:
    return functools.partial(CaddyApi, transport=httpx.MockTransport(handler))


@pytest.fixture
def make_document() -> Callable[..., dict[str, Any]]:
    return caddy_document


@pytest.fixture
def make_api_factory() -> Callable[[RecordingHandler], Callable[..., CaddyApi]]:
    return api_factory_for


@pytest.fixture
def make_handler() -> type[RecordingHandler]:
    return RecordingHandler
