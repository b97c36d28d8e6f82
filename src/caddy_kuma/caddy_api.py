from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import httpx

from .configmanager import DEFAULT_FETCH_TIMEOUT_S, ConfigManager
from .models import CaddyConfig, CaddyConfigError

logger = ConfigManager.get_logger(__name__)


class CaddyApiError(RuntimeError):
    pass


@dataclass
class CaddyApi:
    """Read-only client for the Caddy admin API config endpoint.

    One GET per call, bounded by `timeout_s`. No retries: a failed fetch is
    reported to the caller, which skips the cycle.
    """

    url: str
    timeout_s: float = DEFAULT_FETCH_TIMEOUT_S
    verify_tls: bool = True
    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        url = (self.url or "").strip()
        if not url:
            raise ValueError("url is required")
        self.url = url
        if self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        logger.debug(
            "Initializing CaddyApi url=%s verify_tls=%s timeout_s=%s",
            self.url,
            self.verify_tls,
            self.timeout_s,
        )

        def _log_request(request: httpx.Request) -> None:
            if not logger.isEnabledFor(10):
                return
            request.extensions["caddy.start"] = time.perf_counter()
            logger.debug("HTTP -> %s %s", request.method, request.url)

        def _log_response(response: httpx.Response) -> None:
            if not logger.isEnabledFor(10):
                return
            req = response.request
            start = req.extensions.get("caddy.start")
            ms: float | None = None
            if isinstance(start, (int, float)):
                ms = (time.perf_counter() - float(start)) * 1000.0
            logger.debug(
                "HTTP <- %s %s status=%s elapsed_ms=%s content_type=%s",
                req.method,
                req.url,
                response.status_code,
                f"{ms:.1f}" if ms is not None else None,
                response.headers.get("content-type"),
            )

        self._client = httpx.Client(
            timeout=self.timeout_s,
            verify=self.verify_tls,
            headers={"accept": "application/json"},
            transport=self.transport,
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> CaddyApi:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # type: ignore[no-untyped-def]
        self.close()

    def fetch_raw(self) -> Any:
        """GET the config document and return the decoded JSON body."""
        try:
            resp = self._client.get(self.url)
        except httpx.TimeoutException as e:
            raise CaddyApiError(f"Timed out after {self.timeout_s}s fetching Caddy config from {self.url}") from e
        except httpx.HTTPError as e:
            raise CaddyApiError(f"Failed to fetch Caddy config from {self.url}: {e}") from e
        self._raise_for_status(resp)
        try:
            return resp.json()
        except ValueError as e:
            raise CaddyApiError(f"Failed to parse Caddy config from {self.url}: {e}") from e

    def fetch_config(self) -> CaddyConfig:
        data = self.fetch_raw()
        if data is not None and not isinstance(data, dict):
            raise CaddyApiError(f"Expected object response from {self.url}, got {type(data).__name__}")
        try:
            return CaddyConfig.from_json(data)
        except CaddyConfigError as e:
            raise CaddyApiError(f"Failed to parse Caddy config from {self.url}: {e}") from e

    @staticmethod
    def _raise_for_status(resp: httpx.Response) -> None:
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            msg = f"Caddy API returned HTTP {resp.status_code} for {resp.request.method} {resp.request.url}"
            body = resp.text.strip()
            if body:
                msg = f"{msg}: {body[:200]}"
            raise CaddyApiError(msg) from e
