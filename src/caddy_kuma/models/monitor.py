from __future__ import annotations

from dataclasses import dataclass
from typing import Any

ID_PREFIX = "caddy/"
DEFAULT_MONITOR_TYPE = "http"
DEFAULT_INTERVAL_S = 60
DEFAULT_RETRY_INTERVAL_S = 60
DEFAULT_MAX_RETRIES = 3


def monitor_id(host: str) -> str:
    # Kuma ids may contain dots, so the host is used verbatim.
    return f"{ID_PREFIX}{host}"


@dataclass(frozen=True)
class MonitorDraft:
    """Monitor definition derived from one Caddy host, not yet synced."""

    id: str
    host: str
    name: str
    url: str
    parent_name: str | None = None
    type: str = DEFAULT_MONITOR_TYPE
    interval: int = DEFAULT_INTERVAL_S
    retry_interval: int = DEFAULT_RETRY_INTERVAL_S
    max_retries: int = DEFAULT_MAX_RETRIES

    def template_context(self) -> dict[str, Any]:
        return {"host": self.host, "url": self.url, "id": self.id}

    def to_json(self) -> dict[str, Any]:
        value: dict[str, Any] = {
            "type": self.type,
            "name": self.name,
            "url": self.url,
            "interval": self.interval,
            "retryInterval": self.retry_interval,
            "maxretries": self.max_retries,
        }
        if self.parent_name is not None:
            value["parent_name"] = self.parent_name
        return value
