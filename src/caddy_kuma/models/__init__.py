from .caddy_config import (
    CaddyApps,
    CaddyConfig,
    CaddyConfigError,
    CaddyHttp,
    CaddyMatcher,
    CaddyRoute,
    CaddyServer,
)
from .monitor import ID_PREFIX, MonitorDraft, monitor_id

__all__ = [
    "CaddyApps",
    "CaddyConfig",
    "CaddyConfigError",
    "CaddyHttp",
    "CaddyMatcher",
    "CaddyRoute",
    "CaddyServer",
    "ID_PREFIX",
    "MonitorDraft",
    "monitor_id",
]
