from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .caddy_api import CaddyApi, CaddyApiError
from .configmanager import CaddySettings, ConfigManager
from .entities import BuildOptions, build_entities
from .hosts import extract_hosts
from .models import CaddyConfig
from .templating import JinjaRenderer, Renderer

logger = ConfigManager.get_logger(__name__)

ApiFactory = Callable[..., CaddyApi]


class CaddySource:
    """Produces monitor entities for every host Caddy serves.

    Each call to `get_entities()` is one polling cycle: fetch, extract,
    build. Nothing is kept between cycles.
    """

    name = "Caddy"

    def __init__(
        self,
        settings: CaddySettings,
        *,
        api_factory: ApiFactory | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        self.settings = settings
        self._api_factory = api_factory or CaddyApi
        self._renderer = renderer or JinjaRenderer()

    @property
    def build_options(self) -> BuildOptions:
        return BuildOptions(
            use_https=self.settings.use_https,
            monitor_name_prefix=self.settings.monitor_name_prefix,
            parent_name=self.settings.parent_name,
        )

    def init(self) -> None:
        logger.info("Initializing Caddy source with URL: %s", self.settings.url)

    def shutdown(self) -> None:
        pass

    def fetch_config(self) -> CaddyConfig:
        logger.debug("Fetching Caddy config from %s", self.settings.url)
        with self._api_factory(
            self.settings.url,
            timeout_s=self.settings.timeout_s,
            verify_tls=self.settings.verify_tls,
        ) as api:
            return api.fetch_config()

    def get_hosts(self) -> list[str]:
        """Fetch and extract hosts; raises CaddyApiError on fetch failure."""
        hosts = extract_hosts(self.fetch_config())
        logger.info("Found %s hosts in Caddy config", len(hosts))
        return hosts

    def get_entities(self) -> list[tuple[str, dict[str, Any]]]:
        if not self.settings.enabled:
            return []

        try:
            hosts = self.get_hosts()
        except CaddyApiError as e:
            logger.warning("Failed to fetch Caddy config: %s", e)
            return []

        if self.settings.parent_name:
            logger.debug(
                "Caddy monitors will be organized under parent group with id %r",
                self.settings.parent_name,
            )
        return build_entities(hosts, self.build_options, self._renderer)
