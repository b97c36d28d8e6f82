from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .configmanager import ConfigManager
from .models import MonitorDraft, monitor_id
from .templating import Renderer, TemplateRenderError, render_value

logger = ConfigManager.get_logger(__name__)


@dataclass(frozen=True)
class BuildOptions:
    use_https: bool = True
    monitor_name_prefix: str | None = None
    parent_name: str | None = None

    @property
    def protocol(self) -> str:
        return "https" if self.use_https else "http"


def build_draft(host: str, options: BuildOptions) -> MonitorDraft:
    name = f"{options.monitor_name_prefix}{host}" if options.monitor_name_prefix else host
    return MonitorDraft(
        id=monitor_id(host),
        host=host,
        name=name,
        url=f"{options.protocol}://{host}",
        parent_name=options.parent_name,
    )


def build_drafts(hosts: Sequence[str], options: BuildOptions) -> list[MonitorDraft]:
    return [build_draft(host, options) for host in hosts]


def build_entities(
    hosts: Sequence[str],
    options: BuildOptions,
    renderer: Renderer,
) -> list[tuple[str, dict[str, Any]]]:
    """Render one monitor entity per host, in input order.

    A host whose fields fail to render is logged and left out; the rest
    are still returned.
    """
    entities: list[tuple[str, dict[str, Any]]] = []
    for draft in build_drafts(hosts, options):
        if draft.parent_name is not None:
            logger.debug("Setting parent_name=%r for monitor %r", draft.parent_name, draft.name)
        try:
            value = render_value(renderer, draft.to_json(), draft.template_context())
        except TemplateRenderError as e:
            logger.warning("Failed to create entity for host %r (id=%r): %s", draft.host, draft.id, e)
            continue
        logger.debug("Created monitor for host %r with id %r", draft.host, draft.id)
        entities.append((draft.id, value))
    return entities
