from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

import jinja2
from jinja2.sandbox import SandboxedEnvironment


class TemplateRenderError(ValueError):
    pass


class Renderer(Protocol):
    def render(self, template: str, context: Mapping[str, Any]) -> str: ...


class JinjaRenderer:
    """Renders `{{ host }}`-style strings in a sandbox.

    Unknown variables are errors rather than empty strings.
    """

    def __init__(self, env: jinja2.Environment | None = None) -> None:
        self._env = env or SandboxedEnvironment(undefined=jinja2.StrictUndefined, autoescape=False)

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        if "{" not in template:
            return template
        try:
            return self._env.from_string(template).render(dict(context))
        except jinja2.TemplateError as e:
            raise TemplateRenderError(f"Failed to render {template!r}: {e}") from e
        except Exception as e:
            # Runtime errors inside expressions, e.g. `{{ host + 1 }}`.
            raise TemplateRenderError(f"Failed to render {template!r}: {type(e).__name__}: {e}") from e


def render_value(renderer: Renderer, value: Any, context: Mapping[str, Any]) -> Any:
    """Render every string in a nested dict/list value."""
    if isinstance(value, str):
        return renderer.render(value, context)
    if isinstance(value, Mapping):
        return {k: render_value(renderer, v, context) for k, v in value.items()}
    if isinstance(value, list):
        return [render_value(renderer, v, context) for v in value]
    return value
