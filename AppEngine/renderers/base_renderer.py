"""Shared plumbing for resource renderers.

Every renderer follows the same pipeline: resolve the entity in the configuration, check
eligibility under the trigger context, build a self-contained HTML document, package it.
Only build_html differs per resource kind."""

from __future__ import annotations

import html
import json
from typing import Any, Dict, Optional

from loguru import logger

from ..core.context import RenderContext
from ..core.packager import PackagedResource, ResourcePackager
from ..core.trigger import TriggerEvaluator
from ..schema.models import AppConfig

BASE_STYLES = """
    * { box-sizing: border-box; }
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, Cantarell, sans-serif;
      margin: 0;
      padding: 20px;
      background: #f5f5f5;
      color: #1a1a1a;
    }
"""


class ResourceNotFoundError(LookupError):
    """A referenced resource id does not exist in the configuration."""

    def __init__(self, label: str, resource_id: str):
        self.label = label
        self.resource_id = resource_id
        super().__init__(f'{label} with ID "{resource_id}" not found in configuration')


def escape_html(value: Any) -> str:
    """Escape the five HTML metacharacters; apostrophes become &#039;."""
    if value is None:
        return ""
    return html.escape(str(value), quote=True).replace("&#x27;", "&#039;")


def json_for_script(payload: Any) -> str:
    """Serialize data for embedding inside a <script> element.

    <, > and & are written as unicode escapes so no user text can close the element
    or form markup; the JSON value itself is unchanged."""
    text = json.dumps(payload, ensure_ascii=False)
    return text.replace("&", "\\u0026").replace("<", "\\u003c").replace(">", "\\u003e")


def render_document(title: str, body: str, styles: str = "", scripts: str = "", head_extra: str = "") -> str:
    """Assemble the full standalone document."""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{escape_html(title)}</title>
  <style>{BASE_STYLES}{styles}
  </style>{head_extra}
</head>
<body>
{body}
{scripts}
</body>
</html>"""


def inline_script(code: str) -> str:
    return f'<script type="text/javascript">\n{code}\n</script>'


def data_script(element_id: str, payload: Any) -> str:
    return f'<script type="application/json" id="{escape_html(element_id)}">{json_for_script(payload)}</script>'


class BaseResourceRenderer:
    """Base renderer.

    Subclasses set:
        kind: URI segment of the packaged resource
        label: human name used in not-found errors
        config_section: attribute of AppConfig holding id -> entity"""

    kind: str = ""
    label: str = ""
    config_section: str = ""

    def __init__(
        self,
        packager: Optional[ResourcePackager] = None,
        trigger_evaluator: Optional[TriggerEvaluator] = None,
    ):
        self.packager = packager or ResourcePackager()
        self.trigger_evaluator = trigger_evaluator or TriggerEvaluator()

    # ======== External interface ========

    def render(self, config: AppConfig, resource_id: str, context: Any = None, **options) -> Optional[PackagedResource]:
        """Render one resource; None when it is not eligible under the context."""
        resource = self.resolve(config, resource_id)
        ctx = RenderContext.from_value(context)
        if not self.trigger_evaluator.is_eligible(resource, ctx):
            logger.debug(f"{self.label} '{resource_id}' not eligible for event {ctx.event!r}")
            return None

        html_string = self.build_html(resource, ctx, **options)
        contextual_id = f"{resource_id}/{self.packager.new_instance_id()}"
        return self.packager.package_resource(self.kind, html_string, contextual_id)

    def resolve(self, config: AppConfig, resource_id: str):
        entries: Dict[str, Any] = getattr(config, self.config_section, None) or {}
        resource = entries.get(resource_id)
        if resource is None:
            raise ResourceNotFoundError(self.label, resource_id)
        return resource

    def build_html(self, resource, context: RenderContext, **options) -> str:
        raise NotImplementedError

    # ======== Internal Tools ========

    def _escape_html(self, value: Any) -> str:
        return escape_html(value)


__all__ = [
    "ResourceNotFoundError",
    "escape_html",
    "json_for_script",
    "render_document",
    "inline_script",
    "data_script",
    "BaseResourceRenderer",
]
