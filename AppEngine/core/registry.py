"""Component registry: resource kind -> renderer, plus plugin hooks.

A registry is an ordinary value owned by whoever builds the engine. New resource kinds are
added by registering a renderer callable ``renderer(config, resource_id, context)`` without
touching the built-in renderers."""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

ComponentRenderer = Callable[..., Any]


class Plugin:
    """Base class for registry plugins; override only the hooks you need."""

    name: str = "plugin"
    version: str = "0.0.0"

    def on_init(self, registry: "ComponentRegistry") -> None:
        """Called once when the plugin is registered."""

    def on_config_load(self, config: Any) -> None:
        """Called whenever the engine loads a validated configuration."""

    def on_render(self, kind: str, resource_id: str, context: Any = None) -> Any:
        """Called before rendering; a non-None return value replaces the rendered result."""
        return None

    def on_error(self, error: Exception) -> None:
        """Called when one of this plugin's hooks raised."""


class ComponentRegistry:
    """Thread-safe kind -> renderer mapping.

    Writes happen under a lock; reads use the current dict without locking."""

    def __init__(self):
        self._renderers: Dict[str, ComponentRenderer] = {}
        self._plugins: List[Plugin] = []
        self._lock = threading.Lock()

    # ======== Renderers ========

    def register(self, kind: str, renderer: ComponentRenderer) -> None:
        if not callable(renderer):
            raise TypeError(f"Renderer for '{kind}' must be callable")
        with self._lock:
            existing = self._renderers.get(kind)
            if existing is not None:
                if existing == renderer:
                    return
                logger.warning(f"Component type '{kind}' is already registered. Overwriting.")
            renderers = dict(self._renderers)
            renderers[kind] = renderer
            self._renderers = renderers
        logger.debug(f"Registered renderer for component type '{kind}'")

    def get_renderer(self, kind: str) -> Optional[ComponentRenderer]:
        return self._renderers.get(kind)

    def has_renderer(self, kind: str) -> bool:
        return kind in self._renderers

    def get_registered_types(self) -> List[str]:
        return list(self._renderers.keys())

    # ======== Plugins ========

    def register_plugin(self, plugin: Plugin) -> None:
        with self._lock:
            self._plugins = self._plugins + [plugin]
        logger.info(f"Registered plugin {plugin.name} v{plugin.version}")
        self._call_hook(plugin, "on_init", self)

    def get_plugins(self) -> List[Plugin]:
        return list(self._plugins)

    def notify_config_load(self, config: Any) -> None:
        for plugin in self._plugins:
            self._call_hook(plugin, "on_config_load", config)

    def notify_render(self, kind: str, resource_id: str, context: Any = None) -> Any:
        """Return the first non-None plugin result, or None to render normally."""
        for plugin in self._plugins:
            result = self._call_hook(plugin, "on_render", kind, resource_id, context)
            if result is not None:
                logger.debug(f"Plugin {plugin.name} handled render of {kind}/{resource_id}")
                return result
        return None

    def notify_error(self, error: Exception) -> None:
        for plugin in self._plugins:
            self._call_hook(plugin, "on_error", error)

    def _call_hook(self, plugin: Plugin, hook: str, *args) -> Any:
        try:
            return getattr(plugin, hook)(*args)
        except Exception as exc:
            logger.error(f"Error in plugin '{plugin.name}' {hook}: {exc}")
            if hook != "on_error":
                try:
                    plugin.on_error(exc)
                except Exception as nested:
                    logger.error(f"Error in plugin '{plugin.name}' on_error: {nested}")
            return None


def create_default_registry(engine) -> ComponentRegistry:
    """Registry with the three built-in resource kinds bound to an engine's renderers."""
    registry = ComponentRegistry()
    registry.register("survey", engine.render_survey)
    registry.register("visualization", engine.render_visualization)
    registry.register("productCard", engine.render_product_card)
    return registry


__all__ = ["ComponentRenderer", "Plugin", "ComponentRegistry", "create_default_registry"]
