"""App Resource Engine main class.

The engine wires the validator, trigger evaluator, renderers, packager, lifecycle dispatcher
and component registry together and is the single entry point used by the HTTP interface,
the CLI and library callers."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from .core.conditions import ConditionEvaluator
from .core.lifecycle import LifecycleDispatcher
from .core.packager import PackagedResource, ResourcePackager
from .core.registry import ComponentRegistry, create_default_registry
from .core.trigger import TriggerEvaluator
from .renderers.product_card_renderer import ProductCardRenderer
from .renderers.survey_renderer import SurveyRenderer
from .renderers.visualization_renderer import VisualizationRenderer
from .schema.issues import ValidationResult
from .schema.models import AppConfig, LifecycleAction
from .schema.validator import ConfigValidator
from .utils.config import Settings, settings

DEFAULT_PUBLIC_HOST = "localhost:3000"


class AppResourceEngine:
    """App Resource Engine.

    Responsible for integrating:
    - two-layer configuration validation;
    - eligibility checks and rendering of surveys, visualizations and product cards;
    - lifecycle dispatch and the caller-owned component registry."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        validator: Optional[ConfigValidator] = None,
        registry: Optional[ComponentRegistry] = None,
        condition_evaluator: Optional[ConditionEvaluator] = None,
    ):
        """Initialize the engine.

        Args:
            config: settings object, the module-level settings when not provided
            validator: configuration validator, a default ConfigValidator when not provided
            registry: component registry, one bound to this engine's renderers when not provided
            condition_evaluator: shared by the trigger evaluator and the lifecycle dispatcher"""
        self.config = config or settings

        self.validator = validator or ConfigValidator()
        self.condition_evaluator = condition_evaluator or ConditionEvaluator(
            self.config.UNRECOGNIZED_CONDITION_DEFAULT
        )
        self.trigger_evaluator = TriggerEvaluator(self.condition_evaluator)
        self.packager = ResourcePackager(self.config.RESOURCE_URI_SCHEME)

        self.survey_renderer = SurveyRenderer(self.packager, self.trigger_evaluator)
        self.visualization_renderer = VisualizationRenderer(self.packager, self.trigger_evaluator)
        self.product_card_renderer = ProductCardRenderer(self.packager, self.trigger_evaluator)
        self.lifecycle_dispatcher = LifecycleDispatcher(self.condition_evaluator)

        self.registry = registry or create_default_registry(self)
        logger.debug(f"App Resource Engine initialized with types {self.registry.get_registered_types()}")

    # ======== Validation ========

    def validate_config(self, raw: Any) -> ValidationResult:
        return self.validator.validate_config(raw)

    def validate_product_card(self, raw: Any) -> ValidationResult:
        return self.validator.validate_product_card(raw)

    def validate_product_card_collection(self, raw: Any) -> ValidationResult:
        return self.validator.validate_product_card_collection(raw)

    def load_config(self, raw: Any) -> AppConfig:
        """Validate raw configuration (or accept an AppConfig) and notify plugins.

        Raises:
            InvalidConfigurationError: the configuration has at least one issue"""
        config = self.validator.validate_or_raise(raw)
        self.registry.notify_config_load(config)
        return config

    # ======== Rendering ========

    def render(
        self,
        kind: str,
        config: Any,
        resource_id: str,
        context: Any = None,
        **options,
    ) -> Optional[PackagedResource]:
        """Render any registered kind through the registry.

        A plugin's on_render result short-circuits rendering. Errors are reported to plugins
        and re-raised."""
        renderer = self.registry.get_renderer(kind)
        if renderer is None:
            raise KeyError(f"No renderer registered for component type '{kind}'")

        handled = self.registry.notify_render(kind, resource_id, context)
        if handled is not None:
            return handled

        try:
            app_config = self.load_config(config)
            return renderer(app_config, resource_id, context, **options)
        except Exception as exc:
            logger.error(f"Rendering {kind} '{resource_id}' failed: {exc}")
            self.registry.notify_error(exc)
            raise

    def render_survey(self, config: Any, survey_id: str, context: Any = None) -> Optional[PackagedResource]:
        return self.survey_renderer.render(self.validator.validate_or_raise(config), survey_id, context)

    def render_visualization(
        self, config: Any, visualization_id: str, context: Any = None
    ) -> Optional[PackagedResource]:
        return self.visualization_renderer.render(self.validator.validate_or_raise(config), visualization_id, context)

    def render_product_card(
        self,
        config: Any,
        product_card_id: str,
        context: Any = None,
        display_mode: Optional[str] = None,
    ) -> Optional[PackagedResource]:
        """Render one product card, optionally overriding its display mode."""
        return self.product_card_renderer.render(
            self.validator.validate_or_raise(config), product_card_id, context, display_mode=display_mode
        )

    def render_product_cards(
        self,
        config: Any,
        product_card_ids: Sequence[str],
        context: Any = None,
        display_mode: Optional[str] = None,
    ) -> Optional[PackagedResource]:
        """Render several product cards as one grid resource."""
        return self.product_card_renderer.render_many(
            self.validator.validate_or_raise(config), product_card_ids, context, display_mode=display_mode
        )

    def package_external_url(self, kind: str, resource_id: str, page_url: Optional[str] = None) -> PackagedResource:
        """Package a resource served by a web page instead of inline HTML.

        Without page_url the page is "<base>/<kind>" on settings.PUBLIC_BASE_URL; the resource id
        only appears in the URI."""
        if page_url is None:
            page_url = f"{self._public_base_url()}/{kind}"
        return self.packager.package_external_url(kind, resource_id, page_url)

    def _public_base_url(self) -> str:
        host = (self.config.PUBLIC_BASE_URL or DEFAULT_PUBLIC_HOST).rstrip("/")
        if "://" in host:
            return host
        scheme = "http" if ("localhost" in host or "127.0.0.1" in host) else "https"
        return f"{scheme}://{host}"

    # ======== Lifecycle ========

    def dispatch_lifecycle(self, config: Any, context: Any) -> List[LifecycleAction]:
        return self.lifecycle_dispatcher.dispatch(self.validator.validate_or_raise(config), context)

    def get_lifecycle_events(self, config: Any) -> List[str]:
        return self.lifecycle_dispatcher.get_lifecycle_events(self.validator.validate_or_raise(config))

    def get_actions_for_event(self, config: Any, event: str) -> List[LifecycleAction]:
        return self.lifecycle_dispatcher.get_actions_for_event(self.validator.validate_or_raise(config), event)

    def get_status(self) -> Dict[str, Any]:
        return {
            "registered_types": self.registry.get_registered_types(),
            "plugins": [plugin.name for plugin in self.registry.get_plugins()],
            "uri_scheme": self.config.RESOURCE_URI_SCHEME,
            "auth_required": self.config.AUTH_REQUIRED,
        }


def create_engine(config: Optional[Settings] = None) -> AppResourceEngine:
    """Convenience function for creating App Resource Engine instances.

    Args:
        config: settings object; the module-level settings when not provided

    Returns:
        AppResourceEngine instance"""
    return AppResourceEngine(config)


__all__ = ["AppResourceEngine", "create_engine"]
