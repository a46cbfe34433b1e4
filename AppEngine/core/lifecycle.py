"""Lifecycle dispatcher: which configured actions fire for a runtime event."""

from __future__ import annotations

from typing import Any, List, Optional

from loguru import logger

from ..schema.constants import CUSTOM_EVENT_HOOK, LIFECYCLE_EVENT_HOOKS
from ..schema.models import AppConfig, LifecycleAction
from .conditions import ConditionEvaluator
from .context import RenderContext


class LifecycleDispatcher:
    """Resolves an event to its action list and filters it by each action's condition.

    Description:
        - the four well-known events map to their hooks, anything else is looked up in onCustomEvent
        - unknown events yield [] and never raise
        - declaration order is preserved"""

    def __init__(self, condition_evaluator: Optional[ConditionEvaluator] = None):
        self.condition_evaluator = condition_evaluator or ConditionEvaluator()

    @staticmethod
    def hook_name(event: str) -> str:
        """Configuration key holding the actions of an event."""
        hook_key = LIFECYCLE_EVENT_HOOKS.get(event)
        return hook_key if hook_key is not None else f"{CUSTOM_EVENT_HOOK}.{event}"

    def get_lifecycle_events(self, config: AppConfig) -> List[str]:
        """Every event name with configured actions, well-known events first."""
        hooks = config.lifecycle
        if hooks is None:
            return []
        events = [event for event, hook_key in LIFECYCLE_EVENT_HOOKS.items() if hooks.actions_for_hook(hook_key)]
        if hooks.on_custom_event:
            events.extend(hooks.on_custom_event.keys())
        return events

    def get_actions_for_event(self, config: AppConfig, event: str) -> List[LifecycleAction]:
        """Configured actions for an event, before condition filtering."""
        hooks = config.lifecycle
        if hooks is None or not event:
            return []
        hook_key = LIFECYCLE_EVENT_HOOKS.get(event)
        if hook_key is not None:
            return list(hooks.actions_for_hook(hook_key) or [])
        custom = hooks.on_custom_event or {}
        return list(custom.get(event, []))

    def dispatch(self, config: AppConfig, context: Any) -> List[LifecycleAction]:
        ctx = RenderContext.from_value(context)
        if not ctx.has_event:
            logger.warning("Lifecycle dispatch called without an event, nothing to do")
            return []

        candidates = self.get_actions_for_event(config, ctx.event)
        if not candidates:
            logger.debug(f"No lifecycle actions configured for event '{ctx.event}'")
            return []

        if ctx.data is None:
            ctx = ctx.with_data({})

        actions = [action for action in candidates if self._should_execute(action, ctx)]
        logger.debug(
            f"Lifecycle event '{ctx.event}': {len(actions)}/{len(candidates)} action(s) selected"
        )
        return actions

    def _should_execute(self, action: LifecycleAction, ctx: RenderContext) -> bool:
        if not action.condition:
            return True
        try:
            return self.condition_evaluator.evaluate(action.condition, ctx)
        except Exception as exc:
            logger.error(f"Error evaluating action condition for {action.action}: {exc}")
            return False


__all__ = ["LifecycleDispatcher"]
