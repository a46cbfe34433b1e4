"""Trigger evaluation: is a configured resource eligible to render under the current context?"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

from loguru import logger

from ..schema.constants import CANONICAL_TRIGGER_EVENTS
from .conditions import ConditionEvaluationError, ConditionEvaluator
from .context import RenderContext


def _trigger_fields(resource: Any) -> Tuple[Optional[str], Optional[str]]:
    """Extract (trigger, condition) from a model or a raw mapping."""
    if isinstance(resource, Mapping):
        return resource.get("trigger"), resource.get("condition")
    trigger = getattr(resource, "trigger", None)
    condition = getattr(resource, "trigger_condition", None)
    return trigger, condition


class TriggerEvaluator:
    """Pure, total eligibility check shared by every renderer."""

    def __init__(self, condition_evaluator: Optional[ConditionEvaluator] = None):
        self.condition_evaluator = condition_evaluator or ConditionEvaluator()

    def is_eligible(self, resource: Any, context: Any = None) -> bool:
        trigger, condition = _trigger_fields(resource)
        try:
            ctx = RenderContext.from_value(context)
        except TypeError as exc:
            logger.error(f"Unusable trigger context, resource not eligible: {exc}")
            return False

        # manual resources render only on explicit request
        if trigger == "manual":
            return not ctx.has_event

        if ctx.has_event and trigger != CANONICAL_TRIGGER_EVENTS.get(ctx.event):
            return False

        if condition and ctx.data is not None:
            try:
                return self.condition_evaluator.evaluate(condition, ctx)
            except ConditionEvaluationError as exc:
                logger.error(f"Error evaluating condition {condition!r}: {exc}")
                return False
            except Exception as exc:
                logger.exception(f"Condition evaluator failed on {condition!r}: {exc}")
                return False

        return True


__all__ = ["TriggerEvaluator"]
