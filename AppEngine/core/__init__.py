"""Runtime pieces of the engine: trigger context, conditions, eligibility, packaging, lifecycle, registry."""

from .conditions import (
    ConditionEvaluationError,
    ConditionEvaluator,
    DataFieldExists,
    IdEquals,
    MessageIncludes,
    UnrecognizedCondition,
    parse_condition,
)
from .context import RenderContext
from .lifecycle import LifecycleDispatcher
from .packager import PackagedResource, ResourceContent, ResourcePackager
from .registry import ComponentRegistry, Plugin, create_default_registry
from .trigger import TriggerEvaluator

__all__ = [
    "ConditionEvaluationError",
    "ConditionEvaluator",
    "DataFieldExists",
    "IdEquals",
    "MessageIncludes",
    "UnrecognizedCondition",
    "parse_condition",
    "RenderContext",
    "LifecycleDispatcher",
    "PackagedResource",
    "ResourceContent",
    "ResourcePackager",
    "ComponentRegistry",
    "Plugin",
    "create_default_registry",
    "TriggerEvaluator",
]
