"""Condition strings narrowing resource eligibility and lifecycle actions.

Conditions are not a general expression language. A condition string is parsed into one of
a few typed nodes and each node kind has its own predicate:

- ``surveyId === 'x'`` / ``visualizationId === 'x'``  -> IdEquals
- ``message.includes('x')`` (optionally ``message.toLowerCase().includes``) -> MessageIncludes
- ``data.<field>``                                  -> DataFieldExists
- anything else                                     -> UnrecognizedCondition

Recognition order is the order above. Unrecognized conditions log a warning and resolve to
``settings.UNRECOGNIZED_CONDITION_DEFAULT``. Subclass ConditionEvaluator and add an
``_evaluate_<kind>`` method to support more node kinds."""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, ClassVar, Mapping, Optional, Union

from loguru import logger

from ..utils.config import settings
from .context import RenderContext

_ID_EQUALS_RE = re.compile(r"\b(surveyId|visualizationId)\s*===?\s*['\"]([^'\"]+)['\"]")
_MESSAGE_INCLUDES_RE = re.compile(r"\bmessage\.(?:toLowerCase\(\)\.)?includes\(\s*['\"]([^'\"]+)['\"]\s*\)")
_DATA_FIELD_RE = re.compile(r"\bdata\.(\w+)")


class ConditionEvaluationError(Exception):
    """The condition could not be evaluated against the supplied context."""


@dataclass(frozen=True)
class IdEquals:
    kind: ClassVar[str] = "id_equals"
    field: str  # "surveyId" or "visualizationId"
    value: str


@dataclass(frozen=True)
class MessageIncludes:
    kind: ClassVar[str] = "message_includes"
    needle: str


@dataclass(frozen=True)
class DataFieldExists:
    kind: ClassVar[str] = "data_field_exists"
    field: str


@dataclass(frozen=True)
class UnrecognizedCondition:
    kind: ClassVar[str] = "unrecognized"
    source: str


ConditionNode = Union[IdEquals, MessageIncludes, DataFieldExists, UnrecognizedCondition]


@lru_cache(maxsize=256)
def parse_condition(text: str) -> ConditionNode:
    """Parse a condition string into its typed node."""
    source = (text or "").strip()

    match = _ID_EQUALS_RE.search(source)
    if match:
        return IdEquals(field=match.group(1), value=match.group(2))

    match = _MESSAGE_INCLUDES_RE.search(source)
    if match:
        return MessageIncludes(needle=match.group(1))

    match = _DATA_FIELD_RE.search(source)
    if match:
        return DataFieldExists(field=match.group(1))

    return UnrecognizedCondition(source=source)


class ConditionEvaluator:
    """Evaluates condition nodes against a RenderContext.

    Description:
        - evaluate accepts a condition string or an already parsed node
        - a context whose data is present but not a mapping raises ConditionEvaluationError
        - callers (trigger evaluator, lifecycle dispatcher) downgrade that error themselves"""

    def __init__(self, unrecognized_default: Optional[bool] = None):
        if unrecognized_default is None:
            unrecognized_default = settings.UNRECOGNIZED_CONDITION_DEFAULT
        self.unrecognized_default = unrecognized_default

    def evaluate(self, condition: Union[str, ConditionNode], context: Any = None) -> bool:
        ctx = RenderContext.from_value(context)
        node = parse_condition(condition) if isinstance(condition, str) else condition
        data = self._data_of(ctx)

        evaluator = getattr(self, f"_evaluate_{node.kind}", None)
        if evaluator is None:
            raise ConditionEvaluationError(f"No evaluator for condition kind: {node.kind}")
        return bool(evaluator(node, ctx, data))

    # ======== Internal Tools ========

    @staticmethod
    def _data_of(ctx: RenderContext) -> Mapping[str, Any]:
        if ctx.data is None:
            return {}
        if not isinstance(ctx.data, Mapping):
            raise ConditionEvaluationError(
                f"context data must be a mapping, got {type(ctx.data).__name__}"
            )
        return ctx.data

    def _evaluate_id_equals(self, node: IdEquals, ctx: RenderContext, data: Mapping[str, Any]) -> bool:
        actual = ctx.survey_id if node.field == "surveyId" else ctx.visualization_id
        return actual is not None and actual == node.value

    def _evaluate_message_includes(self, node: MessageIncludes, ctx: RenderContext, data: Mapping[str, Any]) -> bool:
        message = data.get("message")
        if message is None:
            return False
        return node.needle.lower() in str(message).lower()

    def _evaluate_data_field_exists(self, node: DataFieldExists, ctx: RenderContext, data: Mapping[str, Any]) -> bool:
        return data.get(node.field) is not None

    def _evaluate_unrecognized(self, node: UnrecognizedCondition, ctx: RenderContext, data: Mapping[str, Any]) -> bool:
        logger.warning(
            f"Condition not recognized, defaulting to {self.unrecognized_default}: {node.source!r}"
        )
        return self.unrecognized_default


__all__ = [
    "ConditionEvaluationError",
    "IdEquals",
    "MessageIncludes",
    "DataFieldExists",
    "UnrecognizedCondition",
    "ConditionNode",
    "parse_condition",
    "ConditionEvaluator",
]
