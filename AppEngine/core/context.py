"""Runtime trigger context supplied by the caller for one render or one dispatch call."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class RenderContext:
    """{event?, data?, surveyId?, visualizationId?}; never stored beyond the call."""

    event: Optional[str] = None
    data: Optional[Any] = None
    survey_id: Optional[str] = None
    visualization_id: Optional[str] = None

    @classmethod
    def from_value(cls, value: Any) -> "RenderContext":
        """Accept an existing context, None, or a mapping with camelCase or snake_case keys."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"context must be a mapping, got {type(value).__name__}")
        return cls(
            event=value.get("event"),
            data=value.get("data"),
            survey_id=value.get("surveyId", value.get("survey_id")),
            visualization_id=value.get("visualizationId", value.get("visualization_id")),
        )

    @property
    def has_event(self) -> bool:
        return bool(self.event)

    def with_data(self, data: Any) -> "RenderContext":
        return RenderContext(self.event, data, self.survey_id, self.visualization_id)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.event is not None:
            result["event"] = self.event
        if self.data is not None:
            result["data"] = self.data
        if self.survey_id is not None:
            result["surveyId"] = self.survey_id
        if self.visualization_id is not None:
            result["visualizationId"] = self.visualization_id
        return result


__all__ = ["RenderContext"]
