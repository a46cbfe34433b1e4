"""Result types shared by the structural and business-rule validation layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class ValidationIssue:
    """A single offending location: segmented path, human-readable message, machine code."""

    path: List[str]
    message: str
    code: str = "custom"

    @property
    def dotted_path(self) -> str:
        return ".".join(self.path) if self.path else "<root>"

    def to_dict(self) -> Dict[str, Any]:
        return {"path": list(self.path), "message": self.message, "code": self.code}


@dataclass
class ValidationResult:
    """Outcome of one validation call.

    success is True iff errors is empty; data carries the validated model on success."""

    success: bool
    data: Optional[Any] = None
    errors: List[ValidationIssue] = field(default_factory=list)

    @classmethod
    def ok(cls, data: Any) -> "ValidationResult":
        return cls(success=True, data=data)

    @classmethod
    def failed(cls, errors: Sequence[ValidationIssue]) -> "ValidationResult":
        return cls(success=False, errors=list(errors))

    def error_messages(self) -> List[str]:
        return [f"{issue.dotted_path}: {issue.message}" for issue in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            data = self.data
            if hasattr(data, "to_wire"):
                data = data.to_wire()
            elif isinstance(data, dict):
                data = {key: value.to_wire() if hasattr(value, "to_wire") else value for key, value in data.items()}
            return {"success": True, "data": data}
        return {"success": False, "errors": [issue.to_dict() for issue in self.errors]}


class InvalidConfigurationError(ValueError):
    """Raised when a caller requires a validated configuration and the input does not validate."""

    def __init__(self, issues: Sequence[ValidationIssue]):
        self.issues = list(issues)
        detail = "; ".join(f"{issue.dotted_path}: {issue.message}" for issue in self.issues)
        super().__init__(f"Invalid configuration: {detail}")


__all__ = ["ValidationIssue", "ValidationResult", "InvalidConfigurationError"]
