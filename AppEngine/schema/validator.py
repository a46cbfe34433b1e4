"""Configuration validator.

Incoming configuration (HTTP bodies, CLI files, agent output) is untrusted. It is checked in
two layers before anything is rendered:

1. structural: pydantic models (types, enums, string bounds, URL and price formats);
2. business rules: cross-field invariants evaluated on the raw mapping.

Both layers always run, so a single call reports every offending path at once."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from loguru import logger
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .constants import SURVEY_PAGE_TYPES
from .issues import InvalidConfigurationError, ValidationIssue, ValidationResult
from .models import AppConfig, ProductCard, Survey
from .rules import BusinessRuleValidator

# pydantic error types that have a shorter conventional name on the wire
_CODE_ALIASES = {
    "literal_error": "enum",
    "union_tag_invalid": "enum",
    "union_tag_not_found": "missing",
}


def _wire_path(loc: Sequence[Any]) -> List[str]:
    """pydantic loc without the discriminator tags it inserts after a list index."""
    path: List[str] = []
    previous: Any = None
    for part in loc:
        if isinstance(previous, int) and part in SURVEY_PAGE_TYPES:
            previous = part
            continue
        path.append(str(part))
        previous = part
    return path


def _issues_from_pydantic(exc: PydanticValidationError) -> List[ValidationIssue]:
    """Translate each pydantic error into one path-addressed issue."""
    issues: List[ValidationIssue] = []
    for error in exc.errors(include_url=False):
        code = error.get("type", "invalid")
        issues.append(
            ValidationIssue(
                path=_wire_path(error.get("loc", ())),
                message=error.get("msg", "Invalid value"),
                code=_CODE_ALIASES.get(code, code),
            )
        )
    return issues


class ConfigValidator:
    """Validator for AppConfig bundles and standalone product cards.

    Description:
        - validate_* methods return a ValidationResult and never raise for bad input
        - validate_or_raise is the raising variant used when a model is required
        - the rule layer is injectable so callers can extend the invariants"""

    def __init__(self, rules: Optional[BusinessRuleValidator] = None):
        self.rules = rules or BusinessRuleValidator()
        self._card_collection = TypeAdapter(Dict[str, ProductCard])

    # ======== External interface ========

    def validate_config(self, raw: Any) -> ValidationResult:
        """Validate a composite configuration and every nested entity."""
        return self._run("config", AppConfig.model_validate, self.rules.check_config, raw)

    def validate_product_card(self, raw: Any) -> ValidationResult:
        """Validate one product card in isolation."""
        return self._run("product card", ProductCard.model_validate, self.rules.check_product_card, raw)

    def validate_product_card_collection(self, raw: Any) -> ValidationResult:
        """Validate a mapping of id -> product card."""
        return self._run(
            "product card collection",
            self._card_collection.validate_python,
            self.rules.check_product_card_collection,
            raw,
        )

    def validate_survey(self, raw: Any) -> ValidationResult:
        """Validate one survey in isolation."""
        return self._run("survey", Survey.model_validate, self.rules.check_survey, raw)

    def validate_or_raise(self, raw: Any) -> AppConfig:
        """Return the validated AppConfig, or raise InvalidConfigurationError listing every issue."""
        if isinstance(raw, AppConfig):
            return raw
        result = self.validate_config(raw)
        if not result.success:
            raise InvalidConfigurationError(result.errors)
        return result.data

    # ======== Internal Tools ========

    def _run(self, label: str, structural, rules, raw: Any) -> ValidationResult:
        issues: List[ValidationIssue] = []
        data = None
        try:
            data = structural(raw)
        except PydanticValidationError as exc:
            issues.extend(_issues_from_pydantic(exc))
        issues.extend(rules(raw))

        if issues:
            logger.debug(f"{label} validation failed with {len(issues)} issue(s)")
            return ValidationResult.failed(issues)
        logger.debug(f"{label} validation passed")
        return ValidationResult.ok(data)


_default_validator = ConfigValidator()


def validate_config(raw: Any) -> ValidationResult:
    return _default_validator.validate_config(raw)


def validate_product_card(raw: Any) -> ValidationResult:
    return _default_validator.validate_product_card(raw)


def validate_product_card_collection(raw: Any) -> ValidationResult:
    return _default_validator.validate_product_card_collection(raw)


def validate_survey(raw: Any) -> ValidationResult:
    return _default_validator.validate_survey(raw)


def validate_or_raise(raw: Any) -> AppConfig:
    return _default_validator.validate_or_raise(raw)


__all__ = [
    "ConfigValidator",
    "validate_config",
    "validate_product_card",
    "validate_product_card_collection",
    "validate_survey",
    "validate_or_raise",
]
