"""App resource data model and configuration validation.

Models describe surveys, visualizations, product cards and lifecycle rules; the validator
combines structural checks with cross-field business rules and reports every issue in one pass."""

from .constants import (
    CANONICAL_TRIGGER_EVENTS,
    CUSTOM_EVENT_HOOK,
    LIFECYCLE_EVENT_HOOKS,
    PRICE_PATTERN,
    RESOURCE_KINDS,
    split_price,
)
from .issues import InvalidConfigurationError, ValidationIssue, ValidationResult
from .models import (
    AppConfig,
    LifecycleAction,
    LifecycleHooks,
    MetricConfig,
    MultipleChoiceOption,
    MultipleChoicePage,
    ProductCard,
    RatingPage,
    Survey,
    SurveyField,
    SurveyStyling,
    TextInputPage,
    TextValidation,
    Visualization,
    VisualizationConfig,
)
from .rules import BusinessRuleValidator
from .validator import (
    ConfigValidator,
    validate_config,
    validate_or_raise,
    validate_product_card,
    validate_product_card_collection,
    validate_survey,
)

__all__ = [
    "CANONICAL_TRIGGER_EVENTS",
    "CUSTOM_EVENT_HOOK",
    "LIFECYCLE_EVENT_HOOKS",
    "PRICE_PATTERN",
    "RESOURCE_KINDS",
    "split_price",
    "InvalidConfigurationError",
    "ValidationIssue",
    "ValidationResult",
    "AppConfig",
    "LifecycleAction",
    "LifecycleHooks",
    "MetricConfig",
    "MultipleChoiceOption",
    "MultipleChoicePage",
    "ProductCard",
    "RatingPage",
    "Survey",
    "SurveyField",
    "SurveyStyling",
    "TextInputPage",
    "TextValidation",
    "Visualization",
    "VisualizationConfig",
    "BusinessRuleValidator",
    "ConfigValidator",
    "validate_config",
    "validate_or_raise",
    "validate_product_card",
    "validate_product_card_collection",
    "validate_survey",
]
