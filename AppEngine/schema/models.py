"""Structural data model of app resource configuration.

All entities are frozen pydantic models: a configuration is constructed from raw input,
validated once and read-only afterwards. Field names are snake_case in Python and keep
their camelCase wire names as aliases, so validation errors report paths exactly as
they appear in the submitted configuration.

Cross-field business rules (preorder date, checkout/search flags, sale price, fields vs pages)
live in the rules layer rather than in model validators, so that they are reported together
with structural errors in a single pass."""

from __future__ import annotations

import re
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from urllib.parse import urlparse

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from .constants import GTIN_PATTERN, PRICE_FORMAT_MESSAGE, PRICE_PATTERN


# ======== Annotated field types ========

def _check_price(value: str) -> str:
    """Reject anything that is not "<amount> <CCY>"."""
    if not PRICE_PATTERN.match(value):
        raise PydanticCustomError("price_format", PRICE_FORMAT_MESSAGE)
    return value


def _check_absolute_url(value: str) -> str:
    """Only absolute http(s) URLs with a host are accepted."""
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise PydanticCustomError("url_parsing", "Invalid url")
    return value


PriceString = Annotated[str, AfterValidator(_check_price)]
AbsoluteUrl = Annotated[str, AfterValidator(_check_absolute_url)]


class AppModel(BaseModel):
    """Base of every configuration entity: immutable, alias-aware, unknown keys ignored."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def to_wire(self) -> Dict[str, Any]:
        """Dump back to the camelCase wire form, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ======== Product card ========

class ProductCard(AppModel):
    """One sellable item's display data, modelled on the product feed attribute set."""

    model_config = ConfigDict(protected_namespaces=())

    # Flags
    enable_search: Optional[bool] = None
    enable_checkout: Optional[bool] = None

    # Basic product data
    id: str = Field(..., max_length=100)
    title: str = Field(..., max_length=150)
    description: str = Field(..., max_length=5000)
    link: AbsoluteUrl

    # Media
    image_link: AbsoluteUrl
    additional_image_link: Optional[List[AbsoluteUrl]] = None
    video_link: Optional[AbsoluteUrl] = None
    model_3d_link: Optional[AbsoluteUrl] = None

    # Price & promotions
    price: PriceString
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    applicable_taxes_fees: Optional[str] = None
    sale_price: Optional[PriceString] = None
    sale_price_effective_date: Optional[str] = None  # ISO 8601 range
    pricing_trend: Optional[str] = Field(None, max_length=80)

    # Availability & inventory
    availability: Literal["in_stock", "out_of_stock", "preorder"]
    availability_date: Optional[str] = None  # ISO 8601
    inventory_quantity: Optional[int] = Field(None, ge=0)

    # Item information
    gtin: Optional[str] = Field(None, pattern=GTIN_PATTERN.pattern)
    mpn: Optional[str] = Field(None, max_length=70)
    condition: Optional[Literal["new", "refurbished", "used"]] = None
    product_category: Optional[str] = None
    brand: Optional[str] = Field(None, max_length=70)
    material: Optional[str] = Field(None, max_length=100)
    dimensions: Optional[str] = None
    weight: Optional[str] = None
    age_group: Optional[Literal["newborn", "infant", "toddler", "kids", "adult"]] = None

    # Reviews and Q&A
    product_review_count: Optional[int] = Field(None, ge=0)
    product_review_rating: Optional[float] = Field(None, ge=0, le=5)
    store_review_count: Optional[int] = Field(None, ge=0)
    store_review_rating: Optional[float] = Field(None, ge=0, le=5)
    q_and_a: Optional[str] = None

    # Variants
    item_group_id: Optional[str] = Field(None, max_length=70)
    item_group_title: Optional[str] = Field(None, max_length=150)
    color: Optional[str] = Field(None, max_length=40)
    size: Optional[str] = Field(None, max_length=20)
    size_system: Optional[str] = Field(None, min_length=2, max_length=2)  # ISO 3166 country code
    gender: Optional[Literal["male", "female", "unisex"]] = None
    offer_id: Optional[str] = None

    custom_variant1_category: Optional[str] = None
    custom_variant1_option: Optional[str] = None
    custom_variant2_category: Optional[str] = None
    custom_variant2_option: Optional[str] = None
    custom_variant3_category: Optional[str] = None
    custom_variant3_option: Optional[str] = None

    # Fulfillment
    shipping: Optional[str] = None
    delivery_estimate: Optional[str] = None
    pickup_method: Optional[Literal["in_store", "reserve", "not_supported"]] = None
    pickup_sla: Optional[str] = None

    # Merchant
    seller_name: Optional[str] = Field(None, max_length=70)
    seller_url: Optional[AbsoluteUrl] = None
    seller_privacy_policy: Optional[AbsoluteUrl] = None
    seller_tos: Optional[AbsoluteUrl] = None

    # Returns
    return_policy: Optional[AbsoluteUrl] = None
    return_window: Optional[int] = Field(None, gt=0)

    # Performance signals
    popularity_score: Optional[float] = None
    return_rate: Optional[float] = Field(None, ge=0, le=100)

    # Compliance
    warning: Optional[str] = None
    warning_url: Optional[AbsoluteUrl] = None
    age_restriction: Optional[int] = Field(None, gt=0)

    # Related products
    related_product_id: Optional[str] = None
    relationship_type: Optional[
        Literal[
            "part_of_set",
            "required_part",
            "often_bought_with",
            "substitute",
            "different_brand",
            "accessory",
        ]
    ] = None

    # Display options
    display_mode: Literal["card", "list", "compact"] = "card"
    trigger: Literal["manual", "conversation_start", "message_received"] = "manual"

    @property
    def trigger_condition(self) -> Optional[str]:
        """Product cards have no eligibility condition; `condition` is the item condition."""
        return None


# ======== Survey ========

class TextValidation(AppModel):
    min_length: Optional[int] = Field(None, alias="minLength", ge=0)
    max_length: Optional[int] = Field(None, alias="maxLength", ge=0)
    pattern: Optional[str] = None
    message: Optional[str] = None

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            re.compile(value)
        except re.error as exc:
            raise PydanticCustomError(
                "regex_invalid", "pattern is not a valid regular expression: {reason}", {"reason": str(exc)}
            )
        return value


class SurveyField(AppModel):
    """Legacy flat survey field, rendered once inside a single form."""

    id: str
    type: Literal[
        "text",
        "textarea",
        "email",
        "number",
        "multiple_choice",
        "single_choice",
        "rating",
        "date",
        "file",
    ]
    label: str
    description: Optional[str] = None
    required: bool = False
    placeholder: Optional[str] = None
    options: Optional[List[str]] = None
    min: Optional[float] = None
    max: Optional[float] = None
    max_selections: Optional[int] = Field(None, alias="maxSelections")
    validation: Optional[TextValidation] = None


class SurveyPageBase(AppModel):
    id: str
    title: str
    description: Optional[str] = None
    required: bool = False


class TextInputPage(SurveyPageBase):
    type: Literal["textInput"]
    placeholder: Optional[str] = None
    rows: int = Field(3, ge=1, le=20)
    validation: Optional[TextValidation] = None


class MultipleChoiceOption(AppModel):
    id: str
    label: str
    follow_up_question: Optional[str] = Field(None, alias="followUpQuestion")


class MultipleChoicePage(SurveyPageBase):
    type: Literal["multipleChoice"]
    options: List[MultipleChoiceOption] = Field(..., min_length=1)
    allow_multiple: bool = Field(True, alias="allowMultiple")
    allow_user_options: bool = Field(False, alias="allowUserOptions")
    max_selections: Optional[int] = Field(None, alias="maxSelections")


class RatingLabels(AppModel):
    min: Optional[str] = None
    max: Optional[str] = None


class RatingPage(SurveyPageBase):
    type: Literal["rating"]
    min: int = 1
    max: int = Field(5, ge=2, le=10)
    labels: Optional[RatingLabels] = None


SurveyPage = Annotated[
    Union[TextInputPage, MultipleChoicePage, RatingPage],
    Field(discriminator="type"),
]


class SurveyStyling(AppModel):
    theme: Literal["default", "minimal", "gradient"] = "default"
    primary_color: Optional[str] = Field(None, alias="primaryColor")
    show_progress: bool = Field(True, alias="showProgress")


class Survey(AppModel):
    """A survey is either a legacy field list or a paginated one-question-per-page sequence."""

    id: str
    title: str
    description: Optional[str] = None
    fields: Optional[List[SurveyField]] = None
    pages: Optional[List[SurveyPage]] = Field(None, min_length=1)
    trigger: Literal["conversation_start", "message_received", "manual", "condition_met"]
    condition: Optional[str] = None
    styling: Optional[SurveyStyling] = None

    @property
    def is_multi_page(self) -> bool:
        return bool(self.pages)

    @property
    def trigger_condition(self) -> Optional[str]:
        return self.condition


# ======== Visualization ========

class MetricConfig(AppModel):
    label: str
    field: str
    format: Optional[str] = None


class VisualizationConfig(AppModel):
    chart_type: Optional[Literal["bar", "line", "pie", "scatter", "area"]] = Field(None, alias="chartType")
    x_axis: Optional[str] = Field(None, alias="xAxis")
    y_axis: Optional[str] = Field(None, alias="yAxis")
    colors: Optional[List[str]] = None
    metrics: Optional[List[MetricConfig]] = None


class Visualization(AppModel):
    id: str
    title: str
    description: Optional[str] = None
    type: Literal["chart", "table", "metrics", "custom"]
    data_source: str = Field(..., alias="dataSource")
    chart_config: Optional[VisualizationConfig] = Field(None, alias="config")
    trigger: Literal["survey_complete", "message_received", "manual", "condition_met"]
    condition: Optional[str] = None

    @property
    def trigger_condition(self) -> Optional[str]:
        return self.condition


# ======== Lifecycle ========

class LifecycleAction(AppModel):
    """One effect to execute when a lifecycle event fires."""

    action: Literal[
        "show_survey",
        "show_visualization",
        "show_product_card",
        "send_message",
        "show_modal",
        "save_data",
        "trigger_mcp_tool",
        "conditional_branch",
        "delay_action",
    ]
    survey_id: Optional[str] = Field(None, alias="surveyId")
    visualization_id: Optional[str] = Field(None, alias="visualizationId")
    product_card_id: Optional[str] = Field(None, alias="productCardId")
    message: Optional[str] = None
    mcp_tool: Optional[str] = Field(None, alias="mcpTool")
    condition: Optional[str] = None
    delay: Optional[float] = Field(None, ge=0)
    data: Optional[Dict[str, Any]] = None


class LifecycleHooks(AppModel):
    on_conversation_start: Optional[List[LifecycleAction]] = Field(None, alias="onConversationStart")
    on_message_received: Optional[List[LifecycleAction]] = Field(None, alias="onMessageReceived")
    on_survey_complete: Optional[List[LifecycleAction]] = Field(None, alias="onSurveyComplete")
    on_visualization_shown: Optional[List[LifecycleAction]] = Field(None, alias="onVisualizationShown")
    on_custom_event: Optional[Dict[str, List[LifecycleAction]]] = Field(None, alias="onCustomEvent")

    def actions_for_hook(self, hook_key: str) -> Optional[List[LifecycleAction]]:
        """Look up a well-known hook by its wire name (e.g. "onSurveyComplete")."""
        for name, field_info in type(self).model_fields.items():
            if field_info.alias == hook_key:
                return getattr(self, name)
        return None


# ======== Composite root ========

class AppConfig(AppModel):
    """The unit of validation: every resource instance plus the lifecycle rules."""

    surveys: Optional[Dict[str, Survey]] = None
    visualizations: Optional[Dict[str, Visualization]] = None
    product_cards: Optional[Dict[str, ProductCard]] = Field(None, alias="productCards")
    lifecycle: Optional[LifecycleHooks] = None


__all__ = [
    "AppModel",
    "PriceString",
    "AbsoluteUrl",
    "ProductCard",
    "TextValidation",
    "SurveyField",
    "SurveyPageBase",
    "TextInputPage",
    "MultipleChoiceOption",
    "MultipleChoicePage",
    "RatingLabels",
    "RatingPage",
    "SurveyPage",
    "SurveyStyling",
    "Survey",
    "MetricConfig",
    "VisualizationConfig",
    "Visualization",
    "LifecycleAction",
    "LifecycleHooks",
    "AppConfig",
]
