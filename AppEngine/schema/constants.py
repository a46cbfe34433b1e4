"""Enumerations and wire-format constants shared by the schema models, the rules layer and the renderers.

Keeping them in one place ensures that validation, condition handling and rendering agree on
every literal (trigger names, lifecycle hooks, price pattern)."""

from __future__ import annotations

import re
from typing import Dict, Tuple

# "<digits>[.<1-2 digits>] <3 uppercase letters>", e.g. "79.99 USD"
PRICE_PATTERN = re.compile(r"^\d+(\.\d{1,2})? [A-Z]{3}$")
PRICE_FORMAT_MESSAGE = 'Price must be in format "79.99 USD"'

GTIN_PATTERN = re.compile(r"^\d{8,14}$")

AVAILABILITY_VALUES = ("in_stock", "out_of_stock", "preorder")
DISPLAY_MODES = ("card", "list", "compact")
PRODUCT_CARD_TRIGGERS = ("manual", "conversation_start", "message_received")

SURVEY_TRIGGERS = ("conversation_start", "message_received", "manual", "condition_met")
VISUALIZATION_TRIGGERS = ("survey_complete", "message_received", "manual", "condition_met")

SURVEY_FIELD_TYPES = (
    "text",
    "textarea",
    "email",
    "number",
    "multiple_choice",
    "single_choice",
    "rating",
    "date",
    "file",
)
SURVEY_PAGE_TYPES = ("textInput", "multipleChoice", "rating")
SURVEY_THEMES = ("default", "minimal", "gradient")

VISUALIZATION_TYPES = ("chart", "table", "metrics", "custom")
CHART_TYPES = ("bar", "line", "pie", "scatter", "area")

LIFECYCLE_ACTIONS = (
    "show_survey",
    "show_visualization",
    "show_product_card",
    "send_message",
    "show_modal",
    "save_data",
    "trigger_mcp_tool",
    "conditional_branch",
    "delay_action",
)

# Runtime event name -> lifecycle hook key in AppConfig.lifecycle
LIFECYCLE_EVENT_HOOKS: Dict[str, str] = {
    "conversation_start": "onConversationStart",
    "message_received": "onMessageReceived",
    "survey_complete": "onSurveyComplete",
    "visualization_shown": "onVisualizationShown",
}
CUSTOM_EVENT_HOOK = "onCustomEvent"

# Runtime event name -> trigger value that it activates
CANONICAL_TRIGGER_EVENTS: Dict[str, str] = {
    "conversation_start": "conversation_start",
    "message_received": "message_received",
    "survey_complete": "survey_complete",
}

RESOURCE_KINDS: Tuple[str, ...] = ("survey", "visualization", "productCard")


def split_price(value: str) -> Tuple[str, str]:
    """Split a "79.99 USD" string into its amount and currency parts without validating them."""
    parts = value.strip().split(" ")
    amount = parts[0]
    currency = parts[1] if len(parts) > 1 and parts[1] else "USD"
    return amount, currency


__all__ = [
    "PRICE_PATTERN",
    "PRICE_FORMAT_MESSAGE",
    "GTIN_PATTERN",
    "AVAILABILITY_VALUES",
    "DISPLAY_MODES",
    "PRODUCT_CARD_TRIGGERS",
    "SURVEY_TRIGGERS",
    "VISUALIZATION_TRIGGERS",
    "SURVEY_FIELD_TYPES",
    "SURVEY_PAGE_TYPES",
    "SURVEY_THEMES",
    "VISUALIZATION_TYPES",
    "CHART_TYPES",
    "LIFECYCLE_ACTIONS",
    "LIFECYCLE_EVENT_HOOKS",
    "CUSTOM_EVENT_HOOK",
    "CANONICAL_TRIGGER_EVENTS",
    "RESOURCE_KINDS",
    "split_price",
]
