"""Renderer collection, turning validated resources into standalone HTML documents."""

from .base_renderer import BaseResourceRenderer, ResourceNotFoundError, escape_html, json_for_script
from .multi_page_survey_renderer import MultiPageSurveyRenderer, format_survey_results
from .product_card_renderer import ProductCardRenderer, discount_percentage, format_price
from .survey_renderer import SurveyRenderer
from .visualization_renderer import VisualizationRenderer, format_metric_value

__all__ = [
    "BaseResourceRenderer",
    "ResourceNotFoundError",
    "escape_html",
    "json_for_script",
    "MultiPageSurveyRenderer",
    "format_survey_results",
    "ProductCardRenderer",
    "discount_percentage",
    "format_price",
    "SurveyRenderer",
    "VisualizationRenderer",
    "format_metric_value",
]
