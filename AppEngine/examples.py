"""Named example configurations.

Each example is a ready-to-validate AppConfig mapping plus a suggested trigger context, used
by the HTTP interface (/examples), as documentation for agent prompts, and in tests."""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Optional

CUSTOMER_FEEDBACK_MULTI: Dict[str, Any] = {
    "surveys": {
        "customer-feedback": {
            "id": "customer-feedback",
            "title": "Customer Feedback",
            "description": "Help us improve by sharing your experience",
            "trigger": "conversation_start",
            "styling": {"theme": "default", "showProgress": True, "primaryColor": "#007bff"},
            "pages": [
                {
                    "id": "satisfaction",
                    "type": "rating",
                    "title": "How satisfied are you with our service?",
                    "min": 1,
                    "max": 5,
                    "labels": {"min": "Very dissatisfied", "max": "Very satisfied"},
                    "required": True,
                },
                {
                    "id": "features",
                    "type": "multipleChoice",
                    "title": "Which features do you use most?",
                    "options": [
                        {"id": "search", "label": "Search"},
                        {"id": "reports", "label": "Reports", "followUpQuestion": "Which report do you open most?"},
                        {"id": "alerts", "label": "Alerts"},
                        {"id": "integrations", "label": "Integrations"},
                    ],
                    "allowMultiple": True,
                    "allowUserOptions": True,
                    "maxSelections": 3,
                    "required": True,
                },
                {
                    "id": "comments",
                    "type": "textInput",
                    "title": "Anything else you would like to tell us?",
                    "placeholder": "Your comments",
                    "rows": 4,
                    "validation": {"maxLength": 1000, "message": "Please keep comments under 1000 characters"},
                },
            ],
        }
    },
    "lifecycle": {
        "onConversationStart": [{"action": "show_survey", "surveyId": "customer-feedback"}],
        "onSurveyComplete": [
            {
                "action": "send_message",
                "message": "Thanks for your feedback!",
                "condition": "surveyId === 'customer-feedback'",
            }
        ],
    },
}

PRODUCT_CATALOG: Dict[str, Any] = {
    "productCards": {
        "fitness-watch": {
            "id": "fitness-watch",
            "title": "Smart Fitness Watch Pro",
            "description": "Advanced fitness tracking with heart rate monitoring, GPS and a 7-day battery.",
            "link": "https://example.com/products/fitness-watch",
            "image_link": "https://example.com/images/fitness-watch.jpg",
            "price": "349.99 USD",
            "sale_price": "299.99 USD",
            "availability": "in_stock",
            "inventory_quantity": 42,
            "brand": "FitTech",
            "color": "Midnight Black",
            "size": "44mm",
            "product_review_rating": 4.6,
            "product_review_count": 1287,
            "enable_search": True,
            "enable_checkout": True,
            "shipping": "US:::0.00 USD",
            "return_window": 30,
        },
        "wireless-earbuds": {
            "id": "wireless-earbuds",
            "title": "Noise-Cancelling Wireless Earbuds",
            "description": "Active noise cancellation, transparency mode and wireless charging case.",
            "link": "https://example.com/products/earbuds",
            "image_link": "https://example.com/images/earbuds.jpg",
            "price": "179.00 USD",
            "availability": "preorder",
            "availability_date": "2026-12-01",
            "brand": "SoundWave",
            "display_mode": "list",
        },
        "travel-mug": {
            "id": "travel-mug",
            "title": "Insulated Travel Mug",
            "description": "Keeps drinks hot for 12 hours.",
            "link": "https://example.com/products/travel-mug",
            "image_link": "https://example.com/images/travel-mug.jpg",
            "price": "24.95 EUR",
            "availability": "out_of_stock",
            "display_mode": "compact",
        },
    },
    "lifecycle": {
        "onCustomEvent": {
            "show_catalog": [
                {"action": "show_product_card", "productCardId": "fitness-watch"},
                {"action": "show_product_card", "productCardId": "wireless-earbuds"},
            ]
        }
    },
}

FEEDBACK_CHART: Dict[str, Any] = {
    "visualizations": {
        "feedback-chart": {
            "id": "feedback-chart",
            "title": "Feedback Scores",
            "description": "Average satisfaction by product area",
            "type": "chart",
            "dataSource": "scores",
            "config": {"chartType": "bar", "xAxis": "area", "yAxis": "score", "colors": ["#3498db", "#2ecc71"]},
            "trigger": "survey_complete",
            "condition": "surveyId === 'user-feedback'",
        },
        "feedback-summary": {
            "id": "feedback-summary",
            "title": "Feedback Summary",
            "type": "metrics",
            "dataSource": "summary",
            "config": {
                "metrics": [
                    {"label": "Responses", "field": "responses", "format": "number"},
                    {"label": "Satisfaction", "field": "satisfaction", "format": "percentage"},
                    {"label": "Average Rating", "field": "rating", "format": "rating"},
                ]
            },
            "trigger": "survey_complete",
        },
    },
    "lifecycle": {
        "onSurveyComplete": [
            {"action": "show_visualization", "visualizationId": "feedback-chart"},
            {"action": "show_visualization", "visualizationId": "feedback-summary", "condition": "data.summary"},
        ]
    },
}

FEEDBACK_CHART_CONTEXT: Dict[str, Any] = {
    "event": "survey_complete",
    "surveyId": "user-feedback",
    "data": {
        "scores": [
            {"area": "Support", "score": 4.5},
            {"area": "Pricing", "score": 3.8},
            {"area": "Usability", "score": 4.2},
        ],
        "summary": {"responses": 128, "satisfaction": 0.87, "rating": 4.25},
    },
}

FINANCE_INTAKE: Dict[str, Any] = {
    "surveys": {
        "finance-intake": {
            "id": "finance-intake",
            "title": "Let's Get Started with Your Finances",
            "description": "Help me understand your financial situation so I can provide personalized guidance",
            "trigger": "manual",
            "styling": {"theme": "gradient", "showProgress": True, "primaryColor": "#667eea"},
            "pages": [
                {
                    "id": "income",
                    "type": "textInput",
                    "title": "What is your total monthly income?",
                    "description": "Include all sources: salary, investments, side income, etc.",
                    "placeholder": "e.g., $5,000",
                    "required": True,
                    "validation": {
                        "pattern": r"^\$?[0-9,]+(\.[0-9]{2})?$",
                        "message": "Please enter a valid dollar amount (e.g., $5,000 or 5000)",
                    },
                },
                {
                    "id": "expense-categories",
                    "type": "multipleChoice",
                    "title": "Which expense categories do you have?",
                    "description": "Select all that apply to your situation",
                    "options": [
                        {"id": "housing", "label": "Housing (rent/mortgage, utilities, maintenance)"},
                        {"id": "transport", "label": "Transportation (car payments, gas, insurance, public transit)"},
                        {"id": "food", "label": "Food & Dining (groceries, restaurants, delivery)"},
                        {"id": "healthcare", "label": "Healthcare (insurance, medical expenses)"},
                        {"id": "debt", "label": "Debt Payments (credit cards, student loans, personal loans)"},
                        {"id": "savings", "label": "Savings & Investments (401k, IRA, general savings)"},
                        {"id": "entertainment", "label": "Entertainment (subscriptions, hobbies, travel)"},
                        {"id": "other", "label": "Other Expenses"},
                    ],
                    "allowMultiple": True,
                    "allowUserOptions": False,
                    "required": True,
                },
                {
                    "id": "financial-goals",
                    "type": "multipleChoice",
                    "title": "What are your primary financial goals?",
                    "description": "Select your top 3 priorities",
                    "options": [
                        {"id": "emergency-fund", "label": "Build an emergency fund"},
                        {"id": "pay-debt", "label": "Pay off debt"},
                        {"id": "save-house", "label": "Save for a home down payment"},
                        {"id": "retirement", "label": "Save for retirement"},
                        {"id": "invest", "label": "Start investing"},
                    ],
                    "allowMultiple": True,
                    "maxSelections": 3,
                    "required": True,
                },
                {
                    "id": "risk-tolerance",
                    "type": "rating",
                    "title": "How would you describe your investment risk tolerance?",
                    "description": "1 = Very conservative, 5 = Very aggressive",
                    "min": 1,
                    "max": 5,
                    "labels": {"min": "Very Conservative", "max": "Very Aggressive"},
                    "required": True,
                },
                {
                    "id": "additional-info",
                    "type": "textInput",
                    "title": "Anything else I should know about your financial situation?",
                    "placeholder": "e.g., Planning to buy a house next year",
                    "rows": 4,
                    "required": False,
                },
            ],
        }
    },
    "lifecycle": {"onCustomEvent": {"manual": [{"action": "show_survey", "surveyId": "finance-intake"}]}},
}

EXAMPLES: Dict[str, Dict[str, Any]] = {
    "customer-feedback-multi": {
        "name": "Customer Feedback Survey",
        "category": "survey",
        "description": "Multi-page customer feedback survey with rating, choice and text pages",
        "config": CUSTOMER_FEEDBACK_MULTI,
        "context": {"event": "conversation_start"},
        "resource": {"kind": "survey", "id": "customer-feedback"},
    },
    "product-catalog": {
        "name": "Product Catalog",
        "category": "product",
        "description": "Product cards with pricing, ratings and availability in all three display modes",
        "config": PRODUCT_CATALOG,
        "context": None,
        "resource": {"kind": "productCard", "id": "fitness-watch"},
    },
    "feedback-chart": {
        "name": "Feedback Chart",
        "category": "visualization",
        "description": "Bar chart and metrics shown after a feedback survey completes",
        "config": FEEDBACK_CHART,
        "context": FEEDBACK_CHART_CONTEXT,
        "resource": {"kind": "visualization", "id": "feedback-chart"},
    },
    "finance-intake": {
        "name": "Personal Finance Intake",
        "category": "survey",
        "description": "Multi-page survey for collecting personal finance information",
        "config": FINANCE_INTAKE,
        "context": None,
        "resource": {"kind": "survey", "id": "finance-intake"},
    },
}


def list_examples() -> List[Dict[str, str]]:
    """Summary of every example (no configuration bodies)."""
    return [
        {"id": example_id, "name": entry["name"], "category": entry["category"], "description": entry["description"]}
        for example_id, entry in EXAMPLES.items()
    ]


def get_example(example_id: str) -> Optional[Dict[str, Any]]:
    """Deep copy of one example including its config and suggested context, or None."""
    entry = EXAMPLES.get(example_id)
    if entry is None:
        return None
    example = copy.deepcopy(entry)
    example["id"] = example_id
    return example


__all__ = ["EXAMPLES", "list_examples", "get_example"]
