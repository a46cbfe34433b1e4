"""Test the two-layer configuration validator in AppEngine/schema

Covers:
1. Structural checks (types, enums, price and URL formats)
2. Cross-field business rules (preorder date, checkout/search, sale price, fields vs pages)
3. Both layers reporting in one pass, with wire-name paths"""

import sys
from pathlib import Path

import pytest

# Add project root directory to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from AppEngine.schema import (
    AppConfig,
    ConfigValidator,
    InvalidConfigurationError,
    ProductCard,
    validate_config,
    validate_product_card,
    validate_product_card_collection,
)
from tests import app_config_test_data as test_data


def _paths(result):
    return [issue.dotted_path for issue in result.errors]


class TestProductCardValidation:
    """Validation of standalone product cards"""

    def setup_method(self):
        self.validator = ConfigValidator()

    def test_valid_card(self):
        result = self.validator.validate_product_card(test_data.make_card())
        assert result.success is True
        assert isinstance(result.data, ProductCard)
        assert result.data.display_mode == "card"
        assert result.data.trigger == "manual"

    @pytest.mark.parametrize("price,accepted", test_data.PRICE_CASES)
    def test_price_format(self, price, accepted):
        card = test_data.make_card(price=price, sale_price=None)
        result = validate_product_card(card)
        assert result.success is accepted
        if not accepted:
            assert "price" in _paths(result)
            issue = [i for i in result.errors if i.dotted_path == "price"][0]
            assert issue.code == "price_format"
            assert "79.99 USD" in issue.message

    def test_sale_price_above_price_rejected(self):
        card = test_data.make_card(price="100.00 USD", sale_price="120.00 USD")
        result = validate_product_card(card)
        assert result.success is False
        assert _paths(result) == ["sale_price"]
        assert result.errors[0].message == "sale_price must be less than or equal to price"
        assert result.errors[0].code == "custom"

    def test_sale_price_equal_to_price_accepted(self):
        card = test_data.make_card(price="100.00 USD", sale_price="100 USD")
        assert validate_product_card(card).success is True

    def test_checkout_requires_search(self):
        card = test_data.make_card(enable_checkout=True, enable_search=False)
        result = validate_product_card(card)
        assert result.success is False
        assert _paths(result) == ["enable_search"]

        card = test_data.make_card(enable_checkout=True)
        del card["enable_search"]
        assert validate_product_card(card).success is False

    def test_search_without_checkout_accepted(self):
        card = test_data.make_card(enable_checkout=False, enable_search=False)
        assert validate_product_card(card).success is True

    def test_preorder_requires_availability_date(self):
        card = test_data.make_card(availability="preorder")
        result = validate_product_card(card)
        assert result.success is False
        assert _paths(result) == ["availability_date"]
        assert "preorder" in result.errors[0].message

        card["availability_date"] = "2026-12-01"
        assert validate_product_card(card).success is True

    def test_missing_required_field(self):
        card = test_data.make_card()
        del card["title"]
        result = validate_product_card(card)
        assert result.success is False
        assert result.errors[0].path == ["title"]
        assert result.errors[0].code == "missing"

    def test_enum_and_url_errors(self):
        card = test_data.make_card(availability="sold_out", link="not a url")
        result = validate_product_card(card)
        codes = {issue.dotted_path: issue.code for issue in result.errors}
        assert codes["availability"] == "enum"
        assert codes["link"] == "url_parsing"

    def test_string_bounds(self):
        card = test_data.make_card(title="x" * 151)
        result = validate_product_card(card)
        assert result.errors[0].path == ["title"]
        assert result.errors[0].code == "string_too_long"

    def test_structural_and_rule_errors_reported_together(self):
        card = test_data.make_card(price="free", availability="preorder", enable_checkout=True, enable_search=False)
        del card["image_link"]
        result = validate_product_card(card)
        paths = _paths(result)
        assert "price" in paths
        assert "image_link" in paths
        assert "availability_date" in paths
        assert "enable_search" in paths

    def test_non_mapping_input(self):
        result = validate_product_card(["not", "a", "card"])
        assert result.success is False
        assert len(result.errors) >= 1

    def test_unknown_keys_ignored(self):
        card = test_data.make_card(unexpected_field="whatever")
        assert validate_product_card(card).success is True

    def test_model_is_frozen(self):
        card = validate_product_card(test_data.make_card()).data
        with pytest.raises(Exception):
            card.title = "changed"


class TestProductCardCollection:
    """Validation of id -> product card mappings"""

    def test_valid_collection(self):
        result = validate_product_card_collection({
            "smart-watch": test_data.make_card(),
            "mug": dict(test_data.OUT_OF_STOCK_MUG),
        })
        assert result.success is True
        assert set(result.data.keys()) == {"smart-watch", "mug"}

    def test_error_paths_are_keyed(self):
        result = validate_product_card_collection({
            "a": test_data.make_card(id="a", sale_price="999.00 USD"),
        })
        assert _paths(result) == ["a.sale_price"]

    def test_duplicate_ids(self):
        result = validate_product_card_collection({
            "first": test_data.make_card(),
            "second": test_data.make_card(),
        })
        assert result.success is False
        assert _paths(result) == ["second.id"]
        assert "Duplicate" in result.errors[0].message

    def test_wire_form(self):
        result = validate_product_card_collection({"smart-watch": test_data.make_card()})
        wire = result.to_dict()
        assert wire["success"] is True
        assert wire["data"]["smart-watch"]["price"] == "349.99 USD"


class TestSurveyValidation:
    """Survey rules: fields XOR pages and page-level invariants"""

    def setup_method(self):
        self.validator = ConfigValidator()

    def test_multi_page_survey(self):
        result = self.validator.validate_survey(test_data.make_survey())
        assert result.success is True
        assert result.data.is_multi_page is True
        assert [page.type for page in result.data.pages] == ["textInput", "multipleChoice", "rating"]

    def test_legacy_survey(self):
        result = self.validator.validate_survey(dict(test_data.LEGACY_SURVEY))
        assert result.success is True
        assert result.data.is_multi_page is False

    def test_fields_and_pages_together_rejected(self):
        survey = test_data.make_survey(fields=[{"id": "f", "type": "text", "label": "F"}])
        result = self.validator.validate_survey(survey)
        assert result.success is False
        assert result.errors[0].message == 'Survey must have either "fields" or "pages", but not both'
        assert result.errors[0].dotted_path == "<root>"

    def test_neither_fields_nor_pages_rejected(self):
        survey = test_data.make_survey()
        del survey["pages"]
        result = self.validator.validate_survey(survey)
        assert result.success is False

    def test_unknown_page_type(self):
        survey = test_data.make_survey()
        survey["pages"][0]["type"] = "slider"
        result = self.validator.validate_survey(survey)
        assert result.success is False
        assert result.errors[0].code == "enum"

    def test_invalid_regex_pattern(self):
        survey = test_data.make_survey()
        survey["pages"][0]["validation"]["pattern"] = "([a-z"
        result = self.validator.validate_survey(survey)
        assert result.success is False
        assert result.errors[0].code == "regex_invalid"

    def test_min_length_above_max_length(self):
        survey = test_data.make_survey()
        survey["pages"][0]["validation"].update({"minLength": 50, "maxLength": 10})
        result = self.validator.validate_survey(survey)
        assert _paths(result) == ["pages.0.validation.minLength"]

    def test_max_selections_beyond_options(self):
        survey = test_data.make_survey()
        survey["pages"][1]["maxSelections"] = 4
        result = self.validator.validate_survey(survey)
        assert _paths(result) == ["pages.1.maxSelections"]

    def test_rating_scale(self):
        survey = test_data.make_survey()
        survey["pages"][2].update({"min": 5, "max": 5})
        result = self.validator.validate_survey(survey)
        assert _paths(result) == ["pages.2.min"]

        survey["pages"][2].update({"min": 1, "max": 11})
        result = self.validator.validate_survey(survey)
        assert _paths(result) == ["pages.2.max"]

    def test_duplicate_page_ids(self):
        survey = test_data.make_survey()
        survey["pages"][2]["id"] = "name"
        result = self.validator.validate_survey(survey)
        assert _paths(result) == ["pages.2.id"]

    def test_empty_pages_rejected(self):
        result = self.validator.validate_survey(test_data.make_survey(pages=[]))
        assert result.success is False
        assert _paths(result) == ["pages"]
        assert result.errors[0].code == "too_short"

    def test_field_name_keys_checked_by_rules(self):
        survey = test_data.make_survey()
        survey["pages"][0]["validation"] = {"min_length": 50, "max_length": 10}
        del survey["pages"][1]["maxSelections"]
        survey["pages"][1]["max_selections"] = 5
        result = self.validator.validate_survey(survey)
        assert result.success is False
        assert _paths(result) == ["pages.0.validation.minLength", "pages.1.maxSelections"]


class TestConfigValidation:
    """Composite AppConfig validation"""

    def test_full_config(self):
        result = validate_config(test_data.make_config())
        assert result.success is True, result.error_messages()
        config = result.data
        assert isinstance(config, AppConfig)
        assert set(config.product_cards.keys()) == {"smart-watch", "headphones", "mug"}
        assert config.visualizations["scores"].data_source == "scores"
        assert config.lifecycle.on_custom_event["cart_opened"][0].mcp_tool == "get_cart"

    def test_empty_config(self):
        result = validate_config({})
        assert result.success is True

    def test_errors_use_wire_paths(self):
        config = test_data.make_config()
        config["productCards"]["smart-watch"]["sale_price"] = "500.00 USD"
        config["visualizations"]["scores"]["type"] = "heatmap"
        config["surveys"]["contact"]["pages"] = []
        result = validate_config(config)
        paths = _paths(result)
        assert "productCards.smart-watch.sale_price" in paths
        assert "visualizations.scores.type" in paths
        assert "surveys.contact" in paths

    def test_field_name_sections_checked_by_rules(self):
        card = test_data.make_card(
            availability="preorder", enable_search=False, price="100.00 USD", sale_price="120.00 USD"
        )
        expected = [
            "productCards.p.availability_date",
            "productCards.p.enable_search",
            "productCards.p.sale_price",
        ]
        assert _paths(validate_config({"productCards": {"p": card}})) == expected

        result = validate_config({"product_cards": {"p": card}})
        assert result.success is False
        assert _paths(result) == expected

        duplicated = validate_config({"product_cards": {"a": test_data.make_card(), "b": test_data.make_card()}})
        assert _paths(duplicated) == ["productCards.b.id"]

    def test_lifecycle_action_enum(self):
        config = test_data.make_config()
        config["lifecycle"]["onConversationStart"][0]["action"] = "explode"
        result = validate_config(config)
        assert result.success is False
        assert result.errors[0].path[:2] == ["lifecycle", "onConversationStart"]

    def test_wire_form_round_trip(self):
        config = test_data.make_config()
        wire = validate_config(config).to_dict()
        assert wire["success"] is True
        assert wire["data"]["visualizations"]["scores"]["dataSource"] == "scores"
        assert wire["data"]["surveys"]["feedback"]["pages"][1]["allowMultiple"] is True
        assert validate_config(wire["data"]).success is True

    def test_failure_wire_form(self):
        wire = validate_config({"productCards": {"x": {"id": "x"}}}).to_dict()
        assert wire["success"] is False
        assert all(set(error.keys()) == {"path", "message", "code"} for error in wire["errors"])

    def test_validate_or_raise(self):
        validator = ConfigValidator()
        config = validator.validate_or_raise(test_data.make_config())
        assert validator.validate_or_raise(config) is config

        broken = test_data.make_config()
        broken["productCards"]["headphones"]["availability_date"] = None
        with pytest.raises(InvalidConfigurationError) as exc_info:
            validator.validate_or_raise(broken)
        assert "productCards.headphones.availability_date" in str(exc_info.value)
        assert len(exc_info.value.issues) == 1
