"""Test the AppResourceEngine facade and the built-in examples"""

import sys
from pathlib import Path

import pytest

# Add project root directory to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from AppEngine import AppResourceEngine, create_engine
from AppEngine.core import Plugin
from AppEngine.examples import EXAMPLES, get_example, list_examples
from AppEngine.schema import AppConfig, InvalidConfigurationError
from AppEngine.utils.config import Settings
from tests import app_config_test_data as test_data


class ShortCircuitPlugin(Plugin):
    name = "short-circuit"

    def __init__(self, result=None):
        self.result = result
        self.loaded = []
        self.errors = []

    def on_config_load(self, config):
        self.loaded.append(config)

    def on_render(self, kind, resource_id, context=None):
        return self.result

    def on_error(self, error):
        self.errors.append(error)


class TestAppResourceEngine:
    """Validation, rendering and lifecycle through one entry point"""

    def setup_method(self):
        self.engine = create_engine(Settings(PUBLIC_BASE_URL=None, RESOURCE_URI_SCHEME="ui"))
        self.config = test_data.make_config()

    def test_status(self):
        status = self.engine.get_status()
        assert status["registered_types"] == ["survey", "visualization", "productCard"]
        assert status["plugins"] == []
        assert status["uri_scheme"] == "ui"

    def test_render_through_registry(self):
        resource = self.engine.render("survey", self.config, "contact")
        assert resource.uri.startswith("ui://survey/contact/")
        resource = self.engine.render("productCard", self.config, "smart-watch", display_mode="list")
        assert 'class="product-card-list"' in resource.html

    def test_unknown_kind(self):
        with pytest.raises(KeyError):
            self.engine.render("badge", self.config, "x")

    def test_custom_kind(self):
        received = {}

        def render_badge(config, resource_id, context=None):
            received["config"] = config
            return f"badge:{resource_id}"

        self.engine.registry.register("badge", render_badge)
        assert self.engine.render("badge", self.config, "b1") == "badge:b1"
        assert isinstance(received["config"], AppConfig)

    def test_plugin_short_circuits_render(self):
        plugin = ShortCircuitPlugin(result="cached")
        self.engine.registry.register_plugin(plugin)
        # the configuration is not even validated
        assert self.engine.render("survey", {"surveys": "broken"}, "contact") == "cached"
        assert plugin.loaded == []

    def test_plugins_see_config_and_errors(self):
        plugin = ShortCircuitPlugin()
        self.engine.registry.register_plugin(plugin)
        self.engine.render("survey", self.config, "contact")
        assert len(plugin.loaded) == 1

        with pytest.raises(InvalidConfigurationError):
            self.engine.render("survey", {"surveys": "broken"}, "contact")
        assert isinstance(plugin.errors[-1], InvalidConfigurationError)

    def test_invalid_config_raises_for_direct_render(self):
        broken = test_data.make_config()
        broken["productCards"]["smart-watch"]["price"] = "cheap"
        with pytest.raises(InvalidConfigurationError) as exc_info:
            self.engine.render_product_card(broken, "smart-watch")
        assert exc_info.value.issues[0].dotted_path == "productCards.smart-watch.price"

    def test_field_name_section_cannot_skip_rules(self):
        card = test_data.make_card(availability="preorder")
        with pytest.raises(InvalidConfigurationError) as exc_info:
            self.engine.render_product_card({"product_cards": {"p": card}}, "p")
        assert exc_info.value.issues[0].dotted_path == "productCards.p.availability_date"

    def test_render_product_cards(self):
        resource = self.engine.render_product_cards(self.config, ["smart-watch", "mug"])
        assert resource.uri.startswith("ui://product-cards/")

    def test_external_url_default_host(self):
        resource = self.engine.package_external_url("survey", "contact")
        assert resource.to_dict()["content"] == {"type": "externalUrl", "iframeUrl": "http://localhost:3000/survey"}
        assert resource.uri == "ui://survey/contact"

    def test_external_url_public_host(self):
        engine = AppResourceEngine(Settings(PUBLIC_BASE_URL="apps.example.com"))
        resource = engine.package_external_url("visualization", "scores")
        assert resource.content.iframe_url == "https://apps.example.com/visualization"

        engine = AppResourceEngine(Settings(PUBLIC_BASE_URL="http://10.0.0.5:8080/"))
        assert engine.package_external_url("survey", "s").content.iframe_url == "http://10.0.0.5:8080/survey"

    def test_external_url_explicit(self):
        resource = self.engine.package_external_url("survey", "s", "https://cdn.example.com/s.html")
        assert resource.content.iframe_url == "https://cdn.example.com/s.html"

    def test_lifecycle(self):
        actions = self.engine.dispatch_lifecycle(self.config, {"event": "conversation_start"})
        assert [action.survey_id for action in actions] == ["contact"]
        assert "cart_opened" in self.engine.get_lifecycle_events(self.config)
        assert len(self.engine.get_actions_for_event(self.config, "survey_complete")) == 4

    def test_strict_unrecognized_conditions(self):
        engine = create_engine(Settings(UNRECOGNIZED_CONDITION_DEFAULT=False))
        raw = {"lifecycle": {"onConversationStart": [{"action": "send_message", "message": "hi", "condition": "a > b"}]}}
        assert engine.dispatch_lifecycle(raw, {"event": "conversation_start"}) == []


class TestExamples:
    """Every built-in example validates and renders"""

    def setup_method(self):
        self.engine = create_engine()

    def test_list_examples(self):
        summaries = list_examples()
        assert [entry["id"] for entry in summaries] == list(EXAMPLES.keys())
        assert all("config" not in entry for entry in summaries)

    def test_get_example_is_a_copy(self):
        example = get_example("product-catalog")
        example["config"]["productCards"].clear()
        assert get_example("product-catalog")["config"]["productCards"]
        assert get_example("nope") is None

    @pytest.mark.parametrize("example_id", list(EXAMPLES.keys()))
    def test_example_validates_and_renders(self, example_id):
        example = get_example(example_id)
        result = self.engine.validate_config(example["config"])
        assert result.success is True, result.error_messages()

        resource = self.engine.render(
            example["resource"]["kind"], example["config"], example["resource"]["id"], example["context"]
        )
        assert resource is not None
        assert resource.html.startswith("<!DOCTYPE html>")

    def test_feedback_example_lifecycle(self):
        example = get_example("feedback-chart")
        actions = self.engine.dispatch_lifecycle(example["config"], example["context"])
        assert [action.visualization_id for action in actions] == ["feedback-chart", "feedback-summary"]
