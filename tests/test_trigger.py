"""Test condition parsing/evaluation and trigger eligibility in AppEngine/core

Covers:
1. Condition strings parsed into typed nodes in recognition order
2. Node evaluation against the trigger context (ids, message, data fields)
3. Eligibility rules: manual triggers, event matching, conditions, error downgrade"""

import sys
from pathlib import Path

import pytest

# Add project root directory to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from AppEngine.core import (
    ConditionEvaluationError,
    ConditionEvaluator,
    DataFieldExists,
    IdEquals,
    MessageIncludes,
    RenderContext,
    TriggerEvaluator,
    UnrecognizedCondition,
    parse_condition,
)
from AppEngine.schema import validate_config
from tests import app_config_test_data as test_data


class TestParseCondition:
    """Condition string -> node"""

    def test_id_equals(self):
        assert parse_condition("surveyId === 'feedback'") == IdEquals("surveyId", "feedback")
        assert parse_condition('visualizationId == "chart-1"') == IdEquals("visualizationId", "chart-1")

    def test_message_includes(self):
        assert parse_condition("message.includes('help')") == MessageIncludes("help")
        assert parse_condition("message.toLowerCase().includes('price')") == MessageIncludes("price")

    def test_data_field(self):
        assert parse_condition("data.email") == DataFieldExists("email")
        assert parse_condition("!!data.order_id") == DataFieldExists("order_id")

    def test_recognition_order(self):
        # id equality wins over a data reference in the same string
        assert parse_condition("data.x && surveyId === 's1'") == IdEquals("surveyId", "s1")

    def test_unrecognized(self):
        node = parse_condition("user.age > 18")
        assert isinstance(node, UnrecognizedCondition)
        assert node.source == "user.age > 18"


class TestConditionEvaluator:
    """Node evaluation"""

    def setup_method(self):
        self.evaluator = ConditionEvaluator(unrecognized_default=True)

    def test_id_equals(self):
        assert self.evaluator.evaluate("surveyId === 'a'", {"surveyId": "a"}) is True
        assert self.evaluator.evaluate("surveyId === 'a'", {"surveyId": "b"}) is False
        assert self.evaluator.evaluate("surveyId === 'a'", {}) is False
        assert self.evaluator.evaluate("visualizationId === 'v'", {"visualizationId": "v"}) is True

    def test_message_includes_is_case_insensitive(self):
        context = {"data": {"message": "I need HELP with my order"}}
        assert self.evaluator.evaluate("message.includes('help')", context) is True
        assert self.evaluator.evaluate("message.includes('refund')", context) is False
        assert self.evaluator.evaluate("message.includes('help')", {"data": {}}) is False

    def test_data_field_exists(self):
        assert self.evaluator.evaluate("data.email", {"data": {"email": "a@b.c"}}) is True
        assert self.evaluator.evaluate("data.email", {"data": {"email": None}}) is False
        assert self.evaluator.evaluate("data.email", {"data": {}}) is False
        assert self.evaluator.evaluate("data.count", {"data": {"count": 0}}) is True

    def test_unrecognized_default(self):
        assert self.evaluator.evaluate("user.age > 18", {"data": {}}) is True
        strict = ConditionEvaluator(unrecognized_default=False)
        assert strict.evaluate("user.age > 18", {"data": {}}) is False

    def test_non_mapping_data_raises(self):
        with pytest.raises(ConditionEvaluationError):
            self.evaluator.evaluate("data.email", {"data": ["email"]})

    def test_accepts_parsed_node_and_context_object(self):
        context = RenderContext(survey_id="s1")
        assert self.evaluator.evaluate(IdEquals("surveyId", "s1"), context) is True

    def test_subclass_adds_node_kind(self):
        class AlwaysFalseEvaluator(ConditionEvaluator):
            def _evaluate_unrecognized(self, node, ctx, data):
                return False

        assert AlwaysFalseEvaluator().evaluate("anything at all", None) is False


class TestTriggerEvaluator:
    """Eligibility of resources under a trigger context"""

    def setup_method(self):
        self.evaluator = TriggerEvaluator(ConditionEvaluator(unrecognized_default=True))

    def test_manual_only_without_event(self):
        resource = {"trigger": "manual"}
        assert self.evaluator.is_eligible(resource) is True
        assert self.evaluator.is_eligible(resource, {}) is True
        assert self.evaluator.is_eligible(resource, {"event": "conversation_start"}) is False
        assert self.evaluator.is_eligible(resource, {"event": "manual"}) is False

    def test_event_must_match_trigger(self):
        resource = {"trigger": "conversation_start"}
        assert self.evaluator.is_eligible(resource, {"event": "conversation_start"}) is True
        assert self.evaluator.is_eligible(resource, {"event": "message_received"}) is False
        assert self.evaluator.is_eligible(resource, {"event": "something_else"}) is False

    def test_no_event_is_eligible(self):
        assert self.evaluator.is_eligible({"trigger": "survey_complete"}, None) is True

    def test_condition_evaluated_with_data(self):
        resource = {"trigger": "survey_complete", "condition": "surveyId === 'feedback'"}
        context = {"event": "survey_complete", "surveyId": "feedback", "data": {}}
        assert self.evaluator.is_eligible(resource, context) is True
        context["surveyId"] = "other"
        assert self.evaluator.is_eligible(resource, context) is False

    def test_condition_skipped_without_data(self):
        resource = {"trigger": "survey_complete", "condition": "surveyId === 'feedback'"}
        assert self.evaluator.is_eligible(resource, {"event": "survey_complete", "surveyId": "other"}) is True

    def test_condition_met_trigger(self):
        resource = {"trigger": "condition_met", "condition": "data.cart_total"}
        assert self.evaluator.is_eligible(resource, {"data": {"cart_total": 120}}) is True
        assert self.evaluator.is_eligible(resource, {"data": {}}) is False
        assert self.evaluator.is_eligible(resource, {"event": "conversation_start", "data": {"cart_total": 1}}) is False

    def test_evaluation_errors_mean_not_eligible(self):
        resource = {"trigger": "message_received", "condition": "data.email"}
        assert self.evaluator.is_eligible(resource, {"event": "message_received", "data": "oops"}) is False

    def test_unusable_context(self):
        assert self.evaluator.is_eligible({"trigger": "conversation_start"}, "not a context") is False

    def test_unexpected_evaluator_failure(self):
        class BrokenEvaluator(ConditionEvaluator):
            def _evaluate_data_field_exists(self, node, ctx, data):
                raise RuntimeError("boom")

        evaluator = TriggerEvaluator(BrokenEvaluator())
        resource = {"trigger": "message_received", "condition": "data.email"}
        assert evaluator.is_eligible(resource, {"event": "message_received", "data": {}}) is False

    def test_models_use_trigger_condition(self):
        config = validate_config(test_data.make_config()).data
        chart = config.visualizations["scores"]
        assert self.evaluator.is_eligible(chart, test_data.SURVEY_COMPLETE_CONTEXT) is True
        assert self.evaluator.is_eligible(chart, {**test_data.SURVEY_COMPLETE_CONTEXT, "surveyId": "x"}) is False

        # a product card's `condition` describes the item, never its eligibility
        card = validate_config({"productCards": {"w": test_data.make_card(condition="used")}}).data.product_cards["w"]
        assert self.evaluator.is_eligible(card, {"data": {}}) is True

    def test_context_from_snake_case(self):
        context = RenderContext.from_value({"event": "survey_complete", "survey_id": "feedback", "data": {}})
        assert context.survey_id == "feedback"
        assert context.to_dict() == {"event": "survey_complete", "data": {}, "surveyId": "feedback"}
