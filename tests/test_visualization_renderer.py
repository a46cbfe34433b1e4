"""Test the visualization renderer in AppEngine/renderers/visualization_renderer.py"""

import sys
from pathlib import Path

import pytest

# Add project root directory to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from AppEngine.core import ResourcePackager
from AppEngine.renderers import VisualizationRenderer, format_metric_value
from AppEngine.schema import validate_config
from AppEngine.utils.config import settings
from tests import app_config_test_data as test_data


class TestFormatMetricValue:
    """Display formatting of metric values"""

    @pytest.mark.parametrize("value,fmt,expected", [
        (1234.5, "currency", "$1,234.50"),
        (0, "currency", "$0.00"),
        (0.875, "percentage", "88%"),
        (0.5, "percentage", "50%"),
        (4.25, "rating", "4.3 ★"),
        (12.9, "number", "12"),
        (7, None, "7"),
        (None, "currency", "N/A"),
        ("pending", "currency", "pending"),
        (True, "number", "True"),
    ])
    def test_format(self, value, fmt, expected):
        assert format_metric_value(value, fmt) == expected


class TestVisualizationRenderer:
    """chart, metrics, table and custom rendering"""

    def setup_method(self):
        self.renderer = VisualizationRenderer(ResourcePackager("ui"))
        self.config = validate_config(test_data.make_config()).data

    def test_chart(self):
        resource = self.renderer.render(self.config, "scores", test_data.SURVEY_COMPLETE_CONTEXT)
        assert resource.uri.startswith("ui://visualization/scores/")
        html = resource.html
        assert settings.CHART_JS_CDN_URL in html
        assert '<canvas id="chart"></canvas>' in html
        assert '"labels": ["Support", "Pricing"]' in html
        assert '"data": [4.5, 3.8]' in html
        assert '"type": "bar"' in html

    def test_chart_without_data(self):
        context = {"event": "survey_complete", "surveyId": "feedback", "data": {}}
        html = self.renderer.render(self.config, "scores", context).html
        assert "No data available" in html
        assert "<canvas" not in html

    def test_chart_condition(self):
        context = dict(test_data.SURVEY_COMPLETE_CONTEXT, surveyId="someone-else")
        assert self.renderer.render(self.config, "scores", context) is None
        context = dict(test_data.SURVEY_COMPLETE_CONTEXT, event="message_received")
        assert self.renderer.render(self.config, "scores", context) is None

    def test_chart_from_mapping(self):
        raw = test_data.make_config()
        raw["visualizations"]["scores"]["config"] = {"chartType": "pie"}
        config = validate_config(raw).data
        context = {"surveyId": "feedback", "data": {"scores": {"Yes": 12, "No": 3, "note": "skip"}}}
        html = self.renderer.render(config, "scores", context).html
        assert '"labels": ["Yes", "No"]' in html
        assert '"data": [12, 3]' in html

    def test_metrics(self):
        html = self.renderer.render(self.config, "summary", {"data": test_data.SUMMARY_DATA}).html
        assert 'class="metrics-grid"' in html
        assert "$1,234.50" in html
        assert "88%" in html
        assert "4.3 ★" in html
        assert '<div class="metric-value">12</div>' in html
        assert '<div class="metric-value">N/A</div>' in html
        assert "Satisfaction" in html

    def test_table(self):
        context = {"event": "message_received", "data": test_data.ORDERS_DATA}
        html = self.renderer.render(self.config, "orders", context).html
        assert "<thead><tr><th>id</th><th>item</th><th>paid</th><th>note</th></tr></thead>" in html
        assert "<td>&lt;b&gt;Watch&lt;/b&gt;</td>" in html
        assert "<td>true</td>" in html
        assert "<td>gift</td>" in html
        assert "<b>Watch</b>" not in html

    def test_table_condition(self):
        context = {"event": "message_received", "data": {"message": "hello", "orders": []}}
        assert self.renderer.render(self.config, "orders", context) is None

    def test_custom_placeholder(self):
        html = self.renderer.render(self.config, "globe").html
        assert "Custom visualization (not yet implemented)" in html
        assert 'data-source="points"' in html
