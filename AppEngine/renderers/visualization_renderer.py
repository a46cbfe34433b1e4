"""Visualization renderer.

Data comes from the trigger context: ``context.data[visualization.dataSource]``.
- chart: list of records mapped through config.xAxis / config.yAxis (or a label -> value mapping),
  drawn by Chart.js loaded from settings.CHART_JS_CDN_URL
- metrics: grid of formatted values looked up by metric.field
- table: headers from record keys in first-seen order, escaped cells
- custom: placeholder for an extension renderer"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Mapping, Optional, Tuple

from loguru import logger

from ..core.context import RenderContext
from ..schema.models import Visualization
from ..utils.config import settings
from .base_renderer import BaseResourceRenderer, data_script, escape_html, inline_script, render_document

DEFAULT_COLORS = ["#3498db", "#e74c3c", "#f39c12", "#2ecc71", "#9b59b6"]
MISSING_VALUE = "N/A"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _round_half_up(value: float, places: int) -> Decimal:
    quantum = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def format_metric_value(value: Any, fmt: Optional[str] = None) -> str:
    """Format one metric for display.

    currency -> "$1,234.50", percentage -> value x 100 with "%", rating -> one decimal and a star,
    number -> floor; any other format, or a non-numeric value, is shown literally."""
    if value is None:
        return MISSING_VALUE
    if not _is_number(value):
        return str(value)
    if fmt == "currency":
        return f"${_round_half_up(value, 2):,.2f}"
    if fmt == "percentage":
        return f"{_round_half_up(value * 100, 0):.0f}%"
    if fmt == "rating":
        return f"{_round_half_up(value, 1):.1f} ★"
    if fmt == "number":
        return str(math.floor(value))
    return str(value)


class VisualizationRenderer(BaseResourceRenderer):
    kind = "visualization"
    label = "Visualization"
    config_section = "visualizations"

    def build_html(self, visualization: Visualization, context: RenderContext, **options) -> str:
        source = self._data_source(visualization, context)
        builder = getattr(self, f"_build_{visualization.type}")
        body_inner, styles, scripts, head_extra = builder(visualization, source)

        description_html = (
            f'<p class="description">{escape_html(visualization.description)}</p>' if visualization.description else ""
        )
        body = f"""<div class="visualization-container visualization-{visualization.type}">
  <h1>{escape_html(visualization.title)}</h1>
  {description_html}
  {body_inner}
</div>"""
        return render_document(
            visualization.title,
            body,
            styles=VISUALIZATION_STYLES + styles,
            scripts=scripts,
            head_extra=head_extra,
        )

    # ======== Data ========

    @staticmethod
    def _data_source(visualization: Visualization, context: RenderContext) -> Any:
        data = context.data if isinstance(context.data, Mapping) else {}
        source = data.get(visualization.data_source)
        if source is None:
            logger.debug(
                f"Data source '{visualization.data_source}' missing from context for visualization '{visualization.id}'"
            )
        return source

    @staticmethod
    def _records(source: Any) -> List[Mapping[str, Any]]:
        if isinstance(source, Mapping):
            return [source]
        if isinstance(source, (list, tuple)):
            return [row for row in source if isinstance(row, Mapping)]
        return []

    def _series(self, visualization: Visualization, source: Any) -> Tuple[List[Any], List[Any]]:
        """(labels, values) of the chart."""
        config = visualization.chart_config
        x_axis = config.x_axis if config else None
        y_axis = config.y_axis if config else None

        # {label: value} mapping without axis configuration
        if isinstance(source, Mapping) and not (x_axis or y_axis):
            pairs = [(key, value) for key, value in source.items() if _is_number(value)]
            return [key for key, _ in pairs], [value for _, value in pairs]

        labels: List[Any] = []
        values: List[Any] = []
        for record in self._records(source):
            keys = list(record.keys())
            x_key = x_axis or (keys[0] if keys else None)
            y_key = y_axis or (keys[1] if len(keys) > 1 else None)
            if x_key is None or y_key is None:
                continue
            labels.append(record.get(x_key))
            values.append(record.get(y_key))
        return labels, values

    # ======== Types ========

    def _build_chart(self, visualization: Visualization, source: Any):
        config = visualization.chart_config
        chart_type = (config.chart_type if config else None) or "bar"
        colors = (config.colors if config else None) or DEFAULT_COLORS
        labels, values = self._series(visualization, source)

        if not labels:
            return '<p class="empty-state">No data available</p>', "", "", ""

        if chart_type == "scatter":
            dataset_data: List[Any] = [{"x": label, "y": value} for label, value in zip(labels, values)]
        else:
            dataset_data = values
        payload = {
            "type": chart_type,
            "data": {
                "labels": labels,
                "datasets": [
                    {
                        "label": (config.y_axis if config and config.y_axis else visualization.title),
                        "data": dataset_data,
                        "backgroundColor": colors,
                        "borderColor": colors,
                        "borderWidth": 1,
                        "fill": chart_type == "area",
                    }
                ],
            },
            "options": {
                "responsive": True,
                "maintainAspectRatio": True,
                "plugins": {"legend": {"display": chart_type == "pie"}},
            },
        }
        head_extra = f'\n  <script type="text/javascript" src="{escape_html(settings.CHART_JS_CDN_URL)}"></script>'
        scripts = data_script("chart-config", payload) + "\n" + inline_script(CHART_SCRIPT)
        body = '<canvas id="chart"></canvas>'
        return body, "", scripts, head_extra

    def _build_metrics(self, visualization: Visualization, source: Any):
        metrics = (visualization.chart_config.metrics if visualization.chart_config else None) or []
        values: Mapping[str, Any] = source if isinstance(source, Mapping) else {}
        cards = "".join(
            f"""
    <div class="metric-card">
      <div class="metric-value">{escape_html(format_metric_value(values.get(metric.field), metric.format))}</div>
      <div class="metric-label">{escape_html(metric.label)}</div>
    </div>"""
            for metric in metrics
        )
        if not metrics:
            return '<p class="empty-state">No metrics configured</p>', "", "", ""
        return f'<div class="metrics-grid">{cards}\n  </div>', "", "", ""

    def _build_table(self, visualization: Visualization, source: Any):
        records = self._records(source)
        headers: List[str] = []
        for record in records:
            for key in record.keys():
                if key not in headers:
                    headers.append(key)
        if not headers:
            return '<p class="empty-state">No data available</p>', "", "", ""

        head = "".join(f"<th>{escape_html(header)}</th>" for header in headers)
        rows = "\n".join(
            "<tr>" + "".join(f"<td>{escape_html(self._cell(record.get(header)))}</td>" for header in headers) + "</tr>"
            for record in records
        )
        return (
            f"""<table>
    <thead><tr>{head}</tr></thead>
    <tbody>
{rows}
    </tbody>
  </table>""",
            "",
            "",
            "",
        )

    def _build_custom(self, visualization: Visualization, source: Any):
        return (
            f'<div class="custom-placeholder" data-source="{escape_html(visualization.data_source)}">'
            f"Custom visualization (not yet implemented)</div>",
            "",
            "",
            "",
        )

    @staticmethod
    def _cell(value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)


CHART_SCRIPT = r"""
(function () {
  const config = JSON.parse(document.getElementById('chart-config').textContent);
  if (config.type === 'area') {
    config.type = 'line';
  }
  if (typeof Chart === 'undefined') {
    document.getElementById('chart').insertAdjacentText('afterend', 'Chart library failed to load');
    return;
  }
  new Chart(document.getElementById('chart').getContext('2d'), config);
})();
"""

VISUALIZATION_STYLES = """
    body { max-width: 1000px; margin: 0 auto; }
    .visualization-container { background: white; border-radius: 8px; padding: 24px; box-shadow: 0 2px 8px rgba(0,0,0,0.1); }
    h1 { margin: 0 0 8px 0; font-size: 24px; color: #333; }
    .description { color: #666; margin-bottom: 24px; }
    canvas { max-height: 400px; }
    .empty-state { color: #999; text-align: center; padding: 40px 0; }
    .metrics-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); gap: 16px; }
    .metric-card { background: #f8f9fa; border-radius: 8px; padding: 20px; text-align: center; }
    .metric-value { font-size: 36px; font-weight: bold; color: #3498db; margin-bottom: 8px; }
    .metric-label { font-size: 14px; color: #666; text-transform: uppercase; letter-spacing: 0.5px; }
    table { width: 100%; border-collapse: collapse; }
    th, td { text-align: left; padding: 12px; border-bottom: 1px solid #e0e0e0; }
    th { background: #f8f9fa; font-weight: 600; color: #333; }
    tr:hover { background: #f8f9fa; }
    .custom-placeholder { padding: 40px; text-align: center; color: #666; border: 2px dashed #ddd; border-radius: 8px; }
"""


__all__ = ["format_metric_value", "VisualizationRenderer", "MISSING_VALUE"]
