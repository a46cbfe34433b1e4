"""Survey renderer.

Legacy surveys (a flat `fields` list) become one HTML form with every field rendered once.
Paginated surveys (`pages`) are delegated to MultiPageSurveyRenderer."""

from __future__ import annotations

from typing import Optional

from ..core.context import RenderContext
from ..core.packager import ResourcePackager
from ..core.trigger import TriggerEvaluator
from ..schema.models import Survey, SurveyField
from .base_renderer import BaseResourceRenderer, data_script, escape_html, inline_script, render_document
from .multi_page_survey_renderer import MultiPageSurveyRenderer


def _number_attr(name: str, value: Optional[float]) -> str:
    if value is None:
        return ""
    shown = int(value) if float(value).is_integer() else value
    return f' {name}="{shown}"'


class SurveyRenderer(BaseResourceRenderer):
    kind = "survey"
    label = "Survey"
    config_section = "surveys"

    def __init__(
        self,
        packager: Optional[ResourcePackager] = None,
        trigger_evaluator: Optional[TriggerEvaluator] = None,
        multi_page_renderer: Optional[MultiPageSurveyRenderer] = None,
    ):
        super().__init__(packager, trigger_evaluator)
        self.multi_page_renderer = multi_page_renderer or MultiPageSurveyRenderer(self.packager, self.trigger_evaluator)

    def build_html(self, survey: Survey, context: RenderContext, **options) -> str:
        if survey.is_multi_page:
            return self.multi_page_renderer.build_html(survey, context, **options)
        return self._build_form_html(survey)

    # ======== Legacy form ========

    def _build_form_html(self, survey: Survey) -> str:
        fields = list(survey.fields or [])
        fields_html = "\n".join(self._render_field(field) for field in fields)
        description_html = f'<p class="description">{escape_html(survey.description)}</p>' if survey.description else ""
        body = f"""<div class="survey-container">
  <h1>{escape_html(survey.title)}</h1>
  {description_html}
  <form id="surveyForm" novalidate>
    {fields_html}
    <button type="submit">Submit</button>
  </form>
</div>"""
        payload = {
            "id": survey.id,
            "title": survey.title,
            "fields": [{"id": field.id, "type": field.type, "label": field.label} for field in fields],
        }
        scripts = data_script("survey-data", payload) + "\n" + inline_script(FORM_SCRIPT)
        return render_document(survey.title, body, styles=FORM_STYLES, scripts=scripts)

    def _render_field(self, field: SurveyField) -> str:
        required_mark = ' <span class="required">*</span>' if field.required else ""
        description = (
            f'<div class="field-description">{escape_html(field.description)}</div>' if field.description else ""
        )
        renderer = getattr(self, f"_render_{field.type}_input", self._render_text_input)
        return f"""<div class="field" data-field-id="{escape_html(field.id)}">
      <label>{escape_html(field.label)}{required_mark}</label>
      {renderer(field)}
      {description}
    </div>"""

    @staticmethod
    def _required(field: SurveyField) -> str:
        return " required" if field.required else ""

    def _render_text_input(self, field: SurveyField) -> str:
        input_type = field.type if field.type in ("text", "email") else "text"
        return (
            f'<input type="{input_type}" name="{escape_html(field.id)}" '
            f'placeholder="{escape_html(field.placeholder or "")}"{self._required(field)}>'
        )

    def _render_email_input(self, field: SurveyField) -> str:
        return self._render_text_input(field)

    def _render_textarea_input(self, field: SurveyField) -> str:
        return (
            f'<textarea name="{escape_html(field.id)}" '
            f'placeholder="{escape_html(field.placeholder or "")}"{self._required(field)}></textarea>'
        )

    def _render_number_input(self, field: SurveyField) -> str:
        return (
            f'<input type="number" name="{escape_html(field.id)}"'
            f'{_number_attr("min", field.min)}{_number_attr("max", field.max)}{self._required(field)}>'
        )

    def _render_date_input(self, field: SurveyField) -> str:
        return f'<input type="date" name="{escape_html(field.id)}"{self._required(field)}>'

    def _render_file_input(self, field: SurveyField) -> str:
        return f'<input type="file" name="{escape_html(field.id)}"{self._required(field)}>'

    def _render_rating_input(self, field: SurveyField) -> str:
        low = int(field.min) if field.min is not None else 1
        high = int(field.max) if field.max is not None else 5
        field_id = escape_html(field.id)
        stars = "".join(
            f'<input type="radio" name="{field_id}" value="{value}" id="{field_id}_{value}"{self._required(field)}>'
            f'<label for="{field_id}_{value}">★</label>'
            for value in range(low, high + 1)
        )
        return f'<div class="rating">{stars}</div>'

    def _render_single_choice_input(self, field: SurveyField) -> str:
        field_id = escape_html(field.id)
        options = "".join(
            f'<div class="radio-option">'
            f'<input type="radio" name="{field_id}" value="{escape_html(option)}" id="{field_id}_{index}"{self._required(field)}>'
            f'<label for="{field_id}_{index}">{escape_html(option)}</label></div>'
            for index, option in enumerate(field.options or [])
        )
        return f'<div class="radio-group">{options}</div>'

    def _render_multiple_choice_input(self, field: SurveyField) -> str:
        field_id = escape_html(field.id)
        limit = f' data-max-selections="{field.max_selections}"' if field.max_selections else ""
        options = "".join(
            f'<div class="checkbox-option">'
            f'<input type="checkbox" name="{field_id}" value="{escape_html(option)}" id="{field_id}_{index}">'
            f'<label for="{field_id}_{index}">{escape_html(option)}</label></div>'
            for index, option in enumerate(field.options or [])
        )
        return f'<div class="checkbox-group"{limit}>{options}</div>'


FORM_SCRIPT = r"""
(function () {
  const survey = JSON.parse(document.getElementById('survey-data').textContent);
  const form = document.getElementById('surveyForm');

  document.querySelectorAll('.rating').forEach(function (container) {
    const inputs = Array.from(container.querySelectorAll('input'));
    const labels = Array.from(container.querySelectorAll('label'));
    inputs.forEach(function (input) {
      input.addEventListener('change', function () {
        const value = parseInt(input.value, 10);
        labels.forEach(function (label, index) {
          label.classList.toggle('selected', parseInt(inputs[index].value, 10) <= value);
        });
      });
    });
  });

  document.querySelectorAll('.checkbox-group[data-max-selections]').forEach(function (group) {
    const limit = parseInt(group.dataset.maxSelections, 10);
    group.addEventListener('change', function () {
      const boxes = Array.from(group.querySelectorAll('input[type="checkbox"]'));
      const count = boxes.filter(function (box) { return box.checked; }).length;
      boxes.forEach(function (box) { box.disabled = !box.checked && count >= limit; });
    });
  });

  form.addEventListener('submit', function (event) {
    event.preventDefault();
    if (!form.reportValidity()) {
      return;
    }
    const formData = new FormData(form);
    const responses = {};
    survey.fields.forEach(function (field) {
      if (field.type === 'multiple_choice') {
        responses[field.id] = formData.getAll(field.id);
      } else if (field.type === 'file') {
        const file = formData.get(field.id);
        responses[field.id] = file && file.name ? file.name : null;
      } else {
        const value = formData.get(field.id);
        responses[field.id] = value === null ? null : value;
      }
    });

    let prompt = 'Survey "' + survey.title + '" submitted\n\n';
    survey.fields.forEach(function (field, index) {
      const value = responses[field.id];
      const shown = Array.isArray(value) ? value.join(', ') : (value || '');
      prompt += (index + 1) + '. ' + field.label + '\n   Answer: "' + shown + '"\n\n';
    });
    prompt += '```json\n' + JSON.stringify({ surveyId: survey.id, responses: responses }, null, 2) + '\n```\n';

    if (window.parent && window.parent !== window) {
      window.parent.postMessage({ type: 'prompt', payload: { prompt: prompt } }, '*');
    }
    window.dispatchEvent(new CustomEvent('survey-complete', {
      detail: { type: 'survey_complete', surveyId: survey.id, responses: responses }
    }));
    form.querySelector('button[type="submit"]').disabled = true;
  });
})();
"""

FORM_STYLES = """
    body { max-width: 600px; margin: 0 auto; }
    .survey-container { background: white; border-radius: 8px; padding: 24px; box-shadow: 0 2px 8px rgba(0,0,0,0.1); }
    h1 { margin: 0 0 8px 0; font-size: 24px; color: #333; }
    .description { color: #666; margin-bottom: 24px; }
    .field { margin-bottom: 20px; }
    label { display: block; font-weight: 500; margin-bottom: 8px; color: #333; }
    .required { color: #e74c3c; }
    input[type="text"], input[type="email"], input[type="number"], input[type="date"], textarea, select {
      width: 100%; padding: 10px; border: 1px solid #ddd; border-radius: 4px; font-size: 14px;
    }
    textarea { min-height: 100px; resize: vertical; }
    .rating { display: flex; gap: 8px; }
    .rating input { display: none; }
    .rating label { cursor: pointer; font-size: 24px; color: #ddd; transition: color 0.2s; }
    .rating label.selected { color: #f39c12; }
    .checkbox-group, .radio-group { display: flex; flex-direction: column; gap: 8px; }
    .checkbox-option, .radio-option { display: flex; align-items: center; gap: 8px; }
    .checkbox-option label, .radio-option label { margin: 0; font-weight: 400; }
    button { background: #3498db; color: white; border: none; padding: 12px 24px; border-radius: 4px; font-size: 16px; cursor: pointer; }
    button:hover { background: #2980b9; }
    button:disabled { opacity: 0.5; cursor: default; }
    .field-description { font-size: 12px; color: #888; margin-top: 4px; }
"""


__all__ = ["SurveyRenderer"]
