"""Multi-page survey renderer.

One question per page, paging state kept in the browser. The Next button is gated by
per-page validation (required pages, textInput length and pattern rules, maxSelections).
On completion the page posts the canonical submission payload to the parent frame:
a readable transcript followed by a fenced JSON block. format_survey_results builds the
same text on the server side; the embedded script mirrors it line for line."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..core.context import RenderContext
from ..schema.models import MultipleChoicePage, RatingPage, Survey, TextInputPage
from .base_renderer import BaseResourceRenderer, data_script, escape_html, inline_script, render_document

DEFAULT_PRIMARY_COLOR = "#007bff"
_SAFE_COLOR_RE = re.compile(r"^(#[0-9a-fA-F]{3,8}|[a-zA-Z]{3,20}|rgba?\(\s*[\d.\s,%]+\))$")

THEME_BACKGROUNDS = {
    "default": "#f5f7fa",
    "minimal": "#ffffff",
    "gradient": "linear-gradient(135deg, #667eea 0%, #764ba2 100%)",
}


def _page_dict(page: Any) -> Dict[str, Any]:
    return page.to_wire() if hasattr(page, "to_wire") else dict(page)


def _format_time_spent(seconds: int) -> str:
    minutes, secs = divmod(int(seconds), 60)
    if minutes > 0:
        return f"{minutes} minute{'s' if minutes != 1 else ''} {secs} seconds"
    return f"{secs} seconds"


def format_survey_results(
    survey_id: str,
    responses: Mapping[str, Any],
    pages: Sequence[Any],
    metadata: Mapping[str, Any],
) -> str:
    """Canonical submission payload: transcript of answered pages, then fenced JSON.

    responses maps page id to one of:
        {"type": "textInput", "value": str}
        {"type": "multipleChoice", "optionIds": [...], "followUpAnswers": {...}, "customOptions": {...}?}
        {"type": "rating", "value": int}
    Unanswered pages are skipped but keep their position number."""
    text = f"Survey completed in {_format_time_spent(metadata.get('timeSpent', 0))}\n\n"
    text += "=== Survey Responses ===\n\n"

    for index, raw_page in enumerate(pages):
        page = _page_dict(raw_page)
        response = responses.get(page.get("id"))
        if not response:
            continue

        text += f"{index + 1}. {page.get('title', '')}\n"
        kind = response.get("type")
        if kind == "textInput":
            text += f'   Answer: "{response.get("value", "")}"\n\n'
        elif kind == "multipleChoice":
            option_ids = list(response.get("optionIds") or [])
            follow_ups = response.get("followUpAnswers") or {}
            custom = response.get("customOptions") or {}
            lines: List[str] = []
            for option in page.get("options") or []:
                if option.get("id") not in option_ids:
                    continue
                line = f"• {option.get('label', '')}"
                if follow_ups.get(option["id"]):
                    line += f'\n     Follow-up: "{follow_ups[option["id"]]}"'
                lines.append(line)
            for option_id in option_ids:
                if option_id in custom:
                    lines.append(f"• {custom[option_id]}")
            text += "   Selected:\n   " + "\n   ".join(lines) + "\n\n"
        elif kind == "rating":
            text += f"   Rating: {response.get('value')} / {page.get('max') or 5}\n\n"

    structured = {"surveyId": survey_id, "responses": dict(responses), "metadata": dict(metadata)}
    text += "\n=== Structured Data ===\n"
    text += "```json\n"
    text += json.dumps(structured, indent=2, ensure_ascii=False)
    text += "\n```\n"
    return text


class MultiPageSurveyRenderer(BaseResourceRenderer):
    kind = "survey"
    label = "Survey"
    config_section = "surveys"

    def build_html(self, survey: Survey, context: RenderContext, **options) -> str:
        pages = list(survey.pages or [])
        styling = survey.styling
        theme = styling.theme if styling else "default"
        show_progress = styling.show_progress if styling else True
        primary = self._safe_color(styling.primary_color if styling else None)

        next_label = "Submit" if len(pages) == 1 else "Next"
        pages_html = "\n".join(self._render_page(page, index) for index, page in enumerate(pages))
        progress_html = (
            '<div class="progress-track"><div class="progress-bar" style="width: 0%"></div></div>' if show_progress else ""
        )
        description_html = (
            f'<p class="survey-description">{escape_html(survey.description)}</p>' if survey.description else ""
        )
        body = f"""<div class="survey-container theme-{theme}">
  {progress_html}
  <div class="survey-header">
    <div class="survey-title">{escape_html(survey.title)}</div>
    {description_html}
  </div>
  <div class="page-number"><span class="current-page">1</span> / <span class="total-pages">{len(pages)}</span></div>
  {pages_html}
  <div class="validation-message" role="alert"></div>
  <div class="survey-nav">
    <button class="btn-next" type="button">{next_label}</button>
  </div>
</div>"""

        payload = {"id": survey.id, "title": survey.title, "pages": [page.to_wire() for page in pages]}
        scripts = data_script("survey-data", payload) + "\n" + inline_script(MULTI_PAGE_SCRIPT)
        styles = MULTI_PAGE_STYLES.replace("__PRIMARY__", primary).replace(
            "__BACKGROUND__", THEME_BACKGROUNDS.get(theme, THEME_BACKGROUNDS["default"])
        )
        return render_document(survey.title, body, styles=styles, scripts=scripts)

    # ======== Pages ========

    def _render_page(self, page, index: int) -> str:
        renderer = getattr(self, f"_render_{page.type}_page")
        required = '<span class="required">*</span>' if page.required else ""
        description = f'<p class="page-description">{escape_html(page.description)}</p>' if page.description else ""
        return f"""<div class="survey-page" data-page="{index}" style="display: {'block' if index == 0 else 'none'}">
    <div class="page-content">
      <h2 class="page-title">{escape_html(page.title)}{required}</h2>
      {description}
      {renderer(page, index)}
    </div>
  </div>"""

    def _render_textInput_page(self, page: TextInputPage, index: int) -> str:
        placeholder = escape_html(page.placeholder or "Type your answer here...")
        return (
            f'<textarea class="text-input" data-page-id="{escape_html(page.id)}" '
            f'placeholder="{placeholder}" rows="{page.rows}"></textarea>'
        )

    def _render_multipleChoice_page(self, page: MultipleChoicePage, index: int) -> str:
        input_type = "checkbox" if page.allow_multiple else "radio"
        page_id = escape_html(page.id)
        cards = []
        for option in page.options:
            option_id = escape_html(option.id)
            follow_up = ""
            if option.follow_up_question:
                follow_up = f"""
        <div class="follow-up" style="display: none;">
          <p class="follow-up-question">{escape_html(option.follow_up_question)}</p>
          <textarea class="follow-up-input" data-page-id="{page_id}" data-follow-up-for="{option_id}" placeholder="Type your answer..." rows="2"></textarea>
        </div>"""
            cards.append(f"""
      <div class="option-card" data-option-id="{option_id}">
        <div class="option-header">
          <input type="{input_type}" id="option-{index}-{option_id}" name="page-{page_id}" value="{option_id}" class="option-input">
          <label for="option-{index}-{option_id}" class="option-label">{escape_html(option.label)}</label>
        </div>{follow_up}
      </div>""")

        custom_html = ""
        if page.allow_user_options:
            custom_html = f"""
      <div class="custom-option-input">
        <input type="text" class="custom-option-field" placeholder="Or type your own option..." data-page-id="{page_id}">
        <button class="btn-add-option" type="button" data-page-id="{page_id}">Add</button>
      </div>"""
        return f'<div class="options-grid" data-page-id="{page_id}">{"".join(cards)}\n      </div>{custom_html}'

    def _render_rating_page(self, page: RatingPage, index: int) -> str:
        page_id = escape_html(page.id)
        stars = "".join(
            f'<span class="rating-star" data-value="{value}">★</span>' for value in range(page.min, page.max + 1)
        )
        labels_html = ""
        if page.labels and (page.labels.min or page.labels.max):
            low = f'<span class="label-min">{escape_html(page.labels.min)}</span>' if page.labels.min else "<span></span>"
            high = f'<span class="label-max">{escape_html(page.labels.max)}</span>' if page.labels.max else "<span></span>"
            labels_html = f'<div class="rating-labels">{low}{high}</div>'
        return (
            f'<div class="rating-container" data-page-id="{page_id}">{stars}</div>{labels_html}'
            f'<input type="hidden" class="rating-value" data-page-id="{page_id}" value="">'
        )

    @staticmethod
    def _safe_color(value: Optional[str]) -> str:
        if value and _SAFE_COLOR_RE.match(value.strip()):
            return value.strip()
        return DEFAULT_PRIMARY_COLOR


MULTI_PAGE_SCRIPT = r"""
(function () {
  const survey = JSON.parse(document.getElementById('survey-data').textContent);
  const pages = survey.pages;
  const surveyId = survey.id;
  const totalPages = pages.length;
  const responses = {};
  const customOptions = {};
  const surveyStartTime = Date.now();
  const btnNext = document.querySelector('.btn-next');
  const messageBox = document.querySelector('.validation-message');
  let currentPage = 0;
  let customCounter = 0;

  function cssValue(value) {
    return String(value).replace(/["\\]/g, '\\$&');
  }

  function showPage(index) {
    document.querySelectorAll('.survey-page').forEach(function (el, i) {
      el.style.display = i === index ? 'block' : 'none';
    });
    document.querySelector('.current-page').textContent = index + 1;
    const bar = document.querySelector('.progress-bar');
    if (bar) {
      bar.style.width = ((index + 1) / totalPages * 100) + '%';
    }
    btnNext.textContent = index === totalPages - 1 ? 'Submit' : 'Next';
    validatePage(index);
  }

  function textProblem(page, value) {
    const rules = page.validation || {};
    const trimmed = value.trim();
    if (!trimmed) {
      return page.required ? '' : null;
    }
    if (rules.minLength != null && trimmed.length < rules.minLength) {
      return rules.message || ('Please enter at least ' + rules.minLength + ' characters.');
    }
    if (rules.maxLength != null && trimmed.length > rules.maxLength) {
      return rules.message || ('Please enter at most ' + rules.maxLength + ' characters.');
    }
    if (rules.pattern) {
      try {
        if (!(new RegExp(rules.pattern)).test(trimmed)) {
          return rules.message || 'Please check the format of your answer.';
        }
      } catch (err) {
        return null;
      }
    }
    return null;
  }

  function pageProblem(page) {
    if (page.type === 'textInput') {
      const textarea = document.querySelector('textarea.text-input[data-page-id="' + cssValue(page.id) + '"]');
      return textProblem(page, textarea ? textarea.value : '');
    }
    if (page.type === 'multipleChoice') {
      const checked = document.querySelectorAll('input[name="page-' + cssValue(page.id) + '"]:checked');
      if (page.required && checked.length === 0) {
        return '';
      }
      if (page.maxSelections && checked.length > page.maxSelections) {
        return 'Please select at most ' + page.maxSelections + ' options.';
      }
      return null;
    }
    if (page.type === 'rating') {
      const rating = document.querySelector('.rating-value[data-page-id="' + cssValue(page.id) + '"]');
      return page.required && (!rating || rating.value === '') ? '' : null;
    }
    return null;
  }

  function validatePage(index) {
    const problem = pageProblem(pages[index]);
    btnNext.disabled = problem !== null;
    messageBox.textContent = problem || '';
  }

  function saveCurrentPageResponse() {
    const page = pages[currentPage];
    if (page.type === 'textInput') {
      const textarea = document.querySelector('textarea.text-input[data-page-id="' + cssValue(page.id) + '"]');
      if (textarea.value.trim()) {
        responses[page.id] = { type: 'textInput', value: textarea.value };
      } else {
        delete responses[page.id];
      }
    } else if (page.type === 'multipleChoice') {
      const checked = Array.from(document.querySelectorAll('input[name="page-' + cssValue(page.id) + '"]:checked'));
      const optionIds = checked.map(function (input) { return input.value; });
      if (optionIds.length === 0) {
        delete responses[page.id];
        return;
      }
      const followUpAnswers = {};
      optionIds.forEach(function (optionId) {
        const input = document.querySelector(
          'textarea.follow-up-input[data-page-id="' + cssValue(page.id) + '"][data-follow-up-for="' + cssValue(optionId) + '"]'
        );
        if (input && input.value) {
          followUpAnswers[optionId] = input.value;
        }
      });
      const response = { type: 'multipleChoice', optionIds: optionIds, followUpAnswers: followUpAnswers };
      const custom = {};
      optionIds.forEach(function (optionId) {
        if (customOptions[page.id] && customOptions[page.id][optionId]) {
          custom[optionId] = customOptions[page.id][optionId];
        }
      });
      if (Object.keys(custom).length > 0) {
        response.customOptions = custom;
      }
      responses[page.id] = response;
    } else if (page.type === 'rating') {
      const rating = document.querySelector('.rating-value[data-page-id="' + cssValue(page.id) + '"]');
      if (rating && rating.value !== '') {
        responses[page.id] = { type: 'rating', value: parseInt(rating.value, 10) };
      } else {
        delete responses[page.id];
      }
    }
  }

  function formatTimeSpent(seconds) {
    const minutes = Math.floor(seconds / 60);
    const secs = seconds % 60;
    return minutes > 0
      ? minutes + ' minute' + (minutes !== 1 ? 's' : '') + ' ' + secs + ' seconds'
      : secs + ' seconds';
  }

  function formatSurveyResults(surveyId, responses, pages, metadata) {
    let text = 'Survey completed in ' + formatTimeSpent(metadata.timeSpent) + '\n\n';
    text += '=== Survey Responses ===\n\n';
    pages.forEach(function (page, index) {
      const response = responses[page.id];
      if (!response) {
        return;
      }
      text += (index + 1) + '. ' + page.title + '\n';
      if (response.type === 'textInput') {
        text += '   Answer: "' + response.value + '"\n\n';
      } else if (response.type === 'multipleChoice') {
        const followUps = response.followUpAnswers || {};
        const custom = response.customOptions || {};
        const lines = (page.options || [])
          .filter(function (opt) { return response.optionIds.indexOf(opt.id) !== -1; })
          .map(function (opt) {
            let line = '• ' + opt.label;
            if (followUps[opt.id]) {
              line += '\n     Follow-up: "' + followUps[opt.id] + '"';
            }
            return line;
          });
        response.optionIds.forEach(function (optionId) {
          if (Object.prototype.hasOwnProperty.call(custom, optionId)) {
            lines.push('• ' + custom[optionId]);
          }
        });
        text += '   Selected:\n   ' + lines.join('\n   ') + '\n\n';
      } else if (response.type === 'rating') {
        text += '   Rating: ' + response.value + ' / ' + (page.max || 5) + '\n\n';
      }
    });
    text += '\n=== Structured Data ===\n';
    text += '```json\n';
    text += JSON.stringify({ surveyId: surveyId, responses: responses, metadata: metadata }, null, 2);
    text += '\n```\n';
    return text;
  }

  function completeSurvey() {
    const timeSpent = Math.floor((Date.now() - surveyStartTime) / 1000);
    const metadata = {
      completedAt: new Date().toISOString(),
      pageCount: totalPages,
      timeSpent: timeSpent
    };
    const prompt = formatSurveyResults(surveyId, responses, pages, metadata);
    if (window.parent && window.parent !== window) {
      window.parent.postMessage({
        type: 'prompt',
        payload: { prompt: prompt },
        messageId: (window.crypto && window.crypto.randomUUID) ? window.crypto.randomUUID() : String(Date.now())
      }, '*');
    }
    window.dispatchEvent(new CustomEvent('survey-complete', {
      detail: { type: 'survey_complete', surveyId: surveyId, responses: responses, metadata: metadata }
    }));

    const container = document.querySelector('.survey-container');
    container.textContent = '';
    const done = document.createElement('div');
    done.className = 'completion-message';
    const title = document.createElement('h2');
    title.className = 'completion-title';
    title.textContent = 'Thank You!';
    const note = document.createElement('p');
    note.className = 'completion-text';
    note.textContent = 'Your responses have been recorded.';
    done.appendChild(title);
    done.appendChild(note);
    container.appendChild(done);
  }

  function bindOptionCard(card) {
    const input = card.querySelector('.option-input');
    const followUp = card.querySelector('.follow-up');
    function updateCardState() {
      document.querySelectorAll('input[name="' + cssValue(input.name) + '"]').forEach(function (other) {
        const otherCard = other.closest('.option-card');
        otherCard.classList.toggle('selected', other.checked);
        const otherFollowUp = otherCard.querySelector('.follow-up');
        if (otherFollowUp) {
          otherFollowUp.style.display = other.checked ? 'block' : 'none';
        }
      });
      validatePage(currentPage);
    }
    card.addEventListener('click', function (event) {
      if (event.target.tagName !== 'TEXTAREA' && event.target !== input && event.target.tagName !== 'LABEL') {
        input.click();
      }
    });
    input.addEventListener('change', updateCardState);
    if (followUp) {
      followUp.querySelector('textarea').addEventListener('input', function () { validatePage(currentPage); });
    }
  }

  document.querySelectorAll('.option-card').forEach(bindOptionCard);

  document.querySelectorAll('.btn-add-option').forEach(function (button) {
    button.addEventListener('click', function () {
      const pageId = button.dataset.pageId;
      const page = pages.find(function (p) { return p.id === pageId; });
      const field = button.parentElement.querySelector('.custom-option-field');
      const label = field.value.trim();
      if (!label) {
        return;
      }
      customCounter += 1;
      const optionId = 'custom-' + customCounter;
      customOptions[pageId] = customOptions[pageId] || {};
      customOptions[pageId][optionId] = label;

      const card = document.createElement('div');
      card.className = 'option-card';
      card.dataset.optionId = optionId;
      const header = document.createElement('div');
      header.className = 'option-header';
      const input = document.createElement('input');
      input.type = page && page.allowMultiple === false ? 'radio' : 'checkbox';
      input.className = 'option-input';
      input.name = 'page-' + pageId;
      input.value = optionId;
      input.id = 'option-' + currentPage + '-' + optionId;
      const text = document.createElement('label');
      text.className = 'option-label';
      text.htmlFor = input.id;
      text.textContent = label;
      header.appendChild(input);
      header.appendChild(text);
      card.appendChild(header);
      document.querySelector('.options-grid[data-page-id="' + cssValue(pageId) + '"]').appendChild(card);
      bindOptionCard(card);
      field.value = '';
      input.click();
    });
  });

  document.querySelectorAll('.rating-container').forEach(function (container) {
    const stars = container.querySelectorAll('.rating-star');
    const rating = document.querySelector('.rating-value[data-page-id="' + cssValue(container.dataset.pageId) + '"]');
    stars.forEach(function (star) {
      star.addEventListener('click', function () {
        const value = parseInt(star.dataset.value, 10);
        rating.value = value;
        stars.forEach(function (s) {
          s.classList.toggle('selected', parseInt(s.dataset.value, 10) <= value);
        });
        validatePage(currentPage);
      });
    });
  });

  document.querySelectorAll('.text-input').forEach(function (input) {
    input.addEventListener('input', function () { validatePage(currentPage); });
  });

  btnNext.addEventListener('click', function () {
    saveCurrentPageResponse();
    if (currentPage === totalPages - 1) {
      completeSurvey();
    } else {
      currentPage += 1;
      showPage(currentPage);
    }
  });

  showPage(0);
})();
"""

MULTI_PAGE_STYLES = """
    body { background: __BACKGROUND__; min-height: 100vh; display: flex; align-items: center; justify-content: center; }
    .survey-container {
      background: white; border-radius: 16px; padding: 48px 40px;
      width: 100%; max-width: 640px;
      box-shadow: 0 10px 40px rgba(0,0,0,0.1);
    }
    .theme-minimal { box-shadow: none; border: 1px solid #e2e8f0; }
    .progress-track { height: 4px; background: #e2e8f0; border-radius: 2px; margin-bottom: 32px; overflow: hidden; }
    .progress-bar { height: 100%; background: __PRIMARY__; transition: width 0.3s ease; }
    .survey-title { font-size: 0.875rem; font-weight: 600; color: #718096; text-transform: uppercase; letter-spacing: 0.05em; }
    .survey-description { color: #718096; margin: 4px 0 0 0; }
    .page-number { font-size: 0.875rem; color: #a0aec0; margin: 16px 0; }
    .page-title { font-size: 1.75rem; font-weight: 700; color: #1a202c; margin: 0 0 12px 0; line-height: 1.3; }
    .required { color: #e53e3e; margin-left: 4px; }
    .page-description { font-size: 1.125rem; color: #4a5568; margin: 0 0 24px 0; }
    .text-input, .follow-up-input, .custom-option-field {
      width: 100%; padding: 14px 16px; font-size: 1rem; font-family: inherit;
      border: 2px solid #e2e8f0; border-radius: 10px; resize: vertical;
    }
    .text-input:focus, .follow-up-input:focus, .custom-option-field:focus { outline: none; border-color: __PRIMARY__; }
    .options-grid { display: grid; grid-template-columns: 1fr 1fr; gap: 12px; }
    .option-card { border: 2px solid #e2e8f0; border-radius: 10px; padding: 14px 16px; cursor: pointer; transition: border-color 0.2s; }
    .option-card:hover { border-color: #cbd5e0; }
    .option-card.selected { border-color: __PRIMARY__; background: #f7faff; }
    .option-header { display: flex; align-items: center; gap: 10px; }
    .option-label { cursor: pointer; flex: 1; }
    .follow-up { margin-top: 12px; }
    .follow-up-question { font-size: 0.9rem; color: #4a5568; margin: 0 0 8px 0; }
    .custom-option-input { display: flex; gap: 8px; margin-top: 12px; }
    .btn-add-option { padding: 0 20px; border: 2px solid __PRIMARY__; background: white; color: __PRIMARY__; border-radius: 10px; cursor: pointer; }
    .rating-container { display: flex; gap: 8px; }
    .rating-star { font-size: 2.5rem; color: #e2e8f0; cursor: pointer; transition: color 0.15s; }
    .rating-star.selected { color: #f6ad55; }
    .rating-labels { display: flex; justify-content: space-between; color: #718096; font-size: 0.875rem; margin-top: 8px; }
    .validation-message { min-height: 1.25rem; color: #e53e3e; font-size: 0.875rem; margin-top: 16px; }
    .survey-nav { display: flex; justify-content: flex-end; margin-top: 16px; }
    .btn-next {
      background: __PRIMARY__; color: white; border: none;
      padding: 16px 40px; font-size: 1.125rem; font-weight: 600;
      border-radius: 10px; cursor: pointer; transition: opacity 0.2s;
    }
    .btn-next:disabled { opacity: 0.4; cursor: not-allowed; }
    .completion-message { text-align: center; padding: 40px 0; }
    .completion-title { font-size: 2rem; color: #1a202c; margin: 0 0 8px 0; }
    .completion-text { font-size: 1.125rem; color: #718096; }
    @media (max-width: 640px) {
      .survey-container { padding: 40px 24px; }
      .page-title { font-size: 1.5rem; }
      .options-grid { grid-template-columns: 1fr; }
      .rating-star { font-size: 2rem; }
    }
"""


__all__ = ["format_survey_results", "MultiPageSurveyRenderer"]
