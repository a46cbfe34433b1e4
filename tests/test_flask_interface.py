"""Test the HTTP interface in AppEngine/flask_interface.py with the Flask test client"""

import json
import sys
from pathlib import Path

import pytest
from flask import Flask

# Add project root directory to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from AppEngine.engine import create_engine
from AppEngine.flask_interface import app_bp, initialize_app_engine
from AppEngine.utils.config import settings
from tests import app_config_test_data as test_data


class TestFlaskInterface:
    """Routes under /api/app"""

    def setup_method(self):
        app = Flask(__name__)
        app.config['TESTING'] = True
        assert initialize_app_engine(create_engine()) is True
        app.register_blueprint(app_bp, url_prefix='/api/app')
        self.client = app.test_client()
        self.config = test_data.make_config()

    def _post(self, path, body, headers=None):
        return self.client.post(f'/api/app{path}', json=body, headers=headers or {})

    # ======== Status and validation ========

    def test_status(self):
        response = self.client.get('/api/app/status')
        assert response.status_code == 200
        body = response.get_json()
        assert body['success'] is True
        assert body['registered_types'] == ['survey', 'visualization', 'productCard']

    def test_validate(self):
        body = self._post('/validate', self.config).get_json()
        assert body['success'] is True
        assert body['data']['surveys']['feedback']['pages'][0]['type'] == 'textInput'

        wrapped = self._post('/validate', {'config': self.config}).get_json()
        assert wrapped['success'] is True

    def test_validate_reports_issues(self):
        self.config['productCards']['smart-watch']['price'] = 'free'
        response = self._post('/validate', self.config)
        assert response.status_code == 200
        body = response.get_json()
        assert body['success'] is False
        assert body['errors'][0]['path'] == ['productCards', 'smart-watch', 'price']
        assert body['errors'][0]['code'] == 'price_format'

    def test_validate_product_card(self):
        body = self._post('/validate/product-card', test_data.make_card()).get_json()
        assert body['success'] is True

        body = self._post('/validate/product-card', {'productCards': {'a': test_data.make_card(sale_price='999 USD')}}).get_json()
        assert body['success'] is False
        assert body['errors'][0]['path'] == ['a', 'sale_price']

    # ======== Rendering ========

    def test_render(self):
        response = self._post('/render/survey/contact', {'config': self.config})
        assert response.status_code == 200
        resource = response.get_json()['resource']
        assert resource['uri'].startswith('ui://survey/contact/')
        assert resource['content']['type'] == 'rawHtml'
        assert resource['content']['htmlString'].startswith('<!DOCTYPE html>')
        assert resource['encoding'] == 'text'

    def test_render_with_context_and_display_mode(self):
        response = self._post('/render/productCard/smart-watch', {'config': self.config, 'displayMode': 'compact'})
        assert 'product-card-compact' in response.get_json()['resource']['content']['htmlString']

        body = self._post('/render/visualization/scores', {
            'config': self.config,
            'context': test_data.SURVEY_COMPLETE_CONTEXT,
        }).get_json()
        assert body['resource']['uri'].startswith('ui://visualization/scores/')

    def test_render_not_eligible(self):
        body = self._post('/render/survey/feedback', {'config': self.config, 'context': {'event': 'conversation_start'}}).get_json()
        assert body['success'] is True
        assert body['resource'] is None

    def test_render_requires_config(self):
        response = self._post('/render/survey/contact', {'context': {}})
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_render_unknown_kind(self):
        response = self._post('/render/badge/x', {'config': self.config})
        assert response.status_code == 404
        assert response.get_json()['registered_types'] == ['survey', 'visualization', 'productCard']

    def test_render_unknown_id(self):
        response = self._post('/render/survey/missing', {'config': self.config})
        assert response.status_code == 404
        assert response.get_json()['error'] == 'Survey with ID "missing" not found in configuration'

    def test_render_invalid_config(self):
        self.config['visualizations']['scores']['type'] = 'heatmap'
        response = self._post('/render/survey/contact', {'config': self.config})
        assert response.status_code == 400
        body = response.get_json()
        assert body['error'] == 'Invalid configuration'
        assert body['errors'][0]['path'] == ['visualizations', 'scores', 'type']

    def test_render_bad_display_mode(self):
        response = self._post('/render/productCard/smart-watch', {'config': self.config, 'displayMode': 'huge'})
        assert response.status_code == 400

    # ======== Lifecycle ========

    def test_dispatch(self):
        body = self._post('/lifecycle/dispatch', {
            'config': self.config,
            'context': {'event': 'conversation_start'},
        }).get_json()
        assert body['success'] is True
        assert body['hook'] == 'onConversationStart'
        assert body['actions'] == [{'action': 'show_survey', 'surveyId': 'contact'}]

    def test_dispatch_custom_event(self):
        body = self._post('/lifecycle/dispatch', {'config': self.config, 'context': {'event': 'cart_opened'}}).get_json()
        assert body['hook'] == 'onCustomEvent.cart_opened'
        assert body['actions'][0]['mcpTool'] == 'get_cart'

    def test_dispatch_requires_event(self):
        response = self._post('/lifecycle/dispatch', {'config': self.config, 'context': {}})
        assert response.status_code == 400

    # ======== Agent output ========

    def test_parse_fenced_output(self):
        raw = {'productCards': {'smart-watch': test_data.make_card()}}
        text = f"Here is your card:\n```json\n{json.dumps(raw)}\n```\nEnjoy!"
        body = self._post('/parse', {'text': text}).get_json()
        assert body['success'] is True
        assert body['config']['productCards']['smart-watch']['price'] == '349.99 USD'

    def test_parse_null(self):
        body = self._post('/parse', {'text': 'null'}).get_json()
        assert body == {'success': True, 'config': None}

    def test_parse_invalid_config(self):
        text = json.dumps({'productCards': {'x': {'id': 'x'}}})
        response = self._post('/parse', {'text': text})
        assert response.status_code == 400
        assert response.get_json()['errors']

    def test_parse_rejects_non_string(self):
        response = self._post('/parse', {'text': ['not', 'text']})
        assert response.status_code == 400

    # ======== Examples ========

    def test_examples(self):
        body = self.client.get('/api/app/examples').get_json()
        assert body['success'] is True
        assert 'feedback-chart' in [entry['id'] for entry in body['examples']]

        detail = self.client.get('/api/app/examples/feedback-chart').get_json()
        assert detail['example']['resource'] == {'kind': 'visualization', 'id': 'feedback-chart'}

        assert self.client.get('/api/app/examples/unknown').status_code == 404

    # ======== Authentication ========

    def test_auth_required(self, monkeypatch):
        monkeypatch.setattr(settings, 'AUTH_REQUIRED', True)
        monkeypatch.setattr(settings, 'API_KEY', 'secret-key')

        response = self._post('/render/survey/contact', {'config': self.config})
        assert response.status_code == 401

        response = self._post('/render/survey/contact', {'config': self.config}, {'Authorization': 'Bearer wrong'})
        assert response.status_code == 401

        response = self._post('/render/survey/contact', {'config': self.config}, {'Authorization': 'Bearer secret-key'})
        assert response.status_code == 200

        # read-only routes stay open
        assert self.client.get('/api/app/status').status_code == 200
        assert self._post('/validate', self.config).status_code == 200

    @pytest.mark.parametrize('path', ['/render/survey/contact', '/lifecycle/dispatch', '/parse'])
    def test_auth_without_configured_key(self, monkeypatch, path):
        monkeypatch.setattr(settings, 'AUTH_REQUIRED', True)
        monkeypatch.setattr(settings, 'API_KEY', None)
        response = self._post(path, {'config': self.config}, {'Authorization': 'Bearer anything'})
        assert response.status_code == 401
