"""App Engine Flask interface.

This module exposes the engine over HTTP and is responsible for:
1. Validating configurations and standalone product cards;
2. Rendering resources under a trigger context and dispatching lifecycle events;
3. Serving the built-in example configurations and parsing agent output.

Every response body has a boolean `success`; failures carry `error` (and `errors` for
validation issues)."""

from functools import wraps
from typing import Any, Dict, Optional

from flask import Blueprint, jsonify, request
from loguru import logger

from .core.lifecycle import LifecycleDispatcher
from .engine import AppResourceEngine, create_engine
from .examples import get_example, list_examples
from .renderers.base_renderer import ResourceNotFoundError
from .schema.issues import InvalidConfigurationError
from .utils.auth import validate_request_auth
from .utils.config import settings
from .utils.json_parser import JSONParseError, parse_config_text

# Create Blueprint
app_bp = Blueprint('app_engine', __name__)

# global variables
app_engine: Optional[AppResourceEngine] = None


def initialize_app_engine(engine: Optional[AppResourceEngine] = None) -> bool:
    """Initialize the App Engine used by every route.

    Return:
        bool: True if initialization is successful, False if an exception occurs."""
    global app_engine
    try:
        app_engine = engine or create_engine()
        logger.info("App Engine initialized successfully")
        return True
    except Exception as e:
        logger.exception(f"App Engine initialization failed: {str(e)}")
        return False


def _get_engine() -> AppResourceEngine:
    if app_engine is None:
        initialize_app_engine()
    if app_engine is None:
        raise RuntimeError("App Engine is not initialized")
    return app_engine


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        logger.warning("Received non-object JSON payload, original content ignored")
        return {}
    return data


def _invalid_config_response(error: InvalidConfigurationError):
    return jsonify({
        'success': False,
        'error': 'Invalid configuration',
        'errors': [issue.to_dict() for issue in error.issues]
    }), 400


def require_auth(view):
    """Reject the request with 401 when AUTH_REQUIRED is set and the bearer token does not match."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        if settings.AUTH_REQUIRED and not validate_request_auth(request.headers.get('Authorization')):
            logger.warning(f"Unauthorized request to {request.path}")
            return jsonify({
                'success': False,
                'error': 'Unauthorized'
            }), 401
        return view(*args, **kwargs)
    return wrapper


@app_bp.route('/status', methods=['GET'])
def get_status():
    """Get App Engine status: registered component types and plugins."""
    try:
        engine = _get_engine()
        return jsonify({
            'success': True,
            'initialized': True,
            **engine.get_status()
        })
    except Exception as e:
        logger.exception(f"Failed to obtain App Engine status: {str(e)}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app_bp.route('/validate', methods=['POST'])
def validate_config():
    """Validate a configuration.

    Request body:
        the configuration itself, or {"config": {...}}.

    Return:
        Response: ValidationResult wire form; 200 even when the configuration is invalid."""
    try:
        data = _json_body()
        raw = data.get('config', data)
        result = _get_engine().validate_config(raw)
        return jsonify(result.to_dict())
    except Exception as e:
        logger.exception(f"Configuration validation failed: {str(e)}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app_bp.route('/validate/product-card', methods=['POST'])
def validate_product_card():
    """Validate one product card, or a mapping of cards when the body is {"productCards": {...}}."""
    try:
        data = _json_body()
        engine = _get_engine()
        if 'productCards' in data:
            result = engine.validate_product_card_collection(data['productCards'])
        else:
            result = engine.validate_product_card(data.get('productCard', data))
        return jsonify(result.to_dict())
    except Exception as e:
        logger.exception(f"Product card validation failed: {str(e)}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app_bp.route('/render/<kind>/<resource_id>', methods=['POST'])
@require_auth
def render_resource(kind: str, resource_id: str):
    """Render one resource.

    Request body:
        config: AppConfig mapping (required).
        context: trigger context {event?, data?, surveyId?, visualizationId?} (optional).
        displayMode: product card layout override (optional).

    Return:
        Response: {"success": true, "resource": {...}} or resource null when not eligible."""
    try:
        data = _json_body()
        config = data.get('config')
        if not isinstance(config, dict):
            return jsonify({
                'success': False,
                'error': 'config must be a JSON object'
            }), 400

        engine = _get_engine()
        if not engine.registry.has_renderer(kind):
            return jsonify({
                'success': False,
                'error': f"Unknown component type: {kind}",
                'registered_types': engine.registry.get_registered_types()
            }), 404

        options = {}
        if data.get('displayMode') is not None:
            options['display_mode'] = data['displayMode']

        resource = engine.render(kind, config, resource_id, data.get('context'), **options)
        return jsonify({
            'success': True,
            'resource': resource.to_dict() if resource is not None else None
        })
    except InvalidConfigurationError as e:
        return _invalid_config_response(e)
    except ResourceNotFoundError as e:
        return jsonify({
            'success': False,
            'error': str(e)
        }), 404
    except (TypeError, ValueError) as e:
        logger.warning(f"Rejected render request for {kind}/{resource_id}: {str(e)}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 400
    except Exception as e:
        logger.exception(f"Rendering {kind}/{resource_id} failed: {str(e)}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app_bp.route('/lifecycle/dispatch', methods=['POST'])
@require_auth
def dispatch_lifecycle():
    """Return the lifecycle actions to run for an event.

    Request body:
        config: AppConfig mapping (required).
        context: trigger context, `event` required."""
    try:
        data = _json_body()
        config = data.get('config')
        context = data.get('context') or {}
        if not isinstance(config, dict) or not isinstance(context, dict):
            return jsonify({
                'success': False,
                'error': 'config and context must be JSON objects'
            }), 400
        if not context.get('event'):
            return jsonify({
                'success': False,
                'error': 'context.event is required'
            }), 400

        actions = _get_engine().dispatch_lifecycle(config, context)
        return jsonify({
            'success': True,
            'event': context['event'],
            'hook': LifecycleDispatcher.hook_name(context['event']),
            'actions': [action.to_wire() for action in actions]
        })
    except InvalidConfigurationError as e:
        return _invalid_config_response(e)
    except Exception as e:
        logger.exception(f"Lifecycle dispatch failed: {str(e)}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app_bp.route('/parse', methods=['POST'])
@require_auth
def parse_agent_output():
    """Parse agent text into a configuration and validate it.

    Request body:
        text: raw agent output (required)."""
    try:
        data = _json_body()
        text = data.get('text')
        if text is not None and not isinstance(text, str):
            return jsonify({
                'success': False,
                'error': 'text must be a string'
            }), 400

        raw = parse_config_text(text)
        if raw is None:
            return jsonify({
                'success': True,
                'config': None
            })
        result = _get_engine().validate_config(raw)
        if not result.success:
            payload = result.to_dict()
            payload['error'] = 'Invalid configuration'
            return jsonify(payload), 400
        return jsonify({
            'success': True,
            'config': result.data.to_wire()
        })
    except JSONParseError as e:
        logger.warning(f"Agent output could not be parsed: {str(e)}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 400
    except Exception as e:
        logger.exception(f"Parsing agent output failed: {str(e)}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app_bp.route('/examples', methods=['GET'])
def get_examples():
    """List the built-in example configurations."""
    try:
        return jsonify({
            'success': True,
            'examples': list_examples()
        })
    except Exception as e:
        logger.exception(f"Failed to list examples: {str(e)}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


@app_bp.route('/examples/<example_id>', methods=['GET'])
def get_example_detail(example_id: str):
    """Get one example with its configuration and suggested context."""
    try:
        example = get_example(example_id)
        if example is None:
            return jsonify({
                'success': False,
                'error': f"Example not found: {example_id}"
            }), 404
        return jsonify({
            'success': True,
            'example': example
        })
    except Exception as e:
        logger.exception(f"Failed to load example {example_id}: {str(e)}")
        return jsonify({
            'success': False,
            'error': str(e)
        }), 500


# Error handling
@app_bp.errorhandler(404)
def not_found(error):
    """Return the JSON structure for unknown endpoints."""
    logger.warning(f"API endpoint does not exist: {str(error)}")
    return jsonify({
        'success': False,
        'error': 'API endpoint does not exist'
    }), 404


@app_bp.errorhandler(500)
def internal_error(error):
    """Catch exceptions that are not handled by the routes."""
    logger.exception(f"Server internal error: {str(error)}")
    return jsonify({
        'success': False,
        'error': 'Internal server error'
    }), 500
