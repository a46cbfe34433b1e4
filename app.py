"""Flask main application - serves the App Engine HTTP interface"""

import argparse
import secrets
import sys
from pathlib import Path

from flask import Flask, jsonify
from loguru import logger

from AppEngine.flask_interface import app_bp, initialize_app_engine
from AppEngine.utils.config import print_config, settings as engine_settings
from config import settings


def setup_logger(verbose: bool = False, log_file: str = None):
    """Set log configuration: console sink plus a rotating file sink."""
    level = "DEBUG" if verbose else engine_settings.LOG_LEVEL
    log_path = Path(log_file or engine_settings.LOG_FILE)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.remove()  # Remove default processor
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=level
    )
    logger.add(
        str(log_path),
        level=level,
        rotation="10 MB",
        retention=5,
        encoding="utf-8",
        enqueue=True
    )


def create_app() -> Flask:
    """Create the Flask application and register the App Engine blueprint."""
    app = Flask(__name__)
    app.config['SECRET_KEY'] = settings.SECRET_KEY or secrets.token_hex(16)

    if initialize_app_engine():
        app.register_blueprint(app_bp, url_prefix=settings.API_PREFIX)
        logger.info(f"App Engine interface has been registered at {settings.API_PREFIX}")
    else:
        logger.error("App Engine is unavailable, skip interface registration")

    @app.route('/')
    def index():
        return jsonify({
            'success': True,
            'service': 'app-engine',
            'api': settings.API_PREFIX
        })

    return app


def main():
    parser = argparse.ArgumentParser(description="App Engine HTTP server")
    parser.add_argument("--host", default=None, help="Host address, overrides HOST")
    parser.add_argument("--port", type=int, default=None, help="Port number, overrides PORT")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show detailed logs")
    args = parser.parse_args()

    setup_logger(verbose=args.verbose)
    print_config(engine_settings)

    host = args.host or settings.HOST
    port = args.port or settings.PORT
    app = create_app()
    logger.info(f"The Flask server has been started, access address: http://{host}:{port}")

    try:
        app.run(host=host, port=port, debug=settings.DEBUG)
    except KeyboardInterrupt:
        logger.info("\nClose application...")


if __name__ == '__main__':
    main()
