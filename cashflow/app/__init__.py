"""Application factory and app-wide configuration."""

import logging
from typing import Any, Mapping, Optional

from flask import Flask
from flask_cors import CORS

from cashflow import config
from cashflow.app.api.routes import api_bp


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(test_config: Optional[Mapping[str, Any]] = None) -> Flask:
    """Build the Flask app instance."""
    app = Flask(__name__)
    app.config.from_object(config)
    if test_config is not None:
        app.config.from_mapping(test_config)

    configure_logging(app.config["LOG_LEVEL"])

    CORS(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        supports_credentials=True,
        expose_headers=["Content-Disposition"],
    )

    app.register_blueprint(api_bp, url_prefix="/api")
    app.logger.debug("cashflow app created (max years %s)", app.config["MAX_YEARS"])
    return app
