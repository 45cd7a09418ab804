"""Application factory and app-wide configuration."""

import logging
import sqlite3
from typing import Optional

from flask import Flask
from flask_cors import CORS

from retirement_backend.app.api.routes import api_bp
from retirement_backend.config import Settings, load_settings
from retirement_backend.database import init_db
from retirement_backend.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Build the Flask app instance."""
    settings = settings or load_settings()
    setup_logging(settings.log_level, settings.log_dir)

    app = Flask(__name__)
    app.config["SETTINGS"] = settings

    CORS(
        app,
        resources={r"/api/*": {"origins": settings.cors_origins}},
        supports_credentials=True,
    )

    try:
        init_db(settings.db_path)
    except (sqlite3.Error, OSError) as exc:
        # parameters endpoints fall back to defaults
        logger.warning("could not initialise parameter store %s: %s", settings.db_path, exc)

    app.register_blueprint(api_bp, url_prefix="/api")
    return app
