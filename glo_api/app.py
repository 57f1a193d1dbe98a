from __future__ import annotations

import json
from typing import Optional

from flask import Flask, jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from glo_results.config import Settings, load_config
from glo_results.db import create_db_engine
from glo_results.errors import StorageError
from glo_results.reports import ReportGenerator
from glo_results.store import ResultStore

from .routes.draws import bp as draws_bp
from .routes.health import bp as health_bp
from .routes.reports import bp as reports_bp


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or load_config()
    app = Flask(__name__)

    store = ResultStore(create_db_engine(settings.database_url))
    store.ensure_schema()
    app.extensions["result_store"] = store
    app.extensions["report_generator"] = ReportGenerator(store, settings.report_path)

    app.register_blueprint(health_bp)
    app.register_blueprint(draws_bp, url_prefix="/draws")
    app.register_blueprint(reports_bp, url_prefix="/reports")

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return jsonify({"error": "invalid parameters", "details": json.loads(exc.json())}), 400

    @app.errorhandler(StorageError)
    def handle_storage_error(exc: StorageError):
        app.logger.exception("Storage error: %s", exc)
        return jsonify({"error": "storage unavailable"}), 503

    @app.errorhandler(Exception)
    def handle_error(exc: Exception):
        if isinstance(exc, HTTPException):
            return jsonify({"error": exc.description}), exc.code
        app.logger.exception("Unhandled error: %s", exc)
        return jsonify({"error": str(exc)}), 500

    return app
