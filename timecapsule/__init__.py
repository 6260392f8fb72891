import os
from pathlib import Path
import logging
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify
import json_log_formatter
from .extensions import db, migrate, login_manager, mail
from .config import Config
from . import models  # noqa: F401  (register tables with SQLAlchemy)
from . import auth  # noqa: F401  (registers the Flask-Login request loader)
from .scheduler import init_scheduler

# Blueprints
from .blueprints.errors import errors_bp
from .blueprints.capsules import capsules_bp


# Optional: Sentry
def _init_sentry(app):
    dsn = app.config.get("SENTRY_DSN")
    if not dsn:
        return
    try:
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration
        from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

        sentry_sdk.init(
            dsn=dsn,
            integrations=[FlaskIntegration(), SqlalchemyIntegration()],
            traces_sample_rate=app.config.get("SENTRY_TRACES_SAMPLE_RATE", 0.0),
            environment=os.getenv("ENV", "development"),
            release=app.config.get("APP_VERSION"),
            send_default_pii=False,
        )
        app.logger.info("Sentry initialized.")
    except Exception as e:
        app.logger.warning(f"Sentry init failed: {e}")

def _init_logging(app):
    # Base level
    level_name = app.config.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    app.logger.setLevel(level)

    # Formatter: text or JSON
    if app.config.get("LOG_JSON", False):
        formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("[%(asctime)s] %(levelname)s in %(module)s: %(message)s")

    # Rotating file handler (5MB x 5); disabled with an empty LOG_DIR
    if app.config.get("LOG_DIR"):
        log_dir = Path(app.config["LOG_DIR"])
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / app.config.get("LOG_FILENAME", "timecapsule.log")
        file_handler = RotatingFileHandler(
            log_path, maxBytes=5_000_000, backupCount=5, encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        app.logger.addHandler(file_handler)

    # Stream to stdout as well (useful on dev/heroku/docker)
    if not app.testing:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(level)
        stream_handler.setFormatter(formatter)
        app.logger.addHandler(stream_handler)

    app.logger.info("Logging initialized.")

def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object or Config)

    app.config.setdefault("SECRET_KEY", "change-me")
    app.config.setdefault("SQLALCHEMY_TRACK_MODIFICATIONS", False)
    Path(app.instance_path).mkdir(parents=True, exist_ok=True)
    Path(app.config.get("UPLOAD_FOLDER") or Path(app.instance_path) / "uploads").mkdir(parents=True, exist_ok=True)

    # Logging must come before everything else so startup errors are captured
    _init_logging(app)
    _init_sentry(app)

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    mail.init_app(app)

    if app.config.get("AUTO_CREATE_DB"):
        with app.app_context():
            db.create_all()

    # Blueprints
    app.register_blueprint(errors_bp)  # error handlers
    app.register_blueprint(capsules_bp, url_prefix="/api/capsules")

    init_scheduler(app)

    @app.get("/health")
    def health():
        resp = jsonify(status="OK", message="Server is running")
        resp.headers["Cache-Control"] = "no-store"
        return resp

    return app
