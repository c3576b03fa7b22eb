from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .assessments.controller import register as register_assessments
from .common.http import fail
from .container import Container, build_container
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_passwords, list_tables
from .ledger.controller import register as register_ledger
from .roster.controller import register as register_roster
from .statistics.controller import register as register_statistics
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        return fail(str(error), status_for(error))

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return fail(error.description or error.name, error.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.exception("Unhandled error while serving request")
        if app.config.get("DEBUG"):
            return fail(f"Internal server error: {error}", 500)
        return fail("Internal server error", 500)


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    Tests pass a container wired over in-memory repositories; otherwise one is
    built over MySQL from the active settings module.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            ensure_demo_passwords(db_config)
            logger.info("Demo seed ready")

        container = build_container(db_config=db_config)

    admin_login = getattr(settings, "ADMIN_LOGIN_ID", "")
    admin_password = getattr(settings, "ADMIN_PASSWORD", "")
    if admin_login and admin_password:
        container.auth_service.ensure_admin_user(
            login_id=admin_login,
            password=admin_password,
            full_name=getattr(settings, "ADMIN_NAME", "Administrator"),
        )
    else:
        logger.warning("ADMIN_LOGIN_ID/ADMIN_PASSWORD not set; skipping admin provisioning")

    _register_error_handlers(app)
    register_users(app, container)
    register_roster(app, container)
    register_ledger(app, container)
    register_assessments(app, container)
    register_statistics(app, container)

    app.extensions["academy_container"] = container
    return app
