from __future__ import annotations

import importlib
import logging
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.clock import Clock
from .container import Container, build_container
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    InvalidRange,
    NotFoundError,
    StorageConflictError,
    TransientStorageError,
    ValidationError,
    WorkflowError,
)
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables, seed_demo_users
from .leaves.controller import register as register_leaves
from .notifications.controller import register as register_notifications
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

# most specific first
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (InvalidRange, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (TransientStorageError, 503),
    (StorageConflictError, 409),
    (WorkflowError, 409),
)


def status_for(error: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        status = status_for(error)
        if status >= 500:
            logger.warning("Request failed with %s: %s", error.code, error)
        return jsonify({"code": error.code, "message": str(error)}), status


def _bootstrap(settings: Any, container: Container) -> None:
    auto_init_db = bool(getattr(settings, "AUTO_INIT_DB", False))
    auto_seed_db = bool(getattr(settings, "AUTO_SEED_DB", False))

    if container.memory_db is not None:
        if auto_seed_db:
            seed_demo_users(container.users_repo)
            logger.info("In-memory demo users ready")
        return

    db_config = dict(getattr(settings, "DB_CONFIG"))
    if auto_init_db:
        apply_schema(db_config)
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
    if auto_seed_db:
        ensure_demo_users(db_config)
        apply_seed_sql(db_config)
        logger.info("Demo seed ready")


def create_app(*, settings_module: Optional[str] = None, clock: Optional[Clock] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    container = build_container(settings=settings, clock=clock)
    logger.info("Starting with settings=%s backend=%s", settings_module, container.settings.storage_backend)
    _bootstrap(settings, container)

    app.extensions["container"] = container
    register_error_handlers(app)

    register_users(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_reports(app, container)
    register_notifications(app, container)

    return app
