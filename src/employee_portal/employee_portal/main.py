from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .accounts.controller import register as register_accounts
from .auth.controller import register as register_auth
from .container import build_container, build_storage
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DepartmentInUseError,
    DomainError,
    DuplicateEmailError,
    DuplicateIdError,
    DuplicateNameError,
    InvalidTransitionError,
    NotFoundError,
)
from .departments.controller import register as register_departments
from .employees.controller import register as register_employees
from .requests.controller import register as register_requests
from .storage.bootstrap import apply_schema, list_tables
from .storage.repository import KeyValueStorage

logger = logging.getLogger("employee_portal")

_CONFLICTS = (DuplicateEmailError, DuplicateNameError, DuplicateIdError, DepartmentInUseError, InvalidTransitionError)


def _status_for(error: DomainError) -> int:
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, AuthenticationError):
        return 401
    if isinstance(error, AuthorizationError):
        return 403
    if isinstance(error, _CONFLICTS):
        return 409
    return 400


def create_app(*, storage: Optional[KeyValueStorage] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=logging.DEBUG if app.config["DEBUG"] else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    backend = str(getattr(settings, "STORAGE_BACKEND", "file"))
    db_config = getattr(settings, "DB_CONFIG", {})
    logger.info("settings=%s storage=%s", settings_module, backend)

    if storage is None:
        if backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("kv_store schema ready (tables=%d)", len(list_tables(db_config)))
        storage = build_storage(
            backend=backend,
            path=str(getattr(settings, "STORAGE_PATH", "")),
            db_config=db_config,
        )

    container = build_container(
        storage=storage,
        verify_delay=float(getattr(settings, "VERIFY_DELAY_SECONDS", 1.2)),
    )
    app.extensions["employee_portal"] = container

    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        return jsonify({"error": str(error), "kind": type(error).__name__}), _status_for(error)

    register_auth(app, container)
    register_accounts(app, container)
    register_departments(app, container)
    register_employees(app, container)
    register_requests(app, container)

    return app
