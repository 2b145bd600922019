from __future__ import annotations

import importlib
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .assignments.controller import register as register_assignments
from .audit.controller import register as register_audit
from .auth.controller import register as register_auth
from .container import Container, build_container
from .core.logging import configure_logging
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_admin_login, list_tables
from .holidays.controller import register as register_holidays
from .imports.controller import register as register_imports
from .pending.controller import register as register_pending
from .presets.controller import register as register_presets
from .responsibilities.controller import register as register_responsibilities
from .schedules.controller import register as register_schedules
from .staff.controller import register as register_staff

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def _bootstrap_database(settings, db_config: dict) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        admin_email = os.getenv("ADMIN_EMAIL")
        admin_password = os.getenv("ADMIN_PASSWORD")
        if admin_email and admin_password:
            ensure_admin_login(db_config, email=admin_email, password=admin_password)
        logger.info("Seed data ready")


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Passing a ready `container` skips database bootstrap (used by tests with in-memory repositories).
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.ensure_ascii = False

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
        _bootstrap_database(settings, db_config)
        container = build_container(db_config=db_config, settings=settings)

    app.config["JWT_SECRET"] = container.auth_service.jwt_secret

    app.extensions["shift_planner"] = container

    register_auth(app, container)
    register_staff(app, container)
    register_imports(app, container)
    register_holidays(app, container)
    register_schedules(app, container)
    register_pending(app, container)
    register_presets(app, container)
    register_assignments(app, container)
    register_responsibilities(app, container)
    register_audit(app, container)

    return app
