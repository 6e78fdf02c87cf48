from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .activity.controller import register as register_activity
from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .database.connection import DBConfig
from .employees.controller import register as register_employees
from .leave.controller import register as register_leave
from .notifications.controller import register as register_notifications
from .organization.controller import register as register_organization
from .payroll.controller import register as register_payroll
from .recruitment.controller import register as register_recruitment
from .settings.controller import register as register_settings

logger = logging.getLogger(__name__)

CONTROLLERS = (
    register_employees,
    register_attendance,
    register_settings,
    register_payroll,
    register_leave,
    register_organization,
    register_recruitment,
    register_notifications,
    register_activity,
    register_dashboard,
)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["SESSION_DAYS"] = int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS))
    app.permanent_session_lifetime = timedelta(days=app.config["SESSION_DAYS"])

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config)
            ensure_demo_users(db_config)
            logger.info("Demo seed ready")

        container = build_container(db_config=db_config, settings=settings)

    register_error_handlers(app)
    for register in CONTROLLERS:
        register(app, container)
    return app
