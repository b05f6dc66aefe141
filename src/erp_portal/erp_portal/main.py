from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .common.http import ApiJSONProvider, fail, ok
from .container import build_container
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig
from .activity.controller import register as register_activity
from .attendance.controller import register as register_attendance
from .crm.controller import register as register_crm
from .documents.controller import register as register_documents
from .payroll.controller import register as register_payroll
from .resources.controller import register as register_resources
from .tickets.controller import register as register_tickets
from .todos.controller import register as register_todos

logger = logging.getLogger("erp_portal")

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(*, container=None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)
    app.json = ApiJSONProvider(app)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["DEFAULT_PAGE_SIZE"] = int(getattr(settings, "DEFAULT_PAGE_SIZE", 20))
    app.config["MAX_PAGE_SIZE"] = int(getattr(settings, "MAX_PAGE_SIZE", 100))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="[erp-portal] %(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(
            db_config=db_config,
            shift_policy=getattr(settings, "SHIFT_POLICY", None),
            activity=getattr(settings, "ACTIVITY", None),
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return fail(e.description or e.name, e.code or 500)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        if container.conn.ping():
            return ok(database="connected")
        return fail("Database unreachable", 503)

    register_resources(app, container)
    register_attendance(app, container)
    register_payroll(app, container)
    register_tickets(app, container)
    register_todos(app, container)
    register_documents(app, container)
    register_activity(app, container)
    register_crm(app, container)

    return app
