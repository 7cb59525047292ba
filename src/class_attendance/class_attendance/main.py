from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, ensure_demo_leaders, list_tables, missing_tables

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .leaders.controller import register as register_leaders
from .members.controller import register as register_members
from .recent.controller import register as register_recent
from .reports.controller import register as register_reports
from .settings.controller import register as register_settings

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory. Pass ``container`` to run against other repositories (tests)."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    admin_code = str(getattr(settings, "ADMIN_CODE", "admin123"))
    save_timeout = float(getattr(settings, "SAVE_TIMEOUT_SECONDS", 30))

    if container is None:
        auto_init_db = bool(getattr(settings, "AUTO_INIT_DB", False))
        auto_seed_db = bool(getattr(settings, "AUTO_SEED_DB", False))
        if auto_init_db:
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            missing = missing_tables(list_tables(db_config))
            if missing:
                logger.warning("Schema applied but tables are missing: %s", ", ".join(missing))
            else:
                logger.info("Schema ready")
        if auto_seed_db:
            ensure_demo_leaders(db_config)

        container = build_container(db_config=db_config, admin_code=admin_code, save_timeout_seconds=save_timeout)

    register_leaders(app, container)
    register_members(app, container)
    register_attendance(app, container)
    register_recent(app, container)
    register_reports(app, container)
    register_settings(app, container)

    return app
