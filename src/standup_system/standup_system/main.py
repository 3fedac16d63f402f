from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .container import Container, build_container_from_settings
from .core.exceptions import DomainError
from .common.web import error_response
from .database.bootstrap import apply_schema, list_tables
from .finalize.controller import register as register_finalize
from .ledger.controller import register as register_ledger
from .marking.controller import register as register_marking
from .sessions.controller import register as register_sessions
from .watcher.scheduler import init_scheduler

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    if container is None:
        if getattr(settings, "SESSION_STORE", "mysql") == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            db_config = getattr(settings, "DB_CONFIG")
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container_from_settings(settings)
        logger.info(
            "settings=%s store=%s db=%s",
            settings_module,
            getattr(settings, "SESSION_STORE", "mysql"),
            container.conn.label if container.conn else "-",
        )

        if bool(getattr(settings, "ENABLE_SCHEDULER", False)):
            init_scheduler(
                container.session_service,
                container.watcher,
                timezone=container.timezone,
                watcher_interval_seconds=container.watcher_interval_seconds,
                auto_schedule_daily=bool(getattr(settings, "AUTO_SCHEDULE_DAILY", True)),
            )

    app.extensions["standup_container"] = container
    app.register_error_handler(DomainError, error_response)

    register_sessions(app, container)
    register_marking(app, container)
    register_finalize(app, container)
    register_ledger(app, container)

    return app
