from __future__ import annotations

import importlib
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .common.logging import configure_logging, get_logger
from .config import get_settings_module
from .container import build_container
from .daily.controller import register as register_daily
from .rota.repository import RotaRepository


def create_app(*, repository: Optional[RotaRepository] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["AUTO_REFRESH_SECONDS"] = int(getattr(settings, "AUTO_REFRESH_SECONDS", 60))

    configure_logging(
        log_level=str(getattr(settings, "LOG_LEVEL", "INFO")),
        json_logs=bool(getattr(settings, "JSON_LOGS", False)),
    )
    get_logger(__name__).info(
        "app.starting",
        settings=settings_module,
        dataverse=getattr(settings, "DATAVERSE_URL", "") or None,
        tz=getattr(settings, "LOCAL_TIMEZONE", None),
    )

    container = build_container(settings=settings, repository=repository)
    register_daily(app, container)

    return app
