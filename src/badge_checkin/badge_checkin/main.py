from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .api.transport import Transport
from .common.logging import setup_logging
from .container import build_container
from .kiosk.controller import register as register_kiosk
from .reader.session import ReaderSession

logger = logging.getLogger(__name__)


def create_app(
    *,
    reader: Optional[ReaderSession] = None,
    transport: Optional[Transport] = None,
    start_scan_loop: bool = False,
) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info(
        "settings=%s service=%s tag=%s reader=%s",
        settings_module,
        getattr(settings, "CHECKIN_BASE_URL"),
        getattr(settings, "CHECKIN_TAG", None),
        type(reader).__name__ if reader is not None else None,
    )

    container = build_container(settings=settings, reader=reader, transport=transport)
    app.extensions["badge_checkin"] = container

    register_kiosk(app, container)

    if start_scan_loop and container.scan_loop is not None:
        container.scan_loop.start()

    return app
