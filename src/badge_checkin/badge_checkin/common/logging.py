from __future__ import annotations

import logging
import logging.config

FORMAT = "%(asctime)s|%(levelname)s|%(name)s|%(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Configure console logging for the kiosk process.

    Package loggers follow ``level``; urllib3 and werkzeug stay at WARNING so
    request chatter does not drown scan outcomes.
    """

    level = (level or "INFO").upper()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "std": {"format": FORMAT, "datefmt": DATEFMT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "stream": "ext://sys.stdout",
                "formatter": "std",
            },
        },
        "loggers": {
            "": {
                "level": "INFO",
                "handlers": ["console"],
            },
            "src.badge_checkin": {
                "level": level,
                "handlers": ["console"],
                "propagate": False,
            },
            "urllib3": {"level": "WARNING"},
            "werkzeug": {"level": "WARNING"},
        },
    })
