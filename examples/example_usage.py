"""Example: check a user in from a script, without Flask or a reader.

The kiosk routes are a thin layer; the same orchestrator does the work here.
"""

import importlib
import sys

from config import get_settings_module

from src.badge_checkin.badge_checkin.common.logging import setup_logging
from src.badge_checkin.badge_checkin.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    setup_logging(settings.LOG_LEVEL)
    container = build_container(settings=settings)

    user_id = sys.argv[1] if len(sys.argv) > 1 else "7dd00021-89fd-49f1-9c17-bd0ba7dcf97e"
    result = container.orchestrator.submit(user_id)
    print(result.outcome.value, result.message)


if __name__ == "__main__":
    main()
