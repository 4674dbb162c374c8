"""Print the tags known to the check-in instance.

Useful when setting CHECKIN_TAG for a kiosk: pass ``--current`` to list only
the tags active right now.
"""

from __future__ import annotations

import importlib
import sys

from config import get_settings_module

from src.badge_checkin.badge_checkin.container import build_transport
from src.badge_checkin.badge_checkin.api.client import CheckinClient


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    client = CheckinClient(build_transport(settings), timeout=settings.REQUEST_TIMEOUT)

    for name in client.get_tag_names(only_current="--current" in sys.argv[1:]):
        print(name)


if __name__ == "__main__":
    main()
