import os


def env_flag(name: str, default: str) -> bool:
    return bool(int(os.environ.get(name, default)))


def env_float(name: str, default: str) -> float:
    return float(os.environ.get(name, default))


class Config:
    """Settings shared by every environment; modules override what differs."""

    SECRET_KEY = os.environ.get("SECRET_KEY") or "badge-kiosk-secret"

    # Check-in service
    CHECKIN_BASE_URL = os.environ.get("CHECKIN_BASE_URL", "https://checkin.dev.hack.gt")
    CHECKIN_AUTH_TOKEN = os.environ.get("CHECKIN_AUTH_TOKEN")
    CHECKIN_USERNAME = os.environ.get("CHECKIN_USERNAME")
    CHECKIN_PASSWORD = os.environ.get("CHECKIN_PASSWORD")

    # Kiosk behaviour
    CHECKIN_TAG = os.environ.get("CHECKIN_TAG")
    READ_TIMEOUT = env_float("READ_TIMEOUT", "10")
    REQUEST_TIMEOUT = env_float("REQUEST_TIMEOUT", "10")
    SEARCH_LIMIT = int(os.environ.get("SEARCH_LIMIT", "10"))
    RESOLVE_BEFORE_SUBMIT = env_flag("RESOLVE_BEFORE_SUBMIT", "1")
    REQUIRE_CONFIRMED = env_flag("REQUIRE_CONFIRMED", "1")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    DEBUG = env_flag("DEBUG", "0")
