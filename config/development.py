import os

from .config import Config, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

CHECKIN_BASE_URL = os.getenv("CHECKIN_BASE_URL", "https://checkin.dev.hack.gt")
CHECKIN_AUTH_TOKEN = Config.CHECKIN_AUTH_TOKEN
CHECKIN_USERNAME = Config.CHECKIN_USERNAME
CHECKIN_PASSWORD = Config.CHECKIN_PASSWORD

CHECKIN_TAG = Config.CHECKIN_TAG
READ_TIMEOUT = Config.READ_TIMEOUT
REQUEST_TIMEOUT = Config.REQUEST_TIMEOUT
SEARCH_LIMIT = Config.SEARCH_LIMIT
RESOLVE_BEFORE_SUBMIT = Config.RESOLVE_BEFORE_SUBMIT
REQUIRE_CONFIRMED = Config.REQUIRE_CONFIRMED

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
DEBUG = env_flag("DEBUG", "1")
