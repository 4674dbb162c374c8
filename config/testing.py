SECRET_KEY = "test-secret"

# Tests inject fake transports; nothing here should reach the network.
CHECKIN_BASE_URL = "http://checkin.invalid"
CHECKIN_AUTH_TOKEN = "0" * 64
CHECKIN_USERNAME = None
CHECKIN_PASSWORD = None

CHECKIN_TAG = "venue-entrance"
READ_TIMEOUT = 1.0
REQUEST_TIMEOUT = 1.0
SEARCH_LIMIT = 10
RESOLVE_BEFORE_SUBMIT = True
REQUIRE_CONFIRMED = True

LOG_LEVEL = "DEBUG"
DEBUG = False
TESTING = True
