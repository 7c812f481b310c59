"""
Default polling policy and fake-backend endpoints.

The backend accumulates every export request it receives and serves them back
as a JSON array; an empty store is encoded as "[]".
"""

DEFAULT_BACKEND_URL = "http://localhost:8080"

# Seconds.
DEFAULT_POLL_DEADLINE = 30.0
DEFAULT_POLL_INTERVAL = 0.5
DEFAULT_REQUEST_TIMEOUT = 10.0

EMPTY_PAYLOAD = b"[]"
# A payload must be longer than the empty-array encoding before it can be stable.
DEFAULT_MIN_LENGTH = len(EMPTY_PAYLOAD)

GET_REQUESTS_PATH = "/get-requests"
CLEAR_REQUESTS_PATH = "/clear-requests"
HEALTH_PATH = "/health"
