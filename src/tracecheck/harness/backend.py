"""
HTTP client for the fake trace backend.

The backend exposes:
- GET /get-requests: every export request received so far, as a JSON array
- GET /clear-requests: drop everything received so far
- GET /health: readiness probe
"""

import logging

import requests

from ..defaults import (
    CLEAR_REQUESTS_PATH,
    DEFAULT_BACKEND_URL,
    DEFAULT_REQUEST_TIMEOUT,
    GET_REQUESTS_PATH,
    HEALTH_PATH,
)
from ..errors import ResetFailure

logger = logging.getLogger(__name__)


class BackendClient:
    """Read and clear the backend's accumulated export store."""

    def __init__(
        self,
        base_url: str = DEFAULT_BACKEND_URL,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        owns_session: bool | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # A borrowed session is left open by close() unless owns_session is set.
        self._owns_session = session is None if owns_session is None else owns_session
        self.session = session if session is not None else requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def fetch_requests(self) -> bytes:
        """Return the raw cumulative payload. HTTP and transport errors propagate."""
        response = self.session.get(self._url(GET_REQUESTS_PATH), timeout=self.timeout)
        response.raise_for_status()
        return response.content

    def clear_requests(self) -> None:
        """
        Clear the store.

        Raises:
            ResetFailure: the backend answered with a non-success status.
        """
        response = self.session.get(self._url(CLEAR_REQUESTS_PATH), timeout=self.timeout)
        if not response.ok:
            raise ResetFailure(
                f"Backend at {self.base_url} rejected clear request: "
                f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
        logger.debug("Cleared backend store at %s", self.base_url)

    def is_healthy(self) -> bool:
        """True when the health endpoint answers with a success status."""
        try:
            response = self.session.get(self._url(HEALTH_PATH), timeout=self.timeout)
        except requests.RequestException:
            return False
        return response.ok

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __repr__(self) -> str:
        return f"BackendClient({self.base_url!r})"
