"""
RCPanel - HTTP Transport

Transport that talks to a remote rclone instance started with
`rclone rcd`, issuing one HTTP POST per RC call.

Author: RCPanel Project
"""

import logging
import requests
from typing import Optional, Tuple

from rcpanel.api.transport import normalize_params, transport_failure

# Configure logging
logger = logging.getLogger(__name__)

# Fixed per-request timeout in seconds
REQUEST_TIMEOUT = 30


class HTTPTransport:
    """
    Transport for the rclone RC HTTP API.

    Responsibilities:
    - POST {base_url}/{method} with a JSON body
    - Attach HTTP Basic credentials when configured
    - Map connection, timeout and body-read failures to status 500
    """

    def __init__(self, base_url: str, username: Optional[str] = None, password: Optional[str] = None):
        """
        Initialize HTTP transport.

        Args:
            base_url: Base URL of the RC API (e.g., "http://localhost:5572")
            username: Optional Basic auth username
            password: Optional Basic auth password
        """
        self.base_url = base_url.rstrip("/")
        self.username: Optional[str] = None
        self.password: Optional[str] = None
        # Use session for connection pooling; handlers share this transport across threads
        self.session = requests.Session()
        self.with_auth(username, password)
        logger.debug(f"Initialized HTTP transport for {self.base_url}")

    def with_auth(self, username: Optional[str], password: Optional[str]) -> "HTTPTransport":
        """
        Set Basic auth credentials. An empty username disables authentication.

        Returns:
            self, for chaining
        """
        self.username = username or None
        self.password = password or ""
        if self.username:
            self.session.auth = (self.username, self.password)
        else:
            self.session.auth = None
        return self

    def close(self):
        """Close the session and release pooled connections."""
        if self.session:
            self.session.close()
            logger.debug("HTTP transport session closed")

    def call(self, method: str, params: str) -> Tuple[str, int]:
        """
        Make one RC call over HTTP.

        Args:
            method: RC method (e.g., "operations/list")
            params: JSON encoded parameters

        Returns:
            Tuple of (response body, HTTP status code)
        """
        url = f"{self.base_url}/{method}"
        params = normalize_params(params)
        logger.debug(f"RC request: POST {url}")

        try:
            response = self.session.post(
                url,
                data=params.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=REQUEST_TIMEOUT
            )
            # Reading the body can fail too (e.g. connection dropped mid-stream)
            body = response.text
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Cannot connect to rclone at {self.base_url}: {e}")
            return transport_failure(f"Cannot connect to rclone at {self.base_url}: {e}")
        except requests.exceptions.Timeout:
            logger.error(f"RC request {method} timed out after {REQUEST_TIMEOUT}s")
            return transport_failure(f"Request {method} timed out after {REQUEST_TIMEOUT}s")
        except requests.exceptions.RequestException as e:
            logger.error(f"RC request error for {method}: {e}")
            return transport_failure(f"Request error: {e}")

        if response.status_code != 200:
            logger.debug(f"RC {method} returned status {response.status_code}")
        return body, response.status_code
