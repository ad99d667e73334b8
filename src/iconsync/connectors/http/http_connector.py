"""
HTTP connector for JSON APIs.
"""

import json
import logging
import time
from typing import Optional

import requests

from ...core.connector import Connector, ConnectorRequest, ConnectorResponse


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_USER_AGENT = "iconsync/1.0"


class HttpConnector(Connector):
    """
    Generic HTTP connector built on a requests session.

    Every request is attempted exactly once with a bounded timeout.
    Transport failures come back as a ConnectorResponse with status_code 0
    and error_message set (timed_out marks timeouts); callers decide
    whether that is fatal.
    """

    SUPPORTED_METHODS = ("GET", "PUT")

    def __init__(
        self,
        name: str = "http",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the HTTP connector.

        Args:
            name: Connector name
            timeout: Request timeout in seconds
            user_agent: Custom User-Agent header
            session: Optional pre-built session (mainly for tests)
        """
        self.name = name
        self.timeout = timeout
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.session = session or requests.Session()

    def fetch(self, request: ConnectorRequest) -> ConnectorResponse:
        """
        Execute one HTTP request.

        Args:
            request: The request to execute

        Returns:
            ConnectorResponse with the result
        """
        method = request.method.upper()
        if method not in self.SUPPORTED_METHODS:
            raise ValueError(f"Unsupported HTTP method: {request.method}")

        headers = dict(request.headers or {})
        if "User-Agent" not in headers:
            headers["User-Agent"] = self.user_agent

        start_time = time.time()
        try:
            response = self.session.request(
                method,
                request.uri,
                headers=headers,
                params=request.params,
                json=request.json_body,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(f"{method} {request.uri} timed out after {self.timeout}s")
            return ConnectorResponse(
                status_code=0,
                payload={},
                duration_ms=int((time.time() - start_time) * 1000),
                error_message=f"Request timed out after {self.timeout}s: {e}",
                timed_out=True,
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"{method} {request.uri} failed: {e}")
            return ConnectorResponse(
                status_code=0,
                payload={},
                duration_ms=int((time.time() - start_time) * 1000),
                error_message=f"Request failed: {e}",
            )

        duration_ms = int((time.time() - start_time) * 1000)
        logger.debug(f"{method} {request.uri} -> {response.status_code} ({duration_ms}ms)")

        # Try to parse as JSON, fall back to text
        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError):
            payload = {
                "content_type": response.headers.get("Content-Type", "unknown"),
                "text": response.text,
            }
        if not isinstance(payload, dict):
            payload = {"data": payload}

        return ConnectorResponse(
            status_code=response.status_code,
            payload=payload,
            headers=dict(response.headers),
            duration_ms=duration_ms,
        )

    def get_name(self) -> str:
        """Return the connector name."""
        return self.name

    def close(self) -> None:
        """Close the session."""
        if self.session:
            self.session.close()
