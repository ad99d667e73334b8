"""
Connector interface for talking to remote content stores.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ConnectorRequest:
    """
    Request to be sent by a connector.

    Attributes:
        uri: The URI to call
        method: HTTP method (GET, PUT, etc.)
        headers: Optional request headers
        json_body: Optional body, sent as JSON
        params: Optional query parameters
    """
    uri: str
    method: str = "GET"
    headers: Optional[Dict[str, str]] = None
    json_body: Optional[Dict[str, Any]] = None
    params: Optional[Dict[str, Any]] = None


@dataclass
class ConnectorResponse:
    """
    Response from a connector.

    A transport failure is reported as status_code 0 with error_message
    set, never as an exception.

    Attributes:
        status_code: HTTP status code (0 when no response was received)
        payload: Response payload as dict (parsed JSON)
        headers: Response headers
        duration_ms: Time taken for the request in milliseconds
        error_message: Error message if request failed
        timed_out: True if the request hit the timeout
    """
    status_code: int
    payload: Dict[str, Any]
    headers: Optional[Dict[str, str]] = None
    duration_ms: Optional[int] = None
    error_message: Optional[str] = None
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Connector(ABC):
    """
    Abstract base class for all connectors.

    Connectors execute requests against external services and return
    structured responses.
    """

    @abstractmethod
    def fetch(self, request: ConnectorRequest) -> ConnectorResponse:
        """
        Execute a request against the external service.

        Args:
            request: The request to execute

        Returns:
            ConnectorResponse with the result
        """
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Return the connector name/identifier."""
        pass

    def close(self) -> None:
        """Close any open resources. Optional."""
        pass
