"""
Custom exceptions for the icon sync pipeline.

Every failure that can end a synchronization run is an IconSyncError
subclass carrying a FailureKind, so callers can branch on the kind
without parsing messages.
"""

from enum import Enum
from typing import Optional


class FailureKind(str, Enum):
    """Kinds of failure a synchronization run can report."""
    INVALID_REPOSITORY_FORMAT = "invalid_repository_format"
    INVALID_TOKEN = "invalid_token"
    EXPORT_FAILURE = "export_failure"
    INVALID_MARKUP_STRUCTURE = "invalid_markup_structure"
    REMOTE_AUTH_FAILURE = "remote_auth_failure"
    REMOTE_PERMISSION_FAILURE = "remote_permission_failure"
    REMOTE_NOT_FOUND = "remote_not_found"
    REMOTE_GENERIC_FAILURE = "remote_generic_failure"
    NETWORK_TIMEOUT = "network_timeout"
    NETWORK_FAILURE = "network_failure"
    CONFIG_ERROR = "config_error"
    UNKNOWN_FAILURE = "unknown_failure"


class IconSyncError(Exception):
    """Base exception for all icon sync errors."""

    kind: FailureKind = FailureKind.UNKNOWN_FAILURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRepositoryFormat(IconSyncError):
    """Repository coordinate is not of the form ``owner/repo``."""
    kind = FailureKind.INVALID_REPOSITORY_FORMAT


class InvalidToken(IconSyncError):
    """
    Access token failed the shape check.

    This is not a validity check; the remote service decides whether
    the token is actually accepted.
    """
    kind = FailureKind.INVALID_TOKEN


class ExportFailure(IconSyncError):
    """
    A single node could not be exported to markup.

    Non-fatal: the locator logs it and skips the node.
    """
    kind = FailureKind.EXPORT_FAILURE

    def __init__(self, message: str, node_id: Optional[str] = None):
        super().__init__(message)
        self.node_id = node_id


class InvalidMarkupStructure(IconSyncError):
    """Exported markup is not wrapped in an ``<svg>...</svg>`` root."""
    kind = FailureKind.INVALID_MARKUP_STRUCTURE

    def __init__(self, message: str, node_id: Optional[str] = None):
        super().__init__(message)
        self.node_id = node_id


class RemoteError(IconSyncError):
    """
    Error response from the remote content store.

    Raised when the write request comes back with a non-success status.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        remote_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.remote_message = remote_message


class RemoteAuthFailure(RemoteError):
    """HTTP 401 from the remote store."""
    kind = FailureKind.REMOTE_AUTH_FAILURE


class RemotePermissionFailure(RemoteError):
    """HTTP 403 from the remote store."""
    kind = FailureKind.REMOTE_PERMISSION_FAILURE


class RemoteNotFound(RemoteError):
    """HTTP 404 from the remote store."""
    kind = FailureKind.REMOTE_NOT_FOUND


class RemoteGenericFailure(RemoteError):
    """Any other non-2xx status, including stale revision rejections."""
    kind = FailureKind.REMOTE_GENERIC_FAILURE


class NetworkTimeout(IconSyncError):
    """A remote call did not complete within the configured timeout."""
    kind = FailureKind.NETWORK_TIMEOUT


class NetworkFailure(IconSyncError):
    """The remote store could not be reached at all."""
    kind = FailureKind.NETWORK_FAILURE


class ConfigError(IconSyncError):
    """
    Error in configuration or input documents.

    Raised when:
    - Configuration file is missing or invalid
    - A scene document cannot be parsed
    """
    kind = FailureKind.CONFIG_ERROR


class UnknownFailure(IconSyncError):
    """Catch-all wrapper carrying the original error text."""
    kind = FailureKind.UNKNOWN_FAILURE
