"""
GitHub repository contents publisher.

Creates or overwrites a single file through the GitHub contents API:

1. GET the path to learn its current blob sha (any failure means "absent")
2. PUT the base64-encoded content, with the sha when one was found

There is exactly one write per publish and no retry. A rejected write
surfaces as a typed RemoteError.
"""

import base64
import logging
from typing import Dict, Optional, Tuple, Union
from urllib.parse import quote

from ...core.connector import Connector, ConnectorRequest, ConnectorResponse
from ...core.exceptions import (
    InvalidRepositoryFormat,
    InvalidToken,
    NetworkFailure,
    NetworkTimeout,
    RemoteAuthFailure,
    RemoteGenericFailure,
    RemoteNotFound,
    RemotePermissionFailure,
)
from ...core.models import PublishResult
from ..http import HttpConnector


logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
GITHUB_ACCEPT = "application/vnd.github.v3+json"
MIN_TOKEN_LENGTH = 20

# Appended to remote error messages to point at the likely misconfiguration
STATUS_HINTS = {
    401: (RemoteAuthFailure, "Check your GitHub token"),
    403: (RemotePermissionFailure, "Check repository permissions"),
    404: (RemoteNotFound, "Repository not found"),
}


def parse_repository(repository: Optional[str]) -> Tuple[str, str]:
    """
    Split an ``owner/repo`` coordinate.

    Args:
        repository: Repository coordinate

    Returns:
        (owner, name) tuple

    Raises:
        InvalidRepositoryFormat: Unless there is exactly one '/' with
            non-empty text on both sides
    """
    parts = (repository or "").strip().split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise InvalidRepositoryFormat(
            "Invalid GitHub repository format. Use owner/repo format."
        )
    return parts[0], parts[1]


def validate_access_token(token: Optional[str]) -> str:
    """
    Coarse shape check of an access token.

    Raises:
        InvalidToken: If the token is empty or shorter than 20 characters
    """
    if not token or len(token) < MIN_TOKEN_LENGTH:
        raise InvalidToken(
            "Invalid GitHub token. Please provide a valid personal access token."
        )
    return token


def encode_content(content: Union[str, bytes]) -> str:
    """Base64-encode text (as UTF-8) or raw bytes for the contents API."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return base64.b64encode(content).decode("ascii")


class GitHubContentsPublisher:
    """
    Idempotent create-or-update of one repository path.

    Example:
        >>> publisher = GitHubContentsPublisher()
        >>> publisher.publish(
        ...     "acme/icons", token, "figma-icons-manifest.json",
        ...     manifest.to_json(), "feat: Update icons manifest - 3 icons",
        ... )
    """

    def __init__(
        self,
        connector: Optional[Connector] = None,
        api_url: str = DEFAULT_API_URL,
        branch: Optional[str] = None,
        timeout: float = 30,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize the publisher.

        Args:
            connector: Connector used for HTTP calls (an HttpConnector by default)
            api_url: API base URL (override for GitHub Enterprise)
            branch: Target branch; the repository default branch if None
            timeout: Per-request timeout in seconds for the default connector
            user_agent: User-Agent for the default connector
        """
        self.connector = connector or HttpConnector(
            name="github", timeout=timeout, user_agent=user_agent
        )
        self.api_url = api_url.rstrip("/")
        self.branch = branch

    def contents_url(self, owner: str, repo: str, path: str) -> str:
        return (
            f"{self.api_url}/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"
            f"/contents/{quote(path.lstrip('/'), safe='/')}"
        )

    def _headers(self, access_token: str) -> Dict[str, str]:
        return {
            "Authorization": f"token {access_token}",
            "Accept": GITHUB_ACCEPT,
        }

    def get_revision(self, url: str, access_token: str) -> Optional[str]:
        """
        Look up the current blob sha of a path.

        Any transport error or non-success status is treated as "the file
        does not exist"; the publish then proceeds as a create.

        Returns:
            The sha, or None
        """
        params = {"ref": self.branch} if self.branch else None
        response = self.connector.fetch(
            ConnectorRequest(
                uri=url,
                method="GET",
                headers=self._headers(access_token),
                params=params,
            )
        )

        if not response.ok:
            if response.status_code == 0:
                logger.error(f"Failed to check file existence: {response.error_message}")
            else:
                logger.debug(f"No existing file at {url} (HTTP {response.status_code})")
            return None

        sha = response.payload.get("sha")
        return sha if isinstance(sha, str) and sha else None

    def publish(
        self,
        repository: str,
        access_token: str,
        path: str,
        content: Union[str, bytes],
        commit_message: str,
    ) -> PublishResult:
        """
        Create or overwrite one file.

        Args:
            repository: ``owner/repo`` coordinate
            access_token: Personal access token
            path: File path inside the repository
            content: New file content
            commit_message: Message of the commit created by the write

        Returns:
            PublishResult describing the write

        Raises:
            InvalidRepositoryFormat, InvalidToken: Before any network call
            NetworkTimeout, NetworkFailure: If the write got no response
            RemoteError subclass: If the write was rejected
        """
        owner, repo = parse_repository(repository)
        validate_access_token(access_token)

        url = self.contents_url(owner, repo, path)
        sha = self.get_revision(url, access_token)
        action = "update" if sha else "create"

        body = {
            "message": commit_message,
            "content": encode_content(content),
        }
        if sha:
            body["sha"] = sha
        if self.branch:
            body["branch"] = self.branch

        logger.info(f"Publishing {path} to {owner}/{repo} ({action})")
        response = self.connector.fetch(
            ConnectorRequest(
                uri=url,
                method="PUT",
                headers=self._headers(access_token),
                json_body=body,
            )
        )

        if not response.ok:
            self._raise_for_write(response, action)

        content_info = response.payload.get("content") or {}
        commit_info = response.payload.get("commit") or {}
        result = PublishResult(
            path=path,
            created=sha is None,
            previous_sha=sha,
            content_sha=content_info.get("sha"),
            commit_sha=commit_info.get("sha"),
            html_url=content_info.get("html_url"),
        )
        logger.info(f"Published {path} (commit {result.commit_sha})")
        return result

    def _raise_for_write(self, response: ConnectorResponse, action: str) -> None:
        """Convert a failed write response into a typed exception."""
        base = f"Failed to {action} file"

        if response.status_code == 0:
            if response.timed_out:
                raise NetworkTimeout(f"{base}: {response.error_message}")
            raise NetworkFailure(f"{base}: {response.error_message}")

        status = response.status_code
        remote_message = response.payload.get("message")
        if not isinstance(remote_message, str) or not remote_message:
            remote_message = None

        message = f"{base}: {remote_message}" if remote_message else f"{base} (HTTP {status})"

        if status in STATUS_HINTS:
            error_class, hint = STATUS_HINTS[status]
            raise error_class(
                f"{message} ({hint})",
                status_code=status,
                remote_message=remote_message,
            )

        if remote_message:
            message = f"{message} (HTTP {status})"
        raise RemoteGenericFailure(message, status_code=status, remote_message=remote_message)

    def close(self) -> None:
        self.connector.close()
