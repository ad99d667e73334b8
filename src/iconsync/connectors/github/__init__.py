"""
GitHub contents API publisher.
"""

from .github_publisher import (
    GitHubContentsPublisher,
    parse_repository,
    validate_access_token,
    encode_content,
    DEFAULT_API_URL,
)

__all__ = [
    "GitHubContentsPublisher",
    "parse_repository",
    "validate_access_token",
    "encode_content",
    "DEFAULT_API_URL",
]
