"""
Connectors package for remote content stores.
"""

from .http import HttpConnector
from .github import GitHubContentsPublisher
from .test_connector import ContentsTestConnector

__all__ = [
    "HttpConnector",
    "GitHubContentsPublisher",
    "ContentsTestConnector",
]
