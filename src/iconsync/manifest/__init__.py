"""
Manifest assembly for extracted icon sets.
"""

from .builder import (
    ManifestBuilder,
    build_manifest,
    commit_message,
    DEFAULT_COMMIT_MESSAGE_TEMPLATE,
)

__all__ = [
    "ManifestBuilder",
    "build_manifest",
    "commit_message",
    "DEFAULT_COMMIT_MESSAGE_TEMPLATE",
]
