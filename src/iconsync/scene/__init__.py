"""
Host scene providers.
"""

from .document_loader import (
    JsonSceneProvider,
    StaticSceneProvider,
    parse_node,
    parse_page,
)

__all__ = [
    "JsonSceneProvider",
    "StaticSceneProvider",
    "parse_node",
    "parse_page",
]
